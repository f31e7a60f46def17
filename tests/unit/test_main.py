"""Tests for command line parsing and the history commands."""

from datetime import datetime
from unittest.mock import MagicMock, patch

import pytest

from conftest import make_entry

from toggl2jira.config import load_config
from toggl2jira.main import (
    _resolve_dates,
    build_parser,
    history_clear_command,
    history_view_command,
    main,
)
from toggl2jira.sync.ledger import SyncLedger


class TestParser:
    def test_sync_defaults(self):
        args = build_parser().parse_args(["sync"])

        assert args.command == "sync"
        assert args.dry_run is False
        assert args.no_interactive is False
        assert args.from_date == args.to_date

    @pytest.mark.parametrize(
        "argv, expected",
        [
            (
                ["sync", "--from", "2024-01-01", "--to", "2024-01-07"],
                (datetime(2024, 1, 1), datetime(2024, 1, 7)),
            ),
            (["sync", "-r", "2024-02"], (datetime(2024, 2, 1), datetime(2024, 2, 29))),
            (
                ["sync", "--range", "2024-01-05", "--from", "2023-01-01"],
                (datetime(2024, 1, 5), datetime(2024, 1, 5)),
            ),
        ],
    )
    def test_resolve_dates(self, argv, expected):
        assert _resolve_dates(build_parser().parse_args(argv)) == expected

    def test_end_before_start_is_rejected(self):
        args = build_parser().parse_args(["sync", "-f", "2024-01-07", "-t", "2024-01-01"])

        with pytest.raises(ValueError):
            _resolve_dates(args)

    def test_unknown_command_exits(self):
        with pytest.raises(SystemExit):
            build_parser().parse_args(["deploy"])


class TestHistoryCommands:
    def _config(self, ledger_path):
        return load_config({"SYNC_HISTORY_FILE": str(ledger_path)})

    def test_view_shows_stats(self, ledger_path, fixed_clock):
        SyncLedger(str(ledger_path), clock=fixed_clock).mark_synced(
            [make_entry(1, "2024-01-01T09:00:00Z", 1800, "ABC-1 work")], "ABC-1", "10001"
        )
        cli = MagicMock()

        assert history_view_command(self._config(ledger_path), cli) == 0

        stats = cli.show_history.call_args.args[0]
        assert stats.total_entries == 1
        assert stats.issues == ("ABC-1",)

    def test_clear_declined_keeps_history(self, ledger_path, fixed_clock):
        SyncLedger(str(ledger_path), clock=fixed_clock).mark_synced(
            [make_entry(1, "2024-01-01T09:00:00Z")], "ABC-1", "10001"
        )
        cli = MagicMock()
        cli.ask_confirmation.return_value = False
        args = build_parser().parse_args(["history:clear"])

        assert history_clear_command(args, self._config(ledger_path), cli) == 0
        assert len(SyncLedger(str(ledger_path))) == 1

    def test_clear_with_yes(self, ledger_path, fixed_clock):
        SyncLedger(str(ledger_path), clock=fixed_clock).mark_synced(
            [make_entry(1, "2024-01-01T09:00:00Z")], "ABC-1", "10001"
        )
        cli = MagicMock()
        args = build_parser().parse_args(["history:clear", "--yes"])

        assert history_clear_command(args, self._config(ledger_path), cli) == 0
        cli.ask_confirmation.assert_not_called()
        assert len(SyncLedger(str(ledger_path))) == 0


class TestMain:
    @patch("toggl2jira.main.setup_console_logging")
    @patch("toggl2jira.main.ModernCLI")
    @patch("toggl2jira.main.load_config")
    def test_sync_with_invalid_config_fails(self, mock_load_config, mock_cli, _logging):
        mock_load_config.return_value = load_config({})
        mock_cli.return_value.validate_config.return_value = False

        assert main(["sync", "--dry-run"]) == 1
        errors = mock_cli.return_value.validate_config.call_args.args[0]
        assert "TOGGL_API_TOKEN is required" in errors
