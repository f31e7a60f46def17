"""Basic tests for SyncService to ensure core functionality."""
from datetime import datetime
from unittest.mock import MagicMock, Mock

from conftest import make_raw

from toggl2jira.domain.models import ReconcileRequest
from toggl2jira.services.sync_service import SyncService
from toggl2jira.sync.ledger import SyncLedger

RAW = [
    make_raw(1, "2024-01-01T09:00:00Z", 1800, "ABC-123 morning"),
    make_raw(2, "2024-01-01T14:30:00Z", 2700, "ABC-123 afternoon"),
    make_raw(3, "2024-01-01T12:00:00Z", 900, "Lunch"),
]


def _service(ledger_path, raw=RAW, confirm=True):
    toggl_client = Mock()
    toggl_client.get_time_entries.return_value = list(raw)
    jira_client = Mock()
    jira_client.create_worklog.return_value = "10001"
    cli = MagicMock()
    cli.ask_confirmation.return_value = confirm
    service = SyncService(
        toggl_client=toggl_client,
        jira_client=jira_client,
        ledger=SyncLedger(str(ledger_path)),
        cli=cli,
        logger=Mock(),
    )
    return service


def _request(dry_run=False):
    return ReconcileRequest(
        start_date=datetime(2024, 1, 1),
        end_date=datetime(2024, 1, 7),
        dry_run=dry_run,
        interactive=False,
    )


class TestSyncService:
    """Test SyncService functionality."""

    def test_init(self, ledger_path):
        """Test SyncService initialization with mocked dependencies."""
        toggl_client = Mock()
        jira_client = Mock()
        ledger = SyncLedger(str(ledger_path))
        cli = Mock()
        logger = Mock()

        service = SyncService(toggl_client, jira_client, ledger, cli, logger=logger)

        assert service.toggl_client == toggl_client
        assert service.jira_client == jira_client
        assert service.ledger == ledger
        assert service.cli == cli
        assert service.logger == logger
        assert service.metrics_exporter is None

    def test_dry_run_creates_nothing(self, ledger_path):
        service = _service(ledger_path)

        result = service.sync(_request(dry_run=True))

        assert result.dry_run is True
        assert result.total_entries == 3
        assert result.drafts == 1
        assert result.submitted == 0
        assert result.total_seconds == 5400
        service.jira_client.create_worklog.assert_not_called()
        service.cli.ask_confirmation.assert_not_called()
        assert len(service.ledger) == 0

    def test_confirmed_run_submits_and_records(self, ledger_path):
        service = _service(ledger_path)

        result = service.sync(_request())

        assert result.submitted == 1
        assert result.failed == 0
        service.jira_client.create_worklog.assert_called_once()
        assert service.ledger.is_synced("1")
        assert service.ledger.is_synced("2")
        assert not service.ledger.is_synced("3")
        service.cli.show_batch_result.assert_called_once()
        service.logger.log_submission_complete.assert_called_once()

    def test_declined_confirmation_cancels(self, ledger_path):
        service = _service(ledger_path, confirm=False)

        result = service.sync(_request())

        assert result.cancelled is True
        assert result.submitted == 0
        service.jira_client.create_worklog.assert_not_called()

    def test_no_entries_returns_empty_result(self, ledger_path):
        service = _service(ledger_path, raw=[])

        result = service.sync(_request())

        assert result.total_entries == 0
        assert result.drafts == 0
        service.cli.show_info.assert_called_with("No time entries found for the specified period.")

    def test_non_interactive_engine_has_no_assigner(self, ledger_path):
        service = _service(ledger_path)

        assert service.build_engine(_request()).assigner is None
