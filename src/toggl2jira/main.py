#!/usr/bin/env python3
"""Command line entrypoint for toggl2jira."""

import argparse
import logging
import sys
from datetime import datetime
from typing import Optional, Sequence

from toggl2jira import __version__
from toggl2jira.api.jira_client import JiraClient
from toggl2jira.api.toggl_client import TogglClient
from toggl2jira.cli.progress import ModernCLI
from toggl2jira.config import AppConfig, load_config
from toggl2jira.domain.models import ReconcileRequest
from toggl2jira.errors import Toggl2JiraError
from toggl2jira.monitoring.health_check import HealthChecker
from toggl2jira.monitoring.metrics_exporter import MetricsExporter
from toggl2jira.services.sync_service import SyncService
from toggl2jira.sync.ledger import SyncLedger
from toggl2jira.utils.date_parser import parse_date, parse_date_range, parse_days_back
from toggl2jira.utils.logging import StructuredLogger, setup_console_logging

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="toggl2jira",
        description="Sync time entries from Toggl Track to Jira work logs",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
    # Dry-run for today - shows what would be synced
    toggl2jira sync --dry-run

    # Explicit range
    toggl2jira sync --from 2024-01-01 --to 2024-01-07

    # Whole month, no interactive assignment
    toggl2jira sync --range 2024-01 --no-interactive
        """,
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    subparsers = parser.add_subparsers(dest="command", required=True)

    sync = subparsers.add_parser("sync", help="Sync time entries to Jira")
    today = datetime.now().strftime("%Y-%m-%d")
    sync.add_argument("-f", "--from", dest="from_date", default=today, help="Start date (YYYY-MM-DD)")
    sync.add_argument("-t", "--to", dest="to_date", default=today, help="End date (YYYY-MM-DD)")
    sync.add_argument(
        "-r",
        "--range",
        dest="date_range",
        help="Date range: 'YYYY-MM-DD', 'YYYY-MM' or 'YYYY-MM-DD - YYYY-MM-DD'",
    )
    sync.add_argument("--days", type=int, help="Sync the last N days up to today")
    sync.add_argument(
        "-d",
        "--dry-run",
        action="store_true",
        help="Show what would be synced without creating work logs",
    )
    sync.add_argument(
        "--no-interactive",
        action="store_true",
        help="Do not offer to assign entries without issue keys",
    )

    subparsers.add_parser("config", help="Show current configuration")
    subparsers.add_parser("history:view", help="Show sync history statistics")
    clear = subparsers.add_parser("history:clear", help="Clear sync history")
    clear.add_argument("-y", "--yes", action="store_true", help="Do not ask for confirmation")
    subparsers.add_parser("check", help="Check connectivity to Toggl and Jira")

    return parser


def _resolve_dates(args: argparse.Namespace) -> tuple[datetime, datetime]:
    if args.date_range:
        return parse_date_range(args.date_range)
    if args.days is not None:
        return parse_days_back(args.days)

    start_date = parse_date(args.from_date)
    end_date = parse_date(args.to_date)
    if end_date < start_date:
        raise ValueError(f"End date {args.to_date} is before start date {args.from_date}")
    return start_date, end_date


def _create_clients(config: AppConfig) -> tuple[TogglClient, JiraClient]:
    toggl_client = TogglClient(
        config.toggl.api_token,
        workspace_id=config.toggl.workspace_id,
        project_id=config.toggl.project_id,
    )
    jira_client = JiraClient(config.jira.base_url, config.jira.email, config.jira.api_token)
    return toggl_client, jira_client


def sync_command(args: argparse.Namespace, config: AppConfig, cli: ModernCLI) -> int:
    is_valid, errors = config.validate()
    if not cli.validate_config(errors if not is_valid else []):
        return 1

    try:
        start_date, end_date = _resolve_dates(args)
    except ValueError as e:
        cli.show_error(str(e))
        return 1

    toggl_client, jira_client = _create_clients(config)
    metrics_exporter = MetricsExporter(config.sync.metrics_dir) if config.sync.metrics_dir else None

    service = SyncService(
        toggl_client=toggl_client,
        jira_client=jira_client,
        ledger=SyncLedger(config.sync.history_file),
        cli=cli,
        logger=StructuredLogger(config.sync.log_dir),
        metrics_exporter=metrics_exporter,
    )
    request = ReconcileRequest(
        start_date=start_date,
        end_date=end_date,
        dry_run=args.dry_run,
        interactive=not args.no_interactive,
    )

    result = service.sync(request)
    return 1 if result.failed else 0


def config_command(config: AppConfig, cli: ModernCLI) -> int:
    cli.show_config(config.to_dict())
    return 0


def history_view_command(config: AppConfig, cli: ModernCLI) -> int:
    cli.show_history(SyncLedger(config.sync.history_file).stats())
    return 0


def history_clear_command(args: argparse.Namespace, config: AppConfig, cli: ModernCLI) -> int:
    ledger = SyncLedger(config.sync.history_file)
    if not args.yes and not cli.ask_confirmation(
        f"Clear sync history of {len(ledger)} entries? Entries may be submitted again."
    ):
        cli.show_info("History not cleared.")
        return 0

    error = ledger.clear()
    if error is not None:
        cli.show_error(str(error))
        return 1
    cli.console.print("[green]Sync history cleared.[/green]")
    return 0


def check_command(config: AppConfig, cli: ModernCLI) -> int:
    toggl_client, jira_client = _create_clients(config)
    with cli.progress_spinner("Checking API connectivity..."):
        health = HealthChecker(toggl_client, jira_client).check_all()

    structured_logger = StructuredLogger(config.sync.log_dir)
    for service in ("toggl", "jira"):
        if health[service]["status"] != "healthy":
            structured_logger.log_api_error(service, health[service]["message"])

    return 0 if cli.show_health(health) else 1


def main(argv: Optional[Sequence[str]] = None) -> int:
    """Main entry point."""
    args = build_parser().parse_args(argv)
    config = load_config()
    setup_console_logging(config.sync.log_level)
    cli = ModernCLI()

    try:
        if args.command == "sync":
            cli.show_banner()
            return sync_command(args, config, cli)
        if args.command == "config":
            return config_command(config, cli)
        if args.command == "history:view":
            return history_view_command(config, cli)
        if args.command == "history:clear":
            return history_clear_command(args, config, cli)
        if args.command == "check":
            return check_command(config, cli)
    except Toggl2JiraError as e:
        logger.error(f"{args.command} failed: {e}")
        cli.show_error(str(e))
        return 1

    return 1


if __name__ == "__main__":
    sys.exit(main())
