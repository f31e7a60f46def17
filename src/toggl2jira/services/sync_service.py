"""Sync run orchestration: fetch, reconcile, confirm, submit."""

import logging
import time
from typing import Optional

from ..api.jira_client import JiraClient
from ..api.toggl_client import TogglClient
from ..cli.progress import ModernCLI, RichPrompter
from ..domain.models import BatchResult, ReconcileRequest, ReconciliationResult, SyncResult
from ..monitoring.metrics_exporter import MetricsExporter
from ..sync.assignment import IssueAssigner
from ..sync.ledger import SyncLedger
from ..utils.date_parser import format_time_range
from ..utils.logging import StructuredLogger
from .reconciliation import ReconciliationEngine

logger = logging.getLogger(__name__)


class SyncService:
    """Service for syncing Toggl time entries to Jira work logs."""

    def __init__(
        self,
        toggl_client: TogglClient,
        jira_client: JiraClient,
        ledger: SyncLedger,
        cli: ModernCLI,
        logger: Optional[StructuredLogger] = None,
        metrics_exporter: Optional[MetricsExporter] = None,
    ):
        self.toggl_client = toggl_client
        self.jira_client = jira_client
        self.ledger = ledger
        self.cli = cli
        self.logger = logger
        self.metrics_exporter = metrics_exporter

    def build_engine(self, request: ReconcileRequest) -> ReconciliationEngine:
        """Create the reconciliation engine for a request."""
        assigner = None
        if request.interactive and not request.dry_run:
            assigner = IssueAssigner(RichPrompter(self.cli), self.jira_client.validate_issue_key)
        return ReconciliationEngine(self.ledger, assigner)

    def sync(self, request: ReconcileRequest) -> SyncResult:
        """Run one sync for the requested date range.

        Raises:
            TransportError: Time entries could not be fetched from Toggl
        """
        start_time = time.time()
        time_range = {
            "from": request.start_date.strftime("%Y-%m-%d"),
            "to": request.end_date.strftime("%Y-%m-%d"),
        }

        self.cli.start_sync(
            format_time_range(request.start_date, request.end_date), request.dry_run
        )
        if self.logger:
            self.logger.log_reconcile_start(time_range, request.dry_run)

        with self.cli.progress_spinner("Fetching Toggl time entries..."):
            raw_entries = self.toggl_client.get_time_entries(request.start_date, request.end_date)

        if not raw_entries:
            self.cli.show_info("No time entries found for the specified period.")
            return SyncResult.empty(request.dry_run)

        engine = self.build_engine(request)
        result = engine.reconcile(
            raw_entries, dry_run=request.dry_run, on_first_pass=self.cli.show_summary
        )
        if result.assignments:
            self.cli.show_summary(result.summary)

        if self.logger:
            self.logger.log_reconcile_complete(
                time_range, result, int((time.time() - start_time) * 1000)
            )

        if not result.drafts:
            self.cli.show_info("No Jira work logs to create.")
            return self._finish(result, None, start_time, request)

        if request.dry_run:
            self.cli.show_info("Dry run mode - no work logs will be created.")
            return self._finish(result, None, start_time, request)

        if not self.cli.ask_confirmation(f"Create {len(result.drafts)} work log(s) in Jira?"):
            self.cli.show_info("Sync cancelled.")
            return self._finish(result, None, start_time, request, cancelled=True)

        with self.cli.progress_spinner(f"Creating {len(result.drafts)} work logs in Jira..."):
            batch = engine.submit(result.drafts, self.jira_client)

        self.cli.show_batch_result(batch)
        if self.logger:
            self.logger.log_submission_complete(
                batch, status="success" if not batch.failed else "partial"
            )

        return self._finish(result, batch, start_time, request)

    def _finish(
        self,
        result: ReconciliationResult,
        batch: Optional[BatchResult],
        start_time: float,
        request: ReconcileRequest,
        cancelled: bool = False,
    ) -> SyncResult:
        """Export metrics and build the run result."""
        if self.metrics_exporter:
            status = "success" if batch is None or not batch.failed else "partial"
            self.metrics_exporter.export_sync_metrics(
                result, batch, int((time.time() - start_time) * 1000), status
            )

        return SyncResult(
            total_entries=result.parsed_count,
            drafts=len(result.drafts),
            submitted=len(batch.successful) if batch else 0,
            failed=len(batch.failed) if batch else 0,
            total_seconds=result.summary.totals.total_seconds,
            dry_run=request.dry_run,
            cancelled=cancelled,
        )
