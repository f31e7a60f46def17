"""Structured logging setup for machine-readable logs."""

import json
import logging
from datetime import datetime
from pathlib import Path
from typing import Any, Dict

import structlog

from ..domain.models import BatchResult, ReconciliationResult


class StructuredLogger:
    """Handles structured JSON logging for sync runs."""

    def __init__(self, log_dir: str = "./logs"):
        self.log_dir = Path(log_dir)
        self.log_file = self.log_dir / "sync.jsonl"

        # Ensure log directory exists
        self.log_dir.mkdir(parents=True, exist_ok=True)

        structlog.configure(
            processors=[
                structlog.stdlib.filter_by_level,
                structlog.stdlib.add_logger_name,
                structlog.stdlib.add_log_level,
                structlog.stdlib.PositionalArgumentsFormatter(),
                structlog.processors.TimeStamper(fmt="ISO"),
                structlog.processors.StackInfoRenderer(),
                structlog.processors.format_exc_info,
                structlog.processors.UnicodeDecoder(),
                structlog.processors.JSONRenderer(),
            ],
            context_class=dict,
            logger_factory=structlog.stdlib.LoggerFactory(),
            wrapper_class=structlog.stdlib.BoundLogger,
            cache_logger_on_first_use=True,
        )

        self.logger = structlog.get_logger()

    def log_reconcile_start(self, time_range: Dict[str, str], dry_run: bool = False) -> None:
        """Log reconciliation start."""
        self.logger.info(
            "reconcile_started",
            operation="reconcile",
            time_range=time_range,
            dry_run=dry_run,
            timestamp=datetime.now().isoformat(),
        )

    def log_reconcile_complete(
        self,
        time_range: Dict[str, str],
        result: ReconciliationResult,
        duration_ms: int,
    ) -> None:
        """Log reconciliation result with bucket totals."""
        totals = result.summary.totals
        log_entry = {
            "operation": "reconcile",
            "duration_ms": duration_ms,
            "time_range": time_range,
            "results": {
                "entries": result.parsed_count,
                "drafts": len(result.drafts),
                "assignments": len(result.assignments),
                "jira_seconds": totals.jira_seconds,
                "non_jira_seconds": totals.non_jira_seconds,
                "already_synced_seconds": totals.already_synced_seconds,
                "total_seconds": totals.total_seconds,
            },
            "timestamp": datetime.now().isoformat(),
        }

        self.logger.info("reconcile_completed", **log_entry)
        self._write_to_file(log_entry)

    def log_submission_complete(
        self,
        batch: BatchResult,
        status: str = "success",
    ) -> None:
        """Log submission outcome, one line per failed work log."""
        log_entry: Dict[str, Any] = {
            "operation": "submit",
            "status": status,
            "successful": [
                {
                    "issue_key": s.draft.issue_key,
                    "work_log_id": s.work_log_id,
                    "entry_ids": s.draft.entry_ids,
                }
                for s in batch.successful
            ],
            "failed": [
                {"issue_key": f.draft.issue_key, "entry_ids": f.draft.entry_ids, "error": f.error}
                for f in batch.failed
            ],
            "persistence_warnings": batch.persistence_warnings,
            "timestamp": datetime.now().isoformat(),
        }

        self.logger.info("submission_completed", **log_entry)
        self._write_to_file(log_entry)

    def log_api_error(self, service: str, error: str) -> None:
        """Log API connectivity errors."""
        self.logger.error(
            "api_error",
            operation="connectivity_check",
            service=service,
            error=error,
            timestamp=datetime.now().isoformat(),
        )

    def _write_to_file(self, log_entry: Dict[str, Any]) -> None:
        """Write log entry to JSONL file."""
        try:
            with open(self.log_file, "a", encoding="utf-8") as f:
                f.write(json.dumps(log_entry, ensure_ascii=False) + "\n")
        except Exception as e:
            # Don't fail sync operation due to logging issues
            logging.getLogger(__name__).warning(f"Failed to write to log file: {e}")


def setup_console_logging(level: str) -> None:
    """Setup basic console logging."""
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        handlers=[logging.StreamHandler()],
    )
