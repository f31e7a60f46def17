"""Prometheus metrics exporter for monitoring."""

import os
from pathlib import Path
from datetime import datetime
from typing import Optional

from prometheus_client import CollectorRegistry, Gauge, Info, write_to_textfile

from ..domain.models import BatchResult, ReconciliationResult


class MetricsExporter:
    """Export sync metrics to Prometheus textfile format."""

    def __init__(self, metrics_dir: str = "/metrics"):
        self.metrics_dir = Path(metrics_dir)
        self.metrics_dir.mkdir(parents=True, exist_ok=True)
        self.metrics_file = self.metrics_dir / "toggl2jira.prom"

    def export_sync_metrics(
        self,
        result: ReconciliationResult,
        batch: Optional[BatchResult],
        duration_ms: int,
        status: str = "success",
    ) -> None:
        """Export reconciliation and submission metrics."""
        registry = CollectorRegistry()
        totals = result.summary.totals

        Gauge(
            "toggl2jira_sync_duration_seconds",
            "Duration of sync run in seconds",
            registry=registry,
        ).set(duration_ms / 1000.0)

        Gauge(
            "toggl2jira_entries_total",
            "Number of time entries fetched from Toggl",
            registry=registry,
        ).set(result.parsed_count)

        Gauge(
            "toggl2jira_drafts_total",
            "Number of work log drafts built",
            registry=registry,
        ).set(len(result.drafts))

        Gauge(
            "toggl2jira_worklogs_submitted",
            "Number of work logs created in Jira",
            registry=registry,
        ).set(len(batch.successful) if batch else 0)

        Gauge(
            "toggl2jira_worklogs_failed",
            "Number of work logs that failed to be created",
            registry=registry,
        ).set(len(batch.failed) if batch else 0)

        bucket_seconds = Gauge(
            "toggl2jira_bucket_seconds",
            "Tracked seconds per reconciliation bucket",
            ["bucket"],
            registry=registry,
        )
        bucket_seconds.labels(bucket="jira").set(totals.jira_seconds)
        bucket_seconds.labels(bucket="non_jira").set(totals.non_jira_seconds)
        bucket_seconds.labels(bucket="already_synced").set(totals.already_synced_seconds)

        Gauge(
            "toggl2jira_last_sync_timestamp",
            "Timestamp of last sync run",
            registry=registry,
        ).set(datetime.now().timestamp())

        Gauge(
            "toggl2jira_sync_success",
            "Whether last sync was successful (1=success, 0=failure)",
            registry=registry,
        ).set(1 if status == "success" else 0)

        Info("toggl2jira_build_info", "Build information", registry=registry).info(
            {
                "version": os.getenv("APP_VERSION", "1.0.0"),
                "status": status,
            }
        )

        write_to_textfile(str(self.metrics_file), registry)
