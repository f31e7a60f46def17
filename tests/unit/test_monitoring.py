"""Tests for health checks and the metrics textfile exporter."""

from unittest.mock import Mock

from conftest import make_raw

from toggl2jira.monitoring.health_check import HealthChecker
from toggl2jira.monitoring.metrics_exporter import MetricsExporter
from toggl2jira.services.reconciliation import ReconciliationEngine
from toggl2jira.sync.ledger import SyncLedger


class TestHealthChecker:
    def test_all_healthy(self):
        toggl_client = Mock()
        toggl_client.test_connection.return_value = True
        jira_client = Mock()
        jira_client.test_connection.return_value = True

        status = HealthChecker(toggl_client, jira_client).check_all()

        assert status["overall"]["status"] == "healthy"
        assert status["toggl"]["message"] == "OK"

    def test_failure_is_reported_not_raised(self):
        toggl_client = Mock()
        toggl_client.test_connection.side_effect = RuntimeError("boom")
        jira_client = Mock()
        jira_client.test_connection.return_value = False

        status = HealthChecker(toggl_client, jira_client).check_all()

        assert status["toggl"] == {"status": "unhealthy", "message": "boom"}
        assert status["jira"]["message"] == "Connection test failed"
        assert status["overall"]["status"] == "unhealthy"


class TestMetricsExporter:
    def test_writes_textfile(self, tmp_path, ledger_path):
        engine = ReconciliationEngine(SyncLedger(str(ledger_path)))
        result = engine.reconcile(
            [
                make_raw(1, "2024-01-01T09:00:00Z", 1800, "ABC-123 work"),
                make_raw(2, "2024-01-01T10:00:00Z", 600, "Lunch"),
            ]
        )

        exporter = MetricsExporter(str(tmp_path / "metrics"))
        exporter.export_sync_metrics(result, None, 1500)

        content = exporter.metrics_file.read_text()
        assert "toggl2jira_entries_total 2.0" in content
        assert "toggl2jira_drafts_total 1.0" in content
        assert 'toggl2jira_bucket_seconds{bucket="non_jira"} 600.0' in content
        assert "toggl2jira_sync_success 1.0" in content
        assert 'status="success"' in content
        assert "error=" not in content
