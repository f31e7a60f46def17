"""Shared fixtures for toggl2jira tests."""

from datetime import datetime, timezone

import pytest

from toggl2jira.domain.models import TimeEntry
from toggl2jira.sync.parser import extract_issue_key, parse_timestamp


def make_entry(entry_id, started_at, duration=1800, description=None, issue_key=None):
    """Build a parsed TimeEntry; the issue key defaults to the one in the description."""
    description = description if description is not None else ""
    return TimeEntry(
        id=str(entry_id),
        description=description,
        duration_seconds=duration,
        started_at=parse_timestamp(started_at),
        issue_key=issue_key if issue_key is not None else extract_issue_key(description),
    )


def make_raw(entry_id, start, duration=1800, description=""):
    """Build a raw entry as returned by TogglClient.get_time_entries."""
    return {"id": entry_id, "description": description, "duration": duration, "start": start}


@pytest.fixture
def fixed_clock():
    synced_at = datetime(2024, 1, 2, 8, 0, tzinfo=timezone.utc)
    return lambda: synced_at


@pytest.fixture
def ledger_path(tmp_path):
    return tmp_path / ".sync-history.json"
