"""Tests for work log drafts and summaries."""

from datetime import date, datetime, timezone

import pytest

from conftest import make_entry

from toggl2jira.domain.models import (
    DateScopedDraft,
    DescriptionGroup,
    IssueDayGroup,
    IssueGroup,
    UngroupedDraft,
)
from toggl2jira.sync.grouping import group_by_description, group_by_issue_and_date
from toggl2jira.sync.summary import (
    build_draft,
    build_summary,
    format_duration,
    format_time_range,
)


class TestFormatDuration:
    @pytest.mark.parametrize(
        "seconds, expected",
        [
            (0, "0m"),
            (60, "1m"),
            (1800, "30m"),
            (3599, "59m"),
            (3600, "1h 0m"),
            (4500, "1h 15m"),
            (5400, "1h 30m"),
            (7260, "2h 1m"),
            (90000, "25h 0m"),
        ],
    )
    def test_format(self, seconds, expected):
        assert format_duration(seconds) == expected


class TestFormatTimeRange:
    def test_simple_range(self):
        start = datetime(2024, 1, 1, 9, 0, tzinfo=timezone.utc)
        assert format_time_range(start, 1800) == "09:00-09:30"

    def test_crosses_hour_boundary(self):
        start = datetime(2024, 1, 1, 10, 45, tzinfo=timezone.utc)
        assert format_time_range(start, 5400) == "10:45-12:15"

    def test_formats_in_utc(self):
        start = datetime.fromisoformat("2024-01-01T11:00:00+02:00")
        assert format_time_range(start, 600) == "09:00-09:10"


class TestBuildDateScopedDraft:
    """Day groups become drafts with a per-entry time breakdown."""

    def test_scenario_two_entries_same_day(self):
        group = group_by_issue_and_date(
            [
                make_entry(2, "2024-01-01T14:30:00Z", 2700, "ABC-123 afternoon"),
                make_entry(1, "2024-01-01T09:00:00Z", 1800, "ABC-123 morning"),
            ]
        )[0]

        draft = build_draft(group)

        assert isinstance(draft, DateScopedDraft)
        assert draft.issue_key == "ABC-123"
        assert draft.date == date(2024, 1, 1)
        assert draft.duration_seconds == 4500
        assert draft.duration_formatted == "1h 15m"
        assert draft.entry_count == 2
        assert draft.entry_ids == ["1", "2"]
        assert draft.started_at == datetime(2024, 1, 1, 9, 0, tzinfo=timezone.utc)
        assert [item.time_range for item in draft.breakdown] == ["09:00-09:30", "14:30-15:15"]
        assert [item.duration for item in draft.breakdown] == ["30m", "45m"]
        assert draft.comment == (
            "Time breakdown for 2 entries:\n"
            "09:00-09:30 (30m): ABC-123 morning\n"
            "14:30-15:15 (45m): ABC-123 afternoon\n"
            "\n"
            "Total: 1h 15m"
        )

    def test_single_entry_wording(self):
        group = IssueDayGroup(
            issue_key="ABC-123",
            date=date(2024, 1, 1),
            entries=(make_entry(1, "2024-01-01T10:00:00Z", 3600, "ABC-123: Feature"),),
        )

        draft = build_draft(group)

        assert "Time breakdown for 1 entry:" in draft.comment
        assert "10:00-11:00 (1h 0m): ABC-123: Feature" in draft.comment
        assert draft.comment.endswith("Total: 1h 0m")

    def test_missing_description_uses_sentinel(self):
        group = IssueDayGroup(
            issue_key="ABC-123",
            date=date(2024, 1, 1),
            entries=(make_entry(1, "2024-01-01T10:00:00Z", 1800, "", issue_key="ABC-123"),),
        )

        draft = build_draft(group)

        assert draft.breakdown[0].description == "(no description)"
        assert "(no description)" in draft.comment


class TestBuildUngroupedDraft:
    """Issue groups without a date join their distinct descriptions."""

    def test_joins_distinct_descriptions_in_order(self):
        group = IssueGroup(
            issue_key="ABC-123",
            entries=(
                make_entry(1, "2024-01-01T10:00:00Z", 1000, "ABC-123: Implementing"),
                make_entry(2, "2024-01-01T11:00:00Z", 500, "ABC-123: Testing"),
                make_entry(3, "2024-01-02T11:00:00Z", 500, "ABC-123: Implementing"),
            ),
        )

        draft = build_draft(group)

        assert isinstance(draft, UngroupedDraft)
        assert draft.comment == "ABC-123: Implementing; ABC-123: Testing"
        assert draft.duration_seconds == 2000
        assert draft.duration_formatted == "33m"
        assert draft.entry_count == 3
        assert not hasattr(draft, "breakdown")


class TestBuildSummary:
    """Bucket totals sum to the grand total; empty buckets are zero."""

    def test_totals_across_buckets(self):
        issue_groups = group_by_issue_and_date(
            [
                make_entry(1, "2024-01-01T10:00:00Z", 3600, "ABC-123 work"),
                make_entry(2, "2024-01-01T14:00:00Z", 1800, "DEF-456 fix"),
            ]
        )
        description_groups = group_by_description(
            [
                make_entry(3, "2024-01-01T09:00:00Z", 900, "Team meeting"),
                make_entry(4, "2024-01-01T15:00:00Z", 600, "Code review"),
                make_entry(5, "2024-01-01T16:00:00Z", 600, "Code review"),
            ]
        )
        synced = {
            "GHI-7": IssueGroup(
                issue_key="GHI-7",
                entries=(make_entry(6, "2024-01-01T08:00:00Z", 1200, "GHI-7 done"),),
            )
        }

        summary = build_summary(issue_groups, description_groups, synced)

        assert len(summary.jira_work_logs) == 2
        assert [row.description for row in summary.non_jira] == ["Team meeting", "Code review"]
        assert summary.non_jira[1].entry_count == 2
        assert summary.already_synced[0].issue_key == "GHI-7"
        assert summary.already_synced[0].duration_formatted == "20m"
        assert summary.totals.jira_seconds == 5400
        assert summary.totals.non_jira_seconds == 2100
        assert summary.totals.already_synced_seconds == 1200
        assert summary.totals.total_seconds == 8700

    def test_empty_buckets_are_zero(self):
        summary = build_summary([], [], {})

        assert summary.jira_work_logs == ()
        assert summary.non_jira == ()
        assert summary.already_synced == ()
        assert summary.totals.jira_seconds == 0
        assert summary.totals.non_jira_seconds == 0
        assert summary.totals.already_synced_seconds == 0
        assert summary.totals.total_seconds == 0

    def test_mixed_day_and_ungrouped_groups(self):
        groups = [
            IssueGroup(
                issue_key="ABC-123",
                entries=(make_entry(1, "2024-01-01T10:00:00Z", 1800, "ABC-123 old"),),
            ),
            IssueDayGroup(
                issue_key="DEF-456",
                date=date(2024, 1, 1),
                entries=(make_entry(2, "2024-01-01T14:00:00Z", 3600, "DEF-456 new"),),
            ),
        ]

        summary = build_summary(groups, [DescriptionGroup(description="x")])

        assert isinstance(summary.jira_work_logs[0], UngroupedDraft)
        assert isinstance(summary.jira_work_logs[1], DateScopedDraft)
        assert summary.totals.jira_seconds == 5400
        assert summary.totals.non_jira_seconds == 0
