"""Work log drafts and reconciliation summaries."""

from datetime import datetime, timedelta, timezone
from typing import Iterable, Mapping, Optional, Sequence, Union

from toggl2jira.domain.models import (
    NO_DESCRIPTION,
    DateScopedDraft,
    DescriptionGroup,
    IssueDayGroup,
    IssueGroup,
    NonJiraSummaryRow,
    Summary,
    SyncedSummaryRow,
    TimeBreakdown,
    TimeEntry,
    Totals,
    UngroupedDraft,
    WorkLogDraft,
)


def format_duration(seconds: int) -> str:
    """Format seconds into Jira-style duration (e.g., 1h 15m, 45m)."""
    seconds = max(int(seconds), 0)
    hours, remainder = divmod(seconds, 3600)
    minutes = remainder // 60

    if hours > 0:
        return f"{hours}h {minutes}m"
    return f"{minutes}m"


def format_time_range(started_at: datetime, duration_seconds: int) -> str:
    """Format start and end of an entry as 'HH:MM-HH:MM' in UTC."""
    start = started_at.astimezone(timezone.utc)
    end = start + timedelta(seconds=duration_seconds)
    return f"{start:%H:%M}-{end:%H:%M}"


def join_descriptions(descriptions: Iterable[str]) -> str:
    """Join distinct descriptions with '; ', keeping first-occurrence order."""
    return "; ".join(dict.fromkeys(descriptions))


def _earliest_start(entries: Sequence[TimeEntry]) -> Optional[datetime]:
    if not entries:
        return None
    return min(entry.started_at for entry in entries)


def _breakdown_comment(breakdown: Sequence[TimeBreakdown], total_seconds: int) -> str:
    noun = "entry" if len(breakdown) == 1 else "entries"
    lines = [f"Time breakdown for {len(breakdown)} {noun}:"]
    lines.extend(f"{item.time_range} ({item.duration}): {item.description}" for item in breakdown)
    lines.append("")
    lines.append(f"Total: {format_duration(total_seconds)}")
    return "\n".join(lines)


def build_draft(group: Union[IssueDayGroup, IssueGroup]) -> WorkLogDraft:
    """Build a work log draft from an issue group.

    Day groups get a per-entry time breakdown comment; ungrouped issue
    groups get their distinct descriptions joined with '; '.

    Args:
        group: IssueDayGroup or IssueGroup

    Returns:
        DateScopedDraft or UngroupedDraft
    """
    entries = tuple(group.entries)
    total_seconds = group.total_seconds

    if isinstance(group, IssueDayGroup):
        breakdown = tuple(
            TimeBreakdown(
                time_range=format_time_range(entry.started_at, entry.duration_seconds),
                duration=format_duration(entry.duration_seconds),
                description=entry.description or NO_DESCRIPTION,
            )
            for entry in entries
        )
        return DateScopedDraft(
            issue_key=group.issue_key,
            date=group.date,
            duration_seconds=total_seconds,
            duration_formatted=format_duration(total_seconds),
            started_at=_earliest_start(entries),
            comment=_breakdown_comment(breakdown, total_seconds),
            entries=entries,
            breakdown=breakdown,
        )

    return UngroupedDraft(
        issue_key=group.issue_key,
        duration_seconds=total_seconds,
        duration_formatted=format_duration(total_seconds),
        started_at=_earliest_start(entries),
        comment=join_descriptions(entry.description for entry in entries),
        entries=entries,
    )


def build_summary(
    issue_groups: Sequence[Union[IssueDayGroup, IssueGroup]],
    description_groups: Sequence[DescriptionGroup],
    synced_groups: Optional[Mapping[str, IssueGroup]] = None,
) -> Summary:
    """Build the summary of one reconciliation pass.

    Args:
        issue_groups: Issue-bound groups to become work log drafts
        description_groups: Entries without an issue key, by description
        synced_groups: Already-synced entries grouped by issue key

    Returns:
        Summary with three buckets and totals
    """
    synced_groups = synced_groups or {}

    drafts = tuple(build_draft(group) for group in issue_groups)

    non_jira = tuple(
        NonJiraSummaryRow(
            description=group.description,
            duration_seconds=group.total_seconds,
            duration_formatted=format_duration(group.total_seconds),
            entry_count=len(group.entries),
        )
        for group in description_groups
    )

    already_synced = tuple(
        SyncedSummaryRow(
            issue_key=issue_key,
            duration_seconds=group.total_seconds,
            duration_formatted=format_duration(group.total_seconds),
            description=join_descriptions(entry.description for entry in group.entries),
            entry_count=len(group.entries),
        )
        for issue_key, group in synced_groups.items()
    )

    totals = Totals(
        jira_seconds=sum(draft.duration_seconds for draft in drafts),
        non_jira_seconds=sum(row.duration_seconds for row in non_jira),
        already_synced_seconds=sum(row.duration_seconds for row in already_synced),
    )

    return Summary(
        already_synced=already_synced,
        jira_work_logs=drafts,
        non_jira=non_jira,
        totals=totals,
    )
