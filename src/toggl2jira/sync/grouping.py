"""Grouping of parsed time entries into work log units."""

import logging
from datetime import date
from typing import Iterable, Sequence

from toggl2jira.domain.models import (
    NO_DESCRIPTION,
    DescriptionGroup,
    IssueDayGroup,
    IssueGroup,
    TimeEntry,
)

logger = logging.getLogger(__name__)


def _sorted_by_start(entries: Iterable[TimeEntry]) -> tuple[TimeEntry, ...]:
    # sorted() is stable: identical start times keep their relative order
    return tuple(sorted(entries, key=lambda entry: entry.started_at))


def group_by_description(entries: Iterable[TimeEntry]) -> list[DescriptionGroup]:
    """Group entries without an issue key by exact description.

    Empty descriptions share a single "(no description)" group. Groups are
    returned in order of first occurrence.

    Args:
        entries: Parsed time entries

    Returns:
        List of description groups
    """
    grouped: dict[str, list[TimeEntry]] = {}

    for entry in entries:
        if entry.has_issue:
            continue
        key = entry.description or NO_DESCRIPTION
        grouped.setdefault(key, []).append(entry)

    return [
        DescriptionGroup(description=description, entries=tuple(group_entries))
        for description, group_entries in grouped.items()
    ]


def group_by_issue_and_date(entries: Iterable[TimeEntry]) -> list[IssueDayGroup]:
    """Group entries by issue key and UTC calendar date of their start.

    Entries within a group are sorted ascending by start time. Entries
    without an issue key are skipped.

    Args:
        entries: Parsed time entries

    Returns:
        List of (issue, date) groups in order of first occurrence
    """
    grouped: dict[tuple[str, date], list[TimeEntry]] = {}

    for entry in entries:
        if not entry.issue_key:
            logger.debug(f"Skipping entry {entry.id} without issue key")
            continue
        grouped.setdefault((entry.issue_key, entry.utc_date), []).append(entry)

    return [
        IssueDayGroup(issue_key=issue_key, date=day, entries=_sorted_by_start(group_entries))
        for (issue_key, day), group_entries in grouped.items()
    ]


def group_by_issue(entries: Iterable[TimeEntry]) -> list[IssueGroup]:
    """Group entries by issue key only, without a date scope."""
    grouped: dict[str, list[TimeEntry]] = {}

    for entry in entries:
        if not entry.issue_key:
            continue
        grouped.setdefault(entry.issue_key, []).append(entry)

    return [
        IssueGroup(issue_key=issue_key, entries=tuple(group_entries))
        for issue_key, group_entries in grouped.items()
    ]


def regroup_assignment(issue_key: str, entries: Iterable[TimeEntry]) -> list[IssueDayGroup]:
    """Group manually assigned entries under their new issue key.

    A description group spanning several days becomes several day groups.
    """
    return group_by_issue_and_date(entry.with_issue_key(issue_key) for entry in entries)


def merge_issue_groups(
    base: Sequence[IssueDayGroup], extra: Sequence[IssueDayGroup]
) -> list[IssueDayGroup]:
    """Merge two lists of day groups by composite key.

    Groups sharing a key are combined and their entries re-sorted by start
    time. Inputs are left untouched.
    """
    merged: dict[str, IssueDayGroup] = {}

    for group in list(base) + list(extra):
        existing = merged.get(group.key)
        if existing is None:
            merged[group.key] = group
            continue
        merged[group.key] = IssueDayGroup(
            issue_key=group.issue_key,
            date=group.date,
            entries=_sorted_by_start(existing.entries + group.entries),
        )

    return list(merged.values())
