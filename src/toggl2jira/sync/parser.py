"""Issue key extraction and Toggl time entry parsing."""

import logging
import re
from datetime import datetime, timezone
from typing import Any, Iterable, Optional

from toggl2jira.domain.models import TimeEntry

logger = logging.getLogger(__name__)

ISSUE_KEY_PATTERN = r"[A-Z][A-Z0-9]+-\d+"

_ISSUE_KEY_IN_TEXT = re.compile(rf"\b({ISSUE_KEY_PATTERN})\b", re.ASCII)
_ISSUE_KEY_EXACT = re.compile(rf"^{ISSUE_KEY_PATTERN}$")


def extract_issue_key(text: Optional[str]) -> Optional[str]:
    """Return the first Jira issue key found in free text.

    Matching is case-sensitive, so "abc-123" is never an issue key.

    Args:
        text: Free text, typically a time entry description

    Returns:
        Issue key (e.g., 'ABC-123') or None
    """
    if not text:
        return None

    match = _ISSUE_KEY_IN_TEXT.search(text)
    return match.group(1) if match else None


def normalize_issue_key(text: str) -> str:
    """Normalize a user-supplied issue key before validation."""
    return text.strip().upper()


def is_valid_issue_key(issue_key: str) -> bool:
    """Check that a whole string is a well-formed issue key."""
    return bool(_ISSUE_KEY_EXACT.match(issue_key))


def parse_timestamp(value: Any) -> datetime:
    """Parse an ISO-8601 timestamp into an aware UTC datetime.

    Naive timestamps are taken as UTC.

    Args:
        value: ISO string (trailing 'Z' accepted) or datetime

    Returns:
        Timezone-aware datetime in UTC
    """
    if isinstance(value, datetime):
        parsed = value
    else:
        parsed = datetime.fromisoformat(str(value).strip().replace("Z", "+00:00"))

    if parsed.tzinfo is None:
        return parsed.replace(tzinfo=timezone.utc)
    return parsed.astimezone(timezone.utc)


def parse_time_entry(raw: dict[str, Any]) -> TimeEntry:
    """Normalize a raw Toggl time entry.

    Toggl reports a running timer with a negative duration; it is clamped
    to zero here, once, at ingestion.

    Args:
        raw: Time entry with 'id', 'description', 'duration' and 'start'

    Returns:
        Parsed TimeEntry
    """
    description = raw.get("description") or ""
    duration = int(raw.get("duration") or 0)

    return TimeEntry(
        id=str(raw["id"]),
        description=description,
        duration_seconds=duration if duration > 0 else 0,
        started_at=parse_timestamp(raw["start"]),
        issue_key=extract_issue_key(description),
    )


def parse_time_entries(raws: Iterable[dict[str, Any]]) -> list[TimeEntry]:
    """Parse a batch of raw Toggl time entries."""
    entries = [parse_time_entry(raw) for raw in raws]
    logger.debug(f"Parsed {len(entries)} time entries")
    return entries
