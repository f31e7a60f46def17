"""Domain models and value objects for reconciliation."""

from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Any, Dict, List, Optional, Tuple, Union

NO_DESCRIPTION = "(no description)"


@dataclass(frozen=True)
class TimeEntry:
    """One Toggl time entry, normalized at ingestion."""

    id: str
    description: str
    duration_seconds: int
    started_at: datetime
    issue_key: Optional[str] = None

    @property
    def has_issue(self) -> bool:
        return self.issue_key is not None

    @property
    def utc_date(self) -> date:
        """Calendar date of the start time, in UTC."""
        return self.started_at.date()

    def with_issue_key(self, issue_key: str) -> "TimeEntry":
        """Return a copy assigned to a different issue key."""
        return TimeEntry(
            id=self.id,
            description=self.description,
            duration_seconds=self.duration_seconds,
            started_at=self.started_at,
            issue_key=issue_key,
        )


@dataclass(frozen=True)
class SyncRecord:
    """Ledger record of one entry submitted to Jira."""

    entry_id: str
    description: str
    duration_seconds: int
    started_at: datetime
    issue_key: str
    work_log_id: str
    synced_at: datetime

    def to_dict(self) -> Dict[str, Any]:
        return {
            "togglId": self.entry_id,
            "description": self.description,
            "durationSeconds": self.duration_seconds,
            "startedAt": self.started_at.isoformat(),
            "jiraIssueKey": self.issue_key,
            "jiraWorkLogId": self.work_log_id,
            "syncedAt": self.synced_at.isoformat(),
        }

    @classmethod
    def from_dict(cls, entry_id: str, data: Dict[str, Any]) -> "SyncRecord":
        """Build a record from its JSON form.

        Raises:
            KeyError, TypeError, ValueError: If the record is malformed
        """
        return cls(
            entry_id=str(entry_id),
            description=data.get("description") or "",
            duration_seconds=int(data["durationSeconds"]),
            started_at=datetime.fromisoformat(str(data["startedAt"]).replace("Z", "+00:00")),
            issue_key=str(data["jiraIssueKey"]),
            work_log_id=str(data.get("jiraWorkLogId") or ""),
            synced_at=datetime.fromisoformat(str(data["syncedAt"]).replace("Z", "+00:00")),
        )


@dataclass(frozen=True)
class SyncedEntry:
    """Entry found in the ledger, annotated with its stored record."""

    entry: TimeEntry
    record: SyncRecord

    @property
    def id(self) -> str:
        return self.entry.id

    @property
    def description(self) -> str:
        return self.entry.description

    @property
    def duration_seconds(self) -> int:
        return self.entry.duration_seconds


@dataclass(frozen=True)
class DescriptionGroup:
    """Entries without an issue key sharing one description."""

    description: str
    entries: Tuple[TimeEntry, ...] = ()

    @property
    def total_seconds(self) -> int:
        return sum(entry.duration_seconds for entry in self.entries)


@dataclass(frozen=True)
class IssueDayGroup:
    """Entries for one issue on one UTC calendar day, sorted by start time."""

    issue_key: str
    date: date
    entries: Tuple[TimeEntry, ...] = ()

    @property
    def key(self) -> str:
        return f"{self.issue_key}_{self.date.isoformat()}"

    @property
    def total_seconds(self) -> int:
        return sum(entry.duration_seconds for entry in self.entries)


@dataclass(frozen=True)
class IssueGroup:
    """Entries for one issue across all dates (legacy ungrouped form)."""

    issue_key: str
    entries: Tuple[Union[TimeEntry, SyncedEntry], ...] = ()

    @property
    def total_seconds(self) -> int:
        return sum(entry.duration_seconds for entry in self.entries)


@dataclass(frozen=True)
class TimeBreakdown:
    """One line of a date-scoped work log comment."""

    time_range: str
    duration: str
    description: str


@dataclass(frozen=True)
class UngroupedDraft:
    """Work log draft for an issue without a date scope."""

    issue_key: str
    duration_seconds: int
    duration_formatted: str
    started_at: datetime
    comment: str
    entries: Tuple[TimeEntry, ...]

    @property
    def entry_count(self) -> int:
        return len(self.entries)

    @property
    def entry_ids(self) -> List[str]:
        return [entry.id for entry in self.entries]


@dataclass(frozen=True)
class DateScopedDraft:
    """Work log draft for one issue on one day, with a time breakdown."""

    issue_key: str
    date: date
    duration_seconds: int
    duration_formatted: str
    started_at: datetime
    comment: str
    entries: Tuple[TimeEntry, ...]
    breakdown: Tuple[TimeBreakdown, ...]

    @property
    def entry_count(self) -> int:
        return len(self.entries)

    @property
    def entry_ids(self) -> List[str]:
        return [entry.id for entry in self.entries]


WorkLogDraft = Union[UngroupedDraft, DateScopedDraft]


@dataclass(frozen=True)
class SyncedSummaryRow:
    """Already-synced entries for one issue, for display."""

    issue_key: str
    duration_seconds: int
    duration_formatted: str
    description: str
    entry_count: int


@dataclass(frozen=True)
class NonJiraSummaryRow:
    """Entries without an issue key sharing one description, for display."""

    description: str
    duration_seconds: int
    duration_formatted: str
    entry_count: int


@dataclass(frozen=True)
class Totals:
    """Per-bucket and grand totals, in seconds."""

    jira_seconds: int = 0
    non_jira_seconds: int = 0
    already_synced_seconds: int = 0

    @property
    def total_seconds(self) -> int:
        return self.jira_seconds + self.non_jira_seconds + self.already_synced_seconds


@dataclass(frozen=True)
class Summary:
    """Read-only projection of one reconciliation pass."""

    already_synced: Tuple[SyncedSummaryRow, ...]
    jira_work_logs: Tuple[WorkLogDraft, ...]
    non_jira: Tuple[NonJiraSummaryRow, ...]
    totals: Totals


@dataclass(frozen=True)
class Assignment:
    """Description group manually assigned to an issue key."""

    issue_key: str
    group: DescriptionGroup


@dataclass(frozen=True)
class SubmissionSuccess:
    draft: WorkLogDraft
    work_log_id: str


@dataclass(frozen=True)
class SubmissionFailure:
    draft: WorkLogDraft
    error: str


@dataclass
class BatchResult:
    """Outcome of submitting a list of drafts."""

    successful: List[SubmissionSuccess] = field(default_factory=list)
    failed: List[SubmissionFailure] = field(default_factory=list)
    persistence_warnings: List[str] = field(default_factory=list)


@dataclass(frozen=True)
class LedgerStats:
    """Statistics over the whole sync ledger."""

    total_entries: int
    total_seconds: int
    unique_issue_count: int
    issues: Tuple[str, ...]


@dataclass(frozen=True)
class ReconcileRequest:
    """Request object for one reconciliation pass."""

    start_date: datetime
    end_date: datetime
    dry_run: bool = False
    interactive: bool = True


@dataclass(frozen=True)
class ReconciliationResult:
    """Final drafts and summary of one reconciliation pass."""

    drafts: Tuple[WorkLogDraft, ...]
    summary: Summary
    first_pass_summary: Summary
    assignments: Tuple[Assignment, ...] = ()
    parsed_count: int = 0


@dataclass(frozen=True)
class SyncResult:
    """Result object containing sync run statistics."""

    total_entries: int
    drafts: int
    submitted: int
    failed: int
    total_seconds: int
    dry_run: bool = False
    cancelled: bool = False

    @classmethod
    def empty(cls, dry_run: bool = False) -> "SyncResult":
        """Create empty result for no-operation cases."""
        return cls(
            total_entries=0,
            drafts=0,
            submitted=0,
            failed=0,
            total_seconds=0,
            dry_run=dry_run,
        )
