"""Reconciliation of Toggl time entries against the sync ledger."""

import logging
from typing import Any, Callable, Iterable, Optional, Protocol, Sequence

from toggl2jira.domain.models import (
    Assignment,
    BatchResult,
    ReconciliationResult,
    SubmissionFailure,
    SubmissionSuccess,
    Summary,
    TimeEntry,
    WorkLogDraft,
)
from toggl2jira.errors import TransportError
from toggl2jira.sync.assignment import IssueAssigner
from toggl2jira.sync.grouping import (
    group_by_description,
    group_by_issue_and_date,
    merge_issue_groups,
    regroup_assignment,
)
from toggl2jira.sync.ledger import SyncLedger
from toggl2jira.sync.parser import parse_time_entries
from toggl2jira.sync.summary import build_summary

logger = logging.getLogger(__name__)


class WorkLogSink(Protocol):
    """Remote side that accepts work log drafts."""

    def create_worklog(self, draft: WorkLogDraft) -> str: ...


def _dedupe(entries: Iterable[TimeEntry]) -> list[TimeEntry]:
    unique: dict[str, TimeEntry] = {}
    for entry in entries:
        if entry.id in unique:
            logger.warning(f"Duplicate time entry {entry.id} in input, keeping first occurrence")
            continue
        unique[entry.id] = entry
    return list(unique.values())


class ReconciliationEngine:
    """Turns raw time entries into work log drafts that were never submitted."""

    def __init__(self, ledger: SyncLedger, assigner: Optional[IssueAssigner] = None) -> None:
        """Initialize engine.

        Args:
            ledger: Sync ledger used for idempotency
            assigner: Interactive issue assigner (no reassignment if None)
        """
        self.ledger = ledger
        self.assigner = assigner

    def reconcile(
        self,
        raw_entries: Iterable[dict[str, Any]],
        dry_run: bool = False,
        on_first_pass: Optional[Callable[[Summary], None]] = None,
    ) -> ReconciliationResult:
        """Run one reconciliation pass.

        Args:
            raw_entries: Time entries as returned by the Toggl client
            dry_run: Skip interactive reassignment
            on_first_pass: Called with the first summary, before reassignment

        Returns:
            ReconciliationResult with final drafts and summaries
        """
        entries = _dedupe(parse_time_entries(raw_entries))

        synced, unsynced = self.ledger.partition(entries)
        issue_bound = [entry for entry in unsynced if entry.has_issue]
        non_issue = [entry for entry in unsynced if not entry.has_issue]

        logger.info(
            f"Reconciling {len(entries)} entries: {len(synced)} already synced, "
            f"{len(issue_bound)} with issue key, {len(non_issue)} without"
        )

        issue_groups = group_by_issue_and_date(issue_bound)
        description_groups = group_by_description(non_issue)
        synced_groups = self.ledger.group_synced_by_issue(synced)

        first_pass = build_summary(issue_groups, description_groups, synced_groups)
        if on_first_pass is not None:
            on_first_pass(first_pass)

        assignments: list[Assignment] = []
        if not dry_run and self.assigner is not None and description_groups:
            outcomes = self.assigner.assign_all(description_groups)
            assignments = [o.assignment for o in outcomes if o.assignment is not None]

        if not assignments:
            return ReconciliationResult(
                drafts=first_pass.jira_work_logs,
                summary=first_pass,
                first_pass_summary=first_pass,
                parsed_count=len(entries),
            )

        assigned_descriptions = set()
        for assignment in assignments:
            issue_groups = merge_issue_groups(
                issue_groups, regroup_assignment(assignment.issue_key, assignment.group.entries)
            )
            assigned_descriptions.add(assignment.group.description)

        remaining = [
            group for group in description_groups if group.description not in assigned_descriptions
        ]
        summary = build_summary(issue_groups, remaining, synced_groups)

        return ReconciliationResult(
            drafts=summary.jira_work_logs,
            summary=summary,
            first_pass_summary=first_pass,
            assignments=tuple(assignments),
            parsed_count=len(entries),
        )

    def submit(self, drafts: Sequence[WorkLogDraft], sink: WorkLogSink) -> BatchResult:
        """Submit drafts one at a time, recording each success in the ledger.

        A failed draft never stops the batch. Only drafts accepted by the
        sink are written to the ledger.

        Args:
            drafts: Work log drafts to submit
            sink: Remote work log sink (e.g., JiraClient)

        Returns:
            BatchResult with successful and failed submissions
        """
        result = BatchResult()

        for draft in drafts:
            try:
                work_log_id = sink.create_worklog(draft)
            except TransportError as e:
                logger.error(
                    f"Failed to create work log for {draft.issue_key} "
                    f"(entries {', '.join(draft.entry_ids)}): {e}"
                )
                result.failed.append(SubmissionFailure(draft=draft, error=str(e)))
                continue

            result.successful.append(SubmissionSuccess(draft=draft, work_log_id=work_log_id))
            error = self.ledger.mark_synced(draft.entries, draft.issue_key, work_log_id)
            if error is not None:
                result.persistence_warnings.append(
                    f"{draft.issue_key} (entries {', '.join(draft.entry_ids)}; "
                    f"work log {work_log_id}): {error}"
                )

        logger.info(
            f"Submitted {len(result.successful)} work logs, {len(result.failed)} failed"
        )
        return result
