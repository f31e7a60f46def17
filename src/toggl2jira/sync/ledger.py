"""Sync ledger for idempotent submission.

Tracks Toggl entry IDs -> Jira work log IDs so an entry is never
submitted twice across runs. An entry is eligible for submission only
when its ID is absent from the ledger.
"""

import json
import logging
import os
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Callable, Iterable, Optional

from toggl2jira.domain.models import (
    IssueGroup,
    LedgerStats,
    SyncedEntry,
    SyncRecord,
    TimeEntry,
)
from toggl2jira.errors import PersistenceError

logger = logging.getLogger(__name__)

DEFAULT_LEDGER_FILE = ".sync-history.json"


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class SyncLedger:
    """Persisted mapping of Toggl entry IDs to submitted Jira work logs."""

    def __init__(
        self,
        ledger_file: str = DEFAULT_LEDGER_FILE,
        clock: Optional[Callable[[], datetime]] = None,
    ) -> None:
        """Load the ledger.

        A missing or unreadable file yields an empty ledger; this never raises.

        Args:
            ledger_file: Path to JSON file storing the ledger
            clock: Source of 'syncedAt' timestamps (defaults to UTC now)
        """
        self.ledger_file = Path(ledger_file)
        self.clock = clock or _utcnow
        self.records: dict[str, SyncRecord] = {}
        self._load()

    def _load(self) -> None:
        """Load existing records from file."""
        if not self.ledger_file.exists():
            logger.debug(f"No sync history at {self.ledger_file}, starting empty")
            return

        try:
            with open(self.ledger_file, encoding="utf-8") as f:
                data = json.load(f)
        except (json.JSONDecodeError, UnicodeDecodeError, OSError) as e:
            logger.warning(f"Failed to load sync history, starting fresh: {e}")
            return

        synced = data.get("syncedEntries") if isinstance(data, dict) else None
        if not isinstance(synced, dict):
            logger.warning(
                f"Sync history {self.ledger_file} has no 'syncedEntries' object, starting fresh"
            )
            return

        for entry_id, raw in synced.items():
            try:
                self.records[str(entry_id)] = SyncRecord.from_dict(entry_id, raw)
            except (KeyError, TypeError, ValueError, AttributeError) as e:
                logger.warning(f"Skipping malformed sync record {entry_id}: {e}")

        logger.debug(f"Loaded {len(self.records)} synced entries")

    def _save(self) -> Optional[PersistenceError]:
        """Write the whole ledger to file.

        Returns:
            PersistenceError if the write failed, None otherwise
        """
        data = {
            "syncedEntries": {
                entry_id: record.to_dict() for entry_id, record in self.records.items()
            }
        }
        tmp_file = self.ledger_file.with_name(self.ledger_file.name + ".tmp")

        try:
            self.ledger_file.parent.mkdir(parents=True, exist_ok=True)
            with open(tmp_file, "w", encoding="utf-8") as f:
                json.dump(data, f, indent=2)
            os.replace(tmp_file, self.ledger_file)
        except OSError as e:
            if tmp_file.exists():
                tmp_file.unlink(missing_ok=True)
            logger.error(f"Failed to save sync history: {e}")
            return PersistenceError(str(self.ledger_file), str(e))

        logger.debug(f"Saved {len(self.records)} synced entries")
        return None

    def __len__(self) -> int:
        return len(self.records)

    def __contains__(self, entry_id: object) -> bool:
        return str(entry_id) in self.records

    def is_synced(self, entry_id: str) -> bool:
        """Check if an entry was already submitted to Jira."""
        return str(entry_id) in self.records

    def get(self, entry_id: str) -> Optional[SyncRecord]:
        """Get the ledger record for an entry, if any."""
        return self.records.get(str(entry_id))

    def mark_synced(
        self, entries: Iterable[TimeEntry], issue_key: str, work_log_id: str
    ) -> Optional[PersistenceError]:
        """Record entries as submitted under one Jira work log.

        All records written by one call share the same 'syncedAt'. An
        existing record for the same entry is overwritten. If the flush
        fails the in-memory records are kept, so the next successful flush
        still contains them.

        Args:
            entries: Entries covered by the work log
            issue_key: Jira issue key the work log was created on
            work_log_id: Jira work log ID

        Returns:
            PersistenceError if the ledger could not be written, None otherwise
        """
        synced_at = self.clock()

        for entry in entries:
            previous = self.records.get(entry.id)
            if previous is not None and previous.issue_key != issue_key:
                logger.warning(
                    f"Entry {entry.id} re-marked from {previous.issue_key} to {issue_key}"
                )
            self.records[entry.id] = SyncRecord(
                entry_id=entry.id,
                description=entry.description,
                duration_seconds=entry.duration_seconds,
                started_at=entry.started_at,
                issue_key=issue_key,
                work_log_id=str(work_log_id),
                synced_at=synced_at,
            )

        return self._save()

    def partition(
        self, entries: Iterable[TimeEntry]
    ) -> tuple[list[SyncedEntry], list[TimeEntry]]:
        """Split entries into already-synced and unsynced.

        Args:
            entries: Parsed time entries

        Returns:
            Tuple of (synced entries with their records, unsynced entries)
        """
        synced: list[SyncedEntry] = []
        unsynced: list[TimeEntry] = []

        for entry in entries:
            record = self.records.get(entry.id)
            if record is not None:
                synced.append(SyncedEntry(entry=entry, record=record))
            else:
                unsynced.append(entry)

        return synced, unsynced

    def group_synced_by_issue(self, synced: Iterable[SyncedEntry]) -> dict[str, IssueGroup]:
        """Group already-synced entries by the issue key they were submitted under."""
        grouped: dict[str, list[SyncedEntry]] = {}

        for synced_entry in synced:
            grouped.setdefault(synced_entry.record.issue_key, []).append(synced_entry)

        return {
            issue_key: IssueGroup(issue_key=issue_key, entries=tuple(group_entries))
            for issue_key, group_entries in grouped.items()
        }

    def clear(self) -> Optional[PersistenceError]:
        """Remove all records and persist the empty ledger."""
        self.records = {}
        logger.info("Cleared sync history")
        return self._save()

    def stats(self) -> LedgerStats:
        """Get ledger statistics.

        Returns:
            LedgerStats with entry count, total seconds and issue list
        """
        issues: dict[str, Any] = {}
        for record in self.records.values():
            issues.setdefault(record.issue_key, None)

        return LedgerStats(
            total_entries=len(self.records),
            total_seconds=sum(record.duration_seconds for record in self.records.values()),
            unique_issue_count=len(issues),
            issues=tuple(issues),
        )
