"""
Activity ledger: the append-only, newest-first log of study actions.

The ledger owns entry ids and timestamps. Every mutation rewrites the full
list under ``actionHistory`` right away; if that write fails the in-memory
ledger stays authoritative for the rest of the request and a warning is
logged.
"""
from __future__ import annotations

import dataclasses
import logging
import secrets
from datetime import datetime, timezone
from typing import Callable

from studypal.errors import NotFound, StorageUnavailable
from studypal.storage import HISTORY_KEY, KeyValueStore

from .items import HistoryItem, HistoryType, PracticeTestEntry

logger = logging.getLogger(__name__)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class ActivityLedger:
    """History of generated plans, explanations, tests and reports.

    Args:
        store: Key/value store the ledger persists to.
        clock: Returns the current aware datetime; injectable for tests.
    """

    def __init__(self, store: KeyValueStore, clock: Callable[[], datetime] | None = None):
        self._store = store
        self._clock = clock or _utcnow
        self._items: list[HistoryItem] = self._load()
        self.version = 0

    def _load(self) -> list[HistoryItem]:
        raw = self._store.get(HISTORY_KEY)
        if raw is None:
            return []
        if not isinstance(raw, list):
            logger.warning(
                f"Stored history is a {type(raw).__name__}, expected a list; starting empty"
            )
            return []

        items = []
        seen = set()
        for i, data in enumerate(raw):
            try:
                item = HistoryItem.from_dict(data)
            except (ValueError, TypeError) as e:
                logger.warning(f"Skipping unreadable history entry #{i}: {e}")
                continue
            if not item.id or item.id in seen:
                logger.warning(f"Skipping history entry #{i} with missing or duplicate id {item.id!r}")
                continue
            seen.add(item.id)
            items.append(item)
        return items

    def _persist(self) -> None:
        try:
            self._store.set(HISTORY_KEY, [item.to_dict() for item in self._items])
        except StorageUnavailable as e:
            logger.warning(f"Could not save history ({len(self._items)} entries): {e}")

    def _new_id(self, now: datetime) -> str:
        existing = {item.id for item in self._items}
        while True:
            candidate = f"{now.strftime('%Y%m%dT%H%M%S%f')}-{secrets.token_hex(4)}"
            if candidate not in existing:
                return candidate

    def _mutated(self) -> None:
        self.version += 1
        self._persist()

    # ------------------------------------------------------------------
    # Public operations
    # ------------------------------------------------------------------

    def append(self, entry: HistoryItem) -> HistoryItem:
        """Stamp *entry* with a fresh id and timestamp and put it first."""
        now = self._clock()
        stored = dataclasses.replace(
            entry,
            id=self._new_id(now),
            timestamp=now.isoformat(),
        )
        self._items.insert(0, stored)
        self._mutated()
        logger.debug(f"Appended {stored.type.value} entry {stored.id}")
        return stored

    def list(self) -> list[HistoryItem]:
        """All entries, newest first."""
        return list(self._items)

    def get(self, item_id: str) -> HistoryItem | None:
        for item in self._items:
            if item.id == item_id:
                return item
        return None

    def require(self, item_id: str) -> HistoryItem:
        """Like ``get`` but raises NotFound for an unknown id."""
        item = self.get(item_id)
        if item is None:
            raise NotFound(item_id)
        return item

    def for_student(self, student_id: str) -> list[HistoryItem]:
        return [item for item in self._items if item.student_id == student_id]

    def of_type(self, kind: HistoryType) -> list[HistoryItem]:
        return [item for item in self._items if item.type is kind]

    def pending_assignments(self, student_id: str | None = None) -> list[PracticeTestEntry]:
        """Assigned tests that have no completed attempt yet."""
        completed = {
            item.assignment_id
            for item in self._items
            if isinstance(item, PracticeTestEntry) and item.assignment_id
        }
        return [
            item
            for item in self._items
            if isinstance(item, PracticeTestEntry)
            and item.is_assignment
            and item.id not in completed
            and (student_id is None or item.student_id == student_id)
        ]

    def completion_of(self, assignment_id: str) -> PracticeTestEntry | None:
        for item in self._items:
            if isinstance(item, PracticeTestEntry) and item.assignment_id == assignment_id:
                return item
        return None

    def clear(self) -> None:
        self._items = []
        self._mutated()
        logger.info("History cleared")

    def __len__(self) -> int:
        return len(self._items)

    def __iter__(self):
        return iter(list(self._items))
