"""
Storage port used by every persisted store.

Values are JSON-serializable structures stored as JSON text. ``get`` never
raises: unreadable or unreachable values come back as the caller's default.
Writes raise :class:`StorageUnavailable` so the caller can decide whether to
keep going with its in-memory state.
"""
from __future__ import annotations

import json
import logging
from abc import ABC, abstractmethod
from typing import Any

from studypal.errors import StorageCorrupt, StorageUnavailable

logger = logging.getLogger(__name__)

# Keys owned by the application inside one namespace.
HISTORY_KEY = 'actionHistory'
ROSTER_KEY = 'studentRoster'
TRACKED_TOPICS_KEY = 'trackedTopics'
PROFILE_KEY = 'userProfile'

# Test currently being taken (answer key and start time); not exported.
ACTIVE_TEST_KEY = 'activeTest'

APP_KEYS = (HISTORY_KEY, ROSTER_KEY, TRACKED_TOPICS_KEY, PROFILE_KEY)


class KeyValueStore(ABC):
    """Abstract string-keyed JSON store.

    Subclasses only move raw JSON text around (``_read_raw``/``_write_raw``);
    encoding, decoding and the fail-soft read policy live here.
    """

    @abstractmethod
    def _read_raw(self, key: str) -> str | None:
        """Return the stored text for *key* or None. May raise StorageUnavailable."""
        ...

    @abstractmethod
    def _write_raw(self, key: str, text: str) -> None:
        ...

    @abstractmethod
    def remove(self, key: str) -> None:
        """Delete *key*; missing keys are ignored."""
        ...

    @abstractmethod
    def clear(self) -> None:
        """Remove every key of this store's namespace."""
        ...

    @abstractmethod
    def keys(self) -> list[str]:
        ...

    def get(self, key: str, default: Any = None) -> Any:
        """Read and decode *key*, falling back to *default* on any failure."""
        try:
            text = self._read_raw(key)
        except StorageUnavailable as e:
            logger.warning(f"Storage unavailable reading {key!r}: {e}")
            return default
        if text is None:
            return default
        try:
            return self._decode(key, text)
        except StorageCorrupt as e:
            logger.warning(str(e))
            return default

    def set(self, key: str, value: Any) -> None:
        try:
            text = json.dumps(value, ensure_ascii=False)
        except (TypeError, ValueError) as e:
            raise ValueError(f"Value for {key!r} is not JSON-serializable: {e}") from e
        self._write_raw(key, text)

    @staticmethod
    def _decode(key: str, text: str) -> Any:
        try:
            return json.loads(text)
        except (json.JSONDecodeError, TypeError) as e:
            raise StorageCorrupt(key, str(e)) from e
