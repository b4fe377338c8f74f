from __future__ import annotations

from studypal.errors import StorageUnavailable

from .base import KeyValueStore


class MemoryStore(KeyValueStore):
    """Process-local store. Keeps JSON text so it behaves like the SQL backend.

    Used by tests and whenever no durable namespace is available. Setting
    ``available = False`` simulates a backend outage.
    """

    def __init__(self, initial: dict[str, str] | None = None):
        self._data: dict[str, str] = dict(initial or {})
        self.available = True

    def _check(self):
        if not self.available:
            raise StorageUnavailable('memory store disabled')

    def _read_raw(self, key: str) -> str | None:
        self._check()
        return self._data.get(key)

    def _write_raw(self, key: str, text: str) -> None:
        self._check()
        self._data[key] = text

    def remove(self, key: str) -> None:
        self._check()
        self._data.pop(key, None)

    def clear(self) -> None:
        self._check()
        self._data.clear()

    def keys(self) -> list[str]:
        return list(self._data)

    def raw(self, key: str) -> str | None:
        """Peek at the stored text without decoding (for inspection and tests)."""
        return self._data.get(key)
