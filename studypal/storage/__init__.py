"""Key/value storage port and its backends."""

from .base import (
    KeyValueStore,
    APP_KEYS,
    HISTORY_KEY,
    ROSTER_KEY,
    TRACKED_TOPICS_KEY,
    PROFILE_KEY,
    ACTIVE_TEST_KEY,
)
from .memory import MemoryStore
from .sql import SQLStore

__all__ = [
    'KeyValueStore',
    'MemoryStore',
    'SQLStore',
    'APP_KEYS',
    'HISTORY_KEY',
    'ROSTER_KEY',
    'TRACKED_TOPICS_KEY',
    'PROFILE_KEY',
    'ACTIVE_TEST_KEY',
]
