from __future__ import annotations

import logging
from dataclasses import dataclass

from studypal.errors import StorageUnavailable
from studypal.storage import TRACKED_TOPICS_KEY, KeyValueStore

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class TrackedTopic:
    topic: str
    subject: str

    def to_dict(self) -> dict:
        return {'topic': self.topic, 'subject': self.subject}


DEFAULT_TOPICS = (
    TrackedTopic('Algebra', 'Mathematics'),
    TrackedTopic('Calculus', 'Mathematics'),
    TrackedTopic('Thermodynamics', 'Physics'),
)


class TrackedTopicStore:
    """Topics the user chose to follow on the analytics page."""

    def __init__(self, store: KeyValueStore):
        self._store = store
        self._topics: list[TrackedTopic] = self._load()

    def _load(self) -> list[TrackedTopic]:
        raw = self._store.get(TRACKED_TOPICS_KEY)
        if raw is None:
            return list(DEFAULT_TOPICS)
        if not isinstance(raw, list):
            logger.warning("Stored tracked topics are not a list; using defaults")
            return list(DEFAULT_TOPICS)
        topics = []
        for data in raw:
            if not isinstance(data, dict) or not str(data.get('topic', '')).strip():
                logger.warning(f"Skipping unreadable tracked topic {data!r}")
                continue
            topics.append(TrackedTopic(str(data['topic']).strip(), str(data.get('subject', '')).strip()))
        return topics

    def _persist(self) -> None:
        try:
            self._store.set(TRACKED_TOPICS_KEY, [t.to_dict() for t in self._topics])
        except StorageUnavailable as e:
            logger.warning(f"Could not save tracked topics: {e}")

    def contains(self, topic: str) -> bool:
        needle = topic.strip().lower()
        return any(t.topic.lower() == needle for t in self._topics)

    def add(self, topic: str, subject: str) -> bool:
        """Track *topic*; a case-insensitive duplicate is ignored (returns False)."""
        topic = topic.strip()
        subject = subject.strip()
        if not topic or self.contains(topic):
            return False
        self._topics.append(TrackedTopic(topic, subject))
        self._persist()
        return True

    def remove(self, topic: str) -> bool:
        remaining = [t for t in self._topics if t.topic != topic]
        if len(remaining) == len(self._topics):
            return False
        self._topics = remaining
        self._persist()
        return True

    def list(self) -> list[TrackedTopic]:
        return list(self._topics)
