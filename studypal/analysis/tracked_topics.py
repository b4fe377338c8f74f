from __future__ import annotations

from typing import Iterable

from studypal.stores.items import GENERAL_TOPIC, HistoryItem, PracticeTestEntry


def derive_tracked_topics(items: Iterable[HistoryItem]) -> list[str]:
    """Distinct topics of all practice tests, in first-seen order.

    Tests that only resolve to the ``General`` fallback are left out.
    """
    seen = set()
    topics = []
    for item in items:
        if not isinstance(item, PracticeTestEntry):
            continue
        label = item.topic_label()
        if label == GENERAL_TOPIC and not (item.topic or item.subject):
            continue
        if label not in seen:
            seen.add(label)
            topics.append(label)
    return topics


def chart_topics(managed: Iterable[str], derived: Iterable[str]) -> list[str]:
    """Managed topics first, then derived ones not already present (case-insensitive)."""
    result = []
    seen = set()
    for topic in [*managed, *derived]:
        key = topic.lower()
        if key not in seen:
            seen.add(key)
            result.append(topic)
    return result
