"""
Analytics over the activity ledger.

``recompute`` folds a ledger snapshot into every derived view in one pass:
topic mastery, overall performance, the seven-day study-time series, daily
activity counts and the score distribution. It is a pure function of its
arguments; ``AnalyticsAggregator`` decides when to call it and caches the
result per ledger version and calendar day.
"""
from __future__ import annotations

import logging
from collections import OrderedDict, defaultdict
from dataclasses import dataclass, field
from datetime import date, datetime, timedelta, timezone
from decimal import ROUND_HALF_UP, Decimal
from typing import Callable, Iterable

from studypal.stores.items import HistoryItem, PracticeTestEntry

logger = logging.getLogger(__name__)

WEEK_DAYS = 7

SCORE_BUCKETS = ('> 90%', '80-90%', '70-80%', '< 70%')


def round_half_up(value: float, places: int = 0) -> float | int:
    """Round like a person would: 2.5 -> 3, 0.125 -> 0.13."""
    exp = Decimal(1).scaleb(-places)
    rounded = Decimal(str(value)).quantize(exp, rounding=ROUND_HALF_UP)
    return int(rounded) if places == 0 else float(rounded)


def display_timezone(offset_hours: float) -> timezone:
    return timezone(timedelta(hours=offset_hours))


def score_bucket(percentage: float) -> str:
    if percentage > 90:
        return '> 90%'
    if percentage >= 80:
        return '80-90%'
    if percentage >= 70:
        return '70-80%'
    return '< 70%'


def scored_percentage(item: HistoryItem) -> float | None:
    """Percentage for an entry that counts towards mastery, else None."""
    if not isinstance(item, PracticeTestEntry) or not item.include_in_analytics:
        return None
    return item.percentage


@dataclass(frozen=True)
class DayBucket:
    day: date
    hours: float
    activities: int

    @property
    def label(self) -> str:
        return self.day.strftime('%a')

    def to_dict(self) -> dict:
        return {
            'date': self.day.isoformat(),
            'day': self.label,
            'hours': self.hours,
            'activities': self.activities,
        }


@dataclass(frozen=True)
class AnalyticsSnapshot:
    topic_mastery: dict[str, int] = field(default_factory=dict)
    overall_performance: int = 0
    weekly: tuple[DayBucket, ...] = ()
    score_distribution: dict[str, int] = field(default_factory=dict)
    tests_taken: int = 0
    total_study_hours: float = 0.0

    @property
    def weekly_hours(self) -> list[float]:
        return [b.hours for b in self.weekly]

    def to_dict(self) -> dict:
        return {
            'topicMastery': dict(self.topic_mastery),
            'overallPerformance': self.overall_performance,
            'weekly': [b.to_dict() for b in self.weekly],
            'scoreDistribution': dict(self.score_distribution),
            'testsTaken': self.tests_taken,
            'totalStudyHours': self.total_study_hours,
        }


def recompute(items: Iterable[HistoryItem], today: date, tz: timezone) -> AnalyticsSnapshot:
    """Build every analytics view from *items* in a single pass.

    Args:
        items: Ledger entries in any order.
        today: Last day of the weekly series, in the display timezone.
        tz: Timezone used to map entry timestamps onto calendar days.
    """
    days = [today - timedelta(days=offset) for offset in range(WEEK_DAYS - 1, -1, -1)]
    seconds_by_day = dict.fromkeys(days, 0)
    activities_by_day = dict.fromkeys(days, 0)

    topic_pcts: dict[str, list[float]] = OrderedDict()
    all_pcts: list[float] = []
    distribution = dict.fromkeys(SCORE_BUCKETS, 0)
    tests_taken = 0
    total_seconds = 0

    for item in items:
        if not item.include_in_analytics:
            continue
        created = item.created_at
        day = created.astimezone(tz).date() if created else None
        if day in activities_by_day:
            activities_by_day[day] += 1

        if not isinstance(item, PracticeTestEntry):
            continue

        if item.duration:
            total_seconds += item.duration
            if day in seconds_by_day:
                seconds_by_day[day] += item.duration

        pct = scored_percentage(item)
        if pct is None:
            continue
        tests_taken += 1
        all_pcts.append(pct)
        topic_pcts.setdefault(item.topic_label(), []).append(pct)
        distribution[score_bucket(pct)] += 1

    mastery = {
        topic: round_half_up(sum(pcts) / len(pcts))
        for topic, pcts in topic_pcts.items()
    }
    overall = round_half_up(sum(all_pcts) / len(all_pcts)) if all_pcts else 0

    weekly = tuple(
        DayBucket(
            day=d,
            hours=round_half_up(seconds_by_day[d] / 3600, 2),
            activities=activities_by_day[d],
        )
        for d in days
    )

    return AnalyticsSnapshot(
        topic_mastery=mastery,
        overall_performance=overall,
        weekly=weekly,
        score_distribution=distribution,
        tests_taken=tests_taken,
        total_study_hours=round_half_up(total_seconds / 3600, 2),
    )


def student_performance(items: Iterable[HistoryItem], student_ids: Iterable[str]) -> dict[str, dict]:
    """Question-weighted average score per roster student.

    Returns:
        Dict keyed by student id with ``percentage`` (None when the student
        has no graded tests) and ``tests`` (number of graded tests).
    """
    correct = defaultdict(int)
    asked = defaultdict(int)
    tests = defaultdict(int)
    for item in items:
        if scored_percentage(item) is None or not item.student_id:
            continue
        correct[item.student_id] += min(item.score, item.question_count)
        asked[item.student_id] += item.question_count
        tests[item.student_id] += 1

    result = {}
    for sid in student_ids:
        pct = round_half_up(max(0, correct[sid]) / asked[sid] * 100) if asked[sid] else None
        result[sid] = {'percentage': pct, 'tests': tests[sid]}
    return result


class AnalyticsAggregator:
    """Caches ``recompute`` output per (ledger version, today).

    Args:
        ledger: The ActivityLedger to read from.
        tz: Display timezone for calendar-day bucketing.
        clock: Returns the current aware datetime; injectable for tests.
    """

    def __init__(self, ledger, tz: timezone, clock: Callable[[], datetime] | None = None):
        self._ledger = ledger
        self._tz = tz
        self._clock = clock or (lambda: datetime.now(timezone.utc))
        self._cache_key = None
        self._snapshot: AnalyticsSnapshot | None = None
        self.recompute_count = 0

    def today(self) -> date:
        return self._clock().astimezone(self._tz).date()

    def snapshot(self) -> AnalyticsSnapshot:
        key = (self._ledger.version, self.today())
        if self._snapshot is None or key != self._cache_key:
            self._snapshot = recompute(self._ledger.list(), key[1], self._tz)
            self._cache_key = key
            self.recompute_count += 1
            logger.debug(f"Recomputed analytics for ledger version {key[0]}")
        return self._snapshot

    @property
    def topic_mastery(self) -> dict[str, int]:
        return self.snapshot().topic_mastery

    @property
    def overall_performance(self) -> int:
        return self.snapshot().overall_performance

    @property
    def weekly(self) -> tuple[DayBucket, ...]:
        return self.snapshot().weekly
