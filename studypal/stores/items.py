"""
Ledger entry types.

Each activity type has its own frozen dataclass carrying the payload shape for
that type; ``HistoryItem.from_dict`` dispatches on the persisted ``type`` label.
The JSON form keeps the camelCase field names and type labels the web client
has always written to storage, so previously saved histories load unchanged.
"""
from __future__ import annotations

import json
import re
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any, ClassVar


class HistoryType(str, Enum):
    STUDY_PLAN = 'Study Plan'
    EXPLANATION = 'Explanation'
    PRACTICE_TEST = 'Practice Test'
    PROGRESS_REPORT = 'Progress Report'


# "Test on: Algebra" -> "Algebra"
TEST_TITLE_RE = re.compile(r'^\s*Test on:\s*(.+?)\s*$', re.IGNORECASE)

GENERAL_TOPIC = 'General'


def parse_timestamp(value: str) -> datetime:
    """Parse an ISO-8601 timestamp; naive values are taken as UTC."""
    dt = datetime.fromisoformat(value.replace('Z', '+00:00'))
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return dt


@dataclass(frozen=True)
class QuestionAnswer:
    question: str
    answer: str

    def to_dict(self) -> dict:
        return {'question': self.question, 'answer': self.answer}

    @classmethod
    def from_value(cls, value: Any) -> QuestionAnswer:
        if isinstance(value, QuestionAnswer):
            return value
        if isinstance(value, dict):
            return cls(
                question=str(value.get('question', '')),
                answer=str(value.get('answer', '')),
            )
        if hasattr(value, 'question') and hasattr(value, 'answer'):
            return cls(question=str(value.question), answer=str(value.answer))
        raise TypeError(f'Expected a question/answer pair, got {type(value).__name__}')


@dataclass(frozen=True, kw_only=True)
class HistoryItem:
    """Common fields of every ledger entry.

    ``id`` and ``timestamp`` stay None until the ledger appends the entry.
    """

    TYPE: ClassVar[HistoryType]

    title: str
    id: str | None = None
    timestamp: str | None = None
    subject: str | None = None
    topic: str | None = None
    student_id: str | None = None
    include_in_analytics: bool = True

    @property
    def type(self) -> HistoryType:
        return self.TYPE

    @property
    def created_at(self) -> datetime | None:
        if not self.timestamp:
            return None
        try:
            return parse_timestamp(self.timestamp)
        except ValueError:
            return None

    def topic_label(self) -> str:
        """Resolve the topic this entry counts towards in analytics.

        Explicit ``topic`` wins, then ``subject``, then the label embedded in
        a ``Test on: <label>`` title, then the ``General`` bucket.
        """
        for candidate in (self.topic, self.subject):
            if candidate and candidate.strip():
                return candidate.strip()
        m = TEST_TITLE_RE.match(self.title or '')
        if m:
            return m.group(1)
        return GENERAL_TOPIC

    def _content_json(self) -> Any:
        return self.content

    def to_dict(self) -> dict:
        data = {
            'id': self.id,
            'type': self.TYPE.value,
            'title': self.title,
            'content': self._content_json(),
            'timestamp': self.timestamp,
        }
        optional = {
            'subject': self.subject,
            'topic': self.topic,
            'studentId': self.student_id,
        }
        data.update({k: v for k, v in optional.items() if v is not None})
        if not self.include_in_analytics:
            data['includeInAnalytics'] = False
        return data

    @staticmethod
    def from_dict(data: dict) -> HistoryItem:
        """Rebuild the right entry subclass from its stored JSON form.

        Raises:
            ValueError: unknown type label or malformed payload.
        """
        if not isinstance(data, dict):
            raise ValueError(f'Entry must be an object, got {type(data).__name__}')
        try:
            kind = HistoryType(data.get('type'))
        except ValueError:
            raise ValueError(f"Unknown history type: {data.get('type')!r}") from None
        cls = ENTRY_CLASSES[kind]
        timestamp = _optional_str(data, 'timestamp')
        if timestamp:
            try:
                parse_timestamp(timestamp)
            except ValueError:
                raise ValueError(f'Unreadable timestamp: {timestamp!r}') from None
        common = dict(
            id=_optional_str(data, 'id'),
            timestamp=timestamp,
            title=str(data.get('title', '')),
            subject=_optional_str(data, 'subject'),
            topic=_optional_str(data, 'topic'),
            student_id=_optional_str(data, 'studentId'),
            include_in_analytics=data.get('includeInAnalytics', True) is not False,
        )
        return cls._from_payload(data, **common)

    @classmethod
    def _from_payload(cls, data: dict, **common) -> HistoryItem:
        content = data.get('content', '')
        if not isinstance(content, str):
            content = json.dumps(content, ensure_ascii=False)
        return cls(content=content, **common)


@dataclass(frozen=True, kw_only=True)
class StudyPlanEntry(HistoryItem):
    TYPE = HistoryType.STUDY_PLAN

    content: str


@dataclass(frozen=True, kw_only=True)
class ExplanationEntry(HistoryItem):
    TYPE = HistoryType.EXPLANATION

    content: str


@dataclass(frozen=True, kw_only=True)
class ProgressReportEntry(HistoryItem):
    TYPE = HistoryType.PROGRESS_REPORT

    content: str


@dataclass(frozen=True, kw_only=True)
class PracticeTestEntry(HistoryItem):
    """A generated test with its answer key.

    Self-taken tests carry ``score`` (correct answers) and ``duration``
    (seconds). Tests assigned to a roster student start with
    ``is_complete=False`` and no score; the graded attempt is appended as a
    separate entry whose ``assignment_id`` points back at the assignment.
    """

    TYPE = HistoryType.PRACTICE_TEST

    content: tuple[QuestionAnswer, ...] = field(default_factory=tuple)
    score: int | None = None
    duration: int | None = None
    is_complete: bool | None = None
    assignment_id: str | None = None
    time_limit: int | None = None

    def __post_init__(self):
        object.__setattr__(
            self, 'content', tuple(QuestionAnswer.from_value(qa) for qa in self.content)
        )

    @property
    def question_count(self) -> int:
        return len(self.content)

    @property
    def percentage(self) -> float | None:
        """Score as a percentage in [0, 100], or None when ungraded."""
        if self.score is None or not self.content:
            return None
        pct = self.score / len(self.content) * 100
        return max(0.0, min(100.0, pct))

    @property
    def is_assignment(self) -> bool:
        return self.is_complete is False and self.assignment_id is None

    def _content_json(self) -> Any:
        return [qa.to_dict() for qa in self.content]

    def to_dict(self) -> dict:
        data = super().to_dict()
        optional = {
            'score': self.score,
            'duration': self.duration,
            'isComplete': self.is_complete,
            'assignmentId': self.assignment_id,
            'timeLimit': self.time_limit,
        }
        data.update({k: v for k, v in optional.items() if v is not None})
        return data

    @classmethod
    def _from_payload(cls, data: dict, **common) -> PracticeTestEntry:
        content = data.get('content') or []
        if not isinstance(content, list):
            raise ValueError('Practice test content must be a list of question/answer pairs')
        return cls(
            content=tuple(QuestionAnswer.from_value(qa) for qa in content),
            score=_optional_int(data.get('score')),
            duration=_optional_int(data.get('duration')),
            is_complete=_optional_bool(data, 'isComplete'),
            assignment_id=_optional_str(data, 'assignmentId'),
            time_limit=_optional_int(data.get('timeLimit')),
            **common,
        )


def _optional_str(data: dict, key: str) -> str | None:
    value = data.get(key)
    if value is not None and not isinstance(value, str):
        raise ValueError(f'{key} must be a string, got {type(value).__name__}')
    return value


def _optional_bool(data: dict, key: str) -> bool | None:
    value = data.get(key)
    if value is not None and not isinstance(value, bool):
        raise ValueError(f'{key} must be true or false, got {value!r}')
    return value


def _optional_int(value: Any) -> int | None:
    if value is None:
        return None
    if isinstance(value, bool):
        raise ValueError(f'Expected a number, got {value!r}')
    return int(value)


ENTRY_CLASSES: dict[HistoryType, type[HistoryItem]] = {
    HistoryType.STUDY_PLAN: StudyPlanEntry,
    HistoryType.EXPLANATION: ExplanationEntry,
    HistoryType.PRACTICE_TEST: PracticeTestEntry,
    HistoryType.PROGRESS_REPORT: ProgressReportEntry,
}
