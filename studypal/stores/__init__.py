from .items import (
    GENERAL_TOPIC,
    ENTRY_CLASSES,
    ExplanationEntry,
    HistoryItem,
    HistoryType,
    PracticeTestEntry,
    ProgressReportEntry,
    QuestionAnswer,
    StudyPlanEntry,
    parse_timestamp,
)
from .ledger import ActivityLedger
from .profile import ProfileStore, account_defaults
from .roster import DEFAULT_STUDENTS, RosterStore, Student, generate_student_id
from .topics import DEFAULT_TOPICS, TrackedTopic, TrackedTopicStore

__all__ = [
    'GENERAL_TOPIC',
    'ENTRY_CLASSES',
    'ExplanationEntry',
    'HistoryItem',
    'HistoryType',
    'PracticeTestEntry',
    'ProgressReportEntry',
    'QuestionAnswer',
    'StudyPlanEntry',
    'parse_timestamp',
    'ActivityLedger',
    'ProfileStore',
    'account_defaults',
    'DEFAULT_STUDENTS',
    'RosterStore',
    'Student',
    'generate_student_id',
    'DEFAULT_TOPICS',
    'TrackedTopic',
    'TrackedTopicStore',
]
