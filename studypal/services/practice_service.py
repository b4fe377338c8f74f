"""
Practice tests: subject suggestions, the test in progress, grading and
recording attempts and assignments in the ledger.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import datetime

from studypal.analysis import schemas
from studypal.errors import ExternalServiceFailure, StorageUnavailable
from studypal.storage import ACTIVE_TEST_KEY
from studypal.stores import PracticeTestEntry, QuestionAnswer, Student, parse_timestamp

logger = logging.getLogger(__name__)

# Subject -> suggested topic, per class level.
SUBJECT_SUGGESTIONS = {
    '6th Grade': {
        'Mathematics': 'Fractions', 'Science': 'Ecosystems', 'English': 'Grammar',
        'History': 'Ancient Civilizations', 'Geography': 'Map Skills',
    },
    '7th Grade': {
        'Mathematics': 'Algebraic Expressions', 'Science': 'Cell Biology',
        'English': 'Sentence Structure', 'History': 'The Middle Ages',
        'Geography': 'World Climates',
    },
    '8th Grade': {
        'Mathematics': 'Linear Equations', 'Physics': 'Newtons Laws',
        'Chemistry': 'The Periodic Table', 'Biology': 'Human Anatomy',
        'English': 'Essay Writing', 'History': 'The Renaissance',
        'Geography': 'Tectonic Plates',
    },
    '9th Grade': {
        'Mathematics': 'Quadratic Equations', 'Physics': 'Kinematics',
        'Chemistry': 'Chemical Reactions', 'Biology': 'Genetics',
        'English': 'Literary Devices', 'History': 'Industrial Revolution',
        'Economics': 'Supply and Demand',
    },
    '10th Grade': {
        'Mathematics': 'Trigonometry', 'Physics': 'Optics', 'Chemistry': 'Stoichiometry',
        'Biology': 'Evolution', 'English': 'Shakespeare', 'History': 'World War I',
        'Computer Science': 'Basic Programming',
    },
    '11th Grade': {
        'Physics': 'Electromagnetism', 'Chemistry': 'Organic Chemistry',
        'Mathematics': 'Calculus', 'Biology': 'Biotechnology',
        'Computer Science': 'Data Structures', 'English': 'Modern Literature',
        'Accountancy': 'Journal Entries', 'Business Studies': 'Principles of Management',
        'Economics': 'Macroeconomics',
    },
    '12th Grade': {
        'Physics': 'Modern Physics', 'Chemistry': 'Polymers',
        'Mathematics': 'Differential Equations', 'Biology': 'Ecology',
        'Computer Science': 'Algorithms', 'English': 'Critical Analysis',
        'Accountancy': 'Financial Statements', 'Business Studies': 'Marketing',
        'Economics': 'International Trade',
    },
    'Undergraduate': {
        'Computer Science': 'Data Structures',
        'Engineering: Computer Engg': 'Digital Logic',
        'Engineering: Civil': 'Structural Analysis',
        'Engineering: Mechanical': 'Thermodynamics',
        'Medicine': 'Anatomy',
        'Business': 'Marketing',
        'Arts': 'Philosophy',
        'Law': 'Constitutional Law',
    },
}

CLASS_LEVELS = tuple(SUBJECT_SUGGESTIONS)


@dataclass
class GradeResult:
    correct: list[bool] = field(default_factory=list)
    feedback: list[str] = field(default_factory=list)
    fallback_used: int = 0

    @property
    def score(self) -> int:
        return sum(self.correct)


def _exact_match(student_answer: str, correct_answer: str) -> bool:
    return student_answer.strip().lower() == correct_answer.strip().lower()


class PracticeService:

    @staticmethod
    def subjects_for(class_level: str, field_of_study: str = '') -> dict[str, str]:
        """Suggested subjects (and a starter topic each) for a class level.

        Undergraduates with a custom field of study get that field as an
        extra subject without a suggested topic.
        """
        subjects = dict(SUBJECT_SUGGESTIONS.get(class_level, {}))
        if class_level == 'Undergraduate' and field_of_study and field_of_study not in subjects:
            if not field_of_study.startswith('Engineering: '):
                subjects[field_of_study] = ''
        return subjects

    @staticmethod
    def class_label(class_level: str, field_of_study: str = '') -> str:
        if class_level == 'Undergraduate' and field_of_study:
            return f'{class_level} ({field_of_study})'
        return class_level

    @staticmethod
    def grade_answers(flows, answer_key, answers: list[str]) -> GradeResult:
        """Grade each answer with the evaluate-answer flow.

        Any flow failure for a question falls back to a case-insensitive
        exact match against the answer key for that question only.

        Args:
            flows: ``StudyFlows`` instance, or None to grade by exact match.
            answer_key: Sequence of QuestionAnswer.
            answers: Student answers, aligned with *answer_key*; missing
                trailing answers count as empty.
        """
        result = GradeResult()
        for i, qa in enumerate(answer_key):
            student_answer = answers[i] if i < len(answers) else ''
            if flows is None:
                result.correct.append(_exact_match(student_answer, qa.answer))
                result.feedback.append('')
                continue
            try:
                evaluation = flows.evaluate_answer(schemas.EvaluateAnswerInput(
                    question=qa.question,
                    student_answer=student_answer,
                    correct_answer=qa.answer,
                ))
                result.correct.append(evaluation.is_correct)
                result.feedback.append(evaluation.feedback)
            except ExternalServiceFailure as e:
                logger.warning(f"Falling back to exact match for question {i + 1}: {e}")
                result.correct.append(_exact_match(student_answer, qa.answer))
                result.feedback.append('')
                result.fallback_used += 1
        return result

    # ------------------------------------------------------------------
    # Test in progress
    # ------------------------------------------------------------------

    @staticmethod
    def start_test(workspace, answer_key, subject: str, topic: str,
                   assignment_id: str | None = None, time_limit: int | None = None) -> dict:
        """Remember the generated test and start its timer."""
        active = {
            'answerKey': [QuestionAnswer.from_value(qa).to_dict() for qa in answer_key],
            'subject': subject,
            'topic': topic,
            'startedAt': workspace.clock().isoformat(),
            'assignmentId': assignment_id,
            'timeLimit': time_limit,
        }
        try:
            workspace.store.set(ACTIVE_TEST_KEY, active)
        except StorageUnavailable as e:
            logger.warning(f"Could not save the active test: {e}")
        return active

    @staticmethod
    def active_test(workspace) -> dict | None:
        active = workspace.store.get(ACTIVE_TEST_KEY)
        if not isinstance(active, dict) or not active.get('answerKey'):
            return None
        return active

    @staticmethod
    def discard_test(workspace) -> None:
        try:
            workspace.store.remove(ACTIVE_TEST_KEY)
        except StorageUnavailable as e:
            logger.warning(f"Could not discard the active test: {e}")

    @staticmethod
    def elapsed_seconds(started_at: str | None, now: datetime) -> int:
        if not started_at:
            return 0
        try:
            started = parse_timestamp(started_at)
        except ValueError:
            return 0
        return max(0, int((now - started).total_seconds()))

    @staticmethod
    def submit_active_test(workspace, flows, answers: list[str]):
        """Grade the test in progress and record the attempt.

        Returns:
            Tuple of (stored ledger entry, GradeResult), or None when no
            test is in progress.
        """
        active = PracticeService.active_test(workspace)
        if active is None:
            return None
        answer_key = [QuestionAnswer.from_value(qa) for qa in active['answerKey']]
        grade = PracticeService.grade_answers(flows, answer_key, answers)
        duration = PracticeService.elapsed_seconds(active.get('startedAt'), workspace.clock())

        assignment = None
        if active.get('assignmentId'):
            assignment = workspace.ledger.get(active['assignmentId'])
        entry = PracticeService.record_attempt(
            workspace.ledger,
            answer_key=answer_key,
            score=grade.score,
            duration=duration,
            subject=active.get('subject') or None,
            topic=active.get('topic') or None,
            assignment=assignment if isinstance(assignment, PracticeTestEntry) else None,
        )
        PracticeService.discard_test(workspace)
        return entry, grade

    # ------------------------------------------------------------------
    # Ledger entries
    # ------------------------------------------------------------------

    @staticmethod
    def record_attempt(ledger, answer_key, score: int, duration: int,
                       subject: str | None = None, topic: str | None = None,
                       assignment: PracticeTestEntry | None = None) -> PracticeTestEntry:
        """Append a graded practice test.

        Completing an assignment appends a new entry pointing back at it
        (the assignment itself is never edited).
        """
        if assignment is not None:
            subject = subject or assignment.subject
            topic = topic or assignment.topic
        label = topic or subject or 'Unknown Topic'
        entry = PracticeTestEntry(
            title=f'Test on: {label}',
            content=tuple(answer_key),
            score=score,
            duration=duration,
            subject=subject,
            topic=topic,
            is_complete=True,
            assignment_id=assignment.id if assignment else None,
            student_id=assignment.student_id if assignment else None,
            time_limit=assignment.time_limit if assignment else None,
        )
        stored = ledger.append(entry)
        logger.info(f"Recorded practice test {stored.id}: {score}/{len(stored.content)} on {label}")
        return stored

    @staticmethod
    def assign_test(ledger, student: Student, topic: str, answer_key,
                    time_limit: int, subject: str | None = None) -> PracticeTestEntry:
        """Append an incomplete test assigned to a roster student."""
        entry = PracticeTestEntry(
            title=f'Test on: {topic}',
            content=tuple(answer_key),
            subject=subject,
            topic=topic,
            student_id=student.id,
            is_complete=False,
            time_limit=time_limit,
        )
        stored = ledger.append(entry)
        logger.info(f"Assigned test {stored.id} on {topic} to {student.id}")
        return stored
