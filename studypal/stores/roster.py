from __future__ import annotations

import logging
import time
from dataclasses import dataclass

from studypal.errors import DuplicateKey, StorageUnavailable
from studypal.storage import ROSTER_KEY, KeyValueStore

logger = logging.getLogger(__name__)

AVATAR_URL = 'https://i.pravatar.cc/150?u={id}'


@dataclass(frozen=True)
class Student:
    id: str
    name: str
    class_name: str

    @property
    def avatar_url(self) -> str:
        return AVATAR_URL.format(id=self.id)

    def to_dict(self) -> dict:
        return {
            'id': self.id,
            'name': self.name,
            'class': self.class_name,
            'avatarUrl': self.avatar_url,
        }

    @classmethod
    def from_dict(cls, data: dict) -> Student:
        if not isinstance(data, dict) or not data.get('id'):
            raise ValueError('Student record needs an id')
        return cls(
            id=str(data['id']),
            name=str(data.get('name', '')),
            class_name=str(data.get('class', '')),
        )


DEFAULT_STUDENTS = (
    Student('alex-johnson-42', 'Alex Johnson', '10th Grade'),
    Student('maria-garcia-57', 'Maria Garcia', '11th Grade'),
    Student('chen-wei-88', 'Chen Wei', '9th Grade'),
    Student('fatima-alfassi-31', 'Fatima Al-Fassi', '12th Grade'),
)


def generate_student_id() -> str:
    """Fallback UID for students added without one."""
    return f"user-{int(time.time() * 1000)}"


class RosterStore:
    """Students managed by a parent or teacher, most recently added first."""

    def __init__(self, store: KeyValueStore):
        self._store = store
        self._students: list[Student] = self._load()

    def _load(self) -> list[Student]:
        raw = self._store.get(ROSTER_KEY)
        if raw is None:
            return list(DEFAULT_STUDENTS)
        if not isinstance(raw, list):
            logger.warning("Stored roster is not a list; using the sample students")
            return list(DEFAULT_STUDENTS)

        students = []
        seen = set()
        for data in raw:
            try:
                student = Student.from_dict(data)
            except ValueError as e:
                logger.warning(f"Skipping unreadable roster record: {e}")
                continue
            if student.id in seen:
                logger.warning(f"Skipping duplicate roster record {student.id!r}")
                continue
            seen.add(student.id)
            students.append(student)
        return students

    def _persist(self) -> None:
        try:
            self._store.set(ROSTER_KEY, [s.to_dict() for s in self._students])
        except StorageUnavailable as e:
            logger.warning(f"Could not save roster: {e}")

    def add(self, student: Student) -> Student:
        """Prepend *student*.

        Raises:
            DuplicateKey: a student with the same id already exists; the
                roster is left untouched.
        """
        if self.get(student.id) is not None:
            raise DuplicateKey(
                student.id, f'Student with UID "{student.id}" already exists.'
            )
        self._students.insert(0, student)
        self._persist()
        logger.info(f"Added student {student.id}")
        return student

    def remove(self, student_id: str) -> bool:
        """Drop the student with *student_id*. Returns False when absent."""
        remaining = [s for s in self._students if s.id != student_id]
        if len(remaining) == len(self._students):
            return False
        self._students = remaining
        self._persist()
        logger.info(f"Removed student {student_id}")
        return True

    def get(self, student_id: str) -> Student | None:
        for student in self._students:
            if student.id == student_id:
                return student
        return None

    def list(self) -> list[Student]:
        return list(self._students)

    def __len__(self) -> int:
        return len(self._students)
