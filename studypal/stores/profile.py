from __future__ import annotations

import logging
import re

from studypal.errors import StorageUnavailable
from studypal.storage import PROFILE_KEY, KeyValueStore

logger = logging.getLogger(__name__)

EMAIL_RE = re.compile(r'^[^@\s]+@[^@\s]+\.[^@\s]+$')

ROLES = ('Student', 'Parent', 'Teacher')

PROFILE_FIELDS = ('role', 'name', 'email', 'avatar', 'id', 'class', 'field', 'institution')

BASE_PROFILE = {
    'role': 'Student',
    'name': 'Alex Johnson',
    'email': 'student@example.com',
    'avatar': '',
    'id': 'student-007',
    'class': '10th Grade',
    'field': '',
    'institution': '',
}


def account_defaults(user) -> dict:
    """Profile defaults for a signed-in account."""
    return {
        'name': user.name or BASE_PROFILE['name'],
        'email': user.email,
        'id': f'student-{user.id}',
        'avatar': f'https://i.pravatar.cc/150?u=student-{user.id}',
    }


class ProfileStore:
    """The user's profile: defaults overlaid with whatever was saved."""

    def __init__(self, store: KeyValueStore, defaults: dict | None = None):
        self._store = store
        self._defaults = {**BASE_PROFILE, **(defaults or {})}
        self._saved = self._load()

    def _load(self) -> dict:
        raw = self._store.get(PROFILE_KEY)
        if raw is None:
            return {}
        if not isinstance(raw, dict):
            logger.warning("Stored profile is not an object; using defaults")
            return {}
        return {k: str(v) for k, v in raw.items() if k in PROFILE_FIELDS and v is not None}

    def get(self) -> dict:
        return {**self._defaults, **self._saved}

    @staticmethod
    def validate(profile: dict) -> list[str]:
        errors = []
        if len((profile.get('name') or '').strip()) < 2:
            errors.append('Name must be at least 2 characters.')
        if not EMAIL_RE.match((profile.get('email') or '').strip()):
            errors.append('Please enter a valid email address.')
        if profile.get('role') not in ROLES:
            errors.append(f"Role must be one of: {', '.join(ROLES)}.")
        return errors

    def update(self, **changes) -> dict:
        """Merge *changes* into the profile and persist.

        Raises:
            ValueError: the merged profile fails validation; nothing is saved.
        """
        unknown = set(changes) - set(PROFILE_FIELDS)
        if unknown:
            raise ValueError(f"Unknown profile fields: {', '.join(sorted(unknown))}")
        cleaned = {k: (v or '').strip() for k, v in changes.items()}
        merged = {**self.get(), **cleaned}
        errors = self.validate(merged)
        if errors:
            raise ValueError(' '.join(errors))

        self._saved = {**self._saved, **cleaned}
        try:
            self._store.set(PROFILE_KEY, self.get())
        except StorageUnavailable as e:
            logger.warning(f"Could not save profile: {e}")
        return self.get()
