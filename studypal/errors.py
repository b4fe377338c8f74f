"""
Exception hierarchy shared by the stores, flows and views.

Storage errors are recovered where they happen (logged, safe default kept);
``DuplicateKey`` and ``ExternalServiceFailure`` travel up to the views, which
flash them to the user and leave the submitted form editable.
"""
from __future__ import annotations


class StudyPalError(Exception):
    """Base class for all application errors."""


class StorageError(StudyPalError):
    """Base class for key/value storage problems."""


class StorageUnavailable(StorageError):
    """The storage backend could not be reached or written."""


class StorageCorrupt(StorageError):
    """A persisted value exists but could not be decoded."""

    def __init__(self, key: str, reason: str = ''):
        self.key = key
        self.reason = reason
        super().__init__(f'Stored value for {key!r} is unreadable: {reason}')


class DuplicateKey(StudyPalError):
    """An insert collided with an existing record id."""

    def __init__(self, key: str, message: str | None = None):
        self.key = key
        super().__init__(message or f'Record with id "{key}" already exists.')


class NotFound(StudyPalError):
    """Lookup of a missing record through a ``require`` accessor.

    Plain ``get`` accessors return None instead; views turn this into a 404.
    """

    def __init__(self, key: str):
        self.key = key
        super().__init__(f'No record with id "{key}".')


class ExternalServiceFailure(StudyPalError):
    """A generative-model call failed, was rejected, or returned bad output."""

    def __init__(self, flow: str, reason: str):
        self.flow = flow
        self.reason = reason
        super().__init__(f'{flow} failed: {reason}')
