"""Small helpers shared by the form-handling views."""
from __future__ import annotations

from flask import flash
from flask_login import current_user
from pydantic import ValidationError

from studypal.analysis.flows import StudyFlows


def flash_validation_errors(e: ValidationError) -> None:
    """Flash one 'danger' message per invalid field."""
    for err in e.errors():
        field = '.'.join(str(p) for p in err.get('loc', ())) or 'input'
        label = field.replace('_', ' ').capitalize()
        flash(f"{label}: {err.get('msg', 'invalid value')}", 'danger')


def get_flows() -> StudyFlows:
    return StudyFlows(user_id=current_user.id)
