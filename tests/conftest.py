"""Shared test fixtures for the StudyPal test suite."""

import json
from datetime import datetime, timedelta, timezone
from unittest.mock import patch

import pytest

from studypal import create_app
from studypal.analysis.llm.base import LLMResponse
from studypal.extensions import db as _db
from studypal.models import User
from studypal.services.workspace import Workspace
from studypal.storage import MemoryStore, SQLStore
from studypal.stores import PracticeTestEntry, QuestionAnswer, StudyPlanEntry

# Fixed "now" used by clock-driven tests: a Wednesday at noon UTC.
NOW = datetime(2024, 5, 15, 12, 0, 0, tzinfo=timezone.utc)


class FakeClock:
    """Deterministic clock; ``advance`` moves time forward."""

    def __init__(self, now=NOW):
        self.now = now

    def __call__(self):
        return self.now

    def advance(self, **kwargs):
        self.now = self.now + timedelta(**kwargs)


class FakeProvider:
    """Stands in for an LLM provider; replies with ``reply`` as JSON."""

    PROVIDER_NAME = 'fake'

    def __init__(self):
        self.reply = {}
        self.error = None
        self.calls = []

    def chat(self, messages, model=None, max_tokens=4096, temperature=0, json_output=False):
        self.calls.append({
            'messages': messages,
            'model': model,
            'max_tokens': max_tokens,
            'json_output': json_output,
        })
        if self.error is not None:
            raise self.error
        content = self.reply if isinstance(self.reply, str) else json.dumps(self.reply)
        return LLMResponse(
            content=content,
            model=model or 'fake-model',
            provider='fake',
            input_tokens=10,
            output_tokens=20,
        )


def make_test(score, questions=4, topic=None, subject=None, title=None, **kwargs):
    """Build an unsaved PracticeTestEntry with *questions* Q/A pairs."""
    content = tuple(
        QuestionAnswer(question=f'Q{i + 1}', answer=f'A{i + 1}') for i in range(questions)
    )
    return PracticeTestEntry(
        title=title or f'Test on: {topic or subject or "Unknown Topic"}',
        content=content,
        score=score,
        topic=topic,
        subject=subject,
        **kwargs,
    )


@pytest.fixture()
def app():
    """Create a Flask application configured for testing."""
    application = create_app('testing')
    yield application


@pytest.fixture()
def db(app):
    """Provide a clean database for each test."""
    with app.app_context():
        _db.create_all()
        yield _db
        _db.session.remove()
        _db.drop_all()


@pytest.fixture()
def client(app, db):
    """Provide a Flask test client."""
    return app.test_client()


@pytest.fixture()
def clock():
    return FakeClock()


@pytest.fixture()
def store():
    return MemoryStore()


@pytest.fixture()
def workspace(store, clock):
    """A workspace over an in-memory store with a fixed clock."""
    return Workspace(store, clock=clock)


@pytest.fixture()
def fake_llm():
    """Route every flow call to a FakeProvider."""
    provider = FakeProvider()
    with patch('studypal.analysis.flows.get_provider', return_value=provider) as factory:
        provider.factory = factory
        yield provider


@pytest.fixture()
def auth_client(app, db, client):
    """Provide a test client that is already logged in."""
    user = User(name='Test User', email='test@example.com')
    user.set_password('testpass123')
    db.session.add(user)
    db.session.commit()

    client.post('/auth/login', data={
        'email': 'test@example.com',
        'password': 'testpass123',
    })
    return client


@pytest.fixture()
def sample_data(app, db):
    """A user whose stored ledger already holds a plan and two graded tests.

    Returns a dict of plain values (ids and the storage namespace) so they
    survive across request context boundaries.
    """
    user = User(name='Sam Parent', email='parent@test.com')
    user.set_password('password123')
    db.session.add(user)
    db.session.commit()

    ws = Workspace(SQLStore(user.storage_namespace))
    plan = ws.ledger.append(StudyPlanEntry(title='Study Plan: Finals', content='Week 1: review'))
    algebra = ws.ledger.append(make_test(3, topic='Algebra', duration=1800))
    physics = ws.ledger.append(make_test(
        2, subject='Physics', duration=600, student_id='chen-wei-88',
    ))

    return {
        'user_id': user.id,
        'namespace': user.storage_namespace,
        'plan_id': plan.id,
        'algebra_id': algebra.id,
        'physics_id': physics.id,
    }


@pytest.fixture()
def logged_in_client(app, db, client, sample_data):
    """Provide a client logged in as the sample_data user."""
    client.post('/auth/login', data={
        'email': 'parent@test.com',
        'password': 'password123',
    })
    return client, sample_data
