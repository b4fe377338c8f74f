"""Seed a demo account with a week of study activity.
Run with: python seed_data.py
"""
import os
import sys
from datetime import datetime, timedelta, timezone

# Add project root to path
sys.path.insert(0, os.path.dirname(os.path.abspath(__file__)))

from studypal import create_app
from studypal.extensions import db
from studypal.models import User
from studypal.services.practice_service import PracticeService
from studypal.services.workspace import Workspace
from studypal.storage import SQLStore
from studypal.stores import ExplanationEntry, QuestionAnswer, StudyPlanEntry, account_defaults

DEMO_EMAIL = 'demo@studypal.local'
DEMO_PASSWORD = 'demo1234'

# (days ago, topic, subject, correct, questions, minutes)
PRACTICE = [
    (6, 'Algebra', 'Mathematics', 4, 5, 18),
    (5, 'Thermodynamics', 'Physics', 3, 5, 25),
    (4, 'Calculus', 'Mathematics', 2, 5, 30),
    (3, 'Algebra', 'Mathematics', 5, 5, 12),
    (2, 'Stoichiometry', 'Chemistry', 3, 4, 20),
    (1, 'Calculus', 'Mathematics', 4, 5, 22),
    (0, 'Optics', 'Physics', 7, 10, 35),
]


def _answer_key(topic, count):
    return [
        QuestionAnswer(question=f'{topic} question {i + 1}', answer=f'answer {i + 1}')
        for i in range(count)
    ]


def seed():
    app = create_app()
    with app.app_context():
        db.create_all()

        user = User.query.filter_by(email=DEMO_EMAIL).first()
        if user is None:
            user = User(name='Alex Johnson', email=DEMO_EMAIL)
            user.set_password(DEMO_PASSWORD)
            db.session.add(user)
            db.session.commit()
            print(f"Created demo account {DEMO_EMAIL} / {DEMO_PASSWORD}")

        now = datetime.now(timezone.utc).replace(hour=16, minute=0, second=0, microsecond=0)
        clock_time = {'now': now}
        ws = Workspace(
            SQLStore(user.storage_namespace),
            clock=lambda: clock_time['now'],
            profile_defaults=account_defaults(user),
        )
        if ws.ledger.list():
            print(f"Demo account already has {len(ws.ledger)} history entries, skipping")
            return

        clock_time['now'] = now - timedelta(days=7)
        ws.ledger.append(StudyPlanEntry(
            title='Study Plan: Prepare for the end-of-term science and maths exams',
            content='## Week 1\n- Algebra: factorising and quadratics\n- Physics: laws of thermodynamics\n\n'
                    '## Week 2\n- Calculus: derivatives\n- Chemistry: moles and stoichiometry',
        ))
        clock_time['now'] = now - timedelta(days=6, hours=2)
        ws.ledger.append(ExplanationEntry(
            title='Explanation: Entropy',
            content='**Summary**\n\nEntropy measures how spread out energy is.',
            topic='Entropy',
        ))

        for days_ago, topic, subject, correct, questions, minutes in PRACTICE:
            clock_time['now'] = now - timedelta(days=days_ago)
            PracticeService.record_attempt(
                ws.ledger,
                answer_key=_answer_key(topic, questions),
                score=correct,
                duration=minutes * 60,
                subject=subject,
                topic=topic,
            )

        student = ws.roster.list()[1]
        PracticeService.assign_test(
            ws.ledger, student, topic='Trigonometry',
            answer_key=_answer_key('Trigonometry', 5), time_limit=20, subject='Mathematics',
        )

        print(f"Seeded {len(ws.ledger)} history entries for {DEMO_EMAIL}")


if __name__ == '__main__':
    seed()
