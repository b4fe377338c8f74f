"""Tests for the activity ledger and its entry types."""

import json
from datetime import date, timezone

import pytest

from conftest import FakeClock, make_test
from studypal.analysis.analytics import recompute
from studypal.analysis.tracked_topics import derive_tracked_topics
from studypal.errors import NotFound
from studypal.storage import HISTORY_KEY, MemoryStore
from studypal.stores import (
    ActivityLedger,
    ExplanationEntry,
    HistoryItem,
    HistoryType,
    PracticeTestEntry,
    QuestionAnswer,
    StudyPlanEntry,
)


def _plan(n):
    return StudyPlanEntry(title=f'Study Plan: goal {n}', content=f'plan {n}')


class TestAppendAndOrder:
    def test_newest_first_with_unique_ids(self, store, clock):
        ledger = ActivityLedger(store, clock=clock)
        appended = []
        for n in range(25):
            appended.append(ledger.append(_plan(n)))
            clock.advance(seconds=1)

        listed = ledger.list()
        assert [i.id for i in listed] == [i.id for i in reversed(appended)]
        assert len({i.id for i in listed}) == 25

    def test_ids_unique_within_same_instant(self, store):
        ledger = ActivityLedger(store, clock=FakeClock())
        ids = {ledger.append(_plan(n)).id for n in range(50)}
        assert len(ids) == 50

    def test_append_stamps_id_and_timestamp(self, store, clock):
        ledger = ActivityLedger(store, clock=clock)
        entry = _plan(1)
        stored = ledger.append(entry)
        assert entry.id is None
        assert stored.id
        assert stored.timestamp == clock.now.isoformat()
        assert stored.created_at == clock.now

    def test_list_is_a_copy(self, store):
        ledger = ActivityLedger(store)
        ledger.append(_plan(1))
        ledger.list().clear()
        assert len(ledger) == 1

    def test_version_bumps_on_mutation(self, store):
        ledger = ActivityLedger(store)
        assert ledger.version == 0
        ledger.append(_plan(1))
        ledger.clear()
        assert ledger.version == 2


class TestPersistence:
    def test_reload_yields_identical_sequence(self, store, clock):
        ledger = ActivityLedger(store, clock=clock)
        ledger.append(_plan(1))
        ledger.append(ExplanationEntry(title='Explanation: Gravity', content='**Summary**', topic='Gravity'))
        ledger.append(make_test(3, topic='Algebra', duration=90, include_in_analytics=False))

        reloaded = ActivityLedger(store)
        assert reloaded.list() == ledger.list()

    def test_persisted_json_uses_camel_case(self, store):
        ledger = ActivityLedger(store)
        ledger.append(make_test(1, topic='Algebra', duration=30, student_id='s-1', time_limit=10))
        data = json.loads(store.raw(HISTORY_KEY))[0]
        assert data['type'] == 'Practice Test'
        assert data['studentId'] == 's-1'
        assert data['timeLimit'] == 10
        assert data['content'][0] == {'question': 'Q1', 'answer': 'A1'}
        assert 'includeInAnalytics' not in data

    def test_malformed_entries_skipped(self, caplog):
        raw = [
            {'id': 'a', 'type': 'Study Plan', 'title': 't', 'content': 'c', 'timestamp': '2024-05-01T10:00:00Z'},
            {'id': 'b', 'type': 'Quiz', 'title': 'unknown type'},
            'not an object',
            {'id': 'a', 'type': 'Explanation', 'title': 'duplicate id', 'content': ''},
            {'id': 'c', 'type': 'Practice Test', 'title': 'bad content', 'content': 'oops'},
        ]
        store = MemoryStore({HISTORY_KEY: json.dumps(raw)})
        ledger = ActivityLedger(store)
        assert [i.id for i in ledger.list()] == ['a']
        assert 'Skipping' in caplog.text

    def test_mistyped_fields_skipped(self, caplog):
        good = {
            'id': 'ok', 'type': 'Practice Test', 'title': 'Test on: Algebra',
            'content': [{'question': 'q', 'answer': 'a'}], 'score': 1,
            'timestamp': '2024-05-14T10:00:00Z',
        }
        raw = [
            good,
            {**good, 'id': 'num-ts', 'timestamp': 1700000000},
            {**good, 'id': 'bad-ts', 'timestamp': 'yesterday'},
            {**good, 'id': 'num-topic', 'topic': 42},
            {**good, 'id': 'list-subject', 'subject': ['Maths']},
            {**good, 'id': 'num-student', 'studentId': 7},
        ]
        ledger = ActivityLedger(MemoryStore({HISTORY_KEY: json.dumps(raw)}))

        assert [i.id for i in ledger.list()] == ['ok']
        assert 'Skipping' in caplog.text
        snapshot = recompute(ledger.list(), date(2024, 5, 15), timezone.utc)
        assert snapshot.topic_mastery == {'Algebra': 100}
        assert derive_tracked_topics(ledger.list()) == ['Algebra']

    def test_non_list_history_starts_empty(self):
        store = MemoryStore({HISTORY_KEY: '{"oops": true}'})
        assert ActivityLedger(store).list() == []

    def test_write_failure_keeps_memory_state(self, store, caplog):
        ledger = ActivityLedger(store)
        store.available = False
        stored = ledger.append(_plan(1))
        assert ledger.list() == [stored]
        assert 'Could not save history' in caplog.text


class TestClear:
    def test_clear_twice(self, store):
        ledger = ActivityLedger(store)
        ledger.append(_plan(1))
        ledger.clear()
        assert ledger.list() == []
        ledger.clear()
        assert ledger.list() == []
        assert ActivityLedger(store).list() == []

    def test_clear_empty_ledger(self, store):
        ledger = ActivityLedger(store)
        ledger.clear()
        assert ledger.list() == []


class TestQueries:
    def test_get_and_of_type(self, store):
        ledger = ActivityLedger(store)
        plan = ledger.append(_plan(1))
        test = ledger.append(make_test(2, topic='Algebra'))
        assert ledger.get(plan.id) == plan
        assert ledger.get('missing') is None
        assert ledger.of_type(HistoryType.PRACTICE_TEST) == [test]

    def test_require_raises_not_found(self, store):
        ledger = ActivityLedger(store)
        plan = ledger.append(_plan(1))
        assert ledger.require(plan.id) == plan
        with pytest.raises(NotFound) as exc:
            ledger.require('missing')
        assert exc.value.key == 'missing'

    def test_pending_assignments_and_completion(self, store):
        ledger = ActivityLedger(store)
        assignment = ledger.append(make_test(
            None, topic='Fractions', student_id='s-1', is_complete=False, time_limit=15,
        ))
        other = ledger.append(make_test(
            None, topic='Decimals', student_id='s-2', is_complete=False, time_limit=15,
        ))
        assert assignment.is_assignment
        assert ledger.pending_assignments() == [other, assignment]
        assert ledger.pending_assignments('s-1') == [assignment]
        assert ledger.completion_of(assignment.id) is None

        attempt = ledger.append(make_test(
            3, topic='Fractions', student_id='s-1', is_complete=True,
            assignment_id=assignment.id,
        ))
        assert ledger.pending_assignments('s-1') == []
        assert ledger.completion_of(assignment.id) == attempt
        assert not attempt.is_assignment

    def test_for_student(self, store):
        ledger = ActivityLedger(store)
        mine = ledger.append(make_test(1, topic='Algebra', student_id='s-1'))
        ledger.append(make_test(1, topic='Algebra'))
        assert ledger.for_student('s-1') == [mine]


class TestEntries:
    def test_topic_label_resolution(self):
        assert make_test(1, topic='Algebra', subject='Maths').topic_label() == 'Algebra'
        assert make_test(1, subject='Maths').topic_label() == 'Maths'
        assert make_test(1, title='Test on: Optics').topic_label() == 'Optics'
        assert make_test(1, title='Random quiz').topic_label() == 'General'

    def test_percentage_clamped(self):
        assert make_test(6, questions=4).percentage == 100.0
        assert make_test(-2, questions=4).percentage == 0.0
        assert make_test(1, questions=0).percentage is None
        assert make_test(None).percentage is None

    def test_question_answer_from_object(self):
        class Pair:
            question = 'What is 2+2?'
            answer = '4'
        assert QuestionAnswer.from_value(Pair()) == QuestionAnswer('What is 2+2?', '4')
        with pytest.raises(TypeError):
            QuestionAnswer.from_value(42)

    def test_from_dict_dispatches_on_type(self):
        item = HistoryItem.from_dict({
            'id': 'x', 'type': 'Practice Test', 'title': 'Test on: Algebra',
            'content': [{'question': 'q', 'answer': 'a'}], 'score': 1, 'duration': '60',
            'timestamp': '2024-05-01T10:00:00Z', 'includeInAnalytics': False,
        })
        assert isinstance(item, PracticeTestEntry)
        assert item.duration == 60
        assert item.include_in_analytics is False

    @pytest.mark.parametrize('field, value', [
        ('timestamp', 1700000000),
        ('timestamp', 'not a date'),
        ('topic', 42),
        ('subject', {'name': 'Physics'}),
        ('studentId', 12),
        ('isComplete', 'no'),
    ])
    def test_from_dict_rejects_mistyped_fields(self, field, value):
        data = {'id': 'x', 'type': 'Practice Test', 'title': 't', 'content': [], field: value}
        with pytest.raises(ValueError):
            HistoryItem.from_dict(data)

    def test_from_dict_unknown_type(self):
        with pytest.raises(ValueError, match='Unknown history type'):
            HistoryItem.from_dict({'type': 'Quiz', 'title': 't'})

    def test_text_entry_accepts_structured_content(self):
        item = HistoryItem.from_dict({'id': 'x', 'type': 'Study Plan', 'title': 't', 'content': {'weeks': 2}})
        assert item.content == '{"weeks": 2}'
