"""Tests for the practice, report and stats services and the workspace."""

from datetime import timedelta
from unittest.mock import MagicMock

import pytest

from conftest import NOW, make_test
from studypal.analysis import schemas
from studypal.errors import ExternalServiceFailure
from studypal.services.practice_service import PracticeService
from studypal.services.report_service import ReportService, items_in_window, week_window
from studypal.services.stats_service import MOTIVATIONAL_QUOTES, StatsService
from studypal.services.workspace import Workspace
from studypal.storage import ACTIVE_TEST_KEY, HISTORY_KEY
from studypal.stores import (
    DEFAULT_STUDENTS,
    ExplanationEntry,
    HistoryType,
    ProgressReportEntry,
    QuestionAnswer,
    Student,
    StudyPlanEntry,
)

KEY = [
    QuestionAnswer('Capital of France?', 'Paris'),
    QuestionAnswer('2 + 2?', '4'),
    QuestionAnswer('H2O is?', 'Water'),
]


def _evaluations(*results):
    flows = MagicMock()
    flows.evaluate_answer.side_effect = list(results)
    return flows


class TestSubjects:
    def test_subjects_for_class(self):
        subjects = PracticeService.subjects_for('6th Grade')
        assert subjects['Mathematics'] == 'Fractions'

    def test_undergraduate_field_added(self):
        subjects = PracticeService.subjects_for('Undergraduate', 'Marine Biology')
        assert subjects['Marine Biology'] == ''
        assert PracticeService.class_label('Undergraduate', 'Marine Biology') == 'Undergraduate (Marine Biology)'
        assert PracticeService.class_label('9th Grade', 'Marine Biology') == '9th Grade'

    def test_unknown_class(self):
        assert PracticeService.subjects_for('Kindergarten') == {}


class TestGrading:
    def test_uses_evaluate_flow(self):
        flows = _evaluations(
            schemas.EvaluateAnswerOutput(isCorrect=True, feedback='Right.'),
            schemas.EvaluateAnswerOutput(isCorrect=False, feedback='It is 4.'),
            schemas.EvaluateAnswerOutput(isCorrect=True, feedback='Yes.'),
        )
        grade = PracticeService.grade_answers(flows, KEY, ['paris', '5', 'water'])
        assert grade.correct == [True, False, True]
        assert grade.score == 2
        assert grade.feedback[1] == 'It is 4.'
        assert grade.fallback_used == 0
        first = flows.evaluate_answer.call_args_list[0].args[0]
        assert first.correct_answer == 'Paris'

    def test_falls_back_per_question(self):
        flows = _evaluations(
            ExternalServiceFailure('Answer evaluation', 'timeout'),
            schemas.EvaluateAnswerOutput(isCorrect=False, feedback='No.'),
            ExternalServiceFailure('Answer evaluation', 'timeout'),
        )
        grade = PracticeService.grade_answers(flows, KEY, ['  PARIS ', '4', 'ice'])
        assert grade.correct == [True, False, False]
        assert grade.fallback_used == 2

    def test_exact_match_without_flows(self):
        grade = PracticeService.grade_answers(None, KEY, ['Paris'])
        assert grade.correct == [True, False, False]
        assert grade.score == 1


class TestActiveTest:
    def test_start_take_submit(self, workspace, clock):
        PracticeService.start_test(workspace, KEY, subject='General Knowledge', topic='Capitals')
        active = PracticeService.active_test(workspace)
        assert active['topic'] == 'Capitals'
        assert len(active['answerKey']) == 3

        clock.advance(minutes=2, seconds=5)
        entry, grade = PracticeService.submit_active_test(workspace, None, ['Paris', '4', ''])

        assert grade.score == 2
        assert entry.title == 'Test on: Capitals'
        assert entry.score == 2
        assert entry.duration == 125
        assert entry.is_complete is True
        assert workspace.ledger.list() == [entry]
        assert PracticeService.active_test(workspace) is None
        assert workspace.store.get(ACTIVE_TEST_KEY) is None

    def test_submit_without_active_test(self, workspace):
        assert PracticeService.submit_active_test(workspace, None, []) is None

    def test_discard(self, workspace):
        PracticeService.start_test(workspace, KEY, subject='Science', topic='Water')
        PracticeService.discard_test(workspace)
        assert PracticeService.active_test(workspace) is None
        assert workspace.ledger.list() == []

    def test_elapsed_seconds(self):
        assert PracticeService.elapsed_seconds(None, NOW) == 0
        assert PracticeService.elapsed_seconds('garbage', NOW) == 0
        assert PracticeService.elapsed_seconds((NOW + timedelta(seconds=30)).isoformat(), NOW) == 0
        assert PracticeService.elapsed_seconds((NOW - timedelta(seconds=30)).isoformat(), NOW) == 30


class TestAssignments:
    def test_assign_then_complete(self, workspace, clock):
        student = DEFAULT_STUDENTS[2]
        assignment = PracticeService.assign_test(
            workspace.ledger, student, topic='Fractions', answer_key=KEY, time_limit=20, subject='Mathematics',
        )
        assert assignment.is_assignment
        assert assignment.student_id == student.id
        assert workspace.ledger.pending_assignments(student.id) == [assignment]
        # An unscored assignment does not count towards mastery
        assert workspace.analytics.topic_mastery == {}

        PracticeService.start_test(
            workspace, assignment.content, subject='Mathematics', topic='Fractions',
            assignment_id=assignment.id, time_limit=20,
        )
        clock.advance(minutes=10)
        attempt, grade = PracticeService.submit_active_test(workspace, None, ['Paris', '4', 'Water'])

        assert attempt.assignment_id == assignment.id
        assert attempt.student_id == student.id
        assert attempt.time_limit == 20
        assert attempt.duration == 600
        assert workspace.ledger.pending_assignments() == []
        assert workspace.ledger.get(assignment.id) == assignment
        assert workspace.analytics.topic_mastery == {'Fractions': 100}

    def test_record_attempt_label_fallback(self, workspace):
        entry = PracticeService.record_attempt(workspace.ledger, KEY, score=1, duration=30)
        assert entry.title == 'Test on: Unknown Topic'


class TestReportService:
    def test_week_window(self):
        start, end = week_window(NOW.date())
        assert (end - start).days == 6
        assert end == NOW.date()

    def test_items_in_window(self, workspace, clock):
        clock.advance(days=-7)
        old = workspace.ledger.append(make_test(1, topic='Old'))
        clock.advance(days=7)
        new = workspace.ledger.append(make_test(1, topic='New', student_id='s-1'))
        start, end = week_window(NOW.date())
        items = workspace.ledger.list()
        assert items_in_window(items, start, end, workspace.tz) == [new]
        assert items_in_window(items, start, end, workspace.tz, student_id='s-2') == []
        assert old not in items_in_window(items, start - timedelta(days=30), end, workspace.tz, 's-1')

    def test_learning_data_empty(self):
        assert ReportService.build_learning_data([]) == 'No recorded study activity this week.'

    def test_learning_data_lines(self):
        items = [
            make_test(3, questions=4, topic='Algebra', duration=1800),
            make_test(1, questions=2, topic='Algebra', duration=1800),
            ExplanationEntry(title='Explanation: Gravity', content='...'),
            ProgressReportEntry(title='Weekly Report', content='...'),
        ]
        text = ReportService.build_learning_data(items)
        assert '- Topics Studied: Algebra (1.0 hours, 2 test(s))' in text
        assert 'Test on: Algebra (75%)' in text
        assert 'Test on: Algebra (50%)' in text
        assert '- Time Spent: 1.0 hours total' in text
        assert '- Explanation: Explanation: Gravity' in text
        assert 'Weekly Report' not in text

    def test_generate_weekly_report(self, workspace):
        workspace.ledger.append(make_test(3, questions=4, topic='Algebra', duration=3600))
        flows = MagicMock()
        flows.progress_report.return_value = schemas.ProgressReportOutput(report='## Great week')

        entry = ReportService.generate_weekly_report(workspace, flows)

        data = flows.progress_report.call_args.args[0]
        assert data.user_id == 'student-007'
        assert data.end_date == NOW.date().isoformat()
        assert data.start_date == (NOW.date() - timedelta(days=6)).isoformat()
        assert 'Algebra' in data.learning_data
        assert entry.type is HistoryType.PROGRESS_REPORT
        assert entry.content == '## Great week'
        assert entry.title.startswith('Weekly Report: ')
        assert workspace.ledger.list()[0] == entry

    def test_report_for_student(self, workspace):
        student = Student('user-9', 'Sam Lee', '9th Grade')
        workspace.ledger.append(make_test(1, topic='Other'))
        workspace.ledger.append(make_test(2, topic='Sets', student_id='user-9'))
        flows = MagicMock()
        flows.progress_report.return_value = schemas.ProgressReportOutput(report='Sam did well')

        entry = ReportService.generate_weekly_report(workspace, flows, student=student)

        data = flows.progress_report.call_args.args[0]
        assert data.user_id == 'user-9'
        assert 'Sets' in data.learning_data
        assert 'Other' not in data.learning_data
        assert entry.student_id == 'user-9'
        assert entry.title.startswith('Weekly Report for Sam Lee: ')

    def test_failure_records_nothing(self, workspace):
        flows = MagicMock()
        flows.progress_report.side_effect = ExternalServiceFailure('Progress report', 'down')
        with pytest.raises(ExternalServiceFailure):
            ReportService.generate_weekly_report(workspace, flows)
        assert workspace.ledger.list() == []


class TestStatsService:
    def test_quote_is_stable_per_day(self):
        today = NOW.date()
        assert StatsService.quote_of_the_day(today) == StatsService.quote_of_the_day(today)
        assert StatsService.quote_of_the_day(today) in MOTIVATIONAL_QUOTES
        assert StatsService.quote_of_the_day(today) != StatsService.quote_of_the_day(today + timedelta(days=1))

    def test_dashboard_data(self, workspace):
        workspace.ledger.append(StudyPlanEntry(title='Study Plan: x', content='plan'))
        workspace.ledger.append(make_test(4, topic='Algebra', duration=5400))
        data = StatsService.get_dashboard_data(workspace, selected_day=NOW.date())
        assert data['stats']['study_plans'] == 1
        assert data['stats']['practice_tests'] == 1
        assert data['stats']['overall_performance'] == 100
        assert data['stats']['week_hours'] == 1.5
        assert len(data['weekly']) == 7
        assert len(data['daily_items']) == 2
        assert data['recent_items'][0].type is HistoryType.PRACTICE_TEST

    def test_analytics_data_includes_tracked_and_derived(self, workspace):
        workspace.ledger.append(make_test(2, topic='Optics'))
        data = StatsService.get_analytics_data(workspace)
        topics = [row['topic'] for row in data['mastery']]
        assert topics == ['Algebra', 'Calculus', 'Thermodynamics', 'Optics']
        assert data['mastery'][-1]['mastery'] == 50
        assert data['mastery'][0]['mastery'] is None
        assert data['derived_topics'] == ['Optics']


class TestWorkspace:
    def test_reset_clears_everything(self, workspace):
        workspace.ledger.append(make_test(1, topic='Algebra'))
        workspace.roster.add(Student('user-9', 'Sam Lee', '9th Grade'))
        workspace.topics.add('Optics', 'Physics')
        workspace.profile.update(name='Riya Patel')
        PracticeService.start_test(workspace, KEY, subject='x', topic='y')

        workspace.reset()

        assert workspace.store.keys() == []
        assert workspace.ledger.list() == []
        assert workspace.roster.list() == list(DEFAULT_STUDENTS)
        assert 'Optics' not in [t.topic for t in workspace.topics.list()]
        assert workspace.profile.get()['name'] == 'Alex Johnson'
        assert workspace.analytics.overall_performance == 0

    def test_reload_shares_state_through_store(self, store, clock):
        first = Workspace(store, clock=clock)
        first.ledger.append(make_test(3, topic='Algebra'))
        second = Workspace(store, clock=clock)
        assert second.ledger.list() == first.ledger.list()
        assert store.get(HISTORY_KEY)[0]['topic'] == 'Algebra'
