"""Tests for the study flows, JSON reply parsing and provider selection."""

from unittest.mock import patch

import pytest
from pydantic import ValidationError

from studypal.analysis import schemas
from studypal.analysis.flows import StudyFlows
from studypal.analysis.llm import get_available_providers, get_provider, register_provider
from studypal.analysis.llm.base import BaseLLMProvider, LLMResponse, parse_json_reply
from studypal.analysis.llm.config import MODEL_CONFIG, estimate_cost, get_model_for_tier
from studypal.errors import ExternalServiceFailure
from studypal.extensions import db as _db
from studypal.models import User, UserSetting


class TestParseJsonReply:
    def test_plain_object(self):
        assert parse_json_reply('{"answer": "42"}') == {'answer': '42'}

    def test_code_fence(self):
        assert parse_json_reply('```json\n{"answer": "42"}\n```') == {'answer': '42'}

    def test_prose_around_object(self):
        text = 'Sure! Here you go: {"report": "Great week"} Hope it helps.'
        assert parse_json_reply(text) == {'report': 'Great week'}

    @pytest.mark.parametrize('text', ['no json here', '[1, 2, 3]', '{broken', ''])
    def test_unparsable(self, text):
        assert parse_json_reply(text) is None


    def test_response_json_object(self):
        response = LLMResponse(content='```json\n{"feedback": "ok"}\n```', model='m', provider='p')
        assert response.json_object() == {'feedback': 'ok'}

    def test_usage_summary(self):
        response = LLMResponse(
            content='{}', model='gpt-4.1-mini', provider='openai',
            input_tokens=10, output_tokens=20, cost=0.0012, latency_ms=350,
        )
        assert response.usage_summary() == 'openai/gpt-4.1-mini 10+20 tokens in 350ms ($0.0012)'


class TestSchemas:
    def test_study_plan_input_limits(self):
        with pytest.raises(ValidationError):
            schemas.StudyPlanInput(goals='too short', deadline='in 2 weeks')
        with pytest.raises(ValidationError):
            schemas.StudyPlanInput(goals='Pass my calculus final', deadline='2w', learning_pace='slow')
        with pytest.raises(ValidationError):
            schemas.StudyPlanInput(goals='Pass my calculus final', deadline='in 2 weeks', learning_pace='turbo')

    def test_inputs_strip_whitespace(self):
        data = schemas.ExplanationInput(topic='  Photosynthesis  ', level='Simple')
        assert data.topic == 'Photosynthesis'

    def test_practice_test_question_range(self):
        schemas.PracticeTestInput(class_level='9th Grade', subject='Maths', topic='Sets', number_of_questions='20')
        with pytest.raises(ValidationError):
            schemas.PracticeTestInput(class_level='9th Grade', subject='Maths', topic='Sets', number_of_questions=21)
        with pytest.raises(ValidationError):
            schemas.PracticeTestInput(class_level='9th Grade', subject='Maths', topic='Sets', number_of_questions=0)

    def test_report_dates(self):
        with pytest.raises(ValidationError):
            schemas.ProgressReportInput(
                user_id='u', start_date='May 1', end_date='2024-05-07', learning_data='x',
            )

    def test_outputs_accept_camel_case(self):
        out = schemas.ExplanationOutput.model_validate({
            'summary': 's', 'detailedExplanation': 'd', 'extra': 'ignored',
        })
        assert out.detailed_explanation == 'd'
        assert out.analogy == ''


class TestStudyFlows:
    def test_explanation(self, app, fake_llm):
        fake_llm.reply = {
            'summary': 'Plants make food.',
            'detailedExplanation': 'Chlorophyll absorbs light...',
            'analogy': 'Like a solar kitchen.',
        }
        with app.app_context():
            out = StudyFlows(app=app).explanation(
                schemas.ExplanationInput(topic='Photosynthesis', level='Simple')
            )
        assert out.summary == 'Plants make food.'
        call = fake_llm.calls[0]
        assert call['json_output'] is True
        assert call['model'] == get_model_for_tier('gemini', 'basic')
        assert 'Photosynthesis' in call['messages'][-1]['content']

    def test_advanced_tier_for_study_plan(self, app, fake_llm):
        fake_llm.reply = {'studyPlan': '## Week 1\n- Limits'}
        with app.app_context():
            out = StudyFlows(app=app).study_plan(schemas.StudyPlanInput(
                goals='Pass my calculus final', deadline='in 3 weeks', learning_pace='fast',
            ))
        assert out.study_plan.startswith('## Week 1')
        assert fake_llm.calls[0]['model'] == get_model_for_tier('gemini', 'advanced')

    def test_practice_test(self, app, fake_llm):
        fake_llm.reply = {'answerKey': [
            {'question': '2 + 2?', 'answer': '4'},
            {'question': '3 * 3?', 'answer': '9'},
        ]}
        with app.app_context():
            out = StudyFlows(app=app).practice_test(schemas.PracticeTestInput(
                class_level='6th Grade', subject='Mathematics', topic='Arithmetic', number_of_questions=2,
            ))
        assert [qa.answer for qa in out.answer_key] == ['4', '9']

    def test_provider_error_becomes_external_failure(self, app, fake_llm):
        fake_llm.error = RuntimeError('quota exceeded')
        with app.app_context():
            with pytest.raises(ExternalServiceFailure) as exc:
                StudyFlows(app=app).ask_question(schemas.AskQuestionInput(question='How do I add a student?'))
        assert exc.value.flow == 'Help'
        assert 'quota exceeded' in exc.value.reason

    def test_unparsable_reply(self, app, fake_llm):
        fake_llm.reply = 'I cannot answer that.'
        with app.app_context():
            with pytest.raises(ExternalServiceFailure, match='not valid JSON'):
                StudyFlows(app=app).solve_doubt(schemas.SolveDoubtInput(doubt='Why is the sky blue?'))

    def test_incomplete_reply(self, app, fake_llm):
        fake_llm.reply = {'answerKey': []}
        with app.app_context():
            with pytest.raises(ExternalServiceFailure, match='incomplete'):
                StudyFlows(app=app).practice_test_for_child(schemas.PracticeTestForChildInput(
                    student_id='s-1', topic='Fractions',
                ))

    def test_unknown_provider_becomes_external_failure(self, app):
        app.config['AI_PROVIDER'] = 'nope'
        with app.app_context():
            with pytest.raises(ExternalServiceFailure, match='Unknown LLM provider'):
                StudyFlows(app=app).evaluate_answer(schemas.EvaluateAnswerInput(
                    question='q', student_answer='a', correct_answer='a',
                ))

    def test_user_settings_choose_provider_and_key(self, app, db, fake_llm):
        user = User(name='Kim', email='kim@example.com')
        user.set_password('secret1')
        _db.session.add(user)
        _db.session.commit()
        UserSetting.set(user.id, 'ai_provider', 'claude')
        UserSetting.set(user.id, MODEL_CONFIG['claude']['api_key_setting'], 'sk-user')
        _db.session.commit()

        fake_llm.reply = {'report': 'Solid week.'}
        StudyFlows(user_id=user.id, app=app).progress_report(schemas.ProgressReportInput(
            user_id='student-1', start_date='2024-05-09', end_date='2024-05-15', learning_data='- Time Spent: 1 hours total',
        ))
        fake_llm.factory.assert_called_once_with('claude', api_key='sk-user')
        assert fake_llm.calls[0]['model'] == get_model_for_tier('claude', 'advanced')

    def test_config_key_used_without_user_setting(self, app, fake_llm):
        fake_llm.reply = {'answer': 'Use the Students page.'}
        with app.app_context():
            StudyFlows(app=app).ask_question(schemas.AskQuestionInput(question='Where are students?'))
        fake_llm.factory.assert_called_once_with('gemini', api_key='test-google-key')


class TestProviderRegistry:
    def test_unknown_provider(self):
        with pytest.raises(ValueError):
            get_provider('nope')

    def test_registered_providers_match_config(self):
        assert set(get_available_providers()) <= set(MODEL_CONFIG)

    def test_register_requires_model_config_entry(self):
        class Unconfigured(BaseLLMProvider):
            PROVIDER_NAME = 'unconfigured'

            def chat(self, messages, model=None, max_tokens=4096, temperature=0, json_output=False):
                raise NotImplementedError

        with pytest.raises(ValueError, match='MODEL_CONFIG'):
            register_provider(Unconfigured)
        assert 'unconfigured' not in get_available_providers()

    def test_models_and_cost_come_from_catalogue(self):
        provider = get_provider('openai', api_key='sk-test')
        assert provider.list_models() == list(MODEL_CONFIG['openai']['models'])
        model = provider.list_models()[0]
        assert provider.estimate_cost(1_000_000, 0, model) == MODEL_CONFIG['openai']['models'][model]['input_price']

    def test_estimate_cost(self):
        model = get_model_for_tier('openai', 'basic')
        pricing = MODEL_CONFIG['openai']['models'][model]
        expected = round(pricing['input_price'] + pricing['output_price'], 6)
        assert estimate_cost('openai', model, 1_000_000, 1_000_000) == expected
        assert estimate_cost('openai', 'no-such-model', 10, 10) == 0.0
