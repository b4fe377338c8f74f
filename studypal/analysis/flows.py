"""
Study flows: typed wrappers around the generative model.

Every flow takes a validated input record, renders its prompt template,
sends it to the configured LLM provider and validates the JSON reply into
an output record. Anything that goes wrong on the model side (no API key,
provider error, unparsable or incomplete reply) surfaces as a single
``ExternalServiceFailure``; there is no retry.
"""
from __future__ import annotations

import logging
from typing import TypeVar

from flask import current_app
from pydantic import BaseModel, ValidationError

from studypal.errors import ExternalServiceFailure

from . import schemas
from .llm import get_provider
from .llm.config import MODEL_CONFIG, get_model_for_tier
from .prompts.evaluate_answer import build_evaluate_answer_prompt
from .prompts.explanation import build_explanation_prompt
from .prompts.help import build_ask_question_prompt, build_solve_doubt_prompt
from .prompts.practice_test import (
    build_practice_test_for_child_prompt,
    build_practice_test_prompt,
)
from .prompts.progress_report import build_progress_report_prompt
from .prompts.study_plan import build_study_plan_prompt

logger = logging.getLogger(__name__)

OutputT = TypeVar('OutputT', bound=BaseModel)


class StudyFlows:
    """Runs the study flows for one user.

    Args:
        user_id: Account id used to look up per-user AI settings. None means
            application defaults only.
        app: Flask application instance. If None, uses current_app.
    """

    def __init__(self, user_id: int | None = None, app=None):
        self.user_id = user_id
        self.app = app or current_app._get_current_object()

    def _get_llm(self, tier: str = "basic"):
        """Resolve the provider instance and model for *tier*.

        Provider and API key come from the user's ``UserSetting`` rows when
        present, else from app config / environment.

        Returns:
            Tuple of (provider_instance, model_name).
        """
        from studypal.models import UserSetting

        provider_name = UserSetting.ai_provider(
            self.user_id, self.app.config.get('AI_PROVIDER', 'gemini')
        )
        info = MODEL_CONFIG.get(provider_name, {})
        api_key = ''
        if self.user_id and info.get('api_key_setting'):
            api_key = UserSetting.get(self.user_id, info['api_key_setting']) or ''
        if not api_key:
            api_key = self.app.config.get(info.get('env_key', ''), '')

        provider = get_provider(provider_name, api_key=api_key)

        model = get_model_for_tier(provider_name, tier)
        if not model:
            model_key = "AI_MODEL_BASIC" if tier == "basic" else "AI_MODEL_ADVANCED"
            model = self.app.config.get(model_key)
        return provider, model

    def _run(
        self,
        flow: str,
        messages: list[dict],
        output_model: type[OutputT],
        tier: str = "basic",
        max_tokens: int = 4096,
    ) -> OutputT:
        try:
            provider, model = self._get_llm(tier)
            response = provider.chat(
                messages, model=model, max_tokens=max_tokens, json_output=True,
            )
        except Exception as e:
            logger.error(f"{flow}: LLM call failed: {e}")
            raise ExternalServiceFailure(flow, str(e)) from e

        logger.info(f"{flow}: {response.usage_summary()}")

        parsed = response.json_object()
        if parsed is None:
            logger.error(f"{flow}: unparsable reply: {response.content[:200]}")
            raise ExternalServiceFailure(flow, "the model reply was not valid JSON")
        try:
            return output_model.model_validate(parsed)
        except ValidationError as e:
            logger.error(f"{flow}: reply failed validation: {e}")
            raise ExternalServiceFailure(flow, "the model reply was incomplete") from e

    # ------------------------------------------------------------------
    # Flows
    # ------------------------------------------------------------------

    def study_plan(self, data: schemas.StudyPlanInput) -> schemas.StudyPlanOutput:
        messages = build_study_plan_prompt(data.goals, data.deadline, data.learning_pace)
        return self._run("Study plan", messages, schemas.StudyPlanOutput, tier="advanced")

    def explanation(self, data: schemas.ExplanationInput) -> schemas.ExplanationOutput:
        messages = build_explanation_prompt(data.topic, data.level)
        return self._run("Explanation", messages, schemas.ExplanationOutput)

    def practice_test(self, data: schemas.PracticeTestInput) -> schemas.PracticeTestOutput:
        messages = build_practice_test_prompt(
            data.class_level, data.subject, data.topic, data.number_of_questions,
        )
        return self._run("Practice test", messages, schemas.PracticeTestOutput)

    def practice_test_for_child(
        self, data: schemas.PracticeTestForChildInput,
    ) -> schemas.PracticeTestOutput:
        messages = build_practice_test_for_child_prompt(
            data.student_id, data.topic, data.number_of_questions, data.time_limit,
        )
        return self._run("Practice test", messages, schemas.PracticeTestOutput)

    def evaluate_answer(self, data: schemas.EvaluateAnswerInput) -> schemas.EvaluateAnswerOutput:
        messages = build_evaluate_answer_prompt(
            data.question, data.student_answer, data.correct_answer,
        )
        return self._run("Answer evaluation", messages, schemas.EvaluateAnswerOutput, max_tokens=512)

    def progress_report(self, data: schemas.ProgressReportInput) -> schemas.ProgressReportOutput:
        messages = build_progress_report_prompt(
            data.user_id, data.start_date, data.end_date, data.learning_data,
        )
        return self._run("Progress report", messages, schemas.ProgressReportOutput, tier="advanced")

    def ask_question(self, data: schemas.AskQuestionInput) -> schemas.AnswerOutput:
        return self._run("Help", build_ask_question_prompt(data.question), schemas.AnswerOutput)

    def solve_doubt(self, data: schemas.SolveDoubtInput) -> schemas.AnswerOutput:
        return self._run("Doubt solver", build_solve_doubt_prompt(data.doubt), schemas.AnswerOutput)
