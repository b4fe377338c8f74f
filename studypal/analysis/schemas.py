"""
Input and output records for the study flows.

Inputs are validated before any prompt is built; outputs are validated after
the model's JSON has been parsed, so callers only ever see well-formed data.
"""
from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator

MAX_QUESTIONS = 20


class FlowInput(BaseModel):
    model_config = ConfigDict(str_strip_whitespace=True, frozen=True)


class FlowOutput(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra='ignore')


# -- Study plan ---------------------------------------------------------------

class StudyPlanInput(FlowInput):
    goals: str = Field(min_length=10)
    deadline: str = Field(min_length=3)
    learning_pace: Literal['slow', 'moderate', 'fast'] = 'moderate'


class StudyPlanOutput(FlowOutput):
    study_plan: str = Field(alias='studyPlan', min_length=1)


# -- Explanation --------------------------------------------------------------

class ExplanationInput(FlowInput):
    topic: str = Field(min_length=5)
    level: Literal['Simple', 'Detailed', 'Expert'] = 'Detailed'


class ExplanationOutput(FlowOutput):
    summary: str
    detailed_explanation: str = Field(alias='detailedExplanation', min_length=1)
    analogy: str = ''


# -- Practice tests -----------------------------------------------------------

class AnswerKeyItem(BaseModel):
    question: str = Field(min_length=1)
    answer: str


class PracticeTestInput(FlowInput):
    class_level: str = Field(min_length=1)
    subject: str = Field(min_length=1)
    topic: str = Field(min_length=2)
    number_of_questions: int = Field(default=5, ge=1, le=MAX_QUESTIONS)


class PracticeTestForChildInput(FlowInput):
    student_id: str = Field(min_length=1)
    topic: str = Field(min_length=2)
    number_of_questions: int = Field(default=5, ge=1, le=MAX_QUESTIONS)
    time_limit: int = Field(default=15, ge=1, le=180)


class PracticeTestOutput(FlowOutput):
    answer_key: list[AnswerKeyItem] = Field(alias='answerKey', min_length=1)


# -- Grading ------------------------------------------------------------------

class EvaluateAnswerInput(FlowInput):
    question: str
    student_answer: str
    correct_answer: str


class EvaluateAnswerOutput(FlowOutput):
    is_correct: bool = Field(alias='isCorrect')
    feedback: str = ''


# -- Weekly report ------------------------------------------------------------

class ProgressReportInput(FlowInput):
    user_id: str = Field(min_length=1)
    start_date: str
    end_date: str
    learning_data: str = Field(min_length=1)

    @field_validator('start_date', 'end_date')
    @classmethod
    def _iso_date(cls, v: str) -> str:
        parts = v.split('-')
        if len(parts) != 3 or not all(p.isdigit() for p in parts):
            raise ValueError('dates must be YYYY-MM-DD')
        return v


class ProgressReportOutput(FlowOutput):
    report: str = Field(min_length=1)


# -- Help and doubts ----------------------------------------------------------

class AskQuestionInput(FlowInput):
    question: str = Field(min_length=3)


class SolveDoubtInput(FlowInput):
    doubt: str = Field(min_length=3)


class AnswerOutput(FlowOutput):
    answer: str = Field(min_length=1)
