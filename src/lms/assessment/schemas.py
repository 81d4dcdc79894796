"""Pydantic schemas for quiz attempt endpoints."""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, Field, PositiveInt


class AnswerItem(BaseModel):
    question_id: PositiveInt
    selected_option_id: PositiveInt


class AttemptQuizRequest(BaseModel):
    user_id: PositiveInt
    domain_id: PositiveInt | None = None
    answers: list[AnswerItem] = Field(..., min_length=1)


class AttemptResultResponse(BaseModel):
    quiz_id: int
    user_id: int
    enrollment_id: int
    total_questions: int
    attempted: int
    evaluated: int
    correct: int
    marks_obtained: float
    max_marks: int
    percentage: float
    score_percentage: str
    status: str
    enrollment_status: str


class QuizResultResponse(BaseModel):
    user_id: int
    quiz_id: int
    module_id: int
    enrollment_id: int
    questions_answered: int
    score: float
    status: str
    result: str | None = None
    completed_on: datetime | None = None
