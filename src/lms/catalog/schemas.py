"""Pydantic schemas for catalog endpoints."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field, PositiveInt


class CreateDomainRequest(BaseModel):
    name: str = Field(..., min_length=1, max_length=100)
    description: str | None = None


class DomainResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    description: str | None = None


class CreateModuleRequest(BaseModel):
    title: str = Field(..., min_length=1, max_length=200)
    description: str = ""
    duration: int = Field(0, ge=0)
    level: str | None = Field(None, max_length=50)
    threshold_score: float | None = Field(None, ge=0, le=100)


class ModuleResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    title: str
    description: str
    duration: int
    level: str | None = None
    threshold_score: float


class LinkDomainsRequest(BaseModel):
    domain_ids: list[PositiveInt] = Field(..., min_length=1)


class LinkReportResponse(BaseModel):
    linked: list[int]
    skipped: list[int]
    invalid: list[int]
    duplicates: list[int] = []


class UserDomainResponse(BaseModel):
    user_domain_id: int
    domain_id: int
    name: str
    description: str | None = None


class CreateQuizRequest(BaseModel):
    module_id: PositiveInt
    title: str = Field(..., min_length=1, max_length=200)


class QuizResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    module_id: int
    title: str


class CreateQuestionRequest(BaseModel):
    question: str = Field(..., min_length=1)
    marks: int = Field(0, ge=0)
    order_in_quiz: int | None = Field(None, ge=1)


class QuestionResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    quiz_id: int
    question: str
    marks: int | None = None
    order_in_quiz: int | None = None


class ChangeRequest(BaseModel):
    """Who made a change and why; written to the change log."""

    user_id: PositiveInt
    reason: str | None = Field(None, max_length=500)


class UpdateQuizRequest(ChangeRequest):
    title: str | None = Field(None, min_length=1, max_length=200)


class UpdateQuestionRequest(ChangeRequest):
    question: str | None = Field(None, min_length=1)
    marks: int | None = Field(None, ge=0)
    order_in_quiz: int | None = Field(None, ge=1)


class DeleteQuizResponse(BaseModel):
    quiz_id: int
    deleted_question_ids: list[int]
    deleted_option_ids: list[int]


class DeleteQuestionResponse(BaseModel):
    question_id: int
    deleted_option_ids: list[int]
