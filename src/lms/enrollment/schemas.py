"""Pydantic schemas for enrollment endpoints."""

from __future__ import annotations

from datetime import datetime
from typing import Literal

from pydantic import BaseModel, Field, PositiveInt

EnrollmentStatus = Literal["todo", "inProgress", "completed"]
LearnerFilter = Literal["todo", "inProgress", "completed", "passed", "failed"]


class EnrollRequest(BaseModel):
    user_id: PositiveInt
    module_id: PositiveInt
    domain_id: PositiveInt | None = None


class UpdateEnrollmentRequest(BaseModel):
    questions_answered: int | None = Field(None, ge=0)
    score: float | None = Field(None, ge=0, le=100)
    threshold_score: float | None = Field(None, ge=0, le=100)
    status: EnrollmentStatus | None = None
    completed_on: datetime | None = None
    reason: str | None = Field(None, max_length=500)
    acting_user_id: PositiveInt | None = None


class EnrollmentResponse(BaseModel):
    id: int
    user_domain_id: int
    module_id: int
    questions_answered: int
    score: float
    threshold_score: float
    status: EnrollmentStatus
    last_quiz_result: str | None = None
    passed: bool
    joined_on: datetime
    completed_on: datetime | None = None


class EnrollResponse(BaseModel):
    enrollment: EnrollmentResponse
    already_enrolled: bool


class EnrollmentDetailResponse(EnrollmentResponse):
    user_id: int
    user_name: str
    user_email: str
    domain_id: int
    domain_name: str
    module_title: str


class EnrollmentListItem(EnrollmentResponse):
    domain_id: int
    domain_name: str
    module_title: str


class EnrollmentListResponse(BaseModel):
    data: list[EnrollmentListItem]
    total: int
    page: int
    limit: int
    total_pages: int


class LearnerEnrollmentItem(EnrollmentListItem):
    user_id: int
    user_name: str
    user_email: str


class LearnerEnrollmentListResponse(BaseModel):
    data: list[LearnerEnrollmentItem]
    total: int
    page: int
    limit: int
    total_pages: int


class AvailableModuleResponse(BaseModel):
    id: int
    title: str
    description: str
    duration: int
    level: str | None = None
    domain_ids: list[int]
    domain_names: list[str]


class ModuleStatsResponse(BaseModel):
    module_id: int
    module_title: str
    total_enrolled: int
    completed: int
    in_progress: int
    todo: int
    passed: int
    pass_rate: float
    average_score: float
    highest_score: float
    lowest_score: float
