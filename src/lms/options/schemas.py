"""Pydantic schemas for option endpoints."""

from __future__ import annotations

from pydantic import BaseModel, Field, PositiveInt


class CreateOptionRequest(BaseModel):
    option_text: str = Field(..., min_length=1, max_length=1000)
    is_correct: bool = False


class AssignOptionsRequest(BaseModel):
    option_ids: list[PositiveInt] = Field(..., min_length=1)
    acting_user_id: PositiveInt | None = None


class DeleteOptionRequest(BaseModel):
    reason: str = Field(..., min_length=1, max_length=500)
    user_id: PositiveInt


class OptionResponse(BaseModel):
    id: int
    question_id: int | None = None
    option_text: str
    is_correct: bool


class AssignOptionsResponse(BaseModel):
    question_id: int
    assigned_option_ids: list[int]
    total_options: int


class UpdateOptionRequest(BaseModel):
    user_id: PositiveInt
    reason: str | None = Field(None, max_length=500)
    option_text: str | None = Field(None, min_length=1, max_length=1000)
    is_correct: bool | None = None


class UnassignOptionsRequest(BaseModel):
    user_id: PositiveInt
    reason: str | None = Field(None, max_length=500)
    option_ids: list[PositiveInt] | None = None


class UnassignOptionsResponse(BaseModel):
    question_id: int
    unassigned_option_ids: list[int]
    total_options: int
