"""Pydantic schemas for tool endpoints."""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field, PositiveInt


class CreateToolRequest(BaseModel):
    name: str = Field(..., min_length=1, max_length=120)
    description: str | None = Field(None, max_length=1000)


class ToolResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    description: str | None = None


class UpdateToolRequest(BaseModel):
    user_id: PositiveInt
    reason: str | None = Field(None, max_length=500)
    name: str | None = Field(None, min_length=1, max_length=120)
    description: str | None = Field(None, max_length=1000)


class AssignToolRequest(BaseModel):
    user_domain_id: PositiveInt
    tool_id: PositiveInt
    acting_user_id: PositiveInt | None = None


class SwitchToolRequest(BaseModel):
    tool_id: PositiveInt
    reason: str = Field(..., min_length=1, max_length=500)
    acting_user_id: PositiveInt


class UserToolResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    user_domain_id: int
    tool_id: int
    created_on: datetime
    updated_on: datetime
