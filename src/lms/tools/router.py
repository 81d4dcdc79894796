"""Tool API endpoints."""

from __future__ import annotations

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from lms.clock import Clock
from lms.database import get_session
from lms.dependencies import get_clock
from lms.tools.schemas import (
    AssignToolRequest,
    CreateToolRequest,
    SwitchToolRequest,
    ToolResponse,
    UpdateToolRequest,
    UserToolResponse,
)
from lms.tools.service import ToolService

router = APIRouter(prefix="/api/v1", tags=["Tools"])


@router.post("/tools", response_model=ToolResponse, status_code=201)
async def create_tool(
    body: CreateToolRequest,
    db: AsyncSession = Depends(get_session),
) -> ToolResponse:
    tool = await ToolService(db).create_tool(body.name, body.description)
    await db.commit()
    return ToolResponse.model_validate(tool)


@router.get("/tools", response_model=list[ToolResponse])
async def list_tools(db: AsyncSession = Depends(get_session)) -> list[ToolResponse]:
    tools = await ToolService(db).list_tools()
    return [ToolResponse.model_validate(t) for t in tools]


@router.patch("/tools/{tool_id}", response_model=ToolResponse)
async def update_tool(
    tool_id: int,
    body: UpdateToolRequest,
    db: AsyncSession = Depends(get_session),
    clock: Clock = Depends(get_clock),
) -> ToolResponse:
    tool = await ToolService(db, clock=clock).update_tool(
        tool_id, body.user_id, body.reason, name=body.name, description=body.description
    )
    await db.commit()
    return ToolResponse.model_validate(tool)


@router.post("/user-tools", response_model=UserToolResponse, status_code=201)
async def assign_tool(
    body: AssignToolRequest,
    db: AsyncSession = Depends(get_session),
    clock: Clock = Depends(get_clock),
) -> UserToolResponse:
    """Give a scope its first tool."""
    assignment = await ToolService(db, clock=clock).assign(
        body.user_domain_id, body.tool_id, acting_user_id=body.acting_user_id
    )
    await db.commit()
    return UserToolResponse.model_validate(assignment)


@router.get("/user-tools/{user_domain_id}", response_model=UserToolResponse)
async def get_assignment(
    user_domain_id: int,
    db: AsyncSession = Depends(get_session),
) -> UserToolResponse:
    assignment = await ToolService(db).get_assignment(user_domain_id)
    return UserToolResponse.model_validate(assignment)


@router.put("/user-tools/{user_domain_id}", response_model=UserToolResponse)
async def switch_tool(
    user_domain_id: int,
    body: SwitchToolRequest,
    db: AsyncSession = Depends(get_session),
    clock: Clock = Depends(get_clock),
) -> UserToolResponse:
    """Switch tools. Allowed once per cooldown period."""
    assignment = await ToolService(db, clock=clock).switch(
        user_domain_id, body.tool_id, body.reason, body.acting_user_id
    )
    await db.commit()
    return UserToolResponse.model_validate(assignment)
