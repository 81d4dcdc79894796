"""Quiz option API endpoints."""

from __future__ import annotations

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from lms.clock import Clock
from lms.database import get_session
from lms.dependencies import get_clock
from lms.options.schemas import (
    AssignOptionsRequest,
    AssignOptionsResponse,
    CreateOptionRequest,
    DeleteOptionRequest,
    OptionResponse,
    UnassignOptionsRequest,
    UnassignOptionsResponse,
    UpdateOptionRequest,
)
from lms.options.service import OptionService, option_to_dict

router = APIRouter(prefix="/api/v1", tags=["Options"])


@router.post("/options", response_model=OptionResponse, status_code=201)
async def create_option(
    body: CreateOptionRequest,
    db: AsyncSession = Depends(get_session),
) -> dict:
    option = await OptionService(db).create_option(body.option_text, body.is_correct)
    await db.commit()
    return option_to_dict(option)


@router.post("/questions/{question_id}/options", response_model=AssignOptionsResponse)
async def assign_options(
    question_id: int,
    body: AssignOptionsRequest,
    db: AsyncSession = Depends(get_session),
    clock: Clock = Depends(get_clock),
) -> dict:
    """Attach options so the question ends up with exactly four."""
    result = await OptionService(db, clock=clock).assign_options(
        question_id, body.option_ids, acting_user_id=body.acting_user_id
    )
    await db.commit()
    return result


@router.get("/questions/{question_id}/options", response_model=list[OptionResponse])
async def list_question_options(
    question_id: int,
    db: AsyncSession = Depends(get_session),
) -> list[dict]:
    options = await OptionService(db).list_question_options(question_id)
    return [option_to_dict(o) for o in options]


@router.delete("/questions/{question_id}/options", response_model=UnassignOptionsResponse)
async def unassign_options(
    question_id: int,
    body: UnassignOptionsRequest,
    db: AsyncSession = Depends(get_session),
    clock: Clock = Depends(get_clock),
) -> dict:
    """Detach the listed options, or all of them when no ids are given."""
    result = await OptionService(db, clock=clock).unassign_options(
        question_id, body.user_id, body.reason, body.option_ids
    )
    await db.commit()
    return result


@router.patch("/options/{option_id}", response_model=OptionResponse)
async def update_option(
    option_id: int,
    body: UpdateOptionRequest,
    db: AsyncSession = Depends(get_session),
    clock: Clock = Depends(get_clock),
) -> dict:
    option = await OptionService(db, clock=clock).update_option(
        option_id, body.user_id, body.reason, option_text=body.option_text, is_correct=body.is_correct
    )
    await db.commit()
    return option_to_dict(option)


@router.delete("/options/{option_id}", status_code=204)
async def delete_option(
    option_id: int,
    body: DeleteOptionRequest,
    db: AsyncSession = Depends(get_session),
    clock: Clock = Depends(get_clock),
) -> None:
    """Detach and delete an option. Past responses keep their rows."""
    await OptionService(db, clock=clock).delete_option(option_id, body.reason, body.user_id)
    await db.commit()
