"""User API endpoints."""

from __future__ import annotations

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from lms.clock import Clock
from lms.database import get_session
from lms.dependencies import get_clock
from lms.errors import NotFoundError
from lms.users.schemas import CreateUserRequest, UserResponse
from lms.users.service import create_user, get_user, soft_delete_user

router = APIRouter(prefix="/api/v1/users", tags=["Users"])


@router.post("", response_model=UserResponse, status_code=201)
async def create_user_endpoint(body: CreateUserRequest, db: AsyncSession = Depends(get_session)) -> UserResponse:
    user = await create_user(db, body.name, body.email)
    await db.commit()
    return UserResponse.model_validate(user)


@router.get("/{user_id}", response_model=UserResponse)
async def get_user_endpoint(user_id: int, db: AsyncSession = Depends(get_session)) -> UserResponse:
    user = await get_user(db, user_id)
    if user is None:
        raise NotFoundError(f"User with ID {user_id} not found")
    return UserResponse.model_validate(user)


@router.delete("/{user_id}", response_model=UserResponse)
async def delete_user_endpoint(
    user_id: int,
    db: AsyncSession = Depends(get_session),
    clock: Clock = Depends(get_clock),
) -> UserResponse:
    """Soft-delete a user. Their enrollments stay on record."""
    user = await soft_delete_user(db, user_id, clock)
    await db.commit()
    return UserResponse.model_validate(user)
