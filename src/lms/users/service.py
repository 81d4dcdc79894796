"""User lookups and the single active-user capability check."""

from __future__ import annotations

import structlog
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from lms.clock import Clock, utc_now
from lms.db.models import User
from lms.errors import ConflictError, NotFoundError

logger = structlog.get_logger()


def is_active(user: User | None) -> bool:
    """A user is active when present and not soft-deleted."""
    return user is not None and user.deleted_on is None


async def get_user(db: AsyncSession, user_id: int) -> User | None:
    """Get a user by ID, deleted or not."""
    return await db.get(User, user_id)


async def get_active_user(db: AsyncSession, user_id: int) -> User:
    """Return the user if active, else raise NotFoundError."""
    user = await get_user(db, user_id)
    if user is None:
        raise NotFoundError(f"User with ID {user_id} not found")
    if not is_active(user):
        raise NotFoundError(f"User with ID {user_id} has been deleted")
    return user


async def create_user(db: AsyncSession, name: str, email: str) -> User:
    """Create a user. Emails are unique (case-insensitive)."""
    existing = await db.execute(select(User).where(func.lower(User.email) == email.lower()))
    if existing.scalar_one_or_none():
        raise ConflictError(f'User with email "{email}" already exists')

    user = User(name=name, email=email)
    db.add(user)
    await db.flush()
    logger.info("user_created", user_id=user.id)
    return user


async def soft_delete_user(db: AsyncSession, user_id: int, clock: Clock = utc_now) -> User:
    """Mark a user deleted. Their enrollment history is kept."""
    user = await get_active_user(db, user_id)
    user.deleted_on = clock()
    await db.flush()
    logger.info("user_soft_deleted", user_id=user_id)
    return user
