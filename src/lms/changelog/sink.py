"""Change log sink — append-only audit entries written after a mutation."""

from __future__ import annotations

from typing import Protocol

import structlog
from sqlalchemy.ext.asyncio import AsyncSession

from lms.clock import Clock, utc_now
from lms.db.models import ChangeLogEntry

logger = structlog.get_logger()

# Change type tags
CHANGE_MODULE = "module"
CHANGE_QUIZ = "quiz"
CHANGE_QUESTION = "quiz-question"
CHANGE_OPTION = "quiz-question-option"
CHANGE_TOOL = "tool"
CHANGE_USER_TOOL = "user-tool"


class ChangeLogSink(Protocol):
    """Outward collaborator receiving audit entries."""

    async def record_change(
        self,
        change_type: str,
        change_type_id: int,
        user_id: int,
        reason: str | None = None,
    ) -> None: ...


class DatabaseChangeLog:
    """Writes entries to the ``change_log`` table in the caller's session.

    A failed audit write is logged and does not roll back the primary mutation.
    """

    def __init__(self, db: AsyncSession, clock: Clock = utc_now) -> None:
        self.db = db
        self.clock = clock

    async def record_change(
        self,
        change_type: str,
        change_type_id: int,
        user_id: int,
        reason: str | None = None,
    ) -> None:
        entry = ChangeLogEntry(
            change_type=change_type,
            change_type_id=change_type_id,
            user_id=user_id,
            reason=reason,
            updated_on=self.clock(),
        )
        try:
            async with self.db.begin_nested():
                self.db.add(entry)
        except Exception:
            logger.warning(
                "changelog_write_failed",
                change_type=change_type,
                change_type_id=change_type_id,
                exc_info=True,
            )
