"""Tool assignment and switch controller.

Rules:
- One active tool per enrollment scope (user_domain)
- ``assign`` only creates; an existing assignment must be switched
- Switching to the current tool is a conflict, whatever the elapsed time
- Switches are rate limited by a cooldown measured from the last update
"""

from __future__ import annotations

import structlog
from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from lms.catalog.service import get_user_domain
from lms.changelog.sink import CHANGE_TOOL, CHANGE_USER_TOOL, ChangeLogSink, DatabaseChangeLog
from lms.clock import Clock, utc_now
from lms.config import get_settings
from lms.db.models import Tool, UserTool
from lms.errors import ConflictError, NotFoundError, RateLimitedError
from lms.tools.cooldown import cooldown_elapsed, remaining_days
from lms.users.service import get_active_user

logger = structlog.get_logger()


class ToolService:
    def __init__(
        self,
        db: AsyncSession,
        clock: Clock = utc_now,
        changelog: ChangeLogSink | None = None,
    ) -> None:
        self.db = db
        self.clock = clock
        self.changelog = changelog or DatabaseChangeLog(db, clock)

    # --- Catalog ---

    async def create_tool(self, name: str, description: str | None = None) -> Tool:
        existing = await self.db.execute(select(Tool).where(func.lower(Tool.name) == name.lower()))
        if existing.scalar_one_or_none():
            raise ConflictError(f'Tool "{name}" already exists')

        tool = Tool(name=name, description=description)
        self.db.add(tool)
        await self.db.flush()
        logger.info("tool_created", tool_id=tool.id)
        return tool

    async def list_tools(self) -> list[Tool]:
        result = await self.db.execute(select(Tool).order_by(Tool.name))
        return list(result.scalars().all())

    async def get_tool(self, tool_id: int) -> Tool:
        tool = await self.db.get(Tool, tool_id)
        if tool is None:
            raise NotFoundError(f"Tool with ID {tool_id} not found")
        return tool

    async def update_tool(
        self,
        tool_id: int,
        user_id: int,
        reason: str | None = None,
        name: str | None = None,
        description: str | None = None,
    ) -> Tool:
        """Rename or re-describe a tool. Names stay unique (case-insensitive)."""
        await get_active_user(self.db, user_id)
        tool = await self.get_tool(tool_id)

        if name is not None and name.lower() != tool.name.lower():
            existing = await self.db.execute(
                select(Tool.id).where(func.lower(Tool.name) == name.lower(), Tool.id != tool_id)
            )
            if existing.scalar_one_or_none() is not None:
                raise ConflictError(f'Tool "{name}" already exists')

        if name is not None:
            tool.name = name
        if description is not None:
            tool.description = description
        await self.db.flush()

        await self.changelog.record_change(CHANGE_TOOL, tool_id, user_id, reason)
        logger.info("tool_updated", tool_id=tool_id, user_id=user_id)
        return tool

    # --- Assignments ---

    async def get_assignment(self, user_domain_id: int) -> UserTool:
        await get_user_domain(self.db, user_domain_id)
        assignment = await self._find(user_domain_id)
        if assignment is None:
            raise NotFoundError(f"No tool assigned to user-domain scope {user_domain_id}")
        return assignment

    async def assign(self, user_domain_id: int, tool_id: int, acting_user_id: int | None = None) -> UserTool:
        """Give a scope its first tool. Never overwrites an existing assignment."""
        if acting_user_id is not None:
            await get_active_user(self.db, acting_user_id)
        await self.get_tool(tool_id)
        user_domain = await get_user_domain(self.db, user_domain_id)

        if await self._find(user_domain_id) is not None:
            raise ConflictError(
                f"User-domain scope {user_domain_id} already has a tool assigned. Use switch to change it."
            )

        now = self.clock()
        assignment = UserTool(user_domain_id=user_domain_id, tool_id=tool_id, created_on=now, updated_on=now)
        try:
            async with self.db.begin_nested():
                self.db.add(assignment)
        except IntegrityError:
            raise ConflictError(
                f"User-domain scope {user_domain_id} already has a tool assigned. Use switch to change it."
            ) from None

        await self.changelog.record_change(
            CHANGE_USER_TOOL, user_domain.user_id, acting_user_id or user_domain.user_id, "tool assigned"
        )
        logger.info("tool_assigned", user_domain_id=user_domain_id, tool_id=tool_id)
        return assignment

    async def switch(self, user_domain_id: int, tool_id: int, reason: str, acting_user_id: int) -> UserTool:
        """Replace a scope's tool once the cooldown since its last change has elapsed."""
        await get_active_user(self.db, acting_user_id)
        await self.get_tool(tool_id)
        user_domain = await get_user_domain(self.db, user_domain_id)

        assignment = await self._find(user_domain_id, for_update=True)
        if assignment is None:
            raise NotFoundError(
                f"No tool assigned to user-domain scope {user_domain_id}. Use assign to create one."
            )

        if assignment.tool_id == tool_id:
            raise ConflictError("The requested tool is already assigned to this scope")

        cooldown = get_settings().tool_switch_cooldown_days
        now = self.clock()
        if not cooldown_elapsed(assignment.updated_on, now, cooldown):
            left = remaining_days(assignment.updated_on, now, cooldown)
            logger.warning(
                "tool_switch_rate_limited",
                user_domain_id=user_domain_id,
                remaining_days=left,
            )
            raise RateLimitedError(
                f"You can only switch tools once every {cooldown} days. Try again in {left} days.",
                left,
            )

        previous_tool_id = assignment.tool_id
        assignment.tool_id = tool_id
        assignment.updated_on = now
        await self.db.flush()

        await self.changelog.record_change(CHANGE_USER_TOOL, user_domain.user_id, acting_user_id, reason)
        logger.info(
            "tool_switched",
            user_domain_id=user_domain_id,
            from_tool_id=previous_tool_id,
            to_tool_id=tool_id,
        )
        return assignment

    async def _find(self, user_domain_id: int, for_update: bool = False) -> UserTool | None:
        query = select(UserTool).where(UserTool.user_domain_id == user_domain_id)
        if for_update:
            query = query.with_for_update()
        result = await self.db.execute(query)
        return result.scalar_one_or_none()
