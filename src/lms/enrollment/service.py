"""Enrollment record manager — creates, reads and updates module enrollments."""

from __future__ import annotations

import math

import structlog
from sqlalchemy import case, func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from lms.catalog.service import get_module
from lms.changelog.sink import CHANGE_MODULE, ChangeLogSink, DatabaseChangeLog
from lms.clock import Clock, utc_now
from lms.db.models import (
    STATUS_COMPLETED,
    STATUS_IN_PROGRESS,
    STATUS_TODO,
    Domain,
    DomainModule,
    Module,
    User,
    UserDomain,
    UserModule,
)
from lms.enrollment.resolver import get_enrollment_scope
from lms.enrollment.status import EnrollmentPatch, apply_enrollment_patch, validate_status
from lms.errors import NotFoundError
from lms.users.service import get_active_user, is_active

logger = structlog.get_logger()

# Outcome filters for module learner lists
OUTCOME_PASSED = "passed"
OUTCOME_FAILED = "failed"


def enrollment_to_dict(enrollment: UserModule) -> dict:
    return {
        "id": enrollment.id,
        "user_domain_id": enrollment.user_domain_id,
        "module_id": enrollment.module_id,
        "questions_answered": enrollment.questions_answered,
        "score": enrollment.score,
        "threshold_score": enrollment.threshold_score,
        "status": enrollment.status,
        "last_quiz_result": enrollment.last_quiz_result,
        "passed": enrollment.score >= enrollment.threshold_score,
        "joined_on": enrollment.joined_on,
        "completed_on": enrollment.completed_on,
    }


class EnrollmentService:
    """Owns every read and write of UserModule rows."""

    def __init__(
        self,
        db: AsyncSession,
        clock: Clock = utc_now,
        changelog: ChangeLogSink | None = None,
    ) -> None:
        self.db = db
        self.clock = clock
        self.changelog = changelog or DatabaseChangeLog(db, clock)

    # --- Scope-addressed operations ---

    async def enroll(self, user_id: int, module_id: int, domain_id: int | None = None) -> dict:
        """Enroll a user in a module. Idempotent per (scope, module)."""
        await get_active_user(self.db, user_id)
        module = await get_module(self.db, module_id)
        user_domain_id = await get_enrollment_scope(self.db, user_id, module_id, domain_id)

        existing = await self._find(user_domain_id, module_id)
        if existing:
            return {"enrollment": existing, "already_enrolled": True}

        enrollment = UserModule(
            user_domain_id=user_domain_id,
            module_id=module_id,
            status=STATUS_TODO,
            questions_answered=0,
            score=0,
            threshold_score=module.threshold_score,
            joined_on=self.clock(),
        )
        try:
            async with self.db.begin_nested():
                self.db.add(enrollment)
        except IntegrityError:
            # Lost a race with a concurrent enroll for the same scope+module
            existing = await self._find(user_domain_id, module_id)
            if existing is None:
                raise
            return {"enrollment": existing, "already_enrolled": True}

        await self.changelog.record_change(CHANGE_MODULE, enrollment.id, user_id, "enrolled")
        logger.info(
            "enrollment_created",
            enrollment_id=enrollment.id,
            user_id=user_id,
            module_id=module_id,
            user_domain_id=user_domain_id,
        )
        return {"enrollment": enrollment, "already_enrolled": False}

    async def get_enrollment(self, user_id: int, module_id: int, domain_id: int | None = None) -> UserModule:
        """Get the enrollment for the resolved scope."""
        await get_active_user(self.db, user_id)
        user_domain_id = await get_enrollment_scope(self.db, user_id, module_id, domain_id)
        enrollment = await self._find(user_domain_id, module_id)
        if enrollment is None:
            domain_msg = f" in domain {domain_id}" if domain_id else ""
            raise NotFoundError(f"No enrollment found for user {user_id} in module {module_id}{domain_msg}")
        return enrollment

    async def update_enrollment(
        self,
        user_id: int,
        module_id: int,
        patch: EnrollmentPatch,
        domain_id: int | None = None,
        acting_user_id: int | None = None,
    ) -> UserModule:
        """Apply field updates, re-derive status, and log the change."""
        await get_active_user(self.db, user_id)
        if acting_user_id is not None and acting_user_id != user_id:
            await get_active_user(self.db, acting_user_id)
        user_domain_id = await get_enrollment_scope(self.db, user_id, module_id, domain_id)
        enrollment = await self._find(user_domain_id, module_id, for_update=True)
        if enrollment is None:
            domain_msg = f" in domain {domain_id}" if domain_id else ""
            raise NotFoundError(f"No enrollment found for user {user_id} in module {module_id}{domain_msg}")

        return await self._apply(enrollment, patch, acting_user_id or user_id)

    # --- Admin operations by enrollment id ---

    async def get_enrollment_by_id(self, enrollment_id: int) -> dict:
        """Enrollment with owner and domain details. Hidden once the owner is deleted."""
        result = await self.db.execute(
            select(UserModule, UserDomain, User, Domain, Module)
            .join(UserDomain, UserDomain.id == UserModule.user_domain_id)
            .join(User, User.id == UserDomain.user_id)
            .join(Domain, Domain.id == UserDomain.domain_id)
            .join(Module, Module.id == UserModule.module_id)
            .where(UserModule.id == enrollment_id)
        )
        row = result.one_or_none()
        if row is None:
            raise NotFoundError(f"Enrollment with ID {enrollment_id} not found")
        enrollment, user_domain, user, domain, module = row
        if not is_active(user):
            raise NotFoundError(f"Enrollment with ID {enrollment_id} not found or user has been deleted")

        data = enrollment_to_dict(enrollment)
        data.update(
            user_id=user.id,
            user_name=user.name,
            user_email=user.email,
            domain_id=domain.id,
            domain_name=domain.name,
            module_title=module.title,
        )
        return data

    async def update_enrollment_by_id(
        self,
        enrollment_id: int,
        patch: EnrollmentPatch,
        acting_user_id: int | None = None,
    ) -> UserModule:
        result = await self.db.execute(
            select(UserModule).where(UserModule.id == enrollment_id).with_for_update()
        )
        enrollment = result.scalar_one_or_none()
        if enrollment is None:
            raise NotFoundError(f"Enrollment with ID {enrollment_id} not found")

        user_domain = await self.db.get(UserDomain, enrollment.user_domain_id)
        await get_active_user(self.db, user_domain.user_id)
        if acting_user_id is not None:
            await get_active_user(self.db, acting_user_id)
        return await self._apply(enrollment, patch, acting_user_id or user_domain.user_id)

    # --- Listing & statistics ---

    async def list_user_enrollments(
        self,
        user_id: int,
        status: str | None = None,
        module_id: int | None = None,
        domain_id: int | None = None,
        page: int = 1,
        limit: int = 10,
    ) -> dict:
        """A user's enrollments across all scopes, newest first."""
        await get_active_user(self.db, user_id)
        return await self.list_all_enrollments(
            status=status, module_id=module_id, user_id=user_id, domain_id=domain_id, page=page, limit=limit
        )

    async def list_all_enrollments(
        self,
        status: str | None = None,
        module_id: int | None = None,
        user_id: int | None = None,
        domain_id: int | None = None,
        page: int = 1,
        limit: int = 10,
    ) -> dict:
        """Every enrollment of active users, filtered, newest first."""
        filters = [User.deleted_on.is_(None)]
        if status:
            validate_status(status)
            filters.append(UserModule.status == status)
        if module_id:
            filters.append(UserModule.module_id == module_id)
        if user_id:
            filters.append(UserDomain.user_id == user_id)
        if domain_id:
            filters.append(UserDomain.domain_id == domain_id)
        return await self._enrollment_page(filters, page, limit)

    async def list_module_learners(
        self,
        module_id: int,
        status: str | None = None,
        score_min: float | None = None,
        score_max: float | None = None,
        page: int = 1,
        limit: int = 10,
    ) -> dict:
        """Active learners enrolled in a module.

        ``status`` accepts an enrollment status or one of the outcomes:
        ``passed`` (completed at or above the threshold) and ``failed``
        (started but below the threshold).
        """
        await get_module(self.db, module_id)

        filters = [UserModule.module_id == module_id, User.deleted_on.is_(None)]
        if status == OUTCOME_PASSED:
            filters += [UserModule.status == STATUS_COMPLETED, UserModule.score >= UserModule.threshold_score]
        elif status == OUTCOME_FAILED:
            filters += [UserModule.status != STATUS_TODO, UserModule.score < UserModule.threshold_score]
        elif status:
            validate_status(status)
            filters.append(UserModule.status == status)
        if score_min is not None:
            filters.append(UserModule.score >= score_min)
        if score_max is not None:
            filters.append(UserModule.score <= score_max)
        return await self._enrollment_page(filters, page, limit)

    async def get_passed_learners(self, module_id: int, page: int = 1, limit: int = 10) -> dict:
        return await self.list_module_learners(module_id, status=OUTCOME_PASSED, page=page, limit=limit)

    async def get_failed_learners(self, module_id: int, page: int = 1, limit: int = 10) -> dict:
        return await self.list_module_learners(module_id, status=OUTCOME_FAILED, page=page, limit=limit)

    async def list_available_modules(self, user_id: int, domain_id: int | None = None) -> list[dict]:
        """Modules offered through the user's domains that the scope has not enrolled in."""
        await get_active_user(self.db, user_id)

        query = (
            select(Module, UserDomain.domain_id, Domain.name)
            .join(DomainModule, DomainModule.module_id == Module.id)
            .join(UserDomain, UserDomain.domain_id == DomainModule.domain_id)
            .join(Domain, Domain.id == UserDomain.domain_id)
            .outerjoin(
                UserModule,
                (UserModule.module_id == Module.id) & (UserModule.user_domain_id == UserDomain.id),
            )
            .where(UserDomain.user_id == user_id, UserModule.id.is_(None))
            .order_by(Module.id, Domain.name)
        )
        if domain_id:
            query = query.where(UserDomain.domain_id == domain_id)

        result = await self.db.execute(query)

        modules: dict[int, dict] = {}
        for module, available_domain_id, domain_name in result.all():
            entry = modules.setdefault(
                module.id,
                {
                    "id": module.id,
                    "title": module.title,
                    "description": module.description,
                    "duration": module.duration,
                    "level": module.level,
                    "domain_ids": [],
                    "domain_names": [],
                },
            )
            entry["domain_ids"].append(available_domain_id)
            entry["domain_names"].append(domain_name)
        return list(modules.values())

    async def get_module_stats(self, module_id: int) -> dict:
        """Enrollment counts and score aggregates for a module (active users only)."""
        module = await get_module(self.db, module_id)

        result = await self.db.execute(
            select(
                func.count(UserModule.id),
                func.count(case((UserModule.status == STATUS_COMPLETED, 1))),
                func.count(case((UserModule.status == STATUS_IN_PROGRESS, 1))),
                func.count(case((UserModule.status == STATUS_TODO, 1))),
                func.count(case((UserModule.score >= UserModule.threshold_score, 1))),
                func.avg(UserModule.score),
                func.max(UserModule.score),
                func.min(UserModule.score),
            )
            .join(UserDomain, UserDomain.id == UserModule.user_domain_id)
            .join(User, User.id == UserDomain.user_id)
            .where(UserModule.module_id == module_id, User.deleted_on.is_(None))
        )
        total, completed, in_progress, todo, passed, avg_score, max_score, min_score = result.one()

        return {
            "module_id": module.id,
            "module_title": module.title,
            "total_enrolled": total,
            "completed": completed,
            "in_progress": in_progress,
            "todo": todo,
            "passed": passed,
            "pass_rate": round(passed / total * 100, 2) if total else 0.0,
            "average_score": round(float(avg_score or 0), 2),
            "highest_score": float(max_score or 0),
            "lowest_score": float(min_score or 0),
        }

    # --- Internals ---

    async def _find(self, user_domain_id: int, module_id: int, for_update: bool = False) -> UserModule | None:
        query = select(UserModule).where(
            UserModule.user_domain_id == user_domain_id,
            UserModule.module_id == module_id,
        )
        if for_update:
            query = query.with_for_update()
        result = await self.db.execute(query)
        return result.scalar_one_or_none()

    async def _enrollment_page(self, filters: list, page: int, limit: int) -> dict:
        base = (
            select(UserModule)
            .join(UserDomain, UserDomain.id == UserModule.user_domain_id)
            .join(User, User.id == UserDomain.user_id)
            .where(*filters)
        )
        total_result = await self.db.execute(select(func.count()).select_from(base.subquery()))
        total = total_result.scalar() or 0

        result = await self.db.execute(
            select(UserModule, User, Domain.id, Domain.name, Module.title)
            .join(UserDomain, UserDomain.id == UserModule.user_domain_id)
            .join(User, User.id == UserDomain.user_id)
            .join(Domain, Domain.id == UserDomain.domain_id)
            .join(Module, Module.id == UserModule.module_id)
            .where(*filters)
            .order_by(UserModule.joined_on.desc(), UserModule.id.desc())
            .offset((page - 1) * limit)
            .limit(limit)
        )

        data = []
        for enrollment, user, domain_id, domain_name, module_title in result.all():
            item = enrollment_to_dict(enrollment)
            item.update(
                user_id=user.id,
                user_name=user.name,
                user_email=user.email,
                domain_id=domain_id,
                domain_name=domain_name,
                module_title=module_title,
            )
            data.append(item)

        return {
            "data": data,
            "total": total,
            "page": page,
            "limit": limit,
            "total_pages": math.ceil(total / limit) if limit else 0,
        }

    async def _apply(self, enrollment: UserModule, patch: EnrollmentPatch, actor_id: int) -> UserModule:
        now = self.clock()
        apply_enrollment_patch(enrollment, patch, now)
        enrollment.updated_on = now
        await self.db.flush()

        await self.changelog.record_change(CHANGE_MODULE, enrollment.id, actor_id, patch.reason)
        logger.info(
            "enrollment_updated",
            enrollment_id=enrollment.id,
            status=enrollment.status,
            score=enrollment.score,
        )
        return enrollment
