"""Enrollment API endpoints."""

from __future__ import annotations

from fastapi import APIRouter, Depends, Query, Response
from sqlalchemy.ext.asyncio import AsyncSession

from lms.clock import Clock
from lms.database import get_session
from lms.dependencies import get_clock
from lms.enrollment.schemas import (
    AvailableModuleResponse,
    EnrollmentDetailResponse,
    EnrollmentListResponse,
    EnrollmentResponse,
    EnrollmentStatus,
    EnrollRequest,
    EnrollResponse,
    LearnerEnrollmentListResponse,
    LearnerFilter,
    ModuleStatsResponse,
    UpdateEnrollmentRequest,
)
from lms.enrollment.service import EnrollmentService, enrollment_to_dict
from lms.enrollment.status import EnrollmentPatch

router = APIRouter(prefix="/api/v1", tags=["Enrollment"])


def _patch_from(body: UpdateEnrollmentRequest) -> EnrollmentPatch:
    return EnrollmentPatch(**body.model_dump(exclude={"acting_user_id"}))


@router.post("/enrollments", response_model=EnrollResponse, status_code=201)
async def enroll(
    body: EnrollRequest,
    response: Response,
    db: AsyncSession = Depends(get_session),
    clock: Clock = Depends(get_clock),
) -> dict:
    """Enroll a user in a module. Re-enrolling returns the existing row with 200."""
    svc = EnrollmentService(db, clock=clock)
    result = await svc.enroll(body.user_id, body.module_id, body.domain_id)
    await db.commit()
    if result["already_enrolled"]:
        response.status_code = 200
    return {
        "enrollment": enrollment_to_dict(result["enrollment"]),
        "already_enrolled": result["already_enrolled"],
    }


@router.get("/enrollments", response_model=LearnerEnrollmentListResponse)
async def list_all_enrollments(
    status: EnrollmentStatus | None = None,
    module_id: int | None = None,
    user_id: int | None = None,
    domain_id: int | None = None,
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
    db: AsyncSession = Depends(get_session),
) -> dict:
    """Admin listing of every active user's enrollments."""
    return await EnrollmentService(db).list_all_enrollments(
        status=status, module_id=module_id, user_id=user_id, domain_id=domain_id, page=page, limit=limit
    )


@router.get("/enrollments/{enrollment_id}", response_model=EnrollmentDetailResponse)
async def get_enrollment_by_id(
    enrollment_id: int,
    db: AsyncSession = Depends(get_session),
) -> dict:
    return await EnrollmentService(db).get_enrollment_by_id(enrollment_id)


@router.patch("/enrollments/{enrollment_id}", response_model=EnrollmentResponse)
async def update_enrollment_by_id(
    enrollment_id: int,
    body: UpdateEnrollmentRequest,
    db: AsyncSession = Depends(get_session),
    clock: Clock = Depends(get_clock),
) -> dict:
    svc = EnrollmentService(db, clock=clock)
    enrollment = await svc.update_enrollment_by_id(enrollment_id, _patch_from(body), body.acting_user_id)
    await db.commit()
    return enrollment_to_dict(enrollment)


@router.get("/users/{user_id}/modules", response_model=EnrollmentListResponse)
async def list_user_enrollments(
    user_id: int,
    status: EnrollmentStatus | None = None,
    module_id: int | None = None,
    domain_id: int | None = None,
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
    db: AsyncSession = Depends(get_session),
) -> dict:
    """A user's enrollments across every domain, newest first."""
    return await EnrollmentService(db).list_user_enrollments(
        user_id, status=status, module_id=module_id, domain_id=domain_id, page=page, limit=limit
    )


@router.get("/users/{user_id}/available-modules", response_model=list[AvailableModuleResponse])
async def list_available_modules(
    user_id: int,
    domain_id: int | None = None,
    db: AsyncSession = Depends(get_session),
) -> list[dict]:
    return await EnrollmentService(db).list_available_modules(user_id, domain_id)


@router.get("/users/{user_id}/modules/{module_id}", response_model=EnrollmentResponse)
async def get_enrollment(
    user_id: int,
    module_id: int,
    domain_id: int | None = None,
    db: AsyncSession = Depends(get_session),
) -> dict:
    enrollment = await EnrollmentService(db).get_enrollment(user_id, module_id, domain_id)
    return enrollment_to_dict(enrollment)


@router.patch("/users/{user_id}/modules/{module_id}", response_model=EnrollmentResponse)
async def update_enrollment(
    user_id: int,
    module_id: int,
    body: UpdateEnrollmentRequest,
    domain_id: int | None = None,
    db: AsyncSession = Depends(get_session),
    clock: Clock = Depends(get_clock),
) -> dict:
    """Update score/threshold/status; the status is re-derived from a new score."""
    svc = EnrollmentService(db, clock=clock)
    enrollment = await svc.update_enrollment(
        user_id, module_id, _patch_from(body), domain_id=domain_id, acting_user_id=body.acting_user_id
    )
    await db.commit()
    return enrollment_to_dict(enrollment)


@router.get("/modules/{module_id}/stats", response_model=ModuleStatsResponse)
async def module_stats(
    module_id: int,
    db: AsyncSession = Depends(get_session),
) -> dict:
    return await EnrollmentService(db).get_module_stats(module_id)


@router.get("/modules/{module_id}/users", response_model=LearnerEnrollmentListResponse)
async def list_module_learners(
    module_id: int,
    status: LearnerFilter | None = None,
    score_min: float | None = Query(None, ge=0, le=100),
    score_max: float | None = Query(None, ge=0, le=100),
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
    db: AsyncSession = Depends(get_session),
) -> dict:
    """Learners of a module, filterable by status, outcome and score range."""
    return await EnrollmentService(db).list_module_learners(
        module_id, status=status, score_min=score_min, score_max=score_max, page=page, limit=limit
    )


@router.get("/modules/{module_id}/users/passed", response_model=LearnerEnrollmentListResponse)
async def list_passed_learners(
    module_id: int,
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
    db: AsyncSession = Depends(get_session),
) -> dict:
    return await EnrollmentService(db).get_passed_learners(module_id, page=page, limit=limit)


@router.get("/modules/{module_id}/users/failed", response_model=LearnerEnrollmentListResponse)
async def list_failed_learners(
    module_id: int,
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
    db: AsyncSession = Depends(get_session),
) -> dict:
    return await EnrollmentService(db).get_failed_learners(module_id, page=page, limit=limit)
