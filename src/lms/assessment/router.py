"""Quiz attempt API endpoints."""

from __future__ import annotations

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from lms.assessment.schemas import AttemptQuizRequest, AttemptResultResponse, QuizResultResponse
from lms.assessment.scoring import Answer
from lms.assessment.service import QuizAttemptService
from lms.clock import Clock
from lms.database import get_session
from lms.dependencies import get_clock

router = APIRouter(prefix="/api/v1/quizzes", tags=["Assessment"])


@router.post("/{quiz_id}/attempts", response_model=AttemptResultResponse, status_code=201)
async def attempt_quiz(
    quiz_id: int,
    body: AttemptQuizRequest,
    db: AsyncSession = Depends(get_session),
    clock: Clock = Depends(get_clock),
) -> dict:
    """Score an attempt. Replaces the enrollment's previous score."""
    answers = [Answer(a.question_id, a.selected_option_id) for a in body.answers]
    result = await QuizAttemptService(db, clock=clock).attempt_quiz(
        body.user_id, quiz_id, answers, domain_id=body.domain_id
    )
    await db.commit()
    return result


@router.get("/{quiz_id}/results/{user_id}", response_model=QuizResultResponse)
async def get_quiz_result(
    quiz_id: int,
    user_id: int,
    domain_id: int | None = None,
    db: AsyncSession = Depends(get_session),
) -> dict:
    return await QuizAttemptService(db).get_quiz_result(user_id, quiz_id, domain_id)
