"""Quiz scoring engine — grades an attempt and advances the enrollment."""

from __future__ import annotations

import structlog
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from lms.assessment.scoring import (
    Answer,
    classify_percentage,
    compute_percentage,
    enrollment_status_for,
    max_marks,
    score_answers,
)
from lms.catalog.service import get_quiz
from lms.changelog.sink import CHANGE_QUIZ, ChangeLogSink, DatabaseChangeLog
from lms.clock import Clock, utc_now
from lms.config import get_settings
from lms.db.models import (
    STATUS_COMPLETED,
    QuizQuestion,
    QuizQuestionOption,
    UserDomain,
    UserModule,
    UserQuizResponse,
)
from lms.errors import AmbiguousScopeError, NotEnrolledError, NotFoundError
from lms.users.service import get_active_user

logger = structlog.get_logger()


class QuizAttemptService:
    """Scores attempts and records per-answer responses."""

    def __init__(
        self,
        db: AsyncSession,
        clock: Clock = utc_now,
        changelog: ChangeLogSink | None = None,
    ) -> None:
        self.db = db
        self.clock = clock
        self.changelog = changelog or DatabaseChangeLog(db, clock)

    async def attempt_quiz(
        self,
        user_id: int,
        quiz_id: int,
        answers: list[Answer],
        domain_id: int | None = None,
    ) -> dict:
        """Grade ``answers`` and overwrite the enrollment's score and status."""
        await get_active_user(self.db, user_id)
        quiz = await get_quiz(self.db, quiz_id)

        questions_result = await self.db.execute(
            select(QuizQuestion.id, QuizQuestion.marks).where(QuizQuestion.quiz_id == quiz.id)
        )
        question_marks = dict(questions_result.all())

        option_ids = sorted({a.selected_option_id for a in answers})
        options_result = await self.db.execute(
            select(QuizQuestionOption.id, QuizQuestionOption.is_correct).where(
                QuizQuestionOption.id.in_(option_ids)
            )
        )
        option_correctness = dict(options_result.all())

        # Locate the enrollment before writing anything
        enrollment = await self._locate_enrollment(user_id, quiz.module_id, domain_id, for_update=True)
        if enrollment is None:
            raise NotEnrolledError(f"User {user_id} is not enrolled in module {quiz.module_id}")

        scored = score_answers(answers, question_marks, option_correctness)
        obtained = sum(s.marks_obtained for s in scored)
        maximum = max_marks(question_marks.values())
        percentage = compute_percentage(obtained, maximum)

        settings = get_settings()
        result_label = classify_percentage(
            percentage,
            pass_at=settings.quiz_pass_percentage,
            progress_at=settings.quiz_progress_percentage,
        )

        now = self.clock()
        self.db.add_all(
            [
                UserQuizResponse(
                    user_id=user_id,
                    quiz_id=quiz.id,
                    question_id=s.question_id,
                    option_id=s.option_id,
                    is_correct=s.is_correct,
                    marks_obtained=s.marks_obtained,
                    answered_on=now,
                )
                for s in scored
            ]
        )

        enrollment.questions_answered = len({a.question_id for a in answers})
        enrollment.score = percentage
        enrollment.last_quiz_result = result_label
        enrollment.status = enrollment_status_for(result_label)
        enrollment.completed_on = now if enrollment.status == STATUS_COMPLETED else None
        enrollment.updated_on = now
        await self.db.flush()

        await self.changelog.record_change(CHANGE_QUIZ, quiz.id, user_id, f"attempt scored {percentage:.2f}%")
        logger.info(
            "quiz_attempt_scored",
            quiz_id=quiz.id,
            user_id=user_id,
            enrollment_id=enrollment.id,
            percentage=percentage,
            result=result_label,
        )

        return {
            "quiz_id": quiz.id,
            "user_id": user_id,
            "enrollment_id": enrollment.id,
            "total_questions": len(question_marks),
            "attempted": len(answers),
            "evaluated": len(scored),
            "correct": sum(1 for s in scored if s.is_correct),
            "marks_obtained": obtained,
            "max_marks": maximum,
            "percentage": percentage,
            "score_percentage": f"{percentage:.2f}",
            "status": result_label,
            "enrollment_status": enrollment.status,
        }

    async def get_quiz_result(self, user_id: int, quiz_id: int, domain_id: int | None = None) -> dict:
        """Snapshot of the enrollment the quiz's module is tracked under."""
        await get_active_user(self.db, user_id)
        quiz = await get_quiz(self.db, quiz_id)

        enrollment = await self._locate_enrollment(user_id, quiz.module_id, domain_id)
        if enrollment is None:
            raise NotFoundError("No quiz result found for this user")

        return {
            "user_id": user_id,
            "quiz_id": quiz.id,
            "module_id": quiz.module_id,
            "enrollment_id": enrollment.id,
            "questions_answered": enrollment.questions_answered,
            "score": enrollment.score,
            "status": enrollment.status,
            "result": enrollment.last_quiz_result,
            "completed_on": enrollment.completed_on,
        }

    async def _locate_enrollment(
        self,
        user_id: int,
        module_id: int,
        domain_id: int | None,
        for_update: bool = False,
    ) -> UserModule | None:
        query = (
            select(UserModule, UserDomain.domain_id)
            .join(UserDomain, UserDomain.id == UserModule.user_domain_id)
            .where(UserDomain.user_id == user_id, UserModule.module_id == module_id)
            .order_by(UserDomain.domain_id)
        )
        if domain_id is not None:
            query = query.where(UserDomain.domain_id == domain_id)
        if for_update:
            query = query.with_for_update(of=UserModule)

        rows = (await self.db.execute(query)).all()
        if not rows:
            return None
        if len(rows) > 1:
            candidates = [d for _, d in rows]
            raise AmbiguousScopeError(
                f"User is enrolled in module {module_id} through several domains. Specify domain_id.",
                candidates,
            )
        return rows[0][0]
