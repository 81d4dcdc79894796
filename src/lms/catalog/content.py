"""Quiz and question edits and removals, each written to the change log.

Removing a question removes its options and the responses given to it.
Removing a quiz removes every question under it the same way.
"""

from __future__ import annotations

import structlog
from sqlalchemy import delete, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from lms.changelog.sink import CHANGE_QUESTION, CHANGE_QUIZ, ChangeLogSink, DatabaseChangeLog
from lms.clock import Clock, utc_now
from lms.db.models import Quiz, QuizQuestion, QuizQuestionOption, UserQuizResponse
from lms.errors import NotFoundError
from lms.users.service import get_active_user

logger = structlog.get_logger()


class QuizContentService:
    def __init__(
        self,
        db: AsyncSession,
        clock: Clock = utc_now,
        changelog: ChangeLogSink | None = None,
    ) -> None:
        self.db = db
        self.clock = clock
        self.changelog = changelog or DatabaseChangeLog(db, clock)

    # --- Quizzes ---

    async def update_quiz(
        self,
        quiz_id: int,
        user_id: int,
        reason: str | None = None,
        title: str | None = None,
    ) -> Quiz:
        await get_active_user(self.db, user_id)
        quiz = await self._locked(Quiz, quiz_id, "Quiz")
        if title is not None:
            quiz.title = title
        await self.db.flush()

        await self.changelog.record_change(CHANGE_QUIZ, quiz_id, user_id, reason)
        logger.info("quiz_updated", quiz_id=quiz_id, user_id=user_id)
        return quiz

    async def delete_quiz(self, quiz_id: int, user_id: int, reason: str | None = None) -> dict:
        """Remove a quiz with its questions, their options and all responses."""
        await get_active_user(self.db, user_id)
        quiz = await self._locked(Quiz, quiz_id, "Quiz")

        result = await self.db.execute(
            select(QuizQuestion.id).where(QuizQuestion.quiz_id == quiz_id).order_by(QuizQuestion.id)
        )
        question_ids = list(result.scalars().all())

        await self.db.execute(delete(UserQuizResponse).where(UserQuizResponse.quiz_id == quiz_id))
        deleted_option_ids = await self._delete_options(question_ids)
        if question_ids:
            await self.db.execute(delete(QuizQuestion).where(QuizQuestion.id.in_(question_ids)))
        await self.db.delete(quiz)
        await self.db.flush()

        await self.changelog.record_change(CHANGE_QUIZ, quiz_id, user_id, reason)
        logger.info("quiz_deleted", quiz_id=quiz_id, question_ids=question_ids)
        return {
            "quiz_id": quiz_id,
            "deleted_question_ids": question_ids,
            "deleted_option_ids": deleted_option_ids,
        }

    # --- Questions ---

    async def update_question(
        self,
        question_id: int,
        user_id: int,
        reason: str | None = None,
        question: str | None = None,
        marks: int | None = None,
        order_in_quiz: int | None = None,
    ) -> QuizQuestion:
        """Edit a question. New marks apply to later attempts only."""
        await get_active_user(self.db, user_id)
        row = await self._locked(QuizQuestion, question_id, "Question")
        if question is not None:
            row.question = question
        if marks is not None:
            row.marks = marks
        if order_in_quiz is not None:
            row.order_in_quiz = order_in_quiz
        await self.db.flush()

        await self.changelog.record_change(CHANGE_QUESTION, question_id, user_id, reason)
        logger.info("question_updated", question_id=question_id, user_id=user_id)
        return row

    async def delete_question(self, question_id: int, user_id: int, reason: str | None = None) -> dict:
        """Remove a question with its options and the responses given to it."""
        await get_active_user(self.db, user_id)
        question = await self._locked(QuizQuestion, question_id, "Question")

        await self.db.execute(delete(UserQuizResponse).where(UserQuizResponse.question_id == question_id))
        deleted_option_ids = await self._delete_options([question_id])
        await self.db.delete(question)
        await self.db.flush()

        await self.changelog.record_change(CHANGE_QUESTION, question_id, user_id, reason)
        logger.info("question_deleted", question_id=question_id, option_ids=deleted_option_ids)
        return {"question_id": question_id, "deleted_option_ids": deleted_option_ids}

    # --- Internals ---

    async def _delete_options(self, question_ids: list[int]) -> list[int]:
        if not question_ids:
            return []
        result = await self.db.execute(
            select(QuizQuestionOption.id)
            .where(QuizQuestionOption.question_id.in_(question_ids))
            .order_by(QuizQuestionOption.id)
        )
        option_ids = list(result.scalars().all())
        if option_ids:
            # Answers recorded while an option sat on another question keep their rows
            await self.db.execute(
                update(UserQuizResponse).where(UserQuizResponse.option_id.in_(option_ids)).values(option_id=None)
            )
            await self.db.execute(delete(QuizQuestionOption).where(QuizQuestionOption.id.in_(option_ids)))
        return option_ids

    async def _locked(self, model, row_id: int, label: str):
        result = await self.db.execute(select(model).where(model.id == row_id).with_for_update())
        row = result.scalar_one_or_none()
        if row is None:
            raise NotFoundError(f"{label} with ID {row_id} not found")
        return row
