"""Option assignment validator — attaches answer options to quiz questions.

Every check runs against the locked question before any option is attached,
so concurrent assignments to one question see a consistent option count.
"""

from __future__ import annotations

import structlog
from sqlalchemy import func, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from lms.changelog.sink import CHANGE_OPTION, CHANGE_QUESTION, ChangeLogSink, DatabaseChangeLog
from lms.clock import Clock, utc_now
from lms.config import get_settings
from lms.db.models import QuizQuestion, QuizQuestionOption, UserQuizResponse
from lms.errors import ConflictError, NotFoundError
from lms.options.rules import check_correct_bounds, check_option_total
from lms.users.service import get_active_user

logger = structlog.get_logger()


def option_to_dict(option: QuizQuestionOption) -> dict:
    return {
        "id": option.id,
        "question_id": option.question_id,
        "option_text": option.option_text,
        "is_correct": option.is_correct,
    }


class OptionService:
    def __init__(
        self,
        db: AsyncSession,
        clock: Clock = utc_now,
        changelog: ChangeLogSink | None = None,
    ) -> None:
        self.db = db
        self.clock = clock
        self.changelog = changelog or DatabaseChangeLog(db, clock)

    async def create_option(self, option_text: str, is_correct: bool = False) -> QuizQuestionOption:
        """Create a detached option. Option texts are unique."""
        existing = await self.db.execute(
            select(QuizQuestionOption).where(QuizQuestionOption.option_text == option_text)
        )
        if existing.scalar_one_or_none():
            raise ConflictError(f'Option "{option_text}" already exists')

        option = QuizQuestionOption(option_text=option_text, is_correct=is_correct)
        self.db.add(option)
        await self.db.flush()
        logger.info("option_created", option_id=option.id)
        return option

    async def assign_options(
        self,
        question_id: int,
        option_ids: list[int],
        acting_user_id: int | None = None,
    ) -> dict:
        """Attach options to a question, completing it to exactly the configured count.

        First failing check wins: question, missing options, already attached
        here, attached elsewhere, correct-count bounds, total count.
        """
        settings = get_settings()
        if acting_user_id is not None:
            await get_active_user(self.db, acting_user_id)

        await self._locked_question(question_id)

        unique_ids = list(dict.fromkeys(option_ids))

        options_result = await self.db.execute(
            select(QuizQuestionOption)
            .where(QuizQuestionOption.id.in_(unique_ids))
            .with_for_update()
        )
        options = {o.id: o for o in options_result.scalars().all()}

        missing = [i for i in unique_ids if i not in options]
        if missing:
            raise NotFoundError(
                f"Options not found: {', '.join(str(i) for i in missing)}",
                missing_ids=missing,
            )

        already_here = [i for i in unique_ids if options[i].question_id == question_id]
        if already_here:
            raise ConflictError(
                f"Options already assigned to this question: {', '.join(str(i) for i in already_here)}",
                duplicate_ids=already_here,
            )

        elsewhere = [i for i in unique_ids if options[i].question_id is not None]
        if elsewhere:
            raise ConflictError(
                f"Options already assigned to another question: {', '.join(str(i) for i in elsewhere)}",
                duplicate_ids=elsewhere,
            )

        counts_result = await self.db.execute(
            select(
                func.count(QuizQuestionOption.id),
                func.count(QuizQuestionOption.id).filter(QuizQuestionOption.is_correct.is_(True)),
            ).where(QuizQuestionOption.question_id == question_id)
        )
        existing_count, existing_correct = counts_result.one()

        incoming = [options[i] for i in unique_ids]
        check_correct_bounds(
            existing_correct,
            sum(1 for o in incoming if o.is_correct),
            min_correct=settings.min_correct_options,
            max_correct=settings.max_correct_options,
        )
        total = check_option_total(existing_count, len(incoming), required=settings.options_per_question)

        for option in incoming:
            option.question_id = question_id
        await self.db.flush()

        if acting_user_id is not None:
            await self.changelog.record_change(
                CHANGE_QUESTION, question_id, acting_user_id, f"assigned options {unique_ids}"
            )
        logger.info("options_assigned", question_id=question_id, option_ids=unique_ids)

        return {
            "question_id": question_id,
            "assigned_option_ids": unique_ids,
            "total_options": total,
        }

    async def update_option(
        self,
        option_id: int,
        user_id: int,
        reason: str | None = None,
        option_text: str | None = None,
        is_correct: bool | None = None,
    ) -> QuizQuestionOption:
        """Edit an option's text or correctness.

        Flipping ``is_correct`` on an attached option re-checks the question's
        correct-count bounds, so the last correct option cannot be cleared.
        """
        settings = get_settings()
        await get_active_user(self.db, user_id)
        option = await self._locked_option(option_id)

        if option_text is not None and option_text != option.option_text:
            existing = await self.db.execute(
                select(QuizQuestionOption.id).where(
                    QuizQuestionOption.option_text == option_text,
                    QuizQuestionOption.id != option_id,
                )
            )
            if existing.scalar_one_or_none() is not None:
                raise ConflictError(f'Option "{option_text}" already exists')

        if is_correct is not None and is_correct != option.is_correct and option.question_id is not None:
            await self.db.execute(
                select(QuizQuestion.id).where(QuizQuestion.id == option.question_id).with_for_update()
            )
            others_result = await self.db.execute(
                select(func.count(QuizQuestionOption.id)).where(
                    QuizQuestionOption.question_id == option.question_id,
                    QuizQuestionOption.id != option_id,
                    QuizQuestionOption.is_correct.is_(True),
                )
            )
            check_correct_bounds(
                others_result.scalar() or 0,
                1 if is_correct else 0,
                min_correct=settings.min_correct_options,
                max_correct=settings.max_correct_options,
            )

        if option_text is not None:
            option.option_text = option_text
        if is_correct is not None:
            option.is_correct = is_correct
        await self.db.flush()

        await self.changelog.record_change(CHANGE_OPTION, option_id, user_id, reason)
        logger.info("option_updated", option_id=option_id, user_id=user_id)
        return option

    async def unassign_options(
        self,
        question_id: int,
        user_id: int,
        reason: str | None = None,
        option_ids: list[int] | None = None,
    ) -> dict:
        """Detach the given options (all of them when ``option_ids`` is empty) from a question.

        Ids not attached to the question are ignored. The detached options stay
        available for assignment elsewhere.
        """
        await get_active_user(self.db, user_id)
        question = await self._locked_question(question_id)

        query = select(QuizQuestionOption).where(QuizQuestionOption.question_id == question.id)
        if option_ids:
            query = query.where(QuizQuestionOption.id.in_(option_ids))
        result = await self.db.execute(query.order_by(QuizQuestionOption.id).with_for_update())
        detached = list(result.scalars().all())

        for option in detached:
            option.question_id = None
        await self.db.flush()

        remaining = await self.db.scalar(
            select(func.count(QuizQuestionOption.id)).where(QuizQuestionOption.question_id == question.id)
        )
        unassigned_ids = [o.id for o in detached]
        if unassigned_ids:
            await self.changelog.record_change(CHANGE_QUESTION, question.id, user_id, reason)
            logger.info("options_unassigned", question_id=question.id, option_ids=unassigned_ids)

        return {
            "question_id": question.id,
            "unassigned_option_ids": unassigned_ids,
            "total_options": remaining or 0,
        }

    async def list_question_options(self, question_id: int) -> list[QuizQuestionOption]:
        question = await self.db.get(QuizQuestion, question_id)
        if question is None:
            raise NotFoundError(f"Question with ID {question_id} not found")
        result = await self.db.execute(
            select(QuizQuestionOption)
            .where(QuizQuestionOption.question_id == question_id)
            .order_by(QuizQuestionOption.id)
        )
        return list(result.scalars().all())

    async def delete_option(self, option_id: int, reason: str, user_id: int) -> None:
        """Detach the option from its question, then remove it.

        Historical responses keep their rows with ``option_id`` nulled.
        """
        await get_active_user(self.db, user_id)
        option = await self._locked_option(option_id)

        option.question_id = None
        await self.db.execute(
            update(UserQuizResponse).where(UserQuizResponse.option_id == option_id).values(option_id=None)
        )
        await self.db.flush()
        await self.db.delete(option)
        await self.db.flush()

        await self.changelog.record_change(CHANGE_OPTION, option_id, user_id, reason)
        logger.info("option_deleted", option_id=option_id, user_id=user_id)

    async def _locked_question(self, question_id: int) -> QuizQuestion:
        result = await self.db.execute(select(QuizQuestion).where(QuizQuestion.id == question_id).with_for_update())
        question = result.scalar_one_or_none()
        if question is None:
            raise NotFoundError(f"Question with ID {question_id} not found")
        return question

    async def _locked_option(self, option_id: int) -> QuizQuestionOption:
        result = await self.db.execute(
            select(QuizQuestionOption).where(QuizQuestionOption.id == option_id).with_for_update()
        )
        option = result.scalar_one_or_none()
        if option is None:
            raise NotFoundError(f"Option with ID {option_id} not found")
        return option
