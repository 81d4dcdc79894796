"""Tests for QuizContentService — quiz and question edits and removals."""

from __future__ import annotations

import pytest
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from lms.assessment.scoring import Answer
from lms.assessment.service import QuizAttemptService
from lms.catalog.content import QuizContentService
from lms.db.models import Quiz, QuizQuestion, QuizQuestionOption, UserModule, UserQuizResponse
from lms.enrollment.service import EnrollmentService
from lms.errors import NotFoundError
from lms.users.service import soft_delete_user
from tests.helpers import join_domains, make_domain, make_module, make_quiz, make_user


async def _attempted_quiz(db: AsyncSession, clock, marks=(5, 5)):
    """A learner who has answered every question of a fresh quiz."""
    user = await make_user(db)
    domain = await make_domain(db)
    module = await make_module(db, domain)
    await join_domains(db, user, domain)
    await EnrollmentService(db, clock=clock).enroll(user.id, module.id)
    quiz_id, questions = await make_quiz(db, module, list(marks))
    await QuizAttemptService(db, clock=clock).attempt_quiz(
        user.id, quiz_id, [Answer(q.id, q.correct_option_id) for q in questions]
    )
    return user, quiz_id, questions


async def _ids(db: AsyncSession, column) -> list[int]:
    return list((await db.execute(select(column).order_by(column))).scalars().all())


@pytest.mark.asyncio
class TestQuizzes:
    async def test_rename(self, db_session: AsyncSession, clock, changelog):
        admin = await make_user(db_session)
        module = await make_module(db_session)
        quiz_id, _ = await make_quiz(db_session, module, [5])

        quiz = await QuizContentService(db_session, clock=clock, changelog=changelog).update_quiz(
            quiz_id, admin.id, "clearer", title="Networking basics"
        )

        assert quiz.title == "Networking basics"
        assert changelog.entries == [
            {"change_type": "quiz", "change_type_id": quiz_id, "user_id": admin.id, "reason": "clearer"}
        ]

    async def test_delete_removes_questions_options_and_responses(self, db_session: AsyncSession, clock, changelog):
        user, quiz_id, questions = await _attempted_quiz(db_session, clock)
        svc = QuizContentService(db_session, clock=clock, changelog=changelog)

        result = await svc.delete_quiz(quiz_id, user.id, "retired")

        assert result["quiz_id"] == quiz_id
        assert result["deleted_question_ids"] == [q.id for q in questions]
        assert len(result["deleted_option_ids"]) == 4
        assert await _ids(db_session, Quiz.id) == []
        assert await _ids(db_session, QuizQuestion.id) == []
        assert await _ids(db_session, QuizQuestionOption.id) == []
        assert await _ids(db_session, UserQuizResponse.id) == []
        assert changelog.entries[-1] == {
            "change_type": "quiz",
            "change_type_id": quiz_id,
            "user_id": user.id,
            "reason": "retired",
        }

    async def test_delete_keeps_enrollment_score(self, db_session: AsyncSession, clock):
        user, quiz_id, _ = await _attempted_quiz(db_session, clock)

        await QuizContentService(db_session, clock=clock).delete_quiz(quiz_id, user.id)

        enrollment = (await db_session.execute(select(UserModule))).scalar_one()
        assert enrollment.score == 100.0
        assert enrollment.status == "completed"

    async def test_delete_empty_quiz(self, db_session: AsyncSession, clock):
        admin = await make_user(db_session)
        module = await make_module(db_session)
        quiz_id, _ = await make_quiz(db_session, module, [])

        result = await QuizContentService(db_session, clock=clock).delete_quiz(quiz_id, admin.id)
        assert result == {"quiz_id": quiz_id, "deleted_question_ids": [], "deleted_option_ids": []}

    async def test_unknown_quiz(self, db_session: AsyncSession, clock):
        admin = await make_user(db_session)
        with pytest.raises(NotFoundError, match="Quiz"):
            await QuizContentService(db_session, clock=clock).delete_quiz(404, admin.id)

    async def test_deleted_user_rejected(self, db_session: AsyncSession, clock, changelog):
        admin = await make_user(db_session)
        module = await make_module(db_session)
        quiz_id, _ = await make_quiz(db_session, module, [5])
        await soft_delete_user(db_session, admin.id, clock)

        with pytest.raises(NotFoundError, match="deleted"):
            await QuizContentService(db_session, clock=clock, changelog=changelog).update_quiz(
                quiz_id, admin.id, title="x"
            )
        assert changelog.entries == []


@pytest.mark.asyncio
class TestQuestions:
    async def test_update_fields(self, db_session: AsyncSession, clock, changelog):
        admin = await make_user(db_session)
        module = await make_module(db_session)
        _, (q1,) = await make_quiz(db_session, module, [5])

        question = await QuizContentService(db_session, clock=clock, changelog=changelog).update_question(
            q1.id, admin.id, "reweigh", question="Which port?", marks=10, order_in_quiz=2
        )

        assert (question.question, question.marks, question.order_in_quiz) == ("Which port?", 10, 2)
        assert changelog.entries == [
            {"change_type": "quiz-question", "change_type_id": q1.id, "user_id": admin.id, "reason": "reweigh"}
        ]

    async def test_unset_fields_untouched(self, db_session: AsyncSession, clock):
        admin = await make_user(db_session)
        module = await make_module(db_session)
        _, (q1,) = await make_quiz(db_session, module, [5])

        question = await QuizContentService(db_session, clock=clock).update_question(q1.id, admin.id, marks=0)
        assert question.marks == 0
        assert question.question.endswith("?")

    async def test_delete_only_touches_that_question(self, db_session: AsyncSession, clock, changelog):
        user, quiz_id, (q1, q2) = await _attempted_quiz(db_session, clock)

        result = await QuizContentService(db_session, clock=clock, changelog=changelog).delete_question(
            q1.id, user.id, "duplicate"
        )

        assert result == {
            "question_id": q1.id,
            "deleted_option_ids": sorted([q1.correct_option_id, q1.wrong_option_id]),
        }
        assert await _ids(db_session, QuizQuestion.id) == [q2.id]
        assert await _ids(db_session, QuizQuestionOption.id) == sorted([q2.correct_option_id, q2.wrong_option_id])
        responses = (await db_session.execute(select(UserQuizResponse))).scalars().all()
        assert [r.question_id for r in responses] == [q2.id]
        assert changelog.entries[-1]["change_type"] == "quiz-question"
        assert changelog.entries[-1]["change_type_id"] == q1.id

    async def test_unknown_question(self, db_session: AsyncSession, clock):
        admin = await make_user(db_session)
        with pytest.raises(NotFoundError, match="Question"):
            await QuizContentService(db_session, clock=clock).delete_question(404, admin.id)
