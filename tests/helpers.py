"""Factories for building catalog data in tests."""

from __future__ import annotations

from dataclasses import dataclass
from itertools import count

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from lms.catalog.service import (
    create_domain,
    create_module,
    create_question,
    create_quiz,
    link_module_domains,
    link_user_domains,
)
from lms.db.models import Domain, Module, QuizQuestionOption, User, UserDomain
from lms.users.service import create_user

_seq = count(1)


@dataclass
class SeededQuestion:
    id: int
    marks: int
    correct_option_id: int
    wrong_option_id: int


async def make_user(db: AsyncSession, name: str | None = None) -> User:
    n = next(_seq)
    return await create_user(db, name or f"Learner {n}", f"learner{n}@example.com")


async def make_domain(db: AsyncSession, name: str | None = None) -> Domain:
    return await create_domain(db, name or f"Domain {next(_seq)}")


async def make_module(db: AsyncSession, *domains: Domain, threshold_score: float | None = None) -> Module:
    module = await create_module(db, f"Module {next(_seq)}", threshold_score=threshold_score)
    if domains:
        await link_module_domains(db, module.id, [d.id for d in domains])
    return module


async def join_domains(db: AsyncSession, user: User, *domains: Domain) -> list[UserDomain]:
    """Link ``user`` to ``domains`` and return the scopes in the same order."""
    await link_user_domains(db, user.id, [d.id for d in domains])
    result = await db.execute(select(UserDomain).where(UserDomain.user_id == user.id))
    by_domain = {ud.domain_id: ud for ud in result.scalars().all()}
    return [by_domain[d.id] for d in domains]


async def make_option(db: AsyncSession, is_correct: bool = False, question_id: int | None = None) -> QuizQuestionOption:
    option = QuizQuestionOption(
        option_text=f"Option {next(_seq)}",
        is_correct=is_correct,
        question_id=question_id,
    )
    db.add(option)
    await db.flush()
    return option


async def make_quiz(db: AsyncSession, module: Module, marks: list[int]) -> tuple[int, list[SeededQuestion]]:
    """Quiz with one question per entry in ``marks``, each with a correct and a wrong option."""
    quiz = await create_quiz(db, module.id, f"Quiz {next(_seq)}")
    questions = []
    for m in marks:
        question = await create_question(db, quiz.id, f"Question {next(_seq)}?", marks=m)
        correct = await make_option(db, True, question.id)
        wrong = await make_option(db, False, question.id)
        questions.append(SeededQuestion(question.id, m, correct.id, wrong.id))
    return quiz.id, questions
