"""Catalog management — domains, modules, links, quizzes and questions.

Rules:
- Domain names and module titles are unique (case-insensitive)
- Linking is idempotent: already-linked ids are reported as skipped
- Unknown ids are reported as invalid rather than failing the whole call
"""

from __future__ import annotations

import structlog
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from lms.config import get_settings
from lms.db.models import Domain, DomainModule, Module, Quiz, QuizQuestion, UserDomain
from lms.errors import ConflictError, NotFoundError
from lms.users.service import get_active_user

logger = structlog.get_logger()


# --- Domains ---


async def create_domain(db: AsyncSession, name: str, description: str | None = None) -> Domain:
    """Create a domain with a unique name."""
    existing = await db.execute(select(Domain).where(func.lower(Domain.name) == name.lower()))
    if existing.scalar_one_or_none():
        raise ConflictError(f'Domain "{name}" already exists')

    domain = Domain(name=name, description=description)
    db.add(domain)
    await db.flush()
    logger.info("domain_created", domain_id=domain.id)
    return domain


async def get_domain(db: AsyncSession, domain_id: int) -> Domain:
    domain = await db.get(Domain, domain_id)
    if domain is None:
        raise NotFoundError(f"Domain with ID {domain_id} not found")
    return domain


# --- Modules ---


async def create_module(
    db: AsyncSession,
    title: str,
    description: str = "",
    duration: int = 0,
    level: str | None = None,
    threshold_score: float | None = None,
) -> Module:
    """Create a module. Titles are globally unique."""
    existing = await db.execute(select(Module).where(func.lower(Module.title) == title.lower()))
    if existing.scalar_one_or_none():
        raise ConflictError(f'Module with title "{title}" already exists')

    if threshold_score is None:
        threshold_score = get_settings().default_threshold_score

    module = Module(
        title=title,
        description=description,
        duration=duration,
        level=level,
        threshold_score=threshold_score,
    )
    db.add(module)
    await db.flush()
    logger.info("module_created", module_id=module.id)
    return module


async def get_module(db: AsyncSession, module_id: int) -> Module:
    """Get a module by ID or raise NotFoundError."""
    module = await db.get(Module, module_id)
    if module is None:
        raise NotFoundError(f"Module with ID {module_id} not found")
    return module


async def link_module_domains(db: AsyncSession, module_id: int, domain_ids: list[int]) -> dict:
    """Offer a module through the given domains."""
    await get_module(db, module_id)
    unique_ids = list(dict.fromkeys(domain_ids))

    valid_result = await db.execute(select(Domain.id).where(Domain.id.in_(unique_ids)))
    valid_ids = set(valid_result.scalars().all())
    invalid = [d for d in unique_ids if d not in valid_ids]

    linked_result = await db.execute(
        select(DomainModule.domain_id).where(
            DomainModule.module_id == module_id,
            DomainModule.domain_id.in_(sorted(valid_ids)),
        )
    )
    already = set(linked_result.scalars().all())

    linked = []
    for domain_id in unique_ids:
        if domain_id in valid_ids and domain_id not in already:
            db.add(DomainModule(domain_id=domain_id, module_id=module_id))
            linked.append(domain_id)
    await db.flush()

    logger.info("module_domains_linked", module_id=module_id, linked=linked)
    return {
        "linked": linked,
        "skipped": [d for d in unique_ids if d in already],
        "invalid": invalid,
    }


# --- User <-> Domain ---


async def link_user_domains(db: AsyncSession, user_id: int, domain_ids: list[int]) -> dict:
    """Link a user to several domains, creating one enrollment scope per domain."""
    await get_active_user(db, user_id)

    unique_ids = list(dict.fromkeys(domain_ids))
    duplicates = sorted({d for d in domain_ids if domain_ids.count(d) > 1})

    valid_result = await db.execute(select(Domain.id).where(Domain.id.in_(unique_ids)))
    valid_ids = set(valid_result.scalars().all())
    invalid = [d for d in unique_ids if d not in valid_ids]

    existing_result = await db.execute(
        select(UserDomain.domain_id).where(
            UserDomain.user_id == user_id,
            UserDomain.domain_id.in_(sorted(valid_ids)),
        )
    )
    existing = set(existing_result.scalars().all())

    linked = []
    for domain_id in unique_ids:
        if domain_id in valid_ids and domain_id not in existing:
            db.add(UserDomain(user_id=user_id, domain_id=domain_id))
            linked.append(domain_id)
    await db.flush()

    logger.info("user_domains_linked", user_id=user_id, linked=linked)
    result: dict = {
        "linked": linked,
        "skipped": [d for d in unique_ids if d in existing],
        "invalid": invalid,
    }
    if duplicates:
        result["duplicates"] = duplicates
    return result


async def list_user_domains(db: AsyncSession, user_id: int) -> list[dict]:
    """List the domains (and scope ids) a user is assigned to, by name."""
    await get_active_user(db, user_id)
    result = await db.execute(
        select(UserDomain, Domain)
        .join(Domain, Domain.id == UserDomain.domain_id)
        .where(UserDomain.user_id == user_id)
        .order_by(Domain.name)
    )
    return [
        {
            "user_domain_id": ud.id,
            "domain_id": domain.id,
            "name": domain.name,
            "description": domain.description,
        }
        for ud, domain in result.all()
    ]


async def get_user_domain(db: AsyncSession, user_domain_id: int) -> UserDomain:
    user_domain = await db.get(UserDomain, user_domain_id)
    if user_domain is None:
        raise NotFoundError(f"User-domain scope with ID {user_domain_id} not found")
    return user_domain


# --- Quizzes & Questions ---


async def create_quiz(db: AsyncSession, module_id: int, title: str) -> Quiz:
    await get_module(db, module_id)
    quiz = Quiz(module_id=module_id, title=title)
    db.add(quiz)
    await db.flush()
    logger.info("quiz_created", quiz_id=quiz.id, module_id=module_id)
    return quiz


async def get_quiz(db: AsyncSession, quiz_id: int) -> Quiz:
    quiz = await db.get(Quiz, quiz_id)
    if quiz is None:
        raise NotFoundError(f"Quiz with ID {quiz_id} not found")
    return quiz


async def create_question(
    db: AsyncSession,
    quiz_id: int,
    question: str,
    marks: int = 0,
    order_in_quiz: int | None = None,
) -> QuizQuestion:
    """Add a question to a quiz. Questions are appended in order by default."""
    await get_quiz(db, quiz_id)
    if order_in_quiz is None:
        count_result = await db.execute(
            select(func.count(QuizQuestion.id)).where(QuizQuestion.quiz_id == quiz_id)
        )
        order_in_quiz = (count_result.scalar() or 0) + 1

    row = QuizQuestion(quiz_id=quiz_id, question=question, marks=marks, order_in_quiz=order_in_quiz)
    db.add(row)
    await db.flush()
    return row


async def list_quiz_questions(db: AsyncSession, quiz_id: int) -> list[QuizQuestion]:
    """Questions of a quiz in their configured order."""
    await get_quiz(db, quiz_id)
    result = await db.execute(
        select(QuizQuestion)
        .where(QuizQuestion.quiz_id == quiz_id)
        .order_by(QuizQuestion.order_in_quiz, QuizQuestion.id)
    )
    return list(result.scalars().all())
