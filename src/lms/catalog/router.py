"""Catalog API endpoints — domains, modules, links, quizzes and questions."""

from __future__ import annotations

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from lms.catalog import service
from lms.catalog.content import QuizContentService
from lms.catalog.schemas import (
    ChangeRequest,
    CreateDomainRequest,
    CreateModuleRequest,
    CreateQuestionRequest,
    CreateQuizRequest,
    DeleteQuestionResponse,
    DeleteQuizResponse,
    DomainResponse,
    LinkDomainsRequest,
    LinkReportResponse,
    ModuleResponse,
    QuestionResponse,
    QuizResponse,
    UpdateQuestionRequest,
    UpdateQuizRequest,
    UserDomainResponse,
)
from lms.clock import Clock
from lms.database import get_session
from lms.dependencies import get_clock

router = APIRouter(prefix="/api/v1", tags=["Catalog"])


# ---- Domains ----


@router.post("/domains", response_model=DomainResponse, status_code=201)
async def create_domain(body: CreateDomainRequest, db: AsyncSession = Depends(get_session)) -> DomainResponse:
    domain = await service.create_domain(db, body.name, body.description)
    await db.commit()
    return DomainResponse.model_validate(domain)


@router.get("/domains/{domain_id}", response_model=DomainResponse)
async def get_domain(domain_id: int, db: AsyncSession = Depends(get_session)) -> DomainResponse:
    return DomainResponse.model_validate(await service.get_domain(db, domain_id))


# ---- Modules ----


@router.post("/modules", response_model=ModuleResponse, status_code=201)
async def create_module(body: CreateModuleRequest, db: AsyncSession = Depends(get_session)) -> ModuleResponse:
    module = await service.create_module(
        db,
        body.title,
        description=body.description,
        duration=body.duration,
        level=body.level,
        threshold_score=body.threshold_score,
    )
    await db.commit()
    return ModuleResponse.model_validate(module)


@router.get("/modules/{module_id}", response_model=ModuleResponse)
async def get_module(module_id: int, db: AsyncSession = Depends(get_session)) -> ModuleResponse:
    return ModuleResponse.model_validate(await service.get_module(db, module_id))


@router.post("/modules/{module_id}/domains", response_model=LinkReportResponse)
async def link_module_domains(
    module_id: int,
    body: LinkDomainsRequest,
    db: AsyncSession = Depends(get_session),
) -> dict:
    """Offer a module through more domains. Unknown or already linked ids are reported."""
    report = await service.link_module_domains(db, module_id, body.domain_ids)
    await db.commit()
    return report


# ---- User <-> Domain ----


@router.post("/users/{user_id}/domains", response_model=LinkReportResponse)
async def link_user_domains(
    user_id: int,
    body: LinkDomainsRequest,
    db: AsyncSession = Depends(get_session),
) -> dict:
    report = await service.link_user_domains(db, user_id, body.domain_ids)
    await db.commit()
    return report


@router.get("/users/{user_id}/domains", response_model=list[UserDomainResponse])
async def list_user_domains(user_id: int, db: AsyncSession = Depends(get_session)) -> list[dict]:
    return await service.list_user_domains(db, user_id)


# ---- Quizzes & Questions ----


@router.post("/quizzes", response_model=QuizResponse, status_code=201)
async def create_quiz(body: CreateQuizRequest, db: AsyncSession = Depends(get_session)) -> QuizResponse:
    quiz = await service.create_quiz(db, body.module_id, body.title)
    await db.commit()
    return QuizResponse.model_validate(quiz)


@router.post("/quizzes/{quiz_id}/questions", response_model=QuestionResponse, status_code=201)
async def create_question(
    quiz_id: int,
    body: CreateQuestionRequest,
    db: AsyncSession = Depends(get_session),
) -> QuestionResponse:
    question = await service.create_question(db, quiz_id, body.question, body.marks, body.order_in_quiz)
    await db.commit()
    return QuestionResponse.model_validate(question)


@router.get("/quizzes/{quiz_id}/questions", response_model=list[QuestionResponse])
async def list_quiz_questions(quiz_id: int, db: AsyncSession = Depends(get_session)) -> list[QuestionResponse]:
    questions = await service.list_quiz_questions(db, quiz_id)
    return [QuestionResponse.model_validate(q) for q in questions]


@router.patch("/quizzes/{quiz_id}", response_model=QuizResponse)
async def update_quiz(
    quiz_id: int,
    body: UpdateQuizRequest,
    db: AsyncSession = Depends(get_session),
    clock: Clock = Depends(get_clock),
) -> QuizResponse:
    quiz = await QuizContentService(db, clock=clock).update_quiz(quiz_id, body.user_id, body.reason, title=body.title)
    await db.commit()
    return QuizResponse.model_validate(quiz)


@router.delete("/quizzes/{quiz_id}", response_model=DeleteQuizResponse)
async def delete_quiz(
    quiz_id: int,
    body: ChangeRequest,
    db: AsyncSession = Depends(get_session),
    clock: Clock = Depends(get_clock),
) -> dict:
    """Remove a quiz with its questions, options and responses."""
    result = await QuizContentService(db, clock=clock).delete_quiz(quiz_id, body.user_id, body.reason)
    await db.commit()
    return result


@router.patch("/questions/{question_id}", response_model=QuestionResponse)
async def update_question(
    question_id: int,
    body: UpdateQuestionRequest,
    db: AsyncSession = Depends(get_session),
    clock: Clock = Depends(get_clock),
) -> QuestionResponse:
    question = await QuizContentService(db, clock=clock).update_question(
        question_id,
        body.user_id,
        body.reason,
        question=body.question,
        marks=body.marks,
        order_in_quiz=body.order_in_quiz,
    )
    await db.commit()
    return QuestionResponse.model_validate(question)


@router.delete("/questions/{question_id}", response_model=DeleteQuestionResponse)
async def delete_question(
    question_id: int,
    body: ChangeRequest,
    db: AsyncSession = Depends(get_session),
    clock: Clock = Depends(get_clock),
) -> dict:
    result = await QuizContentService(db, clock=clock).delete_question(question_id, body.user_id, body.reason)
    await db.commit()
    return result
