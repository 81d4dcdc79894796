"""ORM models for the learning-management schema.

Entities reference each other by id only. Traversal goes through explicit
queries in the service layer, never through relationship back-pointers.
"""

from __future__ import annotations

from datetime import datetime

from sqlalchemy import (
    Boolean,
    DateTime,
    ForeignKey,
    Integer,
    Numeric,
    String,
    Text,
    UniqueConstraint,
    func,
)
from sqlalchemy.orm import Mapped, mapped_column

from lms.db.base import Base

# Enrollment statuses
STATUS_TODO = "todo"
STATUS_IN_PROGRESS = "inProgress"
STATUS_COMPLETED = "completed"


# ---------------------------------------------------------------------------
# Users & Domains
# ---------------------------------------------------------------------------


class User(Base):
    """Maps to the 'users' table. ``deleted_on`` marks a soft delete."""

    __tablename__ = "users"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(String(120), nullable=False)
    email: Mapped[str] = mapped_column(String(255), unique=True, nullable=False)
    created_on: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), server_default=func.now())
    deleted_on: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True, index=True)


class Domain(Base):
    """Named grouping of modules."""

    __tablename__ = "domains"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(String(100), unique=True, nullable=False)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    created_on: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), server_default=func.now())


class Module(Base):
    """Learning module. Never hard-deleted once created."""

    __tablename__ = "modules"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    title: Mapped[str] = mapped_column(String(200), unique=True, nullable=False)
    description: Mapped[str] = mapped_column(Text, nullable=False, default="")
    duration: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    level: Mapped[str | None] = mapped_column(String(50), nullable=True)
    threshold_score: Mapped[float] = mapped_column(
        Numeric(5, 2, asdecimal=False), nullable=False, default=70, server_default="70"
    )
    created_on: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), server_default=func.now())


class DomainModule(Base):
    """Many-to-many link between domains and modules."""

    __tablename__ = "domain_modules"
    __table_args__ = (UniqueConstraint("domain_id", "module_id", name="uq_domain_module"),)

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    domain_id: Mapped[int] = mapped_column(Integer, ForeignKey("domains.id", ondelete="CASCADE"), nullable=False)
    module_id: Mapped[int] = mapped_column(Integer, ForeignKey("modules.id", ondelete="CASCADE"), nullable=False)
    created_on: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), server_default=func.now())


class UserDomain(Base):
    """Enrollment scope: one row per (user, domain)."""

    __tablename__ = "user_domains"
    __table_args__ = (UniqueConstraint("user_id", "domain_id", name="uq_user_domain"),)

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    user_id: Mapped[int] = mapped_column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    domain_id: Mapped[int] = mapped_column(Integer, ForeignKey("domains.id", ondelete="CASCADE"), nullable=False)
    created_on: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), server_default=func.now())


# ---------------------------------------------------------------------------
# Enrollment
# ---------------------------------------------------------------------------


class UserModule(Base):
    """Enrollment of one scope in one module — UNIQUE(user_domain_id, module_id)."""

    __tablename__ = "user_modules"
    __table_args__ = (UniqueConstraint("user_domain_id", "module_id", name="uq_user_domain_module"),)

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    user_domain_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("user_domains.id", ondelete="CASCADE"), nullable=False, index=True
    )
    module_id: Mapped[int] = mapped_column(Integer, ForeignKey("modules.id"), nullable=False, index=True)
    status: Mapped[str] = mapped_column(String(20), nullable=False, default=STATUS_TODO, server_default=STATUS_TODO)
    questions_answered: Mapped[int] = mapped_column(Integer, nullable=False, default=0, server_default="0")
    score: Mapped[float] = mapped_column(Numeric(5, 2, asdecimal=False), nullable=False, default=0, server_default="0")
    threshold_score: Mapped[float] = mapped_column(
        Numeric(5, 2, asdecimal=False), nullable=False, default=70, server_default="70"
    )
    last_quiz_result: Mapped[str | None] = mapped_column(String(20), nullable=True)
    joined_on: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    completed_on: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    updated_on: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)


# ---------------------------------------------------------------------------
# Quizzes
# ---------------------------------------------------------------------------


class Quiz(Base):
    """Quiz attached to exactly one module."""

    __tablename__ = "quizzes"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    module_id: Mapped[int] = mapped_column(Integer, ForeignKey("modules.id"), nullable=False, index=True)
    title: Mapped[str] = mapped_column(String(200), nullable=False)
    created_on: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), server_default=func.now())


class QuizQuestion(Base):
    """Question within a quiz, weighted by ``marks``."""

    __tablename__ = "quiz_questions"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    quiz_id: Mapped[int] = mapped_column(Integer, ForeignKey("quizzes.id", ondelete="CASCADE"), nullable=False)
    question: Mapped[str] = mapped_column(Text, nullable=False)
    marks: Mapped[int | None] = mapped_column(Integer, nullable=True, default=0)
    order_in_quiz: Mapped[int | None] = mapped_column(Integer, nullable=True)


class QuizQuestionOption(Base):
    """Answer option; attached to at most one question at a time."""

    __tablename__ = "quiz_question_options"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    question_id: Mapped[int | None] = mapped_column(
        Integer, ForeignKey("quiz_questions.id", ondelete="SET NULL"), nullable=True, index=True
    )
    option_text: Mapped[str] = mapped_column(Text, unique=True, nullable=False)
    is_correct: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False, server_default="false")


class UserQuizResponse(Base):
    """One answer of one attempt. Append-only."""

    __tablename__ = "user_quiz_responses"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    user_id: Mapped[int] = mapped_column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    quiz_id: Mapped[int] = mapped_column(Integer, ForeignKey("quizzes.id", ondelete="CASCADE"), nullable=False)
    question_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("quiz_questions.id", ondelete="CASCADE"), nullable=False
    )
    option_id: Mapped[int | None] = mapped_column(
        Integer, ForeignKey("quiz_question_options.id", ondelete="SET NULL"), nullable=True
    )
    is_correct: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    marks_obtained: Mapped[float] = mapped_column(Numeric(10, 2, asdecimal=False), nullable=False, default=0)
    answered_on: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)


# ---------------------------------------------------------------------------
# Tools
# ---------------------------------------------------------------------------


class Tool(Base):
    """Named capability assignable to an enrollment scope."""

    __tablename__ = "tools"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(String(120), unique=True, nullable=False)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    created_on: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), server_default=func.now())


class UserTool(Base):
    """Active tool of a scope — one live row per user_domain_id."""

    __tablename__ = "user_tools"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    user_domain_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("user_domains.id", ondelete="CASCADE"), unique=True, nullable=False
    )
    tool_id: Mapped[int] = mapped_column(Integer, ForeignKey("tools.id", ondelete="CASCADE"), nullable=False)
    created_on: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    updated_on: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)


# ---------------------------------------------------------------------------
# Change log
# ---------------------------------------------------------------------------


class ChangeLogEntry(Base):
    """Audit entry written after a successful mutation. Write-only for the engine."""

    __tablename__ = "change_log"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    change_type: Mapped[str] = mapped_column(String(50), nullable=False)
    change_type_id: Mapped[int] = mapped_column(Integer, nullable=False)
    user_id: Mapped[int] = mapped_column(Integer, nullable=False)
    reason: Mapped[str | None] = mapped_column(Text, nullable=True)
    updated_on: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
