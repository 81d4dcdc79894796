"""Initial schema — users, catalog, enrollments, quizzes, tools, change log.

Revision ID: 001_lms_tables
Revises:
Create Date: 2026-10-17
"""

from collections.abc import Sequence

import sqlalchemy as sa
from alembic import op

revision: str = "001_lms_tables"
down_revision: str | None = None
branch_labels: str | Sequence[str] | None = None
depends_on: str | Sequence[str] | None = None


def upgrade() -> None:
    # --- Users & Domains ---
    op.create_table(
        "users",
        sa.Column("id", sa.Integer, primary_key=True, autoincrement=True),
        sa.Column("name", sa.String(120), nullable=False),
        sa.Column("email", sa.String(255), nullable=False, unique=True),
        sa.Column("created_on", sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.Column("deleted_on", sa.DateTime(timezone=True), nullable=True),
    )
    op.create_index("ix_users_deleted_on", "users", ["deleted_on"])

    op.create_table(
        "domains",
        sa.Column("id", sa.Integer, primary_key=True, autoincrement=True),
        sa.Column("name", sa.String(100), nullable=False, unique=True),
        sa.Column("description", sa.Text, nullable=True),
        sa.Column("created_on", sa.DateTime(timezone=True), server_default=sa.func.now()),
    )

    op.create_table(
        "modules",
        sa.Column("id", sa.Integer, primary_key=True, autoincrement=True),
        sa.Column("title", sa.String(200), nullable=False, unique=True),
        sa.Column("description", sa.Text, nullable=False),
        sa.Column("duration", sa.Integer, nullable=False),
        sa.Column("level", sa.String(50), nullable=True),
        sa.Column("threshold_score", sa.Numeric(5, 2), nullable=False, server_default="70"),
        sa.Column("created_on", sa.DateTime(timezone=True), server_default=sa.func.now()),
    )

    op.create_table(
        "domain_modules",
        sa.Column("id", sa.Integer, primary_key=True, autoincrement=True),
        sa.Column("domain_id", sa.Integer, sa.ForeignKey("domains.id", ondelete="CASCADE"), nullable=False),
        sa.Column("module_id", sa.Integer, sa.ForeignKey("modules.id", ondelete="CASCADE"), nullable=False),
        sa.Column("created_on", sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.UniqueConstraint("domain_id", "module_id", name="uq_domain_module"),
    )

    op.create_table(
        "user_domains",
        sa.Column("id", sa.Integer, primary_key=True, autoincrement=True),
        sa.Column("user_id", sa.Integer, sa.ForeignKey("users.id", ondelete="CASCADE"), nullable=False),
        sa.Column("domain_id", sa.Integer, sa.ForeignKey("domains.id", ondelete="CASCADE"), nullable=False),
        sa.Column("created_on", sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.UniqueConstraint("user_id", "domain_id", name="uq_user_domain"),
    )

    # --- Enrollments ---
    op.create_table(
        "user_modules",
        sa.Column("id", sa.Integer, primary_key=True, autoincrement=True),
        sa.Column(
            "user_domain_id", sa.Integer, sa.ForeignKey("user_domains.id", ondelete="CASCADE"), nullable=False
        ),
        sa.Column("module_id", sa.Integer, sa.ForeignKey("modules.id"), nullable=False),
        sa.Column("status", sa.String(20), nullable=False, server_default="todo"),
        sa.Column("questions_answered", sa.Integer, nullable=False, server_default="0"),
        sa.Column("score", sa.Numeric(5, 2), nullable=False, server_default="0"),
        sa.Column("threshold_score", sa.Numeric(5, 2), nullable=False, server_default="70"),
        sa.Column("last_quiz_result", sa.String(20), nullable=True),
        sa.Column("joined_on", sa.DateTime(timezone=True), nullable=False),
        sa.Column("completed_on", sa.DateTime(timezone=True), nullable=True),
        sa.Column("updated_on", sa.DateTime(timezone=True), nullable=True),
        sa.UniqueConstraint("user_domain_id", "module_id", name="uq_user_domain_module"),
    )
    op.create_index("ix_user_modules_user_domain_id", "user_modules", ["user_domain_id"])
    op.create_index("ix_user_modules_module_id", "user_modules", ["module_id"])

    # --- Quizzes ---
    op.create_table(
        "quizzes",
        sa.Column("id", sa.Integer, primary_key=True, autoincrement=True),
        sa.Column("module_id", sa.Integer, sa.ForeignKey("modules.id"), nullable=False),
        sa.Column("title", sa.String(200), nullable=False),
        sa.Column("created_on", sa.DateTime(timezone=True), server_default=sa.func.now()),
    )
    op.create_index("ix_quizzes_module_id", "quizzes", ["module_id"])

    op.create_table(
        "quiz_questions",
        sa.Column("id", sa.Integer, primary_key=True, autoincrement=True),
        sa.Column("quiz_id", sa.Integer, sa.ForeignKey("quizzes.id", ondelete="CASCADE"), nullable=False),
        sa.Column("question", sa.Text, nullable=False),
        sa.Column("marks", sa.Integer, nullable=True),
        sa.Column("order_in_quiz", sa.Integer, nullable=True),
    )

    op.create_table(
        "quiz_question_options",
        sa.Column("id", sa.Integer, primary_key=True, autoincrement=True),
        sa.Column(
            "question_id", sa.Integer, sa.ForeignKey("quiz_questions.id", ondelete="SET NULL"), nullable=True
        ),
        sa.Column("option_text", sa.Text, nullable=False, unique=True),
        sa.Column("is_correct", sa.Boolean, nullable=False, server_default=sa.false()),
    )
    op.create_index("ix_quiz_question_options_question_id", "quiz_question_options", ["question_id"])

    op.create_table(
        "user_quiz_responses",
        sa.Column("id", sa.Integer, primary_key=True, autoincrement=True),
        sa.Column("user_id", sa.Integer, sa.ForeignKey("users.id"), nullable=False),
        sa.Column("quiz_id", sa.Integer, sa.ForeignKey("quizzes.id", ondelete="CASCADE"), nullable=False),
        sa.Column(
            "question_id", sa.Integer, sa.ForeignKey("quiz_questions.id", ondelete="CASCADE"), nullable=False
        ),
        sa.Column(
            "option_id", sa.Integer, sa.ForeignKey("quiz_question_options.id", ondelete="SET NULL"), nullable=True
        ),
        sa.Column("is_correct", sa.Boolean, nullable=False),
        sa.Column("marks_obtained", sa.Numeric(10, 2), nullable=False),
        sa.Column("answered_on", sa.DateTime(timezone=True), nullable=False),
    )
    op.create_index("ix_user_quiz_responses_user_id", "user_quiz_responses", ["user_id"])

    # --- Tools ---
    op.create_table(
        "tools",
        sa.Column("id", sa.Integer, primary_key=True, autoincrement=True),
        sa.Column("name", sa.String(120), nullable=False, unique=True),
        sa.Column("description", sa.Text, nullable=True),
        sa.Column("created_on", sa.DateTime(timezone=True), server_default=sa.func.now()),
    )

    op.create_table(
        "user_tools",
        sa.Column("id", sa.Integer, primary_key=True, autoincrement=True),
        sa.Column(
            "user_domain_id",
            sa.Integer,
            sa.ForeignKey("user_domains.id", ondelete="CASCADE"),
            nullable=False,
            unique=True,
        ),
        sa.Column("tool_id", sa.Integer, sa.ForeignKey("tools.id", ondelete="CASCADE"), nullable=False),
        sa.Column("created_on", sa.DateTime(timezone=True), nullable=False),
        sa.Column("updated_on", sa.DateTime(timezone=True), nullable=False),
    )

    # --- Change log ---
    op.create_table(
        "change_log",
        sa.Column("id", sa.Integer, primary_key=True, autoincrement=True),
        sa.Column("change_type", sa.String(50), nullable=False),
        sa.Column("change_type_id", sa.Integer, nullable=False),
        sa.Column("user_id", sa.Integer, nullable=False),
        sa.Column("reason", sa.Text, nullable=True),
        sa.Column("updated_on", sa.DateTime(timezone=True), nullable=False),
    )
    op.create_index("idx_change_log_type", "change_log", ["change_type", "change_type_id"])


def downgrade() -> None:
    op.drop_table("change_log")
    op.drop_table("user_tools")
    op.drop_table("tools")
    op.drop_table("user_quiz_responses")
    op.drop_table("quiz_question_options")
    op.drop_table("quiz_questions")
    op.drop_table("quizzes")
    op.drop_table("user_modules")
    op.drop_table("user_domains")
    op.drop_table("domain_modules")
    op.drop_table("modules")
    op.drop_table("domains")
    op.drop_table("users")
