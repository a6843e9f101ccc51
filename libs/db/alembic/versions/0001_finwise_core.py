"""Core finwise tables: transactions, budgets, savings goals, tips, chat.

Revision ID: 0001_finwise_core
Revises: None
Create Date: 2026-10-16
"""

from __future__ import annotations

from collections.abc import Sequence

import sqlalchemy as sa
from alembic import op

# revision identifiers, used by Alembic.
revision: str = "0001_finwise_core"
down_revision: str | None = None
branch_labels: str | Sequence[str] | None = None
depends_on: str | Sequence[str] | None = None


_CATEGORIES = (
    "'housing','food','transportation','utilities','entertainment',"
    "'shopping','healthcare','savings','income','other'"
)
_PERIODS = "'daily','weekly','monthly','yearly'"


def _timestamp(name: str) -> sa.Column:
    return sa.Column(
        name,
        sa.DateTime(timezone=True),
        nullable=False,
        server_default=sa.func.current_timestamp(),
    )


def upgrade() -> None:
    op.create_table(
        "transactions",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column("user_id", sa.String(), nullable=False),
        sa.Column("amount", sa.Numeric(14, 2), nullable=False),
        _timestamp("date"),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("category", sa.String(), nullable=False),
        sa.Column("is_income", sa.Boolean(), nullable=True, server_default=sa.false()),
        sa.Column("is_recurring", sa.Boolean(), nullable=True, server_default=sa.false()),
        sa.Column("recurring_frequency", sa.String(), nullable=True),
        _timestamp("created_at"),
        sa.CheckConstraint("amount >= 0", name="ck_transactions_amount_non_negative"),
        sa.CheckConstraint(f"category in ({_CATEGORIES})", name="ck_transactions_category"),
        sa.CheckConstraint(
            f"recurring_frequency IS NULL OR recurring_frequency in ({_PERIODS})",
            name="ck_transactions_recurring_frequency",
        ),
    )
    op.create_index("ix_transactions_user_id", "transactions", ["user_id"])

    op.create_table(
        "budgets",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column("user_id", sa.String(), nullable=False),
        sa.Column("category", sa.String(), nullable=False),
        sa.Column("budget_limit", sa.Numeric(14, 2), nullable=False),
        sa.Column("period", sa.String(), nullable=True, server_default="monthly"),
        sa.Column("start_date", sa.Date(), nullable=False),
        sa.Column("is_active", sa.Boolean(), nullable=True, server_default=sa.true()),
        sa.Column("current_spent", sa.Numeric(14, 2), nullable=True, server_default="0"),
        _timestamp("created_at"),
        sa.CheckConstraint("budget_limit > 0", name="ck_budgets_limit_positive"),
        sa.CheckConstraint(f"category in ({_CATEGORIES})", name="ck_budgets_category"),
        sa.CheckConstraint(f"period IS NULL OR period in ({_PERIODS})", name="ck_budgets_period"),
    )
    op.create_index("ix_budgets_user_id", "budgets", ["user_id"])

    op.create_table(
        "savings_goals",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column("user_id", sa.String(), nullable=False),
        sa.Column("name", sa.Text(), nullable=False),
        sa.Column("target_amount", sa.Numeric(14, 2), nullable=False),
        sa.Column("current_amount", sa.Numeric(14, 2), nullable=True, server_default="0"),
        sa.Column("deadline", sa.Date(), nullable=True),
        sa.Column("category", sa.String(), nullable=True),
        sa.Column("priority", sa.String(), nullable=True),
        sa.Column("is_completed", sa.Boolean(), nullable=True, server_default=sa.false()),
        sa.Column("image_url", sa.Text(), nullable=True),
        _timestamp("created_at"),
        sa.CheckConstraint("target_amount > 0", name="ck_savings_goals_target_positive"),
        sa.CheckConstraint(
            "current_amount IS NULL OR current_amount >= 0",
            name="ck_savings_goals_current_non_negative",
        ),
        sa.CheckConstraint(
            "priority IS NULL OR priority in ('low','medium','high')",
            name="ck_savings_goals_priority",
        ),
    )
    op.create_index("ix_savings_goals_user_id", "savings_goals", ["user_id"])

    op.create_table(
        "ai_tips",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column("user_id", sa.String(), nullable=False),
        sa.Column("content", sa.Text(), nullable=False),
        sa.Column("category", sa.String(), nullable=True),
        sa.Column("is_read", sa.Boolean(), nullable=True, server_default=sa.false()),
        sa.Column("relevance_score", sa.Float(), nullable=True),
        _timestamp("created_at"),
    )
    op.create_index("ix_ai_tips_user_id", "ai_tips", ["user_id"])

    op.create_table(
        "chat_messages",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column("user_id", sa.String(), nullable=False),
        sa.Column("content", sa.Text(), nullable=False),
        sa.Column("sender", sa.String(), nullable=False),
        _timestamp("timestamp"),
        sa.CheckConstraint("sender in ('user','ai')", name="ck_chat_messages_sender"),
    )
    op.create_index(
        "ix_chat_messages_user_id_timestamp", "chat_messages", ["user_id", "timestamp"]
    )


def downgrade() -> None:
    op.drop_index("ix_chat_messages_user_id_timestamp", table_name="chat_messages")
    op.drop_table("chat_messages")
    op.drop_index("ix_ai_tips_user_id", table_name="ai_tips")
    op.drop_table("ai_tips")
    op.drop_index("ix_savings_goals_user_id", table_name="savings_goals")
    op.drop_table("savings_goals")
    op.drop_index("ix_budgets_user_id", table_name="budgets")
    op.drop_table("budgets")
    op.drop_index("ix_transactions_user_id", table_name="transactions")
    op.drop_table("transactions")
