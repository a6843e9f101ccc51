from __future__ import annotations

import uuid
from datetime import UTC, date, datetime
from decimal import Decimal

from sqlalchemy import (
    Boolean,
    CheckConstraint,
    Date,
    DateTime,
    Float,
    Index,
    Numeric,
    String,
    Text,
)
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column


class Base(DeclarativeBase):
    pass


def _new_id() -> str:
    return str(uuid.uuid4())


def _utcnow() -> datetime:
    return datetime.now(UTC)


# Enum-valued columns are stored as plain strings and validated at the
# application boundary (finwise.rows); CHECK constraints below mirror the
# allowed sets so bad writes from other clients fail loudly too.
_CATEGORIES = (
    "'housing','food','transportation','utilities','entertainment',"
    "'shopping','healthcare','savings','income','other'"
)
_PERIODS = "'daily','weekly','monthly','yearly'"


# ---------------------------
# transactions
# ---------------------------


class TransactionRecord(Base):
    __tablename__ = "transactions"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=_new_id)
    user_id: Mapped[str] = mapped_column(String, nullable=False)
    amount: Mapped[Decimal] = mapped_column(Numeric(14, 2), nullable=False)
    date: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, default=_utcnow)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    category: Mapped[str] = mapped_column(String, nullable=False)
    is_income: Mapped[bool | None] = mapped_column(Boolean, nullable=True, default=False)
    is_recurring: Mapped[bool | None] = mapped_column(Boolean, nullable=True, default=False)
    recurring_frequency: Mapped[str | None] = mapped_column(String, nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=_utcnow
    )

    __table_args__ = (
        CheckConstraint("amount >= 0", name="ck_transactions_amount_non_negative"),
        CheckConstraint(f"category in ({_CATEGORIES})", name="ck_transactions_category"),
        CheckConstraint(
            f"recurring_frequency IS NULL OR recurring_frequency in ({_PERIODS})",
            name="ck_transactions_recurring_frequency",
        ),
        Index("ix_transactions_user_id", "user_id"),
    )


# ---------------------------
# budgets
# ---------------------------


class BudgetRecord(Base):
    __tablename__ = "budgets"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=_new_id)
    user_id: Mapped[str] = mapped_column(String, nullable=False)
    category: Mapped[str] = mapped_column(String, nullable=False)
    budget_limit: Mapped[Decimal] = mapped_column(Numeric(14, 2), nullable=False)
    period: Mapped[str | None] = mapped_column(String, nullable=True, default="monthly")
    start_date: Mapped[date] = mapped_column(Date, nullable=False)
    is_active: Mapped[bool | None] = mapped_column(Boolean, nullable=True, default=True)
    # Cache only. Overwritten by every recompute; never read as authoritative.
    current_spent: Mapped[Decimal | None] = mapped_column(
        Numeric(14, 2), nullable=True, default=Decimal("0")
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=_utcnow
    )

    __table_args__ = (
        CheckConstraint("budget_limit > 0", name="ck_budgets_limit_positive"),
        CheckConstraint(f"category in ({_CATEGORIES})", name="ck_budgets_category"),
        CheckConstraint(f"period IS NULL OR period in ({_PERIODS})", name="ck_budgets_period"),
        Index("ix_budgets_user_id", "user_id"),
    )


# ---------------------------
# savings_goals
# ---------------------------


class SavingsGoalRecord(Base):
    __tablename__ = "savings_goals"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=_new_id)
    user_id: Mapped[str] = mapped_column(String, nullable=False)
    name: Mapped[str] = mapped_column(Text, nullable=False)
    target_amount: Mapped[Decimal] = mapped_column(Numeric(14, 2), nullable=False)
    current_amount: Mapped[Decimal | None] = mapped_column(
        Numeric(14, 2), nullable=True, default=Decimal("0")
    )
    deadline: Mapped[date | None] = mapped_column(Date, nullable=True)
    category: Mapped[str | None] = mapped_column(String, nullable=True)
    priority: Mapped[str | None] = mapped_column(String, nullable=True)
    is_completed: Mapped[bool | None] = mapped_column(Boolean, nullable=True, default=False)
    image_url: Mapped[str | None] = mapped_column(Text, nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=_utcnow
    )

    __table_args__ = (
        CheckConstraint("target_amount > 0", name="ck_savings_goals_target_positive"),
        CheckConstraint(
            "current_amount IS NULL OR current_amount >= 0",
            name="ck_savings_goals_current_non_negative",
        ),
        CheckConstraint(
            "priority IS NULL OR priority in ('low','medium','high')",
            name="ck_savings_goals_priority",
        ),
        Index("ix_savings_goals_user_id", "user_id"),
    )


# ---------------------------
# ai_tips / chat_messages
# ---------------------------


class AiTipRecord(Base):
    __tablename__ = "ai_tips"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=_new_id)
    user_id: Mapped[str] = mapped_column(String, nullable=False)
    content: Mapped[str] = mapped_column(Text, nullable=False)
    category: Mapped[str | None] = mapped_column(String, nullable=True)
    is_read: Mapped[bool | None] = mapped_column(Boolean, nullable=True, default=False)
    relevance_score: Mapped[float | None] = mapped_column(Float, nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=_utcnow
    )

    __table_args__ = (Index("ix_ai_tips_user_id", "user_id"),)


class ChatMessageRecord(Base):
    __tablename__ = "chat_messages"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=_new_id)
    user_id: Mapped[str] = mapped_column(String, nullable=False)
    content: Mapped[str] = mapped_column(Text, nullable=False)
    sender: Mapped[str] = mapped_column(String, nullable=False)
    timestamp: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=_utcnow
    )

    __table_args__ = (
        CheckConstraint("sender in ('user','ai')", name="ck_chat_messages_sender"),
        Index("ix_chat_messages_user_id_timestamp", "user_id", "timestamp"),
    )


__all__ = [
    "Base",
    "TransactionRecord",
    "BudgetRecord",
    "SavingsGoalRecord",
    "AiTipRecord",
    "ChatMessageRecord",
]
