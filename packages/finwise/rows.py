"""Typed boundary between stored rows and domain entities.

Rows use the stored column names (``budget_limit``, ``current_spent``,
``is_income``...) and can be validated from plain mappings or directly from
ORM objects (``from_attributes``). Each ``*_from_row`` function validates,
applies the column defaults the store uses for NULLs, and returns the frozen
domain entity.

Unknown enum values are rejected with :class:`finwise.errors.ValidationError`;
they are never passed through as free strings.
"""

from __future__ import annotations

from datetime import date, datetime
from decimal import Decimal
from typing import Any

from pydantic import BaseModel, ConfigDict, field_validator
from pydantic import ValidationError as PydanticValidationError

from .errors import ValidationError
from .models import (
    AiTip,
    Budget,
    Category,
    ChatMessage,
    GoalCategory,
    Period,
    Priority,
    SavingsGoal,
    Sender,
    Transaction,
)


class _Row(BaseModel):
    model_config = ConfigDict(from_attributes=True, extra="ignore")


def _finite(v: Decimal | None) -> Decimal | None:
    if v is not None and not v.is_finite():
        raise ValueError("must be a finite number")
    return v


class TransactionRow(_Row):
    id: str
    user_id: str
    amount: Decimal
    date: datetime
    description: str | None = None
    category: Category
    is_income: bool | None = None
    is_recurring: bool | None = None
    recurring_frequency: Period | None = None

    @field_validator("amount")
    @classmethod
    def _amount_non_negative(cls, v: Decimal) -> Decimal:
        _finite(v)
        if v < 0:
            raise ValueError("amount must be non-negative")
        return v


class BudgetRow(_Row):
    id: str
    user_id: str
    category: Category
    budget_limit: Decimal
    period: Period | None = None
    start_date: date
    is_active: bool | None = None
    current_spent: Decimal | None = None

    @field_validator("budget_limit", "current_spent")
    @classmethod
    def _finite_money(cls, v: Decimal | None) -> Decimal | None:
        return _finite(v)

    @field_validator("start_date", mode="before")
    @classmethod
    def _date_only(cls, v: Any) -> Any:
        # Timestamp columns come back as datetimes; keep the calendar date.
        if isinstance(v, datetime):
            return v.date()
        return v


class SavingsGoalRow(_Row):
    id: str
    user_id: str
    name: str
    target_amount: Decimal
    current_amount: Decimal | None = None
    deadline: date | None = None
    category: GoalCategory | None = None
    priority: Priority | None = None
    is_completed: bool | None = None
    created_at: datetime
    image_url: str | None = None

    @field_validator("target_amount", "current_amount")
    @classmethod
    def _finite_money(cls, v: Decimal | None) -> Decimal | None:
        return _finite(v)


class AiTipRow(_Row):
    id: str
    user_id: str
    content: str
    category: str | None = None
    created_at: datetime
    is_read: bool | None = None
    relevance_score: float | None = None


class ChatMessageRow(_Row):
    id: str
    user_id: str
    content: str
    sender: Sender
    timestamp: datetime


def _validate[RowT: _Row](model: type[RowT], raw: Any) -> RowT:
    try:
        return model.model_validate(raw)
    except PydanticValidationError as e:
        fields = ", ".join(".".join(str(p) for p in err["loc"]) for err in e.errors())
        raise ValidationError(f"invalid {model.__name__} ({fields}): {e}") from e


def transaction_from_row(raw: Any) -> Transaction:
    row = _validate(TransactionRow, raw)
    return Transaction(
        id=row.id,
        user_id=row.user_id,
        amount=row.amount,
        date=row.date,
        description=row.description or "",
        category=row.category,
        is_income=bool(row.is_income),
        is_recurring=bool(row.is_recurring),
        recurring_frequency=row.recurring_frequency,
    )


def budget_from_row(raw: Any) -> Budget:
    row = _validate(BudgetRow, raw)
    return Budget(
        id=row.id,
        user_id=row.user_id,
        category=row.category,
        limit=row.budget_limit,
        period=row.period or Period.MONTHLY,
        start_date=row.start_date,
        is_active=True if row.is_active is None else row.is_active,
        current_spent=row.current_spent or Decimal("0"),
    )


def goal_from_row(raw: Any) -> SavingsGoal:
    row = _validate(SavingsGoalRow, raw)
    return SavingsGoal(
        id=row.id,
        user_id=row.user_id,
        name=row.name,
        target_amount=row.target_amount,
        current_amount=row.current_amount or Decimal("0"),
        category=row.category or GoalCategory.OTHER,
        priority=row.priority or Priority.MEDIUM,
        created_at=row.created_at,
        is_completed=bool(row.is_completed),
        deadline=row.deadline,
        image_url=row.image_url,
    )


def tip_from_row(raw: Any) -> AiTip:
    row = _validate(AiTipRow, raw)
    return AiTip(
        id=row.id,
        user_id=row.user_id,
        content=row.content,
        created_at=row.created_at,
        category=row.category,
        is_read=bool(row.is_read),
        relevance_score=row.relevance_score,
    )


def chat_message_from_row(raw: Any) -> ChatMessage:
    row = _validate(ChatMessageRow, raw)
    return ChatMessage(
        id=row.id,
        user_id=row.user_id,
        content=row.content,
        sender=row.sender,
        timestamp=row.timestamp,
    )


__all__ = [
    "TransactionRow",
    "BudgetRow",
    "SavingsGoalRow",
    "AiTipRow",
    "ChatMessageRow",
    "transaction_from_row",
    "budget_from_row",
    "goal_from_row",
    "tip_from_row",
    "chat_message_from_row",
]
