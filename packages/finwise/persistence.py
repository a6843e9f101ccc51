"""SQL persistence for finwise entities.

Functions here read and write the tables owned by ``libs/db`` through the ORM
models in ``db.models.finance``. Every function takes an active ``Session``;
callers own the transaction scope (usually :func:`db.client.session_scope`).
Reads are always scoped to one ``user_id``.

Rows are turned into domain entities through :mod:`finwise.rows`, so a row
holding an unknown category or a non-finite amount surfaces as
:class:`~finwise.errors.ValidationError` instead of leaking through.
"""

from __future__ import annotations

import uuid
from collections.abc import Iterable
from datetime import UTC, date, datetime
from typing import Any

from sqlalchemy import delete, select
from sqlalchemy.orm import Session

from db.models.finance import (
    AiTipRecord,
    BudgetRecord,
    ChatMessageRecord,
    SavingsGoalRecord,
    TransactionRecord,
)

from .errors import NotFoundError, ValidationError
from .goals import UpdateMode, update_goal
from .logging_setup import get_logger
from .models import (
    ZERO,
    AiTip,
    Budget,
    Category,
    ChatMessage,
    ContributionResult,
    Period,
    SavingsGoal,
    Transaction,
    to_amount,
    to_enum,
)
from .rows import (
    budget_from_row,
    chat_message_from_row,
    goal_from_row,
    tip_from_row,
    transaction_from_row,
)

_logger = get_logger("finwise.persistence")


# ---------------------------
# Reads
# ---------------------------


def list_transactions(session: Session, *, user_id: str) -> list[Transaction]:
    rows = session.execute(
        select(TransactionRecord)
        .where(TransactionRecord.user_id == user_id)
        .order_by(TransactionRecord.date, TransactionRecord.id)
    ).scalars()
    return [transaction_from_row(r) for r in rows]


def list_budgets(session: Session, *, user_id: str) -> list[Budget]:
    """Return the user's budgets as stored.

    ``current_spent`` here is whatever the cache column holds; run the result
    through :func:`finwise.budgets.recompute_budgets` before trusting it.
    """

    rows = session.execute(
        select(BudgetRecord)
        .where(BudgetRecord.user_id == user_id)
        .order_by(BudgetRecord.created_at, BudgetRecord.id)
    ).scalars()
    return [budget_from_row(r) for r in rows]


def list_goals(session: Session, *, user_id: str) -> list[SavingsGoal]:
    rows = session.execute(
        select(SavingsGoalRecord)
        .where(SavingsGoalRecord.user_id == user_id)
        .order_by(SavingsGoalRecord.created_at, SavingsGoalRecord.id)
    ).scalars()
    return [goal_from_row(r) for r in rows]


def list_tips(session: Session, *, user_id: str) -> list[AiTip]:
    """Tips by descending relevance; unscored tips last, newest first among ties."""

    rows = session.execute(
        select(AiTipRecord)
        .where(AiTipRecord.user_id == user_id)
        .order_by(
            AiTipRecord.relevance_score.desc().nulls_last(),
            AiTipRecord.created_at.desc(),
            AiTipRecord.id,
        )
    ).scalars()
    return [tip_from_row(r) for r in rows]


def list_chat_history(session: Session, *, user_id: str) -> list[ChatMessage]:
    rows = session.execute(
        select(ChatMessageRecord)
        .where(ChatMessageRecord.user_id == user_id)
        .order_by(ChatMessageRecord.timestamp, ChatMessageRecord.id)
    ).scalars()
    return [chat_message_from_row(r) for r in rows]


# ---------------------------
# Writes
# ---------------------------


def add_transaction(
    session: Session,
    *,
    user_id: str,
    amount: Any,
    category: Category | str,
    description: str = "",
    is_income: bool = False,
    is_recurring: bool = False,
    recurring_frequency: Period | str | None = None,
    occurred_at: datetime | None = None,
) -> Transaction:
    """Insert one transaction; ``amount`` must be non-negative."""

    value = to_amount(amount)
    if value < ZERO:
        raise ValidationError(f"amount must be non-negative, got {value}")
    cat = to_enum(Category, category, field="category")
    freq = (
        to_enum(Period, recurring_frequency, field="recurring_frequency")
        if recurring_frequency is not None
        else None
    )
    if freq is not None and not is_recurring:
        raise ValidationError("recurring_frequency requires is_recurring=True")

    row = TransactionRecord(
        id=str(uuid.uuid4()),
        user_id=user_id,
        amount=value,
        date=occurred_at or datetime.now(UTC),
        description=description,
        category=cat.value,
        is_income=is_income,
        is_recurring=is_recurring,
        recurring_frequency=freq.value if freq else None,
    )
    session.add(row)
    session.flush()
    _logger.info(
        "persistence:add_transaction user_id=%s id=%s category=%s amount=%s is_income=%s",
        user_id,
        row.id,
        cat.value,
        value,
        is_income,
    )
    return transaction_from_row(row)


def create_budget(
    session: Session,
    *,
    user_id: str,
    category: Category | str,
    limit: Any,
    period: Period | str = Period.MONTHLY,
    start_date: date | None = None,
) -> Budget:
    """Insert an active budget with a zero spent cache; ``limit`` must be positive."""

    value = to_amount(limit, field="limit")
    if value <= ZERO:
        raise ValidationError(f"limit must be positive, got {value}")
    cat = to_enum(Category, category, field="category")
    per = to_enum(Period, period, field="period")

    row = BudgetRecord(
        id=str(uuid.uuid4()),
        user_id=user_id,
        category=cat.value,
        budget_limit=value,
        period=per.value,
        start_date=start_date or datetime.now(UTC).date(),
        is_active=True,
        current_spent=ZERO,
        created_at=datetime.now(UTC),
    )
    session.add(row)
    session.flush()
    _logger.info(
        "persistence:create_budget user_id=%s id=%s category=%s limit=%s",
        user_id,
        row.id,
        cat.value,
        value,
    )
    return budget_from_row(row)


def create_goal(session: Session, goal: SavingsGoal) -> SavingsGoal:
    """Persist a goal built by :func:`finwise.goals.new_goal`."""

    row = SavingsGoalRecord(
        id=goal.id,
        user_id=goal.user_id,
        name=goal.name,
        target_amount=goal.target_amount,
        current_amount=goal.current_amount,
        deadline=goal.deadline,
        category=goal.category.value,
        priority=goal.priority.value,
        is_completed=goal.is_completed,
        image_url=goal.image_url,
        created_at=goal.created_at,
    )
    session.add(row)
    session.flush()
    _logger.info(
        "persistence:create_goal user_id=%s id=%s target=%s",
        goal.user_id,
        goal.id,
        goal.target_amount,
    )
    return goal_from_row(row)


def apply_contribution(
    session: Session,
    *,
    user_id: str,
    goal_id: str,
    amount: Any,
    mode: UpdateMode = "contribute",
) -> ContributionResult:
    """Update a stored goal under a row lock.

    The row is read with ``SELECT ... FOR UPDATE`` so concurrent callers on
    the same goal serialize; the second one sees the first one's amount and
    no contribution is lost. Raises :class:`NotFoundError` when the goal does
    not exist or belongs to another user.
    """

    row = (
        session.execute(
            select(SavingsGoalRecord)
            .where(SavingsGoalRecord.id == goal_id, SavingsGoalRecord.user_id == user_id)
            .with_for_update()
        )
        .scalars()
        .first()
    )
    if row is None:
        raise NotFoundError("savings goal", goal_id)

    result = update_goal(goal_from_row(row), amount, mode=mode)
    row.current_amount = result.goal.current_amount
    row.is_completed = result.goal.is_completed
    session.flush()
    _logger.info(
        "persistence:apply_contribution user_id=%s goal_id=%s mode=%s current_amount=%s "
        "just_completed=%s",
        user_id,
        goal_id,
        mode,
        result.goal.current_amount,
        result.just_completed,
    )
    return result


def store_budget_spent(session: Session, budgets: Iterable[Budget]) -> int:
    """Write recomputed ``current_spent`` values back to the cache column."""

    count = 0
    for b in budgets:
        row = session.get(BudgetRecord, b.id)
        if row is None or row.user_id != b.user_id:
            continue
        row.current_spent = b.current_spent
        count += 1
    session.flush()
    return count


def add_tip(
    session: Session,
    *,
    user_id: str,
    content: str,
    category: str | None = None,
    relevance_score: float | None = None,
    created_at: datetime | None = None,
) -> AiTip:
    if not content or not content.strip():
        raise ValidationError("tip content cannot be empty")
    row = AiTipRecord(
        id=str(uuid.uuid4()),
        user_id=user_id,
        content=content.strip(),
        category=category,
        is_read=False,
        relevance_score=relevance_score,
        created_at=created_at or datetime.now(UTC),
    )
    session.add(row)
    session.flush()
    return tip_from_row(row)


def append_chat_messages(session: Session, messages: Iterable[ChatMessage]) -> None:
    for m in messages:
        session.add(
            ChatMessageRecord(
                id=m.id,
                user_id=m.user_id,
                content=m.content,
                sender=m.sender.value,
                timestamp=m.timestamp,
            )
        )
    session.flush()


def clear_user_data(session: Session, *, user_id: str) -> None:
    """Delete every row owned by ``user_id`` across all finwise tables."""

    for model in (
        TransactionRecord,
        BudgetRecord,
        SavingsGoalRecord,
        AiTipRecord,
        ChatMessageRecord,
    ):
        session.execute(delete(model).where(model.user_id == user_id))
    session.flush()


__all__ = [
    "list_transactions",
    "list_budgets",
    "list_goals",
    "list_tips",
    "list_chat_history",
    "add_transaction",
    "create_budget",
    "create_goal",
    "apply_contribution",
    "store_budget_spent",
    "add_tip",
    "append_chat_messages",
    "clear_user_data",
]
