"""Domain entities and enums for ``finwise``.

All entities are frozen dataclasses. Mutating operations (recomputing a
budget's spent cache, contributing to a goal) return new instances via
:func:`dataclasses.replace`, so a snapshot handed to the aggregation engine is
never changed behind the caller's back.

Money is always :class:`decimal.Decimal` in cents. Use :func:`to_amount` at the edges
to coerce user/DB input; it rejects NaN/Infinity and unparseable values.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from enum import StrEnum
from typing import Any

from .errors import ValidationError

# ---------------------------------------------------------------------------
# Enums
# ---------------------------------------------------------------------------


class Category(StrEnum):
    HOUSING = "housing"
    FOOD = "food"
    TRANSPORTATION = "transportation"
    UTILITIES = "utilities"
    ENTERTAINMENT = "entertainment"
    SHOPPING = "shopping"
    HEALTHCARE = "healthcare"
    SAVINGS = "savings"
    INCOME = "income"
    OTHER = "other"


class Period(StrEnum):
    """Budget reset cadence; also used as a transaction's recurrence frequency."""

    DAILY = "daily"
    WEEKLY = "weekly"
    MONTHLY = "monthly"
    YEARLY = "yearly"


class Priority(StrEnum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


class GoalCategory(StrEnum):
    EMERGENCY = "emergency"
    RETIREMENT = "retirement"
    EDUCATION = "education"
    LARGE_PURCHASE = "large_purchase"
    VACATION = "vacation"
    OTHER = "other"


class Sender(StrEnum):
    USER = "user"
    AI = "ai"


ZERO = Decimal("0")
HUNDRED = Decimal("100")
CENT = Decimal("0.01")


def to_amount(raw: Any, *, field: str = "amount") -> Decimal:
    """Coerce ``raw`` to a finite ``Decimal`` or raise :class:`ValidationError`.

    Floats go through ``str`` first so ``0.1`` becomes ``Decimal("0.1")``
    rather than its binary expansion. The result is rounded half-up to cents,
    the precision every money column stores, so comparisons made before a
    write agree with what a reload returns.
    """

    if isinstance(raw, bool) or raw is None:
        raise ValidationError(f"{field} must be a number, got {raw!r}")
    try:
        value = raw if isinstance(raw, Decimal) else Decimal(str(raw).strip())
    except (InvalidOperation, ValueError):
        raise ValidationError(f"{field} must be a number, got {raw!r}") from None
    if not value.is_finite():
        raise ValidationError(f"{field} must be finite, got {raw!r}")
    try:
        return value.quantize(CENT, rounding=ROUND_HALF_UP)
    except InvalidOperation:
        raise ValidationError(f"{field} is out of range, got {raw!r}") from None


def to_enum[E: StrEnum](enum_cls: type[E], raw: Any, *, field: str) -> E:
    try:
        return enum_cls(raw)
    except ValueError:
        allowed = ", ".join(m.value for m in enum_cls)
        raise ValidationError(f"{field} must be one of: {allowed}; got {raw!r}") from None


# ---------------------------------------------------------------------------
# Entities
# ---------------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class Transaction:
    """A single inflow or outflow.

    ``amount`` is always non-negative; direction is carried by ``is_income``.
    """

    id: str
    user_id: str
    amount: Decimal
    date: datetime
    description: str
    category: Category
    is_income: bool = False
    is_recurring: bool = False
    recurring_frequency: Period | None = None


@dataclass(frozen=True, slots=True)
class Budget:
    """A spending ceiling for one category over one period.

    ``current_spent`` is a cache. The aggregation engine overwrites it from
    the transaction set on every recompute; never treat a stored value as the
    source of truth.
    """

    id: str
    user_id: str
    category: Category
    limit: Decimal
    period: Period
    start_date: date
    is_active: bool = True
    current_spent: Decimal = ZERO


@dataclass(frozen=True, slots=True)
class SavingsGoal:
    """A savings target.

    Invariant: ``is_completed == (current_amount >= target_amount)`` after
    every ledger mutation. Completion is terminal.
    """

    id: str
    user_id: str
    name: str
    target_amount: Decimal
    current_amount: Decimal
    category: GoalCategory
    priority: Priority
    created_at: datetime
    is_completed: bool = False
    deadline: date | None = None
    image_url: str | None = None

    @property
    def progress_percent(self) -> Decimal:
        """Progress toward the target, capped at 100."""
        if self.target_amount <= ZERO:
            return ZERO
        return min(self.current_amount / self.target_amount * HUNDRED, HUNDRED)


@dataclass(frozen=True, slots=True)
class AiTip:
    id: str
    user_id: str
    content: str
    created_at: datetime
    category: str | None = None
    is_read: bool = False
    # Display/sort only; not computed here.
    relevance_score: float | None = None


@dataclass(frozen=True, slots=True)
class ChatMessage:
    id: str
    user_id: str
    content: str
    sender: Sender
    timestamp: datetime


# ---------------------------------------------------------------------------
# Derived results
# ---------------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class CategorySummary:
    category: Category
    limit: Decimal
    spent: Decimal
    remaining: Decimal
    percent_used: Decimal


@dataclass(frozen=True, slots=True)
class BudgetSummary:
    """Totals across all budgets plus one :class:`CategorySummary` per budget.

    ``remaining`` may be negative (overspend); it is never clamped.
    """

    total_budget: Decimal
    total_spent: Decimal
    remaining: Decimal
    percent_used: Decimal
    categories: tuple[CategorySummary, ...] = ()


@dataclass(frozen=True, slots=True)
class ContributionResult:
    """Outcome of a ledger update.

    ``just_completed`` is True only on the ACTIVE -> COMPLETED transition, so
    callers can tell a celebratory update apart from an ordinary one.
    """

    goal: SavingsGoal
    just_completed: bool


__all__ = [
    "Category",
    "Period",
    "Priority",
    "GoalCategory",
    "Sender",
    "to_amount",
    "to_enum",
    "Transaction",
    "Budget",
    "SavingsGoal",
    "AiTip",
    "ChatMessage",
    "CategorySummary",
    "BudgetSummary",
    "ContributionResult",
]
