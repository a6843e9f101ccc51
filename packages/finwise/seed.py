from __future__ import annotations

# Demo data seeder.
#
# Usage (example):
#   uv run python -m finwise.seed --database-url sqlite:///finwise.db --user-id demo
#
# This script:
#   1) Deletes every row owned by the user across the finwise tables.
#   2) Inserts a small fixed dataset (three transactions, two budgets, two
#      goals, one tip and one greeting) and stores the recomputed spent cache.
# Running it twice leaves the same data behind.
import argparse
import dataclasses
import uuid
from datetime import UTC, date, datetime
from decimal import Decimal

from db.client import session_scope
from sqlalchemy.orm import Session

from . import persistence
from .context import FinanceContext
from .goals import new_goal
from .logging_setup import configure_logging, get_logger
from .models import Category, ChatMessage, GoalCategory, Period, Priority, Sender

_logger = get_logger("finwise.seed")

DEMO_TIP = (
    "You've spent 80% of your entertainment budget this month. "
    "Consider limiting non-essential activities for the next week."
)
DEMO_GREETING = "Hi! How can I help with your finances today?"


def _at(y: int, m: int, d: int, hh: int = 0, mm: int = 0) -> datetime:
    return datetime(y, m, d, hh, mm, tzinfo=UTC)


def seed_demo(session: Session, *, user_id: str) -> FinanceContext:
    """Replace ``user_id``'s data with the demo dataset and return its context."""

    persistence.clear_user_data(session, user_id=user_id)

    persistence.add_transaction(
        session,
        user_id=user_id,
        amount=Decimal("1200"),
        category=Category.HOUSING,
        description="Rent",
        is_recurring=True,
        recurring_frequency=Period.MONTHLY,
        occurred_at=_at(2023, 4, 1),
    )
    persistence.add_transaction(
        session,
        user_id=user_id,
        amount=Decimal("85.42"),
        category=Category.FOOD,
        description="Grocery shopping",
        occurred_at=_at(2023, 4, 2),
    )
    persistence.add_transaction(
        session,
        user_id=user_id,
        amount=Decimal("4500"),
        category=Category.INCOME,
        description="Salary",
        is_income=True,
        is_recurring=True,
        recurring_frequency=Period.MONTHLY,
        occurred_at=_at(2023, 4, 5),
    )

    for category, limit in ((Category.HOUSING, "1500"), (Category.FOOD, "600")):
        persistence.create_budget(
            session,
            user_id=user_id,
            category=category,
            limit=Decimal(limit),
            period=Period.MONTHLY,
            start_date=date(2023, 4, 1),
        )

    goals = [
        (
            new_goal(
                user_id=user_id,
                name="Emergency Fund",
                target_amount=Decimal("10000"),
                category=GoalCategory.EMERGENCY,
                priority=Priority.HIGH,
                created_at=_at(2023, 2, 1),
            ),
            Decimal("5000"),
        ),
        (
            new_goal(
                user_id=user_id,
                name="Japan Trip",
                target_amount=Decimal("3500"),
                category=GoalCategory.VACATION,
                priority=Priority.MEDIUM,
                deadline=date(2023, 12, 31),
                created_at=_at(2023, 1, 15),
            ),
            Decimal("1200"),
        ),
    ]
    for goal, current in goals:
        persistence.create_goal(session, dataclasses.replace(goal, current_amount=current))

    persistence.add_tip(
        session,
        user_id=user_id,
        content=DEMO_TIP,
        category="budgeting",
        relevance_score=0.85,
        created_at=_at(2023, 4, 20),
    )
    persistence.append_chat_messages(
        session,
        [
            ChatMessage(
                id=str(uuid.uuid4()),
                user_id=user_id,
                content=DEMO_GREETING,
                sender=Sender.AI,
                timestamp=_at(2023, 4, 21, 9, 0),
            )
        ],
    )

    ctx = FinanceContext.load(session, user_id=user_id)
    persistence.store_budget_spent(session, ctx.budgets)
    _logger.info(
        "seed:demo user_id=%s transactions=%d budgets=%d goals=%d",
        user_id,
        len(ctx.transactions),
        len(ctx.budgets),
        len(ctx.goals),
    )
    return ctx


def main(argv: list[str] | None = None) -> int:
    ap = argparse.ArgumentParser(description="Reset a user's data to the finwise demo dataset")
    ap.add_argument(
        "--database-url",
        required=False,
        default=None,
        help=("SQLAlchemy database URL; falls back to $DATABASE_URL when not set"),
    )
    ap.add_argument("--user-id", required=True)
    args = ap.parse_args(argv)

    configure_logging()
    with session_scope(database_url=args.database_url or None) as session:
        seed_demo(session, user_id=args.user_id)
    return 0


if __name__ == "__main__":  # pragma: no cover - manual utility
    raise SystemExit(main())
