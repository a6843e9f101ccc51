from __future__ import annotations

from dataclasses import replace
from datetime import UTC, date, datetime
from decimal import Decimal
from pathlib import Path

import pytest
from db.client import session_scope

from finwise import persistence
from finwise.errors import NotFoundError, ValidationError
from finwise.goals import new_goal
from finwise.models import Category, ChatMessage, Period, Sender

from tests.helpers.db import bootstrap_sqlite_db


@pytest.fixture
def db_url(tmp_path: Path) -> str:
    return bootstrap_sqlite_db(tmp_path / "finwise.sqlite3")


def test_transactions_round_trip_and_are_scoped_by_user(db_url: str) -> None:
    with session_scope(database_url=db_url) as s:
        persistence.add_transaction(
            s,
            user_id="u1",
            amount="42.10",
            category="food",
            description="Groceries",
            occurred_at=datetime(2024, 1, 2, tzinfo=UTC),
        )
        persistence.add_transaction(
            s,
            user_id="u1",
            amount=1200,
            category=Category.HOUSING,
            is_recurring=True,
            recurring_frequency="monthly",
            occurred_at=datetime(2024, 1, 1, tzinfo=UTC),
        )
        persistence.add_transaction(s, user_id="u2", amount=5, category="food")

    with session_scope(database_url=db_url) as s:
        txs = persistence.list_transactions(s, user_id="u1")

    assert [t.category for t in txs] == [Category.HOUSING, Category.FOOD]
    assert txs[0].recurring_frequency is Period.MONTHLY
    assert txs[1].amount == Decimal("42.10")
    assert txs[1].description == "Groceries"


@pytest.mark.parametrize(
    "kwargs",
    [
        {"amount": "-3", "category": "food"},
        {"amount": "nan", "category": "food"},
        {"amount": "3", "category": "yachts"},
        {"amount": "3", "category": "food", "recurring_frequency": "monthly"},
    ],
)
def test_add_transaction_validation(db_url: str, kwargs: dict) -> None:
    with pytest.raises(ValidationError):
        with session_scope(database_url=db_url) as s:
            persistence.add_transaction(s, user_id="u1", **kwargs)

    with session_scope(database_url=db_url) as s:
        assert persistence.list_transactions(s, user_id="u1") == []


def test_create_budget_requires_positive_limit(db_url: str) -> None:
    with session_scope(database_url=db_url) as s:
        with pytest.raises(ValidationError):
            persistence.create_budget(s, user_id="u1", category="food", limit=0)
        b = persistence.create_budget(
            s, user_id="u1", category="food", limit="300", start_date=date(2024, 5, 1)
        )

    assert b.limit == Decimal("300")
    assert b.period is Period.MONTHLY
    assert b.current_spent == 0
    assert b.is_active is True


def test_store_budget_spent_writes_cache(db_url: str) -> None:
    with session_scope(database_url=db_url) as s:
        b = persistence.create_budget(s, user_id="u1", category="food", limit="300")
        n = persistence.store_budget_spent(s, [replace(b, current_spent=Decimal("75.50"))])
        assert n == 1

    with session_scope(database_url=db_url) as s:
        (stored,) = persistence.list_budgets(s, user_id="u1")
    assert stored.current_spent == Decimal("75.50")


def test_apply_contribution_updates_row_and_flags_completion(db_url: str) -> None:
    with session_scope(database_url=db_url) as s:
        goal = persistence.create_goal(
            s, new_goal(user_id="u1", name="Bike", target_amount="500", goal_id="bike")
        )
    assert goal.current_amount == 0

    with session_scope(database_url=db_url) as s:
        r1 = persistence.apply_contribution(s, user_id="u1", goal_id="bike", amount="450")
    with session_scope(database_url=db_url) as s:
        r2 = persistence.apply_contribution(s, user_id="u1", goal_id="bike", amount="60")
    with session_scope(database_url=db_url) as s:
        r3 = persistence.apply_contribution(s, user_id="u1", goal_id="bike", amount="1")

    assert (r1.just_completed, r2.just_completed, r3.just_completed) == (False, True, False)

    with session_scope(database_url=db_url) as s:
        (stored,) = persistence.list_goals(s, user_id="u1")
    assert stored.current_amount == Decimal("511")
    assert stored.is_completed is True


def test_apply_contribution_set_mode(db_url: str) -> None:
    with session_scope(database_url=db_url) as s:
        persistence.create_goal(
            s, new_goal(user_id="u1", name="Bike", target_amount="500", goal_id="bike")
        )
        r = persistence.apply_contribution(
            s, user_id="u1", goal_id="bike", amount="120", mode="set"
        )
    assert r.goal.current_amount == Decimal("120")
    assert r.just_completed is False


def test_apply_contribution_unknown_or_foreign_goal(db_url: str) -> None:
    with session_scope(database_url=db_url) as s:
        persistence.create_goal(
            s, new_goal(user_id="owner", name="Bike", target_amount="500", goal_id="bike")
        )

    with session_scope(database_url=db_url) as s:
        with pytest.raises(NotFoundError):
            persistence.apply_contribution(s, user_id="owner", goal_id="nope", amount=1)
        with pytest.raises(NotFoundError):
            persistence.apply_contribution(s, user_id="intruder", goal_id="bike", amount=1)

    with session_scope(database_url=db_url) as s:
        (stored,) = persistence.list_goals(s, user_id="owner")
    assert stored.current_amount == 0


def test_tips_sorted_by_relevance_then_recency(db_url: str) -> None:
    tips_in = [
        ("old low", 0.2, datetime(2024, 1, 1, tzinfo=UTC)),
        ("unscored", None, datetime(2024, 6, 1, tzinfo=UTC)),
        ("high", 0.9, datetime(2024, 1, 1, tzinfo=UTC)),
        ("new low", 0.2, datetime(2024, 2, 1, tzinfo=UTC)),
    ]
    with session_scope(database_url=db_url) as s:
        for content, score, created in tips_in:
            persistence.add_tip(
                s, user_id="u1", content=content, relevance_score=score, created_at=created
            )
        with pytest.raises(ValidationError):
            persistence.add_tip(s, user_id="u1", content="   ")

    with session_scope(database_url=db_url) as s:
        tips = persistence.list_tips(s, user_id="u1")
    assert [t.content for t in tips] == ["high", "new low", "old low", "unscored"]


def test_clear_user_data_only_touches_that_user(db_url: str) -> None:
    with session_scope(database_url=db_url) as s:
        for uid in ("u1", "u2"):
            persistence.add_transaction(s, user_id=uid, amount=1, category="food")
            persistence.create_budget(s, user_id=uid, category="food", limit=10)
            persistence.add_tip(s, user_id=uid, content="tip")

    with session_scope(database_url=db_url) as s:
        persistence.clear_user_data(s, user_id="u1")

    with session_scope(database_url=db_url) as s:
        assert persistence.list_transactions(s, user_id="u1") == []
        assert persistence.list_budgets(s, user_id="u1") == []
        assert persistence.list_tips(s, user_id="u1") == []
        assert len(persistence.list_transactions(s, user_id="u2")) == 1
        assert len(persistence.list_budgets(s, user_id="u2")) == 1


def test_chat_history_in_timestamp_order(db_url: str) -> None:
    msgs = [
        ChatMessage(
            id=f"m{i}",
            user_id="u1",
            content=text,
            sender=sender,
            timestamp=datetime(2024, 1, 1, 9, i, tzinfo=UTC),
        )
        for i, (text, sender) in enumerate([("hello", Sender.USER), ("hi there", Sender.AI)])
    ]
    with session_scope(database_url=db_url) as s:
        persistence.append_chat_messages(s, reversed(msgs))

    with session_scope(database_url=db_url) as s:
        history = persistence.list_chat_history(s, user_id="u1")
    assert [m.content for m in history] == ["hello", "hi there"]
    assert [m.sender for m in history] == [Sender.USER, Sender.AI]


def test_free_text_round_trips_unchanged(db_url: str) -> None:
    content = "  indented\nreply with trailing space "
    with session_scope(database_url=db_url) as s:
        persistence.add_transaction(
            s, user_id="u1", amount=3, category="food", description=" corner shop "
        )
        persistence.append_chat_messages(
            s,
            [
                ChatMessage(
                    id="m1",
                    user_id="u1",
                    content=content,
                    sender=Sender.AI,
                    timestamp=datetime(2024, 1, 1, tzinfo=UTC),
                )
            ],
        )

    with session_scope(database_url=db_url) as s:
        (tx,) = persistence.list_transactions(s, user_id="u1")
        (msg,) = persistence.list_chat_history(s, user_id="u1")
    assert tx.description == " corner shop "
    assert msg.content == content
