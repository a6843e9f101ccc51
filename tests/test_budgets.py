from __future__ import annotations

from datetime import UTC, date, datetime
from decimal import Decimal
from itertools import count

from finwise.budgets import (
    category_total,
    compute_budget_summary,
    recompute_budgets,
    summarize_budgets,
)
from finwise.models import Budget, Category, Period, Transaction

_ids = count(1)


# ---- Helpers -----------------------------------------------------------------


def tx(
    amount: str,
    category: Category = Category.FOOD,
    *,
    income: bool = False,
    user_id: str = "u1",
) -> Transaction:
    return Transaction(
        id=f"t{next(_ids)}",
        user_id=user_id,
        amount=Decimal(amount),
        date=datetime(2024, 5, 1, tzinfo=UTC),
        description="",
        category=category,
        is_income=income,
    )


def budget(
    limit: str,
    category: Category = Category.FOOD,
    *,
    spent: str = "0",
    active: bool = True,
    user_id: str = "u1",
) -> Budget:
    return Budget(
        id=f"b{next(_ids)}",
        user_id=user_id,
        category=category,
        limit=Decimal(limit),
        period=Period.MONTHLY,
        start_date=date(2024, 5, 1),
        is_active=active,
        current_spent=Decimal(spent),
    )


# ---- Tests -------------------------------------------------------------------


def test_food_scenario_ignores_income() -> None:
    budgets = [budget("300")]
    txs = [tx("50"), tx("100"), tx("200", income=True)]

    summary = compute_budget_summary(txs, budgets)

    (food,) = summary.categories
    assert food.spent == Decimal("150")
    assert food.remaining == Decimal("150")
    assert food.percent_used == Decimal("50")
    assert summary.total_spent == Decimal("150")
    assert summary.total_budget == Decimal("300")
    assert summary.percent_used == Decimal("50")


def test_total_spent_is_sum_of_matching_outflows_per_budget() -> None:
    budgets = [budget("500", Category.FOOD), budget("1500", Category.HOUSING)]
    txs = [
        tx("12.50", Category.FOOD),
        tx("7.25", Category.FOOD),
        tx("1200", Category.HOUSING),
        tx("4500", Category.INCOME, income=True),
    ]

    summary = compute_budget_summary(txs, budgets)

    assert summary.total_spent == Decimal("1219.75")
    by_cat = {c.category: c.spent for c in summary.categories}
    assert by_cat == {Category.FOOD: Decimal("19.75"), Category.HOUSING: Decimal("1200")}


def test_empty_inputs_give_zero_totals_without_division_error() -> None:
    summary = compute_budget_summary([], [])

    assert summary.total_budget == 0
    assert summary.total_spent == 0
    assert summary.remaining == 0
    assert summary.percent_used == 0
    assert summary.categories == ()


def test_zero_limit_budget_reports_zero_percent() -> None:
    summary = summarize_budgets([budget("0", spent="40")])

    assert summary.total_budget == 0
    assert summary.percent_used == 0
    assert summary.categories[0].percent_used == 0
    assert summary.categories[0].remaining == Decimal("-40")


def test_transaction_without_matching_budget_changes_nothing() -> None:
    budgets = [budget("300", Category.FOOD)]
    base = [tx("50", Category.FOOD)]

    before = compute_budget_summary(base, budgets)
    after = compute_budget_summary([*base, tx("999", Category.ENTERTAINMENT)], budgets)

    assert after == before


def test_summary_is_idempotent_and_inputs_are_untouched() -> None:
    budgets = [budget("300", spent="12345")]
    txs = [tx("50")]

    first = compute_budget_summary(txs, budgets)
    second = compute_budget_summary(txs, budgets)

    assert first == second
    # The stored cache is ignored and never written back into the inputs.
    assert budgets[0].current_spent == Decimal("12345")
    assert first.total_spent == Decimal("50")


def test_recompute_overwrites_stale_cache() -> None:
    (b,) = recompute_budgets([tx("20"), tx("30")], [budget("100", spent="999")])

    assert b.current_spent == Decimal("50")


def test_duplicate_category_budgets_each_get_full_total() -> None:
    budgets = [budget("100"), budget("200")]

    summary = compute_budget_summary([tx("60")], budgets)

    assert [c.spent for c in summary.categories] == [Decimal("60"), Decimal("60")]
    assert summary.total_spent == Decimal("120")
    assert summary.total_budget == Decimal("300")


def test_overspend_leaves_negative_remaining() -> None:
    summary = compute_budget_summary([tx("450")], [budget("300")])

    assert summary.remaining == Decimal("-150")
    assert summary.categories[0].remaining == Decimal("-150")
    assert summary.percent_used == Decimal("150")


def test_inactive_budgets_still_count() -> None:
    budgets = [budget("300"), budget("100", Category.HOUSING, active=False)]

    summary = compute_budget_summary([tx("50"), tx("80", Category.HOUSING)], budgets)

    assert summary.total_budget == Decimal("400")
    assert summary.total_spent == Decimal("130")


def test_user_scoping_ignores_other_users_data() -> None:
    budgets = [budget("300"), budget("1000", user_id="u2")]
    txs = [tx("50"), tx("700", user_id="u2")]

    summary = compute_budget_summary(txs, budgets, user_id="u1")

    assert summary.total_budget == Decimal("300")
    assert summary.total_spent == Decimal("50")


def test_category_total_counts_outflows_without_a_budget() -> None:
    txs = [
        tx("15", Category.ENTERTAINMENT),
        tx("10", Category.ENTERTAINMENT),
        tx("99", Category.ENTERTAINMENT, income=True),
        tx("5", Category.FOOD),
    ]

    assert category_total(txs, Category.ENTERTAINMENT) == Decimal("25")
    assert category_total(txs, Category.HEALTHCARE) == 0
