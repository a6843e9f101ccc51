"""Budget aggregation engine.

Public API:
    - :func:`recompute_budgets`
    - :func:`summarize_budgets`
    - :func:`compute_budget_summary`
    - :func:`category_total`

Everything here is a pure function of its inputs. The engine always
recomputes from the complete transaction and budget collections rather than
patching a previous result: a single new transaction moves the category
spent, the totals, and the percentages together, and only a full recompute
keeps all of them consistent with every earlier transaction.

No validation happens here. Empty inputs yield zero totals; sign and NaN
checks belong to the boundary (:mod:`finwise.rows`, :mod:`finwise.persistence`).
"""

from __future__ import annotations

import dataclasses
from collections import defaultdict
from collections.abc import Iterable
from decimal import Decimal

from .logging_setup import get_logger
from .models import (
    HUNDRED,
    ZERO,
    Budget,
    BudgetSummary,
    Category,
    CategorySummary,
    Transaction,
)

_logger = get_logger("finwise.budgets")


def _percent(part: Decimal, whole: Decimal) -> Decimal:
    # Zero-guard: an empty/zero ceiling reports exactly 0, never a division error.
    if whole > ZERO:
        return part / whole * HUNDRED
    return ZERO


def _spent_by_category(transactions: Iterable[Transaction]) -> dict[Category, Decimal]:
    totals: dict[Category, Decimal] = defaultdict(lambda: ZERO)
    for tx in transactions:
        if tx.is_income:
            continue
        totals[tx.category] += tx.amount
    return totals


def recompute_budgets(
    transactions: Iterable[Transaction], budgets: Iterable[Budget]
) -> list[Budget]:
    """Return ``budgets`` with ``current_spent`` recomputed from ``transactions``.

    - Only outflows (``is_income=False``) count.
    - Transactions in a category with no budget are ignored.
    - Budgets sharing a category each receive the full category total; they
      are not deduplicated.
    - Any stored ``current_spent`` is overwritten.
    """

    spent = _spent_by_category(transactions)
    return [dataclasses.replace(b, current_spent=spent.get(b.category, ZERO)) for b in budgets]


def summarize_budgets(budgets: Iterable[Budget]) -> BudgetSummary:
    """Build a :class:`BudgetSummary` from already-recomputed budgets.

    Active and inactive budgets both count toward the totals. ``remaining``
    is left negative on overspend.
    """

    materialized = list(budgets)
    total_budget = sum((b.limit for b in materialized), ZERO)
    total_spent = sum((b.current_spent for b in materialized), ZERO)

    categories = tuple(
        CategorySummary(
            category=b.category,
            limit=b.limit,
            spent=b.current_spent,
            remaining=b.limit - b.current_spent,
            percent_used=_percent(b.current_spent, b.limit),
        )
        for b in materialized
    )

    return BudgetSummary(
        total_budget=total_budget,
        total_spent=total_spent,
        remaining=total_budget - total_spent,
        percent_used=_percent(total_spent, total_budget),
        categories=categories,
    )


def compute_budget_summary(
    transactions: Iterable[Transaction],
    budgets: Iterable[Budget],
    *,
    user_id: str | None = None,
) -> BudgetSummary:
    """Recompute every budget's spent value and summarize.

    When ``user_id`` is given, only transactions and budgets owned by that
    user take part; everything else is ignored as if absent.
    """

    txs = list(transactions)
    bgs = list(budgets)
    if user_id is not None:
        txs = [t for t in txs if t.user_id == user_id]
        bgs = [b for b in bgs if b.user_id == user_id]

    summary = summarize_budgets(recompute_budgets(txs, bgs))
    _logger.debug(
        "budgets:summary transactions=%d budgets=%d total_spent=%s total_budget=%s",
        len(txs),
        len(bgs),
        summary.total_spent,
        summary.total_budget,
    )
    return summary


def category_total(transactions: Iterable[Transaction], category: Category) -> Decimal:
    """Total outflow for ``category``, whether or not a budget exists for it."""

    return sum(
        (t.amount for t in transactions if t.category == category and not t.is_income),
        ZERO,
    )


__all__ = [
    "recompute_budgets",
    "summarize_budgets",
    "compute_budget_summary",
    "category_total",
]
