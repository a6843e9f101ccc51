"""Public API for the ``finwise`` package.

This module is the stable import surface: the aggregation engine, the goal
ledger and the per-user context are implemented in their own modules and
re-exported here. Hosts (the CLI, a web layer, notebooks) should import from
here rather than reaching into submodules.

Errors
------
Every operation raises :class:`~finwise.errors.NotFoundError` when a
referenced entity does not exist for the caller, and
:class:`~finwise.errors.ValidationError` for malformed input (negative
transaction amounts, non-positive limits or targets, non-finite numbers,
unknown categories). Both derive from :class:`~finwise.errors.FinwiseError`.
"""

from __future__ import annotations

from .budgets import category_total, compute_budget_summary, recompute_budgets, summarize_budgets
from .context import FinanceContext
from .errors import FinwiseError, NotFoundError, ValidationError
from .goals import (
    GoalLedger,
    contribute,
    contribute_to_goal,
    new_goal,
    set_current_amount,
    set_goal_amount,
)
from .models import (
    AiTip,
    Budget,
    BudgetSummary,
    Category,
    CategorySummary,
    ChatMessage,
    ContributionResult,
    GoalCategory,
    Period,
    Priority,
    SavingsGoal,
    Sender,
    Transaction,
)

__all__ = [
    # Aggregation engine
    "compute_budget_summary",
    "recompute_budgets",
    "summarize_budgets",
    "category_total",
    # Goal ledger
    "contribute",
    "set_current_amount",
    "contribute_to_goal",
    "set_goal_amount",
    "new_goal",
    "GoalLedger",
    # Per-user state
    "FinanceContext",
    # Errors
    "FinwiseError",
    "NotFoundError",
    "ValidationError",
    # Entities
    "Transaction",
    "Budget",
    "SavingsGoal",
    "AiTip",
    "ChatMessage",
    "CategorySummary",
    "BudgetSummary",
    "ContributionResult",
    "Category",
    "Period",
    "Priority",
    "GoalCategory",
    "Sender",
]
