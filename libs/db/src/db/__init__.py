"""db: database library for finwise (SQLAlchemy models, sessions, Alembic).

Public exports
--------------
- ``Base`` and ``metadata`` for Alembic autogenerate/targeting
- ORM models in ``db.models.finance`` (re-exported for convenience)
- Engine/session helpers live in ``db.client``
"""

from __future__ import annotations

from .models.finance import (
    AiTipRecord,
    Base,
    BudgetRecord,
    ChatMessageRecord,
    SavingsGoalRecord,
    TransactionRecord,
)

# Alembic's env.py targets this for autogenerate.
metadata = Base.metadata

__all__ = [
    "Base",
    "metadata",
    "TransactionRecord",
    "BudgetRecord",
    "SavingsGoalRecord",
    "AiTipRecord",
    "ChatMessageRecord",
]
