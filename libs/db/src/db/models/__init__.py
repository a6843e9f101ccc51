"""ORM models registry for the finwise database."""

from .finance import (
    AiTipRecord,
    Base,
    BudgetRecord,
    ChatMessageRecord,
    SavingsGoalRecord,
    TransactionRecord,
)

__all__ = [
    "Base",
    "TransactionRecord",
    "BudgetRecord",
    "SavingsGoalRecord",
    "AiTipRecord",
    "ChatMessageRecord",
]
