"""Per-user finance context.

A :class:`FinanceContext` is one user's snapshot of transactions, budgets,
goals, tips and chat, plus the derived :class:`~finwise.models.BudgetSummary`.
Callers create and own it (one per request or session); nothing here is
module-level state, so two users never share a snapshot.

Recompute triggers: the budget summary is rebuilt from the *complete*
snapshot after the initial load, after every added transaction and after
every created budget. It is never patched incrementally.
"""

from __future__ import annotations

import uuid
from collections.abc import Sequence
from dataclasses import dataclass, field
from datetime import UTC, date, datetime, timedelta
from decimal import Decimal
from typing import Any

from sqlalchemy.orm import Session

from . import persistence
from .assistant import ChatAssistant
from .budgets import category_total, recompute_budgets, summarize_budgets
from .errors import ValidationError
from .goals import UpdateMode, new_goal
from .logging_setup import get_logger
from .models import (
    AiTip,
    Budget,
    BudgetSummary,
    Category,
    ChatMessage,
    ContributionResult,
    GoalCategory,
    Period,
    Priority,
    SavingsGoal,
    Sender,
    Transaction,
)

_logger = get_logger("finwise.context")


@dataclass
class FinanceContext:
    user_id: str
    transactions: list[Transaction] = field(default_factory=list)
    budgets: list[Budget] = field(default_factory=list)
    goals: list[SavingsGoal] = field(default_factory=list)
    tips: list[AiTip] = field(default_factory=list)
    chat_history: list[ChatMessage] = field(default_factory=list)
    summary: BudgetSummary | None = None

    # ---- loading -----------------------------------------------------------

    @classmethod
    def load(cls, session: Session, *, user_id: str) -> FinanceContext:
        ctx = cls(user_id=user_id)
        ctx.refresh(session)
        return ctx

    def refresh(self, session: Session) -> None:
        self.transactions = persistence.list_transactions(session, user_id=self.user_id)
        self.budgets = persistence.list_budgets(session, user_id=self.user_id)
        self.goals = persistence.list_goals(session, user_id=self.user_id)
        self.tips = persistence.list_tips(session, user_id=self.user_id)
        self.chat_history = persistence.list_chat_history(session, user_id=self.user_id)
        self.recompute()
        _logger.info(
            "context:loaded user_id=%s transactions=%d budgets=%d goals=%d",
            self.user_id,
            len(self.transactions),
            len(self.budgets),
            len(self.goals),
        )

    def recompute(self) -> BudgetSummary:
        """Rebuild every budget's spent value and the summary from the full snapshot."""

        self.budgets = recompute_budgets(self.transactions, self.budgets)
        self.summary = summarize_budgets(self.budgets)
        return self.summary

    # ---- transactions / budgets -------------------------------------------

    def add_transaction(
        self,
        session: Session,
        *,
        amount: Any,
        category: Category | str,
        description: str = "",
        is_income: bool = False,
        is_recurring: bool = False,
        recurring_frequency: Period | str | None = None,
        occurred_at: datetime | None = None,
    ) -> Transaction:
        tx = persistence.add_transaction(
            session,
            user_id=self.user_id,
            amount=amount,
            category=category,
            description=description,
            is_income=is_income,
            is_recurring=is_recurring,
            recurring_frequency=recurring_frequency,
            occurred_at=occurred_at,
        )
        self.transactions.append(tx)
        self.recompute()
        persistence.store_budget_spent(session, self.budgets)
        return tx

    def create_budget(
        self,
        session: Session,
        *,
        category: Category | str,
        limit: Any,
        period: Period | str = Period.MONTHLY,
        start_date: date | None = None,
    ) -> Budget:
        budget = persistence.create_budget(
            session,
            user_id=self.user_id,
            category=category,
            limit=limit,
            period=period,
            start_date=start_date,
        )
        self.budgets.append(budget)
        self.recompute()
        persistence.store_budget_spent(session, self.budgets)
        # Return the recomputed copy, not the zero-spent row.
        return next(b for b in self.budgets if b.id == budget.id)

    def category_total(self, category: Category) -> Decimal:
        return category_total(self.transactions, category)

    # ---- goals --------------------------------------------------------------

    def create_goal(
        self,
        session: Session,
        *,
        name: str,
        target_amount: Any,
        category: GoalCategory | str = GoalCategory.OTHER,
        priority: Priority | str = Priority.MEDIUM,
        deadline: date | None = None,
        image_url: str | None = None,
    ) -> SavingsGoal:
        goal = persistence.create_goal(
            session,
            new_goal(
                user_id=self.user_id,
                name=name,
                target_amount=target_amount,
                category=category,
                priority=priority,
                deadline=deadline,
                image_url=image_url,
            ),
        )
        self.goals.append(goal)
        return goal

    def _update_goal(
        self, session: Session, goal_id: str, amount: Any, *, mode: UpdateMode
    ) -> ContributionResult:
        result = persistence.apply_contribution(
            session, user_id=self.user_id, goal_id=goal_id, amount=amount, mode=mode
        )
        replaced = False
        for i, g in enumerate(self.goals):
            if g.id == goal_id:
                self.goals[i] = result.goal
                replaced = True
        if not replaced:
            self.goals.append(result.goal)
        if result.just_completed:
            _logger.info("context:goal_completed user_id=%s goal_id=%s", self.user_id, goal_id)
        return result

    def contribute(self, session: Session, goal_id: str, amount: Any) -> ContributionResult:
        return self._update_goal(session, goal_id, amount, mode="contribute")

    def set_goal_amount(self, session: Session, goal_id: str, amount: Any) -> ContributionResult:
        return self._update_goal(session, goal_id, amount, mode="set")

    # ---- chat ---------------------------------------------------------------

    def send_chat_message(
        self,
        session: Session,
        content: str,
        *,
        assistant: ChatAssistant | None = None,
    ) -> Sequence[ChatMessage]:
        """Store the user's message and the assistant's reply; return the history."""

        if not content or not content.strip():
            raise ValidationError("chat message cannot be empty")
        assistant = assistant or ChatAssistant()
        user_msg = ChatMessage(
            id=str(uuid.uuid4()),
            user_id=self.user_id,
            content=content,
            sender=Sender.USER,
            timestamp=datetime.now(UTC),
        )
        history = [*self.chat_history, user_msg]
        reply_text = assistant.reply(history)
        ai_msg = ChatMessage(
            id=str(uuid.uuid4()),
            user_id=self.user_id,
            content=reply_text,
            sender=Sender.AI,
            # Strictly after the user message so history ordering is stable.
            timestamp=max(datetime.now(UTC), user_msg.timestamp + timedelta(microseconds=1)),
        )
        persistence.append_chat_messages(session, [user_msg, ai_msg])
        self.chat_history = [*history, ai_msg]
        return self.chat_history


__all__ = ["FinanceContext"]
