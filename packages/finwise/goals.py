"""Savings goal ledger.

Two update semantics exist and both are exposed under explicit names:

- :func:`contribute` adds to the running total (``current + amount``).
- :func:`set_current_amount` replaces the running total (``amount``).

Either way, completion is derived, never set: after the update
``is_completed == (current_amount >= target_amount)``. COMPLETED is terminal,
so a replacement that would drop a completed goal below its target is
rejected rather than silently reopening it.

:class:`GoalLedger` is the in-memory, thread-safe variant for hosts that may
run concurrent contributions against the same goal. The database-backed
equivalent is :func:`finwise.persistence.apply_contribution`, which relies on
a row lock instead.
"""

from __future__ import annotations

import dataclasses
import threading
import uuid
from collections.abc import Iterable, Mapping
from datetime import UTC, date, datetime
from decimal import Decimal
from typing import Any, Literal

from .errors import NotFoundError, ValidationError
from .logging_setup import get_logger
from .models import (
    ZERO,
    ContributionResult,
    GoalCategory,
    Priority,
    SavingsGoal,
    to_amount,
    to_enum,
)

type UpdateMode = Literal["contribute", "set"]

_logger = get_logger("finwise.goals")


def _apply(goal: SavingsGoal, new_amount: Decimal) -> ContributionResult:
    completed = new_amount >= goal.target_amount
    updated = dataclasses.replace(goal, current_amount=new_amount, is_completed=completed)
    just_completed = not goal.is_completed and completed
    _logger.debug(
        "goals:update goal_id=%s current_amount=%s is_completed=%s just_completed=%s",
        goal.id,
        new_amount,
        completed,
        just_completed,
    )
    return ContributionResult(goal=updated, just_completed=just_completed)


def contribute(goal: SavingsGoal, amount: Any) -> ContributionResult:
    """Add ``amount`` (positive) to the goal's running total."""

    value = to_amount(amount)
    if value <= ZERO:
        raise ValidationError(f"contribution must be positive, got {value}")
    return _apply(goal, goal.current_amount + value)


def set_current_amount(goal: SavingsGoal, amount: Any) -> ContributionResult:
    """Replace the goal's running total with ``amount`` (non-negative)."""

    value = to_amount(amount)
    if value < ZERO:
        raise ValidationError(f"current amount cannot be negative, got {value}")
    if goal.is_completed and value < goal.target_amount:
        raise ValidationError(
            f"goal {goal.id!r} is completed; its amount cannot drop below the target"
        )
    return _apply(goal, value)


def update_goal(goal: SavingsGoal, amount: Any, *, mode: UpdateMode) -> ContributionResult:
    if mode == "contribute":
        return contribute(goal, amount)
    if mode == "set":
        return set_current_amount(goal, amount)
    raise ValueError(f"unknown update mode: {mode!r}")


def _find(goals: Iterable[SavingsGoal], goal_id: str, user_id: str | None) -> SavingsGoal:
    for g in goals:
        if g.id == goal_id and (user_id is None or g.user_id == user_id):
            return g
    raise NotFoundError("savings goal", goal_id)


def contribute_to_goal(
    goals: Iterable[SavingsGoal],
    goal_id: str,
    amount: Any,
    *,
    user_id: str | None = None,
) -> ContributionResult:
    """Look up ``goal_id`` in ``goals`` and contribute ``amount`` to it.

    Raises :class:`NotFoundError` when the id is absent or, with ``user_id``,
    owned by someone else. ``goals`` itself is never mutated; the caller
    swaps the returned goal into its own collection.
    """

    return contribute(_find(goals, goal_id, user_id), amount)


def set_goal_amount(
    goals: Iterable[SavingsGoal],
    goal_id: str,
    amount: Any,
    *,
    user_id: str | None = None,
) -> ContributionResult:
    """Like :func:`contribute_to_goal` with replacement semantics."""

    return set_current_amount(_find(goals, goal_id, user_id), amount)


def new_goal(
    *,
    user_id: str,
    name: str,
    target_amount: Any,
    category: GoalCategory | str = GoalCategory.OTHER,
    priority: Priority | str = Priority.MEDIUM,
    deadline: date | None = None,
    image_url: str | None = None,
    goal_id: str | None = None,
    created_at: datetime | None = None,
) -> SavingsGoal:
    """Build a fresh ACTIVE goal at zero."""

    target = to_amount(target_amount, field="target_amount")
    if target <= ZERO:
        raise ValidationError(f"target_amount must be positive, got {target}")
    if not name or not name.strip():
        raise ValidationError("goal name cannot be empty")
    return SavingsGoal(
        id=goal_id or str(uuid.uuid4()),
        user_id=user_id,
        name=name.strip(),
        target_amount=target,
        current_amount=ZERO,
        category=to_enum(GoalCategory, category, field="category"),
        priority=to_enum(Priority, priority, field="priority"),
        created_at=created_at or datetime.now(UTC),
        is_completed=False,
        deadline=deadline,
        image_url=image_url,
    )


class GoalLedger:
    """Thread-safe in-memory ledger keyed by goal id.

    Each goal gets its own lock so two contributions to the same goal never
    read the same stale ``current_amount``; updates to different goals do not
    contend.
    """

    def __init__(self, goals: Iterable[SavingsGoal] = ()) -> None:
        self._goals: dict[str, SavingsGoal] = {g.id: g for g in goals}
        self._locks: dict[str, threading.Lock] = {}
        self._registry_lock = threading.Lock()

    def _lock_for(self, goal_id: str) -> threading.Lock:
        with self._registry_lock:
            lock = self._locks.get(goal_id)
            if lock is None:
                lock = self._locks[goal_id] = threading.Lock()
            return lock

    def add(self, goal: SavingsGoal) -> None:
        with self._lock_for(goal.id):
            self._goals[goal.id] = goal

    def get(self, goal_id: str) -> SavingsGoal:
        try:
            return self._goals[goal_id]
        except KeyError:
            raise NotFoundError("savings goal", goal_id) from None

    def snapshot(self) -> Mapping[str, SavingsGoal]:
        return dict(self._goals)

    def _update(
        self, goal_id: str, amount: Any, *, mode: UpdateMode, user_id: str | None
    ) -> ContributionResult:
        with self._lock_for(goal_id):
            goal = self._goals.get(goal_id)
            if goal is None or (user_id is not None and goal.user_id != user_id):
                raise NotFoundError("savings goal", goal_id)
            result = update_goal(goal, amount, mode=mode)
            self._goals[goal_id] = result.goal
            return result

    def contribute(
        self, goal_id: str, amount: Any, *, user_id: str | None = None
    ) -> ContributionResult:
        return self._update(goal_id, amount, mode="contribute", user_id=user_id)

    def set_current_amount(
        self, goal_id: str, amount: Any, *, user_id: str | None = None
    ) -> ContributionResult:
        return self._update(goal_id, amount, mode="set", user_id=user_id)


__all__ = [
    "UpdateMode",
    "contribute",
    "set_current_amount",
    "update_goal",
    "contribute_to_goal",
    "set_goal_amount",
    "new_goal",
    "GoalLedger",
]
