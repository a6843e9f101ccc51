# ruff: noqa: I001
"""CLI for the ``finwise`` package.

Each subcommand delegates to a ``cmd_*`` handler that returns an exit code:
0 on success, 1 on any validation, lookup or database error (reported on
stderr as ``Error: ...``). The root callback loads a local ``.env`` with
``python-dotenv`` and configures logging before any handler runs. Business
logic lives in :mod:`finwise.context` and :mod:`finwise.persistence`.
"""

from __future__ import annotations

import sys
from datetime import date, datetime
from pathlib import Path
from typing import Annotated

import typer
from dotenv import load_dotenv
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from .errors import FinwiseError
from .logging_setup import configure_logging
from .models import BudgetSummary, ContributionResult, SavingsGoal

console = Console()


# ---- Formatting helpers ------------------------------------------------------


def _money(value: object) -> str:
    return f"${value:,.2f}"


def _pct(value: object) -> str:
    return f"{value:.1f}%"


def _summary_table(summary: BudgetSummary) -> Table:
    table = Table(title="Budget summary")
    table.add_column("Category")
    table.add_column("Limit", justify="right")
    table.add_column("Spent", justify="right")
    table.add_column("Remaining", justify="right")
    table.add_column("Used", justify="right")
    for c in summary.categories:
        remaining = _money(c.remaining)
        if c.remaining < 0:
            remaining = f"[red]{remaining}[/red]"
        table.add_row(
            c.category.value, _money(c.limit), _money(c.spent), remaining, _pct(c.percent_used)
        )
    table.add_section()
    table.add_row(
        "total",
        _money(summary.total_budget),
        _money(summary.total_spent),
        _money(summary.remaining),
        _pct(summary.percent_used),
        style="bold",
    )
    return table


def _goals_table(goals: list[SavingsGoal]) -> Table:
    table = Table(title="Savings goals")
    table.add_column("ID", no_wrap=True)
    table.add_column("Name")
    table.add_column("Saved", justify="right")
    table.add_column("Target", justify="right")
    table.add_column("Progress", justify="right")
    table.add_column("Deadline")
    table.add_column("Status")
    for g in goals:
        table.add_row(
            g.id,
            escape(g.name),
            _money(g.current_amount),
            _money(g.target_amount),
            _pct(g.progress_percent),
            g.deadline.isoformat() if g.deadline else "-",
            "completed" if g.is_completed else "active",
        )
    return table


def _report_goal_update(result: ContributionResult) -> None:
    g = result.goal
    console.print(
        f"{escape(g.name)}: {_money(g.current_amount)} of {_money(g.target_amount)} "
        f"({_pct(g.progress_percent)})"
    )
    if result.just_completed:
        console.print(
            f"[bold green]Congratulations! You reached your goal: {escape(g.name)}[/bold green]"
        )


def _error(msg: object) -> int:
    print(f"Error: {msg}", file=sys.stderr)
    return 1


# ---- Command handlers --------------------------------------------------------


def cmd_init_db(*, database_url: str | None) -> int:
    """Apply all database migrations."""

    from .migrations import upgrade

    try:
        upgrade(database_url)
    except Exception as e:
        return _error(f"migration failed: {e}")
    console.print("Database is up to date.")
    return 0


def cmd_seed_demo(*, database_url: str | None, user_id: str) -> int:
    from db.client import session_scope

    from .seed import seed_demo

    try:
        with session_scope(database_url=database_url) as session:
            ctx = seed_demo(session, user_id=user_id)
    except Exception as e:
        return _error(f"seeding failed: {e}")
    console.print(
        f"Seeded demo data for {user_id}: {len(ctx.transactions)} transactions, "
        f"{len(ctx.budgets)} budgets, {len(ctx.goals)} goals."
    )
    return 0


def cmd_summary(*, database_url: str | None, user_id: str) -> int:
    from db.client import session_scope

    from .context import FinanceContext

    try:
        with session_scope(database_url=database_url) as session:
            ctx = FinanceContext.load(session, user_id=user_id)
    except FinwiseError as e:
        return _error(e)
    except Exception as e:
        return _error(f"failed to load data: {e}")
    assert ctx.summary is not None  # set by load()
    if not ctx.summary.categories:
        console.print("No budgets yet. Create one with `finwise create-budget`.")
        return 0
    console.print(_summary_table(ctx.summary))
    return 0


def cmd_add_transaction(
    *,
    database_url: str | None,
    user_id: str,
    amount: str,
    category: str,
    description: str = "",
    is_income: bool = False,
    frequency: str | None = None,
    occurred_at: datetime | None = None,
) -> int:
    from db.client import session_scope

    from .context import FinanceContext

    try:
        with session_scope(database_url=database_url) as session:
            ctx = FinanceContext.load(session, user_id=user_id)
            tx = ctx.add_transaction(
                session,
                amount=amount,
                category=category,
                description=description,
                is_income=is_income,
                is_recurring=frequency is not None,
                recurring_frequency=frequency,
                occurred_at=occurred_at,
            )
    except FinwiseError as e:
        return _error(e)
    except Exception as e:
        return _error(f"failed to add transaction: {e}")
    kind = "income" if tx.is_income else "expense"
    console.print(f"Added {kind} {_money(tx.amount)} ({tx.category.value}) id={tx.id}")
    if ctx.summary is not None and ctx.summary.categories:
        console.print(_summary_table(ctx.summary))
    return 0


def cmd_create_budget(
    *,
    database_url: str | None,
    user_id: str,
    category: str,
    limit: str,
    period: str = "monthly",
    start_date: date | None = None,
) -> int:
    from db.client import session_scope

    from .context import FinanceContext

    try:
        with session_scope(database_url=database_url) as session:
            ctx = FinanceContext.load(session, user_id=user_id)
            budget = ctx.create_budget(
                session, category=category, limit=limit, period=period, start_date=start_date
            )
    except FinwiseError as e:
        return _error(e)
    except Exception as e:
        return _error(f"failed to create budget: {e}")
    console.print(
        f"Created {budget.period.value} budget for {budget.category.value}: "
        f"{_money(budget.current_spent)} of {_money(budget.limit)} spent id={budget.id}"
    )
    return 0


def cmd_create_goal(
    *,
    database_url: str | None,
    user_id: str,
    name: str,
    target: str,
    category: str = "other",
    priority: str = "medium",
    deadline: date | None = None,
    image_url: str | None = None,
) -> int:
    from db.client import session_scope

    from .context import FinanceContext

    try:
        with session_scope(database_url=database_url) as session:
            ctx = FinanceContext(user_id=user_id)
            goal = ctx.create_goal(
                session,
                name=name,
                target_amount=target,
                category=category,
                priority=priority,
                deadline=deadline,
                image_url=image_url,
            )
    except FinwiseError as e:
        return _error(e)
    except Exception as e:
        return _error(f"failed to create goal: {e}")
    console.print(f"Created goal {goal.name} (target {_money(goal.target_amount)}) id={goal.id}")
    return 0


def cmd_update_goal(
    *,
    database_url: str | None,
    user_id: str,
    goal_id: str,
    amount: str,
    replace: bool = False,
) -> int:
    """Contribute to a goal, or replace its saved amount when ``replace`` is set."""

    from db.client import session_scope

    from .context import FinanceContext

    try:
        with session_scope(database_url=database_url) as session:
            ctx = FinanceContext(user_id=user_id)
            if replace:
                result = ctx.set_goal_amount(session, goal_id, amount)
            else:
                result = ctx.contribute(session, goal_id, amount)
    except FinwiseError as e:
        return _error(e)
    except Exception as e:
        return _error(f"failed to update goal: {e}")
    _report_goal_update(result)
    return 0


def cmd_goals(*, database_url: str | None, user_id: str) -> int:
    from db.client import session_scope

    from .persistence import list_goals

    try:
        with session_scope(database_url=database_url) as session:
            goals = list_goals(session, user_id=user_id)
    except FinwiseError as e:
        return _error(e)
    except Exception as e:
        return _error(f"failed to load goals: {e}")
    if not goals:
        console.print("No savings goals yet.")
        return 0
    console.print(_goals_table(goals))
    return 0


def cmd_tips(*, database_url: str | None, user_id: str) -> int:
    from db.client import session_scope

    from .persistence import list_tips

    try:
        with session_scope(database_url=database_url) as session:
            tips = list_tips(session, user_id=user_id)
    except FinwiseError as e:
        return _error(e)
    except Exception as e:
        return _error(f"failed to load tips: {e}")
    if not tips:
        console.print("No tips yet.")
        return 0
    for t in tips:
        label = f"[{t.category}] " if t.category else ""
        console.print(f"- {label}{t.content}", markup=False)
    return 0


def cmd_chat(*, database_url: str | None, user_id: str, message: str) -> int:
    from db.client import session_scope

    from .context import FinanceContext

    try:
        with session_scope(database_url=database_url) as session:
            ctx = FinanceContext.load(session, user_id=user_id)
            history = ctx.send_chat_message(session, message)
    except FinwiseError as e:
        return _error(e)
    except Exception as e:
        return _error(f"chat failed: {e}")
    console.print(history[-1].content, markup=False)
    return 0


# ---- Typer-based console interface -------------------------------------------


app = typer.Typer(
    no_args_is_help=True,
    add_completion=False,
    help=(
        "Track spending against budgets and progress toward savings goals. "
        "Loads DATABASE_URL and chat settings from a local .env before running."
    ),
)

DatabaseUrlOpt = Annotated[
    str | None,
    typer.Option("--database-url", help="Override DATABASE_URL (falls back to env var)."),
]
UserIdOpt = Annotated[
    str, typer.Option("--user-id", envvar="FINWISE_USER_ID", help="Owner of the data to act on.")
]
DateOpt = Annotated[datetime | None, typer.Option(formats=["%Y-%m-%d"])]


def _exit(code: int) -> None:
    if code:
        raise typer.Exit(code)


@app.command("init-db")
def init_db_cmd(database_url: DatabaseUrlOpt = None) -> None:
    """Create or upgrade the database schema."""

    _exit(cmd_init_db(database_url=database_url))


@app.command("seed-demo")
def seed_demo_cmd(user_id: UserIdOpt, database_url: DatabaseUrlOpt = None) -> None:
    """Replace the user's data with a small demo dataset."""

    _exit(cmd_seed_demo(database_url=database_url, user_id=user_id))


@app.command("summary")
def summary_cmd(user_id: UserIdOpt, database_url: DatabaseUrlOpt = None) -> None:
    """Show spending against every budget."""

    _exit(cmd_summary(database_url=database_url, user_id=user_id))


@app.command("add-transaction")
def add_transaction_cmd(
    user_id: UserIdOpt,
    amount: Annotated[str, typer.Option(help="Non-negative amount, e.g. 42.50")],
    category: Annotated[str, typer.Option(help="Spending category, e.g. food")],
    description: Annotated[str, typer.Option(help="Free-form description")] = "",
    income: Annotated[bool, typer.Option("--income", help="Record as income")] = False,
    frequency: Annotated[
        str | None, typer.Option(help="Recurrence (daily, weekly, monthly, yearly)")
    ] = None,
    on: DateOpt = None,
    database_url: DatabaseUrlOpt = None,
) -> None:
    """Record a transaction and show the recomputed budgets."""

    _exit(
        cmd_add_transaction(
            database_url=database_url,
            user_id=user_id,
            amount=amount,
            category=category,
            description=description,
            is_income=income,
            frequency=frequency,
            occurred_at=on,
        )
    )


@app.command("create-budget")
def create_budget_cmd(
    user_id: UserIdOpt,
    category: Annotated[str, typer.Option(help="Spending category, e.g. food")],
    limit: Annotated[str, typer.Option(help="Positive spending limit")],
    period: Annotated[str, typer.Option(help="daily, weekly, monthly or yearly")] = "monthly",
    start: DateOpt = None,
    database_url: DatabaseUrlOpt = None,
) -> None:
    """Create a budget; its spent value reflects existing transactions."""

    _exit(
        cmd_create_budget(
            database_url=database_url,
            user_id=user_id,
            category=category,
            limit=limit,
            period=period,
            start_date=start.date() if start else None,
        )
    )


@app.command("create-goal")
def create_goal_cmd(
    user_id: UserIdOpt,
    name: Annotated[str, typer.Option(help="Goal name")],
    target: Annotated[str, typer.Option(help="Positive target amount")],
    category: Annotated[str, typer.Option(help="emergency, retirement, education, ...")] = "other",
    priority: Annotated[str, typer.Option(help="low, medium or high")] = "medium",
    deadline: DateOpt = None,
    image_url: Annotated[str | None, typer.Option(help="Optional picture for the goal")] = None,
    database_url: DatabaseUrlOpt = None,
) -> None:
    """Create a savings goal starting at zero."""

    _exit(
        cmd_create_goal(
            database_url=database_url,
            user_id=user_id,
            name=name,
            target=target,
            category=category,
            priority=priority,
            deadline=deadline.date() if deadline else None,
            image_url=image_url,
        )
    )


@app.command("contribute")
def contribute_cmd(
    goal_id: Annotated[str, typer.Argument(help="Savings goal id")],
    user_id: UserIdOpt,
    amount: Annotated[str, typer.Option(help="Positive amount to add")],
    database_url: DatabaseUrlOpt = None,
) -> None:
    """Add money to a savings goal."""

    _exit(
        cmd_update_goal(
            database_url=database_url, user_id=user_id, goal_id=goal_id, amount=amount
        )
    )


@app.command("set-goal-amount")
def set_goal_amount_cmd(
    goal_id: Annotated[str, typer.Argument(help="Savings goal id")],
    user_id: UserIdOpt,
    amount: Annotated[str, typer.Option(help="New saved amount (replaces the current one)")],
    database_url: DatabaseUrlOpt = None,
) -> None:
    """Replace a savings goal's saved amount."""

    _exit(
        cmd_update_goal(
            database_url=database_url,
            user_id=user_id,
            goal_id=goal_id,
            amount=amount,
            replace=True,
        )
    )


@app.command("goals")
def goals_cmd(user_id: UserIdOpt, database_url: DatabaseUrlOpt = None) -> None:
    """List savings goals with their progress."""

    _exit(cmd_goals(database_url=database_url, user_id=user_id))


@app.command("tips")
def tips_cmd(user_id: UserIdOpt, database_url: DatabaseUrlOpt = None) -> None:
    """List stored tips, most relevant first."""

    _exit(cmd_tips(database_url=database_url, user_id=user_id))


@app.command("chat")
def chat_cmd(
    message: Annotated[str, typer.Argument(help="Message for the assistant")],
    user_id: UserIdOpt,
    database_url: DatabaseUrlOpt = None,
) -> None:
    """Send a message to the finance assistant and print its reply."""

    _exit(cmd_chat(database_url=database_url, user_id=user_id, message=message))


@app.callback()
def _root() -> None:
    """Root command.

    Loads ``.env`` from the current working directory (without overriding any
    already-set environment variables) and configures logging.
    """

    # Load environment from .env in CWD (override=False to keep existing env)
    load_dotenv(dotenv_path=Path.cwd() / ".env", override=False)

    # Central logging setup so child loggers inherit configuration
    configure_logging()


if __name__ == "__main__":  # pragma: no cover - exercised via console script
    # Running as a module: `python -m finwise.cli`
    app()
