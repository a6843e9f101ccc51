from __future__ import annotations

from decimal import Decimal
from pathlib import Path

import pytest
from db.client import session_scope
from rich.console import Console
from typer.testing import CliRunner

import finwise.assistant as assistant_mod
import finwise.cli as cli_mod
from finwise import persistence
from finwise.assistant import NOT_CONFIGURED_REPLY

from tests.helpers.db import bootstrap_sqlite_db
from tests.helpers.openai_stub import OpenAIStub

runner = CliRunner()


@pytest.fixture
def db_url(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> str:
    # Logging is exercised elsewhere; the runner's captured streams close per invoke.
    monkeypatch.setattr(cli_mod, "configure_logging", lambda *a, **k: None)
    # Wide enough that table cells and long lines are never truncated or wrapped.
    monkeypatch.setattr(cli_mod, "console", Console(width=200))
    return bootstrap_sqlite_db(tmp_path / "finwise.sqlite3")


def _invoke(db_url: str, *args: str, user: str = "demo"):
    return runner.invoke(cli_mod.app, [*args, "--user-id", user, "--database-url", db_url])


def _goal_id(db_url: str, name: str, user: str = "demo") -> str:
    with session_scope(database_url=db_url) as s:
        return next(g.id for g in persistence.list_goals(s, user_id=user) if g.name == name)


def test_seed_demo_then_summary(db_url: str) -> None:
    seeded = _invoke(db_url, "seed-demo")
    assert seeded.exit_code == 0, seeded.output
    assert "3 transactions" in seeded.output

    summary = _invoke(db_url, "summary")
    assert summary.exit_code == 0, summary.output
    assert "housing" in summary.output
    assert "$1,200.00" in summary.output
    assert "$85.42" in summary.output


def test_summary_without_budgets(db_url: str) -> None:
    result = _invoke(db_url, "summary", user="nobody")

    assert result.exit_code == 0
    assert "No budgets yet" in result.output


def test_user_id_from_environment(db_url: str, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("FINWISE_USER_ID", "env-user")

    result = runner.invoke(cli_mod.app, ["seed-demo", "--database-url", db_url])

    assert result.exit_code == 0, result.output
    with session_scope(database_url=db_url) as s:
        assert len(persistence.list_goals(s, user_id="env-user")) == 2


def test_add_transaction_and_create_budget(db_url: str) -> None:
    added = _invoke(
        db_url, "add-transaction", "--amount", "30", "--category", "entertainment",
        "--description", "Cinema", "--on", "2024-05-03",
    )
    assert added.exit_code == 0, added.output

    created = _invoke(db_url, "create-budget", "--category", "entertainment", "--limit", "120")
    assert created.exit_code == 0, created.output
    assert "$30.00 of $120.00 spent" in created.output

    with session_scope(database_url=db_url) as s:
        (b,) = persistence.list_budgets(s, user_id="demo")
    assert b.current_spent == Decimal("30")


@pytest.mark.parametrize(
    "args",
    [
        ("add-transaction", "--amount", "-5", "--category", "food"),
        ("add-transaction", "--amount", "5", "--category", "yachts"),
        ("create-budget", "--category", "food", "--limit", "0"),
        ("create-goal", "--name", "Boat", "--target", "abc"),
        ("contribute", "missing-goal", "--amount", "10"),
    ],
)
def test_errors_exit_non_zero(db_url: str, args: tuple[str, ...]) -> None:
    result = _invoke(db_url, *args)

    assert result.exit_code == 1
    assert "Error:" in result.output


def test_goal_lifecycle_prints_congratulations_once(db_url: str) -> None:
    created = _invoke(db_url, "create-goal", "--name", "Bike", "--target", "500")
    assert created.exit_code == 0, created.output
    goal_id = _goal_id(db_url, "Bike")

    first = _invoke(db_url, "set-goal-amount", goal_id, "--amount", "450")
    assert first.exit_code == 0, first.output
    assert "Congratulations" not in first.output

    second = _invoke(db_url, "contribute", goal_id, "--amount", "60")
    assert second.exit_code == 0, second.output
    assert "Congratulations" in second.output

    third = _invoke(db_url, "contribute", goal_id, "--amount", "1")
    assert third.exit_code == 0, third.output
    assert "Congratulations" not in third.output

    listed = _invoke(db_url, "goals")
    assert "completed" in listed.output


def test_completed_goal_cannot_be_lowered(db_url: str) -> None:
    _invoke(db_url, "seed-demo")
    goal_id = _goal_id(db_url, "Japan Trip")

    assert _invoke(db_url, "set-goal-amount", goal_id, "--amount", "3500").exit_code == 0
    lowered = _invoke(db_url, "set-goal-amount", goal_id, "--amount", "100")

    assert lowered.exit_code == 1
    assert "completed" in lowered.output


def test_tips_listed(db_url: str) -> None:
    _invoke(db_url, "seed-demo")

    result = _invoke(db_url, "tips")

    assert result.exit_code == 0
    assert "[budgeting]" in result.output


def test_chat_without_key_prints_fallback(db_url: str) -> None:
    result = _invoke(db_url, "chat", "How am I doing?")

    assert result.exit_code == 0, result.output
    assert "not properly configured" in result.output
    with session_scope(database_url=db_url) as s:
        history = persistence.list_chat_history(s, user_id="demo")
    assert [m.content for m in history] == ["How am I doing?", NOT_CONFIGURED_REPLY]


def test_chat_with_stubbed_model(db_url: str, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("FINWISE_CHAT_API_KEY", "k")
    stub = OpenAIStub(reply="Looking good.")
    monkeypatch.setattr(assistant_mod, "_create_client", stub.factory)

    result = _invoke(db_url, "chat", "How am I doing?")

    assert result.exit_code == 0, result.output
    assert "Looking good." in result.output


def test_database_url_from_environment(db_url: str, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("DATABASE_URL", db_url)

    result = runner.invoke(cli_mod.app, ["seed-demo", "--user-id", "demo"])

    assert result.exit_code == 0, result.output


def test_missing_database_url_is_reported(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(cli_mod, "configure_logging", lambda *a, **k: None)

    result = runner.invoke(cli_mod.app, ["summary", "--user-id", "demo"])

    assert result.exit_code == 1
    assert "DATABASE_URL is not set" in result.output
