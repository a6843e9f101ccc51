"""Pytest configuration for test isolation.

The shared SQLAlchemy engine in ``db.client`` is process-wide and refuses to
switch URLs, and ``finwise.logging_setup.configure_logging`` installs its
handler once per process. Tests each get their own SQLite file and may run
the CLI (which configures logging against a captured stream), so both are
reset after every test.

Environment variables the application reads are cleared per test so a
developer's ``.env`` or shell never leaks into assertions.
"""

from __future__ import annotations

import logging
import sys
from pathlib import Path

import pytest

# Make `packages/` and `libs/db/src` importable without an install, and the
# repo root so `tests.helpers` resolves.
_ROOT = Path(__file__).resolve().parents[1]
sys.path[:0] = [
    p
    for p in (str(_ROOT / "packages"), str(_ROOT / "libs" / "db" / "src"), str(_ROOT))
    if p not in sys.path
]

_APP_ENV_VARS = (
    "DATABASE_URL",
    "FINWISE_USER_ID",
    "FINWISE_LOG_LEVEL",
    "FINWISE_CHAT_API_KEY",
    "FINWISE_CHAT_BASE_URL",
    "FINWISE_CHAT_MODEL",
    "GROQ_API_KEY",
)


@pytest.fixture(autouse=True)
def _isolate_env(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    for name in _APP_ENV_VARS:
        monkeypatch.delenv(name, raising=False)
    # The CLI loads .env from the working directory; keep it empty.
    monkeypatch.chdir(tmp_path)


@pytest.fixture(autouse=True)
def _reset_shared_state():
    yield
    from db.client import dispose_engine

    import finwise.logging_setup as logging_setup

    dispose_engine()
    logging_setup._configured = False
    pkg_logger = logging.getLogger("finwise")
    for h in list(pkg_logger.handlers):
        pkg_logger.removeHandler(h)
    pkg_logger.propagate = True
