"""Run the ``libs/db`` Alembic migrations programmatically.

The CLI's ``init-db`` command and the migration tests go through here instead
of shelling out to ``alembic``. The script directory is resolved relative to
the repository checkout, so this works from an editable install only.
"""

from __future__ import annotations

from pathlib import Path

from alembic import command
from alembic.config import Config
from db.client import resolve_database_url

from .logging_setup import get_logger

_logger = get_logger("finwise.migrations")

ALEMBIC_DIR = Path(__file__).resolve().parents[2] / "libs" / "db" / "alembic"


def alembic_config(database_url: str | None = None) -> Config:
    cfg = Config()
    cfg.set_main_option("script_location", str(ALEMBIC_DIR))
    # ConfigParser interpolation treats "%" specially.
    cfg.set_main_option("sqlalchemy.url", resolve_database_url(database_url).replace("%", "%%"))
    return cfg


def upgrade(database_url: str | None = None, revision: str = "head") -> None:
    cfg = alembic_config(database_url)
    _logger.info("migrations:upgrade revision=%s", revision)
    command.upgrade(cfg, revision)


def downgrade(database_url: str | None = None, revision: str = "base") -> None:
    cfg = alembic_config(database_url)
    _logger.info("migrations:downgrade revision=%s", revision)
    command.downgrade(cfg, revision)


__all__ = ["ALEMBIC_DIR", "alembic_config", "upgrade", "downgrade"]
