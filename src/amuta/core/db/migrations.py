"""Alembic migration runner for deploy scripts and tests."""

from pathlib import Path

from alembic.config import Config

from alembic import command

ALEMBIC_INI = Path(__file__).resolve().parents[4] / "alembic.ini"


def run_migrations_sync(database_url: str | None = None) -> None:
    """Upgrade the database to head.

    Args:
        database_url: Overrides DATABASE_URL for this run.
    """
    alembic_cfg = Config(str(ALEMBIC_INI))
    if database_url:
        alembic_cfg.set_main_option("sqlalchemy.url", database_url)
    command.upgrade(alembic_cfg, "head")
