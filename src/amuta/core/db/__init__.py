"""Database utilities - engine and session."""

from src.amuta.core.db.engine import dispose_engine, get_engine
from src.amuta.core.db.migrations import run_migrations_sync
from src.amuta.core.db.session import get_session

__all__ = [
    "dispose_engine",
    "get_engine",
    "get_session",
    "run_migrations_sync",
]
