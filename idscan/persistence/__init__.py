"""
Data persistence layer.

Provides the abstract repository and concrete SQLite / PostgreSQL
implementations, plus scoped acquisition through `open_repository`.
"""

from __future__ import annotations

from contextlib import contextmanager
from typing import Iterator, Optional

from ..config import Config, get_config
from ..exceptions import ConfigurationError
from .repository import RecordRepository
from .sqlite_store import SQLiteRepository


def create_repository(config: Optional[Config] = None) -> RecordRepository:
    """Build the repository selected by DB_BACKEND (not yet initialized)."""
    config = config or get_config()
    db = config.db

    if db.is_postgres:
        if not db.is_configured:
            raise ConfigurationError("PostgreSQL backend needs DB_HOST, DB_NAME and DB_USER", config_key="DB_HOST")
        from .postgres import PostgresRepository
        return PostgresRepository(db)

    if db.backend != "sqlite":
        raise ConfigurationError(f"Unknown DB_BACKEND: {db.backend}", config_key="DB_BACKEND")
    return SQLiteRepository(db.sqlite_path)


@contextmanager
def open_repository(config: Optional[Config] = None) -> Iterator[RecordRepository]:
    """
    Open the configured store, ensure its schema and always close it.

    Usage:
        with open_repository() as repo:
            service = RecordService(repo)
            service.save(fields)
    """
    repo = create_repository(config)
    try:
        repo.init_db()
        yield repo
    finally:
        repo.close()


__all__ = [
    "RecordRepository",
    "SQLiteRepository",
    "create_repository",
    "open_repository",
]
