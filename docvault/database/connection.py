from collections.abc import Generator
from contextlib import contextmanager
from pathlib import Path
from typing import Any

import psycopg
from psycopg_pool import ConnectionPool

from docvault.config.settings import Settings
from docvault.database.exceptions import PersistenceError

SCHEMA_PATH = Path(__file__).parent / "schema.sql"

_pool: ConnectionPool | None = None


def build_conninfo(settings: Settings) -> str:
    return (
        f"host={settings.db_host} "
        f"port={settings.db_port} "
        f"dbname={settings.db_database} "
        f"user={settings.db_username} "
        f"password={settings.db_password}"
    )


def init_pool(settings: Settings) -> None:
    """Initialize the global connection pool from settings.

    The pool is sized so every concurrent pipeline run can hold a connection
    while the ingestion path still gets one.
    """
    global _pool  # noqa: PLW0603
    max_size = max(2, settings.max_concurrent_runs + 2)
    _pool = ConnectionPool(build_conninfo(settings), min_size=1, max_size=max_size)


def close_pool() -> None:
    """Close the global connection pool."""
    global _pool  # noqa: PLW0603
    if _pool is not None:
        _pool.close()
        _pool = None


@contextmanager
def get_connection() -> Generator[psycopg.Connection[Any], None, None]:
    """Yield a connection from the pool. Caller manages commit/rollback."""
    if _pool is None:
        raise RuntimeError("Connection pool not initialized. Call init_pool() first.")
    with _pool.connection() as conn:
        yield conn


def apply_schema(schema_path: Path = SCHEMA_PATH) -> None:
    """Create the documents and processing_records tables if missing."""
    ddl = schema_path.read_text(encoding="utf-8")
    try:
        with get_connection() as conn:
            conn.execute(ddl)
            conn.commit()
    except psycopg.Error as exc:
        raise PersistenceError(f"Failed to apply schema: {exc}") from exc
