"""PostgreSQL client utilities for the extract loader."""

import logging
from contextlib import contextmanager
from typing import Iterator

from sqlalchemy import create_engine, inspect
from sqlalchemy.engine import Connection, Engine

log = logging.getLogger(__name__)


def get_postgres_connection(connection_string: str, **engine_kwargs) -> Engine:
    """Create a SQLAlchemy engine for the store.

    The loader uses a single connection per run, so the pool is kept small.

    Args:
        connection_string: SQLAlchemy URL, normally ``postgresql+psycopg2://...``.
        **engine_kwargs: Extra ``create_engine`` arguments.

    Returns:
        SQLAlchemy Engine instance.
    """
    if connection_string.startswith("postgresql"):
        engine_kwargs.setdefault("pool_size", 1)
        engine_kwargs.setdefault("max_overflow", 0)
    engine_kwargs.setdefault("pool_pre_ping", True)

    engine = create_engine(connection_string, **engine_kwargs)
    log.info("Database engine created for %s", engine.url.render_as_string(hide_password=True))
    return engine


@contextmanager
def run_connection(conn: Connection) -> Iterator[Connection]:
    """Context manager that owns the run's single connection and always releases it."""
    try:
        yield conn
    finally:
        conn.close()
        log.info("Database connection released")


def table_exists(conn: Connection, table_name: str) -> bool:
    """Return whether ``table_name`` exists, as seen by ``conn``."""
    return inspect(conn).has_table(table_name)
