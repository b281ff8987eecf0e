"""Database engine setup for the relation store.

Any SQLAlchemy URL works; SQLite is the default for local use.
The store is read-only from wikigraph's side and is accessed through
SQLAlchemy Core. Connections come from the engine's pool; a traversal checks out one
connection and holds it until it finishes.
"""

from __future__ import annotations

import logging
from typing import Any

from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine, make_url

from wikigraph.infrastructure.database.schema import metadata

logger = logging.getLogger(__name__)


def create_db_engine(url: str) -> Engine:
    """Create an engine for *url*, enabling WAL mode on SQLite files."""
    engine = create_engine(url, echo=False)

    if make_url(url).get_backend_name() == "sqlite":

        @event.listens_for(engine, "connect")
        def _set_sqlite_pragma(dbapi_conn: Any, _: Any) -> None:
            cursor = dbapi_conn.cursor()
            cursor.execute("PRAGMA journal_mode=WAL")
            cursor.close()

    return engine


def create_tables(engine: Engine) -> list[str]:
    """Create the ``properties`` and ``persons`` tables if missing.

    Idempotent: existing tables and their rows are left untouched.
    Returns the names of the tables the store now holds.
    """
    metadata.create_all(engine)
    logger.debug("Initialized relation store at %s", engine.url.render_as_string())
    return sorted(metadata.tables)
