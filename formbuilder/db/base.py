"""SQLAlchemy engine construction.

The service targets PostgreSQL in production but supports SQLite for local
development and CI. No declarative models are defined here; this module only
manages connection lifecycle.
"""

from __future__ import annotations

import logging
import os

from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine
from sqlalchemy.pool import StaticPool

logger = logging.getLogger(__name__)


def _db_url() -> str:
    return (
        os.getenv("TEST_DATABASE_URL")
        or os.getenv("DATABASE_URL")
        or "sqlite+pysqlite:///:memory:"
    )


# Module-level cached Engine shared by all repositories
_ENGINE: Engine | None = None
_ENGINE_URL: str | None = None


def _enable_sqlite_foreign_keys(dbapi_connection, connection_record) -> None:  # type: ignore[no-untyped-def]
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


def get_engine(url: str | None = None) -> Engine:
    """Return a singleton SQLAlchemy Engine for the given URL.

    For SQLite in-memory URLs, use a StaticPool to keep a single connection
    alive across sessions and threads. SQLite connections enforce foreign
    keys so cascading deletes behave as on PostgreSQL.
    """
    global _ENGINE, _ENGINE_URL
    resolved_url = url or _db_url()

    if _ENGINE is None or _ENGINE_URL != resolved_url:
        kwargs: dict = {"future": True, "pool_pre_ping": True}
        is_sqlite = resolved_url.startswith("sqlite")
        if is_sqlite and ":memory:" in resolved_url:
            kwargs.update({
                "poolclass": StaticPool,
                "connect_args": {"check_same_thread": False},
            })
        elif is_sqlite:
            kwargs["connect_args"] = {"check_same_thread": False}
        engine = create_engine(resolved_url, **kwargs)
        if is_sqlite:
            event.listen(engine, "connect", _enable_sqlite_foreign_keys)
        if _ENGINE is not None:
            _ENGINE.dispose()
        _ENGINE = engine
        _ENGINE_URL = resolved_url
        logger.info("db_engine_created dialect=%s", engine.dialect.name)

    return _ENGINE


__all__ = ["get_engine"]
