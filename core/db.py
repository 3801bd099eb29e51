"""
core/db.py -- Engine construction shared by every store.

One Engine (and therefore one bounded connection pool) is created per
process in the API lifespan or the CLI, then handed to UserStore and each
RecordStore. Stores never build their own engine.

SQLAlchemy keeps the stores database-agnostic: the default is a local
SQLite file, PostgreSQL is a DATABASE_URL change
(postgresql+psycopg2://user:pw@host/db).
"""

import logging
from typing import Optional

from sqlalchemy import create_engine, event, text
from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.pool import Pool

logger = logging.getLogger("stavba.store")


def _sqlite_pragmas(dbapi_conn, connection_record) -> None:
    """Enable WAL and foreign key enforcement on every new SQLite connection.

    SQLite PRAGMAs are per-connection, so they are set from a connect
    listener rather than once at startup.
    """
    cursor = dbapi_conn.cursor()
    cursor.execute("PRAGMA journal_mode=WAL")
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


def create_db_engine(
    db_url: str, pool_size: int = 5, echo: bool = False, poolclass: Optional[type[Pool]] = None
) -> Engine:
    """Build the process-wide Engine for db_url.

    poolclass overrides the pool SQLAlchemy picks for a SQLite URL. Named
    shared-memory URIs need it set explicitly.
    """
    if db_url.startswith("sqlite"):
        extra = {"poolclass": poolclass} if poolclass is not None else {}
        engine = create_engine(db_url, echo=echo, connect_args={"check_same_thread": False}, **extra)
        event.listen(engine, "connect", _sqlite_pragmas)
        return engine
    return create_engine(db_url, echo=echo, pool_size=pool_size, pool_pre_ping=True)


def ping(engine: Engine) -> bool:
    """Return True if a trivial query succeeds against the engine."""
    try:
        with engine.connect() as conn:
            conn.execute(text("SELECT 1"))
    except SQLAlchemyError:
        logger.exception("Error connecting to the database")
        return False
    return True
