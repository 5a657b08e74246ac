"""
Engine and session factory for the market entity store.

PostgreSQL (psycopg driver) is the production store: row locks come from
``SELECT ... FOR UPDATE`` and every connection carries a ``lock_timeout``
so a blocked transaction fails fast with a retryable error.

SQLite is accepted for local development and tests. It has no row locks,
so every transaction is opened with ``BEGIN IMMEDIATE``, which serializes
writers on the database lock; the driver busy timeout plays the role of
``lock_timeout``.
"""

import logging

from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine, make_url
from sqlalchemy.exc import DBAPIError
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from app.infrastructure.market.models import Base

logger = logging.getLogger(__name__)

# lock_not_available, deadlock_detected, serialization_failure
CONTENTION_SQLSTATES = frozenset({"55P03", "40P01", "40001"})


def build_engine(
    database_url: str, echo: bool = False, lock_timeout_ms: int = 5000
) -> Engine:
    """Build a SQLAlchemy engine configured for row-level locking.

    Args:
        database_url: SQLAlchemy URL (postgresql+psycopg://... or sqlite://...).
        echo: Log every SQL statement.
        lock_timeout_ms: Maximum wait on a row (or database) lock.

    Returns:
        A configured Engine.
    """
    url = make_url(database_url)

    if url.get_backend_name() == "sqlite":
        connect_args = {"check_same_thread": False, "timeout": lock_timeout_ms / 1000}
        if url.database in (None, "", ":memory:"):
            engine = create_engine(
                url, echo=echo, connect_args=connect_args, poolclass=StaticPool
            )
        else:
            engine = create_engine(url, echo=echo, connect_args=connect_args)
        _enable_sqlite_transactions(engine)
        return engine

    return create_engine(
        url,
        echo=echo,
        pool_pre_ping=True,
        connect_args={"options": f"-c lock_timeout={lock_timeout_ms}"},
    )


def _enable_sqlite_transactions(engine: Engine) -> None:
    """Take over transaction control from pysqlite.

    pysqlite defers BEGIN and never emits it before SELECT, which would let
    two purchases read the same listing. Emitting BEGIN IMMEDIATE ourselves
    makes every unit of work take the write lock up front.
    """

    @event.listens_for(engine, "connect")
    def _on_connect(dbapi_connection, _connection_record) -> None:
        dbapi_connection.isolation_level = None
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()

    @event.listens_for(engine, "begin")
    def _on_begin(conn) -> None:
        conn.exec_driver_sql("BEGIN IMMEDIATE")


def build_session_factory(engine: Engine) -> sessionmaker[Session]:
    """Return a session factory bound to the engine."""
    return sessionmaker(bind=engine, expire_on_commit=False)


def create_schema(engine: Engine) -> None:
    """Create missing tables (idempotent)."""
    Base.metadata.create_all(engine)
    logger.info("Market schema ensured on %s", engine.url.render_as_string(hide_password=True))


def is_contention_error(exc: DBAPIError) -> bool:
    """Return True if the driver error means "gave up waiting on a lock"."""
    orig = exc.orig
    sqlstate = getattr(orig, "sqlstate", None) or getattr(orig, "pgcode", None)
    if sqlstate in CONTENTION_SQLSTATES:
        return True
    return "database is locked" in str(orig).lower()
