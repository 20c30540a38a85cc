"""
Module: books_kernel.db.engine
Responsibility: Process-wide SQLAlchemy engine and session factory for the
    reference persistence adapter, plus table management for tests and
    single-node deployments.
Architecture position: Kernel > DB.  Only ``create_tables`` reaches outward,
    lazily, to load the module ORM models.

Invariants enforced:
    - PostgreSQL runs at READ COMMITTED; the depreciation store takes row
      locks (FOR UPDATE) where it needs more.
    - SQLite connections are usable from any thread and every transaction
      begins IMMEDIATE, so writers queue on the database file instead of
      failing half-way with "database is locked".
    - Sessions never expire loaded rows on commit; stores convert rows to
      frozen records after committing.

Failure modes:
    - RuntimeError from the accessors before ``init_engine_from_url``.
    - sqlalchemy TimeoutError when the PostgreSQL pool is exhausted.
"""

import atexit
from collections.abc import Iterator
from contextlib import contextmanager

from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine, make_url
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from books_kernel.logging_config import configure_logging, get_logger

logger = get_logger("db.engine")

_engine: Engine | None = None
_SessionFactory: sessionmaker[Session] | None = None

_NOT_INITIALIZED = "Engine not initialized. Call init_engine_from_url() first."


def init_engine_from_url(
    database_url: str,
    echo: bool = False,
    pool_size: int = 10,
    max_overflow: int = 5,
    pool_timeout: int = 30,
) -> Engine:
    """
    Create the engine for ``database_url`` and make it the active one.

    Accepts ``postgresql+psycopg://...`` or ``sqlite:///path`` (``sqlite://``
    for an in-memory database shared by every thread).  Calling again
    replaces the active engine.
    """
    global _engine, _SessionFactory

    url = make_url(database_url)
    dialect = url.get_backend_name()

    if dialect == "sqlite":
        extra = {}
        if url.database in (None, "", ":memory:"):
            extra["poolclass"] = StaticPool
        engine = create_engine(
            url,
            echo=echo,
            connect_args={"check_same_thread": False, "timeout": pool_timeout},
            **extra,
        )
        _begin_immediate_on_sqlite(engine)
    else:
        engine = create_engine(
            url,
            echo=echo,
            pool_size=pool_size,
            max_overflow=max_overflow,
            pool_timeout=pool_timeout,
            pool_pre_ping=True,
            isolation_level="READ COMMITTED",
        )

    _engine = engine
    _SessionFactory = sessionmaker(bind=engine, expire_on_commit=False)

    configure_logging()
    logger.info("engine_initialized", extra={"dialect": dialect, "echo": echo})
    return engine


def _begin_immediate_on_sqlite(engine: Engine) -> None:
    # SQLite ignores FOR UPDATE; taking the write lock at BEGIN gives the
    # depreciation store the same one-writer-at-a-time behaviour.

    @event.listens_for(engine, "connect")
    def _no_implicit_begin(dbapi_connection, connection_record):
        dbapi_connection.isolation_level = None

    @event.listens_for(engine, "begin")
    def _begin_immediate(conn):
        conn.exec_driver_sql("BEGIN IMMEDIATE")


def get_engine() -> Engine:
    if _engine is None:
        raise RuntimeError(_NOT_INITIALIZED)
    return _engine


def get_session_factory() -> sessionmaker[Session]:
    """Factory for callers that open one session per thread or per operation."""
    if _SessionFactory is None:
        raise RuntimeError(_NOT_INITIALIZED)
    return _SessionFactory


def get_session() -> Session:
    return get_session_factory()()


@contextmanager
def session_scope() -> Iterator[Session]:
    """
    Commit on normal exit, roll back and re-raise on error, always close.

    Usage:
        with session_scope() as session:
            session.add(model)
    """
    session = get_session()
    try:
        yield session
        session.commit()
    except Exception:
        session.rollback()
        logger.warning("transaction_rolled_back", exc_info=True)
        raise
    finally:
        session.close()


def create_tables() -> None:
    """Create every table declared by the module ORM models."""
    from books_kernel.db.base import Base
    from books_modules._orm_registry import import_all_orm_models

    import_all_orm_models()
    Base.metadata.create_all(get_engine())


def drop_tables() -> None:
    """Drop every table. Tests only."""
    from books_kernel.db.base import Base

    Base.metadata.drop_all(get_engine())


def reset_engine() -> None:
    """Dispose the active engine and forget it."""
    global _engine, _SessionFactory

    if _engine is not None:
        _engine.dispose()
    _engine = None
    _SessionFactory = None


atexit.register(reset_engine)
