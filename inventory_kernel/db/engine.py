"""
Process-wide SQLAlchemy engine and session factory for ``SqlDocumentStore``.

Kernel > DB. ``create_tables`` imports ``inventory_kernel.models`` so the
documents table is registered on ``Base.metadata`` before DDL runs.

Failure modes:
    - RuntimeError when the engine or session factory is requested before
      ``init_engine_from_url()``.
    - SQLAlchemyError raised inside ``session_scope()`` propagates after
      rollback; the store turns it into PersistenceError.
"""

from contextlib import contextmanager
from typing import Iterator

from sqlalchemy import create_engine
from sqlalchemy.engine import Engine, make_url
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from inventory_kernel.logging_config import get_logger

logger = get_logger("db.engine")

_engine: Engine | None = None
_session_factory: sessionmaker[Session] | None = None

_NOT_INITIALIZED = "Database engine not initialized; call init_engine_from_url() first"


def _is_memory_sqlite(database_url: str) -> bool:
    url = make_url(database_url)
    return url.get_backend_name() == "sqlite" and url.database in (None, "", ":memory:")


def init_engine_from_url(database_url: str, echo: bool = False) -> Engine:
    """
    Create the engine for ``database_url``, replacing any previous one.

    ``sqlite://`` holds the whole database in one connection, so it gets a
    StaticPool shared across threads. Other URLs use a pre-pinged pool.
    """
    global _engine, _session_factory

    if _is_memory_sqlite(database_url):
        options: dict = {
            "poolclass": StaticPool,
            "connect_args": {"check_same_thread": False},
        }
    else:
        options = {"pool_pre_ping": True}

    _engine = create_engine(database_url, echo=echo, **options)
    _session_factory = sessionmaker(bind=_engine, expire_on_commit=False)
    logger.info(
        "engine_initialized",
        extra={"dialect": _engine.dialect.name, "echo": echo},
    )
    return _engine


def get_engine() -> Engine:
    if _engine is None:
        raise RuntimeError(_NOT_INITIALIZED)
    return _engine


def get_session_factory() -> sessionmaker[Session]:
    if _session_factory is None:
        raise RuntimeError(_NOT_INITIALIZED)
    return _session_factory


@contextmanager
def session_scope(factory: sessionmaker[Session] | None = None) -> Iterator[Session]:
    """One transaction: commit on normal exit, roll back and re-raise otherwise."""
    session = (factory or get_session_factory())()
    try:
        yield session
        session.commit()
    except Exception:
        session.rollback()
        logger.warning("transaction_rolled_back", exc_info=True)
        raise
    finally:
        session.close()


def create_tables(engine: Engine | None = None) -> None:
    from inventory_kernel.db.base import Base
    import inventory_kernel.models  # noqa: F401  (registers DocumentModel)

    Base.metadata.create_all(engine or get_engine())
    logger.info("tables_created", extra={"tables": sorted(Base.metadata.tables)})


def reset_engine() -> None:
    """Dispose the engine and forget it. Tests only."""
    global _engine, _session_factory
    if _engine is not None:
        _engine.dispose()
    _engine = None
    _session_factory = None
