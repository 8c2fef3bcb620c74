"""
Engine and session management.

One process-wide ``DatabaseManager`` (``db``) owns the engine. The API
initializes it at startup; request handlers receive sessions through the
``get_db`` dependency, which commits once the handler returns and rolls back
if it raises:

    from core.db import db

    db.initialize()
    with db.session() as session:
        session.add(order)
"""

import time
from collections.abc import Generator
from contextlib import contextmanager
from typing import Any, Optional

from sqlalchemy import Engine, create_engine, event, text
from sqlalchemy.orm import DeclarativeBase, Session, sessionmaker
from sqlalchemy.pool import QueuePool, StaticPool

from .config import get_settings


class Base(DeclarativeBase):
    """Declarative base shared by every CampusEats model."""


def engine_options(url: str) -> dict[str, Any]:
    """
    Pool configuration for ``url``.

    SQLite shares a single connection so in-memory databases outlive a
    session; server databases get a sized QueuePool from settings.
    """
    if url.startswith("sqlite"):
        return {"poolclass": StaticPool, "connect_args": {"check_same_thread": False}}

    settings = get_settings()
    return {
        "poolclass": QueuePool,
        "pool_size": settings.db_pool_size,
        "max_overflow": settings.db_max_overflow,
        "pool_pre_ping": settings.db_pool_pre_ping,
    }


def enable_sqlite_foreign_keys(engine: Engine) -> None:
    """Turn on FOREIGN KEY enforcement (and ON DELETE actions) for every SQLite connection."""

    @event.listens_for(engine, "connect")
    def _foreign_keys_on(dbapi_connection, connection_record):
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()


class DatabaseManager:
    _instance: Optional["DatabaseManager"] = None

    def __new__(cls) -> "DatabaseManager":
        if cls._instance is None:
            instance = super().__new__(cls)
            instance.engine = None
            instance.SessionLocal = None
            cls._instance = instance
        return cls._instance

    @property
    def is_initialized(self) -> bool:
        return self.engine is not None

    def initialize(self, database_url: str | None = None) -> None:
        """Create the engine. Later calls are no-ops until ``reset()``."""
        if self.is_initialized:
            return

        url = database_url or get_settings().database_url
        engine = create_engine(url, echo=get_settings().debug, **engine_options(url))
        if engine.dialect.name == "sqlite":
            enable_sqlite_foreign_keys(engine)

        self.engine = engine
        self.SessionLocal = sessionmaker(bind=engine, autoflush=False, expire_on_commit=False)

    def reset(self) -> None:
        """Dispose of the engine so the next ``initialize()`` starts over."""
        if self.engine is not None:
            self.engine.dispose()
        self.engine = None
        self.SessionLocal = None

    def _require_engine(self) -> Engine:
        if self.engine is None:
            raise RuntimeError("Database is not initialized; call db.initialize() first.")
        return self.engine

    def create_all_tables(self) -> None:
        import core.models  # noqa: F401  registers every table on Base.metadata

        Base.metadata.create_all(bind=self._require_engine())

    def drop_all_tables(self) -> None:
        Base.metadata.drop_all(bind=self._require_engine())

    def get_session(self) -> Session:
        """A bare session; the caller commits and closes it."""
        self._require_engine()
        return self.SessionLocal()

    @contextmanager
    def session(self) -> Generator[Session, None, None]:
        session = self.get_session()
        try:
            yield session
            session.commit()
        except Exception:
            session.rollback()
            raise
        finally:
            session.close()

    def health_check(self) -> dict:
        """Run ``SELECT 1``; report ``healthy``, ``latency_ms`` and ``error``."""
        if self.engine is None:
            return {"healthy": False, "latency_ms": 0.0, "error": "Database not initialized"}

        started = time.perf_counter()
        error = None
        try:
            with self.engine.connect() as connection:
                connection.execute(text("SELECT 1"))
        except Exception as exc:  # reported to the readiness probe, not raised
            error = str(exc)
        return {
            "healthy": error is None,
            "latency_ms": round((time.perf_counter() - started) * 1000, 2),
            "error": error,
        }


db = DatabaseManager()


def get_db() -> Generator[Session, None, None]:
    """FastAPI dependency: one session per request, committed when the handler succeeds."""
    with db.session() as session:
        yield session
