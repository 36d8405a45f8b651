"""
FolderNotes Backend — Store Handle and Session Management
==========================================================

What:  Async SQLAlchemy engine, session factory, and FastAPI dependency.
Why:   Centralizes all database connection logic in one place.
How:   A `Database` object owns the engine and session factory. It is built
       once in the application lifespan, attached to `app.state.database`,
       and disposed on shutdown. Route handlers receive sessions through
       the `get_db_session` dependency.
Who:   main.py (lifespan), routes (dependency), tests (fixtures).

Connection Pooling Strategy:
    Server databases (PostgreSQL/asyncpg) get a sized pool with pre-ping and
    hourly recycling. SQLite URLs keep SQLAlchemy's default pool for the
    dialect, which does not accept pool sizing arguments.
"""

import logging
import uuid
from contextlib import asynccontextmanager
from datetime import datetime, timezone
from typing import Any, AsyncGenerator, Dict, Optional

from fastapi import Request
from sqlalchemy import DateTime, event, text
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.orm import DeclarativeBase
from sqlalchemy.types import TypeDecorator

from foldernotes.config import Settings
from foldernotes.exceptions import StoreUnavailableError

logger = logging.getLogger(__name__)


# ── Base Model ────────────────────────────────────────────────────────────
class Base(DeclarativeBase):
    """Base class for all SQLAlchemy ORM models (shared metadata for Alembic)."""
    pass


class UTCDateTime(TypeDecorator):
    """
    Timezone-aware DateTime that always comes back as UTC.

    PostgreSQL returns aware values for TIMESTAMP WITH TIME ZONE; SQLite
    stores plain strings and returns naive datetimes. Values written are
    converted to UTC, values read without tzinfo are tagged as UTC, so the
    service layer only ever compares aware datetimes.
    """

    impl = DateTime
    cache_ok = True

    def __init__(self, *args, **kwargs):
        kwargs.setdefault("timezone", True)
        super().__init__(*args, **kwargs)

    def process_bind_param(self, value, dialect):
        if value is not None and value.tzinfo is not None:
            value = value.astimezone(timezone.utc)
        return value

    def process_result_value(self, value, dialect):
        if value is not None and value.tzinfo is None:
            value = value.replace(tzinfo=timezone.utc)
        return value


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def new_id() -> str:
    """Random UUID4 in its 36-character text form."""
    return str(uuid.uuid4())


def serialize_sqlite_transactions(engine: AsyncEngine) -> None:
    """
    Start every SQLite transaction with BEGIN IMMEDIATE.

    The sqlite3 driver defers BEGIN until the first write, so two
    read-modify-write transactions can both read a note before either
    writes it. Taking the write lock at BEGIN makes them queue instead
    (waiters block up to the driver's busy timeout).
    """

    @event.listens_for(engine.sync_engine, "connect")
    def _disable_driver_begin(dbapi_connection, connection_record):
        dbapi_connection.isolation_level = None

    @event.listens_for(engine.sync_engine, "begin")
    def _begin_immediate(conn):
        conn.exec_driver_sql("BEGIN IMMEDIATE")


class Database:
    """
    Process-wide store handle.

    Lifecycle:
        1. Built from settings during application startup
        2. `create_schema()` optionally creates missing tables
        3. `session()` hands out one session per unit of work
        4. `dispose()` closes pooled connections at shutdown

    Connecting is lazy: the engine opens its first connection on the first
    query, so an unreachable store shows up as failing requests rather than
    as a crash at startup.
    """

    def __init__(
        self,
        url: str,
        pool_size: int = 10,
        max_overflow: int = 10,
        pool_pre_ping: bool = True,
        echo: bool = False,
    ):
        self.url = url
        engine_kwargs: Dict[str, Any] = {
            "pool_pre_ping": pool_pre_ping,
            "echo": echo,
        }
        if not url.startswith("sqlite"):
            engine_kwargs.update(
                pool_size=pool_size,
                max_overflow=max_overflow,
                pool_recycle=3600,
            )

        self.engine = create_async_engine(url, **engine_kwargs)
        if url.startswith("sqlite"):
            serialize_sqlite_transactions(self.engine)

        # expire_on_commit=False: objects stay readable after commit, which
        # the services rely on when building responses
        self.session_factory = async_sessionmaker(
            self.engine,
            class_=AsyncSession,
            expire_on_commit=False,
        )

    @classmethod
    def from_settings(cls, settings: Settings) -> "Database":
        return cls(
            settings.database_url,
            pool_size=settings.db_pool_size,
            max_overflow=settings.db_max_overflow,
            pool_pre_ping=settings.db_pool_pre_ping,
            echo=settings.log_level == "DEBUG",
        )

    async def create_schema(self) -> None:
        """Create any missing tables for the registered models."""
        # Models register themselves on Base.metadata when imported
        from foldernotes import models  # noqa: F401

        async with self.engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)
        logger.info("Database schema ensured")

    async def ping(self) -> bool:
        """Lightweight connectivity probe (SELECT 1)."""
        try:
            async with self.engine.connect() as conn:
                await conn.execute(text("SELECT 1"))
            return True
        except Exception as e:
            logger.warning("Database ping failed: %s", str(e))
            return False

    @asynccontextmanager
    async def session(self) -> AsyncGenerator[AsyncSession, None]:
        """
        Provide a session that commits on success and rolls back on error.

        The session is always closed, returning its connection to the pool
        even when the caller raises.
        """
        async with self.session_factory() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise
            finally:
                await session.close()

    async def dispose(self) -> None:
        """Close all pooled connections (called at shutdown)."""
        await self.engine.dispose()


# ── Session Dependency ────────────────────────────────────────────────────
async def get_db_session(request: Request) -> AsyncGenerator[AsyncSession, None]:
    """
    FastAPI dependency that provides a database session per request.

    Example usage in a route:
        @router.get("/folders")
        async def list_folders(db: AsyncSession = Depends(get_db_session)):
            ...
    """
    database: Optional[Database] = getattr(request.app.state, "database", None)
    if database is None:
        # Startup could not build an engine from DATABASE_URL
        raise StoreUnavailableError(
            message=getattr(request.app.state, "store_error", None) or "Database is not configured",
            context={"path": request.url.path},
        )
    async with database.session() as session:
        yield session
