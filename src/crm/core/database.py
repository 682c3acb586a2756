"""Async SQLAlchemy engine, declarative base, and session helpers.

Provides:
- Base: Declarative base shared by every CRM table
- get_engine(): Lazily created async engine singleton
- get_session(): AsyncSession generator used by the API dependency
- init_db() / close_db(): create tables on startup, dispose on shutdown

Column types are the portable SQLAlchemy ones (Uuid, JSON) so the same
models run on PostgreSQL in production and SQLite in the test suite.
"""

from __future__ import annotations

import uuid
from collections.abc import AsyncGenerator
from datetime import datetime, timezone
from typing import Any

from sqlalchemy import DateTime, Uuid, event
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, create_async_engine
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column
from sqlalchemy.pool import StaticPool

from src.crm.config import get_settings

# ── Module-level engine (lazy init) ────────────────────────────────────────

_engine: AsyncEngine | None = None


def get_engine() -> AsyncEngine:
    """Get or create the async engine singleton."""
    global _engine
    if _engine is None:
        settings = get_settings()
        url = settings.DATABASE_URL

        if url.startswith("sqlite"):
            # Single shared connection so an in-memory database survives
            # across sessions
            _engine = create_async_engine(
                url,
                connect_args={"check_same_thread": False},
                poolclass=StaticPool,
                echo=settings.DATABASE_ECHO,
            )

            # SQLite ignores ON DELETE CASCADE unless foreign keys are enabled
            @event.listens_for(_engine.sync_engine, "connect")
            def enable_sqlite_foreign_keys(dbapi_conn: Any, connection_record: Any) -> None:
                cursor = dbapi_conn.cursor()
                cursor.execute("PRAGMA foreign_keys=ON")
                cursor.close()

        else:
            _engine = create_async_engine(
                url,
                pool_size=20,
                max_overflow=10,
                pool_pre_ping=True,
                echo=settings.DATABASE_ECHO,
            )

    return _engine


# ── Declarative Base ────────────────────────────────────────────────────────


def utcnow() -> datetime:
    """Timezone-aware current time, used as the Python-side column default."""
    return datetime.now(timezone.utc)


class Base(DeclarativeBase):
    """Base class for all CRM models."""


class IdMixin:
    """UUID primary key generated application-side."""

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)


class TimestampMixin:
    """created_at / updated_at audit columns."""

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow, nullable=False
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow, onupdate=utcnow, nullable=False
    )


# ── Session Factory ─────────────────────────────────────────────────────────


async def get_session() -> AsyncGenerator[AsyncSession, None]:
    """Yield an AsyncSession bound to the engine.

    expire_on_commit=False keeps loaded attributes readable after commit,
    which the repositories rely on when serializing responses.
    """
    engine = get_engine()
    async with AsyncSession(engine, expire_on_commit=False) as session:
        yield session


# ── Database Initialization ─────────────────────────────────────────────────


async def init_db() -> None:
    """Create all tables if they don't exist.

    Production schemas are managed by Alembic; this keeps development and
    test databases usable without running migrations.
    """
    # Register every model on Base.metadata before create_all
    import src.crm.models  # noqa: F401

    engine = get_engine()
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)


async def close_db() -> None:
    """Dispose of the engine and close all connections."""
    global _engine
    if _engine:
        await _engine.dispose()
        _engine = None
