"""
Blog API — Store Connection & Session Management
==================================================

What:  The Database object (async engine + session factory), the ORM base
       class, and the FastAPI dependencies that hand a session to routes.
How:   Database.connect() builds the engine and proves the store answers
       before the app accepts traffic. The lifespan stores the connected
       instance on app.state; get_db_session() pulls it from there for each
       request, so no module-level engine exists.
Who:   main.py (lifespan, run), routes via Depends(), alembic/env.py (Base).

Connection states:
    Disconnected ──connect()──▶ Connecting ──SELECT 1 ok──▶ Connected
                                     │
                                     └──error──▶ Failed (StartupFailure)

Pooling:
    PostgreSQL (asyncpg): pool_size/max_overflow/pre_ping from Settings,
    connections recycled after an hour.
    SQLite (aiosqlite):   driver default pool; sizing options are not passed.
"""

import logging
from contextlib import asynccontextmanager
from typing import Any, AsyncGenerator, Dict, Optional

from fastapi import Depends, Request
from sqlalchemy import text
from sqlalchemy.engine import make_url
from sqlalchemy.exc import ArgumentError, SQLAlchemyError
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.orm import DeclarativeBase

from blog_api.config import Settings
from blog_api.exceptions import StartupFailure, StoreError

logger = logging.getLogger(__name__)


class Base(DeclarativeBase):
    """
    Base class for all SQLAlchemy ORM models.

    Shares a single metadata object used by create_schema() and by Alembic.
    """
    pass


class Database:
    """
    Process-wide handle on the store.

    Created once at startup and passed to whoever needs it (the lifespan
    puts it on app.state). Holds no per-request state.
    """

    def __init__(
        self,
        url: str,
        pool_size: int = 10,
        max_overflow: int = 5,
        pool_pre_ping: bool = True,
        echo: bool = False,
    ):
        self.url = url
        self.pool_size = pool_size
        self.max_overflow = max_overflow
        self.pool_pre_ping = pool_pre_ping
        self.echo = echo
        self.engine: Optional[AsyncEngine] = None
        self.session_factory: Optional[async_sessionmaker[AsyncSession]] = None

    @classmethod
    def from_settings(cls, settings: Settings) -> "Database":
        return cls(
            settings.database_url,
            pool_size=settings.db_pool_size,
            max_overflow=settings.db_max_overflow,
            pool_pre_ping=settings.db_pool_pre_ping,
            echo=settings.log_level == "DEBUG",
        )

    @property
    def is_connected(self) -> bool:
        return self.engine is not None

    def _engine_options(self) -> Dict[str, Any]:
        options: Dict[str, Any] = {
            "pool_pre_ping": self.pool_pre_ping,
            "echo": self.echo,
        }
        if make_url(self.url).get_backend_name() != "sqlite":
            options.update(
                pool_size=self.pool_size,
                max_overflow=self.max_overflow,
                pool_recycle=3600,
            )
        return options

    async def connect(self) -> None:
        """
        Build the engine and run a trivial query against the store.

        Raises:
            StartupFailure: The URL is invalid, the driver is missing, or the
                store did not answer. The half-built engine is disposed.
        """
        if self.engine is not None:
            return

        try:
            engine = create_async_engine(self.url, **self._engine_options())
        except (ArgumentError, ImportError) as e:
            raise StartupFailure(
                message=f"Invalid database configuration: {e}",
                context={"error_type": type(e).__name__},
            ) from e

        try:
            async with engine.connect() as conn:
                await conn.execute(text("SELECT 1"))
        except (SQLAlchemyError, OSError) as e:
            await engine.dispose()
            raise StartupFailure(
                message=f"Could not connect to the database: {e}",
                context={"error_type": type(e).__name__},
            ) from e

        self.engine = engine
        self.session_factory = async_sessionmaker(
            engine,
            class_=AsyncSession,
            expire_on_commit=False,
        )
        logger.info("Connected to database (%s)", make_url(self.url).get_backend_name())

    async def create_schema(self) -> None:
        """Create any missing tables registered on Base.metadata."""
        if self.engine is None:
            raise StoreError(message="Database is not connected")
        # Registers BlogPost on Base.metadata
        from blog_api.models import blog  # noqa: F401

        async with self.engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)

    async def dispose(self) -> None:
        """Close every pooled connection. Safe to call when never connected."""
        if self.engine is not None:
            await self.engine.dispose()
            logger.info("Database connections closed")
        self.engine = None
        self.session_factory = None

    @asynccontextmanager
    async def session(self) -> AsyncGenerator[AsyncSession, None]:
        if self.session_factory is None:
            raise StoreError(message="Database is not connected")
        async with self.session_factory() as session:
            yield session


# ── Dependencies ──────────────────────────────────────────────────────────
def get_database(request: Request) -> Database:
    """FastAPI dependency returning the Database stored by the lifespan."""
    database = getattr(request.app.state, "database", None)
    if database is None or not database.is_connected:
        raise StoreError(
            message="Database is not connected",
            context={"path": request.url.path},
        )
    return database


async def get_db_session(
    database: Database = Depends(get_database),
) -> AsyncGenerator[AsyncSession, None]:
    """
    FastAPI dependency that provides a database session per request.

    How it works:
        1. Opens a session from the shared factory
        2. Yields it to the route handler
        3. On error: rolls back the transaction
        4. Always: closes the session (returns connection to pool)

    Writes are committed by the data-access layer itself, so nothing is
    committed here.
    """
    async with database.session() as session:
        try:
            yield session
        except Exception:
            await session.rollback()
            raise
        finally:
            await session.close()
