"""
Side Quest Backend — Database Session Management
==================================================

What:  Async SQLAlchemy engine factory, session factory, and FastAPI dependency.
How:   The lifespan in main.py calls create_engine() once, stores the engine
       and its session factory on `app.state`, and disposes it at shutdown.
       get_db_session() hands each request its own AsyncSession.
Who:   The engine is owned by the application; sessions are used by
       CardRepository through dependencies.py.

There is no module-level engine: importing this module never opens or
configures a connection, so tests can run the app without a database.
"""

from typing import AsyncGenerator

from fastapi import Request
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.orm import DeclarativeBase

from sidequest.config import Settings


def create_engine(settings: Settings) -> AsyncEngine:
    """
    Build the async engine for the managed record store.

    Pool settings come from configuration; SQL echo follows LOG_LEVEL=DEBUG.
    """
    return create_async_engine(
        settings.database_url,
        pool_size=settings.db_pool_size,
        max_overflow=settings.db_max_overflow,
        pool_pre_ping=settings.db_pool_pre_ping,
        pool_recycle=3600,
        echo=settings.log_level == "DEBUG",
    )


def create_session_factory(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    # expire_on_commit=False: rows stay readable after the repository commits
    return async_sessionmaker(
        engine,
        class_=AsyncSession,
        expire_on_commit=False,
    )


class Base(DeclarativeBase):
    """Base class for all SQLAlchemy ORM models (shared metadata for Alembic)."""
    pass


async def get_db_session(request: Request) -> AsyncGenerator[AsyncSession, None]:
    """
    FastAPI dependency that provides a database session per request.

    How it works:
        1. Creates a new session from the factory stored on app.state
        2. Yields it to the repository
        3. On error: rolls back anything not yet committed
        4. Always: closes the session (returns connection to pool)

    CardRepository commits each write itself, so a failure late in a
    request never undoes a row change that an earlier external call
    (e.g. an image delete) already depended on.
    """
    session_factory: async_sessionmaker[AsyncSession] = request.app.state.session_factory
    async with session_factory() as session:
        try:
            yield session
        except Exception:
            await session.rollback()
            raise
        finally:
            await session.close()
