"""Async database engine and session management."""

from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool


def shares_connection(database_url: str) -> bool:
    """In-memory SQLite lives on one connection shared by every session."""
    return ":memory:" in database_url


def create_engine(database_url: str, echo: bool = False) -> AsyncEngine:
    """
    Create an async engine.

    - pool_pre_ping: Verifies connections are alive before using them
    - In-memory SQLite shares a single connection, otherwise every
      connection would see its own empty database
    """
    if shares_connection(database_url):
        return create_async_engine(
            database_url,
            echo=echo,
            poolclass=StaticPool,
            connect_args={"check_same_thread": False},
        )
    return create_async_engine(database_url, pool_pre_ping=True, echo=echo)


def create_session_factory(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    # expire_on_commit=False: Objects remain usable after commit
    return async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)


@asynccontextmanager
async def session_scope(
    factory: async_sessionmaker[AsyncSession],
) -> AsyncGenerator[AsyncSession, None]:
    """
    Provide a transactional session.

    Commits when the block exits cleanly, rolls back on error.
    """
    async with factory() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise
