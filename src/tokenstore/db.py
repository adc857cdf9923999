from typing import Any

from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine

MEMORY_PATH = ":memory:"


def database_url(path: str) -> str:
    """Build the aiosqlite URL for a store file (or an in-memory database)."""
    if path == MEMORY_PATH:
        return "sqlite+aiosqlite://"
    return f"sqlite+aiosqlite:///{path}"


def create_engine(path: str, echo: bool = False) -> AsyncEngine:
    """Create an async engine on the SQLite file at ``path``.

    An in-memory database only lives as long as its connection, so it is pinned to a
    single shared connection with ``StaticPool``.
    """
    kwargs: dict[str, Any] = {"echo": echo, "future": True}
    if path == MEMORY_PATH:
        from sqlalchemy.pool import StaticPool

        kwargs["poolclass"] = StaticPool
        kwargs["connect_args"] = {"check_same_thread": False}
    return create_async_engine(database_url(path), **kwargs)


def create_sessionmaker(bind_engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    """Create an AsyncSession factory bound to the provided engine."""
    return async_sessionmaker(bind=bind_engine, expire_on_commit=False, class_=AsyncSession)
