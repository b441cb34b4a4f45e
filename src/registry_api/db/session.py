from __future__ import annotations

import logging
from collections.abc import AsyncIterator, Callable
from contextlib import AbstractAsyncContextManager, asynccontextmanager

from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)

from registry_api.core.settings import get_settings

logger = logging.getLogger(__name__)

SessionFactory = Callable[[], AbstractAsyncContextManager[AsyncSession]]

_engine: AsyncEngine | None = None
_session_factory: async_sessionmaker[AsyncSession] | None = None


def _to_async_url(url: str) -> str:
    if "+asyncpg" in url or "+aiosqlite" in url:
        return url
    if url.startswith("postgresql+psycopg2"):
        return url.replace("postgresql+psycopg2", "postgresql+asyncpg", 1)
    if url.startswith("postgresql://"):
        return url.replace("postgresql://", "postgresql+asyncpg://", 1)
    if url.startswith("sqlite://"):
        return url.replace("sqlite://", "sqlite+aiosqlite://", 1)
    return url


def init_engine() -> AsyncEngine:
    global _engine, _session_factory
    if _engine is None:
        settings = get_settings()
        async_url = _to_async_url(settings.database_url)

        pool_kwargs: dict[str, int] = {}
        connect_args: dict[str, object] = {}
        if "postgresql" in async_url:
            pool_kwargs = {
                "pool_size": settings.db_pool_size,
                "max_overflow": settings.db_pool_max_overflow,
                "pool_recycle": settings.db_pool_recycle,
                "pool_timeout": settings.db_pool_timeout,
            }
            if settings.db_schema:
                connect_args = {"server_settings": {"search_path": settings.db_schema}}

        _engine = create_async_engine(
            async_url,
            pool_pre_ping=True,
            connect_args=connect_args,
            **pool_kwargs,
        )
        _session_factory = async_sessionmaker(_engine, expire_on_commit=False)
        logger.info("Database engine initialised (%s)", async_url.split(":", 1)[0])
    return _engine


async def dispose_engine() -> None:
    global _engine, _session_factory
    if _engine is not None:
        await _engine.dispose()
        _engine = None
        _session_factory = None


@asynccontextmanager
async def get_session() -> AsyncIterator[AsyncSession]:
    """Open a unit of work that commits on success and rolls back on error."""
    if _session_factory is None:
        init_engine()
    assert _session_factory is not None
    session = _session_factory()
    try:
        yield session
        await session.commit()
    except Exception:
        await session.rollback()
        raise
    finally:
        await session.close()


def session_scope(factory: async_sessionmaker[AsyncSession]) -> SessionFactory:
    """Wrap an explicit sessionmaker with the same commit/rollback semantics."""

    @asynccontextmanager
    async def _scope() -> AsyncIterator[AsyncSession]:
        async with factory() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise

    return _scope


__all__ = [
    "SessionFactory",
    "dispose_engine",
    "get_session",
    "init_engine",
    "session_scope",
]
