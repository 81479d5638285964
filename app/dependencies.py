"""Dependency injection for FastAPI."""

import logging
from collections.abc import AsyncGenerator
from typing import Annotated

from fastapi import Depends, Request
from redis.asyncio import Redis
from sqlalchemy import event
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.pool import QueuePool

from app.config import Settings, get_settings

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# Lifespan helpers — called from main.py to create & destroy shared resources
# ---------------------------------------------------------------------------


def _register_pool_events(engine: AsyncEngine) -> None:
    """Warn when the connection pool has to overflow."""
    pool = engine.pool
    if not isinstance(pool, QueuePool):
        return

    @event.listens_for(pool, "overflow")
    def _on_overflow(_dbapi_conn):
        logger.warning("Pool overflow — size=%s overflow=%s", pool.size(), pool.overflow())


def create_engine(settings: Settings) -> AsyncEngine:
    """Create the async database engine."""
    engine = create_async_engine(
        str(settings.database_url),
        pool_size=settings.db_pool_size,
        max_overflow=settings.db_max_overflow,
        pool_pre_ping=True,
        echo=settings.debug,
    )
    _register_pool_events(engine)
    return engine


def create_session_factory(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    """Create session factory bound to *engine*."""
    return async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)


def create_redis(settings: Settings) -> Redis:
    """Create the async Redis client used for the token deny-list."""
    return Redis.from_url(str(settings.redis_url), decode_responses=True)


# ---------------------------------------------------------------------------
# FastAPI dependencies — pull resources from app.state (set in lifespan)
# ---------------------------------------------------------------------------


async def get_db_session(request: Request) -> AsyncGenerator[AsyncSession, None]:
    """Provide one unit of work per request.

    Commits on success and rolls back on any exception.  Repositories call
    ``session.flush()`` (never ``commit()``) so a request's writes land
    together or not at all.  Storage failures are logged here and then
    propagate to the global handler as a 500; nothing is retried.
    """
    session_factory: async_sessionmaker[AsyncSession] = request.app.state.session_factory
    async with session_factory() as session:
        try:
            yield session
            await session.commit()
        except SQLAlchemyError:
            logger.exception("Storage failure on %s %s", request.method, request.url.path)
            await session.rollback()
            raise
        except Exception:
            await session.rollback()
            raise
        finally:
            await session.close()


async def get_redis(request: Request) -> AsyncGenerator[Redis, None]:
    """Dependency that provides the Redis client from app.state."""
    yield request.app.state.redis


# ---------------------------------------------------------------------------
# Type aliases for cleaner dependency injection
# ---------------------------------------------------------------------------
DBSession = Annotated[AsyncSession, Depends(get_db_session)]
RedisClient = Annotated[Redis, Depends(get_redis)]
AppSettings = Annotated[Settings, Depends(get_settings)]
