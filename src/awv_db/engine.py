"""Process-wide async engine and session factory for the visit store.

Both are built lazily on first use so importing the package never opens a
connection.  The server calls ``dispose_engine()`` from its lifespan hook.
"""

import logging

from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)

from awv_db.config import get_async_url, get_pool_options

logger = logging.getLogger(__name__)

_engine: AsyncEngine | None = None
_sessions: async_sessionmaker[AsyncSession] | None = None


def get_engine() -> AsyncEngine:
    """Return the shared asyncpg engine."""
    global _engine
    if _engine is None:
        options = get_pool_options()
        _engine = create_async_engine(get_async_url(), pool_pre_ping=True, **options)
        logger.info(
            "Visit store engine ready (pool_size=%d, max_overflow=%d)",
            options["pool_size"], options["max_overflow"],
        )
    return _engine


def get_session_factory() -> async_sessionmaker[AsyncSession]:
    """Session factory bound to the shared engine.

    ``expire_on_commit`` is off so visit rows stay readable after the
    request's commit.
    """
    global _sessions
    if _sessions is None:
        _sessions = async_sessionmaker(get_engine(), expire_on_commit=False)
    return _sessions


async def dispose_engine() -> None:
    """Close pooled connections and forget the engine."""
    global _engine, _sessions
    engine, _engine, _sessions = _engine, None, None
    if engine is not None:
        await engine.dispose()
        logger.info("Visit store engine disposed")
