"""Database settings for the visit store, read from the environment.

The connection URL comes from ``DATABASE_URL`` when set, otherwise it is
assembled from ``PG_HOST`` / ``PG_PORT`` / ``PG_USER`` / ``PG_PASSWORD`` /
``PG_DATABASE``.  Either way the URL handed to SQLAlchemy always uses the
asyncpg driver: the server and the Alembic migrations share one async engine
configuration.
"""

import os
from typing import Any

ASYNCPG_SCHEME = "postgresql+asyncpg"


def get_async_url() -> str:
    """Connection URL for ``create_async_engine`` (asyncpg driver)."""
    url = os.getenv("DATABASE_URL")
    if not url:
        url = "postgresql://{user}:{password}@{host}:{port}/{db}".format(
            user=os.getenv("PG_USER", "awv"),
            password=os.getenv("PG_PASSWORD", "awv"),
            host=os.getenv("PG_HOST", "localhost"),
            port=os.getenv("PG_PORT", "5432"),
            db=os.getenv("PG_DATABASE", "awv"),
        )
    scheme, sep, rest = url.partition("://")
    if scheme in ("postgres", "postgresql", "postgresql+psycopg2"):
        return f"{ASYNCPG_SCHEME}{sep}{rest}"
    return url


def get_pool_options() -> dict[str, Any]:
    """Engine keyword arguments for the connection pool."""
    return {
        "pool_size": int(os.getenv("PG_POOL_SIZE", "5")),
        "max_overflow": int(os.getenv("PG_MAX_OVERFLOW", "10")),
        "echo": os.getenv("PG_ECHO", "").lower() in ("1", "true", "yes"),
    }
