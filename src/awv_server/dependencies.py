"""Request dependencies: database session, shared engine/store, caller identity.

The visit engine and repository only ``flush()``; :func:`get_db` owns the
transaction and commits once the endpoint returns without raising.
"""

import hmac
from typing import AsyncGenerator

from fastapi import Header, HTTPException, Request
from sqlalchemy.ext.asyncio import AsyncSession

from awv_db.engine import get_session_factory
from awv_visits.engine import VisitEngine
from awv_visits.templates import TemplateStore


async def get_db() -> AsyncGenerator[AsyncSession, None]:
    """One session per request: commit on success, roll back on any error."""
    async with get_session_factory()() as session:
        try:
            yield session
        except Exception:
            await session.rollback()
            raise
        else:
            await session.commit()


def get_engine(request: Request) -> VisitEngine:
    """The :class:`VisitEngine` built by the lifespan hook."""
    return request.app.state.engine


def get_store(request: Request) -> TemplateStore:
    """The read-only :class:`TemplateStore` loaded at startup."""
    return request.app.state.store


def _verify_proxy_secret(expected: str, presented: str | None) -> None:
    if presented is None:
        raise HTTPException(status_code=403, detail="X-Proxy-Secret header is required")
    if not hmac.compare_digest(presented.encode(), expected.encode()):
        raise HTTPException(status_code=403, detail="Invalid proxy secret")


async def get_user_id(
    request: Request,
    x_user_id: str | None = Header(None, alias="X-User-ID"),
    x_proxy_secret: str | None = Header(None, alias="X-Proxy-Secret"),
) -> str:
    """Identify the provider account making the request.

    401 without ``X-User-ID``.  If the server has a trusted proxy secret,
    403 unless ``X-Proxy-Secret`` matches it.
    """
    if not x_user_id:
        raise HTTPException(status_code=401, detail="X-User-ID header is required")

    expected = request.app.state.settings.trusted_proxy_secret
    if expected:
        _verify_proxy_secret(expected, x_proxy_secret)
    return x_user_id
