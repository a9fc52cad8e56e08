"""Visit management endpoints — create, get, list, save progress.

All endpoints require the ``X-User-ID`` header.  Visit identity is the
(user_id, visit_id) pair, enforced by a unique constraint in the database.
"""

from typing import Any

from fastapi import APIRouter, Depends, Query
from pydantic import BaseModel
from sqlalchemy.ext.asyncio import AsyncSession

from awv_visits.engine import VisitEngine
from awv_visits.models.visit import VisitInfo, VisitResponses

from awv_server.config import DEFAULT_PAGE_LIMIT, MAX_PAGE_LIMIT
from awv_server.dependencies import get_db, get_engine, get_user_id

router = APIRouter(tags=["visits"])


# ------------------------------------------------------------------
# Request models
# ------------------------------------------------------------------

class CreateVisitRequest(BaseModel):
    """Body for POST /visits."""
    visit_id: str
    patient_id: str
    template_id: str
    provider: str | None = None


class SaveVisitRequest(BaseModel):
    """Body for PUT /visits/{visit_id}.

    ``responses`` replaces the whole store when present.  ``status`` is
    ignored for completed visits, which stay completed.
    """
    responses: dict[str, Any] | None = None
    status: str | None = None


# ------------------------------------------------------------------
# Endpoints
# ------------------------------------------------------------------

@router.post("/visits", status_code=201)
async def create_visit(
    body: CreateVisitRequest,
    user_id: str = Depends(get_user_id),
    db: AsyncSession = Depends(get_db),
    engine: VisitEngine = Depends(get_engine),
) -> VisitInfo:
    """Create a scheduled visit.

    Returns 201 on success, 404 for an unknown template, 409 if the visit
    id is already used by this user.
    """
    return await engine.create_visit(
        db,
        user_id=user_id,
        visit_id=body.visit_id,
        patient_id=body.patient_id,
        template_id=body.template_id,
        provider=body.provider,
    )


@router.get("/visits")
async def list_visits(
    user_id: str = Depends(get_user_id),
    db: AsyncSession = Depends(get_db),
    engine: VisitEngine = Depends(get_engine),
    patient_id: str | None = Query(None),
    limit: int = Query(DEFAULT_PAGE_LIMIT, ge=1, le=MAX_PAGE_LIMIT),
    offset: int = Query(0, ge=0),
) -> list[VisitInfo]:
    """List visits for the current user, most recent first."""
    return await engine.list_visits(
        db, user_id=user_id, patient_id=patient_id, limit=limit, offset=offset,
    )


@router.get("/visits/{visit_id}")
async def get_visit(
    visit_id: str,
    user_id: str = Depends(get_user_id),
    db: AsyncSession = Depends(get_db),
    engine: VisitEngine = Depends(get_engine),
) -> VisitInfo:
    """Get visit info.  Raises 404 if the visit does not exist for this user."""
    info = await engine.get_visit(db, user_id=user_id, visit_id=visit_id)
    if info is None:
        raise ValueError(f"Visit not found: visit_id={visit_id}")
    return info


@router.put("/visits/{visit_id}")
async def save_visit(
    visit_id: str,
    body: SaveVisitRequest,
    user_id: str = Depends(get_user_id),
    db: AsyncSession = Depends(get_db),
    engine: VisitEngine = Depends(get_engine),
) -> VisitInfo:
    """Save progress: persist the whole response store and/or the status."""
    return await engine.save_progress(
        db,
        user_id=user_id,
        visit_id=visit_id,
        responses=body.responses,
        status=body.status,
    )


@router.get("/visits/{visit_id}/responses")
async def get_responses(
    visit_id: str,
    user_id: str = Depends(get_user_id),
    db: AsyncSession = Depends(get_db),
    engine: VisitEngine = Depends(get_engine),
) -> VisitResponses:
    """Return the persisted answers of a visit."""
    return await engine.get_responses(db, user_id=user_id, visit_id=visit_id)
