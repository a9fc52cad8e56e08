"""Step endpoints — conduct a visit section by section.

Every endpoint returns the section the visit is now on.  When navigation or
completion is blocked by unanswered required questions the step carries the
``errors`` map and the visit stays put; the HTTP status is still 200.
"""

from typing import Any

from fastapi import APIRouter, Depends
from pydantic import BaseModel
from sqlalchemy.ext.asyncio import AsyncSession

from awv_visits.engine import VisitEngine
from awv_visits.models.visit import SectionStep, StepResult

from awv_server.dependencies import get_db, get_engine, get_user_id

router = APIRouter(tags=["steps"])


class RecordResponsesRequest(BaseModel):
    """Body for POST /visits/{visit_id}/responses: ``{qid: value}``; null clears."""
    answers: dict[str, Any]


@router.get("/visits/{visit_id}/step")
async def get_current_step(
    visit_id: str,
    user_id: str = Depends(get_user_id),
    db: AsyncSession = Depends(get_db),
    engine: VisitEngine = Depends(get_engine),
) -> SectionStep:
    """Return the section to render for the visit."""
    return await engine.get_current_step(db, user_id=user_id, visit_id=visit_id)


@router.post("/visits/{visit_id}/responses")
async def record_responses(
    visit_id: str,
    body: RecordResponsesRequest,
    user_id: str = Depends(get_user_id),
    db: AsyncSession = Depends(get_db),
    engine: VisitEngine = Depends(get_engine),
) -> SectionStep:
    """Record answers; the returned step reflects the new visibility."""
    return await engine.record_responses(
        db, user_id=user_id, visit_id=visit_id, answers=body.answers,
    )


@router.post("/visits/{visit_id}/advance")
async def advance(
    visit_id: str,
    user_id: str = Depends(get_user_id),
    db: AsyncSession = Depends(get_db),
    engine: VisitEngine = Depends(get_engine),
) -> SectionStep:
    """Validate the current section and move to the next visible one."""
    return await engine.advance(db, user_id=user_id, visit_id=visit_id)


@router.post("/visits/{visit_id}/retreat")
async def retreat(
    visit_id: str,
    user_id: str = Depends(get_user_id),
    db: AsyncSession = Depends(get_db),
    engine: VisitEngine = Depends(get_engine),
) -> SectionStep:
    """Move back to the previous visible section."""
    return await engine.retreat(db, user_id=user_id, visit_id=visit_id)


@router.post("/visits/{visit_id}/complete")
async def complete(
    visit_id: str,
    user_id: str = Depends(get_user_id),
    db: AsyncSession = Depends(get_db),
    engine: VisitEngine = Depends(get_engine),
) -> StepResult:
    """Complete the visit from its final section.

    Returns a ``completed`` step on success, or the ``section`` step with
    errors when required questions are unanswered.
    """
    return await engine.complete_visit(db, user_id=user_id, visit_id=visit_id)
