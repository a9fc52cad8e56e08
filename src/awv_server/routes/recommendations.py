"""Personalised plan endpoints — view and curate a visit's recommendations."""

from fastapi import APIRouter, Depends, Query
from pydantic import BaseModel
from sqlalchemy.ext.asyncio import AsyncSession

from awv_visits.engine import VisitEngine
from awv_visits.models.recommendation import Recommendation
from awv_visits.recommendations import group_by_category

from awv_server.dependencies import get_db, get_engine, get_user_id

router = APIRouter(tags=["recommendations"])


class SelectRecommendationRequest(BaseModel):
    """Body for PATCH /visits/{visit_id}/recommendations/{rec_id}."""
    selected: bool


@router.get("/visits/{visit_id}/recommendations")
async def get_recommendations(
    visit_id: str,
    grouped: bool = Query(False),
    user_id: str = Depends(get_user_id),
    db: AsyncSession = Depends(get_db),
    engine: VisitEngine = Depends(get_engine),
) -> list[Recommendation] | dict[str, list[Recommendation]]:
    """The visit's plan; ``grouped=true`` returns it keyed by category in display order."""
    plan = await engine.generate_plan(db, user_id=user_id, visit_id=visit_id)
    if grouped:
        return group_by_category(plan)
    return plan


@router.patch("/visits/{visit_id}/recommendations/{rec_id}")
async def select_recommendation(
    visit_id: str,
    rec_id: str,
    body: SelectRecommendationRequest,
    user_id: str = Depends(get_user_id),
    db: AsyncSession = Depends(get_db),
    engine: VisitEngine = Depends(get_engine),
) -> Recommendation:
    """Include or exclude one stored recommendation from the final plan."""
    return await engine.set_recommendation_selected(
        db, user_id=user_id, visit_id=visit_id, rec_id=rec_id, selected=body.selected,
    )
