"""Recommendation model for personalised prevention plans."""

from typing import Literal

from pydantic import BaseModel


class Recommendation(BaseModel):
    """A suggested care action.

    ``source`` is a provenance note ("From selected option: Daily", "Default
    recommendation", ...).  ``selected`` starts true; the clinician can
    deselect items before the plan is finalised.
    """

    id: str
    text: str
    category: str
    source: str | None = None
    priority: Literal["high", "medium", "low"] = "medium"
    selected: bool = True
