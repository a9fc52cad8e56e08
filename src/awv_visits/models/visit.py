"""Visit and step models — the contract between the engine and API callers.

These models are intentionally decoupled from the ORM models in ``awv_db`` so
API consumers never see database internals.

Step types:
  - SectionStep: render the current section (visible questions, inline errors)
  - CompletionStep: the visit has been completed

``StepResult`` covers both so callers can dispatch on ``type``.
"""

from datetime import datetime
from typing import Any, Literal

from pydantic import BaseModel, Field


class QuestionPayload(BaseModel):
    """Flattened question for renderers.

    ``question_type`` is the resolved type, not the authored tag.  ``warning``
    is set when the authored tag was unknown and the renderer should show a
    free-text fallback; ``error`` carries the inline validation message.
    """

    qid: str
    text: str
    question_type: str
    required: bool = False
    # [{id, text, value}] for choice-like types
    options: list[dict] | None = None
    # Current recorded answer, None when unanswered
    answer: Any = None
    warning: str | None = None
    error: str | None = None


class SectionStep(BaseModel):
    """Engine step: show one section of the template."""

    type: Literal["section"] = "section"
    visit_id: str
    section_index: int
    section_id: str
    title: str
    description: str | None = None
    section_count: int
    progress_percentage: int
    questions: list[QuestionPayload]
    hidden_question_ids: list[str] = Field(default_factory=list)
    # {qid: message}: non-empty when navigation or completion was blocked
    errors: dict[str, str] = Field(default_factory=dict)
    is_first: bool
    is_last: bool


class CompletionStep(BaseModel):
    """Engine step: the visit was completed."""

    type: Literal["completed"] = "completed"
    visit_id: str
    completed_at: datetime | None = None
    answered_count: int


StepResult = SectionStep | CompletionStep


class VisitInfo(BaseModel):
    """Public view of a visit row."""

    user_id: str
    visit_id: str
    patient_id: str
    template_id: str
    provider: str | None = None
    status: str
    current_section_index: int
    created_at: datetime
    updated_at: datetime
    completed_at: datetime | None = None


class VisitResponses(BaseModel):
    """Visit-fetch payload for the response store."""

    visit_id: str
    template_id: str
    status: str
    responses: dict[str, Any]
