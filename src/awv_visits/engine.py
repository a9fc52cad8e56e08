"""VisitEngine — the orchestrator for conducting an annual wellness visit.

Stateless engine pattern: each call loads the visit row from the database,
rebuilds the :class:`ResponseStore` and :class:`NavigationController`,
applies the operation, flushes, and returns the result.  No in-memory state
is kept between calls.

The engine accepts an ``AsyncSession`` from the caller so that the caller
(typically a FastAPI endpoint) controls transaction boundaries.

Visit lifecycle:
    scheduled    created, nothing recorded yet
    in_progress  first answers recorded or progress saved
    completed    final section validated, plan written; answers stay editable
    cancelled    read-only
"""

from __future__ import annotations

import logging
from typing import Any

from sqlalchemy.ext.asyncio import AsyncSession

from awv_db.models.enums import VisitStatus
from awv_db.models.visit import Visit
from awv_db.repository import VisitRepository

from awv_visits.constants import DEFAULT_SCALE_OPTIONS, YES_NO_OPTIONS
from awv_visits.instruments import score_composite
from awv_visits.models.question import Question, QuestionType
from awv_visits.models.recommendation import Recommendation
from awv_visits.models.template import Template
from awv_visits.models.visit import (
    CompletionStep,
    QuestionPayload,
    SectionStep,
    StepResult,
    VisitInfo,
    VisitResponses,
)
from awv_visits.navigation import NavigationController
from awv_visits.recommendations import RecommendationExtractor
from awv_visits.responses import ResponseStore
from awv_visits.templates import TemplateStore
from awv_visits.visibility import VisibilityResolver

logger = logging.getLogger(__name__)

_CHOICE_TYPES = frozenset({
    QuestionType.SINGLE_CHOICE,
    QuestionType.MULTI_CHOICE,
    QuestionType.YES_NO,
    QuestionType.SCORING_SCALE,
})


class VisitEngine:
    """Conducts visits against templates from a loaded :class:`TemplateStore`.

    Args:
        store: a loaded :class:`TemplateStore` instance
    """

    def __init__(self, store: TemplateStore) -> None:
        self._store = store
        self._repo = VisitRepository()
        self._resolver = VisibilityResolver()

    # ==================================================================
    # Visit lifecycle
    # ==================================================================

    async def create_visit(
        self,
        db: AsyncSession,
        *,
        user_id: str,
        visit_id: str,
        patient_id: str,
        template_id: str,
        provider: str | None = None,
    ) -> VisitInfo:
        """Create a scheduled visit positioned on the first section.

        Raises:
            KeyError: if the template is not loaded.
            ValueError: if the visit id is already used by this user.
        """
        self._store.get_template(template_id)
        existing = await self._repo.get_by_user_and_visit(db, user_id, visit_id)
        if existing is not None:
            raise ValueError(f"Visit '{visit_id}' already exists")

        row = await self._repo.create_visit(
            db,
            user_id=user_id,
            visit_id=visit_id,
            patient_id=patient_id,
            template_id=template_id,
            provider=provider,
        )
        logger.info("Created visit %s (template=%s, patient=%s)",
                    visit_id, template_id, patient_id)
        return self._to_visit_info(row)

    async def get_visit(
        self, db: AsyncSession, *, user_id: str, visit_id: str
    ) -> VisitInfo | None:
        """Fetch visit info by (user_id, visit_id).  Returns None if not found."""
        row = await self._repo.get_by_user_and_visit(db, user_id, visit_id)
        if row is None:
            return None
        return self._to_visit_info(row)

    async def list_visits(
        self,
        db: AsyncSession,
        *,
        user_id: str,
        patient_id: str | None = None,
        limit: int = 20,
        offset: int = 0,
    ) -> list[VisitInfo]:
        """List visits for a user, most recent first."""
        rows = await self._repo.list_by_user(
            db, user_id, patient_id=patient_id, limit=limit, offset=offset,
        )
        return [self._to_visit_info(r) for r in rows]

    async def get_responses(
        self, db: AsyncSession, *, user_id: str, visit_id: str
    ) -> VisitResponses:
        """Return the persisted response store of a visit."""
        row = await self._load_visit(db, user_id, visit_id)
        return VisitResponses(
            visit_id=row.visit_id,
            template_id=row.template_id,
            status=self._status(row),
            responses=ResponseStore.from_payload(row.responses).to_payload(),
        )

    async def save_progress(
        self,
        db: AsyncSession,
        *,
        user_id: str,
        visit_id: str,
        responses: dict[str, Any] | None = None,
        status: str | None = None,
    ) -> VisitInfo:
        """Persist the whole response store and/or change the status.

        A completed visit stays completed when edited; only ``cancelled``
        overrides it.  Otherwise the status becomes ``status``
        (``in_progress`` when omitted).

        Raises:
            ValueError: on an unknown status, on an attempt to complete through
                save, or when the visit is cancelled.
        """
        row = await self._load_visit(db, user_id, visit_id)
        template = self._template_for(row)
        current = self._status(row)

        target = _parse_status(status) if status is not None else None
        if target == VisitStatus.COMPLETED and current != VisitStatus.COMPLETED.value:
            raise ValueError("Cannot complete a visit by saving; use complete")
        if current == VisitStatus.CANCELLED.value and target != VisitStatus.SCHEDULED:
            raise ValueError("Cannot modify a cancelled visit")

        if responses is not None:
            store = ResponseStore()
            for qid, value in responses.items():
                self._record(template, store, qid, value)
            await self._repo.save_responses(db, row, store.to_payload())

            # Answers changed: the visit may now sit on a hidden section
            nav = self._controller(template, store, row)
            if nav.settle().moved:
                await self._repo.set_section_index(db, row, nav.index)

        if current == VisitStatus.COMPLETED.value and target != VisitStatus.CANCELLED:
            new_status = VisitStatus.COMPLETED
        else:
            new_status = target or VisitStatus.IN_PROGRESS
        if new_status.value != current:
            await self._repo.set_status(db, row, new_status)
            logger.info("Visit %s status %s -> %s", visit_id, current, new_status.value)

        return self._to_visit_info(row)

    # ==================================================================
    # Step API
    # ==================================================================

    async def get_current_step(
        self, db: AsyncSession, *, user_id: str, visit_id: str
    ) -> SectionStep:
        """Return the current section to render.  Read-only."""
        row = await self._load_visit(db, user_id, visit_id)
        template = self._template_for(row)
        store = ResponseStore.from_payload(row.responses)
        nav = self._controller(template, store, row)
        return self._build_section_step(row, template, store, nav)

    async def record_responses(
        self,
        db: AsyncSession,
        *,
        user_id: str,
        visit_id: str,
        answers: dict[str, Any],
    ) -> SectionStep:
        """Merge ``answers`` into the store and return the refreshed section.

        Composite instruments are scored on the way in.  A ``None`` value
        clears an answer.  If the new answers hide the current section the
        visit moves on to the next visible one.
        """
        row = await self._load_visit(db, user_id, visit_id)
        self._ensure_editable(row)
        template = self._template_for(row)
        store = ResponseStore.from_payload(row.responses)

        for qid, value in answers.items():
            self._record(template, store, qid, value)
        await self._repo.save_responses(db, row, store.to_payload())

        nav = self._controller(template, store, row)
        if nav.settle().moved:
            await self._repo.set_section_index(db, row, nav.index)

        if self._status(row) == VisitStatus.SCHEDULED.value:
            await self._repo.set_status(db, row, VisitStatus.IN_PROGRESS)

        return self._build_section_step(row, template, store, nav)

    async def advance(
        self, db: AsyncSession, *, user_id: str, visit_id: str
    ) -> SectionStep:
        """Validate the current section and move to the next visible one.

        When validation fails the returned step carries the errors and the
        visit stays where it was.
        """
        row = await self._load_visit(db, user_id, visit_id)
        self._ensure_editable(row)
        template = self._template_for(row)
        store = ResponseStore.from_payload(row.responses)
        nav = self._controller(template, store, row)

        result = nav.advance()
        if result.moved:
            await self._repo.set_section_index(db, row, nav.index)
        return self._build_section_step(row, template, store, nav, errors=result.errors)

    async def retreat(
        self, db: AsyncSession, *, user_id: str, visit_id: str
    ) -> SectionStep:
        """Move to the previous visible section (no validation)."""
        row = await self._load_visit(db, user_id, visit_id)
        self._ensure_editable(row)
        template = self._template_for(row)
        store = ResponseStore.from_payload(row.responses)
        nav = self._controller(template, store, row)

        if nav.retreat().moved:
            await self._repo.set_section_index(db, row, nav.index)
        return self._build_section_step(row, template, store, nav)

    async def complete_visit(
        self, db: AsyncSession, *, user_id: str, visit_id: str
    ) -> StepResult:
        """Complete the visit from its final section.

        Only the current section is validated.  On failure the current
        section is returned with exactly the unanswered question ids as
        errors and the visit is not completed.

        Completing an already completed visit changes nothing: the stored
        plan, with the provider's selections, and the completion time stay.

        Raises:
            ValueError: if visible sections remain after the current one, or
                the visit is cancelled.
        """
        row = await self._load_visit(db, user_id, visit_id)
        self._ensure_editable(row)
        template = self._template_for(row)
        store = ResponseStore.from_payload(row.responses)

        if self._status(row) == VisitStatus.COMPLETED.value and row.recommendations is not None:
            logger.info("Visit %s already completed; keeping stored plan", visit_id)
            return CompletionStep(
                visit_id=row.visit_id,
                completed_at=row.completed_at,
                answered_count=len(store.answered_ids()),
            )

        nav = self._controller(template, store, row)

        remaining = [
            i for i in range(nav.index + 1, nav.section_count) if not nav.is_hidden(i)
        ]
        if remaining:
            raise ValueError(
                f"Cannot complete visit: {len(remaining)} section(s) remain "
                f"after section {nav.index}"
            )

        errors = nav.validate_current()
        if errors:
            logger.info("Completion of visit %s blocked: %s", visit_id, sorted(errors))
            return self._build_section_step(row, template, store, nav, errors=errors)

        recommendations = RecommendationExtractor(template).extract(store)
        await self._repo.complete_visit(
            db, row,
            responses=store.to_payload(),
            recommendations=[r.model_dump() for r in recommendations],
        )
        logger.info("Completed visit %s with %d recommendations",
                    visit_id, len(recommendations))
        return CompletionStep(
            visit_id=row.visit_id,
            completed_at=row.completed_at,
            answered_count=len(store.answered_ids()),
        )

    # ==================================================================
    # Personalised plan
    # ==================================================================

    async def generate_plan(
        self, db: AsyncSession, *, user_id: str, visit_id: str
    ) -> list[Recommendation]:
        """Return the visit's plan.

        Completed visits return the stored plan (with the provider's
        selections); other visits get a preview extracted from the current
        answers, which is not persisted.
        """
        row = await self._load_visit(db, user_id, visit_id)
        if row.recommendations is not None:
            return [Recommendation(**r) for r in row.recommendations]
        template = self._template_for(row)
        store = ResponseStore.from_payload(row.responses)
        return RecommendationExtractor(template).extract(store)

    async def set_recommendation_selected(
        self,
        db: AsyncSession,
        *,
        user_id: str,
        visit_id: str,
        rec_id: str,
        selected: bool,
    ) -> Recommendation:
        """Toggle whether a stored recommendation is part of the final plan.

        Raises:
            ValueError: if the visit is cancelled, has no stored plan or no
                such recommendation.
        """
        row = await self._load_visit(db, user_id, visit_id)
        self._ensure_editable(row)
        stored = list(row.recommendations or [])
        for i, raw in enumerate(stored):
            if raw.get("id") == rec_id:
                updated = Recommendation(**{**raw, "selected": selected})
                stored[i] = updated.model_dump()
                await self._repo.save_recommendations(db, row, stored)
                return updated
        raise ValueError(f"Recommendation '{rec_id}' not found for visit '{visit_id}'")

    # ==================================================================
    # Internal helpers
    # ==================================================================

    async def _load_visit(self, db: AsyncSession, user_id: str, visit_id: str) -> Visit:
        """Load a visit row or raise ValueError if not found."""
        row = await self._repo.get_by_user_and_visit(db, user_id, visit_id)
        if row is None:
            raise ValueError(f"Visit not found: user_id={user_id}, visit_id={visit_id}")
        return row

    def _template_for(self, row: Visit) -> Template:
        return self._store.get_template(row.template_id)

    def _controller(
        self, template: Template, store: ResponseStore, row: Visit
    ) -> NavigationController:
        return NavigationController(
            template, store, row.current_section_index, resolver=self._resolver,
        )

    def _ensure_editable(self, row: Visit) -> None:
        if self._status(row) == VisitStatus.CANCELLED.value:
            raise ValueError(f"Cannot modify a cancelled visit: {row.visit_id}")

    @staticmethod
    def _record(template: Template, store: ResponseStore, qid: str, value: Any) -> None:
        """Score (if composite) and store a single answer."""
        question = template.find_question(qid)
        if question is None:
            raise ValueError(f"Unknown question id for template {template.id}: {qid}")
        if value is None:
            store.clear(qid)
            return
        store.set(qid, score_composite(question.question_type, value))

    def _build_section_step(
        self,
        row: Visit,
        template: Template,
        store: ResponseStore,
        nav: NavigationController,
        errors: dict[str, str] | None = None,
    ) -> SectionStep:
        """Render the controller's current section for API callers."""
        errors = errors or {}
        section = nav.current_section
        if section is None:
            raise ValueError(f"Template {template.id} has no sections")

        visible = self._resolver.visible_questions(section, store)
        return SectionStep(
            visit_id=row.visit_id,
            section_index=nav.index,
            section_id=section.id,
            title=section.title,
            description=section.description,
            section_count=nav.section_count,
            progress_percentage=nav.progress_percentage,
            questions=[
                self._question_to_payload(q, store.get(q.id), errors.get(q.id))
                for q in visible
            ],
            hidden_question_ids=self._resolver.hidden_question_ids(section, store),
            errors=errors,
            is_first=nav.is_first,
            is_last=nav.is_last,
        )

    @staticmethod
    def _question_to_payload(
        question: Question, answer: Any, error: str | None
    ) -> QuestionPayload:
        """Convert a template question to a flat QuestionPayload for the API."""
        qtype = question.question_type
        payload = QuestionPayload(
            qid=question.id,
            text=question.text,
            question_type=qtype.value,
            required=question.required,
            answer=answer,
            warning=question.type_warning,
            error=error,
        )

        if question.options:
            payload.options = [
                {"id": o.id, "text": o.text, "value": o.value}
                for o in question.options
            ]
        elif qtype == QuestionType.SCORING_SCALE:
            payload.options = [dict(o) for o in DEFAULT_SCALE_OPTIONS]
        elif qtype == QuestionType.YES_NO:
            payload.options = [dict(o) for o in YES_NO_OPTIONS]
        elif qtype in _CHOICE_TYPES:
            payload.options = []

        return payload

    @staticmethod
    def _status(row: Visit) -> str:
        return row.status.value if isinstance(row.status, VisitStatus) else str(row.status)

    @classmethod
    def _to_visit_info(cls, row: Visit) -> VisitInfo:
        """Convert an ORM row to a public VisitInfo."""
        return VisitInfo(
            user_id=row.user_id,
            visit_id=row.visit_id,
            patient_id=row.patient_id,
            template_id=row.template_id,
            provider=row.provider,
            status=cls._status(row),
            current_section_index=row.current_section_index,
            created_at=row.created_at,
            updated_at=row.updated_at,
            completed_at=row.completed_at,
        )


def _parse_status(raw: str) -> VisitStatus:
    try:
        return VisitStatus(raw.strip().lower())
    except ValueError:
        allowed = ", ".join(s.value for s in VisitStatus)
        raise ValueError(f"Invalid status {raw!r}; expected one of: {allowed}") from None
