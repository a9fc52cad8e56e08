"""Async CRUD repository for Visit.

All public methods accept an ``AsyncSession`` so the caller controls
transaction boundaries.  Methods flush but never commit.

Business rules (status transitions, validation) belong in the visit engine;
the repository only writes what it is told.
"""

from datetime import datetime, timezone
from typing import Any

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from awv_db.models.enums import VisitStatus
from awv_db.models.visit import Visit


class VisitRepository:
    """Async read/write operations on the ``awv_visits`` table."""

    # ------------------------------------------------------------------
    # Create
    # ------------------------------------------------------------------

    async def create_visit(
        self,
        db: AsyncSession,
        *,
        user_id: str,
        visit_id: str,
        patient_id: str,
        template_id: str,
        provider: str | None = None,
    ) -> Visit:
        """Insert a new visit row and return it.

        Raises:
            ValueError: if the (user_id, visit_id) pair already exists.
        """
        visit = Visit(
            user_id=user_id,
            visit_id=visit_id,
            patient_id=patient_id,
            template_id=template_id,
            provider=provider,
            status=VisitStatus.SCHEDULED.value,
            current_section_index=0,
            responses={},
        )
        db.add(visit)
        try:
            await db.flush()
        except IntegrityError:
            raise ValueError(f"Visit '{visit_id}' already exists") from None
        return visit

    # ------------------------------------------------------------------
    # Read
    # ------------------------------------------------------------------

    async def get_by_user_and_visit(
        self, db: AsyncSession, user_id: str, visit_id: str
    ) -> Visit | None:
        """Fetch a visit by the unique (user_id, visit_id) pair."""
        stmt = select(Visit).where(
            Visit.user_id == user_id,
            Visit.visit_id == visit_id,
        )
        result = await db.execute(stmt)
        return result.scalar_one_or_none()

    async def list_by_user(
        self,
        db: AsyncSession,
        user_id: str,
        *,
        patient_id: str | None = None,
        limit: int = 20,
        offset: int = 0,
    ) -> list[Visit]:
        """List a user's visits, most recent first, optionally for one patient."""
        stmt = select(Visit).where(Visit.user_id == user_id)
        if patient_id is not None:
            stmt = stmt.where(Visit.patient_id == patient_id)
        stmt = stmt.order_by(Visit.created_at.desc()).limit(limit).offset(offset)
        result = await db.execute(stmt)
        return list(result.scalars().all())

    # ------------------------------------------------------------------
    # Update
    # ------------------------------------------------------------------

    async def save_responses(
        self, db: AsyncSession, visit: Visit, responses: dict[str, Any]
    ) -> Visit:
        """Replace the visit's whole response map."""
        # New dict object so SQLAlchemy detects the JSONB change
        visit.responses = dict(responses)
        visit.updated_at = datetime.now(timezone.utc)
        await db.flush()
        return visit

    async def set_section_index(
        self, db: AsyncSession, visit: Visit, index: int
    ) -> Visit:
        visit.current_section_index = index
        visit.updated_at = datetime.now(timezone.utc)
        await db.flush()
        return visit

    async def set_status(
        self, db: AsyncSession, visit: Visit, status: VisitStatus
    ) -> Visit:
        """Set the status; ``completed_at`` follows the completed state."""
        now = datetime.now(timezone.utc)
        visit.status = status.value
        if status == VisitStatus.COMPLETED:
            visit.completed_at = visit.completed_at or now
        else:
            visit.completed_at = None
        visit.updated_at = now
        await db.flush()
        return visit

    async def save_recommendations(
        self, db: AsyncSession, visit: Visit, recommendations: list[dict[str, Any]]
    ) -> Visit:
        visit.recommendations = list(recommendations)
        visit.updated_at = datetime.now(timezone.utc)
        await db.flush()
        return visit

    # ------------------------------------------------------------------
    # Update: terminal state
    # ------------------------------------------------------------------

    async def complete_visit(
        self,
        db: AsyncSession,
        visit: Visit,
        *,
        responses: dict[str, Any],
        recommendations: list[dict[str, Any]],
    ) -> Visit:
        """Mark a visit completed, writing answers and plan in one flush.

        The CHECK constraint ``ck_completed_has_timestamp`` enforces that
        ``completed_at`` is set whenever status is completed.
        """
        now = datetime.now(timezone.utc)
        visit.responses = dict(responses)
        visit.recommendations = list(recommendations)
        visit.status = VisitStatus.COMPLETED.value
        visit.completed_at = now
        visit.updated_at = now
        await db.flush()
        return visit
