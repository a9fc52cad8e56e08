"""Visit ORM model — one row per annual wellness visit.

The whole response store and the generated plan live in JSONB columns so the
engine can fetch a single row and rebuild the visit without JOINs.
"""

import uuid
from datetime import datetime, timezone

from sqlalchemy import (
    CheckConstraint,
    Index,
    SmallInteger,
    String,
    Text,
    UniqueConstraint,
    text,
)
from sqlalchemy.dialects.postgresql import JSONB, TIMESTAMP, UUID
from sqlalchemy.orm import Mapped, mapped_column

from awv_db.models.base import Base
from awv_db.models.enums import VisitStatus


class Visit(Base):
    """One row per visit.

    A provider account (``user_id``) conducts many visits; each is uniquely
    identified by the (user_id, visit_id) pair.
    """

    __tablename__ = "awv_visits"

    # --- Primary key ---
    id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        primary_key=True,
        default=uuid.uuid4,
    )

    # --- Identity ---
    user_id: Mapped[str] = mapped_column(Text, nullable=False, index=True)
    # Caller-supplied visit identifier, unique within a user
    visit_id: Mapped[str] = mapped_column(Text, nullable=False)
    patient_id: Mapped[str] = mapped_column(Text, nullable=False, index=True)
    template_id: Mapped[str] = mapped_column(Text, nullable=False)
    provider: Mapped[str | None] = mapped_column(Text, nullable=True)

    # --- Lifecycle ---
    status: Mapped[str] = mapped_column(
        # VisitStatus value, e.g. "in_progress"
        String(20),
        nullable=False,
        default=VisitStatus.SCHEDULED.value,
        index=True,
    )
    current_section_index: Mapped[int] = mapped_column(
        SmallInteger, nullable=False, default=0
    )

    # --- Answers ---
    # Flat dict keyed by question id -> answer value
    responses: Mapped[dict] = mapped_column(
        JSONB,
        nullable=False,
        default=dict,
        server_default=text("'{}'::jsonb"),
    )

    # --- Personalised plan ---
    # List of recommendation dicts, written on completion
    recommendations: Mapped[list | None] = mapped_column(JSONB, nullable=True)

    # --- Timestamps ---
    created_at: Mapped[datetime] = mapped_column(
        TIMESTAMP(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
    )
    updated_at: Mapped[datetime] = mapped_column(
        TIMESTAMP(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
        onupdate=lambda: datetime.now(timezone.utc),
    )
    completed_at: Mapped[datetime | None] = mapped_column(
        TIMESTAMP(timezone=True), nullable=True
    )

    __table_args__ = (
        UniqueConstraint("user_id", "visit_id", name="uq_user_visit"),
        CheckConstraint(
            "current_section_index >= 0",
            name="ck_section_index_non_negative",
        ),
        CheckConstraint(
            "status != 'completed' OR completed_at IS NOT NULL",
            name="ck_completed_has_timestamp",
        ),
        # Listing hot path: a user's visits, newest first
        Index("ix_user_created", "user_id", "created_at"),
        Index("ix_visit_responses_gin", "responses", postgresql_using="gin"),
    )

    def __repr__(self) -> str:
        return (
            f"<Visit(id={self.id!s}, user={self.user_id!r}, "
            f"visit={self.visit_id!r}, status={self.status!r}, "
            f"section={self.current_section_index})>"
        )
