"""Create the awv_visits table.

Revision ID: 20261019_initial
Revises:
Create Date: 2026-10-19
"""

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects.postgresql import JSONB, TIMESTAMP, UUID

# revision identifiers, used by Alembic.
revision = "20261019_initial"
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    op.create_table(
        "awv_visits",
        sa.Column("id", UUID(as_uuid=True), nullable=False),
        sa.Column("user_id", sa.Text(), nullable=False),
        sa.Column("visit_id", sa.Text(), nullable=False),
        sa.Column("patient_id", sa.Text(), nullable=False),
        sa.Column("template_id", sa.Text(), nullable=False),
        sa.Column("provider", sa.Text(), nullable=True),
        sa.Column("status", sa.String(20), nullable=False),
        sa.Column("current_section_index", sa.SmallInteger(), nullable=False),
        sa.Column(
            "responses", JSONB(), nullable=False,
            server_default=sa.text("'{}'::jsonb"),
        ),
        sa.Column("recommendations", JSONB(), nullable=True),
        sa.Column("created_at", TIMESTAMP(timezone=True), nullable=False),
        sa.Column("updated_at", TIMESTAMP(timezone=True), nullable=False),
        sa.Column("completed_at", TIMESTAMP(timezone=True), nullable=True),
        sa.PrimaryKeyConstraint("id", name="pk_awv_visits"),
        sa.UniqueConstraint("user_id", "visit_id", name="uq_user_visit"),
        sa.CheckConstraint(
            "current_section_index >= 0", name="ck_section_index_non_negative",
        ),
        sa.CheckConstraint(
            "status != 'completed' OR completed_at IS NOT NULL",
            name="ck_completed_has_timestamp",
        ),
    )
    op.create_index("ix_awv_visits_user_id", "awv_visits", ["user_id"])
    op.create_index("ix_awv_visits_patient_id", "awv_visits", ["patient_id"])
    op.create_index("ix_awv_visits_status", "awv_visits", ["status"])
    op.create_index("ix_user_created", "awv_visits", ["user_id", "created_at"])
    op.create_index(
        "ix_visit_responses_gin", "awv_visits", ["responses"],
        postgresql_using="gin",
    )


def downgrade() -> None:
    op.drop_index("ix_visit_responses_gin", table_name="awv_visits")
    op.drop_index("ix_user_created", table_name="awv_visits")
    op.drop_index("ix_awv_visits_status", table_name="awv_visits")
    op.drop_index("ix_awv_visits_patient_id", table_name="awv_visits")
    op.drop_index("ix_awv_visits_user_id", table_name="awv_visits")
    op.drop_table("awv_visits")
