"""Database-level enumerations for annual wellness visits."""

import enum


class VisitStatus(str, enum.Enum):
    """Lifecycle states for a visit.

    Transitions:
        scheduled -> in_progress  (first answer recorded or progress saved)
        in_progress -> completed  (final section validated, plan written)
        scheduled | in_progress -> cancelled
        completed stays completed when its answers are edited
    """

    SCHEDULED = "scheduled"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"
    CANCELLED = "cancelled"
