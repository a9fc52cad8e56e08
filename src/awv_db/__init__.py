"""awv_db — PostgreSQL persistence layer for annual wellness visits.

Provides the ORM model, the async engine factory and the repository used by
the visit engine to create, update and query visits.
"""

from awv_db.models.visit import Visit
from awv_db.models.enums import VisitStatus
from awv_db.engine import get_engine, get_session_factory
from awv_db.repository import VisitRepository

__all__ = [
    "Visit",
    "VisitStatus",
    "get_engine",
    "get_session_factory",
    "VisitRepository",
]
