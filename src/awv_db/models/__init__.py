"""ORM models for awv_db."""

from awv_db.models.base import Base
from awv_db.models.enums import VisitStatus
from awv_db.models.visit import Visit

__all__ = ["Base", "VisitStatus", "Visit"]
