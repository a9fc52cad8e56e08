"""Declarative base shared by the visit tables."""

from sqlalchemy import MetaData
from sqlalchemy.orm import DeclarativeBase

# Names for indexes and constraints declared without an explicit ``name=``;
# they match what the migrations create.
NAMING_CONVENTION = {
    "ix": "ix_%(column_0_label)s",
    "uq": "uq_%(table_name)s_%(column_0_name)s",
    "pk": "pk_%(table_name)s",
}


class Base(DeclarativeBase):
    metadata = MetaData(naming_convention=NAMING_CONVENTION)
