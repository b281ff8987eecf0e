"""Relation store engine and schema via SQLAlchemy Core."""

from wikigraph.infrastructure.database.engine import create_db_engine, create_tables
from wikigraph.infrastructure.database.schema import metadata, persons, properties

__all__ = [
    "create_db_engine",
    "create_tables",
    "metadata",
    "persons",
    "properties",
]
