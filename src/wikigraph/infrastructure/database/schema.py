"""SQLAlchemy Core table definitions for the relation store.

The store is filled by the dump extraction pipeline, not by wikigraph.
Names are kept in the dump's native encoding (see
:mod:`wikigraph.domain.names`).
"""

from __future__ import annotations

from sqlalchemy import Column, Index, Integer, MetaData, Table, Text

metadata = MetaData()

# One row per extracted (subject, predicate, object) triple.
# ``link2`` is NULL for literal-valued properties; ``is_person`` flags
# rows whose object is itself a known entity.
properties = Table(
    "properties",
    metadata,
    Column("entity_name", Text, nullable=False),
    Column("property_name", Text, nullable=False),
    Column("link2", Text),
    Column("is_person", Integer, nullable=False, default=0, server_default="0"),
)

persons = Table(
    "persons",
    metadata,
    Column("name", Text, primary_key=True),
    Column("birth_date", Text),  # raw dump text
    Column("death_date", Text),  # raw dump text
)

Index("ix_properties_entity_name", properties.c.entity_name)
Index("ix_properties_link2", properties.c.link2)
