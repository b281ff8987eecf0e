"""Read repositories over the relation store."""

from wikigraph.infrastructure.repositories.relations import (
    PersonDatesRow,
    PersonDatesStore,
    RelationFilter,
    RelationRepository,
    RelationRow,
    RelationStore,
    open_repository,
)

__all__ = [
    "PersonDatesRow",
    "PersonDatesStore",
    "RelationFilter",
    "RelationRepository",
    "RelationRow",
    "RelationStore",
    "open_repository",
]
