"""Read-only repository over the relation store.

A :class:`RelationRepository` is bound to one open connection so a whole
traversal (expansion queries, date enrichment) reuses a single pooled
connection. Obtain one with :func:`open_repository`.
"""

from __future__ import annotations

from contextlib import contextmanager
from enum import Enum
from typing import TYPE_CHECKING, NamedTuple, Protocol

from sqlalchemy import and_, or_, select, union_all

from wikigraph.infrastructure.database.schema import persons, properties

if TYPE_CHECKING:
    from collections.abc import Iterable, Iterator

    from sqlalchemy import ColumnElement, CompoundSelect, Connection, Exists, Select
    from sqlalchemy.engine import Engine

# SQLite's default bound-parameter ceiling is well above this.
_IN_CHUNK = 500


class RelationRow(NamedTuple):
    subject: str
    predicate: str
    object: str


class PersonDatesRow(NamedTuple):
    name: str
    birth_date: str | None
    death_date: str | None


class RelationFilter(Enum):
    """Which triples an expansion asks for, keyed by its two flags.

    Values are ``(include_incoming, include_non_entities)``.
    """

    OUTGOING_ENTITIES = (False, False)
    BIDIRECTIONAL_ENTITIES = (True, False)
    OUTGOING_ALL = (False, True)
    BIDIRECTIONAL_ALL = (True, True)

    @classmethod
    def from_flags(cls, include_incoming: bool, include_non_entities: bool) -> RelationFilter:
        return cls((bool(include_incoming), bool(include_non_entities)))

    @property
    def include_incoming(self) -> bool:
        return self.value[0]

    @property
    def include_non_entities(self) -> bool:
        return self.value[1]


class RelationStore(Protocol):
    """Query contract used by the graph builder."""

    def relations(
        self, name: str, *, include_incoming: bool, include_non_entities: bool
    ) -> list[RelationRow]: ...

    def is_entity(self, name: str) -> bool: ...


class PersonDatesStore(Protocol):
    """Query contract used by the attribute enricher."""

    def person_dates(self, names: Iterable[str]) -> list[PersonDatesRow]: ...


def _triples() -> Select:
    return select(properties.c.entity_name, properties.c.property_name, properties.c.link2)


def _is_known_entity(column: ColumnElement[str]) -> Exists:
    return select(persons.c.name).where(persons.c.name == column).exists()


class RelationRepository:
    """Encapsulates SQL for relation, date and autocomplete lookups."""

    def __init__(self, conn: Connection) -> None:
        self._conn = conn

    def relations(
        self, name: str, *, include_incoming: bool, include_non_entities: bool
    ) -> list[RelationRow]:
        """Fetch ``(subject, predicate, object)`` triples touching *name*."""
        mode = RelationFilter.from_flags(include_incoming, include_non_entities)
        stmt = self._relations_stmt(name, mode)
        rows = self._conn.execute(stmt).fetchall()
        return [RelationRow(str(r[0]), str(r[1]), str(r[2])) for r in rows]

    @staticmethod
    def _relations_stmt(name: str, mode: RelationFilter) -> Select | CompoundSelect:
        outgoing = and_(properties.c.entity_name == name, properties.c.link2.is_not(None))

        if mode is RelationFilter.BIDIRECTIONAL_ENTITIES:
            incoming_rows = _triples().where(
                properties.c.link2 == name,
                _is_known_entity(properties.c.entity_name),
            )
            outgoing_rows = _triples().where(outgoing, properties.c.is_person == 1)
            return union_all(incoming_rows, outgoing_rows)
        if mode is RelationFilter.OUTGOING_ALL:
            return _triples().where(outgoing)
        if mode is RelationFilter.BIDIRECTIONAL_ALL:
            return _triples().where(or_(properties.c.link2 == name, outgoing))
        return _triples().where(outgoing, properties.c.is_person == 1)

    def is_entity(self, name: str) -> bool:
        """Whether *name* is a known person-like entity."""
        stmt = select(persons.c.name).where(persons.c.name == name)
        return self._conn.execute(stmt).first() is not None

    def person_dates(self, names: Iterable[str]) -> list[PersonDatesRow]:
        """Fetch raw birth/death date text for *names*."""
        wanted = list(names)
        result: list[PersonDatesRow] = []
        for start in range(0, len(wanted), _IN_CHUNK):
            chunk = wanted[start : start + _IN_CHUNK]
            stmt = select(persons.c.name, persons.c.birth_date, persons.c.death_date).where(
                persons.c.name.in_(chunk)
            )
            for row in self._conn.execute(stmt):
                result.append(PersonDatesRow(str(row.name), row.birth_date, row.death_date))
        return result

    def autocomplete(self, prefix: str, *, limit: int = 10) -> list[str]:
        """Return up to *limit* entity names starting with *prefix*."""
        stmt = (
            select(persons.c.name)
            .where(persons.c.name.startswith(prefix, autoescape=True))
            .order_by(persons.c.name)
            .limit(limit)
        )
        return [str(row.name) for row in self._conn.execute(stmt)]


@contextmanager
def open_repository(engine: Engine) -> Iterator[RelationRepository]:
    """Check out one pooled connection and bind a repository to it."""
    with engine.connect() as conn:
        yield RelationRepository(conn)
