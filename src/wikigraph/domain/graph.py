"""Traversal graph model — persons, relations, and the frontier queue.

A :class:`Graph` is owned by exactly one traversal. Persons are keyed by
their store-native name; relations are kept in discovery order and are
never deduplicated.

INVARIANT: a person name appears at most once per graph, and a person
enters the frontier exactly once (when it is created).
"""

from __future__ import annotations

import threading
from collections import deque
from dataclasses import dataclass, field
from datetime import date
from typing import Any

from wikigraph.domain.names import normalize


class IdAllocator:
    """Monotonic id source shared by every graph built with it.

    Ids are never reused for the lifetime of the allocator.
    """

    def __init__(self, start: int = 0) -> None:
        self._next = start
        self._lock = threading.Lock()

    def allocate(self) -> int:
        with self._lock:
            value = self._next
            self._next += 1
        return value


@dataclass(eq=False)
class Person:
    """A node in the traversal graph."""

    name: str
    id: int
    distance_from_center: int
    birth_date: date | None = None
    death_date: date | None = None

    @property
    def display_name(self) -> str:
        return normalize(self.name)

    @property
    def color(self) -> str:
        """Node colour fading with distance from the traversal root."""
        if self.distance_from_center == 0:
            return "rgb(255, 0, 0)"
        blue = max(200 - 10 * self.distance_from_center, 70)
        return f"rgb(155, 155, {blue})"

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "display_name": self.display_name,
            "distance": self.distance_from_center,
            "birth_date": self.birth_date.isoformat() if self.birth_date else None,
            "death_date": self.death_date.isoformat() if self.death_date else None,
            "color": self.color,
        }


@dataclass(frozen=True)
class Relation:
    """A directed, labelled edge between two persons."""

    source: Person
    target: Person
    label: str

    def to_dict(self) -> dict[str, Any]:
        return {
            "source": self.source.name,
            "source_id": self.source.id,
            "target": self.target.name,
            "target_id": self.target.id,
            "label": self.label,
        }


@dataclass
class Graph:
    """Persons, relations and the frontier for one traversal."""

    persons: dict[str, Person] = field(default_factory=dict)
    relations: list[Relation] = field(default_factory=list)
    frontier: deque[Person] = field(default_factory=deque)

    def __len__(self) -> int:
        return len(self.persons)

    def __contains__(self, name: object) -> bool:
        return name in self.persons

    def get(self, name: str) -> Person | None:
        return self.persons.get(name)

    def add(self, person: Person, *, enqueue: bool = True) -> Person:
        """Insert *person*, optionally pushing it onto the frontier.

        Raises:
            ValueError: If a person with the same name is already present.
        """
        if person.name in self.persons:
            msg = f"Person {person.name!r} is already in the graph"
            raise ValueError(msg)
        self.persons[person.name] = person
        if enqueue:
            self.frontier.append(person)
        return person

    def link(self, source: Person, target: Person, label: str) -> Relation:
        relation = Relation(source=source, target=target, label=label)
        self.relations.append(relation)
        return relation

    def reset(self, root: Person) -> None:
        """Drop everything except *root*; used for the aggressive restart."""
        self.persons.clear()
        self.relations.clear()
        self.frontier.clear()
        self.persons[root.name] = root

    def to_dict(self) -> dict[str, Any]:
        return {
            "nodes": [p.to_dict() for p in self.persons.values()],
            "edges": [r.to_dict() for r in self.relations],
        }
