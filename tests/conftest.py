"""Shared pytest fixtures for wikigraph tests."""

from __future__ import annotations

import logging
from collections.abc import Callable, Generator, Iterable
from pathlib import Path
from typing import Any

import pytest
import structlog
from click.testing import CliRunner
from sqlalchemy import insert
from sqlalchemy.engine import Engine

from wikigraph.infrastructure.database.engine import create_db_engine, create_tables
from wikigraph.infrastructure.database.schema import persons, properties

# (subject, predicate, object, object_is_person)
Triple = tuple[str, str, str | None, int]
# (name, birth_date, death_date)
PersonRow = tuple[str, str | None, str | None]

SAMPLE_TRIPLES: list[Triple] = [
    ("Alice", "spouse", "Bob", 1),
    ("Alice", "birthPlace", "Paris", 0),
    ("Alice", "award", None, 0),
    ("Carol", "student", "Alice", 1),
    ("Dave", "fan", "Alice", 1),
]

SAMPLE_PERSONS: list[PersonRow] = [
    ("Alice", "1867-11-07", '"1934"'),
    ("Bob", "garbage", None),
    ("Carol", None, None),
]


@pytest.fixture(autouse=True)
def _restore_logging() -> Generator[None]:
    """Undo logging configuration done by CLI invocations."""
    root = logging.getLogger()
    original_handlers = root.handlers[:]
    original_level = root.level
    wiki = logging.getLogger("wikigraph")
    wiki_level = wiki.level
    yield
    root.handlers = original_handlers
    root.setLevel(original_level)
    wiki.setLevel(wiki_level)
    structlog.reset_defaults()


@pytest.fixture
def cli_runner() -> CliRunner:
    """Provide a Click CLI test runner."""
    return CliRunner()


@pytest.fixture
def isolated_cwd(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Run from an empty directory with no config discovery side effects."""
    monkeypatch.chdir(tmp_path)
    monkeypatch.delenv("WIKIGRAPH_CONFIG", raising=False)
    return tmp_path


@pytest.fixture
def db_url(tmp_path: Path) -> str:
    return f"sqlite:///{tmp_path / 'wikigraph.db'}"


@pytest.fixture
def db_engine(db_url: str) -> Generator[Engine]:
    """Initialized SQLite store with empty tables."""
    engine = create_db_engine(db_url)
    create_tables(engine)
    try:
        yield engine
    finally:
        engine.dispose()


@pytest.fixture
def seed_store(db_engine: Engine) -> Callable[..., Engine]:
    """Return a helper inserting triples and persons into the store."""

    def _seed(
        triples: Iterable[Triple] = (),
        people: Iterable[PersonRow] = (),
    ) -> Engine:
        triple_rows: list[dict[str, Any]] = [
            {"entity_name": s, "property_name": p, "link2": o, "is_person": flag}
            for s, p, o, flag in triples
        ]
        person_rows: list[dict[str, Any]] = [
            {"name": n, "birth_date": b, "death_date": d} for n, b, d in people
        ]
        with db_engine.begin() as conn:
            if triple_rows:
                conn.execute(insert(properties), triple_rows)
            if person_rows:
                conn.execute(insert(persons), person_rows)
        return db_engine

    return _seed


@pytest.fixture
def sample_store(seed_store: Callable[..., Engine]) -> Engine:
    """Store with a five-entity neighbourhood around ``Alice``.

    Alice -spouse-> Bob, Alice -birthPlace-> Paris (not an entity),
    Carol -student-> Alice, Dave -fan-> Alice (Dave is not a known entity).
    """
    return seed_store(SAMPLE_TRIPLES, SAMPLE_PERSONS)
