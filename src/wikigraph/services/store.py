"""StoreService — relation store setup."""

from __future__ import annotations

from sqlalchemy import func, select
from sqlalchemy.exc import SQLAlchemyError

from wikigraph.infrastructure.database.engine import create_tables
from wikigraph.infrastructure.database.schema import persons, properties
from wikigraph.services.base import BaseService
from wikigraph.services.result import ServiceResult


class StoreService(BaseService):
    """Creates the store tables and reports what they hold."""

    def init(self) -> ServiceResult:
        """Create missing tables; existing data is left untouched."""
        try:
            tables = create_tables(self._engine)
            with self._engine.connect() as conn:
                triple_count = conn.execute(select(func.count()).select_from(properties)).scalar()
                person_count = conn.execute(select(func.count()).select_from(persons)).scalar()
        except SQLAlchemyError as exc:
            return self._failure("init", "STORE_ERROR", f"Could not initialize store: {exc}")

        return ServiceResult(
            ok=True,
            op="init",
            data={
                "url": self._engine.url.render_as_string(hide_password=True),
                "tables": tables,
                "triples": int(triple_count or 0),
                "persons": int(person_count or 0),
            },
        )
