"""AttributeEnricher — batch-fill birth and death dates on a finished graph."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from wikigraph.domain.dates import parse_date

if TYPE_CHECKING:
    from wikigraph.domain.graph import Graph
    from wikigraph.infrastructure.repositories.relations import PersonDatesStore

logger = logging.getLogger(__name__)


class AttributeEnricher:
    """Fills optional temporal attributes with one store query per graph.

    Unparsable dates are left unset. Store errors propagate.
    """

    def __init__(self, store: PersonDatesStore) -> None:
        self._store = store

    def enrich(self, graph: Graph) -> int:
        """Populate ``birth_date``/``death_date`` in place.

        Returns the number of persons that received at least one date.
        """
        if len(graph) == 0:
            return 0

        filled = 0
        for row in self._store.person_dates(list(graph.persons)):
            person = graph.get(row.name)
            if person is None:
                continue
            birth = parse_date(row.birth_date)
            death = parse_date(row.death_date)
            if birth is not None:
                person.birth_date = birth
            if death is not None:
                person.death_date = death
            if birth is not None or death is not None:
                filled += 1
            elif row.birth_date or row.death_date:
                logger.debug(
                    "Unparsable dates for %s: %r / %r", row.name, row.birth_date, row.death_date
                )

        return filled
