"""ExploreService — traversal entry point, export, and autocomplete.

Each operation checks out a single pooled connection and reuses it for
every query it issues (all expansions plus the date enrichment).
Store failures end the operation immediately and come back as a failed
ServiceResult with code ``STORE_ERROR``; nothing is retried. Log records
emitted during a traversal carry the root entity as ``root``.
"""

from __future__ import annotations

import logging
import time
from pathlib import Path
from typing import TYPE_CHECKING, Any

import structlog
from sqlalchemy.exc import SQLAlchemyError

from wikigraph.domain.graph import Graph, IdAllocator
from wikigraph.domain.names import denormalize, normalize
from wikigraph.infrastructure.graph.export import EXPORT_FORMATS, export_format, write_graph
from wikigraph.infrastructure.repositories.relations import open_repository
from wikigraph.services.base import BaseService
from wikigraph.services.enrich import AttributeEnricher
from wikigraph.services.expansion import GraphBuilder, Traversal
from wikigraph.services.result import ServiceResult

if TYPE_CHECKING:
    from sqlalchemy.engine import Engine

    from wikigraph.config.settings import WikiSettings

logger = logging.getLogger(__name__)

EMPTY_INPUT_MESSAGE = "Enter person name to start graph traversal."


def summary_line(elapsed_s: float, count: int) -> str:
    return f"{elapsed_s}s for generating graph of {count} nodes."


class ExploreService(BaseService):
    """Builds relation graphs around an entity and looks up entity names."""

    def __init__(
        self,
        engine: Engine,
        settings: WikiSettings | None = None,
        *,
        ids: IdAllocator | None = None,
    ) -> None:
        super().__init__(engine, settings)
        self._ids = ids or IdAllocator()

    # ------------------------------------------------------------------
    # explore
    # ------------------------------------------------------------------

    def explore(self, name: str, *, max_nodes: int | None = None) -> ServiceResult:
        """Build the graph around the display-form *name*.

        An empty name performs no traversal and returns an empty graph.
        """
        if not name or not name.strip():
            return ServiceResult(ok=True, op="explore", data=self._empty_payload(name))

        try:
            traversal, elapsed = self._traverse(name, max_nodes=max_nodes)
        except SQLAlchemyError as exc:
            logger.debug("Traversal from %r failed", name, exc_info=True)
            return self._failure("explore", "STORE_ERROR", f"Relation store query failed: {exc}")

        return ServiceResult(
            ok=True,
            op="explore",
            data=self._payload(name, traversal, elapsed),
            warnings=self._warnings(traversal),
        )

    def export(
        self,
        name: str,
        path: Path,
        *,
        max_nodes: int | None = None,
    ) -> ServiceResult:
        """Explore from *name* and write the graph to *path*.

        The format follows the file suffix (see ``EXPORT_FORMATS``).
        """
        path = Path(path)
        fmt = export_format(path)
        if fmt is None:
            return self._failure(
                "export",
                "UNSUPPORTED_FORMAT",
                f"Cannot export to {path.suffix or path.name!r}",
                supported=sorted(EXPORT_FORMATS),
            )

        if not name or not name.strip():
            traversal: Traversal | None = None
            graph = Graph()
            elapsed = 0.0
        else:
            try:
                traversal, elapsed = self._traverse(name, max_nodes=max_nodes)
            except SQLAlchemyError as exc:
                logger.debug("Export traversal from %r failed", name, exc_info=True)
                return self._failure(
                    "export", "STORE_ERROR", f"Relation store query failed: {exc}"
                )
            graph = traversal.graph

        try:
            write_graph(graph, path)
        except OSError as exc:
            logger.debug("Export to %s failed", path, exc_info=True)
            return self._failure("export", "EXPORT_ERROR", f"Could not write {path}: {exc}")
        return ServiceResult(
            ok=True,
            op="export",
            data={
                "input": name,
                "path": str(path),
                "format": fmt,
                "count": len(graph),
                "edge_count": len(graph.relations),
                "elapsed_s": elapsed,
            },
            warnings=self._warnings(traversal) if traversal else [],
        )

    # ------------------------------------------------------------------
    # autocomplete
    # ------------------------------------------------------------------

    def autocomplete(self, prefix: str) -> ServiceResult:
        """Return up to ``store.autocomplete_limit`` display names for *prefix*."""
        limit = self._settings.store.autocomplete_limit
        try:
            with open_repository(self._engine) as repo:
                names = repo.autocomplete(denormalize(prefix), limit=limit)
        except SQLAlchemyError as exc:
            logger.debug("Autocomplete for %r failed", prefix, exc_info=True)
            return self._failure(
                "autocomplete", "STORE_ERROR", f"Relation store query failed: {exc}"
            )

        items = [normalize(n) for n in names]
        return ServiceResult(
            ok=True,
            op="autocomplete",
            data={"prefix": prefix, "count": len(items), "items": items},
        )

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def _traverse(self, name: str, *, max_nodes: int | None) -> tuple[Traversal, float]:
        cfg = self._settings.traversal
        root_name = denormalize(name)
        with structlog.contextvars.bound_contextvars(root=root_name):
            start = time.perf_counter()
            with open_repository(self._engine) as repo:
                builder = GraphBuilder(
                    repo,
                    ids=self._ids,
                    max_nodes=max_nodes or cfg.max_nodes,
                    aggressive_threshold=cfg.aggressive_threshold,
                    fanout_limit=cfg.fanout_limit,
                    max_depth=cfg.max_depth,
                )
                traversal = builder.build(root_name)
                filled = AttributeEnricher(repo).enrich(traversal.graph)
            elapsed = time.perf_counter() - start
            logger.debug(
                "Explored %s: %d nodes, %d edges, %d dated in %.3fs",
                root_name,
                len(traversal.graph),
                len(traversal.graph.relations),
                filled,
                elapsed,
            )
        return traversal, elapsed

    @staticmethod
    def _warnings(traversal: Traversal) -> list[str]:
        if traversal.stats.depth_exceeded:
            return [
                f"Expansion depth limit reached; {traversal.stats.depth_skips} "
                "person(s) were left unexpanded"
            ]
        return []

    @staticmethod
    def _empty_payload(name: str) -> dict[str, Any]:
        return {
            "input": name,
            "root": None,
            "display_name": None,
            "count": 0,
            "edge_count": 0,
            "nodes": [],
            "edges": [],
            "elapsed_s": 0.0,
            "depth_exceeded": False,
            "summary": EMPTY_INPUT_MESSAGE,
        }

    @staticmethod
    def _payload(name: str, traversal: Traversal, elapsed: float) -> dict[str, Any]:
        graph = traversal.graph
        return {
            "input": name,
            "root": traversal.root.name,
            "display_name": traversal.root.display_name,
            "count": len(graph),
            "edge_count": len(graph.relations),
            **graph.to_dict(),
            "elapsed_s": round(elapsed, 6),
            "depth_exceeded": traversal.stats.depth_exceeded,
            "summary": summary_line(round(elapsed, 6), len(graph)),
            "stats": traversal.stats.to_dict(),
        }
