"""GraphBuilder — bounded adaptive expansion around a root entity.

Each expansion queries the relation store for one person, absorbs the
returned triples into the graph, then drains the shared frontier by
expanding the persons it discovered. Which filter a drained person is
expanded with depends on the aggressive flag and on how far from the
root the *draining* person sits.

Expansions nest: a drained person's own expansion drains the same
frontier before control returns to the expansion that dequeued it.
That nesting is run on an explicit stack of suspended generator frames
rather than the Python call stack, with a hard ceiling on stack depth.

Known heuristics (kept on purpose):

- Fan-out guard: a person more than one hop out whose query returns more
  than ``fanout_limit`` rows contributes nothing. Hubs deep in the graph
  are dropped even when they would have been useful.
- When both endpoints of a triple are new, the source distance is set to
  ``target + 1`` and then the target to ``source + 1``. The resulting
  distances are not guaranteed to be shortest-path distances.
- The node cap is checked only at the top of the drain loop, so one
  expansion can overshoot it.
- In aggressive mode a single drain iteration can expand two persons.
"""

from __future__ import annotations

from collections.abc import Generator
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, TypeAlias

import structlog

from wikigraph.domain.graph import Graph, IdAllocator, Person
from wikigraph.infrastructure.repositories.relations import RelationFilter

if TYPE_CHECKING:
    from wikigraph.infrastructure.repositories.relations import RelationRow, RelationStore

log = structlog.get_logger(__name__)

DEFAULT_MAX_NODES = 100
DEFAULT_AGGRESSIVE_THRESHOLD = 60
DEFAULT_FANOUT_LIMIT = 20
DEFAULT_MAX_DEPTH = 1000

# Fan-out guard applies beyond this distance.
_FANOUT_MIN_DISTANCE = 1
# Root expansions yielding fewer nodes than this are retried with a broader filter.
_EARLY_RESTART_NODES = 5
# Aggressive drain: broadest filter below the first distance, narrowest below the second.
_AGGRESSIVE_BROAD_DISTANCE = 3
_AGGRESSIVE_NARROW_DISTANCE = 4
# Sparse drain: allow non-entities near the root while the graph is tiny.
_SPARSE_DISTANCE = 2
_SPARSE_NODES = 5
_SPARSE_FRONTIER = 5


@dataclass(frozen=True)
class _Request:
    """A pending expansion yielded by a suspended frame."""

    person: Person
    mode: RelationFilter
    aggressive: bool


@dataclass
class TraversalStats:
    """Counters for one traversal (or one top-level expansion)."""

    queries: int = 0
    expansions: int = 0
    fanout_skips: int = 0
    depth_skips: int = 0
    max_stack_depth: int = 0
    aggressive_restart: bool = False

    @property
    def depth_exceeded(self) -> bool:
        return self.depth_skips > 0

    def to_dict(self) -> dict[str, int | bool]:
        return {
            "queries": self.queries,
            "expansions": self.expansions,
            "fanout_skips": self.fanout_skips,
            "depth_skips": self.depth_skips,
            "max_stack_depth": self.max_stack_depth,
            "aggressive_restart": self.aggressive_restart,
            "depth_exceeded": self.depth_exceeded,
        }


@dataclass
class Traversal:
    """Finished traversal: the graph plus what it took to build it."""

    root: Person
    graph: Graph
    stats: TraversalStats = field(default_factory=TraversalStats)


_Frame: TypeAlias = Generator[_Request, None, None]


class GraphBuilder:
    """Builds a bounded relation graph around a root entity.

    Args:
        store: Relation store queried once per expansion.
        ids: Id allocator; share one across builders for process-wide ids.
        max_nodes: Soft node cap checked at the top of each drain loop.
        aggressive_threshold: First-pass node count below which the
            traversal restarts in aggressive mode.
        fanout_limit: Row count above which deep expansions are dropped.
        max_depth: Ceiling on nested expansions held on the work stack.
    """

    def __init__(
        self,
        store: RelationStore,
        *,
        ids: IdAllocator | None = None,
        max_nodes: int = DEFAULT_MAX_NODES,
        aggressive_threshold: int = DEFAULT_AGGRESSIVE_THRESHOLD,
        fanout_limit: int = DEFAULT_FANOUT_LIMIT,
        max_depth: int = DEFAULT_MAX_DEPTH,
    ) -> None:
        if max_depth < 1:
            msg = f"max_depth must be at least 1, got {max_depth}"
            raise ValueError(msg)
        self._store = store
        self._ids = ids or IdAllocator()
        self.max_nodes = max_nodes
        self.aggressive_threshold = aggressive_threshold
        self.fanout_limit = fanout_limit
        self.max_depth = max_depth

    def new_person(self, name: str, distance: int) -> Person:
        return Person(name=name, id=self._ids.allocate(), distance_from_center=distance)

    # ------------------------------------------------------------------
    # Top-level traversal
    # ------------------------------------------------------------------

    def build(self, root_name: str) -> Traversal:
        """Traverse from *root_name* (store-native encoding).

        Runs a bidirectional entities-only pass first. If it finds fewer
        than ``aggressive_threshold`` nodes, the graph is reset to the
        root alone and rebuilt in aggressive mode with the broadest filter.

        Store errors propagate unchanged; nothing is retried.
        """
        root = self.new_person(root_name, 0)
        graph = Graph()
        graph.add(root, enqueue=False)
        stats = TraversalStats()

        log.debug("traversal.start", root=root_name, max_nodes=self.max_nodes)
        self.expand(graph, root, True, False, stats=stats)

        if len(graph) < self.aggressive_threshold:
            log.debug(
                "traversal.aggressive_restart",
                root=root_name,
                nodes=len(graph),
                threshold=self.aggressive_threshold,
            )
            stats.aggressive_restart = True
            graph.reset(root)
            self.expand(graph, root, True, True, aggressive=True, stats=stats)

        log.debug(
            "traversal.complete",
            root=root_name,
            nodes=len(graph),
            edges=len(graph.relations),
            queries=stats.queries,
            depth_exceeded=stats.depth_exceeded,
        )
        return Traversal(root=root, graph=graph, stats=stats)

    # ------------------------------------------------------------------
    # Expansion driver
    # ------------------------------------------------------------------

    def expand(
        self,
        graph: Graph,
        person: Person,
        include_incoming: bool,
        include_non_entities: bool,
        aggressive: bool = False,
        *,
        stats: TraversalStats | None = None,
    ) -> TraversalStats:
        """Expand *person* and everything its drain loop reaches.

        Nested expansions are run from an explicit stack. A nested
        expansion that would push the stack past ``max_depth`` is skipped
        (its person stays in the graph unexpanded) and counted in
        ``stats.depth_skips``.
        """
        stats = stats if stats is not None else TraversalStats()
        mode = RelationFilter.from_flags(include_incoming, include_non_entities)
        stack: list[_Frame] = [self._expansion(graph, person, mode, aggressive, stats)]

        while stack:
            stats.max_stack_depth = max(stats.max_stack_depth, len(stack))
            try:
                request = next(stack[-1])
            except StopIteration:
                stack.pop()
                continue

            if len(stack) >= self.max_depth:
                stats.depth_skips += 1
                log.warning(
                    "traversal.depth_exceeded",
                    person=request.person.name,
                    max_depth=self.max_depth,
                )
                continue

            stack.append(
                self._expansion(graph, request.person, request.mode, request.aggressive, stats)
            )

        return stats

    # ------------------------------------------------------------------
    # One expansion frame
    # ------------------------------------------------------------------

    def _expansion(
        self,
        graph: Graph,
        person: Person,
        mode: RelationFilter,
        aggressive: bool,
        stats: TraversalStats,
    ) -> _Frame:
        """Generator frame for one expansion; yields nested expansion requests."""
        stats.expansions += 1
        stats.queries += 1
        rows = self._store.relations(
            person.name,
            include_incoming=mode.include_incoming,
            include_non_entities=mode.include_non_entities,
        )

        if len(rows) > self.fanout_limit and person.distance_from_center > _FANOUT_MIN_DISTANCE:
            stats.fanout_skips += 1
            log.debug(
                "traversal.fanout_skip",
                person=person.name,
                rows=len(rows),
                distance=person.distance_from_center,
            )
            return

        self._absorb(graph, person, rows)

        if (
            person.distance_from_center == 0
            and len(graph) < _EARLY_RESTART_NODES
            and mode is not RelationFilter.BIDIRECTIONAL_ALL
        ):
            broader = (
                RelationFilter.BIDIRECTIONAL_ALL
                if mode.include_incoming
                else RelationFilter.BIDIRECTIONAL_ENTITIES
            )
            log.debug("traversal.broaden", person=person.name, mode=broader.name)
            yield _Request(person, broader, False)

        distance = person.distance_from_center
        while graph.frontier and len(graph) < self.max_nodes:
            if aggressive and distance < _AGGRESSIVE_BROAD_DISTANCE:
                yield _Request(graph.frontier.popleft(), RelationFilter.BIDIRECTIONAL_ALL, True)
            elif aggressive and distance < _AGGRESSIVE_NARROW_DISTANCE:
                yield _Request(graph.frontier.popleft(), RelationFilter.OUTGOING_ENTITIES, True)

            if not graph.frontier:
                break

            if (
                distance < _SPARSE_DISTANCE
                and len(graph) < _SPARSE_NODES
                and len(graph.frontier) < _SPARSE_FRONTIER
            ):
                yield _Request(graph.frontier.popleft(), RelationFilter.OUTGOING_ALL, False)
            else:
                yield _Request(graph.frontier.popleft(), RelationFilter.OUTGOING_ENTITIES, False)

    def _absorb(self, graph: Graph, person: Person, rows: list[RelationRow]) -> None:
        """Add the persons and relations described by *rows*."""
        distance = person.distance_from_center + 1
        for row in rows:
            source = graph.get(row.subject)
            source_new = source is None
            if source is None:
                source = graph.add(self.new_person(row.subject, distance))

            target = graph.get(row.object)
            target_new = target is None
            if target is None:
                target = graph.add(self.new_person(row.object, distance))

            if source_new and target_new:
                source.distance_from_center = target.distance_from_center + 1
                target.distance_from_center = source.distance_from_center + 1

            graph.link(source, target, row.predicate)
