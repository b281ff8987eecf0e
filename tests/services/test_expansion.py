"""Tests for GraphBuilder — adaptive bounded expansion."""

from __future__ import annotations

from collections.abc import Iterable

import pytest

from wikigraph.domain.graph import Graph, IdAllocator, Person
from wikigraph.infrastructure.repositories.relations import RelationFilter, RelationRow
from wikigraph.services.expansion import GraphBuilder

BE = RelationFilter.BIDIRECTIONAL_ENTITIES
BA = RelationFilter.BIDIRECTIONAL_ALL
OE = RelationFilter.OUTGOING_ENTITIES
OA = RelationFilter.OUTGOING_ALL


class StubStore:
    """In-memory relation store recording every query.

    ``by_name`` answers regardless of filter; ``by_mode`` answers one
    ``(name, filter)`` pair and wins over ``by_name``.
    """

    def __init__(
        self,
        by_name: dict[str, list[RelationRow]] | None = None,
        by_mode: dict[tuple[str, RelationFilter], list[RelationRow]] | None = None,
        fail: Exception | None = None,
    ) -> None:
        self.by_name = by_name or {}
        self.by_mode = by_mode or {}
        self.fail = fail
        self.calls: list[tuple[str, RelationFilter]] = []

    def relations(
        self, name: str, *, include_incoming: bool, include_non_entities: bool
    ) -> list[RelationRow]:
        mode = RelationFilter.from_flags(include_incoming, include_non_entities)
        self.calls.append((name, mode))
        if self.fail is not None:
            raise self.fail
        if (name, mode) in self.by_mode:
            return list(self.by_mode[(name, mode)])
        return list(self.by_name.get(name, []))

    def is_entity(self, name: str) -> bool:
        return name in self.by_name


def _rows(subject: str, objects: Iterable[str], label: str = "knows") -> list[RelationRow]:
    return [RelationRow(subject, label, obj) for obj in objects]


def _rooted(builder: GraphBuilder, name: str = "R") -> tuple[Graph, Person]:
    graph = Graph()
    root = graph.add(builder.new_person(name, 0), enqueue=False)
    return graph, root


def _assert_no_dangling(graph: Graph) -> None:
    for rel in graph.relations:
        assert graph.get(rel.source.name) is rel.source
        assert graph.get(rel.target.name) is rel.target


class TestBuild:
    def test_isolated_root(self) -> None:
        store = StubStore()
        traversal = GraphBuilder(store).build("Test_Person")

        assert len(traversal.graph) == 1
        assert traversal.graph.relations == []
        assert traversal.root.name == "Test_Person"
        assert traversal.root.display_name == "Test Person"
        assert traversal.stats.aggressive_restart is True
        assert store.calls == [("Test_Person", BE), ("Test_Person", BA), ("Test_Person", BA)]

    def test_dense_first_pass_skips_restart(self) -> None:
        store = StubStore(by_name={"Hub": _rows("Hub", [f"P{i}" for i in range(70)])})
        traversal = GraphBuilder(store, fanout_limit=100).build("Hub")

        assert traversal.stats.aggressive_restart is False
        assert len(traversal.graph) == 71

    def test_restart_discards_first_pass(self) -> None:
        store = StubStore(
            by_mode={
                ("R", BE): _rows("R", ["A"]),
                ("R", BA): _rows("R", ["B"]),
            }
        )
        traversal = GraphBuilder(store).build("R")
        graph = traversal.graph

        assert traversal.stats.aggressive_restart is True
        assert set(graph.persons) == {"R", "B"}
        assert [(r.source.name, r.target.name) for r in graph.relations] == [("R", "B")]
        assert graph.get("R") is traversal.root
        assert traversal.root.id == 0

    def test_restart_does_not_reuse_ids(self) -> None:
        store = StubStore(
            by_mode={
                ("R", BE): _rows("R", ["A"]),
                ("R", BA): _rows("R", ["B"]),
            }
        )
        traversal = GraphBuilder(store).build("R")
        # First pass created A (1) and B (2); the restart re-creates B.
        assert traversal.graph.get("B").id > 2  # type: ignore[union-attr]

    def test_store_error_propagates(self) -> None:
        store = StubStore(fail=RuntimeError("store down"))
        with pytest.raises(RuntimeError, match="store down"):
            GraphBuilder(store).build("R")

    def test_ids_strictly_increasing(self) -> None:
        store = StubStore(
            by_name={
                "R": _rows("R", ["A", "B", "C"]),
                "A": _rows("A", ["D", "E"]),
                "B": [RelationRow("F", "knows", "B")],
            }
        )
        traversal = GraphBuilder(store).build("R")
        ids = [p.id for p in traversal.graph.persons.values()]
        assert ids == sorted(ids)
        assert len(set(ids)) == len(ids)

    def test_shared_allocator_across_traversals(self) -> None:
        ids = IdAllocator()
        store = StubStore(by_name={"R": _rows("R", ["A"])})
        first = GraphBuilder(store, ids=ids).build("R")
        second = GraphBuilder(store, ids=ids).build("R")

        first_max = max(p.id for p in first.graph.persons.values())
        assert second.root.id > first_max

    def test_no_dangling_relations(self) -> None:
        store = StubStore(
            by_name={
                "R": _rows("R", ["A", "B"]) + [RelationRow("X", "knows", "Y")],
                "A": _rows("A", ["B", "C"]),
                "C": [RelationRow("D", "knows", "C")],
            }
        )
        traversal = GraphBuilder(store).build("R")
        _assert_no_dangling(traversal.graph)

    def test_invalid_max_depth(self) -> None:
        with pytest.raises(ValueError, match="max_depth"):
            GraphBuilder(StubStore(), max_depth=0)


class TestEarlyRestart:
    def test_narrow_root_broadens(self) -> None:
        """3 narrow rows, 6 broader rows: 7 nodes after the root expansion."""
        narrow = _rows("Root", ["A", "B", "C"])
        broad = _rows("Root", ["A", "B", "C", "D", "E", "F"])
        store = StubStore(by_mode={("Root", OE): narrow, ("Root", BE): broad})
        builder = GraphBuilder(store)
        graph, root = _rooted(builder, "Root")

        builder.expand(graph, root, False, False)

        assert len(graph) == 7
        assert store.calls[:2] == [("Root", OE), ("Root", BE)]
        assert len(graph.relations) == 9

    def test_escalates_to_broadest_filter(self) -> None:
        store = StubStore()
        builder = GraphBuilder(store)
        graph, root = _rooted(builder)

        builder.expand(graph, root, False, False)

        assert store.calls == [("R", OE), ("R", BE), ("R", BA)]

    def test_broadest_filter_does_not_repeat(self) -> None:
        store = StubStore()
        builder = GraphBuilder(store)
        graph, root = _rooted(builder)

        builder.expand(graph, root, True, True)

        assert store.calls == [("R", BA)]

    def test_non_root_never_broadens(self) -> None:
        store = StubStore()
        builder = GraphBuilder(store)
        graph, _ = _rooted(builder)
        child = graph.add(builder.new_person("A", 1), enqueue=False)

        builder.expand(graph, child, False, False)

        assert store.calls == [("A", OE)]


class TestFanoutGuard:
    def test_deep_hub_contributes_nothing(self) -> None:
        store = StubStore(by_name={"Deep": _rows("Deep", [f"X{i}" for i in range(21)])})
        builder = GraphBuilder(store)
        graph, _ = _rooted(builder)
        deep = graph.add(builder.new_person("Deep", 2), enqueue=False)

        stats = builder.expand(graph, deep, False, False)

        assert len(graph) == 2
        assert graph.relations == []
        assert stats.fanout_skips == 1

    def test_limit_is_exclusive(self) -> None:
        store = StubStore(by_name={"Deep": _rows("Deep", [f"X{i}" for i in range(20)])})
        builder = GraphBuilder(store)
        graph, _ = _rooted(builder)
        deep = graph.add(builder.new_person("Deep", 2), enqueue=False)

        builder.expand(graph, deep, False, False)

        assert len(graph) == 22

    def test_first_hop_hub_is_absorbed(self) -> None:
        store = StubStore(by_name={"Near": _rows("Near", [f"X{i}" for i in range(30)])})
        builder = GraphBuilder(store)
        graph, _ = _rooted(builder)
        near = graph.add(builder.new_person("Near", 1), enqueue=False)

        stats = builder.expand(graph, near, False, False)

        assert len(graph) == 32
        assert stats.fanout_skips == 0


class TestNodeCap:
    def test_single_expansion_may_overshoot(self) -> None:
        store = StubStore(by_name={"Hub": _rows("Hub", [f"P{i}" for i in range(150)])})
        traversal = GraphBuilder(store).build("Hub")

        assert len(traversal.graph) == 151
        assert store.calls == [("Hub", BE)]

    def test_drain_stops_once_cap_reached(self) -> None:
        by_name = {"R": _rows("R", [f"c{i}" for i in range(10)])}
        for i in range(10):
            by_name[f"c{i}"] = _rows(f"c{i}", [f"c{i}_g{j}" for j in range(20)])
        store = StubStore(by_name=by_name)

        traversal = GraphBuilder(store).build("R")

        # 11 after the root, +20 per child until the cap check trips at 111.
        assert len(traversal.graph) == 111
        assert [name for name, _ in store.calls] == ["R", "c0", "c1", "c2", "c3", "c4"]


class TestDistances:
    def test_new_neighbour_one_hop_out(self) -> None:
        store = StubStore(by_name={"R": _rows("R", ["A"])})
        builder = GraphBuilder(store)
        graph, root = _rooted(builder)

        builder.expand(graph, root, True, True)

        assert graph.get("A").distance_from_center == 1  # type: ignore[union-attr]

    def test_both_endpoints_new_tie_break(self) -> None:
        store = StubStore(by_name={"R": [RelationRow("X", "knows", "Y")]})
        builder = GraphBuilder(store)
        graph, root = _rooted(builder)

        builder.expand(graph, root, True, True)

        assert graph.get("X").distance_from_center == 2  # type: ignore[union-attr]
        assert graph.get("Y").distance_from_center == 3  # type: ignore[union-attr]
        assert root.distance_from_center == 0


class TestDrainPolicy:
    def test_sparse_graph_allows_non_entities(self) -> None:
        store = StubStore(by_name={"R": _rows("R", ["A"])})
        builder = GraphBuilder(store)
        graph, root = _rooted(builder)

        builder.expand(graph, root, True, True)

        assert store.calls == [("R", BA), ("A", OA)]

    def test_dense_graph_uses_entities_only(self) -> None:
        store = StubStore(by_name={"R": _rows("R", ["A", "B", "C", "D", "E"])})
        builder = GraphBuilder(store)
        graph, root = _rooted(builder)

        builder.expand(graph, root, True, True)

        assert store.calls[1] == ("A", OE)

    def test_aggressive_uses_broadest_filter_near_root(self) -> None:
        store = StubStore(by_name={"R": _rows("R", ["A", "B"])})
        builder = GraphBuilder(store)
        graph, root = _rooted(builder)

        builder.expand(graph, root, True, True, aggressive=True)

        assert store.calls == [("R", BA), ("A", BA), ("B", BA)]

    def test_aggressive_narrows_at_distance_three(self) -> None:
        store = StubStore()
        builder = GraphBuilder(store)
        graph, _ = _rooted(builder)
        far = graph.add(builder.new_person("Far", 3), enqueue=False)
        graph.add(builder.new_person("Next", 4))

        builder.expand(graph, far, False, False, aggressive=True)

        assert store.calls == [("Far", OE), ("Next", OE)]

    def test_aggressive_iteration_can_expand_two(self) -> None:
        """A fanned-out first expansion leaves the frontier for a second one."""
        store = StubStore(by_name={"D1": _rows("D1", [f"X{i}" for i in range(21)])})
        builder = GraphBuilder(store)
        graph, root = _rooted(builder)
        graph.add(builder.new_person("D1", 2))
        graph.add(builder.new_person("D2", 2))

        builder.expand(graph, root, True, True, aggressive=True)

        assert store.calls == [("R", BA), ("D1", BA), ("D2", OA)]

    def test_empty_frontier_after_first_branch(self) -> None:
        store = StubStore(by_name={"R": _rows("R", ["A"])})
        builder = GraphBuilder(store)
        graph, root = _rooted(builder)

        builder.expand(graph, root, True, True, aggressive=True)

        assert store.calls == [("R", BA), ("A", BA)]


class TestDepthCeiling:
    @staticmethod
    def _chain(length: int) -> StubStore:
        names = ["R", *(f"c{i}" for i in range(1, length + 1))]
        return StubStore(
            by_name={a: _rows(a, [b]) for a, b in zip(names, names[1:], strict=False)}
        )

    def test_deep_chain_without_recursion(self) -> None:
        store = self._chain(1500)
        builder = GraphBuilder(store, max_nodes=5000, max_depth=5000)
        graph, root = _rooted(builder)

        stats = builder.expand(graph, root, True, True)

        assert len(graph) == 1501
        assert stats.depth_exceeded is False
        assert stats.max_stack_depth >= 1500

    def test_ceiling_skips_and_flags(self) -> None:
        store = self._chain(10)
        builder = GraphBuilder(store, max_depth=3)
        graph, root = _rooted(builder)

        stats = builder.expand(graph, root, True, True)

        assert stats.depth_exceeded is True
        assert stats.depth_skips == 1
        assert stats.max_stack_depth == 3
        assert set(graph.persons) == {"R", "c1", "c2", "c3"}
        assert [name for name, _ in store.calls] == ["R", "c1", "c2"]

    def test_build_reports_depth_in_stats(self) -> None:
        traversal = GraphBuilder(self._chain(10), max_depth=2).build("R")
        assert traversal.stats.to_dict()["depth_exceeded"] is True
