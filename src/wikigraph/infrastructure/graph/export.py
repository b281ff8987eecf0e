"""Graph export via NetworkX.

Converts a traversal :class:`~wikigraph.domain.graph.Graph` into a
``MultiDiGraph`` (parallel relations are kept) and writes it in one of
the formats NetworkX understands. Node keys are person ids so names with
odd characters never collide with format-specific quoting rules.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import TYPE_CHECKING, Any, TypeAlias

import networkx as nx

if TYPE_CHECKING:
    from wikigraph.domain.graph import Graph

_Graph: TypeAlias = nx.MultiDiGraph

EXPORT_FORMATS: dict[str, str] = {
    ".graphml": "graphml",
    ".gexf": "gexf",
    ".json": "node-link",
}


def _drop_none(attrs: dict[str, Any]) -> dict[str, Any]:
    # GraphML and GEXF writers reject None values.
    return {k: v for k, v in attrs.items() if v is not None}


def to_networkx(graph: Graph) -> _Graph:
    """Build a MultiDiGraph with one node per person and one edge per relation."""
    g: _Graph = nx.MultiDiGraph()
    for person in graph.persons.values():
        attrs = person.to_dict()
        node_id = attrs.pop("id")
        g.add_node(node_id, **_drop_none(attrs))
    for relation in graph.relations:
        g.add_edge(relation.source.id, relation.target.id, label=relation.label)
    return g


def export_format(path: Path) -> str | None:
    """Return the export format implied by *path*'s suffix, if supported."""
    return EXPORT_FORMATS.get(path.suffix.lower())


def write_graph(graph: Graph, path: Path) -> str:
    """Write *graph* to *path* in the format implied by its suffix.

    Returns the format name.

    Raises:
        ValueError: If the suffix is not one of :data:`EXPORT_FORMATS`.
    """
    fmt = export_format(path)
    if fmt is None:
        msg = (
            f"Unsupported export format {path.suffix!r}; "
            f"expected one of {sorted(EXPORT_FORMATS)}"
        )
        raise ValueError(msg)

    g = to_networkx(graph)
    path.parent.mkdir(parents=True, exist_ok=True)
    if fmt == "graphml":
        nx.write_graphml(g, path)
    elif fmt == "gexf":
        nx.write_gexf(g, path)
    else:
        data = nx.node_link_data(g, edges="edges")
        path.write_text(json.dumps(data, indent=2, ensure_ascii=False), encoding="utf-8")
    return fmt
