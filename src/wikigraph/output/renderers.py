"""Operation-specific Rich renderers for ServiceResult.

Renderers are dispatched by ``result.op`` in :func:`render_result`.
Unknown ops fall through to a generic key-value renderer.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from rich.table import Table
from rich.text import Text

from wikigraph.output.console import create_console, get_output

if TYPE_CHECKING:
    from rich.console import Console

    from wikigraph.services.result import ServiceResult


# ── Public API ────────────────────────────────────────────────────────


def render_result(result: ServiceResult, *, verbose: bool = False) -> str:
    """Render a ServiceResult to a styled string via Rich."""
    console = create_console()

    if result.ok:
        renderer = _OP_RENDERERS.get(result.op, _render_generic)
        renderer(result, console, verbose=verbose)
    else:
        _render_error(result, console, verbose=verbose)

    return get_output(console).rstrip("\n")


def render_quiet(result: ServiceResult) -> str:
    """Render minimal output for ``--quiet`` mode."""
    if not result.ok:
        msg = result.error.message if result.error else "Unknown error"
        return f"ERROR: {result.op} — {msg}"

    if result.op == "explore":
        nodes = result.data.get("nodes", [])
        return "\n".join(str(node.get("display_name", "")) for node in nodes)
    if result.op == "autocomplete":
        return "\n".join(str(item) for item in result.data.get("items", []))
    if result.op in ("normalize", "denormalize"):
        return str(result.data.get("output", ""))

    return f"OK: {result.op}"


# ── Helpers ───────────────────────────────────────────────────────────


def _status_line(console: Console, result: ServiceResult) -> None:
    console.print(Text("OK", style="wiki.ok"), Text(f"  {result.op}", style="wiki.op"))


def _field(console: Console, key: str, value: Any) -> None:
    k = Text(f"  {key}: ", style="wiki.key")
    if key == "id" or key.endswith("_id"):
        v = Text(str(value), style="wiki.id")
    elif key in ("root", "display_name"):
        v = Text(str(value), style="wiki.name")
    else:
        v = Text(str(value))
    console.print(k, v)


def _node_table(nodes: list[dict[str, Any]]) -> Table:
    table = Table(show_header=True, show_lines=False, pad_edge=False, expand=False)
    table.add_column("ID", style="wiki.id", justify="right", no_wrap=True)
    table.add_column("Name")
    table.add_column("Distance", justify="right")
    table.add_column("Born", style="wiki.date")
    table.add_column("Died", style="wiki.date")

    for node in nodes:
        distance = node.get("distance", "")
        name_style = "wiki.root" if distance == 0 else "wiki.name"
        table.add_row(
            str(node.get("id", "")),
            Text(str(node.get("display_name", "")), style=name_style),
            str(distance),
            node.get("birth_date") or "",
            node.get("death_date") or "",
        )
    return table


def _edge_table(edges: list[dict[str, Any]]) -> Table:
    table = Table(show_header=True, show_lines=False, pad_edge=False, expand=False)
    table.add_column("From")
    table.add_column("Relation", style="wiki.label")
    table.add_column("To")
    for edge in edges:
        table.add_row(
            str(edge.get("source", "")),
            str(edge.get("label", "")),
            str(edge.get("target", "")),
        )
    return table


# ── Error renderer ────────────────────────────────────────────────────


def _render_error(result: ServiceResult, console: Console, *, verbose: bool = False) -> None:
    err = result.error
    msg = err.message if err else "Unknown error"
    console.print(
        Text("ERROR", style="wiki.error"),
        Text(f"  {result.op}", style="wiki.op"),
        Text(" — "),
        msg,
    )
    if verbose and err and err.detail:
        for key, value in err.detail.items():
            _field(console, key, value)


# ── Operation renderers ───────────────────────────────────────────────


def _render_generic(result: ServiceResult, console: Console, *, verbose: bool = False) -> None:
    _status_line(console, result)
    for key, value in result.data.items():
        _field(console, key, value)


def _render_explore(result: ServiceResult, console: Console, *, verbose: bool = False) -> None:
    data = result.data
    _status_line(console, result)
    if data.get("root") is None:
        console.print(f"  {data.get('summary', '')}")
        return

    _field(console, "root", data.get("display_name"))
    _field(console, "nodes", data.get("count", 0))
    _field(console, "edges", data.get("edge_count", 0))
    console.print(f"  {data.get('summary', '')}")
    console.print()
    console.print(_node_table(data.get("nodes", [])))

    if verbose:
        console.print()
        console.print(_edge_table(data.get("edges", [])))
        for key, value in (data.get("stats") or {}).items():
            _field(console, key, value)


def _render_autocomplete(
    result: ServiceResult, console: Console, *, verbose: bool = False
) -> None:
    _status_line(console, result)
    items = result.data.get("items", [])
    if not items:
        console.print(Text("  No matching names.", style="dim"))
        return
    for item in items:
        console.print(Text(f"  {item}"))


_OP_RENDERERS: dict[str, Any] = {
    "explore": _render_explore,
    "autocomplete": _render_autocomplete,
}
