"""Commands: explore the relation graph around an entity, complete names."""

from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING

import click

from wikigraph.commands._base import WikiCommand
from wikigraph.services.explore import ExploreService

if TYPE_CHECKING:
    from wikigraph.commands._context import AppContext


@click.command(
    cls=WikiCommand,
    examples="""\
  wikigraph explore "Nikola Tesla"
  wikigraph explore "Marie Curie" --max-nodes 50
  wikigraph explore "Ada Lovelace" --export ada.graphml
  wikigraph --json explore 'Alan Turing'""",
)
@click.argument("name")
@click.option("--max-nodes", type=click.IntRange(min=1), default=None, help="Soft node cap.")
@click.option(
    "--export",
    "export_path",
    type=click.Path(dir_okay=False, path_type=Path),
    default=None,
    help="Write the graph to a .graphml, .gexf or .json file.",
)
@click.pass_obj
def explore(app: AppContext, name: str, max_nodes: int | None, export_path: Path | None) -> None:
    """Build the relation graph around NAME."""
    service = ExploreService(app.engine, app.settings, ids=app.ids)
    if export_path is not None:
        app.emit(service.export(name, export_path, max_nodes=max_nodes))
    else:
        app.emit(service.explore(name, max_nodes=max_nodes))


@click.command(
    cls=WikiCommand,
    examples="""\
  wikigraph complete "Nikola"
  wikigraph -q complete 'Marie C'""",
)
@click.argument("prefix")
@click.pass_obj
def complete(app: AppContext, prefix: str) -> None:
    """List entity names starting with PREFIX."""
    app.emit(ExploreService(app.engine, app.settings, ids=app.ids).autocomplete(prefix))
