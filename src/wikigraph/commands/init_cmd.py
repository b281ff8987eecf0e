"""Command: create the relation store tables."""

from __future__ import annotations

from typing import TYPE_CHECKING

import click

from wikigraph.commands._base import WikiCommand
from wikigraph.services.store import StoreService

if TYPE_CHECKING:
    from wikigraph.commands._context import AppContext


@click.command(
    "init",
    cls=WikiCommand,
    examples="""\
  wikigraph init
  wikigraph --db sqlite:///dump.db init""",
)
@click.pass_obj
def init_cmd(app: AppContext) -> None:
    """Create the store tables if they do not exist yet."""
    app.emit(StoreService(app.engine, app.settings).init())
