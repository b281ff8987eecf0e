"""Command group: convert names between display and store encodings."""

from __future__ import annotations

from typing import TYPE_CHECKING

import click

from wikigraph.commands._base import WikiGroup
from wikigraph.domain.names import denormalize, normalize
from wikigraph.services.result import ServiceResult

if TYPE_CHECKING:
    from wikigraph.commands._context import AppContext

_NAMES_EXAMPLES = """\
  wikigraph names normalize 'Nikola_Tesla'
  wikigraph names normalize 'Fr%C3%A9d%C3%A9ric_Chopin'
  wikigraph names denormalize 'Antonín Dvořák'"""


@click.group(cls=WikiGroup, examples=_NAMES_EXAMPLES)
def names() -> None:
    """Convert entity names between display and store encodings."""


@names.command(name="normalize")
@click.argument("text")
@click.pass_obj
def normalize_cmd(app: AppContext, text: str) -> None:
    """Decode a store-native name into display form."""
    app.emit(
        ServiceResult(ok=True, op="normalize", data={"input": text, "output": normalize(text)})
    )


@names.command(name="denormalize")
@click.argument("text")
@click.pass_obj
def denormalize_cmd(app: AppContext, text: str) -> None:
    """Encode a display name the way the store spells it."""
    app.emit(
        ServiceResult(ok=True, op="denormalize", data={"input": text, "output": denormalize(text)})
    )
