"""Subcommand modules for wikigraph.

Provides register_commands() which uses deferred imports to keep
``wikigraph --help`` fast.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    import click


def register_commands(cli: click.Group) -> None:
    """Register command groups and standalone commands on the root group."""
    # --- Groups ---
    from wikigraph.commands.names import names

    cli.add_command(names)

    # --- Standalone commands ---
    from wikigraph.commands.explore import complete, explore
    from wikigraph.commands.init_cmd import init_cmd

    cli.add_command(explore)
    cli.add_command(complete)
    cli.add_command(init_cmd)
