"""AppContext — shared Click context for all commands.

Created once by the root CLI group and handed to subcommands via
``@click.pass_obj``. Owns the lazily-created store engine and the id
allocator shared by every traversal in this process.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

import click

from wikigraph.config.logging import configure_logging
from wikigraph.domain.graph import IdAllocator
from wikigraph.output.formatters import OutputSettings, format_result

if TYPE_CHECKING:
    from sqlalchemy.engine import Engine

    from wikigraph.config.settings import WikiSettings
    from wikigraph.services.result import ServiceResult


class AppContext:
    """State flowing through Click's command hierarchy.

    The engine is created on first use so ``--help`` and ``--version``
    never touch the store.
    """

    def __init__(self, settings: WikiSettings) -> None:
        self.settings = settings
        self.ids = IdAllocator()
        self._engine: Engine | None = None

        configure_logging(verbose=settings.verbose, log_json=settings.log_json)

    @property
    def engine(self) -> Engine:
        if self._engine is None:
            from wikigraph.infrastructure.database.engine import create_db_engine

            self._engine = create_db_engine(self.settings.store.url)
        return self._engine

    def close(self) -> None:
        if self._engine is not None:
            self._engine.dispose()
            self._engine = None

    def emit(self, result: ServiceResult) -> None:
        """Print a ServiceResult with the right stream and exit code.

        * Success: stdout; warnings go to stderr unless in JSON mode.
        * Failure: stderr, exit code 1.
        """
        settings = OutputSettings(
            json_output=self.settings.json_output,
            quiet=self.settings.quiet,
            verbose=self.settings.verbose,
        )
        output = format_result(result, settings=settings)
        if result.ok:
            click.echo(output)
            if not settings.json_output:
                for warning in result.warnings:
                    click.echo(f"WARNING: {warning}", err=True)
        else:
            click.echo(output, err=True)
            raise SystemExit(1)
