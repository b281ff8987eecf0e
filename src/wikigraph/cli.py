"""Root CLI group for wikigraph with global flags and command registration."""

from __future__ import annotations

import click

from wikigraph import __version__
from wikigraph.commands import register_commands
from wikigraph.commands._context import AppContext
from wikigraph.config.settings import WikiSettings


@click.group(invoke_without_command=True)
@click.version_option(version=__version__, prog_name="wikigraph")
@click.option("--json", "json_output", is_flag=True, help="Structured JSON output.")
@click.option("-q", "--quiet", is_flag=True, help="Minimal output.")
@click.option("-v", "--verbose", is_flag=True, help="Detailed output with debug logs.")
@click.option("--log-json", is_flag=True, help="Structured JSON log output to stderr.")
@click.option("-c", "--config", "config_path", default=None, help="Override config file path.")
@click.option("--db", "db_url", default=None, help="Relation store URL (SQLAlchemy syntax).")
@click.pass_context
def cli(
    ctx: click.Context,
    json_output: bool,
    quiet: bool,
    verbose: bool,
    log_json: bool,
    config_path: str | None,
    db_url: str | None,
) -> None:
    """wikigraph — explore relation graphs extracted from an encyclopedia dump."""
    settings = WikiSettings.from_cli(
        config_path=config_path,
        db_url=db_url,
        json_output=json_output,
        quiet=quiet,
        verbose=verbose,
        log_json=log_json,
    )
    app = AppContext(settings)
    ctx.obj = app
    ctx.call_on_close(app.close)
    if ctx.invoked_subcommand is None:
        click.echo(ctx.get_help())


register_commands(cli)
