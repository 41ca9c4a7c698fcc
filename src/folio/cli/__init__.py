# ABOUTME: CLI package for Folio, built on Click.
# ABOUTME: Defines the root command group, global options, and registers subcommands.

from pathlib import Path

import click

from folio.cli.commands import (
    add_cmd,
    batch_cmd,
    fallback_cmd,
    format_cmd,
    lookup_cmd,
    ls_cmd,
    rm_cmd,
    search_cmd,
    serve_cmd,
    validate_cmd,
)
from folio.cli.options import db_option
from folio.logging_config import configure_logging


@click.group()
@click.version_option(package_name="folio")
@db_option
@click.option("-v", "--verbose", is_flag=True, help="Show debug logging.")
@click.pass_context
def cli(ctx: click.Context, db_path: Path | None, verbose: bool) -> None:
    """Folio - resolve ISBNs to book metadata."""
    obj = ctx.ensure_object(dict)
    obj["db_path"] = db_path
    configure_logging("DEBUG" if verbose else "WARNING")


cli.add_command(lookup_cmd.lookup)
cli.add_command(validate_cmd.validate)
cli.add_command(format_cmd.format_)
cli.add_command(search_cmd.search)
cli.add_command(batch_cmd.batch)
cli.add_command(add_cmd.add)
cli.add_command(ls_cmd.ls)
cli.add_command(rm_cmd.rm)
cli.add_command(fallback_cmd.fallback)
cli.add_command(serve_cmd.serve)
