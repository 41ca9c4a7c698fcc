# ABOUTME: The `folio rm` command for deleting a book from the local catalog.
# ABOUTME: Later lookups of that ISBN go back to the external providers.

import click
from rich.console import Console

from folio.cli.options import get_service
from folio.errors import FolioError

console = Console()


@click.command("rm")
@click.argument("isbn")
@click.pass_context
def rm(ctx: click.Context, isbn: str) -> None:
    """Remove ISBN from the local catalog."""
    try:
        removed = get_service(ctx).remove_book(isbn)
    except FolioError as exc:
        console.print(f"[red]{exc.message}[/red]")
        raise SystemExit(1) from exc
    console.print(f"[green]Removed from catalog:[/green] {removed}")
