# ABOUTME: The `folio ls` command for listing books in the local catalog.
# ABOUTME: Displays a Rich table of imported books, optionally paged with --limit/--offset.

import click
from rich.console import Console

from folio.cli.options import get_service
from folio.cli.render import books_table
from folio.errors import FolioError

console = Console()


@click.command("ls")
@click.option(
    "--limit", "-n", type=click.IntRange(min=1), default=None, help="Show at most N books."
)
@click.option("--offset", type=click.IntRange(min=0), default=0, help="Skip the first N books.")
@click.pass_context
def ls(ctx: click.Context, limit: int | None, offset: int) -> None:
    """List books in the local catalog."""
    try:
        books = get_service(ctx).list_catalog(limit=limit, offset=offset)
    except FolioError as exc:
        console.print(f"[red]{exc.message}[/red]")
        raise SystemExit(1) from exc

    if not books:
        console.print("[yellow]No books in the catalog.[/yellow]")
        return

    console.print(books_table(books))
    console.print(f"\n[dim]{len(books)} book(s)[/dim]")
