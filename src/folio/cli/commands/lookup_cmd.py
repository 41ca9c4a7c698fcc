# ABOUTME: The `folio lookup` command for resolving a single ISBN.
# ABOUTME: Tries the local catalog, external providers, then fallbacks, and prints the result.

import click
from rich.console import Console

from folio.cli.options import get_service
from folio.cli.render import book_table
from folio.errors import FolioError

console = Console()


@click.command("lookup")
@click.argument("isbn")
@click.pass_context
def lookup(ctx: click.Context, isbn: str) -> None:
    """Look up book metadata for ISBN."""
    service = get_service(ctx)
    try:
        result = service.lookup_book(isbn)
    except FolioError as exc:
        console.print(f"[red]{exc.message}[/red]")
        raise SystemExit(1) from exc

    if result.book is None:
        console.print(f"[yellow]No book found for {result.isbn} ({result.reason}).[/yellow]")
        if result.error:
            console.print(f"[dim]{result.error}[/dim]")
        raise SystemExit(1)

    console.print(book_table(result.book))
    console.print(f"\n[dim]Resolved in {result.response_time_ms:g}ms[/dim]")
