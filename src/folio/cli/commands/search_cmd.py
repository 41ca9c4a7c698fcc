# ABOUTME: The `folio search` command for title search against external providers.
# ABOUTME: Prints matching books in a table; results are not cached.

import click
from rich.console import Console

from folio.cli.options import get_service
from folio.cli.render import books_table
from folio.errors import FolioError

console = Console()


@click.command("search")
@click.argument("query")
@click.option("--limit", "-n", type=int, default=10, show_default=True)
@click.pass_context
def search(ctx: click.Context, query: str, limit: int) -> None:
    """Search providers for books whose title matches QUERY."""
    service = get_service(ctx)
    try:
        results = service.search_by_title(query, limit)
    except FolioError as exc:
        console.print(f"[red]{exc.message}[/red]")
        raise SystemExit(1) from exc

    if not results:
        console.print("[yellow]No results found.[/yellow]")
        return

    console.print(books_table(results))
    console.print(f"\n[dim]{len(results)} result(s)[/dim]")
