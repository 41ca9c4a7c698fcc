# ABOUTME: The `folio add` command for importing a resolved book into the local catalog.
# ABOUTME: Later lookups of the same ISBN are served locally without outbound calls.

import click
from rich.console import Console

from folio.cli.options import get_service
from folio.cli.render import book_table
from folio.errors import FolioError

console = Console()


@click.command("add")
@click.argument("isbn")
@click.pass_context
def add(ctx: click.Context, isbn: str) -> None:
    """Resolve ISBN and store it in the local catalog."""
    service = get_service(ctx)
    try:
        book = service.import_book(isbn)
    except FolioError as exc:
        console.print(f"[red]{exc.message}[/red]")
        raise SystemExit(1) from exc

    console.print(f"[green]Added to catalog:[/green] {book.title}")
    console.print(book_table(book))
