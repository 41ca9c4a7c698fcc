# ABOUTME: The `folio format` command for printing an ISBN in a display style.
# ABOUTME: Supports hyphenated, clean, isbn10, and isbn13 output.

import click
from rich.console import Console

from folio.errors import FolioError
from folio.isbn import FORMAT_STYLES, format_isbn

console = Console()


@click.command("format")
@click.argument("isbn")
@click.option(
    "--style",
    "-s",
    type=click.Choice(FORMAT_STYLES),
    default="hyphenated",
    show_default=True,
)
def format_(isbn: str, style: str) -> None:
    """Print ISBN in the chosen style."""
    try:
        click.echo(format_isbn(isbn, style))
    except FolioError as exc:
        console.print(f"[red]{exc.message}[/red]")
        raise SystemExit(1) from exc
