# ABOUTME: The `folio fallback` command group for managing operator-supplied metadata.
# ABOUTME: Subcommands add, rm, and ls operate on the persistent fallback registry.

import click
from rich.console import Console

from folio.cli.options import get_service
from folio.cli.render import books_table
from folio.errors import FolioError
from folio.metadata.types import Author, BookMetadata

console = Console()


@click.group("fallback")
def fallback() -> None:
    """Manage fallback metadata used when providers cannot resolve an ISBN."""


@fallback.command("add")
@click.argument("isbn")
@click.option("--title", "-t", required=True)
@click.option("--author", "-a", "authors", multiple=True, help="Repeat for several authors.")
@click.option("--publisher")
@click.option("--date", "edition_date", help="Publication date, e.g. 2018-01-06.")
@click.option("--language")
@click.option("--category", "categories", multiple=True)
@click.option("--pages", "page_count", type=click.IntRange(min=1))
@click.pass_context
def add_fallback(
    ctx: click.Context,
    isbn: str,
    title: str,
    authors: tuple[str, ...],
    publisher: str | None,
    edition_date: str | None,
    language: str | None,
    categories: tuple[str, ...],
    page_count: int | None,
) -> None:
    """Register fallback metadata for ISBN (overwrites an existing entry)."""
    metadata = BookMetadata(
        title=title,
        authors=tuple(Author.from_full_name(a) for a in authors),
        categories=categories,
        publisher=publisher,
        edition_date=edition_date,
        language=language,
        page_count=page_count,
    )
    try:
        stored = get_service(ctx).add_fallback(isbn, metadata)
    except FolioError as exc:
        console.print(f"[red]{exc.message}[/red]")
        raise SystemExit(1) from exc
    console.print(f"[green]Fallback registered for {stored.isbn}:[/green] {stored.title}")


@fallback.command("rm")
@click.argument("isbn")
@click.pass_context
def remove_fallback(ctx: click.Context, isbn: str) -> None:
    """Remove the fallback entry for ISBN."""
    try:
        get_service(ctx).remove_fallback(isbn)
    except FolioError as exc:
        console.print(f"[red]{exc.message}[/red]")
        raise SystemExit(1) from exc
    console.print(f"[green]Fallback removed for {isbn}.[/green]")


@fallback.command("ls")
@click.pass_context
def list_fallbacks(ctx: click.Context) -> None:
    """List registered fallback entries."""
    books = get_service(ctx).list_fallbacks()
    if not books:
        console.print("[yellow]No fallback entries.[/yellow]")
        return
    console.print(books_table(books))
    console.print(f"\n[dim]{len(books)} entr{'y' if len(books) == 1 else 'ies'}[/dim]")
