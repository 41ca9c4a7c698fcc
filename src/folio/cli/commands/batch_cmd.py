# ABOUTME: The `folio batch` command for resolving many ISBNs at once.
# ABOUTME: Reads ISBNs from arguments or a file and prints per-item outcomes plus a summary.

from typing import TextIO

import click
from rich.console import Console
from rich.table import Table

from folio.cli.options import get_service
from folio.errors import FolioError

console = Console()


def _read_isbns(isbns: tuple[str, ...], source: TextIO | None) -> list[str]:
    items = list(isbns)
    if source is not None:
        for line in source:
            line = line.strip()
            if line and not line.startswith("#"):
                items.append(line)
    return items


@click.command("batch")
@click.argument("isbns", nargs=-1)
@click.option(
    "--file",
    "-f",
    "source",
    type=click.File("r"),
    default=None,
    help="Read ISBNs from a file, one per line ('-' for stdin).",
)
@click.pass_context
def batch(ctx: click.Context, isbns: tuple[str, ...], source: TextIO | None) -> None:
    """Look up several ISBNs. Exits 1 unless every ISBN resolved."""
    items = _read_isbns(isbns, source)
    if not items:
        console.print("[red]No ISBNs given.[/red]")
        raise SystemExit(1)

    service = get_service(ctx)
    try:
        result = service.batch_lookup(items)
    except FolioError as exc:
        console.print(f"[red]{exc.message}[/red]")
        raise SystemExit(1) from exc

    table = Table()
    table.add_column("ISBN", style="dim")
    table.add_column("Title", style="bold")
    table.add_column("Source")
    table.add_column("Problem")
    for item in result.results:
        if item.success and item.book is not None:
            table.add_row(item.isbn, item.book.title, item.source or "", "")
        else:
            table.add_row(item.isbn, "", "", f"[red]{item.reason}[/red] {item.error or ''}")
    console.print(table)

    summary = result.summary
    console.print(
        f"\n[bold]{summary['found']}[/bold] found, {summary['not_found']} not found, "
        f"{summary['invalid']} invalid, {summary['failed']} failed "
        f"(of {summary['total']})"
    )
    if summary["found"] != summary["total"]:
        raise SystemExit(1)
