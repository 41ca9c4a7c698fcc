# ABOUTME: The `folio validate` command for checking ISBN checksums.
# ABOUTME: Validates one or more ISBNs and shows their normalized 13-digit form.

import click
from rich.console import Console
from rich.table import Table

from folio.isbn import validate_isbn

console = Console()


@click.command("validate")
@click.argument("isbns", nargs=-1, required=True)
def validate(isbns: tuple[str, ...]) -> None:
    """Validate one or more ISBNs. Exits 1 if any is invalid."""
    table = Table()
    table.add_column("Input")
    table.add_column("Valid", width=5)
    table.add_column("ISBN-13")
    table.add_column("Error")

    all_valid = True
    for raw in isbns:
        result = validate_isbn(raw)
        all_valid = all_valid and result.is_valid
        table.add_row(
            raw,
            "[green]yes[/green]" if result.is_valid else "[red]no[/red]",
            result.normalized_isbn or "",
            result.error or "",
        )

    console.print(table)
    if not all_valid:
        raise SystemExit(1)
