# ABOUTME: Rich rendering helpers shared by CLI commands.
# ABOUTME: Turns BookMetadata into key/value and summary tables.

from rich.table import Table

from folio.metadata.types import BookMetadata


def book_table(book: BookMetadata) -> Table:
    """Key/value table with every populated field of ``book``."""
    table = Table(show_header=False, box=None, pad_edge=False)
    table.add_column("Field", style="bold", width=14)
    table.add_column("Value")

    table.add_row("Title", book.title)
    table.add_row("Author", book.author or "unknown")
    if book.isbn:
        table.add_row("ISBN", book.isbn)
    if book.publisher:
        table.add_row("Publisher", book.publisher)
    if book.edition_date:
        table.add_row("Published", book.edition_date)
    if book.edition_number:
        table.add_row("Edition", str(book.edition_number))
    if book.language:
        table.add_row("Language", book.language)
    if book.page_count:
        table.add_row("Pages", str(book.page_count))
    if book.categories:
        table.add_row("Categories", ", ".join(book.categories))
    if book.description:
        table.add_row("Description", book.description)
    table.add_row("Source", book.source)
    return table


def books_table(books: list[BookMetadata]) -> Table:
    table = Table()
    table.add_column("ISBN", style="dim")
    table.add_column("Title", style="bold")
    table.add_column("Author")
    table.add_column("Published", width=10)
    table.add_column("Source")
    for book in books:
        table.add_row(
            book.isbn or "",
            book.title,
            book.author or "[dim]unknown[/dim]",
            book.edition_date or "",
            book.source,
        )
    return table
