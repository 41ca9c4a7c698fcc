# ABOUTME: Converts between BookMetadata and SQLite row dictionaries.
# ABOUTME: Handles JSON serialization for the authors and categories columns.

import json
from typing import Any

from folio.metadata.types import Author, BookMetadata


def _authors_to_json(authors: tuple[Author, ...]) -> str:
    return json.dumps(
        [{"name": a.name, "surname": a.surname, "nationality": a.nationality} for a in authors]
    )


def _authors_from_json(raw: str | None) -> tuple[Author, ...]:
    if not raw:
        return ()
    return tuple(
        Author(
            name=entry.get("name", ""),
            surname=entry.get("surname", ""),
            nationality=entry.get("nationality"),
        )
        for entry in json.loads(raw)
    )


def metadata_to_row(metadata: BookMetadata, isbn: str) -> dict[str, Any]:
    """Convert a BookMetadata instance to a dict suitable for INSERT.

    ``isbn`` is the normalized key and wins over ``metadata.isbn``.
    """
    return {
        "isbn": isbn,
        "title": metadata.title,
        "authors": _authors_to_json(metadata.authors),
        "categories": json.dumps(list(metadata.categories)),
        "edition_number": metadata.edition_number,
        "edition_date": metadata.edition_date,
        "publisher": metadata.publisher,
        "language": metadata.language,
        "description": metadata.description,
        "cover_url": metadata.cover_url,
        "page_count": metadata.page_count,
    }


def row_to_metadata(row: Any, source: str) -> BookMetadata:
    """Convert a database row (dict-like) back to a BookMetadata instance."""
    return BookMetadata(
        title=row["title"],
        isbn=row["isbn"],
        authors=_authors_from_json(row["authors"]),
        categories=tuple(json.loads(row["categories"])) if row["categories"] else (),
        edition_number=row["edition_number"],
        edition_date=row["edition_date"],
        publisher=row["publisher"],
        language=row["language"],
        description=row["description"],
        cover_url=row["cover_url"],
        page_count=row["page_count"],
        source=source,
    )
