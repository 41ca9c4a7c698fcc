# ABOUTME: Parsing functions for Open Library API JSON responses.
# ABOUTME: Converts OL-specific structures into typed intermediates and BookMetadata.

import re
from dataclasses import dataclass, field
from typing import Any

from folio.metadata.http import ProviderResponseError
from folio.metadata.types import Author, BookMetadata

_COVERS_BASE_URL = "https://covers.openlibrary.org/b/isbn"
_EDITION_DIGITS_RE = re.compile(r"(\d+)")
_EDITION_WORDS = {
    "first": 1,
    "second": 2,
    "third": 3,
    "fourth": 4,
    "fifth": 5,
    "sixth": 6,
    "seventh": 7,
    "eighth": 8,
    "ninth": 9,
    "tenth": 10,
}
_MAX_CATEGORIES = 10


@dataclass
class OpenLibraryEdition:
    """Edition-level fields pulled out of an /isbn/{isbn}.json response."""

    title: str
    isbn: str | None = None
    publisher: str | None = None
    language: str | None = None
    edition_date: str | None = None
    edition_number: int | None = None
    page_count: int | None = None
    works_key: str | None = None
    author_keys: list[str] = field(default_factory=list)


@dataclass
class OpenLibraryWork:
    """Work-level fields pulled out of a /works/{id}.json response."""

    description: str | None = None
    subjects: list[str] = field(default_factory=list)
    author_keys: list[str] = field(default_factory=list)


def _require_dict(data: Any, what: str) -> dict[str, Any]:
    if not isinstance(data, dict):
        raise ProviderResponseError(f"Open Library {what} response is not an object")
    return data


def _first_str(values: Any) -> str | None:
    if isinstance(values, list) and values and isinstance(values[0], str):
        return values[0]
    return None


def parse_edition_number(edition_name: Any) -> int | None:
    """Extract an edition number from strings like "2nd ed." or "Third edition"."""
    if not isinstance(edition_name, str):
        return None
    match = _EDITION_DIGITS_RE.search(edition_name)
    if match:
        return int(match.group(1))
    for word in edition_name.lower().split():
        if word in _EDITION_WORDS:
            return _EDITION_WORDS[word]
    return None


def parse_isbn_response(data: Any) -> OpenLibraryEdition:
    """Parse an Open Library ISBN endpoint response.

    The ISBN endpoint returns edition-level data with fields like
    title, publishers, isbn_13, languages, works, etc.

    Raises:
        ProviderResponseError: If the payload is not an object or has no title.
    """
    data = _require_dict(data, "ISBN")
    title = data.get("title")
    if not isinstance(title, str) or not title.strip():
        raise ProviderResponseError("Open Library edition has no title")

    subtitle = data.get("subtitle")
    if isinstance(subtitle, str) and subtitle.strip():
        title = f"{title.strip()}: {subtitle.strip()}"

    isbn = _first_str(data.get("isbn_13")) or _first_str(data.get("isbn_10"))

    language = None
    languages = data.get("languages")
    if isinstance(languages, list) and languages and isinstance(languages[0], dict):
        lang_key = languages[0].get("key", "")
        language = lang_key.rsplit("/", 1)[-1] if "/" in lang_key else lang_key or None

    works_key = None
    works = data.get("works")
    if isinstance(works, list) and works and isinstance(works[0], dict):
        works_key = works[0].get("key") or None

    author_keys = [
        entry["key"]
        for entry in data.get("authors") or []
        if isinstance(entry, dict) and isinstance(entry.get("key"), str)
    ]

    pages = data.get("number_of_pages")
    publish_date = data.get("publish_date")

    return OpenLibraryEdition(
        title=title.strip(),
        isbn=isbn,
        publisher=_first_str(data.get("publishers")),
        language=language,
        edition_date=publish_date if isinstance(publish_date, str) else None,
        edition_number=parse_edition_number(data.get("edition_name")),
        page_count=pages if isinstance(pages, int) else None,
        works_key=works_key,
        author_keys=author_keys,
    )


def parse_works_response(data: Any) -> OpenLibraryWork:
    """Parse an Open Library Works response.

    Handles the OL quirk where description can be either a plain string
    or a dict with {"type": ..., "value": "actual text"}. Works responses
    store authors as [{author: {key: "/authors/..."}}].
    """
    data = _require_dict(data, "works")

    description = None
    desc = data.get("description")
    if isinstance(desc, str):
        description = desc
    elif isinstance(desc, dict) and isinstance(desc.get("value"), str):
        description = desc["value"]

    subjects = [s for s in data.get("subjects") or [] if isinstance(s, str)]

    author_keys = []
    for entry in data.get("authors") or []:
        if not isinstance(entry, dict):
            continue
        author_ref = entry.get("author") or {}
        key = author_ref.get("key") if isinstance(author_ref, dict) else None
        if isinstance(key, str) and key:
            author_keys.append(key)

    return OpenLibraryWork(
        description=description,
        subjects=subjects[:_MAX_CATEGORIES],
        author_keys=author_keys,
    )


def parse_author_name(data: Any) -> str | None:
    """Extract the author name from an Open Library Author response."""
    if not isinstance(data, dict):
        return None
    name = data.get("name") or data.get("personal_name")
    return name if isinstance(name, str) and name.strip() else None


def build_metadata(
    edition: OpenLibraryEdition,
    requested_isbn: str,
    authors: list[str],
    work: OpenLibraryWork | None = None,
) -> BookMetadata:
    """Merge edition, work, and author data into one BookMetadata."""
    return BookMetadata(
        title=edition.title,
        isbn=requested_isbn,
        authors=tuple(Author.from_full_name(name) for name in authors),
        categories=tuple(work.subjects) if work else (),
        edition_number=edition.edition_number,
        edition_date=edition.edition_date,
        publisher=edition.publisher,
        language=edition.language,
        description=work.description if work else None,
        cover_url=build_cover_url(requested_isbn),
        page_count=edition.page_count,
        source="openlibrary",
    )


def parse_search_results(data: Any) -> list[BookMetadata]:
    """Parse an Open Library Search API response into a list of BookMetadata.

    Docs without a title are skipped rather than failing the whole search.
    """
    data = _require_dict(data, "search")
    docs = data.get("docs")
    if not isinstance(docs, list):
        raise ProviderResponseError("Open Library search response has no docs list")

    results: list[BookMetadata] = []
    for doc in docs:
        if not isinstance(doc, dict):
            continue
        title = doc.get("title")
        if not isinstance(title, str) or not title.strip():
            continue

        isbns = [i for i in doc.get("isbn") or [] if isinstance(i, str)]
        isbn = next((i for i in isbns if len(i) == 13), isbns[0] if isbns else None)
        year = doc.get("first_publish_year")

        results.append(
            BookMetadata(
                title=title.strip(),
                isbn=isbn,
                authors=tuple(
                    Author.from_full_name(name)
                    for name in doc.get("author_name") or []
                    if isinstance(name, str)
                ),
                categories=tuple(
                    s for s in (doc.get("subject") or [])[:_MAX_CATEGORIES] if isinstance(s, str)
                ),
                edition_date=str(year) if isinstance(year, int) else None,
                publisher=_first_str(doc.get("publisher")),
                language=_first_str(doc.get("language")),
                cover_url=build_cover_url(isbn) if isbn else None,
                source="openlibrary",
            )
        )

    return results


def build_cover_url(isbn: str, size: str = "L") -> str:
    """Build an Open Library cover image URL for a given ISBN.

    Args:
        isbn: The ISBN to look up cover art for.
        size: Image size: "S" (small), "M" (medium), or "L" (large).
    """
    return f"{_COVERS_BASE_URL}/{isbn}-{size}.jpg"
