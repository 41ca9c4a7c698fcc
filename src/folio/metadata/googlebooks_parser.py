# ABOUTME: Parsing functions for Google Books API volume responses.
# ABOUTME: Maps volumeInfo objects into BookMetadata, rejecting unexpected shapes.

import re
from typing import Any

from folio.metadata.http import ProviderResponseError
from folio.metadata.types import Author, BookMetadata

_HTML_TAG_RE = re.compile(r"<[^>]+>")


def _strip_html(text: str) -> str:
    return _HTML_TAG_RE.sub("", text).strip()


def _volume_isbn(info: dict[str, Any]) -> str | None:
    """Prefer the ISBN_13 industry identifier, then ISBN_10."""
    found: dict[str, str] = {}
    for ident in info.get("industryIdentifiers") or []:
        if isinstance(ident, dict) and isinstance(ident.get("identifier"), str):
            found[str(ident.get("type"))] = ident["identifier"]
    return found.get("ISBN_13") or found.get("ISBN_10")


def parse_volume(item: Any, isbn: str | None = None) -> BookMetadata:
    """Convert one Google Books volume into BookMetadata.

    Args:
        item: A single entry from the ``items`` array.
        isbn: The requested ISBN; when given it overrides the volume's own.

    Raises:
        ProviderResponseError: If the volume has no volumeInfo or title.
    """
    if not isinstance(item, dict) or not isinstance(item.get("volumeInfo"), dict):
        raise ProviderResponseError("Google Books volume has no volumeInfo")
    info = item["volumeInfo"]

    title = info.get("title")
    if not isinstance(title, str) or not title.strip():
        raise ProviderResponseError("Google Books volume has no title")
    subtitle = info.get("subtitle")
    if isinstance(subtitle, str) and subtitle.strip():
        title = f"{title.strip()}: {subtitle.strip()}"

    description = info.get("description")
    images = info.get("imageLinks") if isinstance(info.get("imageLinks"), dict) else {}
    cover = images.get("thumbnail") or images.get("smallThumbnail")
    pages = info.get("pageCount")
    published = info.get("publishedDate")

    return BookMetadata(
        title=title.strip(),
        isbn=isbn or _volume_isbn(info),
        authors=tuple(
            Author.from_full_name(name) for name in info.get("authors") or [] if isinstance(name, str)
        ),
        categories=tuple(c for c in info.get("categories") or [] if isinstance(c, str)),
        edition_date=published if isinstance(published, str) else None,
        publisher=info.get("publisher") if isinstance(info.get("publisher"), str) else None,
        language=info.get("language") if isinstance(info.get("language"), str) else None,
        description=_strip_html(description) if isinstance(description, str) else None,
        cover_url=cover.replace("http://", "https://") if isinstance(cover, str) else None,
        page_count=pages if isinstance(pages, int) else None,
        source="googlebooks",
    )


def parse_volumes_response(data: Any) -> list[dict[str, Any]]:
    """Return the ``items`` list of a volumes response (empty when totalItems is 0).

    Raises:
        ProviderResponseError: If the payload is not a volumes listing.
    """
    if not isinstance(data, dict) or "totalItems" not in data:
        raise ProviderResponseError("Google Books response is not a volumes listing")
    items = data.get("items") or []
    if not isinstance(items, list):
        raise ProviderResponseError("Google Books items is not a list")
    return items
