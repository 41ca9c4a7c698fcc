# ABOUTME: Registry of operator-supplied metadata used when every other resolution path misses.
# ABOUTME: Entries are keyed by normalized ISBN and persist in the catalog database.

import logging
from dataclasses import replace

from folio.db.fallbacks import FallbackStore
from folio.errors import NotFoundError
from folio.isbn import normalize_isbn
from folio.metadata.types import SOURCE_FALLBACK, BookMetadata

logger = logging.getLogger(__name__)


class FallbackRegistry:
    """Stores and serves fallback BookMetadata.

    Every ISBN argument is normalized first, so "0-13-468599-7" and
    "9780134685991" address the same entry.
    """

    def __init__(self, store: FallbackStore) -> None:
        self._store = store

    def add_fallback(self, isbn: str, metadata: BookMetadata) -> BookMetadata:
        """Register (or overwrite) fallback metadata for an ISBN.

        Returns:
            The stored record, with its normalized ISBN and source "fallback".

        Raises:
            InvalidIsbnError: If ``isbn`` does not validate.
        """
        normalized = normalize_isbn(isbn)
        self._store.upsert(normalized, metadata)
        logger.info("Registered fallback metadata for %s", normalized)
        return replace(metadata, isbn=normalized, source=SOURCE_FALLBACK)

    def resolve(self, isbn: str) -> BookMetadata | None:
        """Exact-match lookup on a normalized ISBN."""
        return self._store.get(isbn)

    def remove_fallback(self, isbn: str) -> None:
        """Remove the entry for ``isbn``.

        Raises:
            InvalidIsbnError: If ``isbn`` does not validate.
            NotFoundError: If no fallback is registered for it.
        """
        normalized = normalize_isbn(isbn)
        if not self._store.delete(normalized):
            raise NotFoundError(f"No fallback registered for ISBN {normalized}")
        logger.info("Removed fallback metadata for %s", normalized)

    def list_fallbacks(self) -> list[BookMetadata]:
        return self._store.list_all()

    def stats(self) -> dict[str, object]:
        return {
            "count": self._store.count(),
            "isbns": [entry.isbn for entry in self._store.list_all()],
        }
