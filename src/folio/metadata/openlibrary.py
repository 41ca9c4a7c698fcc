# ABOUTME: Open Library metadata provider implementation.
# ABOUTME: Looks up openlibrary.org by ISBN (edition -> works -> authors) and searches by title.

import logging

from folio.metadata.http import HttpClient, MetadataFetchError, ProviderNotFoundError
from folio.metadata.openlibrary_parser import (
    OpenLibraryWork,
    build_metadata,
    parse_author_name,
    parse_isbn_response,
    parse_search_results,
    parse_works_response,
)
from folio.metadata.types import BookMetadata

logger = logging.getLogger(__name__)

_OL_BASE = "https://openlibrary.org"


class OpenLibraryProvider:
    """Metadata provider backed by the Open Library API.

    Uses dependency-injected HttpClient for testability. Errors from the
    primary ISBN request propagate so the resilience layer can classify
    them; the follow-up works and author requests are best-effort.
    """

    def __init__(self, http_client: HttpClient, base_url: str = _OL_BASE) -> None:
        self._http = http_client
        self._base = base_url.rstrip("/")

    @property
    def name(self) -> str:
        return "openlibrary"

    def lookup(self, isbn: str) -> BookMetadata | None:
        """Look up a book by normalized ISBN via the Open Library ISBN endpoint.

        Returns None when Open Library answers 404.

        Raises:
            TransientFetchError: On timeouts, network errors and 5xx.
            ProviderResponseError: On unusable responses.
        """
        try:
            data = self._http.get(f"{self._base}/isbn/{isbn}.json")
        except ProviderNotFoundError:
            logger.debug("Open Library has no edition for %s", isbn)
            return None

        edition = parse_isbn_response(data)
        work = self._fetch_work(edition.works_key)

        author_keys = edition.author_keys or (work.author_keys if work else [])
        authors = self._fetch_author_names(author_keys)

        return build_metadata(edition, isbn, authors, work)

    def search_by_title(self, query: str, limit: int = 10) -> list[BookMetadata]:
        """Search Open Library by title.

        Raises:
            MetadataFetchError: On any request failure.
        """
        params = {"title": query, "limit": str(limit)}
        data = self._http.get(f"{self._base}/search.json", params=params)
        return parse_search_results(data)[:limit]

    def ping(self) -> bool:
        """Return True when the search endpoint answers."""
        try:
            self._http.get(f"{self._base}/search.json", params={"q": "isbn", "limit": "1"})
        except MetadataFetchError as exc:
            logger.warning("Open Library health probe failed: %s", exc)
            return False
        return True

    def _fetch_work(self, works_key: str | None) -> OpenLibraryWork | None:
        """Fetch subjects and description from the works endpoint if available."""
        if not works_key:
            return None
        try:
            return parse_works_response(self._http.get(f"{self._base}{works_key}.json"))
        except MetadataFetchError as exc:
            logger.debug("Works enrichment failed for %s: %s", works_key, exc)
            return None

    def _fetch_author_names(self, author_keys: list[str]) -> list[str]:
        """Fetch author names from the authors endpoint, skipping failures."""
        authors: list[str] = []
        for author_key in author_keys:
            try:
                name = parse_author_name(self._http.get(f"{self._base}{author_key}.json"))
            except MetadataFetchError as exc:
                logger.debug("Author enrichment failed for %s: %s", author_key, exc)
                continue
            if name:
                authors.append(name)
        return authors
