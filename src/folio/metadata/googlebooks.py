# ABOUTME: Google Books metadata provider implementation.
# ABOUTME: Queries the volumes endpoint by isbn: and intitle: terms; API key optional.

import logging

from folio.metadata.googlebooks_parser import parse_volume, parse_volumes_response
from folio.metadata.http import HttpClient, MetadataFetchError, ProviderResponseError
from folio.metadata.types import BookMetadata

logger = logging.getLogger(__name__)

_GB_BASE = "https://www.googleapis.com/books/v1"


class GoogleBooksProvider:
    """Metadata provider backed by the Google Books volumes API.

    Google answers an unknown ISBN with HTTP 200 and ``totalItems: 0``;
    that is treated as the authoritative not-found.
    """

    def __init__(
        self,
        http_client: HttpClient,
        api_key: str | None = None,
        base_url: str = _GB_BASE,
    ) -> None:
        self._http = http_client
        self._api_key = api_key
        self._base = base_url.rstrip("/")

    @property
    def name(self) -> str:
        return "googlebooks"

    def lookup(self, isbn: str) -> BookMetadata | None:
        """Look up a volume by ISBN. Returns None when no volume matches."""
        items = parse_volumes_response(
            self._http.get(f"{self._base}/volumes", params=self._params(f"isbn:{isbn}", 1))
        )
        if not items:
            logger.debug("Google Books has no volume for %s", isbn)
            return None
        return parse_volume(items[0], isbn=isbn)

    def search_by_title(self, query: str, limit: int = 10) -> list[BookMetadata]:
        """Search volumes by title; malformed volumes are skipped."""
        items = parse_volumes_response(
            self._http.get(
                f"{self._base}/volumes", params=self._params(f"intitle:{query}", min(limit, 40))
            )
        )
        results = []
        for item in items:
            try:
                results.append(parse_volume(item))
            except ProviderResponseError as exc:
                logger.debug("Skipping malformed Google Books volume: %s", exc)
        return results[:limit]

    def ping(self) -> bool:
        try:
            self._http.get(f"{self._base}/volumes", params=self._params("isbn:9780134685991", 1))
        except MetadataFetchError as exc:
            logger.warning("Google Books health probe failed: %s", exc)
            return False
        return True

    def _params(self, query: str, max_results: int) -> dict[str, str]:
        params = {"q": query, "maxResults": str(max_results)}
        if self._api_key:
            params["key"] = self._api_key
        return params
