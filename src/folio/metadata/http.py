# ABOUTME: HTTP client abstraction for metadata provider API calls.
# ABOUTME: Classifies failures as not-found, transient, or bad-response; rate limits; injectable transport.

import logging
import threading
import time
from typing import Any, Protocol, runtime_checkable

import httpx

from folio import __version__

logger = logging.getLogger(__name__)

_TRANSIENT_STATUS_CODES = {408, 429, 500, 502, 503, 504}


class MetadataFetchError(Exception):
    """Raised when an HTTP request to a metadata provider fails."""


class ProviderNotFoundError(MetadataFetchError):
    """The provider answered authoritatively that the resource does not exist (404)."""


class TransientFetchError(MetadataFetchError):
    """A timeout, network error, 429 or 5xx. Safe to retry."""


class ProviderResponseError(MetadataFetchError):
    """The provider answered with something we cannot use (4xx, bad JSON, odd shape)."""


@runtime_checkable
class HttpClient(Protocol):
    """Protocol for HTTP GET operations against metadata APIs."""

    def get(self, url: str, params: dict[str, str] | None = None) -> dict[str, Any]: ...


class FolioHttpClient:
    """HTTP client with rate limiting and failure classification.

    Wraps httpx.Client. Makes exactly one request per call: retrying is the
    resilience layer's job, so that retries and circuit accounting share one
    policy.
    """

    def __init__(
        self,
        *,
        timeout: float = 10.0,
        min_request_interval: float = 0.1,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        client_kwargs: dict[str, Any] = {
            "headers": {"User-Agent": f"folio/{__version__}", "Accept": "application/json"},
            "timeout": timeout,
            "follow_redirects": True,
        }
        if transport is not None:
            client_kwargs["transport"] = transport
        self._client = httpx.Client(**client_kwargs)
        self._min_interval = min_request_interval
        self._last_request_time: float = 0.0
        self._rate_lock = threading.Lock()

    def get(self, url: str, params: dict[str, str] | None = None) -> dict[str, Any]:
        """Send a GET request and return the decoded JSON object.

        Raises:
            ProviderNotFoundError: On HTTP 404.
            TransientFetchError: On timeouts, network errors, 408, 429 and 5xx.
            ProviderResponseError: On any other non-200 status or a body that
                is not a JSON object.
        """
        self._rate_limit()

        try:
            response = self._client.get(url, params=params)
        except httpx.TimeoutException as exc:
            raise TransientFetchError(f"Timeout requesting {url}: {exc}") from exc
        except httpx.HTTPError as exc:
            raise TransientFetchError(f"Request failed: {url}: {exc}") from exc

        status = response.status_code
        if status == 404:
            raise ProviderNotFoundError(f"HTTP 404 from {url}")
        if status in _TRANSIENT_STATUS_CODES:
            raise TransientFetchError(f"HTTP {status} from {url}")
        if status != 200:
            raise ProviderResponseError(f"HTTP {status} from {url}")

        try:
            data = response.json()
        except ValueError as exc:
            raise ProviderResponseError(f"Invalid JSON from {url}") from exc
        if not isinstance(data, dict):
            raise ProviderResponseError(f"Expected a JSON object from {url}")
        return data

    def close(self) -> None:
        self._client.close()

    def _rate_limit(self) -> None:
        """Sleep if needed to maintain minimum interval between requests."""
        if self._min_interval <= 0:
            return
        with self._rate_lock:
            now = time.monotonic()
            elapsed = now - self._last_request_time
            if elapsed < self._min_interval and self._last_request_time > 0:
                time.sleep(self._min_interval - elapsed)
            self._last_request_time = time.monotonic()
