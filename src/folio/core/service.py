# ABOUTME: Orchestrates ISBN resolution: local catalog, resilient providers, then fallbacks.
# ABOUTME: The single entry point used by both the HTTP API and the CLI.

import logging
import threading
import time
from collections.abc import Callable, Sequence
from dataclasses import dataclass, field, replace
from typing import Any

from folio.config import Settings
from folio.core.concurrency import run_bounded
from folio.core.fallback import FallbackRegistry
from folio.db.catalog import LocalCatalog
from folio.db.connection import open_catalog
from folio.db.fallbacks import FallbackStore
from folio.errors import DuplicateIsbnError, InvalidIsbnError, NotFoundError, ValidationError
from folio.isbn import ValidationResult, format_isbn, normalize_isbn, validate_isbn
from folio.metadata.googlebooks import GoogleBooksProvider
from folio.metadata.http import FolioHttpClient, HttpClient
from folio.metadata.openlibrary import OpenLibraryProvider
from folio.metadata.provider import MetadataProvider
from folio.metadata.types import SOURCE_FALLBACK, SOURCE_LOCAL, BookMetadata
from folio.resilience.cache import ResolutionCache
from folio.resilience.circuit import CircuitBreaker
from folio.resilience.resolver import ResilientResolver, ResolutionStatus
from folio.resilience.retry import RetryPolicy

logger = logging.getLogger(__name__)

REASON_NOT_FOUND = "not_found"
REASON_CIRCUIT_OPEN = "circuit_open"
REASON_PROVIDER_ERROR = "provider_error"
REASON_INVALID_ISBN = "invalid_isbn"
REASON_INTERNAL_ERROR = "internal_error"

_REASONS = {
    ResolutionStatus.NOT_FOUND: REASON_NOT_FOUND,
    ResolutionStatus.CIRCUIT_OPEN: REASON_CIRCUIT_OPEN,
    ResolutionStatus.FAILED: REASON_PROVIDER_ERROR,
}

SEARCH_MIN_LENGTH = 2
SEARCH_MAX_LENGTH = 200
SEARCH_MAX_LIMIT = 100


@dataclass(frozen=True)
class LookupResult:
    """Outcome of a single-ISBN lookup.

    ``reason`` is None when a book was found; otherwise it says why not.
    """

    isbn: str
    book: BookMetadata | None = None
    source: str | None = None
    reason: str | None = None
    error: str | None = None
    response_time_ms: float = 0.0

    @property
    def found(self) -> bool:
        return self.book is not None


@dataclass(frozen=True)
class BatchItem:
    """One entry of a batch lookup, keyed by the ISBN exactly as submitted."""

    isbn: str
    success: bool
    source: str | None = None
    book: BookMetadata | None = None
    error: str | None = None
    reason: str | None = None


@dataclass
class BatchLookupResult:
    results: list[BatchItem] = field(default_factory=list)

    @property
    def summary(self) -> dict[str, int]:
        return {
            "total": len(self.results),
            "found": sum(1 for r in self.results if r.success),
            "not_found": sum(1 for r in self.results if r.reason == REASON_NOT_FOUND),
            "invalid": sum(1 for r in self.results if r.reason == REASON_INVALID_ISBN),
            "failed": sum(
                1
                for r in self.results
                if r.reason in (REASON_CIRCUIT_OPEN, REASON_PROVIDER_ERROR, REASON_INTERNAL_ERROR)
            ),
        }


class LookupService:
    """Resolve ISBNs through local catalog, external providers, and fallbacks, in that order.

    Holds no module-level state: every collaborator is passed in, so a test
    or a second process simply builds another instance.
    """

    def __init__(
        self,
        catalog: LocalCatalog,
        resolver: ResilientResolver,
        fallbacks: FallbackRegistry,
        *,
        settings: Settings | None = None,
        clock: Callable[[], float] = time.monotonic,
        closers: Sequence[Callable[[], None]] = (),
    ) -> None:
        self.catalog = catalog
        self.resolver = resolver
        self.fallbacks = fallbacks
        self.settings = settings or Settings()
        self._clock = clock
        self._closers = list(closers)

    def lookup_book(self, raw_isbn: str) -> LookupResult:
        """Resolve one ISBN.

        Raises:
            InvalidIsbnError: If ``raw_isbn`` does not validate.
        """
        started = self._clock()
        isbn = normalize_isbn(raw_isbn)

        def elapsed() -> float:
            return round((self._clock() - started) * 1000, 1)

        local = self.catalog.find_by_isbn(isbn)
        if local is not None:
            logger.debug("Resolved %s from local catalog", isbn)
            return LookupResult(isbn, local, SOURCE_LOCAL, response_time_ms=elapsed())

        resolution = self.resolver.resolve(isbn)
        if resolution.found:
            return LookupResult(
                isbn, resolution.book, resolution.provider, response_time_ms=elapsed()
            )

        fallback = self.fallbacks.resolve(isbn)
        if fallback is not None:
            logger.info("Resolved %s from fallback registry (%s)", isbn, resolution.status.value)
            return LookupResult(isbn, fallback, SOURCE_FALLBACK, response_time_ms=elapsed())

        return LookupResult(
            isbn,
            reason=_REASONS[resolution.status],
            error=resolution.error,
            response_time_ms=elapsed(),
        )

    def batch_lookup(self, raw_isbns: Sequence[str]) -> BatchLookupResult:
        """Look up several ISBNs with bounded concurrency.

        Results keep input order. Invalid ISBNs and per-item failures are
        reported in place; they never abort the batch.

        Raises:
            ValidationError: If the batch is empty or too large.
        """
        max_size = self.settings.batch_max_size
        if not raw_isbns:
            raise ValidationError("At least one ISBN is required")
        if len(raw_isbns) > max_size:
            raise ValidationError(f"Batch size cannot exceed {max_size} ISBNs")

        items = run_bounded(self._batch_item, raw_isbns, self.settings.batch_concurrency)
        return BatchLookupResult(results=items)

    def search_by_title(self, query: str, limit: int = 10) -> list[BookMetadata]:
        """Search external providers by title.

        Raises:
            ValidationError: If the trimmed query is not 2-200 characters or
                ``limit`` is outside 1-100.
        """
        query = (query or "").strip()
        if not SEARCH_MIN_LENGTH <= len(query) <= SEARCH_MAX_LENGTH:
            raise ValidationError(
                f"Search query must be between {SEARCH_MIN_LENGTH} and "
                f"{SEARCH_MAX_LENGTH} characters"
            )
        if not 1 <= limit <= SEARCH_MAX_LIMIT:
            raise ValidationError(f"Limit must be between 1 and {SEARCH_MAX_LIMIT}")
        return self.resolver.search_by_title(query, limit)

    def validate(self, raw_isbn: str) -> ValidationResult:
        return validate_isbn(raw_isbn)

    def format(self, raw_isbn: str, style: str = "hyphenated") -> str:
        """Format an ISBN; an unknown style surfaces as a ValidationError."""
        try:
            return format_isbn(raw_isbn, style)
        except ValueError as exc:
            raise ValidationError(str(exc)) from exc

    def health(self) -> dict[str, Any]:
        return self.resolver.check_health()

    def stats(self) -> dict[str, Any]:
        """Resilience snapshot plus fallback stats and the active configuration."""
        s = self.settings
        return {
            "resilience": self.resolver.get_stats(),
            "fallback": self.fallbacks.stats(),
            "catalog": {"count": self.catalog.count()},
            "config": {
                "providers": self.resolver.provider_names,
                "maxRetries": s.max_retries,
                "retryBaseDelay": s.retry_base_delay,
                "retryMaxDelay": s.retry_max_delay,
                "failureThreshold": s.failure_threshold,
                "failureWindow": s.failure_window,
                "resetTimeout": s.reset_timeout,
                "cacheTtl": s.cache_ttl,
                "negativeCacheTtl": s.negative_cache_ttl,
                "batchConcurrency": s.batch_concurrency,
                "batchMaxSize": s.batch_max_size,
            },
        }

    def cache_stats(self) -> dict[str, Any]:
        return self.resolver.cache.stats()

    def clear_cache(self, raw_isbn: str | None = None) -> int:
        """Clear the whole resolution cache, or one ISBN's entry."""
        isbn = normalize_isbn(raw_isbn) if raw_isbn else None
        removed = self.resolver.clear_cache(isbn)
        logger.info("Cleared %d cache entr%s", removed, "y" if removed == 1 else "ies")
        return removed

    def reset_resilience(self, provider: str | None = None) -> list[str]:
        """Reset circuit breakers.

        Raises:
            NotFoundError: If ``provider`` is not configured.
        """
        try:
            return self.resolver.reset_circuit(provider)
        except KeyError as exc:
            raise NotFoundError(
                f"Unknown provider: {provider}",
                details={"providers": self.resolver.provider_names},
            ) from exc

    def add_fallback(self, raw_isbn: str, metadata: BookMetadata) -> BookMetadata:
        return self.fallbacks.add_fallback(raw_isbn, metadata)

    def remove_fallback(self, raw_isbn: str) -> None:
        self.fallbacks.remove_fallback(raw_isbn)

    def list_fallbacks(self) -> list[BookMetadata]:
        return self.fallbacks.list_fallbacks()

    def import_book(self, raw_isbn: str) -> BookMetadata:
        """Resolve an ISBN externally and store the result in the local catalog.

        Raises:
            InvalidIsbnError: If ``raw_isbn`` does not validate.
            DuplicateIsbnError: If the catalog already holds this ISBN.
            NotFoundError: If no provider or fallback knows the ISBN.
        """
        isbn = normalize_isbn(raw_isbn)
        existing = self.catalog.find_by_isbn(isbn)
        if existing is not None:
            raise DuplicateIsbnError(f"A book with ISBN {isbn} already exists in the catalog")

        result = self.lookup_book(isbn)
        if result.book is None:
            raise NotFoundError(
                f"Could not resolve ISBN {isbn}",
                details={"reason": result.reason, "error": result.error},
            )

        self.catalog.add_book(result.book, isbn, imported_from=result.source)
        logger.info("Imported %s into catalog from %s", isbn, result.source)
        return replace(result.book, isbn=isbn, source=SOURCE_LOCAL)

    def list_catalog(self, limit: int | None = None, offset: int = 0) -> list[BookMetadata]:
        """Books in the local catalog, ordered by title."""
        if limit is not None and limit < 1:
            raise ValidationError("limit must be at least 1")
        if offset < 0:
            raise ValidationError("offset cannot be negative")
        return self.catalog.list_books(limit=limit, offset=offset)

    def remove_book(self, raw_isbn: str) -> str:
        """Delete a book from the local catalog.

        Returns:
            The normalized ISBN that was removed.

        Raises:
            InvalidIsbnError: If ``raw_isbn`` does not validate.
            NotFoundError: If the catalog has no such book.
        """
        isbn = normalize_isbn(raw_isbn)
        self.catalog.delete_book(isbn)
        logger.info("Removed %s from catalog", isbn)
        return isbn

    def close(self) -> None:
        """Release the HTTP client and database connection, if owned."""
        for closer in self._closers:
            closer()
        self._closers.clear()

    def _batch_item(self, raw_isbn: str) -> BatchItem:
        try:
            result = self.lookup_book(raw_isbn)
        except InvalidIsbnError as exc:
            return BatchItem(raw_isbn, False, error=str(exc), reason=REASON_INVALID_ISBN)
        except Exception as exc:
            logger.exception("Batch lookup of %r failed", raw_isbn)
            return BatchItem(raw_isbn, False, error=str(exc), reason=REASON_INTERNAL_ERROR)

        if result.book is None:
            return BatchItem(raw_isbn, False, error=result.error, reason=result.reason)
        return BatchItem(raw_isbn, True, source=result.source, book=result.book)


def build_providers(settings: Settings, http_client: HttpClient) -> list[MetadataProvider]:
    """Instantiate providers named in ``settings.providers``, in order.

    Raises:
        ValueError: If a provider name is not recognized.
    """
    providers: list[MetadataProvider] = []
    for name in settings.providers:
        if name == "openlibrary":
            providers.append(OpenLibraryProvider(http_client))
        elif name == "googlebooks":
            providers.append(GoogleBooksProvider(http_client, settings.google_books_api_key))
        else:
            raise ValueError(f"Unknown metadata provider: {name}")
    return providers


def create_lookup_service(
    settings: Settings | None = None,
    *,
    providers: Sequence[MetadataProvider] | None = None,
) -> LookupService:
    """Wire a LookupService from configuration.

    Args:
        settings: Runtime settings; read from the environment when omitted.
        providers: Use these providers instead of building HTTP-backed ones.
    """
    settings = settings or Settings.from_env()
    conn = open_catalog(settings.db_path)
    db_lock = threading.RLock()

    closers: list[Callable[[], None]] = []
    if providers is None:
        http_client = FolioHttpClient(
            timeout=settings.http_timeout,
            min_request_interval=settings.min_request_interval,
        )
        closers.append(http_client.close)
        providers = build_providers(settings, http_client)
    closers.append(conn.close)

    resolver = ResilientResolver(
        providers,
        cache=ResolutionCache(
            ttl=settings.cache_ttl,
            negative_ttl=settings.negative_cache_ttl,
            max_entries=settings.cache_max_entries,
        ),
        retry_policy=RetryPolicy(
            max_retries=settings.max_retries,
            base_delay=settings.retry_base_delay,
            max_delay=settings.retry_max_delay,
            jitter=True,
        ),
        breaker_factory=lambda name: CircuitBreaker(
            name,
            failure_threshold=settings.failure_threshold,
            failure_window=settings.failure_window,
            reset_timeout=settings.reset_timeout,
        ),
    )
    service = LookupService(
        LocalCatalog(conn, db_lock),
        resolver,
        FallbackRegistry(FallbackStore(conn, db_lock)),
        settings=settings,
        closers=closers,
    )
    logger.debug("Lookup service ready with providers %s", resolver.provider_names)
    return service
