# ABOUTME: Resilient external resolution: cache -> circuit check -> retried provider call -> cache store.
# ABOUTME: Keeps "circuit open", "provider failed", and "provider said not found" as distinct outcomes.

import functools
import logging
import threading
import time
from collections.abc import Callable, Sequence
from dataclasses import dataclass
from enum import Enum
from typing import Any

from folio.metadata.http import MetadataFetchError, ProviderResponseError, TransientFetchError
from folio.metadata.provider import MetadataProvider
from folio.metadata.types import BookMetadata
from folio.resilience.cache import NOT_FOUND, ResolutionCache
from folio.resilience.circuit import CircuitBreaker, CircuitState
from folio.resilience.retry import RetryPolicy

logger = logging.getLogger(__name__)


class ResolutionStatus(Enum):
    FOUND = "found"
    NOT_FOUND = "not_found"
    CIRCUIT_OPEN = "circuit_open"
    FAILED = "failed"


@dataclass(frozen=True)
class Resolution:
    """Outcome of resolving one normalized ISBN against external providers."""

    isbn: str
    status: ResolutionStatus
    book: BookMetadata | None = None
    provider: str | None = None
    error: str | None = None
    from_cache: bool = False

    @property
    def found(self) -> bool:
        return self.status is ResolutionStatus.FOUND


class ResilientResolver:
    """Wraps one or more MetadataProviders with a cache, retries, and circuit breakers.

    Providers are tried in order. Each has its own breaker. An explicit
    instance holds all state, so tests and processes build their own.
    """

    def __init__(
        self,
        providers: Sequence[MetadataProvider],
        *,
        cache: ResolutionCache | None = None,
        retry_policy: RetryPolicy | None = None,
        breaker_factory: Callable[[str], CircuitBreaker] | None = None,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._providers = list(providers)
        self._cache = cache or ResolutionCache()
        self._retry = retry_policy or RetryPolicy()
        factory = breaker_factory or (lambda name: CircuitBreaker(name))
        self._breakers = {p.name: factory(p.name) for p in self._providers}
        self._clock = clock
        self._stats_lock = threading.Lock()
        self._total_calls = 0
        self._failure_count = 0
        self._short_circuited = 0
        self._resolve_count = 0

    @property
    def provider_names(self) -> list[str]:
        return [p.name for p in self._providers]

    @property
    def cache(self) -> ResolutionCache:
        return self._cache

    def breaker(self, provider: str) -> CircuitBreaker:
        return self._breakers[provider]

    def resolve(self, isbn: str) -> Resolution:
        """Resolve a normalized ISBN-13.

        A live cache entry short-cuts everything. Otherwise each provider
        is asked in turn until one has the book. A negative result is only
        cached when every provider answered not-found.
        """
        self._bump("_resolve_count")

        cached = self._cache.get(isbn)
        if cached is NOT_FOUND:
            return Resolution(
                isbn=isbn,
                status=ResolutionStatus.NOT_FOUND,
                error="No provider has a record for this ISBN",
                from_cache=True,
            )
        if isinstance(cached, BookMetadata):
            return Resolution(
                isbn=isbn,
                status=ResolutionStatus.FOUND,
                book=cached,
                provider=cached.source,
                from_cache=True,
            )

        not_found: list[str] = []
        skipped: list[str] = []
        failed: list[str] = []
        last_error: str | None = None

        for provider in self._providers:
            breaker = self._breakers[provider.name]
            if not breaker.allow_request():
                self._bump("_short_circuited")
                skipped.append(provider.name)
                last_error = f"Circuit open for {provider.name}"
                logger.info("Skipping %s for %s: circuit open", provider.name, isbn)
                continue

            try:
                outcome = self._retry.call(
                    functools.partial(provider.lookup, isbn),
                    description=f"{provider.name} lookup of {isbn}",
                    on_attempt=self._count_call,
                )
            except (TransientFetchError, ProviderResponseError) as exc:
                breaker.record_failure()
                self._bump("_failure_count")
                failed.append(provider.name)
                last_error = f"{provider.name}: {exc}"
                continue
            except Exception:
                # Release a half-open trial slot before propagating.
                breaker.record_failure()
                self._bump("_failure_count")
                raise

            breaker.record_success()
            if outcome.value is None:
                not_found.append(provider.name)
                last_error = f"Not found by {provider.name}"
                continue

            book = outcome.value.with_source(provider.name)
            self._cache.set(isbn, book)
            return Resolution(
                isbn=isbn, status=ResolutionStatus.FOUND, book=book, provider=provider.name
            )

        if failed:
            return Resolution(isbn=isbn, status=ResolutionStatus.FAILED, error=last_error)
        if skipped:
            return Resolution(
                isbn=isbn,
                status=ResolutionStatus.CIRCUIT_OPEN,
                error=f"Circuit open for: {', '.join(skipped)}",
            )
        if not_found:
            self._cache.set(isbn, NOT_FOUND)
        return Resolution(
            isbn=isbn,
            status=ResolutionStatus.NOT_FOUND,
            error=last_error or "No external providers configured",
        )

    def search_by_title(self, query: str, limit: int = 10) -> list[BookMetadata]:
        """Best-effort title search; first provider with results wins.

        Not cached. Open circuits are skipped, errors yield no results, and
        neither touches breaker state.
        """
        for provider in self._providers:
            if self._breakers[provider.name].state is CircuitState.OPEN:
                continue
            try:
                results = provider.search_by_title(query, limit)
            except MetadataFetchError as exc:
                logger.warning("Title search on %s failed for %r: %s", provider.name, query, exc)
                continue
            if results:
                return results[:limit]
        return []

    def check_health(self) -> dict[str, Any]:
        """Probe every provider directly, bypassing the circuit breakers."""
        providers: dict[str, Any] = {}
        for provider in self._providers:
            started = self._clock()
            available = provider.ping()
            providers[provider.name] = {
                "available": available,
                "responseTimeMs": round((self._clock() - started) * 1000, 1),
                "circuitState": self._breakers[provider.name].state.value,
            }
        return {
            "available": any(p["available"] for p in providers.values()),
            "providers": providers,
        }

    def get_stats(self) -> dict[str, Any]:
        """Read-only snapshot of cache, breaker, and call counters."""
        cache_stats = self._cache.stats()
        with self._stats_lock:
            counters = {
                "totalCalls": self._total_calls,
                "failureCount": self._failure_count,
                "shortCircuited": self._short_circuited,
                "resolveCount": self._resolve_count,
            }
        return {
            "cacheHitRate": cache_stats["hitRate"],
            "cache": cache_stats,
            "circuits": {name: b.snapshot().to_dict() for name, b in self._breakers.items()},
            **counters,
        }

    def reset_circuit(self, provider: str | None = None) -> list[str]:
        """Force one breaker (or all) back to CLOSED.

        Raises:
            KeyError: If ``provider`` names no configured provider.
        """
        names = [provider] if provider is not None else list(self._breakers)
        for name in names:
            if name not in self._breakers:
                raise KeyError(name)
        for name in names:
            self._breakers[name].reset()
            logger.info("Circuit %s reset by operator", name)
        return names

    def clear_cache(self, isbn: str | None = None) -> int:
        return self._cache.clear(isbn)

    def _count_call(self) -> None:
        self._bump("_total_calls")

    def _bump(self, counter: str) -> None:
        with self._stats_lock:
            setattr(self, counter, getattr(self, counter) + 1)
