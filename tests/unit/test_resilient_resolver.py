# ABOUTME: Unit tests for ResilientResolver.
# ABOUTME: Cache short-cuts, provider ordering, retry and circuit interplay, concurrency, search, and stats.

from concurrent.futures import ThreadPoolExecutor

import pytest

from folio.metadata.http import ProviderResponseError, TransientFetchError
from folio.resilience.cache import NOT_FOUND, ResolutionCache
from folio.resilience.circuit import CircuitBreaker, CircuitState
from folio.resilience.resolver import ResilientResolver, ResolutionStatus
from folio.resilience.retry import RetryPolicy
from tests.fixtures.fakes import FakeClock, FakeProvider, RecordingSleeper, make_book

ISBN = "9780134685991"


@pytest.fixture
def build(clock: FakeClock, sleeper: RecordingSleeper):
    """Factory for a resolver over fake providers with deterministic time."""

    def _build(*providers: FakeProvider, threshold: int = 3, retries: int = 2) -> ResilientResolver:
        return ResilientResolver(
            providers,
            cache=ResolutionCache(ttl=3600, negative_ttl=60, clock=clock),
            retry_policy=RetryPolicy(max_retries=retries, base_delay=0.1, sleep=sleeper),
            breaker_factory=lambda name: CircuitBreaker(
                name, failure_threshold=threshold, reset_timeout=30, clock=clock
            ),
            clock=clock,
        )

    return _build


class TestResolve:
    """Tests for single-ISBN resolution."""

    def test_found_sets_provider_and_source(self, build) -> None:
        """A provider hit is tagged with the provider's name."""
        provider = FakeProvider("openlibrary", books={ISBN: make_book()})
        result = build(provider).resolve(ISBN)
        assert result.status is ResolutionStatus.FOUND
        assert result.found
        assert result.provider == "openlibrary"
        assert result.book is not None
        assert result.book.source == "openlibrary"
        assert not result.from_cache

    def test_warm_cache_makes_no_outbound_call(self, build) -> None:
        """A second resolve is served from cache and is identical."""
        provider = FakeProvider(books={ISBN: make_book()})
        resolver = build(provider)
        first = resolver.resolve(ISBN)
        second = resolver.resolve(ISBN)
        assert provider.lookup_calls == [ISBN]
        assert second.from_cache
        assert second.book == first.book
        assert second.provider == first.provider

    def test_providers_tried_in_order(self, build) -> None:
        """The second provider is asked only when the first misses."""
        first = FakeProvider("openlibrary")
        second = FakeProvider("googlebooks", books={ISBN: make_book()})
        result = build(first, second).resolve(ISBN)
        assert result.provider == "googlebooks"
        assert first.lookup_calls == [ISBN]
        assert second.lookup_calls == [ISBN]

    def test_all_not_found_is_cached_negatively(self, build) -> None:
        """When every provider says not found, the miss is cached."""
        provider = FakeProvider()
        resolver = build(provider)
        result = resolver.resolve(ISBN)
        assert result.status is ResolutionStatus.NOT_FOUND
        assert resolver.cache.get(ISBN) is NOT_FOUND

        again = resolver.resolve(ISBN)
        assert again.status is ResolutionStatus.NOT_FOUND
        assert again.from_cache
        assert len(provider.lookup_calls) == 1

    def test_not_found_does_not_count_as_failure(self, build) -> None:
        """Authoritative not-found answers never open the circuit."""
        provider = FakeProvider()
        resolver = build(provider, threshold=1)
        resolver.resolve(ISBN)
        resolver.clear_cache()
        resolver.resolve(ISBN)
        assert resolver.breaker("fake").state is CircuitState.CLOSED

    def test_transient_failures_are_retried(self, build, sleeper: RecordingSleeper) -> None:
        """Transient errors are retried before the provider answers."""
        provider = FakeProvider(
            books={ISBN: make_book()}, failures=[TransientFetchError("503")]
        )
        result = build(provider).resolve(ISBN)
        assert result.found
        assert len(provider.lookup_calls) == 2
        assert sleeper.delays == [0.1]

    def test_exhausted_retries_fail_without_caching(self, build) -> None:
        """Exhausted retries give FAILED, one breaker failure, and no cache entry."""
        provider = FakeProvider(error=TransientFetchError("HTTP 503"))
        resolver = build(provider)
        result = resolver.resolve(ISBN)
        assert result.status is ResolutionStatus.FAILED
        assert "HTTP 503" in (result.error or "")
        assert len(provider.lookup_calls) == 3
        assert resolver.breaker("fake").snapshot().failure_count == 1
        assert resolver.cache.get(ISBN) is None

    def test_response_error_not_retried(self, build) -> None:
        """Unusable responses count as a failure but are not retried."""
        provider = FakeProvider(error=ProviderResponseError("HTTP 403"))
        resolver = build(provider)
        result = resolver.resolve(ISBN)
        assert result.status is ResolutionStatus.FAILED
        assert len(provider.lookup_calls) == 1
        assert resolver.breaker("fake").snapshot().failure_count == 1

    def test_unexpected_error_propagates(self, build) -> None:
        """Programming errors surface instead of being reported as provider failures."""
        provider = FakeProvider(error=KeyError("bug"))
        resolver = build(provider)
        with pytest.raises(KeyError):
            resolver.resolve(ISBN)

    def test_failure_then_fallthrough_to_next_provider(self, build) -> None:
        """A failing first provider does not prevent the second from answering."""
        broken = FakeProvider("openlibrary", error=TransientFetchError("timeout"))
        working = FakeProvider("googlebooks", books={ISBN: make_book()})
        result = build(broken, working).resolve(ISBN)
        assert result.found
        assert result.provider == "googlebooks"

    def test_no_providers(self, build) -> None:
        """With no providers nothing is found and nothing is cached."""
        resolver = build()
        result = resolver.resolve(ISBN)
        assert result.status is ResolutionStatus.NOT_FOUND
        assert resolver.cache.get(ISBN) is None


class TestCircuitIntegration:
    """Tests for the breaker wrapped around provider calls."""

    def test_threshold_failures_open_circuit(self, build) -> None:
        """After failure_threshold failed resolves the next makes zero outbound calls."""
        provider = FakeProvider(error=TransientFetchError("HTTP 500"))
        resolver = build(provider, threshold=3, retries=0)
        for _ in range(3):
            assert resolver.resolve(ISBN).status is ResolutionStatus.FAILED
        assert resolver.breaker("fake").state is CircuitState.OPEN

        calls_before = len(provider.lookup_calls)
        result = resolver.resolve(ISBN)
        assert result.status is ResolutionStatus.CIRCUIT_OPEN
        assert len(provider.lookup_calls) == calls_before

    def test_half_open_trial_success_closes(self, build, clock: FakeClock) -> None:
        """After reset_timeout one trial is admitted and success closes the circuit."""
        provider = FakeProvider(error=TransientFetchError("HTTP 500"))
        resolver = build(provider, threshold=1, retries=0)
        resolver.resolve(ISBN)
        assert resolver.breaker("fake").state is CircuitState.OPEN

        clock.advance(30)
        provider.error = None
        provider.books[ISBN] = make_book()
        result = resolver.resolve(ISBN)

        assert result.found
        snap = resolver.breaker("fake").snapshot()
        assert snap.state is CircuitState.CLOSED
        assert snap.failure_count == 0

    def test_open_circuit_skips_to_next_provider(self, build) -> None:
        """An open circuit on one provider does not block the others."""
        flaky = FakeProvider("openlibrary", error=TransientFetchError("HTTP 500"))
        backup = FakeProvider("googlebooks", books={ISBN: make_book()})
        resolver = build(flaky, backup, threshold=1, retries=0)
        resolver.resolve(ISBN)
        resolver.clear_cache()

        result = resolver.resolve(ISBN)
        assert result.provider == "googlebooks"
        assert len(flaky.lookup_calls) == 1

    def test_short_circuit_is_not_cached(self, build) -> None:
        """A circuit-open outcome leaves no negative cache entry."""
        provider = FakeProvider(error=TransientFetchError("HTTP 500"))
        resolver = build(provider, threshold=1, retries=0)
        resolver.resolve(ISBN)
        resolver.resolve(ISBN)
        assert resolver.cache.get(ISBN) is None

    def test_reset_circuit(self, build) -> None:
        """reset_circuit closes the named breaker and reports it."""
        provider = FakeProvider(error=TransientFetchError("HTTP 500"))
        resolver = build(provider, threshold=1, retries=0)
        resolver.resolve(ISBN)
        assert resolver.reset_circuit("fake") == ["fake"]
        assert resolver.breaker("fake").state is CircuitState.CLOSED

    def test_reset_all_circuits(self, build) -> None:
        """reset_circuit() without a name resets every breaker."""
        resolver = build(FakeProvider("a"), FakeProvider("b"))
        assert resolver.reset_circuit() == ["a", "b"]

    def test_reset_unknown_provider(self, build) -> None:
        """Unknown provider names raise KeyError."""
        with pytest.raises(KeyError):
            build(FakeProvider()).reset_circuit("nope")


class TestConcurrentResolve:
    """Tests for resolve() called from many threads at once."""

    def test_warm_cache_serves_parallel_callers(self, build) -> None:
        """Parallel resolves of cached ISBNs make no provider calls and count every lookup."""
        missing = "9780000000002"
        provider = FakeProvider(books={ISBN: make_book()})
        resolver = build(provider)
        resolver.resolve(ISBN)
        resolver.resolve(missing)
        assert provider.lookup_calls == [ISBN, missing]

        isbns = [ISBN, missing] * 50
        with ThreadPoolExecutor(max_workers=8) as pool:
            results = list(pool.map(resolver.resolve, isbns))

        assert provider.lookup_calls == [ISBN, missing]
        assert all(r.from_cache for r in results)
        assert sum(r.found for r in results) == 50
        stats = resolver.get_stats()
        assert stats["cache"]["hits"] == 100
        assert stats["cache"]["hits"] + stats["cache"]["misses"] == 102
        assert stats["resolveCount"] == 102
        assert stats["totalCalls"] == 2


class TestSearchByTitle:
    """Tests for resolver title search."""

    def test_first_provider_with_results_wins(self, build) -> None:
        """Search stops at the first provider that returns anything."""
        empty = FakeProvider("openlibrary")
        full = FakeProvider("googlebooks", search_results=[make_book()])
        assert len(build(empty, full).search_by_title("effective java")) == 1
        assert empty.search_calls == ["effective java"]

    def test_errors_yield_empty_and_do_not_trip_circuit(self, build) -> None:
        """A failing search returns [] and leaves the breaker alone."""
        provider = FakeProvider()
        provider.search_error = TransientFetchError("timeout")
        resolver = build(provider, threshold=1)
        assert resolver.search_by_title("anything") == []
        assert resolver.breaker("fake").state is CircuitState.CLOSED

    def test_open_circuit_skipped(self, build) -> None:
        """Providers with an open circuit are not searched."""
        provider = FakeProvider(error=TransientFetchError("HTTP 500"), search_results=[make_book()])
        resolver = build(provider, threshold=1, retries=0)
        resolver.resolve(ISBN)
        assert resolver.search_by_title("effective") == []
        assert provider.search_calls == []

    def test_search_not_cached(self, build) -> None:
        """Repeated searches reach the provider every time."""
        provider = FakeProvider(search_results=[make_book()])
        resolver = build(provider)
        resolver.search_by_title("effective")
        resolver.search_by_title("effective")
        assert len(provider.search_calls) == 2


class TestHealthAndStats:
    """Tests for check_health and get_stats."""

    def test_health_probes_every_provider(self, build) -> None:
        """Each provider is pinged, even with an open circuit."""
        up = FakeProvider("openlibrary", error=TransientFetchError("HTTP 500"))
        down = FakeProvider("googlebooks", available=False)
        resolver = build(up, down, threshold=1, retries=0)
        resolver.resolve(ISBN)

        health = resolver.check_health()
        assert health["available"] is True
        assert health["providers"]["openlibrary"]["circuitState"] == "open"
        assert health["providers"]["googlebooks"]["available"] is False
        assert up.ping_calls == 1 and down.ping_calls == 1

    def test_health_unavailable_when_all_down(self, build) -> None:
        """No reachable provider means unavailable."""
        assert build(FakeProvider(available=False)).check_health()["available"] is False

    def test_stats_counters(self, build) -> None:
        """Stats count outbound attempts, failures, short-circuits, and resolves."""
        provider = FakeProvider(error=TransientFetchError("HTTP 500"))
        resolver = build(provider, threshold=1, retries=1)
        resolver.resolve(ISBN)
        resolver.resolve(ISBN)

        stats = resolver.get_stats()
        assert stats["totalCalls"] == 2
        assert stats["failureCount"] == 1
        assert stats["shortCircuited"] == 1
        assert stats["resolveCount"] == 2
        assert stats["circuits"]["fake"]["state"] == "open"
        assert "hitRate" in stats["cache"]

    def test_stats_have_no_side_effects(self, build) -> None:
        """Reading stats twice gives the same answer."""
        resolver = build(FakeProvider())
        assert resolver.get_stats() == resolver.get_stats()
