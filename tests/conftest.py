# ABOUTME: Shared pytest fixtures for Folio tests.
# ABOUTME: Provides fake clocks, in-memory catalogs, and a factory for fully wired lookup services.

import sqlite3
import threading
from collections.abc import Callable, Iterator
from pathlib import Path

import pytest

from folio.config import Settings
from folio.core.fallback import FallbackRegistry
from folio.core.service import LookupService
from folio.db.catalog import LocalCatalog
from folio.db.connection import open_catalog
from folio.db.fallbacks import FallbackStore
from folio.metadata.provider import MetadataProvider
from folio.resilience.cache import ResolutionCache
from folio.resilience.circuit import CircuitBreaker
from folio.resilience.resolver import ResilientResolver
from folio.resilience.retry import RetryPolicy
from tests.fixtures.fakes import FakeClock, RecordingSleeper


@pytest.fixture
def fixtures_dir() -> Path:
    """Path to the test fixtures directory."""
    return Path(__file__).parent / "fixtures"


@pytest.fixture
def clock() -> FakeClock:
    """A manually advanced clock starting at t=1000."""
    return FakeClock()


@pytest.fixture
def sleeper() -> RecordingSleeper:
    """A sleep replacement that records delays instead of waiting."""
    return RecordingSleeper()


@pytest.fixture
def conn() -> Iterator[sqlite3.Connection]:
    """An in-memory catalog database with the full schema applied."""
    connection = open_catalog(":memory:")
    yield connection
    connection.close()


@pytest.fixture
def catalog(conn: sqlite3.Connection) -> LocalCatalog:
    return LocalCatalog(conn)


@pytest.fixture
def fallback_store(conn: sqlite3.Connection) -> FallbackStore:
    return FallbackStore(conn)


@pytest.fixture
def test_settings() -> Settings:
    """Settings with small, deterministic resilience parameters."""
    return Settings(
        db_path=Path(":memory:"),
        max_retries=2,
        retry_base_delay=0.2,
        retry_max_delay=2.0,
        failure_threshold=3,
        failure_window=60.0,
        reset_timeout=30.0,
        cache_ttl=3600.0,
        negative_cache_ttl=60.0,
        batch_concurrency=4,
        batch_max_size=50,
    )


@pytest.fixture
def make_service(
    clock: FakeClock, sleeper: RecordingSleeper, test_settings: Settings
) -> Iterator[Callable[..., LookupService]]:
    """Factory building a LookupService over in-memory storage and the given providers.

    The fake clock drives the cache, the breakers and elapsed-time
    reporting; retry backoff goes to the recording sleeper.
    """
    built: list[LookupService] = []

    def _make(*providers: MetadataProvider, settings: Settings | None = None) -> LookupService:
        s = settings or test_settings
        connection = open_catalog(":memory:")
        lock = threading.RLock()
        resolver = ResilientResolver(
            providers,
            cache=ResolutionCache(
                ttl=s.cache_ttl,
                negative_ttl=s.negative_cache_ttl,
                max_entries=s.cache_max_entries,
                clock=clock,
            ),
            retry_policy=RetryPolicy(
                max_retries=s.max_retries,
                base_delay=s.retry_base_delay,
                max_delay=s.retry_max_delay,
                sleep=sleeper,
            ),
            breaker_factory=lambda name: CircuitBreaker(
                name,
                failure_threshold=s.failure_threshold,
                failure_window=s.failure_window,
                reset_timeout=s.reset_timeout,
                clock=clock,
            ),
            clock=clock,
        )
        service = LookupService(
            LocalCatalog(connection, lock),
            resolver,
            FallbackRegistry(FallbackStore(connection, lock)),
            settings=s,
            clock=clock,
            closers=[connection.close],
        )
        built.append(service)
        return service

    yield _make
    for service in built:
        service.close()
