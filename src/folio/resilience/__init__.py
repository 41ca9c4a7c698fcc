# ABOUTME: Resilience layer around external metadata providers.
# ABOUTME: Exports the TTL cache, circuit breaker, retry policy, and the resolver that combines them.

from folio.resilience.cache import NOT_FOUND, ResolutionCache
from folio.resilience.circuit import CircuitBreaker, CircuitState
from folio.resilience.resolver import Resolution, ResolutionStatus, ResilientResolver
from folio.resilience.retry import RetryPolicy

__all__ = [
    "NOT_FOUND",
    "CircuitBreaker",
    "CircuitState",
    "Resolution",
    "ResolutionCache",
    "ResolutionStatus",
    "ResilientResolver",
    "RetryPolicy",
]
