# ABOUTME: Per-provider circuit breaker (closed -> open -> half-open) with an injectable clock.
# ABOUTME: Stops calling a failing provider for a cooldown, then admits a single trial request.

import logging
import threading
import time
from collections import deque
from collections.abc import Callable
from dataclasses import dataclass
from enum import Enum

logger = logging.getLogger(__name__)


class CircuitState(Enum):
    """Circuit breaker states.

    - CLOSED: Normal operation, requests are allowed through
    - OPEN: Too many failures, requests fail fast without a network call
    - HALF_OPEN: Cooldown elapsed, one trial request decides the next state
    """

    CLOSED = "closed"
    OPEN = "open"
    HALF_OPEN = "half_open"


@dataclass(frozen=True)
class CircuitSnapshot:
    """Read-only view of a breaker, used by stats endpoints."""

    name: str
    state: CircuitState
    failure_count: int
    failure_threshold: int
    last_failure_at: float | None
    opened_at: float | None

    def to_dict(self) -> dict[str, object]:
        return {
            "state": self.state.value,
            "failureCount": self.failure_count,
            "failureThreshold": self.failure_threshold,
            "lastFailureAt": self.last_failure_at,
            "openedAt": self.opened_at,
        }


class CircuitBreaker:
    """Thread-safe circuit breaker for one provider.

    Callers ask ``allow_request()`` before an outbound call and report the
    outcome with ``record_success()`` or ``record_failure()``. Only
    transient failures should be recorded as failures; an authoritative
    not-found is a success from the breaker's point of view.
    """

    def __init__(
        self,
        name: str,
        *,
        failure_threshold: int = 5,
        failure_window: float = 60.0,
        reset_timeout: float = 30.0,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        if failure_threshold < 1:
            raise ValueError("failure_threshold must be at least 1")
        self.name = name
        self._threshold = failure_threshold
        self._window = failure_window
        self._reset_timeout = reset_timeout
        self._clock = clock
        self._lock = threading.Lock()
        self._state = CircuitState.CLOSED
        self._failures: deque[float] = deque()
        self._last_failure_at: float | None = None
        self._opened_at: float | None = None
        self._trial_in_flight = False

    @property
    def state(self) -> CircuitState:
        with self._lock:
            self._maybe_half_open()
            return self._state

    def allow_request(self) -> bool:
        """Return True if an outbound call may proceed.

        In HALF_OPEN exactly one caller gets True until that trial reports
        back; everyone else is short-circuited.
        """
        with self._lock:
            self._maybe_half_open()
            if self._state is CircuitState.CLOSED:
                return True
            if self._state is CircuitState.HALF_OPEN and not self._trial_in_flight:
                self._trial_in_flight = True
                return True
            return False

    def record_success(self) -> None:
        with self._lock:
            if self._state is not CircuitState.CLOSED:
                logger.info("Circuit %s closed after successful trial", self.name)
            self._close()

    def record_failure(self) -> None:
        with self._lock:
            now = self._clock()
            if self._state is CircuitState.HALF_OPEN:
                logger.warning("Circuit %s trial failed, reopening", self.name)
                self._open(now)
                return

            self._failures.append(now)
            self._last_failure_at = now
            # Only failures inside the trailing window count toward the threshold.
            while self._failures and now - self._failures[0] > self._window:
                self._failures.popleft()

            if self._state is CircuitState.CLOSED and len(self._failures) >= self._threshold:
                logger.warning(
                    "Circuit %s opened after %d failures within %ss",
                    self.name,
                    len(self._failures),
                    self._window,
                )
                self._open(now)

    def reset(self) -> None:
        """Force the breaker closed and clear its counters."""
        with self._lock:
            self._close()
            self._last_failure_at = None

    def snapshot(self) -> CircuitSnapshot:
        with self._lock:
            self._maybe_half_open()
            return CircuitSnapshot(
                name=self.name,
                state=self._state,
                failure_count=len(self._failures),
                failure_threshold=self._threshold,
                last_failure_at=self._last_failure_at,
                opened_at=self._opened_at,
            )

    # Callers hold self._lock for the helpers below.

    def _maybe_half_open(self) -> None:
        if (
            self._state is CircuitState.OPEN
            and self._opened_at is not None
            and self._clock() - self._opened_at >= self._reset_timeout
        ):
            logger.info("Circuit %s half-open, admitting one trial request", self.name)
            self._state = CircuitState.HALF_OPEN
            self._trial_in_flight = False

    def _open(self, now: float) -> None:
        self._state = CircuitState.OPEN
        self._opened_at = now
        self._last_failure_at = now
        self._trial_in_flight = False

    def _close(self) -> None:
        self._state = CircuitState.CLOSED
        self._failures.clear()
        self._opened_at = None
        self._trial_in_flight = False
