# ABOUTME: Retry with capped exponential backoff for transient provider failures.
# ABOUTME: Sleeping is injectable so tests can record delays instead of waiting.

import logging
import random
import time
from collections.abc import Callable
from dataclasses import dataclass
from typing import Generic, TypeVar

from folio.metadata.http import TransientFetchError

logger = logging.getLogger(__name__)

T = TypeVar("T")


@dataclass
class RetryOutcome(Generic[T]):
    """Result of a retried call: the value and how many attempts it took."""

    value: T
    attempts: int


class RetryPolicy:
    """Retry an operation on TransientFetchError.

    Makes up to ``1 + max_retries`` attempts. The delay before retry ``n``
    (0-based) is ``min(base_delay * 2**n, max_delay)``, optionally scaled by
    a random factor in [0.75, 1.25]. Any other exception propagates at once.
    """

    def __init__(
        self,
        *,
        max_retries: int = 2,
        base_delay: float = 0.2,
        max_delay: float = 2.0,
        jitter: bool = False,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        if max_retries < 0:
            raise ValueError("max_retries must be >= 0")
        self.max_retries = max_retries
        self.base_delay = base_delay
        self.max_delay = max_delay
        self.jitter = jitter
        self._sleep = sleep

    def delay_for(self, retry_index: int) -> float:
        delay = min(self.base_delay * (2**retry_index), self.max_delay)
        if self.jitter:
            delay *= random.uniform(0.75, 1.25)
        return delay

    def call(
        self,
        operation: Callable[[], T],
        *,
        description: str = "operation",
        on_attempt: Callable[[], None] | None = None,
    ) -> RetryOutcome[T]:
        """Run ``operation`` with retries.

        Args:
            operation: Zero-argument callable to invoke.
            description: Used in log messages.
            on_attempt: Called before every attempt (used for call counting).

        Raises:
            TransientFetchError: The last transient error once retries are exhausted.
        """
        attempts = 1 + self.max_retries
        for attempt in range(self.max_retries):
            if on_attempt is not None:
                on_attempt()
            try:
                return RetryOutcome(value=operation(), attempts=attempt + 1)
            except TransientFetchError as exc:
                delay = self.delay_for(attempt)
                logger.warning(
                    "%s failed (%s), retrying in %.2fs (attempt %d/%d)",
                    description,
                    exc,
                    delay,
                    attempt + 1,
                    self.max_retries,
                )
                self._sleep(delay)

        if on_attempt is not None:
            on_attempt()
        try:
            value = operation()
        except TransientFetchError as exc:
            logger.warning("%s failed after %d attempts: %s", description, attempts, exc)
            raise
        return RetryOutcome(value=value, attempts=attempts)
