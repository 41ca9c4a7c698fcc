# ABOUTME: Unit tests for RetryPolicy.
# ABOUTME: Verifies attempt counts, capped exponential delays, and which errors are retried.

import pytest

from folio.metadata.http import ProviderNotFoundError, ProviderResponseError, TransientFetchError
from folio.resilience.retry import RetryPolicy
from tests.fixtures.fakes import RecordingSleeper


class FlakyOperation:
    """Raises the queued errors in order, then returns ``value``."""

    def __init__(self, errors: list[Exception], value: str = "ok") -> None:
        self.errors = list(errors)
        self.value = value
        self.calls = 0

    def __call__(self) -> str:
        self.calls += 1
        if self.errors:
            raise self.errors.pop(0)
        return self.value


class TestDelays:
    """Tests for backoff delay computation."""

    def test_exponential_and_capped(self) -> None:
        """Delay doubles per retry and stops at max_delay."""
        policy = RetryPolicy(base_delay=0.5, max_delay=3.0)
        assert [policy.delay_for(i) for i in range(4)] == [0.5, 1.0, 2.0, 3.0]

    def test_jitter_within_bounds(self) -> None:
        """Jittered delays stay within +/-25% of the nominal delay."""
        policy = RetryPolicy(base_delay=1.0, max_delay=10.0, jitter=True)
        for _ in range(50):
            assert 0.75 <= policy.delay_for(0) <= 1.25

    def test_negative_retries_rejected(self) -> None:
        """max_retries below zero is a configuration error."""
        with pytest.raises(ValueError):
            RetryPolicy(max_retries=-1)


class TestCall:
    """Tests for RetryPolicy.call."""

    def test_first_try_success(self, sleeper: RecordingSleeper) -> None:
        """A successful first attempt does not sleep."""
        policy = RetryPolicy(max_retries=2, sleep=sleeper)
        outcome = policy.call(FlakyOperation([]))
        assert outcome.value == "ok"
        assert outcome.attempts == 1
        assert sleeper.delays == []

    def test_retries_transient_then_succeeds(self, sleeper: RecordingSleeper) -> None:
        """Transient failures are retried with growing delays."""
        policy = RetryPolicy(max_retries=2, base_delay=0.2, max_delay=2.0, sleep=sleeper)
        op = FlakyOperation([TransientFetchError("503"), TransientFetchError("503")])
        outcome = policy.call(op)
        assert outcome.value == "ok"
        assert outcome.attempts == 3
        assert op.calls == 3
        assert sleeper.delays == [0.2, 0.4]

    def test_exhausted_retries_raise_last_error(self, sleeper: RecordingSleeper) -> None:
        """After 1 + max_retries attempts the transient error propagates."""
        policy = RetryPolicy(max_retries=2, sleep=sleeper)
        op = FlakyOperation([TransientFetchError(f"fail {i}") for i in range(5)])
        with pytest.raises(TransientFetchError, match="fail 2"):
            policy.call(op)
        assert op.calls == 3
        assert len(sleeper.delays) == 2

    def test_zero_retries(self, sleeper: RecordingSleeper) -> None:
        """max_retries=0 means a single attempt."""
        policy = RetryPolicy(max_retries=0, sleep=sleeper)
        op = FlakyOperation([TransientFetchError("503")])
        with pytest.raises(TransientFetchError):
            policy.call(op)
        assert op.calls == 1
        assert sleeper.delays == []

    @pytest.mark.parametrize(
        "error", [ProviderNotFoundError("404"), ProviderResponseError("403"), KeyError("boom")]
    )
    def test_non_transient_errors_not_retried(
        self, sleeper: RecordingSleeper, error: Exception
    ) -> None:
        """Only TransientFetchError triggers a retry."""
        policy = RetryPolicy(max_retries=3, sleep=sleeper)
        op = FlakyOperation([error])
        with pytest.raises(type(error)):
            policy.call(op)
        assert op.calls == 1
        assert sleeper.delays == []

    def test_on_attempt_called_per_attempt(self, sleeper: RecordingSleeper) -> None:
        """The on_attempt hook fires before every attempt."""
        attempts: list[int] = []
        policy = RetryPolicy(max_retries=2, sleep=sleeper)
        policy.call(
            FlakyOperation([TransientFetchError("x")]),
            on_attempt=lambda: attempts.append(1),
        )
        assert len(attempts) == 2
