"""Tests for the bounded retry primitive."""

import pytest

from neptune_params.exceptions import RetryTimeoutError
from neptune_params.retry import Decision, retry
from tests.fixtures.backend import FakeClock


class Flaky:
    """Raises the queued errors in order, then returns ``value``."""

    def __init__(self, errors, value="done"):
        self.errors = list(errors)
        self.value = value
        self.calls = 0

    def __call__(self):
        self.calls += 1
        if self.errors:
            raise self.errors.pop(0)
        return self.value


def retry_on_value_error(exc):
    return Decision.RETRY if isinstance(exc, ValueError) else Decision.FAIL


class TestRetry:
    """Tests for retry()."""

    def test_success_on_first_attempt(self):
        clock = FakeClock()
        outcome = retry(
            Flaky([]), retry_on_value_error, timeout=30, sleep=clock.sleep, clock=clock
        )
        assert outcome.ok
        assert outcome.value == "done"
        assert outcome.attempts == 1
        assert clock.sleeps == []

    def test_retries_until_success(self):
        """Two retryable failures followed by success is a success."""
        clock = FakeClock()
        op = Flaky([ValueError("busy"), ValueError("busy")])
        outcome = retry(op, retry_on_value_error, timeout=30, sleep=clock.sleep, clock=clock)
        assert outcome.ok
        assert outcome.unwrap() == "done"
        assert outcome.attempts == 3
        assert op.calls == 3

    def test_backoff_doubles_and_caps(self):
        """Delays double from initial_delay and never exceed max_delay."""
        clock = FakeClock()
        op = Flaky([ValueError()] * 6)
        retry(
            op,
            retry_on_value_error,
            timeout=1000,
            initial_delay=1.0,
            max_delay=5.0,
            sleep=clock.sleep,
            clock=clock,
        )
        assert clock.sleeps == [1.0, 2.0, 4.0, 5.0, 5.0, 5.0]

    def test_non_retryable_error_fails_immediately(self):
        clock = FakeClock()
        error = KeyError("boom")
        op = Flaky([error])
        outcome = retry(op, retry_on_value_error, timeout=30, sleep=clock.sleep, clock=clock)
        assert not outcome.ok
        assert outcome.error is error
        assert op.calls == 1
        assert clock.sleeps == []

    def test_budget_exhaustion_wraps_last_error(self):
        """A retryable error outliving the budget becomes RetryTimeoutError."""
        clock = FakeClock()
        last = ValueError("still busy")
        op = Flaky([ValueError("busy")] * 50 + [last])
        outcome = retry(
            op,
            retry_on_value_error,
            timeout=30,
            description="reset of parameter group g",
            sleep=clock.sleep,
            clock=clock,
        )
        assert not outcome.ok
        assert isinstance(outcome.error, RetryTimeoutError)
        assert outcome.error.timeout == 30
        assert outcome.error.attempts == outcome.attempts
        assert "reset of parameter group g" in str(outcome.error)
        assert clock.now == pytest.approx(30)
        assert sum(clock.sleeps) <= 30

    def test_never_sleeps_past_budget(self):
        clock = FakeClock()
        retry(
            Flaky([ValueError()] * 100),
            retry_on_value_error,
            timeout=3,
            initial_delay=2.0,
            sleep=clock.sleep,
            clock=clock,
        )
        assert clock.sleeps == [2.0, 1.0]

    def test_zero_budget_still_attempts_once(self):
        clock = FakeClock()
        op = Flaky([])
        outcome = retry(op, retry_on_value_error, timeout=0, sleep=clock.sleep, clock=clock)
        assert outcome.ok
        assert op.calls == 1

    def test_succeed_decision_counts_as_success(self):
        """SUCCEED turns an error into a successful outcome with no value."""
        clock = FakeClock()
        outcome = retry(
            Flaky([LookupError("gone")]),
            lambda e: Decision.SUCCEED,
            timeout=30,
            sleep=clock.sleep,
            clock=clock,
        )
        assert outcome.ok
        assert outcome.value is None

    def test_unwrap_raises_error(self):
        clock = FakeClock()
        outcome = retry(
            Flaky([KeyError("x")]), retry_on_value_error, timeout=1, sleep=clock.sleep, clock=clock
        )
        with pytest.raises(KeyError):
            outcome.unwrap()
