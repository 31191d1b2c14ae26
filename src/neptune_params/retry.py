"""Bounded retry with error classification.

The caller supplies the operation, a classifier that maps each raised
exception to a :class:`Decision`, and a total time budget. Delays double
from ``initial_delay`` up to ``max_delay`` and never sleep past the
remaining budget.
"""

from __future__ import annotations

import logging
import time
from collections.abc import Callable
from dataclasses import dataclass
from enum import Enum
from typing import Generic, TypeVar

from .exceptions import RetryTimeoutError

logger = logging.getLogger(__name__)

T = TypeVar("T")


class Decision(Enum):
    """What to do with an exception raised by a retried operation."""

    RETRY = "retry"
    FAIL = "fail"
    SUCCEED = "succeed"  # the error means the intended state already holds


@dataclass(frozen=True)
class RetryOutcome(Generic[T]):
    """Result of a retried operation."""

    value: T | None
    error: Exception | None
    attempts: int
    elapsed: float

    @property
    def ok(self) -> bool:
        return self.error is None

    def unwrap(self) -> T | None:
        """Return the value, or raise the error that ended the retry loop."""
        if self.error is not None:
            raise self.error
        return self.value


def retry(
    operation: Callable[[], T],
    classify: Callable[[Exception], Decision],
    *,
    timeout: float,
    description: str = "operation",
    initial_delay: float = 0.5,
    max_delay: float = 10.0,
    sleep: Callable[[float], None] = time.sleep,
    clock: Callable[[], float] = time.monotonic,
) -> RetryOutcome[T]:
    """
    Run ``operation`` until it succeeds, fails, or the budget runs out.

    The first attempt is always made, even with a zero budget.

    Args:
        operation: Zero-argument callable performing one attempt
        classify: Maps a raised exception to RETRY, FAIL, or SUCCEED
        timeout: Total budget in seconds
        description: Human-readable name used in logs and timeout errors
        initial_delay: First backoff delay in seconds
        max_delay: Cap for a single backoff delay
        sleep: Sleep function (injected for testing)
        clock: Monotonic clock (injected for testing)

    Returns:
        RetryOutcome with either the value or the terminal error. A
        retryable error that outlives the budget is wrapped in
        RetryTimeoutError.
    """
    start = clock()
    delay = initial_delay
    attempts = 0

    while True:
        attempts += 1
        try:
            value = operation()
        except Exception as e:
            decision = classify(e)
            elapsed = clock() - start

            if decision is Decision.SUCCEED:
                return RetryOutcome(value=None, error=None, attempts=attempts, elapsed=elapsed)
            if decision is Decision.FAIL:
                return RetryOutcome(value=None, error=e, attempts=attempts, elapsed=elapsed)

            remaining = timeout - elapsed
            if remaining <= 0:
                timeout_error = RetryTimeoutError(description, timeout, attempts, e)
                timeout_error.__cause__ = e
                return RetryOutcome(
                    value=None, error=timeout_error, attempts=attempts, elapsed=elapsed
                )

            wait = min(delay, max_delay, remaining)
            logger.warning(
                "Retryable error on %s (attempt %d), retrying in %.1fs: %s",
                description,
                attempts,
                wait,
                e,
            )
            sleep(wait)
            delay *= 2
            continue

        return RetryOutcome(value=value, error=None, attempts=attempts, elapsed=clock() - start)
