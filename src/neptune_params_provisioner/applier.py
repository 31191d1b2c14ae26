"""Applies parameter changes to a Neptune DB parameter group.

Removals are sent as ResetDBParameterGroup calls and additions as
ModifyDBParameterGroup calls, each in batches of at most 20 parameters.
Every removal batch completes before the first addition batch starts, and
batches run strictly one after another.

Resets may be rejected while the group is still applying an earlier reset
("has pending changes"); those are retried within a bounded budget. Modify
calls are not retried. Any terminal failure aborts the remaining batches
and raises :class:`ParameterApplyError` carrying the partial result.
"""

from __future__ import annotations

import logging
import time
from collections.abc import Callable, Sequence
from dataclasses import dataclass, field

from neptune_params.backend import ParameterGroupBackend
from neptune_params.client import is_pending_changes_conflict
from neptune_params.exceptions import ParameterApplyError
from neptune_params.models import (
    MAX_PARAMS_PER_CALL,
    RESET_TIMEOUT_SECONDS,
    Parameter,
    ParameterDiff,
)
from neptune_params.retry import Decision, retry

from .batcher import batch

logger = logging.getLogger(__name__)

OP_RESET = "reset"
OP_MODIFY = "modify"


@dataclass(frozen=True)
class BatchRecord:
    """One remote call that went through."""

    operation: str  # "reset" or "modify"
    parameters: tuple[Parameter, ...]
    attempts: int = 1

    @property
    def size(self) -> int:
        return len(self.parameters)


@dataclass
class ApplyResult:
    """Result of applying a diff."""

    batches: list[BatchRecord] = field(default_factory=list)

    @property
    def removed(self) -> int:
        return sum(b.size for b in self.batches if b.operation == OP_RESET)

    @property
    def added(self) -> int:
        return sum(b.size for b in self.batches if b.operation == OP_MODIFY)

    def batch_sizes(self, operation: str) -> list[int]:
        return [b.size for b in self.batches if b.operation == operation]


def _classify_reset_error(exc: Exception) -> Decision:
    if is_pending_changes_conflict(exc):
        return Decision.RETRY
    return Decision.FAIL


def apply_diff(
    backend: ParameterGroupBackend,
    group_name: str,
    diff: ParameterDiff,
    *,
    reset_timeout: float = RESET_TIMEOUT_SECONDS,
    max_params: int = MAX_PARAMS_PER_CALL,
    sleep: Callable[[float], None] = time.sleep,
    clock: Callable[[], float] = time.monotonic,
) -> ApplyResult:
    """Apply removals then additions to a parameter group.

    Args:
        backend: Remote parameter group operations.
        group_name: Group to mutate.
        diff: Output of ``compute_diff``.
        reset_timeout: Retry budget per reset batch for pending-change conflicts.
        max_params: Parameters per remote call.
        sleep: Sleep function (injected for testing).
        clock: Monotonic clock (injected for testing).

    Returns:
        ApplyResult listing every batch sent.

    Raises:
        ParameterApplyError: On the first batch that fails for good. Batches
            before it have already been applied.
    """
    result = ApplyResult()

    if diff.is_empty:
        return result

    logger.debug("Parameters to remove: %s", [p.name for p in diff.to_remove])
    logger.debug("Parameters to add: %s", [p.name for p in diff.to_add])

    remove_batches = batch(diff.to_remove, max_params)
    for index, params in enumerate(remove_batches, start=1):
        _reset_batch(
            backend,
            group_name,
            params,
            index,
            len(remove_batches),
            result,
            reset_timeout=reset_timeout,
            sleep=sleep,
            clock=clock,
        )

    add_batches = batch(diff.to_add, max_params)
    for index, params in enumerate(add_batches, start=1):
        _modify_batch(backend, group_name, params, index, len(add_batches), result)

    logger.info(
        "Applied parameter group %s: %d reset in %d batch(es), %d modified in %d batch(es)",
        group_name,
        result.removed,
        len(remove_batches),
        result.added,
        len(add_batches),
    )
    return result


def _reset_batch(
    backend: ParameterGroupBackend,
    group_name: str,
    params: Sequence[Parameter],
    index: int,
    count: int,
    result: ApplyResult,
    *,
    reset_timeout: float,
    sleep: Callable[[float], None],
    clock: Callable[[], float],
) -> None:
    """Reset one batch, retrying while the group has pending changes."""
    logger.debug("Reset batch %d/%d for %s (%d parameters)", index, count, group_name, len(params))
    outcome = retry(
        lambda: backend.reset_parameters(group_name, params),
        _classify_reset_error,
        timeout=reset_timeout,
        description=f"reset of parameter group {group_name}",
        sleep=sleep,
        clock=clock,
    )
    if outcome.error is not None:
        raise ParameterApplyError(
            group_name,
            OP_RESET,
            index,
            count,
            [p.name for p in params],
            outcome.error,
            result,
        ) from outcome.error

    result.batches.append(BatchRecord(OP_RESET, tuple(params), outcome.attempts))


def _modify_batch(
    backend: ParameterGroupBackend,
    group_name: str,
    params: Sequence[Parameter],
    index: int,
    count: int,
    result: ApplyResult,
) -> None:
    """Modify one batch. No retry on this path."""
    logger.debug(
        "Modify batch %d/%d for %s (%d parameters)", index, count, group_name, len(params)
    )
    try:
        backend.modify_parameters(group_name, params)
    except Exception as e:
        raise ParameterApplyError(
            group_name,
            OP_MODIFY,
            index,
            count,
            [p.name for p in params],
            e,
            result,
        ) from e

    result.batches.append(BatchRecord(OP_MODIFY, tuple(params)))
