"""Lifecycle controller for a single Neptune DB parameter group.

States::

    NON_EXISTENT -> CREATING -> CONFIGURING -> READY
    NON_EXISTENT -> READY                          (import)
    READY -> CONFIGURING -> READY                  (update)
    READY | CONFIGURING -> DELETING -> NON_EXISTENT (delete)

Every update ends with a read-back of the remote group, including when a
batch fails part-way, so ``observed`` always reflects what the service
actually holds rather than what was requested.

One controller manages one group. Controllers share no state, so distinct
groups can be reconciled concurrently; calls for the same group must be
serialized by the caller.
"""

from __future__ import annotations

import logging
import time
from collections.abc import Callable, Iterable
from dataclasses import dataclass, field

from neptune_params.backend import ParameterGroupBackend
from neptune_params.client import is_invalid_state, is_not_found
from neptune_params.config import ReconcilerConfig
from neptune_params.exceptions import (
    ParameterGroupCreateError,
    ParameterGroupDeleteError,
    ParameterGroupError,
    ParameterGroupNotFoundError,
    ValidationError,
)
from neptune_params.models import GroupState, Parameter, ParameterDiff, ParameterGroup
from neptune_params.naming import canonical_group_name, validate_family, validate_group_name
from neptune_params.retry import Decision, retry

from .applier import ApplyResult, apply_diff
from .differ import compute_diff, same_parameters

logger = logging.getLogger(__name__)


@dataclass
class UpdateResult:
    """Outcome of a create or update."""

    diff: ParameterDiff = field(default_factory=ParameterDiff)
    applied: ApplyResult = field(default_factory=ApplyResult)
    observed: ParameterGroup | None = None


def _classify_delete_error(exc: Exception) -> Decision:
    if is_not_found(exc):
        return Decision.SUCCEED
    if is_invalid_state(exc):
        return Decision.RETRY
    return Decision.FAIL


class ParameterGroupController:
    """
    Drives one parameter group through create, update, read and delete.

    Args:
        backend: Remote parameter group operations
        config: Retry budgets and batch size (default: environment)
        group_id: Identifier of an already-managed group, if any
        sleep: Sleep function for retry backoff (injected for testing)
        clock: Monotonic clock for retry budgets (injected for testing)
    """

    def __init__(
        self,
        backend: ParameterGroupBackend,
        config: ReconcilerConfig | None = None,
        group_id: str | None = None,
        *,
        sleep: Callable[[float], None] = time.sleep,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.backend = backend
        self.config = config or ReconcilerConfig.from_environment()
        self.group_id = group_id
        self.state = GroupState.READY if group_id else GroupState.NON_EXISTENT
        self.observed: ParameterGroup | None = None
        self.transitions: list[tuple[GroupState, GroupState]] = []
        self._sleep = sleep
        self._clock = clock

    def _transition(self, new_state: GroupState) -> None:
        if new_state is self.state:
            return
        logger.info(
            "Parameter group %s: %s -> %s",
            self.group_id or "(none)",
            self.state.value,
            new_state.value,
        )
        self.transitions.append((self.state, new_state))
        self.state = new_state

    def _forget(self) -> None:
        self._transition(GroupState.NON_EXISTENT)
        self.group_id = None
        self.observed = None

    # -------------------------------------------------------------------------
    # Create
    # -------------------------------------------------------------------------

    def create(self, desired: ParameterGroup) -> UpdateResult:
        """
        Create the group, then reconcile its parameters in the same step.

        Raises:
            ValidationError: If name or family is malformed
            ParameterGroupCreateError: If the remote create call fails
            ParameterApplyError: If a parameter batch fails after creation
        """
        if self.group_id is not None:
            raise ParameterGroupError(f"Parameter group {self.group_id} is already managed")

        validate_group_name(desired.name)
        validate_family(desired.family)

        self._transition(GroupState.CREATING)
        try:
            group_id = self.backend.create_group(desired.name, desired.family, desired.description)
        except Exception as e:
            self._transition(GroupState.NON_EXISTENT)
            raise ParameterGroupCreateError(desired.name, e) from e

        self.group_id = group_id
        logger.info("Parameter group ID: %s", group_id)
        self._transition(GroupState.CONFIGURING)

        return self.update((), desired.parameters)

    # -------------------------------------------------------------------------
    # Read / import
    # -------------------------------------------------------------------------

    def read(self) -> ParameterGroup | None:
        """
        Refresh ``observed`` from the remote service.

        A group that no longer exists is dropped from local state and None is
        returned; that is not an error.
        """
        if self.group_id is None:
            return None

        group_id = self.group_id
        try:
            metadata = self.backend.describe_group(group_id)
            # Only user-set parameters; there are hundreds of system defaults.
            parameters = tuple(self.backend.describe_user_parameters(group_id))
        except ParameterGroupNotFoundError:
            logger.warning("Parameter group (%s) not found, removing from state", group_id)
            self._forget()
            return None

        self.observed = ParameterGroup(
            name=metadata.name,
            family=metadata.family,
            description=metadata.description,
            parameters=parameters,
        )
        return self.observed

    def import_group(self, name: str) -> ParameterGroup:
        """
        Adopt an existing remote group by name.

        Raises:
            ParameterGroupNotFoundError: If no such group exists
        """
        self.group_id = canonical_group_name(name)
        observed = self.read()
        if observed is None:
            raise ParameterGroupNotFoundError(name)
        self._transition(GroupState.READY)
        return observed

    # -------------------------------------------------------------------------
    # Update
    # -------------------------------------------------------------------------

    def plan(self, desired: Iterable[Parameter]) -> ParameterDiff:
        """Diff observed parameters against ``desired`` without touching the remote."""
        current = self.observed.parameters if self.observed is not None else ()
        return compute_diff(current, desired)

    def update(
        self,
        old: Iterable[Parameter],
        new: Iterable[Parameter],
    ) -> UpdateResult:
        """
        Reconcile parameters from ``old`` to ``new``.

        No remote mutation is issued when both collections hold the same
        identities. The group is read back afterwards whether or not the
        apply succeeded.

        Raises:
            ParameterApplyError: If a batch fails. Earlier batches stay applied
                and ``observed`` reflects them.

        If the read-back itself fails after a failed apply, the read error is
        logged and the apply error is the one raised.
        """
        if self.group_id is None:
            raise ParameterGroupError("Cannot update a parameter group that does not exist")

        old = tuple(old)
        new = tuple(new)
        result = UpdateResult()

        self._transition(GroupState.CONFIGURING)
        try:
            if not same_parameters(old, new):
                result.diff = compute_diff(old, new)
                result.applied = apply_diff(
                    self.backend,
                    self.group_id,
                    result.diff,
                    reset_timeout=self.config.reset_timeout,
                    max_params=self.config.max_params_per_call,
                    sleep=self._sleep,
                    clock=self._clock,
                )
        except Exception:
            self._transition(GroupState.READY)
            self._read_after_failure()
            raise

        self._transition(GroupState.READY)
        self.read()
        result.observed = self.observed
        return result

    def _read_after_failure(self) -> None:
        """Read back after a failed apply without masking the apply error."""
        group_id = self.group_id
        try:
            self.read()
        except Exception as e:
            logger.warning(
                "Read-back of parameter group %s after failed apply also failed: %s",
                group_id,
                e,
            )

    def reconcile(self, desired: ParameterGroup) -> UpdateResult:
        """
        Converge a group to ``desired``, creating it when absent.

        An existing group with the same name is adopted and its read-back
        parameters are used as the old state.

        Raises:
            ValidationError: If the controller already manages a different
                group, or if family or description differ from the existing
                group; those cannot change without replacing the group.
        """
        if self.group_id is not None and self.group_id != canonical_group_name(desired.name):
            raise ValidationError(
                "name",
                desired.name,
                f"This controller manages parameter group {self.group_id}",
            )

        observed = self.observed
        if self.group_id is None:
            try:
                observed = self.import_group(desired.name)
            except ParameterGroupNotFoundError:
                return self.create(desired)
        elif observed is None:
            observed = self.read()
            if observed is None:
                return self.create(desired)

        if observed.family != desired.family:
            raise ValidationError(
                "family",
                desired.family,
                f"Group {self.group_id} has family {observed.family!r}; "
                "changing it requires replacing the group",
            )
        if observed.description != desired.description:
            raise ValidationError(
                "description",
                desired.description,
                f"Group {self.group_id} has description {observed.description!r}; "
                "changing it requires replacing the group",
            )

        return self.update(observed.parameters, desired.parameters)

    # -------------------------------------------------------------------------
    # Delete
    # -------------------------------------------------------------------------

    def delete(self) -> None:
        """
        Delete the group. Deleting a group that is already gone succeeds.

        Retries while the service reports an invalid group state (for example
        while the group is still attached to an instance), up to the delete
        budget.

        Raises:
            ParameterGroupDeleteError: On any other error, or budget exhaustion
        """
        if self.group_id is None:
            return

        group_id = self.group_id
        self._transition(GroupState.DELETING)
        outcome = retry(
            lambda: self.backend.delete_group(group_id),
            _classify_delete_error,
            timeout=self.config.delete_timeout,
            description=f"delete of parameter group {group_id}",
            sleep=self._sleep,
            clock=self._clock,
        )
        if outcome.error is not None:
            self._transition(GroupState.READY)
            raise ParameterGroupDeleteError(group_id, outcome.error) from outcome.error

        self._forget()
