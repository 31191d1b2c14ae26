"""Exceptions for neptune-params."""

from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from neptune_params_provisioner.applier import ApplyResult


# ---------------------------------------------------------------------------
# Base Exception
# ---------------------------------------------------------------------------


class NeptuneParamsError(Exception):
    """
    Base exception for all neptune-params errors.

    All exceptions raised by this library inherit from this class,
    allowing callers to catch all library-specific errors with a single
    except clause.
    """

    pass


# ---------------------------------------------------------------------------
# Category Exceptions
# ---------------------------------------------------------------------------


class ValidationError(NeptuneParamsError):
    """Raised when user-supplied input fails validation."""

    def __init__(self, field: str, value: Any, reason: str) -> None:
        self.field = field
        self.value = value
        self.reason = reason
        super().__init__(f"Invalid {field} {value!r}: {reason}")


class ParameterGroupError(NeptuneParamsError):
    """
    Base exception for parameter group errors.

    This includes failures creating, describing, reconciling, or deleting
    a Neptune DB parameter group.
    """

    pass


# ---------------------------------------------------------------------------
# Parameter Group Exceptions
# ---------------------------------------------------------------------------


class ParameterGroupNotFoundError(ParameterGroupError):
    """Raised when the remote service reports the group does not exist."""

    def __init__(self, group_name: str) -> None:
        self.group_name = group_name
        super().__init__(f"Parameter group not found: {group_name}")


class ParameterGroupMismatchError(ParameterGroupError):
    """Raised when describe returns something other than the requested group."""

    def __init__(self, group_name: str, found: list[str]) -> None:
        self.group_name = group_name
        self.found = found
        super().__init__(
            f"Unable to find parameter group {group_name!r}, describe returned {found}"
        )


class ParameterGroupCreateError(ParameterGroupError):
    """Raised when the remote create call fails."""

    def __init__(self, group_name: str, cause: Exception) -> None:
        self.group_name = group_name
        self.cause = cause
        super().__init__(f"Error creating parameter group {group_name}: {cause}")


class ParameterApplyError(ParameterGroupError):
    """
    Raised when a reset or modify batch fails.

    Earlier batches have already been applied remotely; ``result`` records
    exactly what went through before the failure.

    Attributes:
        group_name: Group being reconciled
        operation: "reset" or "modify"
        batch_index: 1-based index of the failed batch
        batch_count: Total batches planned for this operation
        parameters: Names of the parameters in the failed batch
        cause: The underlying remote error
        result: Partial ApplyResult up to the failure
    """

    def __init__(
        self,
        group_name: str,
        operation: str,
        batch_index: int,
        batch_count: int,
        parameters: list[str],
        cause: Exception,
        result: "ApplyResult | None" = None,
    ) -> None:
        self.group_name = group_name
        self.operation = operation
        self.batch_index = batch_index
        self.batch_count = batch_count
        self.parameters = parameters
        self.cause = cause
        self.result = result
        super().__init__(self._format_message())

    def _format_message(self) -> str:
        return (
            f"Error during {self.operation} of parameter group {self.group_name} "
            f"(batch {self.batch_index}/{self.batch_count}: {', '.join(self.parameters)}): "
            f"{self.cause}"
        )


class ParameterGroupDeleteError(ParameterGroupError):
    """Raised when the remote delete call fails with a non-retryable error."""

    def __init__(self, group_name: str, cause: Exception) -> None:
        self.group_name = group_name
        self.cause = cause
        super().__init__(f"Error deleting parameter group {group_name}: {cause}")


# ---------------------------------------------------------------------------
# Retry Exceptions
# ---------------------------------------------------------------------------


class RetryTimeoutError(NeptuneParamsError):
    """
    Raised when a retryable error persists past the retry budget.

    Attributes:
        description: What was being retried
        timeout: Budget in seconds
        attempts: Number of attempts made
        last_error: The last retryable error seen
    """

    def __init__(
        self,
        description: str,
        timeout: float,
        attempts: int,
        last_error: Exception,
    ) -> None:
        self.description = description
        self.timeout = timeout
        self.attempts = attempts
        self.last_error = last_error
        super().__init__(
            f"Timed out after {timeout:g}s ({attempts} attempts) waiting for "
            f"{description}: {last_error}"
        )
