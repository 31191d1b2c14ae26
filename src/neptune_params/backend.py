"""Backend protocol for parameter group remote operations.

The reconciliation core only talks to the remote service through this
protocol. :class:`~neptune_params.client.NeptuneParameterGroupClient` is the
boto3 implementation; tests use an in-memory fake.
"""

from collections.abc import Iterator, Sequence
from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from .models import GroupMetadata, Parameter


@runtime_checkable
class ParameterGroupBackend(Protocol):
    """
    Protocol for the remote operations a parameter group reconciler needs.

    Every call is synchronous and blocking. Implementations raise
    :class:`~neptune_params.exceptions.ParameterGroupNotFoundError` when the
    group is absent and let other remote errors propagate unchanged, so the
    caller can classify them.
    """

    def create_group(self, name: str, family: str, description: str) -> str:
        """Create a group and return its canonical identifier."""
        ...

    def describe_group(self, group_id: str) -> "GroupMetadata":
        """Fetch group metadata."""
        ...

    def describe_user_parameters(self, group_id: str) -> Iterator["Parameter"]:
        """
        Yield user-set parameters only, across all pages.

        System and engine-default parameters are never yielded.
        """
        ...

    def reset_parameters(self, group_name: str, parameters: Sequence["Parameter"]) -> None:
        """Reset the named parameters to their defaults."""
        ...

    def modify_parameters(self, group_name: str, parameters: Sequence["Parameter"]) -> None:
        """Set the given parameter values using each parameter's apply method."""
        ...

    def delete_group(self, group_id: str) -> None:
        """Delete the group."""
        ...
