"""Core models for neptune-params."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any

MAX_PARAMS_PER_CALL = 20
"""ModifyDBParameterGroup / ResetDBParameterGroup accept at most 20 parameters per call."""

RESET_TIMEOUT_SECONDS = 30.0
DELETE_TIMEOUT_SECONDS = 180.0

DEFAULT_DESCRIPTION = "Managed by neptune-params"


class ApplyMethod(str, Enum):
    """
    How the remote service should apply a modified parameter.

    This is a directive sent with the mutation call, not remote state.
    Parameters read back from the service always carry ``UNSET``.
    """

    IMMEDIATE = "immediate"
    PENDING_REBOOT = "pending-reboot"
    UNSET = ""


class GroupState(str, Enum):
    """Lifecycle states of a managed parameter group."""

    NON_EXISTENT = "non_existent"
    CREATING = "creating"
    CONFIGURING = "configuring"
    READY = "ready"
    DELETING = "deleting"


@dataclass(frozen=True)
class Parameter:
    """
    A single key/value tuning parameter.

    Attributes:
        name: Parameter name, case-sensitive
        value: Parameter value; compared case-insensitively when diffing
        apply_method: Mutation directive, never used to decide equality of state
    """

    name: str
    value: str
    apply_method: ApplyMethod = ApplyMethod.IMMEDIATE

    def __post_init__(self) -> None:
        if not self.name:
            raise ValueError("parameter name must not be empty")
        if not isinstance(self.apply_method, ApplyMethod):
            object.__setattr__(self, "apply_method", ApplyMethod(self.apply_method))

    def to_api(self) -> dict[str, str]:
        """Serialize to a Neptune API ``Parameter`` structure."""
        item = {"ParameterName": self.name, "ParameterValue": self.value}
        if self.apply_method is not ApplyMethod.UNSET:
            item["ApplyMethod"] = self.apply_method.value
        return item

    @classmethod
    def from_api(cls, item: dict[str, Any]) -> Parameter:
        """Build from a DescribeDBParameters entry (apply method is not reported)."""
        return cls(
            name=item["ParameterName"],
            value=item.get("ParameterValue", ""),
            apply_method=ApplyMethod.UNSET,
        )

    def to_dict(self) -> dict[str, str]:
        result = {"name": self.name, "value": self.value}
        if self.apply_method is not ApplyMethod.UNSET:
            result["apply_method"] = self.apply_method.value
        return result


@dataclass(frozen=True)
class GroupMetadata:
    """Immutable attributes of a remote parameter group."""

    name: str
    family: str
    description: str
    arn: str | None = None


@dataclass(frozen=True)
class ParameterGroup:
    """
    A Neptune DB parameter group and its user-set parameters.

    ``name``, ``family`` and ``description`` are fixed once created; only
    ``parameters`` is reconciled.
    """

    name: str
    family: str
    description: str = DEFAULT_DESCRIPTION
    parameters: tuple[Parameter, ...] = field(default_factory=tuple)

    def to_dict(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "family": self.family,
            "description": self.description,
            "parameters": [p.to_dict() for p in self.parameters],
        }


@dataclass(frozen=True)
class ParameterDiff:
    """Ordered removals and additions between two parameter collections."""

    to_remove: tuple[Parameter, ...] = ()
    to_add: tuple[Parameter, ...] = ()

    @property
    def is_empty(self) -> bool:
        return not self.to_remove and not self.to_add
