"""Diff engine for declarative parameter group management.

Compares the current (old) and desired (new) parameter collections of a
group and produces the ordered removals and additions needed to converge.
"""

from __future__ import annotations

from collections.abc import Iterable

from neptune_params.models import Parameter, ParameterDiff

Identity = tuple[str, str]


def identity_of(parameter: Parameter) -> Identity:
    """Comparison key of a parameter: exact name, lower-cased value.

    ``apply_method`` is not part of identity; the remote service never
    reports it back.
    """
    return (parameter.name, parameter.value.lower())


def identities(parameters: Iterable[Parameter]) -> dict[Identity, Parameter]:
    """Identity-keyed view of a collection, in iteration order."""
    return {identity_of(p): p for p in parameters}


def same_parameters(old: Iterable[Parameter], new: Iterable[Parameter]) -> bool:
    """True when both collections contain the same identities."""
    return identities(old).keys() == identities(new).keys()


def compute_diff(
    old: Iterable[Parameter],
    new: Iterable[Parameter],
) -> ParameterDiff:
    """Compute the parameters to reset and to modify.

    Args:
        old: Current parameters (usually the last read-back state).
        new: Desired parameters.

    Returns:
        ParameterDiff whose ``to_remove`` keeps the old collection's order
        and casing, and whose ``to_add`` keeps the new collection's order
        and casing. Parameters present in both by identity appear in
        neither.
    """
    old_by_identity = identities(old)
    new_by_identity = identities(new)

    to_remove = tuple(p for key, p in old_by_identity.items() if key not in new_by_identity)
    to_add = tuple(p for key, p in new_by_identity.items() if key not in old_by_identity)

    return ParameterDiff(to_remove=to_remove, to_add=to_add)
