"""Parameter group naming utilities.

Neptune DB parameter group names follow the RDS naming rules:
- 1 to 255 letters, digits, or hyphens
- First character must be a letter
- Cannot end with a hyphen or contain two consecutive hyphens

The remote service stores names lower-cased, so the canonical identifier
of a group is its lower-cased name.
"""

import re

from .exceptions import ValidationError

MAX_NAME_LENGTH = 255

NAME_PATTERN = re.compile(r"[A-Za-z][A-Za-z0-9-]*")


def validate_group_name(name: str) -> None:
    """
    Validate a parameter group name.

    Args:
        name: The user-provided group name

    Raises:
        ValidationError: If the name breaks the naming rules
    """
    if not name:
        raise ValidationError("name", name, "Name cannot be empty")

    if "_" in name:
        raise ValidationError(
            "name",
            name,
            "Contains underscore. Use hyphens instead (e.g., 'graph-params' not 'graph_params')",
        )
    if "." in name:
        raise ValidationError(
            "name",
            name,
            "Contains period. Only alphanumeric characters and hyphens are allowed.",
        )
    if " " in name:
        raise ValidationError(
            "name",
            name,
            "Contains spaces. Use hyphens instead (e.g., 'my-params' not 'my params')",
        )

    if not NAME_PATTERN.fullmatch(name):
        raise ValidationError(
            "name",
            name,
            "Must start with a letter and contain only alphanumeric characters and hyphens.",
        )
    if "--" in name:
        raise ValidationError("name", name, "Cannot contain two consecutive hyphens.")
    if name.endswith("-"):
        raise ValidationError("name", name, "Cannot end with a hyphen.")

    if len(name) > MAX_NAME_LENGTH:
        raise ValidationError(
            "name",
            name,
            f"Too long. Name exceeds {MAX_NAME_LENGTH} character limit.",
        )


def canonical_group_name(name: str) -> str:
    """
    Validate a group name and return its canonical (lower-cased) form.

    Raises:
        ValidationError: If the name is invalid
    """
    validate_group_name(name)
    return name.lower()


def validate_family(family: str) -> None:
    """Validate a parameter group family (e.g., 'neptune1')."""
    if not family or not family.strip():
        raise ValidationError("family", family, "Family cannot be empty")
