"""YAML manifest parsing and validation for declarative parameter groups."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from neptune_params.exceptions import ValidationError
from neptune_params.models import DEFAULT_DESCRIPTION, ApplyMethod, Parameter, ParameterGroup
from neptune_params.naming import validate_family, validate_group_name


def _coerce_value(name: str, value: Any) -> str:
    """YAML scalars become the strings the API expects."""
    if value is None:
        raise ValidationError("parameter value", value, f"Parameter {name!r} has no value")
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


def _parse_apply_method(name: str, raw: Any) -> ApplyMethod:
    if raw is None:
        return ApplyMethod.IMMEDIATE
    try:
        method = ApplyMethod(str(raw))
    except ValueError:
        raise ValidationError(
            "apply_method",
            raw,
            f"Parameter {name!r}: expected 'immediate' or 'pending-reboot'",
        ) from None
    if method is ApplyMethod.UNSET:
        return ApplyMethod.IMMEDIATE
    return method


@dataclass(frozen=True)
class ParameterDecl:
    """A single parameter declaration."""

    name: str
    value: str
    apply_method: ApplyMethod = ApplyMethod.IMMEDIATE

    @classmethod
    def from_dict(cls, d: dict[str, Any]) -> ParameterDecl:
        name = d.get("name")
        if not name:
            raise ValidationError("parameter name", name, "Every parameter needs a name")
        return cls(
            name=str(name),
            value=_coerce_value(name, d.get("value")),
            apply_method=_parse_apply_method(name, d.get("apply_method")),
        )

    def to_dict(self) -> dict[str, str]:
        return {"name": self.name, "value": self.value, "apply_method": self.apply_method.value}

    def to_parameter(self) -> Parameter:
        return Parameter(name=self.name, value=self.value, apply_method=self.apply_method)


@dataclass(frozen=True)
class ParameterGroupManifest:
    """Parsed manifest describing the desired state of one parameter group."""

    name: str
    family: str
    description: str = DEFAULT_DESCRIPTION
    parameters: tuple[ParameterDecl, ...] = field(default_factory=tuple)

    def __post_init__(self) -> None:
        validate_group_name(self.name)
        validate_family(self.family)
        seen: set[str] = set()
        for decl in self.parameters:
            if decl.name in seen:
                raise ValidationError(
                    "parameters", decl.name, "Parameter is declared more than once"
                )
            seen.add(decl.name)

    @classmethod
    def from_dict(cls, d: dict[str, Any]) -> ParameterGroupManifest:
        if not d.get("name"):
            raise ValidationError("name", d.get("name"), "'name' is required in manifest")
        if not d.get("family"):
            raise ValidationError("family", d.get("family"), "'family' is required in manifest")

        raw_params = d.get("parameters") or []
        if isinstance(raw_params, dict):
            # Shorthand: {name: value}
            params = tuple(
                ParameterDecl.from_dict({"name": k, "value": v}) for k, v in raw_params.items()
            )
        elif isinstance(raw_params, list):
            params = tuple(ParameterDecl.from_dict(p) for p in raw_params)
        else:
            raise ValidationError("parameters", raw_params, "Must be a list or a mapping")

        description = d.get("description")
        return cls(
            name=str(d["name"]),
            family=str(d["family"]),
            description=DEFAULT_DESCRIPTION if description is None else str(description),
            parameters=params,
        )

    @classmethod
    def from_yaml(cls, yaml_str: str) -> ParameterGroupManifest:
        import yaml

        data = yaml.safe_load(yaml_str)
        if not isinstance(data, dict):
            raise ValidationError("manifest", data, "YAML document must be a mapping")
        return cls.from_dict(data)

    @classmethod
    def from_cfn_properties(cls, properties: dict[str, Any]) -> ParameterGroupManifest:
        """Build from CloudFormation ResourceProperties (PascalCase keys)."""
        manifest: dict[str, Any] = {
            "name": properties.get("Name"),
            "family": properties.get("Family"),
            "description": properties.get("Description"),
            "parameters": [
                {
                    "name": p.get("Name"),
                    "value": p.get("Value"),
                    "apply_method": p.get("ApplyMethod"),
                }
                for p in properties.get("Parameters", [])
            ],
        }
        return cls.from_dict(manifest)

    def to_dict(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "family": self.family,
            "description": self.description,
            "parameters": [p.to_dict() for p in self.parameters],
        }

    def to_group(self) -> ParameterGroup:
        """Typed desired state handed to the lifecycle controller."""
        return ParameterGroup(
            name=self.name,
            family=self.family,
            description=self.description,
            parameters=tuple(p.to_parameter() for p in self.parameters),
        )
