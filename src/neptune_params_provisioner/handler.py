"""Lambda handler for declarative parameter group provisioning.

Handles two event types:
1. CLI invocations (action, manifest or name)
2. CloudFormation custom resource events (RequestType, ResourceProperties)
"""

from __future__ import annotations

import logging
from typing import Any

from neptune_params.client import NeptuneParameterGroupClient
from neptune_params.config import ReconcilerConfig
from neptune_params.exceptions import (
    ParameterApplyError,
    ParameterGroupDeleteError,
    ParameterGroupNotFoundError,
    ValidationError,
)
from neptune_params.models import ParameterGroup
from neptune_params.naming import canonical_group_name

from .lifecycle import ParameterGroupController, UpdateResult
from .manifest import ParameterGroupManifest

logger = logging.getLogger(__name__)

IMMUTABLE_PROPERTIES = ("Name", "Family", "Description")


def on_event(event: dict[str, Any], context: Any) -> dict[str, Any]:
    """Lambda entry point."""
    if "RequestType" in event:
        return _handle_cfn(event, context)
    return _handle_cli(event, context)


def _controller(group_id: str | None = None) -> ParameterGroupController:
    config = ReconcilerConfig.from_environment()
    return ParameterGroupController(NeptuneParameterGroupClient(config), config, group_id)


def _handle_cli(event: dict[str, Any], context: Any) -> dict[str, Any]:
    """Handle CLI invocation (plan, apply, read or delete)."""
    action = event.get("action", "plan")

    if action in ("read", "delete"):
        name = event.get("name") or event.get("manifest", {}).get("name")
        if not name:
            raise ValidationError("name", name, f"'{action}' requires a group name")
        controller = _controller(canonical_group_name(name))
        if action == "delete":
            controller.delete()
            return {"status": "deleted", "name": name}
        observed = controller.read()
        if observed is None:
            return {"status": "absent", "name": name}
        return {"status": "present", "group": observed.to_dict()}

    manifest = ParameterGroupManifest.from_dict(event.get("manifest", {}))
    desired = manifest.to_group()
    controller = _controller()

    if action == "plan":
        exists = True
        try:
            controller.import_group(desired.name)
        except ParameterGroupNotFoundError:
            exists = False
        diff = controller.plan(desired.parameters)
        return {
            "status": "planned",
            "exists": exists,
            "to_remove": [p.to_dict() for p in diff.to_remove],
            "to_add": [p.to_dict() for p in diff.to_add],
        }

    if action != "apply":
        raise ValidationError("action", action, "Expected plan, apply, read or delete")

    result = controller.reconcile(desired)
    return {"status": "applied", **_result_summary(result)}


def _handle_cfn(event: dict[str, Any], context: Any) -> dict[str, Any]:
    """Handle CloudFormation custom resource event."""
    request_type = event["RequestType"]
    properties = event.get("ResourceProperties", {})
    physical_id = event.get("PhysicalResourceId")

    if request_type == "Delete":
        if physical_id:
            _controller(physical_id).delete()
        return {"PhysicalResourceId": physical_id}

    manifest = ParameterGroupManifest.from_cfn_properties(properties)
    desired = manifest.to_group()

    if request_type == "Create":
        controller = _controller()
        result = _create_or_roll_back(controller, desired)
        return _cfn_response(controller, result)

    # Update
    old_properties = event.get("OldResourceProperties", {})
    if _requires_replacement(old_properties, properties):
        if canonical_group_name(desired.name) == physical_id:
            raise ValidationError(
                "Name",
                desired.name,
                "Family and Description cannot change in place; give the group a new Name",
            )
        logger.info("Replacing parameter group %s with %s", physical_id, desired.name)
        # CloudFormation deletes the old physical resource once the id changes.
        controller = _controller()
        result = _create_or_roll_back(controller, desired)
        return _cfn_response(controller, result)

    old_manifest = ParameterGroupManifest.from_cfn_properties(old_properties)
    controller = _controller(physical_id)
    result = controller.update(old_manifest.to_group().parameters, desired.parameters)
    return _cfn_response(controller, result)


def _create_or_roll_back(
    controller: ParameterGroupController, desired: ParameterGroup
) -> UpdateResult:
    """
    Create a group for a custom resource, deleting it again if its parameters fail.

    A failed Create reports no physical id, so the group must not outlive it.
    """
    try:
        return controller.create(desired)
    except ParameterApplyError:
        if controller.group_id is not None:
            logger.warning("Rolling back partially created parameter group %s", controller.group_id)
            try:
                controller.delete()
            except ParameterGroupDeleteError as e:
                logger.error("Rollback of parameter group %s failed: %s", controller.group_id, e)
        raise


def _requires_replacement(old: dict[str, Any], new: dict[str, Any]) -> bool:
    """Name, Family and Description are immutable once the group exists."""
    for key in IMMUTABLE_PROPERTIES:
        if key == "Name":
            if str(old.get(key, "")).lower() != str(new.get(key, "")).lower():
                return True
        elif old.get(key) != new.get(key):
            return True
    return False


def _cfn_response(controller: ParameterGroupController, result: UpdateResult) -> dict[str, Any]:
    return {
        "PhysicalResourceId": controller.group_id,
        "Data": {
            "Name": controller.group_id or "",
            "ParameterCount": len(result.observed.parameters) if result.observed else 0,
        },
    }


def _result_summary(result: UpdateResult) -> dict[str, Any]:
    return {
        "removed": result.applied.removed,
        "added": result.applied.added,
        "reset_batches": result.applied.batch_sizes("reset"),
        "modify_batches": result.applied.batch_sizes("modify"),
        "group": result.observed.to_dict() if result.observed else None,
    }
