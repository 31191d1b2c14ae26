"""boto3 client for Neptune DB parameter groups.

Implements :class:`~neptune_params.backend.ParameterGroupBackend` on top of
the synchronous boto3 ``neptune`` client. Not-found errors are translated to
:class:`ParameterGroupNotFoundError`; every other ``ClientError`` propagates
untouched so callers can classify it with the helpers below.
"""

from __future__ import annotations

import logging
from collections.abc import Iterator, Sequence
from typing import Any

import boto3
from botocore.exceptions import ClientError

from .config import ReconcilerConfig
from .exceptions import ParameterGroupMismatchError, ParameterGroupNotFoundError
from .models import GroupMetadata, Parameter

logger = logging.getLogger(__name__)

ERR_GROUP_NOT_FOUND = "DBParameterGroupNotFound"
ERR_INVALID_GROUP_STATE = "InvalidDBParameterGroupState"
PENDING_CHANGES_MESSAGE = " has pending changes"


def error_code(exc: BaseException) -> str | None:
    """Return the AWS error code of a ClientError, or None for anything else."""
    if isinstance(exc, ClientError):
        return exc.response.get("Error", {}).get("Code")
    return None


def is_aws_error(exc: BaseException, code: str, message_fragment: str = "") -> bool:
    """Check a ClientError's code and, optionally, that its message contains a fragment."""
    if not isinstance(exc, ClientError) or error_code(exc) != code:
        return False
    if not message_fragment:
        return True
    message = exc.response.get("Error", {}).get("Message", "")
    return message_fragment in message


def is_pending_changes_conflict(exc: BaseException) -> bool:
    """A reset rejected because the group is still applying an earlier change."""
    return is_aws_error(exc, ERR_INVALID_GROUP_STATE, PENDING_CHANGES_MESSAGE)


def is_invalid_state(exc: BaseException) -> bool:
    """The group is in use or otherwise not in a state that allows the call."""
    return is_aws_error(exc, ERR_INVALID_GROUP_STATE)


def is_not_found(exc: BaseException) -> bool:
    return isinstance(exc, ParameterGroupNotFoundError) or is_aws_error(exc, ERR_GROUP_NOT_FOUND)


class NeptuneParameterGroupClient:
    """
    Neptune DB parameter group operations over boto3.

    Supports both AWS and LocalStack environments. When ``endpoint_url`` is
    configured, calls are made against that endpoint.
    """

    def __init__(
        self,
        config: ReconcilerConfig | None = None,
        client: Any | None = None,
    ) -> None:
        """
        Initialize the client.

        Args:
            config: Region / endpoint settings (default: environment)
            client: Optional boto3 neptune client (injected for testing)
        """
        self.config = config or ReconcilerConfig.from_environment()
        self._client = client

    @property
    def client(self) -> Any:
        """Get or create the boto3 neptune client."""
        if self._client is None:
            self._client = boto3.client("neptune", **self.config.client_kwargs())
        return self._client

    def create_group(self, name: str, family: str, description: str) -> str:
        logger.debug(
            "Create Neptune parameter group: name=%s family=%s description=%r",
            name,
            family,
            description,
        )
        response = self.client.create_db_parameter_group(
            DBParameterGroupName=name,
            DBParameterGroupFamily=family,
            Description=description,
        )
        return str(response["DBParameterGroup"]["DBParameterGroupName"])

    def describe_group(self, group_id: str) -> GroupMetadata:
        try:
            response = self.client.describe_db_parameter_groups(DBParameterGroupName=group_id)
        except ClientError as e:
            if is_aws_error(e, ERR_GROUP_NOT_FOUND):
                raise ParameterGroupNotFoundError(group_id) from e
            raise

        groups = response.get("DBParameterGroups", [])
        if len(groups) != 1 or groups[0].get("DBParameterGroupName") != group_id:
            raise ParameterGroupMismatchError(
                group_id, [g.get("DBParameterGroupName", "") for g in groups]
            )

        group = groups[0]
        return GroupMetadata(
            name=group["DBParameterGroupName"],
            family=group.get("DBParameterGroupFamily", ""),
            description=group.get("Description", ""),
            arn=group.get("DBParameterGroupArn"),
        )

    def describe_user_parameters(self, group_id: str) -> Iterator[Parameter]:
        paginator = self.client.get_paginator("describe_db_parameters")
        pages = paginator.paginate(DBParameterGroupName=group_id, Source="user")
        try:
            for page in pages:
                for item in page.get("Parameters", []):
                    yield Parameter.from_api(item)
        except ClientError as e:
            if is_aws_error(e, ERR_GROUP_NOT_FOUND):
                raise ParameterGroupNotFoundError(group_id) from e
            raise

    def reset_parameters(self, group_name: str, parameters: Sequence[Parameter]) -> None:
        logger.debug(
            "Reset Neptune parameter group %s: %s", group_name, [p.name for p in parameters]
        )
        self.client.reset_db_parameter_group(
            DBParameterGroupName=group_name,
            Parameters=[p.to_api() for p in parameters],
        )

    def modify_parameters(self, group_name: str, parameters: Sequence[Parameter]) -> None:
        logger.debug(
            "Modify Neptune parameter group %s: %s", group_name, [p.name for p in parameters]
        )
        self.client.modify_db_parameter_group(
            DBParameterGroupName=group_name,
            Parameters=[p.to_api() for p in parameters],
        )

    def delete_group(self, group_id: str) -> None:
        try:
            self.client.delete_db_parameter_group(DBParameterGroupName=group_id)
        except ClientError as e:
            if is_aws_error(e, ERR_GROUP_NOT_FOUND):
                raise ParameterGroupNotFoundError(group_id) from e
            raise
