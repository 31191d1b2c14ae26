"""Runtime configuration for neptune-params."""

from __future__ import annotations

import os
from dataclasses import dataclass

from .models import DELETE_TIMEOUT_SECONDS, MAX_PARAMS_PER_CALL, RESET_TIMEOUT_SECONDS

REGION_ENV_VAR = "NEPTUNE_PARAMS_REGION"
ENDPOINT_URL_ENV_VAR = "NEPTUNE_PARAMS_ENDPOINT_URL"
RESET_TIMEOUT_ENV_VAR = "NEPTUNE_PARAMS_RESET_TIMEOUT"
DELETE_TIMEOUT_ENV_VAR = "NEPTUNE_PARAMS_DELETE_TIMEOUT"


@dataclass(frozen=True)
class ReconcilerConfig:
    """
    Settings shared by the client, applier and lifecycle controller.

    Attributes:
        region: AWS region (default: use boto3 defaults)
        endpoint_url: Optional endpoint URL (for LocalStack or other AWS-compatible services)
        reset_timeout: Retry budget for resets blocked by pending changes
        delete_timeout: Retry budget for deletes blocked by an invalid group state
        max_params_per_call: Batch size for reset/modify calls
    """

    region: str | None = None
    endpoint_url: str | None = None
    reset_timeout: float = RESET_TIMEOUT_SECONDS
    delete_timeout: float = DELETE_TIMEOUT_SECONDS
    max_params_per_call: int = MAX_PARAMS_PER_CALL

    def __post_init__(self) -> None:
        if self.reset_timeout < 0:
            raise ValueError("reset_timeout must not be negative")
        if self.delete_timeout < 0:
            raise ValueError("delete_timeout must not be negative")
        if not 1 <= self.max_params_per_call <= MAX_PARAMS_PER_CALL:
            raise ValueError(f"max_params_per_call must be between 1 and {MAX_PARAMS_PER_CALL}")

    @classmethod
    def from_environment(cls) -> ReconcilerConfig:
        """Create ReconcilerConfig from environment variables."""
        return cls(
            region=os.environ.get(REGION_ENV_VAR) or None,
            endpoint_url=os.environ.get(ENDPOINT_URL_ENV_VAR) or None,
            reset_timeout=float(
                os.environ.get(RESET_TIMEOUT_ENV_VAR, str(RESET_TIMEOUT_SECONDS))
            ),
            delete_timeout=float(
                os.environ.get(DELETE_TIMEOUT_ENV_VAR, str(DELETE_TIMEOUT_SECONDS))
            ),
        )

    def client_kwargs(self) -> dict[str, str]:
        """Keyword arguments for ``boto3.client``."""
        kwargs: dict[str, str] = {}
        if self.region:
            kwargs["region_name"] = self.region
        if self.endpoint_url:
            kwargs["endpoint_url"] = self.endpoint_url
        return kwargs
