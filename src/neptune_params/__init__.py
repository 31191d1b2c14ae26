"""
neptune-params: declarative management of Amazon Neptune DB parameter groups.

Declare a group's user-set parameters in YAML; the reconciler computes the
minimal resets and modifications, sends them in batches of at most 20, and
reads the group back so local state always matches what the service holds.

Example:
    from neptune_params import NeptuneParameterGroupClient, ReconcilerConfig
    from neptune_params_provisioner import ParameterGroupController, ParameterGroupManifest

    config = ReconcilerConfig(region="us-east-1")
    controller = ParameterGroupController(NeptuneParameterGroupClient(config), config)
    manifest = ParameterGroupManifest.from_yaml(open("group.yaml").read())
    result = controller.reconcile(manifest.to_group())
"""

from .backend import ParameterGroupBackend
from .client import NeptuneParameterGroupClient
from .config import ReconcilerConfig
from .exceptions import (
    NeptuneParamsError,
    ParameterApplyError,
    ParameterGroupCreateError,
    ParameterGroupDeleteError,
    ParameterGroupError,
    ParameterGroupMismatchError,
    ParameterGroupNotFoundError,
    RetryTimeoutError,
    ValidationError,
)
from .models import (
    DEFAULT_DESCRIPTION,
    MAX_PARAMS_PER_CALL,
    ApplyMethod,
    GroupMetadata,
    GroupState,
    Parameter,
    ParameterDiff,
    ParameterGroup,
)
from .retry import Decision, RetryOutcome, retry

__version__ = "0.3.0"

__all__ = [
    "DEFAULT_DESCRIPTION",
    "MAX_PARAMS_PER_CALL",
    "ApplyMethod",
    "Decision",
    "GroupMetadata",
    "GroupState",
    "NeptuneParameterGroupClient",
    "NeptuneParamsError",
    "Parameter",
    "ParameterApplyError",
    "ParameterDiff",
    "ParameterGroup",
    "ParameterGroupBackend",
    "ParameterGroupCreateError",
    "ParameterGroupDeleteError",
    "ParameterGroupError",
    "ParameterGroupMismatchError",
    "ParameterGroupNotFoundError",
    "ReconcilerConfig",
    "RetryOutcome",
    "RetryTimeoutError",
    "ValidationError",
    "__version__",
    "retry",
]
