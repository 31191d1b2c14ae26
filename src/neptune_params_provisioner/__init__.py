"""Reconciliation core for declarative Neptune parameter groups."""

from .applier import ApplyResult, apply_diff
from .batcher import batch
from .differ import compute_diff, identity_of
from .handler import on_event
from .lifecycle import ParameterGroupController, UpdateResult
from .manifest import ParameterGroupManifest

__all__ = [
    "ApplyResult",
    "ParameterGroupController",
    "ParameterGroupManifest",
    "UpdateResult",
    "apply_diff",
    "batch",
    "compute_diff",
    "identity_of",
    "on_event",
]
