"""Controller data models."""

from fc_controller.models.config import ControlPlaneConfig, RunRequest
from fc_controller.models.instances import INSTANCE_TABLE_COLUMNS, InstanceRecord
from fc_controller.models.types import Invocation, Outcome, OutcomeStatus

__all__ = [
    "ControlPlaneConfig",
    "INSTANCE_TABLE_COLUMNS",
    "InstanceRecord",
    "Invocation",
    "Outcome",
    "OutcomeStatus",
    "RunRequest",
]
