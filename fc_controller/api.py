"""Public controller API surface."""

from fc_controller.adapters.ssm import SSMControlPlane
from fc_controller.control_plane import RemoteControlPlane
from fc_controller.interrupts import DEBOUNCE_THRESHOLD, InterruptSource
from fc_controller.models import (
    INSTANCE_TABLE_COLUMNS,
    ControlPlaneConfig,
    InstanceRecord,
    Invocation,
    Outcome,
    OutcomeStatus,
    RunRequest,
)
from fc_controller.orchestrator import Orchestrator
from fc_controller.run_state import RunState, RunStateMachine
from fc_controller.services.run_service import RunResult, RunService
from fc_controller.sinks import ResultSink
from fc_controller.targets import load_target_file, parse_parameters, resolve_targets

__all__ = [
    "ControlPlaneConfig",
    "DEBOUNCE_THRESHOLD",
    "INSTANCE_TABLE_COLUMNS",
    "InstanceRecord",
    "InterruptSource",
    "Invocation",
    "Orchestrator",
    "Outcome",
    "OutcomeStatus",
    "RemoteControlPlane",
    "ResultSink",
    "RunRequest",
    "RunResult",
    "RunService",
    "RunState",
    "RunStateMachine",
    "SSMControlPlane",
    "load_target_file",
    "parse_parameters",
    "resolve_targets",
]
