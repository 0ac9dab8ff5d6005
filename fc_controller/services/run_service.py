"""Application-facing run orchestration for the CLI."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Callable, Optional

from fc_common.errors import ConfigurationError, InventoryError, SinkError, wrap_error
from fc_controller.control_plane import RemoteControlPlane
from fc_controller.models.config import RunRequest
from fc_controller.models.instances import InstanceRecord
from fc_controller.models.types import Invocation
from fc_controller.orchestrator import Orchestrator
from fc_controller.run_state import RunState
from fc_controller.sinks import ResultSink
from fc_controller.targets import resolve_targets

logger = logging.getLogger(__name__)

ControlPlaneFactory = Callable[[], RemoteControlPlane]
OrchestratorFactory = Callable[[RemoteControlPlane, ResultSink], Orchestrator]


@dataclass
class RunResult:
    """Outcome of a completed run-document call."""

    targets: list[str]
    state: RunState
    invocation: Optional[Invocation] = None


class RunService:
    """Coordinate document runs and inventory listing for CLI commands."""

    def __init__(
        self,
        control_plane_factory: ControlPlaneFactory,
        orchestrator_factory: OrchestratorFactory = Orchestrator,
    ) -> None:
        self._control_plane_factory = control_plane_factory
        self._orchestrator_factory = orchestrator_factory

    def _control_plane(self) -> RemoteControlPlane:
        try:
            return self._control_plane_factory()
        except Exception as exc:
            raise wrap_error(
                ConfigurationError,
                "failed to create control plane session", cause=exc
            ) from exc

    def run_document(self, request: RunRequest, sink: ResultSink) -> RunResult:
        """Resolve targets, submit the document and stream outcomes to the sink."""
        targets = resolve_targets(request.targets, request.target_file)
        try:
            sink.show_targets(targets)
            sink.notice("Use ctrl-c to abort the command early.")
        except Exception as exc:
            raise wrap_error(SinkError, "failed to print targets", cause=exc) from exc

        orchestrator = self._orchestrator_factory(self._control_plane(), sink)
        invocation = orchestrator.submit(targets, request.document_name, request.parameters)
        state = orchestrator.collect(invocation, request.timeout)
        return RunResult(targets=targets, state=state, invocation=invocation)

    def list_instances(self) -> list[InstanceRecord]:
        """Return the managed instances known to the control plane."""
        control_plane = self._control_plane()
        try:
            instances = control_plane.list_instances()
        except Exception as exc:
            raise wrap_error(InventoryError, "failed to list instances", cause=exc) from exc
        logger.debug("Listed %d managed instance(s)", len(instances))
        return instances
