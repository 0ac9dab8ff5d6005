"""Shared state and service wiring for CLI commands."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Callable

from fc_common.api import FleetError
from fc_controller.api import ControlPlaneConfig, RunService, SSMControlPlane
from fc_ui.console import ConsoleResultSink


def build_ssm_service(config: ControlPlaneConfig) -> RunService:
    """Wire a RunService against AWS Systems Manager."""
    return RunService(lambda: SSMControlPlane.from_config(config))


def describe_error(exc: FleetError) -> str:
    """Render an error with its phase and root cause for the terminal."""
    message = f"{exc} [{exc.context.get('phase', 'run')}]"
    cause = exc.__cause__
    if cause is not None and str(cause):
        message = f"{message}: {cause}"
    return message


@dataclass
class CLIContext:
    """Container for CLI services; tests swap the factories."""

    no_color: bool = False
    service_factory: Callable[[ControlPlaneConfig], RunService] = field(
        default=build_ssm_service
    )
    sink_factory: Callable[[bool], ConsoleResultSink] = field(
        default=lambda no_color: ConsoleResultSink(no_color=no_color)
    )

    def make_sink(self) -> ConsoleResultSink:
        # Built per command so the console binds to the current stdout.
        return self.sink_factory(self.no_color)

    def make_service(self, config: ControlPlaneConfig) -> RunService:
        return self.service_factory(config)
