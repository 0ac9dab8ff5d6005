"""Controller services used by the CLI."""

from fc_controller.services.run_service import RunResult, RunService

__all__ = ["RunResult", "RunService"]
