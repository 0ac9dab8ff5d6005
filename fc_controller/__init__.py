"""Controller facade: target resolution, submission and result collection."""

from fc_controller.orchestrator import Orchestrator
from fc_controller.run_state import RunState
from fc_controller.services.run_service import RunService

__all__ = ["Orchestrator", "RunService", "RunState"]
