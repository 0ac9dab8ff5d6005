"""Run lifecycle state machine."""

from __future__ import annotations

import logging
from enum import Enum
from typing import Optional

logger = logging.getLogger(__name__)


class RunState(str, Enum):
    """Lifecycle states of one orchestrated run."""

    IDLE = "idle"
    SUBMITTING = "submitting"
    COLLECTING = "collecting"
    COMPLETED = "completed"
    TIMED_OUT = "timed_out"
    ABORTED = "aborted"
    FAILED = "failed"


_TERMINAL_STATES = {
    RunState.COMPLETED,
    RunState.TIMED_OUT,
    RunState.ABORTED,
    RunState.FAILED,
}


_ALLOWED_TRANSITIONS = {
    RunState.IDLE: {RunState.SUBMITTING},
    RunState.SUBMITTING: {RunState.COLLECTING},
    RunState.COLLECTING: {
        RunState.COMPLETED,
        RunState.TIMED_OUT,
        RunState.ABORTED,
    },
    RunState.COMPLETED: set(),
    RunState.TIMED_OUT: set(),
    RunState.ABORTED: set(),
    RunState.FAILED: set(),
}


class RunStateMachine:
    """State tracker for a single run.

    Only the orchestrator's collection loop drives transitions, so no
    locking is done here.
    """

    def __init__(self) -> None:
        self._state = RunState.IDLE

    @property
    def state(self) -> RunState:
        return self._state

    def is_terminal(self) -> bool:
        return self._state in _TERMINAL_STATES

    def transition(self, new_state: RunState, reason: Optional[str] = None) -> RunState:
        """Move to ``new_state``; raise ValueError if not allowed.

        FAILED is reachable from every non-terminal state.
        """
        allowed = _ALLOWED_TRANSITIONS.get(self._state, set())
        failing = new_state == RunState.FAILED and not self.is_terminal()
        if new_state not in allowed and not failing:
            raise ValueError(f"Invalid transition {self._state} -> {new_state}")
        logger.debug("Run state %s -> %s (%s)", self._state.value, new_state.value, reason)
        self._state = new_state
        return new_state
