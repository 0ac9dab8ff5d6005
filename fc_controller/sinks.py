"""Result sink contract."""

from __future__ import annotations

from typing import Protocol, Sequence

from fc_controller.models.types import Outcome


class ResultSink(Protocol):
    """Renders or persists result records for a run."""

    def show_targets(self, targets: Sequence[str]) -> None:
        """Confirm the resolved target list once, before submission."""
        raise NotImplementedError

    def notice(self, message: str) -> None:
        """Surface a short user-facing message."""
        raise NotImplementedError

    def write_outcome(self, outcome: Outcome) -> None:
        """Write one result record; raising aborts the run."""
        raise NotImplementedError
