"""Rich-based console output used for all TTY output."""

from __future__ import annotations

import json
import sys
from pathlib import Path
from typing import IO, Sequence

from rich.console import Console
from rich.table import Table
from rich.text import Text
from rich.theme import Theme

from fc_controller.api import INSTANCE_TABLE_COLUMNS, InstanceRecord, Outcome, OutcomeStatus

THEME = Theme(
    {
        "info": "cyan",
        "warning": "yellow",
        "error": "red",
        "success": "green",
        "accent": "#3ea6ff",
    }
)

_STATUS_STYLES = {
    OutcomeStatus.SUCCESS: "success",
    OutcomeStatus.FAILED: "error",
    OutcomeStatus.TIMED_OUT: "error",
    OutcomeStatus.CANCELLED: "warning",
    OutcomeStatus.PENDING: "info",
}


class ConsoleResultSink:
    """Writes run output to a console: targets, notices and one block per outcome."""

    def __init__(self, stream: IO[str] | None = None, *, no_color: bool = False):
        self.console = Console(
            theme=THEME,
            file=stream or sys.stdout,
            emoji=False,
            highlight=False,
            soft_wrap=True,
            no_color=no_color,
        )

    def show_targets(self, targets: Sequence[str]) -> None:
        self.console.print(f"Initialized with targets: {', '.join(targets)}", markup=False)

    def notice(self, message: str) -> None:
        self.console.print(message, style="info", markup=False)

    def write_outcome(self, outcome: Outcome) -> None:
        header = Text(f"\n{outcome.target} - ", style="bold")
        header.append(outcome.status.value, style=_STATUS_STYLES[outcome.status])
        header.append(":")
        self.console.print(header)
        if outcome.error:
            self._write_verbatim(outcome.error)
        self._write_verbatim(outcome.output or "")

    def _write_verbatim(self, value: str) -> None:
        # Remote output bypasses rendering: tabs and ":name:" sequences stay as sent.
        stream = self.console.file
        stream.write(value + "\n")
        stream.flush()

    def show_error(self, message: str) -> None:
        self.console.print(message, style="error", markup=False)

    def show_warning(self, message: str) -> None:
        self.console.print(message, style="warning", markup=False)

    def show_success(self, message: str) -> None:
        self.console.print(message, style="success", markup=False)

    def show_instances(self, instances: Sequence[InstanceRecord]) -> None:
        table = Table(title="Managed instances", header_style="accent")
        for column in INSTANCE_TABLE_COLUMNS:
            table.add_column(column, overflow="fold")
        for instance in instances:
            table.add_row(*instance.table_row())
        self.console.print(table)


def write_instances(path: Path, instances: Sequence[InstanceRecord]) -> None:
    """Write instances as a JSON array readable as a target file."""
    payload = [instance.to_payload() for instance in instances]
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(payload, indent=2) + "\n", encoding="utf-8")
