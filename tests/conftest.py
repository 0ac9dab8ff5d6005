import os
from collections import Counter, defaultdict

import pytest
from rich.console import Console
from rich.table import Table


@pytest.fixture(autouse=True)
def _isolate_fc_env(monkeypatch):
    """Keep FC_* settings from the developer's shell out of the tests."""
    for name in list(os.environ):
        if name.startswith("FC_"):
            monkeypatch.delenv(name)


def _registered_markers(config) -> set[str]:
    return {line.split(":", 1)[0].strip() for line in config.getini("markers")}


def pytest_terminal_summary(terminalreporter, exitstatus, config):
    """Print pass/fail counts per test marker at the end of the session."""
    _ = exitstatus
    known = _registered_markers(config)
    counts: dict[str, Counter] = defaultdict(Counter)
    durations: dict[str, float] = defaultdict(float)

    for outcome in ("passed", "failed", "skipped"):
        for report in terminalreporter.stats.get(outcome, []):
            # Count the test call, plus tests skipped during setup
            if report.when != "call" and not (report.when == "setup" and report.skipped):
                continue
            for marker in known.intersection(report.keywords):
                counts[marker][outcome] += 1
                durations[marker] += getattr(report, "duration", 0.0)

    if not counts:
        return

    table = Table(title="Test Statistics by Marker", header_style="bold magenta")
    table.add_column("Marker", style="cyan")
    for column, style in (("Total", None), ("Passed", "green"), ("Failed", "red"), ("Skipped", "yellow")):
        table.add_column(column, justify="right", style=style)
    table.add_column("Duration (s)", justify="right", style="blue")

    for marker in sorted(counts):
        stats = counts[marker]
        table.add_row(
            marker,
            str(sum(stats.values())),
            str(stats["passed"]),
            str(stats["failed"]),
            str(stats["skipped"]),
            f"{durations[marker]:.2f}",
        )

    console = Console()
    console.print()
    console.print(table)
