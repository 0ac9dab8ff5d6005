"""
Command-line interface for fleetcmd.

Runs documents on managed fleet instances and streams per-instance results.
"""

from __future__ import annotations

from typing import Optional

import typer

from fc_common.api import configure_logging
from fc_ui.cli.commands.instances import register_instances_command
from fc_ui.cli.commands.run_document import register_run_document_command
from fc_ui.cli.context import CLIContext

ctx_store = CLIContext()

app = typer.Typer(
    help="Run documents on managed fleet instances and collect the results.",
    no_args_is_help=True,
)


@app.callback()
def entry(
    debug: bool = typer.Option(
        False,
        "--debug",
        help="Enable verbose debug logging.",
    ),
    log_file: Optional[str] = typer.Option(
        None,
        "--log-file",
        help="Also write logs to this file (or FC_LOG_FILE).",
    ),
    no_color: bool = typer.Option(
        False,
        "--no-color",
        help="Disable colored output.",
    ),
) -> None:
    """Global options shared by every command."""
    configure_logging(debug=debug, log_file=log_file, force=True)
    ctx_store.no_color = no_color


register_run_document_command(app, ctx_store)
register_instances_command(app, ctx_store)


def main() -> None:
    """Console script entrypoint (Typer app)."""
    app()


if __name__ == "__main__":
    main()
