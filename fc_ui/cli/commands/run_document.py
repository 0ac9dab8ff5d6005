from __future__ import annotations

import logging
from pathlib import Path
from typing import List, Optional

import typer
from pydantic import ValidationError

from fc_common.api import (
    ConfigurationError,
    FleetError,
    RunTimeoutError,
    UserAbortError,
    error_to_payload,
)
from fc_controller.api import ControlPlaneConfig, RunRequest, parse_parameters
from fc_ui.cli.context import CLIContext, describe_error

logger = logging.getLogger(__name__)


def _validation_message(exc: ValidationError) -> str:
    return "; ".join(
        str(err.get("msg", "")).removeprefix("Value error, ") for err in exc.errors()
    )


def register_run_document_command(app: typer.Typer, ctx: CLIContext) -> None:
    """Register the run-document command on the given Typer app."""

    @app.command("run-document")
    def run_document(
        name: str = typer.Option(
            "",
            "--name",
            "-n",
            help="Name of the document to execute.",
        ),
        timeout: Optional[float] = typer.Option(
            None,
            "--timeout",
            "-i",
            help="Seconds to wait for command results before timing out (default 30, or FC_TIMEOUT).",
        ),
        parameters: Optional[List[str]] = typer.Option(
            None,
            "--parameter",
            "-p",
            help="Zero or more document parameters as name:value.",
        ),
        targets: Optional[List[str]] = typer.Option(
            None,
            "--target",
            "-t",
            help="Instance id to target; repeat for several.",
        ),
        target_file: Optional[Path] = typer.Option(
            None,
            "--target-file",
            help="JSON file with an array of instances (as written by list-instances --output).",
        ),
        profile: Optional[str] = typer.Option(
            None, "--profile", help="AWS shared config profile (or FC_AWS_PROFILE)."
        ),
        region: Optional[str] = typer.Option(
            None, "--region", help="AWS region (or FC_AWS_REGION)."
        ),
    ) -> None:
        """Run a document on the targets and stream per-target results."""
        sink = ctx.make_sink()

        try:
            request_fields: dict[str, object] = {
                "document_name": name,
                "parameters": parse_parameters(parameters or []),
                "targets": list(targets or []),
                "target_file": target_file,
            }
            if timeout is not None:
                request_fields["timeout"] = timeout
            request = RunRequest(**request_fields)
            config = ControlPlaneConfig.from_env(profile=profile, region=region)
        except ValidationError as exc:
            sink.show_error(_validation_message(exc))
            raise typer.Exit(1)
        except ConfigurationError as exc:
            sink.show_error(str(exc))
            raise typer.Exit(1)

        service = ctx.make_service(config)
        try:
            service.run_document(request, sink)
        except (RunTimeoutError, UserAbortError) as exc:
            sink.show_warning(describe_error(exc))
            raise typer.Exit(1)
        except FleetError as exc:
            logger.debug("Run failed", extra={"payload": error_to_payload(exc)})
            sink.show_error(f"Run failed: {describe_error(exc)}")
            raise typer.Exit(1)
