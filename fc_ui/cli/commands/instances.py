from __future__ import annotations

from pathlib import Path
from typing import Optional

import typer

from fc_common.api import FleetError
from fc_controller.api import ControlPlaneConfig
from fc_ui.cli.context import CLIContext, describe_error
from fc_ui.console import write_instances


def register_instances_command(app: typer.Typer, ctx: CLIContext) -> None:
    """Register the list-instances command on the given Typer app."""

    @app.command("list-instances")
    def list_instances(
        output: Optional[Path] = typer.Option(
            None,
            "--output",
            "-o",
            help="Write the instances as JSON to this file (usable as --target-file).",
        ),
        profile: Optional[str] = typer.Option(
            None, "--profile", help="AWS shared config profile (or FC_AWS_PROFILE)."
        ),
        region: Optional[str] = typer.Option(
            None, "--region", help="AWS region (or FC_AWS_REGION)."
        ),
    ) -> None:
        """List managed instances, or save them as a target file."""
        sink = ctx.make_sink()
        service = ctx.make_service(ControlPlaneConfig.from_env(profile=profile, region=region))
        try:
            instances = service.list_instances()
        except FleetError as exc:
            sink.show_error(f"Listing failed: {describe_error(exc)}")
            raise typer.Exit(1)

        if output is None:
            sink.show_instances(instances)
            return
        try:
            write_instances(output, instances)
        except OSError as exc:
            sink.show_error(f"Could not write {output}: {exc}")
            raise typer.Exit(1)
        sink.show_success(f"Wrote {len(instances)} instance(s) to {output}")
