"""Typer CLI package."""

from fc_ui.cli.main import app

__all__ = ["app"]
