"""Shared helpers for fleetcmd."""

from fc_common.api import FleetError, configure_logging

__all__ = ["configure_logging", "FleetError"]
