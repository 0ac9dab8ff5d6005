"""Public API surface for fc_common."""

from fc_common.errors import (
    AbortError,
    ConfigurationError,
    FleetError,
    InventoryError,
    NoTargetsError,
    PollError,
    RunTimeoutError,
    SinkError,
    SubmissionError,
    TargetFileError,
    UserAbortError,
    error_to_payload,
    wrap_error,
)
from fc_common.logging import bound_run_context, configure_logging

__all__ = [
    "AbortError",
    "ConfigurationError",
    "FleetError",
    "InventoryError",
    "NoTargetsError",
    "PollError",
    "RunTimeoutError",
    "SinkError",
    "SubmissionError",
    "TargetFileError",
    "UserAbortError",
    "bound_run_context",
    "configure_logging",
    "error_to_payload",
    "wrap_error",
]
