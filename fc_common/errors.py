"""Shared error taxonomy for fleetcmd."""

from __future__ import annotations

from typing import Any, ClassVar, Mapping, TypeVar


def _normalize_context_value(value: Any) -> Any:
    if isinstance(value, Mapping):
        return normalize_context(value)
    if isinstance(value, (list, tuple)):
        return [_normalize_context_value(item) for item in value]
    if isinstance(value, (str, int, float, bool)) or value is None:
        return value
    return str(value)


def normalize_context(context: Mapping[str, Any]) -> dict[str, Any]:
    """Return a JSON-friendly copy of an error context mapping."""
    return {key: _normalize_context_value(val) for key, val in context.items()}


class FleetError(Exception):
    """Base error type for typed failure handling.

    Every subclass names the run phase that produced it; the phase is
    merged into the context so callers can report where a run broke.
    """

    phase: ClassVar[str] = "run"

    def __init__(
        self,
        message: str,
        *,
        context: Mapping[str, Any] | None = None,
        cause: Exception | None = None,
    ) -> None:
        super().__init__(message)
        self.context = normalize_context({"phase": self.phase, **(context or {})})
        if cause is not None:
            self.__cause__ = cause

    @property
    def error_type(self) -> str:
        return self.__class__.__name__


class ConfigurationError(FleetError):
    """Invalid user input or configuration."""

    phase = "config"


class NoTargetsError(FleetError):
    """Target resolution produced an empty target list."""

    phase = "resolve"


class TargetFileError(FleetError):
    """The target file could not be read or has the wrong shape."""

    phase = "resolve"


class SubmissionError(FleetError):
    """The control plane rejected the command or was unreachable."""

    phase = "submit"


class PollError(FleetError):
    """The outcome stream failed while collecting results."""

    phase = "collect"


class AbortError(FleetError):
    """The abort request itself failed."""

    phase = "abort"


class RunTimeoutError(FleetError, TimeoutError):
    """The run deadline passed before the outcome stream closed."""

    phase = "collect"


class UserAbortError(FleetError):
    """The user interrupted the run twice."""

    phase = "collect"


class SinkError(FleetError):
    """Writing a result record failed."""

    phase = "sink-write"


class InventoryError(FleetError):
    """Listing managed instances failed."""

    phase = "list"


T = TypeVar("T", bound=FleetError)


def wrap_error(
    error_cls: type[T],
    message: str,
    *,
    context: Mapping[str, Any] | None = None,
    cause: Exception | None = None,
) -> T:
    """Create a typed FleetError with optional context and cause."""
    return error_cls(message, context=context, cause=cause)


def error_to_payload(error: FleetError) -> dict[str, Any]:
    """Convert a FleetError to a flat log/report payload."""
    return {
        "error_type": error.error_type,
        "error": str(error),
        "error_context": error.context,
    }
