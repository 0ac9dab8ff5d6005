"""Shared controller data types."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from types import MappingProxyType
from typing import Mapping, Optional, Tuple


class OutcomeStatus(str, Enum):
    """Per-target status of one invocation."""

    PENDING = "pending"
    SUCCESS = "success"
    FAILED = "failed"
    CANCELLED = "cancelled"
    TIMED_OUT = "timed-out"

    @property
    def is_terminal(self) -> bool:
        return self is not OutcomeStatus.PENDING


@dataclass(frozen=True)
class Outcome:
    """Result record for one (invocation, target) pair."""

    target: str
    status: OutcomeStatus
    error: Optional[str] = None
    output: Optional[str] = None

    @property
    def is_terminal(self) -> bool:
        return self.status.is_terminal


@dataclass(frozen=True)
class Invocation:
    """One submitted command instance; read-only once created."""

    invocation_id: str
    document_name: str
    targets: Tuple[str, ...]
    parameters: Mapping[str, str] = field(default_factory=dict)
    created_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    def __post_init__(self) -> None:
        object.__setattr__(self, "targets", tuple(self.targets))
        object.__setattr__(
            self, "parameters", MappingProxyType(dict(self.parameters))
        )
