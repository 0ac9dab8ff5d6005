"""Run and control-plane configuration models."""

from __future__ import annotations

import os
import threading
from pathlib import Path
from typing import Dict, List, Optional

from pydantic import BaseModel, Field, field_validator

from fc_common.config.env import parse_float_env, parse_str_env

DEFAULT_TIMEOUT_SECONDS = 30.0
DEFAULT_POLL_INTERVAL_SECONDS = 1.0
# Longest wait the platform lock primitives accept.
MAX_TIMEOUT_SECONDS = threading.TIMEOUT_MAX


def default_timeout() -> float:
    """Return the run timeout, honoring FC_TIMEOUT when it is valid."""
    value = parse_float_env(os.environ.get("FC_TIMEOUT"))
    if value is None or not 0 < value <= MAX_TIMEOUT_SECONDS:
        return DEFAULT_TIMEOUT_SECONDS
    return value


class RunRequest(BaseModel):
    """Validated input for a run-document invocation."""

    document_name: str = Field(description="Name of the document to execute")
    timeout: float = Field(
        default_factory=default_timeout,
        gt=0,
        le=MAX_TIMEOUT_SECONDS,
        allow_inf_nan=False,
        description="Seconds to wait for results before timing out",
    )
    parameters: Dict[str, str] = Field(default_factory=dict)
    targets: List[str] = Field(default_factory=list)
    target_file: Optional[Path] = None

    @field_validator("document_name")
    @classmethod
    def _document_name_not_empty(cls, value: str) -> str:
        if not value or not value.strip():
            raise ValueError("no document name set to trigger")
        return value.strip()

    @field_validator("targets")
    @classmethod
    def _targets_not_blank(cls, value: List[str]) -> List[str]:
        if any(not target or not target.strip() for target in value):
            raise ValueError("target identifiers must be non-empty")
        return value


class ControlPlaneConfig(BaseModel):
    """Connection settings for the managed fleet control plane."""

    profile: Optional[str] = Field(default=None, description="AWS shared config profile")
    region: Optional[str] = Field(default=None, description="AWS region")
    poll_interval: float = Field(
        default=DEFAULT_POLL_INTERVAL_SECONDS,
        gt=0,
        description="Seconds between invocation status polls",
    )

    @classmethod
    def from_env(cls, **overrides: Optional[str]) -> "ControlPlaneConfig":
        """Build a config from FC_* env vars; non-None overrides win."""
        values: dict[str, object] = {
            "profile": parse_str_env(os.environ.get("FC_AWS_PROFILE")),
            "region": parse_str_env(os.environ.get("FC_AWS_REGION")),
        }
        poll_interval = parse_float_env(os.environ.get("FC_POLL_INTERVAL"))
        if poll_interval is not None:
            values["poll_interval"] = poll_interval
        values.update({key: val for key, val in overrides.items() if val is not None})
        return cls(**values)
