"""Managed instance records as stored in target files."""

from __future__ import annotations

from datetime import datetime
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


class InstanceRecord(BaseModel):
    """One managed instance, keyed the way the control plane reports it.

    Target files are JSON arrays of these objects; only ``InstanceId`` is
    required and unknown fields are ignored.
    """

    instance_id: str = Field(alias="InstanceId")
    name: Optional[str] = Field(default=None, alias="Name")
    state: Optional[str] = Field(default=None, alias="State")
    image_id: Optional[str] = Field(default=None, alias="ImageId")
    ping_status: Optional[str] = Field(default=None, alias="PingStatus")
    platform_name: Optional[str] = Field(default=None, alias="PlatformName")
    platform_version: Optional[str] = Field(default=None, alias="PlatformVersion")
    ip_address: Optional[str] = Field(default=None, alias="IPAddress")
    agent_version: Optional[str] = Field(default=None, alias="AgentVersion")
    last_ping: Optional[datetime] = Field(default=None, alias="LastPingDateTime")

    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    @field_validator("instance_id")
    @classmethod
    def _instance_id_not_empty(cls, value: str) -> str:
        if not value or not value.strip():
            raise ValueError("InstanceId must be non-empty")
        return value

    @classmethod
    def from_ssm(cls, payload: dict[str, Any]) -> "InstanceRecord":
        """Build a record from a describe_instance_information entry."""
        return cls.model_validate(
            {**payload, "Name": payload.get("Name") or payload.get("ComputerName")}
        )

    def to_payload(self) -> dict[str, Any]:
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)

    def table_row(self) -> list[str]:
        last_ping = self.last_ping.strftime("%Y-%m-%d %H:%M") if self.last_ping else ""
        return [
            self.instance_id,
            self.name or "",
            self.state or "",
            self.image_id or "",
            self.platform_name or "",
            self.platform_version or "",
            self.ip_address or "",
            self.ping_status or "",
            last_ping,
        ]


INSTANCE_TABLE_COLUMNS = [
    "Instance ID",
    "Name",
    "State",
    "Image ID",
    "Platform",
    "Version",
    "IP",
    "Status",
    "Last pinged",
]
