"""Device descriptor models.

A DeviceDescriptor identifies and addresses one physical device. Descriptors
are built once from configuration at startup and never change afterwards.
"""

from __future__ import annotations

from enum import Enum
from typing import Any, Literal

from pydantic import BaseModel, Field, field_validator, model_validator


class DeviceFamily(str, Enum):
    """Device families supported by the hub.

    Each family is served by exactly one protocol adapter.
    """

    RECEIVER = "receiver"
    SET_TOP_BOX = "set_top_box"
    WAKE_CONSOLE = "wake_console"
    PROXIED_CONSOLE = "proxied_console"


# Default ports per family (Sony REST API, adb over TCP)
DEFAULT_PORTS: dict[DeviceFamily, int] = {
    DeviceFamily.RECEIVER: 10000,
    DeviceFamily.SET_TOP_BOX: 5555,
}


class DeviceDescriptor(BaseModel):
    """Static, immutable description of a single device.

    Connection and credential fields are family-dependent:

    - receiver: host, port, optional psk, sub_type (tv or soundbar)
    - set_top_box: host, port
    - wake_console: host, device_id (the console live id)
    - proxied_console: device_id, optional account (PSN account) and
      topic_prefix (MQTT base topic)

    Attributes:
        name: Unique device name used by callers
        family: Device family tag
        host: Hostname or IP address
        port: TCP port for the device protocol
        psk: Pre-shared key sent with every request (receiver TVs)
        sub_type: Receiver sub-type, selects protocol versions
        device_id: Stable device identifier (live id, PS5 device id)
        account: External-service account reference
        topic_prefix: Message-bus base topic override

    Examples:
        >>> DeviceDescriptor(name="soundbar", family="receiver", host="192.168.1.20")
        >>> DeviceDescriptor(
        ...     name="ps5",
        ...     family="proxied_console",
        ...     device_id="ps5_living_room",
        ...     account="gamer42",
        ... )
    """

    name: str = Field(..., description="Unique device name")

    family: DeviceFamily = Field(..., description="Device family tag")

    host: str | None = Field(default=None, description="Hostname or IP address")

    port: int | None = Field(default=None, description="Device protocol port")

    psk: str | None = Field(default=None, description="Pre-shared key")

    sub_type: Literal["tv", "soundbar"] | None = Field(
        default=None,
        description="Receiver sub-type (tv or soundbar)",
    )

    device_id: str | None = Field(default=None, description="Stable device identifier")

    account: str | None = Field(default=None, description="External account reference")

    topic_prefix: str | None = Field(default=None, description="Base topic override")

    @model_validator(mode="before")
    @classmethod
    def apply_family_defaults(cls, data: Any) -> Any:
        """Fill in the default port and receiver sub-type."""
        if not isinstance(data, dict):
            return data
        data = dict(data)
        try:
            family = DeviceFamily(data.get("family"))
        except ValueError:
            return data
        if data.get("port") in (None, "", 0) and family in DEFAULT_PORTS:
            data["port"] = DEFAULT_PORTS[family]
        if family == DeviceFamily.RECEIVER and not data.get("sub_type"):
            data["sub_type"] = "soundbar"
        if data.get("psk") == "":
            data["psk"] = None
        return data

    @field_validator("name")
    @classmethod
    def validate_name(cls, v: str) -> str:
        """Validate name is non-empty."""
        v = v.strip()
        if not v:
            raise ValueError("device name must not be empty")
        return v

    @model_validator(mode="after")
    def validate_addressing(self) -> DeviceDescriptor:
        """Validate the family-specific connection fields are present."""
        if self.family in (
            DeviceFamily.RECEIVER,
            DeviceFamily.SET_TOP_BOX,
            DeviceFamily.WAKE_CONSOLE,
        ) and not self.host:
            raise ValueError(f"host is required for {self.family.value} devices")
        if self.family in (
            DeviceFamily.WAKE_CONSOLE,
            DeviceFamily.PROXIED_CONSOLE,
        ) and not self.device_id:
            raise ValueError(f"device_id is required for {self.family.value} devices")
        return self

    @property
    def address(self) -> str:
        """host:port string for socket-based families."""
        return f"{self.host}:{self.port}" if self.port else f"{self.host}"

    @property
    def is_tv(self) -> bool:
        """Check if descriptor is a receiver TV."""
        return self.sub_type == "tv"

    class Config:
        """Pydantic model configuration."""

        frozen = True
        json_schema_extra = {
            "examples": [
                {
                    "name": "living-room-tv",
                    "family": "receiver",
                    "host": "192.168.1.40",
                    "psk": "0000",
                    "sub_type": "tv",
                },
                {
                    "name": "shield",
                    "family": "set_top_box",
                    "host": "192.168.1.41",
                },
                {
                    "name": "xbox",
                    "family": "wake_console",
                    "host": "192.168.1.42",
                    "device_id": "FD00112233445566",
                },
            ]
        }
