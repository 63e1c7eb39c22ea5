"""Normalized device state models.

DeviceState is the common envelope every adapter produces, whatever the
wire protocol. States are immutable and always replaced as a whole.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Any

from pydantic import BaseModel, Field

from device_hub.core.models.descriptor import DeviceDescriptor, DeviceFamily


class DeviceState(BaseModel):
    """Snapshot of a device at one instant.

    Attributes:
        name: Device name
        family: Device family tag
        online: Whether the device answered the last check
        power: Power state, None when unknown
        volume: Volume level on the device's own scale
        mute: Mute flag
        input: Active input or foreground activity
        last_error: Error message from the last failed check
        attributes: Family-specific payload (remote codes, metadata, ...)

    Examples:
        >>> DeviceState(name="soundbar", family="receiver", online=True, power=True, volume=20)
        >>> DeviceState.offline(descriptor, "connection refused")
    """

    name: str = Field(..., description="Device name")

    family: DeviceFamily = Field(..., description="Device family tag")

    online: bool = Field(default=False, description="Device answered the last check")

    power: bool | None = Field(default=None, description="Power state (None if unknown)")

    volume: int | None = Field(default=None, description="Volume level")

    mute: bool | None = Field(default=None, description="Mute flag")

    input: str | None = Field(default=None, description="Active input or activity")

    last_error: str | None = Field(default=None, description="Last error message")

    attributes: dict[str, Any] = Field(
        default_factory=dict,
        description="Family-specific payload",
    )

    @classmethod
    def offline(cls, descriptor: DeviceDescriptor, error: str | None = None) -> DeviceState:
        """Create an offline envelope for a device with no known state.

        Args:
            descriptor: Device the state belongs to
            error: Reason the device is considered offline

        Returns:
            DeviceState with online=False
        """
        return cls(
            name=descriptor.name,
            family=descriptor.family,
            online=False,
            last_error=error,
        )

    def mark_offline(self, error: str | None = None) -> DeviceState:
        """Copy of this snapshot flagged as offline."""
        return self.model_copy(update={"online": False, "last_error": error})

    def with_error(self, error: str) -> DeviceState:
        """Copy of this snapshot carrying an error but keeping reachability."""
        return self.model_copy(update={"last_error": error})

    def get_attribute(self, key: str, default: Any = None) -> Any:
        """Get a family-specific attribute with optional default."""
        return self.attributes.get(key, default)

    class Config:
        """Pydantic model configuration."""

        frozen = True
        json_schema_extra = {
            "examples": [
                {
                    "name": "soundbar",
                    "family": "receiver",
                    "online": True,
                    "power": True,
                    "volume": 20,
                    "mute": False,
                },
                {
                    "name": "ps5",
                    "family": "proxied_console",
                    "online": True,
                    "power": False,
                    "input": "STANDBY",
                    "attributes": {"power_state": "STANDBY"},
                },
            ]
        }


@dataclass
class CacheEntry:
    """Cached snapshot of one device.

    An invalidated entry keeps its snapshot but reports an infinite age, so
    the next read refetches while the value remains available as fallback.
    """

    state: DeviceState
    captured_at: float
    ttl: float
    stale: bool = False

    def age(self, now: float) -> float:
        """Seconds since capture, infinite once invalidated."""
        if self.stale:
            return math.inf
        return now - self.captured_at

    def is_fresh(self, now: float) -> bool:
        """Check if the entry may be served without a fetch."""
        return self.age(now) < self.ttl
