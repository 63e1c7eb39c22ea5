"""Xbox wake/discovery console adapter (SmartGlass UDP plus REST relay)."""

from device_hub.adapters.xbox.adapter import BUTTONS, MEDIA_COMMANDS, XboxAdapter
from device_hub.adapters.xbox.relay import XboxRelayClient
from device_hub.adapters.xbox.smartglass import (
    SmartGlassTransport,
    build_discovery_packet,
    build_power_on_packet,
)

__all__ = [
    "BUTTONS",
    "MEDIA_COMMANDS",
    "SmartGlassTransport",
    "XboxAdapter",
    "XboxRelayClient",
    "build_discovery_packet",
    "build_power_on_packet",
]
