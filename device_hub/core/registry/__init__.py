"""Device registry and hub configuration.

Provides the static device registry and the configuration models the hub
is built from.
"""

from device_hub.core.registry.config import HomeAssistantSettings, HubConfig, MqttSettings
from device_hub.core.registry.device_registry import DeviceRegistry

__all__ = [
    "DeviceRegistry",
    "HomeAssistantSettings",
    "HubConfig",
    "MqttSettings",
]
