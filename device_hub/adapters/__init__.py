"""Protocol adapters, one per device family."""

from device_hub.adapters.base import BaseDeviceAdapter
from device_hub.adapters.playstation import PlaystationHomeAssistantAdapter, PlaystationMqttAdapter
from device_hub.adapters.shield import ShieldAdapter
from device_hub.adapters.sony import SonyAdapter
from device_hub.adapters.xbox import XboxAdapter

__all__ = [
    "BaseDeviceAdapter",
    "PlaystationHomeAssistantAdapter",
    "PlaystationMqttAdapter",
    "ShieldAdapter",
    "SonyAdapter",
    "XboxAdapter",
]
