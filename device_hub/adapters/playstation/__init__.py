"""PlayStation 5 proxied-console adapters (Home Assistant REST or MQTT)."""

from device_hub.adapters.playstation.home_assistant import PlaystationHomeAssistantAdapter
from device_hub.adapters.playstation.mqtt import ConsoleSnapshot, PlaystationMqttAdapter

__all__ = ["ConsoleSnapshot", "PlaystationHomeAssistantAdapter", "PlaystationMqttAdapter"]
