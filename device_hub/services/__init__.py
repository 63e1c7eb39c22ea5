"""Hub services: state cache, refresh scheduler, managers and shared clients."""

from device_hub.services.config_loader import find_config_file, load_config, parse_config
from device_hub.services.device_manager import (
    DeviceManager,
    ProxiedConsoleManager,
    ReceiverManager,
    SetTopBoxManager,
    WakeConsoleManager,
)
from device_hub.services.ha_client import HomeAssistantClient
from device_hub.services.mqtt_client import MqttClient
from device_hub.services.scheduler import PollCycle, RefreshScheduler
from device_hub.services.state_cache import StateCache

__all__ = [
    "DeviceManager",
    "HomeAssistantClient",
    "MqttClient",
    "PollCycle",
    "ProxiedConsoleManager",
    "ReceiverManager",
    "RefreshScheduler",
    "SetTopBoxManager",
    "StateCache",
    "WakeConsoleManager",
    "find_config_file",
    "load_config",
    "parse_config",
]
