"""MQTT topic layout for PlayStation consoles bridged through Home Assistant.

The bridge publishes each console as Home Assistant discovery entities:
``{base}/switch/{device_id}/power/state`` for power and
``{base}/sensor/{device_id}/state`` for activity. Commands go to
``{base}/switch/{device_id}/set``.
"""

from dataclasses import dataclass
import os


@dataclass
class PlaystationTopicConfig:
    """Configuration for PlayStation MQTT topics."""

    base_prefix: str = "homeassistant"

    def __post_init__(self):
        # Load from environment
        self.base_prefix = os.getenv("PS5_MQTT_TOPIC", self.base_prefix).rstrip("/")

    def power_state_filter(self) -> str:
        """Wildcard filter matching every console's power state."""
        return f"{self.base_prefix}/switch/+/power/state"

    def sensor_state_filter(self) -> str:
        """Wildcard filter matching every console's activity sensor."""
        return f"{self.base_prefix}/sensor/+/state"

    def power_state(self, device_id: str) -> str:
        return f"{self.base_prefix}/switch/{device_id}/power/state"

    def sensor_state(self, device_id: str) -> str:
        return f"{self.base_prefix}/sensor/{device_id}/state"

    def power_set(self, device_id: str) -> str:
        """Command topic accepting ON/OFF."""
        return f"{self.base_prefix}/switch/{device_id}/set"

    def device_id_from(self, topic: str) -> str | None:
        """Extract the device id from a state topic under this base.

        Examples:
            >>> PlaystationTopicConfig("homeassistant").device_id_from("homeassistant/switch/ps5/power/state")
            'ps5'
        """
        prefix = f"{self.base_prefix}/"
        if not topic.startswith(prefix):
            return None
        parts = topic[len(prefix):].split("/")
        if len(parts) >= 3 and parts[0] in ("switch", "sensor"):
            return parts[1]
        return None


def get_playstation_topics(base_prefix: str | None = None) -> PlaystationTopicConfig:
    """Topic config, with an explicit base taking precedence over PS5_MQTT_TOPIC."""
    config = PlaystationTopicConfig()
    if base_prefix:
        config.base_prefix = base_prefix.rstrip("/")
    return config
