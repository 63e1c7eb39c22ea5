"""Static configuration (MQTT topic layout)."""

from device_hub.config.mqtt_topics import PlaystationTopicConfig, get_playstation_topics

__all__ = ["PlaystationTopicConfig", "get_playstation_topics"]
