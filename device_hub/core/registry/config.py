"""Hub configuration models.

Defines the configuration the hub is built from: tuning values, external
service settings, and the static device list.
"""

from __future__ import annotations

import os
from typing import Any, Literal

from pydantic import BaseModel, Field, field_validator, model_validator

from device_hub.core.models import DeviceDescriptor, DeviceFamily


class HomeAssistantSettings(BaseModel):
    """Connection settings for the Home Assistant REST API.

    Attributes:
        base_url: Home Assistant base URL
        token: Long-lived access token
        timeout: Request timeout in seconds
    """

    base_url: str = Field(..., description="Home Assistant base URL")

    token: str = Field(..., description="Long-lived access token")

    timeout: float = Field(default=10.0, gt=0, description="Request timeout in seconds")

    @field_validator("base_url")
    @classmethod
    def strip_trailing_slash(cls, v: str) -> str:
        """Normalize base URL without a trailing slash."""
        return v.rstrip("/")


class MqttSettings(BaseModel):
    """MQTT broker settings.

    Attributes:
        broker_url: Broker hostname or IP
        port: Broker port
        client_id: Client identifier (random if empty)
        username: Optional username
        password: Optional password
    """

    broker_url: str = Field(default="localhost", description="Broker hostname or IP")

    port: int = Field(default=1883, description="Broker port")

    client_id: str = Field(default="", description="Client identifier")

    username: str | None = Field(default=None, description="Broker username")

    password: str | None = Field(default=None, description="Broker password")


class HubConfig(BaseModel):
    """Complete hub configuration.

    Attributes:
        log_level: Logging level name
        cache_ttl: Default cache TTL in seconds
        family_ttls: Per-family TTL overrides
        poll_interval: Sweep interval (defaults to the family TTL)
        http_timeout: Timeout for request/response protocol calls
        probe_timeout: Timeout for reachability probes
        adb_path: adb executable
        adb_timeout: Timeout for one adb shell command
        xbox_relay_url: Optional Xbox control relay base URL
        playstation_transport: Transport for proxied consoles
        playstation_topic: MQTT base topic for proxied consoles
        home_assistant: Home Assistant settings
        mqtt: MQTT broker settings
        devices: Static device list

    Examples:
        >>> HubConfig(
        ...     devices=[{"name": "soundbar", "family": "receiver", "host": "10.0.0.5"}],
        ... )
    """

    log_level: str = Field(default="INFO", description="Logging level")

    cache_ttl: float = Field(default=5.0, gt=0, description="Default cache TTL (seconds)")

    family_ttls: dict[DeviceFamily, float] = Field(
        default_factory=dict,
        description="Per-family cache TTL overrides",
    )

    poll_interval: float | None = Field(
        default=None,
        gt=0,
        description="Sweep interval (defaults to the family TTL)",
    )

    http_timeout: float = Field(default=10.0, gt=0, description="HTTP call timeout")

    probe_timeout: float = Field(default=2.0, gt=0, description="Reachability probe timeout")

    adb_path: str = Field(default="adb", description="adb executable")

    adb_timeout: float = Field(default=10.0, gt=0, description="adb shell command timeout")

    xbox_relay_url: str | None = Field(default=None, description="Xbox control relay URL")

    playstation_transport: Literal["home_assistant", "mqtt"] = Field(
        default="mqtt",
        description="Transport for proxied consoles",
    )

    playstation_topic: str = Field(
        default="homeassistant",
        description="MQTT base topic for proxied consoles",
    )

    home_assistant: HomeAssistantSettings | None = Field(
        default=None,
        description="Home Assistant REST settings",
    )

    mqtt: MqttSettings = Field(default_factory=MqttSettings, description="MQTT settings")

    devices: list[DeviceDescriptor] = Field(default_factory=list, description="Devices")

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Validate the log level name."""
        level = v.upper()
        if level not in ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"):
            raise ValueError(f"invalid log level: {v}")
        return level

    @field_validator("xbox_relay_url")
    @classmethod
    def normalize_relay_url(cls, v: str | None) -> str | None:
        """Treat an empty relay URL as unset."""
        if not v:
            return None
        return v.rstrip("/")

    @model_validator(mode="after")
    def validate_playstation_transport(self) -> HubConfig:
        """Validate Home Assistant settings exist when that transport is selected."""
        has_consoles = any(d.family == DeviceFamily.PROXIED_CONSOLE for d in self.devices)
        if has_consoles and self.playstation_transport == "home_assistant" and not self.home_assistant:
            raise ValueError("home_assistant settings are required for the home_assistant transport")
        return self

    def ttl_for(self, family: DeviceFamily) -> float:
        """Cache TTL for a family."""
        return self.family_ttls.get(family, self.cache_ttl)

    def interval_for(self, family: DeviceFamily) -> float:
        """Sweep interval for a family."""
        return self.poll_interval or self.ttl_for(family)

    @classmethod
    def from_env(cls) -> HubConfig:
        """Create configuration from environment variables.

        Reads configuration from these environment variables:
        - SONY_DEVICES: "name:host:port:psk:type,..." (type defaults to soundbar)
        - SHIELD_DEVICES: "name:host:port,..." (port defaults to 5555)
        - XBOX_DEVICES: "name:host:liveid,..."
        - XBOX_REST_SERVER: Xbox control relay URL
        - PS5_DEVICES: "name:deviceid:psnaccount,..."
        - PS5_TRANSPORT: 'mqtt' (default) or 'home_assistant'
        - PS5_MQTT_TOPIC: MQTT base topic (default: 'homeassistant')
        - MQTT_BROKER_URL / MQTT_BROKER_PORT: MQTT broker
        - HA_URL / HA_TOKEN: Home Assistant REST API
        - CACHE_TTL: Cache TTL in seconds (default: 5)
        - LOG_LEVEL: Logging level (default: INFO)

        Returns:
            HubConfig populated from environment
        """
        devices: list[dict[str, Any]] = []
        devices.extend(_parse_sony_devices(os.getenv("SONY_DEVICES", "")))
        devices.extend(_parse_shield_devices(os.getenv("SHIELD_DEVICES", "")))
        devices.extend(_parse_xbox_devices(os.getenv("XBOX_DEVICES", "")))
        devices.extend(_parse_ps5_devices(os.getenv("PS5_DEVICES", "")))

        home_assistant = None
        if os.getenv("HA_URL") and os.getenv("HA_TOKEN"):
            home_assistant = HomeAssistantSettings(
                base_url=os.environ["HA_URL"],
                token=os.environ["HA_TOKEN"],
            )

        return cls(
            log_level=os.getenv("LOG_LEVEL", "INFO"),
            cache_ttl=float(os.getenv("CACHE_TTL", "5")),
            xbox_relay_url=os.getenv("XBOX_REST_SERVER"),
            playstation_transport=os.getenv("PS5_TRANSPORT", "mqtt"),  # type: ignore
            playstation_topic=os.getenv("PS5_MQTT_TOPIC", "homeassistant"),
            home_assistant=home_assistant,
            mqtt=MqttSettings(
                broker_url=os.getenv("MQTT_BROKER_URL", "localhost"),
                port=int(os.getenv("MQTT_BROKER_PORT", "1883")),
            ),
            devices=devices,  # type: ignore[arg-type]
        )

    class Config:
        """Pydantic model configuration."""

        json_schema_extra = {
            "examples": [
                {
                    "cache_ttl": 5.0,
                    "xbox_relay_url": "http://xbox-relay:5557",
                    "playstation_transport": "mqtt",
                    "devices": [
                        {"name": "soundbar", "family": "receiver", "host": "192.168.1.20"},
                        {"name": "shield", "family": "set_top_box", "host": "192.168.1.21"},
                    ],
                },
            ]
        }


def _split_entries(value: str) -> list[str]:
    return [entry.strip() for entry in value.split(",") if entry.strip()]


def _parse_sony_devices(value: str) -> list[dict[str, Any]]:
    devices = []
    for entry in _split_entries(value):
        parts = [p.strip() for p in entry.split(":", 4)]
        if len(parts) < 4:
            continue
        port = int(parts[2]) if parts[2].isdigit() else None
        devices.append(
            {
                "name": parts[0],
                "family": DeviceFamily.RECEIVER,
                "host": parts[1],
                "port": port,
                "psk": parts[3] or None,
                "sub_type": parts[4] if len(parts) == 5 and parts[4] else "soundbar",
            }
        )
    return devices


def _parse_shield_devices(value: str) -> list[dict[str, Any]]:
    devices = []
    for entry in _split_entries(value):
        parts = [p.strip() for p in entry.split(":", 2)]
        if len(parts) < 2:
            continue
        port = int(parts[2]) if len(parts) == 3 and parts[2].isdigit() else None
        devices.append(
            {
                "name": parts[0],
                "family": DeviceFamily.SET_TOP_BOX,
                "host": parts[1],
                "port": port,
            }
        )
    return devices


def _parse_xbox_devices(value: str) -> list[dict[str, Any]]:
    devices = []
    for entry in _split_entries(value):
        parts = [p.strip() for p in entry.split(":", 2)]
        if len(parts) < 3:
            continue
        devices.append(
            {
                "name": parts[0],
                "family": DeviceFamily.WAKE_CONSOLE,
                "host": parts[1],
                "device_id": parts[2],
            }
        )
    return devices


def _parse_ps5_devices(value: str) -> list[dict[str, Any]]:
    devices = []
    for entry in _split_entries(value):
        parts = [p.strip() for p in entry.split(":", 2)]
        if len(parts) < 2:
            continue
        devices.append(
            {
                "name": parts[0],
                "family": DeviceFamily.PROXIED_CONSOLE,
                "device_id": parts[1],
                "account": parts[2] if len(parts) == 3 and parts[2] else None,
            }
        )
    return devices
