"""PS5 adapter over MQTT.

State is event-sourced: a PS5-MQTT bridge publishes power and activity
messages, and this adapter keeps the latest value per console. Reading
state never touches the network; only commands publish.
"""

from __future__ import annotations

import logging
import threading
import time
from collections.abc import Iterable
from dataclasses import dataclass, replace

from device_hub.adapters.base import BaseDeviceAdapter, Handler
from device_hub.config.mqtt_topics import PlaystationTopicConfig, get_playstation_topics
from device_hub.core.interfaces.adapter import DeviceProtocolError, DeviceUnreachableError
from device_hub.core.models import DeviceCommand, DeviceDescriptor, DeviceFamily, DeviceState
from device_hub.services.mqtt_client import MqttClient

logger = logging.getLogger(__name__)

POWER_AWAKE = "AWAKE"
POWER_STANDBY = "STANDBY"
POWER_UNKNOWN = "UNKNOWN"


@dataclass(frozen=True)
class ConsoleSnapshot:
    """Latest bus-reported values for one console."""

    power: str = POWER_UNKNOWN
    activity: str | None = None
    online: bool = False
    last_update: float | None = None


class PlaystationMqttAdapter(BaseDeviceAdapter):
    """PS5 adapter backed by an MQTT bridge.

    Configuration:
        mqtt: Shared MQTT client
        base_topic: Discovery base topic (default: PS5_MQTT_TOPIC or "homeassistant")
        topic_prefixes: Extra base topics used by descriptors with an override
    """

    family = DeviceFamily.PROXIED_CONSOLE

    def __init__(
        self,
        mqtt: MqttClient,
        base_topic: str | None = None,
        topic_prefixes: Iterable[str] = (),
    ) -> None:
        self.mqtt = mqtt
        self.topics = get_playstation_topics(base_topic)
        self._lock = threading.Lock()
        self._snapshots: dict[tuple[str, str], ConsoleSnapshot] = {}
        self._subscribed: set[str] = set()
        self._pending = [self.topics.base_prefix, *topic_prefixes]
        super().__init__()

    def topics_for(self, descriptor: DeviceDescriptor) -> PlaystationTopicConfig:
        if descriptor.topic_prefix:
            return get_playstation_topics(descriptor.topic_prefix)
        return self.topics

    async def connect(self) -> None:
        """Connect the MQTT client and subscribe to state topics."""
        self.mqtt.connect()
        for base in self._pending:
            self._subscribe(get_playstation_topics(base))

    async def disconnect(self) -> None:
        self.mqtt.disconnect()

    def _subscribe(self, topics: PlaystationTopicConfig) -> None:
        base = topics.base_prefix
        if base in self._subscribed:
            return
        self._subscribed.add(base)
        self.mqtt.subscribe(
            topics.power_state_filter(),
            lambda topic, payload: self._handle_power(topics, topic, payload),
        )
        self.mqtt.subscribe(
            topics.sensor_state_filter(),
            lambda topic, payload: self._handle_activity(topics, topic, payload),
        )
        logger.info(f"PS5 MQTT: subscribed to state topics under {base}")

    def _update(self, key: tuple[str, str], **changes) -> None:
        with self._lock:
            current = self._snapshots.get(key, ConsoleSnapshot())
            self._snapshots[key] = replace(current, last_update=time.time(), **changes)

    def _handle_power(self, topics: PlaystationTopicConfig, topic: str, payload: str) -> None:
        device_id = topics.device_id_from(topic)
        if device_id is None:
            return
        logger.debug(f"PS5 MQTT power state: {topic} = {payload}")
        power = POWER_AWAKE if payload.strip() == "ON" else POWER_STANDBY
        self._update((topics.base_prefix, device_id), power=power, online=True)

    def _handle_activity(self, topics: PlaystationTopicConfig, topic: str, payload: str) -> None:
        device_id = topics.device_id_from(topic)
        if device_id is None:
            return
        logger.debug(f"PS5 MQTT activity state: {topic} = {payload}")
        self._update((topics.base_prefix, device_id), activity=payload or None)

    def snapshot(self, descriptor: DeviceDescriptor) -> ConsoleSnapshot:
        """Latest values for a console (defaults until the first message)."""
        key = (self.topics_for(descriptor).base_prefix, descriptor.device_id or "")
        with self._lock:
            return self._snapshots.get(key, ConsoleSnapshot())

    async def fetch_state(self, descriptor: DeviceDescriptor) -> DeviceState:
        """Build state from the last received messages (no network I/O)."""
        self._subscribe(self.topics_for(descriptor))
        snap = self.snapshot(descriptor)
        power = {POWER_AWAKE: True, POWER_STANDBY: False}.get(snap.power)
        return DeviceState(
            name=descriptor.name,
            family=self.family,
            online=snap.online,
            power=power,
            input=snap.activity,
            attributes={
                "device_id": descriptor.device_id,
                "power_state": snap.power,
                "last_update": snap.last_update,
            },
        )

    def _handlers(self) -> dict[str, Handler]:
        return {
            "power": self._power,
            "toggle_power": self._toggle_power,
        }

    def _publish_power(self, descriptor: DeviceDescriptor, on: bool) -> None:
        if not self.mqtt.is_connected:
            raise DeviceUnreachableError("MQTT client not connected", descriptor.name)
        topic = self.topics_for(descriptor).power_set(descriptor.device_id or "")
        payload = "ON" if on else "OFF"
        logger.info(f"PS5 power {payload}: {descriptor.name} -> {topic}")
        if not self.mqtt.publish(topic, payload):
            raise DeviceProtocolError(f"Publish to {topic} failed", descriptor.name)

    async def _power(self, descriptor: DeviceDescriptor, command: DeviceCommand) -> None:
        self._publish_power(descriptor, bool(self._require(descriptor, command, "on")))

    async def _toggle_power(self, descriptor: DeviceDescriptor, command: DeviceCommand) -> dict:
        target = self.snapshot(descriptor).power != POWER_AWAKE
        self._publish_power(descriptor, target)
        return {"power": target}
