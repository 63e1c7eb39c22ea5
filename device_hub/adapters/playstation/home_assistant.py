"""PS5 adapter over the Home Assistant REST API.

The PlayStation integration in Home Assistant exposes each console as a
power switch and a media player, and each PSN account as a set of sensors.
"""

from __future__ import annotations

import logging
from typing import Any

from device_hub.adapters.base import BaseDeviceAdapter, Handler
from device_hub.core.interfaces.adapter import (
    DeviceError,
    DeviceProtocolError,
    DeviceUnreachableError,
)
from device_hub.core.models import DeviceCommand, DeviceDescriptor, DeviceFamily, DeviceState
from device_hub.services.ha_client import HomeAssistantClient

logger = logging.getLogger(__name__)

ACCOUNT_METRICS = (
    "online_status",
    "online_id",
    "trophy_level",
    "platinum_trophies",
    "gold_trophies",
    "silver_trophies",
    "bronze_trophies",
)

UNAVAILABLE_STATES = {"unavailable", "unknown"}


def power_entity(descriptor: DeviceDescriptor) -> str:
    return f"switch.{descriptor.device_id}_power"


def media_entity(descriptor: DeviceDescriptor) -> str:
    return f"media_player.{descriptor.device_id}"


def account_entity(account: str, metric: str) -> str:
    return f"sensor.{account}_{metric}"


class PlaystationHomeAssistantAdapter(BaseDeviceAdapter):
    """PS5 adapter reading and controlling consoles through Home Assistant.

    Example:
        >>> adapter = PlaystationHomeAssistantAdapter(HomeAssistantClient(settings))
        >>> state = await adapter.fetch_state(descriptor)
    """

    family = DeviceFamily.PROXIED_CONSOLE

    def __init__(self, client: HomeAssistantClient) -> None:
        self.client = client
        super().__init__()

    async def disconnect(self) -> None:
        await self.client.close()

    async def _power_state(self, descriptor: DeviceDescriptor) -> str:
        entity = power_entity(descriptor)
        state = await self.client.get_state(entity)
        if state is None:
            raise DeviceProtocolError(f"Entity not found: {entity}", descriptor.name)
        value = str(state.get("state", "")).lower()
        if value in UNAVAILABLE_STATES:
            raise DeviceUnreachableError(f"{entity} is {value}", descriptor.name)
        return value

    async def fetch_state(self, descriptor: DeviceDescriptor) -> DeviceState:
        """Read the power switch, then media player and account sensors."""
        power = await self._power_state(descriptor) == "on"
        attributes: dict[str, Any] = {
            "device_id": descriptor.device_id,
            "power_state": "AWAKE" if power else "STANDBY",
        }

        title: str | None = None
        try:
            media = await self.client.get_state(media_entity(descriptor))
            if media:
                media_attrs = media.get("attributes", {})
                title = media_attrs.get("media_title") or None
                if media_attrs.get("entity_picture"):
                    attributes["image"] = media_attrs["entity_picture"]
        except DeviceError as e:
            logger.debug(f"Media player unavailable for {descriptor.name}: {e}")

        if descriptor.account:
            account: dict[str, Any] = {}
            for metric in ACCOUNT_METRICS:
                try:
                    sensor = await self.client.get_state(account_entity(descriptor.account, metric))
                except DeviceError as e:
                    logger.debug(f"Sensor {metric} unavailable for {descriptor.account}: {e}")
                    continue
                if sensor and sensor.get("state") not in UNAVAILABLE_STATES:
                    account[metric] = sensor.get("state")
            attributes["account"] = account

        return DeviceState(
            name=descriptor.name,
            family=self.family,
            online=True,
            power=power,
            input=title,
            attributes=attributes,
        )

    def _handlers(self) -> dict[str, Handler]:
        return {
            "power": self._power,
            "toggle_power": self._toggle_power,
        }

    async def _set_power(self, descriptor: DeviceDescriptor, on: bool) -> None:
        await self.client.call_service("switch", "turn_on" if on else "turn_off", power_entity(descriptor))

    async def _power(self, descriptor: DeviceDescriptor, command: DeviceCommand) -> None:
        await self._set_power(descriptor, bool(self._require(descriptor, command, "on")))

    async def _toggle_power(self, descriptor: DeviceDescriptor, command: DeviceCommand) -> dict:
        target = await self._power_state(descriptor) != "on"
        await self._set_power(descriptor, target)
        return {"power": target}
