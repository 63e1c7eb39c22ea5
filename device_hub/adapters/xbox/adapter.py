"""Xbox adapter.

Power-on and reachability use the SmartGlass UDP datagrams directly, with
the relay's power-on as an extra attempt when configured. Every other
control needs an authenticated session, which only the optional REST
relay provides; without a relay those commands fail as unsupported.
"""

from __future__ import annotations

import logging
from typing import Any

import httpx

from device_hub.adapters.base import BaseDeviceAdapter, Handler
from device_hub.adapters.xbox.relay import XboxRelayClient
from device_hub.adapters.xbox.smartglass import SmartGlassTransport
from device_hub.core.interfaces.adapter import (
    DeviceError,
    DeviceUnreachableError,
    UnsupportedCommandError,
)
from device_hub.core.models import DeviceCommand, DeviceDescriptor, DeviceFamily, DeviceState

logger = logging.getLogger(__name__)

# Friendly button names -> relay button names
BUTTONS: dict[str, str] = {
    "a": "a",
    "b": "b",
    "x": "x",
    "y": "y",
    "up": "dpad_up",
    "down": "dpad_down",
    "left": "dpad_left",
    "right": "dpad_right",
    "menu": "menu",
    "view": "view",
    "nexus": "nexus",
    "home": "nexus",
    "lb": "left_shoulder",
    "rb": "right_shoulder",
    "lt": "left_trigger",
    "rt": "right_trigger",
    "lstick": "left_thumbstick",
    "rstick": "right_thumbstick",
}

MEDIA_COMMANDS: dict[str, str] = {
    "play": "play",
    "pause": "pause",
    "playpause": "play_pause",
    "play_pause": "play_pause",
    "stop": "stop",
    "next": "next_track",
    "previous": "prev_track",
    "prev": "prev_track",
}


class XboxAdapter(BaseDeviceAdapter):
    """Adapter for Xbox consoles.

    Configuration:
        relay_url: Base URL of the REST relay (optional)
        transport: SmartGlass UDP transport (probe bound, port)
        timeout: HTTP timeout for relay calls in seconds (default: 10)
        http: Optional pre-built httpx.AsyncClient for the relay

    Example:
        >>> adapter = XboxAdapter(relay_url=None)
        >>> await adapter.execute(descriptor, DeviceCommand(action="power", args={"on": True}))
    """

    family = DeviceFamily.WAKE_CONSOLE

    def __init__(
        self,
        relay_url: str | None = None,
        transport: SmartGlassTransport | None = None,
        timeout: float = 10.0,
        http: httpx.AsyncClient | None = None,
    ) -> None:
        self.relay_url = relay_url.rstrip("/") if relay_url else None
        self.transport = transport or SmartGlassTransport()
        self.timeout = timeout
        self._http = http
        self._owns_http = http is None
        super().__init__()

    @property
    def has_relay(self) -> bool:
        return self.relay_url is not None

    async def connect(self) -> None:
        if self.has_relay and self._http is None:
            self._http = httpx.AsyncClient(timeout=self.timeout)
            self._owns_http = True

    async def disconnect(self) -> None:
        if self._http is not None and self._owns_http:
            await self._http.aclose()
            self._http = None

    def _relay_client(self, relay_url: str) -> XboxRelayClient:
        if self._http is None:
            self._http = httpx.AsyncClient(timeout=self.timeout)
            self._owns_http = True
        return XboxRelayClient(relay_url, self._http)

    def relay(self, descriptor: DeviceDescriptor, action: str) -> XboxRelayClient:
        """Relay client, or UnsupportedCommandError when none is configured."""
        if not self.relay_url:
            raise UnsupportedCommandError(action, descriptor.name, "requires the SmartGlass REST relay")
        return self._relay_client(self.relay_url)

    async def fetch_state(self, descriptor: DeviceDescriptor) -> DeviceState:
        """Probe with a unicast discovery request; enrich from the relay if configured."""
        if not await self.transport.probe(descriptor.host or ""):
            raise DeviceUnreachableError("No response", descriptor.name)

        attributes: dict[str, Any] = {"live_id": descriptor.device_id, "relay": self.has_relay}
        current: str | None = None
        if self.has_relay:
            try:
                info = await self.relay(descriptor, "fetch_state").device(descriptor.device_id or "")
                attributes["relay_state"] = info
                current = info.get("active_title") or info.get("title") or None
            except DeviceError as e:
                logger.debug(f"Relay state unavailable for {descriptor.name}: {e}")

        return DeviceState(
            name=descriptor.name,
            family=self.family,
            online=True,
            power=True,
            input=current,
            attributes=attributes,
        )

    async def discover(self, timeout: float = 3.0) -> list[dict]:
        """Find consoles on the local network.

        Uses the relay's device list when configured, otherwise a SmartGlass
        broadcast with a bounded listen window.
        """
        if self.relay_url:
            return await self._relay_client(self.relay_url).devices()
        try:
            return await self.transport.discover(timeout)
        except OSError as e:
            raise DeviceUnreachableError(f"Discovery failed: {e}") from e

    def _handlers(self) -> dict[str, Handler]:
        return {
            "power": self._power,
            "toggle_power": self._toggle_power,
            "button": self._button,
            "navigate": self._button,
            "media": self._media,
            "launch_app": self._launch_app,
            "list_apps": self._list_apps,
        }

    def _live_id(self, descriptor: DeviceDescriptor, action: str) -> str:
        if not descriptor.device_id:
            raise UnsupportedCommandError(action, descriptor.name, "live id required")
        return descriptor.device_id

    async def _power(self, descriptor: DeviceDescriptor, command: DeviceCommand) -> None:
        on = bool(self._require(descriptor, command, "on"))
        live_id = self._live_id(descriptor, command.action)
        if not on:
            await self.relay(descriptor, command.action).power_off(live_id)
            return

        # The wake datagram is always sent; the relay is only a second attempt
        try:
            await self.transport.power_on(descriptor.host or "", live_id)
        except OSError as e:
            if not self.has_relay:
                raise DeviceUnreachableError(f"Power on failed: {e}", descriptor.name) from e
            logger.warning(f"Wake datagram to {descriptor.name} failed, trying relay: {e}")
            await self.relay(descriptor, command.action).power_on(live_id)
            return

        if self.has_relay:
            try:
                await self.relay(descriptor, command.action).power_on(live_id)
            except DeviceError as e:
                logger.debug(f"Relay power on for {descriptor.name} failed after wake datagram: {e}")

    async def _toggle_power(self, descriptor: DeviceDescriptor, command: DeviceCommand) -> dict:
        online = await self.transport.probe(descriptor.host or "")
        target = not online
        await self._power(descriptor, DeviceCommand(action="power", args={"on": target}))
        return {"power": target}

    async def _button(self, descriptor: DeviceDescriptor, command: DeviceCommand) -> dict:
        key = "direction" if command.action == "navigate" else "button"
        name = str(self._require(descriptor, command, key)).lower()
        button = BUTTONS.get(name, name)
        await self.relay(descriptor, command.action).input(
            self._live_id(descriptor, command.action), button
        )
        return {"button": button}

    async def _media(self, descriptor: DeviceDescriptor, command: DeviceCommand) -> None:
        action = str(self._require(descriptor, command, "command")).lower()
        media = MEDIA_COMMANDS.get(action)
        if media is None:
            raise UnsupportedCommandError(command.action, descriptor.name, f"unknown media command '{action}'")
        await self.relay(descriptor, command.action).media(
            self._live_id(descriptor, command.action), media
        )

    async def _launch_app(self, descriptor: DeviceDescriptor, command: DeviceCommand) -> None:
        app = str(self._require(descriptor, command, "app"))
        await self.relay(descriptor, command.action).launch(
            self._live_id(descriptor, command.action), app
        )

    async def _list_apps(self, descriptor: DeviceDescriptor, command: DeviceCommand) -> list:
        return await self.relay(descriptor, command.action).apps(
            self._live_id(descriptor, command.action)
        )
