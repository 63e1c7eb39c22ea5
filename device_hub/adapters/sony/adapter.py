"""Sony receiver/TV adapter.

Translates uniform commands into Sony REST API calls. Full state costs up
to three chained calls: power first, then volume and (TVs only) the
playing content, which are skipped while the device is off because they
fail on a powered-off device.
"""

from __future__ import annotations

import logging
import re
from typing import Any

import httpx

from device_hub.adapters.base import BaseDeviceAdapter, Handler
from device_hub.adapters.sony.client import SonyClient
from device_hub.adapters.sony.ircc import APP_URIS, HDMI_KEYS, remote_key_names, resolve_ircc
from device_hub.adapters.sony.versions import POWER_OFF_STATUS, POWER_ON_STATUS, is_power_on
from device_hub.core.interfaces.adapter import DeviceError, UnsupportedCommandError
from device_hub.core.models import DeviceCommand, DeviceDescriptor, DeviceFamily, DeviceState

logger = logging.getLogger(__name__)

# Friendly input names -> source URIs
INPUT_URIS: dict[str, str] = {
    "tv": "extInput:tv",
    "bluetooth": "extInput:btAudio",
    "bt": "extInput:btAudio",
    "analog": "extInput:line",
    "line": "extInput:line",
}

HDMI_INPUT_PATTERN = re.compile(r"^hdmi\s*(\d+)$")


def resolve_input(name: str) -> str | None:
    """Resolve an input name to a source URI.

    Examples:
        >>> resolve_input("hdmi2")
        'extInput:hdmi?port=2'
        >>> resolve_input("bluetooth")
        'extInput:btAudio'
    """
    key = name.strip().lower()
    if key in INPUT_URIS:
        return INPUT_URIS[key]
    match = HDMI_INPUT_PATTERN.match(key)
    if match:
        return f"extInput:hdmi?port={int(match.group(1))}"
    if ":" in name:
        return name
    return None


class SonyAdapter(BaseDeviceAdapter):
    """Adapter for Sony soundbars and TVs.

    Configuration:
        timeout: HTTP timeout in seconds (default: 10)
        http: Optional pre-built httpx.AsyncClient (tests use MockTransport)

    Example:
        >>> adapter = SonyAdapter(timeout=10.0)
        >>> await adapter.connect()
        >>> state = await adapter.fetch_state(descriptor)
        >>> await adapter.execute(descriptor, DeviceCommand(action="set_volume", args={"level": 25}))
    """

    family = DeviceFamily.RECEIVER

    def __init__(self, timeout: float = 10.0, http: httpx.AsyncClient | None = None) -> None:
        self.timeout = timeout
        self._http = http
        self._owns_http = http is None
        super().__init__()

    async def connect(self) -> None:
        if self._http is None:
            self._http = httpx.AsyncClient(timeout=self.timeout)
            self._owns_http = True

    async def disconnect(self) -> None:
        if self._http is not None and self._owns_http:
            await self._http.aclose()
            self._http = None

    def client(self, descriptor: DeviceDescriptor) -> SonyClient:
        """API client bound to one device."""
        if self._http is None:
            self._http = httpx.AsyncClient(timeout=self.timeout)
            self._owns_http = True
        return SonyClient(descriptor, self._http)

    async def fetch_state(self, descriptor: DeviceDescriptor) -> DeviceState:
        """Fetch power, then volume and input when the device is on."""
        client = self.client(descriptor)
        status = await client.get_power_status()
        power = is_power_on(status)

        volume: int | None = None
        mute: bool | None = None
        current_input: str | None = None
        if power:
            try:
                info = await client.get_volume_info()
                volume = int(info.get("volume", 0))
                mute = bool(info.get("mute", False))
            except DeviceError as e:
                logger.debug(f"Volume unavailable for {descriptor.name}: {e}")
            if descriptor.is_tv:
                try:
                    content = await client.get_playing_content()
                    current_input = content.get("uri") or None
                except DeviceError as e:
                    logger.debug(f"Playing content unavailable for {descriptor.name}: {e}")

        attributes: dict[str, Any] = {"sub_type": descriptor.sub_type, "power_status": status}
        if descriptor.is_tv:
            attributes["remote_keys"] = remote_key_names()

        return DeviceState(
            name=descriptor.name,
            family=self.family,
            online=True,
            power=power,
            volume=volume,
            mute=mute,
            input=current_input,
            attributes=attributes,
        )

    def _handlers(self) -> dict[str, Handler]:
        return {
            "power": self._power,
            "toggle_power": self._toggle_power,
            "set_volume": self._set_volume,
            "volume_up": self._volume_up,
            "volume_down": self._volume_down,
            "set_mute": self._set_mute,
            "toggle_mute": self._toggle_mute,
            "select_input": self._select_input,
            "list_inputs": self._list_inputs,
            "remote": self._remote,
            "get_sound_settings": self._get_sound_settings,
            "set_sound_setting": self._set_sound_setting,
            "list_apps": self._list_apps,
            "launch_app": self._launch_app,
            "terminate_apps": self._terminate_apps,
            "picture": self._picture,
            "set_led": self._set_led,
            "system_info": self._system_info,
            "reboot": self._reboot,
        }

    # Power

    async def _set_power(self, descriptor: DeviceDescriptor, on: bool) -> None:
        sub_type = descriptor.sub_type or "soundbar"
        status = POWER_ON_STATUS[sub_type] if on else POWER_OFF_STATUS[sub_type]
        await self.client(descriptor).set_power_status(status)

    async def _power(self, descriptor: DeviceDescriptor, command: DeviceCommand) -> None:
        await self._set_power(descriptor, bool(self._require(descriptor, command, "on")))

    async def _toggle_power(self, descriptor: DeviceDescriptor, command: DeviceCommand) -> dict:
        status = await self.client(descriptor).get_power_status()
        target = not is_power_on(status)
        await self._set_power(descriptor, target)
        return {"power": target}

    # Volume

    async def _set_volume(self, descriptor: DeviceDescriptor, command: DeviceCommand) -> None:
        level = int(self._require(descriptor, command, "level"))
        await self.client(descriptor).set_volume(level)

    async def _step_volume(self, descriptor: DeviceDescriptor, step: int) -> dict:
        client = self.client(descriptor)
        info = await client.get_volume_info()
        current = int(info.get("volume", 0))
        low = int(info.get("minVolume", 0))
        high = int(info.get("maxVolume", current + abs(step)))
        target = max(low, min(high, current + step))
        await client.set_volume(target)
        return {"volume": target}

    async def _volume_up(self, descriptor: DeviceDescriptor, command: DeviceCommand) -> dict:
        step = max(1, int(command.arg("step", 1)))
        return await self._step_volume(descriptor, step)

    async def _volume_down(self, descriptor: DeviceDescriptor, command: DeviceCommand) -> dict:
        step = max(1, int(command.arg("step", 1)))
        return await self._step_volume(descriptor, -step)

    async def _set_mute(self, descriptor: DeviceDescriptor, command: DeviceCommand) -> None:
        mute = command.arg("mute")
        if mute is None:
            await self._toggle_mute(descriptor, command)
            return
        await self.client(descriptor).set_mute(bool(mute))

    async def _toggle_mute(self, descriptor: DeviceDescriptor, command: DeviceCommand) -> dict:
        client = self.client(descriptor)
        info = await client.get_volume_info()
        target = not bool(info.get("mute", False))
        await client.set_mute(target)
        return {"mute": target}

    # Inputs

    async def _select_input(self, descriptor: DeviceDescriptor, command: DeviceCommand) -> dict:
        name = str(self._require(descriptor, command, "input"))
        uri = resolve_input(name)
        if uri is None:
            raise UnsupportedCommandError(command.action, descriptor.name, f"unknown input '{name}'")
        await self.client(descriptor).set_play_content(uri)
        return {"uri": uri}

    async def _list_inputs(self, descriptor: DeviceDescriptor, command: DeviceCommand) -> list:
        return await self.client(descriptor).get_inputs()

    # Remote

    async def _remote(self, descriptor: DeviceDescriptor, command: DeviceCommand) -> dict:
        key = str(self._require(descriptor, command, "key"))
        client = self.client(descriptor)
        if key in HDMI_KEYS:
            uri = f"extInput:hdmi?port={HDMI_KEYS[key]}"
            await client.set_play_content(uri)
            return {"uri": uri}
        if key in APP_URIS:
            await client.set_active_app(APP_URIS[key])
            return {"app": APP_URIS[key]}
        code = resolve_ircc(key)
        if code is None:
            raise UnsupportedCommandError(command.action, descriptor.name, f"unknown key '{key}'")
        await client.send_ircc(code)
        return {"code": code}

    # Sound

    async def _get_sound_settings(self, descriptor: DeviceDescriptor, command: DeviceCommand) -> list:
        return await self.client(descriptor).get_sound_settings(command.arg("target", ""))

    async def _set_sound_setting(self, descriptor: DeviceDescriptor, command: DeviceCommand) -> None:
        target = str(command.arg("target", "soundField"))
        value = str(self._require(descriptor, command, "value"))
        await self.client(descriptor).set_sound_setting(target, value)

    # Apps

    async def _list_apps(self, descriptor: DeviceDescriptor, command: DeviceCommand) -> list:
        return await self.client(descriptor).get_application_list()

    async def _launch_app(self, descriptor: DeviceDescriptor, command: DeviceCommand) -> dict:
        app = str(self._require(descriptor, command, "app"))
        uri = APP_URIS.get(app.lower(), app)
        await self.client(descriptor).set_active_app(uri)
        return {"app": uri}

    async def _terminate_apps(self, descriptor: DeviceDescriptor, command: DeviceCommand) -> None:
        await self.client(descriptor).terminate_apps()

    # System

    async def _picture(self, descriptor: DeviceDescriptor, command: DeviceCommand) -> None:
        on = bool(self._require(descriptor, command, "on"))
        await self.client(descriptor).set_power_saving_mode("off" if on else "pictureOff")

    async def _set_led(self, descriptor: DeviceDescriptor, command: DeviceCommand) -> None:
        mode = str(self._require(descriptor, command, "mode"))
        await self.client(descriptor).set_led_status(mode, command.arg("status"))

    async def _system_info(self, descriptor: DeviceDescriptor, command: DeviceCommand) -> dict:
        return await self.client(descriptor).get_system_information()

    async def _reboot(self, descriptor: DeviceDescriptor, command: DeviceCommand) -> None:
        await self.client(descriptor).request_reboot()
