"""Nvidia Shield adapter.

Every control maps to one keycode or a short shell command sent over adb.
Reachability is checked with a short TCP probe first, so an offline box is
reported within the probe bound instead of the adb command timeout.
"""

from __future__ import annotations

import logging
import re
import shlex
from collections.abc import Awaitable, Callable
from typing import Any

from device_hub.adapters.base import BaseDeviceAdapter, Handler
from device_hub.adapters.shield import adb as adb_module
from device_hub.adapters.shield.adb import AdbShell
from device_hub.adapters.shield.keycodes import (
    KEYCODES,
    MEDIA_KEYS,
    NAVIGATION_KEYS,
    friendly_name,
    is_system_app,
    resolve_keycode,
    resolve_package,
)
from device_hub.core.interfaces.adapter import (
    DeviceError,
    DeviceUnreachableError,
    UnsupportedCommandError,
)
from device_hub.core.models import DeviceCommand, DeviceDescriptor, DeviceFamily, DeviceState

logger = logging.getLogger(__name__)

Probe = Callable[[str, int, float], Awaitable[bool]]

CURRENT_FOCUS_PATTERN = re.compile(r"mCurrentFocus=Window\{[^}]+ ([a-zA-Z0-9_.]+)/")
FOCUSED_APP_PATTERN = re.compile(r"mFocusedApp=.*\s([a-zA-Z0-9_.]+)/")
VOLUME_INDEX_PATTERN = re.compile(r"(?:streamVolume|index):\s*(\d+)")
VOLUME_MAX_PATTERN = re.compile(r"Max:\s*(\d+)")
MUTED_PATTERN = re.compile(r"Muted:\s*true", re.IGNORECASE)
LAUNCHER_ACTIVITY_PATTERN = re.compile(r"^(?:Activity\s+#\d+:\s*)?([a-zA-Z][a-zA-Z0-9_.]*)/")

# STREAM_MUSIC index range when dumpsys omits Max
MAX_VOLUME_INDEX = 15


def parse_wakefulness(output: str) -> str:
    """Map ``dumpsys power`` output to awake/dreaming/asleep/unknown."""
    lowered = output.lower()
    if "awake" in lowered:
        return "awake"
    if "dreaming" in lowered:
        return "dreaming"
    if "asleep" in lowered or "dozing" in lowered:
        return "asleep"
    return "unknown"


def parse_current_app(output: str) -> str | None:
    """Extract the focused package from ``dumpsys window`` output."""
    match = CURRENT_FOCUS_PATTERN.search(output) or FOCUSED_APP_PATTERN.search(output)
    return match.group(1) if match else None


def parse_volume(output: str) -> tuple[int | None, bool]:
    """Extract (volume 0-100, muted) from ``dumpsys audio`` output."""
    match = VOLUME_INDEX_PATTERN.search(output)
    max_match = VOLUME_MAX_PATTERN.search(output)
    high = int(max_match.group(1)) if max_match else MAX_VOLUME_INDEX
    volume = int(match.group(1)) * 100 // high if match and high else None
    return volume, MUTED_PATTERN.search(output) is not None


class ShieldAdapter(BaseDeviceAdapter):
    """Adapter for Nvidia Shield set-top boxes over adb.

    Configuration:
        adb: AdbShell runner (adb path and command timeout)
        probe_timeout: TCP reachability probe bound in seconds (default: 2)
        probe: Reachability probe coroutine (host, port, timeout) -> bool

    Example:
        >>> adapter = ShieldAdapter(AdbShell(timeout=10.0))
        >>> state = await adapter.fetch_state(descriptor)
        >>> await adapter.execute(descriptor, DeviceCommand(action="launch_app", args={"app": "plex"}))
    """

    family = DeviceFamily.SET_TOP_BOX

    def __init__(
        self,
        adb: AdbShell | None = None,
        probe_timeout: float = 2.0,
        probe: Probe | None = None,
    ) -> None:
        self.adb = adb or AdbShell()
        self.probe_timeout = probe_timeout
        self._probe = probe or adb_module.probe
        super().__init__()

    async def _shell(self, descriptor: DeviceDescriptor, command: str) -> str:
        try:
            return await self.adb.shell(descriptor.address, command)
        except DeviceError as e:
            e.device = e.device or descriptor.name
            raise

    async def _keyevent(self, descriptor: DeviceDescriptor, keycode: int) -> None:
        await self._shell(descriptor, f"input keyevent {keycode}")

    async def is_reachable(self, descriptor: DeviceDescriptor) -> bool:
        return await self._probe(descriptor.host or "", descriptor.port or 5555, self.probe_timeout)

    async def fetch_state(self, descriptor: DeviceDescriptor) -> DeviceState:
        """Probe, then read wakefulness, focused app, volume and brightness."""
        if not await self.is_reachable(descriptor):
            raise DeviceUnreachableError("Device not reachable", descriptor.name)

        wakefulness = parse_wakefulness(
            await self._shell(descriptor, "dumpsys power | grep mWakefulness")
        )

        attributes: dict[str, Any] = {"power_state": wakefulness}
        current_app: str | None = None
        volume: int | None = None
        mute: bool | None = None

        try:
            package = parse_current_app(
                await self._shell(descriptor, "dumpsys window | grep -E 'mCurrentFocus|mFocusedApp'")
            )
            if package:
                current_app = friendly_name(package)
                attributes["current_package"] = package
        except DeviceError as e:
            logger.debug(f"Current app unavailable for {descriptor.name}: {e}")

        try:
            volume, mute = parse_volume(
                await self._shell(descriptor, "dumpsys audio | grep -A5 'STREAM_MUSIC'")
            )
        except DeviceError as e:
            logger.debug(f"Volume unavailable for {descriptor.name}: {e}")

        try:
            brightness = await self._shell(descriptor, "settings get system screen_brightness")
            if brightness.strip().isdigit():
                attributes["brightness"] = int(brightness.strip())
        except DeviceError as e:
            logger.debug(f"Brightness unavailable for {descriptor.name}: {e}")

        return DeviceState(
            name=descriptor.name,
            family=self.family,
            online=True,
            power=wakefulness == "awake" if wakefulness != "unknown" else None,
            volume=volume,
            mute=mute,
            input=current_app,
            attributes=attributes,
        )

    def _handlers(self) -> dict[str, Handler]:
        return {
            "power": self._power,
            "toggle_power": self._toggle_power,
            "navigate": self._navigate,
            "media": self._media,
            "send_key": self._send_key,
            "volume_up": self._volume_up,
            "volume_down": self._volume_down,
            "toggle_mute": self._toggle_mute,
            "launch_app": self._launch_app,
            "stop_app": self._stop_app,
            "list_apps": self._list_apps,
            "send_text": self._send_text,
            "open_url": self._open_url,
            "reboot": self._reboot,
        }

    async def _power(self, descriptor: DeviceDescriptor, command: DeviceCommand) -> None:
        on = bool(self._require(descriptor, command, "on"))
        await self._keyevent(descriptor, KEYCODES["WAKEUP"] if on else KEYCODES["SLEEP"])

    async def _toggle_power(self, descriptor: DeviceDescriptor, command: DeviceCommand) -> None:
        await self._keyevent(descriptor, KEYCODES["POWER"])

    async def _navigate(self, descriptor: DeviceDescriptor, command: DeviceCommand) -> None:
        direction = str(self._require(descriptor, command, "direction")).lower()
        keycode = NAVIGATION_KEYS.get(direction)
        if keycode is None:
            raise UnsupportedCommandError(
                command.action, descriptor.name, f"unknown direction '{direction}'"
            )
        await self._keyevent(descriptor, keycode)

    async def _media(self, descriptor: DeviceDescriptor, command: DeviceCommand) -> None:
        action = str(self._require(descriptor, command, "command")).lower()
        keycode = MEDIA_KEYS.get(action)
        if keycode is None:
            raise UnsupportedCommandError(
                command.action, descriptor.name, f"unknown media command '{action}'"
            )
        await self._keyevent(descriptor, keycode)

    async def _send_key(self, descriptor: DeviceDescriptor, command: DeviceCommand) -> None:
        key = self._require(descriptor, command, "key")
        keycode = resolve_keycode(key)
        if keycode is None:
            raise UnsupportedCommandError(command.action, descriptor.name, f"unknown key '{key}'")
        await self._keyevent(descriptor, keycode)

    async def _volume_up(self, descriptor: DeviceDescriptor, command: DeviceCommand) -> None:
        for _ in range(max(1, int(command.arg("step", 1)))):
            await self._keyevent(descriptor, KEYCODES["VOLUME_UP"])

    async def _volume_down(self, descriptor: DeviceDescriptor, command: DeviceCommand) -> None:
        for _ in range(max(1, int(command.arg("step", 1)))):
            await self._keyevent(descriptor, KEYCODES["VOLUME_DOWN"])

    async def _toggle_mute(self, descriptor: DeviceDescriptor, command: DeviceCommand) -> None:
        await self._keyevent(descriptor, KEYCODES["VOLUME_MUTE"])

    async def _launch_app(self, descriptor: DeviceDescriptor, command: DeviceCommand) -> dict:
        package = resolve_package(str(self._require(descriptor, command, "app")))
        await self._shell(descriptor, f"monkey -p {package} -c android.intent.category.LAUNCHER 1")
        return {"package": package}

    async def _stop_app(self, descriptor: DeviceDescriptor, command: DeviceCommand) -> dict:
        package = resolve_package(str(self._require(descriptor, command, "app")))
        await self._shell(descriptor, f"am force-stop {package}")
        return {"package": package}

    async def _list_apps(self, descriptor: DeviceDescriptor, command: DeviceCommand) -> list:
        include_system = bool(command.arg("include_system", False))
        output = await self._shell(
            descriptor,
            "pm query-activities -a android.intent.action.MAIN "
            "-c android.intent.category.LEANBACK_LAUNCHER",
        )
        packages: list[str] = []
        for line in output.splitlines():
            line = line.strip()
            if not line or "=" in line:
                continue
            if line.startswith("package:"):
                package = line[len("package:"):]
            else:
                match = LAUNCHER_ACTIVITY_PATTERN.match(line)
                if not match:
                    continue
                package = match.group(1)
            if package not in packages:
                packages.append(package)

        if not packages:
            output = await self._shell(descriptor, "pm list packages -3")
            packages = [
                line.strip()[len("package:"):]
                for line in output.splitlines()
                if line.strip().startswith("package:")
            ]

        return [
            {"package": p, "name": friendly_name(p), "is_system": is_system_app(p)}
            for p in packages
            if include_system or not is_system_app(p)
        ]

    async def _send_text(self, descriptor: DeviceDescriptor, command: DeviceCommand) -> None:
        text = str(self._require(descriptor, command, "text"))
        # input text reads %s as a space
        await self._shell(descriptor, f"input text {shlex.quote(text.replace(' ', '%s'))}")

    async def _open_url(self, descriptor: DeviceDescriptor, command: DeviceCommand) -> None:
        url = str(self._require(descriptor, command, "url")).replace("'", "%27")
        await self._shell(descriptor, f"am start -a android.intent.action.VIEW -d '{url}'")

    async def _reboot(self, descriptor: DeviceDescriptor, command: DeviceCommand) -> None:
        await self._shell(descriptor, "reboot")
