"""Device managers.

One manager per device family is the public surface of the hub. Reads go
through the state cache; controls resolve the device from the registry,
delegate to the family adapter and, on success, invalidate the device's
cache entry before returning, so the next read always reflects the command.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Any

from pydantic import ValidationError

from device_hub.core.interfaces.adapter import (
    DeviceAdapter,
    DeviceError,
    DeviceNotFoundError,
    UnsupportedCommandError,
)
from device_hub.core.models import (
    CommandOutcome,
    DeviceCommand,
    DeviceDescriptor,
    DeviceFamily,
    DeviceState,
    FailureKind,
)
from device_hub.core.registry.device_registry import DeviceRegistry
from device_hub.services.scheduler import PollCycle, RefreshScheduler
from device_hub.services.state_cache import StateCache

logger = logging.getLogger(__name__)


class DeviceManager:
    """Cache-coherent access to the devices of one family.

    Example:
        >>> manager = ReceiverManager(SonyAdapter(), registry, cache, interval=5.0)
        >>> await manager.start()
        >>> outcome = await manager.set_volume("soundbar", 25)
        >>> state = await manager.get("soundbar")  # refetched, volume == 25
    """

    family: DeviceFamily

    def __init__(
        self,
        adapter: DeviceAdapter,
        registry: DeviceRegistry,
        cache: StateCache,
        interval: float = 5.0,
    ) -> None:
        """Initialize manager.

        Args:
            adapter: Adapter for this family
            registry: Device registry
            cache: Shared state cache
            interval: Seconds between background sweeps
        """
        if adapter.family != self.family:
            raise ValueError(f"{type(self).__name__} needs a {self.family.value} adapter")
        self.adapter = adapter
        self.registry = registry
        self.cache = cache
        self.scheduler = RefreshScheduler(
            self.family,
            registry.by_family(self.family),
            refresh=self._refresh_descriptor,
            interval=interval,
        )

    # Lifecycle

    async def start(self) -> None:
        """Connect the adapter and start the background sweep."""
        await self.adapter.connect()
        self.scheduler.start()

    async def stop(self) -> None:
        """Stop the background sweep and release adapter resources."""
        await self.scheduler.stop()
        await self.adapter.disconnect()

    async def sweep(self) -> PollCycle:
        """Refresh every device of the family once."""
        return await self.scheduler.sweep()

    # Reads

    def _find(self, name: str) -> DeviceDescriptor | None:
        descriptor = self.registry.find(name)
        if descriptor is None or descriptor.family != self.family:
            return None
        return descriptor

    def _require_device(self, name: str) -> DeviceDescriptor:
        descriptor = self._find(name)
        if descriptor is None:
            raise DeviceNotFoundError(name)
        return descriptor

    async def _refresh_descriptor(self, descriptor: DeviceDescriptor) -> DeviceState:
        return await self.cache.refresh(descriptor, self.adapter.fetch_state)

    def names(self) -> list[str]:
        """Names of this family's devices, in configuration order."""
        return [d.name for d in self.registry.by_family(self.family)]

    async def list(self) -> list[DeviceState]:
        """States of every device in the family (cached when fresh)."""
        descriptors = self.registry.by_family(self.family)
        return list(
            await asyncio.gather(
                *(self.cache.read(d, self.adapter.fetch_state) for d in descriptors)
            )
        )

    async def get(self, name: str) -> DeviceState:
        """State of one device (cached when fresh).

        Raises:
            DeviceNotFoundError: If no device of this family has that name
        """
        return await self.cache.read(self._require_device(name), self.adapter.fetch_state)

    async def refresh(self, name: str) -> DeviceState:
        """Fetch one device's state now, bypassing freshness.

        Raises:
            DeviceNotFoundError: If no device of this family has that name
        """
        return await self._refresh_descriptor(self._require_device(name))

    # Controls

    async def execute(self, name: str, action: str, **args: Any) -> CommandOutcome:
        """Run a command against one device.

        Args:
            name: Device name
            action: Uniform command name
            **args: Command arguments

        Returns:
            The adapter's outcome, a not_found outcome for an unknown name, or
            an unsupported outcome for an unknown command
        """
        descriptor = self._find(name)
        if descriptor is None:
            logger.warning(f"{self.family.value}: {action} for unknown device {name}")
            return CommandOutcome.failure(
                name, action, FailureKind.NOT_FOUND, str(DeviceNotFoundError(name))
            )
        try:
            command = DeviceCommand(action=action, args=args)
        except ValidationError:
            exc = UnsupportedCommandError(action, name, "unknown command")
            logger.warning(f"{self.family.value}: {exc}")
            return CommandOutcome.from_error(name, action, exc)

        outcome = await self.adapter.execute(descriptor, command)
        if outcome.success and not command.is_query:
            self.cache.invalidate(descriptor)
        return outcome

    async def power(self, name: str, on: bool) -> CommandOutcome:
        return await self.execute(name, "power", on=on)

    async def toggle_power(self, name: str) -> CommandOutcome:
        return await self.execute(name, "toggle_power")


class ReceiverManager(DeviceManager):
    """Sony soundbars and TVs."""

    family = DeviceFamily.RECEIVER

    async def set_volume(self, name: str, level: int) -> CommandOutcome:
        return await self.execute(name, "set_volume", level=level)

    async def volume_up(self, name: str, step: int = 1) -> CommandOutcome:
        return await self.execute(name, "volume_up", step=step)

    async def volume_down(self, name: str, step: int = 1) -> CommandOutcome:
        return await self.execute(name, "volume_down", step=step)

    async def set_mute(self, name: str, mute: bool) -> CommandOutcome:
        return await self.execute(name, "set_mute", mute=mute)

    async def toggle_mute(self, name: str) -> CommandOutcome:
        return await self.execute(name, "toggle_mute")

    async def select_input(self, name: str, source: str) -> CommandOutcome:
        """Switch input ('hdmi1', 'tv', 'bluetooth', 'analog' or an extInput uri)."""
        return await self.execute(name, "select_input", input=source)

    async def send_remote(self, name: str, key: str) -> CommandOutcome:
        """Press a named remote key (IRCC code, HDMI shortcut or app shortcut)."""
        return await self.execute(name, "remote", key=key)

    async def inputs(self, name: str) -> CommandOutcome:
        return await self.execute(name, "list_inputs")

    async def sound_settings(self, name: str, target: str = "") -> CommandOutcome:
        return await self.execute(name, "get_sound_settings", target=target)

    async def set_sound_setting(self, name: str, value: str, target: str = "soundField") -> CommandOutcome:
        return await self.execute(name, "set_sound_setting", target=target, value=value)

    async def apps(self, name: str) -> CommandOutcome:
        return await self.execute(name, "list_apps")

    async def launch_app(self, name: str, app: str) -> CommandOutcome:
        return await self.execute(name, "launch_app", app=app)

    async def terminate_apps(self, name: str) -> CommandOutcome:
        return await self.execute(name, "terminate_apps")

    async def picture(self, name: str, on: bool) -> CommandOutcome:
        return await self.execute(name, "picture", on=on)

    async def set_led(self, name: str, mode: str, status: str | None = None) -> CommandOutcome:
        return await self.execute(name, "set_led", mode=mode, status=status)

    async def system_info(self, name: str) -> CommandOutcome:
        return await self.execute(name, "system_info")

    async def reboot(self, name: str) -> CommandOutcome:
        return await self.execute(name, "reboot")


class SetTopBoxManager(DeviceManager):
    """Nvidia Shield set-top boxes."""

    family = DeviceFamily.SET_TOP_BOX

    async def navigate(self, name: str, direction: str) -> CommandOutcome:
        return await self.execute(name, "navigate", direction=direction)

    async def media(self, name: str, command: str) -> CommandOutcome:
        return await self.execute(name, "media", command=command)

    async def send_key(self, name: str, key: str | int) -> CommandOutcome:
        return await self.execute(name, "send_key", key=key)

    async def launch_app(self, name: str, app: str) -> CommandOutcome:
        return await self.execute(name, "launch_app", app=app)

    async def stop_app(self, name: str, app: str) -> CommandOutcome:
        return await self.execute(name, "stop_app", app=app)

    async def send_text(self, name: str, text: str) -> CommandOutcome:
        return await self.execute(name, "send_text", text=text)

    async def open_url(self, name: str, url: str) -> CommandOutcome:
        return await self.execute(name, "open_url", url=url)

    async def apps(self, name: str, include_system: bool = False) -> CommandOutcome:
        return await self.execute(name, "list_apps", include_system=include_system)

    async def reboot(self, name: str) -> CommandOutcome:
        return await self.execute(name, "reboot")


class WakeConsoleManager(DeviceManager):
    """Xbox consoles."""

    family = DeviceFamily.WAKE_CONSOLE

    async def press_button(self, name: str, button: str) -> CommandOutcome:
        return await self.execute(name, "button", button=button)

    async def navigate(self, name: str, direction: str) -> CommandOutcome:
        return await self.execute(name, "navigate", direction=direction)

    async def media(self, name: str, command: str) -> CommandOutcome:
        return await self.execute(name, "media", command=command)

    async def launch_app(self, name: str, app: str) -> CommandOutcome:
        return await self.execute(name, "launch_app", app=app)

    async def apps(self, name: str) -> CommandOutcome:
        return await self.execute(name, "list_apps")

    async def discover(self, timeout: float = 3.0) -> CommandOutcome:
        """Look for consoles on the local network.

        Returns:
            Outcome whose data lists the consoles found
        """
        target = self.family.value
        try:
            found = await self.adapter.discover(timeout)
        except DeviceError as e:
            logger.warning(f"Console discovery failed: {e}")
            return CommandOutcome.from_error(target, "discover", e)
        return CommandOutcome.ok(target, "discover", message=f"Found {len(found)} console(s)", data=found)


class ProxiedConsoleManager(DeviceManager):
    """PlayStation 5 consoles (power only)."""

    family = DeviceFamily.PROXIED_CONSOLE
