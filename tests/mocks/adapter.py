"""In-memory device adapter for cache, scheduler and manager tests."""

from __future__ import annotations

import asyncio
from typing import Any

from device_hub.core.interfaces.adapter import DeviceError
from device_hub.core.models import (
    CommandOutcome,
    DeviceCommand,
    DeviceDescriptor,
    DeviceFamily,
    DeviceState,
)


class FakeAdapter:
    """Adapter whose device state lives in a dict.

    A device's state is either a DeviceState or an exception to raise.
    Successful commands apply their effect to the stored state, so tests
    can check that a read after a command sees the new value.
    """

    def __init__(self, family: DeviceFamily = DeviceFamily.RECEIVER) -> None:
        self._family = family
        self.states: dict[str, DeviceState | Exception] = {}
        self.fetch_counts: dict[str, int] = {}
        self.executed: list[tuple[str, DeviceCommand]] = []
        self.failures: dict[str, DeviceError] = {}
        self.fetch_delay = 0.0
        self.connected = False
        self.discovered: list[dict] = []

    @property
    def family(self) -> DeviceFamily:
        return self._family

    @property
    def commands(self) -> frozenset[str]:
        return frozenset({"power", "toggle_power", "set_volume", "list_inputs", "list_apps"})

    async def connect(self) -> None:
        self.connected = True

    async def disconnect(self) -> None:
        self.connected = False

    def set_state(self, name: str, **fields: Any) -> None:
        self.states[name] = DeviceState(name=name, family=self._family, online=True, **fields)

    async def fetch_state(self, descriptor: DeviceDescriptor) -> DeviceState:
        self.fetch_counts[descriptor.name] = self.fetch_counts.get(descriptor.name, 0) + 1
        if self.fetch_delay:
            await asyncio.sleep(self.fetch_delay)
        state = self.states.get(descriptor.name)
        if isinstance(state, Exception):
            raise state
        if state is None:
            return DeviceState(name=descriptor.name, family=self._family, online=True)
        return state

    async def execute(self, descriptor: DeviceDescriptor, command: DeviceCommand) -> CommandOutcome:
        self.executed.append((descriptor.name, command))
        if command.action in self.failures:
            return CommandOutcome.from_error(descriptor.name, command.action, self.failures[command.action])

        state = self.states.get(descriptor.name)
        if isinstance(state, DeviceState):
            if command.action == "set_volume":
                self.states[descriptor.name] = state.model_copy(update={"volume": command.arg("level")})
            elif command.action == "power":
                self.states[descriptor.name] = state.model_copy(update={"power": command.arg("on")})
        return CommandOutcome.ok(descriptor.name, command.action, data=command.args or None)

    async def discover(self, timeout: float = 3.0) -> list[dict]:
        return self.discovered


class ManualClock:
    """Monotonic clock advanced explicitly by tests."""

    def __init__(self, start: float = 1000.0) -> None:
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds
