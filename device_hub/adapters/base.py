"""Shared command dispatch for device adapters.

Family adapters register one handler per command name. The base class
turns device errors raised by a handler into a CommandOutcome, and any
other exception into a protocol_error outcome, so execute() never raises.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from collections.abc import Awaitable, Callable
from typing import Any

from device_hub.core.interfaces.adapter import DeviceError, DeviceProtocolError, UnsupportedCommandError
from device_hub.core.models import (
    CommandOutcome,
    DeviceCommand,
    DeviceDescriptor,
    DeviceFamily,
    DeviceState,
)

logger = logging.getLogger(__name__)

Handler = Callable[[DeviceDescriptor, DeviceCommand], Awaitable[Any]]


class BaseDeviceAdapter(ABC):
    """Base class for family adapters.

    Subclasses implement fetch_state() and return their command handlers
    from _handlers(). A handler returns an optional result payload, or
    raises a DeviceError subclass.
    """

    family: DeviceFamily

    def __init__(self) -> None:
        self._dispatch: dict[str, Handler] = self._handlers()

    @property
    def name(self) -> str:
        """Adapter identifier used in logs."""
        return self.family.value

    @property
    def commands(self) -> frozenset[str]:
        """Command names this adapter maps to wire operations."""
        return frozenset(self._dispatch)

    @abstractmethod
    def _handlers(self) -> dict[str, Handler]:
        """Map command names to handler coroutines."""
        ...

    @abstractmethod
    async def fetch_state(self, descriptor: DeviceDescriptor) -> DeviceState:
        ...

    @staticmethod
    def _require(descriptor: DeviceDescriptor, command: DeviceCommand, key: str) -> Any:
        """Get a required command argument.

        Raises:
            UnsupportedCommandError: If the argument is missing
        """
        value = command.arg(key)
        if value is None or value == "":
            raise UnsupportedCommandError(
                command.action, descriptor.name, f"missing argument '{key}'"
            )
        return value

    async def connect(self) -> None:
        """Acquire long-lived resources (default: none)."""

    async def disconnect(self) -> None:
        """Release long-lived resources (default: none)."""

    async def execute(self, descriptor: DeviceDescriptor, command: DeviceCommand) -> CommandOutcome:
        """Execute a command and report the result as a typed outcome.

        Args:
            descriptor: Target device
            command: Command to execute

        Returns:
            CommandOutcome with the handler's payload, or the typed failure
        """
        handler = self._dispatch.get(command.action)
        if handler is None:
            exc = UnsupportedCommandError(command.action, descriptor.name)
            logger.info(f"{self.name}: {exc}")
            return CommandOutcome.from_error(descriptor.name, command.action, exc)

        logger.debug(f"{self.name}: executing {command.action} on {descriptor.name} {command.args}")
        try:
            data = await handler(descriptor, command)
        except DeviceError as e:
            logger.warning(f"{self.name}: {command.action} on {descriptor.name} failed: {e}")
            return CommandOutcome.from_error(descriptor.name, command.action, e)
        except (TypeError, ValueError) as e:
            exc = UnsupportedCommandError(command.action, descriptor.name, f"invalid arguments: {e}")
            logger.warning(f"{self.name}: {exc}")
            return CommandOutcome.from_error(descriptor.name, command.action, exc)
        except Exception as e:
            logger.error(f"{self.name}: {command.action} on {descriptor.name} crashed: {e}", exc_info=True)
            exc = DeviceProtocolError(f"Unexpected failure: {e}", descriptor.name)
            return CommandOutcome.from_error(descriptor.name, command.action, exc)

        logger.info(f"{self.name}: {command.action} on {descriptor.name} succeeded")
        return CommandOutcome.ok(descriptor.name, command.action, data=data)
