"""Device adapter protocol definition.

Defines the interface every protocol adapter implements, and the error
taxonomy adapters use to report remote failures. Managers only ever talk
to this interface, so they never branch on device family.
"""

from __future__ import annotations

from abc import abstractmethod
from typing import Protocol, runtime_checkable

from device_hub.core.models.command import CommandOutcome, DeviceCommand, FailureKind
from device_hub.core.models.descriptor import DeviceDescriptor, DeviceFamily
from device_hub.core.models.state import DeviceState


@runtime_checkable
class DeviceAdapter(Protocol):
    """Protocol for device-family adapters.

    One adapter instance serves every device of its family; per-device
    addressing comes from the descriptor passed to each call.

    Lifecycle:
        1. Create instance with family-level settings
        2. Call connect() once at hub startup
        3. Use fetch_state() and execute()
        4. Call disconnect() at shutdown

    Example Implementation:
        >>> class EchoAdapter:
        ...     @property
        ...     def family(self) -> DeviceFamily:
        ...         return DeviceFamily.RECEIVER
        ...
        ...     @property
        ...     def commands(self) -> frozenset[str]:
        ...         return frozenset({"power"})
        ...
        ...     async def connect(self) -> None:
        ...         pass
        ...
        ...     async def disconnect(self) -> None:
        ...         pass
        ...
        ...     async def fetch_state(self, descriptor: DeviceDescriptor) -> DeviceState:
        ...         return DeviceState(name=descriptor.name, family=self.family, online=True)
        ...
        ...     async def execute(
        ...         self, descriptor: DeviceDescriptor, command: DeviceCommand
        ...     ) -> CommandOutcome:
        ...         return CommandOutcome.ok(descriptor.name, command.action)
    """

    @property
    @abstractmethod
    def family(self) -> DeviceFamily:
        """Device family served by this adapter."""
        ...

    @property
    @abstractmethod
    def commands(self) -> frozenset[str]:
        """Command names this adapter can map to wire operations."""
        ...

    @abstractmethod
    async def connect(self) -> None:
        """Acquire long-lived resources (clients, subscriptions)."""
        ...

    @abstractmethod
    async def disconnect(self) -> None:
        """Release resources acquired by connect()."""
        ...

    @abstractmethod
    async def fetch_state(self, descriptor: DeviceDescriptor) -> DeviceState:
        """Fetch a complete, fresh state snapshot.

        Args:
            descriptor: Device to query

        Returns:
            DeviceState built from a single fetch

        Raises:
            DeviceUnreachableError: If the device cannot be contacted
            DeviceError: For any other typed failure
        """
        ...

    @abstractmethod
    async def execute(self, descriptor: DeviceDescriptor, command: DeviceCommand) -> CommandOutcome:
        """Execute a command against one device.

        Remote failures are reported in the returned outcome, never raised.

        Args:
            descriptor: Target device
            command: Command to translate and send

        Returns:
            CommandOutcome indicating success or a typed failure
        """
        ...


class DeviceError(Exception):
    """Base exception for device errors."""

    kind: FailureKind = FailureKind.PROTOCOL_ERROR

    def __init__(self, message: str, device: str | None = None) -> None:
        """Initialize device error.

        Args:
            message: Error description
            device: Device name (optional)
        """
        self.device = device
        super().__init__(f"[{device}] {message}" if device else message)


class DeviceUnreachableError(DeviceError):
    """Raised when a device cannot be contacted or times out."""

    kind = FailureKind.UNREACHABLE


class DeviceProtocolError(DeviceError):
    """Raised when a device answers with a decoded failure."""

    kind = FailureKind.PROTOCOL_ERROR


class DeviceUnauthorizedError(DeviceError):
    """Raised when a device rejects the configured credentials."""

    kind = FailureKind.UNAUTHORIZED


class UnsupportedCommandError(DeviceError):
    """Raised when no mapping exists for a command on this family or transport."""

    kind = FailureKind.UNSUPPORTED

    def __init__(self, action: str, device: str | None = None, reason: str | None = None) -> None:
        """Initialize unsupported command error.

        Args:
            action: Command that has no mapping
            device: Device name (optional)
            reason: Extra detail (optional)
        """
        self.action = action
        message = f"Unsupported command: {action}"
        if reason:
            message = f"{message} ({reason})"
        super().__init__(message, device)


class DeviceNotFoundError(DeviceError):
    """Raised when a device name is not in the registry."""

    kind = FailureKind.NOT_FOUND

    def __init__(self, name: str) -> None:
        """Initialize device not found error.

        Args:
            name: Device name that was not found
        """
        self.name = name
        super().__init__(f"Device not found: {name}")
