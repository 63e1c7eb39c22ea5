"""Interface definitions for device adapters.

Contains the Protocol every family adapter implements and the typed
error hierarchy adapters raise.
"""

from device_hub.core.interfaces.adapter import (
    DeviceAdapter,
    DeviceError,
    DeviceNotFoundError,
    DeviceProtocolError,
    DeviceUnauthorizedError,
    DeviceUnreachableError,
    UnsupportedCommandError,
)

__all__ = [
    "DeviceAdapter",
    "DeviceError",
    "DeviceNotFoundError",
    "DeviceProtocolError",
    "DeviceUnauthorizedError",
    "DeviceUnreachableError",
    "UnsupportedCommandError",
]
