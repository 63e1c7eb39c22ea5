"""Core abstractions for the device hub.

This package contains the family-independent adapter interface, models,
and the device registry.

Modules:
    interfaces: Adapter protocol and error taxonomy
    models: Descriptors, states, commands and outcomes
    registry: Device registry and hub configuration
"""

from device_hub.core.interfaces import DeviceAdapter, DeviceError
from device_hub.core.models import (
    CommandOutcome,
    DeviceCommand,
    DeviceDescriptor,
    DeviceFamily,
    DeviceState,
    FailureKind,
)

__all__ = [
    "CommandOutcome",
    "DeviceAdapter",
    "DeviceCommand",
    "DeviceDescriptor",
    "DeviceError",
    "DeviceFamily",
    "DeviceState",
    "FailureKind",
]
