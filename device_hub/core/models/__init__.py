"""Family-independent models for device integration.

These models are the common language between device managers, the state
cache, and the protocol adapters.
"""

from device_hub.core.models.command import (
    QUERY_COMMANDS,
    CommandOutcome,
    CommandType,
    DeviceCommand,
    FailureKind,
)
from device_hub.core.models.descriptor import DEFAULT_PORTS, DeviceDescriptor, DeviceFamily
from device_hub.core.models.state import CacheEntry, DeviceState

__all__ = [
    "CacheEntry",
    "CommandOutcome",
    "CommandType",
    "DEFAULT_PORTS",
    "DeviceCommand",
    "DeviceDescriptor",
    "DeviceFamily",
    "DeviceState",
    "FailureKind",
    "QUERY_COMMANDS",
]
