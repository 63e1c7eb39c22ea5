"""Static registry of configured devices.

Maps device names to their descriptor and the adapter serving their
family. The registry is built once at hub startup and is read-only
afterwards, so it needs no locking.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Iterator, Mapping
from types import MappingProxyType

from device_hub.core.interfaces.adapter import DeviceAdapter, DeviceNotFoundError
from device_hub.core.models import DeviceDescriptor, DeviceFamily

logger = logging.getLogger(__name__)


class DeviceRegistry:
    """Immutable name to (descriptor, adapter) mapping.

    Example:
        >>> registry = DeviceRegistry(
        ...     [DeviceDescriptor(name="soundbar", family="receiver", host="10.0.0.5")],
        ...     adapters={DeviceFamily.RECEIVER: SonyAdapter()},
        ... )
        >>> descriptor, adapter = registry.resolve("soundbar")
        >>> registry.by_family(DeviceFamily.RECEIVER)
    """

    def __init__(
        self,
        descriptors: Iterable[DeviceDescriptor],
        adapters: Mapping[DeviceFamily, DeviceAdapter] | None = None,
    ) -> None:
        """Build the registry.

        Args:
            descriptors: Configured devices
            adapters: Adapter instance per family

        Raises:
            ValueError: If two devices share a name, or a device's family
                has no adapter when adapters are given
        """
        devices: dict[str, DeviceDescriptor] = {}
        for descriptor in descriptors:
            if descriptor.name in devices:
                raise ValueError(f"Duplicate device name: {descriptor.name}")
            devices[descriptor.name] = descriptor

        bound: dict[DeviceFamily, DeviceAdapter] = dict(adapters or {})
        if adapters is not None:
            missing = {d.family for d in devices.values()} - set(bound)
            if missing:
                names = ", ".join(sorted(f.value for f in missing))
                raise ValueError(f"No adapter configured for families: {names}")

        self._devices: Mapping[str, DeviceDescriptor] = MappingProxyType(devices)
        self._adapters: Mapping[DeviceFamily, DeviceAdapter] = MappingProxyType(bound)
        logger.info(f"DeviceRegistry initialized with {len(devices)} devices")

    def __len__(self) -> int:
        return len(self._devices)

    def __iter__(self) -> Iterator[DeviceDescriptor]:
        return iter(self._devices.values())

    def __contains__(self, name: object) -> bool:
        return name in self._devices

    @property
    def names(self) -> list[str]:
        """Registered device names in configuration order."""
        return list(self._devices)

    def find(self, name: str) -> DeviceDescriptor | None:
        """Get a descriptor by name, or None if unknown."""
        return self._devices.get(name)

    def get(self, name: str) -> DeviceDescriptor:
        """Get a descriptor by name.

        Args:
            name: Device name

        Returns:
            The device's descriptor

        Raises:
            DeviceNotFoundError: If no device has that name
        """
        descriptor = self._devices.get(name)
        if descriptor is None:
            raise DeviceNotFoundError(name)
        return descriptor

    def by_family(self, family: DeviceFamily) -> tuple[DeviceDescriptor, ...]:
        """All descriptors of one family, in configuration order."""
        return tuple(d for d in self._devices.values() if d.family == family)

    def families(self) -> set[DeviceFamily]:
        """Families with at least one configured device."""
        return {d.family for d in self._devices.values()}

    def adapter_for(self, family: DeviceFamily) -> DeviceAdapter:
        """Get the adapter bound to a family.

        Raises:
            KeyError: If no adapter is bound to the family
        """
        return self._adapters[family]

    def resolve(self, name: str) -> tuple[DeviceDescriptor, DeviceAdapter]:
        """Get a device's descriptor together with its adapter.

        Raises:
            DeviceNotFoundError: If no device has that name
        """
        descriptor = self.get(name)
        return descriptor, self.adapter_for(descriptor.family)
