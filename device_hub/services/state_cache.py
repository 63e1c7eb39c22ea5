"""Per-device state cache.

Serves device state without a network call while the snapshot is fresh
and refetches through the adapter when it is not. Each device has its own
lock, so a foreground read and a background sweep for the same device
never interleave, while different devices refresh independently.
"""

from __future__ import annotations

import asyncio
import logging
import time
from collections.abc import Awaitable, Callable, Mapping

from device_hub.core.interfaces.adapter import DeviceError, DeviceUnreachableError
from device_hub.core.models import CacheEntry, DeviceDescriptor, DeviceFamily, DeviceState

logger = logging.getLogger(__name__)

Fetcher = Callable[[DeviceDescriptor], Awaitable[DeviceState]]


class StateCache:
    """TTL cache of device state snapshots.

    Every write replaces the whole snapshot. Invalidation makes an entry's
    age infinite without discarding it, so a failed refetch right after a
    command can still fall back to the last-known value.

    Example:
        >>> cache = StateCache(default_ttl=5.0)
        >>> state = await cache.read(descriptor, adapter.fetch_state)
        >>> cache.invalidate(descriptor)
        >>> state = await cache.read(descriptor, adapter.fetch_state)  # refetches
    """

    def __init__(
        self,
        default_ttl: float = 5.0,
        family_ttls: Mapping[DeviceFamily, float] | None = None,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        """Initialize the cache.

        Args:
            default_ttl: TTL in seconds for families without an override
            family_ttls: Per-family TTL overrides
            clock: Monotonic time source
        """
        self._default_ttl = default_ttl
        self._family_ttls = dict(family_ttls or {})
        self._clock = clock
        self._entries: dict[str, CacheEntry] = {}
        self._locks: dict[str, asyncio.Lock] = {}
        # Bumped on every invalidation; a fetch that started before the bump
        # must not store its result as fresh.
        self._generations: dict[str, int] = {}
        logger.info(f"StateCache initialized with default_ttl={default_ttl}s")

    def ttl_for(self, descriptor: DeviceDescriptor) -> float:
        """TTL applied to a device's entry."""
        return self._family_ttls.get(descriptor.family, self._default_ttl)

    def _lock(self, name: str) -> asyncio.Lock:
        lock = self._locks.get(name)
        if lock is None:
            lock = self._locks[name] = asyncio.Lock()
        return lock

    def peek(self, descriptor: DeviceDescriptor) -> CacheEntry | None:
        """Get the current entry without fetching."""
        return self._entries.get(descriptor.name)

    def is_fresh(self, descriptor: DeviceDescriptor) -> bool:
        """Check if a device's entry can be served without a fetch."""
        entry = self._entries.get(descriptor.name)
        return entry is not None and entry.is_fresh(self._clock())

    async def read(self, descriptor: DeviceDescriptor, fetch: Fetcher) -> DeviceState:
        """Get a device's state, fetching only when the entry is not fresh.

        Args:
            descriptor: Device to read
            fetch: Adapter fetch used on a miss

        Returns:
            Cached or freshly fetched DeviceState
        """
        async with self._lock(descriptor.name):
            entry = self._entries.get(descriptor.name)
            if entry is not None and entry.is_fresh(self._clock()):
                logger.debug(f"Cache hit for {descriptor.name}")
                return entry.state
            logger.debug(f"Cache miss for {descriptor.name}")
            return await self._refresh_locked(descriptor, fetch)

    async def refresh(self, descriptor: DeviceDescriptor, fetch: Fetcher) -> DeviceState:
        """Fetch and store a device's state regardless of freshness.

        Args:
            descriptor: Device to refresh
            fetch: Adapter fetch

        Returns:
            The stored DeviceState
        """
        async with self._lock(descriptor.name):
            return await self._refresh_locked(descriptor, fetch)

    async def write(self, descriptor: DeviceDescriptor, state: DeviceState) -> None:
        """Replace a device's snapshot."""
        async with self._lock(descriptor.name):
            self._store(descriptor, state, self._generations.get(descriptor.name, 0))

    def invalidate(self, descriptor: DeviceDescriptor) -> None:
        """Force the next read of a device to fetch, keeping the snapshot.

        Does not take the entry lock, so it never waits behind an in-flight
        fetch; that fetch will store its result as already stale.
        """
        self._generations[descriptor.name] = self._generations.get(descriptor.name, 0) + 1
        entry = self._entries.get(descriptor.name)
        if entry is not None:
            entry.stale = True
        logger.debug(f"Invalidated cache entry for {descriptor.name}")

    def invalidate_all(self) -> None:
        """Invalidate every entry."""
        for name, entry in self._entries.items():
            self._generations[name] = self._generations.get(name, 0) + 1
            entry.stale = True

    async def _refresh_locked(self, descriptor: DeviceDescriptor, fetch: Fetcher) -> DeviceState:
        generation = self._generations.get(descriptor.name, 0)
        try:
            state = await fetch(descriptor)
        except DeviceUnreachableError as e:
            logger.warning(f"Device {descriptor.name} unreachable: {e}")
            state = self._fallback(descriptor, str(e), offline=True)
        except DeviceError as e:
            logger.warning(f"State fetch failed for {descriptor.name}: {e}")
            state = self._fallback(descriptor, str(e), offline=False)
        except Exception as e:
            logger.error(f"State fetch for {descriptor.name} crashed: {e}", exc_info=True)
            state = self._fallback(descriptor, str(e), offline=True)
        self._store(descriptor, state, generation)
        return state

    def _fallback(self, descriptor: DeviceDescriptor, error: str, offline: bool) -> DeviceState:
        entry = self._entries.get(descriptor.name)
        if entry is None:
            return DeviceState.offline(descriptor, error)
        if offline:
            return entry.state.mark_offline(error)
        return entry.state.with_error(error)

    def _store(self, descriptor: DeviceDescriptor, state: DeviceState, generation: int) -> None:
        now = self._clock()
        previous = self._entries.get(descriptor.name)
        if previous is not None:
            now = max(now, previous.captured_at)
        stale = generation != self._generations.get(descriptor.name, 0)
        self._entries[descriptor.name] = CacheEntry(
            state=state,
            captured_at=now,
            ttl=self.ttl_for(descriptor),
            stale=stale,
        )
