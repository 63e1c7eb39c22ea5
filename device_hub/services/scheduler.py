"""Background refresh scheduler.

Runs one periodic sweep task per device family. A sweep refreshes every
device of the family concurrently; a failing device is logged and skipped
without affecting the others. The task stops only through its explicit
stop signal.
"""

from __future__ import annotations

import asyncio
import logging
import time
from collections.abc import Awaitable, Callable, Sequence
from dataclasses import dataclass, field

from device_hub.core.models import DeviceDescriptor, DeviceFamily, DeviceState

logger = logging.getLogger(__name__)

Refresher = Callable[[DeviceDescriptor], Awaitable[DeviceState]]


@dataclass
class PollCycle:
    """Outcome of one sweep over a family."""

    family: DeviceFamily
    refreshed: list[str] = field(default_factory=list)
    failed: list[str] = field(default_factory=list)
    duration: float = 0.0

    @property
    def total(self) -> int:
        return len(self.refreshed) + len(self.failed)


class RefreshScheduler:
    """Periodic sweep task for one device family.

    Example:
        >>> scheduler = RefreshScheduler(
        ...     DeviceFamily.RECEIVER,
        ...     registry.by_family(DeviceFamily.RECEIVER),
        ...     refresh=lambda d: cache.refresh(d, adapter.fetch_state),
        ...     interval=5.0,
        ... )
        >>> scheduler.start()
        >>> cycle = await scheduler.sweep()  # one sweep on demand
        >>> await scheduler.stop()
    """

    def __init__(
        self,
        family: DeviceFamily,
        devices: Sequence[DeviceDescriptor],
        refresh: Refresher,
        interval: float = 5.0,
    ) -> None:
        """Initialize the scheduler.

        Args:
            family: Family swept by this scheduler
            devices: Devices refreshed on every sweep
            refresh: Coroutine refreshing one device into the cache
            interval: Seconds between sweeps
        """
        self.family = family
        self.devices = tuple(devices)
        self.interval = interval
        self._refresh = refresh
        self._stop = asyncio.Event()
        self._task: asyncio.Task[None] | None = None
        self.last_cycle: PollCycle | None = None

    @property
    def is_running(self) -> bool:
        """Check if the sweep task is alive."""
        return self._task is not None and not self._task.done()

    def start(self) -> None:
        """Start the sweep task (no-op if already running)."""
        if self.is_running:
            return
        self._stop.clear()
        self._task = asyncio.create_task(self._run(), name=f"refresh-{self.family.value}")
        logger.info(
            f"Started {self.family.value} refresh every {self.interval}s "
            f"for {len(self.devices)} devices"
        )

    async def stop(self) -> None:
        """Signal the sweep task to stop and wait for it to finish."""
        if self._task is None:
            return
        self._stop.set()
        await self._task
        self._task = None
        logger.info(f"Stopped {self.family.value} refresh")

    async def sweep(self) -> PollCycle:
        """Refresh every device of the family once.

        Returns:
            PollCycle listing refreshed and failed devices
        """
        cycle = PollCycle(family=self.family)
        start = time.monotonic()
        results = await asyncio.gather(
            *(self._refresh_one(descriptor) for descriptor in self.devices)
        )
        for descriptor, ok in zip(self.devices, results):
            (cycle.refreshed if ok else cycle.failed).append(descriptor.name)
        cycle.duration = time.monotonic() - start
        self.last_cycle = cycle
        if cycle.failed:
            logger.info(
                f"{self.family.value} sweep: {len(cycle.refreshed)} ok, "
                f"{len(cycle.failed)} failed ({', '.join(cycle.failed)})"
            )
        else:
            logger.debug(f"{self.family.value} sweep: {len(cycle.refreshed)} ok in {cycle.duration:.2f}s")
        return cycle

    async def _refresh_one(self, descriptor: DeviceDescriptor) -> bool:
        try:
            state = await self._refresh(descriptor)
        except Exception as e:
            logger.error(f"Refresh of {descriptor.name} failed: {e}", exc_info=True)
            return False
        return state.online and state.last_error is None

    async def _run(self) -> None:
        while not self._stop.is_set():
            try:
                await self.sweep()
            except Exception as e:
                logger.error(f"{self.family.value} sweep crashed: {e}", exc_info=True)
            try:
                await asyncio.wait_for(self._stop.wait(), timeout=self.interval)
            except asyncio.TimeoutError:
                pass
