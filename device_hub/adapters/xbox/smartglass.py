"""SmartGlass discovery and wake datagrams.

Only the unauthenticated part of the protocol is spoken here: discovery
requests/responses and the power-on datagram. Everything that needs an
authenticated session goes through the REST relay.
"""

from __future__ import annotations

import asyncio
import logging
import struct

logger = logging.getLogger(__name__)

SMARTGLASS_PORT = 5050
BROADCAST_ADDRESS = "255.255.255.255"

DISCOVERY_REQUEST = 0xDD00
DISCOVERY_RESPONSE = 0xDD01
POWER_ON_REQUEST = 0xDD02

POWER_ON_ATTEMPTS = 5
POWER_ON_INTERVAL = 0.1


def build_discovery_packet() -> bytes:
    """Discovery request: type, payload length 2, flags 0."""
    return struct.pack(">HHH", DISCOVERY_REQUEST, 2, 0)


def build_power_on_packet(live_id: str) -> bytes:
    """Power-on datagram: type, 2 + len(id), len(id), id bytes."""
    payload = live_id.encode("utf-8")
    return struct.pack(">HHH", POWER_ON_REQUEST, 2 + len(payload), len(payload)) + payload


def message_type(data: bytes) -> int | None:
    if len(data) < 4:
        return None
    return struct.unpack(">H", data[:2])[0]


class _Collector(asyncio.DatagramProtocol):
    """Queues every received datagram with its source address."""

    def __init__(self) -> None:
        self.queue: asyncio.Queue[tuple[bytes, tuple]] = asyncio.Queue()

    def datagram_received(self, data: bytes, addr: tuple) -> None:
        self.queue.put_nowait((data, addr))

    def error_received(self, exc: Exception) -> None:
        logger.debug(f"SmartGlass socket error: {exc}")


class SmartGlassTransport:
    """UDP side of the SmartGlass protocol.

    Example:
        >>> transport = SmartGlassTransport(probe_timeout=2.0)
        >>> await transport.power_on("192.168.1.30", "FD00112233445566")
        >>> consoles = await transport.discover(timeout=3.0)
    """

    def __init__(self, port: int = SMARTGLASS_PORT, probe_timeout: float = 2.0) -> None:
        self.port = port
        self.probe_timeout = probe_timeout

    async def _open(self, **kwargs) -> tuple[asyncio.DatagramTransport, _Collector]:
        loop = asyncio.get_running_loop()
        return await loop.create_datagram_endpoint(_Collector, **kwargs)

    async def probe(self, host: str) -> bool:
        """Send a unicast discovery request and wait for any reply.

        Returns:
            True if the console answered within the probe window
        """
        try:
            transport, collector = await self._open(remote_addr=(host, self.port))
        except OSError as e:
            logger.debug(f"SmartGlass probe to {host} failed: {e}")
            return False

        try:
            transport.sendto(build_discovery_packet())
            data, _ = await asyncio.wait_for(collector.queue.get(), timeout=self.probe_timeout)
            return len(data) > 0
        except asyncio.TimeoutError:
            return False
        finally:
            transport.close()

    async def power_on(
        self,
        host: str,
        live_id: str,
        attempts: int = POWER_ON_ATTEMPTS,
        interval: float = POWER_ON_INTERVAL,
    ) -> None:
        """Send the power-on datagram several times; there is no acknowledgement.

        Raises:
            OSError: If the socket cannot be opened
        """
        packet = build_power_on_packet(live_id)
        transport, _ = await self._open(remote_addr=(host, self.port))
        try:
            for attempt in range(attempts):
                transport.sendto(packet)
                if attempt < attempts - 1:
                    await asyncio.sleep(interval)
        finally:
            transport.close()
        logger.info(f"Sent power on to {host} (Live ID: {live_id})")

    async def discover(self, timeout: float = 3.0) -> list[dict]:
        """Broadcast a discovery request and collect responses until timeout.

        Returns:
            One {"name", "host"} entry per responding console
        """
        transport, collector = await self._open(
            local_addr=("0.0.0.0", 0), allow_broadcast=True
        )
        found: dict[str, dict] = {}
        loop = asyncio.get_running_loop()
        deadline = loop.time() + timeout
        try:
            transport.sendto(build_discovery_packet(), (BROADCAST_ADDRESS, self.port))
            while True:
                remaining = deadline - loop.time()
                if remaining <= 0:
                    break
                try:
                    data, addr = await asyncio.wait_for(collector.queue.get(), timeout=remaining)
                except asyncio.TimeoutError:
                    break
                if message_type(data) != DISCOVERY_RESPONSE:
                    continue
                host = addr[0]
                found.setdefault(host, {"name": f"Xbox-{host}", "host": host})
        finally:
            transport.close()

        logger.info(f"SmartGlass discovery found {len(found)} console(s)")
        return list(found.values())
