"""adb command runner.

Each call spawns the adb binary: ``adb connect`` (idempotent) followed by
``adb -s host:port shell <cmd>``. There is no persistent session; the adb
server keeps the TCP connection alive between calls.
"""

from __future__ import annotations

import asyncio
import logging

from device_hub.core.interfaces.adapter import (
    DeviceProtocolError,
    DeviceUnauthorizedError,
    DeviceUnreachableError,
)

logger = logging.getLogger(__name__)

# adb output fragments that mean the device is not reachable
OFFLINE_MARKERS = ("device offline", "not found", "unable to connect", "failed to connect", "no devices")
UNAUTHORIZED_MARKER = "unauthorized"


class AdbShell:
    """Async wrapper around the adb binary.

    Example:
        >>> adb = AdbShell(timeout=10.0)
        >>> output = await adb.shell("192.168.1.21:5555", "dumpsys power | grep mWakefulness")
    """

    def __init__(self, adb_path: str = "adb", timeout: float = 10.0) -> None:
        """Initialize runner.

        Args:
            adb_path: adb executable
            timeout: Bound for one adb invocation in seconds
        """
        self.adb_path = adb_path
        self.timeout = timeout

    async def _run(self, *args: str) -> tuple[int, str]:
        try:
            process = await asyncio.create_subprocess_exec(
                self.adb_path,
                *args,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.STDOUT,
            )
        except FileNotFoundError as e:
            raise DeviceProtocolError(f"adb executable not found: {self.adb_path}") from e

        try:
            stdout, _ = await asyncio.wait_for(process.communicate(), timeout=self.timeout)
        except asyncio.TimeoutError as e:
            process.kill()
            await process.wait()
            raise DeviceUnreachableError(f"adb {' '.join(args[:3])} timed out after {self.timeout}s") from e

        return process.returncode or 0, stdout.decode("utf-8", errors="replace").strip()

    async def connect(self, address: str) -> None:
        """Attach the adb server to a device (idempotent)."""
        _, output = await self._run("connect", address)
        logger.debug(f"adb connect {address}: {output}")
        lowered = output.lower()
        if any(marker in lowered for marker in OFFLINE_MARKERS) and "already connected" not in lowered:
            raise DeviceUnreachableError(f"adb connect {address}: {output}")

    async def shell(self, address: str, command: str) -> str:
        """Run a shell command on a device.

        Args:
            address: host:port of the device
            command: Shell command line

        Returns:
            Combined stdout/stderr, stripped

        Raises:
            DeviceUnreachableError: If the device is offline or the call times out
            DeviceUnauthorizedError: If the device has not authorized this host
            DeviceProtocolError: If adb exits with an error
        """
        await self.connect(address)
        logger.debug(f"adb -s {address} shell {command}")
        code, output = await self._run("-s", address, "shell", command)
        if code != 0:
            lowered = output.lower()
            if UNAUTHORIZED_MARKER in lowered:
                raise DeviceUnauthorizedError(f"adb not authorized on {address}")
            if any(marker in lowered for marker in OFFLINE_MARKERS):
                raise DeviceUnreachableError(f"adb {address}: {output}")
            # grep exits 1 on no match; callers treat empty output as unknown
            if code == 1 and not output:
                return ""
            raise DeviceProtocolError(f"adb shell failed ({code}): {output}")
        return output


async def probe(host: str, port: int, timeout: float = 2.0) -> bool:
    """Check whether a TCP port accepts connections within timeout."""
    try:
        _, writer = await asyncio.wait_for(asyncio.open_connection(host, port), timeout=timeout)
    except (OSError, asyncio.TimeoutError):
        return False
    writer.close()
    try:
        await writer.wait_closed()
    except OSError:
        pass
    return True
