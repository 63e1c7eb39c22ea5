"""Client for the optional SmartGlass REST relay."""

from __future__ import annotations

import logging
from typing import Any

import httpx

from device_hub.core.interfaces.adapter import (
    DeviceProtocolError,
    DeviceUnauthorizedError,
    DeviceUnreachableError,
)

logger = logging.getLogger(__name__)


class XboxRelayClient:
    """HTTP client for an xbox-smartglass-rest style relay.

    Example:
        >>> relay = XboxRelayClient("http://relay:5557", http)
        >>> await relay.input("FD00112233445566", "dpad_up")
    """

    def __init__(self, base_url: str, http: httpx.AsyncClient) -> None:
        self.base_url = base_url.rstrip("/")
        self.http = http

    async def _request(self, method: str, endpoint: str, body: dict | None = None) -> Any:
        url = f"{self.base_url}{endpoint}"
        logger.debug(f"Relay {method} {endpoint}")
        try:
            response = await self.http.request(method, url, json=body)
        except httpx.TimeoutException as e:
            raise DeviceUnreachableError(f"Relay timed out: {endpoint}") from e
        except httpx.TransportError as e:
            raise DeviceUnreachableError(f"Relay unavailable: {e}") from e

        if response.status_code in (401, 403):
            raise DeviceUnauthorizedError(f"Relay rejected {endpoint}: HTTP {response.status_code}")
        if response.status_code >= 400:
            raise DeviceProtocolError(
                f"Relay error {response.status_code}: {response.text}"
            )

        if not response.content:
            return None
        try:
            return response.json()
        except ValueError:
            return response.text

    async def devices(self) -> list[dict]:
        result = await self._request("GET", "/device")
        return result if isinstance(result, list) else []

    async def device(self, live_id: str) -> dict:
        result = await self._request("GET", f"/device/{live_id}")
        return result if isinstance(result, dict) else {}

    async def power_on(self, live_id: str) -> None:
        await self._request("GET", f"/device/{live_id}/poweron")

    async def power_off(self, live_id: str) -> None:
        await self._request("GET", f"/device/{live_id}/poweroff")

    async def input(self, live_id: str, button: str) -> None:
        await self._request("POST", f"/device/{live_id}/input", {"button": button})

    async def media(self, live_id: str, command: str) -> None:
        await self._request("POST", f"/device/{live_id}/media", {"command": command})

    async def launch(self, live_id: str, app: str) -> None:
        await self._request("GET", f"/device/{live_id}/launch/{app}")

    async def apps(self, live_id: str) -> list[dict]:
        result = await self._request("GET", f"/device/{live_id}/apps")
        return result if isinstance(result, list) else []
