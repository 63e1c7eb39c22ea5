"""Home Assistant REST API client."""

from __future__ import annotations

import logging
from typing import Any

import httpx

from device_hub.core.interfaces.adapter import (
    DeviceProtocolError,
    DeviceUnauthorizedError,
    DeviceUnreachableError,
)
from device_hub.core.registry.config import HomeAssistantSettings

logger = logging.getLogger(__name__)


class HomeAssistantClient:
    """Client for the Home Assistant REST API (entity states and service calls)."""

    def __init__(self, settings: HomeAssistantSettings, http: httpx.AsyncClient | None = None) -> None:
        """Initialize client.

        Args:
            settings: Base URL, long-lived token and timeout
            http: Optional pre-built httpx.AsyncClient (tests use MockTransport)
        """
        self.base_url = settings.base_url
        self.token = settings.token
        self.timeout = settings.timeout
        self._client = http
        self._owns_client = http is None

    def _get_headers(self) -> dict[str, str]:
        return {
            "Authorization": f"Bearer {self.token}",
            "Content-Type": "application/json",
        }

    async def _get_client(self) -> httpx.AsyncClient:
        """Get or create HTTP client."""
        if self._client is None:
            self._client = httpx.AsyncClient(timeout=self.timeout)
            self._owns_client = True
        return self._client

    async def close(self) -> None:
        """Close HTTP client."""
        if self._client is not None and self._owns_client:
            await self._client.aclose()
            self._client = None

    async def _request(self, method: str, path: str, json: dict | None = None) -> httpx.Response:
        client = await self._get_client()
        try:
            response = await client.request(
                method, f"{self.base_url}{path}", json=json, headers=self._get_headers()
            )
        except httpx.TimeoutException as e:
            raise DeviceUnreachableError(f"Home Assistant timed out (>{self.timeout}s)") from e
        except httpx.TransportError as e:
            raise DeviceUnreachableError(f"Home Assistant unavailable: {e}") from e

        if response.status_code in (401, 403):
            raise DeviceUnauthorizedError(f"Home Assistant rejected token: HTTP {response.status_code}")
        return response

    async def get_state(self, entity_id: str) -> dict[str, Any] | None:
        """Fetch one entity state.

        Args:
            entity_id: Entity id (e.g. "switch.ps5_power")

        Returns:
            State object ({"entity_id", "state", "attributes", ...}), or None
            if the entity does not exist
        """
        response = await self._request("GET", f"/api/states/{entity_id}")
        if response.status_code == 404:
            logger.debug(f"Entity not found: {entity_id}")
            return None
        if response.status_code != 200:
            raise DeviceProtocolError(
                f"Home Assistant error {response.status_code} for {entity_id}: {response.text}"
            )
        try:
            state = response.json()
        except ValueError as e:
            raise DeviceProtocolError(f"Invalid JSON for {entity_id}") from e
        if not isinstance(state, dict):
            raise DeviceProtocolError(f"Unexpected state for {entity_id}: {state!r}")
        return state

    async def call_service(self, domain: str, service: str, entity_id: str) -> None:
        """Call a service on one entity (e.g. switch.turn_on)."""
        logger.debug(f"Calling {domain}.{service} on {entity_id}")
        response = await self._request(
            "POST", f"/api/services/{domain}/{service}", json={"entity_id": entity_id}
        )
        if response.status_code not in (200, 201):
            raise DeviceProtocolError(
                f"Home Assistant error {response.status_code} calling {domain}.{service}: {response.text}"
            )
