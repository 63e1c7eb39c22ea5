"""Sony REST API client.

Wraps the JSON-RPC style API Sony TVs and soundbars expose on
``http://{host}:{port}/sony/{service}``. Responses carry either a
``result`` or a non-empty ``error`` array, and a wrong protocol version is
reported as an error payload with HTTP 200, so every response body is
inspected.
"""

from __future__ import annotations

import logging
from typing import Any

import httpx

from device_hub.adapters.sony.ircc import IRCC_SOAP_ACTION, build_ircc_envelope
from device_hub.adapters.sony.versions import method_version, volume_params
from device_hub.core.interfaces.adapter import (
    DeviceProtocolError,
    DeviceUnauthorizedError,
    DeviceUnreachableError,
)
from device_hub.core.models import DeviceDescriptor

logger = logging.getLogger(__name__)

# Sony API error codes that mean the PSK was rejected
AUTH_ERROR_CODES = {401, 403}


class SonyClient:
    """Client for one Sony device.

    Example:
        >>> async with httpx.AsyncClient() as http:
        ...     client = SonyClient(descriptor, http)
        ...     status = await client.get_power_status()
    """

    def __init__(self, descriptor: DeviceDescriptor, http: httpx.AsyncClient) -> None:
        """Initialize client.

        Args:
            descriptor: Receiver descriptor (host, port, psk, sub_type)
            http: Shared HTTP client
        """
        self.descriptor = descriptor
        self.http = http
        self.base_url = f"http://{descriptor.host}:{descriptor.port}/sony"

    def _get_headers(self, content_type: str = "application/json; charset=UTF-8") -> dict[str, str]:
        headers = {"Content-Type": content_type}
        # TVs require the PSK header; soundbars reject unknown auth
        if self.descriptor.psk:
            headers["X-Auth-PSK"] = self.descriptor.psk
        return headers

    async def call(self, service: str, method: str, params: list[Any] | None = None) -> Any:
        """Call an API method with the version for this device's sub-type.

        Args:
            service: API service (system, audio, avContent, appControl)
            method: Method name
            params: Method params (defaults to an empty list)

        Returns:
            The decoded ``result`` field

        Raises:
            DeviceUnreachableError: On connection failure or timeout
            DeviceUnauthorizedError: If the PSK is rejected
            DeviceProtocolError: On any other failure response
        """
        name = self.descriptor.name
        body = {
            "method": method,
            "params": params if params is not None else [],
            "id": 1,
            "version": method_version(method, self.descriptor.sub_type),
        }
        url = f"{self.base_url}/{service}"
        logger.debug(f"Sony call {name}: {service}.{method} v{body['version']}")

        try:
            response = await self.http.post(url, json=body, headers=self._get_headers())
        except httpx.TimeoutException as e:
            raise DeviceUnreachableError(f"{method} timed out", name) from e
        except httpx.TransportError as e:
            raise DeviceUnreachableError(f"{method} failed: {e}", name) from e

        if response.status_code in AUTH_ERROR_CODES:
            raise DeviceUnauthorizedError(f"HTTP {response.status_code} from {method}", name)
        if response.status_code != 200:
            raise DeviceProtocolError(
                f"HTTP {response.status_code} from {method}: {response.text}", name
            )

        try:
            payload = response.json()
        except ValueError as e:
            raise DeviceProtocolError(f"Invalid JSON from {method}", name) from e
        if not isinstance(payload, dict):
            raise DeviceProtocolError(f"Unexpected response from {method}: {payload!r}", name)

        error = payload.get("error")
        if error:
            code = error[0] if isinstance(error, list) and error else None
            if code in AUTH_ERROR_CODES:
                raise DeviceUnauthorizedError(f"{method} rejected: {error}", name)
            raise DeviceProtocolError(f"Sony API error from {method}: {error}", name)

        return payload.get("result")

    def _first(self, result: Any, method: str, expected: type = dict) -> Any:
        """First element of a result list, checked against the expected type."""
        if not isinstance(result, list) or not result:
            raise DeviceProtocolError(f"No result returned by {method}", self.descriptor.name)
        first = result[0]
        if not isinstance(first, expected):
            raise DeviceProtocolError(f"Unexpected result from {method}: {first!r}", self.descriptor.name)
        return first

    def _items(self, result: Any, method: str) -> list[dict[str, Any]]:
        """List of objects wrapped in a result list; empty when there is none."""
        if not result:
            return []
        items = self._first(result, method, list)
        return [item for item in items if isinstance(item, dict)]

    # Power

    async def get_power_status(self) -> str:
        """Raw power status ('active', 'standby', 'on', 'off')."""
        result = await self.call("system", "getPowerStatus")
        return self._first(result, "getPowerStatus").get("status", "")

    async def set_power_status(self, status: str) -> None:
        await self.call("system", "setPowerStatus", [{"status": status}])

    # Audio

    async def get_volume_info(self) -> dict[str, Any]:
        """First volume target: {target, volume, mute, minVolume, maxVolume}."""
        result = await self.call(
            "audio", "getVolumeInformation", volume_params(self.descriptor.sub_type)
        )
        targets = self._items(result, "getVolumeInformation")
        if not targets:
            raise DeviceProtocolError("No volume info returned", self.descriptor.name)
        return targets[0]

    async def set_volume(self, volume: int | str) -> None:
        await self.call("audio", "setAudioVolume", [{"target": "", "volume": str(volume)}])

    async def set_mute(self, mute: bool) -> None:
        await self.call("audio", "setAudioMute", [{"mute": "on" if mute else "off"}])

    async def get_sound_settings(self, target: str = "") -> list[dict[str, Any]]:
        result = await self.call("audio", "getSoundSettings", [{"target": target}])
        return self._items(result, "getSoundSettings")

    async def set_sound_setting(self, target: str, value: str) -> None:
        await self.call(
            "audio",
            "setSoundSettings",
            [{"settings": [{"target": target, "value": value}]}],
        )

    # Inputs and content

    async def get_inputs(self) -> list[dict[str, Any]]:
        """External inputs: [{uri, title, icon}]."""
        result = await self.call(
            "avContent", "getCurrentExternalInputsStatus", [{"scheme": "extInput"}]
        )
        return self._items(result, "getCurrentExternalInputsStatus")

    async def set_play_content(self, uri: str) -> None:
        await self.call("avContent", "setPlayContent", [{"uri": uri}])

    async def get_playing_content(self) -> dict[str, Any]:
        """Currently playing content: {uri, title}."""
        result = await self.call("avContent", "getPlayingContentInfo")
        return self._first(result, "getPlayingContentInfo")

    # Apps

    async def get_application_list(self) -> list[dict[str, Any]]:
        result = await self.call("appControl", "getApplicationList")
        return self._items(result, "getApplicationList")

    async def set_active_app(self, uri: str) -> None:
        await self.call("appControl", "setActiveApp", [{"uri": uri}])

    async def terminate_apps(self) -> None:
        await self.call("appControl", "terminateApps")

    # System

    async def get_system_information(self) -> dict[str, Any]:
        result = await self.call("system", "getSystemInformation")
        return self._first(result, "getSystemInformation")

    async def request_reboot(self) -> None:
        await self.call("system", "requestReboot")

    async def set_power_saving_mode(self, mode: str) -> None:
        """mode: 'off', 'low', 'high' or 'pictureOff'."""
        await self.call("system", "setPowerSavingMode", [{"mode": mode}])

    async def set_led_status(self, mode: str, status: str | None = None) -> None:
        params: dict[str, Any] = {"mode": mode}
        if status is not None:
            params["status"] = status
        await self.call("system", "setLEDIndicatorStatus", [params])

    # Remote control

    async def send_ircc(self, code: str) -> None:
        """Send a raw IRCC code through the SOAP endpoint.

        Raises:
            DeviceUnreachableError: On connection failure or timeout
            DeviceUnauthorizedError: If the PSK is rejected
            DeviceProtocolError: On a non-200 response
        """
        name = self.descriptor.name
        headers = self._get_headers("text/xml; charset=UTF-8")
        headers["SOAPACTION"] = IRCC_SOAP_ACTION
        try:
            response = await self.http.post(
                f"{self.base_url}/ircc",
                content=build_ircc_envelope(code),
                headers=headers,
            )
        except httpx.TimeoutException as e:
            raise DeviceUnreachableError("IRCC request timed out", name) from e
        except httpx.TransportError as e:
            raise DeviceUnreachableError(f"IRCC request failed: {e}", name) from e

        if response.status_code in AUTH_ERROR_CODES:
            raise DeviceUnauthorizedError(f"HTTP {response.status_code} from IRCC", name)
        if response.status_code != 200:
            raise DeviceProtocolError(f"HTTP {response.status_code} from IRCC: {response.text}", name)
