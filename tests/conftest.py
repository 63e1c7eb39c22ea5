"""Pytest configuration and shared fixtures for device hub tests."""

from __future__ import annotations

import pytest

from device_hub.core.models import DeviceDescriptor, DeviceFamily
from device_hub.core.registry import DeviceRegistry, HomeAssistantSettings
from device_hub.services.state_cache import StateCache
from mocks.adapter import FakeAdapter, ManualClock
from mocks.mqtt_client import MockMQTTClient, get_mock_mqtt_client


@pytest.fixture
def soundbar() -> DeviceDescriptor:
    """Fixture providing a Sony soundbar without PSK.

    Returns:
        Receiver descriptor with sub_type soundbar
    """
    return DeviceDescriptor(
        name="soundbar",
        family=DeviceFamily.RECEIVER,
        host="192.168.1.20",
        sub_type="soundbar",
    )


@pytest.fixture
def sony_tv() -> DeviceDescriptor:
    """Fixture providing a Sony TV with a PSK.

    Returns:
        Receiver descriptor with sub_type tv
    """
    return DeviceDescriptor(
        name="living-room-tv",
        family=DeviceFamily.RECEIVER,
        host="192.168.1.40",
        psk="0000",
        sub_type="tv",
    )


@pytest.fixture
def shield() -> DeviceDescriptor:
    """Fixture providing an Nvidia Shield."""
    return DeviceDescriptor(name="shield", family=DeviceFamily.SET_TOP_BOX, host="192.168.1.21")


@pytest.fixture
def xbox() -> DeviceDescriptor:
    """Fixture providing an Xbox with a live id."""
    return DeviceDescriptor(
        name="xbox",
        family=DeviceFamily.WAKE_CONSOLE,
        host="192.168.1.30",
        device_id="FD00112233445566",
    )


@pytest.fixture
def ps5() -> DeviceDescriptor:
    """Fixture providing a PS5 with a PSN account."""
    return DeviceDescriptor(
        name="ps5",
        family=DeviceFamily.PROXIED_CONSOLE,
        device_id="ps5_living_room",
        account="gamer42",
    )


@pytest.fixture
def ha_settings() -> HomeAssistantSettings:
    """Fixture providing Home Assistant settings."""
    return HomeAssistantSettings(base_url="http://test-ha:8123/", token="test_token_123")


@pytest.fixture
def clock() -> ManualClock:
    """Fixture providing a manually advanced monotonic clock."""
    return ManualClock()


@pytest.fixture
def cache(clock: ManualClock) -> StateCache:
    """Fixture providing a state cache with a 5 s TTL on a manual clock."""
    return StateCache(default_ttl=5.0, clock=clock)


@pytest.fixture
def fake_adapter() -> FakeAdapter:
    """Fixture providing an in-memory receiver adapter."""
    return FakeAdapter(DeviceFamily.RECEIVER)


@pytest.fixture
def registry(soundbar: DeviceDescriptor, sony_tv: DeviceDescriptor, shield: DeviceDescriptor) -> DeviceRegistry:
    """Fixture providing a registry with two receivers and a set-top box."""
    return DeviceRegistry([soundbar, sony_tv, shield])


@pytest.fixture
def mock_mqtt_client() -> MockMQTTClient:
    """Fixture providing a connected mock MQTT client."""
    return get_mock_mqtt_client()
