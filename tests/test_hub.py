"""Tests for hub assembly."""

from __future__ import annotations

import logging
import sys

import pytest

from device_hub import main as main_module
from device_hub.adapters import (
    PlaystationHomeAssistantAdapter,
    PlaystationMqttAdapter,
    ShieldAdapter,
    SonyAdapter,
    XboxAdapter,
)
from device_hub.core.interfaces.adapter import DeviceNotFoundError
from device_hub.core.models import DeviceDescriptor, DeviceFamily
from device_hub.core.registry import HubConfig
from device_hub.main import Hub, build_adapters
from device_hub.services.device_manager import ReceiverManager, SetTopBoxManager
from mocks.adapter import FakeAdapter


@pytest.fixture
def config(soundbar: DeviceDescriptor, sony_tv: DeviceDescriptor, shield: DeviceDescriptor) -> HubConfig:
    """Fixture providing a config with receivers and a set-top box."""
    return HubConfig(devices=[soundbar, sony_tv, shield], cache_ttl=5.0)


class TestBuildAdapters:
    """Tests for adapter selection."""

    def test_only_configured_families(self, config: HubConfig) -> None:
        """Test adapters are created only for families with devices."""
        adapters = build_adapters(config)

        assert set(adapters) == {DeviceFamily.RECEIVER, DeviceFamily.SET_TOP_BOX}
        assert isinstance(adapters[DeviceFamily.RECEIVER], SonyAdapter)
        assert isinstance(adapters[DeviceFamily.SET_TOP_BOX], ShieldAdapter)

    def test_console_adapters(self, xbox: DeviceDescriptor, ps5: DeviceDescriptor) -> None:
        """Test console adapters honour the relay and transport settings."""
        adapters = build_adapters(HubConfig(devices=[xbox, ps5], xbox_relay_url="http://relay:5557/"))

        assert isinstance(adapters[DeviceFamily.WAKE_CONSOLE], XboxAdapter)
        assert adapters[DeviceFamily.WAKE_CONSOLE].relay_url == "http://relay:5557"
        assert isinstance(adapters[DeviceFamily.PROXIED_CONSOLE], PlaystationMqttAdapter)

    def test_home_assistant_transport(self, ps5: DeviceDescriptor) -> None:
        """Test the Home Assistant transport for consoles."""
        config = HubConfig(
            devices=[ps5],
            playstation_transport="home_assistant",
            home_assistant={"base_url": "http://ha:8123", "token": "t"},
        )

        adapters = build_adapters(config)

        assert isinstance(adapters[DeviceFamily.PROXIED_CONSOLE], PlaystationHomeAssistantAdapter)


class TestHub:
    """Tests for the assembled hub."""

    def test_managers_per_family(self, config: HubConfig) -> None:
        """Test one typed manager per configured family."""
        hub = Hub(config)

        assert isinstance(hub.receivers, ReceiverManager)
        assert isinstance(hub.set_top_boxes, SetTopBoxManager)
        assert hub.wake_consoles is None
        assert hub.proxied_consoles is None
        assert hub.manager_for("shield") is hub.set_top_boxes

    def test_manager_for_unknown(self, config: HubConfig) -> None:
        """Test an unknown name raises DeviceNotFoundError."""
        with pytest.raises(DeviceNotFoundError):
            Hub(config).manager_for("kitchen-radio")

    @pytest.mark.asyncio
    async def test_lifecycle_and_snapshot(self, config: HubConfig) -> None:
        """Test the hub starts every manager and stops them on exit."""
        adapters = {
            DeviceFamily.RECEIVER: FakeAdapter(DeviceFamily.RECEIVER),
            DeviceFamily.SET_TOP_BOX: FakeAdapter(DeviceFamily.SET_TOP_BOX),
        }

        async with Hub(config, adapters=adapters) as hub:
            assert all(a.connected for a in adapters.values())
            assert all(m.scheduler.is_running for m in hub.managers.values())
            snapshot = await hub.snapshot()

        assert [s["name"] for s in snapshot["receiver"]] == ["soundbar", "living-room-tv"]
        assert [s["name"] for s in snapshot["set_top_box"]] == ["shield"]
        assert not any(a.connected for a in adapters.values())


class TestMain:
    """Tests for the command line entry point."""

    def test_logging_configured_before_config_load(
        self, config: HubConfig, monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture[str]
    ) -> None:
        """Test logging is set up from LOG_LEVEL before the config file is read."""
        calls: list[str] = []

        def fake_load_config(path):
            calls.append("load_config")
            return config.model_copy(update={"log_level": "WARNING"})

        async def fake_run_once(loaded: HubConfig) -> dict:
            return {"receiver": []}

        monkeypatch.setattr(main_module, "setup_logging", lambda level: calls.append(f"setup_logging:{level}"))
        monkeypatch.setattr(main_module, "load_config", fake_load_config)
        monkeypatch.setattr(main_module, "run_once", fake_run_once)
        monkeypatch.setattr(sys, "argv", ["device-hub", "--once"])
        monkeypatch.setenv("LOG_LEVEL", "DEBUG")
        root = logging.getLogger()
        monkeypatch.setattr(root, "level", root.level)

        assert main_module.main() == 0

        assert calls == ["setup_logging:DEBUG", "load_config"]
        assert root.level == logging.WARNING
        assert '"receiver": []' in capsys.readouterr().out
