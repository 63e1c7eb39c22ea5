"""Tests for configuration loading."""

from __future__ import annotations

from pathlib import Path

import pytest
from pydantic import ValidationError

from device_hub.core.models import DeviceFamily
from device_hub.core.registry import HubConfig
from device_hub.services import config_loader
from device_hub.services.config_loader import load_config, parse_config

DEVICES_YAML = """
cache_ttl: 4
family_ttls:
  proxied_console: 10
xbox_relay_url: http://relay:5557/
devices:
  receiver:
    - name: soundbar
      host: 192.168.1.20
    - name: tv
      host: 192.168.1.40
      psk: "0000"
      sub_type: tv
  set_top_box:
    - name: shield
      host: 192.168.1.21
  wake_console:
    - name: xbox
      host: 192.168.1.30
      device_id: FD00112233445566
  proxied_console:
    - name: ps5
      device_id: ps5_living_room
"""


class TestParseConfig:
    """Tests for parse_config."""

    def test_grouped_devices(self) -> None:
        """Test that devices grouped by family are flattened."""
        config = parse_config(
            {
                "devices": {
                    "receiver": [{"name": "soundbar", "host": "10.0.0.5"}],
                    "set_top_box": [{"name": "shield", "host": "10.0.0.6"}],
                }
            }
        )
        assert [d.family for d in config.devices] == [DeviceFamily.RECEIVER, DeviceFamily.SET_TOP_BOX]

    def test_list_devices(self) -> None:
        """Test a flat device list with explicit families."""
        config = parse_config({"devices": [{"name": "shield", "family": "set_top_box", "host": "10.0.0.6"}]})
        assert config.devices[0].port == 5555

    def test_empty_config(self) -> None:
        """Test that an empty file yields defaults."""
        config = parse_config(None)
        assert config.devices == []
        assert config.cache_ttl == 5.0
        assert config.playstation_transport == "mqtt"

    def test_home_assistant_transport_requires_settings(self) -> None:
        """Test that the HA transport needs HA settings when consoles exist."""
        with pytest.raises(ValidationError):
            parse_config(
                {
                    "playstation_transport": "home_assistant",
                    "devices": [{"name": "ps5", "family": "proxied_console", "device_id": "x"}],
                }
            )

    def test_invalid_log_level(self) -> None:
        """Test that unknown log levels are rejected."""
        with pytest.raises(ValidationError):
            parse_config({"log_level": "chatty"})


class TestLoadConfig:
    """Tests for load_config."""

    def test_load_yaml_file(self, tmp_path: Path) -> None:
        """Test loading a YAML file."""
        path = tmp_path / "devices.yaml"
        path.write_text(DEVICES_YAML)

        config = load_config(path)

        assert len(config.devices) == 5
        assert config.xbox_relay_url == "http://relay:5557"
        assert config.ttl_for(DeviceFamily.PROXIED_CONSOLE) == 10
        assert config.ttl_for(DeviceFamily.RECEIVER) == 4
        assert config.interval_for(DeviceFamily.RECEIVER) == 4
        tv = next(d for d in config.devices if d.name == "tv")
        assert tv.psk == "0000"
        assert tv.is_tv

    def test_example_config_is_valid(self) -> None:
        """Test the shipped example configuration loads."""
        path = Path(__file__).parent.parent / "config" / "devices.example.yaml"

        config = load_config(path)

        assert {d.family for d in config.devices} == set(DeviceFamily)
        assert config.mqtt.client_id == "device-hub"

    def test_env_path_takes_precedence(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        """Test DEVICE_HUB_CONFIG is checked before default paths."""
        path = tmp_path / "custom.yaml"
        path.write_text(DEVICES_YAML)
        monkeypatch.setenv("DEVICE_HUB_CONFIG", str(path))

        assert config_loader.find_config_file() == path

    def test_falls_back_to_environment(self, monkeypatch: pytest.MonkeyPatch) -> None:
        """Test environment configuration when no file exists."""
        monkeypatch.delenv("DEVICE_HUB_CONFIG", raising=False)
        monkeypatch.setattr(config_loader, "CONFIG_PATHS", [])
        monkeypatch.setenv("SONY_DEVICES", "soundbar:192.168.1.20:10000::,tv:192.168.1.40:10000:1234:tv")
        monkeypatch.setenv("SHIELD_DEVICES", "shield:192.168.1.21")
        monkeypatch.setenv("XBOX_DEVICES", "xbox:192.168.1.30:FD00112233445566")
        monkeypatch.setenv("PS5_DEVICES", "ps5:ps5_living_room:gamer42")
        monkeypatch.setenv("CACHE_TTL", "3")

        config = load_config()

        by_name = {d.name: d for d in config.devices}
        assert set(by_name) == {"soundbar", "tv", "shield", "xbox", "ps5"}
        assert by_name["soundbar"].psk is None
        assert by_name["soundbar"].sub_type == "soundbar"
        assert by_name["tv"].psk == "1234"
        assert by_name["tv"].sub_type == "tv"
        assert by_name["shield"].port == 5555
        assert by_name["xbox"].device_id == "FD00112233445566"
        assert by_name["ps5"].account == "gamer42"
        assert config.cache_ttl == 3.0


class TestHubConfigFromEnv:
    """Tests for HubConfig.from_env."""

    def test_home_assistant_settings(self, monkeypatch: pytest.MonkeyPatch) -> None:
        """Test HA settings are read when both URL and token are set."""
        monkeypatch.setenv("HA_URL", "http://ha:8123/")
        monkeypatch.setenv("HA_TOKEN", "secret")
        monkeypatch.setenv("PS5_TRANSPORT", "home_assistant")

        config = HubConfig.from_env()

        assert config.home_assistant is not None
        assert config.home_assistant.base_url == "http://ha:8123"
        assert config.playstation_transport == "home_assistant"

    def test_empty_relay_url_is_unset(self, monkeypatch: pytest.MonkeyPatch) -> None:
        """Test that an empty relay URL means no relay."""
        monkeypatch.setenv("XBOX_REST_SERVER", "")
        assert HubConfig.from_env().xbox_relay_url is None
