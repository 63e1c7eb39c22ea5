"""Tests for Pydantic models."""

from __future__ import annotations

import math

import pytest
from pydantic import ValidationError

from device_hub.core.interfaces.adapter import (
    DeviceNotFoundError,
    DeviceUnreachableError,
    UnsupportedCommandError,
)
from device_hub.core.models import (
    CacheEntry,
    CommandOutcome,
    DeviceCommand,
    DeviceDescriptor,
    DeviceFamily,
    DeviceState,
    FailureKind,
)


class TestDeviceDescriptor:
    """Tests for DeviceDescriptor model."""

    def test_receiver_defaults(self) -> None:
        """Test receiver gets default port and soundbar sub-type."""
        descriptor = DeviceDescriptor(name="soundbar", family="receiver", host="10.0.0.5")
        assert descriptor.port == 10000
        assert descriptor.sub_type == "soundbar"
        assert descriptor.psk is None
        assert descriptor.is_tv is False

    def test_set_top_box_default_port(self) -> None:
        """Test set-top box gets the adb port."""
        descriptor = DeviceDescriptor(name="shield", family="set_top_box", host="10.0.0.6")
        assert descriptor.port == 5555
        assert descriptor.address == "10.0.0.6:5555"

    def test_empty_psk_is_none(self) -> None:
        """Test that an empty PSK is treated as unset."""
        descriptor = DeviceDescriptor(name="tv", family="receiver", host="10.0.0.5", psk="", sub_type="tv")
        assert descriptor.psk is None
        assert descriptor.is_tv is True

    def test_host_required(self) -> None:
        """Test that socket-based families need a host."""
        with pytest.raises(ValidationError):
            DeviceDescriptor(name="shield", family="set_top_box")

    def test_device_id_required_for_consoles(self) -> None:
        """Test that console families need a device id."""
        with pytest.raises(ValidationError):
            DeviceDescriptor(name="xbox", family="wake_console", host="10.0.0.7")
        with pytest.raises(ValidationError):
            DeviceDescriptor(name="ps5", family="proxied_console")

    def test_proxied_console_needs_no_host(self) -> None:
        """Test that a proxied console is addressed by device id only."""
        descriptor = DeviceDescriptor(name="ps5", family="proxied_console", device_id="abc")
        assert descriptor.host is None
        assert descriptor.port is None

    def test_empty_name_rejected(self) -> None:
        """Test that empty names are rejected."""
        with pytest.raises(ValidationError):
            DeviceDescriptor(name="  ", family="set_top_box", host="10.0.0.6")

    def test_invalid_sub_type(self) -> None:
        """Test that unknown receiver sub-types are rejected."""
        with pytest.raises(ValidationError):
            DeviceDescriptor(name="amp", family="receiver", host="10.0.0.5", sub_type="amplifier")

    def test_descriptor_is_frozen(self, soundbar: DeviceDescriptor) -> None:
        """Test that descriptors are immutable."""
        with pytest.raises(ValidationError):
            soundbar.host = "10.0.0.9"  # type: ignore[misc]


class TestDeviceState:
    """Tests for DeviceState model."""

    def test_offline_envelope(self, shield: DeviceDescriptor) -> None:
        """Test creating an offline envelope with no prior state."""
        state = DeviceState.offline(shield, "connection refused")
        assert state.name == "shield"
        assert state.family == DeviceFamily.SET_TOP_BOX
        assert state.online is False
        assert state.power is None
        assert state.last_error == "connection refused"

    def test_mark_offline_keeps_values(self) -> None:
        """Test that marking offline keeps the last-known values."""
        state = DeviceState(name="soundbar", family="receiver", online=True, power=True, volume=20)
        offline = state.mark_offline("timeout")
        assert offline.online is False
        assert offline.volume == 20
        assert offline.power is True
        assert offline.last_error == "timeout"
        assert state.online is True

    def test_with_error_keeps_online(self) -> None:
        """Test that a non-reachability error keeps the online flag."""
        state = DeviceState(name="soundbar", family="receiver", online=True)
        assert state.with_error("bad version").online is True

    def test_get_attribute(self) -> None:
        """Test reading family-specific attributes."""
        state = DeviceState(name="ps5", family="proxied_console", attributes={"power_state": "AWAKE"})
        assert state.get_attribute("power_state") == "AWAKE"
        assert state.get_attribute("missing", "default") == "default"


class TestCacheEntry:
    """Tests for CacheEntry."""

    def test_fresh_within_ttl(self) -> None:
        """Test entry is fresh while younger than the TTL."""
        state = DeviceState(name="soundbar", family="receiver")
        entry = CacheEntry(state=state, captured_at=100.0, ttl=5.0)
        assert entry.is_fresh(104.9) is True
        assert entry.is_fresh(105.0) is False

    def test_stale_entry_has_infinite_age(self) -> None:
        """Test invalidated entry reports infinite age but keeps state."""
        state = DeviceState(name="soundbar", family="receiver", volume=10)
        entry = CacheEntry(state=state, captured_at=100.0, ttl=5.0, stale=True)
        assert entry.age(100.0) == math.inf
        assert entry.is_fresh(100.0) is False
        assert entry.state.volume == 10


class TestDeviceCommand:
    """Tests for DeviceCommand model."""

    def test_create_command(self) -> None:
        """Test creating a command with arguments."""
        command = DeviceCommand(action="set_volume", args={"level": 25})
        assert command.arg("level") == 25
        assert command.arg("missing", 1) == 1
        assert command.is_query is False

    def test_query_commands(self) -> None:
        """Test read-only commands are flagged as queries."""
        assert DeviceCommand(action="list_apps").is_query is True
        assert DeviceCommand(action="system_info").is_query is True

    def test_invalid_action(self) -> None:
        """Test that unknown actions are rejected."""
        with pytest.raises(ValidationError):
            DeviceCommand(action="self_destruct")  # type: ignore


class TestCommandOutcome:
    """Tests for CommandOutcome model."""

    def test_ok(self) -> None:
        """Test successful outcome."""
        outcome = CommandOutcome.ok("soundbar", "set_volume", data={"volume": 25})
        assert outcome.success is True
        assert outcome.error is None
        assert outcome.data == {"volume": 25}

    def test_from_error_uses_kind(self) -> None:
        """Test that typed errors map to their failure kind."""
        unreachable = CommandOutcome.from_error(
            "shield", "power", DeviceUnreachableError("timed out", "shield")
        )
        assert unreachable.success is False
        assert unreachable.error == FailureKind.UNREACHABLE
        assert unreachable.message == "[shield] timed out"

        unsupported = CommandOutcome.from_error(
            "xbox", "power", UnsupportedCommandError("power", "xbox", "requires relay")
        )
        assert unsupported.error == FailureKind.UNSUPPORTED
        assert "requires relay" in (unsupported.message or "")

        missing = CommandOutcome.from_error("nope", "power", DeviceNotFoundError("nope"))
        assert missing.error == FailureKind.NOT_FOUND
        assert missing.message == "Device not found: nope"
