"""Tests for the PS5 adapters (MQTT bridge and Home Assistant)."""

from __future__ import annotations

import json

import httpx
import pytest

from device_hub.adapters.playstation import PlaystationHomeAssistantAdapter, PlaystationMqttAdapter
from device_hub.config.mqtt_topics import get_playstation_topics
from device_hub.core.interfaces.adapter import DeviceProtocolError, DeviceUnreachableError
from device_hub.core.models import DeviceCommand, DeviceDescriptor, DeviceFamily, FailureKind
from device_hub.core.registry import HomeAssistantSettings
from device_hub.services.ha_client import HomeAssistantClient
from mocks.mqtt_client import MockMQTTClient


@pytest.fixture(autouse=True)
def clear_topic_env(monkeypatch: pytest.MonkeyPatch) -> None:
    """Keep a developer's PS5_MQTT_TOPIC out of the tests."""
    monkeypatch.delenv("PS5_MQTT_TOPIC", raising=False)


@pytest.fixture
def mqtt_adapter(mock_mqtt_client: MockMQTTClient) -> PlaystationMqttAdapter:
    """Fixture providing an MQTT adapter on the mock client."""
    return PlaystationMqttAdapter(mock_mqtt_client)


class TestPlaystationTopics:
    """Tests for the topic layout."""

    def test_topics(self) -> None:
        """Test state, filter and command topics."""
        topics = get_playstation_topics()

        assert topics.power_state_filter() == "homeassistant/switch/+/power/state"
        assert topics.sensor_state("ps5") == "homeassistant/sensor/ps5/state"
        assert topics.power_set("ps5") == "homeassistant/switch/ps5/set"

    def test_device_id_from(self) -> None:
        """Test device ids are only extracted under the configured base."""
        topics = get_playstation_topics("bridge/")

        assert topics.base_prefix == "bridge"
        assert topics.device_id_from("bridge/switch/ps5/power/state") == "ps5"
        assert topics.device_id_from("homeassistant/switch/ps5/power/state") is None

    def test_env_base(self, monkeypatch: pytest.MonkeyPatch) -> None:
        """Test PS5_MQTT_TOPIC sets the default base."""
        monkeypatch.setenv("PS5_MQTT_TOPIC", "ps5-mqtt")
        assert get_playstation_topics().base_prefix == "ps5-mqtt"


class TestPlaystationMqttAdapter:
    """Tests for the event-sourced MQTT adapter."""

    @pytest.mark.asyncio
    async def test_unknown_until_first_message(
        self, mqtt_adapter: PlaystationMqttAdapter, ps5: DeviceDescriptor
    ) -> None:
        """Test state is unknown and offline before the bridge reports."""
        await mqtt_adapter.connect()

        state = await mqtt_adapter.fetch_state(ps5)

        assert state.online is False
        assert state.power is None
        assert state.attributes["power_state"] == "UNKNOWN"

    @pytest.mark.asyncio
    async def test_power_and_activity_messages(
        self, mqtt_adapter: PlaystationMqttAdapter, mock_mqtt_client: MockMQTTClient, ps5: DeviceDescriptor
    ) -> None:
        """Test bus messages update the console snapshot."""
        await mqtt_adapter.connect()

        mock_mqtt_client.simulate_message("homeassistant/switch/ps5_living_room/power/state", "ON")
        mock_mqtt_client.simulate_message("homeassistant/sensor/ps5_living_room/state", "Astro Bot")
        state = await mqtt_adapter.fetch_state(ps5)

        assert state.online is True
        assert state.power is True
        assert state.input == "Astro Bot"
        assert state.attributes["power_state"] == "AWAKE"
        assert state.attributes["last_update"] is not None

        mock_mqtt_client.simulate_message("homeassistant/switch/ps5_living_room/power/state", "OFF")
        assert (await mqtt_adapter.fetch_state(ps5)).power is False

    @pytest.mark.asyncio
    async def test_other_console_ignored(
        self, mqtt_adapter: PlaystationMqttAdapter, mock_mqtt_client: MockMQTTClient, ps5: DeviceDescriptor
    ) -> None:
        """Test messages for another console do not leak into this one."""
        await mqtt_adapter.connect()

        mock_mqtt_client.simulate_message("homeassistant/switch/ps5_bedroom/power/state", "ON")

        assert (await mqtt_adapter.fetch_state(ps5)).power is None

    @pytest.mark.asyncio
    async def test_power_publishes(
        self, mqtt_adapter: PlaystationMqttAdapter, mock_mqtt_client: MockMQTTClient, ps5: DeviceDescriptor
    ) -> None:
        """Test power commands publish ON/OFF to the set topic."""
        await mqtt_adapter.connect()

        outcome = await mqtt_adapter.execute(ps5, DeviceCommand(action="power", args={"on": True}))

        assert outcome.success is True
        published = mock_mqtt_client.get_published_to("homeassistant/switch/ps5_living_room/set")
        assert [m["payload"] for m in published] == ["ON"]

    @pytest.mark.asyncio
    async def test_toggle_uses_last_known_power(
        self, mqtt_adapter: PlaystationMqttAdapter, mock_mqtt_client: MockMQTTClient, ps5: DeviceDescriptor
    ) -> None:
        """Test toggling an awake console sends OFF."""
        await mqtt_adapter.connect()
        mock_mqtt_client.simulate_message("homeassistant/switch/ps5_living_room/power/state", "ON")

        outcome = await mqtt_adapter.execute(ps5, DeviceCommand(action="toggle_power"))

        assert outcome.data == {"power": False}
        assert mock_mqtt_client.published_messages[-1]["payload"] == "OFF"

    @pytest.mark.asyncio
    async def test_disconnected_publish_unreachable(
        self, mqtt_adapter: PlaystationMqttAdapter, mock_mqtt_client: MockMQTTClient, ps5: DeviceDescriptor
    ) -> None:
        """Test commands fail as unreachable while the bus is down."""
        await mqtt_adapter.connect()
        mock_mqtt_client.disconnect()

        outcome = await mqtt_adapter.execute(ps5, DeviceCommand(action="power", args={"on": True}))

        assert outcome.error == FailureKind.UNREACHABLE
        assert mock_mqtt_client.published_messages == []

    @pytest.mark.asyncio
    async def test_volume_unsupported(self, mqtt_adapter: PlaystationMqttAdapter, ps5: DeviceDescriptor) -> None:
        """Test commands the bridge cannot express are unsupported."""
        outcome = await mqtt_adapter.execute(ps5, DeviceCommand(action="set_volume", args={"level": 5}))
        assert outcome.error == FailureKind.UNSUPPORTED

    @pytest.mark.asyncio
    async def test_topic_prefix_override(self, mock_mqtt_client: MockMQTTClient) -> None:
        """Test a descriptor's topic prefix selects its own base topic."""
        console = DeviceDescriptor(
            name="ps5-den",
            family=DeviceFamily.PROXIED_CONSOLE,
            device_id="ps5_den",
            topic_prefix="bridge",
        )
        adapter = PlaystationMqttAdapter(mock_mqtt_client, topic_prefixes=["bridge"])
        await adapter.connect()

        mock_mqtt_client.simulate_message("homeassistant/switch/ps5_den/power/state", "ON")
        assert (await adapter.fetch_state(console)).power is None

        mock_mqtt_client.simulate_message("bridge/switch/ps5_den/power/state", "ON")
        assert (await adapter.fetch_state(console)).power is True

        await adapter.execute(console, DeviceCommand(action="power", args={"on": False}))
        assert mock_mqtt_client.published_messages[-1]["topic"] == "bridge/switch/ps5_den/set"

    @pytest.mark.asyncio
    async def test_connect_subscribes_once(
        self, mqtt_adapter: PlaystationMqttAdapter, mock_mqtt_client: MockMQTTClient, ps5: DeviceDescriptor
    ) -> None:
        """Test repeated fetches do not stack subscriptions."""
        await mqtt_adapter.connect()
        await mqtt_adapter.fetch_state(ps5)
        await mqtt_adapter.fetch_state(ps5)

        assert len(mock_mqtt_client.subscriptions["homeassistant/switch/+/power/state"]) == 1


class FakeHomeAssistant:
    """Home Assistant REST stand-in keyed by entity id."""

    def __init__(self, states: dict[str, dict]) -> None:
        self.states = states
        self.services: list[tuple[str, dict]] = []

    def handler(self, request: httpx.Request) -> httpx.Response:
        path = request.url.path
        if request.method == "POST":
            self.services.append((path, json.loads(request.content)))
            return httpx.Response(200, json=[])
        entity = path.rsplit("/", 1)[-1]
        if entity not in self.states:
            return httpx.Response(404, json={"message": "Entity not found."})
        return httpx.Response(200, json={"entity_id": entity, **self.states[entity]})


def make_ha_adapter(settings: HomeAssistantSettings, ha: FakeHomeAssistant) -> PlaystationHomeAssistantAdapter:
    http = httpx.AsyncClient(transport=httpx.MockTransport(ha.handler))
    return PlaystationHomeAssistantAdapter(HomeAssistantClient(settings, http=http))


class TestPlaystationHomeAssistantAdapter:
    """Tests for the Home Assistant backed adapter."""

    @pytest.mark.asyncio
    async def test_fetch_state(self, ha_settings: HomeAssistantSettings, ps5: DeviceDescriptor) -> None:
        """Test power, media and account sensors are combined."""
        ha = FakeHomeAssistant(
            {
                "switch.ps5_living_room_power": {"state": "on"},
                "media_player.ps5_living_room": {
                    "state": "playing",
                    "attributes": {"media_title": "Astro Bot", "entity_picture": "/api/image/1"},
                },
                "sensor.gamer42_trophy_level": {"state": "312"},
                "sensor.gamer42_online_status": {"state": "unavailable"},
            }
        )
        adapter = make_ha_adapter(ha_settings, ha)

        state = await adapter.fetch_state(ps5)

        assert state.online is True
        assert state.power is True
        assert state.input == "Astro Bot"
        assert state.attributes["image"] == "/api/image/1"
        assert state.attributes["power_state"] == "AWAKE"
        assert state.attributes["account"] == {"trophy_level": "312"}

    @pytest.mark.asyncio
    async def test_unavailable_switch(self, ha_settings: HomeAssistantSettings, ps5: DeviceDescriptor) -> None:
        """Test an unavailable power entity means the console is unreachable."""
        ha = FakeHomeAssistant({"switch.ps5_living_room_power": {"state": "unavailable"}})

        with pytest.raises(DeviceUnreachableError):
            await make_ha_adapter(ha_settings, ha).fetch_state(ps5)

    @pytest.mark.asyncio
    async def test_missing_switch(self, ha_settings: HomeAssistantSettings, ps5: DeviceDescriptor) -> None:
        """Test a missing power entity is a protocol error."""
        with pytest.raises(DeviceProtocolError, match="Entity not found"):
            await make_ha_adapter(ha_settings, FakeHomeAssistant({})).fetch_state(ps5)

    @pytest.mark.asyncio
    async def test_power_calls_service(self, ha_settings: HomeAssistantSettings, ps5: DeviceDescriptor) -> None:
        """Test power commands call the switch services."""
        ha = FakeHomeAssistant({"switch.ps5_living_room_power": {"state": "off"}})
        adapter = make_ha_adapter(ha_settings, ha)

        await adapter.execute(ps5, DeviceCommand(action="power", args={"on": True}))
        toggled = await adapter.execute(ps5, DeviceCommand(action="toggle_power"))

        assert ha.services == [
            ("/api/services/switch/turn_on", {"entity_id": "switch.ps5_living_room_power"}),
            ("/api/services/switch/turn_on", {"entity_id": "switch.ps5_living_room_power"}),
        ]
        assert toggled.data == {"power": True}
