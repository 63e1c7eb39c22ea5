"""
MQTT client wrapper shared by message-bus adapters.

Owns one paho connection whose network loop runs in a background thread.
Subscriptions are remembered and re-issued on every (re)connect, so they
survive broker restarts and a broker that is down when the hub starts.

Callbacks registered with subscribe() run on the paho network thread.
"""

from __future__ import annotations

import logging
import threading
from collections.abc import Callable

import paho.mqtt.client as mqtt

logger = logging.getLogger(__name__)

MessageCallback = Callable[[str, str], None]

# Backoff bounds in seconds between reconnect attempts
RECONNECT_MIN_DELAY = 1
RECONNECT_MAX_DELAY = 30


class MqttClient:
    """MQTT client wrapper with persistent subscriptions."""

    def __init__(
        self,
        broker_url: str = "localhost",
        port: int = 1883,
        client_id: str = "",
        username: str | None = None,
        password: str | None = None,
    ):
        """
        Initialize MQTT client.

        Args:
            broker_url: MQTT broker hostname/IP
            port: MQTT broker port (default 1883)
            client_id: Client id (empty lets the broker assign one)
            username: Optional broker username
            password: Optional broker password
        """
        self.broker_url = broker_url
        self.port = port
        self.client_id = client_id
        self.username = username
        self.password = password
        self.client: mqtt.Client | None = None
        self._connected = False
        self._subscriptions: dict[str, list[MessageCallback]] = {}
        self._lock = threading.Lock()

    @property
    def is_connected(self) -> bool:
        return self._connected

    def connect(self) -> None:
        """Start connecting to the MQTT broker.

        The connection is made by the network thread, which keeps retrying
        with backoff while the broker is unreachable, at startup as well as
        after a later disconnect.
        """
        if self.client is not None:
            return  # Already started

        client = mqtt.Client(mqtt.CallbackAPIVersion.VERSION2, client_id=self.client_id)
        if self.username:
            client.username_pw_set(self.username, self.password)
        client.on_connect = self._on_connect
        client.on_disconnect = self._on_disconnect
        client.on_message = self._on_message
        client.reconnect_delay_set(min_delay=RECONNECT_MIN_DELAY, max_delay=RECONNECT_MAX_DELAY)

        logger.info(f"Connecting to MQTT broker at {self.broker_url}:{self.port}")
        client.connect_async(self.broker_url, self.port, keepalive=60)
        client.loop_start()  # Start network loop in background thread
        self.client = client

    def disconnect(self) -> None:
        """Disconnect from MQTT broker."""
        if self.client is not None:
            self.client.loop_stop()
            self.client.disconnect()
            self.client = None
            self._connected = False
            logger.info("Disconnected from MQTT broker")

    def _on_connect(self, client, userdata, flags, reason_code, properties=None):
        """Callback when connected to MQTT broker."""
        if reason_code == 0:
            self._connected = True
            logger.info("Successfully connected to MQTT broker")
            with self._lock:
                topics = list(self._subscriptions)
            for topic in topics:
                client.subscribe(topic)
                logger.debug(f"Subscribed to {topic}")
        else:
            self._connected = False
            logger.error(f"Failed to connect to MQTT broker, reason code: {reason_code}")

    def _on_disconnect(self, client, userdata, flags, reason_code, properties=None):
        """Callback when disconnected from MQTT broker."""
        self._connected = False
        logger.warning(f"Disconnected from MQTT broker, reason code: {reason_code}")

    def _on_message(self, client, userdata, message):
        """Dispatch an incoming message to every matching subscription."""
        payload = message.payload.decode("utf-8", errors="replace")
        with self._lock:
            matches = [
                callback
                for topic, callbacks in self._subscriptions.items()
                if mqtt.topic_matches_sub(topic, message.topic)
                for callback in callbacks
            ]
        for callback in matches:
            try:
                callback(message.topic, payload)
            except Exception as e:
                logger.error(f"Error handling message on {message.topic}: {e}", exc_info=True)

    def subscribe(self, topic: str, callback: MessageCallback) -> None:
        """
        Register a callback for a topic filter.

        The subscription is sent now if connected, and again after every
        reconnect.

        Args:
            topic: Topic filter (may contain + and # wildcards)
            callback: Called as callback(topic, payload)
        """
        with self._lock:
            self._subscriptions.setdefault(topic, []).append(callback)
        if self._connected and self.client is not None:
            self.client.subscribe(topic)
            logger.debug(f"Subscribed to {topic}")

    def publish(self, topic: str, payload: str, qos: int = 0, retain: bool = False) -> bool:
        """
        Publish a message.

        Args:
            topic: Topic to publish to
            payload: Message payload
            qos: Quality of service level
            retain: Retain flag

        Returns:
            True if published successfully, False otherwise
        """
        if not self._connected or self.client is None:
            logger.warning(f"Cannot publish to {topic}: not connected to MQTT broker")
            return False

        result = self.client.publish(topic, payload, qos=qos, retain=retain)
        if result.rc == mqtt.MQTT_ERR_SUCCESS:
            logger.debug(f"Published to {topic}: {payload}")
            return True
        logger.error(f"Failed to publish to {topic}: {result.rc}")
        return False
