"""Device hub entry point.

Builds the hub from configuration: one adapter and one manager per
configured device family, a shared state cache, and a background refresh
task per family.
"""

from __future__ import annotations

import argparse
import asyncio
import json
import logging
import os
import signal
import sys
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from pathlib import Path

from pythonjsonlogger import jsonlogger

from device_hub.adapters import (
    PlaystationHomeAssistantAdapter,
    PlaystationMqttAdapter,
    ShieldAdapter,
    SonyAdapter,
    XboxAdapter,
)
from device_hub.adapters.shield.adb import AdbShell
from device_hub.adapters.xbox.smartglass import SmartGlassTransport
from device_hub.core.interfaces.adapter import DeviceAdapter
from device_hub.core.models import DeviceFamily
from device_hub.core.registry import DeviceRegistry, HubConfig
from device_hub.services.config_loader import load_config
from device_hub.services.device_manager import (
    DeviceManager,
    ProxiedConsoleManager,
    ReceiverManager,
    SetTopBoxManager,
    WakeConsoleManager,
)
from device_hub.services.ha_client import HomeAssistantClient
from device_hub.services.mqtt_client import MqttClient
from device_hub.services.state_cache import StateCache

logger = logging.getLogger(__name__)

MANAGER_TYPES: dict[DeviceFamily, type[DeviceManager]] = {
    DeviceFamily.RECEIVER: ReceiverManager,
    DeviceFamily.SET_TOP_BOX: SetTopBoxManager,
    DeviceFamily.WAKE_CONSOLE: WakeConsoleManager,
    DeviceFamily.PROXIED_CONSOLE: ProxiedConsoleManager,
}


def setup_logging(log_level: str = "INFO") -> None:
    """Configure structured JSON logging.

    Args:
        log_level: Logging level (DEBUG, INFO, WARNING, ERROR)
    """
    # Create JSON formatter
    formatter = jsonlogger.JsonFormatter(  # type: ignore[attr-defined]
        "%(asctime)s %(name)s %(levelname)s %(message)s",
        rename_fields={"asctime": "timestamp", "levelname": "level", "name": "logger"},
    )

    # Configure root logger
    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(formatter)

    root_logger = logging.getLogger()
    root_logger.addHandler(handler)
    root_logger.setLevel(log_level.upper())

    # Reduce noise from httpx and paho
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("paho").setLevel(logging.WARNING)


def build_adapters(config: HubConfig) -> dict[DeviceFamily, DeviceAdapter]:
    """Create one adapter per family that has configured devices."""
    families = {d.family for d in config.devices}
    adapters: dict[DeviceFamily, DeviceAdapter] = {}

    if DeviceFamily.RECEIVER in families:
        adapters[DeviceFamily.RECEIVER] = SonyAdapter(timeout=config.http_timeout)

    if DeviceFamily.SET_TOP_BOX in families:
        adapters[DeviceFamily.SET_TOP_BOX] = ShieldAdapter(
            AdbShell(config.adb_path, config.adb_timeout),
            probe_timeout=config.probe_timeout,
        )

    if DeviceFamily.WAKE_CONSOLE in families:
        adapters[DeviceFamily.WAKE_CONSOLE] = XboxAdapter(
            relay_url=config.xbox_relay_url,
            transport=SmartGlassTransport(probe_timeout=config.probe_timeout),
            timeout=config.http_timeout,
        )

    if DeviceFamily.PROXIED_CONSOLE in families:
        if config.playstation_transport == "home_assistant" and config.home_assistant:
            adapters[DeviceFamily.PROXIED_CONSOLE] = PlaystationHomeAssistantAdapter(
                HomeAssistantClient(config.home_assistant)
            )
        else:
            prefixes = {
                d.topic_prefix
                for d in config.devices
                if d.family == DeviceFamily.PROXIED_CONSOLE and d.topic_prefix
            }
            adapters[DeviceFamily.PROXIED_CONSOLE] = PlaystationMqttAdapter(
                MqttClient(
                    config.mqtt.broker_url,
                    config.mqtt.port,
                    client_id=config.mqtt.client_id,
                    username=config.mqtt.username,
                    password=config.mqtt.password,
                ),
                base_topic=config.playstation_topic,
                topic_prefixes=sorted(prefixes),
            )

    return adapters


class Hub:
    """The assembled device hub.

    Example:
        >>> async with Hub(load_config()) as hub:
        ...     await hub.receivers.set_volume("soundbar", 25)
    """

    def __init__(self, config: HubConfig, adapters: dict[DeviceFamily, DeviceAdapter] | None = None) -> None:
        self.config = config
        adapters = adapters if adapters is not None else build_adapters(config)
        self.registry = DeviceRegistry(config.devices, adapters)
        self.cache = StateCache(config.cache_ttl, config.family_ttls)
        self.managers: dict[DeviceFamily, DeviceManager] = {
            family: MANAGER_TYPES[family](
                adapters[family],
                self.registry,
                self.cache,
                interval=config.interval_for(family),
            )
            for family in DeviceFamily
            if family in adapters and self.registry.by_family(family)
        }

    @property
    def receivers(self) -> ReceiverManager | None:
        return self.managers.get(DeviceFamily.RECEIVER)  # type: ignore[return-value]

    @property
    def set_top_boxes(self) -> SetTopBoxManager | None:
        return self.managers.get(DeviceFamily.SET_TOP_BOX)  # type: ignore[return-value]

    @property
    def wake_consoles(self) -> WakeConsoleManager | None:
        return self.managers.get(DeviceFamily.WAKE_CONSOLE)  # type: ignore[return-value]

    @property
    def proxied_consoles(self) -> ProxiedConsoleManager | None:
        return self.managers.get(DeviceFamily.PROXIED_CONSOLE)  # type: ignore[return-value]

    def manager_for(self, name: str) -> DeviceManager:
        """Manager owning a device.

        Raises:
            DeviceNotFoundError: If no device has that name
        """
        return self.managers[self.registry.get(name).family]

    async def start(self) -> None:
        logger.info(f"Device hub starting with {len(self.registry)} devices")
        for family, manager in self.managers.items():
            await manager.start()
            logger.info(f"{family.value}: {', '.join(manager.names())}")

    async def stop(self) -> None:
        logger.info("Device hub shutting down")
        for manager in self.managers.values():
            await manager.stop()

    async def snapshot(self) -> dict[str, list[dict]]:
        """Current state of every device, grouped by family."""
        return {
            family.value: [state.model_dump(mode="json") for state in await manager.list()]
            for family, manager in self.managers.items()
        }

    async def __aenter__(self) -> Hub:
        await self.start()
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.stop()


@asynccontextmanager
async def lifespan(config: HubConfig) -> AsyncIterator[Hub]:
    """Hub lifespan manager.

    Starts every family manager on entry and stops them on exit.

    Args:
        config: Hub configuration

    Yields:
        The running Hub
    """
    hub = Hub(config)
    await hub.start()
    try:
        yield hub
    finally:
        await hub.stop()


async def run(config: HubConfig) -> None:
    """Run the hub until SIGINT or SIGTERM."""
    stop = asyncio.Event()
    loop = asyncio.get_running_loop()
    for sig in (signal.SIGINT, signal.SIGTERM):
        loop.add_signal_handler(sig, stop.set)

    async with lifespan(config):
        await stop.wait()


async def run_once(config: HubConfig) -> dict[str, list[dict]]:
    """Sweep every family once and return the resulting states."""
    hub = Hub(config)
    for manager in hub.managers.values():
        await manager.adapter.connect()
    try:
        for manager in hub.managers.values():
            await manager.sweep()
        return await hub.snapshot()
    finally:
        for manager in hub.managers.values():
            await manager.adapter.disconnect()


def main() -> int:
    """Command line entry point."""
    parser = argparse.ArgumentParser(
        description="Entertainment device hub: polls and controls configured devices",
    )
    parser.add_argument(
        "--config",
        type=Path,
        default=None,
        help="Path to devices.yaml (default: DEVICE_HUB_CONFIG or standard locations)",
    )
    parser.add_argument(
        "--log-level",
        default=None,
        help="Override the configured log level",
    )
    parser.add_argument(
        "--once",
        action="store_true",
        help="Refresh every device once, print states as JSON and exit",
    )
    args = parser.parse_args()

    # Installed before load_config, which logs
    setup_logging(args.log_level or os.getenv("LOG_LEVEL", "INFO"))
    config = load_config(args.config)
    if not args.log_level:
        logging.getLogger().setLevel(config.log_level.upper())

    if args.once:
        states = asyncio.run(run_once(config))
        print(json.dumps(states, indent=2))
        return 0

    asyncio.run(run(config))
    return 0


if __name__ == "__main__":
    sys.exit(main())
