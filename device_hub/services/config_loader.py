"""Configuration loader for the hub.

Loads the hub configuration from a YAML file when one is present, falling
back to environment variables otherwise.
"""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Any

import yaml

from device_hub.core.registry.config import HubConfig

logger = logging.getLogger(__name__)

# Default config paths (in order of precedence)
CONFIG_PATHS = [
    Path("/app/config/devices.yaml"),  # Docker container
    Path("config/devices.yaml"),  # Local development
    Path(__file__).parent.parent.parent / "config" / "devices.yaml",  # Relative to module
]


def find_config_file() -> Path | None:
    """Find config file in default paths.

    Returns:
        Path to config file or None if not found
    """
    # Check environment variable first
    env_path = os.getenv("DEVICE_HUB_CONFIG")
    if env_path:
        path = Path(env_path)
        if path.exists():
            return path
        logger.warning(f"DEVICE_HUB_CONFIG points to missing file: {env_path}")

    for path in CONFIG_PATHS:
        if path.exists():
            return path

    return None


def parse_config(data: dict[str, Any] | None) -> HubConfig:
    """Build a HubConfig from parsed YAML data.

    The YAML layout mirrors HubConfig, except that devices may be grouped
    by family:

        devices:
          receiver:
            - {name: soundbar, host: 192.168.1.20}
          set_top_box:
            - {name: shield, host: 192.168.1.21}

    Args:
        data: Parsed YAML data

    Returns:
        Validated HubConfig

    Raises:
        pydantic.ValidationError: If the configuration is invalid
    """
    data = dict(data or {})
    devices = data.get("devices", [])
    if isinstance(devices, dict):
        flattened = []
        for family, entries in devices.items():
            for entry in entries or []:
                flattened.append({"family": family, **entry})
        data["devices"] = flattened
    return HubConfig.model_validate(data)


def load_config(config_path: Path | None = None) -> HubConfig:
    """Load hub configuration.

    Args:
        config_path: Optional explicit path to config file.
                    If not provided, searches default paths.

    Returns:
        Validated HubConfig

    Raises:
        FileNotFoundError: If an explicit config_path does not exist
        yaml.YAMLError: If config file is invalid
    """
    if config_path is None:
        config_path = find_config_file()
        if config_path is None:
            logger.info("No device config file found, reading environment")
            return HubConfig.from_env()

    logger.info(f"Loading device config from: {config_path}")

    with open(config_path, "r", encoding="utf-8") as f:
        data = yaml.safe_load(f)

    config = parse_config(data)
    logger.info(f"Loaded device config: {len(config.devices)} devices")
    return config
