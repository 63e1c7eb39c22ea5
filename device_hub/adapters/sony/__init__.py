"""Sony receiver and TV adapter (versioned JSON-RPC over HTTP)."""

from device_hub.adapters.sony.adapter import SonyAdapter, resolve_input
from device_hub.adapters.sony.client import SonyClient

__all__ = ["SonyAdapter", "SonyClient", "resolve_input"]
