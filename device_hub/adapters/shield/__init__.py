"""Nvidia Shield set-top box adapter (adb shell)."""

from device_hub.adapters.shield.adapter import ShieldAdapter
from device_hub.adapters.shield.adb import AdbShell, probe

__all__ = ["AdbShell", "ShieldAdapter", "probe"]
