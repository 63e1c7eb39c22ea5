"""Sony REST API method versions.

The method names are the same on every Sony device, but the protocol
version each method requires differs between TVs and soundbars. Calling a
method with the wrong version returns an error payload with HTTP 200.
"""

from __future__ import annotations

DEFAULT_VERSION = "1.0"

# method -> {sub_type: version}
METHOD_VERSIONS: dict[str, dict[str, str]] = {
    "getPowerStatus": {"tv": "1.0", "soundbar": "1.1"},
    "setPowerStatus": {"tv": "1.0", "soundbar": "1.1"},
    "getVolumeInformation": {"tv": "1.0", "soundbar": "1.1"},
    "setAudioVolume": {"tv": "1.0", "soundbar": "1.2"},
    "setAudioMute": {"tv": "1.0", "soundbar": "1.0"},
    "getSoundSettings": {"tv": "1.1", "soundbar": "1.1"},
    "setSoundSettings": {"tv": "1.1", "soundbar": "1.1"},
    "setPlayContent": {"tv": "1.0", "soundbar": "1.0"},
    "setLEDIndicatorStatus": {"tv": "1.1", "soundbar": "1.1"},
}

# Power status strings per sub-type
POWER_ON_STATUS = {"tv": "active", "soundbar": "on"}
POWER_OFF_STATUS = {"tv": "standby", "soundbar": "off"}


def method_version(method: str, sub_type: str | None) -> str:
    """Protocol version for a method on a device sub-type.

    Args:
        method: API method name
        sub_type: 'tv' or 'soundbar'

    Returns:
        Version string, DEFAULT_VERSION for methods not in the table

    Examples:
        >>> method_version("setAudioVolume", "soundbar")
        '1.2'
        >>> method_version("getPlayingContentInfo", "tv")
        '1.0'
    """
    versions = METHOD_VERSIONS.get(method)
    if versions is None:
        return DEFAULT_VERSION
    return versions.get(sub_type or "soundbar", DEFAULT_VERSION)


def volume_params(sub_type: str | None) -> list[dict]:
    """getVolumeInformation params.

    Soundbars reject an empty list and TVs accept one empty object, so
    every sub-type sends [{}].
    """
    return [{}]


def is_power_on(status: str) -> bool:
    """Check if a getPowerStatus status string means powered on."""
    return status in ("active", "on")
