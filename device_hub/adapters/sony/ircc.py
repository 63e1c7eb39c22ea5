"""Sony remote-control codes.

Named IRCC codes are sent through the SOAP IRCC endpoint. Newer TVs
ignore IRCC for some keys, so HDMI inputs and streaming apps are routed
through the JSON-RPC API instead.
"""

from __future__ import annotations

IRCC_CODES: dict[str, str] = {
    # Power and volume
    "power": "AAAAAQAAAAEAAAAVAw==",
    "input": "AAAAAQAAAAEAAAAlAw==",
    "mute": "AAAAAQAAAAEAAAAUAw==",
    "volumeUp": "AAAAAQAAAAEAAAASAw==",
    "volumeDown": "AAAAAQAAAAEAAAATAw==",
    "channelUp": "AAAAAQAAAAEAAAAQAw==",
    "channelDown": "AAAAAQAAAAEAAAARAw==",
    # Navigation
    "up": "AAAAAQAAAAEAAAB0Aw==",
    "down": "AAAAAQAAAAEAAAB1Aw==",
    "left": "AAAAAQAAAAEAAAA0Aw==",
    "right": "AAAAAQAAAAEAAAAzAw==",
    "enter": "AAAAAQAAAAEAAABlAw==",
    "confirm": "AAAAAQAAAAEAAABlAw==",
    "return": "AAAAAgAAAJcAAAAjAw==",
    "back": "AAAAAgAAAJcAAAAjAw==",
    "home": "AAAAAQAAAAEAAABgAw==",
    "options": "AAAAAgAAAJcAAAA2Aw==",
    "menu": "AAAAAgAAAJcAAAA2Aw==",
    "guide": "AAAAAgAAAKQAAABbAw==",
    "info": "AAAAAQAAAAEAAAB/Aw==",
    "display": "AAAAAQAAAAEAAAB/Aw==",
    # Playback
    "play": "AAAAAgAAAJcAAAAaAw==",
    "pause": "AAAAAgAAAJcAAAAZAw==",
    "stop": "AAAAAgAAAJcAAAAYAw==",
    "rewind": "AAAAAgAAAJcAAAAbAw==",
    "forward": "AAAAAgAAAJcAAAAcAw==",
    "prev": "AAAAAgAAAJcAAAA8Aw==",
    "next": "AAAAAgAAAJcAAAA9Aw==",
    "rec": "AAAAAgAAAJcAAAAgAw==",
    "flashPlus": "AAAAAgAAAJcAAAB4Aw==",
    "flashMinus": "AAAAAgAAAJcAAAB5Aw==",
    # Inputs
    "hdmi1": "AAAAAgAAABoAAABaAw==",
    "hdmi2": "AAAAAgAAABoAAABbAw==",
    "hdmi3": "AAAAAgAAABoAAABcAw==",
    "hdmi4": "AAAAAgAAABoAAABdAw==",
    # Apps
    "netflix": "AAAAAgAAABoAAAB8Aw==",
    "youtube": "AAAAAgAAAMQAAABHAw==",
    "primevideo": "AAAAAgAAABoAAAB9Aw==",
    "disney": "AAAAAgAAAMQAAAA/Aw==",
    "appletv": "AAAAAgAAAMQAAABGAw==",
    # Picture
    "pictureMode": "AAAAAgAAAJcAAAA9Aw==",
    "pictureOff": "AAAAAgAAAKQAAAASAw==",
    "wideMode": "AAAAAgAAAKQAAAA9Aw==",
    "3D": "AAAAAgAAAKQAAABkAw==",
    # Audio
    "audio": "AAAAAQAAAAEAAAAXAw==",
    "syncMenu": "AAAAAgAAABoAAABYAw==",
    "soundField": "AAAAAgAAAKQAAACyAw==",
    # Digits
    "num0": "AAAAAQAAAAEAAAAJAw==",
    "num1": "AAAAAQAAAAEAAAAAAw==",
    "num2": "AAAAAQAAAAEAAAABAw==",
    "num3": "AAAAAQAAAAEAAAACAw==",
    "num4": "AAAAAQAAAAEAAAADAw==",
    "num5": "AAAAAQAAAAEAAAAEAw==",
    "num6": "AAAAAQAAAAEAAAAFAw==",
    "num7": "AAAAAQAAAAEAAAAGAw==",
    "num8": "AAAAAQAAAAEAAAAHAw==",
    "num9": "AAAAAQAAAAEAAAAIAw==",
    # Colour keys
    "red": "AAAAAgAAAJcAAAAlAw==",
    "green": "AAAAAgAAAJcAAAAmAw==",
    "yellow": "AAAAAgAAAJcAAAAnAw==",
    "blue": "AAAAAgAAAJcAAAAkAw==",
    # Misc
    "actionMenu": "AAAAAgAAAMQAAABLAw==",
    "help": "AAAAAgAAAMQAAABNAw==",
    "sleep": "AAAAAgAAAJcAAAA4Aw==",
    "sleepTimer": "AAAAAgAAABoAAABvAw==",
    "subtitle": "AAAAAgAAAJcAAAAoAw==",
    "closedCaption": "AAAAAgAAAKQAAAAQAw==",
    "teletext": "AAAAAgAAAJcAAABBAw==",
}

# Remote keys launched as apps through appControl/setActiveApp
APP_URIS: dict[str, str] = {
    "netflix": "com.sony.dtv.com.netflix.ninja.com.netflix.ninja.MainActivity",
    "youtube": (
        "com.sony.dtv.com.google.android.youtube.tv."
        "com.google.android.apps.youtube.tv.activity.ShellActivity"
    ),
    "primevideo": (
        "com.sony.dtv.com.amazon.amazonvideo.livingroom.com.amazon.ignition.IgnitionActivity"
    ),
    "disney": (
        "com.sony.dtv.com.disney.disneyplus.com.bamtechmedia.domern.main.MainActivity"
    ),
    "appletv": "com.sony.dtv.com.apple.atve.sony.appletv.com.apple.atve.sony.appletv.MainActivity",
    "home": "com.sony.dtv.tvx",
    "guide": (
        "com.sony.dtv.com.google.android.tvrecommendations."
        "com.google.android.tvrecommendations.MainActivity"
    ),
}

HDMI_KEYS: dict[str, int] = {"hdmi1": 1, "hdmi2": 2, "hdmi3": 3, "hdmi4": 4}

IRCC_SOAP_ACTION = '"urn:schemas-sony-com:service:IRCC:1#X_SendIRCC"'

IRCC_ENVELOPE = """<?xml version="1.0"?>
<s:Envelope xmlns:s="http://schemas.xmlsoap.org/soap/envelope/" s:encodingStyle="http://schemas.xmlsoap.org/soap/encoding/">
  <s:Body>
    <u:X_SendIRCC xmlns:u="urn:schemas-sony-com:service:IRCC:1">
      <IRCCCode>{code}</IRCCCode>
    </u:X_SendIRCC>
  </s:Body>
</s:Envelope>"""


def resolve_ircc(key: str) -> str | None:
    """Resolve a key name to its IRCC code.

    Raw base64 codes (ending in '=') pass through unchanged.
    """
    if key in IRCC_CODES:
        return IRCC_CODES[key]
    if key.endswith("="):
        return key
    return None


def build_ircc_envelope(code: str) -> str:
    """SOAP body for an X_SendIRCC request."""
    return IRCC_ENVELOPE.format(code=code)


def remote_key_names() -> list[str]:
    """Remote key catalog exposed with TV state."""
    return sorted(IRCC_CODES)
