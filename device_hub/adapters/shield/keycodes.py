"""Android key codes and app aliases for the Shield.

Every remote control maps to a single ``input keyevent`` code; app names
resolve to package ids through a small alias table.
"""

from __future__ import annotations

KEYCODES: dict[str, int] = {
    "HOME": 3,
    "BACK": 4,
    "DPAD_UP": 19,
    "DPAD_DOWN": 20,
    "DPAD_LEFT": 21,
    "DPAD_RIGHT": 22,
    "DPAD_CENTER": 23,
    "VOLUME_UP": 24,
    "VOLUME_DOWN": 25,
    "POWER": 26,
    "ENTER": 66,
    "DEL": 67,
    "MENU": 82,
    "SEARCH": 84,
    "MEDIA_PLAY_PAUSE": 85,
    "MEDIA_STOP": 86,
    "MEDIA_NEXT": 87,
    "MEDIA_PREVIOUS": 88,
    "MEDIA_REWIND": 89,
    "MEDIA_FAST_FORWARD": 90,
    "PAGE_UP": 92,
    "PAGE_DOWN": 93,
    "MEDIA_PLAY": 126,
    "MEDIA_PAUSE": 127,
    "VOLUME_MUTE": 164,
    "INFO": 165,
    "CAPTIONS": 175,
    "TV_INPUT": 178,
    "SLEEP": 223,
    "WAKEUP": 224,
    "VOICE_ASSIST": 231,
}

NAVIGATION_KEYS: dict[str, int] = {
    "up": KEYCODES["DPAD_UP"],
    "down": KEYCODES["DPAD_DOWN"],
    "left": KEYCODES["DPAD_LEFT"],
    "right": KEYCODES["DPAD_RIGHT"],
    "select": KEYCODES["DPAD_CENTER"],
    "center": KEYCODES["DPAD_CENTER"],
    "enter": KEYCODES["ENTER"],
    "back": KEYCODES["BACK"],
    "home": KEYCODES["HOME"],
    "menu": KEYCODES["MENU"],
}

MEDIA_KEYS: dict[str, int] = {
    "play": KEYCODES["MEDIA_PLAY"],
    "pause": KEYCODES["MEDIA_PAUSE"],
    "playpause": KEYCODES["MEDIA_PLAY_PAUSE"],
    "play_pause": KEYCODES["MEDIA_PLAY_PAUSE"],
    "stop": KEYCODES["MEDIA_STOP"],
    "next": KEYCODES["MEDIA_NEXT"],
    "previous": KEYCODES["MEDIA_PREVIOUS"],
    "prev": KEYCODES["MEDIA_PREVIOUS"],
    "rewind": KEYCODES["MEDIA_REWIND"],
    "forward": KEYCODES["MEDIA_FAST_FORWARD"],
    "fastforward": KEYCODES["MEDIA_FAST_FORWARD"],
    "volumeup": KEYCODES["VOLUME_UP"],
    "volumedown": KEYCODES["VOLUME_DOWN"],
    "mute": KEYCODES["VOLUME_MUTE"],
}

APP_ALIASES: dict[str, str] = {
    "netflix": "com.netflix.ninja",
    "youtube": "com.google.android.youtube.tv",
    "youtubetv": "com.google.android.youtube.tvunplugged",
    "youtubemusic": "com.google.android.youtube.tvmusic",
    "plex": "com.plexapp.android",
    "prime": "com.amazon.amazonvideo.livingroom",
    "amazon": "com.amazon.amazonvideo.livingroom",
    "disney": "com.disney.disneyplus",
    "hulu": "com.hulu.livingroomplus",
    "hbo": "com.hbo.hbomax",
    "max": "com.hbo.hbomax",
    "hbonow": "com.hbo.hbonow",
    "spotify": "com.spotify.tv.android",
    "kodi": "org.xbmc.kodi",
    "settings": "com.android.tv.settings",
    "gamestream": "com.nvidia.tegrazone3",
    "twitch": "tv.twitch.android.app",
    "crunchyroll": "com.crunchyroll.crunchyroid",
    "peacock": "com.peacocktv.peacockandroid",
    "appletv": "com.apple.atve.androidtv.appletv",
    "steamlink": "com.valvesoftware.steamlink",
    "gamepass": "com.gamepass",
    "xbox": "com.gamepass",
    "retroarch": "com.retroarch",
    "chrome": "com.android.chrome",
    "discovery": "com.wbd.stream",
    "roku": "com.roku.web.trc",
}

PACKAGE_NAMES: dict[str, str] = {
    "com.netflix.ninja": "Netflix",
    "com.google.android.youtube.tv": "YouTube",
    "com.google.android.youtube.tvunplugged": "YouTube TV",
    "com.google.android.youtube.tvmusic": "YouTube Music",
    "com.plexapp.android": "Plex",
    "com.amazon.amazonvideo.livingroom": "Prime Video",
    "com.disney.disneyplus": "Disney+",
    "com.hulu.livingroomplus": "Hulu",
    "com.hbo.hbomax": "Max",
    "com.hbo.hbonow": "HBO Now",
    "com.spotify.tv.android": "Spotify",
    "org.xbmc.kodi": "Kodi",
    "com.android.tv.settings": "Settings",
    "com.nvidia.tegrazone3": "GeForce NOW",
    "tv.twitch.android.app": "Twitch",
    "com.crunchyroll.crunchyroid": "Crunchyroll",
    "com.peacocktv.peacockandroid": "Peacock",
    "com.apple.atve.androidtv.appletv": "Apple TV",
    "com.valvesoftware.steamlink": "Steam Link",
    "com.gamepass": "Xbox Game Pass",
    "com.retroarch": "RetroArch",
    "com.android.chrome": "Chrome",
    "com.wbd.stream": "Discovery+",
    "com.roku.web.trc": "Roku",
    "com.google.android.tvlauncher": "Home",
    "com.google.android.apps.tv.launcherx": "Android TV Home",
    "com.android.vending": "Play Store",
    "com.tubi.tv": "Tubi",
    "com.cbs.ott": "Paramount+",
}

SYSTEM_PREFIXES = (
    "com.android.",
    "com.google.android.gms",
    "com.google.android.gsf",
    "com.google.android.ext.",
    "com.nvidia.shield.",
    "com.nvidia.shieldtech.",
    "com.nvidia.fallback.",
    "com.nvidia.diagtools",
    "com.nvidia.benchmarks",
    "com.nvidia.hotwordsetup",
)


def resolve_package(app: str) -> str:
    """Resolve a friendly app name to its package id.

    Unknown names are assumed to already be package ids.

    Examples:
        >>> resolve_package("Netflix")
        'com.netflix.ninja'
        >>> resolve_package("org.videolan.vlc")
        'org.videolan.vlc'
    """
    return APP_ALIASES.get(app.strip().lower(), app.strip())


def friendly_name(package: str) -> str:
    """Display name for a package, derived from its last segment if unknown."""
    if package in PACKAGE_NAMES:
        return PACKAGE_NAMES[package]
    last = package.rsplit(".", 1)[-1]
    return last[:1].upper() + last[1:] if last else package


def is_system_app(package: str) -> bool:
    return package.startswith(SYSTEM_PREFIXES)


def resolve_keycode(key: str | int) -> int | None:
    """Resolve a key name ('HOME', 'KEYCODE_HOME', 'home') or number to a keycode."""
    if isinstance(key, int):
        return key
    text = key.strip()
    if text.isdigit():
        return int(text)
    name = text.upper()
    if name.startswith("KEYCODE_"):
        name = name[len("KEYCODE_"):]
    if name in KEYCODES:
        return KEYCODES[name]
    lowered = text.lower()
    return NAVIGATION_KEYS.get(lowered, MEDIA_KEYS.get(lowered))
