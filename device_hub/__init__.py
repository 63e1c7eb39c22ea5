"""Device integration core for a home-automation hub.

Protocol adapters, a per-device state cache, and background refresh for
Sony receivers and TVs, Nvidia Shield set-top boxes, Xbox and PlayStation
consoles.
"""

__version__ = "0.1.0"
