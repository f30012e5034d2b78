"""
Clock runtime configuration, loaded from environment variables.
"""

import os


CLOCK_RATE = float(os.environ.get("REALMCLOCK_RATE", "1.0"))  # game minutes per real second
TICK_RATE = float(os.environ.get("REALMCLOCK_TICK_RATE", "10.0"))  # ticks per real second
START_MINUTES = os.environ.get("REALMCLOCK_START_MINUTES")  # None = prophecy instant

EVENTS_FILE = os.environ.get("REALMCLOCK_EVENTS_FILE")  # None = bundled prophecy catalogue

WS_HOST = os.environ.get("REALMCLOCK_WS_HOST", "0.0.0.0")
WS_PORT = int(os.environ.get("REALMCLOCK_WS_PORT", "8765"))
HEALTH_PORT = int(os.environ.get("REALMCLOCK_HEALTH_PORT", "8766"))

CONSOLE_MIN_INTERVAL = float(os.environ.get("REALMCLOCK_CONSOLE_INTERVAL", "5.0"))
