"""
Debug transport adapter that prints clock state to stdout.

Useful for development without a browser client. State lines are
rate-limited; event notices always print.
"""

import time

from realmclock.transport.base import TransportAdapter


class ConsoleAdapter(TransportAdapter):
    """Prints the calendar and time-event notices to the console."""

    def __init__(self, min_interval: float = 5.0) -> None:
        """
        Args:
            min_interval: Minimum real seconds between state prints.
        """
        self._min_interval = min_interval
        self._last_print: float | None = None
        self._last_formatted: str | None = None

    @property
    def name(self) -> str:
        return "console"

    async def connect(self) -> None:
        print("[CONSOLE] Transport adapter connected")

    async def disconnect(self) -> None:
        print("[CONSOLE] Transport adapter disconnected")

    async def push_state(self, state: dict) -> None:
        """Print the calendar if it changed and enough time has passed."""
        formatted = state.get("formatted", "")
        now = time.monotonic()
        if self._last_print is not None and now - self._last_print < self._min_interval:
            return
        if formatted == self._last_formatted:
            return
        self._last_print = now
        self._last_formatted = formatted
        minutes = state.get("elapsed_minutes", 0.0)
        print(f"[{minutes:12.1f}m] {formatted}")

    async def push_event(self, event: dict) -> None:
        """Print time-event notice."""
        name = event.get("name", event.get("event_id", "EVENT"))
        message = event.get("message", "")
        print(f"[EVENT] {name}: {message}")
