"""
Shared world state that time-event effects act on.

Narrative and quest logic read flags and counters from here; the runner
drains notices and pushes them to the transports.
"""

from dataclasses import dataclass, field
from typing import Any


@dataclass
class WorldContext:
    """Flags, counters and pending notices mutated by time events."""
    flags: dict[str, Any] = field(default_factory=dict)
    counters: dict[str, int] = field(default_factory=dict)
    notices: list[dict[str, Any]] = field(default_factory=list)

    def set_flag(self, name: str, value: Any = True) -> None:
        self.flags[name] = value

    def clear_flag(self, name: str) -> None:
        self.flags.pop(name, None)

    def increment(self, counter: str, amount: int = 1) -> int:
        """Add amount to a counter and return its new value."""
        self.counters[counter] = self.counters.get(counter, 0) + amount
        return self.counters[counter]

    def announce(self, event_id: str, message: str, **extra: Any) -> None:
        """Queue a notice for display."""
        self.notices.append({"event_id": event_id, "message": message, **extra})

    def drain_notices(self) -> list[dict[str, Any]]:
        """Return and clear all pending notices."""
        notices, self.notices = self.notices, []
        return notices
