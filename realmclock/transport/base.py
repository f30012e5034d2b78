"""
Interface every clock publisher implements.

The runner hands each adapter two kinds of payload: the calendar after an
advance (ClockState.to_dict(): elapsed minutes, epoch, the six label names
and the formatted string) and notices queued by fired time events
(event_id, message, name). How they reach a client is up to the adapter.
"""

from abc import ABC, abstractmethod


class TransportAdapter(ABC):
    """Publishes clock state and time-event notices to one kind of client."""

    @property
    @abstractmethod
    def name(self) -> str:
        """Short name used in logs and the health report."""
        ...

    @abstractmethod
    async def connect(self) -> None:
        """Open the output (start a server, print a banner)."""
        ...

    @abstractmethod
    async def disconnect(self) -> None:
        ...

    @abstractmethod
    async def push_state(self, state: dict) -> None:
        """Publish the calendar after an advance."""
        ...

    @abstractmethod
    async def push_event(self, event: dict) -> None:
        """Publish a notice queued by a fired time event."""
        ...
