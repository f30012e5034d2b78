"""
Fan-out of calendar updates and time-event notices to every publisher.

The runner pushes once per tick; the registry forwards to the console and
WebSocket adapters in registration order. A publisher that fails is logged
and skipped so a dropped client never stalls the clock loop.
"""

import logging
from collections.abc import Awaitable, Callable

from realmclock.transport.base import TransportAdapter

logger = logging.getLogger(__name__)


class TransportRegistry:
    """Ordered set of clock publishers."""

    def __init__(self):
        self._transports: list[TransportAdapter] = []

    def register(self, adapter: TransportAdapter) -> None:
        """Add a publisher; it receives pushes after those already registered."""
        self._transports.append(adapter)
        logger.info(f"Registered transport: {adapter.name}")

    async def _fan_out(self, action: str, call: Callable[[TransportAdapter], Awaitable[None]]) -> None:
        for t in self._transports:
            try:
                await call(t)
            except Exception as e:
                logger.warning(f"Transport {t.name} {action} failed: {e}")

    async def connect_all(self) -> None:
        """Start every publisher. One that fails to start is logged and left registered."""
        await self._fan_out("connect", lambda t: t.connect())

    async def disconnect_all(self) -> None:
        await self._fan_out("disconnect", lambda t: t.disconnect())

    async def push_state(self, state: dict) -> None:
        """Forward a ClockState.to_dict() payload."""
        await self._fan_out("state push", lambda t: t.push_state(state))

    async def push_event(self, event: dict) -> None:
        """Forward a WorldContext notice."""
        await self._fan_out("event push", lambda t: t.push_event(event))

    @property
    def transport_names(self) -> list[str]:
        """Publisher names, reported by the health endpoint."""
        return [t.name for t in self._transports]

    @property
    def count(self) -> int:
        return len(self._transports)
