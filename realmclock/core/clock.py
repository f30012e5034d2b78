"""
Game clock with configurable rate.

The clock owns the elapsed-minute counter for the whole game. The host
calls tick() once per frame; the pacing controller turns the real time
since the last tick into game minutes and the clock advances by that
amount. Every advance recomputes the calendar, notifies subscribers and
then evaluates registered time events, always in that order.

Not thread-safe: a single update loop is expected to drive it.
"""

import itertools
import logging
import math
import time
from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any, Callable, Protocol

from realmclock.core.calendar import (
    PROPHECY_START,
    CalendarTuple,
    ClockState,
    decode,
    encode,
    format_time,
    next_occurrence,
)
from realmclock.core.environment import Environment, environment_for
from realmclock.core.pacing import PacingController
from realmclock.events.scheduler import EventScheduler, TimeEvent

logger = logging.getLogger(__name__)

_subscription_ids = itertools.count(1)


@dataclass(frozen=True)
class Subscription:
    """Handle returned by subscribe(); pass it back to unsubscribe()."""
    id: int
    callback: Callable[[ClockState], None] = field(compare=False, repr=False)


class ClockView(Protocol):
    """Read-only clock interface handed to consumers."""

    @property
    def rate(self) -> float: ...

    @property
    def is_paused(self) -> bool: ...

    @property
    def is_destroyed(self) -> bool: ...

    @property
    def event_count(self) -> int: ...

    def get_state(self) -> ClockState: ...

    def get_formatted_time(self) -> str: ...

    def get_environment(self) -> Environment: ...


class RealmClock:
    """
    Elapsed-minute counter with calendar decoding, change notification and
    time events.

    The start instant is mandatory: pass either a CalendarTuple (or a
    mapping of the six level names to labels) or a number of minutes.
    """

    def __init__(
        self,
        start: "CalendarTuple | Mapping[str, Any] | float",
        rate: float = 1.0,
        context: Any = None,
    ) -> None:
        if isinstance(start, (CalendarTuple, Mapping)):
            elapsed = encode(start)
        elif isinstance(start, (int, float)) and not isinstance(start, bool):
            elapsed = float(start)
            if not math.isfinite(elapsed) or elapsed < 0:
                raise ValueError(f"Start minutes must be finite and non-negative, got {start}")
        else:
            raise TypeError(
                f"start must be a CalendarTuple, label mapping or minute count, got {type(start).__name__}"
            )

        self._elapsed = elapsed
        self._state = decode(elapsed)
        self._pacing = PacingController(rate)
        self._scheduler = EventScheduler()
        self._subscriptions: list[Subscription] = []
        self._context = context
        self._destroyed = False
        logger.info(f"Clock starting at {self.get_formatted_time()} ({elapsed:g} minutes)")

    @classmethod
    def at_prophecy(cls, rate: float = 1.0, context: Any = None) -> "RealmClock":
        """Clock starting at the prophecy instant (Midnight of Voidus, ... Shadow Century)."""
        return cls(PROPHECY_START, rate=rate, context=context)

    @property
    def rate(self) -> float:
        """Game minutes per real second."""
        return self._pacing.rate

    @property
    def is_paused(self) -> bool:
        return self._pacing.is_paused

    @property
    def is_destroyed(self) -> bool:
        return self._destroyed

    @property
    def context(self) -> Any:
        """Object passed to every event effect."""
        return self._context

    @property
    def scheduler(self) -> EventScheduler:
        return self._scheduler

    @property
    def subscriber_count(self) -> int:
        return len(self._subscriptions)

    @property
    def event_count(self) -> int:
        """Number of registered time events."""
        return self._scheduler.count

    def init(self, now: float | None = None) -> None:
        """Record the wall-clock baseline. Call once before the first tick."""
        self._pacing.init(time.monotonic() if now is None else now)

    def set_rate(self, minutes_per_real_second: float) -> None:
        """Change how many game minutes pass per real second (0 pauses)."""
        self._pacing.set_rate(minutes_per_real_second)

    def pause(self) -> None:
        """Stop time from advancing on tick(). advance() still works."""
        self._pacing.pause()

    def resume(self) -> None:
        self._pacing.resume()

    def tick(self, now: float | None = None) -> None:
        """Advance by the game minutes elapsed in real time since the last tick."""
        minutes = self._pacing.tick(time.monotonic() if now is None else now)
        self.advance(minutes)

    def advance(self, minutes: float) -> None:
        """Move the clock forward, notify subscribers, then evaluate events.

        Raises ValueError for negative or non-finite amounts; the clock
        never runs backwards.
        """
        if not math.isfinite(minutes) or minutes < 0:
            raise ValueError(f"Cannot advance by {minutes} minutes")
        self._apply(self._elapsed + minutes)

    def jump_to(self, target: "CalendarTuple | Mapping[str, Any]") -> float:
        """Advance to the next time the calendar shows target.

        Returns the number of minutes advanced (0 if already there).
        """
        destination = next_occurrence(self._elapsed, target)
        advanced = destination - self._elapsed
        self._apply(destination)
        return advanced

    def _apply(self, elapsed: float) -> None:
        # Decode before committing so a rejected total leaves the clock as it was
        state = decode(elapsed)
        self._elapsed = elapsed
        self._state = state
        self._notify(self._state)
        self._scheduler.evaluate(self._state, self._context)

    def _notify(self, state: ClockState) -> None:
        for sub in list(self._subscriptions):
            if sub not in self._subscriptions:
                continue
            try:
                sub.callback(state)
            except Exception:
                logger.exception(f"Clock subscriber {sub.id} failed")

    def subscribe(self, callback: Callable[[ClockState], None]) -> Subscription:
        """Call callback with the new state after every advance."""
        sub = Subscription(next(_subscription_ids), callback)
        self._subscriptions.append(sub)
        return sub

    def unsubscribe(self, handle: Subscription) -> None:
        """Remove a subscription. Unknown handles are ignored."""
        if handle in self._subscriptions:
            self._subscriptions.remove(handle)

    def register(self, event: TimeEvent) -> None:
        """Register a time event, evaluated after every advance."""
        self._scheduler.register(event)

    def unregister(self, event_id: str) -> int:
        return self._scheduler.unregister(event_id)

    def get_state(self) -> ClockState:
        """Immutable snapshot of the current time."""
        return self._state

    def get_formatted_time(self) -> str:
        return format_time(self._state)

    def get_environment(self) -> Environment:
        """Environment settings for the current hour."""
        return environment_for(self._state.hour)

    def destroy(self) -> None:
        """Drop all subscribers and events. Safe to call more than once."""
        if self._destroyed:
            return
        self._subscriptions.clear()
        self._scheduler.clear()
        self._destroyed = True
        logger.info("Clock destroyed")
