"""
Condition/effect event scheduler.

Each registered TimeEvent pairs a predicate over the clock state with an
effect applied to the shared world context. The clock evaluates every
event after each advance, in registration order.

Level-triggered events (the default) fire on every evaluation for which
their predicate holds, including repeated evaluations of the same state.
Edge-triggered events fire only when their predicate turns from false
to true between two evaluations.
"""

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Callable

from realmclock.core.calendar import ClockState

logger = logging.getLogger(__name__)


class Trigger(Enum):
    """When an event fires relative to its predicate."""
    LEVEL = "level"  # every evaluation while true
    EDGE = "edge"    # only on false -> true


@dataclass
class TimeEvent:
    """A named condition on the calendar and the effect it causes."""
    id: str
    name: str
    description: str
    predicate: Callable[[ClockState], bool]
    effect: Callable[[Any], None]
    trigger: Trigger = Trigger.LEVEL
    metadata: dict = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "description": self.description,
            "trigger": self.trigger.value,
            "metadata": self.metadata,
        }


@dataclass(eq=False)
class _Registration:
    event: TimeEvent
    was_true: bool = False
    fire_count: int = 0
    active: bool = True


class EventScheduler:
    """Holds TimeEvents and evaluates them against clock states."""

    def __init__(self) -> None:
        self._registrations: list[_Registration] = []

    def register(self, event: TimeEvent) -> None:
        """Append an event. Duplicate ids are kept and fire independently."""
        if any(r.event.id == event.id for r in self._registrations):
            logger.debug(f"Event id '{event.id}' registered more than once")
        self._registrations.append(_Registration(event))

    def unregister(self, event_id: str) -> int:
        """Remove every event with this id. Returns how many were removed."""
        kept = []
        removed = 0
        for reg in self._registrations:
            if reg.event.id == event_id:
                reg.active = False
                removed += 1
            else:
                kept.append(reg)
        self._registrations = kept
        return removed

    def clear(self) -> None:
        """Drop all events and their trigger history."""
        for reg in self._registrations:
            reg.active = False
        self._registrations = []

    def evaluate(self, state: ClockState, context: Any = None) -> list[TimeEvent]:
        """Run the effect of every event whose predicate holds for state.

        Returns the events whose effects ran to completion. A failing
        predicate counts as false; a failing effect is logged and does not
        stop the remaining events.
        """
        fired = []
        for reg in list(self._registrations):
            # Removed by an earlier effect in this same pass
            if not reg.active:
                continue
            event = reg.event

            try:
                holds = bool(event.predicate(state))
            except Exception:
                logger.exception(f"Predicate of time event '{event.id}' failed")
                holds = False

            was_true = reg.was_true
            reg.was_true = holds
            if not holds:
                continue
            if event.trigger is Trigger.EDGE and was_true:
                continue

            logger.debug(f"Time event triggered: {event.name}")
            try:
                event.effect(context)
            except Exception:
                logger.exception(f"Effect of time event '{event.id}' failed")
                continue
            reg.fire_count += 1
            fired.append(event)

        return fired

    def get_fired_count(self, event_id: str | None = None) -> int:
        """How many times events with this id (or any event) have fired successfully."""
        return sum(
            r.fire_count for r in self._registrations
            if event_id is None or r.event.id == event_id
        )

    @property
    def events(self) -> list[TimeEvent]:
        """Registered events in registration order."""
        return [r.event for r in self._registrations]

    @property
    def count(self) -> int:
        return len(self._registrations)
