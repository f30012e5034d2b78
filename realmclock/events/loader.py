"""
YAML time-event catalogue parser.

A catalogue lists events keyed to calendar labels. Each entry names the
levels it matches under `when`, an optional trigger mode, and a list of
actions applied to the WorldContext when the event fires:

    events:
      - id: full_moon
        name: The Prophetic Full Moon
        description: Ancient magic flows freely.
        when: {hour: MIDNIGHT, day: LUNARIS, week: ZEPHYRWIND}
        trigger: edge
        actions:
          - announce: The full moon rises.
          - increment: full_moons

Supported actions: announce, set_flag, clear_flag, increment, log.
"""

import functools
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import yaml

from realmclock.core.calendar import ClockState, InvalidLabelError, coerce_label, matches
from realmclock.events.scheduler import TimeEvent, Trigger

logger = logging.getLogger(__name__)

DEFAULT_CATALOGUE = Path(__file__).parent / "catalogues" / "prophecy.yaml"

ACTION_TYPES = ("announce", "set_flag", "clear_flag", "increment", "log")


class CatalogueError(ValueError):
    """A catalogue file or entry that cannot be turned into time events."""


@dataclass
class EventAction:
    """One step of an event's effect."""
    kind: str
    target: str | None = None
    amount: int = 1

    def to_dict(self) -> dict[str, Any]:
        return {"kind": self.kind, "target": self.target, "amount": self.amount}


@dataclass
class EventDefinition:
    """A catalogue entry before it is bound into a TimeEvent."""
    id: str
    name: str
    description: str
    when: dict[str, Any]
    trigger: Trigger = Trigger.LEVEL
    actions: list[EventAction] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "description": self.description,
            "when": {level: label.name for level, label in self.when.items()},
            "trigger": self.trigger.value,
            "actions": [a.to_dict() for a in self.actions],
        }


def _parse_action(event_id: str, raw: Any) -> EventAction:
    """Parse a single-key action mapping like {'announce': 'text'}."""
    if not isinstance(raw, dict) or len(raw) != 1:
        raise CatalogueError(f"Event '{event_id}': each action must be a single-key mapping, got {raw!r}")

    kind, arg = next(iter(raw.items()))
    if kind not in ACTION_TYPES:
        raise CatalogueError(f"Event '{event_id}': unknown action '{kind}'. Expected one of {list(ACTION_TYPES)}")

    if kind == "increment":
        if isinstance(arg, dict):
            counter = arg.get("counter")
            amount = arg.get("amount", 1)
            if not counter or not isinstance(amount, int):
                raise CatalogueError(f"Event '{event_id}': increment needs a counter and an integer amount")
            return EventAction(kind, str(counter), amount)
        if not arg:
            raise CatalogueError(f"Event '{event_id}': increment needs a counter name")
        return EventAction(kind, str(arg))

    if kind in ("set_flag", "clear_flag") and not arg:
        raise CatalogueError(f"Event '{event_id}': {kind} needs a flag name")

    return EventAction(kind, None if arg is None else str(arg))


def parse_definition(raw: dict[str, Any]) -> EventDefinition:
    """Validate one catalogue entry."""
    if not isinstance(raw, dict):
        raise CatalogueError(f"Catalogue entries must be mappings, got {raw!r}")

    event_id = raw.get("id")
    if not event_id:
        raise CatalogueError(f"Catalogue entry missing 'id': {raw!r}")
    event_id = str(event_id)

    when_raw = raw.get("when")
    if not isinstance(when_raw, dict) or not when_raw:
        raise CatalogueError(f"Event '{event_id}': 'when' must name at least one calendar level")
    when = {}
    for level, label in when_raw.items():
        try:
            when[level] = coerce_label(level, label)
        except InvalidLabelError as e:
            raise CatalogueError(f"Event '{event_id}': {e}") from e

    trigger_raw = str(raw.get("trigger", Trigger.LEVEL.value)).lower()
    try:
        trigger = Trigger(trigger_raw)
    except ValueError:
        raise CatalogueError(
            f"Event '{event_id}': invalid trigger '{trigger_raw}' (use 'level' or 'edge')"
        ) from None

    actions = [_parse_action(event_id, a) for a in raw.get("actions") or []]

    return EventDefinition(
        id=event_id,
        name=str(raw.get("name", event_id)),
        description=str(raw.get("description", "")),
        when=when,
        trigger=trigger,
        actions=actions,
    )


def run_actions(definition: EventDefinition, context: Any) -> None:
    """Apply every action of a definition to the context, in order."""
    for action in definition.actions:
        _apply_action(definition, action, context)


def _apply_action(definition: EventDefinition, action: EventAction, context: Any) -> None:
    if action.kind == "log":
        logger.info(action.target or f"Time event: {definition.name}")
        return

    if context is None:
        logger.debug(f"No context for '{action.kind}' action of {definition.id}; skipped")
        return

    if action.kind == "announce":
        context.announce(definition.id, action.target or definition.description, name=definition.name)
    elif action.kind == "set_flag":
        context.set_flag(action.target)
    elif action.kind == "clear_flag":
        context.clear_flag(action.target)
    elif action.kind == "increment":
        context.increment(action.target, action.amount)
    else:
        logger.debug(f"Unhandled action '{action.kind}' for {definition.id}")


def build_event(definition: EventDefinition) -> TimeEvent:
    """Bind a definition into a TimeEvent the scheduler can evaluate."""
    when = dict(definition.when)

    def predicate(state: ClockState) -> bool:
        return matches(state, **when)

    return TimeEvent(
        id=definition.id,
        name=definition.name,
        description=definition.description,
        predicate=predicate,
        effect=functools.partial(run_actions, definition),
        trigger=definition.trigger,
        metadata={"when": {level: label.name for level, label in when.items()}},
    )


def parse_catalogue(raw: Any) -> list[EventDefinition]:
    """Validate a parsed YAML document and return its definitions."""
    if not isinstance(raw, dict) or "events" not in raw:
        raise CatalogueError("Catalogue must have a top-level 'events' list")
    entries = raw["events"] or []
    if not isinstance(entries, list):
        raise CatalogueError("'events' must be a list")
    return [parse_definition(entry) for entry in entries]


def load_definitions(path: str | Path) -> list[EventDefinition]:
    """Read and validate a catalogue file."""
    path = Path(path)
    try:
        with open(path) as f:
            raw = yaml.safe_load(f)
    except yaml.YAMLError as e:
        raise CatalogueError(f"{path}: YAML syntax error: {e}") from e
    definitions = parse_catalogue(raw)
    logger.info(f"Loaded {len(definitions)} time events from {path}")
    return definitions


def load_catalogue(path: str | Path = DEFAULT_CATALOGUE) -> list[TimeEvent]:
    """Read a catalogue file and build its TimeEvents."""
    return [build_event(d) for d in load_definitions(path)]
