"""
Six-level fantasy calendar.

Every instant is a count of elapsed game minutes. The symbolic calendar
(Hour, Day, Week, Month, Year, Century) is derived from that count by
repeated integer division, so labels can never drift from the counter.
Each level has exactly four labels; the century label cycles forever and
the number of completed four-century cycles is kept as the epoch.
"""

import math
from dataclasses import dataclass
from enum import Enum
from typing import Any, Mapping


class Hour(Enum):
    """Hours of the day, in order."""
    DAWN = "Mysthaven Dawn"
    ZENITH = "Solarglow Zenith"
    DUSK = "Shadowfall Dusk"
    MIDNIGHT = "Voidwhisper Midnight"


class Day(Enum):
    LUNARIS = "Lunaris"        # Moon day
    SOLARUS = "Solarus"        # Sun day
    STELLARIS = "Stellaris"    # Star day
    VOIDUS = "Voidus"          # Void day


class Week(Enum):
    EMBERWEAVE = "Emberweave"  # Fire
    AQUAFLOW = "Aquaflow"      # Water
    TERRAGRIP = "Terragrip"    # Earth
    ZEPHYRWIND = "Zephyrwind"  # Air


class Month(Enum):
    FROSTWHISPER = "Frostwhisper"
    BLOOMSURGE = "Bloomsurge"
    SOLARBURST = "Solarburst"
    AMBERFALL = "Amberfall"


class Year(Enum):
    DRAGON = "Dragon"
    PHOENIX = "Phoenix"
    HYDRA = "Hydra"
    GRIFFIN = "Griffin"


class Century(Enum):
    PROPHECY = "Prophecy"
    CONQUEST = "Conquest"
    WONDER = "Wonder"
    SHADOW = "Shadow"


# Finest level first
LEVELS: tuple[str, ...] = ("hour", "day", "week", "month", "year", "century")

UNITS: dict[str, type[Enum]] = {
    "hour": Hour,
    "day": Day,
    "week": Week,
    "month": Month,
    "year": Year,
    "century": Century,
}

MINUTES_PER_HOUR = 60
HOURS_PER_DAY = 4
DAYS_PER_WEEK = 4
WEEKS_PER_MONTH = 4
MONTHS_PER_YEAR = 4
YEARS_PER_CENTURY = 4
CENTURIES_PER_CYCLE = 4

MINUTES_PER_DAY = MINUTES_PER_HOUR * HOURS_PER_DAY
MINUTES_PER_WEEK = MINUTES_PER_DAY * DAYS_PER_WEEK
MINUTES_PER_MONTH = MINUTES_PER_WEEK * WEEKS_PER_MONTH
MINUTES_PER_YEAR = MINUTES_PER_MONTH * MONTHS_PER_YEAR
MINUTES_PER_CENTURY = MINUTES_PER_YEAR * YEARS_PER_CENTURY
MINUTES_PER_CYCLE = MINUTES_PER_CENTURY * CENTURIES_PER_CYCLE

# Radix between each level and the next coarser one
_RADIXES: dict[str, int] = {
    "hour": HOURS_PER_DAY,
    "day": DAYS_PER_WEEK,
    "week": WEEKS_PER_MONTH,
    "month": MONTHS_PER_YEAR,
    "year": YEARS_PER_CENTURY,
    "century": CENTURIES_PER_CYCLE,
}

_MEMBERS: dict[str, list[Enum]] = {level: list(unit) for level, unit in UNITS.items()}


class InvalidLabelError(ValueError):
    """A calendar label that does not belong to its level."""


@dataclass(frozen=True)
class CalendarTuple:
    """The six symbolic labels of an instant, without the minute count."""
    hour: Hour
    day: Day
    week: Week
    month: Month
    year: Year
    century: Century

    @classmethod
    def from_labels(cls, labels: Mapping[str, Any]) -> "CalendarTuple":
        """Build from a mapping of level name to enum member, name or display value."""
        unknown = set(labels) - set(LEVELS)
        if unknown:
            raise InvalidLabelError(f"Unknown calendar level(s): {sorted(unknown)}")
        missing = [level for level in LEVELS if level not in labels]
        if missing:
            raise InvalidLabelError(f"Missing calendar level(s): {missing}")
        return cls(**{level: coerce_label(level, labels[level]) for level in LEVELS})

    def to_dict(self) -> dict[str, str]:
        return {level: getattr(self, level).name for level in LEVELS}


@dataclass(frozen=True)
class ClockState:
    """Immutable snapshot of the clock: the minute counter and its derived labels."""
    elapsed_minutes: float
    hour: Hour
    day: Day
    week: Week
    month: Month
    year: Year
    century: Century
    epoch: int = 0

    @property
    def labels(self) -> CalendarTuple:
        return CalendarTuple(
            hour=self.hour, day=self.day, week=self.week,
            month=self.month, year=self.year, century=self.century,
        )

    def to_dict(self) -> dict[str, Any]:
        """Serialize to JSON-compatible dictionary."""
        return {
            "elapsed_minutes": self.elapsed_minutes,
            "epoch": self.epoch,
            **self.labels.to_dict(),
            "formatted": format_time(self),
        }


def index_of(label: Enum) -> int:
    """Position (0-3) of a label within its level."""
    for members in _MEMBERS.values():
        if label in members:
            return members.index(label)
    raise InvalidLabelError(f"Not a calendar label: {label!r}")


def coerce_label(level: str, value: Any) -> Enum:
    """Resolve an enum member, member name (any case) or display value for a level.

    Raises InvalidLabelError for anything not in that level's four labels;
    no default is ever substituted.
    """
    unit = UNITS.get(level)
    if unit is None:
        raise InvalidLabelError(f"Unknown calendar level: {level!r}")
    if isinstance(value, unit):
        return value
    if isinstance(value, str):
        try:
            return unit[value.strip().upper()]
        except KeyError:
            pass
        try:
            return unit(value)
        except ValueError:
            pass
    raise InvalidLabelError(
        f"Invalid {level} label {value!r}; expected one of "
        f"{[m.name for m in unit]}"
    )


def decode(elapsed_minutes: float) -> ClockState:
    """Convert an elapsed-minute counter to a ClockState."""
    if not math.isfinite(elapsed_minutes) or elapsed_minutes < 0:
        raise ValueError(f"elapsed_minutes must be a finite non-negative number, got {elapsed_minutes}")

    total = math.floor(elapsed_minutes / MINUTES_PER_HOUR)
    labels = {}
    for level in LEVELS:
        radix = _RADIXES[level]
        labels[level] = _MEMBERS[level][total % radix]
        total //= radix

    return ClockState(elapsed_minutes=elapsed_minutes, epoch=total, **labels)


def encode(labels: "CalendarTuple | Mapping[str, Any]") -> float:
    """Minute count of the first minute of a named instant within the first cycle.

    The six indices are read as base-4 digits, century most significant.
    """
    if not isinstance(labels, CalendarTuple):
        labels = CalendarTuple.from_labels(labels)

    total_hours = 0
    for level in reversed(LEVELS):
        label = coerce_label(level, getattr(labels, level))
        total_hours = total_hours * _RADIXES[level] + _MEMBERS[level].index(label)
    return float(total_hours * MINUTES_PER_HOUR)


def format_time(state: "ClockState | CalendarTuple") -> str:
    """Human-readable calendar string, e.g. 'Mysthaven Dawn of Lunaris, ...'."""
    return (
        f"{state.hour.value} of {state.day.value}, {state.week.value} Week, "
        f"{state.month.value} {state.year.value} Year, {state.century.value} Century"
    )


def matches(state: "ClockState | CalendarTuple", **labels: Any) -> bool:
    """True when every named level of the state equals the given label."""
    for level, value in labels.items():
        if getattr(state, level) is not coerce_label(level, value):
            return False
    return True


def next_occurrence(elapsed_minutes: float, target: "CalendarTuple | Mapping[str, Any]") -> float:
    """Earliest minute count >= elapsed_minutes whose labels equal target.

    Returns elapsed_minutes itself when the clock already shows the target;
    otherwise the start of the target hour, in the next four-century cycle
    if this cycle's occurrence has passed.
    """
    if not isinstance(target, CalendarTuple):
        target = CalendarTuple.from_labels(target)
    if decode(elapsed_minutes).labels == target:
        return elapsed_minutes

    cycle_start = math.floor(elapsed_minutes / MINUTES_PER_CYCLE) * MINUTES_PER_CYCLE
    candidate = float(cycle_start + encode(target))
    if candidate < elapsed_minutes:
        candidate += MINUTES_PER_CYCLE
    return candidate


def minutes_until(elapsed_minutes: float, target: "CalendarTuple | Mapping[str, Any]") -> float:
    """Non-negative number of minutes until the clock next shows target."""
    return next_occurrence(elapsed_minutes, target) - elapsed_minutes


# The instant the prophecy storyline opens on
PROPHECY_START = CalendarTuple(
    hour=Hour.MIDNIGHT,
    day=Day.VOIDUS,
    week=Week.ZEPHYRWIND,
    month=Month.AMBERFALL,
    year=Year.GRIFFIN,
    century=Century.SHADOW,
)
