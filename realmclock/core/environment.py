"""
Per-hour environment settings.

Rendering and audio consumers subscribe to the clock and look up the
current hour here to recolor the sky, set lighting and fog, and pick
ambient sound loops.
"""

from dataclasses import dataclass
from typing import Any

from realmclock.core.calendar import Hour


@dataclass(frozen=True)
class Environment:
    """Presentation hints for one hour of the day."""
    sky_color: int
    light_intensity: float
    fog_density: float
    ambient_sounds: tuple[str, ...] = ()

    def to_dict(self) -> dict[str, Any]:
        return {
            "sky_color": f"#{self.sky_color:06x}",
            "light_intensity": self.light_intensity,
            "fog_density": self.fog_density,
            "ambient_sounds": list(self.ambient_sounds),
        }


ENVIRONMENTS: dict[Hour, Environment] = {
    Hour.DAWN: Environment(
        sky_color=0xFFE8C4,  # Warm sunrise
        light_intensity=0.7, fog_density=0.3,
        ambient_sounds=("birds", "gentleWind"),
    ),
    Hour.ZENITH: Environment(
        sky_color=0x87CEEB,  # Bright day
        light_intensity=1.0, fog_density=0.1,
        ambient_sounds=("birds", "villageNoises"),
    ),
    Hour.DUSK: Environment(
        sky_color=0xFF7F50,  # Sunset orange
        light_intensity=0.6, fog_density=0.4,
        ambient_sounds=("crickets", "owls"),
    ),
    Hour.MIDNIGHT: Environment(
        sky_color=0x0A1A3F,  # Deep night
        light_intensity=0.3, fog_density=0.7,
        ambient_sounds=("wolves", "wind"),
    ),
}


def environment_for(hour: Hour) -> Environment:
    """Environment settings for an hour. Raises KeyError for non-Hour values."""
    return ENVIRONMENTS[hour]
