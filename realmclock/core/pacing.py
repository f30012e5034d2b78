"""
Wall-clock pacing for the game clock.

Converts real elapsed seconds between ticks into game minutes at a
configurable rate (game minutes per real second). The controller only
computes how far to advance; the clock owns the counter.
"""

import logging
import math

logger = logging.getLogger(__name__)


def _check_rate(rate: float) -> float:
    rate = float(rate)
    if not math.isfinite(rate) or rate < 0:
        raise ValueError(f"Rate must be a finite non-negative number, got {rate}")
    return rate


class PacingController:
    """
    Tracks the last wall-clock timestamp and scales deltas by the rate.

    A rate of 0 pauses simulated time without losing the baseline, so
    resuming does not produce a jump.
    """

    def __init__(self, rate: float = 1.0) -> None:
        self._rate = _check_rate(rate)
        self._last_timestamp: float | None = None
        self._paused_rate: float | None = None

    @property
    def rate(self) -> float:
        """Game minutes per real second."""
        return self._rate

    @property
    def is_paused(self) -> bool:
        return self._paused_rate is not None

    @property
    def last_timestamp(self) -> float | None:
        return self._last_timestamp

    def set_rate(self, minutes_per_real_second: float) -> None:
        """Change the rate. While paused, the new rate takes effect on resume."""
        rate = _check_rate(minutes_per_real_second)
        if self._paused_rate is not None:
            self._paused_rate = rate
            return
        self._rate = rate

    def pause(self) -> None:
        """Stop simulated time; remembers the rate for resume()."""
        if self._paused_rate is not None:
            return
        self._paused_rate = self._rate
        self._rate = 0.0

    def resume(self) -> None:
        """Restore the rate saved by pause()."""
        if self._paused_rate is None:
            return
        self._rate = self._paused_rate
        self._paused_rate = None

    def init(self, now: float) -> None:
        """Record the baseline timestamp (seconds)."""
        self._last_timestamp = float(now)

    def tick(self, now: float) -> float:
        """Game minutes elapsed since the previous tick (or init).

        The first tick without a prior init only records the baseline and
        returns 0.
        """
        now = float(now)
        if self._last_timestamp is None:
            logger.debug("Pacing tick before init; using it as the baseline")
            self._last_timestamp = now
            return 0.0

        delta_s = now - self._last_timestamp
        if delta_s < 0:
            raise ValueError(
                f"Timestamp went backwards ({now} < {self._last_timestamp})"
            )
        self._last_timestamp = now
        return delta_s * self._rate
