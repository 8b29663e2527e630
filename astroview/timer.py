"""Accumulating timer driven by tick deltas instead of a wall clock."""

from __future__ import annotations


class DiagnosticTimer:
    """Fires once per `interval` seconds of accumulated tick time.

    The caller feeds elapsed time through `advance`, so the timer works with
    any host scheduling model and with synthetic deltas in tests.

    Example:
        >>> timer = DiagnosticTimer(5.0)
        >>> timer.advance(3.0)
        False
        >>> timer.advance(2.0)
        True
    """

    def __init__(self, interval: float) -> None:
        if interval <= 0:
            raise ValueError(f"interval must be positive, got {interval}")
        self.interval = interval
        self.elapsed = 0.0

    def advance(self, dt: float) -> bool:
        """Add `dt` seconds; return True and restart if the interval was reached."""
        self.elapsed += dt
        if self.elapsed >= self.interval:
            self.elapsed = 0.0
            return True
        return False

    def reset(self) -> None:
        self.elapsed = 0.0
