"""Exceptions raised by the accumulators."""

from __future__ import annotations


class StatsError(Exception):
    """Base class for every error raised by streamstats accumulators."""


class EmptyInput(StatsError):
    """A finalizing query was made before any value was recorded."""

    def __init__(self, what: str = "statistic") -> None:
        super().__init__(f"cannot compute {what} of an empty accumulator")
        self.what = what


class InsufficientSamples(StatsError):
    """Fewer observations than the requested degrees of freedom allow."""

    def __init__(self, count: int, ddof: int) -> None:
        super().__init__(
            f"need more than {ddof} observation(s) for ddof={ddof}, got {count}"
        )
        self.count = count
        self.ddof = ddof


class IncompatibleMerge(StatsError, ValueError):
    """Two partial results cannot be combined."""
