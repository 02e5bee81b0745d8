"""Running minimum and maximum."""

from __future__ import annotations

import math
from collections.abc import Iterable
from typing import Any

from streamstats.stats.errors import IncompatibleMerge


def _is_nan(value: Any) -> bool:
    return isinstance(value, float) and math.isnan(value)


class MinMax:
    """Smallest and largest sample seen, plus the number of samples.

    Works on any ordered values.  NaN samples are counted but never become
    an extremum.
    """

    def __init__(self, values: Iterable[Any] = ()) -> None:
        self.count = 0
        self._min: Any = None
        self._max: Any = None
        self.extend(values)

    def add(self, value: Any) -> None:
        self.count += 1
        if _is_nan(value):
            return
        if self._min is None or value < self._min:
            self._min = value
        if self._max is None or value > self._max:
            self._max = value

    def extend(self, values: Iterable[Any]) -> None:
        for v in values:
            self.add(v)

    def merge(self, other: MinMax) -> None:
        if not isinstance(other, MinMax):
            raise IncompatibleMerge(f"cannot merge {type(other).__name__} into MinMax")
        self.count += other.count
        if other._min is not None and (self._min is None or other._min < self._min):
            self._min = other._min
        if other._max is not None and (self._max is None or other._max > self._max):
            self._max = other._max

    def min(self) -> Any:
        """``None`` until a comparable sample has been added."""
        return self._min

    def max(self) -> Any:
        return self._max

    def __len__(self) -> int:
        return self.count

    def __str__(self) -> str:
        if self._min is None:
            return "N/A"
        return f"[{self._min}, {self._max}]"

    def __repr__(self) -> str:
        return f"MinMax(count={self.count}, min={self._min!r}, max={self._max!r})"

    def to_dict(self) -> dict:
        return {"kind": "minmax", "count": self.count, "min": self._min, "max": self._max}

    @classmethod
    def from_dict(cls, data: dict) -> MinMax:
        if data.get("kind") != "minmax":
            raise IncompatibleMerge(f"not a MinMax payload: {data.get('kind')!r}")
        mm = cls()
        mm.count = int(data["count"])
        mm._min = data["min"]
        mm._max = data["max"]
        return mm
