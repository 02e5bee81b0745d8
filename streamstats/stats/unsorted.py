"""Exact order statistics over a buffer that is sorted only when queried."""

from __future__ import annotations

import math
from collections.abc import Iterable
from typing import Any

from streamstats.stats.errors import EmptyInput, IncompatibleMerge


def median(values: Iterable[Any]) -> float:
    """Exact median of a stream. O(n log n) time, O(n) space."""
    return Unsorted(values).median()


def mode(values: Iterable[Any]) -> Any:
    """Exact mode of a stream; ties go to the smallest value."""
    return Unsorted(values).mode()


def _sort_key(value: Any) -> tuple:
    # NaN has no place in the ordering; park it after every number
    return (isinstance(value, float) and math.isnan(value), value)


class Unsorted:
    """Keeps every sample; sorts lazily on the first query after a change."""

    def __init__(self, values: Iterable[Any] = ()) -> None:
        self._data: list = []
        self._sorted = True
        self.extend(values)

    def add(self, value: Any) -> None:
        self._data.append(value)
        self._sorted = False

    def extend(self, values: Iterable[Any]) -> None:
        self._data.extend(values)
        self._sorted = False

    def merge(self, other: Unsorted) -> None:
        if not isinstance(other, Unsorted):
            raise IncompatibleMerge(f"cannot merge {type(other).__name__} into Unsorted")
        self._data.extend(other._data)
        self._sorted = False

    def _sort(self) -> list:
        if not self._sorted:
            self._data.sort(key=_sort_key)
            self._sorted = True
        return self._data

    def median(self) -> float:
        data = self._sort()
        n = len(data)
        if n == 0:
            raise EmptyInput("median")
        if n % 2 == 1:
            return float(data[n // 2])
        return (float(data[n // 2 - 1]) + float(data[n // 2])) / 2.0

    def mode(self) -> Any:
        data = self._sort()
        if not data:
            raise EmptyInput("mode")
        best, best_run = data[0], 0
        current, run = data[0], 0
        for v in data:
            if v == current:
                run += 1
            else:
                current, run = v, 1
            # strict comparison keeps the earliest (smallest) run on ties
            if run > best_run:
                best, best_run = current, run
        return best

    def cardinality(self) -> int:
        data = self._sort()
        distinct = 0
        prev: Any = object()
        for v in data:
            if v != prev:
                distinct += 1
                prev = v
        return distinct

    def values(self) -> list:
        """The samples in sorted order."""
        return list(self._sort())

    def clear(self) -> None:
        self._data.clear()
        self._sorted = True

    def __len__(self) -> int:
        return len(self._data)

    def __repr__(self) -> str:
        return f"Unsorted(n={len(self._data)})"

    def to_dict(self) -> dict:
        return {"kind": "unsorted", "values": list(self._data)}

    @classmethod
    def from_dict(cls, data: dict) -> Unsorted:
        if data.get("kind") != "unsorted":
            raise IncompatibleMerge(f"not an Unsorted payload: {data.get('kind')!r}")
        return cls(data["values"])
