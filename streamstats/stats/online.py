"""Single-pass mean/variance in constant space (Welford), mergeable across partitions."""

from __future__ import annotations

import math
from collections.abc import Iterable

import numpy as np

from streamstats.stats.errors import EmptyInput, IncompatibleMerge, InsufficientSamples


def mean(values: Iterable[float]) -> float:
    """Mean of a stream in constant space."""
    return OnlineStats.of(values).mean()


def variance(values: Iterable[float], ddof: int = 0) -> float:
    """Variance of a stream in constant space (population unless *ddof* is set)."""
    return OnlineStats.of(values).variance(ddof)


def stddev(values: Iterable[float], ddof: int = 0) -> float:
    """Standard deviation of a stream in constant space."""
    return OnlineStats.of(values).stddev(ddof)


class OnlineStats:
    """Running count, mean and sum of squared deviations.

    Values are folded in one at a time with :meth:`add`, or all at once with
    :meth:`from_array`.  Two instances built over disjoint data combine with
    :meth:`merge` into the state a single pass over both would have produced.

    Non-finite samples are not rejected; they propagate into the results.
    Missing values recorded with :meth:`add_null` are tallied separately and
    never affect the moments.
    """

    __slots__ = ("count", "_mean", "_m2", "nulls")

    def __init__(self) -> None:
        self.count = 0
        self._mean = 0.0
        self._m2 = 0.0
        self.nulls = 0

    @classmethod
    def of(cls, values: Iterable[float]) -> OnlineStats:
        acc = cls()
        acc.extend(values)
        return acc

    @classmethod
    def from_array(cls, values) -> OnlineStats:  # noqa: ANN001
        """Build the accumulator in one vectorised pass over *values*."""
        arr = np.asarray(values, dtype=float).ravel()
        acc = cls()
        if arr.size == 0:
            return acc
        m = float(arr.mean())
        acc.count = int(arr.size)
        acc._mean = m
        acc._m2 = float(np.sum((arr - m) ** 2))
        return acc

    # ── Updates ──────────────────────────────────────────────────────────

    def add(self, value: float) -> None:
        x = float(value)
        self.count += 1
        delta = x - self._mean
        self._mean += delta / self.count
        self._m2 += delta * (x - self._mean)

    push = add

    def extend(self, values: Iterable[float]) -> None:
        for v in values:
            self.add(v)

    def add_null(self) -> None:
        self.nulls += 1

    def merge(self, other: OnlineStats) -> None:
        """Fold *other* into ``self`` using the pairwise update of Chan et al."""
        if not isinstance(other, OnlineStats):
            raise IncompatibleMerge(
                f"cannot merge {type(other).__name__} into OnlineStats"
            )
        self.nulls += other.nulls
        if other.count == 0:
            return
        if self.count == 0:
            self.count, self._mean, self._m2 = other.count, other._mean, other._m2
            return
        n_a, n_b = self.count, other.count
        n = n_a + n_b
        delta = other._mean - self._mean
        self._mean += delta * n_b / n
        self._m2 += other._m2 + delta * delta * n_a * n_b / n
        self.count = n

    def clear(self) -> None:
        self.count = 0
        self._mean = 0.0
        self._m2 = 0.0
        self.nulls = 0

    def copy(self) -> OnlineStats:
        dup = OnlineStats()
        dup.count, dup._mean, dup._m2, dup.nulls = (
            self.count, self._mean, self._m2, self.nulls,
        )
        return dup

    # ── Queries ──────────────────────────────────────────────────────────

    def mean(self) -> float:
        if self.count == 0:
            raise EmptyInput("mean")
        return self._mean

    def variance(self, ddof: int = 0) -> float:
        """``m2 / (count - ddof)``; ddof=0 is the population variance, 1 the sample."""
        if ddof < 0:
            raise ValueError(f"ddof must be non-negative, got {ddof}")
        if self.count == 0:
            raise EmptyInput("variance")
        if self.count <= ddof:
            raise InsufficientSamples(self.count, ddof)
        return self._m2 / (self.count - ddof)

    def stddev(self, ddof: int = 0) -> float:
        return math.sqrt(self.variance(ddof))

    def __len__(self) -> int:
        return self.count

    def __repr__(self) -> str:
        return (
            f"OnlineStats(count={self.count}, mean={self._mean!r}, "
            f"m2={self._m2!r}, nulls={self.nulls})"
        )

    def __str__(self) -> str:
        if self.count == 0:
            return "N/A"
        return f"{self._mean:.10g} +/- {self.stddev():.10g}"

    # ── Serialisation ────────────────────────────────────────────────────

    def to_dict(self) -> dict:
        return {
            "kind": "online",
            "count": self.count,
            "mean": self._mean,
            "m2": self._m2,
            "nulls": self.nulls,
        }

    @classmethod
    def from_dict(cls, data: dict) -> OnlineStats:
        if data.get("kind") != "online":
            raise IncompatibleMerge(f"not an OnlineStats payload: {data.get('kind')!r}")
        acc = cls()
        acc.count = int(data["count"])
        acc._mean = float(data["mean"])
        acc._m2 = float(data["m2"])
        acc.nulls = int(data.get("nulls", 0))
        return acc
