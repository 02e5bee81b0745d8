"""Exact frequency counts with mode and ranking queries."""

from __future__ import annotations

from collections import Counter
from collections.abc import Hashable, Iterable

from streamstats.stats.errors import EmptyInput, IncompatibleMerge


def _hashable(value):  # noqa: ANN001, ANN202
    if isinstance(value, list):
        return tuple(_hashable(v) for v in value)
    return value


class Frequencies:
    """Occurrence counts per distinct value.

    Values are kept in first-seen order, which is also how ties are broken:
    :meth:`mode` returns the earliest-seen of the most frequent values.  After
    a merge, values already present on the left precede values new from the
    right.
    """

    def __init__(self, values: Iterable[Hashable] = ()) -> None:
        self._counts: Counter = Counter()
        self.extend(values)

    def add(self, value: Hashable) -> None:
        self._counts[value] += 1

    push = add

    def extend(self, values: Iterable[Hashable]) -> None:
        for v in values:
            self._counts[v] += 1

    def merge(self, other: Frequencies) -> None:
        if not isinstance(other, Frequencies):
            raise IncompatibleMerge(
                f"cannot merge {type(other).__name__} into Frequencies"
            )
        self._counts.update(other._counts)

    def count_of(self, value: Hashable) -> int:
        return self._counts.get(value, 0)

    def cardinality(self) -> int:
        return len(self._counts)

    def total(self) -> int:
        return sum(self._counts.values())

    def mode(self) -> Hashable:
        if not self._counts:
            raise EmptyInput("mode")
        return self.modes()[0]

    def modes(self) -> list:
        """Every value tied for the highest count, in first-seen order."""
        if not self._counts:
            return []
        top = max(self._counts.values())
        return [v for v, c in self._counts.items() if c == top]

    def most_frequent(self, n: int | None = None) -> list[tuple[Hashable, int]]:
        """``(value, count)`` pairs by descending count."""
        # sorted() is stable, so equal counts keep first-seen order
        ranked = sorted(self._counts.items(), key=lambda kv: -kv[1])
        return ranked if n is None else ranked[:n]

    def least_frequent(self, n: int | None = None) -> list[tuple[Hashable, int]]:
        """``(value, count)`` pairs by ascending count."""
        ranked = sorted(self._counts.items(), key=lambda kv: kv[1])
        return ranked if n is None else ranked[:n]

    def items(self):  # noqa: ANN201
        return self._counts.items()

    def clear(self) -> None:
        self._counts.clear()

    def __len__(self) -> int:
        return len(self._counts)

    def __contains__(self, value: object) -> bool:
        return value in self._counts

    def __repr__(self) -> str:
        return f"Frequencies({dict(self._counts)!r})"

    def to_dict(self) -> dict:
        # JSON object keys must be strings, so pairs are stored as a list;
        # tuple values come back from JSON as lists
        return {"kind": "frequency", "counts": [[v, c] for v, c in self._counts.items()]}

    @classmethod
    def from_dict(cls, data: dict) -> Frequencies:
        if data.get("kind") != "frequency":
            raise IncompatibleMerge(f"not a Frequencies payload: {data.get('kind')!r}")
        freq = cls()
        for value, count in data["counts"]:
            freq._counts[_hashable(value)] += int(count)
        return freq
