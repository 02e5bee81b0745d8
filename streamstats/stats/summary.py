"""Per-column composite summaries and the one-line stat formatter."""

from __future__ import annotations

from collections.abc import Callable, Iterable
from typing import Any

from streamstats.stats.errors import IncompatibleMerge, StatsError
from streamstats.stats.frequency import Frequencies
from streamstats.stats.minmax import MinMax
from streamstats.stats.online import OnlineStats
from streamstats.stats.unsorted import Unsorted


def _or_none(query: Callable[[], Any]) -> Any:
    try:
        return query()
    except StatsError:
        return None


def fmt_stat(values: Iterable[float]) -> str:
    """Full stats: mean +/- sigma  [min, med, max]  (n=...)."""
    exact = Unsorted(values)
    if not len(exact):
        return "—"
    ordered = exact.values()
    acc = OnlineStats.of(ordered)
    sd = _or_none(lambda: acc.stddev(ddof=1)) or 0.0
    lo, hi = ordered[0], ordered[-1]
    return (
        f"{acc.mean():,.1f} ± {sd:,.1f}"
        f"  [min={lo:,.0f}, med={exact.median():,.0f}, max={hi:,.0f}]"
        f"  (n={len(acc)})"
    )


class ColumnSummary:
    """Everything streamstats knows about one column of a table.

    Cells arrive raw.  ``None`` or blank cells count as nulls; cells that
    parse as floats feed the numeric accumulators; anything else is tallied
    as non-numeric.  With ``frequencies`` every non-null cell is counted by
    its text, and with ``exact`` numeric cells are also buffered so the
    median can be computed exactly.
    """

    def __init__(self, name: str, *, frequencies: bool = True, exact: bool = False) -> None:
        self.name = name
        self.online = OnlineStats()
        self.minmax = MinMax()
        self.frequencies: Frequencies | None = Frequencies() if frequencies else None
        self.exact: Unsorted | None = Unsorted() if exact else None
        self.non_numeric = 0

    def add(self, cell: Any) -> None:
        if cell is None:
            self.online.add_null()
            return
        if isinstance(cell, str):
            text = cell.strip()
            if not text:
                self.online.add_null()
                return
            try:
                number: float | None = float(text)
            except ValueError:
                number = None
        else:
            text = cell
            try:
                number = float(cell)
            except (TypeError, ValueError):
                number = None

        if self.frequencies is not None:
            self.frequencies.add(text)
        if number is None:
            self.non_numeric += 1
            return
        self.online.add(number)
        self.minmax.add(number)
        if self.exact is not None:
            self.exact.add(number)

    def extend(self, cells: Iterable[Any]) -> None:
        for cell in cells:
            self.add(cell)

    def merge(self, other: ColumnSummary) -> None:
        if not isinstance(other, ColumnSummary):
            raise IncompatibleMerge(
                f"cannot merge {type(other).__name__} into ColumnSummary"
            )
        if other.name != self.name:
            raise IncompatibleMerge(f"column {other.name!r} does not match {self.name!r}")
        if (self.frequencies is None) != (other.frequencies is None) or (
            self.exact is None
        ) != (other.exact is None):
            raise IncompatibleMerge(f"column {self.name!r} was summarised with different options")
        self.online.merge(other.online)
        self.minmax.merge(other.minmax)
        if self.frequencies is not None:
            self.frequencies.merge(other.frequencies)
        if self.exact is not None:
            self.exact.merge(other.exact)
        self.non_numeric += other.non_numeric

    def __len__(self) -> int:
        """Number of non-null cells."""
        return len(self.online) + self.non_numeric

    @property
    def nulls(self) -> int:
        return self.online.nulls

    def as_row(self, ddof: int = 0) -> dict[str, Any]:
        """Flatten into report-ready scalars; undefined statistics become ``None``."""
        row: dict[str, Any] = {
            "name": self.name,
            "count": len(self.online),
            "nulls": self.nulls,
            "non_numeric": self.non_numeric,
            "mean": _or_none(self.online.mean),
            "stddev": _or_none(lambda: self.online.stddev(ddof)),
            "variance": _or_none(lambda: self.online.variance(ddof)),
            "min": self.minmax.min(),
            "max": self.minmax.max(),
        }
        if self.exact is not None:
            row["median"] = _or_none(self.exact.median)
        if self.frequencies is not None:
            row["mode"] = _or_none(self.frequencies.mode)
            row["cardinality"] = self.frequencies.cardinality()
        return row

    def to_dict(self) -> dict:
        return {
            "kind": "column",
            "name": self.name,
            "online": self.online.to_dict(),
            "minmax": self.minmax.to_dict(),
            "frequencies": self.frequencies.to_dict() if self.frequencies is not None else None,
            "exact": self.exact.to_dict() if self.exact is not None else None,
            "non_numeric": self.non_numeric,
        }

    @classmethod
    def from_dict(cls, data: dict) -> ColumnSummary:
        if data.get("kind") != "column":
            raise IncompatibleMerge(f"not a ColumnSummary payload: {data.get('kind')!r}")
        col = cls(data["name"], frequencies=False, exact=False)
        col.online = OnlineStats.from_dict(data["online"])
        col.minmax = MinMax.from_dict(data["minmax"])
        if data.get("frequencies") is not None:
            col.frequencies = Frequencies.from_dict(data["frequencies"])
        if data.get("exact") is not None:
            col.exact = Unsorted.from_dict(data["exact"])
        col.non_numeric = int(data.get("non_numeric", 0))
        return col

    def __repr__(self) -> str:
        return f"ColumnSummary({self.name!r}, count={len(self.online)}, nulls={self.nulls})"
