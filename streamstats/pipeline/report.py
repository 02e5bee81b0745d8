"""Report generation — console tables, JSON dumps and frequency charts."""

from __future__ import annotations

import json
import re
from pathlib import Path

import matplotlib.pyplot as plt

from streamstats.common.console import header, section
from streamstats.common.constants import PLOT_DPI
from streamstats.stats.summary import ColumnSummary

COLOR_BAR = "#2980b9"


def _fmt(value: object, spec: str = ",.4f") -> str:
    if value is None:
        return "—"
    if isinstance(value, float):
        return format(value, spec)
    return str(value)


def print_report(
    summaries: list[ColumnSummary],
    *,
    title: str = "STREAM SUMMARY",
    ddof: int = 0,
    top: int = 10,
) -> None:
    """Print the per-column statistics table, then the top values per column."""
    print(header(title))
    kind = "sample" if ddof else "population"
    print(f"\n  Columns: {len(summaries)}   (σ = {kind} standard deviation, ddof={ddof})")

    print(section("1. COLUMN STATISTICS"))
    print(
        f"  {'Column':<18} {'n':>9} {'nulls':>7} {'text':>7} "
        f"{'mean':>14} {'σ':>14} {'min':>12} {'max':>12}"
    )
    print(f"  {'─' * 18} {'─' * 9} {'─' * 7} {'─' * 7} {'─' * 14} {'─' * 14} {'─' * 12} {'─' * 12}")
    rows = [s.as_row(ddof) for s in summaries]
    for r in rows:
        print(
            f"  {r['name'][:18]:<18} {r['count']:>9,} {r['nulls']:>7,} {r['non_numeric']:>7,} "
            f"{_fmt(r['mean']):>14} {_fmt(r['stddev']):>14} "
            f"{_fmt(r['min'], ',.4g'):>12} {_fmt(r['max'], ',.4g'):>12}"
        )

    if any("median" in r for r in rows):
        print(section("2. EXACT ORDER STATISTICS"))
        for r in rows:
            print(f"  {r['name'][:18]:<18} median={_fmt(r.get('median'))}")

    freq_cols = [s for s in summaries if s.frequencies is not None]
    if freq_cols:
        print(section(f"3. MOST FREQUENT VALUES (top {top})"))
        for s in freq_cols:
            modes = s.frequencies.modes()
            tie = f"  ({len(modes)} tied)" if len(modes) > 1 else ""
            print(
                f"\n  {s.name}  — cardinality {s.frequencies.cardinality():,}, "
                f"mode {_fmt(modes[0] if modes else None)}{tie}"
            )
            for value, count in s.frequencies.most_frequent(top):
                share = count / s.frequencies.total()
                print(f"    {str(value)[:40]:<40} {count:>10,}  {share:>6.1%}")
    print(f"\n{'=' * 76}\n")


def write_json(summaries: list[ColumnSummary], path: Path, *, ddof: int = 0) -> None:
    """Dump both the report rows and the mergeable state of every column."""
    payload = {
        "ddof": ddof,
        "columns": [s.as_row(ddof) for s in summaries],
        "state": [s.to_dict() for s in summaries],
    }
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(payload, indent=2, default=str), encoding="utf-8")


def load_json_state(path: Path) -> list[ColumnSummary]:
    """Rebuild column summaries from a file written by :func:`write_json`."""
    payload = json.loads(path.read_text(encoding="utf-8"))
    return [ColumnSummary.from_dict(d) for d in payload["state"]]


def _slug(name: str) -> str:
    return re.sub(r"[^A-Za-z0-9_.-]+", "_", name).strip("_") or "column"


def plot_frequencies(summaries: list[ColumnSummary], out_dir: Path, *, top: int = 10) -> list[Path]:
    """Save one horizontal bar chart of the top values per column.

    Columns summarised without frequencies, or with no values, are skipped.
    Returns the paths written.
    """
    out_dir.mkdir(parents=True, exist_ok=True)
    written: list[Path] = []
    for s in summaries:
        if s.frequencies is None or not len(s.frequencies):
            continue
        ranked = s.frequencies.most_frequent(top)
        labels = [str(v)[:30] for v, _ in ranked][::-1]
        counts = [c for _, c in ranked][::-1]

        fig, ax = plt.subplots(figsize=(8, max(2.5, 0.4 * len(ranked) + 1)))
        ax.barh(labels, counts, color=COLOR_BAR)
        ax.set_xlabel("Occurrences")
        ax.set_title(f"{s.name} — top {len(ranked)} of {s.frequencies.cardinality():,} values")
        ax.grid(axis="x", alpha=0.3)
        fig.tight_layout()

        path = out_dir / f"freq_{_slug(s.name)}.png"
        fig.savefig(path, dpi=PLOT_DPI)
        plt.close(fig)
        written.append(path)
    return written
