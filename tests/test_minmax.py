"""Tests for running extrema."""

from __future__ import annotations

import pytest

from streamstats.stats.errors import IncompatibleMerge
from streamstats.stats.minmax import MinMax


def test_minmax_tracks_extrema_and_count() -> None:
    mm = MinMax([1, 4, 2, 3, 10])
    assert mm.min() == 1
    assert mm.max() == 10
    assert len(mm) == 5
    assert str(mm) == "[1, 10]"


def test_empty_minmax_has_no_extrema() -> None:
    mm = MinMax()
    assert mm.min() is None
    assert mm.max() is None
    assert str(mm) == "N/A"


def test_nan_is_counted_but_never_an_extremum() -> None:
    mm = MinMax([float("nan"), 3.0, 1.0])
    assert len(mm) == 3
    assert mm.min() == 1.0
    assert mm.max() == 3.0


def test_works_on_any_ordered_values() -> None:
    mm = MinMax(["pear", "apple", "zucchini"])
    assert (mm.min(), mm.max()) == ("apple", "zucchini")


def test_merge() -> None:
    left, right = MinMax([5, 6]), MinMax([1, 9, 7])
    left.merge(right)
    assert (left.min(), left.max(), len(left)) == (1, 9, 5)

    empty = MinMax()
    empty.merge(MinMax([4]))
    assert (empty.min(), empty.max()) == (4, 4)

    left.merge(MinMax())
    assert (left.min(), left.max()) == (1, 9)


def test_merge_rejects_other_types() -> None:
    with pytest.raises(IncompatibleMerge):
        MinMax().merge([1, 2])
