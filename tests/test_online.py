"""Tests for the Welford accumulator and its parallel merge."""

from __future__ import annotations

import math
import random

import numpy as np
import pytest

from streamstats.stats.commute import merge_all
from streamstats.stats.errors import EmptyInput, IncompatibleMerge, InsufficientSamples
from streamstats.stats.frequency import Frequencies
from streamstats.stats.online import OnlineStats, mean, stddev, variance

TEXTBOOK = [2.0, 4.0, 4.0, 4.0, 5.0, 5.0, 7.0, 9.0]


def test_textbook_example_mean_and_population_stddev() -> None:
    """The classic eight-sample example has mean 5 and population σ 2."""

    acc = OnlineStats.of(TEXTBOOK)
    assert acc.mean() == pytest.approx(5.0)
    assert acc.stddev() == pytest.approx(2.0)
    assert acc.variance() == pytest.approx(4.0)
    assert len(acc) == 8


def test_push_is_an_alias_for_add() -> None:
    acc = OnlineStats()
    for v in TEXTBOOK:
        acc.push(v)
    assert acc.mean() == pytest.approx(5.0)


def test_matches_two_pass_reference() -> None:
    """Streaming moments agree with numpy's two-pass computation."""

    rng = random.Random(7)
    values = [rng.uniform(-1e3, 1e3) for _ in range(500)]
    acc = OnlineStats.of(values)

    assert acc.mean() == pytest.approx(sum(values) / len(values))
    assert acc.stddev() == pytest.approx(float(np.std(values)))
    assert acc.stddev(ddof=1) == pytest.approx(float(np.std(values, ddof=1)))


def test_large_offset_stays_stable() -> None:
    """A huge common offset does not destroy the variance."""

    acc = OnlineStats.of([1e9 + 4, 1e9 + 7, 1e9 + 13, 1e9 + 16])
    assert acc.variance(ddof=1) == pytest.approx(30.0)


def test_empty_queries_raise_empty_input() -> None:
    acc = OnlineStats()
    with pytest.raises(EmptyInput):
        acc.mean()
    with pytest.raises(EmptyInput):
        acc.variance()
    with pytest.raises(EmptyInput):
        acc.stddev(ddof=1)


def test_sample_variance_needs_two_observations() -> None:
    """One sample has a population variance of zero but no sample variance."""

    acc = OnlineStats.of([3.5])
    assert acc.variance() == 0.0
    with pytest.raises(InsufficientSamples) as excinfo:
        acc.variance(ddof=1)
    assert excinfo.value.count == 1
    assert excinfo.value.ddof == 1


def test_negative_ddof_is_rejected() -> None:
    with pytest.raises(ValueError):
        OnlineStats.of([1.0, 2.0]).variance(ddof=-1)


def test_merge_of_halves_equals_whole() -> None:
    """Merging [1, 2, 3] with [2, 4, 6] matches one pass over all six."""

    expected = OnlineStats.of([1, 2, 3, 2, 4, 6])
    got = OnlineStats.of([1, 2, 3])
    got.merge(OnlineStats.of([2, 4, 6]))

    assert len(got) == 6
    assert got.mean() == pytest.approx(expected.mean())
    assert got.stddev() == pytest.approx(expected.stddev())


def test_merge_many_equals_whole() -> None:
    expected = OnlineStats.of([1, 2, 3, 2, 4, 6, 3, 6, 9])
    parts = [OnlineStats.of([1, 2, 3]), OnlineStats.of([2, 4, 6]), OnlineStats.of([3, 6, 9])]

    got = merge_all(parts)
    assert got is not None
    assert got.stddev() == pytest.approx(expected.stddev())
    assert len(parts[0]) == 3


def test_random_partitions_merge_to_the_whole() -> None:
    """Any split of the data, merged in any order, gives the same moments."""

    rng = random.Random(42)
    values = [rng.gauss(50.0, 12.0) for _ in range(300)]
    whole = OnlineStats.of(values)

    for _ in range(25):
        cuts = sorted(rng.sample(range(1, len(values)), rng.randint(1, 8)))
        bounds = [0, *cuts, len(values)]
        parts = [OnlineStats.of(values[a:b]) for a, b in zip(bounds, bounds[1:])]
        rng.shuffle(parts)
        merged = merge_all(parts)

        assert merged is not None
        assert len(merged) == len(whole)
        assert merged.mean() == pytest.approx(whole.mean(), rel=1e-9)
        assert merged.variance(ddof=1) == pytest.approx(whole.variance(ddof=1), rel=1e-9)


def test_merge_with_empty_is_identity() -> None:
    acc = OnlineStats.of(TEXTBOOK)
    acc.merge(OnlineStats())
    assert acc.mean() == pytest.approx(5.0)
    assert acc.stddev() == pytest.approx(2.0)

    empty = OnlineStats()
    empty.merge(OnlineStats.of(TEXTBOOK))
    assert len(empty) == 8
    assert empty.stddev() == pytest.approx(2.0)


def test_merge_rejects_other_accumulators() -> None:
    with pytest.raises(IncompatibleMerge):
        OnlineStats().merge(Frequencies([1]))


def test_from_array_matches_incremental() -> None:
    values = np.linspace(-3.0, 11.0, 57)
    batch = OnlineStats.from_array(values)
    incremental = OnlineStats.of(values.tolist())

    assert len(batch) == len(incremental)
    assert batch.mean() == pytest.approx(incremental.mean())
    assert batch.variance() == pytest.approx(incremental.variance())
    assert len(OnlineStats.from_array([])) == 0


def test_non_finite_input_propagates() -> None:
    acc = OnlineStats.of([1.0, float("nan"), 3.0])
    assert math.isnan(acc.mean())

    acc = OnlineStats.of([1.0, float("inf")])
    assert math.isinf(acc.mean())


def test_nulls_are_tallied_but_excluded() -> None:
    acc = OnlineStats.of([1.0, 3.0])
    acc.add_null()
    acc.add_null()
    assert acc.nulls == 2
    assert len(acc) == 2
    assert acc.mean() == pytest.approx(2.0)

    other = OnlineStats()
    other.add_null()
    acc.merge(other)
    assert acc.nulls == 3


def test_clear_and_copy() -> None:
    acc = OnlineStats.of(TEXTBOOK)
    dup = acc.copy()
    acc.clear()

    assert len(acc) == 0
    with pytest.raises(EmptyInput):
        acc.mean()
    assert dup.mean() == pytest.approx(5.0)


def test_str_shows_mean_and_stddev() -> None:
    assert str(OnlineStats.of(TEXTBOOK)) == "5 +/- 2"
    assert str(OnlineStats()) == "N/A"


def test_dict_state_survives_and_keeps_merging() -> None:
    left = OnlineStats.from_dict(OnlineStats.of([1, 2, 3]).to_dict())
    left.merge(OnlineStats.from_dict(OnlineStats.of([2, 4, 6]).to_dict()))
    assert left.stddev() == pytest.approx(OnlineStats.of([1, 2, 3, 2, 4, 6]).stddev())

    with pytest.raises(IncompatibleMerge):
        OnlineStats.from_dict({"kind": "frequency", "counts": []})


def test_stream_helpers() -> None:
    assert mean(iter(TEXTBOOK)) == pytest.approx(5.0)
    assert variance(TEXTBOOK) == pytest.approx(4.0)
    assert stddev(TEXTBOOK, ddof=1) == pytest.approx(float(np.std(TEXTBOOK, ddof=1)))
    with pytest.raises(EmptyInput):
        mean([])
