"""Fan-out / reduce: summarise chunks on a worker pool, then merge the partials.

Each worker owns the accumulators it builds for its chunk; nothing is shared
while they run.  Completed partials are merged one by one on the calling
thread, so the reduction itself needs no locking.
"""

from __future__ import annotations

from collections import deque
from collections.abc import Iterable, Sequence
from concurrent.futures import Executor, Future, ProcessPoolExecutor, ThreadPoolExecutor

import numpy as np
import structlog

from streamstats.pipeline.reader import Row
from streamstats.stats.commute import merge_all, merge_pairwise
from streamstats.stats.online import OnlineStats
from streamstats.stats.summary import ColumnSummary


def new_summaries(
    names: Sequence[str], *, frequencies: bool = True, exact: bool = False
) -> list[ColumnSummary]:
    return [ColumnSummary(n, frequencies=frequencies, exact=exact) for n in names]


def summarize_chunk(
    names: Sequence[str],
    rows: Sequence[Row],
    frequencies: bool = True,
    exact: bool = False,
) -> list[ColumnSummary]:
    """Summarise one chunk of rows column by column (runs inside a worker)."""
    summaries = new_summaries(names, frequencies=frequencies, exact=exact)
    for row in rows:
        for summary, cell in zip(summaries, row):
            summary.add(cell)
    return summaries


def _make_pool(workers: int, processes: bool) -> Executor:
    if processes:
        return ProcessPoolExecutor(max_workers=workers)
    return ThreadPoolExecutor(max_workers=workers, thread_name_prefix="summarize")


def summarize_parallel(
    names: Sequence[str],
    chunks: Iterable[Sequence[Row]],
    *,
    workers: int = 1,
    processes: bool = False,
    frequencies: bool = True,
    exact: bool = False,
) -> list[ColumnSummary]:
    """Summarise *chunks* on a pool of *workers* and merge the results.

    At most ``2 * workers`` chunks are in flight at once, so the input is
    never fully materialised.  Partials are merged in input order, which
    keeps first-seen ordering (and so mode tie-breaks) identical to a
    sequential pass.
    """
    if workers < 1:
        raise ValueError(f"workers must be positive, got {workers}")
    log = structlog.get_logger("parallel")
    total = new_summaries(names, frequencies=frequencies, exact=exact)
    max_pending = 2 * workers
    submitted = merged = 0

    def _absorb(future: Future) -> None:
        nonlocal merged
        merge_pairwise(total, future.result())
        merged += 1
        log.debug("chunk_done", merged=merged, submitted=submitted)

    with _make_pool(workers, processes) as pool:
        pending: deque[Future] = deque()
        for rows in chunks:
            if len(pending) >= max_pending:
                _absorb(pending.popleft())
            pending.append(pool.submit(summarize_chunk, names, rows, frequencies, exact))
            submitted += 1
            log.debug("chunk_submitted", chunk=submitted, rows=len(rows))
        while pending:
            _absorb(pending.popleft())

    log.info("partials_merged", chunks=merged, columns=len(total), workers=workers)
    return total


def partition(values, parts: int) -> list[np.ndarray]:  # noqa: ANN001
    """Split *values* into *parts* nearly equal, contiguous arrays."""
    if parts < 1:
        raise ValueError(f"parts must be positive, got {parts}")
    return np.array_split(np.asarray(values, dtype=float), parts)


def parallel_online(values, parts: int, workers: int = 1) -> OnlineStats:  # noqa: ANN001
    """Mean/variance of an array computed as *parts* independent partials.

    Each partition is reduced with :meth:`OnlineStats.from_array` on a thread
    pool (numpy releases the GIL for the heavy lifting) and the partials are
    merged.  An empty input yields an empty accumulator.
    """
    with ThreadPoolExecutor(max_workers=workers) as pool:
        partials = list(pool.map(OnlineStats.from_array, partition(values, parts)))
    merged = merge_all(partials)
    return merged if merged is not None else OnlineStats()
