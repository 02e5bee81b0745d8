"""CLI entrypoints: ``summarize`` (files → report) and ``reduce`` (partials → report).

Architecture:
  1. Read each file sequentially in chunks of rows
  2. Summarise chunks on a worker pool (one set of accumulators per chunk)
  3. Merge the partials into one summary per column
  4. Report; optionally dump JSON, draw charts, or publish the partial to
     Redis so a later ``reduce`` can combine the work of several machines
"""

from __future__ import annotations

import argparse
import csv
import json
import os
import textwrap
from pathlib import Path

import redis
import structlog

from streamstats.common.console import fail, info, ok, warn
from streamstats.common.constants import (
    DEFAULT_CHUNK_SIZE,
    DEFAULT_TOP_N,
    DEFAULT_WORKERS,
    DOTENV_PATH,
    env_int,
)
from streamstats.common.logging import bind_run, configure_structlog, get_json_file_logger
from streamstats.common.redis import clear_job, get_partials, store_partial
from streamstats.pipeline.parallel import summarize_parallel
from streamstats.pipeline.reader import column_names, iter_chunks, read_header, resolve_columns
from streamstats.pipeline.report import (
    load_json_state,
    plot_frequencies,
    print_report,
    write_json,
)
from streamstats.stats.commute import merge_pairwise
from streamstats.stats.errors import IncompatibleMerge
from streamstats.stats.summary import ColumnSummary


def _load_dotenv(env_path: Path = DOTENV_PATH) -> None:
    """Load variables from a .env file into os.environ (no overwrite)."""
    if not env_path.is_file():
        return
    with open(env_path) as f:
        for line in f:
            line = line.strip()
            if not line or line.startswith("#") or "=" not in line:
                continue
            key, _, value = line.partition("=")
            key = key.strip()
            value = value.strip().strip("\"'")
            os.environ.setdefault(key, value)


def _add_output_args(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "--ddof", type=int, default=0,
        help="Delta degrees of freedom for variance/σ (0 = population, 1 = sample). Default: 0",
    )
    parser.add_argument(
        "--top", type=int, default=None,
        help=f"Most frequent values to list per column. Default: {DEFAULT_TOP_N}",
    )
    parser.add_argument("--plot", metavar="DIR", default=None, help="Write frequency charts to DIR")
    parser.add_argument("-o", "--output", default=None, help="Path to write the JSON summary")
    parser.add_argument("--log-file", default=None, help="Append JSON-lines logs to this file")
    parser.add_argument("-v", "--verbose", action="store_true", help="Log every chunk")


def _finish(
    summaries: list[ColumnSummary], args: argparse.Namespace, title: str
) -> None:
    """Shared tail of both commands: report, JSON, charts, file log."""
    top = args.top if args.top is not None else env_int("STREAMSTATS_TOP", DEFAULT_TOP_N)
    print_report(summaries, title=title, ddof=args.ddof, top=top)

    if args.output:
        write_json(summaries, Path(args.output), ddof=args.ddof)
        ok(f"JSON summary → {args.output}")

    if args.plot:
        charts = plot_frequencies(summaries, Path(args.plot), top=top)
        ok(f"{len(charts)} chart(s) → {args.plot}")

    if args.log_file:
        flog = get_json_file_logger(Path(args.log_file))
        for s in summaries:
            flog.info("column_summary", title=title, **s.as_row(args.ddof))


def main(argv: list[str] | None = None) -> None:
    parser = argparse.ArgumentParser(
        prog="summarize",
        description="Streaming per-column statistics for delimited text files.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=textwrap.dedent("""\
            examples:
              summarize data.csv                        # every column
              summarize data.csv -c price -c 3 --ddof 1 # two columns, sample σ
              summarize part-*.csv --workers 8 --processes
              summarize shard.csv --publish nightly     # partial for `reduce nightly`
        """),
    )
    parser.add_argument("files", nargs="+", help="Delimited text files sharing one layout")
    parser.add_argument(
        "-c", "--column", action="append", default=None,
        help="Column name or 1-based index (repeatable). Default: all columns",
    )
    parser.add_argument("-d", "--delimiter", default=",", help="Field delimiter. Default: ','")
    parser.add_argument("--no-header", action="store_true", help="First row is data")
    parser.add_argument("--workers", type=int, default=None, help="Worker pool size")
    parser.add_argument(
        "--processes", action="store_true",
        help="Use a process pool instead of threads",
    )
    parser.add_argument("--chunk-size", type=int, default=None, help="Rows per chunk")
    parser.add_argument("--exact", action="store_true", help="Keep values for an exact median")
    parser.add_argument(
        "--no-frequencies", action="store_true",
        help="Skip value counting (constant memory per column)",
    )
    parser.add_argument("--publish", metavar="JOB", default=None, help="Store the result in Redis under JOB")
    _add_output_args(parser)
    args = parser.parse_args(argv)
    if args.ddof < 0:
        parser.error("--ddof must be non-negative.")

    _load_dotenv()
    configure_structlog(args.verbose)
    bind_run(command="summarize", job=args.publish)
    log = structlog.get_logger("summarize")

    workers = args.workers if args.workers is not None else env_int(
        "STREAMSTATS_WORKERS", DEFAULT_WORKERS
    )
    chunk_size = args.chunk_size if args.chunk_size is not None else env_int(
        "STREAMSTATS_CHUNK_SIZE", DEFAULT_CHUNK_SIZE
    )
    if workers < 1 or chunk_size < 1:
        fail("--workers and --chunk-size must be positive.")

    names: list[str] | None = None
    total: list[ColumnSummary] = []
    for file in args.files:
        path = Path(file)
        if not path.is_file():
            fail(f"No such file: {path}")
        try:
            header = read_header(path, args.delimiter)
        except (OSError, UnicodeDecodeError, csv.Error) as exc:
            fail(f"Cannot read {path}: {exc}")
        try:
            indices = resolve_columns(header, args.column)
        except ValueError as exc:
            fail(f"{path}: {exc}")
        file_names = column_names(header, indices, not args.no_header)
        if names is not None and file_names != names:
            fail(f"{path}: columns {file_names} do not match {names}")
        names = file_names

        info(f"Summarising {path} ({len(names)} column(s), {workers} worker(s)) ...")
        chunks = iter_chunks(
            path, indices,
            delimiter=args.delimiter,
            has_header=not args.no_header,
            chunk_size=chunk_size,
        )
        try:
            part = summarize_parallel(
                names, chunks,
                workers=workers,
                processes=args.processes,
                frequencies=not args.no_frequencies,
                exact=args.exact,
            )
        except (OSError, UnicodeDecodeError, csv.Error) as exc:
            fail(f"Cannot read {path}: {exc}")
        total = merge_pairwise(total, part) if total else part
        rows = len(part[0]) + part[0].nulls if part else 0
        log.info("file_done", file=str(path), rows=rows)

    _finish(total, args, "STREAM SUMMARY")

    if args.publish:
        try:
            n = store_partial(args.publish, [s.to_dict() for s in total])
            ok(f"Published partial #{n} for job '{args.publish}'.")
        except redis.RedisError as exc:
            warn(f"Redis publish failed (non-fatal): {exc}")


def reduce_main(argv: list[str] | None = None) -> None:
    parser = argparse.ArgumentParser(
        prog="reduce",
        description="Merge partial summaries (from Redis and/or JSON files) into one report.",
        epilog="Redis: %(prog)s JOB  |  Files: %(prog)s --json a.json --json b.json",
    )
    parser.add_argument("job", nargs="?", default=None, help="Job id used with `summarize --publish`")
    parser.add_argument(
        "--json", action="append", default=[], metavar="FILE",
        help="JSON summary written by `summarize -o` (repeatable)",
    )
    parser.add_argument("--clear", action="store_true", help="Delete the job's partials after merging")
    _add_output_args(parser)
    args = parser.parse_args(argv)
    if args.ddof < 0:
        parser.error("--ddof must be non-negative.")

    if not args.job and not args.json:
        parser.error("Provide a JOB id, --json FILE, or both.")

    _load_dotenv()
    configure_structlog(args.verbose)
    bind_run(command="reduce", job=args.job)
    log = structlog.get_logger("reduce")

    partials: list[list[ColumnSummary]] = []
    if args.job:
        try:
            stored = get_partials(args.job)
        except redis.RedisError as exc:
            fail(f"Cannot read partials for job '{args.job}': {exc}")
        partials.extend([ColumnSummary.from_dict(d) for d in p] for p in stored)
        info(f"Job '{args.job}': {len(stored)} partial(s) in Redis.")
    for file in args.json:
        try:
            partials.append(load_json_state(Path(file)))
        except (OSError, json.JSONDecodeError, UnicodeDecodeError, KeyError, TypeError, ValueError) as exc:
            fail(f"Cannot load partial {file}: {exc}")

    if not partials:
        fail("No partials to merge.")

    total = partials[0]
    for part in partials[1:]:
        try:
            merge_pairwise(total, part)
        except IncompatibleMerge as exc:
            fail(f"Partials do not line up: {exc}")
    log.info("partials_reduced", partials=len(partials), columns=len(total))

    _finish(total, args, f"REDUCED SUMMARY — {len(partials)} PARTIAL(S)")

    if args.job and args.clear:
        clear_job(args.job)
        ok(f"Job '{args.job}' cleared.")
