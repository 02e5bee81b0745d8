"""Chunked reading of delimited text files."""

from __future__ import annotations

import csv
from collections.abc import Iterator, Sequence
from pathlib import Path

Row = list[str | None]


def read_header(path: Path, delimiter: str = ",") -> list[str]:
    """Return the first row of *path*, or an empty list for an empty file."""
    with open(path, newline="", encoding="utf-8") as f:
        return next(csv.reader(f, delimiter=delimiter), [])


def resolve_columns(header: Sequence[str], selected: Sequence[str] | None) -> list[int]:
    """Map column selectors to zero-based indices.

    A selector is either a header name or a 1-based position.  With no
    selectors every column is used.
    """
    if not selected:
        return list(range(len(header)))
    indices: list[int] = []
    for sel in selected:
        if sel in header:
            indices.append(list(header).index(sel))
        elif sel.isdigit() and 1 <= int(sel) <= len(header):
            indices.append(int(sel) - 1)
        else:
            raise ValueError(f"unknown column {sel!r} (have: {', '.join(header)})")
    return indices


def column_names(header: Sequence[str], indices: Sequence[int], has_header: bool) -> list[str]:
    if has_header:
        return [header[i] for i in indices]
    return [str(i + 1) for i in indices]


def iter_chunks(
    path: Path,
    indices: Sequence[int],
    *,
    delimiter: str = ",",
    has_header: bool = True,
    chunk_size: int = 10_000,
) -> Iterator[list[Row]]:
    """Yield lists of at most *chunk_size* rows, projected onto *indices*.

    Cells missing from short rows come through as ``None``.
    """
    if chunk_size < 1:
        raise ValueError(f"chunk_size must be positive, got {chunk_size}")
    with open(path, newline="", encoding="utf-8") as f:
        reader = csv.reader(f, delimiter=delimiter)
        if has_header:
            next(reader, None)
        chunk: list[Row] = []
        for record in reader:
            if not record:
                continue
            chunk.append([record[i] if i < len(record) else None for i in indices])
            if len(chunk) >= chunk_size:
                yield chunk
                chunk = []
        if chunk:
            yield chunk
