"""Shared defaults for the streamstats pipeline.

Values that can be overridden from the environment are read through
:func:`env_int` at the point of use, so a ``.env`` file loaded by the CLI
takes effect.
"""

import os
from pathlib import Path

# ── Chunking / parallelism ──────────────────────────────────────────────────
DEFAULT_CHUNK_SIZE = 10_000     # rows per chunk handed to a worker
DEFAULT_WORKERS = os.cpu_count() or 1

# ── Reporting ───────────────────────────────────────────────────────────────
DEFAULT_TOP_N = 10
PLOT_DPI = 120

# ── Redis partial store ─────────────────────────────────────────────────────
KEY_PREFIX = "streamstats"
JOBS_INDEX = f"{KEY_PREFIX}:jobs"

DOTENV_PATH = Path(".env")


def env_int(name: str, default: int) -> int:
    """Integer setting from the environment, *default* if unset or blank."""
    raw = os.environ.get(name, "").strip()
    return int(raw) if raw else default
