"""Structured logging (structlog): console output for runs, JSON lines for files."""

from __future__ import annotations

import logging
import sys
from pathlib import Path

import structlog


def configure_structlog(verbose: bool = False) -> None:
    """Configure structlog for human-readable output on stderr.

    Call once at process startup.  ``verbose`` lowers the threshold to
    DEBUG, which logs every chunk submitted to and merged from the pool.
    """
    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.dev.ConsoleRenderer(colors=sys.stderr.isatty()),
        ],
        wrapper_class=structlog.make_filtering_bound_logger(
            logging.DEBUG if verbose else logging.INFO
        ),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(file=sys.stderr),
        cache_logger_on_first_use=True,
    )


def bind_run(**context: object) -> None:
    """Attach *context* (command, job id, ...) to every later log line."""
    structlog.contextvars.clear_contextvars()
    structlog.contextvars.bind_contextvars(**context)


def get_json_file_logger(log_path: Path) -> structlog.BoundLogger:
    """Return a logger that appends JSON lines to *log_path*.

    The logger is independent of the console configuration: it is backed
    by its own stdlib FileHandler and renders every event as one JSON object.
    """
    log_path.parent.mkdir(parents=True, exist_ok=True)
    handler = logging.FileHandler(str(log_path), mode="a")
    handler.setLevel(logging.DEBUG)

    backing = logging.getLogger(f"streamstats.file.{log_path.resolve()}")
    backing.handlers = [handler]
    backing.setLevel(logging.DEBUG)
    backing.propagate = False

    return structlog.wrap_logger(
        backing,
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.JSONRenderer(default=str),
        ],
    )
