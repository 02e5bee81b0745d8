"""Console status lines and report dividers.

Status lines go to stderr so the report on stdout can be piped or
redirected on its own.
"""

from __future__ import annotations

import sys


class C:
    """ANSI colour codes (no-op unless stderr is a tty)."""

    _tty = sys.stderr.isatty()
    RED = "\033[0;31m" if _tty else ""
    GREEN = "\033[0;32m" if _tty else ""
    CYAN = "\033[0;36m" if _tty else ""
    YELLOW = "\033[1;33m" if _tty else ""
    BOLD = "\033[1m" if _tty else ""
    NC = "\033[0m" if _tty else ""


def _status(tag: str, colour: str, msg: str) -> None:
    print(f"{colour}[{tag}]{C.NC} {msg}", file=sys.stderr)


def info(msg: str) -> None:
    _status("INFO", C.CYAN, msg)


def ok(msg: str) -> None:
    _status(" OK ", C.GREEN, msg)


def warn(msg: str) -> None:
    _status("WARN", C.YELLOW, msg)


def fail(msg: str, code: int = 1) -> None:
    """Print *msg* and exit with *code*."""
    _status("FAIL", C.RED, msg)
    sys.exit(code)


# ── Report dividers ──────────────────────────────────────────────────────────

WIDTH = 76


def rule(char: str = "─") -> str:
    return char * WIDTH


def header(title: str) -> str:
    """Double-ruled banner for a report's title."""
    return f"\n{rule('═')}\n  {title}\n{rule('═')}"


def section(title: str) -> str:
    return f"\n{rule()}\n  {title}\n{rule()}"
