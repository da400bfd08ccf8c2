# File: tablegen/utils.py
"""
TableGen - Utility Functions & Helpers
=======================================
Identifier transforms, file I/O and small formatting helpers used throughout
the generation pipeline.

- Name transforms are decorated with ``@lru_cache(maxsize=None)``: the same
  column names recur across tables and across runs of a worker pool.
- No external dependencies beyond the Python standard library.
"""

from __future__ import annotations

import functools
import logging
import time
from pathlib import Path
from typing import Iterable, List, Optional, Tuple

# ---------------------------------------------------------------------------
# Logger
# ---------------------------------------------------------------------------
logger: logging.Logger = logging.getLogger("tablegen.utils")

_DELIMITER: str = "_"


# ---------------------------------------------------------------------------
# Cached identifier transforms
# ---------------------------------------------------------------------------


@functools.lru_cache(maxsize=None)
def _capitalized_segments(identifier: str) -> Tuple[str, ...]:
    """
    Split *identifier* on ``_`` and capitalise every segment.

    Consecutive delimiters yield empty segments, so ``"A__B"`` becomes
    ``("A", "", "B")`` and joins back without a stray separator.
    """
    return tuple(
        seg[:1].upper() + seg[1:].lower() for seg in identifier.split(_DELIMITER)
    )


@functools.lru_cache(maxsize=None)
def to_type_name(identifier: str) -> str:
    """
    Convert a database identifier to an UpperCamel type / accessor name.

    Examples:
        >>> to_type_name("user_account")
        'UserAccount'
        >>> to_type_name("ACCOUNTS")
        'Accounts'
        >>> to_type_name("ORDER__LINE")
        'OrderLine'

    Already-camel input is lower-cased inside each segment
    (``"userName"`` → ``"Username"``); the transform is not idempotent.
    """
    if not identifier:
        return ""
    return "".join(_capitalized_segments(identifier))


@functools.lru_cache(maxsize=None)
def to_property_name(identifier: str) -> str:
    """
    Convert a database identifier to a lowerCamel property name.

    Examples:
        >>> to_property_name("USER_NAME")
        'userName'
        >>> to_property_name("ID")
        'id'
    """
    type_name: str = to_type_name(identifier)
    if not type_name:
        return ""
    return type_name[0].lower() + type_name[1:]


def split_qualified_name(table: str) -> Tuple[Optional[str], str]:
    """``"sales.ORDERS"`` → ``("sales", "ORDERS")``; bare names get schema None."""
    if "." in table:
        schema, _, bare = table.rpartition(".")
        return schema, bare
    return None, table


# ---------------------------------------------------------------------------
# Code formatting helpers
# ---------------------------------------------------------------------------


def indent_lines(lines: Iterable[str], level: int = 1, unit: str = "\t") -> List[str]:
    """Indent a sequence of lines, leaving blank lines untouched. O(n)."""
    prefix: str = unit * level
    return [prefix + line if line.strip() else line for line in lines]


def build_import_block(imports: Iterable[str]) -> str:
    """
    Build a sorted, de-duplicated block of Java import statements.

    Example:
        >>> build_import_block(["java.sql.Time", "java.math.BigDecimal", "java.sql.Time"])
        'import java.math.BigDecimal;\\nimport java.sql.Time;'
    """
    return "\n".join(f"import {name};" for name in sorted(set(imports)))


# ---------------------------------------------------------------------------
# File I/O helpers
# ---------------------------------------------------------------------------


def ensure_directory(path: Path) -> None:
    """Create directory (and parents) if it doesn't exist."""
    path.mkdir(parents=True, exist_ok=True)
    logger.debug("Ensured directory exists: %s", path)


def write_file(path: Path, content: str) -> int:
    """
    Create or truncate *path* and write *content* as UTF-8.

    Returns the number of bytes written.
    """
    encoded: bytes = content.encode("utf-8")
    with open(path, "wb") as fh:
        fh.write(encoded)

    logger.debug("Wrote %d bytes to %s", len(encoded), path)
    return len(encoded)


# ---------------------------------------------------------------------------
# Timer context manager
# ---------------------------------------------------------------------------


class Timer:
    """
    Simple context-manager timer for profiling pipeline steps.

    Usage:
        with Timer("discovery") as t:
            ...
        print(t.elapsed)
    """

    __slots__ = ("label", "start_time", "end_time", "elapsed")

    def __init__(self, label: str = "operation") -> None:
        self.label: str = label
        self.start_time: float = 0.0
        self.end_time: float = 0.0
        self.elapsed: float = 0.0

    def __enter__(self) -> "Timer":
        self.start_time = time.perf_counter()
        return self

    def __exit__(
        self,
        exc_type: Optional[type],
        exc_val: Optional[BaseException],
        exc_tb: Optional[object],
    ) -> None:
        self.end_time = time.perf_counter()
        self.elapsed = self.end_time - self.start_time
        logger.debug(
            "Timer [%s]: %.4f seconds",
            self.label,
            self.elapsed,
        )

    @property
    def elapsed_ms(self) -> int:
        """Elapsed milliseconds; live while the block is still running."""
        if self.end_time:
            return int(self.elapsed * 1000)
        return int((time.perf_counter() - self.start_time) * 1000)

    def __repr__(self) -> str:
        return f"<Timer {self.label}: {self.elapsed:.4f}s>"


# ---------------------------------------------------------------------------
# Module-level exports
# ---------------------------------------------------------------------------

__all__: List[str] = [
    "to_type_name",
    "to_property_name",
    "split_qualified_name",
    "indent_lines",
    "build_import_block",
    "ensure_directory",
    "write_file",
    "Timer",
]

logger.debug("tablegen.utils loaded - %d public symbols.", len(__all__))
