# File: tablegen/exceptions.py
"""
TableGen - Error Taxonomy
==========================

Run-level failures (bad configuration, no database connection) are raised
before the pipeline starts and abort the run.  Discovery failures degrade
to "zero tables".  Every ``TableError`` is confined to one table: the worker
logs it, records a skipped result and moves on to the next queue item.
"""

from __future__ import annotations

from typing import List, Optional


class TableGenError(Exception):
    """Base class for every error raised by tablegen."""


# ---------------------------------------------------------------------------
# Run-level errors
# ---------------------------------------------------------------------------


class ConfigurationError(TableGenError):
    """Invalid or incomplete configuration; raised before connecting."""


class CredentialsError(ConfigurationError):
    """The credentials file is missing, unreadable or malformed."""


class DatabaseConnectionError(TableGenError):
    """The database could not be reached; the pipeline never starts."""


class DiscoveryError(TableGenError):
    """Schema enumeration failed."""


# ---------------------------------------------------------------------------
# Per-table errors
# ---------------------------------------------------------------------------


class TableError(TableGenError):
    """An error scoped to a single table."""

    def __init__(self, message: str, table: Optional[str] = None) -> None:
        super().__init__(message)
        self.message: str = message
        self.table: Optional[str] = table

    def __str__(self) -> str:
        return self.message


class IntrospectionError(TableError):
    """Column metadata could not be read."""


class NoColumnsFoundError(TableError):
    """The metadata-only query returned no column descriptors."""

    def __init__(self, table: Optional[str] = None) -> None:
        super().__init__("no columns found in table", table)


class UnsupportedTypeError(TableError):
    """A column's type code has no semantic mapping."""

    def __init__(self, type_code: int, column: Optional[str] = None) -> None:
        where: str = f" (column {column})" if column else ""
        super().__init__(f"unsupported type code {type_code}{where}")
        self.type_code: int = type_code
        self.column: Optional[str] = column


class RenderError(TableError):
    """An artifact could not be rendered."""


class WriteFailedError(TableError):
    """An artifact could not be written to disk."""


__all__: List[str] = [
    "TableGenError",
    "ConfigurationError",
    "CredentialsError",
    "DatabaseConnectionError",
    "DiscoveryError",
    "TableError",
    "IntrospectionError",
    "NoColumnsFoundError",
    "UnsupportedTypeError",
    "RenderError",
    "WriteFailedError",
]
