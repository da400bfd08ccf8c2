# File: tablegen/models.py
"""
TableGen - Core Data Models
============================
Pydantic V2 models and enums shared by every stage of the pipeline:
Discovery → Introspection → Rendering → Writing.

The configuration model is frozen: one instance is built by the CLI (or by
library callers) and shared read-only across the discoverer and all workers.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import Enum, IntEnum
from typing import List, Optional, Tuple, Union

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    computed_field,
    field_validator,
    model_validator,
)

# ---------------------------------------------------------------------------
# Logger
# ---------------------------------------------------------------------------
logger: logging.Logger = logging.getLogger("tablegen.models")

# ---------------------------------------------------------------------------
# Enums - fixed sets used across the entire project
# ---------------------------------------------------------------------------


class DiscoveryMode(str, Enum):
    """How the discoverer produces table names."""

    ALL_TABLES = "all_tables"
    EXPLICIT_LIST = "explicit_list"


class TypeCode(IntEnum):
    """
    ANSI / X-Open SQL type codes.

    Numeric values match the JDBC ``java.sql.Types`` constants so that codes
    read from any ANSI metadata source line up with the mapping table.
    """

    BIT = -7
    TINYINT = -6
    SMALLINT = 5
    INTEGER = 4
    BIGINT = -5
    FLOAT = 6
    REAL = 7
    DOUBLE = 8
    NUMERIC = 2
    DECIMAL = 3
    CHAR = 1
    VARCHAR = 12
    LONGVARCHAR = -1
    DATE = 91
    TIME = 92
    TIMESTAMP = 93
    BINARY = -2
    VARBINARY = -3
    LONGVARBINARY = -4
    # NULL, OTHER, DISTINCT and BOOLEAN have no semantic mapping; they exist so
    # unsupported codes stay representable.
    NULL = 0
    OTHER = 1111
    JAVA_OBJECT = 2000
    DISTINCT = 2001
    STRUCT = 2002
    ARRAY = 2003
    BLOB = 2004
    CLOB = 2005
    REF = 2006
    BOOLEAN = 16


class SemanticType(str, Enum):
    """Language-neutral target type of a column."""

    TEXT = "text"
    DECIMAL = "decimal"
    BOOLEAN = "boolean"
    INT32 = "int32"
    INT64 = "int64"
    FLOAT32 = "float32"
    FLOAT64 = "float64"
    BYTES = "bytes"
    DATE = "date"
    TIME = "time"
    DATETIME = "datetime"
    CLOB = "clob"
    BLOB = "blob"
    ARRAY = "array"
    STRUCT = "struct"
    REF = "ref"
    OBJECT = "object"


class ArtifactKind(str, Enum):
    """Kinds of generated files (one of each per table)."""

    RECORD_TYPE = "record_type"
    MAPPING_DESCRIPTOR = "mapping_descriptor"


class Signal(Enum):
    """Control messages carried by the task queue next to table names."""

    DONE = "done"


# A queue message is either a table name or a control signal.
TableTask = Union[str, Signal]


class TableStatus(str, Enum):
    """Outcome of processing one table."""

    OK = "ok"
    SKIPPED = "skipped"


# ---------------------------------------------------------------------------
# Shared model configuration
# ---------------------------------------------------------------------------

_FROZEN_CONFIG: ConfigDict = ConfigDict(
    strict=False,
    populate_by_name=True,
    frozen=True,
    extra="forbid",
)


# ---------------------------------------------------------------------------
# Generation configuration
# ---------------------------------------------------------------------------


class GeneratorConfig(BaseModel):
    """
    Immutable settings for one generation run.

    Shared by reference between the discoverer and every worker; never
    mutated after construction.
    """

    model_config = _FROZEN_CONFIG

    mode: DiscoveryMode = Field(
        default=DiscoveryMode.EXPLICIT_LIST,
        description="Enumerate every table, or use the explicit list.",
    )
    tables: Tuple[str, ...] = Field(
        default=(),
        description="Table names processed in explicit-list mode, in order.",
    )
    namespace: str = Field(
        default="pojo",
        min_length=1,
        description="Dot-delimited package of the generated sources.",
    )
    output_dir: str = Field(
        default="out", min_length=1, description="Root output directory."
    )
    workers: int = Field(
        default=5, ge=1, description="Number of concurrent generator workers."
    )
    record_extension: str = Field(
        default=".java", description="File extension of record types."
    )
    mapping_extension: str = Field(
        default=".xml", description="File extension of mapping descriptors."
    )
    class_suffix: str = Field(
        default="",
        description="Suffix appended to the generated record type name.",
    )

    @field_validator("tables", mode="before")
    @classmethod
    def _clean_table_names(cls, v: object) -> Tuple[str, ...]:
        if v is None:
            return ()
        if isinstance(v, str):
            v = v.split(";")
        return tuple(name.strip() for name in v if name and name.strip())

    @field_validator("namespace", mode="before")
    @classmethod
    def _default_blank_namespace(cls, v: object) -> object:
        if v is None or (isinstance(v, str) and not v.strip()):
            return "pojo"
        return v.strip() if isinstance(v, str) else v

    @model_validator(mode="after")
    def _explicit_mode_needs_tables(self) -> "GeneratorConfig":
        if self.mode == DiscoveryMode.EXPLICIT_LIST and not self.tables:
            raise ValueError(
                'choose "all" or "tables" option with list of tables'
            )
        return self

    @property
    def all_tables(self) -> bool:
        return self.mode == DiscoveryMode.ALL_TABLES

    @classmethod
    def for_tables(cls, tables: Union[str, List[str]], **kwargs: object) -> "GeneratorConfig":
        """Build an explicit-list config from a list or a ``;``-delimited string."""
        return cls(mode=DiscoveryMode.EXPLICIT_LIST, tables=tables, **kwargs)

    @classmethod
    def for_all_tables(cls, **kwargs: object) -> "GeneratorConfig":
        return cls(mode=DiscoveryMode.ALL_TABLES, **kwargs)


# ---------------------------------------------------------------------------
# Column metadata
# ---------------------------------------------------------------------------


class ColumnMetadata(BaseModel):
    """
    Everything known about one result-set column.

    ``target_type`` and ``property_name`` are derived once, when the worker
    builds the column, and are never recomputed.
    """

    model_config = _FROZEN_CONFIG

    name: str = Field(..., min_length=1, description="Column name.")
    label: str = Field(default="", description="Display label.")
    type_code: int = Field(..., description="ANSI SQL type code.")
    type_name: str = Field(default="", description="Database type name.")
    precision: int = Field(default=0, ge=0)
    scale: int = Field(default=0)
    display_size: int = Field(default=0, ge=0)
    source_type_name: str = Field(
        default="", description="Declared source type (e.g. reflected class)."
    )
    table_name: str = Field(default="")
    schema_name: str = Field(default="")
    catalog_name: str = Field(default="")

    # Derived
    target_type: SemanticType = Field(..., description="Mapped semantic type.")
    property_name: str = Field(..., min_length=1, description="lowerCamel property.")

    def __repr__(self) -> str:
        return f"<Column {self.name} {self.type_name or self.type_code} -> {self.target_type.value}>"


# ---------------------------------------------------------------------------
# Generated artifacts
# ---------------------------------------------------------------------------


class GeneratedArtifact(BaseModel):
    """A rendered file, held in memory until the writer persists it."""

    model_config = _FROZEN_CONFIG

    kind: ArtifactKind
    base_name: str = Field(..., min_length=1)
    extension: str
    content: str

    @computed_field  # type: ignore[misc]
    @property
    def file_name(self) -> str:
        return f"{self.base_name}{self.extension}"


# ---------------------------------------------------------------------------
# Per-table outcome
# ---------------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class TableResult:
    """Result of one worker processing one table name."""

    table: str
    status: TableStatus
    paths: Tuple[str, ...] = ()
    reason: str = ""
    worker: str = ""

    @property
    def ok(self) -> bool:
        return self.status == TableStatus.OK

    @classmethod
    def success(cls, table: str, paths: List[str], worker: str = "") -> "TableResult":
        return cls(table=table, status=TableStatus.OK, paths=tuple(paths), worker=worker)

    @classmethod
    def skipped(cls, table: str, reason: str, worker: str = "") -> "TableResult":
        return cls(table=table, status=TableStatus.SKIPPED, reason=reason, worker=worker)


@dataclass(slots=True)
class WorkerOutcome:
    """Everything a single worker task reports back to the coordinator."""

    name: str
    results: List[TableResult] = field(default_factory=list)
    consumed_signals: int = 0
    error: Optional[str] = None


# ---------------------------------------------------------------------------
# Module-level exports
# ---------------------------------------------------------------------------

__all__: List[str] = [
    "DiscoveryMode",
    "TypeCode",
    "SemanticType",
    "ArtifactKind",
    "Signal",
    "TableTask",
    "TableStatus",
    "GeneratorConfig",
    "ColumnMetadata",
    "GeneratedArtifact",
    "TableResult",
    "WorkerOutcome",
]

logger.debug("tablegen.models loaded - %d public symbols.", len(__all__))
