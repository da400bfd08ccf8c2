# File: tablegen/typemap.py
"""
TableGen - Type Mapping
========================

Maps ANSI SQL type codes (plus precision and scale) to ``SemanticType`` and
semantic types to the Java names and imports used by the record template.

All lookup tables are built once at import and exposed read-only through
``MappingProxyType``.
"""

from __future__ import annotations

import logging
from types import MappingProxyType
from typing import List, Mapping, Optional

from tablegen.exceptions import UnsupportedTypeError
from tablegen.models import SemanticType, TypeCode

# ---------------------------------------------------------------------------
# Logger
# ---------------------------------------------------------------------------
logger: logging.Logger = logging.getLogger("tablegen.typemap")

# ---------------------------------------------------------------------------
# Lookup tables
# ---------------------------------------------------------------------------

BASE_TYPES: Mapping[int, SemanticType] = MappingProxyType({
    TypeCode.CHAR: SemanticType.TEXT,
    TypeCode.VARCHAR: SemanticType.TEXT,
    TypeCode.LONGVARCHAR: SemanticType.TEXT,
    TypeCode.NUMERIC: SemanticType.DECIMAL,
    TypeCode.DECIMAL: SemanticType.DECIMAL,
    TypeCode.BIT: SemanticType.BOOLEAN,
    TypeCode.TINYINT: SemanticType.INT32,
    TypeCode.SMALLINT: SemanticType.INT32,
    TypeCode.INTEGER: SemanticType.INT32,
    TypeCode.BIGINT: SemanticType.INT64,
    TypeCode.REAL: SemanticType.FLOAT32,
    TypeCode.FLOAT: SemanticType.FLOAT64,
    TypeCode.DOUBLE: SemanticType.FLOAT64,
    TypeCode.BINARY: SemanticType.BYTES,
    TypeCode.VARBINARY: SemanticType.BYTES,
    TypeCode.LONGVARBINARY: SemanticType.BYTES,
    TypeCode.DATE: SemanticType.DATE,
    TypeCode.TIME: SemanticType.TIME,
    TypeCode.TIMESTAMP: SemanticType.DATETIME,
    TypeCode.CLOB: SemanticType.CLOB,
    TypeCode.BLOB: SemanticType.BLOB,
    TypeCode.ARRAY: SemanticType.ARRAY,
    TypeCode.STRUCT: SemanticType.STRUCT,
    TypeCode.REF: SemanticType.REF,
    TypeCode.JAVA_OBJECT: SemanticType.OBJECT,
})

JAVA_TYPES: Mapping[SemanticType, str] = MappingProxyType({
    SemanticType.TEXT: "String",
    SemanticType.DECIMAL: "BigDecimal",
    SemanticType.BOOLEAN: "Boolean",
    SemanticType.INT32: "Integer",
    SemanticType.INT64: "Long",
    SemanticType.FLOAT32: "Float",
    SemanticType.FLOAT64: "Double",
    SemanticType.BYTES: "byte[]",
    SemanticType.DATE: "Date",
    SemanticType.TIME: "Time",
    SemanticType.DATETIME: "Timestamp",
    SemanticType.CLOB: "Clob",
    SemanticType.BLOB: "Blob",
    SemanticType.ARRAY: "Array",
    SemanticType.STRUCT: "Struct",
    SemanticType.REF: "Ref",
    SemanticType.OBJECT: "Object",
})

# Only types outside java.lang need an import line.
JAVA_IMPORTS: Mapping[SemanticType, str] = MappingProxyType({
    SemanticType.DECIMAL: "java.math.BigDecimal",
    SemanticType.DATE: "java.util.Date",
    SemanticType.TIME: "java.sql.Time",
    SemanticType.DATETIME: "java.sql.Timestamp",
    SemanticType.CLOB: "java.sql.Clob",
    SemanticType.BLOB: "java.sql.Blob",
    SemanticType.ARRAY: "java.sql.Array",
    SemanticType.STRUCT: "java.sql.Struct",
    SemanticType.REF: "java.sql.Ref",
})


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------


def map_type(
    type_code: int,
    precision: int = 0,
    scale: int = 0,
    *,
    column: Optional[str] = None,
) -> SemanticType:
    """
    Map a SQL type code to its semantic type.

    NUMERIC columns get two overrides, checked in order before the base
    table: ``NUMERIC(1,0)`` is a boolean flag, any other ``NUMERIC(p,0)`` is a
    64-bit integer.

    Raises:
        UnsupportedTypeError: if *type_code* is not in the mapping table.
    """
    base: Optional[SemanticType] = BASE_TYPES.get(type_code)
    if base is None:
        raise UnsupportedTypeError(type_code, column)

    if type_code == TypeCode.NUMERIC:
        if precision == 1 and scale == 0:
            return SemanticType.BOOLEAN
        if scale == 0:
            return SemanticType.INT64

    return base


def java_type(semantic: SemanticType) -> str:
    """Java type name used for fields and accessors."""
    return JAVA_TYPES[semantic]


def java_import(semantic: SemanticType) -> Optional[str]:
    """Fully-qualified import needed by *semantic*, or None."""
    return JAVA_IMPORTS.get(semantic)


def supported_type_codes() -> List[int]:
    return sorted(BASE_TYPES)


__all__: List[str] = [
    "BASE_TYPES",
    "JAVA_TYPES",
    "JAVA_IMPORTS",
    "map_type",
    "java_type",
    "java_import",
    "supported_type_codes",
]

logger.debug("tablegen.typemap loaded - %d supported type codes.", len(BASE_TYPES))
