# File: tablegen/introspection.py
"""
TableGen - Schema Introspection
================================

SQLAlchemy-backed access to the live database:

    - ``list_tables()`` - every object of kind "table" (ANSI catalog call
      through ``Inspector.get_table_names``).
    - ``describe(table)`` - runs the metadata-only query
      ``SELECT * FROM <table> WHERE 1>2`` to obtain the ordered column
      descriptors, then resolves each column's SQL type through reflection
      and normalises it to an ANSI ``TypeCode``.

Every call checks a connection out of the engine's pool and returns it when
done, so concurrent workers never share a DBAPI connection.
"""

from __future__ import annotations

import logging
import re
from typing import Any, Dict, List, Mapping, Optional, Protocol, Sequence, Tuple

from sqlalchemy import inspect as sa_inspect
from sqlalchemy import text
from sqlalchemy.engine import Connection, Engine
from sqlalchemy.engine.reflection import Inspector
from sqlalchemy.exc import CompileError, NoSuchTableError, SQLAlchemyError
from sqlalchemy.types import TypeEngine

from tablegen.exceptions import (
    DiscoveryError,
    IntrospectionError,
    NoColumnsFoundError,
    UnsupportedTypeError,
)
from tablegen.models import ColumnMetadata, TypeCode
from tablegen.typemap import map_type
from tablegen.utils import split_qualified_name, to_property_name

# ---------------------------------------------------------------------------
# Logger
# ---------------------------------------------------------------------------
logger: logging.Logger = logging.getLogger("tablegen.introspection")

# ---------------------------------------------------------------------------
# Constants
# ---------------------------------------------------------------------------

METADATA_QUERY: str = "SELECT * FROM {table} WHERE 1>2"

# Names go into the query verbatim so the database applies its own case
# folding; only plain or schema-qualified identifiers are accepted.
_PLAIN_NAME_RE: re.Pattern[str] = re.compile(
    r"^[A-Za-z_][A-Za-z0-9_$#]*(\.[A-Za-z_][A-Za-z0-9_$#]*){0,2}$"
)

# SQLAlchemy ``__visit_name__`` (upper-cased) → ANSI type code.  Looked up
# along the type's MRO so dialect-specific subclasses resolve to their
# generic ancestor.
_VISIT_NAME_CODES: Mapping[str, TypeCode] = {
    "CHAR": TypeCode.CHAR,
    "NCHAR": TypeCode.CHAR,
    "VARCHAR": TypeCode.VARCHAR,
    "NVARCHAR": TypeCode.VARCHAR,
    "STRING": TypeCode.VARCHAR,
    "UNICODE": TypeCode.VARCHAR,
    "TEXT": TypeCode.LONGVARCHAR,
    "UNICODE_TEXT": TypeCode.LONGVARCHAR,
    "CLOB": TypeCode.CLOB,
    "NUMERIC": TypeCode.NUMERIC,
    "DECIMAL": TypeCode.DECIMAL,
    "BOOLEAN": TypeCode.BIT,
    "BIT": TypeCode.BIT,
    "TINYINT": TypeCode.TINYINT,
    "SMALLINT": TypeCode.SMALLINT,
    "SMALL_INTEGER": TypeCode.SMALLINT,
    "INTEGER": TypeCode.INTEGER,
    "INT": TypeCode.INTEGER,
    "BIGINT": TypeCode.BIGINT,
    "BIG_INTEGER": TypeCode.BIGINT,
    "REAL": TypeCode.REAL,
    "FLOAT": TypeCode.FLOAT,
    "DOUBLE": TypeCode.DOUBLE,
    "DOUBLE_PRECISION": TypeCode.DOUBLE,
    "BINARY": TypeCode.BINARY,
    "VARBINARY": TypeCode.VARBINARY,
    "LARGE_BINARY": TypeCode.LONGVARBINARY,
    "BYTEA": TypeCode.LONGVARBINARY,
    "BLOB": TypeCode.BLOB,
    "DATE": TypeCode.DATE,
    "TIME": TypeCode.TIME,
    "DATETIME": TypeCode.TIMESTAMP,
    "TIMESTAMP": TypeCode.TIMESTAMP,
    "ARRAY": TypeCode.ARRAY,
}

_TEXTUAL_CODES = frozenset({TypeCode.CHAR, TypeCode.VARCHAR, TypeCode.LONGVARCHAR})


# ---------------------------------------------------------------------------
# Introspector protocol
# ---------------------------------------------------------------------------


class Introspector(Protocol):
    """What the discoverer and workers need from the database."""

    def list_tables(self) -> List[str]:
        ...

    def describe(self, table: str) -> List[ColumnMetadata]:
        ...


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def type_code_for(sa_type: TypeEngine[Any]) -> int:
    """Normalise a reflected SQLAlchemy type to an ANSI type code."""
    for klass in type(sa_type).__mro__:
        visit_name: Optional[str] = klass.__dict__.get("__visit_name__")
        if visit_name:
            code: Optional[TypeCode] = _VISIT_NAME_CODES.get(visit_name.upper())
            if code is not None:
                return code
    return TypeCode.OTHER


def _type_name(sa_type: TypeEngine[Any], conn: Connection) -> str:
    try:
        return sa_type.compile(dialect=conn.dialect)
    except CompileError:
        return type(sa_type).__name__.upper()


def _int_or_zero(value: Any) -> int:
    return value if isinstance(value, int) and not isinstance(value, bool) else 0


def _db_message(exc: SQLAlchemyError) -> str:
    """First line of the driver's message, without SQLAlchemy's SQL echo."""
    source: BaseException = getattr(exc, "orig", None) or exc
    message: str = str(source).strip()
    return message.splitlines()[0] if message else type(source).__name__


def reflect_columns(
    inspector: Inspector, table: str, schema: Optional[str]
) -> Tuple[str, List[Dict[str, Any]]]:
    """
    Reflected columns of *table*, plus the name the catalog stores it under.

    The metadata query lets the database fold identifier case, reflection
    does not: ``ACCOUNTS`` finds ``accounts`` on PostgreSQL only through
    the fallback, which matches the name case-insensitively against the
    catalog's tables and views.

    Raises:
        NoSuchTableError: no catalog entry matches, or the match is ambiguous.
    """
    try:
        return table, list(inspector.get_columns(table, schema=schema))
    except NoSuchTableError:
        candidates: List[str] = list(inspector.get_table_names(schema=schema))
        candidates.extend(inspector.get_view_names(schema=schema))
        matches: List[str] = [
            name for name in candidates
            if name.lower() == table.lower() and name != table
        ]
        if len(matches) != 1:
            raise
        logger.debug("Table %s resolved to catalog name %s.", table, matches[0])
        return matches[0], list(inspector.get_columns(matches[0], schema=schema))


def build_column(
    *,
    name: str,
    type_code: int,
    precision: int = 0,
    scale: int = 0,
    label: str = "",
    type_name: str = "",
    display_size: int = 0,
    source_type_name: str = "",
    table_name: str = "",
    schema_name: str = "",
    catalog_name: str = "",
) -> ColumnMetadata:
    """
    Build a ``ColumnMetadata`` and derive its target type and property name.

    Raises:
        UnsupportedTypeError: *type_code* has no semantic mapping.
    """
    target_type = map_type(type_code, precision, scale, column=name)
    return ColumnMetadata(
        name=name,
        label=label or name,
        type_code=int(type_code),
        type_name=type_name,
        precision=max(precision, 0),
        scale=scale,
        display_size=max(display_size, 0),
        source_type_name=source_type_name,
        table_name=table_name,
        schema_name=schema_name,
        catalog_name=catalog_name,
        target_type=target_type,
        property_name=to_property_name(name) or name,
    )


# ---------------------------------------------------------------------------
# SQLAlchemy introspector
# ---------------------------------------------------------------------------


class SQLAlchemyIntrospector:
    """
    Reads table names and column metadata through an SQLAlchemy ``Engine``.

    The engine is a connection pool: each method checks out its own
    connection, so one instance may be shared by every worker thread.
    """

    def __init__(self, engine: Engine) -> None:
        self._engine: Engine = engine

    @property
    def engine(self) -> Engine:
        return self._engine

    # -----------------------------------------------------------------
    # Discovery
    # -----------------------------------------------------------------

    def list_tables(self) -> List[str]:
        """
        Names of every table visible in the default schema.

        Raises:
            DiscoveryError: the catalog query failed.
        """
        try:
            with self._engine.connect() as conn:
                names: List[str] = list(sa_inspect(conn).get_table_names())
        except SQLAlchemyError as exc:
            raise DiscoveryError(_db_message(exc)) from exc
        logger.debug("Catalog lists %d tables.", len(names))
        return names

    # -----------------------------------------------------------------
    # Column metadata
    # -----------------------------------------------------------------

    @staticmethod
    def metadata_query(table: str) -> str:
        """
        Raises:
            IntrospectionError: *table* is not a plain or schema-qualified name.
        """
        if not _PLAIN_NAME_RE.match(table):
            raise IntrospectionError(
                f"not a plain or schema-qualified table name: {table}", table
            )
        return METADATA_QUERY.format(table=table)

    def describe(self, table: str) -> List[ColumnMetadata]:
        """
        Ordered column metadata of *table*.

        Raises:
            NoColumnsFoundError: the query returned no column descriptors.
            IntrospectionError: the query or reflection failed, or a
                column's type could not be resolved.
            UnsupportedTypeError: a column's type has no semantic mapping.
        """
        query: str = self.metadata_query(table)
        schema, bare = split_qualified_name(table)
        try:
            with self._engine.connect() as conn:
                result = conn.execute(text(query))
                try:
                    keys: List[str] = list(result.keys())
                    description: Sequence[Sequence[Any]] = (
                        getattr(result.cursor, "description", None) or ()
                    )
                finally:
                    result.close()

                if not keys:
                    raise NoColumnsFoundError(table)

                bare, reflected = reflect_columns(sa_inspect(conn), bare, schema)
                return self._build_columns(
                    conn, table, schema, bare, keys, description, reflected
                )
        except SQLAlchemyError as exc:
            raise IntrospectionError(_db_message(exc), table) from exc
        except UnsupportedTypeError as exc:
            exc.table = table
            raise

    def _build_columns(
        self,
        conn: Connection,
        table: str,
        schema: Optional[str],
        bare: str,
        keys: Sequence[str],
        description: Sequence[Sequence[Any]],
        reflected: Sequence[Dict[str, Any]],
    ) -> List[ColumnMetadata]:
        by_name: Dict[str, Dict[str, Any]] = {c["name"]: c for c in reflected}
        by_lower: Dict[str, Dict[str, Any]] = {
            c["name"].lower(): c for c in reflected
        }

        columns: List[ColumnMetadata] = []
        for index, key in enumerate(keys):
            info: Optional[Dict[str, Any]] = by_name.get(key) or by_lower.get(key.lower())
            if info is None:
                raise IntrospectionError(
                    f"cannot resolve type of column {key}", table
                )

            sa_type: TypeEngine[Any] = info["type"]
            code: int = type_code_for(sa_type)
            descriptor: Sequence[Any] = (
                description[index] if index < len(description) else ()
            )
            length: int = _int_or_zero(getattr(sa_type, "length", None))

            if code == TypeCode.NUMERIC or code == TypeCode.DECIMAL:
                precision: int = _int_or_zero(getattr(sa_type, "precision", None))
                scale: int = _int_or_zero(getattr(sa_type, "scale", None))
            elif code in _TEXTUAL_CODES:
                precision, scale = length, 0
            else:
                precision = _int_or_zero(descriptor[4]) if len(descriptor) > 4 else 0
                scale = _int_or_zero(descriptor[5]) if len(descriptor) > 5 else 0

            display_size: int = length or (
                _int_or_zero(descriptor[2]) if len(descriptor) > 2 else 0
            )

            columns.append(
                build_column(
                    name=info["name"],
                    label=key,
                    type_code=code,
                    precision=precision,
                    scale=scale,
                    type_name=_type_name(sa_type, conn),
                    display_size=display_size,
                    source_type_name=type(sa_type).__name__,
                    table_name=bare,
                    schema_name=schema or "",
                )
            )
        return columns


__all__: List[str] = [
    "METADATA_QUERY",
    "Introspector",
    "SQLAlchemyIntrospector",
    "build_column",
    "reflect_columns",
    "type_code_for",
]

logger.debug("tablegen.introspection loaded.")
