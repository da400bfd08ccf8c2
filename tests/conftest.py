"""
tests/conftest.py
Shared fixtures for the tablegen test suite.

A real, file-backed SQLite database is built through SQLAlchemy for every
test that needs one; no external mocking libraries are used.  Scenarios a
real database cannot produce (a table without columns, failing catalog
calls) use the in-process ``StubIntrospector``.
"""

from __future__ import annotations

import logging
import pathlib
import threading
from typing import Any, Callable, Dict, Iterator, List, Optional

import pytest
import yaml
from sqlalchemy import create_engine, text
from sqlalchemy.engine import Engine

from tablegen.introspection import build_column
from tablegen.models import ColumnMetadata, GeneratorConfig, TypeCode


# ---------------------------------------------------------------------------
# Sample catalog
# ---------------------------------------------------------------------------

CATALOG_DDL: List[str] = [
    """
    CREATE TABLE ACCOUNTS (
        ID INTEGER,
        EMAIL VARCHAR(100),
        BALANCE NUMERIC(12, 2),
        ACTIVE BOOLEAN
    )
    """,
    """
    CREATE TABLE ORDERS (
        ID BIGINT,
        ACCOUNT_ID INTEGER,
        ORDER_DATE DATE,
        CREATED_AT TIMESTAMP,
        NOTES TEXT,
        QUANTITY NUMERIC(10, 0),
        IS_GIFT NUMERIC(1, 0),
        WEIGHT REAL,
        PAYLOAD BLOB
    )
    """,
    "CREATE TABLE A (ID INTEGER, NAME VARCHAR(20))",
    "CREATE TABLE B (ID INTEGER, NAME VARCHAR(20))",
    "CREATE TABLE C (ID INTEGER, NAME VARCHAR(20))",
]


def make_engine(db_path: pathlib.Path) -> Engine:
    return create_engine(
        f"sqlite:///{db_path}",
        connect_args={"check_same_thread": False},
    )


@pytest.fixture()
def db_path(tmp_path: pathlib.Path) -> pathlib.Path:
    """Create the sample catalog in a temporary SQLite file."""
    path = tmp_path / "catalog.db"
    engine = make_engine(path)
    with engine.begin() as conn:
        for ddl in CATALOG_DDL:
            conn.execute(text(ddl))
    engine.dispose()
    return path


@pytest.fixture()
def sqlite_engine(db_path: pathlib.Path) -> Iterator[Engine]:
    engine = make_engine(db_path)
    yield engine
    engine.dispose()


@pytest.fixture()
def credentials_path(db_path: pathlib.Path, tmp_path: pathlib.Path) -> pathlib.Path:
    """YAML credentials file pointing at the sample catalog."""
    path = tmp_path / "db.yaml"
    with open(path, "w", encoding="utf-8") as fh:
        yaml.dump(
            {
                "url": f"sqlite:///{db_path}",
                "options": {"connect_args": {"check_same_thread": False}},
            },
            fh,
            default_flow_style=False,
        )
    return path


# ---------------------------------------------------------------------------
# Output & configuration
# ---------------------------------------------------------------------------


@pytest.fixture()
def output_dir(tmp_path: pathlib.Path) -> pathlib.Path:
    """Output root that does not exist yet."""
    return tmp_path / "generated"


@pytest.fixture()
def make_config(output_dir: pathlib.Path) -> Callable[..., GeneratorConfig]:
    """Factory: explicit-list config writing below ``output_dir``."""

    def _make(tables: Any = "ACCOUNTS", **overrides: Any) -> GeneratorConfig:
        params: Dict[str, Any] = {
            "namespace": "com.acme.model",
            "output_dir": str(output_dir),
            "workers": 2,
        }
        params.update(overrides)
        if tables is None:
            return GeneratorConfig.for_all_tables(**params)
        return GeneratorConfig.for_tables(tables, **params)

    return _make


@pytest.fixture()
def accounts_columns() -> List[ColumnMetadata]:
    """ACCOUNTS(ID int32, EMAIL text, BALANCE decimal, ACTIVE boolean)."""
    return [
        build_column(name="ID", type_code=TypeCode.INTEGER),
        build_column(name="EMAIL", type_code=TypeCode.VARCHAR, precision=100),
        build_column(name="BALANCE", type_code=TypeCode.NUMERIC, precision=12, scale=2),
        build_column(name="ACTIVE", type_code=TypeCode.BIT),
    ]


# ---------------------------------------------------------------------------
# Stub introspector
# ---------------------------------------------------------------------------


class StubIntrospector:
    """In-memory stand-in for ``SQLAlchemyIntrospector``; records calls."""

    def __init__(
        self,
        tables: Dict[str, List[ColumnMetadata]],
        *,
        failures: Optional[Dict[str, Exception]] = None,
        list_error: Optional[Exception] = None,
    ) -> None:
        self.tables = tables
        self.failures = failures or {}
        self.list_error = list_error
        self.described: List[str] = []
        self._lock = threading.Lock()

    def list_tables(self) -> List[str]:
        if self.list_error is not None:
            raise self.list_error
        return list(self.tables)

    def describe(self, table: str) -> List[ColumnMetadata]:
        with self._lock:
            self.described.append(table)
        if table in self.failures:
            raise self.failures[table]
        return list(self.tables.get(table, []))


@pytest.fixture()
def stub_introspector_factory() -> Callable[..., StubIntrospector]:
    return StubIntrospector


# ---------------------------------------------------------------------------
# Logging isolation
# ---------------------------------------------------------------------------


@pytest.fixture(autouse=True)
def _restore_tablegen_logger() -> Iterator[None]:
    """The CLI reconfigures the ``tablegen`` logger; undo it after each test."""
    tablegen_logger = logging.getLogger("tablegen")
    handlers = list(tablegen_logger.handlers)
    propagate = tablegen_logger.propagate
    level = tablegen_logger.level
    yield
    tablegen_logger.handlers[:] = handlers
    tablegen_logger.propagate = propagate
    tablegen_logger.setLevel(level)
