"""
tests/test_introspection.py
Integration tests for tablegen.introspection against a real SQLite file.
"""

from __future__ import annotations

from typing import Any, Dict, List, Optional, Sequence

import pytest
from sqlalchemy import Numeric, String, create_engine, text
from sqlalchemy.engine import Engine
from sqlalchemy.exc import NoSuchTableError
from sqlalchemy.types import BLOB, BOOLEAN, DATE, INTEGER, JSON, TIMESTAMP

from tablegen.exceptions import (
    DiscoveryError,
    IntrospectionError,
    UnsupportedTypeError,
)
from tablegen.introspection import (
    SQLAlchemyIntrospector,
    build_column,
    reflect_columns,
    type_code_for,
)
from tablegen.models import ColumnMetadata, SemanticType, TypeCode


class TestHelpers:
    @pytest.mark.parametrize(
        "sa_type, code",
        [
            (INTEGER(), TypeCode.INTEGER),
            (String(20), TypeCode.VARCHAR),
            (Numeric(12, 2), TypeCode.NUMERIC),
            (BOOLEAN(), TypeCode.BIT),
            (DATE(), TypeCode.DATE),
            (TIMESTAMP(), TypeCode.TIMESTAMP),
            (BLOB(), TypeCode.BLOB),
            (JSON(), TypeCode.OTHER),
        ],
    )
    def test_type_code_for(self, sa_type, code: TypeCode) -> None:
        assert type_code_for(sa_type) == code

    def test_build_column_derives_fields(self) -> None:
        column = build_column(name="ACCOUNT_ID", type_code=TypeCode.NUMERIC, precision=10)
        assert column.property_name == "accountId"
        assert column.target_type == SemanticType.INT64

    def test_build_column_unsupported(self) -> None:
        with pytest.raises(UnsupportedTypeError):
            build_column(name="DOC", type_code=TypeCode.OTHER)


class TestListTables:
    def test_lists_catalog(self, sqlite_engine: Engine) -> None:
        assert sorted(SQLAlchemyIntrospector(sqlite_engine).list_tables()) == ["A", "ACCOUNTS", "B", "C", "ORDERS"]

    def test_failure_becomes_discovery_error(self, tmp_path) -> None:
        broken = create_engine(f"sqlite:///{tmp_path / 'missing' / 'nope.db'}")
        with pytest.raises(DiscoveryError):
            SQLAlchemyIntrospector(broken).list_tables()
        broken.dispose()


class TestDescribe:
    def test_accounts(self, sqlite_engine: Engine) -> None:
        columns: List[ColumnMetadata] = SQLAlchemyIntrospector(sqlite_engine).describe("ACCOUNTS")
        assert [c.name for c in columns] == ["ID", "EMAIL", "BALANCE", "ACTIVE"]
        assert [c.target_type for c in columns] == [
            SemanticType.INT32,
            SemanticType.TEXT,
            SemanticType.DECIMAL,
            SemanticType.BOOLEAN,
        ]
        assert [c.property_name for c in columns] == ["id", "email", "balance", "active"]
        balance = columns[2]
        assert (balance.precision, balance.scale) == (12, 2)
        assert columns[1].precision == 100
        assert all(c.table_name == "ACCOUNTS" for c in columns)

    def test_orders_numeric_overrides(self, sqlite_engine: Engine) -> None:
        columns = SQLAlchemyIntrospector(sqlite_engine).describe("ORDERS")
        by_name = {c.name: c.target_type for c in columns}
        assert by_name == {
            "ID": SemanticType.INT64,
            "ACCOUNT_ID": SemanticType.INT32,
            "ORDER_DATE": SemanticType.DATE,
            "CREATED_AT": SemanticType.DATETIME,
            "NOTES": SemanticType.TEXT,
            "QUANTITY": SemanticType.INT64,
            "IS_GIFT": SemanticType.BOOLEAN,
            "WEIGHT": SemanticType.FLOAT32,
            "PAYLOAD": SemanticType.BLOB,
        }

    def test_lowercase_name_resolves(self, sqlite_engine: Engine) -> None:
        columns = SQLAlchemyIntrospector(sqlite_engine).describe("accounts")
        assert [c.name for c in columns] == ["ID", "EMAIL", "BALANCE", "ACTIVE"]

    def test_missing_table(self, sqlite_engine: Engine) -> None:
        with pytest.raises(IntrospectionError) as exc_info:
            SQLAlchemyIntrospector(sqlite_engine).describe("NOPE")
        assert exc_info.value.table == "NOPE"
        assert "no such table" in str(exc_info.value)

    def test_unsupported_column_type(self, sqlite_engine: Engine) -> None:
        with sqlite_engine.begin() as conn:
            conn.execute(text("CREATE TABLE SETTINGS (ID INTEGER, DOC JSON)"))
        with pytest.raises(UnsupportedTypeError) as exc_info:
            SQLAlchemyIntrospector(sqlite_engine).describe("SETTINGS")
        assert exc_info.value.table == "SETTINGS"
        assert exc_info.value.column == "DOC"

    def test_non_identifier_name_is_rejected(self, sqlite_engine: Engine) -> None:
        with sqlite_engine.begin() as conn:
            conn.execute(text('CREATE TABLE "ORDER LINES" (LINE_NO INTEGER)'))
        with pytest.raises(IntrospectionError) as exc_info:
            SQLAlchemyIntrospector(sqlite_engine).describe("ORDER LINES")
        assert exc_info.value.table == "ORDER LINES"
        assert "not a plain or schema-qualified table name" in str(exc_info.value)


class _CaseSensitiveInspector:
    """Reflection that, like PostgreSQL's, only finds the stored spelling."""

    def __init__(self, tables: Dict[str, List[Dict[str, Any]]], views: Sequence[str] = ()) -> None:
        self.tables = tables
        self.views = list(views)
        self.requested: List[str] = []

    def get_columns(self, table: str, schema: Optional[str] = None) -> List[Dict[str, Any]]:
        self.requested.append(table)
        if table not in self.tables:
            raise NoSuchTableError(table)
        return self.tables[table]

    def get_table_names(self, schema: Optional[str] = None) -> List[str]:
        return [t for t in self.tables if t not in self.views]

    def get_view_names(self, schema: Optional[str] = None) -> List[str]:
        return list(self.views)


class TestReflectColumns:
    columns = [{"name": "id", "type": INTEGER()}]

    def test_exact_name(self) -> None:
        inspector = _CaseSensitiveInspector({"ACCOUNTS": self.columns})
        assert reflect_columns(inspector, "ACCOUNTS", None) == ("ACCOUNTS", self.columns)
        assert inspector.requested == ["ACCOUNTS"]

    def test_folded_name_is_matched_case_insensitively(self) -> None:
        inspector = _CaseSensitiveInspector({"accounts": self.columns, "orders": []})
        assert reflect_columns(inspector, "ACCOUNTS", "public") == ("accounts", self.columns)
        assert inspector.requested == ["ACCOUNTS", "accounts"]

    def test_views_are_candidates(self) -> None:
        inspector = _CaseSensitiveInspector({"active_accounts": self.columns}, views=["active_accounts"])
        assert reflect_columns(inspector, "ACTIVE_ACCOUNTS", None)[0] == "active_accounts"

    def test_unknown_table_still_raises(self) -> None:
        inspector = _CaseSensitiveInspector({"accounts": self.columns})
        with pytest.raises(NoSuchTableError):
            reflect_columns(inspector, "NOPE", None)

    def test_ambiguous_match_raises(self) -> None:
        inspector = _CaseSensitiveInspector({"Accounts": self.columns, "accounts": self.columns})
        with pytest.raises(NoSuchTableError):
            reflect_columns(inspector, "ACCOUNTS", None)
