# File: tablegen/templates.py
"""
TableGen - Artifact Templates
==============================
Pure-Python, zero-dependency rendering of the two per-table artifacts:

    1. Record type - a serialisable Java class with one private field and
       one getter/setter pair per column, in column order.
    2. Mapping descriptor - an XML statement document (base column
       fragment plus list / getById / search / insert / update / delete).

**Contract:**
    - All string assembly uses ``List[str]`` + ``"\\n".join()``.
    - Rendering is deterministic: the same table and columns always give
      byte-identical output, which keeps regeneration idempotent.
    - Renderer methods are stateless; one instance is shared by all workers.
"""

from __future__ import annotations

import logging
from typing import Dict, List, Optional, Sequence, Set
from xml.sax.saxutils import escape

from tablegen.exceptions import RenderError
from tablegen.models import (
    ArtifactKind,
    ColumnMetadata,
    GeneratedArtifact,
    GeneratorConfig,
)
from tablegen.typemap import java_import, java_type
from tablegen.utils import (
    build_import_block,
    indent_lines,
    split_qualified_name,
    to_type_name,
)

# ---------------------------------------------------------------------------
# Logger
# ---------------------------------------------------------------------------
logger: logging.Logger = logging.getLogger("tablegen.templates")

# ---------------------------------------------------------------------------
# Constants
# ---------------------------------------------------------------------------

_XML_INDENT: str = "    "
_XML_ATTR_ENTITIES: Dict[str, str] = {'"': "&quot;"}
_SERIALIZABLE_IMPORT: str = "java.io.Serializable"
_BASE_FRAGMENT_ID: str = "baseColumns"


def table_alias(table_name: str) -> str:
    """Single-letter alias: first character of the upper-cased bare table name."""
    return split_qualified_name(table_name)[1].upper()[:1]


def _attr(value: str) -> str:
    return escape(value, _XML_ATTR_ENTITIES)


# ---------------------------------------------------------------------------
# ArtifactRenderer
# ---------------------------------------------------------------------------


class ArtifactRenderer:
    """
    Stateless renderer for record types and mapping descriptors.

    Accepts a table name plus its ordered ``ColumnMetadata`` and returns
    complete file contents.  Thread-safe: no mutable instance state.
    """

    def __init__(self, config: GeneratorConfig) -> None:
        self._config: GeneratorConfig = config
        logger.debug(
            "ArtifactRenderer initialised (namespace=%s).", config.namespace
        )

    # -----------------------------------------------------------------
    # Naming
    # -----------------------------------------------------------------

    def type_name(self, table_name: str) -> str:
        """Record type / file base name; a schema qualifier is dropped."""
        _, bare = split_qualified_name(table_name)
        return to_type_name(bare) + self._config.class_suffix

    def qualified_type_name(self, table_name: str) -> str:
        return f"{self._config.namespace}.{self.type_name(table_name)}"

    # ===================================================================
    # 1. Record type
    # ===================================================================

    def render_record_type(
        self, table_name: str, columns: Sequence[ColumnMetadata]
    ) -> str:
        """
        Render the Java record type for one table.

        Layout: package line, sorted imports, class header, every field,
        then every getter/setter pair.
        """
        self._require_columns(table_name, columns)

        imports: Set[str] = {_SERIALIZABLE_IMPORT}
        fields: List[str] = []
        accessors: List[str] = []

        for col in columns:
            dependency = java_import(col.target_type)
            if dependency:
                imports.add(dependency)
            fields.append(self._field_line(col))
            accessors.append(self._accessor_block(col))

        lines: List[str] = [
            f"package {self._config.namespace};",
            "",
            build_import_block(imports),
            "",
            f"public class {self.type_name(table_name)} implements Serializable {{",
        ]
        lines.extend(fields)
        lines.append("")
        lines.extend(accessors)
        lines.append("}")
        lines.append("")
        return "\n".join(lines)

    @staticmethod
    def _field_line(col: ColumnMetadata) -> str:
        return f"\tprivate {java_type(col.target_type)} {col.property_name};"

    @staticmethod
    def _accessor_block(col: ColumnMetadata) -> str:
        jtype: str = java_type(col.target_type)
        prop: str = col.property_name
        method: str = to_type_name(col.name)
        block: List[str] = [
            f"public {jtype} get{method}() {{",
            f"\treturn {prop};",
            "}",
            "",
            f"public void set{method}({jtype} {prop}) {{",
            f"\tthis.{prop} = {prop};",
            "}",
            "",
        ]
        return "\n".join(indent_lines(block))

    # ===================================================================
    # 2. Mapping descriptor
    # ===================================================================

    def render_mapping_descriptor(
        self, table_name: str, columns: Sequence[ColumnMetadata]
    ) -> str:
        """
        Render the XML mapping descriptor for one table.

        Every select statement includes the shared ``baseColumns`` fragment;
        parameters are bound by property name (``:id``, ``:email``...).
        """
        self._require_columns(table_name, columns)

        alias: str = table_alias(table_name)
        table: str = escape(table_name)
        qualified: str = _attr(self.qualified_type_name(table_name))
        col_names: List[str] = [escape(c.name) for c in columns]
        params: List[str] = [f":{c.property_name}" for c in columns]

        lines: List[str] = [
            '<?xml version="1.0" encoding="UTF-8"?>',
            f'<mapper namespace="{qualified}">',
            "",
        ]

        # Base column fragment
        body: List[str] = [f'<sql id="{_BASE_FRAGMENT_ID}">']
        body.extend(
            _join_list([f"{alias}.{name}" for name in col_names], level=1)
        )
        body.append("</sql>")
        body.append("")

        # Selects
        body.extend(self._select("list", qualified, table, alias, where=None))
        body.extend(
            self._select("getById", qualified, table, alias, where=f"{alias}.ID = :id")
        )
        body.extend(
            self._select(
                "search", qualified, table, alias, where=f"{alias}.code LIKE :value"
            )
        )

        # Insert
        body.append(f'<insert id="insert" parameterType="{qualified}">')
        body.append(f"{_XML_INDENT}INSERT INTO {table} (")
        body.extend(_join_list(col_names, level=2))
        body.append(f"{_XML_INDENT}) VALUES (")
        body.extend(_join_list(params, level=2))
        body.append(f"{_XML_INDENT})")
        body.append("</insert>")
        body.append("")

        # Update
        body.append(f'<update id="update" parameterType="{qualified}">')
        body.append(f"{_XML_INDENT}UPDATE {table} SET")
        body.extend(
            _join_list(
                [f"{name} = {param}" for name, param in zip(col_names, params)],
                level=2,
            )
        )
        body.append(f"{_XML_INDENT}WHERE ID = :id")
        body.append("</update>")
        body.append("")

        # Delete
        body.append('<delete id="delete">')
        body.append(f"{_XML_INDENT}DELETE FROM {table} {alias}")
        body.append(f"{_XML_INDENT}WHERE {alias}.ID = :value")
        body.append("</delete>")

        lines.extend(
            _XML_INDENT + line if line else line for line in body
        )
        lines.append("")
        lines.append("</mapper>")
        lines.append("")
        return "\n".join(lines)

    @staticmethod
    def _select(
        statement_id: str,
        result_type: str,
        table: str,
        alias: str,
        where: Optional[str],
    ) -> List[str]:
        block: List[str] = [
            f'<select id="{statement_id}" resultType="{result_type}">',
            f"{_XML_INDENT}SELECT",
            f'{_XML_INDENT}<include refid="{_BASE_FRAGMENT_ID}"/>',
            f"{_XML_INDENT}FROM {table} {alias}",
        ]
        if where:
            block.append(f"{_XML_INDENT}WHERE {escape(where)}")
        block.append("</select>")
        block.append("")
        return block

    # ===================================================================
    # Aggregate
    # ===================================================================

    def render_all(
        self, table_name: str, columns: Sequence[ColumnMetadata]
    ) -> List[GeneratedArtifact]:
        """Render both artifacts for one table, record type first."""
        base_name: str = self.type_name(table_name)
        artifacts: List[GeneratedArtifact] = [
            GeneratedArtifact(
                kind=ArtifactKind.RECORD_TYPE,
                base_name=base_name,
                extension=self._config.record_extension,
                content=self.render_record_type(table_name, columns),
            ),
            GeneratedArtifact(
                kind=ArtifactKind.MAPPING_DESCRIPTOR,
                base_name=base_name,
                extension=self._config.mapping_extension,
                content=self.render_mapping_descriptor(table_name, columns),
            ),
        ]
        logger.debug(
            "Rendered %d artifacts for table %s (%d columns).",
            len(artifacts),
            table_name,
            len(columns),
        )
        return artifacts

    @staticmethod
    def _require_columns(table_name: str, columns: Sequence[ColumnMetadata]) -> None:
        if not table_name or not table_name.strip():
            raise RenderError("invalid table name", table_name)
        if not columns:
            raise RenderError("no columns to render", table_name)


def _join_list(items: Sequence[str], level: int) -> List[str]:
    """Comma-join *items* one per line at *level* XML indents."""
    prefix: str = _XML_INDENT * level
    last: int = len(items) - 1
    return [
        f"{prefix}{item}{',' if i < last else ''}" for i, item in enumerate(items)
    ]


# ---------------------------------------------------------------------------
# Module-level exports
# ---------------------------------------------------------------------------

__all__: List[str] = [
    "ArtifactRenderer",
    "table_alias",
]

logger.debug("tablegen.templates loaded.")
