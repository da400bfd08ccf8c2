# File: tablegen/validators.py
"""
TableGen - Configuration Validators
====================================
Pre-flight semantic checks on a ``GeneratorConfig``.

Pydantic handles structural correctness (types, ``workers >= 1``, a
non-empty explicit table list).  This module adds the checks that depend on
the target language and on how table names reach the database: namespace
segments that would not compile, table names the metadata query cannot use
verbatim, and pool sizing hints.

Usage by downstream modules:
    from tablegen.validators import validate_config
    result = validate_config(config)
    if not result.is_valid:
        raise SystemExit(...)
"""

from __future__ import annotations

import logging
import re
from typing import Any, Dict, FrozenSet, List, Optional, Set

from tablegen.models import GeneratorConfig

# ---------------------------------------------------------------------------
# Logger
# ---------------------------------------------------------------------------
logger: logging.Logger = logging.getLogger("tablegen.validators")

# ---------------------------------------------------------------------------
# Validation result container
# ---------------------------------------------------------------------------


class ValidationError:
    """Lightweight error descriptor (no Pydantic overhead)."""

    __slots__ = ("level", "code", "message", "context")

    def __init__(
        self,
        level: str,
        code: str,
        message: str,
        context: Optional[Dict[str, Any]] = None,
    ) -> None:
        self.level: str = level  # "error" | "warning" | "info"
        self.code: str = code
        self.message: str = message
        self.context: Dict[str, Any] = context or {}

    @property
    def is_error(self) -> bool:
        return self.level == "error"

    @property
    def is_warning(self) -> bool:
        return self.level == "warning"

    def __repr__(self) -> str:
        return f"[{self.level.upper()}] {self.code}: {self.message}"

    def __str__(self) -> str:
        return self.__repr__()


class ValidationResult:
    """Accumulates ``ValidationError`` instances produced by the checks."""

    __slots__ = ("_items",)

    def __init__(self) -> None:
        self._items: List[ValidationError] = []

    # -- Mutation -----------------------------------------------------------

    def add_error(
        self, code: str, message: str, context: Optional[Dict[str, Any]] = None
    ) -> None:
        self._items.append(ValidationError("error", code, message, context))

    def add_warning(
        self, code: str, message: str, context: Optional[Dict[str, Any]] = None
    ) -> None:
        self._items.append(ValidationError("warning", code, message, context))

    def merge(self, other: "ValidationResult") -> None:
        self._items.extend(other._items)

    # -- Query --------------------------------------------------------------

    @property
    def errors(self) -> List[ValidationError]:
        return [e for e in self._items if e.is_error]

    @property
    def warnings(self) -> List[ValidationError]:
        return [e for e in self._items if e.is_warning]

    @property
    def codes(self) -> List[str]:
        return [e.code for e in self._items]

    @property
    def is_valid(self) -> bool:
        return not any(e.is_error for e in self._items)

    def summary(self) -> str:
        return (
            f"Validation: {len(self.errors)} error(s), "
            f"{len(self.warnings)} warning(s)."
        )

    def __repr__(self) -> str:
        return f"<ValidationResult {self.summary()}>"

    def __bool__(self) -> bool:
        """Truthy when there are NO errors (i.e. valid)."""
        return self.is_valid

    def __len__(self) -> int:
        return len(self._items)


# ---------------------------------------------------------------------------
# Patterns
# ---------------------------------------------------------------------------

_JAVA_IDENTIFIER_RE: re.Pattern[str] = re.compile(r"^[A-Za-z_$][A-Za-z0-9_$]*$")
_SQL_IDENTIFIER_RE: re.Pattern[str] = re.compile(r"^[A-Za-z_][A-Za-z0-9_$#]*$")
_EXTENSION_RE: re.Pattern[str] = re.compile(r"^\.[A-Za-z0-9]+$")

_JAVA_RESERVED_WORDS: FrozenSet[str] = frozenset(
    {
        "abstract", "assert", "boolean", "break", "byte", "case", "catch",
        "char", "class", "const", "continue", "default", "do", "double",
        "else", "enum", "extends", "final", "finally", "float", "for",
        "goto", "if", "implements", "import", "instanceof", "int",
        "interface", "long", "native", "new", "package", "private",
        "protected", "public", "return", "short", "static", "strictfp",
        "super", "switch", "synchronized", "this", "throw", "throws",
        "transient", "try", "void", "volatile", "while", "true", "false",
        "null", "var", "record", "yield",
    }
)


def is_java_identifier(name: str) -> bool:
    return bool(_JAVA_IDENTIFIER_RE.match(name)) and name not in _JAVA_RESERVED_WORDS


def is_table_identifier(name: str) -> bool:
    """Plain (``ACCOUNTS``) or schema-qualified (``sales.ORDERS``) name."""
    parts: List[str] = name.split(".")
    return len(parts) <= 3 and all(_SQL_IDENTIFIER_RE.match(p) for p in parts)


# ---------------------------------------------------------------------------
# Individual checks
# ---------------------------------------------------------------------------


def validate_namespace(config: GeneratorConfig) -> ValidationResult:
    """Every dot-separated segment must be a legal, non-reserved Java identifier."""
    result: ValidationResult = ValidationResult()
    for segment in config.namespace.split("."):
        if not is_java_identifier(segment):
            result.add_error(
                "INVALID_NAMESPACE",
                f"Namespace '{config.namespace}' has an invalid segment "
                f"'{segment}'.",
                {"namespace": config.namespace, "segment": segment},
            )
    return result


def validate_table_list(config: GeneratorConfig) -> ValidationResult:
    """
    Explicit table names must be SQL identifiers and appear only once.

    A duplicated name would have two workers writing the same files.
    """
    result: ValidationResult = ValidationResult()
    seen: Set[str] = set()

    for name in config.tables:
        ctx: Dict[str, Any] = {"table": name}
        if name in seen:
            result.add_error(
                "DUPLICATE_TABLE_NAME",
                f"Table name '{name}' is listed more than once.",
                ctx,
            )
        seen.add(name)

        if not is_table_identifier(name):
            result.add_error(
                "INVALID_TABLE_NAME",
                f"Table name '{name}' is not a plain or schema-qualified "
                f"identifier.",
                ctx,
            )

    if config.tables and config.workers > len(config.tables):
        result.add_warning(
            "WORKERS_EXCEED_TABLES",
            f"{config.workers} workers for {len(config.tables)} table(s); "
            f"the extra workers will only consume their done signal.",
            {"workers": config.workers, "tables": len(config.tables)},
        )
    return result


def validate_output_naming(config: GeneratorConfig) -> ValidationResult:
    result: ValidationResult = ValidationResult()

    for label, extension in (
        ("record_extension", config.record_extension),
        ("mapping_extension", config.mapping_extension),
    ):
        if not _EXTENSION_RE.match(extension):
            result.add_error(
                "INVALID_EXTENSION",
                f"{label} '{extension}' must look like '.ext'.",
                {label: extension},
            )

    if config.record_extension == config.mapping_extension:
        result.add_error(
            "EXTENSION_CLASH",
            "record_extension and mapping_extension must differ.",
        )

    if config.class_suffix and not _JAVA_IDENTIFIER_RE.match(
        "A" + config.class_suffix
    ):
        result.add_error(
            "INVALID_CLASS_SUFFIX",
            f"class_suffix '{config.class_suffix}' cannot be part of a "
            f"type name.",
            {"class_suffix": config.class_suffix},
        )
    return result


# ---------------------------------------------------------------------------
# Entry point
# ---------------------------------------------------------------------------


def validate_config(config: GeneratorConfig) -> ValidationResult:
    """Run every configuration check and return the merged result."""
    result: ValidationResult = ValidationResult()
    for check in (validate_namespace, validate_table_list, validate_output_naming):
        logger.debug("Running validator: %s", check.__name__)
        result.merge(check(config))

    logger.debug("Config validation complete: %s", result.summary())
    return result


__all__: List[str] = [
    "ValidationError",
    "ValidationResult",
    "is_java_identifier",
    "is_table_identifier",
    "validate_namespace",
    "validate_table_list",
    "validate_output_naming",
    "validate_config",
]

logger.debug("tablegen.validators loaded.")
