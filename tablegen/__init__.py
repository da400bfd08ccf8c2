# File: tablegen/__init__.py
"""
TableGen - Record Type & Mapping Generator
===========================================

Reads table metadata from a live relational database and writes, per table,
a serialisable Java record type and an XML mapping descriptor.  One
discoverer feeds table names through a queue to a pool of generator
workers.

Architecture overview::

    ┌──────────────┐     ┌────────────────────┐
    │  CLI / Entry │────▶│ GenerationPipeline │
    │   (cli.py)   │     │   (generator.py)   │
    └──────┬───────┘     └─────────┬──────────┘
           │                       │  queue.Queue
           ▼               ┌───────┴────────┐
     ┌───────────┐         ▼                ▼
     │ database  │  TableDiscoverer   GeneratorWorker × N
     │   (.py)   │   (workers.py)       (workers.py)
     └───────────┘                          │
                         ┌──────────────────┼───────────────┐
                         ▼                  ▼               ▼
                  ┌──────────────┐   ┌────────────┐  ┌───────────┐
                  │introspection │   │ templates  │  │ exporters │
                  │ + typemap    │   │   (.py)    │  │   (.py)   │
                  └──────────────┘   └────────────┘  └───────────┘

Usage::

    # As a library
    from sqlalchemy import create_engine
    from tablegen import GenerationPipeline, GeneratorConfig

    config = GeneratorConfig.for_tables("ACCOUNTS;ORDERS", namespace="com.acme")
    report = GenerationPipeline(config, create_engine(url)).run()

    # From the command line
    python -m tablegen -t "ACCOUNTS;ORDERS" -p com.acme -c db.yaml
"""

from __future__ import annotations

__version__: str = "1.0.0"

from tablegen.exceptions import (
    ConfigurationError,
    CredentialsError,
    DatabaseConnectionError,
    DiscoveryError,
    IntrospectionError,
    NoColumnsFoundError,
    RenderError,
    TableError,
    TableGenError,
    UnsupportedTypeError,
    WriteFailedError,
)
from tablegen.models import (
    ColumnMetadata,
    DiscoveryMode,
    GeneratedArtifact,
    GeneratorConfig,
    SemanticType,
    Signal,
    TableResult,
    TableStatus,
    TypeCode,
)
from tablegen.typemap import map_type
from tablegen.utils import to_property_name, to_type_name
from tablegen.templates import ArtifactRenderer
from tablegen.exporters import ArtifactWriter
from tablegen.introspection import SQLAlchemyIntrospector
from tablegen.validators import ValidationResult, validate_config
from tablegen.generator import GenerationPipeline, GenerationReport

# ---------------------------------------------------------------------------
# Public API surface
# ---------------------------------------------------------------------------

__all__: list[str] = [
    "__version__",
    # Core orchestrator
    "GenerationPipeline",
    "GenerationReport",
    # Models
    "ColumnMetadata",
    "DiscoveryMode",
    "GeneratedArtifact",
    "GeneratorConfig",
    "SemanticType",
    "Signal",
    "TableResult",
    "TableStatus",
    "TypeCode",
    # Components
    "ArtifactRenderer",
    "ArtifactWriter",
    "SQLAlchemyIntrospector",
    "map_type",
    "to_property_name",
    "to_type_name",
    # Validation
    "validate_config",
    "ValidationResult",
    # Errors
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
