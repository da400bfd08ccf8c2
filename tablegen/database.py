# File: tablegen/database.py
"""
TableGen - Credentials & Engine
================================
Loads database credentials from a YAML or JSON file and builds the
SQLAlchemy ``Engine`` the pipeline borrows.

Accepted credentials layouts::

    # 1. A full SQLAlchemy URL (username/password keys override its parts)
    url: postgresql+psycopg://scott@db.local/sales
    password: tiger

    # 2. Individual parts
    drivername: oracle+oracledb
    host: db.local
    port: 1521
    database: XE
    username: scott
    password: tiger
    options:            # forwarded to create_engine()
      pool_pre_ping: true
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional

import yaml
from sqlalchemy import create_engine
from sqlalchemy.engine import URL, Engine, make_url
from sqlalchemy.exc import ArgumentError, SQLAlchemyError

from tablegen.exceptions import CredentialsError, DatabaseConnectionError

# ---------------------------------------------------------------------------
# Logger
# ---------------------------------------------------------------------------
logger: logging.Logger = logging.getLogger("tablegen.database")

DEFAULT_CREDENTIALS_FILE: str = "db.yaml"

_URL_PART_KEYS = ("drivername", "username", "password", "host", "port", "database")


# ---------------------------------------------------------------------------
# Credentials file
# ---------------------------------------------------------------------------


def _parse_credentials(path: Path, raw: str) -> Any:
    if path.suffix.lower() == ".json":
        try:
            return json.loads(raw)
        except json.JSONDecodeError as exc:
            raise CredentialsError(f"Invalid JSON in {path}: {exc}") from exc
    try:
        return yaml.safe_load(raw)
    except yaml.YAMLError as exc:
        raise CredentialsError(f"Invalid YAML in {path}: {exc}") from exc


def load_credentials(path: Path) -> Dict[str, Any]:
    """
    Load a credentials file (YAML, or JSON by ``.json`` extension).

    Raises:
        CredentialsError: the file is missing, unreadable, or not a mapping.
    """
    path = Path(path)
    if not path.exists():
        raise CredentialsError(f"Credentials file not found: {path}")
    if not path.is_file():
        raise CredentialsError(f"Credentials path is not a file: {path}")

    try:
        raw: str = path.read_text(encoding="utf-8")
    except OSError as exc:
        raise CredentialsError(f"Cannot read credentials file {path}: {exc}") from exc

    data: Any = _parse_credentials(path, raw)
    if not isinstance(data, dict):
        raise CredentialsError(
            f"Expected a mapping at top level of {path}, "
            f"got {type(data).__name__}."
        )
    logger.debug("Loaded credentials file %s (%d keys).", path, len(data))
    return data


# ---------------------------------------------------------------------------
# URL / engine construction
# ---------------------------------------------------------------------------


def build_url(credentials: Mapping[str, Any]) -> URL:
    """
    Build an SQLAlchemy ``URL`` from a credentials mapping.

    Raises:
        CredentialsError: neither ``url`` nor ``drivername`` is present, or
            the URL cannot be parsed.
    """
    if credentials.get("url"):
        try:
            url: URL = make_url(str(credentials["url"]))
        except ArgumentError as exc:
            raise CredentialsError(f"Invalid database url: {exc}") from exc
        overrides: Dict[str, Any] = {
            key: credentials[key]
            for key in ("username", "password")
            if credentials.get(key) is not None
        }
        return url.set(**overrides) if overrides else url

    if not credentials.get("drivername"):
        raise CredentialsError(
            "Credentials need either 'url' or 'drivername' (with host, "
            "database, username, password)."
        )

    parts: Dict[str, Any] = {
        key: credentials[key] for key in _URL_PART_KEYS if credentials.get(key) is not None
    }
    if "port" in parts:
        try:
            parts["port"] = int(parts["port"])
        except (TypeError, ValueError) as exc:
            raise CredentialsError(f"Invalid port: {parts['port']!r}") from exc
    return URL.create(**parts)


def create_engine_from_credentials(
    credentials: Mapping[str, Any], *, pool_size: Optional[int] = None
) -> Engine:
    """
    Create (but do not connect) an engine for *credentials*.

    ``pool_size`` is applied to pooled dialects only; SQLite keeps its
    default pool.
    """
    url: URL = build_url(credentials)
    options: Dict[str, Any] = dict(credentials.get("options") or {})
    if pool_size is not None and url.get_backend_name() != "sqlite":
        options.setdefault("pool_size", pool_size)

    try:
        engine: Engine = create_engine(url, **options)
    except (ArgumentError, TypeError) as exc:
        raise CredentialsError(f"Invalid engine options: {exc}") from exc
    except ImportError as exc:
        raise CredentialsError(
            f"Database driver for '{url.drivername}' is not installed: {exc}"
        ) from exc

    logger.debug("Engine created for %s.", url.render_as_string(hide_password=True))
    return engine


def verify_connection(engine: Engine) -> None:
    """
    Check out one connection; the dialect initialises on first connect.

    Raises:
        DatabaseConnectionError: the database cannot be reached.
    """
    try:
        with engine.connect():
            pass
    except SQLAlchemyError as exc:
        source: BaseException = getattr(exc, "orig", None) or exc
        raise DatabaseConnectionError(str(source).strip()) from exc


def connect(path: Path, *, workers: int = 5) -> Engine:
    """
    Load *path*, create the engine sized for ``workers`` plus the
    discoverer, and verify that it connects.
    """
    credentials: Dict[str, Any] = load_credentials(path)
    engine: Engine = create_engine_from_credentials(credentials, pool_size=workers + 1)
    try:
        verify_connection(engine)
    except DatabaseConnectionError:
        engine.dispose()
        raise
    return engine


__all__: List[str] = [
    "DEFAULT_CREDENTIALS_FILE",
    "build_url",
    "connect",
    "create_engine_from_credentials",
    "load_credentials",
    "verify_connection",
]

logger.debug("tablegen.database loaded.")
