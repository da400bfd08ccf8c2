# File: tablegen/cli.py
"""
TableGen - Command-Line Interface
==================================

CLI built with the standard-library ``argparse`` module.

Usage examples::

    # Every table of the default schema
    python -m tablegen --all -p com.acme.model -d ./generated

    # An explicit list, 8 workers, credentials from a JSON file
    python -m tablegen -t "ACCOUNTS;ORDERS;sales.INVOICES" -r 8 -c db.json

    # Show version
    python -m tablegen --version

Exit codes:
    0 - success
    1 - configuration error
    2 - database connection error
    3 - generation finished, but some tables were skipped
    4 - input error (credentials file)
"""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path
from typing import Dict, List, NoReturn, Optional, Sequence

from pydantic import ValidationError as PydanticValidationError

from tablegen.models import DiscoveryMode, GeneratorConfig

# ---------------------------------------------------------------------------
# Logger (configured in _setup_logging)
# ---------------------------------------------------------------------------
logger: logging.Logger = logging.getLogger("tablegen")


# ---------------------------------------------------------------------------
# Exit codes
# ---------------------------------------------------------------------------

EXIT_SUCCESS: int = 0
EXIT_CONFIG_ERROR: int = 1
EXIT_CONNECTION_ERROR: int = 2
EXIT_TABLES_SKIPPED: int = 3
EXIT_INPUT_ERROR: int = 4

LOG_FORMAT: str = "%(task_prefix)s%(levelname)s: %(message)s"


# ---------------------------------------------------------------------------
# Logging setup
# ---------------------------------------------------------------------------


class TaskPrefixFilter(logging.Filter):
    """Fills ``record.task_prefix`` with ``"(writer-2) "`` or ``""``."""

    def filter(self, record: logging.LogRecord) -> bool:
        task: Optional[str] = getattr(record, "task", None)
        record.task_prefix = f"({task}) " if task else ""
        return True


def _setup_logging(verbosity: int) -> logging.Handler:
    """
    Configure the root tablegen logger based on verbosity level.

    Args:
        verbosity: -1 = ERROR, 0/1 = INFO, 2+ = DEBUG.
    """
    if verbosity >= 2:
        level = logging.DEBUG
    elif verbosity >= 0:
        level = logging.INFO
    else:
        level = logging.ERROR

    handler: logging.StreamHandler = logging.StreamHandler(sys.stderr)
    handler.setLevel(level)
    handler.addFilter(TaskPrefixFilter())
    handler.setFormatter(logging.Formatter(LOG_FORMAT))

    root_logger: logging.Logger = logging.getLogger("tablegen")
    root_logger.setLevel(level)

    # Remove existing handlers to prevent duplication
    root_logger.handlers.clear()
    root_logger.addHandler(handler)
    root_logger.propagate = False
    return handler


# ---------------------------------------------------------------------------
# Argument parser
# ---------------------------------------------------------------------------


def _build_parser() -> argparse.ArgumentParser:
    """Build and return the argument parser."""
    from tablegen import __version__
    from tablegen.database import DEFAULT_CREDENTIALS_FILE

    parser: argparse.ArgumentParser = argparse.ArgumentParser(
        prog="tablegen",
        description=(
            "TableGen - record type and mapping generator.\n\n"
            "Reads table metadata from a live database and writes one Java "
            "record type plus one XML mapping descriptor per table."
        ),
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=(
            "Examples:\n"
            "  %(prog)s --all -p com.acme.model -d ./generated\n"
            '  %(prog)s -t "ACCOUNTS;ORDERS" -r 8 -c db.json\n'
        ),
    )

    parser.add_argument(
        "--version",
        action="version",
        version=f"TableGen v{__version__}",
    )

    # --- Table selection ---
    tables_group = parser.add_argument_group("table selection")
    tables_group.add_argument(
        "-a", "--all",
        dest="all_tables",
        action="store_true",
        default=False,
        help="Generate for every table in the database.",
    )
    tables_group.add_argument(
        "-t", "--tables",
        action="append",
        default=None,
        metavar="LIST",
        help='Semicolon-separated table names, e.g. "A;B;C" (overrides --all).',
    )

    # --- Output ---
    output_group = parser.add_argument_group("output")
    output_group.add_argument(
        "-p", "--pkg",
        type=str,
        default="pojo",
        metavar="PACKAGE",
        help="Dot-delimited package of the generated sources (default: pojo).",
    )
    output_group.add_argument(
        "-d", "--dir",
        type=str,
        default="out",
        metavar="DIR",
        help="Root output directory (default: out).",
    )
    output_group.add_argument(
        "--suffix",
        type=str,
        default="",
        metavar="SUFFIX",
        help="Suffix appended to generated type names (e.g. Entity).",
    )

    # --- Execution ---
    run_group = parser.add_argument_group("execution")
    run_group.add_argument(
        "-r", "--threads",
        type=int,
        default=5,
        metavar="N",
        help="Number of concurrent generator workers (default: 5).",
    )
    run_group.add_argument(
        "-c", "--credentials",
        type=str,
        default=DEFAULT_CREDENTIALS_FILE,
        metavar="PATH",
        help=f"Credentials file, YAML or JSON (default: {DEFAULT_CREDENTIALS_FILE}).",
    )

    # --- Verbosity ---
    verbosity_group = parser.add_argument_group("verbosity")
    verbosity_group.add_argument(
        "-v", "--verbose",
        action="count",
        default=0,
        help="Increase verbosity (-vv for DEBUG).",
    )
    verbosity_group.add_argument(
        "-q", "--quiet",
        action="store_true",
        default=False,
        help="Suppress all output except errors.",
    )

    return parser


# ---------------------------------------------------------------------------
# Config builder
# ---------------------------------------------------------------------------


def _pydantic_messages(exc: PydanticValidationError) -> List[str]:
    messages: List[str] = []
    for err in exc.errors():
        msg: str = str(err.get("msg", "")).removeprefix("Value error, ")
        loc: str = ".".join(str(part) for part in err.get("loc", ()))
        messages.append(f"{loc}: {msg}" if loc else msg)
    return messages


def _build_config(args: argparse.Namespace) -> GeneratorConfig:
    """
    Build a ``GeneratorConfig`` from parsed arguments.

    An explicit table list takes precedence over ``--all``.
    """
    tables: List[str] = []
    for value in args.tables or ():
        tables.extend(value.split(";"))

    mode: DiscoveryMode = (
        DiscoveryMode.ALL_TABLES
        if args.all_tables and not any(t.strip() for t in tables)
        else DiscoveryMode.EXPLICIT_LIST
    )

    return GeneratorConfig(
        mode=mode,
        tables=tables,
        namespace=args.pkg,
        output_dir=args.dir,
        workers=args.threads,
        class_suffix=args.suffix,
    )


def _log_settings(config: GeneratorConfig, credentials: Path) -> None:
    settings: Dict[str, object] = {
        "tables": "<all>" if config.all_tables else ";".join(config.tables),
        "package": config.namespace,
        "directory": config.output_dir,
        "numThreads": config.workers,
        "credentials": credentials,
    }
    for key, value in settings.items():
        logger.info("%s=%s", key, value)


# ---------------------------------------------------------------------------
# Generation
# ---------------------------------------------------------------------------


def _run_generation(config: GeneratorConfig, credentials: Path, quiet: bool) -> int:
    """
    Connect, run the pipeline and dispose of the engine.

    Returns the appropriate exit code.
    """
    from tablegen.database import connect
    from tablegen.exceptions import CredentialsError, DatabaseConnectionError
    from tablegen.generator import GenerationPipeline, GenerationReport
    from tablegen.utils import Timer

    timer: Timer = Timer("run")
    try:
        with timer:
            logger.info("connecting to database...")
            try:
                engine = connect(credentials, workers=config.workers)
            except CredentialsError as exc:
                logger.error("%s", exc)
                return EXIT_INPUT_ERROR
            except DatabaseConnectionError as exc:
                logger.error("cannot connect to database: %s", exc)
                return EXIT_CONNECTION_ERROR

            try:
                report: GenerationReport = GenerationPipeline(config, engine).run()
            finally:
                engine.dispose()
    finally:
        logger.info("ALL DONE! (elapsed: %dms)", timer.elapsed_ms)

    if not quiet:
        print(report.summary())

    if report.success:
        return EXIT_SUCCESS
    if report.discovery_error:
        return EXIT_CONNECTION_ERROR
    return EXIT_TABLES_SKIPPED


# ---------------------------------------------------------------------------
# Main entry point
# ---------------------------------------------------------------------------


def run(argv: Optional[Sequence[str]] = None) -> int:
    """Parse *argv*, run the generator and return the exit code."""
    from tablegen.validators import ValidationResult, validate_config

    parser: argparse.ArgumentParser = _build_parser()
    args: argparse.Namespace = parser.parse_args(argv)

    verbosity: int = -1 if args.quiet else args.verbose
    _setup_logging(verbosity)

    # --- Configuration ---
    try:
        config = _build_config(args)
    except PydanticValidationError as exc:
        for message in _pydantic_messages(exc):
            logger.error("%s", message)
        parser.print_usage(sys.stderr)
        return EXIT_CONFIG_ERROR

    result: ValidationResult = validate_config(config)
    for warning in result.warnings:
        logger.warning("%s", warning.message)
    if not result.is_valid:
        for error in result.errors:
            logger.error("%s", error.message)
        return EXIT_CONFIG_ERROR

    credentials: Path = Path(args.credentials)
    _log_settings(config, credentials)

    exit_code: int = _run_generation(config, credentials, args.quiet)
    if exit_code != EXIT_SUCCESS:
        logger.error("Generation failed with exit code %d.", exit_code)
    return exit_code


def cli_main(argv: Optional[Sequence[str]] = None) -> NoReturn:
    """
    Main CLI entry point.

    Can be called from ``__main__.py`` or directly for testing.
    """
    sys.exit(run(argv))


# ---------------------------------------------------------------------------
# Module-level exports
# ---------------------------------------------------------------------------

__all__: List[str] = [
    "cli_main",
    "run",
    "TaskPrefixFilter",
    "EXIT_SUCCESS",
    "EXIT_CONFIG_ERROR",
    "EXIT_CONNECTION_ERROR",
    "EXIT_TABLES_SKIPPED",
    "EXIT_INPUT_ERROR",
]

logger.debug("tablegen.cli loaded.")
