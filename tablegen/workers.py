# File: tablegen/workers.py
"""
TableGen - Discovery & Generator Tasks
=======================================

The two kinds of task that run inside the pipeline's thread pool:

    ``TableDiscoverer`` (one, labelled ``reader-0``)
        Produces table names onto the shared queue, then exactly one
        ``Signal.DONE`` per worker.  The signals are emitted from a
        ``finally`` block, so they flow even when enumeration fails and no
        worker is ever left blocked on an empty queue.

    ``GeneratorWorker`` (N, labelled ``writer-0`` .. ``writer-N-1``)
        Takes items until it receives a signal (or a blank name), turning
        each table name into a ``TableResult``.  Every per-table failure is
        logged and recorded as a skip; the worker then moves on.

Task labels are attached to log records (``extra={"task": ...}``) rather than
to the executing thread, so they survive any choice of executor.
"""

from __future__ import annotations

import logging
import queue
from enum import Enum
from typing import Any, List, MutableMapping, Optional, Tuple

from tablegen.exceptions import DiscoveryError, NoColumnsFoundError, TableError
from tablegen.exporters import ArtifactWriter
from tablegen.introspection import Introspector
from tablegen.models import (
    ColumnMetadata,
    GeneratedArtifact,
    GeneratorConfig,
    Signal,
    TableResult,
    TableTask,
    WorkerOutcome,
)
from tablegen.templates import ArtifactRenderer

# ---------------------------------------------------------------------------
# Logger
# ---------------------------------------------------------------------------
logger: logging.Logger = logging.getLogger("tablegen.workers")

DISCOVERER_NAME: str = "reader-0"


def worker_name(index: int) -> str:
    return f"writer-{index}"


class TaskLogAdapter(logging.LoggerAdapter):
    """Stamps every record with the task label (``record.task``)."""

    def process(
        self, msg: Any, kwargs: MutableMapping[str, Any]
    ) -> Tuple[Any, MutableMapping[str, Any]]:
        extra = dict(kwargs.get("extra") or {})
        extra.setdefault("task", self.extra["task"])
        kwargs["extra"] = extra
        return msg, kwargs


def task_logger(name: str) -> TaskLogAdapter:
    return TaskLogAdapter(logger, {"task": name})


# ---------------------------------------------------------------------------
# TableDiscoverer
# ---------------------------------------------------------------------------


class DiscoveryState(str, Enum):
    START = "start"
    ENUMERATING = "enumerating"
    EMITTING = "emitting"
    DONE = "done"


class TableDiscoverer:
    """
    Single producer: enqueues table names followed by ``workers`` signals.

    State machine: ``START → ENUMERATING → EMITTING → DONE``.  An
    enumeration failure is logged, kept in ``error`` and degrades the run
    to zero discovered tables.
    """

    def __init__(
        self,
        config: GeneratorConfig,
        introspector: Introspector,
        task_queue: "queue.Queue[TableTask]",
        name: str = DISCOVERER_NAME,
    ) -> None:
        self.name: str = name
        self.state: DiscoveryState = DiscoveryState.START
        self.error: Optional[str] = None
        self.signals_emitted: int = 0
        self._config: GeneratorConfig = config
        self._introspector: Introspector = introspector
        self._queue: "queue.Queue[TableTask]" = task_queue
        self._log: TaskLogAdapter = task_logger(name)

    def run(self) -> List[str]:
        """Enqueue every target table name; return them in enqueue order."""
        enqueued: List[str] = []
        self.state = DiscoveryState.ENUMERATING
        try:
            for table in self._enumerate():
                self._queue.put(table)
                enqueued.append(table)
        finally:
            self.state = DiscoveryState.EMITTING
            self._emit_done_signals()
            self.state = DiscoveryState.DONE

        self._log.info("DONE")
        return enqueued

    def _enumerate(self) -> List[str]:
        if not self._config.all_tables:
            self._log.info("reading tables list from preferences...")
            return list(self._config.tables)

        self._log.info("reading all tables from database...")
        try:
            return self._introspector.list_tables()
        except DiscoveryError as exc:
            self.error = str(exc)
            self._log.error("%s", exc)
            return []

    def _emit_done_signals(self) -> None:
        for _ in range(self._config.workers):
            self._queue.put(Signal.DONE)
            self.signals_emitted += 1
        self._log.debug("emitted %d done signals", self.signals_emitted)


# ---------------------------------------------------------------------------
# GeneratorWorker
# ---------------------------------------------------------------------------


class GeneratorWorker:
    """
    Consumer: introspects, renders and writes one table per queue item.

    The renderer and writer are stateless and shared; everything built for
    a table (columns, rendered text) stays local to the call that built it.
    """

    def __init__(
        self,
        index: int,
        config: GeneratorConfig,
        introspector: Introspector,
        renderer: ArtifactRenderer,
        writer: ArtifactWriter,
        task_queue: "queue.Queue[TableTask]",
    ) -> None:
        self.name: str = worker_name(index)
        self._config: GeneratorConfig = config
        self._introspector: Introspector = introspector
        self._renderer: ArtifactRenderer = renderer
        self._writer: ArtifactWriter = writer
        self._queue: "queue.Queue[TableTask]" = task_queue
        self._log: TaskLogAdapter = task_logger(self.name)

    def run(self) -> WorkerOutcome:
        """Process queue items until a done signal or a blank name arrives."""
        outcome: WorkerOutcome = WorkerOutcome(name=self.name)

        while True:
            try:
                task: TableTask = self._queue.get()
            except Exception as exc:
                outcome.error = f"queue read interrupted: {exc}"
                self._log.error("%s", outcome.error)
                break

            if task is Signal.DONE:
                outcome.consumed_signals += 1
                break
            if not isinstance(task, str) or not task.strip():
                break

            outcome.results.append(self.process_table(task))

        self._log.info("DONE")
        return outcome

    def process_table(self, table: str) -> TableResult:
        """Generate both artifacts for *table*; never raises."""
        try:
            columns: List[ColumnMetadata] = self._introspector.describe(table)
            if not columns:
                raise NoColumnsFoundError(table)

            artifacts: List[GeneratedArtifact] = self._renderer.render_all(
                table, columns
            )
            paths: List[str] = [
                str(
                    self._writer.write_artifact(
                        self._config.namespace, artifact, table=table
                    )
                )
                for artifact in artifacts
            ]
        except TableError as exc:
            message: str = str(exc).strip()
            self._log.error("[table=%s] %s", table, message)
            return TableResult.skipped(table, message, worker=self.name)
        except Exception as exc:
            message = f"{type(exc).__name__}: {str(exc).strip()}"
            self._log.error("[table=%s] %s", table, message, exc_info=True)
            return TableResult.skipped(table, message, worker=self.name)

        self._log.info("[table=%s] generated pojo file: %s", table, paths[0])
        for path in paths[1:]:
            self._log.info("[table=%s] generated mapping file: %s", table, path)
        return TableResult.success(table, paths, worker=self.name)


__all__: List[str] = [
    "DISCOVERER_NAME",
    "DiscoveryState",
    "GeneratorWorker",
    "TableDiscoverer",
    "TaskLogAdapter",
    "task_logger",
    "worker_name",
]

logger.debug("tablegen.workers loaded.")
