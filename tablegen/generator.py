# File: tablegen/generator.py
"""
TableGen - Generation Pipeline (Coordinator)
=============================================

Connects every phase of a run:

    Discovery → (queue) → Introspection → Rendering → Writing

``GenerationPipeline.run()`` creates the shared task queue, starts one
``TableDiscoverer`` and ``config.workers`` ``GeneratorWorker`` tasks in a
single ``ThreadPoolExecutor`` sized ``workers + 1`` and waits for all of
them.  There is no global deadline: termination rests on the discoverer
always emitting one done signal per worker.

Error handling strategy:
    - Per-table failures are isolated inside the worker; one bad table
      never stops the others.
    - A discovery failure degrades the run to zero tables; workers still
      receive their signals and exit.
    - The final report gives a clear pass/fail verdict and lists every
      skipped table with its reason.
"""

from __future__ import annotations

import logging
import queue
from concurrent.futures import Future, ThreadPoolExecutor
from dataclasses import dataclass, field
from typing import List, Optional

from sqlalchemy.engine import Engine

from tablegen.exceptions import ConfigurationError
from tablegen.exporters import ArtifactWriter
from tablegen.introspection import Introspector, SQLAlchemyIntrospector
from tablegen.models import GeneratorConfig, TableResult, TableTask, WorkerOutcome
from tablegen.templates import ArtifactRenderer
from tablegen.utils import Timer
from tablegen.workers import GeneratorWorker, TableDiscoverer

# ---------------------------------------------------------------------------
# Logger
# ---------------------------------------------------------------------------
logger: logging.Logger = logging.getLogger("tablegen.generator")


# ---------------------------------------------------------------------------
# Generation report
# ---------------------------------------------------------------------------


@dataclass(frozen=False, slots=True)
class GenerationReport:
    """
    Report produced by ``GenerationPipeline.run()``.

    ``results`` holds exactly one entry per table name the workers consumed,
    in completion order.
    """

    success: bool = False
    namespace: str = ""
    output_directory: str = ""
    workers: int = 0

    discovered_tables: List[str] = field(default_factory=list)
    results: List[TableResult] = field(default_factory=list)
    discovery_error: Optional[str] = None
    worker_errors: List[str] = field(default_factory=list)

    signals_emitted: int = 0
    signals_consumed: int = 0
    total_elapsed_seconds: float = 0.0

    @property
    def generated(self) -> List[TableResult]:
        return [r for r in self.results if r.ok]

    @property
    def skipped(self) -> List[TableResult]:
        return [r for r in self.results if not r.ok]

    @property
    def total_files(self) -> int:
        return sum(len(r.paths) for r in self.results)

    def summary(self) -> str:
        """Return a human-readable summary string."""
        status: str = "SUCCESS" if self.success else "FAILED"
        lines: List[str] = [
            "=" * 60,
            "  TableGen - Generation Report",
            "=" * 60,
            f"  Status:           {status}",
            f"  Namespace:        {self.namespace}",
            f"  Output:           {self.output_directory}",
            f"  Workers:          {self.workers}",
            f"  Tables found:     {len(self.discovered_tables)}",
            f"  Tables generated: {len(self.generated)}",
            f"  Files written:    {self.total_files}",
            f"  Total time:       {self.total_elapsed_seconds:.3f}s",
        ]

        if self.discovery_error:
            lines.append("-" * 60)
            lines.append(f"  Discovery Error: {self.discovery_error}")

        if self.worker_errors:
            lines.append("-" * 60)
            lines.append(f"  Worker Errors ({len(self.worker_errors)}):")
            for err in self.worker_errors:
                lines.append(f"    x {err}")

        if self.skipped:
            lines.append("-" * 60)
            lines.append(f"  Skipped Tables ({len(self.skipped)}):")
            for result in self.skipped:
                lines.append(f"    - {result.table}: {result.reason}")

        lines.append("=" * 60)
        return "\n".join(lines)


# ---------------------------------------------------------------------------
# GenerationPipeline - coordinator
# ---------------------------------------------------------------------------


class GenerationPipeline:
    """
    Runs one discoverer and N workers to completion.

    Usage::

        engine = create_engine("postgresql+psycopg://...")
        config = GeneratorConfig.for_tables("ACCOUNTS;ORDERS", namespace="com.acme")
        report = GenerationPipeline(config, engine).run()
        print(report.summary())

    The pipeline only borrows the engine; disposing of it is the caller's
    job.  Either an engine or a ready-made ``introspector`` must be given.
    """

    def __init__(
        self,
        config: GeneratorConfig,
        engine: Optional[Engine] = None,
        *,
        introspector: Optional[Introspector] = None,
        renderer: Optional[ArtifactRenderer] = None,
        writer: Optional[ArtifactWriter] = None,
    ) -> None:
        if introspector is None:
            if engine is None:
                raise ConfigurationError(
                    "GenerationPipeline needs an engine or an introspector."
                )
            introspector = SQLAlchemyIntrospector(engine)

        self._config: GeneratorConfig = config
        self._introspector: Introspector = introspector
        self._renderer: ArtifactRenderer = renderer or ArtifactRenderer(config)
        self._writer: ArtifactWriter = writer or ArtifactWriter.from_config(config)

        logger.debug(
            "GenerationPipeline initialised: mode=%s, workers=%d, output=%s.",
            config.mode.value,
            config.workers,
            config.output_dir,
        )

    @property
    def config(self) -> GeneratorConfig:
        return self._config

    # -----------------------------------------------------------------
    # Public: run
    # -----------------------------------------------------------------

    def run(self) -> GenerationReport:
        """Generate artifacts for every discovered table and wait for all tasks."""
        report: GenerationReport = GenerationReport(
            namespace=self._config.namespace,
            output_directory=str(self._writer.output_root),
            workers=self._config.workers,
        )

        timer: Timer = Timer("generation")
        try:
            with timer:
                self._execute(report)
        finally:
            report.total_elapsed_seconds = timer.elapsed
            logger.info("pipeline finished (elapsed: %dms)", timer.elapsed_ms)

        return self._finalise_report(report)

    # -----------------------------------------------------------------
    # Internal: task orchestration
    # -----------------------------------------------------------------

    def _execute(self, report: GenerationReport) -> None:
        task_queue: "queue.Queue[TableTask]" = queue.Queue()

        discoverer: TableDiscoverer = TableDiscoverer(
            self._config, self._introspector, task_queue
        )
        workers: List[GeneratorWorker] = [
            GeneratorWorker(
                index,
                self._config,
                self._introspector,
                self._renderer,
                self._writer,
                task_queue,
            )
            for index in range(self._config.workers)
        ]

        logger.info("processing tables...")
        with ThreadPoolExecutor(
            max_workers=self._config.workers + 1,
            thread_name_prefix="tablegen",
        ) as pool:
            discovery_future: Future[List[str]] = pool.submit(discoverer.run)
            worker_futures: List[Future[WorkerOutcome]] = [
                pool.submit(worker.run) for worker in workers
            ]

            self._collect_discovery(discovery_future, discoverer, report)
            for worker, future in zip(workers, worker_futures):
                self._collect_worker(worker, future, report)

    def _collect_discovery(
        self,
        future: "Future[List[str]]",
        discoverer: TableDiscoverer,
        report: GenerationReport,
    ) -> None:
        try:
            report.discovered_tables = future.result()
        except Exception as exc:
            report.discovery_error = f"{type(exc).__name__}: {exc}"
            logger.error(
                "Table discovery failed: %s", report.discovery_error, exc_info=True
            )
        else:
            report.discovery_error = discoverer.error
        report.signals_emitted = discoverer.signals_emitted

    def _collect_worker(
        self,
        worker: GeneratorWorker,
        future: "Future[WorkerOutcome]",
        report: GenerationReport,
    ) -> None:
        try:
            outcome: WorkerOutcome = future.result()
        except Exception as exc:
            message: str = f"{worker.name}: {type(exc).__name__}: {exc}"
            report.worker_errors.append(message)
            logger.error("Worker failed: %s", message, exc_info=True)
            return

        report.results.extend(outcome.results)
        report.signals_consumed += outcome.consumed_signals
        if outcome.error:
            report.worker_errors.append(f"{outcome.name}: {outcome.error}")

    # -----------------------------------------------------------------
    # Internal: finalise report
    # -----------------------------------------------------------------

    @staticmethod
    def _finalise_report(report: GenerationReport) -> GenerationReport:
        report.success = (
            report.discovery_error is None
            and not report.worker_errors
            and not report.skipped
        )
        if report.skipped:
            logger.warning(
                "%d table(s) skipped: %s",
                len(report.skipped),
                ", ".join(r.table for r in report.skipped),
            )
        return report


# ---------------------------------------------------------------------------
# Module-level exports
# ---------------------------------------------------------------------------

__all__: List[str] = [
    "GenerationPipeline",
    "GenerationReport",
]

logger.debug("tablegen.generator loaded.")
