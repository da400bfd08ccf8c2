"""
tests/test_workers.py
Unit tests for tablegen.workers (TableDiscoverer, GeneratorWorker).

Tests cover:
- Queue contents and done-signal count for both discovery modes
- Discovery failure still emitting every signal
- Worker termination on signal and on blank names
- Per-table failures turning into skipped results with the logged reason
"""

from __future__ import annotations

import logging
import pathlib
import queue
from typing import Callable, List

import pytest

from tablegen.exceptions import DiscoveryError, IntrospectionError, WriteFailedError
from tablegen.exporters import ArtifactWriter
from tablegen.models import ColumnMetadata, GeneratorConfig, Signal, TableStatus
from tablegen.templates import ArtifactRenderer
from tablegen.workers import (
    DiscoveryState,
    GeneratorWorker,
    TableDiscoverer,
    TaskLogAdapter,
    task_logger,
    worker_name,
)


def _drain(task_queue: "queue.Queue") -> List[object]:
    items: List[object] = []
    while not task_queue.empty():
        items.append(task_queue.get_nowait())
    return items


def _worker(config: GeneratorConfig, introspector, task_queue, index: int = 0) -> GeneratorWorker:
    return GeneratorWorker(
        index,
        config,
        introspector,
        ArtifactRenderer(config),
        ArtifactWriter.from_config(config),
        task_queue,
    )


# ===========================================================================
# Discoverer
# ===========================================================================


class TestTableDiscoverer:
    def test_explicit_list_then_one_signal_per_worker(
        self, make_config: Callable[..., GeneratorConfig], stub_introspector_factory
    ) -> None:
        config = make_config("A;B;C", workers=2)
        task_queue: "queue.Queue" = queue.Queue()
        discoverer = TableDiscoverer(config, stub_introspector_factory({}), task_queue)

        assert discoverer.run() == ["A", "B", "C"]
        assert _drain(task_queue) == ["A", "B", "C", Signal.DONE, Signal.DONE]
        assert discoverer.signals_emitted == 2
        assert discoverer.state == DiscoveryState.DONE

    def test_all_tables_mode_uses_catalog(
        self, make_config: Callable[..., GeneratorConfig], stub_introspector_factory
    ) -> None:
        config = make_config(None, workers=3)
        introspector = stub_introspector_factory({"X": [], "Y": []})
        task_queue: "queue.Queue" = queue.Queue()

        TableDiscoverer(config, introspector, task_queue).run()
        assert _drain(task_queue) == ["X", "Y"] + [Signal.DONE] * 3

    def test_discovery_error_degrades_to_zero_tables(
        self,
        make_config: Callable[..., GeneratorConfig],
        stub_introspector_factory,
        caplog: pytest.LogCaptureFixture,
    ) -> None:
        caplog.set_level(logging.INFO)
        config = make_config(None, workers=4)
        introspector = stub_introspector_factory({}, list_error=DiscoveryError("catalog down"))
        task_queue: "queue.Queue" = queue.Queue()
        discoverer = TableDiscoverer(config, introspector, task_queue)

        assert discoverer.run() == []
        assert discoverer.error == "catalog down"
        assert _drain(task_queue) == [Signal.DONE] * 4
        assert any(
            r.levelno == logging.ERROR and r.getMessage() == "catalog down" and r.task == "reader-0"
            for r in caplog.records
        )

    def test_unexpected_failure_still_emits_signals(
        self, make_config: Callable[..., GeneratorConfig], stub_introspector_factory
    ) -> None:
        config = make_config(None, workers=2)
        introspector = stub_introspector_factory({}, list_error=RuntimeError("boom"))
        task_queue: "queue.Queue" = queue.Queue()

        with pytest.raises(RuntimeError):
            TableDiscoverer(config, introspector, task_queue).run()
        assert _drain(task_queue) == [Signal.DONE, Signal.DONE]

    def test_logs_with_reader_label(
        self,
        make_config: Callable[..., GeneratorConfig],
        stub_introspector_factory,
        caplog: pytest.LogCaptureFixture,
    ) -> None:
        caplog.set_level(logging.INFO)
        TableDiscoverer(make_config("A"), stub_introspector_factory({}), queue.Queue()).run()
        messages = [(r.task, r.getMessage()) for r in caplog.records if hasattr(r, "task")]
        assert ("reader-0", "reading tables list from preferences...") in messages
        assert ("reader-0", "DONE") in messages


# ===========================================================================
# Worker
# ===========================================================================


class TestGeneratorWorker:
    def test_name(self) -> None:
        assert worker_name(3) == "writer-3"

    def test_processes_until_signal(
        self,
        make_config: Callable[..., GeneratorConfig],
        stub_introspector_factory,
        accounts_columns: List[ColumnMetadata],
        output_dir: pathlib.Path,
    ) -> None:
        config = make_config("ACCOUNTS")
        task_queue: "queue.Queue" = queue.Queue()
        for item in ("ACCOUNTS", Signal.DONE, "NEVER"):
            task_queue.put(item)

        outcome = _worker(config, stub_introspector_factory({"ACCOUNTS": accounts_columns}), task_queue).run()

        assert outcome.name == "writer-0"
        assert outcome.consumed_signals == 1
        assert [r.table for r in outcome.results] == ["ACCOUNTS"]
        assert outcome.results[0].status == TableStatus.OK
        package = output_dir / "com" / "acme" / "model"
        assert outcome.results[0].paths == (
            str(package / "Accounts.java"),
            str(package / "Accounts.xml"),
        )
        assert task_queue.get_nowait() == "NEVER"

    def test_blank_name_terminates(
        self, make_config: Callable[..., GeneratorConfig], stub_introspector_factory
    ) -> None:
        task_queue: "queue.Queue" = queue.Queue()
        task_queue.put("   ")
        task_queue.put(Signal.DONE)

        outcome = _worker(make_config("A"), stub_introspector_factory({}), task_queue).run()

        assert outcome.results == []
        assert outcome.consumed_signals == 0
        assert task_queue.get_nowait() is Signal.DONE

    def test_ghost_table_is_skipped_without_files(
        self,
        make_config: Callable[..., GeneratorConfig],
        stub_introspector_factory,
        output_dir: pathlib.Path,
        caplog: pytest.LogCaptureFixture,
    ) -> None:
        caplog.set_level(logging.INFO)
        worker = _worker(make_config("GHOST"), stub_introspector_factory({"GHOST": []}), queue.Queue(), index=2)

        result = worker.process_table("GHOST")

        assert result.status == TableStatus.SKIPPED
        assert result.reason == "no columns found in table"
        assert result.worker == "writer-2"
        assert not output_dir.exists()
        errors = [(r.task, r.getMessage()) for r in caplog.records if r.levelno == logging.ERROR]
        assert errors == [("writer-2", "[table=GHOST] no columns found in table")]

    def test_success_log_line(
        self,
        make_config: Callable[..., GeneratorConfig],
        stub_introspector_factory,
        accounts_columns: List[ColumnMetadata],
        caplog: pytest.LogCaptureFixture,
    ) -> None:
        caplog.set_level(logging.INFO)
        worker = _worker(
            make_config("ACCOUNTS", class_suffix="Entity"),
            stub_introspector_factory({"ACCOUNTS": accounts_columns}),
            queue.Queue(),
        )
        result = worker.process_table("ACCOUNTS")

        assert result.ok
        messages = [r.getMessage() for r in caplog.records]
        assert any(
            m.startswith("[table=ACCOUNTS] generated pojo file: ") and m.endswith("AccountsEntity.java")
            for m in messages
        )

    @pytest.mark.parametrize(
        "error, reason",
        [
            (IntrospectionError("no such table: NOPE"), "no such table: NOPE"),
            (WriteFailedError("disk full"), "disk full"),
            (ValueError("bad metadata"), "ValueError: bad metadata"),
        ],
    )
    def test_failures_become_skips(
        self,
        make_config: Callable[..., GeneratorConfig],
        stub_introspector_factory,
        error: Exception,
        reason: str,
    ) -> None:
        task_queue: "queue.Queue" = queue.Queue()
        for item in ("BAD", "A", Signal.DONE):
            task_queue.put(item)
        introspector = stub_introspector_factory({}, failures={"BAD": error, "A": error})

        outcome = _worker(make_config("BAD;A"), introspector, task_queue).run()

        assert [r.status for r in outcome.results] == [TableStatus.SKIPPED] * 2
        assert outcome.results[0].reason == reason
        assert outcome.consumed_signals == 1

    def test_queue_read_failure_ends_only_this_worker(
        self, make_config: Callable[..., GeneratorConfig], stub_introspector_factory
    ) -> None:
        class BrokenQueue:
            def get(self):
                raise OSError("interrupted")

        outcome = _worker(make_config("A"), stub_introspector_factory({}), BrokenQueue()).run()

        assert outcome.error == "queue read interrupted: interrupted"
        assert outcome.results == []


class TestTaskLogAdapter:
    def test_adds_task_and_keeps_extra(self, caplog: pytest.LogCaptureFixture) -> None:
        caplog.set_level(logging.INFO)
        adapter = task_logger("writer-7")
        assert isinstance(adapter, TaskLogAdapter)
        adapter.info("hello", extra={"table": "T"})
        record = caplog.records[-1]
        assert record.task == "writer-7"
        assert record.table == "T"
