"""Fan test-build units out over a thread pool and collect their reports."""

from __future__ import annotations

import concurrent.futures
import sys
import threading
from typing import Iterable, TextIO

from parallelize.config import RewriteConfig
from parallelize.log_context import ContextLogger, get_logger
from parallelize.loader import CompilationUnit
from parallelize.rewrite import UnitReport
from parallelize.worker import Worker


class OutputSink:
    """Shared text stream; every write is one locked write-and-flush."""

    def __init__(self, stream: TextIO | None = None) -> None:
        self.stream = stream if stream is not None else sys.stdout
        self._lock = threading.Lock()

    def write(self, text: str) -> None:
        with self._lock:
            self.stream.write(text)
            self.stream.flush()


class Dispatcher:
    def __init__(
        self,
        sink: OutputSink,
        *,
        config: RewriteConfig | None = None,
        logger: ContextLogger | None = None,
    ) -> None:
        self.sink = sink
        self.config = config or RewriteConfig()
        self.logger = logger or get_logger()

    def select(self, units: Iterable[CompilationUnit]) -> list[CompilationUnit]:
        selected: list[CompilationUnit] = []
        for unit in units:
            if unit.is_test_variant(self.config.test_unit_marker):
                selected.append(unit)
            else:
                self.logger.debug("skipping package due to not being the test package", unit=unit.id)
        return selected

    def run(self, units: Iterable[CompilationUnit]) -> list[UnitReport]:
        """Run one worker per test unit and wait for all of them.

        A failing worker cancels the units that have not started yet; its
        exception is re-raised once the running workers have finished.
        """
        selected = self.select(units)
        if not selected:
            self.logger.info("no test packages to process")
            return []
        workers = self.config.max_workers or len(selected)
        with concurrent.futures.ThreadPoolExecutor(
            max_workers=workers, thread_name_prefix="parallelize"
        ) as executor:
            futures = {}
            for unit in selected:
                self.logger.debug("launching worker", unit=unit.id)
                worker = Worker(unit, self.sink, config=self.config, logger=self.logger)
                futures[executor.submit(worker.run)] = unit
            done, pending = concurrent.futures.wait(
                futures, return_when=concurrent.futures.FIRST_EXCEPTION
            )
            for future in pending:
                future.cancel()
        for future in futures:
            if future.done() and not future.cancelled() and future.exception() is not None:
                self.logger.error("worker failed", unit=futures[future].id)
                raise future.exception()  # type: ignore[misc]
        reports = [future.result() for future in futures]
        self.logger.info("workload finished", units=len(reports))
        return reports
