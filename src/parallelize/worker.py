"""Per-unit pipeline: classify, rewrite, fix and print every test file."""

from __future__ import annotations

from typing import Protocol

from parallelize.config import RewriteConfig
from parallelize.log_context import ContextLogger, get_logger
from parallelize.loader import CompilationUnit
from parallelize.rewrite import Classifier, FunctionOutcome, State, SubtestRewriter, TableFixer, UnitReport
from parallelize.syntax import Printer
from parallelize.syntax.nodes import File, FuncDecl


class Sink(Protocol):
    def write(self, text: str) -> None: ...


class Worker:
    def __init__(
        self,
        unit: CompilationUnit,
        sink: Sink,
        *,
        config: RewriteConfig | None = None,
        logger: ContextLogger | None = None,
    ) -> None:
        self.unit = unit
        self.sink = sink
        self.config = config or RewriteConfig()
        self.logger = (logger or get_logger()).with_context(unit=unit.id)
        self.classifier = Classifier(unit.type_table, self.config, self.logger)
        self.rewriter = SubtestRewriter(self.config, self.logger)
        self.fixer = TableFixer(self.config, self.logger)

    def is_test_file(self, file: File) -> bool:
        return file.path.endswith(self.config.test_file_suffix)

    def run(self) -> UnitReport:
        report = UnitReport(unit_id=self.unit.id)
        printer = Printer()
        for file in self.unit.files:
            log = self.logger.with_context(file=file.path)
            if not self.is_test_file(file):
                log.debug("skipping file due to not being a test file")
                if self.config.emit_non_test_files:
                    self.sink.write(printer.render(file))
                continue
            log.debug("processing test file")
            report.functions.extend(self.process_file(file, log))
            # Rendered in full before writing so one file is one sink write.
            self.sink.write(printer.render(file))
            report.files.append(file.path)
        counts = ", ".join(f"{state}={count}" for state, count in report.counts().items() if count)
        self.logger.info(f"unit done: {counts or 'no functions'}")
        return report

    def process_file(self, file: File, logger: ContextLogger | None = None) -> list[FunctionOutcome]:
        log = logger or self.logger
        return [
            self.process_func(decl, file.path, log.with_context(func=decl.name.name))
            for decl in file.func_decls()
        ]

    def process_func(self, decl: FuncDecl, path: str, logger: ContextLogger) -> FunctionOutcome:
        outcome = FunctionOutcome(path=path, function=decl.name.name, state=State.IGNORED)
        if not self.classifier.is_test_func(decl, logger):
            return outcome
        result = self.rewriter.rewrite(decl, self.classifier.handle_name(decl), logger)
        outcome.state = result.state
        outcome.messages.extend(result.messages)
        if result.state is State.SUBTEST_PARALLELIZED and result.stmt is not None:
            if self.fixer.fix(decl, result.stmt, logger):
                outcome.state = State.TABLE_FIXED
        return outcome
