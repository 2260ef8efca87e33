from __future__ import annotations

from pathlib import Path
from typing import List, Optional

import typer

from parallelize.config import RewriteConfig, resolve_config
from parallelize.dispatch import Dispatcher, OutputSink
from parallelize.exceptions import ParallelizeError
from parallelize.loader import load_units
from parallelize.log_context import configure_logging, get_logger
from parallelize.rewrite import UnitReport
from parallelize.schema import run_report_dto

app = typer.Typer(add_completion=False)


def _write_report(path: Path, reports: List[UnitReport]) -> None:
    payload = run_report_dto(reports).model_dump_json(indent=2)
    try:
        path.write_text(payload + "\n", encoding="utf-8")
    except OSError as exc:
        raise ParallelizeError(f"cannot write report {path}: {exc}") from exc


def run(module_dir: Path, settings: RewriteConfig, report: Path | None = None) -> List[UnitReport]:
    """Load the module, rewrite its test units to stdout and write the report."""
    logger = get_logger()
    units = load_units(module_dir, config=settings, logger=logger)
    reports = Dispatcher(OutputSink(), config=settings, logger=logger).run(units)
    if report is not None:
        _write_report(report, reports)
    return reports


@app.command()
def main(
    module_dir: Path = typer.Argument(..., help="Directory of the Go module."),
    config: Optional[Path] = typer.Option(
        None, "--config", help="TOML file (default: parallelize.toml in MODULE_DIR)."
    ),
    recursive: Optional[bool] = typer.Option(
        None, "--recursive/--no-recursive", help="Load ./... instead of the module root only."
    ),
    workers: Optional[int] = typer.Option(None, "--workers", min=1, help="Cap the thread pool."),
    emit_non_test_files: Optional[bool] = typer.Option(
        None,
        "--emit-non-test-files/--no-emit-non-test-files",
        help="Also print the non-test files of test packages.",
    ),
    report: Optional[Path] = typer.Option(None, "--report", help="Write the JSON run report."),
    log_level: Optional[str] = typer.Option(None, "--log-level", help="Logging threshold."),
) -> None:
    """Rewrite the Go tests of MODULE_DIR to run in parallel; print them to stdout."""
    try:
        settings = resolve_config(root=module_dir, config_path=config).with_overrides(
            recursive=recursive,
            max_workers=workers,
            emit_non_test_files=emit_non_test_files,
            log_level=log_level,
        )
        configure_logging(settings.log_level)
        run(module_dir, settings, report)
    except ParallelizeError as exc:
        typer.echo(f"parallelize: {exc}", err=True)
        raise typer.Exit(code=1) from exc
