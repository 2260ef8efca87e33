"""Context-carrying logger over the standard logging module."""

from __future__ import annotations

import logging
import sys
from typing import Any, Optional, TextIO

LOGGER_NAME = "parallelize"
_FORMAT = "%(levelname)s %(name)s: %(message)s"


class ContextLogger:
    """Logger that appends its structured context as ``key=value`` pairs."""

    def __init__(self, name: str = LOGGER_NAME, context: Optional[dict[str, Any]] = None):
        self.logger = logging.getLogger(name)
        self.context: dict[str, Any] = dict(context or {})

    def _render(self, msg: str, fields: dict[str, Any]) -> str:
        merged = {**self.context, **fields}
        if not merged:
            return msg
        pairs = " ".join(f"{key}={value}" for key, value in merged.items() if value is not None)
        return f"{msg} {pairs}" if pairs else msg

    def _log(self, level: int, msg: str, **fields: Any) -> None:
        if not self.logger.isEnabledFor(level):
            return
        self.logger.log(level, self._render(msg, fields), extra={"context": {**self.context, **fields}})

    def debug(self, msg: str, **fields: Any) -> None:
        self._log(logging.DEBUG, msg, **fields)

    def info(self, msg: str, **fields: Any) -> None:
        self._log(logging.INFO, msg, **fields)

    def warning(self, msg: str, **fields: Any) -> None:
        self._log(logging.WARNING, msg, **fields)

    def error(self, msg: str, **fields: Any) -> None:
        self._log(logging.ERROR, msg, **fields)

    def with_context(self, **fields: Any) -> ContextLogger:
        """Copy of this logger with ``fields`` added to its context."""
        return ContextLogger(self.logger.name, {**self.context, **fields})


def get_logger(name: str = LOGGER_NAME, **context: Any) -> ContextLogger:
    return ContextLogger(name, context)


def configure_logging(level: str | int = "WARNING", stream: TextIO | None = None) -> None:
    """Route the package logger to ``stream`` (stderr) at ``level``."""
    logger = logging.getLogger(LOGGER_NAME)
    if isinstance(level, str):
        resolved = logging.getLevelName(level.upper())
        if not isinstance(resolved, int):
            raise ValueError(f"unknown log level: {level}")
        level = resolved
    logger.setLevel(level)
    for handler in list(logger.handlers):
        if getattr(handler, "_parallelize", False):
            logger.removeHandler(handler)
    handler = logging.StreamHandler(stream if stream is not None else sys.stderr)
    handler.setFormatter(logging.Formatter(_FORMAT))
    handler._parallelize = True  # type: ignore[attr-defined]
    logger.addHandler(handler)
