"""Exception hierarchy for parallelize runs."""

from __future__ import annotations

from pathlib import Path


class ParallelizeError(Exception):
    """Base class for every error the tool reports to the user."""


class ConfigError(ParallelizeError):
    pass


class LoadError(ParallelizeError):
    pass


class ParseError(LoadError):
    def __init__(self, message: str, *, path: Path | str, line: int, column: int) -> None:
        super().__init__(f"{path}:{line}:{column}: {message}")
        self.path = str(path)
        self.line = line
        self.column = column
        self.reason = message


class PrintError(ParallelizeError):
    pass


class StructuralError(ParallelizeError):
    """Raised for tree shapes the parser is assumed never to produce.

    Reaching one of these aborts the whole run; soft per-construct problems
    are reported through function outcomes instead.
    """

    def __init__(self, message: str, *, env: dict[str, object] | None = None) -> None:
        super().__init__(message)
        self.reason = message
        self.env = dict(env or {})

    def __str__(self) -> str:
        if not self.env:
            return self.reason
        detail = ", ".join(f"{key}={value}" for key, value in sorted(self.env.items()))
        return f"{self.reason} ({detail})"
