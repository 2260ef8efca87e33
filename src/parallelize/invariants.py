"""Invariant markers for tree handling."""

from __future__ import annotations

from typing import NoReturn

from parallelize.exceptions import StructuralError


def never(reason: str = "", **env: object) -> NoReturn:
    """Mark a code path as unreachable for well-formed trees.

    The env payload is attached to the raised error for diagnostics only.
    """
    raise StructuralError(reason or "unreachable tree shape", env=env)

