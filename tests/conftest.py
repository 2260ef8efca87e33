from __future__ import annotations

import logging
import sys
from pathlib import Path

ROOT = Path(__file__).resolve().parents[1]
for entry in (ROOT, ROOT / "src"):
    if str(entry) not in sys.path:
        sys.path.insert(0, str(entry))


import pytest

from tests.go_helpers import go_source


@pytest.fixture
def go_module(tmp_path: Path):
    """Factory writing a Go module under ``tmp_path`` and returning its root."""

    def _make(
        files: dict[str, str],
        *,
        module: str | None = "example.com/sample",
        name: str = "sample",
    ) -> Path:
        root = tmp_path / name
        root.mkdir(parents=True, exist_ok=True)
        if module is not None:
            (root / "go.mod").write_text(f"module {module}\n\ngo 1.21\n", encoding="utf-8")
        for relative, text in files.items():
            target = root / relative
            target.parent.mkdir(parents=True, exist_ok=True)
            target.write_text(go_source(text), encoding="utf-8")
        return root

    return _make


@pytest.fixture(autouse=True)
def _restore_package_logger():
    logger = logging.getLogger("parallelize")
    handlers = list(logger.handlers)
    level = logger.level
    yield
    logger.handlers[:] = handlers
    logger.setLevel(level)
