"""Discover Go packages under a module directory and load compilation units.

Unit identifiers follow the Go tooling convention: ``pkg`` for the plain
package, ``pkg [pkg.test]`` for the package compiled with its in-package test
files and ``pkg_test [pkg.test]`` for the external test package.
"""

from __future__ import annotations

import os
import re
from dataclasses import dataclass, field
from pathlib import Path

from parallelize.config import RewriteConfig
from parallelize.exceptions import LoadError
from parallelize.log_context import ContextLogger, get_logger
from parallelize.syntax import parse_file
from parallelize.syntax.nodes import File
from parallelize.syntax.tokens import TokenKind, tokenize
from parallelize.typetable import TypeResolver, TypeTable

_MODULE_RE = re.compile(r"^\s*module\s+(\"[^\"]+\"|`[^`]+`|\S+)", re.MULTILINE)
_SKIPPED_DIRS = {"testdata", "vendor"}


@dataclass
class CompilationUnit:
    id: str
    pkg_path: str
    package_name: str
    files: list[File] = field(default_factory=list)
    type_table: TypeTable = field(default_factory=TypeTable)

    def is_test_variant(self, marker: str = ".test]") -> bool:
        return self.id.endswith(marker)


@dataclass(frozen=True)
class _SourceFile:
    path: Path
    source: str
    package: str
    is_test: bool


def module_path(module_dir: Path, logger: ContextLogger | None = None) -> str:
    logger = logger or get_logger()
    go_mod = module_dir / "go.mod"
    try:
        text = go_mod.read_text(encoding="utf-8")
    except FileNotFoundError:
        text = ""
    except OSError as exc:
        raise LoadError(f"cannot read {go_mod}: {exc}") from exc
    match = _MODULE_RE.search(text)
    if match is None:
        logger.warning("no module directive found; using directory name", dir=module_dir)
        return module_dir.resolve().name
    return match.group(1).strip("\"`")


def package_dirs(module_dir: Path, *, recursive: bool) -> list[Path]:
    if not recursive:
        return [module_dir]
    found: list[Path] = []
    for current, dirnames, _ in os.walk(module_dir):
        dirnames[:] = sorted(
            name
            for name in dirnames
            if name not in _SKIPPED_DIRS and not name.startswith((".", "_"))
        )
        found.append(Path(current))
    return found


def go_files(directory: Path) -> list[Path]:
    return sorted(
        entry
        for entry in directory.iterdir()
        if entry.is_file()
        and entry.suffix == ".go"
        and not entry.name.startswith((".", "_"))
    )


def package_clause(source: str, path: Path | str) -> str:
    stream = tokenize(source, path)
    tokens = stream.tokens
    for index, token in enumerate(tokens):
        if token.is_keyword("package"):
            if index + 1 < len(tokens) and tokens[index + 1].kind is TokenKind.IDENT:
                return tokens[index + 1].text
            break
    raise stream.error("expected package clause", tokens[0].start if tokens else 0)


def _read(path: Path, config: RewriteConfig) -> _SourceFile:
    try:
        source = path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as exc:
        raise LoadError(f"cannot read {path}: {exc}") from exc
    return _SourceFile(
        path=path,
        source=source,
        package=package_clause(source, path),
        is_test=path.name.endswith(config.test_file_suffix),
    )


def _build_unit(
    unit_id: str,
    pkg_path: str,
    sources: list[_SourceFile],
) -> CompilationUnit:
    files = [parse_file(item.source, item.path) for item in sources]
    table = TypeResolver(pkg_path, files, TypeTable()).resolve_all()
    return CompilationUnit(
        id=unit_id,
        pkg_path=pkg_path,
        package_name=sources[0].package,
        files=files,
        type_table=table,
    )


def _check_single_package(directory: Path, sources: list[_SourceFile]) -> None:
    names = sorted({item.package for item in sources})
    if len(names) > 1:
        raise LoadError(f"found packages {' and '.join(names)} in {directory}")


def load_package(
    directory: Path,
    pkg_path: str,
    *,
    config: RewriteConfig,
    logger: ContextLogger,
) -> list[CompilationUnit]:
    sources = [_read(path, config) for path in go_files(directory)]
    plain = [item for item in sources if not item.is_test]
    internal = [item for item in sources if item.is_test and not item.package.endswith("_test")]
    external = [item for item in sources if item.is_test and item.package.endswith("_test")]
    _check_single_package(directory, plain + internal)
    _check_single_package(directory, external)

    units: list[CompilationUnit] = []
    test_id = f"{pkg_path}.test"
    if plain:
        units.append(_build_unit(pkg_path, pkg_path, plain))
    if internal:
        units.append(_build_unit(f"{pkg_path} [{test_id}]", pkg_path, plain + internal))
    if external:
        units.append(_build_unit(f"{pkg_path}_test [{test_id}]", f"{pkg_path}_test", external))
    for unit in units:
        logger.debug("loaded unit", unit=unit.id, files=len(unit.files))
    return units


def load_units(
    module_dir: Path,
    *,
    config: RewriteConfig | None = None,
    logger: ContextLogger | None = None,
) -> list[CompilationUnit]:
    """Load every compilation unit of the module rooted at ``module_dir``."""
    config = config or RewriteConfig()
    logger = logger or get_logger()
    if not module_dir.is_dir():
        raise LoadError(f"not a directory: {module_dir}")
    module = module_path(module_dir, logger)
    units: list[CompilationUnit] = []
    for directory in package_dirs(module_dir, recursive=config.recursive):
        relative = directory.relative_to(module_dir).as_posix()
        pkg_path = module if relative == "." else f"{module}/{relative}"
        units.extend(load_package(directory, pkg_path, config=config, logger=logger))
    if not units:
        raise LoadError(f"no Go files in {module_dir}")
    return units
