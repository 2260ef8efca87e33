from __future__ import annotations

from dataclasses import dataclass, fields, replace
from datetime import date, datetime, time
from pathlib import Path
from typing import TypeAlias
import tomllib

from parallelize.exceptions import ConfigError

DEFAULT_CONFIG_NAME = "parallelize.toml"
SECTION = "parallelize"

TomlScalar: TypeAlias = str | int | float | bool | None | date | datetime | time
TomlValue: TypeAlias = TomlScalar | list["TomlValue"] | dict[str, "TomlValue"]
TomlTable: TypeAlias = dict[str, TomlValue]

_LOG_LEVELS = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}


@dataclass(frozen=True)
class RewriteConfig:
    test_prefix: str = "Test"
    handle_type: str = "testing.T"
    run_method: str = "Run"
    parallel_method: str = "Parallel"
    table_var: str = "tests"
    case_var: str = "tt"
    test_file_suffix: str = "_test.go"
    test_unit_marker: str = ".test]"
    recursive: bool = False
    emit_non_test_files: bool = False
    max_workers: int | None = None
    log_level: str = "WARNING"

    def with_overrides(self, **overrides: object) -> RewriteConfig:
        """Apply CLI overrides; ``None`` leaves the configured value in place."""
        present = {key: value for key, value in overrides.items() if value is not None}
        return validate(replace(self, **present))


def _load_toml(path: Path, *, required: bool) -> TomlTable:
    try:
        raw = path.read_text(encoding="utf-8")
    except FileNotFoundError:
        if required:
            raise ConfigError(f"config file not found: {path}") from None
        return {}
    except OSError as exc:
        raise ConfigError(f"cannot read config file {path}: {exc}") from exc
    try:
        data = tomllib.loads(raw)
    except tomllib.TOMLDecodeError as exc:
        raise ConfigError(f"invalid TOML in {path}: {exc}") from exc
    return data


def load_config(root: Path | None = None, config_path: Path | None = None) -> TomlTable:
    if config_path is None:
        base = root if root is not None else Path.cwd()
        return _load_toml(base / DEFAULT_CONFIG_NAME, required=False)
    return _load_toml(config_path, required=True)


def rewrite_defaults(root: Path | None = None, config_path: Path | None = None) -> TomlTable:
    data = load_config(root=root, config_path=config_path)
    section = data.get(SECTION, {})
    if not isinstance(section, dict):
        raise ConfigError(f"[{SECTION}] must be a table")
    return section


def _expect(key: str, value: TomlValue, kind: type) -> None:
    # bool is an int subclass; a bare true must not pass as a worker count.
    if kind is int and isinstance(value, bool):
        raise ConfigError(f"{key} must be an integer, got {value!r}")
    if not isinstance(value, kind):
        raise ConfigError(f"{key} must be {kind.__name__}, got {type(value).__name__}")


def from_section(section: TomlTable) -> RewriteConfig:
    known = {item.name for item in fields(RewriteConfig)}
    unknown = sorted(set(section) - known)
    if unknown:
        raise ConfigError(f"unknown [{SECTION}] keys: {', '.join(unknown)}")
    values: dict[str, object] = {}
    for key, value in section.items():
        if key in {"recursive", "emit_non_test_files"}:
            _expect(key, value, bool)
        elif key == "max_workers":
            _expect(key, value, int)
        else:
            _expect(key, value, str)
        values[key] = value
    return validate(RewriteConfig(**values))


def validate(config: RewriteConfig) -> RewriteConfig:
    if config.max_workers is not None and config.max_workers < 1:
        raise ConfigError(f"max_workers must be positive, got {config.max_workers}")
    if "." not in config.handle_type.strip(".") or config.handle_type.startswith("*"):
        raise ConfigError(f"handle_type must be package-qualified, got {config.handle_type!r}")
    if config.log_level.upper() not in _LOG_LEVELS:
        raise ConfigError(f"unknown log_level {config.log_level!r}")
    for key in ("test_prefix", "run_method", "parallel_method", "table_var", "case_var"):
        if not getattr(config, key):
            raise ConfigError(f"{key} must not be empty")
    return config


def resolve_config(root: Path | None = None, config_path: Path | None = None) -> RewriteConfig:
    return from_section(rewrite_defaults(root=root, config_path=config_path))
