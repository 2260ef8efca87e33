from __future__ import annotations

import logging
from pathlib import Path

import pytest

from parallelize.config import RewriteConfig
from parallelize.exceptions import LoadError, ParseError
from parallelize.loader import load_units, module_path
from parallelize.syntax import render

WIDGET = {
    "widget.go": """
        package widget

        func Size() int { return 1 }
        """,
    "widget_test.go": """
        package widget

        import "testing"

        func TestSize(t *testing.T) {}
        """,
    "api_test.go": """
        package widget_test

        import "testing"

        func TestAPI(t *testing.T) {}
        """,
}


def _names(unit) -> list[str]:
    return [Path(file.path).name for file in unit.files]


def test_load_units_builds_package_and_test_variants(go_module) -> None:
    root = go_module(WIDGET, module="example.com/widget")
    units = load_units(root)
    assert [unit.id for unit in units] == [
        "example.com/widget",
        "example.com/widget [example.com/widget.test]",
        "example.com/widget_test [example.com/widget.test]",
    ]
    plain, internal, external = units
    assert _names(plain) == ["widget.go"]
    assert _names(internal) == ["widget.go", "widget_test.go"]
    assert _names(external) == ["api_test.go"]
    assert external.pkg_path == "example.com/widget_test"
    assert external.package_name == "widget_test"
    assert [unit.is_test_variant() for unit in units] == [False, True, True]


def test_load_units_parses_files_separately_per_unit(go_module) -> None:
    root = go_module(WIDGET)
    plain, internal, _ = load_units(root)
    assert plain.files[0] is not internal.files[0]
    assert render(plain.files[0]) == render(internal.files[0])


def test_load_units_resolves_test_handle_types(go_module) -> None:
    root = go_module(WIDGET)
    _, internal, _ = load_units(root)
    test_file = internal.files[1]
    decl = test_file.func_decls()[0]
    assert str(internal.type_table.type_of(decl.type.params[0].type)) == "*testing.T"


def test_load_units_skips_plain_unit_without_non_test_files(go_module) -> None:
    root = go_module({"only_test.go": WIDGET["widget_test.go"]})
    units = load_units(root)
    assert [unit.id for unit in units] == ["example.com/sample [example.com/sample.test]"]


def test_module_path_falls_back_to_directory_name(go_module, caplog) -> None:
    caplog.set_level(logging.WARNING, logger="parallelize")
    root = go_module(WIDGET, module=None)
    assert module_path(root) == "sample"
    assert "no module directive found" in caplog.text
    assert load_units(root)[0].id == "sample"


def test_load_units_recursive_skips_testdata_vendor_and_hidden(go_module) -> None:
    files = dict(WIDGET)
    files["sub/sub.go"] = "package sub\n"
    files["testdata/fixture.go"] = "package fixture\n"
    files["vendor/dep/dep.go"] = "package dep\n"
    files["_build/gen.go"] = "package gen\n"
    files[".cache/c.go"] = "package c\n"
    files["_ignored.go"] = "package ignored\n"
    root = go_module(files)

    flat = load_units(root)
    assert "example.com/sample/sub" not in [unit.id for unit in flat]

    nested = load_units(root, config=RewriteConfig(recursive=True))
    ids = [unit.id for unit in nested]
    assert "example.com/sample/sub" in ids
    assert not [unit_id for unit_id in ids if "testdata" in unit_id or "vendor" in unit_id]
    assert not [unit_id for unit_id in ids if "_build" in unit_id or ".cache" in unit_id]
    assert all("_ignored.go" not in _names(unit) for unit in nested)


def test_load_units_rejects_missing_or_empty_directories(go_module, tmp_path: Path) -> None:
    with pytest.raises(LoadError, match="not a directory"):
        load_units(tmp_path / "missing")
    root = go_module({})
    with pytest.raises(LoadError, match="no Go files"):
        load_units(root)


def test_load_units_propagates_parse_errors(go_module) -> None:
    root = go_module({"broken_test.go": "package broken\n\nfunc TestX(t *testing.T) {\n"})
    with pytest.raises(ParseError, match="broken_test.go"):
        load_units(root)


def test_load_units_rejects_mixed_packages(go_module) -> None:
    root = go_module({"a.go": "package a\n", "b.go": "package b\n"})
    with pytest.raises(LoadError, match="found packages a and b"):
        load_units(root)
