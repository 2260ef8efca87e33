from __future__ import annotations

import pytest

from parallelize.syntax import find_first, parse_file
from parallelize.syntax.nodes import FuncLit
from parallelize.typetable import Basic, Named, Pointer, TypeResolver, TypeTable, default_import_name
from tests.go_helpers import go_source


def _resolve(*sources: str, package: str = "example.com/sample"):
    files = [parse_file(go_source(text), f"f{index}.go") for index, text in enumerate(sources)]
    table = TypeResolver(package, files, TypeTable()).resolve_all()
    return files, table


def _param_type(files, table, func: str, index: int = 0):
    for file in files:
        for decl in file.func_decls():
            if decl.name.name == func:
                return table.type_of(decl.type.params[index].type)
    raise AssertionError(func)


@pytest.mark.parametrize(
    ("path", "name"),
    [
        ("testing", "testing"),
        ("github.com/foo/bar/v2", "bar"),
        ("gopkg.in/yaml.v3", "yaml"),
        ("github.com/google/go-cmp", "cmp"),
    ],
)
def test_default_import_name(path: str, name: str) -> None:
    assert default_import_name(path) == name


def test_resolver_resolves_qualified_pointer_types() -> None:
    files, table = _resolve(
        """
        package sample

        import "testing"

        func TestA(t *testing.T) {}
        """
    )
    decl = files[0].func_decls()[0]
    star = decl.type.params[0].type
    assert table.type_of(star.x) == Named("testing", "T")
    assert table.type_of(star) == Pointer(Named("testing", "T"))
    assert str(table.type_of(star)) == "*testing.T"


def test_resolver_honours_import_aliases_and_dot_imports() -> None:
    files, table = _resolve(
        """
        package sample

        import tst "testing"

        func TestAlias(t *tst.T) {}
        """,
        """
        package sample

        import . "testing"

        func TestDot(t *T) {}
        """,
    )
    assert _param_type(files, table, "TestAlias") == Pointer(Named("testing", "T"))
    assert _param_type(files, table, "TestDot") == Pointer(Named("testing", "T"))


def test_resolver_follows_local_aliases_across_files() -> None:
    files, table = _resolve(
        """
        package sample

        import "testing"

        type T = testing.T

        type Local struct{}
        """,
        """
        package sample

        func TestAliased(t *T) {}

        func TestLocal(l *Local) {}

        func count(n int) {}
        """,
    )
    assert _param_type(files, table, "TestAliased") == Pointer(Named("testing", "T"))
    assert str(_param_type(files, table, "TestLocal")) == "*example.com/sample.Local"
    assert _param_type(files, table, "count") == Basic("int")


def test_resolver_leaves_unknown_types_unresolved() -> None:
    files, table = _resolve(
        """
        package sample

        type A = B

        type B = A

        func TestMissing(t *testing.T) {}

        func TestCycle(a A) {}
        """
    )
    assert _param_type(files, table, "TestMissing") is None
    assert _param_type(files, table, "TestCycle") is None


def test_resolver_records_function_literal_parameters() -> None:
    files, table = _resolve(
        """
        package sample

        import "testing"

        func TestRun(t *testing.T) {
            t.Run("a", func(t *testing.T) {})
        }
        """
    )
    lit = find_first(files[0], lambda node: isinstance(node, FuncLit))
    assert table.type_of(lit.type.params[0].type) == Pointer(Named("testing", "T"))
