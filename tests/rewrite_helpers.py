from __future__ import annotations

from parallelize.syntax import parse_file
from parallelize.syntax.nodes import File, FuncDecl
from parallelize.typetable import TypeResolver, TypeTable
from tests.go_helpers import go_source


def parse_unit(text: str, *, package: str = "example.com/sample") -> tuple[File, TypeTable]:
    tree = parse_file(go_source(text), "sample_test.go")
    table = TypeResolver(package, [tree], TypeTable()).resolve_all()
    return tree, table


def func(tree: File, name: str) -> FuncDecl:
    for decl in tree.func_decls():
        if decl.name.name == name:
            return decl
    raise AssertionError(f"no function {name}")
