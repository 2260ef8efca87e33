"""Static type resolution for parameter type expressions."""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Iterator

from parallelize.syntax.nodes import (
    Expr,
    File,
    FuncType,
    Ident,
    Node,
    SelectorExpr,
    StarExpr,
    TypeDecl,
    TypeSpec,
)
from parallelize.syntax.walk import Visit, walk

PREDECLARED = frozenset(
    {
        "any",
        "bool",
        "byte",
        "comparable",
        "complex64",
        "complex128",
        "error",
        "float32",
        "float64",
        "int",
        "int8",
        "int16",
        "int32",
        "int64",
        "rune",
        "string",
        "uint",
        "uint8",
        "uint16",
        "uint32",
        "uint64",
        "uintptr",
    }
)

_MAJOR_VERSION_RE = re.compile(r"v[0-9]+")
_GOPKG_VERSION_RE = re.compile(r"\.v[0-9]+$")


@dataclass(frozen=True)
class Named:
    package: str
    name: str

    def __str__(self) -> str:
        return f"{self.package}.{self.name}" if self.package else self.name


@dataclass(frozen=True)
class Pointer:
    elem: GoType

    def __str__(self) -> str:
        return f"*{self.elem}"


@dataclass(frozen=True)
class Basic:
    name: str

    def __str__(self) -> str:
        return self.name


GoType = Named | Pointer | Basic


class TypeTable:
    """Identity-keyed map from expression nodes to their resolved types."""

    def __init__(self) -> None:
        self._types: dict[Expr, GoType] = {}

    def record(self, expr: Expr, resolved: GoType) -> None:
        self._types[expr] = resolved

    def type_of(self, expr: Expr) -> GoType | None:
        return self._types.get(expr)

    def __contains__(self, expr: object) -> bool:
        return expr in self._types

    def __len__(self) -> int:
        return len(self._types)

    def __iter__(self) -> Iterator[Expr]:
        return iter(self._types)


def default_import_name(path: str) -> str:
    """Package name assumed for an import without an explicit alias."""
    elements = [element for element in path.split("/") if element]
    if not elements:
        return path
    last = elements[-1]
    if _MAJOR_VERSION_RE.fullmatch(last) and len(elements) > 1:
        last = elements[-2]
    last = _GOPKG_VERSION_RE.sub("", last)
    if last.startswith("go-"):
        last = last[3:]
    return last


@dataclass(frozen=True)
class _FileScope:
    imports: dict[str, str]
    dot_imports: tuple[str, ...]


def _file_scope(file: File) -> _FileScope:
    imports: dict[str, str] = {}
    dots: list[str] = []
    for spec in file.imports:
        if spec.name == ".":
            dots.append(spec.path)
        elif spec.name != "_":
            imports[spec.name or default_import_name(spec.path)] = spec.path
    return _FileScope(imports=imports, dot_imports=tuple(dots))


class TypeResolver:
    """Resolves parameter types of one package's files into a TypeTable."""

    def __init__(self, package_path: str, files: list[File], table: TypeTable) -> None:
        self.package_path = package_path
        self.table = table
        self._scopes = {id(file): _file_scope(file) for file in files}
        self._local: dict[str, tuple[TypeSpec, _FileScope]] = {}
        for file in files:
            scope = self._scopes[id(file)]
            for decl in file.decls:
                if isinstance(decl, TypeDecl):
                    for spec in decl.specs:
                        self._local[spec.name.name] = (spec, scope)
        self._files = files

    def resolve_all(self) -> TypeTable:
        for file in self._files:
            self.resolve_file(file)
        return self.table

    def resolve_file(self, file: File) -> None:
        scope = self._scopes.get(id(file)) or _file_scope(file)

        def _visit(node: Node) -> Visit:
            if isinstance(node, FuncType):
                for param in node.params:
                    self.resolve(param.type, scope)
                return Visit.SKIP
            return Visit.CONTINUE

        walk(file, _visit)

    def resolve(
        self,
        expr: Expr,
        scope: _FileScope,
        seen: frozenset[str] = frozenset(),
    ) -> GoType | None:
        resolved: GoType | None = None
        match expr:
            case StarExpr(x=inner):
                elem = self.resolve(inner, scope, seen)
                resolved = None if elem is None else Pointer(elem)
            case SelectorExpr(x=Ident(name=qualifier), sel=Ident(name=name)):
                path = scope.imports.get(qualifier)
                if path is not None:
                    resolved = Named(path, name)
            case Ident(name=name):
                resolved = self._resolve_name(name, scope, seen)
        if resolved is not None:
            self.table.record(expr, resolved)
        return resolved

    def _resolve_name(
        self,
        name: str,
        scope: _FileScope,
        seen: frozenset[str],
    ) -> GoType | None:
        local = self._local.get(name)
        if local is not None:
            spec, spec_scope = local
            if not spec.alias:
                return Named(self.package_path, name)
            if name in seen:
                return None
            return self.resolve(spec.type, spec_scope, seen | {name})
        if len(scope.dot_imports) == 1:
            return Named(scope.dot_imports[0], name)
        if name in PREDECLARED:
            return Basic(name)
        return None
