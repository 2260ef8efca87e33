"""Go syntax tree node variants.

Parsed nodes keep ``parts``: the verbatim source text of the node interleaved
with its child nodes, so untouched code prints exactly as it was read. Nodes
built by the rewriter have ``parts=None`` and are printed from their fields.
Equality is identity so nodes can key the type table.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Union


@dataclass(frozen=True)
class Span:
    start: int
    end: int
    line: int
    column: int
    end_line: int


@dataclass(eq=False, kw_only=True)
class Node:
    span: Span | None = None
    parts: list[Union[str, "Node"]] | None = None

    def part_nodes(self) -> list[Node]:
        return [part for part in self.parts or () if isinstance(part, Node)]


# Expressions


@dataclass(eq=False, kw_only=True)
class Expr(Node):
    pass


@dataclass(eq=False)
class Ident(Expr):
    name: str


@dataclass(eq=False)
class BasicLit(Expr):
    value: str


@dataclass(eq=False)
class SelectorExpr(Expr):
    x: Expr
    sel: Ident


@dataclass(eq=False)
class StarExpr(Expr):
    x: Expr


@dataclass(eq=False)
class CallExpr(Expr):
    fun: Expr
    args: list[Expr] = field(default_factory=list)
    ellipsis: bool = False


@dataclass(eq=False)
class Field(Node):
    names: list[Ident]
    type: Expr


@dataclass(eq=False)
class FuncType(Node):
    params: list[Field] = field(default_factory=list)

    def param_count(self) -> int:
        return sum(max(len(item.names), 1) for item in self.params)


@dataclass(eq=False)
class FuncLit(Expr):
    signature: str
    type: FuncType
    body: BlockStmt


@dataclass(eq=False)
class RawExpr(Expr):
    """Expression kept as source text; nested function literals are parts."""


# Statements


@dataclass(eq=False, kw_only=True)
class Stmt(Node):
    blank_before: bool = False
    trailing: str | None = None
    # Leading whitespace of the source line, when the statement starts it.
    indent: str | None = None


@dataclass(eq=False)
class BlockStmt(Stmt):
    stmts: list[Stmt] = field(default_factory=list)
    one_line: bool = False
    lead_comment: str | None = None


@dataclass(eq=False)
class ExprStmt(Stmt):
    x: Expr


@dataclass(eq=False)
class AssignStmt(Stmt):
    lhs: list[Expr]
    tok: str
    rhs: list[Expr]


@dataclass(eq=False)
class VarStmt(Stmt):
    names: list[Ident]
    type: Expr | None = None
    values: list[Expr] = field(default_factory=list)


@dataclass(eq=False)
class RangeStmt(Stmt):
    key: Expr | None
    value: Expr | None
    tok: str | None
    x: Expr
    body: BlockStmt


@dataclass(eq=False)
class CaseClause(Stmt):
    header: RawExpr
    body: list[Stmt] = field(default_factory=list)


@dataclass(eq=False)
class LabeledStmt(Stmt):
    label: Ident
    stmt: Stmt | None = None


@dataclass(eq=False)
class RawStmt(Stmt):
    """if/for/switch/select/go/defer/return and friends, kept as source."""


@dataclass(eq=False)
class Comment(Stmt):
    text: str


# Declarations


@dataclass(eq=False, kw_only=True)
class Decl(Node):
    pass


@dataclass(eq=False)
class ImportSpec(Node):
    name: str | None
    path: str


@dataclass(eq=False)
class ImportDecl(Decl):
    specs: list[ImportSpec] = field(default_factory=list)


@dataclass(eq=False)
class TypeSpec(Node):
    name: Ident
    alias: bool
    type: Expr


@dataclass(eq=False)
class TypeDecl(Decl):
    specs: list[TypeSpec] = field(default_factory=list)


@dataclass(eq=False)
class GenDecl(Decl):
    """Top-level var/const declaration kept as source."""


@dataclass(eq=False)
class FuncDecl(Decl):
    name: Ident
    type: FuncType
    signature: str
    recv: str | None = None
    body: BlockStmt | None = None


@dataclass(eq=False)
class File(Node):
    path: str
    package: str
    imports: list[ImportSpec] = field(default_factory=list)
    decls: list[Decl] = field(default_factory=list)

    def func_decls(self) -> list[FuncDecl]:
        return [decl for decl in self.decls if isinstance(decl, FuncDecl)]
