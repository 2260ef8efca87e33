"""Pre-order traversal over syntax trees."""

from __future__ import annotations

from enum import Enum
from typing import Callable

from parallelize.invariants import never
from parallelize.syntax.nodes import (
    AssignStmt,
    BasicLit,
    BlockStmt,
    CallExpr,
    CaseClause,
    Comment,
    ExprStmt,
    Field,
    File,
    FuncDecl,
    FuncLit,
    FuncType,
    GenDecl,
    Ident,
    ImportDecl,
    ImportSpec,
    LabeledStmt,
    Node,
    RangeStmt,
    RawExpr,
    RawStmt,
    SelectorExpr,
    StarExpr,
    TypeDecl,
    TypeSpec,
    VarStmt,
)


class Visit(Enum):
    CONTINUE = "continue"
    SKIP = "skip"
    STOP = "stop"


Visitor = Callable[[Node], Visit]


def children(node: Node) -> list[Node]:
    match node:
        case File(decls=decls):
            return list(decls)
        case FuncDecl(type=ftype, body=body):
            return [ftype] if body is None else [ftype, body]
        case FuncLit(type=ftype, body=body):
            return [ftype, body]
        case FuncType(params=params):
            return list(params)
        case Field(names=names, type=type_):
            return [*names, type_]
        case BlockStmt(stmts=stmts):
            return list(stmts)
        case ExprStmt(x=x):
            return [x]
        case AssignStmt(lhs=lhs, rhs=rhs):
            return [*lhs, *rhs]
        case VarStmt(names=names, type=type_, values=values):
            return [*names, *([] if type_ is None else [type_]), *values]
        case RangeStmt(key=key, value=value, x=x, body=body):
            return [item for item in (key, value, x, body) if item is not None]
        case CaseClause(header=header, body=body):
            return [header, *body]
        case LabeledStmt(label=label, stmt=stmt):
            return [label] if stmt is None else [label, stmt]
        case CallExpr(fun=fun, args=args):
            return [fun, *args]
        case SelectorExpr(x=x, sel=sel):
            return [x, sel]
        case StarExpr(x=x):
            return [x]
        case TypeDecl(specs=specs):
            return list(specs)
        case TypeSpec(name=name, type=type_):
            return [name, type_]
        case RawExpr() | RawStmt() | GenDecl():
            return node.part_nodes()
        case Ident() | BasicLit() | Comment() | ImportDecl() | ImportSpec():
            return []
        case _:
            never("unknown node kind in traversal", kind=type(node).__name__)


def walk(node: Node, visit: Visitor) -> bool:
    """Visit ``node`` and its descendants in pre-order.

    Returns False once a visitor answered ``Visit.STOP``.
    """
    verdict = visit(node)
    if verdict is Visit.STOP:
        return False
    if verdict is Visit.SKIP:
        return True
    for child in children(node):
        if not walk(child, visit):
            return False
    return True


def find_first(node: Node, predicate: Callable[[Node], bool]) -> Node | None:
    found: list[Node] = []

    def _visit(candidate: Node) -> Visit:
        if predicate(candidate):
            found.append(candidate)
            return Visit.STOP
        return Visit.CONTINUE

    walk(node, _visit)
    return found[0] if found else None


def contains(root: Node, target: Node) -> bool:
    return find_first(root, lambda candidate: candidate is target) is not None
