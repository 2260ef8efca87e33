"""Serialize syntax trees back to Go source.

Parsed nodes print their verbatim parts. Blocks are always printed
structurally: one statement per line, indented one tab deeper than the line
holding the opening brace. Nodes without parts (built by the rewriter) print
from their fields. Continuation lines of a verbatim statement are
re-based from its source indentation to its printed indentation; raw
strings and comments are left untouched.
"""

from __future__ import annotations

from parallelize.exceptions import PrintError, StructuralError
from parallelize.invariants import never
from parallelize.syntax.nodes import (
    AssignStmt,
    BasicLit,
    BlockStmt,
    CallExpr,
    CaseClause,
    Comment,
    ExprStmt,
    FuncLit,
    Ident,
    LabeledStmt,
    Node,
    RangeStmt,
    SelectorExpr,
    StarExpr,
    Stmt,
    VarStmt,
)

INDENT = "\t"


class Printer:
    def __init__(self) -> None:
        self._chunks: list[str] = []
        self._tail = ""
        self._rebase: tuple[str, str] | None = None

    def render(self, node: Node) -> str:
        self._chunks = []
        self._tail = ""
        self._rebase = None
        try:
            self._emit(node)
        except StructuralError as exc:
            raise PrintError(f"cannot print {type(node).__name__}: {exc}") from exc
        return "".join(self._chunks)

    def _write(self, text: str) -> None:
        if not text:
            return
        self._chunks.append(text)
        newline = text.rfind("\n")
        if newline >= 0:
            self._tail = text[newline + 1 :]
        else:
            self._tail += text

    def _indent(self) -> str:
        return self._tail[: len(self._tail) - len(self._tail.lstrip(" \t"))]

    def _emit(self, node: Node) -> None:
        if isinstance(node, BlockStmt):
            self._block(node)
            return
        if node.parts is not None:
            for part in node.parts:
                if isinstance(part, str):
                    self._write(part if self._rebase is None else self._rebased(part))
                else:
                    self._emit(part)
            return
        self._structural(node)

    def _structural(self, node: Node) -> None:
        match node:
            case Ident(name=name):
                self._write(name)
            case BasicLit(value=value):
                self._write(value)
            case SelectorExpr(x=x, sel=sel):
                self._emit(x)
                self._write(".")
                self._emit(sel)
            case StarExpr(x=x):
                self._write("*")
                self._emit(x)
            case CallExpr(fun=fun, args=args, ellipsis=ellipsis):
                self._emit(fun)
                self._write("(")
                self._join(args)
                if ellipsis:
                    self._write("...")
                self._write(")")
            case FuncLit(signature=signature, body=body):
                self._write(signature + " ")
                self._emit(body)
            case ExprStmt(x=x):
                self._emit(x)
            case AssignStmt(lhs=lhs, tok=tok, rhs=rhs):
                self._join(lhs)
                self._write(f" {tok} ")
                self._join(rhs)
            case VarStmt(names=names, type=type_, values=values):
                self._write("var ")
                self._join(names)
                if type_ is not None:
                    self._write(" ")
                    self._emit(type_)
                if values:
                    self._write(" = ")
                    self._join(values)
            case RangeStmt(key=key, value=value, tok=tok, x=x, body=body):
                self._write("for ")
                if key is not None:
                    self._join([key] if value is None else [key, value])
                    self._write(f" {tok} ")
                self._write("range ")
                self._emit(x)
                self._write(" ")
                self._emit(body)
            case Comment(text=text):
                self._write(text)
            case _:
                never("no printer for node", kind=type(node).__name__)

    def _join(self, nodes: list) -> None:
        for index, item in enumerate(nodes):
            if index:
                self._write(", ")
            self._emit(item)

    def _block(self, block: BlockStmt) -> None:
        base = self._indent()
        if not block.stmts and block.lead_comment is None:
            self._write("{}" if block.one_line else "{\n" + base + "}")
            return
        if block.one_line and self._inline(block):
            self._write("{ ")
            for index, stmt in enumerate(block.stmts):
                if index:
                    self._write("; ")
                self._emit(stmt)
            self._write(" }")
            return
        self._write("{")
        if block.lead_comment is not None:
            self._write(" " + block.lead_comment)
        self._write("\n")
        self._stmts(block.stmts, base)
        self._write(base + "}")

    def _inline(self, block: BlockStmt) -> bool:
        return block.lead_comment is None and all(
            stmt.trailing is None and not isinstance(stmt, (Comment, CaseClause, LabeledStmt))
            for stmt in block.stmts
        )

    def _stmts(self, stmts: list[Stmt], base: str) -> None:
        inner = base + INDENT
        for index, stmt in enumerate(stmts):
            if index and stmt.blank_before:
                self._write("\n")
            if isinstance(stmt, CaseClause):
                self._write(base)
                self._emit(stmt.header)
                if stmt.trailing is not None and not stmt.body:
                    self._write(" " + stmt.trailing)
                self._write("\n")
                self._stmts(stmt.body, base)
                continue
            if isinstance(stmt, LabeledStmt):
                self._write(base)
                self._emit(stmt.label)
                self._write(":")
                if stmt.stmt is None:
                    self._trailing(stmt)
                    self._write("\n")
                    continue
                self._write("\n" + inner)
                self._emit_stmt(stmt.stmt, inner)
                self._trailing(stmt.stmt if stmt.stmt.trailing is not None else stmt)
                self._write("\n")
                continue
            self._write(inner)
            self._emit_stmt(stmt, inner)
            self._trailing(stmt)
            self._write("\n")

    def _emit_stmt(self, stmt: Stmt, indent: str) -> None:
        outer = self._rebase
        moved = stmt.indent is not None and stmt.indent != indent
        self._rebase = (stmt.indent, indent) if moved else None
        try:
            self._emit(stmt)
        finally:
            self._rebase = outer

    def _rebased(self, text: str) -> str:
        old, new = self._rebase
        out: list[str] = []
        quote: str | None = None
        k = 0
        while k < len(text):
            ch = text[k]
            if quote is None:
                if text.startswith(("//", "/*"), k):
                    if text[k + 1] == "/":
                        end = text.find("\n", k)
                    else:
                        end = text.find("*/", k + 2)
                        end = end if end < 0 else end + 2
                    end = len(text) if end < 0 else end
                    out.append(text[k:end])
                    k = end
                    continue
                if ch in "\"'`":
                    quote = ch
                elif ch == "\n" and text[k + 1 : k + 2] not in ("", "\n") and text.startswith(old, k + 1):
                    out.append("\n" + new)
                    k += 1 + len(old)
                    continue
            elif ch == "\\" and quote != "`":
                out.append(text[k : k + 2])
                k += 2
                continue
            elif ch == quote:
                quote = None
            out.append(ch)
            k += 1
        return "".join(out)

    def _trailing(self, stmt: Stmt) -> None:
        if stmt.trailing is not None:
            self._write(" " + stmt.trailing)


def render(node: Node) -> str:
    return Printer().render(node)
