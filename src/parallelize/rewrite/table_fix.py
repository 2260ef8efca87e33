"""Rebind the per-case loop variable of table-driven subtests."""

from __future__ import annotations

from parallelize.config import RewriteConfig
from parallelize.log_context import ContextLogger, get_logger
from parallelize.rewrite.subtest import prepend
from parallelize.syntax.nodes import (
    AssignStmt,
    FuncDecl,
    Ident,
    RangeStmt,
    Stmt,
    VarStmt,
)
from parallelize.syntax.walk import contains


class TableFixer:
    def __init__(self, config: RewriteConfig | None = None, logger: ContextLogger | None = None) -> None:
        self.config = config or RewriteConfig()
        self.logger = logger or get_logger()

    def binds_table(self, stmt: Stmt) -> bool:
        name = self.config.table_var
        match stmt:
            case AssignStmt(lhs=lhs, tok=":=" | "="):
                return any(isinstance(item, Ident) and item.name == name for item in lhs)
            case VarStmt(names=names):
                return any(item.name == name for item in names)
        return False

    def table_loop(self, decl: FuncDecl, subtest: Stmt) -> RangeStmt | None:
        for stmt in decl.body.stmts if decl.body is not None else ():
            if (
                isinstance(stmt, RangeStmt)
                and isinstance(stmt.x, Ident)
                and stmt.x.name == self.config.table_var
                and contains(stmt.body, subtest)
            ):
                return stmt
        return None

    def fix(self, decl: FuncDecl, subtest: Stmt, logger: ContextLogger | None = None) -> bool:
        """Prepend ``tt := tt`` to the table loop holding ``subtest``.

        Returns False, without touching the tree, unless the function binds the
        case table and ranges over it with the expected case variable.
        """
        log = logger or self.logger
        if decl.body is None or not any(self.binds_table(stmt) for stmt in decl.body.stmts):
            log.debug(f"no {self.config.table_var!r} table bound in test body")
            return False
        loop = self.table_loop(decl, subtest)
        if loop is None:
            log.debug(f"subtest call is not inside a range over {self.config.table_var!r}")
            return False
        case = loop.value if loop.value is not None else loop.key
        if not isinstance(case, Ident) or case.name != self.config.case_var:
            log.debug(f"table loop variable is not {self.config.case_var!r}")
            return False
        name = self.config.case_var
        prepend(loop.body, AssignStmt(lhs=[Ident(name)], tok=":=", rhs=[Ident(name)]))
        log.debug(f"{name} rebound inside {self.config.table_var} loop")
        return True
