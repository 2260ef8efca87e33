"""Inject Parallel calls into test bodies or their first subtest closure."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import List

from parallelize.config import RewriteConfig
from parallelize.log_context import ContextLogger, get_logger
from parallelize.rewrite.model import State
from parallelize.syntax.nodes import (
    AssignStmt,
    BlockStmt,
    CallExpr,
    CaseClause,
    ExprStmt,
    FuncDecl,
    FuncLit,
    Ident,
    Node,
    RangeStmt,
    SelectorExpr,
    Stmt,
    VarStmt,
)
from parallelize.syntax.walk import Visit, walk


@dataclass
class SubtestResult:
    state: State
    stmt: ExprStmt | None = None
    call: CallExpr | None = None
    messages: List[str] = field(default_factory=list)


def subtest_call(node: Node, handle: str, run_method: str = "Run") -> CallExpr | None:
    """Return the call of a ``<handle>.<run_method>(...)`` statement."""
    match node:
        case ExprStmt(
            x=CallExpr(fun=SelectorExpr(x=Ident(name=receiver), sel=Ident(name=method))) as call
        ) if receiver == handle and method == run_method:
            return call
    return None


def parallel_call_stmt(handle: str, method: str = "Parallel") -> ExprStmt:
    return ExprStmt(x=CallExpr(fun=SelectorExpr(x=Ident(handle), sel=Ident(method))))


def prepend(block: BlockStmt, stmt: Stmt) -> None:
    block.stmts.insert(0, stmt)
    block.one_line = False


def closure_handle(closure: FuncLit) -> str | None:
    params = closure.type.params
    if closure.type.param_count() != 1 or not params[0].names:
        return None
    name = params[0].names[0].name
    return None if name == "_" else name


def _binds(names: list, handle: str) -> bool:
    return any(isinstance(item, Ident) and item.name == handle for item in names)


def rebinds(stmt: Node, handle: str) -> bool:
    """True when ``stmt`` declares a new variable named ``handle`` in its block."""
    match stmt:
        case AssignStmt(lhs=lhs, tok=":="):
            return _binds(lhs, handle)
        case VarStmt(names=names):
            return _binds(names, handle)
    return False


def shadowed_nodes(node: Node, handle: str) -> list[Node]:
    """Children of ``node`` in which ``handle`` no longer names the test handle."""
    match node:
        case FuncLit(type=ftype, body=body) if any(_binds(item.names, handle) for item in ftype.params):
            return [ftype, body]
        case RangeStmt(key=key, value=value, tok=":=", body=body) if _binds([key, value], handle):
            return [body]
        case BlockStmt(stmts=stmts) | CaseClause(body=stmts):
            for index, stmt in enumerate(stmts):
                if rebinds(stmt, handle):
                    return list(stmts[index + 1 :])
    return []


class SubtestRewriter:
    def __init__(self, config: RewriteConfig | None = None, logger: ContextLogger | None = None) -> None:
        self.config = config or RewriteConfig()
        self.logger = logger or get_logger()

    def _abort(self, log: ContextLogger, message: str) -> SubtestResult:
        log.error(message)
        return SubtestResult(State.REWRITE_ABORTED, messages=[message])

    def find_subtest(self, body: BlockStmt, handle: str) -> tuple[ExprStmt, CallExpr] | None:
        """Pre-order search for the first subtest statement; never descends past it.

        Scopes where ``handle`` is redeclared (closure parameters, ``:=`` and
        ``var`` rebindings, range variables) are not searched.
        """
        found: list[tuple[ExprStmt, CallExpr]] = []
        shadowed: set[int] = set()

        def _visit(node: Node) -> Visit:
            if id(node) in shadowed:
                return Visit.SKIP
            shadowed.update(id(item) for item in shadowed_nodes(node, handle))
            call = subtest_call(node, handle, self.config.run_method)
            if call is None:
                return Visit.CONTINUE
            found.append((node, call))  # type: ignore[arg-type]
            return Visit.STOP

        walk(body, _visit)
        return found[0] if found else None

    def rewrite(
        self,
        decl: FuncDecl,
        handle: str | None,
        logger: ContextLogger | None = None,
    ) -> SubtestResult:
        log = logger or self.logger
        if decl.body is None:
            return self._abort(log, "test function has no body")
        if handle is None:
            return self._abort(log, "test handle parameter is unnamed or blank")
        log.debug(f"checking for {handle}.{self.config.run_method} calls")
        found = self.find_subtest(decl.body, handle)
        if found is None:
            prepend(decl.body, parallel_call_stmt(handle, self.config.parallel_method))
            log.debug(f"{handle}.{self.config.parallel_method} call added to simple test body")
            return SubtestResult(State.SIMPLE_PARALLELIZED)
        stmt, call = found
        if len(call.args) != 2 or call.ellipsis:
            return self._abort(
                log,
                f"found {handle}.{self.config.run_method} call, but number of arguments "
                f"is {len(call.args)} instead of 2",
            )
        closure = call.args[1]
        if not isinstance(closure, FuncLit):
            return self._abort(
                log,
                f"found {handle}.{self.config.run_method} call, but the second argument "
                f"is {type(closure).__name__} instead of a function literal",
            )
        inner = closure_handle(closure)
        if inner is None:
            return self._abort(
                log,
                f"found {handle}.{self.config.run_method} call, but its closure does not "
                "name a single handle parameter",
            )
        prepend(closure.body, parallel_call_stmt(inner, self.config.parallel_method))
        log.debug(f"{inner}.{self.config.parallel_method} call added to subtest closure")
        return SubtestResult(State.SUBTEST_PARALLELIZED, stmt=stmt, call=call)
