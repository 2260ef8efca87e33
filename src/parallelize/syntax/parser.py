"""Structural Go parser.

The parser recognises the shapes the rewriter reasons about (function
declarations, blocks, calls, selectors, assignments, range loops, case
clauses) and keeps everything else as verbatim text in ``RawStmt`` and
``RawExpr`` nodes. Function literals and blocks nested inside verbatim text
are still parsed so traversal can reach them.
"""

from __future__ import annotations

from bisect import bisect_left
from pathlib import Path

from parallelize.syntax.nodes import (
    AssignStmt,
    BasicLit,
    BlockStmt,
    CallExpr,
    CaseClause,
    Comment,
    Decl,
    Expr,
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
    Span,
    StarExpr,
    Stmt,
    TypeDecl,
    TypeSpec,
    VarStmt,
)
from parallelize.syntax.tokens import CommentToken, Token, TokenKind, TokenStream, tokenize

_ASSIGN_OPS = frozenset(
    {"=", ":=", "+=", "-=", "*=", "/=", "%=", "&=", "|=", "^=", "<<=", ">>=", "&^="}
)
_OPENERS = ("(", "[", "{")
_CLOSERS = (")", "]", "}")
_LITERALS = (TokenKind.NUMBER, TokenKind.STRING, TokenKind.RUNE)


def parse_file(source: str, path: Path | str = "<source>") -> File:
    return _Parser(tokenize(source, path)).parse_file()


class _Parser:
    def __init__(self, stream: TokenStream) -> None:
        self.stream = stream
        self.toks: list[Token] = stream.tokens
        self.src = stream.source
        self._comment_starts = [c.start for c in stream.comments]

    # Helpers

    def _error(self, message: str, index: int):
        if index < len(self.toks):
            return self.stream.error(message, self.toks[index].start)
        return self.stream.error(message, len(self.src))

    def _at(self, index: int) -> Token | None:
        if 0 <= index < len(self.toks):
            return self.toks[index]
        return None

    def _tok(self, index: int) -> Token:
        tok = self._at(index)
        if tok is None:
            raise self._error("unexpected end of file", index)
        return tok

    def _expect_op(self, index: int, op: str) -> None:
        tok = self._at(index)
        if tok is None or not tok.is_op(op):
            found = "end of file" if tok is None else repr(tok.text or ";")
            raise self._error(f"expected {op!r}, found {found}", index)

    def _span(self, lo: int, hi: int) -> Span:
        start = self.toks[lo].start
        end = self.toks[hi - 1].end
        return Span(
            start=start,
            end=end,
            line=self.toks[lo].line,
            column=self.toks[lo].column,
            end_line=self.stream.line_of(max(end - 1, start)),
        )

    def _weave(self, start: int, end: int, children: list[Node]) -> list[str | Node]:
        parts: list[str | Node] = []
        pos = start
        for child in children:
            span = child.span
            if span is None:
                continue
            if span.start > pos:
                parts.append(self.src[pos : span.start])
            parts.append(child)
            pos = span.end
        if end > pos:
            parts.append(self.src[pos:end])
        return parts

    def _line_indent(self, offset: int) -> str | None:
        prefix = self.src[self.src.rfind("\n", 0, offset) + 1 : offset]
        return prefix if not prefix.strip(" \t") else None

    def _skip(self, index: int) -> int:
        tok = self.toks[index]
        if tok.kind is TokenKind.OP and tok.text in _OPENERS:
            return self.stream.match(index) + 1
        return index + 1

    def _stmt_end(self, lo: int, hi: int | None = None) -> int:
        hi = len(self.toks) if hi is None else hi
        k = lo
        while k < hi:
            tok = self.toks[k]
            if tok.kind is TokenKind.SEMI:
                return k
            if tok.kind is TokenKind.OP and tok.text in _CLOSERS:
                return k
            k = self._skip(k)
        return hi

    def _split(self, lo: int, hi: int, *, on_semi: bool = False) -> list[tuple[int, int]]:
        ranges: list[tuple[int, int]] = []
        start = lo
        k = lo
        while k < hi:
            tok = self.toks[k]
            if (on_semi and tok.kind is TokenKind.SEMI) or (not on_semi and tok.is_op(",")):
                ranges.append((start, k))
                start = k + 1
                k += 1
                continue
            k = self._skip(k)
        ranges.append((start, hi))
        return [(a, b) for a, b in ranges if a < b]

    def _find(self, lo: int, hi: int, predicate) -> int | None:
        k = lo
        while k < hi:
            if predicate(self.toks[k]):
                return k
            k = self._skip(k)
        return None

    def _ident(self, index: int) -> Ident:
        tok = self._tok(index)
        if tok.kind is not TokenKind.IDENT:
            raise self._error(f"expected identifier, found {tok.text or ';'!r}", index)
        return Ident(tok.text, span=self._span(index, index + 1), parts=[tok.text])

    # File level

    def parse_file(self) -> File:
        toks = self.toks
        if not toks or not toks[0].is_keyword("package"):
            raise self._error("expected package clause", 0)
        package = self._ident(1).name
        decls: list[Decl] = []
        imports: list[ImportSpec] = []
        k = 2
        while k < len(toks):
            tok = toks[k]
            if tok.kind is TokenKind.SEMI:
                k += 1
                continue
            if tok.is_keyword("import"):
                decl, k = self._import_decl(k)
                imports.extend(decl.specs)
            elif tok.is_keyword("func"):
                decl, k = self._func_decl(k)
            elif tok.is_keyword("type"):
                decl, k = self._type_decl(k)
            elif tok.is_keyword("var", "const"):
                end = self._stmt_end(k)
                decl = GenDecl(span=self._span(k, end), parts=self._raw_parts(k, end))
                k = end
            else:
                raise self._error(f"unexpected {tok.text!r} at top level", k)
            decls.append(decl)
        end = len(self.src)
        return File(
            path=self.stream.path,
            package=package,
            imports=imports,
            decls=decls,
            span=Span(0, end, 1, 1, self.stream.line_of(max(end - 1, 0))),
            parts=self._weave(0, end, list(decls)),
        )

    def _import_decl(self, k: int) -> tuple[ImportDecl, int]:
        end = self._stmt_end(k)
        specs: list[ImportSpec] = []
        if self._tok(k + 1).is_op("("):
            close = self.stream.match(k + 1)
            for lo, hi in self._split(k + 2, close, on_semi=True):
                specs.append(self._import_spec(lo, hi))
            end = self._stmt_end(close + 1)
        else:
            specs.append(self._import_spec(k + 1, end))
        span = self._span(k, end)
        return ImportDecl(specs, span=span, parts=[self.src[span.start : span.end]]), end

    def _import_spec(self, lo: int, hi: int) -> ImportSpec:
        name: str | None = None
        if hi - lo == 2:
            name = self.toks[lo].text
            lo += 1
        tok = self.toks[lo]
        if hi - lo != 1 or tok.kind is not TokenKind.STRING:
            raise self._error("malformed import spec", lo)
        return ImportSpec(name, tok.text[1:-1], span=self._span(lo, hi))

    def _type_decl(self, k: int) -> tuple[TypeDecl, int]:
        specs: list[TypeSpec] = []
        if self._tok(k + 1).is_op("("):
            close = self.stream.match(k + 1)
            ranges = self._split(k + 2, close, on_semi=True)
            end = self._stmt_end(close + 1)
        else:
            end = self._stmt_end(k)
            ranges = [(k + 1, end)]
        for lo, hi in ranges:
            spec = self._type_spec(lo, hi)
            if spec is not None:
                specs.append(spec)
        span = self._span(k, end)
        return TypeDecl(specs, span=span, parts=[self.src[span.start : span.end]]), end

    def _type_spec(self, lo: int, hi: int) -> TypeSpec | None:
        name = self._ident(lo)
        k = lo + 1
        tok = self._at(k)
        if tok is not None and tok.is_op("[") and tok.start == self.toks[lo].end:
            k = self.stream.match(k) + 1
        alias = k < hi and self.toks[k].is_op("=")
        if alias:
            k += 1
        if k >= hi:
            return None
        return TypeSpec(name, alias, self._expr(k, hi), span=self._span(lo, hi))

    def _func_decl(self, k: int) -> tuple[FuncDecl, int]:
        j = k + 1
        recv: str | None = None
        if self._tok(j).is_op("("):
            close = self.stream.match(j)
            recv = self.src[self.toks[j].start : self.toks[close].end]
            j = close + 1
        name = self._ident(j)
        j += 1
        if self._tok(j).is_op("["):
            j = self.stream.match(j) + 1
        self._expect_op(j, "(")
        params_close = self.stream.match(j)
        ftype = self._func_type(j, params_close)
        brace = self._signature_end(params_close + 1, len(self.toks))
        start = self.toks[k].start
        if brace < len(self.toks) and self.toks[brace].is_op("{"):
            body, after = self._block(brace)
            signature = self.src[start : self.toks[brace].start]
            span = self._span(k, after)
            decl = FuncDecl(
                name,
                ftype,
                signature.rstrip(),
                recv=recv,
                body=body,
                span=span,
                parts=self._weave(span.start, span.end, [body]),
            )
            return decl, after
        span = self._span(k, brace)
        text = self.src[span.start : span.end]
        return FuncDecl(name, ftype, text, recv=recv, span=span, parts=[text]), brace

    def _signature_end(self, lo: int, hi: int) -> int:
        """Index of the body brace after a signature, or of the token ending a func type."""
        k = lo
        while k < hi:
            tok = self.toks[k]
            if tok.kind is TokenKind.SEMI:
                return k
            if tok.is_op("{"):
                if self.toks[k - 1].is_keyword("struct", "interface"):
                    k = self.stream.match(k) + 1
                    continue
                return k
            if tok.is_op("(", "["):
                k = self.stream.match(k) + 1
                continue
            if tok.is_op(")", "]", "}", ",", "=", ":", ":="):
                return k
            k += 1
        return k

    def _func_type(self, open_: int, close: int) -> FuncType:
        entries: list[tuple[Ident | None, int, int]] = []
        for lo, hi in self._split(open_ + 1, close):
            if hi - lo >= 2 and self.toks[lo].kind is TokenKind.IDENT and self._names_param(lo):
                entries.append((self._ident(lo), lo + 1, hi))
            else:
                entries.append((None, lo, hi))
        fields: list[Field] = []
        if not any(name is not None for name, _, _ in entries):
            for _, lo, hi in entries:
                fields.append(Field([], self._expr(lo, hi), span=self._span(lo, hi)))
            return FuncType(fields, span=self._span(open_, close + 1))
        pending: list[Ident] = []
        for name, lo, hi in entries:
            if name is None:
                if hi - lo == 1 and self.toks[lo].kind is TokenKind.IDENT:
                    pending.append(self._ident(lo))
                    continue
                raise self._error("mixed named and unnamed parameters", lo)
            fields.append(
                Field([*pending, name], self._expr(lo, hi), span=self._span(lo - 1, hi))
            )
            pending = []
        if pending:
            raise self._error("missing parameter type", close)
        return FuncType(fields, span=self._span(open_, close + 1))

    def _names_param(self, lo: int) -> bool:
        nxt = self.toks[lo + 1]
        if nxt.is_op("."):
            return False
        # List[int] is an instantiated type; a []int needs the space gofmt puts there.
        if nxt.is_op("[") and nxt.start == self.toks[lo].end:
            return False
        return True

    # Expressions

    def _expr(self, lo: int, hi: int) -> Expr:
        if lo >= hi:
            raise self._error("expected expression", lo)
        node, k = self._primary(lo, hi)
        if node is not None and k == hi:
            return node
        return self._raw_expr(lo, hi)

    def _raw_expr(self, lo: int, hi: int) -> RawExpr:
        return RawExpr(span=self._span(lo, hi), parts=self._raw_parts(lo, hi))

    def _primary(self, lo: int, hi: int) -> tuple[Expr | None, int]:
        tok = self.toks[lo]
        node: Expr
        if tok.is_op("*"):
            if lo + 1 >= hi:
                return None, lo
            inner, k = self._primary(lo + 1, hi)
            if inner is None:
                return None, lo
            span = self._span(lo, k)
            return StarExpr(inner, span=span, parts=self._weave(span.start, span.end, [inner])), k
        if tok.kind is TokenKind.IDENT:
            node, k = self._ident(lo), lo + 1
        elif tok.kind in _LITERALS:
            node, k = BasicLit(tok.text, span=self._span(lo, lo + 1), parts=[tok.text]), lo + 1
        elif tok.is_keyword("func"):
            found = self._func_lit(lo, hi)
            if found is None:
                return None, lo
            node, k = found
        else:
            return None, lo
        while k < hi:
            tok = self.toks[k]
            if tok.is_op(".") and k + 1 < hi and self.toks[k + 1].kind is TokenKind.IDENT:
                sel = self._ident(k + 1)
                span = self._span(lo, k + 2)
                node = SelectorExpr(node, sel, span=span, parts=self._weave(span.start, span.end, [node, sel]))
                k += 2
            elif tok.is_op("("):
                close = self.stream.match(k)
                if close >= hi:
                    break
                node = self._call(node, lo, k, close)
                k = close + 1
            else:
                break
        return node, k

    def _call(self, fun: Expr, lo: int, open_: int, close: int) -> CallExpr:
        args: list[Expr] = []
        ellipsis = False
        for a, b in self._split(open_ + 1, close):
            if self.toks[b - 1].is_op("..."):
                ellipsis = True
                b -= 1
            args.append(self._expr(a, b))
        span = self._span(lo, close + 1)
        return CallExpr(
            fun,
            args,
            ellipsis,
            span=span,
            parts=self._weave(span.start, span.end, [fun, *args]),
        )

    def _func_lit(self, lo: int, hi: int) -> tuple[FuncLit, int] | None:
        if lo + 1 >= hi or not self.toks[lo + 1].is_op("("):
            return None
        close = self.stream.match(lo + 1)
        brace = self._signature_end(close + 1, hi)
        if brace >= hi or not self.toks[brace].is_op("{"):
            return None
        ftype = self._func_type(lo + 1, close)
        body, after = self._block(brace)
        signature = self.src[self.toks[lo].start : self.toks[brace].start]
        span = self._span(lo, after)
        lit = FuncLit(
            signature.rstrip(),
            ftype,
            body,
            span=span,
            parts=self._weave(span.start, span.end, [body]),
        )
        return lit, after

    def _raw_children(self, lo: int, hi: int) -> list[Node]:
        children: list[Node] = []
        k = lo
        while k < hi:
            tok = self.toks[k]
            if tok.is_keyword("func"):
                prev = self._at(k - 1)
                # []func(){...} and map[K]func(){...} open composite literals.
                if prev is None or not (prev.is_op("]") or prev.is_keyword("chan")):
                    found = self._func_lit(k, hi)
                    if found is not None:
                        lit, k = found
                        children.append(lit)
                        continue
            k += 1
        return children

    def _raw_parts(self, lo: int, hi: int) -> list[str | Node]:
        span = self._span(lo, hi)
        return self._weave(span.start, span.end, self._raw_children(lo, hi))

    # Statements

    def _block(self, lbrace: int) -> tuple[BlockStmt, int]:
        self._expect_op(lbrace, "{")
        close = self.stream.match(lbrace)
        items: list[Stmt] = []
        extents: list[tuple[int, int]] = []
        k = lbrace + 1
        while k < close:
            tok = self.toks[k]
            if tok.kind is TokenKind.SEMI:
                k += 1
                continue
            if tok.is_keyword("case", "default"):
                stmt, k = self._case_clause(k, close)
                extents.append((stmt.span.start, self.toks[k].start))
                items.append(stmt)
                continue
            stmt, k = self._stmt(k, close)
            stmt.indent = self._line_indent(stmt.span.start)
            extents.append((stmt.span.start, stmt.span.end))
            items.append(stmt)
            if k < close and self.toks[k].kind is not TokenKind.SEMI:
                raise self._error(f"expected ';', found {self.toks[k].text!r}", k)
        block = BlockStmt(span=self._span(lbrace, close + 1))
        block.stmts, block.lead_comment = self._attach_comments(
            items, self.toks[lbrace], self.toks[close], extents
        )
        block.one_line = self.toks[lbrace].line == self.toks[close].line
        return block, close + 1

    def _case_clause(self, k: int, close: int) -> tuple[CaseClause, int]:
        colon = self._find(k + 1, close, lambda tok: tok.is_op(":"))
        if colon is None:
            raise self._error("expected ':' after case", k)
        header = RawExpr(span=self._span(k, colon + 1), parts=self._raw_parts(k, colon + 1))
        body: list[Stmt] = []
        extents: list[tuple[int, int]] = []
        j = colon + 1
        while j < close and not self.toks[j].is_keyword("case", "default"):
            if self.toks[j].kind is TokenKind.SEMI:
                j += 1
                continue
            stmt, j = self._stmt(j, close)
            stmt.indent = self._line_indent(stmt.span.start)
            body.append(stmt)
            extents.append((stmt.span.start, stmt.span.end))
            if j < close and self.toks[j].kind is not TokenKind.SEMI:
                raise self._error(f"expected ';', found {self.toks[j].text!r}", j)
        last = body[-1].span if body else header.span
        clause = CaseClause(
            header,
            span=Span(header.span.start, last.end, header.span.line, header.span.column, last.end_line),
        )
        clause.body, lead = self._attach_comments(body, self.toks[colon], self.toks[j], extents)
        if lead is not None:
            header.parts = [*(header.parts or []), " " + lead]
        return clause, j

    def _attach_comments(
        self,
        items: list[Stmt],
        opener: Token,
        closer: Token,
        extents: list[tuple[int, int]],
    ) -> tuple[list[Stmt], str | None]:
        first = bisect_left(self._comment_starts, opener.end)
        last = bisect_left(self._comment_starts, closer.start)
        comments = [
            c
            for c in self.stream.comments[first:last]
            if not any(a <= c.start < b for a, b in extents)
        ]
        entries: list[Stmt | CommentToken] = [*items, *comments]
        entries.sort(key=lambda e: e.start if isinstance(e, CommentToken) else e.span.start)
        result: list[Stmt] = []
        lead: str | None = None
        prev_end_line = opener.line
        for entry in entries:
            if isinstance(entry, CommentToken):
                if entry.line == prev_end_line:
                    if result:
                        tail = result[-1]
                        tail.trailing = f"{tail.trailing} {entry.text}" if tail.trailing else entry.text
                    else:
                        lead = f"{lead} {entry.text}" if lead else entry.text
                    prev_end_line = max(prev_end_line, entry.end_line)
                    continue
                stmt: Stmt = Comment(
                    entry.text,
                    span=Span(
                        entry.start,
                        entry.end,
                        entry.line,
                        self.stream.column_of(entry.start),
                        entry.end_line,
                    ),
                )
            else:
                stmt = entry
            stmt.blank_before = bool(result) and stmt.span.line > prev_end_line + 1
            result.append(stmt)
            prev_end_line = stmt.span.end_line
        return result, lead

    def _stmt(self, k: int, close: int) -> tuple[Stmt, int]:
        tok = self.toks[k]
        nxt = self._at(k + 1)
        if tok.kind is TokenKind.IDENT and nxt is not None and nxt.is_op(":"):
            return self._labeled(k, close)
        if tok.is_op("{"):
            return self._block(k)
        if tok.is_keyword("if"):
            return self._if(k, close)
        if tok.is_keyword("for"):
            return self._for(k, close)
        if tok.is_keyword("switch", "select"):
            brace = self._body_brace(k + 1, close)
            children = self._raw_children(k + 1, brace)
            block, end = self._block(brace)
            children.append(block)
            return self._raw_stmt(k, end, children), end
        if tok.is_keyword("var") and nxt is not None and not nxt.is_op("("):
            return self._var(k, close)
        end = self._stmt_end(k, close)
        if end == k:
            raise self._error(f"unexpected {tok.text!r}", k)
        if tok.kind is TokenKind.KEYWORD and not tok.is_keyword("func"):
            return self._raw_stmt(k, end, self._raw_children(k, end)), end
        return self._simple(k, end), end

    def _raw_stmt(self, lo: int, hi: int, children: list[Node]) -> RawStmt:
        span = self._span(lo, hi)
        return RawStmt(span=span, parts=self._weave(span.start, span.end, children))

    def _labeled(self, k: int, close: int) -> tuple[LabeledStmt, int]:
        label = self._ident(k)
        j = k + 2
        if j >= close or self.toks[j].kind is TokenKind.SEMI:
            return LabeledStmt(label, span=self._span(k, k + 2)), j
        inner, j = self._stmt(j, close)
        inner.indent = self._line_indent(inner.span.start)
        span = self._span(k, k + 2)
        return (
            LabeledStmt(
                label,
                inner,
                span=Span(span.start, inner.span.end, span.line, span.column, inner.span.end_line),
            ),
            j,
        )

    def _body_brace(self, lo: int, hi: int) -> int:
        fallback: int | None = None
        k = lo
        while k < hi:
            tok = self.toks[k]
            if tok.is_op("(", "["):
                k = self.stream.match(k) + 1
                continue
            if tok.is_op("{"):
                end = self.stream.match(k)
                after = self._at(end + 1)
                if (
                    after is None
                    or (after.kind is TokenKind.SEMI and after.auto)
                    or after.is_keyword("else")
                    or after.is_op("}")
                ):
                    return k
                if fallback is None and after.kind is TokenKind.SEMI:
                    fallback = k
                k = end + 1
                continue
            k += 1
        if fallback is not None:
            return fallback
        raise self._error("expected block", lo)

    def _if(self, k: int, close: int) -> tuple[RawStmt, int]:
        brace = self._body_brace(k + 1, close)
        children = self._raw_children(k + 1, brace)
        body, j = self._block(brace)
        children.append(body)
        if j < close and self.toks[j].is_keyword("else"):
            nxt = self._at(j + 1)
            if nxt is not None and nxt.is_keyword("if"):
                alt, j = self._if(j + 1, close)
            elif nxt is not None and nxt.is_op("{"):
                alt, j = self._block(j + 1)
            else:
                raise self._error("expected if statement or block after else", j + 1)
            children.append(alt)
        return self._raw_stmt(k, j, children), j

    def _for(self, k: int, close: int) -> tuple[Stmt, int]:
        brace = self._body_brace(k + 1, close)
        range_at = self._find(k + 1, brace, lambda tok: tok.is_keyword("range"))
        if range_at is None:
            children = self._raw_children(k + 1, brace)
            body, j = self._block(brace)
            children.append(body)
            return self._raw_stmt(k, j, children), j
        key: Expr | None = None
        value: Expr | None = None
        tok: str | None = None
        if range_at > k + 1:
            op = self.toks[range_at - 1]
            if not op.is_op(":=", "="):
                raise self._error("expected ':=' or '=' before range", range_at - 1)
            tok = op.text
            names = [self._expr(a, b) for a, b in self._split(k + 1, range_at - 1)]
            if not names or len(names) > 2:
                raise self._error("range clause binds one or two variables", k + 1)
            key = names[0]
            value = names[1] if len(names) == 2 else None
        x = self._expr(range_at + 1, brace)
        body, j = self._block(brace)
        span = self._span(k, j)
        children = [node for node in (key, value, x, body) if node is not None]
        stmt = RangeStmt(
            key,
            value,
            tok,
            x,
            body,
            span=span,
            parts=self._weave(span.start, span.end, children),
        )
        return stmt, j

    def _var(self, k: int, close: int) -> tuple[VarStmt, int]:
        end = self._stmt_end(k, close)
        names: list[Ident] = []
        j = k + 1
        while True:
            names.append(self._ident(j))
            j += 1
            if j < end and self.toks[j].is_op(","):
                j += 1
                continue
            break
        eq = self._find(j, end, lambda tok: tok.is_op("="))
        type_end = end if eq is None else eq
        type_ = self._expr(j, type_end) if j < type_end else None
        values = [] if eq is None else [self._expr(a, b) for a, b in self._split(eq + 1, end)]
        span = self._span(k, end)
        children: list[Node] = [*names]
        if type_ is not None:
            children.append(type_)
        children.extend(values)
        stmt = VarStmt(
            names,
            type_,
            values,
            span=span,
            parts=self._weave(span.start, span.end, children),
        )
        return stmt, end

    def _simple(self, lo: int, hi: int) -> Stmt:
        op_at: int | None = None
        k = lo
        while k < hi:
            tok = self.toks[k]
            if tok.kind is TokenKind.OP and tok.text in _ASSIGN_OPS:
                op_at = k
                break
            if tok.is_op("++", "--", "<-"):
                return self._raw_stmt(lo, hi, self._raw_children(lo, hi))
            k = self._skip(k)
        span = self._span(lo, hi)
        if op_at is None:
            x = self._expr(lo, hi)
            return ExprStmt(x, span=span, parts=self._weave(span.start, span.end, [x]))
        lhs = [self._expr(a, b) for a, b in self._split(lo, op_at)]
        rhs = [self._expr(a, b) for a, b in self._split(op_at + 1, hi)]
        if not lhs or not rhs:
            raise self._error("malformed assignment", op_at)
        return AssignStmt(
            lhs,
            self.toks[op_at].text,
            rhs,
            span=span,
            parts=self._weave(span.start, span.end, [*lhs, *rhs]),
        )
