"""Go tokenizer with automatic semicolon insertion."""

from __future__ import annotations

import re
from bisect import bisect_right
from dataclasses import dataclass
from enum import StrEnum
from pathlib import Path

from parallelize.exceptions import ParseError


class TokenKind(StrEnum):
    IDENT = "IDENT"
    KEYWORD = "KEYWORD"
    NUMBER = "NUMBER"
    RUNE = "RUNE"
    STRING = "STRING"
    OP = "OP"
    SEMI = "SEMI"


KEYWORDS = frozenset(
    {
        "break",
        "case",
        "chan",
        "const",
        "continue",
        "default",
        "defer",
        "else",
        "fallthrough",
        "for",
        "func",
        "go",
        "goto",
        "if",
        "import",
        "interface",
        "map",
        "package",
        "range",
        "return",
        "select",
        "struct",
        "switch",
        "type",
        "var",
    }
)

_SEMI_TRIGGER_KEYWORDS = frozenset({"break", "continue", "fallthrough", "return"})
_SEMI_TRIGGER_OPS = frozenset({"++", "--", ")", "]", "}"})
_OPEN = {"(": ")", "[": "]", "{": "}"}
_CLOSE = {")": "(", "]": "[", "}": "{"}

_OPERATORS = sorted(
    [
        "<<=", ">>=", "&^=", "...", "&&", "||", "<-", "++", "--", "==", "!=",
        "<=", ">=", ":=", "+=", "-=", "*=", "/=", "%=", "&=", "|=", "^=",
        "<<", ">>", "&^", "+", "-", "*", "/", "%", "&", "|", "^", "<", ">",
        "=", "!", "(", ")", "[", "]", "{", "}", ",", ";", ".", ":", "~",
    ],
    key=len,
    reverse=True,
)

_TOKEN_RE = re.compile(
    r"""
    (?P<newline>\n)
    |(?P<space>[ \t\r\f\v]+)
    |(?P<line_comment>//[^\n]*)
    |(?P<block_comment>/\*.*?\*/)
    |(?P<open_comment>/\*)
    |(?P<number>
        0[xX][0-9a-fA-F_]*(?:\.[0-9a-fA-F_]*)?(?:[pP][+-]?[0-9_]+)?i?
        |0[bBoO][0-9_]+i?
        |(?:[0-9][0-9_]*(?:\.[0-9_]*)?|\.[0-9][0-9_]*)(?:[eE][+-]?[0-9_]+)?i?
    )
    |(?P<ident>[^\W\d]\w*)
    |(?P<rune>'(?:\\.|\\[0-7]{3}|[^'\\\n])+')
    |(?P<string>"(?:\\.|[^"\\\n])*")
    |(?P<raw_string>`[^`]*`)
    |(?P<op>"""
    + "|".join(re.escape(op) for op in _OPERATORS)
    + r"""
    )
    """,
    re.VERBOSE | re.DOTALL,
)


@dataclass(frozen=True)
class Token:
    kind: TokenKind
    text: str
    start: int
    end: int
    line: int
    column: int
    auto: bool = False

    def is_op(self, *ops: str) -> bool:
        return self.kind is TokenKind.OP and self.text in ops

    def is_keyword(self, *words: str) -> bool:
        return self.kind is TokenKind.KEYWORD and self.text in words


@dataclass(frozen=True)
class CommentToken:
    text: str
    start: int
    end: int
    line: int
    end_line: int


@dataclass
class TokenStream:
    source: str
    path: str
    tokens: list[Token]
    comments: list[CommentToken]
    line_starts: list[int]
    matches: dict[int, int]

    def line_of(self, offset: int) -> int:
        return bisect_right(self.line_starts, offset)

    def column_of(self, offset: int) -> int:
        return offset - self.line_starts[self.line_of(offset) - 1] + 1

    def match(self, index: int) -> int:
        """Index of the bracket closing (or opening) the one at ``index``."""
        return self.matches[index]

    def error(self, message: str, offset: int) -> ParseError:
        return ParseError(
            message,
            path=self.path,
            line=self.line_of(offset),
            column=self.column_of(offset),
        )


def _line_starts(source: str) -> list[int]:
    starts = [0]
    for match in re.finditer("\n", source):
        starts.append(match.end())
    return starts


def tokenize(source: str, path: Path | str = "<source>") -> TokenStream:
    stream = TokenStream(
        source=source,
        path=str(path),
        tokens=[],
        comments=[],
        line_starts=_line_starts(source),
        matches={},
    )
    tokens = stream.tokens
    pending_semi = False
    pos = 0

    def _semi(at: int) -> None:
        nonlocal pending_semi
        if pending_semi:
            tokens.append(
                Token(
                    TokenKind.SEMI,
                    "",
                    at,
                    at,
                    stream.line_of(at),
                    stream.column_of(at),
                    auto=True,
                )
            )
        pending_semi = False

    while pos < len(source):
        match = _TOKEN_RE.match(source, pos)
        if match is None:
            raise stream.error(f"unexpected character {source[pos]!r}", pos)
        group = match.lastgroup
        text = match.group()
        start, end = match.span()
        pos = end
        if group == "newline":
            _semi(start)
            continue
        if group == "space":
            continue
        if group == "open_comment":
            raise stream.error("comment not terminated", start)
        if group in ("line_comment", "block_comment"):
            if group == "block_comment" and "\n" in text:
                _semi(start)
            stream.comments.append(
                CommentToken(text, start, end, stream.line_of(start), stream.line_of(end - 1))
            )
            continue
        line, column = stream.line_of(start), stream.column_of(start)
        if group == "ident":
            kind = TokenKind.KEYWORD if text in KEYWORDS else TokenKind.IDENT
            pending_semi = kind is TokenKind.IDENT or text in _SEMI_TRIGGER_KEYWORDS
        elif group == "number":
            kind = TokenKind.NUMBER
            pending_semi = True
        elif group == "rune":
            kind = TokenKind.RUNE
            pending_semi = True
        elif group in ("string", "raw_string"):
            kind = TokenKind.STRING
            pending_semi = True
        else:
            if text == ";":
                kind = TokenKind.SEMI
                pending_semi = False
            else:
                kind = TokenKind.OP
                pending_semi = text in _SEMI_TRIGGER_OPS
        tokens.append(Token(kind, text, start, end, line, column))
    _semi(len(source))
    stream.matches = _match_brackets(stream)
    return stream


def _match_brackets(stream: TokenStream) -> dict[int, int]:
    matches: dict[int, int] = {}
    stack: list[int] = []
    for index, token in enumerate(stream.tokens):
        if token.kind is not TokenKind.OP:
            continue
        if token.text in _OPEN:
            stack.append(index)
        elif token.text in _CLOSE:
            if not stack or stream.tokens[stack[-1]].text != _CLOSE[token.text]:
                raise stream.error(f"unexpected {token.text!r}", token.start)
            opener = stack.pop()
            matches[opener] = index
            matches[index] = opener
    if stack:
        opener = stream.tokens[stack[-1]]
        raise stream.error(f"unclosed {opener.text!r}", opener.start)
    return matches
