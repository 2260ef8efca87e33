from __future__ import annotations

import re
import textwrap

_LEADING_INDENT = re.compile(r"^(?: {4})+", re.MULTILINE)


def go_source(text: str) -> str:
    """Dedent a Go fixture and turn each leading four-space step into a tab."""
    body = textwrap.dedent(text).strip("\n") + "\n"
    return _LEADING_INDENT.sub(lambda match: "\t" * (len(match.group()) // 4), body)
