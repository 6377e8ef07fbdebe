"""Kida filters used by the code-generation templates.

Registered on the generator's private Environment.  They turn resource
text into pieces of Python source without changing what the code means:
re-indenting never touches the continuation lines of multi-line string
literals.
"""

import io
import tokenize
from typing import Any

# Opening -> closing token types of f-strings and t-strings, which
# tokenize in pieces instead of as one STRING token
_STRING_OPENERS = {
    tokenize.FSTRING_START: tokenize.FSTRING_END,
    tokenize.TSTRING_START: tokenize.TSTRING_END,
}


def pyrepr(value: Any) -> str:
    """Render *value* as a Python literal.

    Example:
        TEMPLATE = {{ page.body | pyrepr }}
    """
    return repr(value)


def string_continuation_lines(source: str) -> frozenset[int]:
    """Return the 1-based numbers of lines that begin inside a string literal.

    Source that does not tokenize yields the lines found so far; the
    generator's compile check reports the error itself.
    """
    closers = set(_STRING_OPENERS.values())
    inside: set[int] = set()
    open_rows: list[int] = []
    try:
        for token in tokenize.generate_tokens(io.StringIO(source).readline):
            if token.type == tokenize.STRING:
                inside.update(range(token.start[0] + 1, token.end[0] + 1))
            elif token.type in _STRING_OPENERS:
                open_rows.append(token.start[0])
            elif token.type in closers and open_rows:
                inside.update(range(open_rows.pop() + 1, token.end[0] + 1))
    except (tokenize.TokenError, SyntaxError):
        return frozenset(inside)
    return frozenset(inside)


def reindent(source: str, width: int) -> str:
    """Move a page of code to *width* columns of indentation.

    The common leading whitespace of code lines is replaced by *width*
    spaces.  Blank lines stay empty and lines inside string literals are
    kept byte for byte.
    """
    lines = source.strip("\n").split("\n")
    frozen = string_continuation_lines("\n".join(lines) + "\n")
    margin = min(
        (
            len(line) - len(line.lstrip())
            for row, line in enumerate(lines, start=1)
            if row not in frozen and line.strip()
        ),
        default=0,
    )
    prefix = " " * width
    out = []
    for row, line in enumerate(lines, start=1):
        if row in frozen:
            out.append(line)
        elif not line.strip():
            out.append("")
        else:
            out.append(prefix + line[margin:])
    return "\n".join(out)


def code_block(source: str, width: int = 4) -> str:
    """Re-indent a page of code as a function body.  A blank page becomes ``pass``.

    Example:
        def handler(request, response):
        {{ logic | code_block }}
    """
    if not source.strip():
        return " " * width + "pass"
    return reindent(source, width)


def module_code(source: str) -> str:
    """Normalize a page of module-level code (dedented, trailing newline)."""
    if not source.strip():
        return ""
    return reindent(source, 0) + "\n"


GENERATOR_FILTERS = {
    "code_block": code_block,
    "module_code": module_code,
    "pyrepr": pyrepr,
}
