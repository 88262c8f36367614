"""A small reader for nested-list symbolic expressions.

Syntax:
    (a b c)      list, read as a tuple
    "text"       string, read as ``str``; ``\\"`` and ``\\\\`` escape
    |text|       quoted symbol, read as ``Symbol``; ``\\|`` escapes a bar
    name         bare symbol; any character may be escaped with ``\\``
    ; ...        comment to end of line

The characters ``( ) " | ;`` delimit tokens, and the reader macro
characters ``' ` ,`` as well as a leading ``#`` may not appear in a bare
symbol; a lone ``.`` is rejected as well. Content using them must be quoted
or escaped first.
"""

from __future__ import annotations

import re
from typing import Iterator, Union

from nlpcorpora.core.errors import ParseError

__all__ = ["Symbol", "Form", "read_forms", "read_form"]


class Symbol(str):
    """A symbol atom, distinct from a string atom."""

    __slots__ = ()

    def __repr__(self) -> str:
        return f"Symbol({str.__repr__(self)})"


Form = Union[str, Symbol, tuple]

_TOKEN = re.compile(
    r"""
      (?P<space>\s+)
    | (?P<comment>;[^\n]*)
    | (?P<open>\()
    | (?P<close>\))
    | "(?P<string>(?:[^"\\]|\\.)*)"
    | \|(?P<bar>(?:[^|\\]|\\.)*)\|
    | (?P<symbol>(?:[^\s()"|;'`,\#\\]|\\.)(?:[^\s()"|;'`,\\]|\\.)*)
    """,
    re.VERBOSE | re.DOTALL,
)

_ESCAPE = re.compile(r"\\(.)", re.DOTALL)


def _unescape(text: str) -> str:
    return _ESCAPE.sub(r"\1", text)


def read_forms(text: str, source: str | None = None) -> Iterator[Form]:
    """Read top-level forms from ``text`` one at a time.

    Raises:
        ParseError: On unbalanced parentheses, an unterminated string or
            quoted symbol, or a character that cannot start a token.
    """
    stack: list[tuple[int, list[Form]]] = []
    position = 0
    length = len(text)

    while position < length:
        match = _TOKEN.match(text, position)
        if match is None:
            char = text[position]
            if char == '"':
                message = "unterminated string"
            elif char == "|":
                message = "unterminated quoted symbol"
            else:
                message = f"unexpected character {char!r}"
            raise ParseError(message, source=source, offset=position)

        start, position = match.start(), match.end()
        kind = match.lastgroup

        if kind in ("space", "comment"):
            continue
        if kind == "open":
            stack.append((start, []))
            continue
        if kind == "close":
            if not stack:
                raise ParseError("unmatched ')'", source=source, offset=start)
            _, items = stack.pop()
            form: Form = tuple(items)
        elif kind == "string":
            form = _unescape(match.group("string"))
        elif kind == "bar":
            form = Symbol(_unescape(match.group("bar")))
        else:
            name = match.group("symbol")
            if name == ".":
                raise ParseError("dot context error", source=source, offset=start)
            form = Symbol(_unescape(name))

        if stack:
            stack[-1][1].append(form)
        else:
            yield form

    if stack:
        raise ParseError("unexpected end of input: unclosed '('", source=source, offset=stack[-1][0])


def read_form(text: str, source: str | None = None) -> Form:
    """Read exactly one form.

    Raises:
        ParseError: If the text holds no form or more than one.
    """
    forms = list(read_forms(text, source))
    if len(forms) != 1:
        raise ParseError(f"expected one form, found {len(forms)}", source=source)
    return forms[0]
