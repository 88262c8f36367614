"""Bracket-notation treebank parsing.

Treebank files hold one or more trees such as::

    ( (S (NP-SBJ (NNP Pierre) (NNP Vinken))
         (VP (MD will) (VP (VB join) (NP (DT the) (NN board))))
         (. .)) )

Punctuation tags and words collide with the symbolic reader's special
characters, so each whitespace-delimited token is escaped first: tags from
the punctuation set become ``|..|`` symbols, bars inside tags are
backslash-escaped, and every leaf word becomes a double-quoted string. The
escaped text is then read into nested tuples ``(tag, *children)``.

The escaping relies on the fixed layout of the format (an opening token is
``(`` followed by a tag; a leaf word is followed by its closing
parentheses) and does not try to recover from anything else.
"""

from __future__ import annotations

from typing import Iterator

from nlpcorpora.core.errors import ParseError
from nlpcorpora.core.models import ReadResult, Token, TreeFields
from nlpcorpora.core.sexpr import Form, read_forms

__all__ = [
    "PUNCTUATION_TAGS",
    "escape_token",
    "escape_treebank",
    "read_trees",
    "split_forms",
    "tree_leaves",
    "tree_tokens",
    "parse_treebank",
]

PUNCTUATION_TAGS = frozenset({".", ",", ";", ":", "#", "''", "``"})


def _quote(text: str) -> str:
    return '"' + text.replace("\\", "\\\\").replace('"', '\\"') + '"'


def escape_token(token: str) -> str:
    """Escape one whitespace-delimited token of bracket notation.

    Example:
        >>> escape_token("(.")
        '(|.|'
        >>> escape_token("board))))")
        '"board"))))'
    """
    if token.startswith("("):
        rest = token[1:]
        if rest in PUNCTUATION_TAGS:
            return f"(|{rest}|"
        if "|" in rest:
            return "(" + rest.replace("|", "\\|")
        return token

    close = token.find(")")
    if close == 0:
        return token
    if close > 0:
        return _quote(token[:close]) + token[close:]
    return _quote(token)


def escape_treebank(text: str) -> str:
    """Escape a whole file for the symbolic reader."""
    return " ".join(escape_token(token) for token in text.split())


def read_trees(text: str, source: str | None = None) -> Iterator[tuple]:
    """Escape ``text`` and yield its trees in file order.

    Raises:
        ParseError: On malformed nesting (offsets refer to the escaped
            text) or a top-level atom outside any tree.
    """
    for form in read_forms(escape_treebank(text), source):
        if not isinstance(form, tuple):
            raise ParseError(f"expected a bracketed tree, found {form!r}", source=source)
        yield form


def split_forms(text: str) -> list[str]:
    """Split raw text into its top-level bracket forms, whitespace collapsed.

    Parentheses are counted the same way the escaped text is read, so the
    result lines up one-to-one with ``read_trees``.
    """
    forms: list[str] = []
    current: list[str] = []
    depth = 0
    for token in text.split():
        current.append(token)
        if token.startswith("("):
            structural = token
        else:
            close = token.find(")")
            structural = token[close:] if close >= 0 else ""
        depth += structural.count("(") - structural.count(")")
        if depth <= 0:
            forms.append(" ".join(current))
            current = []
            depth = 0
    if current:
        forms.append(" ".join(current))
    return forms


def tree_leaves(node: Form) -> Iterator[tuple[str, str]]:
    """Yield ``(tag, word)`` for each preterminal, depth first.

    A node is a preterminal when it has exactly one child and that child is
    an atom. A node whose head is itself a tree (the unlabeled root of
    ``( (S ...) )``) is treated as a plain list of subtrees.
    """
    if not isinstance(node, tuple) or not node:
        return
    head, children = node[0], node[1:]
    if isinstance(head, tuple):
        children = node
    elif len(children) == 1 and not isinstance(children[0], tuple):
        yield str(head), str(children[0])
        return
    for child in children:
        yield from tree_leaves(child)


def tree_tokens(trees: tuple[tuple, ...] | list[tuple]) -> list[Token]:
    """Derive tokens with offsets into the space-joined words of all trees."""
    tokens: list[Token] = []
    offset = 0
    for tree in trees:
        for tag, word in tree_leaves(tree):
            tokens.append(Token(word=word, tag=tag, begin=offset, end=offset + len(word)))
            offset += len(word) + 1
    return tokens


def parse_treebank(text: str, source: str | None = None) -> ReadResult:
    """Parse a treebank file into raw text, clean text, tokens and trees."""
    trees = tuple(read_trees(text, source))
    tokens = tree_tokens(trees)
    return ReadResult(
        raw="\n".join(split_forms(text)),
        clean=" ".join(token.word for token in tokens),
        tokens=tokens,
        extra=TreeFields(trees=trees),
    )
