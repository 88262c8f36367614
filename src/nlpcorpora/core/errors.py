"""Exception types raised while loading corpora.

Storage failures are not wrapped: they surface as the builtin ``OSError``
(``IOError``) raised by the filesystem or archive layer.
"""

from __future__ import annotations


class CorpusError(Exception):
    """Base class for corpus loading errors."""


class ConfigurationError(CorpusError):
    """An unregistered format tag or an invalid reader configuration."""


class ParseError(CorpusError):
    """Malformed document content (bad markup, bad bracket nesting).

    Attributes:
        source: Identifier of the entry being parsed, if known.
        offset: Character offset into the parsed text, if known.
        line: 1-based line number, if the decoder reports one.
        column: Column number, if the decoder reports one.
    """

    def __init__(
        self,
        message: str,
        source: str | None = None,
        offset: int | None = None,
        line: int | None = None,
        column: int | None = None,
    ):
        self.message = message
        self.source = source
        self.offset = offset
        self.line = line
        self.column = column
        super().__init__(self._format())

    def _format(self) -> str:
        where = []
        if self.source is not None:
            where.append(self.source)
        if self.line is not None:
            where.append(f"line {self.line}")
            if self.column is not None:
                where.append(f"column {self.column}")
        elif self.offset is not None:
            where.append(f"offset {self.offset}")
        if where:
            return f"{', '.join(where)}: {self.message}"
        return self.message


class FormatError(CorpusError):
    """Structural archive violation, such as a missing directory trailer."""

    def __init__(self, message: str, source: str | None = None):
        self.message = message
        self.source = source
        super().__init__(f"{source}: {message}" if source else message)


class StopTraversal(Exception):
    """Raised by a ``map_corpus`` callback to end the traversal early."""
