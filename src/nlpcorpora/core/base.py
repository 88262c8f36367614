"""Base corpus reader class.

This module provides the abstract base class that the built-in format
handlers inherit from. It handles entry enumeration, text decoding and
normalization, and wrapping read results into ``Text`` values.
"""

from __future__ import annotations

import unicodedata
from abc import ABC, abstractmethod
from pathlib import Path
from typing import IO, Iterable, Iterator

from nlpcorpora.core.entries import Entry, iter_path_entries
from nlpcorpora.core.errors import ParseError
from nlpcorpora.core.models import ReadResult, Text

__all__ = ["BaseCorpusReader"]


class BaseCorpusReader(ABC):
    """Abstract base class for corpus format handlers.

    To create a new reader, subclass, implement and register:

    Required:
        - read_corpus_file(source, name) -> yields ReadResult values

    Optional overrides:
        - _default_file_pattern() -> glob pattern for entries
        - enumerate_entries(path) -> for non-standard source layouts
        - group_keys(text) -> corpus groups of a text
        - _normalize_text(text) -> cleaned text

    Example:
        @register_format("lines")
        class LinesReader(BaseCorpusReader):
            @classmethod
            def _default_file_pattern(cls) -> str:
                return "**/*.txt"

            def read_corpus_file(self, source, name="<stream>"):
                text = self._read_text(source, name)
                yield ReadResult(raw=text, clean=text.strip())
    """

    def __init__(
        self,
        file_pattern: str | None = None,
        encoding: str = "utf-8",
    ):
        """Initialize the reader.

        Args:
            file_pattern: Glob pattern for selecting entries. If None, uses
                the class default.
            encoding: Text encoding of the source files.
        """
        self._file_pattern = file_pattern or self._default_file_pattern()
        self._encoding = encoding

    def __repr__(self) -> str:
        return f"{type(self).__name__}(file_pattern={self._file_pattern!r})"

    @property
    def file_pattern(self) -> str:
        """Glob pattern entries are selected with."""
        return self._file_pattern

    @property
    def encoding(self) -> str:
        """Text encoding of the source files."""
        return self._encoding

    @classmethod
    def _default_file_pattern(cls) -> str:
        """Default glob pattern for this corpus type. Override in subclasses."""
        return "**/*"

    def _normalize_text(self, text: str) -> str:
        """Normalize text. Override for corpus-specific cleaning.

        Args:
            text: Raw text from file.

        Returns:
            Normalized text.
        """
        return unicodedata.normalize("NFC", text)

    def _read_text(self, source: IO[bytes], name: str) -> str:
        """Read and decode a whole binary stream.

        Raises:
            ParseError: If the content is not valid in the reader's encoding.
        """
        data = source.read()
        try:
            return data.decode(self._encoding)
        except UnicodeDecodeError as exc:
            raise ParseError(
                f"cannot decode as {self._encoding}: {exc.reason}",
                source=name,
                offset=exc.start,
            ) from exc

    def enumerate_entries(self, path: str | Path) -> Iterator[Entry]:
        """Yield entries under ``path``: a directory, a zip archive or a file.

        Args:
            path: Corpus location.

        Yields:
            Entries in directory listing or archive order.
        """
        return iter_path_entries(path, self._file_pattern)

    @abstractmethod
    def read_corpus_file(
        self, source: IO[bytes], name: str = "<stream>"
    ) -> Iterator[ReadResult]:
        """Read the documents in one entry.

        This is the main extension point for subclasses.

        Args:
            source: Binary stream of the entry's content.
            name: Entry name, used in errors.

        Yields:
            One ReadResult per document, in source order.
        """
        ...

    def make_text(self, name: str, result: ReadResult) -> Text:
        """Wrap a read result into a Text named after its entry."""
        return Text(
            name=result.name or name,
            raw=result.raw,
            clean=result.clean,
            tokens=tuple(result.tokens),
            extra=result.extra,
        )

    def group_keys(self, text: Text) -> Iterable[str]:
        """Return the corpus groups ``text`` belongs to. None by default."""
        return ()
