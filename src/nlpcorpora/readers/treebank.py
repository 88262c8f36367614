"""Bracket-notation treebank reader.

Reads Penn-Treebank-style ``.mrg`` files. Each file becomes one text whose
tokens are the preterminals of all its trees, in order, and whose
``TreeFields`` keep the trees themselves.
"""

from __future__ import annotations

from pathlib import PurePosixPath
from typing import IO, Iterable, Iterator

from nlpcorpora.core.base import BaseCorpusReader
from nlpcorpora.core.locate import CorpusLocationMixin
from nlpcorpora.core.models import ReadResult, Text
from nlpcorpora.core.registry import register_format
from nlpcorpora.core.treebank import parse_treebank


@register_format("treebank")
class TreebankReader(CorpusLocationMixin, BaseCorpusReader):
    """Reader for bracketed parse tree files.

    Texts are grouped by the directory holding them (the WSJ section for
    the Penn Treebank layout ``wsj/00/wsj_0001.mrg``).

    If no path is given, looks for the corpus in:
    1. The path specified by TREEBANK_ROOT environment variable
    2. ~/nlp_data/treebank

    Example:
        >>> corpus = read_corpus("treebank", "/data/ptb/combined")
        >>> text = corpus.texts[0]
        >>> text.extra.trees[0]
        >>> [(t.word, t.tag) for t in text.tokens[:3]]
    """

    ENV_VAR = "TREEBANK_ROOT"
    DEFAULT_SUBDIR = "treebank"
    _FILE_CHECK_PATTERN = "**/*.mrg"

    @classmethod
    def _default_file_pattern(cls) -> str:
        return "**/*.mrg"

    def read_corpus_file(
        self, source: IO[bytes], name: str = "<stream>"
    ) -> Iterator[ReadResult]:
        """Read all trees of a file as a single document.

        Raises:
            ParseError: On malformed bracket nesting.
        """
        text = self._read_text(source, name)
        if not text.strip():
            return
        yield parse_treebank(text, source=name)

    def group_keys(self, text: Text) -> Iterable[str]:
        """Group by parent directory, if the entry has one."""
        parent = PurePosixPath(text.name).parent.as_posix()
        return (parent,) if parent != "." else ()
