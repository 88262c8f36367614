"""Plaintext corpus readers.

Readers for flat text files without markup:
- PlaintextReader: Generic plaintext reader, one document per file
- BrownReader: Brown-style files of ``word/tag`` tokens
"""

from __future__ import annotations

import re
from pathlib import PurePosixPath
from typing import IO, Iterable, Iterator

from nlpcorpora.core.base import BaseCorpusReader
from nlpcorpora.core.locate import CorpusLocationMixin
from nlpcorpora.core.models import ReadResult, Text, Token
from nlpcorpora.core.registry import register_format
from nlpcorpora.nlp.pipeline import tokenize


@register_format("plaintext")
class PlaintextReader(BaseCorpusReader):
    """Reader for plain text files.

    Each file is one document. The clean text is the NFC-normalized content
    trimmed of boundary whitespace; tokens come from spaCy's rule-based
    tokenizer, with offsets into the clean text. Empty files are skipped.

    Example:
        >>> corpus = read_corpus("plaintext", "/path/to/texts")
        >>> corpus.texts[0].tokens[:3]
    """

    def __init__(
        self,
        file_pattern: str | None = None,
        encoding: str = "utf-8",
        lang: str = "en",
    ):
        """Initialize the plaintext reader.

        Args:
            file_pattern: Glob pattern for selecting files.
            encoding: Text encoding.
            lang: Language code of the tokenizer.
        """
        super().__init__(file_pattern=file_pattern, encoding=encoding)
        self._lang = lang

    @classmethod
    def _default_file_pattern(cls) -> str:
        """Default to .txt files."""
        return "**/*.txt"

    def read_corpus_file(
        self, source: IO[bytes], name: str = "<stream>"
    ) -> Iterator[ReadResult]:
        """Read a plaintext file as a single document."""
        raw = self._read_text(source, name)
        clean = self._normalize_text(raw).strip()

        if not clean:
            return

        yield ReadResult(raw=raw, clean=clean, tokens=tokenize(clean, self._lang))


@register_format("brown")
class BrownReader(CorpusLocationMixin, BaseCorpusReader):
    """Reader for the Brown corpus and files in its ``word/tag`` layout.

    Each non-blank line holds whitespace-separated tokens such as
    ``The/at Fulton/np-tl County/nn-tl``; the tag follows the last slash.
    The clean text has one line of space-joined words per source line, and
    token offsets point into it.

    Files are named ``c<category><number>`` (``ca01``); each text is grouped
    under its category letter.

    If no path is given, looks for the corpus in:
    1. The path specified by BROWN_CORPUS_ROOT environment variable
    2. ~/nlp_data/brown
    """

    ENV_VAR = "BROWN_CORPUS_ROOT"
    DEFAULT_SUBDIR = "brown"
    _FILE_CHECK_PATTERN = "c[a-r][0-9][0-9]"

    FILENAME_PATTERN = re.compile(r"c([a-r])\d\d")

    @classmethod
    def _default_file_pattern(cls) -> str:
        return "**/c[a-r][0-9][0-9]"

    def _parse_token(self, item: str) -> tuple[str, str | None]:
        word, slash, tag = item.rpartition("/")
        if not slash or not word:
            return item, None
        return word, tag

    def read_corpus_file(
        self, source: IO[bytes], name: str = "<stream>"
    ) -> Iterator[ReadResult]:
        """Read a tagged file as a single document."""
        raw = self._read_text(source, name)

        lines: list[str] = []
        tokens: list[Token] = []
        offset = 0
        for line in raw.splitlines():
            line = line.strip()
            if not line:
                continue
            words = []
            for item in line.split():
                word, tag = self._parse_token(item)
                tokens.append(Token(word=word, tag=tag, begin=offset, end=offset + len(word)))
                # One separator follows every word: a space or the line break
                offset += len(word) + 1
                words.append(word)
            lines.append(" ".join(words))

        if not tokens:
            return

        yield ReadResult(raw=raw, clean="\n".join(lines), tokens=tokens)

    def group_keys(self, text: Text) -> Iterable[str]:
        """Group by the category letter in the file name."""
        match = self.FILENAME_PATTERN.fullmatch(PurePosixPath(text.name).name)
        return (match.group(1),) if match else ()
