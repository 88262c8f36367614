"""Core abstractions for nlp-corpora."""

from nlpcorpora.core.archive import NestedZipFile
from nlpcorpora.core.base import BaseCorpusReader
from nlpcorpora.core.driver import iter_corpus, map_corpus, read_corpus, read_corpus_file
from nlpcorpora.core.entries import Entry
from nlpcorpora.core.errors import (
    ConfigurationError,
    CorpusError,
    FormatError,
    ParseError,
    StopTraversal,
)
from nlpcorpora.core.locate import CorpusLocationMixin
from nlpcorpora.core.models import Corpus, ReadResult, Text, Token
from nlpcorpora.core.protocols import FormatHandler
from nlpcorpora.core.registry import get_handler, register_format, registered_formats

__all__ = [
    "BaseCorpusReader",
    "ConfigurationError",
    "Corpus",
    "CorpusError",
    "CorpusLocationMixin",
    "Entry",
    "FormatError",
    "FormatHandler",
    "NestedZipFile",
    "ParseError",
    "ReadResult",
    "StopTraversal",
    "Text",
    "Token",
    "get_handler",
    "iter_corpus",
    "map_corpus",
    "read_corpus",
    "read_corpus_file",
    "register_format",
    "registered_formats",
]
