"""
nlp-corpora: Loading and streaming linguistic corpora.

This package reads text collections stored in incompatible on-disk shapes
into one model of documents (Text) and tokens (Token):

Formats:
    - plaintext: Flat text files
    - brown: Brown-style word/tag files
    - treebank: Bracket-notation parse trees (.mrg)
    - nps-chat: NPS Chat XML sessions
    - reuters: Reuters RCV1 NewsML, read through nested zip archives
    - wikipedia: MediaWiki XML dumps

Core:
    - read_corpus: Load a whole corpus into an immutable Corpus
    - map_corpus: Stream texts through a callback in constant memory
    - read_corpus_file: Read the documents of one source
    - register_format: Add a format handler

Example:
    >>> from nlpcorpora import read_corpus, map_corpus
    >>>
    >>> corpus = read_corpus("brown", "/data/brown")
    >>> for text in corpus.groups["a"]:
    ...     print(text.name, len(text.tokens))
    >>>
    >>> # Stream a corpus too large for memory
    >>> map_corpus("reuters", "/data/rcv1.zip", lambda text: print(text.extra.headline))
"""

from nlpcorpora.core.driver import iter_corpus, map_corpus, read_corpus, read_corpus_file
from nlpcorpora.core.errors import (
    ConfigurationError,
    CorpusError,
    FormatError,
    ParseError,
    StopTraversal,
)
from nlpcorpora.core.models import (
    ChatFields,
    Corpus,
    NewsFields,
    PageFields,
    ReadResult,
    Text,
    Token,
    TreeFields,
)
from nlpcorpora.core.registry import get_handler, register_format, registered_formats
from nlpcorpora.readers import (
    BrownReader,
    ChatReader,
    PlaintextReader,
    ReutersReader,
    TreebankReader,
    WikipediaReader,
)

__version__ = "0.1.0"
__all__ = [
    # Driver
    "read_corpus",
    "read_corpus_file",
    "map_corpus",
    "iter_corpus",
    # Registry
    "register_format",
    "registered_formats",
    "get_handler",
    # Model
    "Corpus",
    "Text",
    "Token",
    "ReadResult",
    "NewsFields",
    "TreeFields",
    "ChatFields",
    "PageFields",
    # Errors
    "CorpusError",
    "ConfigurationError",
    "ParseError",
    "FormatError",
    "StopTraversal",
    # Readers
    "PlaintextReader",
    "BrownReader",
    "TreebankReader",
    "ChatReader",
    "ReutersReader",
    "WikipediaReader",
]
