"""Materializing and streaming corpus traversal.

``read_corpus`` loads every document under a path into an immutable
``Corpus``. ``map_corpus`` visits the same documents one at a time through a
callback and keeps none of them, so corpora larger than memory can be
processed. Both read entries sequentially in the source's natural order; the
next entry is not read before the callback for the previous document has
returned.

Example:
    >>> corpus = read_corpus("treebank", "/data/ptb/wsj")
    >>> corpus.texts[0].tokens[0]
    Token(word='Pierre', tag='NNP', begin=0, end=6)

    >>> def show(text):
    ...     print(text.name, len(text.tokens))
    >>> map_corpus("reuters", "/data/rcv1.zip", show)
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import IO, Any, Callable, Iterator

from nlpcorpora.core.errors import ConfigurationError, StopTraversal
from nlpcorpora.core.models import Corpus, ReadResult, Text
from nlpcorpora.core.protocols import FormatHandler
from nlpcorpora.core.registry import get_handler

logger = logging.getLogger(__name__)

__all__ = ["read_corpus", "read_corpus_file", "map_corpus", "iter_corpus"]


def _resolve_handler(fmt: str | FormatHandler, options: dict[str, Any]) -> FormatHandler:
    if isinstance(fmt, str):
        return get_handler(fmt, **options)
    if options:
        raise ConfigurationError("Options can only be given with a format tag")
    if not isinstance(fmt, FormatHandler):
        raise ConfigurationError(f"{fmt!r} is not a format tag or handler")
    return fmt


def _resolve_path(handler: FormatHandler, path: str | Path | None) -> Path:
    if path is not None:
        return Path(path)
    get_default_root = getattr(handler, "_get_default_root", None)
    if get_default_root is None:
        raise ConfigurationError(
            f"{type(handler).__name__} has no default corpus location; pass a path"
        )
    return get_default_root()


def _label(fmt: str | FormatHandler, handler: FormatHandler) -> str:
    return fmt if isinstance(fmt, str) else type(handler).__name__


def _make_text(handler: FormatHandler, name: str, result: ReadResult) -> Text:
    make_text = getattr(handler, "make_text", None)
    if make_text is not None:
        return make_text(name, result)
    return Text(
        name=result.name or name,
        raw=result.raw,
        clean=result.clean,
        tokens=tuple(result.tokens),
        extra=result.extra,
    )


def _iter_texts(handler: FormatHandler, root: Path) -> Iterator[Text]:
    entries = 0
    for entry in handler.enumerate_entries(root):
        entries += 1
        logger.debug("Reading entry %s", entry.name)
        with entry.open() as source:
            for result in handler.read_corpus_file(source, entry.name):
                yield _make_text(handler, entry.name, result)
    logger.debug("Read %d entries from %s", entries, root)


def iter_corpus(
    fmt: str | FormatHandler,
    path: str | Path | None = None,
    **options: Any,
) -> Iterator[Text]:
    """Yield the texts under ``path`` one at a time.

    Args:
        fmt: Registered format tag, or a handler.
        path: Corpus location. If None, the handler's default location.
        **options: Handler options (only with a format tag).

    Yields:
        Texts in entry order, and in document order within an entry.

    Raises:
        ConfigurationError: For an unknown format tag.
        ParseError: For malformed document content.
        FormatError: For malformed archives.
        OSError: For storage failures.
    """
    handler = _resolve_handler(fmt, options)
    root = _resolve_path(handler, path)
    logger.info("Reading %s corpus from %s", _label(fmt, handler), root)
    yield from _iter_texts(handler, root)


def read_corpus(
    fmt: str | FormatHandler,
    path: str | Path | None = None,
    *,
    description: str | None = None,
    **options: Any,
) -> Corpus:
    """Load every text under ``path`` into a Corpus.

    Texts are kept in load order; each text is also added to the groups
    named by the handler's ``group_keys``. Any error aborts the load and no
    partial corpus is returned.

    Args:
        fmt: Registered format tag, or a handler.
        path: Corpus location. If None, the handler's default location.
        description: Corpus description. Defaults to format and path.
        **options: Handler options (only with a format tag).

    Returns:
        The loaded Corpus.
    """
    handler = _resolve_handler(fmt, options)
    root = _resolve_path(handler, path)
    group_keys = getattr(handler, "group_keys", None)

    texts: list[Text] = []
    groups: dict[str, list[Text]] = {}
    for text in _iter_texts(handler, root):
        texts.append(text)
        if group_keys is not None:
            for key in dict.fromkeys(group_keys(text)):
                groups.setdefault(key, []).append(text)

    logger.info("Loaded %d texts in %d groups from %s", len(texts), len(groups), root)
    return Corpus.build(
        description or f"{_label(fmt, handler)} corpus from {root}", texts, groups
    )


def map_corpus(
    fmt: str | FormatHandler,
    path: str | Path | None,
    callback: Callable[[Text], Any],
    **options: Any,
) -> int:
    """Call ``callback`` with each text under ``path``, keeping none of them.

    The callback's return value is ignored. Raise ``StopTraversal`` from the
    callback to end the traversal after the current text. Any other error
    ends the traversal; callbacks already made are not undone.

    Args:
        fmt: Registered format tag, or a handler.
        path: Corpus location. If None, the handler's default location.
        callback: Called once per text.
        **options: Handler options (only with a format tag).

    Returns:
        Number of texts delivered to the callback.
    """
    delivered = 0
    texts = iter_corpus(fmt, path, **options)
    try:
        for text in texts:
            delivered += 1
            try:
                callback(text)
            except StopTraversal:
                logger.info("Traversal stopped by callback after %d texts", delivered)
                break
    finally:
        texts.close()
    return delivered


def read_corpus_file(
    fmt: str | FormatHandler,
    source: IO[bytes] | str | Path,
    name: str | None = None,
    **options: Any,
) -> list[ReadResult]:
    """Read the documents of a single source.

    Args:
        fmt: Registered format tag, or a handler.
        source: Binary stream, or a path to open.
        name: Source name used in errors. Defaults to the path or "<stream>".
        **options: Handler options (only with a format tag).

    Returns:
        One ReadResult per document (exactly one for single-document formats).
    """
    handler = _resolve_handler(fmt, options)
    if isinstance(source, (str, Path)):
        path = Path(source)
        with path.open("rb") as stream:
            return list(handler.read_corpus_file(stream, name or path.name))
    return list(handler.read_corpus_file(source, name or "<stream>"))
