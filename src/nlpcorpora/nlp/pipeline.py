"""spaCy integration for nlp-corpora.

This module handles lazy loading and caching of blank spaCy pipelines used
to tokenize flat text, conversion of corpus texts to spaCy ``Doc`` objects,
and registration of the custom extensions those Docs carry.
"""

from __future__ import annotations

from dataclasses import fields
from functools import lru_cache
from typing import TYPE_CHECKING, Any

import spacy
from spacy.tokens import Doc

from nlpcorpora.core.models import Text, Token

if TYPE_CHECKING:
    from spacy import Language
    from spacy.vocab import Vocab


# Register custom extensions once at module load
def _register_extensions() -> None:
    """Register spaCy custom extensions for corpus provenance."""
    if not Doc.has_extension("metadata"):
        Doc.set_extension("metadata", default=None)
    if not Doc.has_extension("fileid"):
        Doc.set_extension("fileid", default=None)


# Register on import
_register_extensions()


@lru_cache(maxsize=4)
def get_tokenizer(lang: str = "en") -> Language:
    """Load and cache a blank pipeline for ``lang``.

    Only the rule-based tokenizer is used; no model is downloaded.

    Args:
        lang: spaCy language code.

    Returns:
        Blank spaCy Language pipeline.
    """
    nlp = spacy.blank(lang)
    nlp.max_length = 2_500_000  # Handle large documents
    return nlp


def tokenize(text: str, lang: str = "en") -> list[Token]:
    """Split text into tokens with character offsets into ``text``.

    Whitespace tokens are dropped.

    Example:
        >>> [t.word for t in tokenize("Stocks rose, again.")]
        ['Stocks', 'rose', ',', 'again', '.']
    """
    doc = get_tokenizer(lang).tokenizer(text)
    return [
        Token(word=token.text, begin=token.idx, end=token.idx + len(token.text))
        for token in doc
        if not token.is_space
    ]


def _metadata(text: Text) -> dict[str, Any]:
    metadata: dict[str, Any] = {"kind": text.kind}
    if text.extra is not None:
        for field in fields(text.extra):
            metadata[field.name] = getattr(text.extra, field.name)
    return metadata


def text_to_doc(text: Text, vocab: Vocab | None = None, lang: str = "en") -> Doc:
    """Create a spaCy Doc from a text's own tokens.

    The corpus tokenization and tags are kept as they are; no pipeline
    components are run. Token tags become ``token.tag_``. Whitespace follows
    the token offsets where present, else single spaces.

    Args:
        text: Corpus text.
        vocab: Vocab to create the Doc with. Defaults to the blank
            pipeline's vocab for ``lang``.
        lang: Language code for the default vocab.

    Returns:
        Doc with ``doc._.fileid`` set to the text name and ``doc._.metadata``
        holding the text's format-specific fields.
    """
    if vocab is None:
        vocab = get_tokenizer(lang).vocab

    tokens = text.tokens
    spaces = []
    for current, following in zip(tokens, tokens[1:]):
        if current.end is not None and following.begin is not None:
            spaces.append(following.begin > current.end)
        else:
            spaces.append(True)
    if tokens:
        spaces.append(False)

    doc = Doc(vocab, words=[token.word for token in tokens], spaces=spaces)
    for spacy_token, token in zip(doc, tokens):
        if token.tag:
            spacy_token.tag_ = token.tag

    doc._.fileid = text.name
    doc._.metadata = _metadata(text)
    return doc
