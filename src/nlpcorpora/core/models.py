"""Corpus model shared by every reader.

A ``Corpus`` holds ``Text`` documents in load order, plus named groups that
reference the same ``Text`` instances. Format-specific fields live in a
tagged ``extra`` value on the text rather than in ``Text`` subclasses.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, ClassVar, Iterator, Mapping, Union

__all__ = [
    "Token",
    "Text",
    "Corpus",
    "ReadResult",
    "NewsFields",
    "TreeFields",
    "ChatFields",
    "PageFields",
    "TextExtra",
]


@dataclass(frozen=True)
class Token:
    """A word with an optional category tag and optional offsets.

    ``begin``/``end`` are half-open offsets into the token-joined text of the
    owning document (its ``clean`` form), not byte offsets into the source.
    """

    word: str
    tag: str | None = None
    begin: int | None = None
    end: int | None = None


@dataclass(frozen=True)
class NewsFields:
    """Newswire article fields (Reuters)."""

    kind: ClassVar[str] = "news"

    headline: str | None = None
    byline: str | None = None
    dateline: str | None = None
    codes: tuple[str, ...] = ()


@dataclass(frozen=True)
class TreeFields:
    """Parse trees of a treebank file, in file order."""

    kind: ClassVar[str] = "treebank"

    trees: tuple[Any, ...] = ()


@dataclass(frozen=True)
class ChatFields:
    """Chat post fields. ``class_`` is the dialogue-act class of the post."""

    kind: ClassVar[str] = "chat"

    class_: str | None = None
    user: str | None = None


@dataclass(frozen=True)
class PageFields:
    """Encyclopedia page fields."""

    kind: ClassVar[str] = "page"

    title: str | None = None
    page_id: str | None = None


TextExtra = Union[NewsFields, TreeFields, ChatFields, PageFields]


@dataclass(frozen=True)
class Text:
    """One logical document of a corpus.

    Attributes:
        name: Identifier, expected (not enforced) to be unique in a corpus.
        raw: Original source string, if meaningful for the format.
        clean: Normalized string the token offsets refer to.
        tokens: Tokens in source order.
        extra: Format-specific fields, or None.
    """

    name: str
    raw: str | None = None
    clean: str | None = None
    tokens: tuple[Token, ...] = ()
    extra: TextExtra | None = None

    @property
    def kind(self) -> str | None:
        """Variant tag of ``extra`` ("news", "treebank", "chat", "page")."""
        return self.extra.kind if self.extra is not None else None

    @property
    def words(self) -> list[str]:
        """Token words in order."""
        return [token.word for token in self.tokens]


@dataclass
class ReadResult:
    """Multi-field result of reading one document from a source.

    Fields that are not meaningful for a format stay None (e.g. ``raw`` for
    chat posts). ``name`` overrides the entry name when a single source
    holds several documents.
    """

    raw: str | None = None
    clean: str | None = None
    tokens: list[Token] = field(default_factory=list)
    extra: TextExtra | None = None
    name: str | None = None


@dataclass(frozen=True)
class Corpus:
    """An immutable collection of texts plus overlapping named groups.

    Build with ``Corpus.build()`` (or ``read_corpus``); the ``groups``
    mapping is read-only and its values share the instances in ``texts``.
    """

    description: str
    texts: tuple[Text, ...] = ()
    groups: Mapping[str, tuple[Text, ...]] = field(
        default_factory=lambda: MappingProxyType({})
    )

    def __post_init__(self):
        # Freeze caller-supplied containers
        frozen_groups = {key: tuple(members) for key, members in self.groups.items()}
        object.__setattr__(self, "texts", tuple(self.texts))
        object.__setattr__(self, "groups", MappingProxyType(frozen_groups))

    @classmethod
    def build(
        cls,
        description: str,
        texts: list[Text],
        groups: dict[str, list[Text]] | None = None,
    ) -> Corpus:
        """Freeze accumulated texts and groups into a Corpus."""
        return cls(description=description, texts=texts, groups=groups or {})

    def __len__(self) -> int:
        return len(self.texts)

    def __iter__(self) -> Iterator[Text]:
        return iter(self.texts)

    def get(self, name: str) -> Text | None:
        """Return the first text with the given name, or None."""
        for text in self.texts:
            if text.name == name:
                return text
        return None

    def group_names(self) -> list[str]:
        """Group keys in natural sort order (``C2`` before ``C10``)."""
        from natsort import natsorted

        return natsorted(self.groups)
