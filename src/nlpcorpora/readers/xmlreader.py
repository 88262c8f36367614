"""XML corpus readers.

Readers for tag-annotated XML files holding many documents each:
- XMLReader: Base reader driving the streaming document parser
- ChatReader: NPS Chat corpus sessions (one text per post)
- WikipediaReader: MediaWiki XML dumps (one text per page)
"""

from __future__ import annotations

from typing import IO, Iterable, Iterator

from nlpcorpora.core.base import BaseCorpusReader
from nlpcorpora.core.locate import CorpusLocationMixin
from nlpcorpora.core.models import ChatFields, PageFields, ReadResult, Text
from nlpcorpora.core.registry import register_format
from nlpcorpora.core.stream import (
    DEFAULT_CHUNK_SIZE,
    DocumentSchema,
    ParsedDocument,
    iter_documents,
)


class XMLReader(BaseCorpusReader):
    """Base reader for XML files of repeated document elements.

    Subclasses set ``SCHEMA`` and implement ``_to_result``. Documents are
    emitted as their closing tag is parsed, so a file is never held in
    memory as a whole.
    """

    SCHEMA: DocumentSchema

    @classmethod
    def _default_file_pattern(cls) -> str:
        """Default to .xml files."""
        return "**/*.xml"

    def __init__(
        self,
        file_pattern: str | None = None,
        encoding: str = "utf-8",
        chunk_size: int = DEFAULT_CHUNK_SIZE,
    ):
        """Initialize the XML reader.

        Args:
            file_pattern: Glob pattern for selecting files.
            encoding: Unused for decoding (XML declares its own encoding);
                kept for a uniform reader signature.
            chunk_size: Bytes fed to the XML parser at a time.
        """
        super().__init__(file_pattern=file_pattern, encoding=encoding)
        self._chunk_size = chunk_size

    def _to_result(self, document: ParsedDocument, name: str, index: int) -> ReadResult | None:
        """Convert a parsed document. Return None to drop it."""
        raise NotImplementedError

    def read_corpus_file(
        self, source: IO[bytes], name: str = "<stream>"
    ) -> Iterator[ReadResult]:
        """Yield one result per document element, in document order.

        Raises:
            ParseError: On malformed markup.
        """
        documents = iter_documents(source, self.SCHEMA, source=name, chunk_size=self._chunk_size)
        for index, document in enumerate(documents):
            result = self._to_result(document, name, index)
            if result is not None:
                yield result


@register_format("nps-chat")
class ChatReader(CorpusLocationMixin, XMLReader):
    """Reader for the NPS Chat corpus.

    Each ``<Post class=".." user="..">`` element becomes one text named
    ``<file>#<n>``, with tokens from its ``<t pos=".." word=".."/>``
    terminals. Chat posts carry no raw text. Texts are grouped by post class.

    If no path is given, looks for the corpus in:
    1. The path specified by NPS_CHAT_ROOT environment variable
    2. ~/nlp_data/nps_chat
    """

    ENV_VAR = "NPS_CHAT_ROOT"
    DEFAULT_SUBDIR = "nps_chat"
    _FILE_CHECK_PATTERN = "**/*.xml"

    SCHEMA = DocumentSchema(
        document_tag="Post",
        document_attrs={"class": "class", "user": "user"},
        token_tag="t",
        token_word_attr="word",
        token_tag_attr="pos",
    )

    def _to_result(self, document: ParsedDocument, name: str, index: int) -> ReadResult:
        return ReadResult(
            tokens=document.tokens,
            extra=ChatFields(
                class_=document.metadata.get("class"),
                user=document.metadata.get("user"),
            ),
            name=f"{name}#{index}",
        )

    def group_keys(self, text: Text) -> Iterable[str]:
        """Group by post class."""
        if isinstance(text.extra, ChatFields) and text.extra.class_:
            return (text.extra.class_,)
        return ()


@register_format("wikipedia")
class WikipediaReader(XMLReader):
    """Reader for MediaWiki XML dumps (``.xml`` or ``.xml.bz2``).

    Each ``<page>`` becomes one text named by its title, with the page's
    wiki markup as raw text. Markup is not converted to plain text, so
    clean text and tokens are left empty.

    Example:
        >>> def show(text):
        ...     print(text.name, len(text.raw))
        >>> map_corpus("wikipedia", "enwiki-pages-articles.xml.bz2", show)
    """

    SCHEMA = DocumentSchema(
        document_tag="page",
        text_fields=frozenset({"title", "id", "text"}),
        attr_lists={"redirect": ("title", "redirect")},
    )

    @classmethod
    def _default_file_pattern(cls) -> str:
        """Match both plain and bzip2-compressed dumps."""
        return "**/*.xml*"

    def __init__(
        self,
        file_pattern: str | None = None,
        encoding: str = "utf-8",
        chunk_size: int = DEFAULT_CHUNK_SIZE,
        skip_redirects: bool = False,
    ):
        """Initialize the Wikipedia reader.

        Args:
            file_pattern: Glob pattern for selecting dump files.
            encoding: See XMLReader.
            chunk_size: Bytes fed to the XML parser at a time.
            skip_redirects: If True, drop pages that only redirect.
        """
        super().__init__(file_pattern=file_pattern, encoding=encoding, chunk_size=chunk_size)
        self._skip_redirects = skip_redirects

    def _to_result(self, document: ParsedDocument, name: str, index: int) -> ReadResult | None:
        if self._skip_redirects and document.metadata.get("redirect"):
            return None

        title = document.field_text("title")
        page_ids = document.fields.get("id")
        # The page id comes first; revision and contributor ids follow it
        page_id = page_ids[0].strip() if page_ids else None

        return ReadResult(
            raw=document.field_text("text") or "",
            extra=PageFields(title=title, page_id=page_id),
            name=title or f"{name}#{index}",
        )
