"""Event-driven document parser for XML-backed corpora.

XML corpora pack many documents into one file (chat posts, encyclopedia
pages, news items). This module turns the open-tag / text / close-tag events
of lxml's feed parser into completed documents without building a tree.

The parse state is one explicit ``ParseSession`` value. It is owned by a
single parse and passed into each handler (``on_open_tag``, ``on_text``,
``on_close_tag``, ``on_end_of_input``); nothing is kept in module or parser
globals. A ``DocumentSchema`` declares the handful of tags a format cares
about; every other tag passes through untouched at any depth.

Example:
    >>> schema = DocumentSchema(
    ...     document_tag="Post",
    ...     document_attrs={"class": "class", "user": "user"},
    ...     token_tag="t",
    ... )
    >>> with open("session.xml", "rb") as stream:
    ...     for document in iter_documents(stream, schema, source="session.xml"):
    ...         print(document.metadata["user"], [t.word for t in document.tokens])
"""

from __future__ import annotations

import logging
from collections import deque
from dataclasses import dataclass, field
from enum import Enum
from typing import IO, Any, Iterator, Mapping

from lxml import etree

from nlpcorpora.core.errors import ParseError
from nlpcorpora.core.models import Token

logger = logging.getLogger(__name__)

__all__ = [
    "DocumentSchema",
    "ParsedDocument",
    "ParseSession",
    "SessionState",
    "on_open_tag",
    "on_text",
    "on_close_tag",
    "on_end_of_input",
    "parse_documents",
    "iter_documents",
]

DEFAULT_CHUNK_SIZE = 64 * 1024


@dataclass(frozen=True)
class DocumentSchema:
    """The tags a format's documents are made of.

    Attributes:
        document_tag: Element that opens and closes one document.
        document_attrs: Attribute of the document element -> metadata key.
        token_tag: Element carrying one token in its attributes, if any.
        token_word_attr: Token attribute holding the word.
        token_tag_attr: Token attribute holding the category tag.
        text_fields: Elements whose text content is captured verbatim.
        attr_lists: Element -> (attribute, metadata key); the attribute of
            every such element inside a document is collected into a list.
    """

    document_tag: str
    document_attrs: Mapping[str, str] = field(default_factory=dict)
    token_tag: str | None = None
    token_word_attr: str = "word"
    token_tag_attr: str = "pos"
    text_fields: frozenset[str] = frozenset()
    attr_lists: Mapping[str, tuple[str, str]] = field(default_factory=dict)


@dataclass
class ParsedDocument:
    """A completed document.

    ``fields`` maps each text-field tag to its captured occurrences, in
    order; each occurrence is the concatenation of all its text chunks.
    """

    metadata: dict[str, Any] = field(default_factory=dict)
    fields: dict[str, list[str]] = field(default_factory=dict)
    tokens: list[Token] = field(default_factory=list)

    def field_text(self, name: str, separator: str = "\n") -> str | None:
        """Join the occurrences of a field, or None if it never occurred."""
        occurrences = self.fields.get(name)
        if not occurrences:
            return None
        return separator.join(occurrences)


class SessionState(Enum):
    """Where the parser is relative to the tracked tags."""

    IDLE = "idle"
    IN_DOCUMENT = "in_document"
    IN_FIELD = "in_field"


@dataclass
class ParseSession:
    """Mutable state of one parse. Never share between parses."""

    schema: DocumentSchema
    source: str = "<stream>"
    state: SessionState = SessionState.IDLE
    current: ParsedDocument | None = None
    field_name: str | None = None
    field_chunks: list[str] = field(default_factory=list)
    field_depth: int = 0
    completed: deque[ParsedDocument] = field(default_factory=deque)


def _local_name(tag: Any) -> str:
    # Comments and processing instructions arrive with non-string tags
    if not isinstance(tag, str):
        return ""
    if tag.startswith("{"):
        return tag.rsplit("}", 1)[1]
    return tag


def on_open_tag(session: ParseSession, name: str, attrs: Mapping[str, str]) -> None:
    """Handle an element start."""
    schema = session.schema

    if session.state is SessionState.IDLE:
        if name == schema.document_tag:
            metadata = {
                key: attrs[attr]
                for attr, key in schema.document_attrs.items()
                if attr in attrs
            }
            session.current = ParsedDocument(metadata=metadata)
            session.state = SessionState.IN_DOCUMENT
        return

    document = session.current
    if name == schema.token_tag:
        word = attrs.get(schema.token_word_attr)
        if word is not None:
            document.tokens.append(Token(word=word, tag=attrs.get(schema.token_tag_attr)))
    if name in schema.attr_lists:
        attr, key = schema.attr_lists[name]
        if attr in attrs:
            document.metadata.setdefault(key, []).append(attrs[attr])
    if session.state is SessionState.IN_DOCUMENT and name in schema.text_fields:
        session.field_name = name
        session.field_chunks = []
        session.field_depth = 0
        session.state = SessionState.IN_FIELD
    elif session.state is SessionState.IN_FIELD and name == session.field_name:
        # Same-named element inside the field; its text belongs to the field
        session.field_depth += 1


def on_text(session: ParseSession, chunk: str) -> None:
    """Handle character data. Chunks of one field are concatenated in order."""
    if session.state is SessionState.IN_FIELD:
        session.field_chunks.append(chunk)


def on_close_tag(session: ParseSession, name: str) -> None:
    """Handle an element end."""
    if session.state is SessionState.IN_FIELD and name == session.field_name:
        if session.field_depth:
            session.field_depth -= 1
            return
        session.current.fields.setdefault(name, []).append("".join(session.field_chunks))
        session.field_name = None
        session.field_chunks = []
        session.state = SessionState.IN_DOCUMENT
    elif session.state is SessionState.IN_DOCUMENT and name == session.schema.document_tag:
        session.completed.append(session.current)
        session.current = None
        session.state = SessionState.IDLE


def on_end_of_input(session: ParseSession) -> list[ParsedDocument]:
    """Flush and return every completed document not yet taken, in order.

    Raises:
        ParseError: If input ended inside a document.
    """
    if session.state is not SessionState.IDLE:
        raise ParseError(
            f"input ended inside <{session.schema.document_tag}>", session.source
        )
    documents = list(session.completed)
    session.completed.clear()
    return documents


class _SessionTarget:
    """lxml parser target forwarding events to the session handlers."""

    def __init__(self, session: ParseSession):
        self.session = session

    def start(self, tag, attrib):
        on_open_tag(self.session, _local_name(tag), attrib)

    def end(self, tag):
        on_close_tag(self.session, _local_name(tag))

    def data(self, data):
        on_text(self.session, data)

    def close(self):
        # Also called by lxml on a fatal error inside feed(); the end-of-input
        # check runs only after a clean parser.close()
        return None


def _make_parser(session: ParseSession) -> etree.XMLParser:
    return etree.XMLParser(
        target=_SessionTarget(session),
        huge_tree=True,
        resolve_entities=False,
        no_network=True,
    )


def _parse_error(exc: etree.XMLSyntaxError, source: str) -> ParseError:
    line, column = exc.position if exc.position else (None, None)
    return ParseError(exc.msg or str(exc), source=source, line=line, column=column)


def parse_documents(
    stream: IO[bytes],
    schema: DocumentSchema,
    source: str = "<stream>",
    chunk_size: int = DEFAULT_CHUNK_SIZE,
) -> list[ParsedDocument]:
    """Parse a whole stream and return its documents in document order.

    Raises:
        ParseError: On malformed markup, with the line and column reported
            by the parser.
    """
    session = ParseSession(schema=schema, source=source)
    parser = _make_parser(session)
    try:
        while chunk := stream.read(chunk_size):
            parser.feed(chunk)
        parser.close()
    except etree.XMLSyntaxError as exc:
        raise _parse_error(exc, source) from exc
    return on_end_of_input(session)


def iter_documents(
    stream: IO[bytes],
    schema: DocumentSchema,
    source: str = "<stream>",
    chunk_size: int = DEFAULT_CHUNK_SIZE,
) -> Iterator[ParsedDocument]:
    """Yield documents as each one's closing tag is parsed.

    At most one chunk of input is buffered ahead of the documents yielded,
    so arbitrarily large files are processed in bounded memory.

    Raises:
        ParseError: On malformed markup. Documents completed before the
            error have already been yielded; the one in progress is dropped.
    """
    session = ParseSession(schema=schema, source=source)
    parser = _make_parser(session)
    try:
        while chunk := stream.read(chunk_size):
            parser.feed(chunk)
            while session.completed:
                yield session.completed.popleft()
        parser.close()
    except (etree.XMLSyntaxError, ParseError) as exc:
        # Documents closed earlier in the failing chunk are still delivered
        while session.completed:
            yield session.completed.popleft()
        if isinstance(exc, ParseError):
            raise
        raise _parse_error(exc, source) from exc
    yield from on_end_of_input(session)
