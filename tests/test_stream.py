"""Tests for the event-driven XML document parser."""

import io

import pytest
from lxml import etree

from nlpcorpora.core.errors import ParseError
from nlpcorpora.core.models import Token
from nlpcorpora.core.stream import (
    DocumentSchema,
    ParseSession,
    SessionState,
    iter_documents,
    on_close_tag,
    on_end_of_input,
    on_open_tag,
    on_text,
    parse_documents,
)


PAGE_SCHEMA = DocumentSchema(
    document_tag="page",
    text_fields=frozenset({"title", "text"}),
    attr_lists={"redirect": ("title", "redirect")},
)

POST_SCHEMA = DocumentSchema(
    document_tag="Post",
    document_attrs={"class": "class", "user": "user"},
    token_tag="t",
)


def _posts(count: int) -> bytes:
    posts = "".join(
        f'<Post class="Statement" user="U{i}"><t pos="NN" word="w{i}"/></Post>'
        for i in range(count)
    )
    return f"<Session><Posts>{posts}</Posts></Session>".encode("utf-8")


class TestSessionHandlers:
    """Tests driving the handlers directly with events."""

    @pytest.fixture
    def session(self):
        return ParseSession(schema=PAGE_SCHEMA, source="dump.xml")

    def test_field_chunks_concatenate(self, session):
        """Text split across two events is captured as one value."""
        on_open_tag(session, "page", {})
        on_open_tag(session, "text", {})
        on_text(session, "ab")
        on_text(session, "cd")
        on_close_tag(session, "text")
        on_close_tag(session, "page")

        documents = on_end_of_input(session)
        assert len(documents) == 1
        assert documents[0].fields["text"] == ["abcd"]

    def test_state_transitions(self, session):
        """The session moves between idle, document and field states."""
        assert session.state is SessionState.IDLE
        on_open_tag(session, "page", {})
        assert session.state is SessionState.IN_DOCUMENT
        on_open_tag(session, "title", {})
        assert session.state is SessionState.IN_FIELD
        on_close_tag(session, "title")
        assert session.state is SessionState.IN_DOCUMENT
        on_close_tag(session, "page")
        assert session.state is SessionState.IDLE

    def test_text_outside_documents_ignored(self, session):
        """Character data outside any tracked field is dropped."""
        on_text(session, "preamble")
        on_open_tag(session, "page", {})
        on_text(session, "between fields")
        on_close_tag(session, "page")
        documents = on_end_of_input(session)
        assert documents[0].fields == {}

    def test_end_inside_document_raises(self, session):
        """Input ending inside a document is a parse error."""
        on_open_tag(session, "page", {})
        with pytest.raises(ParseError, match="dump.xml"):
            on_end_of_input(session)

    def test_end_of_input_drains_completed(self, session):
        """Completed documents are returned once."""
        on_open_tag(session, "page", {})
        on_close_tag(session, "page")
        assert len(on_end_of_input(session)) == 1
        assert on_end_of_input(session) == []


class TestParseDocuments:
    """Tests for parsing byte streams with lxml."""

    def test_documents_in_order(self):
        """Documents are returned in document order with their tokens."""
        documents = parse_documents(io.BytesIO(_posts(3)), POST_SCHEMA)
        assert [d.metadata["user"] for d in documents] == ["U0", "U1", "U2"]
        assert documents[1].tokens == [Token("w1", "NN")]

    def test_irrelevant_tags_ignored_at_any_depth(self):
        """Untracked elements pass through, inside and outside documents."""
        data = (
            b"<root><wrapper><junk>x</junk>"
            b"<page><meta><deep><deeper>y</deeper></deep></meta>"
            b"<title>Kept</title><other>z</other></page>"
            b"</wrapper></root>"
        )
        (document,) = parse_documents(io.BytesIO(data), PAGE_SCHEMA)
        assert document.fields == {"title": ["Kept"]}

    def test_attribute_lists(self):
        """Attributes of repeated elements are collected into metadata."""
        data = b'<root><page><redirect title="A"/><redirect title="B"/></page></root>'
        (document,) = parse_documents(io.BytesIO(data), PAGE_SCHEMA)
        assert document.metadata["redirect"] == ["A", "B"]

    def test_namespaces_stripped(self):
        """Namespaced elements match the schema by local name."""
        data = b'<mediawiki xmlns="http://example.org/ns"><page><title>T</title></page></mediawiki>'
        (document,) = parse_documents(io.BytesIO(data), PAGE_SCHEMA)
        assert document.field_text("title") == "T"

    def test_result_independent_of_chunk_size(self):
        """Feeding one byte at a time gives the same documents."""
        data = "<root><page><title>Café society</title><text>one\ntwo &amp; three</text></page></root>".encode("utf-8")
        whole = parse_documents(io.BytesIO(data), PAGE_SCHEMA)
        bytewise = parse_documents(io.BytesIO(data), PAGE_SCHEMA, chunk_size=1)
        assert bytewise == whole
        assert whole[0].field_text("text") == "one\ntwo & three"
        assert whole[0].field_text("title") == "Café society"

    def test_declared_encoding(self):
        """The encoding declared by the document is honored."""
        data = '<?xml version="1.0" encoding="iso-8859-1"?><root><page><title>né</title></page></root>'.encode("iso-8859-1")
        (document,) = parse_documents(io.BytesIO(data), PAGE_SCHEMA)
        assert document.field_text("title") == "né"

    def test_malformed_markup_raises(self):
        """Mismatched tags raise ParseError with the source name."""
        data = b'<Session><Post class="A"><t word="x"></Post></Session>'
        with pytest.raises(ParseError) as info:
            parse_documents(io.BytesIO(data), POST_SCHEMA, source="bad.xml")
        assert info.value.source == "bad.xml"
        assert info.value.line == 1

    def test_malformed_markup_keeps_parser_location(self):
        """The syntax error is reported, not an end-of-input error."""
        data = b'<Session>\n<Post class="A">\n<t word="x"></Post>\n</Session>'
        with pytest.raises(ParseError) as info:
            parse_documents(io.BytesIO(data), POST_SCHEMA, source="bad.xml")
        assert "input ended" not in str(info.value)
        assert info.value.line == 3
        assert info.value.column is not None
        assert isinstance(info.value.__cause__, etree.XMLSyntaxError)

    def test_nested_same_name_field(self):
        """A field element nested in itself is captured whole."""
        data = b"<root><page><text>a<text>b</text>c</text><title>T</title></page></root>"
        (document,) = parse_documents(io.BytesIO(data), PAGE_SCHEMA)
        assert document.fields["text"] == ["abc"]
        assert document.field_text("title") == "T"

    def test_truncated_input_raises(self):
        """Input ending inside an element raises ParseError."""
        with pytest.raises(ParseError):
            parse_documents(io.BytesIO(b"<Session><Post>"), POST_SCHEMA)


class TestIterDocuments:
    """Tests for incremental document delivery."""

    def test_matches_parse_documents(self):
        """Incremental and whole-stream parsing agree."""
        data = _posts(20)
        assert list(iter_documents(io.BytesIO(data), POST_SCHEMA, chunk_size=7)) == parse_documents(
            io.BytesIO(data), POST_SCHEMA
        )

    def test_first_document_before_end_of_input(self):
        """The first document is delivered before the stream is consumed."""
        data = _posts(500)
        stream = io.BytesIO(data)
        documents = iter_documents(stream, POST_SCHEMA, chunk_size=256)
        first = next(documents)
        assert first.metadata["user"] == "U0"
        assert stream.tell() < len(data)

    def test_error_after_complete_documents(self):
        """Documents closed before an error are delivered; the open one is not."""
        data = (
            b'<Session><Post class="A" user="u"><t pos="UH" word="hi"/></Post>'
            b'<Post class="B" user="v"><t word="x"></Post></Session>'
        )
        delivered = []
        with pytest.raises(ParseError):
            for document in iter_documents(io.BytesIO(data), POST_SCHEMA):
                delivered.append(document)
        assert [d.metadata["class"] for d in delivered] == ["A"]

    def test_error_in_same_chunk_as_complete_documents(self):
        """Documents closed in the failing chunk still arrive before the error."""
        data = (
            b'<Session><Post class="A" user="u"><t word="hi"/></Post>'
            b'<Post class="B" user="v"><t word="x"></Post></Session>'
        )
        delivered = []
        with pytest.raises(ParseError) as info:
            for document in iter_documents(io.BytesIO(data), POST_SCHEMA, chunk_size=len(data)):
                delivered.append(document)
        assert [d.metadata["class"] for d in delivered] == ["A"]
        assert "input ended" not in str(info.value)
        assert info.value.line == 1
