"""Tests for the format registry."""

import io

import pytest

from nlpcorpora import (
    ConfigurationError,
    ReadResult,
    get_handler,
    read_corpus_file,
    register_format,
    registered_formats,
)
from nlpcorpora.core.base import BaseCorpusReader
from nlpcorpora.core.protocols import FormatHandler, GroupingHandler
from nlpcorpora.core.registry import unregister_format
from nlpcorpora.readers import BrownReader, ReutersReader


class LinesReader(BaseCorpusReader):
    """One document per non-blank line."""

    def __init__(self, upper=False, **kwargs):
        super().__init__(**kwargs)
        self.upper = upper

    def read_corpus_file(self, source, name="<stream>"):
        for line in self._read_text(source, name).splitlines():
            if line.strip():
                yield ReadResult(raw=line, clean=line.upper() if self.upper else line)


@pytest.fixture
def lines_format():
    register_format("lines", LinesReader)
    yield "lines"
    unregister_format("lines")


class TestRegistry:
    """Tests for registering and resolving format tags."""

    def test_builtin_formats(self):
        """Built-in formats are registered on first lookup."""
        formats = registered_formats()
        for tag in ("plaintext", "brown", "treebank", "nps-chat", "reuters", "wikipedia"):
            assert tag in formats

    def test_unknown_format(self):
        """Unknown tags raise ConfigurationError listing known formats."""
        with pytest.raises(ConfigurationError, match="no-such-format") as info:
            get_handler("no-such-format")
        assert "treebank" in str(info.value)

    def test_handler_instantiated_with_options(self):
        """Classes are instantiated with the caller's options."""
        handler = get_handler("reuters", skip_malformed=True)
        assert isinstance(handler, ReutersReader)
        assert handler._skip_malformed is True

    def test_unknown_option_rejected(self):
        """Options the handler class does not accept raise ConfigurationError."""
        with pytest.raises(ConfigurationError, match="Invalid options for format 'brown'"):
            get_handler("brown", skip_malformed=True)

    def test_fresh_instance_per_lookup(self):
        """Each lookup of a class registration builds a new handler."""
        assert get_handler("brown") is not get_handler("brown")
        assert isinstance(get_handler("brown"), BrownReader)

    def test_handlers_satisfy_protocol(self):
        """Every built-in handler implements the format protocol."""
        for tag in registered_formats():
            handler = get_handler(tag)
            assert isinstance(handler, FormatHandler)
            assert isinstance(handler, GroupingHandler)

    def test_register_custom_format(self, lines_format):
        """A registered format is usable without other changes."""
        results = read_corpus_file(lines_format, io.BytesIO(b"one\n\ntwo\n"), upper=True)
        assert [r.clean for r in results] == ["ONE", "TWO"]

    def test_register_as_decorator(self):
        """register_format works as a class decorator."""

        @register_format("decorated")
        class DecoratedReader(LinesReader):
            pass

        try:
            assert isinstance(get_handler("decorated"), DecoratedReader)
        finally:
            unregister_format("decorated")

    def test_register_instance(self):
        """An instance is returned as is and takes no options."""
        instance = LinesReader()
        register_format("lines-instance", instance)
        try:
            assert get_handler("lines-instance") is instance
            with pytest.raises(ConfigurationError, match="takes no options"):
                get_handler("lines-instance", upper=True)
        finally:
            unregister_format("lines-instance")

    def test_unregister(self, lines_format):
        """Unregistered tags are no longer known."""
        unregister_format(lines_format)
        with pytest.raises(ConfigurationError):
            get_handler(lines_format)
