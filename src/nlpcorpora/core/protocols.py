"""Protocol definitions for format handlers.

A format handler is anything that can enumerate the entries of a corpus
path and read documents from one entry's stream. Use these protocols for
type hints when you want to accept any compatible handler.
"""

from pathlib import Path
from typing import IO, Iterable, Iterator, Protocol, runtime_checkable

# Forward references (avoid import cycles at module level)
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from nlpcorpora.core.entries import Entry
    from nlpcorpora.core.models import ReadResult, Text


@runtime_checkable
class FormatHandler(Protocol):
    """Capabilities every registered format must provide."""

    def enumerate_entries(self, path: Path) -> Iterator["Entry"]:
        """Yield the source entries under ``path`` in natural order."""
        ...

    def read_corpus_file(
        self, source: IO[bytes], name: str = "<stream>"
    ) -> Iterator["ReadResult"]:
        """Yield the documents read from one entry's binary stream."""
        ...


@runtime_checkable
class GroupingHandler(FormatHandler, Protocol):
    """Extended interface for handlers that wrap and group their own texts."""

    def make_text(self, name: str, result: "ReadResult") -> "Text":
        """Wrap a read result into a Text."""
        ...

    def group_keys(self, text: "Text") -> Iterable[str]:
        """Return the corpus groups a text belongs to."""
        ...
