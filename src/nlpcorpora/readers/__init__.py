"""Format reader implementations.

Importing this package registers every built-in format tag.
"""

from nlpcorpora.readers.plaintext import PlaintextReader, BrownReader
from nlpcorpora.readers.treebank import TreebankReader
from nlpcorpora.readers.xmlreader import XMLReader, ChatReader, WikipediaReader
from nlpcorpora.readers.reuters import ReutersReader

__all__ = [
    "PlaintextReader",
    "BrownReader",
    "TreebankReader",
    "XMLReader",
    "ChatReader",
    "WikipediaReader",
    "ReutersReader",
]
