"""Reuters newswire corpus reader.

Reuters Corpus Volume 1 ships as an archive of archives: one zip per day
(``19960820.zip``), each holding one NewsML file per story, often all
packed into a further zip. This reader walks the outer archives and reads
the daily archives in place with ``NestedZipFile``.
"""

from __future__ import annotations

import io
import logging
import zipfile
from pathlib import Path
from typing import Iterable, Iterator

from nlpcorpora.core.archive import NestedZipFile
from nlpcorpora.core.entries import Entry, iter_path_entries, match_name, walk_files
from nlpcorpora.core.errors import FormatError
from nlpcorpora.core.locate import CorpusLocationMixin
from nlpcorpora.core.models import NewsFields, ReadResult, Text
from nlpcorpora.core.registry import register_format
from nlpcorpora.core.stream import DEFAULT_CHUNK_SIZE, DocumentSchema, ParsedDocument
from nlpcorpora.nlp.pipeline import tokenize
from nlpcorpora.readers.xmlreader import XMLReader

logger = logging.getLogger(__name__)


@register_format("reuters")
class ReutersReader(CorpusLocationMixin, XMLReader):
    """Reader for RCV1 NewsML stories.

    Accepts an outer zip of daily zips, a directory of zips (outer or
    daily), a single daily zip, or a directory of NewsML files. Each story
    becomes one text named by its path through the archives, with the
    paragraphs of ``<text>`` as raw text, headline/byline/dateline and
    metadata codes in ``NewsFields``. Texts are grouped by code (topics,
    countries, industries).

    A malformed daily archive, or a corrupt story inside one, aborts the
    traversal unless ``skip_malformed=True``, in which case it is logged
    and skipped.

    If no path is given, looks for the corpus in:
    1. The path specified by REUTERS_ROOT environment variable
    2. ~/nlp_data/rcv1

    Example:
        >>> corpus = read_corpus("reuters", "/data/rcv1.zip")
        >>> corpus.groups["C15"][0].extra.headline
    """

    ENV_VAR = "REUTERS_ROOT"
    DEFAULT_SUBDIR = "rcv1"
    _FILE_CHECK_PATTERN = "**/*.zip"

    SCHEMA = DocumentSchema(
        document_tag="newsitem",
        document_attrs={"itemid": "itemid", "date": "date"},
        text_fields=frozenset({"headline", "byline", "dateline", "p"}),
        attr_lists={"code": ("code", "codes")},
    )

    def __init__(
        self,
        file_pattern: str | None = None,
        encoding: str = "utf-8",
        chunk_size: int = DEFAULT_CHUNK_SIZE,
        lang: str = "en",
        skip_malformed: bool = False,
    ):
        """Initialize the Reuters reader.

        Args:
            file_pattern: Glob pattern for story files inside the archives.
            encoding: See XMLReader.
            chunk_size: Bytes fed to the XML parser at a time.
            lang: Language code of the tokenizer.
            skip_malformed: If True, skip daily archives and stories in them
                that cannot be decoded (bad directory, CRC mismatch, corrupt
                data) instead of aborting. Stories in daily archives are then
                decompressed while enumerating.
        """
        super().__init__(file_pattern=file_pattern, encoding=encoding, chunk_size=chunk_size)
        self._lang = lang
        self._skip_malformed = skip_malformed

    # -------------------------------------------------------------------------
    # Entry enumeration
    # -------------------------------------------------------------------------

    def enumerate_entries(self, path: str | Path) -> Iterator[Entry]:
        """Yield story entries, descending into nested daily archives."""
        path = Path(path)
        if path.is_dir():
            archives = list(walk_files(path, "**/*.zip"))
            if not archives:
                yield from iter_path_entries(path, self._file_pattern)
            for archive_path in archives:
                prefix = archive_path.relative_to(path).as_posix() + "/"
                yield from self._archive_entries(archive_path, prefix)
        elif path.is_file() and zipfile.is_zipfile(path):
            yield from self._archive_entries(path, "")
        else:
            yield from iter_path_entries(path, self._file_pattern)

    def _archive_entries(self, archive_path: Path, prefix: str) -> Iterator[Entry]:
        logger.debug("Enumerating archive %s", archive_path)
        with zipfile.ZipFile(archive_path) as outer:
            for info in outer.infolist():
                if info.is_dir():
                    continue
                name = prefix + info.filename
                if info.filename.lower().endswith(".zip"):
                    yield from self._nested_entries(outer, info, name)
                elif match_name(info.filename, self._file_pattern):
                    yield Entry(name=name, opener=lambda info=info: outer.open(info))

    def _nested_entries(
        self, outer: zipfile.ZipFile, info: zipfile.ZipInfo, name: str
    ) -> Iterator[Entry]:
        try:
            inner = NestedZipFile(outer, info, name=name)
        except FormatError as exc:
            if not self._skip_malformed:
                raise
            logger.warning("Skipping malformed archive %s: %s", name, exc)
            return

        with inner:
            for member, member_info in inner.iter_entries():
                if not match_name(member, self._file_pattern):
                    continue
                entry_name = f"{name}/{member}"
                if not self._skip_malformed:
                    yield Entry(
                        name=entry_name,
                        opener=lambda member_info=member_info: inner.open(member_info),
                    )
                    continue
                # Decoded here; corrupt members never reach the driver
                try:
                    data = inner.read(member_info)
                except FormatError as exc:
                    logger.warning("Skipping malformed entry %s: %s", entry_name, exc)
                    continue
                yield Entry(name=entry_name, opener=lambda data=data: io.BytesIO(data))

    # -------------------------------------------------------------------------
    # Story parsing
    # -------------------------------------------------------------------------

    def _field(self, document: ParsedDocument, name: str) -> str | None:
        value = document.field_text(name, separator=" ")
        if value is None:
            return None
        return " ".join(value.split()) or None

    def _to_result(self, document: ParsedDocument, name: str, index: int) -> ReadResult:
        paragraphs = document.fields.get("p", [])
        raw = "\n".join(paragraphs)
        clean = "\n".join(
            " ".join(self._normalize_text(paragraph).split())
            for paragraph in paragraphs
            if paragraph.strip()
        )
        return ReadResult(
            raw=raw,
            clean=clean,
            tokens=tokenize(clean, self._lang),
            extra=NewsFields(
                headline=self._field(document, "headline"),
                byline=self._field(document, "byline"),
                dateline=self._field(document, "dateline"),
                codes=tuple(document.metadata.get("codes", ())),
            ),
            name=name if index == 0 else f"{name}#{index}",
        )

    def group_keys(self, text: Text) -> Iterable[str]:
        """Group by metadata code."""
        if isinstance(text.extra, NewsFields):
            return text.extra.codes
        return ()
