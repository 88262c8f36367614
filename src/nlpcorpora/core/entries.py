"""Source entries: the units a corpus path is enumerated into.

An ``Entry`` is a name plus a callable that opens a binary stream on its
content. Entries are produced lazily, in the source's natural order
(directory listing order or physical archive order), never sorted.
"""

from __future__ import annotations

import bz2
import fnmatch
import logging
import os
import zipfile
from dataclasses import dataclass
from pathlib import Path
from typing import IO, Callable, Iterator

logger = logging.getLogger(__name__)

__all__ = ["Entry", "match_name", "walk_files", "zip_entries", "iter_path_entries"]


@dataclass(frozen=True)
class Entry:
    """A named source of one or more documents.

    Attributes:
        name: Entry identifier, relative to the enumerated path.
        opener: Zero-argument callable returning a binary stream.
    """

    name: str
    opener: Callable[[], IO[bytes]]

    def open(self) -> IO[bytes]:
        """Open the entry's content as a binary stream."""
        return self.opener()


def match_name(name: str, pattern: str | None) -> bool:
    """Glob-match a "/"-separated entry name. None matches everything."""
    if pattern is None:
        return True
    # "**/" also matches files at the top level
    if pattern.startswith("**/"):
        return fnmatch.fnmatch(name, pattern) or fnmatch.fnmatch(
            name.rsplit("/", 1)[-1], pattern[3:]
        )
    return fnmatch.fnmatch(name, pattern)


def _open_file(path: Path) -> IO[bytes]:
    if path.suffix == ".bz2":
        return bz2.open(path, "rb")
    return path.open("rb")


def walk_files(root: Path, pattern: str | None = None) -> Iterator[Path]:
    """Walk a directory tree in listing order, yielding matching files.

    Args:
        root: Directory to walk.
        pattern: Glob pattern matched against the path relative to root,
            using "/" separators. None matches every file.

    Yields:
        File paths, directories visited top-down in ``os.walk`` order.
    """
    for dirpath, _dirnames, filenames in os.walk(root):
        for filename in filenames:
            path = Path(dirpath) / filename
            relative = path.relative_to(root).as_posix()
            if match_name(relative, pattern):
                yield path


def zip_entries(
    archive: zipfile.ZipFile,
    pattern: str | None = None,
    prefix: str = "",
) -> Iterator[Entry]:
    """Yield entries of an open archive in physical order.

    Directory markers are skipped. The archive must stay open while the
    entries are consumed.
    """
    for info in archive.infolist():
        if info.is_dir() or not match_name(info.filename, pattern):
            continue
        yield Entry(
            name=f"{prefix}{info.filename}",
            opener=lambda info=info: archive.open(info),
        )


def iter_path_entries(path: str | Path, pattern: str | None = None) -> Iterator[Entry]:
    """Resolve a corpus path into entries.

    - a directory is walked and filtered by ``pattern``
    - a ``.zip`` file is opened and its members filtered by ``pattern``
    - any other file is a single entry (``.bz2`` files are decompressed)

    Raises:
        FileNotFoundError: If the path does not exist.
    """
    path = Path(path)
    if path.is_dir():
        for file_path in walk_files(path, pattern):
            yield Entry(
                name=file_path.relative_to(path).as_posix(),
                opener=lambda file_path=file_path: _open_file(file_path),
            )
    elif path.is_file() and zipfile.is_zipfile(path):
        logger.debug("Enumerating archive %s", path)
        with zipfile.ZipFile(path) as archive:
            yield from zip_entries(archive, pattern)
    elif path.is_file():
        yield Entry(name=path.name, opener=lambda: _open_file(path))
    else:
        raise FileNotFoundError(f"Corpus path does not exist: {path}")
