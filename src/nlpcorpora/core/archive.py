"""Reading zip archives stored as entries of other zip archives.

Some corpora (Reuters RCV1) ship as an archive of archives. ``NestedZipFile``
loads one member of an open outer archive into memory and parses its
central directory directly, so the inner entries can be listed and read
without extracting anything to disk.

The entry descriptors are ``zipfile.ZipInfo`` objects, the same type an
ordinary ``zipfile.ZipFile`` exposes, so code that walks entries does not
care how deeply an archive is nested.

Example:
    >>> with zipfile.ZipFile("rcv1.zip") as outer:
    ...     with NestedZipFile(outer, "19960820.zip") as inner:
    ...         for name, info in inner.iter_entries():
    ...             data = inner.read(name)
"""

from __future__ import annotations

import bz2
import io
import logging
import struct
import zipfile
import zlib
from typing import IO, Iterator

from nlpcorpora.core.errors import FormatError

logger = logging.getLogger(__name__)

__all__ = ["NestedZipFile", "read_central_directory"]

# End of central directory record
EOCD_SIGNATURE = b"PK\x05\x06"
_EOCD = struct.Struct("<4s4H2LH")

# Central directory file header
CENTRAL_SIGNATURE = b"PK\x01\x02"
_CENTRAL = struct.Struct("<4s4B4HL2L5H2L")

# Local file header
LOCAL_SIGNATURE = b"PK\x03\x04"
_LOCAL = struct.Struct("<4s2B4HL2L2H")

# The trailer may be followed by a comment of at most 64 KiB
_MAX_COMMENT = 0xFFFF

_FLAG_ENCRYPTED = 0x1
_FLAG_UTF8 = 0x800


def _dos_datetime(date: int, time: int) -> tuple[int, int, int, int, int, int]:
    return (
        (date >> 9) + 1980,
        max((date >> 5) & 0xF, 1),
        max(date & 0x1F, 1),
        time >> 11,
        (time >> 5) & 0x3F,
        (time & 0x1F) * 2,
    )


def _find_trailer(buffer: bytes | memoryview, source: str) -> int:
    """Scan backward from the end of the buffer for the EOCD signature."""
    data = bytes(buffer[-(_EOCD.size + _MAX_COMMENT):])
    position = data.rfind(EOCD_SIGNATURE)
    if position < 0:
        raise FormatError("no embedded directory trailer", source)
    offset = len(buffer) - len(data) + position
    if len(buffer) - offset < _EOCD.size:
        raise FormatError("truncated directory trailer", source)
    return offset


def read_central_directory(
    buffer: bytes | memoryview,
    source: str = "<buffer>",
) -> dict[str, zipfile.ZipInfo]:
    """Parse the central directory of an in-memory zip archive.

    Args:
        buffer: Complete archive content.
        source: Name used in error messages.

    Returns:
        Mapping of entry name to descriptor, in central-directory order.

    Raises:
        FormatError: If the trailer is missing or the directory does not
            hold the number of headers the trailer announces.
    """
    trailer = _find_trailer(buffer, source)
    (
        _signature,
        _disk,
        _directory_disk,
        _disk_entries,
        total_entries,
        directory_size,
        directory_offset,
        _comment_length,
    ) = _EOCD.unpack_from(buffer, trailer)

    if total_entries == 0xFFFF or directory_offset == 0xFFFFFFFF:
        raise FormatError("zip64 archives cannot be nested", source)
    if directory_offset + directory_size > trailer:
        raise FormatError(
            f"central directory at {directory_offset} overruns the trailer at {trailer}",
            source,
        )

    entries: dict[str, zipfile.ZipInfo] = {}
    position = directory_offset
    for index in range(total_entries):
        if position + _CENTRAL.size > trailer:
            raise FormatError(
                f"expected {total_entries} entry headers, found {index}", source
            )
        header = _CENTRAL.unpack_from(buffer, position)
        if header[0] != CENTRAL_SIGNATURE:
            raise FormatError(
                f"expected {total_entries} entry headers, found {index} "
                f"(bad signature at offset {position})",
                source,
            )
        (
            _signature,
            create_version,
            create_system,
            extract_version,
            _reserved,
            flag_bits,
            compress_type,
            time,
            date,
            crc,
            compress_size,
            file_size,
            name_length,
            extra_length,
            comment_length,
            _disk_start,
            internal_attr,
            external_attr,
            header_offset,
        ) = header
        position += _CENTRAL.size
        raw_name = bytes(buffer[position:position + name_length])
        position += name_length + extra_length + comment_length

        filename = raw_name.decode("utf-8" if flag_bits & _FLAG_UTF8 else "cp437")
        info = zipfile.ZipInfo(filename, _dos_datetime(date, time))
        info.create_version = create_version
        info.create_system = create_system
        info.extract_version = extract_version
        info.flag_bits = flag_bits
        info.compress_type = compress_type
        info.CRC = crc
        info.compress_size = compress_size
        info.file_size = file_size
        info.internal_attr = internal_attr
        info.external_attr = external_attr
        info.header_offset = header_offset
        entries[info.filename] = info

    return entries


class NestedZipFile:
    """A zip archive read from a member of another archive.

    The member is decompressed into memory once (bounded by its
    uncompressed size); entries are then decoded on demand.

    Args:
        outer: Open outer archive.
        member: Name or descriptor of the member holding the inner archive.
        name: Name used for this archive in errors and entry paths.
            Defaults to the member name.
    """

    def __init__(
        self,
        outer: zipfile.ZipFile,
        member: str | zipfile.ZipInfo,
        name: str | None = None,
    ):
        if name is None:
            name = member.filename if isinstance(member, zipfile.ZipInfo) else member
        with outer.open(member) as handle:
            buffer = handle.read()
        self._init(buffer, name)

    @classmethod
    def from_bytes(cls, buffer: bytes, name: str = "<buffer>") -> NestedZipFile:
        """Wrap an archive already held in memory."""
        archive = cls.__new__(cls)
        archive._init(buffer, name)
        return archive

    def _init(self, buffer: bytes, name: str) -> None:
        self.name = name
        self._buffer: memoryview | None = memoryview(buffer)
        self._entries = read_central_directory(self._buffer, name)
        logger.debug("Nested archive %s holds %d entries", name, len(self._entries))

    def __repr__(self) -> str:
        return f"NestedZipFile({self.name!r}, entries={len(self._entries)})"

    def __enter__(self) -> NestedZipFile:
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()

    def close(self) -> None:
        """Release the in-memory buffer."""
        self._buffer = None

    def namelist(self) -> list[str]:
        """Return entry names in central-directory order."""
        return list(self._entries)

    def infolist(self) -> list[zipfile.ZipInfo]:
        """Return entry descriptors in central-directory order."""
        return list(self._entries.values())

    def getinfo(self, name: str) -> zipfile.ZipInfo:
        """Return the descriptor for ``name``.

        Raises:
            KeyError: If there is no such entry.
        """
        try:
            return self._entries[name]
        except KeyError:
            raise KeyError(f"There is no item named {name!r} in {self.name}") from None

    def iter_entries(self) -> Iterator[tuple[str, zipfile.ZipInfo]]:
        """Yield ``(name, descriptor)`` pairs, skipping directory markers."""
        for name, info in self._entries.items():
            if name.endswith("/"):
                continue
            yield name, info

    def _inner_name(self, info: zipfile.ZipInfo) -> str:
        return f"{self.name}/{info.filename}"

    def _compressed_bytes(self, info: zipfile.ZipInfo) -> memoryview:
        if self._buffer is None:
            raise ValueError(f"Attempt to read from closed archive {self.name}")
        buffer = self._buffer
        offset = info.header_offset
        if offset + _LOCAL.size > len(buffer):
            raise FormatError("local header out of range", self._inner_name(info))
        header = _LOCAL.unpack_from(buffer, offset)
        if header[0] != LOCAL_SIGNATURE:
            raise FormatError("bad local header signature", self._inner_name(info))
        name_length, extra_length = header[-2], header[-1]
        start = offset + _LOCAL.size + name_length + extra_length
        end = start + info.compress_size
        if end > len(buffer):
            raise FormatError("entry data runs past end of archive", self._inner_name(info))
        return buffer[start:end]

    def read(self, name: str | zipfile.ZipInfo) -> bytes:
        """Return the decompressed content of an entry.

        Raises:
            FormatError: On unsupported compression, encryption, corrupt
                data or a CRC mismatch.
        """
        info = name if isinstance(name, zipfile.ZipInfo) else self.getinfo(name)
        source = self._inner_name(info)
        if info.flag_bits & _FLAG_ENCRYPTED:
            raise FormatError("encrypted entries are not supported", source)

        compressed = self._compressed_bytes(info)
        try:
            if info.compress_type == zipfile.ZIP_STORED:
                data = bytes(compressed)
            elif info.compress_type == zipfile.ZIP_DEFLATED:
                data = zlib.decompress(compressed, -zlib.MAX_WBITS)
            elif info.compress_type == zipfile.ZIP_BZIP2:
                data = bz2.decompress(compressed)
            else:
                raise FormatError(
                    f"unsupported compression method {info.compress_type}", source
                )
        except (zlib.error, OSError, ValueError) as exc:
            raise FormatError(f"corrupt entry data: {exc}", source) from exc

        if zlib.crc32(data) != info.CRC:
            raise FormatError("CRC mismatch", source)
        return data

    def open(
        self,
        name: str | zipfile.ZipInfo,
        mode: str = "rb",
        encoding: str = "utf-8",
    ) -> IO:
        """Open an entry as a stream.

        Args:
            name: Entry name or descriptor.
            mode: "rb" for undecoded bytes (feed directly to a byte-level
                decoder such as an XML parser), "r" for decoded text.
            encoding: Text encoding for mode "r".
        """
        if mode not in ("r", "rb"):
            raise ValueError(f"open() requires mode 'r' or 'rb', not {mode!r}")
        stream = io.BytesIO(self.read(name))
        if mode == "r":
            return io.TextIOWrapper(stream, encoding=encoding)
        return stream
