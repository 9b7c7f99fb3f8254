"""
In-memory ZIP assembly

Entries are stored uncompressed. The builder keeps a running byte offset so
that every central directory record points at the exact position of its local
file header in the finished archive.
"""

import logging
from collections.abc import Iterable
from dataclasses import dataclass

from photodrop.archive.crc import crc32
from photodrop.archive.records import build_central_directory_header, build_end_of_central_directory, build_local_file_header

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class ArchiveEntry:
    """One file to embed in the archive."""

    name: str
    content: bytes


class ArchiveFinalizedError(RuntimeError):
    """The builder was used after ``finalize()``."""


class ZipArchiveBuilder:
    """Sequential, single-use ZIP writer.

    Call ``append`` zero or more times, then ``finalize`` exactly once.
    An instance must not be shared between concurrent archive builds.
    """

    def __init__(self) -> None:
        self._chunks: list[bytes] = []
        self._central_directory: list[bytes] = []
        self._offset = 0
        self._finalized = False

    @property
    def entry_count(self) -> int:
        return len(self._central_directory)

    @property
    def offset(self) -> int:
        """Number of bytes of local records and content written so far."""
        return self._offset

    def append(self, entry: ArchiveEntry) -> None:
        if self._finalized:
            raise ArchiveFinalizedError("Cannot append to a finalized archive")
        if not entry.name:
            raise ValueError("Archive entry name must not be empty")

        content = bytes(entry.content)
        crc = crc32(content)
        size = len(content)
        local_offset = self._offset

        local_header = build_local_file_header(entry.name, crc, size)
        self._central_directory.append(build_central_directory_header(entry.name, crc, size, local_offset))
        self._chunks.append(local_header)
        self._chunks.append(content)
        self._offset += len(local_header) + size

    def finalize(self) -> bytes:
        if self._finalized:
            raise ArchiveFinalizedError("Archive has already been finalized")
        self._finalized = True

        central_dir_offset = self._offset
        central_dir = b"".join(self._central_directory)
        trailer = build_end_of_central_directory(self.entry_count, len(central_dir), central_dir_offset)
        archive = b"".join([*self._chunks, central_dir, trailer])

        logger.debug(f"Finalized archive: entries={self.entry_count}, size={len(archive)}")
        # Drop references to entry content now that it lives in ``archive``
        self._chunks.clear()
        return archive


def build_archive(entries: Iterable[ArchiveEntry]) -> bytes:
    """Build a complete archive from ``entries`` in iteration order."""
    builder = ZipArchiveBuilder()
    for entry in entries:
        builder.append(entry)
    return builder.finalize()


__all__ = ["ArchiveEntry", "ArchiveFinalizedError", "ZipArchiveBuilder", "build_archive"]
