# ZIP archive assembly package

from .builder import ArchiveEntry, ArchiveFinalizedError, ZipArchiveBuilder, build_archive
from .crc import crc32, crc32_update
from .names import DEFAULT_ENTRY_NAME, NameRegistry
from .records import ArchiveLimitExceeded, build_central_directory_header, build_end_of_central_directory, build_local_file_header

__all__ = [
    "DEFAULT_ENTRY_NAME",
    "ArchiveEntry",
    "ArchiveFinalizedError",
    "ArchiveLimitExceeded",
    "NameRegistry",
    "ZipArchiveBuilder",
    "build_archive",
    "build_central_directory_header",
    "build_end_of_central_directory",
    "build_local_file_header",
    "crc32",
    "crc32_update",
]
