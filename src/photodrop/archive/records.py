"""Byte layouts of the three ZIP records written by the archive builder.

Only the store method is supported and no ZIP64 extensions are emitted, so
every size and offset has to fit in 32 bits and the entry count in 16 bits.
All integers are little-endian.
"""

import struct

LOCAL_FILE_HEADER_SIGNATURE = 0x04034B50
CENTRAL_DIRECTORY_SIGNATURE = 0x02014B50
END_OF_CENTRAL_DIRECTORY_SIGNATURE = 0x06054B50

ZIP_VERSION = 20  # 2.0, the minimum for plain stored entries
COMPRESSION_STORE = 0

MAX_UINT16 = 0xFFFF
MAX_UINT32 = 0xFFFFFFFF

# signature, version needed, flags, method, mod time, mod date, crc, compressed size,
# uncompressed size, name length, extra length
LOCAL_FILE_HEADER = struct.Struct("<IHHHHHIIIHH")

# signature, version made by, version needed, flags, method, mod time, mod date, crc,
# compressed size, uncompressed size, name length, extra length, comment length,
# disk start, internal attrs, external attrs, local header offset
CENTRAL_DIRECTORY_HEADER = struct.Struct("<IHHHHHHIIIHHHHHII")

# signature, this disk, central directory disk, entries on this disk, total entries,
# central directory size, central directory offset, comment length
END_OF_CENTRAL_DIRECTORY = struct.Struct("<IHHHHIIH")


class ArchiveLimitExceeded(ValueError):
    """A value does not fit the fixed-width field of a non-ZIP64 record."""


def _check_fits(field: str, value: int, limit: int) -> None:
    if value < 0 or value > limit:
        raise ArchiveLimitExceeded(f"{field}={value} does not fit in a ZIP record (max {limit})")


def _encode_name(name: str) -> bytes:
    encoded = name.encode("utf-8")
    _check_fits("name length", len(encoded), MAX_UINT16)
    return encoded


def build_local_file_header(name: str, crc: int, size: int) -> bytes:
    """Local file header for a stored entry, followed by the raw name bytes."""
    encoded = _encode_name(name)
    _check_fits("size", size, MAX_UINT32)
    header = LOCAL_FILE_HEADER.pack(
        LOCAL_FILE_HEADER_SIGNATURE,
        ZIP_VERSION,
        0,
        COMPRESSION_STORE,
        0,
        0,
        crc,
        size,
        size,
        len(encoded),
        0,
    )
    return header + encoded


def build_central_directory_header(name: str, crc: int, size: int, local_offset: int) -> bytes:
    """Central directory record pointing back at the local header at ``local_offset``."""
    encoded = _encode_name(name)
    _check_fits("size", size, MAX_UINT32)
    _check_fits("local header offset", local_offset, MAX_UINT32)
    header = CENTRAL_DIRECTORY_HEADER.pack(
        CENTRAL_DIRECTORY_SIGNATURE,
        ZIP_VERSION,
        ZIP_VERSION,
        0,
        COMPRESSION_STORE,
        0,
        0,
        crc,
        size,
        size,
        len(encoded),
        0,
        0,
        0,
        0,
        0,
        local_offset,
    )
    return header + encoded


def build_end_of_central_directory(entry_count: int, central_dir_size: int, central_dir_offset: int) -> bytes:
    """Trailer record; multi-disk archives are not produced so both counts match."""
    _check_fits("entry count", entry_count, MAX_UINT16)
    _check_fits("central directory size", central_dir_size, MAX_UINT32)
    _check_fits("central directory offset", central_dir_offset, MAX_UINT32)
    return END_OF_CENTRAL_DIRECTORY.pack(
        END_OF_CENTRAL_DIRECTORY_SIGNATURE,
        0,
        0,
        entry_count,
        entry_count,
        central_dir_size,
        central_dir_offset,
        0,
    )


__all__ = [
    "ArchiveLimitExceeded",
    "build_central_directory_header",
    "build_end_of_central_directory",
    "build_local_file_header",
]
