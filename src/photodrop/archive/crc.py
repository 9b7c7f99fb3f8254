"""CRC-32 (IEEE 802.3, reflected) as used by the ZIP format.

The checksum is computed one byte at a time in Python through a 256-entry
table, which runs at roughly 10 MB/s. A 1 GB gallery therefore spends about
a minute and a half here, holding the GIL for most of it. Callers run it in a
worker thread, which keeps the event loop responsive but still competes with
it for the interpreter.
"""

from functools import cache

CRC32_POLYNOMIAL = 0xEDB88320


@cache
def _crc_table() -> tuple[int, ...]:
    """Build the 256-entry lookup table once per process."""
    table = []
    for n in range(256):
        c = n
        for _ in range(8):
            c = (c >> 1) ^ CRC32_POLYNOMIAL if c & 1 else c >> 1
        table.append(c)
    return tuple(table)


def crc32_update(crc: int, data: bytes) -> int:
    """Continue a running checksum over ``data``.

    ``crc32_update(crc32(a), b) == crc32(a + b)``.
    """
    table = _crc_table()
    c = crc ^ 0xFFFFFFFF
    for byte in data:
        c = table[(c ^ byte) & 0xFF] ^ (c >> 8)
    return c ^ 0xFFFFFFFF


def crc32(data: bytes) -> int:
    """Return the CRC-32 of ``data`` as an unsigned 32-bit integer."""
    return crc32_update(0, data)


__all__ = ["CRC32_POLYNOMIAL", "crc32", "crc32_update"]
