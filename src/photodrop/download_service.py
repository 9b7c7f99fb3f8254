"""
Gallery archive delivery

Fetches every original of a gallery from object storage, resolves unique entry
names and assembles one stored ZIP archive in memory. The archive is only
handed back once it is complete, so a failed fetch never produces a truncated
download.
"""

import asyncio
import logging
import re
from collections.abc import Iterable, Sequence
from typing import NamedTuple, Protocol
from urllib.parse import quote

from photodrop.archive import ArchiveEntry, NameRegistry, ZipArchiveBuilder
from photodrop.exceptions import ArchiveBuildFailed, EmptyGallery, ObjectFetchFailed

logger = logging.getLogger(__name__)

DEFAULT_ARCHIVE_NAME = "gallery"

_ARCHIVE_NAME_DISALLOWED = re.compile(r"[^A-Za-z0-9_\- ]")

# Characters JavaScript's encodeURIComponent leaves alone besides A-Za-z0-9 and "-_.~"
_URI_COMPONENT_SAFE = "!*'()"


class ObjectStorage(Protocol):
    async def download_fileobj(self, key: str) -> bytes: ...


class ArchiveItem(NamedTuple):
    storage_key: str
    filename: str | None


def encode_uri_component(value: str) -> str:
    return quote(value, safe=_URI_COMPONENT_SAFE)


def sanitize_archive_name(title: str | None) -> str:
    """Reduce a gallery title to ``[A-Za-z0-9_- ]``, falling back to "gallery"."""
    return _ARCHIVE_NAME_DISALLOWED.sub("", title or "").strip() or DEFAULT_ARCHIVE_NAME


def archive_content_disposition(title: str | None) -> str:
    return f'attachment; filename="{encode_uri_component(sanitize_archive_name(title))}.zip"'


def attachment_content_disposition(filename: str) -> str:
    """Content-Disposition for a single original, spaces encoded as ``+``."""
    return f'attachment; filename="{encode_uri_component(filename).replace("%20", "+")}"'


def assemble_archive(files: Iterable[tuple[str | None, bytes]]) -> bytes:
    """Build a ZIP from ``(desired_name, content)`` pairs, in order.

    Names are made unique per archive: ``photo.jpg`` twice becomes
    ``photo.jpg`` and ``photo_2.jpg``.
    """
    registry = NameRegistry()
    builder = ZipArchiveBuilder()
    for desired_name, content in files:
        builder.append(ArchiveEntry(name=registry.resolve(desired_name), content=content))
    return builder.finalize()


class GalleryArchiveService:
    """Builds the bulk-download archive for one request.

    Fetches run concurrently (bounded by ``fetch_concurrency``) but entries are
    appended strictly in the order of ``items``.
    """

    def __init__(self, storage: ObjectStorage, fetch_concurrency: int = 8):
        if fetch_concurrency < 1:
            raise ValueError("fetch_concurrency must be at least 1")
        self._storage = storage
        self._fetch_concurrency = fetch_concurrency

    async def build(self, items: Sequence[ArchiveItem]) -> bytes:
        """Return the complete archive bytes for ``items``.

        Raises:
            EmptyGallery: ``items`` is empty
            ObjectFetchFailed: any object could not be read; nothing is retried
            ArchiveBuildFailed: assembly failed after all fetches succeeded
        """
        if not items:
            raise EmptyGallery()

        contents = await self._fetch_all(items)

        try:
            # CRC over every original is CPU-bound, keep it off the event loop
            archive = await asyncio.to_thread(assemble_archive, zip((item.filename for item in items), contents, strict=True))
        except Exception as e:
            logger.exception("Failed to assemble archive of %d objects", len(items))
            raise ArchiveBuildFailed() from e

        logger.info(f"Assembled archive: entries={len(items)}, size={len(archive)}")
        return archive

    async def _fetch_all(self, items: Sequence[ArchiveItem]) -> list[bytes]:
        semaphore = asyncio.Semaphore(self._fetch_concurrency)

        async def fetch(key: str) -> bytes:
            async with semaphore:
                try:
                    return await self._storage.download_fileobj(key)
                except Exception as e:
                    raise ObjectFetchFailed(key) from e

        tasks = [asyncio.create_task(fetch(item.storage_key)) for item in items]
        try:
            return list(await asyncio.gather(*tasks))
        except BaseException:
            # First failure (or request cancellation) abandons the remaining fetches
            for task in tasks:
                task.cancel()
            raise


__all__ = [
    "ArchiveItem",
    "GalleryArchiveService",
    "archive_content_disposition",
    "assemble_archive",
    "attachment_content_disposition",
    "encode_uri_component",
    "sanitize_archive_name",
]
