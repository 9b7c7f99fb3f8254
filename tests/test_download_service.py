import asyncio
import io
import zipfile

import pytest

from photodrop.download_service import (
    ArchiveItem,
    GalleryArchiveService,
    archive_content_disposition,
    assemble_archive,
    attachment_content_disposition,
    encode_uri_component,
    sanitize_archive_name,
)
from photodrop.exceptions import ArchiveBuildFailed, EmptyGallery, ObjectFetchFailed
from tests.helpers import FakeS3Client


def zip_contents(archive: bytes) -> list[tuple[str, bytes]]:
    with zipfile.ZipFile(io.BytesIO(archive)) as zf:
        return [(name, zf.read(name)) for name in zf.namelist()]


class TestArchiveNaming:
    @pytest.mark.parametrize(
        ("title", "expected"),
        [
            ("Summer Wedding! 2024", "Summer Wedding 2024"),
            ("  Family_Shoot-01  ", "Family_Shoot-01"),
            ("Été à Paris", "t  Paris"),
            ("!!!", "gallery"),
            ("   ", "gallery"),
            ("", "gallery"),
            (None, "gallery"),
        ],
    )
    def test_sanitize_archive_name(self, title, expected):
        assert sanitize_archive_name(title) == expected

    def test_archive_content_disposition(self):
        assert archive_content_disposition("Summer Wedding! 2024") == 'attachment; filename="Summer%20Wedding%202024.zip"'

    def test_archive_content_disposition_default(self):
        assert archive_content_disposition("???") == 'attachment; filename="gallery.zip"'

    def test_attachment_content_disposition(self):
        assert attachment_content_disposition("my photo (1).jpg") == 'attachment; filename="my+photo+(1).jpg"'

    def test_encode_uri_component(self):
        assert encode_uri_component("a/b&c d~e") == "a%2Fb%26c%20d~e"
        assert encode_uri_component("ü") == "%C3%BC"


class TestAssembleArchive:
    def test_duplicate_names_are_numbered(self):
        archive = assemble_archive([("photo.jpg", b"X"), ("photo.jpg", b"Y"), (None, b"Z")])
        assert zip_contents(archive) == [("photo.jpg", b"X"), ("photo_2.jpg", b"Y"), ("image.jpg", b"Z")]


class DelayedStorage:
    """Returns each object after its own delay, so fetches complete out of order."""

    def __init__(self, delays: dict[str, float]):
        self.delays = delays
        self.in_flight = 0
        self.peak = 0

    async def download_fileobj(self, key: str) -> bytes:
        self.in_flight += 1
        self.peak = max(self.peak, self.in_flight)
        try:
            await asyncio.sleep(self.delays[key])
        finally:
            self.in_flight -= 1
        return key.encode()


class HangingStorage:
    """Fails for one key and never finishes the others."""

    def __init__(self, bad_key: str):
        self.bad_key = bad_key
        self.cancelled: list[str] = []

    async def download_fileobj(self, key: str) -> bytes:
        if key == self.bad_key:
            raise RuntimeError("connection reset")
        try:
            await asyncio.Event().wait()
        except asyncio.CancelledError:
            self.cancelled.append(key)
            raise
        return b""


class TestGalleryArchiveService:
    @pytest.mark.asyncio
    async def test_entries_follow_input_order_not_fetch_order(self):
        storage = DelayedStorage({"k1": 0.03, "k2": 0.0, "k3": 0.01})
        service = GalleryArchiveService(storage, fetch_concurrency=3)

        archive = await service.build([ArchiveItem("k1", "a.jpg"), ArchiveItem("k2", "b.jpg"), ArchiveItem("k3", "a.jpg")])

        assert zip_contents(archive) == [("a.jpg", b"k1"), ("b.jpg", b"k2"), ("a_2.jpg", b"k3")]

    @pytest.mark.asyncio
    async def test_fetch_concurrency_is_bounded(self):
        delays = {f"k{i}": 0.01 for i in range(6)}
        storage = DelayedStorage(delays)
        service = GalleryArchiveService(storage, fetch_concurrency=2)

        await service.build([ArchiveItem(key, f"{key}.jpg") for key in delays])

        assert storage.peak == 2

    @pytest.mark.asyncio
    async def test_build_is_deterministic(self):
        storage = FakeS3Client({"a": b"alpha", "b": b"beta"})
        service = GalleryArchiveService(storage)
        items = [ArchiveItem("a", "x.jpg"), ArchiveItem("b", "x.jpg")]

        assert await service.build(items) == await service.build(items)

    @pytest.mark.asyncio
    async def test_empty_item_list_is_an_error(self):
        service = GalleryArchiveService(FakeS3Client())
        with pytest.raises(EmptyGallery):
            await service.build([])

    @pytest.mark.asyncio
    async def test_failed_fetch_aborts_build(self):
        storage = FakeS3Client({"a": b"alpha"}, failing={"b"})
        service = GalleryArchiveService(storage)

        with pytest.raises(ObjectFetchFailed) as exc_info:
            await service.build([ArchiveItem("a", "a.jpg"), ArchiveItem("b", "b.jpg")])

        assert exc_info.value.key == "b"
        assert isinstance(exc_info.value.__cause__, RuntimeError)

    @pytest.mark.asyncio
    async def test_failed_fetch_cancels_pending_fetches(self):
        storage = HangingStorage(bad_key="bad")
        service = GalleryArchiveService(storage, fetch_concurrency=8)

        with pytest.raises(ObjectFetchFailed):
            await service.build([ArchiveItem("slow1", None), ArchiveItem("bad", None), ArchiveItem("slow2", None)])

        for _ in range(3):
            await asyncio.sleep(0)
        assert sorted(storage.cancelled) == ["slow1", "slow2"]

    @pytest.mark.asyncio
    async def test_assembly_error_is_wrapped(self, monkeypatch):
        def broken(files):
            raise ValueError("boom")

        monkeypatch.setattr("photodrop.download_service.assemble_archive", broken)
        service = GalleryArchiveService(FakeS3Client({"a": b"alpha"}))

        with pytest.raises(ArchiveBuildFailed):
            await service.build([ArchiveItem("a", "a.jpg")])

    def test_fetch_concurrency_must_be_positive(self):
        with pytest.raises(ValueError):
            GalleryArchiveService(FakeS3Client(), fetch_concurrency=0)
