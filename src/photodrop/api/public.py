import asyncio
import logging
from collections.abc import Awaitable
from typing import TypeVar
from uuid import UUID

from fastapi import APIRouter, Depends, Request
from fastapi.responses import Response

from photodrop.config import DownloadSettings
from photodrop.dependencies import get_download_settings, get_s3_client, get_share_repository
from photodrop.download_service import ArchiveItem, GalleryArchiveService, archive_content_disposition, attachment_content_disposition
from photodrop.exceptions import ArchiveBuildFailed, ClientDisconnected, GalleryExpired, GalleryNotFound, ImageNotFound, ObjectFetchFailed
from photodrop.logger import logger as event_logger
from photodrop.models.gallery import Gallery, Image
from photodrop.repositories.share_repository import ShareRepository
from photodrop.s3_service import AsyncS3Client
from photodrop.schemas.public import ErrorResponse, PublicGalleryResponse, PublicImage

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/client", tags=["public"])

T = TypeVar("T")

# How often a long archive build checks whether the client is still there
DISCONNECT_POLL_INTERVAL = 1.0

ERROR_RESPONSES = {
    404: {"model": ErrorResponse},
    410: {"model": ErrorResponse},
    500: {"model": ErrorResponse},
}


def get_shared_gallery(share_token: str, repo: ShareRepository = Depends(get_share_repository)) -> Gallery:
    gallery = repo.get_gallery_by_share_token(share_token)
    if not gallery:
        raise GalleryNotFound()
    if gallery.is_expired():
        raise GalleryExpired()
    return gallery


def get_shared_images(gallery: Gallery = Depends(get_shared_gallery), repo: ShareRepository = Depends(get_share_repository)) -> list[Image]:
    return repo.get_images_by_gallery_id(gallery.id)


def get_shared_image(image_id: str, share_token: str, repo: ShareRepository = Depends(get_share_repository)) -> Image:
    """Resolve one image of a live gallery. Ids that are not UUIDs cannot match any image."""
    try:
        image_uuid = UUID(image_id)
    except ValueError:
        raise ImageNotFound() from None

    image = repo.get_image_by_id_and_share_token(image_uuid, share_token)
    if not image:
        raise ImageNotFound()
    if image.gallery.is_expired():
        raise GalleryExpired()
    return image


async def run_unless_disconnected(request: Request, awaitable: Awaitable[T]) -> T:
    """Await ``awaitable``, cancelling it if the client disconnects meanwhile."""
    task = asyncio.ensure_future(awaitable)
    try:
        while True:
            done, _ = await asyncio.wait({task}, timeout=DISCONNECT_POLL_INTERVAL)
            if done:
                return task.result()
            if await request.is_disconnected():
                raise ClientDisconnected()
    finally:
        if not task.done():
            task.cancel()


@router.get("/gallery/{share_token}", response_model=PublicGalleryResponse, responses=ERROR_RESPONSES)
def get_gallery_by_share_token(
    share_token: str,
    gallery: Gallery = Depends(get_shared_gallery),
    images: list[Image] = Depends(get_shared_images),
    s3_client: AsyncS3Client = Depends(get_s3_client),
    settings: DownloadSettings = Depends(get_download_settings),
) -> PublicGalleryResponse:
    thumb_keys = [image.thumb_key or image.original_key for image in images]
    urls = s3_client.generate_presigned_urls_batch(thumb_keys, expires_in=settings.thumbnail_url_ttl)

    event_logger.log_event("view_gallery", share_token, gallery_id=gallery.id, image_count=len(images))

    return PublicGalleryResponse(
        id=str(gallery.id),
        title=gallery.title,
        description=gallery.description,
        photographer_name=gallery.photographer.name if gallery.photographer else "",
        created_at=gallery.created_at,
        expires_at=gallery.expires_at,
        image_count=len(images),
        images=[
            PublicImage(
                id=str(image.id),
                filename=image.filename,
                width=image.width,
                height=image.height,
                size_bytes=image.size_bytes,
                uploaded_at=image.uploaded_at,
                thumb_url=urls.get(key),
            )
            for image, key in zip(images, thumb_keys, strict=True)
        ],
    )


@router.get("/download/{image_id}/{share_token}", responses=ERROR_RESPONSES)
async def download_image(
    share_token: str,
    image: Image = Depends(get_shared_image),
    s3_client: AsyncS3Client = Depends(get_s3_client),
) -> Response:
    """Download one original as an attachment"""
    try:
        content = await s3_client.download_fileobj(image.original_key)
    except Exception as e:
        logger.error("Failed to fetch original %s for image %s", image.original_key, image.id)
        raise ObjectFetchFailed(image.original_key) from e

    event_logger.log_event("download_image", share_token, gallery_id=image.gallery_id, image_id=image.id, size=len(content))

    return Response(
        content=content,
        media_type=image.mime_type or "application/octet-stream",
        headers={"Content-Disposition": attachment_content_disposition(image.filename)},
    )


@router.get("/download-all/{share_token}", responses=ERROR_RESPONSES)
async def download_all_images_zip(
    share_token: str,
    request: Request,
    gallery: Gallery = Depends(get_shared_gallery),
    images: list[Image] = Depends(get_shared_images),
    s3_client: AsyncS3Client = Depends(get_s3_client),
    settings: DownloadSettings = Depends(get_download_settings),
) -> Response:
    """Download every original of the gallery as one stored ZIP archive.

    The archive is assembled completely before the response starts, so any
    failure still produces a clean JSON error instead of a truncated file.
    """
    items = [ArchiveItem(storage_key=image.original_key, filename=image.filename) for image in images]
    service = GalleryArchiveService(s3_client, fetch_concurrency=settings.fetch_concurrency)

    try:
        archive = await run_unless_disconnected(request, service.build(items))
    except ObjectFetchFailed as e:
        logger.error("Archive for gallery %s aborted, failed to fetch %s", gallery.id, e.key)
        event_logger.log_event("download_zip_failed", share_token, gallery_id=gallery.id, object_key=e.key)
        raise ArchiveBuildFailed() from e
    except ClientDisconnected:
        logger.info("Client left before archive for gallery %s was ready, fetches cancelled", gallery.id)
        raise

    event_logger.log_event("download_zip", share_token, gallery_id=gallery.id, image_count=len(items), archive_size=len(archive))

    return Response(
        content=archive,
        media_type="application/zip",
        headers={"Content-Disposition": archive_content_disposition(gallery.title)},
    )
