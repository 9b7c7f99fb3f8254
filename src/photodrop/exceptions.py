"""
Domain errors for the public gallery endpoints.

Each error knows the HTTP status and the machine-readable code it maps to;
``main.py`` registers a handler that renders them as
``{"detail": ..., "error": ...}``.
"""


class PhotodropError(Exception):
    status_code: int = 500
    code: str = "server_error"
    detail: str = "Server error"

    def __init__(self, detail: str | None = None):
        if detail is not None:
            self.detail = detail
        super().__init__(self.detail)


class GalleryNotFound(PhotodropError):
    status_code = 404
    code = "gallery_not_found"
    detail = "Gallery not found"


class GalleryExpired(PhotodropError):
    status_code = 410
    code = "gallery_expired"
    detail = "This gallery link has expired"


class EmptyGallery(PhotodropError):
    status_code = 404
    code = "empty_gallery"
    detail = "No images in this gallery"


class ImageNotFound(PhotodropError):
    status_code = 404
    code = "image_not_found"
    detail = "Image not found"


class ObjectFetchFailed(PhotodropError):
    """A storage read failed. The key is kept for logs and never sent to clients."""

    def __init__(self, key: str):
        self.key = key
        super().__init__()


class ArchiveBuildFailed(PhotodropError):
    code = "archive_build_failed"
    detail = "Failed to build archive"


class ClientDisconnected(PhotodropError):
    """The client went away before the archive was ready; nothing is sent."""

    status_code = 499
    code = "client_closed_request"
    detail = "Client closed request"


__all__ = [
    "ArchiveBuildFailed",
    "ClientDisconnected",
    "EmptyGallery",
    "GalleryExpired",
    "GalleryNotFound",
    "ImageNotFound",
    "ObjectFetchFailed",
    "PhotodropError",
]
