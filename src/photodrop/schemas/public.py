from datetime import datetime

from pydantic import BaseModel, Field


class PublicImage(BaseModel):
    id: str
    filename: str
    width: int | None = None
    height: int | None = None
    size_bytes: int | None = None
    uploaded_at: datetime
    # Existing gallery frontends read the camelCase key
    thumb_url: str | None = Field(None, serialization_alias="thumbUrl", description="Signed URL of the thumbnail, or of the original when no thumbnail exists")


class PublicGalleryResponse(BaseModel):
    id: str
    title: str
    description: str | None = None
    photographer_name: str = ""
    created_at: datetime
    expires_at: datetime | None = None
    image_count: int
    images: list[PublicImage]


class ErrorResponse(BaseModel):
    detail: str
    error: str
