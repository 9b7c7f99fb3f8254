import secrets
import uuid
from datetime import UTC, datetime, timedelta

from sqlalchemy.orm import Session

from photodrop.models import Gallery, Image, Photographer


class FakeS3Client:
    """In-memory stand-in for AsyncS3Client."""

    def __init__(self, objects: dict[str, bytes] | None = None, failing: set[str] | None = None):
        self.objects = dict(objects or {})
        self.failing = set(failing or ())
        self.requested: list[str] = []

    async def download_fileobj(self, key: str) -> bytes:
        self.requested.append(key)
        if key in self.failing or key not in self.objects:
            raise RuntimeError(f"NoSuchKey: {key}")
        return self.objects[key]

    def generate_presigned_url(self, key: str, expires_in: int = 3600) -> str:
        return f"https://s3.test/photos/{key}?expires={expires_in}"

    def generate_presigned_urls_batch(self, keys: list[str], expires_in: int = 3600) -> dict[str, str]:
        return {key: self.generate_presigned_url(key, expires_in) for key in keys}


def create_photographer(db: Session, name: str = "Ada Lens") -> Photographer:
    photographer = Photographer(email=f"{uuid.uuid4()}@example.com", password_hash="x", name=name)
    db.add(photographer)
    db.commit()
    return photographer


def create_gallery(db: Session, title: str = "Holiday", expires_at: datetime | None = None, photographer: Photographer | None = None) -> Gallery:
    photographer = photographer or create_photographer(db)
    gallery = Gallery(photographer_id=photographer.id, title=title, share_token=secrets.token_hex(16), expires_at=expires_at)
    db.add(gallery)
    db.commit()
    db.refresh(gallery)
    return gallery


def add_image(db: Session, gallery: Gallery, filename: str, minutes: int = 0, thumb: bool = True, mime_type: str | None = "image/jpeg") -> Image:
    """Add an image uploaded ``minutes`` after a fixed base time."""
    image_id = uuid.uuid4()
    original_key = f"{gallery.id}/original/{image_id}-{filename}"
    image = Image(
        id=image_id,
        gallery_id=gallery.id,
        filename=filename,
        original_key=original_key,
        thumb_key=f"{gallery.id}/thumbs/{image_id}.jpg" if thumb else None,
        size_bytes=10,
        mime_type=mime_type,
        width=800,
        height=600,
        uploaded_at=datetime(2024, 6, 1, 12, 0) + timedelta(minutes=minutes),
    )
    db.add(image)
    db.commit()
    db.refresh(image)
    return image


def past(days: int = 1) -> datetime:
    return (datetime.now(UTC) - timedelta(days=days)).replace(tzinfo=None)


def future(days: int = 1) -> datetime:
    return (datetime.now(UTC) + timedelta(days=days)).replace(tzinfo=None)
