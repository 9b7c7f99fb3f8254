import uuid
from datetime import UTC, datetime

from sqlalchemy import BigInteger, DateTime, ForeignKey, Integer, String, Text, Uuid
from sqlalchemy.orm import mapped_column, relationship

from photodrop.db import Base


class Gallery(Base):
    __tablename__ = "galleries"

    id = mapped_column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    photographer_id = mapped_column(Uuid(as_uuid=True), ForeignKey("photographers.id", ondelete="CASCADE"), nullable=False, index=True)
    title = mapped_column(String(255), nullable=False)
    description = mapped_column(Text, nullable=True)
    # Opaque token used in public links
    share_token = mapped_column(String(64), unique=True, nullable=False, index=True)
    expires_at = mapped_column(DateTime, nullable=True)
    created_at = mapped_column(DateTime, default=lambda: datetime.now(UTC), nullable=False)

    photographer = relationship("Photographer", back_populates="galleries")
    images = relationship("Image", back_populates="gallery", passive_deletes=True, order_by="Image.uploaded_at")

    def is_expired(self, now: datetime | None = None) -> bool:
        """Whether the share link has expired. Naive timestamps are treated as UTC."""
        if self.expires_at is None:
            return False
        expires_at = self.expires_at if self.expires_at.tzinfo else self.expires_at.replace(tzinfo=UTC)
        return expires_at < (now or datetime.now(UTC))


class Image(Base):
    __tablename__ = "images"

    id = mapped_column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    gallery_id = mapped_column(Uuid(as_uuid=True), ForeignKey("galleries.id", ondelete="CASCADE"), nullable=False, index=True)
    # Name shown to clients and used inside archives
    filename = mapped_column(String(500), nullable=False)
    # S3 object keys (e.g., gallery_id/original/filename)
    original_key = mapped_column(String(500), nullable=False)
    thumb_key = mapped_column(String(500), nullable=True)
    size_bytes = mapped_column(BigInteger, nullable=True)
    mime_type = mapped_column(String(100), nullable=True)
    width = mapped_column(Integer, nullable=True)
    height = mapped_column(Integer, nullable=True)
    uploaded_at = mapped_column(DateTime, default=lambda: datetime.now(UTC), nullable=False)

    gallery = relationship(Gallery, back_populates="images")
