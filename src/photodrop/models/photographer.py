import uuid
from datetime import UTC, datetime

from sqlalchemy import DateTime, String, Uuid
from sqlalchemy.orm import mapped_column, relationship

from photodrop.db import Base


class Photographer(Base):
    __tablename__ = "photographers"

    id = mapped_column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    email = mapped_column(String(255), unique=True, nullable=False, index=True)
    password_hash = mapped_column(String(255), nullable=False)
    name = mapped_column(String(255), nullable=False)
    created_at = mapped_column(DateTime, default=lambda: datetime.now(UTC), nullable=False)

    galleries = relationship("Gallery", back_populates="photographer", passive_deletes=True)
