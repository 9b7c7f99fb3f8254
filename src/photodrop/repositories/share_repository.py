import uuid

from sqlalchemy import select
from sqlalchemy.orm import joinedload

from photodrop.models.gallery import Gallery, Image
from photodrop.repositories.base_repository import BaseRepository


class ShareRepository(BaseRepository):
    """Read-only queries behind the public share-token endpoints."""

    def get_gallery_by_share_token(self, share_token: str) -> Gallery | None:
        stmt = select(Gallery).options(joinedload(Gallery.photographer)).where(Gallery.share_token == share_token)
        return self.db.execute(stmt).scalar_one_or_none()

    def get_images_by_gallery_id(self, gallery_id: uuid.UUID) -> list[Image]:
        # Upload order decides the order of gallery listings and archive entries
        stmt = select(Image).where(Image.gallery_id == gallery_id).order_by(Image.uploaded_at.asc(), Image.id.asc())
        return list(self.db.execute(stmt).scalars().all())

    def get_image_by_id_and_share_token(self, image_id: uuid.UUID, share_token: str) -> Image | None:
        stmt = select(Image).options(joinedload(Image.gallery)).join(Image.gallery).where(Image.id == image_id, Gallery.share_token == share_token)
        return self.db.execute(stmt).scalar_one_or_none()
