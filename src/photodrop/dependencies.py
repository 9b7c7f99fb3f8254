"""
Dependency Injection for shared services

The AsyncS3Client is created once during application startup and shared
across all requests.
"""

import logging
from collections.abc import AsyncGenerator
from functools import lru_cache

from fastapi import Depends
from sqlalchemy.orm import Session

from photodrop.config import DownloadSettings
from photodrop.db import get_db
from photodrop.repositories.share_repository import ShareRepository
from photodrop.s3_service import AsyncS3Client

logger = logging.getLogger(__name__)

# Global instance of the S3 client (initialized during app startup)
_s3_client_instance: AsyncS3Client | None = None


async def get_s3_client() -> AsyncGenerator[AsyncS3Client]:
    """Dependency injection function for AsyncS3Client.

    Yields:
        AsyncS3Client instance
    """
    if _s3_client_instance is None:
        raise RuntimeError("S3 client not initialized. Make sure the application lifespan is properly configured.")
    yield _s3_client_instance


def set_s3_client_instance(client: AsyncS3Client | None) -> None:
    """Set (or reset with ``None``) the global S3 client instance."""
    global _s3_client_instance
    _s3_client_instance = client
    logger.info("S3 client instance set globally")


def get_s3_client_instance() -> AsyncS3Client:
    """Get the global S3 client instance without using dependency injection.

    Raises:
        RuntimeError: If the client is not initialized
    """
    if _s3_client_instance is None:
        raise RuntimeError("S3 client not initialized. Make sure the application lifespan is properly configured.")
    return _s3_client_instance


@lru_cache(maxsize=1)
def get_download_settings() -> DownloadSettings:
    return DownloadSettings()


def get_share_repository(db: Session = Depends(get_db)) -> ShareRepository:
    return ShareRepository(db)
