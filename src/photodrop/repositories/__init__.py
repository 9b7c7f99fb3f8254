# Repositories package

from .base_repository import BaseRepository
from .share_repository import ShareRepository

__all__ = [
    "BaseRepository",
    "ShareRepository",
]
