from .gallery import Gallery, Image
from .photographer import Photographer

__all__ = ["Gallery", "Image", "Photographer"]
