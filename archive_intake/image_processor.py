"""
Prepare images for AI analysis.
"""

import base64
import io
from typing import Optional

from PIL import Image, UnidentifiedImageError

from .config import AppConfig
from .logging_setup import get_logger

logger = get_logger(__name__)


class ImageProcessor:
    """Encode image files as size-limited base64 JPEG."""

    def __init__(self, config: AppConfig):
        """
        Initialize the image processor.

        Args:
            config: Application configuration
        """
        self.config = config
        self.max_resolution = config.preview_max_resolution

    def encode_image(self, img: Image.Image) -> Optional[str]:
        """
        Downscale an image if needed and encode it as base64 JPEG.

        Args:
            img: PIL Image object

        Returns:
            Base64 string without a data-URL prefix, or None on failure
        """
        try:
            img_copy = img.copy()
            if self.max_resolution and (img_copy.width > self.max_resolution
                                        or img_copy.height > self.max_resolution):
                img_copy.thumbnail((self.max_resolution, self.max_resolution))
                logger.debug(f"Resized image to {img_copy.width}x{img_copy.height}")

            if img_copy.mode != 'RGB':
                img_copy = img_copy.convert('RGB')

            buffer = io.BytesIO()
            img_copy.save(buffer, format="JPEG", quality=85)
            img_copy.close()
            return base64.b64encode(buffer.getvalue()).decode('utf-8')
        except (OSError, ValueError) as e:
            logger.error(f"Error preparing image for AI: {str(e)}")
            return None

    def encode_file(self, path: str) -> Optional[str]:
        """
        Open an image file and encode it for AI analysis.

        Returns:
            Base64 string, or None if the file is not a readable image
        """
        try:
            with Image.open(path) as img:
                return self.encode_image(img)
        except (OSError, UnidentifiedImageError) as e:
            logger.error(f"Cannot open image {path}: {str(e)}")
            return None
