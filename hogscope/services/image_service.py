from pathlib import Path
from typing import Union
import base64
import numbers
import logging
import os
import numpy as np
from dotenv import load_dotenv

from ..models.errors import InvalidParameterError
from ..models.image import Image
from ..repositories.image_repository import ImageRepository

# Load environment variables
load_dotenv()

logger = logging.getLogger(__name__)


class ImageService:
    """I/O and display helpers.  No HOG logic here."""
    def __init__(self):
        self.MAX_DISPLAY_WIDTH = int(os.getenv("HOG_MAX_DISPLAY_WIDTH", "500"))
        self.image_repository = ImageRepository()

    def create_image(self, pixels: np.ndarray, path: Union[str, Path] = None) -> Image:
        return self.image_repository.create_image(pixels, path)

    def load(self, path: Union[str, Path]) -> Image:
        """Load a single image from disk into an RGBA Image object."""
        return self.image_repository.load(path)

    def decode(self, data: bytes) -> Image:
        """Decode uploaded bytes into an RGBA Image object."""
        return self.image_repository.decode(data)

    def fit_to_width(self, img: Image, max_width: int = None) -> Image:
        """
        Downscale so the width is at most *max_width*, keeping the aspect ratio.
        Never upscales; returns the same object when no scaling is needed.
        """
        if max_width is None:
            max_width = self.MAX_DISPLAY_WIDTH
        if isinstance(max_width, bool) or not isinstance(max_width, numbers.Integral) or max_width < 1:
            raise InvalidParameterError(f"max_width must be a positive integer, got {max_width!r}")
        if img.width <= max_width:
            return img

        scale = max_width / img.width
        new_w = max_width
        new_h = max(1, int(img.height * scale))
        logger.info(f"Scaling {img.width}x{img.height} → {new_w}x{new_h} for display")
        pixels = self.image_repository.resize(img.pixels, new_w, new_h)
        return self.create_image(pixels, img.path)

    def to_png_bytes(self, pixels: np.ndarray) -> bytes:
        return self.image_repository.encode_png(pixels)

    def to_data_url(self, pixels: np.ndarray) -> str:
        """Pixels → base64 PNG data URL for JSON responses."""
        b64 = base64.b64encode(self.to_png_bytes(pixels)).decode("ascii")
        return f"data:image/png;base64,{b64}"

    def save_pixels(self, pixels: np.ndarray, path: Union[str, Path]) -> Path:
        """
        Business-level method to write raw pixels to a specific path.
        """
        return self.image_repository.save(pixels, path)
