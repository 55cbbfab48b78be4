from pathlib import Path
from typing import Union
import logging
import numpy as np
import cv2
from PIL import Image as PILImage

from ..models.image import Image

logger = logging.getLogger(__name__)


class ImageRepository:
    """
    Handles file I/O and pixel conversion for Image entities.
    Everything leaving this class is RGBA uint8.
    """
    @staticmethod
    def create_image(pixels: np.ndarray, path: Union[str, Path] = None) -> Image:
        if path is None:
            return Image(pixels)
        return Image(pixels=pixels, path=Path(path))

    @staticmethod
    def to_rgba(arr: np.ndarray, bgr: bool = True) -> np.ndarray:
        """
        Normalise a decoded array (gray, 3- or 4-channel) to RGBA uint8.
        OpenCV decodes in BGR(A) order, hence the default.
        """
        if arr.dtype == np.uint16:
            # 16-bit PNG / TIFF → 8-bit, fixed scale so levels match an 8-bit copy
            arr = cv2.convertScaleAbs(arr, alpha=1.0 / 257.0)
        elif arr.dtype != np.uint8:
            raise ValueError(f"Unsupported pixel dtype: {arr.dtype}")

        if arr.ndim == 2:
            return cv2.cvtColor(arr, cv2.COLOR_GRAY2RGBA)
        channels = arr.shape[2]
        if channels == 1:
            return cv2.cvtColor(arr[:, :, 0], cv2.COLOR_GRAY2RGBA)
        if channels == 3:
            return cv2.cvtColor(arr, cv2.COLOR_BGR2RGBA if bgr else cv2.COLOR_RGB2RGBA)
        if channels == 4:
            return cv2.cvtColor(arr, cv2.COLOR_BGRA2RGBA) if bgr else arr.copy()
        raise ValueError(f"Unsupported channel count: {channels}")

    def load(self, path: Union[str, Path]) -> Image:
        path = Path(path)
        arr = cv2.imread(str(path), cv2.IMREAD_UNCHANGED)
        if arr is None:
            raise FileNotFoundError(f"Image not found or unreadable: {path}")
        logger.debug(f"Loaded {path} with shape {arr.shape}")
        return Image(pixels=self.to_rgba(arr), path=path)

    def decode(self, data: bytes) -> Image:
        """Decode an in-memory encoded image (upload body)."""
        arr = cv2.imdecode(np.frombuffer(data, np.uint8), cv2.IMREAD_UNCHANGED)
        if arr is None:
            raise ValueError("Could not decode image data")
        return Image(pixels=self.to_rgba(arr))

    @staticmethod
    def encode_png(pixels: np.ndarray) -> bytes:
        """RGB or RGBA pixels → PNG bytes."""
        if pixels.ndim == 3 and pixels.shape[2] == 4:
            bgr = cv2.cvtColor(pixels, cv2.COLOR_RGBA2BGRA)
        else:
            bgr = cv2.cvtColor(pixels, cv2.COLOR_RGB2BGR)
        ok, buf = cv2.imencode(".png", bgr)
        if not ok:
            raise ValueError("PNG encoding failed")
        return buf.tobytes()

    @staticmethod
    def resize(pixels: np.ndarray, width: int, height: int) -> np.ndarray:
        return cv2.resize(pixels, (width, height), interpolation=cv2.INTER_AREA)

    @staticmethod
    def save(pixels: np.ndarray, path: Union[str, Path]) -> Path:
        path = Path(path)
        path.parent.mkdir(parents=True, exist_ok=True)
        PILImage.fromarray(np.ascontiguousarray(pixels)).save(path)
        return path

