from typing import Tuple
import numpy as np


class GradientRepository:
    """
    Luminance + finite-difference gradients on raw pixel arrays.

    • Border rows/columns are never written: they stay 0 in both grids
      (no padding, no replication).
    """

    # ITU-R BT.601 luma weights
    _LUMA = np.array([0.299, 0.587, 0.114], dtype=np.float64)

    @classmethod
    def to_luminance(cls, pixels: np.ndarray) -> np.ndarray:
        """
        Args:
            pixels (np.ndarray): (H, W, 4) RGBA. Alpha is ignored.

        Returns:
            (np.ndarray): (H, W) float64 luminance.
        """
        rgb = pixels[:, :, :3].astype(np.float64)
        return rgb @ cls._LUMA

    @staticmethod
    def compute_gradients(luminance: np.ndarray) -> Tuple[np.ndarray, np.ndarray]:
        """
        Central differences on the strict interior.

        Returns:
            magnitude, direction: (H, W) float64 each; direction in radians
            from arctan2(gy, gx).
        """
        h, w = luminance.shape
        magnitude = np.zeros((h, w), dtype=np.float64)
        direction = np.zeros((h, w), dtype=np.float64)
        if h < 3 or w < 3:
            return magnitude, direction

        gx = luminance[1:-1, 2:] - luminance[1:-1, :-2]
        gy = luminance[2:, 1:-1] - luminance[:-2, 1:-1]

        magnitude[1:-1, 1:-1] = np.sqrt(gx * gx + gy * gy)
        direction[1:-1, 1:-1] = np.arctan2(gy, gx)
        return magnitude, direction
