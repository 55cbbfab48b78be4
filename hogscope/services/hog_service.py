from __future__ import annotations

import numbers
import logging
import numpy as np

from ..models.errors import InvalidParameterError
from ..models.hog_descriptor import HogDescriptor, HogResult, HogSummary
from ..models.image import Image
from ..repositories.gradient_repository import GradientRepository
from ..repositories.histogram_repository import HistogramRepository

logger = logging.getLogger(__name__)


class HogService:
    """
    Business-level HOG extraction: grayscale → gradients → cell histograms,
    plus the summary statistics shown next to the overlay.
    *   No I/O here; works only with Image objects / RGBA numpy arrays.
    """

    def __init__(self):
        self.gradient_repository = GradientRepository()
        self.histogram_repository = HistogramRepository()

    # ─── Validation ────────────────────────────────────────────────
    @staticmethod
    def _validate_positive_int(name: str, value) -> int:
        if isinstance(value, bool) or not isinstance(value, numbers.Integral):
            raise InvalidParameterError(f"{name} must be an integer, got {value!r}")
        if value < 1:
            raise InvalidParameterError(f"{name} must be >= 1, got {value}")
        return int(value)

    @staticmethod
    def _validate_pixels(image: Image | np.ndarray) -> np.ndarray:
        pixels = image.pixels if isinstance(image, Image) else image
        if not isinstance(pixels, np.ndarray) or pixels.ndim != 3 or pixels.shape[2] != 4:
            shape = getattr(pixels, "shape", None)
            raise InvalidParameterError(f"Expected an (H, W, 4) RGBA array, got shape {shape}")
        if pixels.shape[0] < 1 or pixels.shape[1] < 1:
            raise InvalidParameterError(f"Image must be at least 1x1, got {pixels.shape[1]}x{pixels.shape[0]}")
        return pixels

    # ─── Public API ────────────────────────────────────────────────
    def validate_parameters(self, cell_size: int, bins: int) -> tuple[int, int]:
        """Raise InvalidParameterError for unusable cell size / bins; return them as ints."""
        return (self._validate_positive_int("cell_size", cell_size),
                self._validate_positive_int("bins", bins))

    def compute(self, image: Image | np.ndarray, cell_size: int, bins: int) -> HogResult:
        """
        Args:
            image: Image (or raw pixels) with RGBA pixels of shape (H, W, 4).
            cell_size: square cell side in pixels, >= 1.
            bins: number of unsigned orientation bins over [0, π), >= 1.

        Returns:
            HogResult: row-major descriptor + summary.

        Raises:
            InvalidParameterError: before any computation, for bad parameters.
        """
        cell_size, bins = self.validate_parameters(cell_size, bins)
        pixels = self._validate_pixels(image)

        descriptor = self.extract_descriptor(pixels, cell_size, bins)
        summary = self.summarize(descriptor)
        logger.info(f"HOG computed for {pixels.shape[1]}x{pixels.shape[0]} image: "
                    f"{summary.cell_count} cells x {bins} bins")
        return HogResult(descriptor=descriptor, summary=summary)

    def extract_descriptor(self, pixels: np.ndarray, cell_size: int, bins: int) -> HogDescriptor:
        luminance = self.gradient_repository.to_luminance(pixels)
        magnitude, direction = self.gradient_repository.compute_gradients(luminance)
        descriptor = self.histogram_repository.build_descriptor(magnitude, direction, cell_size, bins)
        if not descriptor.cells:
            logger.warning(f"cell_size={cell_size} leaves no full cell in a "
                           f"{pixels.shape[1]}x{pixels.shape[0]} image; descriptor is empty")
        return descriptor

    @staticmethod
    def summarize(descriptor: HogDescriptor) -> HogSummary:
        """
        Aggregate statistics, recomputed on every call.
        Average per cell is reported as 0.0 when there are no cells.
        """
        cell_count = len(descriptor.cells)
        total = float(sum(float(cell.histogram.sum()) for cell in descriptor.cells))
        avg = total / cell_count if cell_count else 0.0
        return HogSummary(
            cell_count=cell_count,
            vector_length=cell_count * descriptor.bins,
            total_magnitude=total,
            avg_magnitude_per_cell=avg,
            cell_size=descriptor.cell_size,
            bins=descriptor.bins,
        )
