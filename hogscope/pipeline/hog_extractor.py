# pipeline/hog_extractor.py
from __future__ import annotations

from dataclasses import dataclass
from typing import List
import logging
import numpy as np

from ..models.hog_descriptor import HogResult, HogSummary
from ..models.image import Image
from ..services.hog_service import HogService
from ..services.image_service import ImageService
from ..services.overlay_service import OverlayService

logger = logging.getLogger(__name__)


@dataclass
class HogReport:
    """
    Everything one extraction produces.
    *image* is the (possibly display-scaled) image the HOG was computed on.
    """
    image: Image
    result: HogResult
    overlay: np.ndarray   # (H, W, 3) uint8 RGB


def extract_hog_features(
    img: Image,
    cell_size: int,
    bins: int,
    *,
    hog_service: HogService = None,
    overlay_service: OverlayService = None,
    image_service: ImageService = None,
    max_width: int | None = None,
) -> HogReport:
    """
    For one image:
        • scale down for display (never up)
        • compute the descriptor + summary on the scaled pixels
        • render the histogram overlay over a faded copy
    """
    hog_service = hog_service or HogService()
    overlay_service = overlay_service or OverlayService()
    image_service = image_service or ImageService()

    # 1. reject bad parameters before touching pixels
    cell_size, bins = hog_service.validate_parameters(cell_size, bins)

    # 2. same pixels the viewer sees
    display_img = image_service.fit_to_width(img, max_width)

    # 3. descriptor + summary
    result = hog_service.compute(display_img, cell_size, bins)

    # 4. overlay
    overlay = overlay_service.render(result.descriptor, display_img)

    return HogReport(image=display_img, result=result, overlay=overlay)


def format_feature_info(summary: HogSummary) -> List[str]:
    """Human-readable feature information, one line per statistic."""
    return [
        "HOG Feature Information",
        f"Total Cells: {summary.cell_count}",
        f"Cell Size: {summary.cell_size}x{summary.cell_size} pixels",
        f"Orientation Bins: {summary.bins}",
        f"Feature Vector Length: {summary.vector_length}",
        f"Total Gradient Magnitude: {summary.total_magnitude:.2f}",
        f"Average Magnitude per Cell: {summary.avg_magnitude_per_cell:.2f}",
    ]


def log_feature_info(summary: HogSummary) -> None:
    """
    Log the feature information block.

    Args:
        summary: HogSummary of the last extraction
    """
    lines = format_feature_info(summary)
    logger.info("=" * 50)
    for line in lines:
        logger.info(line)
    logger.info("=" * 50)
