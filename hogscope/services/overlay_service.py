from __future__ import annotations

from typing import List, Tuple
import math
import numpy as np
import cv2

from ..models.hog_descriptor import HogDescriptor, OverlaySegment
from ..models.image import Image


class OverlayService:
    """
    Draws each cell's histogram as undirected line segments over a faded
    copy of the source image.

    • Lengths are normalised per cell: the strongest bin reaches cell_size / 2.
    • Cells whose histogram is all zero are left blank.
    """

    _LINE_COLOR: Tuple[int, int, int] = (255, 0, 0)   # RGB red
    _LINE_THICKNESS = 1
    _MIN_LENGTH = 0.1
    _SHIFT = 4                                        # 1/16 px endpoint precision
    _PAGE_COLOR: Tuple[int, int, int] = (255, 255, 255)
    _BACKGROUND_ALPHA = 0.3

    # ─── Surface helpers ──────────────────────────────────────────
    def new_surface(self, width: int, height: int) -> np.ndarray:
        """Blank (H, W, 3) RGB page to draw on."""
        surface = np.empty((height, width, 3), dtype=np.uint8)
        surface[:] = self._PAGE_COLOR
        return surface

    def _composite_background(self, surface: np.ndarray, background: np.ndarray) -> None:
        """
        Source-over of the RGBA background at fixed opacity, in place.
        Background larger than the surface is clipped; smaller leaves the rest untouched.
        """
        h = min(surface.shape[0], background.shape[0])
        w = min(surface.shape[1], background.shape[1])
        bg = background[:h, :w]

        alpha = self._BACKGROUND_ALPHA * (bg[:, :, 3:4].astype(np.float64) / 255.0)
        dst = surface[:h, :w].astype(np.float64)
        out = bg[:, :, :3].astype(np.float64) * alpha + dst * (1.0 - alpha)
        surface[:h, :w] = np.clip(np.rint(out), 0, 255).astype(np.uint8)

    # ─── Geometry ─────────────────────────────────────────────────
    def plan_segments(self, descriptor: HogDescriptor) -> List[OverlaySegment]:
        """Pure part of the renderer: every segment that will be drawn, in cell order."""
        cell_size, bins = descriptor.cell_size, descriptor.bins
        half = cell_size / 2
        angle_step = math.pi / bins

        segments: List[OverlaySegment] = []
        for cell in descriptor.cells:
            max_val = float(cell.histogram.max()) if cell.histogram.size else 0.0
            if max_val == 0:
                continue

            center_x = cell.cx * cell_size + half
            center_y = cell.cy * cell_size + half
            for i in range(bins):
                length = (float(cell.histogram[i]) / max_val) * half
                if length <= self._MIN_LENGTH:
                    continue
                angle = i * angle_step
                dx = math.cos(angle) * length
                dy = math.sin(angle) * length
                segments.append(OverlaySegment(
                    cx=cell.cx,
                    cy=cell.cy,
                    bin_index=i,
                    start=(center_x - dx, center_y - dy),
                    end=(center_x + dx, center_y + dy),
                ))
        return segments

    def _to_fixed(self, point: Tuple[float, float]) -> Tuple[int, int]:
        scale = 1 << self._SHIFT
        return int(round(point[0] * scale)), int(round(point[1] * scale))

    # ─── Public API ───────────────────────────────────────────────
    def render_overlay(
            self,
            surface: np.ndarray,
            background: Image | np.ndarray | None,
            descriptor: HogDescriptor,
    ) -> None:
        """
        Draw onto *surface* in place: faded background first, then the
        histogram segments.
        """
        if background is not None:
            bg_pixels = background.pixels if isinstance(background, Image) else background
            self._composite_background(surface, bg_pixels)

        for seg in self.plan_segments(descriptor):
            cv2.line(surface, self._to_fixed(seg.start), self._to_fixed(seg.end),
                     self._LINE_COLOR, self._LINE_THICKNESS, cv2.LINE_AA, self._SHIFT)

    def render(self, descriptor: HogDescriptor, background: Image | np.ndarray | None = None) -> np.ndarray:
        """Fresh surface sized to the descriptor's image, rendered and returned."""
        surface = self.new_surface(descriptor.width, descriptor.height)
        self.render_overlay(surface, background, descriptor)
        return surface
