import math
import numpy as np

from ..models.hog_descriptor import HogCell, HogDescriptor


class HistogramRepository:
    """
    Per-cell, magnitude-weighted orientation histograms.
    Unsigned orientation: opposite gradients share a bin.
    """

    @staticmethod
    def fold_angles(direction: np.ndarray) -> np.ndarray:
        """Map raw atan2 angles onto [0, π). np.mod keeps the divisor's sign."""
        return np.mod(direction + math.pi, math.pi)

    @staticmethod
    def bin_indices(folded: np.ndarray, bins: int) -> np.ndarray:
        bin_width = math.pi / bins
        # an angle rounding up to exactly π would land on `bins`
        return np.floor(folded / bin_width).astype(np.int64) % bins

    def build_descriptor(
        self,
        magnitude: np.ndarray,
        direction: np.ndarray,
        cell_size: int,
        bins: int,
    ) -> HogDescriptor:
        """
        Args:
            magnitude, direction: (H, W) gradient grids.
            cell_size: side of a square cell in pixels (validated by caller).
            bins: orientation bins over [0, π) (validated by caller).

        Returns:
            HogDescriptor with cells in row-major order. Remainder pixels past
            the last full cell are ignored; zero full cells → empty descriptor.
        """
        height, width = magnitude.shape
        descriptor = HogDescriptor(width=width, height=height, cell_size=cell_size, bins=bins)
        cells_x, cells_y = descriptor.cells_x, descriptor.cells_y
        if cells_x == 0 or cells_y == 0:
            return descriptor

        # only the floor-divided region; px < W and py < H by construction
        span_h, span_w = cells_y * cell_size, cells_x * cell_size
        mag = magnitude[:span_h, :span_w]
        idx = self.bin_indices(self.fold_angles(direction[:span_h, :span_w]), bins)
        if idx.size and (idx.min() < 0 or idx.max() >= bins):
            raise RuntimeError(f"Orientation bin index outside [0, {bins}): "
                               f"[{idx.min()}, {idx.max()}]")

        # (cy, y, cx, x) → (cy, cx, y*x) so each cell's pixels are contiguous
        cell_mag = mag.reshape(cells_y, cell_size, cells_x, cell_size).transpose(0, 2, 1, 3)
        cell_idx = idx.reshape(cells_y, cell_size, cells_x, cell_size).transpose(0, 2, 1, 3)
        cell_mag = cell_mag.reshape(cells_y * cells_x, cell_size * cell_size)
        cell_idx = cell_idx.reshape(cells_y * cells_x, cell_size * cell_size)

        for n in range(cells_y * cells_x):
            cy, cx = divmod(n, cells_x)
            histogram = np.bincount(cell_idx[n], weights=cell_mag[n], minlength=bins)
            descriptor.cells.append(HogCell(cx=cx, cy=cy, histogram=histogram.astype(np.float64)))

        return descriptor
