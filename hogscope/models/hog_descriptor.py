from __future__ import annotations
from dataclasses import dataclass, field
from typing import List, Tuple
import numpy as np


@dataclass
class HogCell:
    cx: int                     # cell column (zero-based)
    cy: int                     # cell row (zero-based)
    histogram: np.ndarray       # shape: (bins,), float64, magnitude-weighted

    def to_dict(self) -> dict:
        return {
            "cx": self.cx,
            "cy": self.cy,
            "histogram": [float(v) for v in self.histogram],
        }


@dataclass
class HogDescriptor:
    """
    Ordered per-cell orientation histograms for one image.

    Cells are stored row-major (cy outer, cx inner). That order is the
    layout of the flattened feature vector.
    """
    width: int
    height: int
    cell_size: int
    bins: int
    cells: List[HogCell] = field(default_factory=list)

    @property
    def cells_x(self) -> int:
        return self.width // self.cell_size

    @property
    def cells_y(self) -> int:
        return self.height // self.cell_size

    def __len__(self) -> int:
        return len(self.cells)

    def __iter__(self):
        return iter(self.cells)

    def feature_vector(self) -> np.ndarray:
        """Concatenate all histograms in row-major cell order → (cells * bins,)."""
        if not self.cells:
            return np.zeros(0, dtype=np.float64)
        return np.concatenate([cell.histogram for cell in self.cells])

    def as_grid(self) -> np.ndarray:
        """Same data shaped (cells_y, cells_x, bins)."""
        return self.feature_vector().reshape(self.cells_y, self.cells_x, self.bins)

    def to_dict(self) -> List[dict]:
        return [cell.to_dict() for cell in self.cells]


@dataclass(frozen=True)
class HogSummary:
    """
    Read-only aggregate over a descriptor, shown as the feature-info report.
    """
    cell_count: int
    vector_length: int           # cell_count * bins
    total_magnitude: float
    avg_magnitude_per_cell: float  # 0.0 when there are no cells
    cell_size: int
    bins: int

    def to_dict(self) -> dict:
        return {
            "cell_count": self.cell_count,
            "vector_length": self.vector_length,
            "total_magnitude": self.total_magnitude,
            "avg_magnitude_per_cell": self.avg_magnitude_per_cell,
            "cell_size": self.cell_size,
            "bins": self.bins,
        }


@dataclass
class HogResult:
    descriptor: HogDescriptor
    summary: HogSummary

    def to_dict(self) -> dict:
        return {
            "descriptor": self.descriptor.to_dict(),
            "summary": self.summary.to_dict(),
        }


@dataclass(frozen=True)
class OverlaySegment:
    cx: int
    cy: int
    bin_index: int
    start: Tuple[float, float]   # (x, y) in pixel space
    end: Tuple[float, float]
