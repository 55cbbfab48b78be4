import numpy as np
import pytest

from hogscope.models.image import Image


def rgba(gray: np.ndarray) -> np.ndarray:
    """(H, W) gray levels → opaque (H, W, 4) uint8 RGBA."""
    gray = np.asarray(gray, dtype=np.uint8)
    alpha = np.full(gray.shape, 255, dtype=np.uint8)
    return np.dstack([gray, gray, gray, alpha])


@pytest.fixture
def black_image():
    return Image(pixels=rgba(np.zeros((4, 4))))


@pytest.fixture
def split_image():
    """4x4: black left half, white right half."""
    gray = np.zeros((4, 4))
    gray[:, 2:] = 255
    return Image(pixels=rgba(gray))


@pytest.fixture
def random_image():
    rng = np.random.default_rng(1234)
    pixels = rng.integers(0, 256, size=(37, 53, 4), dtype=np.uint8)
    return Image(pixels=pixels)
