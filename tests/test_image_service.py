import base64
import numpy as np
import cv2
import pytest

from hogscope.models.errors import InvalidParameterError
from hogscope.models.image import Image
from hogscope.repositories.image_repository import ImageRepository
from hogscope.services.image_service import ImageService


@pytest.fixture
def service():
    return ImageService()


def test_to_rgba_from_bgr_keeps_channel_order():
    bgr = np.zeros((2, 2, 3), dtype=np.uint8)
    bgr[:, :, 2] = 200                       # red in BGR
    rgba = ImageRepository.to_rgba(bgr)

    assert rgba.shape == (2, 2, 4)
    assert rgba[0, 0].tolist() == [200, 0, 0, 255]


def test_to_rgba_from_gray():
    gray = np.full((3, 2), 77, dtype=np.uint8)
    rgba = ImageRepository.to_rgba(gray)

    assert rgba.shape == (3, 2, 4)
    assert rgba[1, 1].tolist() == [77, 77, 77, 255]


def test_decode_png_upload(service):
    pixels = np.zeros((3, 5, 4), dtype=np.uint8)
    pixels[..., 1] = 180
    pixels[..., 3] = 128
    img = service.decode(service.to_png_bytes(pixels))

    assert (img.width, img.height) == (5, 3)
    assert np.array_equal(img.pixels, pixels)


def test_decode_garbage_raises(service):
    with pytest.raises(ValueError):
        service.decode(b"definitely not an image")


def test_load_missing_file(service, tmp_path):
    with pytest.raises(FileNotFoundError):
        service.load(tmp_path / "nope.png")


def test_save_then_load(service, tmp_path):
    pixels = np.random.default_rng(5).integers(0, 256, size=(4, 6, 3), dtype=np.uint8)
    path = service.save_pixels(pixels, tmp_path / "sub" / "out.png")
    img = service.load(path)

    assert img.path == path
    assert np.array_equal(img.pixels[:, :, :3], pixels)
    assert np.all(img.pixels[:, :, 3] == 255)


def test_fit_to_width_downscales_keeping_aspect(service):
    img = Image(pixels=np.zeros((200, 1000, 4), dtype=np.uint8))
    scaled = service.fit_to_width(img, 500)

    assert (scaled.width, scaled.height) == (500, 100)
    assert scaled.pixels.shape[2] == 4


def test_fit_to_width_never_upscales(service):
    img = Image(pixels=np.zeros((10, 20, 4), dtype=np.uint8))
    assert service.fit_to_width(img, 500) is img


def test_fit_to_width_truncates_height(service):
    img = Image(pixels=np.zeros((333, 1000, 4), dtype=np.uint8))
    assert service.fit_to_width(img, 500).height == 166


def test_data_url_is_png(service):
    url = service.to_data_url(np.zeros((2, 2, 3), dtype=np.uint8))
    prefix = "data:image/png;base64,"

    assert url.startswith(prefix)
    raw = base64.b64decode(url[len(prefix):])
    assert cv2.imdecode(np.frombuffer(raw, np.uint8), cv2.IMREAD_UNCHANGED).shape == (2, 2, 3)


@pytest.mark.parametrize("max_width", [0, -5, 2.5, True])
def test_fit_to_width_rejects_bad_width(service, max_width):
    img = Image(pixels=np.zeros((10, 20, 4), dtype=np.uint8))
    with pytest.raises(InvalidParameterError):
        service.fit_to_width(img, max_width)


def test_sixteen_bit_uses_fixed_scale():
    # 12-bit data in a 16-bit container must not be stretched to full range
    arr = np.full((2, 2), 4000, dtype=np.uint16)
    arr[0, 0] = 257 * 10
    rgba = ImageRepository.to_rgba(arr)

    assert rgba[0, 0, 0] == 10
    assert rgba[1, 1, 0] == round(4000 / 257)


def test_unsupported_dtype_raises():
    with pytest.raises(ValueError):
        ImageRepository.to_rgba(np.zeros((2, 2, 3), dtype=np.float32))
