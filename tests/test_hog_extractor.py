import logging
import numpy as np
import pytest

from hogscope.models.errors import InvalidParameterError
from hogscope.models.image import Image
from hogscope.pipeline.hog_extractor import extract_hog_features, format_feature_info, log_feature_info
from hogscope.services.image_service import ImageService

from conftest import rgba


def test_extract_reports_descriptor_and_overlay(split_image):
    report = extract_hog_features(split_image, 2, 4)

    assert report.image is split_image
    assert report.overlay.shape == (4, 4, 3)
    assert report.result.summary.cell_count == 4
    assert report.result.summary.total_magnitude == pytest.approx(4 * 255)


def test_extract_computes_on_display_scaled_pixels():
    gray = np.zeros((40, 80))
    gray[:, 40:] = 255
    report = extract_hog_features(Image(pixels=rgba(gray)), 4, 9, max_width=40)

    assert (report.image.width, report.image.height) == (40, 20)
    assert report.overlay.shape == (20, 40, 3)
    assert report.result.summary.cell_count == 10 * 5


def test_extract_rejects_bad_parameters_before_work(split_image):
    with pytest.raises(InvalidParameterError):
        extract_hog_features(split_image, 0, 4)


def test_feature_info_lines(split_image):
    summary = extract_hog_features(split_image, 2, 4).result.summary
    lines = format_feature_info(summary)

    assert lines[0] == "HOG Feature Information"
    assert "Total Cells: 4" in lines
    assert "Cell Size: 2x2 pixels" in lines
    assert "Orientation Bins: 4" in lines
    assert "Feature Vector Length: 16" in lines
    assert "Total Gradient Magnitude: 1020.00" in lines
    assert "Average Magnitude per Cell: 255.00" in lines


def test_log_feature_info(caplog, black_image):
    summary = extract_hog_features(black_image, 2, 4).result.summary
    with caplog.at_level(logging.INFO, logger="hogscope.pipeline.hog_extractor"):
        log_feature_info(summary)

    assert "Average Magnitude per Cell: 0.00" in caplog.text


def test_bad_parameters_rejected_before_scaling():
    image_service = ImageService()
    scaled = []
    original_fit = image_service.fit_to_width
    image_service.fit_to_width = lambda img, max_width=None: scaled.append(img) or original_fit(img, max_width)
    wide = Image(pixels=np.zeros((10, 1000, 4), dtype=np.uint8))

    with pytest.raises(InvalidParameterError):
        extract_hog_features(wide, 4, 0, image_service=image_service)
    assert scaled == []


@pytest.mark.parametrize("max_width", [0, -5])
def test_non_positive_max_width_rejected(split_image, max_width):
    with pytest.raises(InvalidParameterError):
        extract_hog_features(split_image, 2, 4, max_width=max_width)
