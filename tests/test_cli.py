import json
import numpy as np

from hogscope.cli.extract_hog import main
from hogscope.services.image_service import ImageService

from conftest import rgba


def write_split_png(path):
    gray = np.zeros((16, 16))
    gray[:, 8:] = 255
    return ImageService().save_pixels(rgba(gray), path)


def test_cli_writes_overlay_and_json(tmp_path):
    src = write_split_png(tmp_path / "split.png")
    overlay = tmp_path / "out" / "overlay.png"
    out_json = tmp_path / "out" / "hog.json"

    code = main([str(src), "--cell-size", "4", "--bins", "6",
                 "--overlay", str(overlay), "--json", str(out_json)])

    assert code == 0
    assert overlay.exists()
    data = json.loads(out_json.read_text(encoding="utf-8"))
    assert data["summary"]["cell_count"] == 16
    assert data["summary"]["vector_length"] == 96
    assert data["image"] == {"width": 16, "height": 16}
    assert len(data["descriptor"]) == 16
    assert ImageService().load(overlay).pixels.shape == (16, 16, 4)


def test_cli_invalid_parameters(tmp_path):
    src = write_split_png(tmp_path / "split.png")
    assert main([str(src), "--bins", "0"]) == 2


def test_cli_missing_image(tmp_path):
    assert main([str(tmp_path / "missing.png")]) == 1


def test_cli_rejects_non_positive_max_width(tmp_path):
    src = write_split_png(tmp_path / "split.png")
    assert main([str(src), "--max-width", "-5"]) == 2
    assert main([str(src), "--max-width", "0"]) == 2
