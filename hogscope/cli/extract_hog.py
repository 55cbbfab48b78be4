import os
import sys
import json
import logging
import argparse
from pathlib import Path
from dotenv import load_dotenv

# Load environment variables first
load_dotenv()

from ..models.errors import InvalidParameterError
from ..pipeline.hog_extractor import extract_hog_features, log_feature_info
from ..services.image_service import ImageService

logger = logging.getLogger(__name__)

DEFAULT_CELL_SIZE = int(os.getenv("HOG_CELL_SIZE", "8"))
DEFAULT_BINS = int(os.getenv("HOG_BINS", "9"))


def build_parser() -> argparse.ArgumentParser:
    ap = argparse.ArgumentParser(
        prog="hogscope-extract",
        description="Compute per-cell HOG histograms for one image and render the overlay.",
    )
    ap.add_argument("image", help="path to the input image")
    ap.add_argument("--cell-size", type=int, default=DEFAULT_CELL_SIZE,
                    help=f"cell side in pixels (default {DEFAULT_CELL_SIZE})")
    ap.add_argument("--bins", type=int, default=DEFAULT_BINS,
                    help=f"orientation bins over 0-180 degrees (default {DEFAULT_BINS})")
    ap.add_argument("--max-width", type=int, default=None,
                    help="downscale wider images to this width before computing")
    ap.add_argument("--overlay", type=Path, default=None,
                    help="write the rendered overlay PNG here")
    ap.add_argument("--json", type=Path, default=None, dest="json_path",
                    help="write descriptor + summary JSON here")
    ap.add_argument("--log-level", default=os.getenv("HOG_LOG_LEVEL", "INFO"),
                    help="logging level (default INFO)")
    return ap


def main(argv=None) -> int:
    args = build_parser().parse_args(argv)

    # --- Centralized Logging Configuration ---
    logging.basicConfig(
        level=getattr(logging, str(args.log_level).upper(), logging.INFO),
        format='%(asctime)s - %(name)-25s - %(levelname)-8s - %(message)s',
        datefmt='%H:%M:%S'
    )

    image_service = ImageService()
    try:
        img = image_service.load(args.image)
    except (FileNotFoundError, ValueError) as e:
        logger.error(str(e))
        return 1

    try:
        report = extract_hog_features(img, args.cell_size, args.bins,
                                      image_service=image_service,
                                      max_width=args.max_width)
    except InvalidParameterError as e:
        logger.error(f"Invalid parameters: {e}")
        return 2

    log_feature_info(report.result.summary)

    if args.overlay is not None:
        out = image_service.save_pixels(report.overlay, args.overlay)
        logger.info(f"Overlay written to {out}")

    if args.json_path is not None:
        args.json_path.parent.mkdir(parents=True, exist_ok=True)
        payload = report.result.to_dict()
        payload["image"] = {"width": report.image.width, "height": report.image.height}
        args.json_path.write_text(json.dumps(payload, indent=2), encoding="utf-8")
        logger.info(f"Descriptor written to {args.json_path}")

    return 0


if __name__ == "__main__":
    sys.exit(main())
