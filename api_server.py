#!/usr/bin/env python3
"""
HOG Scope API Server
Upload an image, pick cell size and bin count, get back the per-cell
orientation histograms, summary statistics and the rendered overlay.
"""

import os
import logging
from dotenv import load_dotenv

# Load environment variables first
load_dotenv()

from flask import Flask, request, jsonify
from flask_cors import CORS
from werkzeug.utils import secure_filename

# --- Centralized Logging Configuration ---
logging.basicConfig(
    level=getattr(logging, os.getenv("HOG_LOG_LEVEL", "INFO").upper(), logging.INFO),
    format='%(asctime)s - %(name)-25s - %(levelname)-8s - %(message)s',
    datefmt='%H:%M:%S'
)

from hogscope.models.errors import InvalidParameterError
from hogscope.pipeline.hog_extractor import extract_hog_features, log_feature_info
from hogscope.services.hog_service import HogService
from hogscope.services.image_service import ImageService
from hogscope.services.overlay_service import OverlayService

app = Flask(__name__)
CORS(app)  # Enable CORS for frontend communication

# Configuration
ALLOWED_EXTENSIONS = set(os.getenv("ALLOWED_EXTENSIONS", "png,jpg,jpeg,gif,bmp,webp").split(","))
MAX_CONTENT_LENGTH = int(os.getenv("MAX_UPLOAD_SIZE_MB", "20")) * 1024 * 1024
DEFAULT_CELL_SIZE = int(os.getenv("HOG_CELL_SIZE", "8"))
DEFAULT_BINS = int(os.getenv("HOG_BINS", "9"))
MAX_CELL_SIZE = int(os.getenv("HOG_MAX_CELL_SIZE", "64"))
MAX_BINS = int(os.getenv("HOG_MAX_BINS", "36"))

app.config['MAX_CONTENT_LENGTH'] = MAX_CONTENT_LENGTH

# Initialize services
image_service = ImageService()
hog_service = HogService()
overlay_service = OverlayService()

logger = logging.getLogger(__name__)


def allowed_file(filename: str) -> bool:
    """Check if file extension is allowed."""
    return '.' in filename and filename.rsplit('.', 1)[1].lower() in ALLOWED_EXTENSIONS


def parse_int_field(name: str, default: int, maximum: int) -> int:
    """Read an integer form field; non-integers and values above *maximum* become InvalidParameterError."""
    raw = request.form.get(name)
    if raw is None or raw.strip() == '':
        return default
    try:
        value = int(raw)
    except ValueError:
        raise InvalidParameterError(f"{name} must be an integer, got {raw!r}")
    if value > maximum:
        raise InvalidParameterError(f"{name} must be <= {maximum}, got {value}")
    return value


@app.route('/api/hog', methods=['POST'])
def compute_hog():
    """Compute HOG features for one uploaded image."""
    if 'image' not in request.files:
        return jsonify({'success': False, 'message': 'No image provided'}), 400

    file = request.files['image']
    if file.filename == '':
        return jsonify({'success': False, 'message': 'No file selected'}), 400

    filename = secure_filename(file.filename)
    if not allowed_file(filename):
        return jsonify({'success': False, 'message': f'Unsupported file type: {filename}'}), 400

    try:
        cell_size = parse_int_field('cell_size', DEFAULT_CELL_SIZE, MAX_CELL_SIZE)
        bins = parse_int_field('bins', DEFAULT_BINS, MAX_BINS)
        image = image_service.decode(file.read())
        logger.info(f"Image uploaded: {filename} {image.width}x{image.height}")

        report = extract_hog_features(
            image, cell_size, bins,
            hog_service=hog_service,
            overlay_service=overlay_service,
            image_service=image_service,
        )
    except InvalidParameterError as e:
        logger.warning(f"Rejected parameters: {e}")
        return jsonify({'success': False, 'message': str(e)}), 400
    except ValueError as e:
        logger.warning(f"Could not decode {filename}: {e}")
        return jsonify({'success': False, 'message': 'Could not decode image'}), 400

    log_feature_info(report.result.summary)
    payload = report.result.to_dict()
    return jsonify({
        'success': True,
        'image': {'width': report.image.width, 'height': report.image.height},
        'summary': payload['summary'],
        'descriptor': payload['descriptor'],
        'overlay': image_service.to_data_url(report.overlay),
    })


@app.route('/api/health', methods=['GET'])
def health_check():
    """Health check endpoint."""
    return jsonify({
        'status': 'healthy',
        'message': 'HOG Scope API is running',
    })


@app.errorhandler(413)
def too_large(e):
    """Handle file too large error."""
    return jsonify({'success': False,
                    'message': f'File too large. Maximum size is {MAX_CONTENT_LENGTH // (1024 * 1024)}MB.'}), 413


@app.errorhandler(500)
def internal_error(e):
    """Handle internal server error."""
    logger.error(f"Internal server error: {e}")
    return jsonify({'success': False, 'message': 'Internal server error'}), 500


if __name__ == '__main__':
    host = os.getenv("API_HOST", "127.0.0.1")
    port = int(os.getenv("API_PORT", "5000"))
    logger.info(f"Starting HOG Scope API on {host}:{port}")
    logger.info(f"Max upload size: {MAX_CONTENT_LENGTH // (1024 * 1024)}MB")
    logger.info("Endpoints: POST /api/hog, GET /api/health")
    app.run(host=host, port=port, debug=False)
