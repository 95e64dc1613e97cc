"""Mask image import."""

import hashlib
import io
from datetime import datetime, timezone
from pathlib import Path

import numpy as np
from PIL import Image, UnidentifiedImageError
import logging

logger = logging.getLogger(__name__)


def image_to_mask(img: Image.Image, threshold: int = 0) -> np.ndarray:
    """Convert a PIL image to a boolean mask (grayscale value > threshold)."""
    if img.mode not in ('1', 'L'):
        img = img.convert('L')
    return np.asarray(img) > threshold


def _mask_result(mask: np.ndarray, filename: str, file_bytes: bytes) -> dict:
    return {
        'mask': mask,
        'shape': [int(mask.shape[0]), int(mask.shape[1])],
        'foreground_pixels': int(np.count_nonzero(mask)),
        'source_filename': filename,
        'source_sha256': hashlib.sha256(file_bytes).hexdigest(),
        'import_timestamp': datetime.now(timezone.utc).isoformat().replace('+00:00', 'Z'),
    }


def load_mask_bytes(data: bytes, filename: str = "mask.png", threshold: int = 0) -> dict:
    """
    Load a mask from encoded image bytes (PNG, TIFF, BMP, ...).

    Args:
        data: Encoded image file contents
        filename: Name recorded in the provenance
        threshold: Pixels with grayscale value above this are foreground

    Returns:
        Dictionary with:
        - mask: (H, W) bool array
        - shape: [H, W]
        - foreground_pixels: Number of True pixels
        - source_filename, source_sha256, import_timestamp: Provenance
    """
    try:
        with Image.open(io.BytesIO(data)) as img:
            mask = image_to_mask(img, threshold=threshold)
    except UnidentifiedImageError as e:
        logger.error(f"Failed to decode mask image {filename}: {e}")
        raise ValueError(f"Failed to decode mask image {filename}: {e}")

    if mask.ndim != 2:
        raise ValueError(f"Mask image {filename} is not single-channel (shape {mask.shape})")

    result = _mask_result(mask, filename, data)
    logger.info(
        f"Loaded mask {filename}: {result['shape'][0]}x{result['shape'][1]} px, "
        f"{result['foreground_pixels']} foreground"
    )
    return result


def load_mask(file_path: str, threshold: int = 0) -> dict:
    """Load a mask image from disk. See load_mask_bytes for the result layout."""
    path = Path(file_path)
    if not path.exists():
        raise FileNotFoundError(f"Mask file not found: {file_path}")

    logger.debug(f"Loading mask: {file_path}")
    with open(path, 'rb') as f:
        file_bytes = f.read()
    return load_mask_bytes(file_bytes, filename=path.name, threshold=threshold)
