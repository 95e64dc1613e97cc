"""Morphology primitives: hole filling, small-object removal, labeling, edges."""

import numpy as np
from scipy import ndimage
from skimage import measure, morphology
from skimage.segmentation import find_boundaries
from typing import Tuple
import logging

logger = logging.getLogger(__name__)

# Components smaller than this never reach the tour builder
MIN_REGION_AREA = 3


def connectivity_to_rank(connectivity: int) -> int:
    """Map pixel connectivity (4 or 8) to the scikit-image rank (1 or 2)."""
    if connectivity == 4:
        return 1
    if connectivity == 8:
        return 2
    raise ValueError(f"Connectivity must be 4 or 8, got {connectivity!r}")


def fill_holes(mask: np.ndarray) -> np.ndarray:
    """Return a copy of mask with enclosed background regions filled."""
    return ndimage.binary_fill_holes(mask)


def label_regions(mask: np.ndarray, connectivity: int = 8) -> Tuple[np.ndarray, int]:
    """
    Label connected foreground components.

    Labels are assigned 1..count in raster-scan order of first occurrence,
    0 is background.

    Args:
        mask: (H, W) bool array
        connectivity: 4 or 8

    Returns:
        Tuple of (labels, count)
    """
    labels, count = measure.label(
        mask, connectivity=connectivity_to_rank(connectivity), return_num=True
    )
    logger.debug("label_regions: %d region(s) at connectivity %d", count, connectivity)
    return labels, int(count)


def remove_small_objects(
    mask: np.ndarray,
    min_area: int = MIN_REGION_AREA,
    connectivity: int = 8
) -> np.ndarray:
    """
    Zero out connected components with fewer than min_area pixels.

    Args:
        mask: (H, W) bool array
        min_area: Smallest component size (in pixels) that is kept
        connectivity: 4 or 8

    Returns:
        New (H, W) bool array
    """
    mask = np.asarray(mask, dtype=bool)
    if not mask.any():
        return np.zeros_like(mask)

    kept = morphology.remove_small_objects(
        mask, min_size=min_area, connectivity=connectivity_to_rank(connectivity)
    )
    removed = int(np.count_nonzero(mask)) - int(np.count_nonzero(kept))
    if removed:
        logger.debug("remove_small_objects: dropped %d px in components below %d px", removed, min_area)
    return kept


def boundary_mask(region_mask: np.ndarray, connectivity: int = 8) -> np.ndarray:
    """
    Edge pixels of a single region.

    A foreground pixel is on the boundary if it touches background (or the
    image edge) under the given connectivity.

    Args:
        region_mask: (H, W) bool array holding one region
        connectivity: 4 or 8

    Returns:
        (H, W) bool array, True on boundary pixels
    """
    region_mask = np.asarray(region_mask, dtype=bool)
    # Pad so pixels on the image border see background
    padded = np.pad(region_mask, 1, mode='constant', constant_values=False)
    edges = find_boundaries(
        padded, connectivity=connectivity_to_rank(connectivity), mode='inner'
    )
    return edges[1:-1, 1:-1] & region_mask
