"""Mask to ROI polygon pipeline."""

from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from datetime import datetime
from itertools import chain
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple
import logging
import time

import numpy as np
from scipy import ndimage

from .config import RoiOptions, resolve_options, load_roi_parameters
from .morphology import (
    MIN_REGION_AREA,
    boundary_mask,
    fill_holes,
    label_regions,
    remove_small_objects,
)
from .tour import boundary_points, sort_boundary_points
from .vertices import decimate_vertices, round_vertices

logger = logging.getLogger(__name__)

TRUNCATION_WARNING = (
    "More regions exist within the mask than are requested. "
    "Truncation of output may occur."
)


@dataclass
class RoiResult:
    """Polygons (and optionally perimeter masks) for each processed region."""
    polygons: List[np.ndarray]
    options: RoiOptions
    num_regions_found: int
    perimeters: Optional[List[np.ndarray]] = None
    warnings: List[str] = field(default_factory=list)

    @property
    def missing_regions(self) -> int:
        """Number of trailing placeholder slots requested beyond the regions found."""
        return max(0, len(self.polygons) - self.num_regions_found)


def validate_mask(mask: Any) -> np.ndarray:
    """Reject anything that is not a non-empty 2D boolean array."""
    if not isinstance(mask, np.ndarray):
        raise TypeError(f"mask must be a numpy array, got {type(mask).__name__}")
    if mask.dtype != bool:
        raise TypeError(f"mask must have a boolean dtype, got {mask.dtype}")
    if mask.ndim != 2:
        raise ValueError(f"mask must be 2D, got {mask.ndim}D array of shape {mask.shape}")
    if mask.size == 0:
        raise ValueError(f"mask must be non-empty, got shape {mask.shape}")
    return mask


def _trace_region(
    labels: np.ndarray,
    index: int,
    region_slice: Optional[Tuple[slice, slice]],
    options: RoiOptions,
    return_perimeter: bool
) -> Tuple[np.ndarray, Optional[np.ndarray]]:
    """Boundary, tour and decimation for one labelled region."""
    if region_slice is None:
        # Label does not exist; yield an empty placeholder
        perimeter = np.zeros(labels.shape, dtype=bool) if return_perimeter else None
        return np.empty((0, 2), dtype=float), perimeter

    rows, cols = region_slice
    region = labels[region_slice] == index
    edges = boundary_mask(region, connectivity=options.connectivity)

    points = boundary_points(edges) + np.array([cols.start, rows.start])
    roi = sort_boundary_points(points)
    roi = decimate_vertices(roi, options.scale_num_vertices)
    logger.debug("_trace_region: region %d -> %d boundary px, %d vertices",
                 index, len(points), len(roi))

    perimeter = None
    if return_perimeter:
        perimeter = np.zeros(labels.shape, dtype=bool)
        perimeter[region_slice] = edges
    return roi, perimeter


def extract_region_polygons(
    mask: np.ndarray,
    options: Optional[RoiOptions] = None,
    return_perimeters: bool = False,
    max_workers: Optional[int] = None
) -> RoiResult:
    """
    Convert every region of a validated mask into an ordered polygon.

    Steps: optional hole filling, removal of components under 3 px, labeling,
    then per region: boundary extraction, greedy tour, decimation. Rounding
    is applied last when requested.

    With num_rois == 0 all regions are returned. Otherwise exactly num_rois
    polygons are returned: extra regions are dropped with a warning, and
    slots beyond the regions found are empty (0, 2) arrays.

    Args:
        mask: (H, W) bool array (not modified)
        options: Resolved options (defaults if None)
        return_perimeters: Also return a boundary mask per region
        max_workers: Trace regions on a thread pool of this size (None = sequential)

    Returns:
        RoiResult with polygons in label order
    """
    if options is None:
        options = RoiOptions()

    work = np.array(mask, dtype=bool, copy=True)
    if options.fill_holes:
        work = fill_holes(work)

    work = remove_small_objects(work, min_area=MIN_REGION_AREA, connectivity=options.connectivity)
    labels, num_labels = label_regions(work, connectivity=options.connectivity)
    logger.info(f"Found {num_labels} region(s) at connectivity {options.connectivity}")

    warnings: List[str] = []
    if options.num_rois == 0:
        num_out = num_labels
    else:
        num_out = options.num_rois
        if num_labels > num_out:
            logger.warning(f"{TRUNCATION_WARNING} ({num_labels} found, {num_out} requested)")
            warnings.append(TRUNCATION_WARNING)
        elif num_labels < num_out:
            logger.info(f"Requested {num_out} ROI(s) but only {num_labels} exist; "
                        f"{num_out - num_labels} slot(s) will be empty")

    # find_objects returns None for labels that do not exist
    slices = ndimage.find_objects(labels, max_label=num_out) if num_out else []
    tasks = [(labels, i, slices[i - 1], options, return_perimeters) for i in range(1, num_out + 1)]

    if max_workers and max_workers > 1 and len(tasks) > 1:
        with ThreadPoolExecutor(max_workers=max_workers) as executor:
            traced = list(executor.map(lambda args: _trace_region(*args), tasks))
    else:
        traced = [_trace_region(*args) for args in tasks]

    polygons = [roi for roi, _ in traced]
    if options.round_output:
        polygons = [round_vertices(roi) for roi in polygons]

    perimeters = [perim for _, perim in traced] if return_perimeters else None
    return RoiResult(
        polygons=polygons,
        options=options,
        num_regions_found=num_labels,
        perimeters=perimeters,
        warnings=warnings,
    )


def mask_to_roi(
    mask: np.ndarray,
    *name_value_pairs: Any,
    return_perimeters: bool = False,
    max_workers: Optional[int] = None,
    **overrides: Any
) -> RoiResult:
    """
    Convert a binary mask into ROI polygons, one per connected region.

    Example:
        result = mask_to_roi(mask, "NumROIs", 2, Connectivity=4)
        for roi in result.polygons:
            ax.add_patch(matplotlib.patches.Polygon(roi, closed=True))

    Args:
        mask: (H, W) bool array, foreground True
        *name_value_pairs: Flat option pairs, e.g. "NumROIs", 2
        return_perimeters: Also compute the edge mask of each region
        max_workers: Optional thread pool size for per-region work
        **overrides: Options by name (NumROIs=2 or num_rois=2)

    Returns:
        RoiResult; polygons are (n, 2) float arrays with x in column 0, y in column 1
    """
    validate_mask(mask)
    options, option_warnings = resolve_options(*name_value_pairs, **overrides)
    result = extract_region_polygons(
        mask,
        options,
        return_perimeters=return_perimeters,
        max_workers=max_workers,
    )
    result.warnings = option_warnings + result.warnings
    return result


def run_pipeline(
    mask_path: str,
    output_dir: Optional[str] = None,
    threshold: int = 0,
    return_perimeters: bool = False,
    export_overlay: bool = True,
    max_workers: Optional[int] = None,
    **overrides: Any
) -> Dict[str, Any]:
    """
    Run the full pipeline on a mask image: load → convert → export.

    Options are taken from FILENAME_param.txt next to the mask (if present),
    then from overrides. Outputs are written to output_dir (default: the
    mask's directory) as <stem>_rois.json, <stem>_rois.csv, <stem>_rois.svg
    and, if export_overlay, <stem>_overlay.png. A log file
    <stem>_<timestamp>.log captures the run.

    Returns:
        Dictionary with:
        - result: RoiResult
        - mask_result: Mask loader result
        - json_path, csv_path, svg_path, overlay_image, log_file: Output paths
    """
    from .mask_loader import load_mask
    from .export_ir import build_roi_ir, export_roi_ir
    from .export_rois import export_vertices_csv, export_rois_svg

    mask_file_path = Path(mask_path)
    stem = mask_file_path.stem
    out_dir = Path(output_dir) if output_dir else mask_file_path.parent
    out_dir.mkdir(parents=True, exist_ok=True)
    timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
    log_file_path = out_dir / f"{stem}_{timestamp}.log"

    file_handler = logging.FileHandler(log_file_path, mode='w', encoding='utf-8')
    file_handler.setLevel(logging.DEBUG)
    file_handler.setFormatter(logging.Formatter('%(asctime)s - %(levelname)s - %(name)s - %(message)s'))
    root_logger = logging.getLogger()
    original_level = root_logger.level if root_logger.level else logging.WARNING
    root_logger.setLevel(logging.INFO)
    root_logger.addHandler(file_handler)

    try:
        pipeline_start_time = time.time()
        logger.info("=" * 70)
        logger.info(f"Pipeline started for: {mask_path}")
        logger.info(f"Log file: {log_file_path}")
        logger.info("=" * 70)

        params = load_roi_parameters(mask_path)
        params.update(overrides)

        step_start = time.time()
        mask_result = load_mask(mask_path, threshold=threshold)
        logger.info(f"Load: completed in {time.time() - step_start:.2f}s")

        step_start = time.time()
        try:
            result = mask_to_roi(
                mask_result['mask'],
                *chain.from_iterable(params.items()),
                return_perimeters=return_perimeters,
                max_workers=max_workers
            )
        except Exception as e:
            logger.error(f"Convert: failed after {time.time() - step_start:.2f}s: {e}", exc_info=True)
            raise
        logger.info(f"Convert: {len(result.polygons)} ROI(s) in {time.time() - step_start:.2f}s")

        ir = build_roi_ir(result, provenance=mask_result)
        json_path = out_dir / f"{stem}_rois.json"
        csv_path = out_dir / f"{stem}_rois.csv"
        svg_path = out_dir / f"{stem}_rois.svg"
        export_roi_ir(ir, str(json_path))
        export_vertices_csv(result.polygons, str(csv_path))
        height, width = mask_result['shape']
        export_rois_svg(result.polygons, str(svg_path), size=(width, height))

        overlay_image_path = None
        if export_overlay:
            from .export_overlay import export_overlay_png
            overlay_image_path = out_dir / f"{stem}_overlay.png"
            try:
                export_overlay_png(mask_result['mask'], result.polygons, str(overlay_image_path))
            except (OSError, ValueError) as e:
                logger.warning(f"Failed to generate overlay image: {e}", exc_info=True)
                overlay_image_path = None

        logger.info("=" * 70)
        logger.info(f"Total pipeline time: {time.time() - pipeline_start_time:.2f}s")
        logger.info("=" * 70)
    finally:
        root_logger.removeHandler(file_handler)
        root_logger.setLevel(original_level)
        file_handler.close()

    return {
        'result': result,
        'mask_result': mask_result,
        'json_path': str(json_path),
        'csv_path': str(csv_path),
        'svg_path': str(svg_path),
        'overlay_image': str(overlay_image_path) if overlay_image_path else None,
        'log_file': str(log_file_path),
    }
