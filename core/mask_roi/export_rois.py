"""Export ROI vertices as CSV and SVG."""

from typing import List, Optional, Tuple
import csv
import logging

import numpy as np
from svgwrite import Drawing

logger = logging.getLogger(__name__)

ROI_STROKES = ['#e6194b', '#3cb44b', '#0082c8', '#f58231', '#911eb4', '#46f0f0']


def export_vertices_csv(polygons: List[np.ndarray], output_path: str) -> None:
    """
    Export polygon vertices to CSV.

    Columns:
    - roi_id (R1, R2, ... in region order)
    - vertex_index (0-based, tour order)
    - x, y

    Empty placeholder polygons contribute no rows.
    """
    logger.info("Exporting vertices CSV to: %s", output_path)

    rows = 0
    with open(output_path, 'w', newline='') as f:
        writer = csv.writer(f)
        writer.writerow(['roi_id', 'vertex_index', 'x', 'y'])
        for i, poly in enumerate(polygons, 1):
            for j, (x, y) in enumerate(np.asarray(poly)):
                writer.writerow([f"R{i}", j, f"{x:g}", f"{y:g}"])
                rows += 1

    logger.info("Vertices CSV exported: %d vertices", rows)


def export_rois_svg(
    polygons: List[np.ndarray],
    output_path: str,
    size: Optional[Tuple[int, int]] = None,
    stroke_width: float = 0.5
) -> int:
    """
    Export each non-empty polygon as a closed SVG <polygon>.

    Coordinates are pixel centres, so the drawing overlays the source image
    when placed at 0.5 px offset; size is (width, height) of that image.

    Args:
        polygons: List of (n, 2) arrays, x in column 0
        output_path: Output .svg path
        size: Canvas (width, height) in pixels; fitted to the polygons if None
        stroke_width: Outline width in pixels

    Returns:
        Number of polygons written
    """
    logger.info("Exporting ROI SVG to: %s", output_path)

    non_empty = [np.asarray(p, dtype=float) for p in polygons if len(p)]
    if size is None:
        if non_empty:
            all_pts = np.vstack(non_empty)
            size = (int(all_pts[:, 0].max()) + 1, int(all_pts[:, 1].max()) + 1)
        else:
            size = (1, 1)

    dwg = Drawing(output_path, size=size, viewBox=f"0 0 {size[0]} {size[1]}")
    written = 0
    for i, poly in enumerate(polygons, 1):
        pts = np.asarray(poly, dtype=float)
        if len(pts) == 0:
            continue
        stroke = ROI_STROKES[(i - 1) % len(ROI_STROKES)]
        dwg.add(dwg.polygon(
            points=[(x + 0.5, y + 0.5) for x, y in pts],
            id=f"R{i}",
            fill='none',
            stroke=stroke,
            stroke_width=stroke_width,
        ))
        written += 1

    dwg.save()
    logger.info("ROI SVG exported: %d polygons", written)
    return written
