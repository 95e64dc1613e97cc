"""Polygon metrics for ROI outputs."""

from typing import Dict, Any, List
from shapely.geometry import LinearRing, Polygon
import numpy as np
import logging

logger = logging.getLogger(__name__)


def compute_perimeter(vertices: np.ndarray) -> float:
    """
    Length of the closed outline through the vertices.

    Args:
        vertices: (n, 2) array of x, y coordinates

    Returns:
        Sum of segment lengths including the closing segment
    """
    pts = np.asarray(vertices, dtype=float)
    if len(pts) < 2:
        return 0.0
    closed = np.vstack([pts, pts[:1]])
    seg = np.diff(closed, axis=0)
    return float(np.hypot(seg[:, 0], seg[:, 1]).sum())


def measure_polygon(vertices: np.ndarray) -> Dict[str, Any]:
    """
    Measure a polygon produced by the tour builder.

    is_simple is False when the outline crosses itself, which is how a
    greedy tour that jumped across a pinch or neck shows up.

    Args:
        vertices: (n, 2) array of x, y coordinates

    Returns:
        Dictionary with num_vertices, area, perimeter, bounds, centroid, is_simple
    """
    pts = np.asarray(vertices, dtype=float)
    n = len(pts)
    metrics = {
        'num_vertices': n,
        'area': 0.0,
        'perimeter': compute_perimeter(pts),
        'bounds': None,
        'centroid': None,
        'is_simple': None,
    }
    if n == 0:
        return metrics

    metrics['bounds'] = {
        'xmin': float(pts[:, 0].min()),
        'ymin': float(pts[:, 1].min()),
        'xmax': float(pts[:, 0].max()),
        'ymax': float(pts[:, 1].max()),
    }
    metrics['centroid'] = [float(pts[:, 0].mean()), float(pts[:, 1].mean())]

    if n < 3:
        # Too few vertices for a ring
        return metrics

    ring = LinearRing(pts)
    metrics['is_simple'] = bool(ring.is_simple)
    metrics['area'] = float(abs(Polygon(ring).area))
    if not metrics['is_simple']:
        logger.debug("measure_polygon: outline with %d vertices crosses itself", n)
    return metrics


def summarize_result(result) -> List[Dict[str, Any]]:
    """Metrics for every polygon of a RoiResult, in order; placeholders marked empty."""
    summary = []
    for i, poly in enumerate(result.polygons, 1):
        metrics = measure_polygon(poly)
        metrics['index'] = i
        metrics['empty'] = len(poly) == 0
        summary.append(metrics)
    return summary
