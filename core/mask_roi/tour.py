"""Order unordered boundary pixels into a closed traversal."""

import numpy as np
from typing import Union, Sequence
import logging

logger = logging.getLogger(__name__)


def boundary_points(edge_mask: np.ndarray) -> np.ndarray:
    """
    Collect (x, y) coordinates of the True pixels in an edge mask.

    Points come out in column-major order (sorted by x, then by y). This is
    the candidate-pool order used by sort_boundary_points, so it fixes both
    the tour seed and tie-breaking.

    Returns:
        (M, 2) int array, column 0 = x (column index), column 1 = y (row index)
    """
    cols, rows = np.nonzero(np.asarray(edge_mask, dtype=bool).T)
    return np.column_stack((cols, rows)).astype(np.int64)


def sort_boundary_points(points: Union[np.ndarray, Sequence[Sequence[float]]]) -> np.ndarray:
    """
    Greedy nearest-neighbour tour over a 2D point set.

    The first point of the input is the seed. From the last point placed,
    the nearest remaining point (Euclidean distance) is appended next until
    no points remain. On equal distances the candidate that comes first in
    the input order wins, so results are stable across platforms.

    This is a heuristic, not an optimal tour. Simple closed outlines come out
    in outline order; boundaries with branches, pinches or thin necks can
    make the tour jump across the shape and cross itself.

    Cost is O(M^2) distance evaluations for M points.

    Args:
        points: (M, 2) array-like of x, y coordinates

    Returns:
        (M, 2) array holding every input point exactly once, in tour order
    """
    pts = np.asarray(points, dtype=float)
    if pts.size == 0:
        return np.empty((0, 2), dtype=float)
    if pts.ndim != 2 or pts.shape[1] != 2:
        raise ValueError(f"Expected an (M, 2) array of points, got shape {pts.shape}")

    n_points = pts.shape[0]
    order = np.empty(n_points, dtype=np.intp)
    visited = np.zeros(n_points, dtype=bool)

    current = 0
    order[0] = current
    visited[current] = True

    for step in range(1, n_points):
        diff = pts - pts[current]
        dists = np.hypot(diff[:, 0], diff[:, 1])
        dists[visited] = np.inf
        # argmin returns the first minimum, i.e. earliest in pool order
        current = int(np.argmin(dists))
        order[step] = current
        visited[current] = True

    logger.debug("sort_boundary_points: ordered %d point(s)", n_points)
    return pts[order]
