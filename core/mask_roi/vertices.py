"""Vertex decimation and rounding."""

import numbers
import numpy as np


def decimate_vertices(points: np.ndarray, stride: int) -> np.ndarray:
    """
    Keep every stride-th vertex, starting with the first.

    Returns rows 0, stride, 2*stride, ... so the output has
    ceil(len(points) / stride) rows. stride == 1 returns the input order
    unchanged; stride >= len(points) keeps only the first vertex.
    """
    if isinstance(stride, bool) or not isinstance(stride, numbers.Integral) or stride < 1:
        raise ValueError(f"stride must be a positive integer, got {stride!r}")
    pts = np.asarray(points)
    if len(pts) == 0:
        return pts.copy()
    return pts[::int(stride)].copy()


def round_vertices(points: np.ndarray) -> np.ndarray:
    """Round coordinates half away from zero. Idempotent."""
    pts = np.asarray(points, dtype=float)
    return np.sign(pts) * np.floor(np.abs(pts) + 0.5)
