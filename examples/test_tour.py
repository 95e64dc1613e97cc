#!/usr/bin/env python3
"""Test greedy boundary tour construction."""

import numpy as np
import pytest

from mask_roi.tour import boundary_points, sort_boundary_points


def square_ring(x0: int, y0: int, size: int) -> np.ndarray:
    """Boundary pixels of a filled size x size square, column-major order."""
    edge = np.zeros((y0 + size + 2, x0 + size + 2), dtype=bool)
    edge[y0:y0 + size, x0:x0 + size] = True
    edge[y0 + 1:y0 + size - 1, x0 + 1:x0 + size - 1] = False
    return boundary_points(edge)


def test_boundary_points_column_major():
    """Points come out sorted by x, then y."""
    edge = np.zeros((4, 4), dtype=bool)
    edge[0, 2] = True
    edge[3, 0] = True
    edge[1, 0] = True
    pts = boundary_points(edge)
    assert pts.tolist() == [[0, 1], [0, 3], [2, 0]]


def test_tour_is_permutation():
    """Every input point appears exactly once."""
    rng = np.random.default_rng(0)
    pts = np.unique(rng.integers(0, 40, size=(200, 2)), axis=0)
    rng.shuffle(pts)

    out = sort_boundary_points(pts)

    assert out.shape == pts.shape
    assert sorted(map(tuple, out.tolist())) == sorted(map(tuple, pts.astype(float).tolist()))


def test_tour_single_and_empty():
    assert sort_boundary_points([[3, 7]]).tolist() == [[3.0, 7.0]]
    empty = sort_boundary_points(np.empty((0, 2)))
    assert empty.shape == (0, 2)


def test_tour_starts_at_first_point():
    pts = np.array([[5, 5], [0, 0], [5, 6], [1, 0]])
    out = sort_boundary_points(pts)
    assert out[0].tolist() == [5.0, 5.0]
    assert out[1].tolist() == [5.0, 6.0]


def test_tour_tie_break_uses_pool_order():
    """Equidistant candidates: the one earlier in the input wins."""
    assert sort_boundary_points([[0, 0], [1, 0], [0, 1]]).tolist() == [[0, 0], [1, 0], [0, 1]]
    assert sort_boundary_points([[0, 0], [0, 1], [1, 0]]).tolist() == [[0, 0], [0, 1], [1, 0]]


def test_tour_follows_square_outline():
    """A 1-pixel-thick square ring is walked as a closed unit-step loop."""
    pts = square_ring(3, 3, 4)
    out = sort_boundary_points(pts)

    assert out.tolist() == [
        [3, 3], [3, 4], [3, 5], [3, 6], [4, 6], [5, 6],
        [6, 6], [6, 5], [6, 4], [6, 3], [5, 3], [4, 3],
    ]
    closed = np.vstack([out, out[:1]])
    steps = np.hypot(*np.diff(closed, axis=0).T)
    assert np.allclose(steps, 1.0)


def test_tour_on_branched_shape_still_permutation():
    """Greedy jumps across a pinched outline are allowed; no point is lost."""
    edge = np.zeros((12, 20), dtype=bool)
    edge[2:9, 2:8] = True
    edge[3:8, 3:7] = False
    edge[2:9, 11:17] = True
    edge[3:8, 12:16] = False
    edge[5, 8:11] = True  # one-pixel neck
    pts = boundary_points(edge)

    out = sort_boundary_points(pts)

    assert len(out) == len(pts)
    assert len({tuple(p) for p in out.tolist()}) == len(pts)


def test_tour_rejects_bad_shape():
    with pytest.raises(ValueError):
        sort_boundary_points(np.zeros((4, 3)))
    with pytest.raises(ValueError):
        sort_boundary_points([1, 2, 3])


if __name__ == "__main__":
    test_tour_is_permutation()
    test_tour_follows_square_outline()
    print("✓ Tour tests passed")
