"""Draw ROI polygons over their mask with matplotlib."""

from typing import List, Optional
import matplotlib.pyplot as plt
import matplotlib.patches as mpatches
import numpy as np
import logging

logger = logging.getLogger(__name__)


def plot_rois(
    mask: np.ndarray,
    polygons: List[np.ndarray],
    ax: Optional[plt.Axes] = None,
    show_vertices: bool = True,
    title: Optional[str] = None
) -> plt.Axes:
    """
    Show the mask and each ROI as a closed polygon patch.

    Args:
        mask: (H, W) bool array
        polygons: List of (n, 2) arrays with x in column 0, y in column 1
        ax: Axes to draw into (a new figure is created if None)
        show_vertices: Mark each vertex
        title: Optional axes title

    Returns:
        The axes drawn into
    """
    if ax is None:
        _, ax = plt.subplots(figsize=(8, 8))

    ax.imshow(np.asarray(mask, dtype=bool), cmap='gray', interpolation='nearest')

    cmap = plt.get_cmap('tab10')
    drawn = 0
    for i, poly in enumerate(polygons, 1):
        pts = np.asarray(poly, dtype=float)
        if len(pts) == 0:
            continue
        color = cmap((i - 1) % 10)
        if len(pts) >= 2:
            patch = mpatches.Polygon(pts, closed=True, fill=False,
                                     edgecolor=color, linewidth=1.5)
            ax.add_patch(patch)
        if show_vertices:
            ax.plot(pts[:, 0], pts[:, 1], 'o', color=color, markersize=3)
        ax.annotate(f"R{i}", xy=(pts[:, 0].min(), pts[:, 1].min()),
                    color=color, fontsize=9, fontweight='bold')
        drawn += 1

    ax.set_title(title or f"{drawn} ROI(s)")
    ax.set_xlabel('x (column)')
    ax.set_ylabel('y (row)')
    logger.debug("plot_rois: drew %d polygon(s)", drawn)
    return ax


def show_rois(mask: np.ndarray, polygons: List[np.ndarray], block: bool = True) -> None:
    """Open a window with plot_rois output."""
    plot_rois(mask, polygons)
    plt.show(block=block)
