"""Export ROI overlay image (PNG)."""

from typing import List, Tuple
from PIL import Image, ImageDraw, ImageFont
import numpy as np
import logging

logger = logging.getLogger(__name__)

ROI_COLORS = [
    (230, 25, 75),
    (60, 180, 75),
    (0, 130, 200),
    (245, 130, 48),
    (145, 30, 180),
    (70, 240, 240),
]


def image_coords(points: np.ndarray, scale: int) -> List[Tuple[float, float]]:
    """Pixel (x, y) coordinates to overlay coordinates at the centre of each scaled pixel."""
    return [((x + 0.5) * scale, (y + 0.5) * scale) for x, y in np.asarray(points, dtype=float)]


def export_overlay_png(
    mask: np.ndarray,
    polygons: List[np.ndarray],
    output_path: str = "overlay.png",
    scale: int = 4,
    background_color: Tuple[int, int, int] = (255, 255, 255),
    mask_color: Tuple[int, int, int] = (200, 200, 200),
    label_color: Tuple[int, int, int] = (0, 0, 0),
    vertex_radius: int = 2
) -> None:
    """
    Export mask with ROI outlines drawn on top as PNG.

    Args:
        mask: (H, W) bool array
        polygons: List of (n, 2) arrays, x in column 0
        output_path: Output file path
        scale: Output pixels per mask pixel
        background_color: RGB for background pixels
        mask_color: RGB for foreground pixels
        label_color: RGB for ROI labels
        vertex_radius: Radius of vertex markers in output pixels
    """
    logger.info("Exporting overlay PNG to: %s", output_path)
    if scale < 1:
        raise ValueError(f"scale must be >= 1, got {scale}")

    mask = np.asarray(mask, dtype=bool)
    rgb = np.empty(mask.shape + (3,), dtype=np.uint8)
    rgb[...] = background_color
    rgb[mask] = mask_color
    img = Image.fromarray(rgb, 'RGB')
    img = img.resize((mask.shape[1] * scale, mask.shape[0] * scale), Image.NEAREST)
    draw = ImageDraw.Draw(img)
    font = ImageFont.load_default()

    for i, poly in enumerate(polygons, 1):
        if len(poly) == 0:
            continue
        color = ROI_COLORS[(i - 1) % len(ROI_COLORS)]
        coords = image_coords(poly, scale)

        if len(coords) > 1:
            draw.line(coords + [coords[0]], fill=color, width=1)
        for x, y in coords:
            draw.ellipse(
                [x - vertex_radius, y - vertex_radius, x + vertex_radius, y + vertex_radius],
                fill=color
            )

        xs = [c[0] for c in coords]
        ys = [c[1] for c in coords]
        draw.text((min(xs), max(0, min(ys) - 12)), f"R{i}", fill=label_color, font=font)

    img.save(output_path, 'PNG')
    logger.info("Overlay PNG saved: %s (%d × %d pixels)", output_path, img.width, img.height)
