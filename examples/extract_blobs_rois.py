#!/usr/bin/env python3
"""Extract ROI polygons from examples/blobs_mask.png with logging + sanity checks."""

from __future__ import annotations

import logging
import sys
import time
from contextlib import contextmanager
from pathlib import Path

# ---------------------------------------------------------------------
# Import setup (dev fallback)
# ---------------------------------------------------------------------
# Preferred: install package via `pip install -e .`
# Fallback: add ./core to sys.path for local dev runs.
CORE_DIR = Path(__file__).resolve().parent.parent / "core"
if str(CORE_DIR) not in sys.path:
    sys.path.insert(0, str(CORE_DIR))

from mask_roi.pipeline import run_pipeline  # noqa: E402
from mask_roi.measure import summarize_result  # noqa: E402


# ---------------------------------------------------------------------
# Logging
# ---------------------------------------------------------------------
logging.basicConfig(
    level=logging.INFO,
    format="%(levelname)s: %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)


@contextmanager
def log_step(name: str):
    """Log step entry/exit + duration."""
    logger.info("→ %s", name)
    start = time.time()
    try:
        yield
    finally:
        logger.info("← %s (%.2fs)", name, time.time() - start)


def main() -> int:
    mask_path = Path(__file__).parent / "blobs_mask.png"
    if not mask_path.exists():
        logger.error("Mask not found: %s (run generate_blobs.py first)", mask_path)
        return 1

    with log_step("run_pipeline"):
        outputs = run_pipeline(str(mask_path))

    result = outputs["result"]
    logger.info("Regions found: %d, ROIs returned: %d",
                result.num_regions_found, len(result.polygons))
    for w in result.warnings:
        logger.warning("  %s", w)

    non_simple = 0
    for metrics in summarize_result(result):
        logger.info("  R%d: %d vertices, area=%.1f px², perimeter=%.1f px, simple=%s",
                    metrics["index"], metrics["num_vertices"], metrics["area"],
                    metrics["perimeter"], metrics["is_simple"])
        if metrics["is_simple"] is False:
            non_simple += 1

    if non_simple:
        logger.warning("%d ROI(s) cross themselves; check for pinched boundaries", non_simple)

    for key in ("json_path", "csv_path", "svg_path", "overlay_image", "log_file"):
        logger.info("%s: %s", key, outputs[key])
    return 0


if __name__ == "__main__":
    sys.exit(main())
