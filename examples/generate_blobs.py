from __future__ import annotations

from pathlib import Path

import numpy as np
from PIL import Image, ImageDraw


def make_blob_mask(height: int = 200, width: int = 300) -> np.ndarray:
    """
    Builds a mask with a few well-separated shapes:

    - a filled disk
    - a rectangle with a hole (filled by FillHoles=true)
    - an ellipse
    - two speckles of 1-2 px that get removed as noise
    """
    img = Image.new("L", (width, height), 0)
    draw = ImageDraw.Draw(img)

    draw.ellipse((20, 30, 90, 100), fill=255)
    draw.rectangle((130, 20, 200, 90), fill=255)
    draw.rectangle((150, 40, 180, 70), fill=0)
    draw.ellipse((60, 120, 260, 180), fill=255)

    mask = np.asarray(img) > 0
    mask[5, 5] = True
    mask[190, 290:292] = True
    return mask


def main():
    out_path = Path(__file__).parent / "blobs_mask.png"
    mask = make_blob_mask()
    Image.fromarray((mask * 255).astype(np.uint8), "L").save(out_path)

    # Parameter file picked up by run_pipeline
    param_path = out_path.parent / f"{out_path.stem}_param.txt"
    param_path.write_text("# mask2roi options\nScaleNumVertices = 4\nConnectivity = 8\n")

    print(f"Wrote: {out_path.resolve()}")
    print(f"Wrote: {param_path.resolve()}")


if __name__ == "__main__":
    main()
