"""Export bundle endpoint."""

import json
import zipfile
import io
import numpy as np
from fastapi import APIRouter, HTTPException, Response
from pydantic import BaseModel
from mask_roi.export_rois import export_vertices_csv, export_rois_svg
from mask_roi.export_overlay import export_overlay_png
from storage import get_session_dir, load_mask

router = APIRouter()


class ExportRequest(BaseModel):
    session_id: str


@router.post("/export")
async def export_bundle(req: ExportRequest):
    """Export zip containing rois.json, rois.csv, rois.svg, overlay.png."""
    mask, _ = load_mask(req.session_id)
    session_dir = get_session_dir(req.session_id)
    rois_path = session_dir / "rois.json"
    if not rois_path.exists():
        raise HTTPException(
            status_code=404,
            detail=f"ROIs not found for session {req.session_id}. Please extract ROIs first."
        )

    with open(rois_path, "r") as f:
        roi_ir = json.load(f)
    polygons = [np.array(roi["vertices"], dtype=float).reshape(-1, 2) for roi in roi_ir["rois"]]

    csv_path = session_dir / "rois.csv"
    svg_path = session_dir / "rois.svg"
    overlay_path = session_dir / "overlay.png"
    export_vertices_csv(polygons, str(csv_path))
    export_rois_svg(polygons, str(svg_path), size=(mask.shape[1], mask.shape[0]))
    export_overlay_png(mask, polygons, str(overlay_path))

    zip_buffer = io.BytesIO()
    with zipfile.ZipFile(zip_buffer, 'w', zipfile.ZIP_DEFLATED) as zip_file:
        zip_file.write(rois_path, "mask.rois.json")
        zip_file.write(csv_path, "mask.rois.csv")
        zip_file.write(svg_path, "mask.rois.svg")
        zip_file.write(overlay_path, "mask.overlay.png")

    zip_buffer.seek(0)
    return Response(
        content=zip_buffer.read(),
        media_type="application/zip",
        headers={"Content-Disposition": "attachment; filename=mask_rois.zip"}
    )
