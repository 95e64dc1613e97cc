"""ROI extraction endpoint."""

import json
from itertools import chain
from fastapi import APIRouter, HTTPException
from pydantic import BaseModel
from mask_roi.pipeline import mask_to_roi
from mask_roi.export_ir import build_roi_ir
from storage import get_session_dir, load_mask

router = APIRouter()


class ExtractRoisRequest(BaseModel):
    session_id: str
    options: dict = {}  # e.g. {"NumROIs": 2, "Connectivity": 4}


class ExtractRoisResponse(BaseModel):
    rois: list[dict]
    num_regions_found: int
    warnings: list[str]


@router.post("/extract-rois", response_model=ExtractRoisResponse)
async def extract_rois(req: ExtractRoisRequest):
    """Convert the session mask into ROI polygons."""
    mask, info = load_mask(req.session_id)

    try:
        # Options travel as name/value pairs so only option names are accepted
        result = mask_to_roi(mask, *chain.from_iterable(req.options.items()))
    except (ValueError, TypeError) as e:
        raise HTTPException(status_code=400, detail=str(e))
    except Exception as e:
        raise HTTPException(status_code=500, detail=f"Failed to extract ROIs: {e}")

    roi_ir = build_roi_ir(result, provenance=info)

    # Save result to session for export
    session_dir = get_session_dir(req.session_id)
    with open(session_dir / "rois.json", "w") as f:
        json.dump(roi_ir.model_dump(), f, indent=2)

    return ExtractRoisResponse(
        rois=[roi.model_dump() for roi in roi_ir.rois],
        num_regions_found=roi_ir.num_regions_found,
        warnings=roi_ir.warnings,
    )
