"""Mask import endpoint."""

import uuid
from fastapi import APIRouter, UploadFile, File, HTTPException
from pydantic import BaseModel
from mask_roi.mask_loader import load_mask_bytes
from storage import save_mask

router = APIRouter()


class ImportResponse(BaseModel):
    session_id: str
    shape: list[int]
    foreground_pixels: int
    source_sha256: str


@router.post("/import-mask", response_model=ImportResponse)
async def import_mask(file: UploadFile = File(...), threshold: int = 0):
    """Import a mask image and return session info."""
    session_id = str(uuid.uuid4())
    content = await file.read()

    try:
        result = load_mask_bytes(content, filename=file.filename or "mask.png", threshold=threshold)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except Exception as e:
        raise HTTPException(status_code=500, detail=f"Failed to load mask: {e}")

    mask = result.pop("mask")
    save_mask(session_id, mask, result)

    return ImportResponse(
        session_id=session_id,
        shape=result["shape"],
        foreground_pixels=result["foreground_pixels"],
        source_sha256=result["source_sha256"],
    )
