"""Pydantic models for the exported ROI document."""

from pydantic import BaseModel
from typing import Optional, List, Dict


class Provenance(BaseModel):
    """Where the mask came from."""
    source_filename: str
    source_sha256: str
    import_timestamp: str
    shape: List[int]  # [rows, cols]


class RoiRecord(BaseModel):
    """One polygon in the output, in region order."""
    roi_id: str
    index: int  # 1-based region label
    vertices: List[List[float]]  # [[x, y], ...]
    num_vertices: int
    empty: bool  # Placeholder slot for a region that does not exist
    area: float = 0.0
    perimeter: float = 0.0
    is_simple: Optional[bool] = None
    bounds: Optional[Dict[str, float]] = None


class RoiIR(BaseModel):
    """Canonical export of a mask-to-ROI run."""
    version: str
    provenance: Optional[Provenance] = None
    options: Dict[str, object]
    num_regions_found: int
    warnings: List[str]
    rois: List[RoiRecord]
