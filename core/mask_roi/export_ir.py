"""Export ROI results to JSON."""

from typing import Any, Dict, Optional
import json
import logging

from .measure import measure_polygon
from .schemas import Provenance, RoiIR, RoiRecord

logger = logging.getLogger(__name__)

IR_VERSION = "1.0"


def build_roi_ir(result, provenance: Optional[Dict[str, Any]] = None) -> RoiIR:
    """
    Build the exportable document for a RoiResult.

    Args:
        result: RoiResult from mask_to_roi
        provenance: Optional mask loader result (source_filename, source_sha256,
                    import_timestamp, shape)
    """
    rois = []
    for i, poly in enumerate(result.polygons, 1):
        metrics = measure_polygon(poly)
        rois.append(RoiRecord(
            roi_id=f"R{i}",
            index=i,
            vertices=[[float(x), float(y)] for x, y in poly],
            num_vertices=metrics['num_vertices'],
            empty=metrics['num_vertices'] == 0,
            area=metrics['area'],
            perimeter=metrics['perimeter'],
            is_simple=metrics['is_simple'],
            bounds=metrics['bounds'],
        ))

    prov = None
    if provenance is not None:
        prov = Provenance(
            source_filename=provenance['source_filename'],
            source_sha256=provenance['source_sha256'],
            import_timestamp=provenance['import_timestamp'],
            shape=list(provenance['shape']),
        )

    return RoiIR(
        version=IR_VERSION,
        provenance=prov,
        options=result.options.model_dump(by_alias=True),
        num_regions_found=result.num_regions_found,
        warnings=list(result.warnings),
        rois=rois,
    )


def export_roi_ir(roi_ir: RoiIR, output_path: str) -> None:
    """Export RoiIR to JSON file."""
    with open(output_path, 'w') as f:
        json.dump(roi_ir.model_dump(), f, indent=2)
    logger.info("ROI JSON exported: %s (%d ROIs)", output_path, len(roi_ir.rois))
