#!/usr/bin/env python3
"""Test mask loading, file-driven pipeline runs and exports."""

import csv
import io
import json
import xml.etree.ElementTree as ET
from pathlib import Path

import numpy as np
import pytest
from PIL import Image

from mask_roi.export_ir import build_roi_ir, export_roi_ir
from mask_roi.export_overlay import export_overlay_png
from mask_roi.export_rois import export_rois_svg, export_vertices_csv
from mask_roi.mask_loader import load_mask, load_mask_bytes
from mask_roi.measure import measure_polygon, summarize_result
from mask_roi.pipeline import mask_to_roi, run_pipeline

SVG_NS = "http://www.w3.org/2000/svg"


def two_rect_mask() -> np.ndarray:
    mask = np.zeros((40, 60), dtype=bool)
    mask[5:15, 5:20] = True
    mask[20:35, 30:55] = True
    return mask


def write_png(path: Path, mask: np.ndarray, mode: str = "L") -> None:
    Image.fromarray((mask * 255).astype(np.uint8), "L").convert(mode).save(path)


def test_load_mask_png(tmp_path):
    path = tmp_path / "blobs.png"
    write_png(path, two_rect_mask())

    result = load_mask(str(path))

    assert result['mask'].dtype == bool
    assert result['shape'] == [40, 60]
    assert result['foreground_pixels'] == 10 * 15 + 15 * 25
    assert result['source_filename'] == "blobs.png"
    assert len(result['source_sha256']) == 64
    assert np.array_equal(result['mask'], two_rect_mask())


def test_load_mask_rgb_and_threshold(tmp_path):
    gray = np.zeros((4, 4), dtype=np.uint8)
    gray[0, 0] = 100
    gray[1, 1] = 200
    buf = io.BytesIO()
    Image.fromarray(gray, "L").convert("RGB").save(buf, format="PNG")

    result = load_mask_bytes(buf.getvalue(), filename="rgb.png", threshold=150)

    assert result['mask'].tolist()[0][0] is False
    assert result['mask'][1, 1]
    assert result['foreground_pixels'] == 1


def test_load_mask_errors(tmp_path):
    with pytest.raises(FileNotFoundError):
        load_mask(str(tmp_path / "missing.png"))
    with pytest.raises(ValueError):
        load_mask_bytes(b"not an image", filename="junk.png")


def test_measure_polygon():
    square = np.array([[0, 0], [0, 4], [4, 4], [4, 0]], dtype=float)
    metrics = measure_polygon(square)
    assert metrics['area'] == pytest.approx(16.0)
    assert metrics['perimeter'] == pytest.approx(16.0)
    assert metrics['is_simple'] is True
    assert metrics['bounds'] == {'xmin': 0.0, 'ymin': 0.0, 'xmax': 4.0, 'ymax': 4.0}

    bowtie = np.array([[0, 0], [4, 4], [4, 0], [0, 4]], dtype=float)
    assert measure_polygon(bowtie)['is_simple'] is False

    empty = measure_polygon(np.empty((0, 2)))
    assert empty['num_vertices'] == 0
    assert empty['bounds'] is None


def test_summarize_marks_placeholders():
    mask = two_rect_mask()
    result = mask_to_roi(mask, NumROIs=3)
    summary = summarize_result(result)
    assert [m['empty'] for m in summary] == [False, False, True]
    assert [m['index'] for m in summary] == [1, 2, 3]


def test_roi_ir_json(tmp_path):
    result = mask_to_roi(two_rect_mask(), NumROIs=3, Connectivity=5)
    roi_ir = build_roi_ir(result)
    out = tmp_path / "rois.json"

    export_roi_ir(roi_ir, str(out))
    data = json.loads(out.read_text())

    assert data['num_regions_found'] == 2
    assert data['options']['Connectivity'] == 4
    assert data['provenance'] is None
    assert len(data['warnings']) == 1
    assert [r['roi_id'] for r in data['rois']] == ["R1", "R2", "R3"]
    assert data['rois'][2]['empty'] is True
    assert data['rois'][0]['vertices'] == result.polygons[0].tolist()


def test_csv_and_svg_exports(tmp_path):
    result = mask_to_roi(two_rect_mask(), NumROIs=3)
    csv_path = tmp_path / "rois.csv"
    svg_path = tmp_path / "rois.svg"

    export_vertices_csv(result.polygons, str(csv_path))
    written = export_rois_svg(result.polygons, str(svg_path), size=(60, 40))

    with open(csv_path, newline='') as f:
        rows = list(csv.DictReader(f))
    assert len(rows) == sum(len(p) for p in result.polygons)
    assert {r['roi_id'] for r in rows} == {"R1", "R2"}
    assert rows[0] == {'roi_id': 'R1', 'vertex_index': '0', 'x': '5', 'y': '5'}

    assert written == 2
    root = ET.parse(svg_path).getroot()
    polygons = root.findall(f"{{{SVG_NS}}}polygon")
    assert [p.get('id') for p in polygons] == ["R1", "R2"]
    assert all(p.get('fill') == 'none' for p in polygons)
    first = polygons[0].get('points').replace(',', ' ').split()
    assert len(first) == 2 * len(result.polygons[0])
    assert [float(v) for v in first[:2]] == [5.5, 5.5]


def test_overlay_png(tmp_path):
    mask = two_rect_mask()
    result = mask_to_roi(mask, NumROIs=3)
    out = tmp_path / "overlay.png"

    export_overlay_png(mask, result.polygons, str(out), scale=3)

    with Image.open(out) as img:
        assert img.size == (180, 120)
        assert img.mode == "RGB"


def test_run_pipeline_with_param_file(tmp_path):
    mask_path = tmp_path / "cells.png"
    write_png(mask_path, two_rect_mask())
    (tmp_path / "cells_param.txt").write_text("ScaleNumVertices = 1\nNumROIs = 1\n")
    out_dir = tmp_path / "out"

    outputs = run_pipeline(str(mask_path), output_dir=str(out_dir), NumROIs=2)

    result = outputs['result']
    assert result.options.scale_num_vertices == 1
    assert result.options.num_rois == 2
    assert len(result.polygons) == 2
    # 10x15 rectangle ring
    assert len(result.polygons[0]) == 2 * (10 + 15) - 4

    for key in ('json_path', 'csv_path', 'svg_path', 'overlay_image', 'log_file'):
        assert Path(outputs[key]).exists(), key
        assert Path(outputs[key]).parent == out_dir

    data = json.loads(Path(outputs['json_path']).read_text())
    assert data['provenance']['source_filename'] == "cells.png"
    assert data['provenance']['shape'] == [40, 60]
    assert "Pipeline started" in Path(outputs['log_file']).read_text()


def test_run_pipeline_propagates_option_errors(tmp_path):
    mask_path = tmp_path / "cells.png"
    write_png(mask_path, two_rect_mask())

    with pytest.raises(ValueError, match="Unrecognized"):
        run_pipeline(str(mask_path), Bogus=True)


def test_run_pipeline_param_file_rejects_call_arguments(tmp_path):
    mask_path = tmp_path / "cells.png"
    write_png(mask_path, two_rect_mask())
    (tmp_path / "cells_param.txt").write_text("max_workers = 8\n")

    with pytest.raises(ValueError, match="Unrecognized Name-Value Input: 'max_workers' of type int"):
        run_pipeline(str(mask_path), output_dir=str(tmp_path / "out"))


if __name__ == "__main__":
    test_measure_polygon()
    print("✓ Pipeline export tests passed")
