"""Option resolution for mask-to-ROI conversion."""

import ast
import numbers
from pathlib import Path
from typing import Any, Dict, List, Literal, Tuple

import numpy as np
from pydantic import BaseModel, ConfigDict, Field, field_validator
import logging

logger = logging.getLogger(__name__)

# Public option name -> RoiOptions field
OPTION_FIELDS = {
    "NumROIs": "num_rois",
    "Connectivity": "connectivity",
    "FillHoles": "fill_holes",
    "ScaleNumVertices": "scale_num_vertices",
    "RoundOutput": "round_output",
}

DEFAULT_FALLBACK_CONNECTIVITY = 4


def _unwrap_scalar(value: Any) -> Any:
    # 0-d arrays (np.array(False), np.array(4)) are scalars in array form
    if isinstance(value, np.ndarray) and value.shape == ():
        return value[()]
    return value


def _as_integer(value: Any, name: str) -> int:
    """Accept integers and integer-valued floats, reject bools and strings."""
    value = _unwrap_scalar(value)
    if isinstance(value, (bool, np.bool_)):
        raise ValueError(f"{name} must be an integer, got a boolean")
    if isinstance(value, numbers.Integral):
        return int(value)
    if isinstance(value, numbers.Real) and float(value).is_integer():
        return int(value)
    raise ValueError(f"{name} must be an integer scalar, got {value!r}")


def _as_bool(value: Any, name: str) -> bool:
    value = _unwrap_scalar(value)
    if isinstance(value, (bool, np.bool_)):
        return bool(value)
    raise ValueError(f"{name} must be a boolean scalar, got {type(value).__name__}")


class RoiOptions(BaseModel):
    """Options for a single mask_to_roi call."""
    model_config = ConfigDict(extra="forbid", frozen=True, populate_by_name=True)

    num_rois: int = Field(0, alias="NumROIs", ge=0)  # 0 = all regions
    connectivity: Literal[4, 8] = Field(8, alias="Connectivity")
    fill_holes: bool = Field(True, alias="FillHoles")
    scale_num_vertices: int = Field(2, alias="ScaleNumVertices", ge=1)
    round_output: bool = Field(False, alias="RoundOutput")

    @field_validator("num_rois", "connectivity", "scale_num_vertices", mode="before")
    @classmethod
    def _check_integer(cls, value: Any, info) -> int:
        return _as_integer(value, info.field_name)

    @field_validator("fill_holes", "round_output", mode="before")
    @classmethod
    def _check_bool(cls, value: Any, info) -> bool:
        return _as_bool(value, info.field_name)


def _field_for(name: Any, value: Any) -> str:
    if isinstance(name, str):
        if name in OPTION_FIELDS:
            return OPTION_FIELDS[name]
        if name in OPTION_FIELDS.values():
            return name
    raise ValueError(
        f"Unrecognized Name-Value Input: '{name}' of type {type(value).__name__}"
    )


def resolve_options(*name_value_pairs: Any, **overrides: Any) -> Tuple[RoiOptions, List[str]]:
    """
    Resolve name/value overrides into a RoiOptions instance.

    Overrides may be given as a flat sequence of pairs
    (``"NumROIs", 2, "Connectivity", 4``), as keyword arguments, or both;
    keywords are applied last. Option names are NumROIs, Connectivity,
    FillHoles, ScaleNumVertices and RoundOutput (the snake_case field names
    are accepted too). Unspecified options keep their defaults.

    An unknown name raises ValueError naming the key and the type of its
    value. A Connectivity other than 4 or 8 is not fatal: it falls back to 4
    and a warning is returned.

    Returns:
        Tuple of (options, warnings)
    """
    if len(name_value_pairs) % 2:
        raise ValueError(
            f"Name-Value inputs must come in pairs, got {len(name_value_pairs)} values"
        )

    fields: Dict[str, Any] = {}
    pairs = list(zip(name_value_pairs[0::2], name_value_pairs[1::2])) + list(overrides.items())
    for name, value in pairs:
        fields[_field_for(name, value)] = value

    warnings: List[str] = []

    if "num_rois" in fields and _as_integer(fields["num_rois"], "NumROIs") <= 0:
        raise ValueError(f"NumROIs must be a positive integer, got {fields['num_rois']!r}")

    if "connectivity" in fields:
        conn = _as_integer(fields["connectivity"], "Connectivity")
        if conn not in (4, 8):
            message = (
                "Connectivity must be either 4 or 8. "
                f"Setting value at default of {DEFAULT_FALLBACK_CONNECTIVITY}."
            )
            logger.warning(message)
            warnings.append(message)
            conn = DEFAULT_FALLBACK_CONNECTIVITY
        fields["connectivity"] = conn

    options = RoiOptions(**fields)
    logger.debug("resolve_options: %s", options.model_dump(by_alias=True))
    return options, warnings


def load_roi_parameters(mask_path: str) -> Dict[str, Any]:
    """
    Load option overrides from FILENAME_param.txt next to the mask, if present.

    Lines look like ``NumROIs = 3``; blank lines and ``#`` comments are
    skipped. Values are parsed as Python literals.

    Args:
        mask_path: Path to the mask image

    Returns:
        Dictionary of option name -> value. Only includes options found in the file.
    """
    params: Dict[str, Any] = {}
    mask_file_path = Path(mask_path)
    param_file_path = mask_file_path.parent / f"{mask_file_path.stem}_param.txt"

    if not param_file_path.exists():
        logger.debug(f"Parameter file not found: {param_file_path}")
        return params

    logger.info(f"Loading parameters from: {param_file_path}")
    with open(param_file_path, 'r') as f:
        for line_num, line in enumerate(f, 1):
            line = line.strip()
            if not line or line.startswith('#'):
                continue
            if '=' not in line:
                logger.warning(f"  Ignoring line {line_num} without '=': {line}")
                continue

            name, value_str = (part.strip() for part in line.split('=', 1))
            try:
                params[name] = ast.literal_eval(value_str)
                logger.debug(f"  Loaded {name} = {params[name]!r}")
            except (ValueError, SyntaxError) as e:
                logger.warning(f"  Failed to parse parameter on line {line_num}: {line} ({e})")

    return params
