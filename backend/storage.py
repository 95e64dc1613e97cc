"""Session storage for temporary workspace per session."""

import json
import tempfile
import shutil
from pathlib import Path
from typing import Dict

import numpy as np
from fastapi import HTTPException

# Global session storage
_sessions: Dict[str, Path] = {}


def get_session_dir(session_id: str) -> Path:
    """Get or create temp directory for session."""
    if session_id not in _sessions:
        temp_dir = Path(tempfile.mkdtemp(prefix=f"mask2roi_{session_id}_"))
        _sessions[session_id] = temp_dir
    return _sessions[session_id]


def save_mask(session_id: str, mask: np.ndarray, info: dict) -> None:
    """Store the imported mask and its provenance."""
    session_dir = get_session_dir(session_id)
    np.save(session_dir / "mask.npy", mask)
    with open(session_dir / "import_result.json", "w") as f:
        json.dump(info, f, indent=2)


def load_mask(session_id: str) -> tuple:
    """Load (mask, provenance) for a session, 404 if nothing was imported."""
    session_dir = get_session_dir(session_id)
    mask_path = session_dir / "mask.npy"
    if not mask_path.exists():
        raise HTTPException(
            status_code=404,
            detail=f"Mask not found for session {session_id}. Please import a mask first."
        )
    with open(session_dir / "import_result.json", "r") as f:
        info = json.load(f)
    return np.load(mask_path), info


def cleanup_session(session_id: str) -> None:
    """Clean up session directory."""
    if session_id in _sessions:
        shutil.rmtree(_sessions[session_id], ignore_errors=True)
        del _sessions[session_id]
