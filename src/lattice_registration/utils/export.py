"""
Export utilities for registration results.

Provides functions to write:
- Merged beacon sets and scanner positions as CSV text
- Per-scan poses as 4x4 homogeneous integer matrices
- A YAML summary of the run
"""

from __future__ import annotations

from pathlib import Path
from typing import Dict, Iterable, TYPE_CHECKING

import numpy as np
import yaml

from ..geometry.transformation import Transformation
from ..geometry.vector import Vector
from .logging import setup_logger

if TYPE_CHECKING:
    from ..alignment.controller import RegistrationResult

logger = setup_logger(__name__)


def export_points_to_csv(points: Iterable[Vector], output_file: str) -> str:
    """
    Write points as `x,y,z` rows, sorted lexicographically.

    Args:
        points: Points to write
        output_file: Destination path (parent directories are created)

    Returns:
        The path written
    """
    path = Path(output_file)
    path.parent.mkdir(parents=True, exist_ok=True)
    rows = sorted(p.as_tuple() for p in points)
    data = np.array(rows, dtype=np.int64).reshape(-1, 3)
    np.savetxt(path, data, fmt="%d", delimiter=",", header="x,y,z", comments="")
    logger.info(f"Wrote {len(rows)} points to {path}")
    return str(path)


def save_transform_matrix(transformation: Transformation, output_file: str) -> None:
    """Save a transformation as a 4x4 integer matrix in a text file."""
    np.savetxt(output_file, transformation.as_matrix(), fmt="%d", header="4x4 transformation matrix")
    logger.info(f"Saved transformation matrix to {output_file}")


def load_transform_matrix(input_file: str) -> Transformation:
    """
    Load a transformation written by save_transform_matrix.

    Raises:
        ValueError: If the file does not hold a 4x4 lattice transform
    """
    matrix = np.loadtxt(input_file)
    if matrix.shape != (4, 4):
        raise ValueError(f"Expected 4x4 matrix, got shape {matrix.shape}")
    transformation = Transformation.from_matrix(matrix)
    logger.info(f"Loaded transformation matrix from {input_file}")
    return transformation


def export_registration(result: "RegistrationResult", output_dir: str) -> Dict[str, str]:
    """
    Write all outputs of a registration run into a directory.

    Files:
        beacons.csv: merged point set
        scanners.csv: resolved scanner positions (origin first)
        transform_scan_<i>.txt: pose of every resolved input scan
        summary.yaml: counts, max scanner distance and stall status

    Returns:
        Mapping of output name -> written path
    """
    from ..reporting.summary import summarize

    out = Path(output_dir)
    out.mkdir(parents=True, exist_ok=True)

    written: Dict[str, str] = {}
    written["beacons"] = export_points_to_csv(result.reference.points, str(out / "beacons.csv"))

    scanners_path = out / "scanners.csv"
    positions = np.array([p.as_tuple() for p in result.positions], dtype=np.int64).reshape(-1, 3)
    np.savetxt(scanners_path, positions, fmt="%d", delimiter=",", header="x,y,z", comments="")
    written["scanners"] = str(scanners_path)

    for idx, transformation in sorted(result.transformations.items()):
        path = out / f"transform_scan_{idx}.txt"
        save_transform_matrix(transformation, str(path))
        written[f"transform_scan_{idx}"] = str(path)

    summary = summarize(result).as_dict()
    summary["unresolved"] = list(result.unresolved)
    summary_path = out / "summary.yaml"
    with summary_path.open("w", encoding="utf-8") as f:
        yaml.safe_dump(summary, f, sort_keys=False)
    written["summary"] = str(summary_path)

    logger.info(f"Exported registration outputs to {out}")
    return written
