"""
Scan Report Loader

This module reads scanner reports into PointClouds. A report is a text file
of blocks, each introduced by a header line and followed by one point per line:

    --- scanner 0 ---
    404,-588,-901
    528,-643,409

    --- scanner 1 ---
    686,422,578
"""

import re
from pathlib import Path
from typing import Iterable, List, Optional, Set

from ..alignment.point_cloud import PointCloud
from ..geometry.vector import Vector
from ..utils.logging import setup_logger

logger = setup_logger(__name__)

_INTEGER = re.compile(r"[+-]?\d+", re.ASCII)


class ScanReportLoader:
    """
    A class for loading scanner reports.

    Features:
    - Header lines starting with `header_prefix` open a new scan
    - Blank lines and surrounding whitespace are ignored
    - Duplicate points within a scan collapse
    - Headers without points produce no scan
    """

    def __init__(self, *, header_prefix: str = "---"):
        self.header_prefix = header_prefix

    def load(self, file_path: str) -> List[PointCloud]:
        """
        Load a scan report file.

        Args:
            file_path: Path to the report

        Returns:
            List of PointClouds in file order

        Raises:
            FileNotFoundError: If the path does not exist or is not a regular file
            ValueError: If a record is malformed or the file holds no scans
        """
        file_path = Path(file_path)

        if not file_path.exists():
            raise FileNotFoundError(f"File not found: {file_path}")
        if not file_path.is_file():
            raise FileNotFoundError(f"Not a regular file: {file_path}")

        logger.info(f"Loading scan report from {file_path}")
        with file_path.open("r", encoding="utf-8") as f:
            try:
                scans = self.parse(f)
            except ValueError as e:
                logger.error(f"Error loading scan report from {file_path}: {e}")
                raise

        logger.info(
            f"Loaded {len(scans)} scans with {sum(len(s) for s in scans)} points in total"
        )
        return scans

    def parse_text(self, text: str) -> List[PointCloud]:
        return self.parse(text.splitlines())

    def parse(self, lines: Iterable[str]) -> List[PointCloud]:
        """
        Parse report lines into PointClouds.

        Raises:
            ValueError: On a record that is not three integers, or when no
                scan contains any point
        """
        scans: List[PointCloud] = []
        points: Set[Vector] = set()
        label: Optional[str] = None

        def flush() -> None:
            if points:
                scans.append(PointCloud.from_points(points, label=label))
            elif label is not None:
                logger.warning(f"Scan '{label}' has no points; skipping")

        for line_number, raw in enumerate(lines, start=1):
            line = raw.strip()
            if not line:
                continue
            if line.startswith(self.header_prefix):
                flush()
                points = set()
                label = line.strip("-").strip() or None
                continue
            points.add(self._parse_point(line, line_number))
        flush()

        if not scans:
            raise ValueError("Scan report contains no scans")
        return scans

    @staticmethod
    def _parse_point(line: str, line_number: int) -> Vector:
        tokens = [t.strip() for t in line.split(",")]
        if len(tokens) != 3:
            raise ValueError(
                f"Invalid point on line {line_number}: expected 3 coordinates, got {len(tokens)}: '{line}'"
            )
        if not all(_INTEGER.fullmatch(t) for t in tokens):
            raise ValueError(f"Invalid point on line {line_number}: '{line}'")
        x, y, z = (int(t) for t in tokens)
        return Vector(x, y, z)
