"""
Registration summary values.

Reads the final state of a registration run: how many distinct beacons the
merged cloud holds and how far apart the two most distant resolved scanners
are (Manhattan distance).
"""

from __future__ import annotations

from dataclasses import asdict, dataclass
from typing import Any, Dict, Sequence

import numpy as np

from ..alignment.controller import RegistrationResult
from ..geometry.vector import Vector


@dataclass(frozen=True)
class RegistrationSummary:
    beacon_count: int
    max_scanner_distance: int
    resolved: int
    total: int
    passes: int
    stalled: bool

    def as_dict(self) -> Dict[str, Any]:
        return asdict(self)


def max_pairwise_distance(vectors: Sequence[Vector]) -> int:
    """
    Maximum Manhattan distance over all pairs of vectors.

    Returns 0 for fewer than two vectors.
    """
    if len(vectors) < 2:
        return 0
    coords = np.array([v.as_tuple() for v in vectors], dtype=np.int64)
    dist = np.abs(coords[:, None, :] - coords[None, :, :]).sum(axis=2)
    return int(dist.max())


def summarize(result: RegistrationResult) -> RegistrationSummary:
    return RegistrationSummary(
        beacon_count=len(result.reference),
        max_scanner_distance=max_pairwise_distance(result.positions),
        resolved=len(result.transformations),
        total=result.total,
        passes=result.passes,
        stalled=result.stalled,
    )
