"""
Point cloud with a pairwise-distance index.

Each cloud keeps its points in its own local frame together with an index
mapping every Manhattan distance between two distinct points to the ordered
pairs realising it. Distances between points are preserved by every lattice
rotation, so the set of index keys acts as a fingerprint: two clouds can only
share a point pair at a distance both of them contain.
"""

from __future__ import annotations

from collections import defaultdict
from dataclasses import dataclass, field
from typing import Dict, Iterable, Iterator, Optional, Set, Tuple, TYPE_CHECKING

import numpy as np

from ..geometry.vector import Vector
from ..utils.logging import setup_logger

if TYPE_CHECKING:
    from numpy.typing import NDArray

logger = setup_logger(__name__)

PointPair = Tuple[Vector, Vector]


@dataclass
class PointCloud:
    """
    A set of unique lattice points plus its distance index.

    Attributes:
        points: Unique points in the cloud's local frame
        label: Optional human-readable name (e.g. the scanner header)
        index: distance -> ordered pairs (p, q) with (q - p).norm() == distance.
            Both (p, q) and (q, p) are stored. Rebuilt by refresh_index().
    """

    points: Set[Vector] = field(default_factory=set)
    label: Optional[str] = None
    index: Dict[int, Set[PointPair]] = field(default_factory=dict, init=False, repr=False)

    def __post_init__(self) -> None:
        self.points = set(self.points)
        self.refresh_index()

    @classmethod
    def from_points(cls, points: Iterable[Vector], label: Optional[str] = None) -> "PointCloud":
        return cls(points=set(points), label=label)

    @classmethod
    def from_array(cls, array: "NDArray[np.integer]", label: Optional[str] = None) -> "PointCloud":
        """
        Build a cloud from an Nx3 integer array.

        Raises:
            ValueError: If the array is not Nx3 or holds non-integer values
        """
        array = np.asarray(array)
        if array.size == 0:
            return cls(points=set(), label=label)
        if array.ndim != 2 or array.shape[1] != 3:
            raise ValueError(f"Expected Nx3 array, got shape {array.shape}")
        if not np.issubdtype(array.dtype, np.integer):
            raise ValueError(f"Expected integer coordinates, got dtype {array.dtype}")
        return cls(points={Vector.from_array(row) for row in array.tolist()}, label=label)

    def refresh_index(self) -> None:
        """Recompute the distance index from the current point set."""
        ordered = sorted(self.points, key=Vector.as_tuple)
        n = len(ordered)
        index: Dict[int, Set[PointPair]] = defaultdict(set)
        if n >= 2:
            coords = np.array([p.as_tuple() for p in ordered], dtype=np.int64)
            # Pairwise Manhattan distances, diagonal excluded
            dist = np.abs(coords[:, None, :] - coords[None, :, :]).sum(axis=2)
            rows, cols = np.nonzero(~np.eye(n, dtype=bool))
            for i, j, d in zip(rows.tolist(), cols.tolist(), dist[rows, cols].tolist()):
                index[d].add((ordered[i], ordered[j]))
        self.index = dict(index)
        logger.debug(
            "Indexed %s: %d points, %d distinct distances",
            self.label or "cloud", n, len(self.index),
        )

    def merge(self, other_points: Iterable[Vector]) -> int:
        """
        Union points into this cloud and refresh the index.

        Points already present collapse through set semantics; when nothing new
        arrives the index is left untouched.

        Returns:
            Number of points that were not already in the cloud
        """
        incoming = set(other_points) - self.points
        if not incoming:
            return 0
        self.points |= incoming
        self.refresh_index()
        return len(incoming)

    def fingerprint(self) -> Set[int]:
        """Distances present in the cloud."""
        return set(self.index)

    def pairs_at(self, distance: int) -> Set[PointPair]:
        return self.index.get(distance, set())

    def as_array(self) -> "NDArray[np.int64]":
        """Points as an Nx3 int64 array, rows sorted lexicographically."""
        if not self.points:
            return np.empty((0, 3), dtype=np.int64)
        return np.array(sorted(p.as_tuple() for p in self.points), dtype=np.int64)

    def copy(self, label: Optional[str] = None) -> "PointCloud":
        return PointCloud(points=set(self.points), label=label if label is not None else self.label)

    def __len__(self) -> int:
        return len(self.points)

    def __contains__(self, point: object) -> bool:
        return point in self.points

    def __iter__(self) -> Iterator[Vector]:
        return iter(self.points)
