"""
Rigid lattice transformations.

A Transformation is a scan's pose relative to the reference frame:

    reference_point = rotation @ local_point + translation

The 4x4 homogeneous form is used when poses are written to disk.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Iterable, Set, TYPE_CHECKING

import numpy as np

from .rotation import Rotation, ROTATIONS
from .vector import Vector

if TYPE_CHECKING:
    from numpy.typing import NDArray


@dataclass(frozen=True)
class Transformation:
    """Rotation + translation pair mapping a local frame into the reference frame."""

    rotation: Rotation = field(default_factory=Rotation.identity)
    translation: Vector = field(default_factory=Vector.origin)

    @classmethod
    def identity(cls) -> "Transformation":
        return cls()

    def apply(self, point: Vector) -> Vector:
        return self.rotation @ point + self.translation

    def apply_to_array(self, points: "NDArray[np.integer]") -> "NDArray[np.int64]":
        """Apply the transform to an Nx3 array: P' = P @ R.T + t."""
        rotated = self.rotation.apply_to_array(points)
        if rotated.size == 0:
            return rotated
        return rotated + self.translation.as_array()

    def apply_to_points(self, points: Iterable[Vector]) -> Set[Vector]:
        return {self.apply(p) for p in points}

    def inverse(self) -> "Transformation":
        inv_rotation = self.rotation.inverse()
        return Transformation(inv_rotation, -(inv_rotation @ self.translation))

    def as_matrix(self) -> "NDArray[np.int64]":
        T = np.eye(4, dtype=np.int64)
        T[:3, :3] = self.rotation.as_array()
        T[:3, 3] = self.translation.as_array()
        return T

    @classmethod
    def from_matrix(cls, matrix: "NDArray[np.number]") -> "Transformation":
        """
        Build a transformation from a 4x4 homogeneous matrix.

        Raises:
            ValueError: If the matrix is not 4x4, has non-integer entries, or its
                rotation block is not one of the 24 lattice rotations.
        """
        matrix = np.asarray(matrix)
        if matrix.shape != (4, 4):
            raise ValueError(f"Transform must be 4x4 matrix, got {matrix.shape}")
        rounded = np.rint(matrix).astype(np.int64)
        if not np.array_equal(rounded, matrix):
            raise ValueError("Transform matrix has non-integer entries")
        if not np.array_equal(rounded[3], np.array([0, 0, 0, 1])):
            raise ValueError(f"Transform matrix has invalid last row {rounded[3].tolist()}")
        rotation = Rotation.from_array(rounded[:3, :3])
        if rotation not in ROTATIONS:
            raise ValueError("Rotation block is not a lattice rotation")
        return cls(rotation, Vector.from_array(rounded[:3, 3]))
