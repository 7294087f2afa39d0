"""
Lattice Rotations

The 24 proper rotations of a cube map the integer lattice onto itself. Each is
a 3x3 integer matrix that only permutes and negates axes, so applying one to
an integer point always yields an integer point.

The group is generated by closing {identity} under two elementary 90 degree
rotations (a turn about z and a roll about x). Only the resulting set matters;
the enumeration order is fixed so that searches are deterministic, with the
identity first.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterator, Optional, Tuple, Union, overload, TYPE_CHECKING

import numpy as np

from .vector import Vector

if TYPE_CHECKING:
    from numpy.typing import NDArray

Row = Tuple[int, int, int]
Entries = Tuple[Row, Row, Row]


@dataclass(frozen=True)
class Rotation:
    """A 3x3 integer rotation matrix, stored row-major as nested tuples."""

    entries: Entries

    def __post_init__(self) -> None:
        rows = tuple(tuple(int(v) for v in row) for row in self.entries)
        if len(rows) != 3 or any(len(row) != 3 for row in rows):
            raise ValueError(f"Rotation needs a 3x3 matrix, got {self.entries!r}")
        object.__setattr__(self, "entries", rows)

    @classmethod
    def identity(cls) -> "Rotation":
        return cls(((1, 0, 0), (0, 1, 0), (0, 0, 1)))

    @classmethod
    def from_array(cls, matrix: "NDArray[np.integer]") -> "Rotation":
        matrix = np.asarray(matrix)
        if matrix.shape != (3, 3):
            raise ValueError(f"Expected 3x3 matrix, got shape {matrix.shape}")
        return cls(tuple(tuple(int(v) for v in row) for row in matrix))

    def as_array(self) -> "NDArray[np.int64]":
        return np.array(self.entries, dtype=np.int64)

    @overload
    def __matmul__(self, other: "Rotation") -> "Rotation": ...

    @overload
    def __matmul__(self, other: Vector) -> Vector: ...

    def __matmul__(self, other: Union["Rotation", Vector]) -> Union["Rotation", Vector]:
        if isinstance(other, Vector):
            (a, b, c), (d, e, f), (g, h, i) = self.entries
            return Vector(
                a * other.x + b * other.y + c * other.z,
                d * other.x + e * other.y + f * other.z,
                g * other.x + h * other.y + i * other.z,
            )
        if isinstance(other, Rotation):
            return Rotation.from_array(self.as_array() @ other.as_array())
        return NotImplemented

    def apply_to_array(self, points: "NDArray[np.integer]") -> "NDArray[np.int64]":
        """Rotate an Nx3 array of points (row vectors)."""
        points = np.asarray(points, dtype=np.int64)
        if points.size == 0:
            return points.reshape(0, 3)
        return points @ self.as_array().T

    def transpose(self) -> "Rotation":
        return Rotation(tuple(zip(*self.entries)))

    def inverse(self) -> "Rotation":
        # Orthogonal matrices are inverted by their transpose.
        return self.transpose()

    def determinant(self) -> int:
        return int(round(np.linalg.det(self.as_array())))

    def __str__(self) -> str:
        return "\n".join("[" + " ".join(f"{v:>2}" for v in row) + "]" for row in self.entries)


# Elementary generators
_TURN = Rotation(((0, 1, 0), (-1, 0, 0), (0, 0, 1)))
_ROLL = Rotation(((1, 0, 0), (0, 0, -1), (0, 1, 0)))


def _generate_rotations() -> Tuple[Rotation, ...]:
    """Close {identity} under left multiplication by the generators (BFS order)."""
    found = [Rotation.identity()]
    seen = set(found)
    frontier = list(found)
    while frontier:
        next_frontier = []
        for current in frontier:
            for generator in (_TURN, _ROLL):
                product = generator @ current
                if product not in seen:
                    seen.add(product)
                    found.append(product)
                    next_frontier.append(product)
        frontier = next_frontier
    return tuple(found)


ROTATIONS: Tuple[Rotation, ...] = _generate_rotations()


class RotationGroup:
    """
    Restartable view over the 24 lattice rotations.

    Iterating yields a fresh iterator each time, so the group can be walked
    repeatedly (and concurrently) without side effects.
    """

    def __init__(self) -> None:
        self._members = ROTATIONS
        self._lookup = frozenset(ROTATIONS)

    def __iter__(self) -> Iterator[Rotation]:
        return iter(self._members)

    def __len__(self) -> int:
        return len(self._members)

    def __contains__(self, rotation: object) -> bool:
        return rotation in self._lookup

    def find_mapping(self, source: Vector, target: Vector) -> Optional[Rotation]:
        """
        Find the first rotation R with R @ source == target.

        Symmetric vectors (repeated or zero coordinates) can be mapped by more
        than one rotation; only the first in enumeration order is returned.

        Returns:
            The rotation, or None if no lattice rotation relates the vectors.
        """
        if source.squared_length() != target.squared_length():
            return None
        for rotation in self._members:
            if rotation @ source == target:
                return rotation
        return None
