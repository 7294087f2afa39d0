"""
Integer lattice vectors.

A Vector is both a point and a displacement. All coordinates are exact Python
integers, so equality and hashing are structural and never subject to
floating-point noise.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, Tuple, TYPE_CHECKING

import numpy as np

if TYPE_CHECKING:
    from numpy.typing import NDArray


@dataclass(frozen=True)
class Vector:
    """Immutable integer 3-vector.

    Attributes:
        x: X coordinate
        y: Y coordinate
        z: Z coordinate

    Example:
        >>> a = Vector(1, -2, 3)
        >>> (a - Vector(0, 0, 3)).norm()
        3
    """

    x: int
    y: int
    z: int

    def __post_init__(self) -> None:
        # Accept numpy integers and normalise them; reject anything inexact.
        for name in ("x", "y", "z"):
            value = getattr(self, name)
            if isinstance(value, (bool, np.bool_)) or not isinstance(value, (int, np.integer)):
                raise TypeError(f"Vector.{name} must be an integer, got {value!r}")
            object.__setattr__(self, name, int(value))

    @classmethod
    def origin(cls) -> "Vector":
        return cls(0, 0, 0)

    @classmethod
    def from_array(cls, row: "NDArray[np.integer] | Iterable[int]") -> "Vector":
        """Create a vector from a length-3 sequence or array row."""
        values = [int(v) for v in row]
        if len(values) != 3:
            raise ValueError(f"Expected 3 coordinates, got {len(values)}")
        return cls(*values)

    def __add__(self, other: "Vector") -> "Vector":
        if not isinstance(other, Vector):
            return NotImplemented
        return Vector(self.x + other.x, self.y + other.y, self.z + other.z)

    def __sub__(self, other: "Vector") -> "Vector":
        if not isinstance(other, Vector):
            return NotImplemented
        return Vector(self.x - other.x, self.y - other.y, self.z - other.z)

    def __neg__(self) -> "Vector":
        return Vector(-self.x, -self.y, -self.z)

    def norm(self) -> int:
        """Manhattan length |x| + |y| + |z|."""
        return abs(self.x) + abs(self.y) + abs(self.z)

    def squared_length(self) -> int:
        return self.x * self.x + self.y * self.y + self.z * self.z

    def as_tuple(self) -> Tuple[int, int, int]:
        return (self.x, self.y, self.z)

    def as_array(self) -> "NDArray[np.int64]":
        return np.array([self.x, self.y, self.z], dtype=np.int64)

    def __str__(self) -> str:
        return f"{self.x},{self.y},{self.z}"
