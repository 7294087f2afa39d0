"""
Lattice Geometry Module

Exact integer primitives used by the registration engine:
- Vector: points and displacements
- Rotation / RotationGroup: the 24 cube rotations
- Transformation: rotation + translation poses
"""

from .vector import Vector
from .rotation import Rotation, RotationGroup, ROTATIONS
from .transformation import Transformation

__all__ = [
    "Vector",
    "Rotation",
    "RotationGroup",
    "ROTATIONS",
    "Transformation",
]
