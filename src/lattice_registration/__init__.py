"""
Lattice Registration Package

A Python package for merging overlapping integer point clouds ("scans") that
were each reported in an unknown frame, related to one another by one of the
24 cube rotations and an integer translation.
Poses are recovered exactly: pairwise-distance fingerprints prune the
correspondence search and candidate poses are verified by counting points
that coincide exactly.
"""

__version__ = "0.1.0"

from .geometry import *
from .alignment import *
from .preprocessing import *
from .reporting import *
from .utils import *

__all__ = [
    "geometry",
    "alignment",
    "preprocessing",
    "reporting",
    "utils",
]
