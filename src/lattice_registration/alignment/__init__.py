"""
Spatial Alignment Module

This module provides exact registration of integer point clouds: the distance
indexed PointCloud, pairwise ExactAligner, and the RegistrationController that
merges every cloud into one reference frame.
"""

from .point_cloud import PointCloud
from .aligner import ExactAligner, AlignmentResult, MIN_OVERLAP
from .controller import (
    RegistrationController,
    RegistrationResult,
    RegistrationState,
    RegistrationStalledError,
)

__all__ = [
    "PointCloud",
    "ExactAligner",
    "AlignmentResult",
    "MIN_OVERLAP",
    "RegistrationController",
    "RegistrationResult",
    "RegistrationState",
    "RegistrationStalledError",
]
