"""
Utility Functions Module

This module provides common utility functions used across the project.
- Logging
- Configuration loading
- Export utilities for points, poses and summaries
"""

from .logging import setup_logger
from .config import AppConfig, load_config
from .export import (
    export_points_to_csv,
    save_transform_matrix,
    load_transform_matrix,
    export_registration,
)

__all__ = [
    "setup_logger",
    "AppConfig",
    "load_config",
    "export_points_to_csv",
    "save_transform_matrix",
    "load_transform_matrix",
    "export_registration",
]
