"""
Data Preprocessing Module

Reading scanner reports into point clouds.
"""

from .loader import ScanReportLoader

__all__ = [
    "ScanReportLoader",
]
