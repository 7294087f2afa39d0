"""
Reporting Module

Summary values computed from a finished registration.
"""

from .summary import RegistrationSummary, summarize, max_pairwise_distance

__all__ = [
    "RegistrationSummary",
    "summarize",
    "max_pairwise_distance",
]
