"""
Acceleration Module

Process-level parallelism for registration passes.
"""

from .parallel_executor import AlignmentParallelExecutor

__all__ = [
    "AlignmentParallelExecutor",
]
