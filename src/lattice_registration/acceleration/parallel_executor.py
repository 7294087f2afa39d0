"""
Parallel execution infrastructure for alignment passes.

Provides AlignmentParallelExecutor for distributing the alignment attempts of
one registration pass across multiple CPU cores using multiprocessing.

Workers only read the reference cloud; merging results back into it is left
to the caller so that there is a single writer.
"""

from __future__ import annotations

import logging
import time
from multiprocessing import Pool, cpu_count
from typing import Any, Callable, Dict, List, Optional, Sequence, Tuple

from ..alignment.aligner import AlignmentResult, ExactAligner
from ..alignment.point_cloud import PointCloud

logger = logging.getLogger(__name__)

# Per-process state installed by the pool initializer
_WORKER_STATE: Dict[str, Any] = {}


def _init_worker(aligner: ExactAligner, reference: PointCloud) -> None:
    _WORKER_STATE["aligner"] = aligner
    _WORKER_STATE["reference"] = reference


def _worker_wrapper(args: Tuple[int, PointCloud]) -> Tuple[int, Optional[AlignmentResult], Optional[str]]:
    """
    Worker wrapper function for parallel alignment attempts.

    Must be at module level for pickling on Windows.

    Args:
        args: Tuple of (candidate_index, candidate)

    Returns:
        Tuple of (candidate_index, result, error_message)
    """
    idx, candidate = args
    try:
        result = _WORKER_STATE["aligner"].align(_WORKER_STATE["reference"], candidate)
        return (idx, result, None)
    except Exception as e:
        error_msg = f"{type(e).__name__}: {str(e)}"
        logger.error(f"Worker error on candidate {idx}: {error_msg}")
        return (idx, None, error_msg)


class AlignmentParallelExecutor:
    """
    Parallel executor for alignment attempts against a fixed reference.

    Example:
        executor = AlignmentParallelExecutor(n_workers=4)
        results = executor.map_alignments(aligner, reference, pending_clouds)
    """

    def __init__(self, n_workers: Optional[int] = None):
        """
        Initialize parallel executor.

        Args:
            n_workers: Number of worker processes. If None, uses cpu_count - 1
                to leave one core for system/coordination. Minimum is 1.
        """
        if n_workers is None:
            n_workers = max(1, cpu_count() - 1)
        else:
            n_workers = max(1, int(n_workers))

        self.n_workers = n_workers

        logger.info(
            f"Initialized AlignmentParallelExecutor with {self.n_workers} workers "
            f"(total CPUs: {cpu_count()})"
        )

    def map_alignments(
        self,
        aligner: ExactAligner,
        reference: PointCloud,
        candidates: Sequence[PointCloud],
        progress_callback: Optional[Callable[[int, int], None]] = None,
    ) -> List[Optional[AlignmentResult]]:
        """
        Align every candidate against the same reference snapshot.

        Args:
            aligner: Aligner used for every attempt
            reference: Reference cloud (read-only for the duration of the call)
            candidates: Clouds to align
            progress_callback: Optional callback called after each attempt
                completes. Signature: callback(completed_count, total_count)

        Returns:
            List of results (None for failed alignments) in candidate order

        Raises:
            RuntimeError: If any alignment attempt raised
        """
        n_candidates = len(candidates)
        if n_candidates == 0:
            logger.warning("No candidates to align")
            return []

        start_time = time.time()

        # If only 1 worker or 1 candidate, use sequential processing (no pool overhead)
        if self.n_workers == 1 or n_candidates == 1:
            logger.debug("Using sequential processing (1 worker or 1 candidate)")
            results: List[Optional[AlignmentResult]] = []
            for i, candidate in enumerate(candidates):
                try:
                    results.append(aligner.align(reference, candidate))
                except Exception as e:
                    logger.error(f"Error aligning candidate {i}: {e}", exc_info=True)
                    raise RuntimeError(f"Alignment failed: {e}") from e
                if progress_callback:
                    progress_callback(i + 1, n_candidates)
            return results

        results = self._parallel_map(aligner, reference, candidates, progress_callback)
        logger.debug(
            f"Parallel alignment complete: {n_candidates} candidates in "
            f"{time.time() - start_time:.2f}s"
        )
        return results

    def _parallel_map(
        self,
        aligner: ExactAligner,
        reference: PointCloud,
        candidates: Sequence[PointCloud],
        progress_callback: Optional[Callable[[int, int], None]],
    ) -> List[Optional[AlignmentResult]]:
        """
        Execute parallel mapping using multiprocessing.Pool.

        Uses imap_unordered for responsiveness, then reorders results to match
        candidate order.
        """
        n_candidates = len(candidates)
        worker_args = list(enumerate(candidates))
        n_processes = min(self.n_workers, n_candidates)

        results_dict: Dict[int, Optional[AlignmentResult]] = {}
        errors: List[Tuple[int, str]] = []
        with Pool(processes=n_processes, initializer=_init_worker, initargs=(aligner, reference)) as pool:
            for i, (idx, result, error) in enumerate(pool.imap_unordered(_worker_wrapper, worker_args)):
                if error is not None:
                    errors.append((idx, error))
                else:
                    results_dict[idx] = result
                if progress_callback:
                    progress_callback(i + 1, n_candidates)

        if errors:
            idx, message = errors[0]
            logger.error(f"{len(errors)} alignment attempts failed; first on candidate {idx}: {message}")
            raise RuntimeError(f"Parallel alignment failed on candidate {idx}: {message}")

        return [results_dict[i] for i in range(n_candidates)]
