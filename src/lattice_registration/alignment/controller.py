"""
Registration Controller

Drives the fixpoint merge loop. The first input cloud defines the reference
frame (identity pose). Every pass tries to align each still-pending cloud
against the growing reference; successes are merged immediately and recorded.
Clouds that failed are retried on the next pass, because points merged in the
meantime can create new overlaps.

The loop ends when no cloud is pending (complete) or when a whole pass merges
nothing (stalled). A stall is reported on the result, not raised, so the
partial registration stays usable.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, FrozenSet, List, Optional, Sequence, TYPE_CHECKING

from ..geometry.transformation import Transformation
from ..geometry.vector import Vector
from ..utils.logging import setup_logger
from .aligner import AlignmentResult, ExactAligner
from .point_cloud import PointCloud

if TYPE_CHECKING:
    from ..acceleration.parallel_executor import AlignmentParallelExecutor

logger = setup_logger(__name__)


class RegistrationState(Enum):
    CONVERGING = "converging"
    DONE = "done"


class RegistrationStalledError(RuntimeError):
    """Raised on request when some clouds could not be related to the reference."""

    def __init__(self, result: "RegistrationResult"):
        self.result = result
        super().__init__(
            f"Registration stalled after {result.passes} passes: "
            f"{len(result.unresolved)} of {result.total} scans unaligned "
            f"(indices {result.unresolved})"
        )


@dataclass
class RegistrationResult:
    """
    Final (or partial) state of a registration run.

    Attributes:
        reference: Merged cloud in the frame of the first input cloud
        transformations: Input index -> pose; index 0 is the identity
        positions: Resolved scanner positions, origin first, then in
            resolution order
        resolved_in_pass: Input index -> pass number that resolved it (0 for
            the initial reference)
        unresolved: Input indices still pending (kept current after every pass)
        total: Number of input clouds
        passes: Number of passes run
        stalled: True when the loop stopped with pending clouds left
    """

    reference: PointCloud
    transformations: Dict[int, Transformation] = field(default_factory=dict)
    positions: List[Vector] = field(default_factory=list)
    resolved_in_pass: Dict[int, int] = field(default_factory=dict)
    unresolved: List[int] = field(default_factory=list)
    total: int = 1
    passes: int = 0
    stalled: bool = False

    @property
    def points(self) -> FrozenSet[Vector]:
        return frozenset(self.reference.points)

    @property
    def complete(self) -> bool:
        return not self.stalled and not self.unresolved

    def raise_for_stall(self) -> None:
        if self.stalled:
            raise RegistrationStalledError(self)


class RegistrationController:
    """
    Merge a collection of point clouds into a single frame.

    Example:
        controller = RegistrationController(clouds)
        result = controller.run()
        if result.stalled:
            ...
    """

    def __init__(
        self,
        clouds: Sequence[PointCloud],
        aligner: Optional[ExactAligner] = None,
        executor: Optional["AlignmentParallelExecutor"] = None,
    ):
        """
        Args:
            clouds: Input clouds; the first one becomes the reference frame
            aligner: Aligner used for every attempt (default: ExactAligner())
            executor: Optional parallel executor. When given, each pass aligns
                all pending clouds against a snapshot of the reference and
                merges the successes afterwards, in input order.

        Raises:
            ValueError: If no clouds are given
        """
        if not clouds:
            raise ValueError("Registration needs at least one point cloud")
        self.clouds = list(clouds)
        self.aligner = aligner or ExactAligner()
        self.executor = executor

        self.reference = self.clouds[0].copy(label=self.clouds[0].label or "reference")
        self.pending: List[int] = list(range(1, len(self.clouds)))
        self.result = RegistrationResult(reference=self.reference, total=len(self.clouds))
        self.result.unresolved = list(self.pending)
        self.result.transformations[0] = Transformation.identity()
        self.result.positions.append(Vector.origin())
        self.result.resolved_in_pass[0] = 0
        self.state = RegistrationState.CONVERGING if self.pending else RegistrationState.DONE

    def run(self) -> RegistrationResult:
        """
        Run passes until every cloud is merged or a pass makes no progress.

        Returns:
            RegistrationResult (check `stalled` / `complete`)
        """
        logger.info(
            "Starting registration of %d scans (reference has %d points)",
            len(self.clouds), len(self.reference),
        )
        while self.state is RegistrationState.CONVERGING:
            self.step()
        return self.result

    def step(self) -> int:
        """
        Run one full pass over the pending clouds.

        Returns:
            Number of clouds merged during the pass
        """
        if self.state is RegistrationState.DONE:
            return 0
        self.result.passes += 1
        pass_number = self.result.passes
        logger.info("Pass %d: %d scans pending", pass_number, len(self.pending))

        if self.executor is not None:
            candidates = [self.clouds[i] for i in self.pending]
            outcomes = self.executor.map_alignments(self.aligner, self.reference, candidates)
            merged = 0
            for idx, outcome in zip(list(self.pending), outcomes):
                if outcome is not None:
                    self._accept(idx, outcome, pass_number)
                    merged += 1
        else:
            merged = 0
            for idx in list(self.pending):
                outcome = self.aligner.align(self.reference, self.clouds[idx])
                if outcome is not None:
                    self._accept(idx, outcome, pass_number)
                    merged += 1

        logger.info("Pass %d merged %d scans", pass_number, merged)
        self.result.unresolved = list(self.pending)
        if not self.pending or merged == 0:
            self._finish()
        return merged

    def _finish(self) -> None:
        self.state = RegistrationState.DONE
        self.result.stalled = bool(self.pending)
        if self.result.stalled:
            logger.warning(
                "Registration stalled after %d passes: %d of %d scans unaligned",
                self.result.passes, len(self.pending), len(self.clouds),
            )
        else:
            logger.info(
                "Registration complete after %d passes: %d points in merged cloud",
                self.result.passes, len(self.reference),
            )

    def _accept(self, idx: int, outcome: AlignmentResult, pass_number: int) -> None:
        # Single writer: only the controller loop mutates the reference.
        added = self.reference.merge(outcome.mapped_points)
        self.pending.remove(idx)
        transformation = outcome.transformation
        self.result.transformations[idx] = transformation
        self.result.positions.append(transformation.translation)
        self.result.resolved_in_pass[idx] = pass_number
        logger.info(
            "Merged %s at %s (overlap %d, %d new points, reference now %d)",
            self.clouds[idx].label or f"scan {idx}",
            transformation.translation, outcome.overlap, added, len(self.reference),
        )
