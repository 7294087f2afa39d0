"""
Exact Alignment

Finds the lattice rotation and integer translation that map a candidate cloud
onto a reference cloud, if at least `min_overlap` candidate points land exactly
on reference points.

The search is driven by the distance index of both clouds:
1. Keep only distances present in both clouds (fingerprint intersection)
2. Visit distances with the fewest candidate pairs first
3. For every reference pair (v1, v2) and candidate pair (w1, w2) at that
   distance, look for a rotation R with R @ (w2 - w1) == v2 - v1 and derive
   t = v1 - R @ w1
4. Map all candidate points through (R, t) and count exact coincidences

No tolerances are applied anywhere.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import FrozenSet, Optional, Set, Tuple

from ..geometry.rotation import Rotation, RotationGroup
from ..geometry.transformation import Transformation
from ..geometry.vector import Vector
from ..utils.logging import setup_logger
from .point_cloud import PointCloud

logger = setup_logger(__name__)

MIN_OVERLAP = 12


@dataclass(frozen=True)
class AlignmentResult:
    """Outcome of a successful alignment."""

    transformation: Transformation
    mapped_points: FrozenSet[Vector]
    overlap: int


@dataclass
class ExactAligner:
    """
    Overlap detection and pose recovery between two point clouds.

    Attributes:
        min_overlap: Number of coincident points required to accept a pose
        rotations: Rotation group searched for each candidate pair
    """

    min_overlap: int = MIN_OVERLAP
    rotations: RotationGroup = field(default_factory=RotationGroup, repr=False)

    def __post_init__(self) -> None:
        if self.min_overlap < 1:
            raise ValueError(f"min_overlap must be >= 1, got {self.min_overlap}")

    def align(self, reference: PointCloud, candidate: PointCloud) -> Optional[AlignmentResult]:
        """
        Try to express `candidate` in the frame of `reference`.

        Args:
            reference: Cloud defining the target frame (not modified)
            candidate: Cloud in its own local frame (not modified)

        Returns:
            AlignmentResult with the pose and the candidate points mapped into
            the reference frame, or None if no pose reaches min_overlap.
        """
        name = candidate.label or "candidate"
        if len(candidate) < self.min_overlap or len(reference) < self.min_overlap:
            logger.debug(
                "Skipping %s: too few points (candidate=%d, reference=%d, need %d)",
                name, len(candidate), len(reference), self.min_overlap,
            )
            return None

        shared = reference.fingerprint() & candidate.fingerprint()
        if not shared:
            logger.debug("No shared distances between reference and %s", name)
            return None
        # Rare distances first; ties by value keep the search deterministic
        ordered = sorted(shared, key=lambda d: (len(candidate.pairs_at(d)), d))

        reference_keys = {p.as_tuple() for p in reference.points}
        candidate_array = candidate.as_array()
        tried: Set[Tuple[Rotation, Vector]] = set()
        attempts = 0

        for d in ordered:
            candidate_pairs = candidate.pairs_at(d)
            for v1, v2 in reference.pairs_at(d):
                v = v2 - v1
                for w1, w2 in candidate_pairs:
                    rotation = self.rotations.find_mapping(w2 - w1, v)
                    if rotation is None:
                        continue
                    translation = v1 - rotation @ w1
                    if (rotation, translation) in tried:
                        continue
                    tried.add((rotation, translation))
                    attempts += 1

                    transformation = Transformation(rotation, translation)
                    mapped = transformation.apply_to_array(candidate_array)
                    mapped_keys = set(map(tuple, mapped.tolist()))
                    overlap = len(mapped_keys & reference_keys)
                    if overlap >= self.min_overlap:
                        logger.debug(
                            "Aligned %s after %d hypotheses: overlap=%d, translation=%s",
                            name, attempts, overlap, translation,
                        )
                        return AlignmentResult(
                            transformation=transformation,
                            mapped_points=frozenset(Vector(*k) for k in mapped_keys),
                            overlap=overlap,
                        )

        logger.debug("No alignment for %s (%d hypotheses tested)", name, attempts)
        return None
