"""
Shared synthetic fixtures for registration tests.

Scenes are built in a single "world" frame (the frame of the first scan) and
each scan is then expressed in its own local frame through the inverse of a
known pose.
"""

from pathlib import Path
import sys
from types import SimpleNamespace

import numpy as np
import pytest

# Ensure src is importable
sys.path.append(str(Path(__file__).parent.parent / "src"))

from lattice_registration.alignment.point_cloud import PointCloud
from lattice_registration.geometry import ROTATIONS, Transformation, Vector


def make_random_points(n: int, seed: int, offset=(0, 0, 0), spread: int = 1000):
    """n distinct random lattice points in [-spread, spread]^3 + offset, sorted."""
    rng = np.random.default_rng(seed)
    ox, oy, oz = offset
    points = set()
    while len(points) < n:
        x, y, z = rng.integers(-spread, spread + 1, size=3).tolist()
        points.add(Vector(x + ox, y + oy, z + oz))
    return sorted(points, key=Vector.as_tuple)


def to_local(world_points, pose: Transformation, label=None) -> PointCloud:
    """Express world points in the local frame of a scan with the given pose."""
    return PointCloud.from_points(pose.inverse().apply_to_points(world_points), label=label)


def to_report(clouds) -> str:
    lines = []
    for i, cloud in enumerate(clouds):
        lines.append(f"--- scanner {i} ---")
        lines.extend(str(p) for p in sorted(cloud.points, key=Vector.as_tuple))
        lines.append("")
    return "\n".join(lines)


@pytest.fixture
def four_scan_scene():
    """
    Four scans:
      a: reference (identity pose), 25 points
      b: shares exactly 12 points with a
      c: shares 12 points with b only
      d: unrelated to all others
    Merged a+b+c holds 49 distinct points.
    """
    base = make_random_points(49, seed=7)
    pose_b = Transformation(ROTATIONS[5], Vector(68, -1246, -43))
    pose_c = Transformation(ROTATIONS[17], Vector(1105, -1205, 1229))
    pose_d = Transformation(ROTATIONS[11], Vector(-92, -2380, -20))

    a = PointCloud.from_points(base[0:25], label="scanner a")
    b = to_local(base[13:37], pose_b, label="scanner b")
    c = to_local(base[25:49], pose_c, label="scanner c")
    d = to_local(make_random_points(20, seed=99, offset=(100000, 0, 0)), pose_d, label="scanner d")

    return SimpleNamespace(
        a=a, b=b, c=c, d=d,
        pose_b=pose_b, pose_c=pose_c, pose_d=pose_d,
        merged=set(base),
    )
