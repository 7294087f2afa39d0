"""
Tests for PointCloud and its pairwise-distance index.
"""

from pathlib import Path
import sys

import numpy as np
import pytest

# Ensure src is importable
sys.path.append(str(Path(__file__).parent.parent / "src"))

from lattice_registration.alignment.point_cloud import PointCloud
from lattice_registration.geometry import Vector
from conftest import make_random_points


def _assert_index_consistent(cloud: PointCloud) -> None:
    points = cloud.points
    n = len(points)
    total_pairs = 0
    for d, pairs in cloud.index.items():
        for p, q in pairs:
            assert p in points and q in points
            assert p != q
            assert (q - p).norm() == d
        total_pairs += len(pairs)
    # Every ordered pair of distinct points, exactly once
    assert total_pairs == n * (n - 1)
    for p in points:
        for q in points:
            if p != q:
                assert (p, q) in cloud.index[(q - p).norm()]


def test_index_built_on_construction():
    cloud = PointCloud.from_points(make_random_points(15, seed=1))
    assert len(cloud) == 15
    _assert_index_consistent(cloud)


def test_index_small_example():
    a, b, c = Vector(0, 0, 0), Vector(1, 2, 0), Vector(0, 0, 3)
    cloud = PointCloud.from_points([a, b, c])
    assert cloud.fingerprint() == {3, 6}
    assert cloud.pairs_at(3) == {(a, b), (b, a), (a, c), (c, a)}
    assert cloud.pairs_at(6) == {(b, c), (c, b)}
    assert cloud.pairs_at(42) == set()


def test_empty_and_single_point_clouds_have_no_pairs():
    assert PointCloud().index == {}
    assert PointCloud.from_points([Vector(1, 1, 1)]).index == {}


def test_duplicate_points_collapse():
    cloud = PointCloud.from_points([Vector(1, 2, 3), Vector(1, 2, 3), Vector(0, 0, 0)])
    assert len(cloud) == 2
    assert cloud.fingerprint() == {6}


def test_merge_refreshes_index():
    points = make_random_points(20, seed=2)
    cloud = PointCloud.from_points(points[:12])
    added = cloud.merge(points[8:])
    assert added == 8
    assert cloud.points == set(points)
    _assert_index_consistent(cloud)


def test_merge_is_idempotent():
    points = make_random_points(18, seed=4)
    cloud = PointCloud.from_points(points[:10])
    cloud.merge(points[10:])
    snapshot_points = set(cloud.points)
    snapshot_index = {d: set(pairs) for d, pairs in cloud.index.items()}

    assert cloud.merge(points[10:]) == 0
    assert cloud.merge(points) == 0
    assert cloud.points == snapshot_points
    assert cloud.index == snapshot_index


def test_from_array():
    array = np.array([[1, 2, 3], [4, 5, 6], [1, 2, 3]], dtype=np.int32)
    cloud = PointCloud.from_array(array, label="scan")
    assert cloud.label == "scan"
    assert cloud.points == {Vector(1, 2, 3), Vector(4, 5, 6)}
    assert cloud.as_array().tolist() == [[1, 2, 3], [4, 5, 6]]


def test_from_array_rejects_bad_shapes():
    with pytest.raises(ValueError):
        PointCloud.from_array(np.zeros((4, 2), dtype=np.int64))
    with pytest.raises(ValueError):
        PointCloud.from_array(np.zeros((4, 3), dtype=float))


def test_copy_is_independent():
    cloud = PointCloud.from_points(make_random_points(5, seed=6), label="orig")
    clone = cloud.copy()
    clone.merge([Vector(5000, 5000, 5000)])
    assert len(cloud) == 5
    assert len(clone) == 6
    assert clone.label == "orig"
    assert Vector(5000, 5000, 5000) not in cloud
