"""
Tests for the registration fixpoint loop.
"""

from pathlib import Path
import sys

import pytest

# Ensure src is importable
sys.path.append(str(Path(__file__).parent.parent / "src"))

from lattice_registration.alignment import (
    ExactAligner,
    RegistrationController,
    RegistrationStalledError,
    RegistrationState,
)
from lattice_registration.alignment.point_cloud import PointCloud
from lattice_registration.geometry import Transformation, Vector


def test_two_scans_merge_in_one_pass(four_scan_scene):
    s = four_scan_scene
    result = RegistrationController([s.a, s.b]).run()

    assert result.complete
    assert not result.stalled
    assert result.passes == 1
    assert result.transformations[0] == Transformation.identity()
    assert result.transformations[1] == s.pose_b
    assert result.positions == [Vector.origin(), s.pose_b.translation]
    # 25 + 24 points with 12 shared
    assert len(result.points) == 37


def test_retry_after_merge_then_stall(four_scan_scene):
    s = four_scan_scene
    # c is listed before b, so it cannot align until b has been merged
    result = RegistrationController([s.a, s.c, s.b, s.d]).run()

    assert result.stalled
    assert not result.complete
    assert result.passes == 3
    assert result.resolved_in_pass == {0: 0, 2: 1, 1: 2}
    assert result.unresolved == [3]
    assert result.total == 4
    assert len(result.transformations) == 3
    assert result.transformations[2] == s.pose_b
    assert result.transformations[1] == s.pose_c
    assert result.positions == [Vector.origin(), s.pose_b.translation, s.pose_c.translation]
    assert result.points == frozenset(s.merged)


def test_sequential_pass_sees_earlier_merges(four_scan_scene):
    s = four_scan_scene
    result = RegistrationController([s.a, s.b, s.c]).run()
    assert result.complete
    assert result.passes == 1
    assert result.resolved_in_pass == {0: 0, 1: 1, 2: 1}
    assert result.points == frozenset(s.merged)


def test_raise_for_stall_carries_partial_result(four_scan_scene):
    s = four_scan_scene
    result = RegistrationController([s.a, s.b, s.d]).run()
    with pytest.raises(RegistrationStalledError) as excinfo:
        result.raise_for_stall()
    assert excinfo.value.result is result
    # The partial merge is still valid
    assert result.transformations[1] == s.pose_b
    assert result.unresolved == [2]


def test_complete_result_does_not_raise(four_scan_scene):
    s = four_scan_scene
    result = RegistrationController([s.a, s.b]).run()
    result.raise_for_stall()


def test_single_scan_is_trivially_complete(four_scan_scene):
    controller = RegistrationController([four_scan_scene.a])
    assert controller.state is RegistrationState.DONE
    result = controller.run()
    assert result.complete
    assert result.passes == 0
    assert result.positions == [Vector.origin()]
    assert len(result.points) == 25


def test_step_transitions(four_scan_scene):
    s = four_scan_scene
    controller = RegistrationController([s.a, s.c, s.b])
    assert controller.state is RegistrationState.CONVERGING
    assert controller.result.unresolved == [1, 2]
    assert not controller.result.complete
    assert controller.step() == 1
    assert controller.state is RegistrationState.CONVERGING
    assert controller.result.unresolved == [1]
    assert not controller.result.complete
    assert controller.step() == 1
    assert controller.state is RegistrationState.DONE
    assert controller.step() == 0
    assert controller.result.complete
    assert controller.result.unresolved == []
    assert controller.result.total == 3


def test_step_reports_stall_without_run(four_scan_scene):
    s = four_scan_scene
    controller = RegistrationController([s.a, s.d])
    assert controller.step() == 0
    assert controller.state is RegistrationState.DONE
    result = controller.result
    assert result.stalled
    assert not result.complete
    assert result.unresolved == [1]
    assert result.total == 2
    with pytest.raises(RegistrationStalledError):
        result.raise_for_stall()


def test_inputs_are_not_modified(four_scan_scene):
    s = four_scan_scene
    before = set(s.a.points)
    RegistrationController([s.a, s.b]).run()
    assert s.a.points == before


def test_custom_aligner_threshold(four_scan_scene):
    s = four_scan_scene
    # a and b share only 12 points
    result = RegistrationController([s.a, s.b], aligner=ExactAligner(min_overlap=13)).run()
    assert result.stalled
    assert result.passes == 1
    assert result.unresolved == [1]


def test_empty_input_rejected():
    with pytest.raises(ValueError):
        RegistrationController([])


def test_each_scan_merged_once(four_scan_scene):
    s = four_scan_scene
    duplicate_b = PointCloud.from_points(s.b.points, label="b again")
    result = RegistrationController([s.a, s.b, duplicate_b]).run()
    assert result.complete
    assert len(result.positions) == 3
    assert result.transformations[1] == result.transformations[2] == s.pose_b
    assert len(result.points) == 37
