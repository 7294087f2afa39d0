"""
Tests for the scan report loader.
"""

from pathlib import Path
import sys

import pytest

# Ensure src is importable
sys.path.append(str(Path(__file__).parent.parent / "src"))

from lattice_registration.geometry import Vector
from lattice_registration.preprocessing.loader import ScanReportLoader


REPORT = """\
--- scanner 0 ---
404,-588,-901
528,-643,409
-838,591,734

--- scanner 1 ---
686,422,578
605,423,415
 686 , 422 , 578
"""


def test_parse_blocks():
    scans = ScanReportLoader().parse_text(REPORT)
    assert len(scans) == 2
    assert scans[0].label == "scanner 0"
    assert scans[1].label == "scanner 1"
    assert scans[0].points == {
        Vector(404, -588, -901),
        Vector(528, -643, 409),
        Vector(-838, 591, 734),
    }
    # Duplicate record collapses, whitespace is ignored
    assert scans[1].points == {Vector(686, 422, 578), Vector(605, 423, 415)}
    assert scans[0].fingerprint()


def test_header_without_points_is_skipped():
    text = "--- scanner 0 ---\n--- scanner 1 ---\n1,2,3\n"
    scans = ScanReportLoader().parse_text(text)
    assert len(scans) == 1
    assert scans[0].label == "scanner 1"


def test_points_before_any_header():
    scans = ScanReportLoader().parse_text("1,2,3\n4,5,6\n")
    assert len(scans) == 1
    assert scans[0].label is None
    assert len(scans[0]) == 2


def test_invalid_point_reports_line():
    with pytest.raises(ValueError, match="line 3"):
        ScanReportLoader().parse_text("--- scanner 0 ---\n1,2,3\n1,x,3\n")


def test_non_triplet_rejected():
    with pytest.raises(ValueError, match="expected 3 coordinates"):
        ScanReportLoader().parse_text("--- scanner 0 ---\n1,2\n")
    with pytest.raises(ValueError):
        ScanReportLoader().parse_text("--- scanner 0 ---\n1,2,3,4\n")


def test_empty_report_rejected():
    with pytest.raises(ValueError, match="no scans"):
        ScanReportLoader().parse_text("")
    with pytest.raises(ValueError, match="no scans"):
        ScanReportLoader().parse_text("--- scanner 0 ---\n\n")


def test_load_from_file(tmp_path):
    path = tmp_path / "report.txt"
    path.write_text(REPORT, encoding="utf-8")
    scans = ScanReportLoader().load(str(path))
    assert [len(s) for s in scans] == [3, 2]


def test_load_missing_file(tmp_path):
    with pytest.raises(FileNotFoundError):
        ScanReportLoader().load(str(tmp_path / "missing.txt"))


def test_load_directory_rejected(tmp_path):
    with pytest.raises(FileNotFoundError, match="Not a regular file"):
        ScanReportLoader().load(str(tmp_path))


def test_coordinates_must_be_plain_integers():
    loader = ScanReportLoader()
    with pytest.raises(ValueError, match="line 2"):
        loader.parse_text("--- scanner 0 ---\n1_000,2,3\n")
    # Arabic-Indic digit one
    with pytest.raises(ValueError, match="line 2"):
        loader.parse_text("--- scanner 0 ---\n١,2,3\n")
    with pytest.raises(ValueError):
        loader.parse_text("--- scanner 0 ---\n1.5,2,3\n")
    with pytest.raises(ValueError):
        loader.parse_text("--- scanner 0 ---\n1,,3\n")


def test_signed_coordinates_accepted():
    scans = ScanReportLoader().parse_text("--- scanner 0 ---\n+5,-3,0\n")
    assert scans[0].points == {Vector(5, -3, 0)}
