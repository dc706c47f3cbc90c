"""Tests for the survey-geometry command line tool."""

from __future__ import annotations

from pathlib import Path

import pytest

from survey_geometry.models import Coordinate
from survey_geometry.tools.measure import main, parse_coordinate, read_coordinates


def _write_points(tmp_path: Path, lines) -> Path:
    path = tmp_path / "points.txt"
    path.write_text("\n".join(lines) + "\n", encoding="utf-8")
    return path


def test_parse_coordinate() -> None:
    assert parse_coordinate("51.5, -0.12") == Coordinate(51.5, -0.12)
    assert parse_coordinate("1,2,3") == Coordinate(1.0, 2.0, 3.0)


def test_read_coordinates_skips_comments(tmp_path: Path) -> None:
    path = _write_points(tmp_path, ["# boundary", "", "0,0", "0,0.01,5"])
    assert read_coordinates(path) == [Coordinate(0.0, 0.0), Coordinate(0.0, 0.01, 5.0)]


def test_length_command(capsys) -> None:
    assert main(["length", "0,0", "0,0.01"]) == 0
    out = capsys.readouterr().out
    assert float(out.strip()) == pytest.approx(1111.949, abs=1e-3)


def test_closed_length_from_file(tmp_path: Path, capsys) -> None:
    path = _write_points(tmp_path, ["0,0", "0,0.01", "0.01,0.01", "0.01,0"])
    assert main(["length", "--closed", "--file", str(path)]) == 0
    assert float(capsys.readouterr().out) == pytest.approx(4 * 1111.949, rel=1e-4)


def test_area_command(tmp_path: Path, capsys) -> None:
    path = _write_points(tmp_path, ["0,0", "0,0.01", "0.01,0.01", "0.01,0"])
    assert main(["area", "--file", str(path)]) == 0
    lines = capsys.readouterr().out.splitlines()
    assert lines[0].startswith("area_m2=")
    assert float(lines[0].split("=")[1]) == pytest.approx(1_236_431.0, rel=1e-4)
    assert lines[1].startswith("perimeter_m=")


def test_profile_command_csv(capsys) -> None:
    assert main(["profile", "--format", "csv", "0,0,10", "0,0.01,25"]) == 0
    lines = capsys.readouterr().out.splitlines()
    assert lines[0] == "distance_m,elevation_m,grade_pct"
    assert len(lines) == 3
    assert lines[1].startswith("0.000,10.000,")


def test_simplify_command(capsys) -> None:
    assert main(["simplify", "--tolerance", "5", "0,0", "0.00001,0.005", "0,0.01"]) == 0
    lines = capsys.readouterr().out.splitlines()
    assert lines == ["0.00000000,0.00000000", "0.00000000,0.01000000"]


def test_invalid_coordinate_exits_with_usage_error(capsys) -> None:
    with pytest.raises(SystemExit) as excinfo:
        main(["length", "95,0", "0,0"])
    assert excinfo.value.code == 2
    assert "latitude" in capsys.readouterr().err


def test_missing_file_exits_with_usage_error(tmp_path: Path) -> None:
    with pytest.raises(SystemExit) as excinfo:
        main(["area", "--file", str(tmp_path / "missing.txt")])
    assert excinfo.value.code == 2
