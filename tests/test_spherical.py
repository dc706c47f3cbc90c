"""Tests for the great-circle primitives."""

from __future__ import annotations

import numpy as np
import pytest

from survey_geometry.models import Coordinate
from survey_geometry.spherical import (
    bearing,
    destination,
    distance,
    haversine_array,
    interpolate,
    midpoint,
    normalize_longitude,
)

ONE_DEGREE_M = 111_194.93


def test_distance_one_degree_of_longitude_on_equator() -> None:
    a = Coordinate(0.0, 0.0)
    b = Coordinate(0.0, 1.0)
    assert distance(a, b) == pytest.approx(ONE_DEGREE_M, rel=1e-6)
    assert distance(a, b) == pytest.approx(111_320.0, rel=2e-3)
    assert distance(b, a) == distance(a, b)


def test_distance_same_point_is_zero() -> None:
    a = Coordinate(45.0, 7.0)
    assert distance(a, a.clone()) == 0.0


def test_slant_distance_uses_elevation_when_both_present() -> None:
    low = Coordinate(0.0, 0.0, 0.0)
    high = Coordinate(0.0, 0.0, 100.0)
    assert distance(low, high, include_elevation=True) == pytest.approx(100.0)
    assert distance(low, high) == 0.0

    a = Coordinate(0.0, 0.0, 0.0)
    b = Coordinate(0.0, 0.001, 50.0)
    flat = distance(a, b)
    assert distance(a, b, include_elevation=True) == pytest.approx(
        float(np.hypot(flat, 50.0))
    )


def test_slant_distance_ignored_when_elevation_missing() -> None:
    a = Coordinate(0.0, 0.0, 10.0)
    b = Coordinate(0.0, 0.001)
    assert distance(a, b, include_elevation=True) == distance(a, b)


@pytest.mark.parametrize(
    "target,expected",
    [
        (Coordinate(1.0, 0.0), 0.0),
        (Coordinate(0.0, 1.0), 90.0),
        (Coordinate(-1.0, 0.0), 180.0),
        (Coordinate(0.0, -1.0), 270.0),
    ],
)
def test_bearing_cardinal_directions(target: Coordinate, expected: float) -> None:
    assert bearing(Coordinate(0.0, 0.0), target) == pytest.approx(expected)


def test_bearing_coincident_points_is_zero() -> None:
    a = Coordinate(10.0, 10.0)
    assert bearing(a, a) == 0.0


def test_bearing_range() -> None:
    result = bearing(Coordinate(0.0, 0.0), Coordinate(-0.001, -1e-12))
    assert 0.0 <= result < 360.0


@pytest.mark.parametrize(
    "origin",
    [
        Coordinate(51.5, -0.12, 30.0),
        Coordinate(89.9, 45.0, 30.0),
        Coordinate(-89.9, -120.0, 30.0),
        Coordinate(0.0, 179.95, 30.0),
    ],
)
@pytest.mark.parametrize("distance_m", [1000.0, 12_000_000.0])
@pytest.mark.parametrize("heading", [10.0, 90.0, 135.0, 222.0, 301.5])
def test_destination_round_trip(origin: Coordinate, distance_m: float, heading: float) -> None:
    target = destination(origin, distance_m, heading)
    assert distance(origin, target) == pytest.approx(distance_m, rel=1e-9)
    assert bearing(origin, target) == pytest.approx(heading, abs=1e-6)
    assert target.elevation == 30.0


@pytest.mark.parametrize("origin", [Coordinate(51.5, -0.12), Coordinate(0.0, 179.95)])
def test_destination_zero_distance_stays_put(origin: Coordinate) -> None:
    target = destination(origin, 0.0, 222.0)
    assert distance(origin, target) == pytest.approx(0.0, abs=1e-6)
    assert target.latitude == pytest.approx(origin.latitude, abs=1e-12)
    assert target.longitude == pytest.approx(origin.longitude, abs=1e-12)


def test_destination_normalises_longitude_across_antimeridian() -> None:
    origin = Coordinate(0.0, 179.99)
    target = destination(origin, 5000.0, 90.0)
    assert -180.0 <= target.longitude < -179.9


def test_normalize_longitude() -> None:
    assert normalize_longitude(190.0) == pytest.approx(-170.0)
    assert normalize_longitude(-190.0) == pytest.approx(170.0)
    assert normalize_longitude(180.0) == pytest.approx(-180.0)


def test_interpolate_endpoints_are_exact() -> None:
    a = Coordinate(10.0, 20.0, 1.0)
    b = Coordinate(11.0, 21.0, 3.0)
    assert interpolate(a, b, 0.0) == a
    assert interpolate(a, b, 1.0) == b
    assert interpolate(a, b, -2.0) == a
    assert interpolate(a, b, 5.0) == b


def test_interpolate_follows_great_circle_and_elevation() -> None:
    a = Coordinate(0.0, 0.0, 0.0)
    b = Coordinate(0.0, 10.0, 100.0)
    mid = interpolate(a, b, 0.5)
    assert mid.latitude == pytest.approx(0.0, abs=1e-12)
    assert mid.longitude == pytest.approx(5.0)
    assert mid.elevation == pytest.approx(50.0)


def test_interpolate_high_latitude_bulges_poleward() -> None:
    a = Coordinate(60.0, -30.0)
    b = Coordinate(60.0, 30.0)
    mid = interpolate(a, b, 0.5)
    assert mid.latitude > 60.0
    assert distance(a, mid) == pytest.approx(distance(mid, b), rel=1e-9)


def test_interpolate_drops_elevation_when_one_side_missing() -> None:
    mid = interpolate(Coordinate(0.0, 0.0, 5.0), Coordinate(0.0, 1.0), 0.5)
    assert mid.elevation is None


def test_interpolate_antipodal_points_go_north() -> None:
    mid = interpolate(Coordinate(0.0, 0.0), Coordinate(0.0, 180.0), 0.5)
    assert mid.latitude == pytest.approx(90.0)


def test_interpolate_nearly_coincident_points_stay_between() -> None:
    a = Coordinate(10.0, 20.0)
    b = Coordinate(10.0, 20.0 + 5e-11)
    mid = interpolate(a, b, 0.5)
    assert mid.latitude == pytest.approx(10.0, abs=1e-12)
    assert 20.0 + 1e-11 < mid.longitude < 20.0 + 4e-11


def test_midpoint_matches_half_interpolation() -> None:
    a = Coordinate(40.0, -74.0)
    b = Coordinate(51.5, -0.12)
    assert midpoint(a, b) == interpolate(a, b, 0.5)


def test_haversine_array_matches_scalar_distance() -> None:
    a = Coordinate(12.0, 34.0)
    b = Coordinate(12.5, 33.2)
    result = haversine_array([a.latitude], [a.longitude], [b.latitude], [b.longitude])
    assert result.shape == (1,)
    assert float(result[0]) == pytest.approx(distance(a, b), rel=1e-12)
