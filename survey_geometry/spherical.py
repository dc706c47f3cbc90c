"""Great-circle primitives on a spherical Earth.

Every function here is a pure function of its arguments. Ellipsoidal and
geoid corrections are the responsibility of an external geodesy provider;
the engine works on a sphere of radius :data:`~survey_geometry.config.EARTH_RADIUS_M`.
"""

from __future__ import annotations

import math
from typing import Optional

import numpy as np
from numpy.typing import ArrayLike, NDArray

from .config import EARTH_RADIUS_M
from .models import Coordinate, ensure_coordinate


def normalize_longitude(longitude: float) -> float:
    """Wrap a longitude in degrees into [-180, 180)."""

    return ((longitude + 540.0) % 360.0) - 180.0


def make_coordinate(
    latitude: float, longitude: float, elevation: Optional[float] = None
) -> Coordinate:
    """Build a coordinate from computed values, absorbing floating-point overshoot."""

    latitude = min(max(latitude, -90.0), 90.0)
    if not -180.0 <= longitude <= 180.0:
        longitude = normalize_longitude(longitude)
    return Coordinate(latitude, longitude, elevation)


def interpolate_elevation(
    a: Coordinate, b: Coordinate, fraction: float
) -> Optional[float]:
    if a.elevation is None or b.elevation is None:
        return None
    return a.elevation + (b.elevation - a.elevation) * fraction


def _central_angle(a: Coordinate, b: Coordinate) -> float:
    phi1 = math.radians(a.latitude)
    phi2 = math.radians(b.latitude)
    d_phi = phi2 - phi1
    d_lambda = math.radians(b.longitude - a.longitude)
    h = (
        math.sin(d_phi / 2.0) ** 2
        + math.cos(phi1) * math.cos(phi2) * math.sin(d_lambda / 2.0) ** 2
    )
    h = min(max(h, 0.0), 1.0)
    return 2.0 * math.atan2(math.sqrt(h), math.sqrt(1.0 - h))


def distance(a: Coordinate, b: Coordinate, *, include_elevation: bool = False) -> float:
    """Return the great-circle distance between ``a`` and ``b`` in metres.

    With ``include_elevation`` the slant distance is returned, combining the
    horizontal distance with the vertical delta. The flag is ignored when
    either coordinate lacks an elevation.
    """

    ensure_coordinate(a, "a")
    ensure_coordinate(b, "b")
    horizontal = EARTH_RADIUS_M * _central_angle(a, b)
    if include_elevation and a.elevation is not None and b.elevation is not None:
        return math.hypot(horizontal, b.elevation - a.elevation)
    return horizontal


def bearing(a: Coordinate, b: Coordinate) -> float:
    """Return the initial great-circle bearing from ``a`` to ``b`` in [0, 360).

    Coincident points have no defined bearing; 0 is returned.
    """

    ensure_coordinate(a, "a")
    ensure_coordinate(b, "b")
    if a.latitude == b.latitude and a.longitude == b.longitude:
        return 0.0
    phi1 = math.radians(a.latitude)
    phi2 = math.radians(b.latitude)
    d_lambda = math.radians(b.longitude - a.longitude)
    y = math.sin(d_lambda) * math.cos(phi2)
    x = math.cos(phi1) * math.sin(phi2) - math.sin(phi1) * math.cos(phi2) * math.cos(
        d_lambda
    )
    result = math.degrees(math.atan2(y, x)) % 360.0
    # Tiny negative angles round onto 360.0 after the modulo.
    return 0.0 if result >= 360.0 else result


def destination(origin: Coordinate, distance_m: float, bearing_deg: float) -> Coordinate:
    """Return the point ``distance_m`` metres from ``origin`` along ``bearing_deg``.

    The origin's elevation is copied unchanged; longitude is normalised to
    [-180, 180).
    """

    ensure_coordinate(origin, "origin")
    delta = distance_m / EARTH_RADIUS_M
    theta = math.radians(bearing_deg)
    phi1 = math.radians(origin.latitude)
    lambda1 = math.radians(origin.longitude)

    sin_phi2 = math.sin(phi1) * math.cos(delta) + math.cos(phi1) * math.sin(
        delta
    ) * math.cos(theta)
    phi2 = math.asin(min(max(sin_phi2, -1.0), 1.0))
    y = math.sin(theta) * math.sin(delta) * math.cos(phi1)
    x = math.cos(delta) - math.sin(phi1) * sin_phi2
    lambda2 = lambda1 + math.atan2(y, x)
    return make_coordinate(
        math.degrees(phi2),
        normalize_longitude(math.degrees(lambda2)),
        origin.elevation,
    )


def interpolate(a: Coordinate, b: Coordinate, fraction: float) -> Coordinate:
    """Return the point ``fraction`` of the way from ``a`` to ``b`` along the great circle.

    ``fraction`` is clamped to [0, 1]. Elevation is interpolated linearly
    when both endpoints carry one and is absent otherwise. Antipodal
    endpoints have no unique great circle; the path due north is used.
    """

    ensure_coordinate(a, "a")
    ensure_coordinate(b, "b")
    fraction = min(max(float(fraction), 0.0), 1.0)
    elevation = interpolate_elevation(a, b, fraction)
    if fraction == 0.0:
        return Coordinate(a.latitude, a.longitude, elevation)
    if fraction == 1.0:
        return Coordinate(b.latitude, b.longitude, elevation)

    delta = _central_angle(a, b)
    sin_delta = math.sin(delta)
    if delta == 0.0:
        return Coordinate(a.latitude, a.longitude, elevation)
    if delta > math.pi / 2.0 and abs(sin_delta) < 1e-12:
        moved = destination(a, fraction * delta * EARTH_RADIUS_M, 0.0)
        return Coordinate(moved.latitude, moved.longitude, elevation)

    phi1, lambda1 = math.radians(a.latitude), math.radians(a.longitude)
    phi2, lambda2 = math.radians(b.latitude), math.radians(b.longitude)
    weight_a = math.sin((1.0 - fraction) * delta) / sin_delta
    weight_b = math.sin(fraction * delta) / sin_delta
    x = weight_a * math.cos(phi1) * math.cos(lambda1) + weight_b * math.cos(
        phi2
    ) * math.cos(lambda2)
    y = weight_a * math.cos(phi1) * math.sin(lambda1) + weight_b * math.cos(
        phi2
    ) * math.sin(lambda2)
    z = weight_a * math.sin(phi1) + weight_b * math.sin(phi2)
    latitude = math.degrees(math.atan2(z, math.hypot(x, y)))
    longitude = math.degrees(math.atan2(y, x))
    return make_coordinate(latitude, longitude, elevation)


def midpoint(a: Coordinate, b: Coordinate) -> Coordinate:
    """Return the great-circle midpoint of ``a`` and ``b``."""

    return interpolate(a, b, 0.5)


def haversine_array(
    lat1: ArrayLike, lon1: ArrayLike, lat2: ArrayLike, lon2: ArrayLike
) -> NDArray[np.float64]:
    """Vectorised great-circle distance (metres) between paired degree arrays."""

    phi1 = np.radians(np.asarray(lat1, dtype=float))
    phi2 = np.radians(np.asarray(lat2, dtype=float))
    d_phi = phi2 - phi1
    d_lambda = np.radians(np.asarray(lon2, dtype=float) - np.asarray(lon1, dtype=float))
    h = np.sin(d_phi / 2.0) ** 2 + np.cos(phi1) * np.cos(phi2) * np.sin(d_lambda / 2.0) ** 2
    h = np.clip(h, 0.0, 1.0)
    return EARTH_RADIUS_M * 2.0 * np.arctan2(np.sqrt(h), np.sqrt(1.0 - h))


__all__ = [
    "bearing",
    "destination",
    "distance",
    "haversine_array",
    "interpolate",
    "interpolate_elevation",
    "make_coordinate",
    "midpoint",
    "normalize_longitude",
]
