"""Constructors for arcs, circles and rectangles measured on the ground."""

from __future__ import annotations

import math
from typing import List

from .config import GEOMETRY_ARC_SEGMENTS
from .models import Coordinate, ensure_coordinate
from .spherical import destination


def create_arc(
    center: Coordinate,
    radius_m: float,
    start_angle: float = 0.0,
    end_angle: float = 360.0,
    segments: int = GEOMETRY_ARC_SEGMENTS,
) -> List[Coordinate]:
    """Return ``segments + 1`` points on an arc around ``center``.

    Angles are compass bearings in degrees, swept from ``start_angle`` to
    ``end_angle``. Points inherit the center's elevation.
    """

    ensure_coordinate(center, "center")
    if segments <= 0:
        raise ValueError("segments must be greater than zero")
    step = (end_angle - start_angle) / segments
    return [
        destination(center, radius_m, (start_angle + step * i) % 360.0)
        for i in range(segments + 1)
    ]


def create_circle(
    center: Coordinate, radius_m: float, segments: int = GEOMETRY_ARC_SEGMENTS
) -> List[Coordinate]:
    """Return a ring of ``segments`` points approximating a circle (no closing duplicate)."""

    return create_arc(center, radius_m, 0.0, 360.0, segments)[:-1]


def create_rectangle(
    center: Coordinate,
    width_m: float,
    height_m: float,
    rotation_deg: float = 0.0,
) -> List[Coordinate]:
    """Return the four corners of a rectangle centred on ``center``.

    ``width_m`` runs east-west and ``height_m`` north-south before the
    clockwise ``rotation_deg`` is applied. Corners are ordered north-west,
    north-east, south-east, south-west.
    """

    ensure_coordinate(center, "center")
    half_w = width_m / 2.0
    half_h = height_m / 2.0
    corners = []
    for east, north in ((-half_w, half_h), (half_w, half_h), (half_w, -half_h), (-half_w, -half_h)):
        reach = math.hypot(east, north)
        if reach == 0.0:
            corners.append(center.clone())
            continue
        heading = math.degrees(math.atan2(east, north)) + rotation_deg
        corners.append(destination(center, reach, heading % 360.0))
    return corners


__all__ = ["create_arc", "create_circle", "create_rectangle"]
