"""Triangulated 3D measures: surface area and volume above a base elevation."""

from __future__ import annotations

import logging
from typing import List, Optional, Sequence, Tuple

import numpy as np

from .errors import TriangulationError
from .local_frame import LocalFrame, MetricArray, open_ring, signed_area_xy
from .models import Coordinate, ensure_coordinates

_LOG = logging.getLogger(__name__)

Triangle = Tuple[int, int, int]

_AREA_EPSILON = 1e-12


def _orientation(a: MetricArray, b: MetricArray, c: MetricArray) -> float:
    return float((b[0] - a[0]) * (c[1] - a[1]) - (b[1] - a[1]) * (c[0] - a[0]))


def _contains(a: MetricArray, b: MetricArray, c: MetricArray, p: MetricArray) -> bool:
    """Point-in-triangle test for a counter-clockwise triangle, boundary inclusive."""

    return (
        _orientation(a, b, p) >= -_AREA_EPSILON
        and _orientation(b, c, p) >= -_AREA_EPSILON
        and _orientation(c, a, p) >= -_AREA_EPSILON
    )


def _ear_clip(xy: MetricArray) -> List[Triangle]:
    sign = 1.0 if signed_area_xy(xy) >= 0.0 else -1.0
    remaining = list(range(len(xy)))
    triangles: List[Triangle] = []
    while len(remaining) > 3:
        count = len(remaining)
        for position in range(count):
            prev_i = remaining[position - 1]
            curr_i = remaining[position]
            next_i = remaining[(position + 1) % count]
            a, b, c = xy[prev_i], xy[curr_i], xy[next_i]
            if sign * _orientation(a, b, c) <= _AREA_EPSILON:
                continue
            if sign < 0:
                a, c = c, a
            blocked = False
            for other in remaining:
                if other in (prev_i, curr_i, next_i):
                    continue
                p = xy[other]
                if np.array_equal(p, a) or np.array_equal(p, b) or np.array_equal(p, c):
                    continue
                if _contains(a, b, c, p):
                    blocked = True
                    break
            if blocked:
                continue
            triangles.append((prev_i, curr_i, next_i))
            remaining.pop(position)
            break
        else:
            raise TriangulationError(
                f"No ear found with {len(remaining)} vertices remaining"
            )
    triangles.append((remaining[0], remaining[1], remaining[2]))
    return triangles


def _fan(count: int) -> List[Triangle]:
    return [(0, i, i + 1) for i in range(1, count - 1)]


def _triangulate_xy(xy: MetricArray) -> List[Triangle]:
    if len(xy) < 3:
        return []
    try:
        return _ear_clip(xy)
    except TriangulationError as exc:
        _LOG.debug("Falling back to a triangle fan: %s", exc)
        return _fan(len(xy))


def triangulate_ring(ring: Sequence[Coordinate]) -> List[Triangle]:
    """Split a ring into triangles by ear clipping.

    Indices refer to the ring with any closing duplicate removed. Rings on
    which ear clipping cannot progress, such as self-intersecting ones, are
    split as a fan around the first vertex instead. Fewer than three
    vertices give no triangles.
    """

    vertices = open_ring(ensure_coordinates(ring, "ring"))
    if len(vertices) < 3:
        return []
    return _triangulate_xy(LocalFrame.around(vertices).to_xy(vertices))


def _ring_surface(frame: LocalFrame, ring: Sequence[Coordinate]) -> float:
    if len(ring) < 3:
        return 0.0
    xyz = frame.to_xyz(ring, missing_elevation=0.0)
    triangles = np.asarray(_triangulate_xy(xyz[:, :2]), dtype=int)
    a, b, c = xyz[triangles[:, 0]], xyz[triangles[:, 1]], xyz[triangles[:, 2]]
    normals = np.cross(b - a, c - a)
    return 0.5 * float(np.sum(np.linalg.norm(normals, axis=1)))


def _ring_volume(frame: LocalFrame, ring: Sequence[Coordinate], base: float) -> float:
    if len(ring) < 3:
        return 0.0
    xyz = frame.to_xyz(ring, missing_elevation=0.0)
    triangles = np.asarray(_triangulate_xy(xyz[:, :2]), dtype=int)
    a, b, c = xyz[triangles[:, 0]], xyz[triangles[:, 1]], xyz[triangles[:, 2]]
    footprint = 0.5 * np.abs(
        (b[:, 0] - a[:, 0]) * (c[:, 1] - a[:, 1])
        - (b[:, 1] - a[:, 1]) * (c[:, 0] - a[:, 0])
    )
    heights = (a[:, 2] + b[:, 2] + c[:, 2]) / 3.0 - base
    return float(np.sum(footprint * heights))


def _prepare(
    exterior: Sequence[Coordinate], holes: Sequence[Sequence[Coordinate]]
) -> Tuple[List[Coordinate], List[List[Coordinate]]]:
    outer = open_ring(ensure_coordinates(exterior, "exterior"))
    inner = [open_ring(ensure_coordinates(hole, "holes")) for hole in holes]
    return outer, [hole for hole in inner if len(hole) >= 3]


def surface_area_3d(
    exterior: Sequence[Coordinate],
    holes: Sequence[Sequence[Coordinate]] = (),
) -> float:
    """Return the triangulated 3D surface area in square metres.

    Triangles carry each vertex's elevation as height (missing elevations
    count as 0). Hole surfaces are subtracted and the result is never
    negative.
    """

    outer, inner = _prepare(exterior, holes)
    if len(outer) < 3:
        return 0.0
    frame = LocalFrame.around(outer)
    total = _ring_surface(frame, outer)
    for hole in inner:
        total -= _ring_surface(frame, hole)
    return max(total, 0.0)


def volume(
    exterior: Sequence[Coordinate],
    holes: Sequence[Sequence[Coordinate]] = (),
    base_elevation: Optional[float] = None,
) -> float:
    """Return the volume between the surface and ``base_elevation`` in cubic metres.

    Each triangle contributes its horizontal footprint times its mean height
    above the base; parts below the base contribute negatively. Holes are
    subtracted the same way. Without a ``base_elevation`` the lowest exterior
    elevation is used, or 0 when the exterior has none.
    """

    outer, inner = _prepare(exterior, holes)
    if len(outer) < 3:
        return 0.0
    if base_elevation is None:
        present = [c.elevation for c in outer if c.elevation is not None]
        base = min(present) if present else 0.0
    else:
        base = float(base_elevation)
    frame = LocalFrame.around(outer)
    total = _ring_volume(frame, outer, base)
    for hole in inner:
        total -= _ring_volume(frame, hole, base)
    return total


__all__ = ["Triangle", "surface_area_3d", "triangulate_ring", "volume"]
