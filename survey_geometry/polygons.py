"""Polygon algorithms: area, centroid, containment, intersection and buffering.

Rings are plain coordinate sequences. A trailing vertex equal to the first is
accepted and ignored, so explicitly closed and implicitly closed rings give
the same answers. Holes only enter :func:`polygon_centroid` and the surface
functions; containment against a polygon with holes is composed by the
caller from :func:`point_in_polygon` on each ring.
"""

from __future__ import annotations

import logging
from typing import List, Optional, Sequence, Tuple

import numpy as np
from shapely import make_valid
from shapely.geometry import LinearRing, LineString, MultiPolygon, Polygon

from .config import EARTH_RADIUS_M, GEOMETRY_MITER_LIMIT
from .local_frame import (
    LocalFrame,
    MetricArray,
    coordinate_arrays,
    open_ring,
    signed_area_xy,
    wrap_longitude_deltas,
)
from .models import Coordinate, ensure_coordinate, ensure_coordinates
from .paths import path_center
from .surface import surface_area_3d

_LOG = logging.getLogger(__name__)

# Degrees; roughly 0.1 mm on the ground.
_BOUNDARY_TOLERANCE_DEG = 1e-9


def polygon_area(ring: Sequence[Coordinate], *, include_elevation: bool = False) -> float:
    """Return the area enclosed by ``ring`` in square metres.

    The horizontal area is the spherical-excess approximation
    ``|sum (lon[i+1] - lon[i-1]) * sin(lat[i])| * R**2 / 2`` over unwrapped
    longitudes, so it does not depend on winding or on the starting vertex.
    With ``include_elevation`` the triangulated 3D surface area is returned
    instead. Fewer than three vertices give ``0.0``.
    """

    vertices = open_ring(ensure_coordinates(ring, "ring"))
    if len(vertices) < 3:
        return 0.0
    if include_elevation:
        return surface_area_3d(vertices)
    lats, lons, _ = coordinate_arrays(vertices)
    lambdas = np.unwrap(np.radians(lons))
    phis = np.radians(lats)
    total = np.sum((np.roll(lambdas, -1) - np.roll(lambdas, 1)) * np.sin(phis))
    return float(abs(total) * EARTH_RADIUS_M * EARTH_RADIUS_M / 2.0)


def _ring_moments(points: MetricArray) -> Tuple[float, float, float]:
    """Return ``(|area|, cx, cy)`` for a planar ring."""

    x = points[:, 0]
    y = points[:, 1]
    x_next = np.roll(x, -1)
    y_next = np.roll(y, -1)
    cross = x * y_next - x_next * y
    signed = 0.5 * float(np.sum(cross))
    if signed == 0.0:
        return 0.0, float(np.mean(x)), float(np.mean(y))
    cx = float(np.sum((x + x_next) * cross)) / (6.0 * signed)
    cy = float(np.sum((y + y_next) * cross)) / (6.0 * signed)
    return abs(signed), cx, cy


def _mean_elevation(ring: Sequence[Coordinate]) -> Optional[float]:
    values = [c.elevation for c in ring if c.elevation is not None]
    if not values:
        return None
    return sum(values) / len(values)


def polygon_centroid(
    exterior: Sequence[Coordinate],
    holes: Sequence[Sequence[Coordinate]] = (),
) -> Optional[Coordinate]:
    """Return the area centroid of a polygon with optional holes.

    Each ring's planar centroid is computed in one local frame and the
    results are combined as the exterior minus the holes, weighted by area.
    When the exterior has fewer than three vertices or the holes consume the
    whole area, the vertex mean of the exterior (:func:`path_center`) is
    returned instead; an empty exterior gives ``None``. Holes with fewer
    than three vertices are ignored.

    The elevation is the area-weighted mean vertex elevation of the rings
    that carry one, and ``None`` when the exterior has no elevation.
    """

    outer = open_ring(ensure_coordinates(exterior, "exterior"))
    inner = [open_ring(ensure_coordinates(hole, "holes")) for hole in holes]
    inner = [hole for hole in inner if len(hole) >= 3]
    if len(outer) < 3:
        return path_center(outer)

    frame = LocalFrame.around(outer)
    outer_area, outer_x, outer_y = _ring_moments(frame.to_xy(outer))
    net_area = outer_area
    sum_x = outer_area * outer_x
    sum_y = outer_area * outer_y

    outer_elevation = _mean_elevation(outer)
    elevation_weight = outer_area
    elevation_sum = outer_area * outer_elevation if outer_elevation is not None else 0.0

    for hole in inner:
        area, cx, cy = _ring_moments(frame.to_xy(hole))
        net_area -= area
        sum_x -= area * cx
        sum_y -= area * cy
        hole_elevation = _mean_elevation(hole)
        if hole_elevation is not None:
            elevation_weight -= area
            elevation_sum -= area * hole_elevation

    if net_area <= 0.0:
        _LOG.debug("Polygon has no net area; using the exterior vertex mean")
        return path_center(outer)

    elevation: Optional[float] = None
    if outer_elevation is not None:
        elevation = (
            elevation_sum / elevation_weight if elevation_weight > 0.0 else outer_elevation
        )
    return frame.to_coordinate(sum_x / net_area, sum_y / net_area, elevation)


def point_in_polygon(point: Coordinate, ring: Sequence[Coordinate]) -> bool:
    """Return whether ``point`` lies inside ``ring`` (even-odd rule).

    Points on an edge or vertex count as inside. Longitudes are measured
    relative to the first vertex so rings crossing the antimeridian stay
    contiguous. Rings with fewer than three vertices contain nothing.
    """

    ensure_coordinate(point, "point")
    vertices = open_ring(ensure_coordinates(ring, "ring"))
    if len(vertices) < 3:
        return False
    lats, lons, _ = coordinate_arrays(vertices)
    reference = float(lons[0])
    point_x = float(wrap_longitude_deltas(np.float64(point.longitude - reference)))
    x1 = wrap_longitude_deltas(lons - reference) - point_x
    y1 = lats - point.latitude
    x2 = np.roll(x1, -1)
    y2 = np.roll(y1, -1)

    cross = x1 * y2 - x2 * y1
    edge_length = np.hypot(x2 - x1, y2 - y1)
    tol = _BOUNDARY_TOLERANCE_DEG
    on_line = np.abs(cross) <= tol * np.maximum(edge_length, tol)
    within = (
        (np.minimum(x1, x2) - tol <= 0.0)
        & (0.0 <= np.maximum(x1, x2) + tol)
        & (np.minimum(y1, y2) - tol <= 0.0)
        & (0.0 <= np.maximum(y1, y2) + tol)
    )
    if bool(np.any(on_line & within)):
        return True

    straddles = (y1 > 0.0) != (y2 > 0.0)
    with np.errstate(divide="ignore", invalid="ignore"):
        crossing_x = x1 + (0.0 - y1) * (x2 - x1) / (y2 - y1)
    crossings = straddles & (crossing_x > 0.0)
    return bool(np.count_nonzero(crossings) % 2 == 1)


def _distinct_vertices(coords: Sequence[Coordinate]) -> List[Coordinate]:
    result: List[Coordinate] = []
    for coordinate in coords:
        if result and (
            coordinate.latitude == result[-1].latitude
            and coordinate.longitude == result[-1].longitude
        ):
            continue
        result.append(coordinate)
    return result


def has_self_intersections(ring: Sequence[Coordinate], *, closed: bool = True) -> bool:
    """Return whether any two non-adjacent segments touch or cross.

    Consecutive duplicate vertices are ignored, as is the closing duplicate
    of a closed ring. Rings with fewer than four distinct vertices (three
    for open paths) cannot self-intersect.
    """

    vertices = ensure_coordinates(ring, "ring")
    if closed:
        vertices = open_ring(vertices)
    vertices = _distinct_vertices(vertices)
    if closed:
        vertices = open_ring(vertices)
    if len(vertices) < (4 if closed else 3):
        return False
    xy = LocalFrame.around(vertices).to_xy(vertices)
    geometry = LinearRing(xy) if closed else LineString(xy)
    return not geometry.is_simple


def _as_line(
    frame: LocalFrame, coords: Sequence[Coordinate], closed: bool
) -> Optional[LineString]:
    vertices = _distinct_vertices(open_ring(coords) if closed else coords)
    if closed:
        vertices = open_ring(vertices)
    if len(vertices) < 2:
        return None
    xy = frame.to_xy(vertices)
    if closed and len(vertices) >= 3:
        return LineString(np.vstack((xy, xy[:1])))
    return LineString(xy)


def do_paths_intersect(
    path_a: Sequence[Coordinate],
    path_b: Sequence[Coordinate],
    *,
    closed: bool = True,
) -> bool:
    """Return whether any segment of ``path_a`` meets any segment of ``path_b``.

    With ``closed`` (the default) both inputs are treated as rings and their
    closing segments take part. Only the outlines are compared: a ring lying
    entirely inside another does not intersect it.
    """

    first = ensure_coordinates(path_a, "path_a")
    second = ensure_coordinates(path_b, "path_b")
    if len(first) < 2 or len(second) < 2:
        return False
    frame = LocalFrame.around(first + second)
    line_a = _as_line(frame, first, closed)
    line_b = _as_line(frame, second, closed)
    if line_a is None or line_b is None:
        return False
    return bool(line_a.intersects(line_b))


def _largest_polygon(geometry) -> Optional[Polygon]:
    if geometry.is_empty:
        return None
    if isinstance(geometry, Polygon):
        return geometry
    if isinstance(geometry, MultiPolygon):
        pieces = [piece for piece in geometry.geoms if not piece.is_empty]
        if not pieces:
            return None
        _LOG.debug("Buffer split the ring into %d pieces; keeping the largest", len(pieces))
        return max(pieces, key=lambda piece: piece.area)
    return None


def buffer_polygon(
    ring: Sequence[Coordinate],
    distance_m: float,
    *,
    mitre_limit: float = GEOMETRY_MITER_LIMIT,
) -> List[Coordinate]:
    """Grow (positive) or shrink (negative) a ring by ``distance_m`` metres.

    Corners use a mitre join capped at ``mitre_limit``. The output has no
    closing duplicate and keeps the winding of the input. When every input
    vertex has an elevation each output vertex takes the elevation of the
    nearest input vertex.

    A self-intersecting ring is first resolved into its lobes, which the
    buffer then unites again where they touch or overlap. Inward buffers
    that consume the ring return ``[]``; buffers that leave several pieces
    return the largest one. Zero distance returns a copy of the ring, and
    fewer than three vertices return ``[]``.
    """

    vertices = open_ring(ensure_coordinates(ring, "ring"))
    if len(vertices) < 3:
        return []
    if distance_m == 0:
        return [c.clone() for c in vertices]

    frame = LocalFrame.around(vertices)
    xy = frame.to_xy(vertices)
    buffered = make_valid(Polygon(xy)).buffer(
        float(distance_m), join_style="mitre", mitre_limit=mitre_limit
    )
    piece = _largest_polygon(buffered)
    if piece is None:
        _LOG.debug("Buffer of %.3fm collapsed the ring", distance_m)
        return []

    outline = np.asarray(piece.exterior.coords, dtype=float)[:-1]
    if (signed_area_xy(outline) > 0.0) != (signed_area_xy(xy) > 0.0):
        outline = outline[::-1]

    elevations: Optional[MetricArray] = None
    if all(c.elevation is not None for c in vertices):
        gaps = outline[:, None, :] - xy[None, :, :]
        nearest = np.argmin(np.einsum("ijk,ijk->ij", gaps, gaps), axis=1)
        elevations = np.array([vertices[i].elevation for i in nearest], dtype=float)

    return [
        frame.to_coordinate(
            float(x), float(y), None if elevations is None else float(elevations[i])
        )
        for i, (x, y) in enumerate(outline)
    ]


__all__ = [
    "buffer_polygon",
    "do_paths_intersect",
    "has_self_intersections",
    "point_in_polygon",
    "polygon_area",
    "polygon_centroid",
]
