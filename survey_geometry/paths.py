"""Path algorithms: length, sampling, nearest-point queries, simplification and offsets.

A path is any sequence of :class:`~survey_geometry.models.Coordinate`.
Closure is a per-call ``closed`` flag rather than a property of the data, so
the same sequence can be measured as an open line or as a ring. No function
mutates or retains the caller's sequence.
"""

from __future__ import annotations

import logging
import math
from typing import List, Optional, Sequence, Tuple

import numpy as np
import pandas as pd
from shapely.geometry import LineString

from .config import EARTH_RADIUS_M, GEOMETRY_EPSILON_M, GEOMETRY_MITER_LIMIT
from .local_frame import (
    LocalFrame,
    MetricArray,
    coordinate_arrays,
    wrap_longitude_deltas,
)
from .models import (
    Bounds,
    Coordinate,
    PathProjection,
    PerpendicularOffset,
    ProfileSample,
    SegmentProjection,
    ensure_coordinate,
    ensure_coordinates,
)
from .spherical import (
    bearing,
    destination,
    distance,
    haversine_array,
    interpolate,
    interpolate_elevation,
    make_coordinate,
)

_LOG = logging.getLogger(__name__)

_METRES_PER_DEGREE = EARTH_RADIUS_M * math.pi / 180.0


# ---------------------------------------------------------------------------
# Length and elevation statistics
# ---------------------------------------------------------------------------
def _segment_lengths(
    coords: Sequence[Coordinate],
    *,
    include_elevation: bool = False,
    closed: bool = False,
) -> MetricArray:
    """Return per-segment lengths; the closing segment is last when ``closed``."""

    if len(coords) < 2:
        return np.zeros(0, dtype=float)
    lats, lons, elevations = coordinate_arrays(coords)
    if closed:
        end_lats, end_lons, end_elev = (
            np.roll(lats, -1),
            np.roll(lons, -1),
            np.roll(elevations, -1),
        )
        start_lats, start_lons, start_elev = lats, lons, elevations
    else:
        start_lats, start_lons, start_elev = lats[:-1], lons[:-1], elevations[:-1]
        end_lats, end_lons, end_elev = lats[1:], lons[1:], elevations[1:]
    lengths = haversine_array(start_lats, start_lons, end_lats, end_lons)
    if include_elevation:
        dz = end_elev - start_elev
        lengths = np.where(np.isnan(dz), lengths, np.hypot(lengths, np.nan_to_num(dz)))
    return lengths


def path_length(
    coords: Sequence[Coordinate],
    *,
    include_elevation: bool = False,
    closed: bool = False,
) -> float:
    """Return the length of a path in metres.

    Args:
        coords: Path vertices.
        include_elevation: Use slant distances for segments whose endpoints
            both carry an elevation.
        closed: Add the closing segment from the last vertex to the first.

    Returns:
        Total length; ``0.0`` for fewer than two coordinates.
    """

    coords = ensure_coordinates(coords)
    lengths = _segment_lengths(coords, include_elevation=include_elevation, closed=closed)
    return float(np.sum(lengths))


def perimeter(ring: Sequence[Coordinate], *, include_elevation: bool = False) -> float:
    """Return the closed length of ``ring``."""

    return path_length(ring, include_elevation=include_elevation, closed=True)


def _elevation_deltas(coords: Sequence[Coordinate]) -> MetricArray:
    if len(coords) < 2:
        return np.zeros(0, dtype=float)
    _, _, elevations = coordinate_arrays(coords)
    deltas = np.diff(elevations)
    return deltas[~np.isnan(deltas)]


def elevation_gain(coords: Sequence[Coordinate]) -> float:
    """Sum of climbs between consecutive vertices; pairs missing elevation are skipped."""

    deltas = _elevation_deltas(ensure_coordinates(coords))
    return float(np.sum(deltas[deltas > 0]))


def elevation_loss(coords: Sequence[Coordinate]) -> float:
    """Sum of descents (as a positive number); pairs missing elevation are skipped."""

    deltas = _elevation_deltas(ensure_coordinates(coords))
    return float(-np.sum(deltas[deltas < 0]))


# ---------------------------------------------------------------------------
# Summary positions
# ---------------------------------------------------------------------------
def path_center(coords: Sequence[Coordinate]) -> Optional[Coordinate]:
    """Return the unweighted mean of the vertices, or ``None`` for an empty path.

    This is a label anchor rather than a centroid. Longitudes are averaged
    relative to the first vertex so paths crossing the antimeridian stay
    contiguous. Elevation is the mean over the vertices that have one.
    """

    coords = ensure_coordinates(coords)
    if not coords:
        return None
    lats, lons, elevations = coordinate_arrays(coords)
    reference = float(lons[0])
    mean_lon = reference + float(np.mean(wrap_longitude_deltas(lons - reference)))
    present = elevations[~np.isnan(elevations)]
    elevation = float(np.mean(present)) if present.size else None
    return make_coordinate(float(np.mean(lats)), mean_lon, elevation)


def bounds(coords: Sequence[Coordinate]) -> Optional[Bounds]:
    """Return the latitude/longitude extent of ``coords``, or ``None`` when empty."""

    coords = ensure_coordinates(coords)
    if not coords:
        return None
    lats, lons, _ = coordinate_arrays(coords)
    return Bounds(
        min_latitude=float(np.min(lats)),
        min_longitude=float(np.min(lons)),
        max_latitude=float(np.max(lats)),
        max_longitude=float(np.max(lons)),
    )


def elevation_range(coords: Sequence[Coordinate]) -> Optional[Tuple[float, float]]:
    """Return ``(min, max)`` elevation over vertices that have one."""

    coords = ensure_coordinates(coords)
    values = [c.elevation for c in coords if c.elevation is not None]
    if not values:
        return None
    return min(values), max(values)


# ---------------------------------------------------------------------------
# Nearest-point queries
# ---------------------------------------------------------------------------
def _project_onto_segments(
    start_lats: MetricArray,
    start_lons: MetricArray,
    end_lats: MetricArray,
    end_lons: MetricArray,
    point_lat: float,
    point_lon: float,
) -> Tuple[MetricArray, MetricArray, MetricArray]:
    """Clamp-project a point onto each segment in a per-segment tangent plane.

    Returns the segment fractions and the latitude/longitude of every
    projected point.
    """

    mid_lats = np.radians((start_lats + end_lats) / 2.0)
    east_scale = np.maximum(np.cos(mid_lats), 1e-9) * _METRES_PER_DEGREE
    d_lon = wrap_longitude_deltas(end_lons - start_lons)
    seg_x = d_lon * east_scale
    seg_y = (end_lats - start_lats) * _METRES_PER_DEGREE
    rel_x = wrap_longitude_deltas(point_lon - start_lons) * east_scale
    rel_y = (point_lat - start_lats) * _METRES_PER_DEGREE
    length_sq = seg_x * seg_x + seg_y * seg_y
    degenerate = length_sq <= GEOMETRY_EPSILON_M * GEOMETRY_EPSILON_M
    safe_length_sq = np.where(degenerate, 1.0, length_sq)
    fractions = np.where(
        degenerate, 0.0, np.clip((rel_x * seg_x + rel_y * seg_y) / safe_length_sq, 0.0, 1.0)
    )
    lats = np.where(
        fractions >= 1.0, end_lats, start_lats + fractions * (end_lats - start_lats)
    )
    lons = np.where(fractions >= 1.0, end_lons, start_lons + fractions * d_lon)
    return fractions, lats, lons


def _projected_coordinate(
    start: Coordinate, end: Coordinate, fraction: float, latitude: float, longitude: float
) -> Coordinate:
    return make_coordinate(
        latitude, longitude, interpolate_elevation(start, end, fraction)
    )


def nearest_point_on_segment(
    start: Coordinate, end: Coordinate, point: Coordinate
) -> SegmentProjection:
    """Return the point of segment ``start``-``end`` closest to ``point``.

    The projection is solved in closed form in a tangent plane at the
    segment and clamped to the segment. A zero-length segment projects onto
    ``start`` with fraction 0. ``distance`` is the horizontal great-circle
    distance from ``point`` to the projected point; the projected point
    carries an interpolated elevation when both endpoints have one.
    """

    ensure_coordinate(start, "start")
    ensure_coordinate(end, "end")
    ensure_coordinate(point, "point")
    fractions, lats, lons = _project_onto_segments(
        np.array([start.latitude]),
        np.array([start.longitude]),
        np.array([end.latitude]),
        np.array([end.longitude]),
        point.latitude,
        point.longitude,
    )
    fraction = float(fractions[0])
    projected = _projected_coordinate(start, end, fraction, float(lats[0]), float(lons[0]))
    return SegmentProjection(
        point=projected, fraction=fraction, distance=distance(point, projected)
    )


def nearest_point_on_path(
    coords: Sequence[Coordinate], point: Coordinate, *, closed: bool = False
) -> PathProjection:
    """Return the closest point on a path to ``point``.

    Every segment (plus the closing segment when ``closed``) is evaluated;
    when several segments are equally close the first in traversal order
    wins. Paths with fewer than two vertices return a sentinel with
    ``distance=inf`` and ``segment_index=-1``.
    """

    coords = ensure_coordinates(coords)
    ensure_coordinate(point, "point")
    if len(coords) < 2:
        return PathProjection(
            point=None, distance=math.inf, segment_index=-1, segment_fraction=0.0
        )
    lats, lons, _ = coordinate_arrays(coords)
    if closed:
        end_lats, end_lons = np.roll(lats, -1), np.roll(lons, -1)
        start_lats, start_lons = lats, lons
    else:
        start_lats, start_lons = lats[:-1], lons[:-1]
        end_lats, end_lons = lats[1:], lons[1:]

    fractions, proj_lats, proj_lons = _project_onto_segments(
        start_lats, start_lons, end_lats, end_lons, point.latitude, point.longitude
    )
    offsets = haversine_array(point.latitude, point.longitude, proj_lats, proj_lons)
    # argmin returns the first minimum, which is the documented tie-break.
    index = int(np.argmin(offsets))
    start = coords[index]
    end = coords[(index + 1) % len(coords)]
    fraction = float(fractions[index])
    projected = _projected_coordinate(
        start, end, fraction, float(proj_lats[index]), float(proj_lons[index])
    )
    return PathProjection(
        point=projected,
        distance=distance(point, projected),
        segment_index=index,
        segment_fraction=fraction,
    )


# ---------------------------------------------------------------------------
# Sampling along a path
# ---------------------------------------------------------------------------
def _segment_pairs(
    coords: Sequence[Coordinate], closed: bool
) -> List[Tuple[Coordinate, Coordinate]]:
    pairs = list(zip(coords[:-1], coords[1:]))
    if closed and len(coords) >= 2:
        pairs.append((coords[-1], coords[0]))
    return pairs


def _sample_at(
    pairs: Sequence[Tuple[Coordinate, Coordinate]],
    lengths: MetricArray,
    cumulative: MetricArray,
    target: float,
) -> Coordinate:
    """Interpolate the coordinate ``target`` metres along pre-measured segments."""

    index = int(np.searchsorted(cumulative, target, side="right")) - 1
    index = min(max(index, 0), len(pairs) - 1)
    start, end = pairs[index]
    length = float(lengths[index])
    if length <= GEOMETRY_EPSILON_M:
        return start.clone()
    fraction = (target - float(cumulative[index])) / length
    return interpolate(start, end, fraction)


def point_at_distance(
    coords: Sequence[Coordinate], distance_m: float, *, closed: bool = False
) -> Optional[Coordinate]:
    """Return the coordinate ``distance_m`` metres along a path.

    Open paths clamp to the first and last vertex. Closed paths wrap the
    distance modulo the closed length, so negative or overlong distances
    keep circulating the ring. Position and elevation are interpolated
    within the segment. Returns ``None`` for an empty path.
    """

    coords = ensure_coordinates(coords)
    if not coords:
        return None
    if len(coords) == 1:
        return coords[0].clone()
    pairs = _segment_pairs(coords, closed)
    lengths = _segment_lengths(coords, closed=closed)
    cumulative = np.concatenate(([0.0], np.cumsum(lengths)))
    total = float(cumulative[-1])
    if total <= 0.0:
        return coords[0].clone()
    if closed:
        target = float(distance_m) % total
    else:
        if distance_m <= 0.0:
            return coords[0].clone()
        if distance_m >= total:
            return coords[-1].clone()
        target = float(distance_m)
    return _sample_at(pairs, lengths, cumulative, target)


def regular_points_along_path(
    coords: Sequence[Coordinate], interval_m: float, *, closed: bool = False
) -> List[Coordinate]:
    """Resample a path at a fixed arc-length spacing.

    Samples sit at 0, ``interval_m``, ``2 * interval_m``... from the first
    vertex, which is therefore always included. The final vertex (or, for a
    closed path, the return to the first vertex) is included only when the
    total length is an exact multiple of ``interval_m``; the trailing
    remainder is otherwise left unsampled.

    Raises:
        ValueError: If ``interval_m`` is not positive.
    """

    if interval_m <= 0:
        raise ValueError("interval_m must be greater than zero")
    coords = ensure_coordinates(coords)
    if len(coords) < 2:
        return [c.clone() for c in coords]
    pairs = _segment_pairs(coords, closed)
    lengths = _segment_lengths(coords, closed=closed)
    cumulative = np.concatenate(([0.0], np.cumsum(lengths)))
    total = float(cumulative[-1])
    # Relative slack so a boundary that lands on the end survives rounding.
    count = int(math.floor(total / interval_m + 1e-9)) + 1
    samples = [coords[0].clone()]
    for step in range(1, count):
        target = min(step * interval_m, total)
        if target >= total:
            end = coords[0] if closed else coords[-1]
            samples.append(end.clone())
        else:
            samples.append(_sample_at(pairs, lengths, cumulative, target))
    return samples


# ---------------------------------------------------------------------------
# Simplification
# ---------------------------------------------------------------------------
def simplify_path(coords: Sequence[Coordinate], tolerance_m: float) -> List[Coordinate]:
    """Reduce a path with Douglas-Peucker using a tolerance in metres.

    The first and last vertices are always kept and the retained vertices
    are the caller's own coordinates, elevation included. A non-positive
    tolerance or fewer than three points returns an unchanged copy.
    """

    coords = ensure_coordinates(coords)
    if tolerance_m <= 0 or len(coords) < 3:
        return list(coords)
    frame = LocalFrame.around(coords)
    xy = frame.to_xy(coords)
    simplified = LineString(xy).simplify(tolerance_m, preserve_topology=False)
    kept_xy = np.asarray(simplified.coords, dtype=float)
    if kept_xy.shape[0] < 2:
        return [coords[0], coords[-1]]

    # Douglas-Peucker keeps a subsequence of the input, so walk forward to
    # recover the original vertex behind each retained position.
    indices = [0]
    cursor = 1
    for target in kept_xy[1:-1]:
        while cursor < len(coords) - 1 and not np.array_equal(xy[cursor], target):
            cursor += 1
        if cursor >= len(coords) - 1:
            break
        indices.append(cursor)
        cursor += 1
    indices.append(len(coords) - 1)
    _LOG.debug(
        "Simplified path from %d to %d vertices (tolerance=%.3fm)",
        len(coords),
        len(indices),
        tolerance_m,
    )
    return [coords[i] for i in indices]


# ---------------------------------------------------------------------------
# Offsets
# ---------------------------------------------------------------------------
def _dedupe_vertices(xy: MetricArray, closed: bool) -> Tuple[List[int], List[int]]:
    """Collapse consecutive duplicate vertices.

    Returns the kept vertex indices and, for every input vertex, the
    position of its representative within the kept list.
    """

    kept: List[int] = []
    owner: List[int] = []
    for index in range(len(xy)):
        if kept and np.hypot(*(xy[index] - xy[kept[-1]])) <= GEOMETRY_EPSILON_M:
            owner.append(len(kept) - 1)
            continue
        kept.append(index)
        owner.append(len(kept) - 1)
    if closed and len(kept) > 1:
        if np.hypot(*(xy[kept[-1]] - xy[kept[0]])) <= GEOMETRY_EPSILON_M:
            last = len(kept) - 1
            kept.pop()
            owner = [0 if position == last else position for position in owner]
    return kept, owner


def _miter_vectors(
    points: MetricArray,
    distance_m: float,
    closed: bool,
    miter_limit: float,
) -> MetricArray:
    """Return per-vertex offset vectors for a duplicate-free planar polyline.

    Positive distances move to the right of travel. Interior vertices follow
    the bisector of the adjacent segment normals, lengthened so both offset
    edges stay ``distance_m`` away, and capped at ``miter_limit`` times the
    offset distance.
    """

    count = len(points)
    ring = closed and count >= 3
    ends = np.roll(points, -1, axis=0) if ring else points[1:]
    starts = points if ring else points[:-1]
    segments = ends - starts
    lengths = np.linalg.norm(segments, axis=1)
    directions = segments / lengths[:, None]
    normals = np.column_stack((directions[:, 1], -directions[:, 0]))

    vectors = np.zeros((count, 2), dtype=float)
    for index in range(count):
        if ring:
            previous, following = normals[index - 1], normals[index]
        elif index == 0:
            vectors[index] = normals[0] * distance_m
            continue
        elif index == count - 1:
            vectors[index] = normals[-1] * distance_m
            continue
        else:
            previous, following = normals[index - 1], normals[index]
        bisector = previous + following
        norm = float(np.hypot(*bisector))
        if norm <= 1e-12:
            # The path doubles back on itself; no finite miter exists.
            vectors[index] = following * distance_m
            continue
        bisector = bisector / norm
        scale = min(1.0 / float(np.dot(bisector, following)), miter_limit)
        vectors[index] = bisector * distance_m * scale
    return vectors


def _apply_offsets(
    coords: Sequence[Coordinate], vectors: MetricArray, owner: Sequence[int]
) -> List[Coordinate]:
    result: List[Coordinate] = []
    for coordinate, position in zip(coords, owner):
        east, north = vectors[position]
        length = float(np.hypot(east, north))
        if length == 0.0:
            result.append(coordinate.clone())
            continue
        heading = math.degrees(math.atan2(east, north)) % 360.0
        result.append(destination(coordinate, length, heading))
    return result


def create_offset_line(
    coords: Sequence[Coordinate],
    distance_m: float,
    *,
    closed: bool = False,
    miter_limit: float = GEOMETRY_MITER_LIMIT,
) -> List[Coordinate]:
    """Return a path parallel to ``coords`` offset by ``distance_m`` metres.

    Positive distances offset to the right of the travel direction, negative
    to the left. Each input vertex yields one output vertex; corners use a
    miter join on the bisector of the adjacent segment normals. With
    ``closed`` the first and last vertices are joined as well and no
    closing duplicate is appended. Degenerate input (fewer than two distinct
    vertices) is returned as a copy.
    """

    coords = ensure_coordinates(coords)
    if len(coords) < 2 or distance_m == 0:
        return [c.clone() for c in coords]
    frame = LocalFrame.around(coords)
    xy = frame.to_xy(coords)
    kept, owner = _dedupe_vertices(xy, closed)
    if len(kept) < 2:
        _LOG.debug("Offset requested for a path without distinct vertices")
        return [c.clone() for c in coords]
    vectors = _miter_vectors(xy[kept], float(distance_m), closed, miter_limit)
    return _apply_offsets(coords, vectors, owner)


def calculate_perpendicular_offset(
    coords: Sequence[Coordinate],
    segment_index: int,
    segment_fraction: float,
    distance_m: float,
    *,
    closed: bool = False,
    include_elevation: bool = True,
) -> Optional[PerpendicularOffset]:
    """Offset a point located on a path perpendicular to its segment.

    Args:
        coords: Path vertices.
        segment_index: Index of the segment start vertex. When ``closed`` the
            last index addresses the closing segment.
        segment_fraction: Position along the segment, clamped to [0, 1].
        distance_m: Offset distance; positive is right of travel.
        closed: Whether the closing segment is addressable.
        include_elevation: Carry the interpolated segment elevation onto the
            located and offset points.

    Returns:
        The offset description, or ``None`` for fewer than two vertices.

    Raises:
        IndexError: If ``segment_index`` does not address a segment.
    """

    coords = ensure_coordinates(coords)
    if len(coords) < 2:
        return None
    segment_count = len(coords) if closed else len(coords) - 1
    if not 0 <= segment_index < segment_count:
        raise IndexError(
            f"segment_index {segment_index} outside [0, {segment_count - 1}]"
        )
    start = coords[segment_index]
    end = coords[(segment_index + 1) % len(coords)]
    fraction = min(max(float(segment_fraction), 0.0), 1.0)
    located = interpolate(start, end, fraction)
    if not include_elevation:
        located = located.with_elevation(None)
    segment_bearing = bearing(start, end)
    perpendicular = (segment_bearing + 90.0) % 360.0
    return PerpendicularOffset(
        offset_point=destination(located, distance_m, perpendicular),
        nearest_point=located,
        segment_index=segment_index,
        segment_fraction=fraction,
        segment_bearing=segment_bearing,
        perpendicular_bearing=perpendicular,
    )


# ---------------------------------------------------------------------------
# Elevation profile
# ---------------------------------------------------------------------------
def create_elevation_profile(coords: Sequence[Coordinate]) -> List[ProfileSample]:
    """Return cumulative horizontal distance and elevation for every vertex.

    Vertices without elevation produce samples whose ``elevation`` is
    ``None``; no value is invented.
    """

    coords = ensure_coordinates(coords)
    if not coords:
        return []
    cumulative = np.concatenate(([0.0], np.cumsum(_segment_lengths(coords))))
    return [
        ProfileSample(distance=float(dist), elevation=coord.elevation)
        for dist, coord in zip(cumulative, coords)
    ]


def elevation_profile_frame(coords: Sequence[Coordinate]) -> pd.DataFrame:
    """Return the elevation profile as a table for reporting.

    Columns are ``distance_m``, ``elevation_m`` (NaN where missing) and
    ``grade_pct``, the slope from the previous vertex in percent (NaN for the
    first row, zero-length steps and steps touching a missing elevation).
    """

    samples = create_elevation_profile(coords)
    frame = pd.DataFrame(
        {
            "distance_m": [s.distance for s in samples],
            "elevation_m": [
                np.nan if s.elevation is None else s.elevation for s in samples
            ],
        },
        dtype=float,
    )
    run = frame["distance_m"].diff()
    rise = frame["elevation_m"].diff()
    frame["grade_pct"] = (rise / run.where(run > 0)) * 100.0
    return frame


__all__ = [
    "bounds",
    "calculate_perpendicular_offset",
    "create_elevation_profile",
    "create_offset_line",
    "elevation_gain",
    "elevation_loss",
    "elevation_profile_frame",
    "elevation_range",
    "nearest_point_on_path",
    "nearest_point_on_segment",
    "path_center",
    "path_length",
    "perimeter",
    "point_at_distance",
    "regular_points_along_path",
    "simplify_path",
]
