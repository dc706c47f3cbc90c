"""Survey geometry engine: spherical measurements over surveyed coordinates."""

from .errors import InvalidCoordinateError, SurveyGeometryError, TriangulationError
from .models import (
    Bounds,
    Coordinate,
    PathProjection,
    PerpendicularOffset,
    ProfileSample,
    SegmentProjection,
)
from .paths import (
    bounds,
    calculate_perpendicular_offset,
    create_elevation_profile,
    create_offset_line,
    elevation_gain,
    elevation_loss,
    elevation_profile_frame,
    elevation_range,
    nearest_point_on_path,
    nearest_point_on_segment,
    path_center,
    path_length,
    perimeter,
    point_at_distance,
    regular_points_along_path,
    simplify_path,
)
from .polygons import (
    buffer_polygon,
    do_paths_intersect,
    has_self_intersections,
    point_in_polygon,
    polygon_area,
    polygon_centroid,
)
from .shapes import create_arc, create_circle, create_rectangle
from .spherical import bearing, destination, distance, interpolate, midpoint
from .surface import surface_area_3d, triangulate_ring, volume

__all__ = [
    "Bounds",
    "Coordinate",
    "InvalidCoordinateError",
    "PathProjection",
    "PerpendicularOffset",
    "ProfileSample",
    "SegmentProjection",
    "SurveyGeometryError",
    "TriangulationError",
    "bearing",
    "bounds",
    "buffer_polygon",
    "calculate_perpendicular_offset",
    "create_arc",
    "create_circle",
    "create_elevation_profile",
    "create_offset_line",
    "create_rectangle",
    "destination",
    "distance",
    "do_paths_intersect",
    "elevation_gain",
    "elevation_loss",
    "elevation_profile_frame",
    "elevation_range",
    "has_self_intersections",
    "interpolate",
    "midpoint",
    "nearest_point_on_path",
    "nearest_point_on_segment",
    "path_center",
    "path_length",
    "perimeter",
    "point_at_distance",
    "point_in_polygon",
    "polygon_area",
    "polygon_centroid",
    "regular_points_along_path",
    "simplify_path",
    "surface_area_3d",
    "triangulate_ring",
    "volume",
]
