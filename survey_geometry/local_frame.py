"""Local metric projection used by the planar algorithms.

Survey geometries span metres to a few hundred kilometres, so the planar
algorithms (projection onto segments, offsets, buffering, triangulation) run
in an azimuthal equidistant frame centred on the geometry: ``x`` metres east
and ``y`` metres north of the frame origin. Distances and azimuths from the
origin are exact on the spherical Earth model, and scale error elsewhere
grows with the square of the distance from the origin.
"""

from __future__ import annotations

from dataclasses import dataclass
from threading import RLock
from typing import List, Optional, Sequence, Tuple

from cachetools import LRUCache
import numpy as np
from numpy.typing import NDArray
from pyproj import CRS, Transformer

from .config import EARTH_RADIUS_M, GEOMETRY_FRAME_CACHE_SIZE
from .models import Coordinate
from .spherical import make_coordinate, normalize_longitude

MetricArray = NDArray[np.float64]

_TransformerPair = Tuple[Transformer, Transformer]

# Geographic coordinates on the same sphere as the frame, so no datum shift
# is applied between the two.
_GEOGRAPHIC_CRS = CRS.from_proj4(f"+proj=longlat +R={EARTH_RADIUS_M} +no_defs")

_transformer_cache: LRUCache[Tuple[float, float], _TransformerPair] = LRUCache(
    maxsize=GEOMETRY_FRAME_CACHE_SIZE
)
_transformer_cache_lock = RLock()


def _build_transformers(origin_latitude: float, origin_longitude: float) -> _TransformerPair:
    """Return forward and inverse transformers for a frame origin."""

    key = (origin_latitude, origin_longitude)
    with _transformer_cache_lock:
        cached = _transformer_cache.get(key)
    if cached is not None:
        return cached
    local_crs = CRS.from_proj4(
        f"+proj=aeqd +lat_0={origin_latitude:.12f} +lon_0={origin_longitude:.12f} "
        f"+R={EARTH_RADIUS_M} +units=m +no_defs"
    )
    pair = (
        Transformer.from_crs(_GEOGRAPHIC_CRS, local_crs, always_xy=True),
        Transformer.from_crs(local_crs, _GEOGRAPHIC_CRS, always_xy=True),
    )
    with _transformer_cache_lock:
        _transformer_cache[key] = pair
    return pair


def coordinate_arrays(
    coords: Sequence[Coordinate],
) -> Tuple[MetricArray, MetricArray, MetricArray]:
    """Return latitude, longitude and elevation arrays; missing elevations are NaN."""

    lats = np.fromiter((c.latitude for c in coords), dtype=float, count=len(coords))
    lons = np.fromiter((c.longitude for c in coords), dtype=float, count=len(coords))
    elevations = np.fromiter(
        (np.nan if c.elevation is None else c.elevation for c in coords),
        dtype=float,
        count=len(coords),
    )
    return lats, lons, elevations


def wrap_longitude_deltas(deltas: MetricArray) -> MetricArray:
    """Wrap longitude differences (degrees) into [-180, 180)."""

    return (deltas + 180.0) % 360.0 - 180.0


@dataclass(frozen=True, slots=True)
class LocalFrame:
    """Azimuthal equidistant east/north frame in metres around an origin."""

    origin_latitude: float
    origin_longitude: float

    @classmethod
    def around(cls, coords: Sequence[Coordinate]) -> "LocalFrame":
        """Build a frame centred on the mean position of ``coords``.

        Longitudes are averaged relative to the first coordinate so that
        geometries straddling the antimeridian stay contiguous.
        """

        if not coords:
            raise ValueError("Cannot build a local frame from an empty collection")
        lats, lons, _ = coordinate_arrays(coords)
        reference = float(lons[0])
        offsets = wrap_longitude_deltas(lons - reference)
        return cls(
            origin_latitude=float(np.mean(lats)),
            origin_longitude=normalize_longitude(reference + float(np.mean(offsets))),
        )

    @property
    def transformers(self) -> _TransformerPair:
        """Forward (geographic to frame) and inverse pyproj transformers."""
        return _build_transformers(self.origin_latitude, self.origin_longitude)

    def to_xy(self, coords: Sequence[Coordinate]) -> MetricArray:
        """Project coordinates into an ``(n, 2)`` array of east/north metres."""

        if not coords:
            return np.empty((0, 2), dtype=float)
        lats, lons, _ = coordinate_arrays(coords)
        forward, _ = self.transformers
        xs, ys = forward.transform(lons, lats)
        return np.column_stack((xs, ys)).astype(float, copy=False)

    def to_xyz(
        self, coords: Sequence[Coordinate], missing_elevation: float = 0.0
    ) -> MetricArray:
        """Project coordinates into ``(n, 3)`` east/north/up metres."""

        if not coords:
            return np.empty((0, 3), dtype=float)
        xy = self.to_xy(coords)
        _, _, elevations = coordinate_arrays(coords)
        z = np.where(np.isnan(elevations), missing_elevation, elevations)
        return np.column_stack((xy, z))

    def to_coordinate(
        self, x: float, y: float, elevation: Optional[float] = None
    ) -> Coordinate:
        """Map a frame position back to a geographic coordinate."""

        _, inverse = self.transformers
        longitude, latitude = inverse.transform(float(x), float(y))
        return make_coordinate(float(latitude), float(longitude), elevation)


def open_ring(ring: Sequence[Coordinate]) -> List[Coordinate]:
    """Return ``ring`` as a list without a trailing copy of its first vertex."""

    vertices = list(ring)
    if len(vertices) > 1:
        first, last = vertices[0], vertices[-1]
        if first.latitude == last.latitude and first.longitude == last.longitude:
            vertices.pop()
    return vertices


def signed_area_xy(points: MetricArray) -> float:
    """Shoelace signed area of a closed planar ring; positive when counter-clockwise."""

    if len(points) < 3:
        return 0.0
    x = points[:, 0]
    y = points[:, 1]
    return 0.5 * float(np.dot(x, np.roll(y, -1)) - np.dot(np.roll(x, -1), y))


__all__ = [
    "LocalFrame",
    "MetricArray",
    "coordinate_arrays",
    "open_ring",
    "signed_area_xy",
    "wrap_longitude_deltas",
]
