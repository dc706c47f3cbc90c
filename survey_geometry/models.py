"""Dataclasses describing coordinates and geometry results."""

from __future__ import annotations

from dataclasses import dataclass
import math
import numbers
from typing import Any, Iterable, List, Mapping, Optional, Sequence

from .errors import InvalidCoordinateError

_LATITUDE_KEYS = ("lat", "latitude", "y")
_LONGITUDE_KEYS = ("lng", "lon", "longitude", "x")
_ELEVATION_KEYS = ("elevation", "altitude", "alt", "z")


def _as_finite(name: str, value: Any) -> float:
    if isinstance(value, bool) or not isinstance(value, numbers.Real):
        raise InvalidCoordinateError(f"{name} must be a real number, got {value!r}")
    number = float(value)
    if not math.isfinite(number):
        raise InvalidCoordinateError(f"{name} must be finite, got {number!r}")
    return number


@dataclass(frozen=True, slots=True)
class Coordinate:
    """Geographic position in decimal degrees with an optional elevation in metres.

    Elevation is optional because not every capture source provides one. A
    missing elevation is a distinct state: ``Coordinate(1, 2)`` is not equal
    to ``Coordinate(1, 2, 0.0)``.
    """

    latitude: float
    longitude: float
    elevation: Optional[float] = None

    def __post_init__(self) -> None:
        latitude = _as_finite("latitude", self.latitude)
        longitude = _as_finite("longitude", self.longitude)
        if not -90.0 <= latitude <= 90.0:
            raise InvalidCoordinateError(f"latitude {latitude} outside [-90, 90]")
        if not -180.0 <= longitude <= 180.0:
            raise InvalidCoordinateError(f"longitude {longitude} outside [-180, 180]")
        object.__setattr__(self, "latitude", latitude)
        object.__setattr__(self, "longitude", longitude)
        if self.elevation is not None:
            object.__setattr__(self, "elevation", _as_finite("elevation", self.elevation))

    @property
    def has_elevation(self) -> bool:
        return self.elevation is not None

    def clone(self) -> "Coordinate":
        return Coordinate(self.latitude, self.longitude, self.elevation)

    def with_elevation(self, elevation: Optional[float]) -> "Coordinate":
        """Return a copy carrying ``elevation`` (``None`` drops it)."""

        return Coordinate(self.latitude, self.longitude, elevation)

    def distance_to(
        self, other: "Coordinate", *, include_elevation: bool = False
    ) -> float:
        from .spherical import distance

        return distance(self, other, include_elevation=include_elevation)

    def bearing_to(self, other: "Coordinate") -> float:
        from .spherical import bearing

        return bearing(self, other)

    def midpoint_to(self, other: "Coordinate") -> "Coordinate":
        from .spherical import midpoint

        return midpoint(self, other)

    def to_dict(self) -> dict[str, Optional[float]]:
        return {
            "latitude": self.latitude,
            "longitude": self.longitude,
            "elevation": self.elevation,
        }

    @classmethod
    def from_mapping(cls, mapping: Mapping[str, Any]) -> "Coordinate":
        """Build a coordinate from a mapping using common key spellings.

        Accepts ``lat``/``latitude``/``y``, ``lng``/``lon``/``longitude``/``x``
        and ``elevation``/``altitude``/``alt``/``z``. Numeric strings are
        parsed; anything else that is not a finite number is rejected.
        """

        latitude = _first_present(mapping, _LATITUDE_KEYS)
        longitude = _first_present(mapping, _LONGITUDE_KEYS)
        if latitude is None or longitude is None:
            raise InvalidCoordinateError(
                f"Mapping has no latitude/longitude keys: {sorted(mapping)}"
            )
        elevation = _first_present(mapping, _ELEVATION_KEYS)
        return cls(
            _parse_number("latitude", latitude),
            _parse_number("longitude", longitude),
            None if elevation is None else _parse_number("elevation", elevation),
        )

    @classmethod
    def from_sequence(cls, values: Sequence[Any]) -> "Coordinate":
        """Build a coordinate from ``(lat, lng)`` or ``(lat, lng, elevation)``."""

        if len(values) not in (2, 3):
            raise InvalidCoordinateError(
                f"Expected (lat, lng) or (lat, lng, elevation), got {len(values)} values"
            )
        elevation = values[2] if len(values) == 3 else None
        return cls(
            _parse_number("latitude", values[0]),
            _parse_number("longitude", values[1]),
            None if elevation is None else _parse_number("elevation", elevation),
        )


def _first_present(mapping: Mapping[str, Any], keys: Iterable[str]) -> Any:
    for key in keys:
        value = mapping.get(key)
        if value is not None:
            return value
    return None


def _parse_number(name: str, value: Any) -> float:
    if isinstance(value, str):
        try:
            return float(value.strip())
        except ValueError as exc:
            raise InvalidCoordinateError(f"{name} is not numeric: {value!r}") from exc
    return _as_finite(name, value)


def ensure_coordinates(coords: Iterable[Any], name: str = "coords") -> List[Coordinate]:
    """Return ``coords`` as a new list, rejecting anything that is not a :class:`Coordinate`."""

    result = list(coords)
    for index, item in enumerate(result):
        if not isinstance(item, Coordinate):
            raise TypeError(
                f"{name}[{index}] must be a Coordinate, got {type(item).__name__}"
            )
    return result


def ensure_coordinate(value: Any, name: str = "coordinate") -> Coordinate:
    if not isinstance(value, Coordinate):
        raise TypeError(f"{name} must be a Coordinate, got {type(value).__name__}")
    return value


@dataclass(frozen=True, slots=True)
class SegmentProjection:
    """Closest point on a single segment."""

    point: Coordinate
    fraction: float
    distance: float


@dataclass(frozen=True, slots=True)
class PathProjection:
    """Closest point on a path; ``point`` is ``None`` for paths under two vertices."""

    point: Optional[Coordinate]
    distance: float
    segment_index: int
    segment_fraction: float

    @property
    def found(self) -> bool:
        return self.point is not None


@dataclass(frozen=True, slots=True)
class PerpendicularOffset:
    """A point located on a path segment and its perpendicular offset."""

    offset_point: Coordinate
    nearest_point: Coordinate
    segment_index: int
    segment_fraction: float
    segment_bearing: float
    perpendicular_bearing: float


@dataclass(frozen=True, slots=True)
class ProfileSample:
    """Cumulative distance along a path paired with the vertex elevation."""

    distance: float
    elevation: Optional[float]


@dataclass(frozen=True, slots=True)
class Bounds:
    """Axis-aligned latitude/longitude extent of a coordinate collection."""

    min_latitude: float
    min_longitude: float
    max_latitude: float
    max_longitude: float

    @property
    def center(self) -> Coordinate:
        return Coordinate(
            (self.min_latitude + self.max_latitude) / 2.0,
            (self.min_longitude + self.max_longitude) / 2.0,
        )

    def contains(self, coordinate: Coordinate) -> bool:
        return (
            self.min_latitude <= coordinate.latitude <= self.max_latitude
            and self.min_longitude <= coordinate.longitude <= self.max_longitude
        )

