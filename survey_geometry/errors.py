"""Central error types used across the geometry engine."""

from __future__ import annotations


class SurveyGeometryError(RuntimeError):
    """Base error for geometry engine failures."""


class InvalidCoordinateError(SurveyGeometryError, ValueError):
    """Raised when a latitude, longitude or elevation is non-finite or out of range."""


class TriangulationError(SurveyGeometryError):
    """Raised when ear clipping cannot make progress on a ring."""


__all__ = [
    "SurveyGeometryError",
    "InvalidCoordinateError",
    "TriangulationError",
]
