"""Global pytest fixtures & helpers.

Adds project root to path and provides reusable sample geometries so the
path, polygon and surface tests share the same rings.
"""
from __future__ import annotations

import os
import sys

import pytest

ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))
if ROOT not in sys.path:
    sys.path.insert(0, ROOT)

from survey_geometry.models import Coordinate


# --- Factory helpers -------------------------------------------------
def make_square(lat: float, lng: float, size_deg: float, elevation=None):
    """Counter-clockwise square with its south-west corner at ``(lat, lng)``."""
    return [
        Coordinate(lat, lng, elevation),
        Coordinate(lat, lng + size_deg, elevation),
        Coordinate(lat + size_deg, lng + size_deg, elevation),
        Coordinate(lat + size_deg, lng, elevation),
    ]


def coords_from(pairs):
    return [Coordinate(*pair) for pair in pairs]


# --- Fixtures --------------------------------------------------------
@pytest.fixture
def square_ring():
    """Roughly 1.1 km square on the equator."""
    return make_square(0.0, 0.0, 0.01)


@pytest.fixture
def flat_square_ring():
    """Same square at a constant 100 m elevation."""
    return make_square(0.0, 0.0, 0.01, elevation=100.0)


@pytest.fixture
def equator_path():
    return coords_from([(0.0, 0.0), (0.0, 0.01), (0.0, 0.02)])


@pytest.fixture
def l_shaped_path():
    """East then north, with elevations climbing and then dropping."""
    return coords_from(
        [
            (0.0, 0.0, 10.0),
            (0.0, 0.01, 25.0),
            (0.01, 0.01, 5.0),
        ]
    )


@pytest.fixture
def bowtie_ring():
    return coords_from([(0.0, 0.0), (0.01, 0.01), (0.01, 0.0), (0.0, 0.01)])
