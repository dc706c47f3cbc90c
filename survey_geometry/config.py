"""Central configuration for the survey geometry engine.

All values are constants imported by the rest of the package. Tunables are
read once from environment variables (optionally via a local `.env`); the
engine never consults configuration after import, so every call stays a pure
function of its arguments.
"""

from __future__ import annotations

import importlib
import os


def _env_float(key: str, default: float) -> float:
    value = os.getenv(key)
    if value is None:
        return default
    try:
        return float(value)
    except ValueError:
        return default


def _env_int(key: str, default: int) -> int:
    value = os.getenv(key)
    if value is None:
        return default
    try:
        return int(value)
    except ValueError:
        return default


# Load .env variables when python-dotenv is available.
_load_dotenv = None
try:
    _dotenv_mod = importlib.import_module("dotenv")
    _load_dotenv = getattr(_dotenv_mod, "load_dotenv", None)
except Exception:
    _load_dotenv = None

if callable(_load_dotenv):
    # Load .env from the current directory or any parent folder.
    _load_dotenv()


# ---------------------------------------------------------------------------
# Earth model
# ---------------------------------------------------------------------------
# Mean spherical radius (metres). Ellipsoidal and geoid corrections belong to
# the external geodesy provider; not read from the environment.
EARTH_RADIUS_M = 6_371_000.0


# ---------------------------------------------------------------------------
# Offsets and buffers
# ---------------------------------------------------------------------------
# Maximum miter length as a multiple of the offset distance. Sharper corners
# are clipped to this length instead of spiking away from the path.
GEOMETRY_MITER_LIMIT = max(_env_float("GEOMETRY_MITER_LIMIT", 5.0), 1.0)


# ---------------------------------------------------------------------------
# Shape constructors
# ---------------------------------------------------------------------------
# Default number of segments used to approximate arcs and circles.
GEOMETRY_ARC_SEGMENTS = max(_env_int("GEOMETRY_ARC_SEGMENTS", 32), 1)


# ---------------------------------------------------------------------------
# Local projections
# ---------------------------------------------------------------------------
# Number of local metric transformers kept for reuse, keyed by frame origin.
GEOMETRY_FRAME_CACHE_SIZE = max(_env_int("GEOMETRY_FRAME_CACHE_SIZE", 256), 1)


# ---------------------------------------------------------------------------
# Numerical tolerances
# ---------------------------------------------------------------------------
# Lengths (metres) at or below this value are treated as zero-length
# segments by the projection and offset math.
GEOMETRY_EPSILON_M = _env_float("GEOMETRY_EPSILON_M", 1e-9)


# ---------------------------------------------------------------------------
# Command line tool
# ---------------------------------------------------------------------------
GEOMETRY_LOG_LEVEL = os.getenv("GEOMETRY_LOG_LEVEL", "WARNING").upper()
