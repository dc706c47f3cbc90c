#!/usr/bin/env python3
"""Measure surveyed paths and rings from the command line.

Coordinates are ``lat,lng`` or ``lat,lng,elevation`` triples, given either as
positional arguments or one per line in a text file (blank lines and lines
starting with ``#`` are skipped).

Usage examples:

    # Horizontal length of an open path
    python -m survey_geometry length 51.5,-0.12 51.51,-0.12 51.51,-0.10

    # Slant perimeter of a ring read from a file
    python -m survey_geometry length --closed --include-elevation \
        --file boundary.txt

    # Area of a ring
    python -m survey_geometry area --file boundary.txt

    # Elevation profile as CSV
    python -m survey_geometry profile --file track.txt --format csv

    # Douglas-Peucker simplification with a 5 m tolerance
    python -m survey_geometry simplify --tolerance 5 --file track.txt
"""

from __future__ import annotations

import argparse
import logging
from pathlib import Path
from typing import List, Optional, Sequence

from ..config import GEOMETRY_LOG_LEVEL
from ..errors import InvalidCoordinateError
from ..models import Coordinate
from ..paths import elevation_profile_frame, path_length, perimeter, simplify_path
from ..polygons import polygon_area

LOGGER = logging.getLogger(__name__)

_LOG_LEVELS = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]


def parse_coordinate(text: str) -> Coordinate:
    """Parse a ``lat,lng[,elevation]`` string."""

    parts = [part.strip() for part in text.split(",")]
    return Coordinate.from_sequence(parts)


def read_coordinates(path: Path) -> List[Coordinate]:
    """Read one coordinate per line from ``path``."""

    coords: List[Coordinate] = []
    with path.open("r", encoding="utf-8") as handle:
        for line_number, raw in enumerate(handle, start=1):
            line = raw.strip()
            if not line or line.startswith("#"):
                continue
            try:
                coords.append(parse_coordinate(line))
            except InvalidCoordinateError as exc:
                raise InvalidCoordinateError(f"{path}:{line_number}: {exc}") from exc
    return coords


def _format_coordinate(coord: Coordinate) -> str:
    if coord.elevation is None:
        return f"{coord.latitude:.8f},{coord.longitude:.8f}"
    return f"{coord.latitude:.8f},{coord.longitude:.8f},{coord.elevation:.3f}"


def _add_input_arguments(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "points",
        nargs="*",
        help="Coordinates as lat,lng or lat,lng,elevation",
    )
    parser.add_argument(
        "--file",
        type=Path,
        help="Text file with one coordinate per line (used instead of points)",
    )


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="survey-geometry",
        description="Measure surveyed paths and rings on a spherical Earth",
    )
    parser.add_argument(
        "--log-level",
        default=GEOMETRY_LOG_LEVEL if GEOMETRY_LOG_LEVEL in _LOG_LEVELS else "WARNING",
        choices=_LOG_LEVELS,
        help="Python logging level",
    )
    commands = parser.add_subparsers(dest="command", required=True)

    length = commands.add_parser("length", help="Path length or ring perimeter in metres")
    _add_input_arguments(length)
    length.add_argument(
        "--closed", action="store_true", help="Include the closing segment"
    )
    length.add_argument(
        "--include-elevation",
        action="store_true",
        help="Use slant distances where elevations are present",
    )

    area = commands.add_parser("area", help="Ring area and perimeter")
    _add_input_arguments(area)
    area.add_argument(
        "--include-elevation",
        action="store_true",
        help="Report the triangulated 3D surface area",
    )

    profile = commands.add_parser("profile", help="Elevation profile along a path")
    _add_input_arguments(profile)
    profile.add_argument(
        "--format",
        choices=["table", "csv"],
        default="table",
        help="Output format (default: table)",
    )

    simplify = commands.add_parser("simplify", help="Douglas-Peucker simplification")
    _add_input_arguments(simplify)
    simplify.add_argument(
        "--tolerance",
        type=float,
        required=True,
        help="Maximum deviation in metres",
    )
    return parser


def _load_points(args: argparse.Namespace) -> List[Coordinate]:
    if args.file is not None:
        return read_coordinates(args.file)
    return [parse_coordinate(point) for point in args.points]


def main(argv: Optional[Sequence[str]] = None) -> int:
    """Entry point for the ``survey-geometry`` tool."""
    parser = _build_parser()
    args = parser.parse_args(argv)
    if not logging.getLogger().hasHandlers():
        logging.basicConfig(
            level=getattr(logging, args.log_level),
            format="[%(asctime)s] %(levelname)s %(name)s: %(message)s",
        )

    try:
        coords = _load_points(args)
    except (InvalidCoordinateError, OSError) as exc:
        parser.error(str(exc))
    LOGGER.info("Loaded %d coordinates for %s", len(coords), args.command)

    if args.command == "length":
        value = path_length(
            coords, include_elevation=args.include_elevation, closed=args.closed
        )
        print(f"{value:.3f}")
    elif args.command == "area":
        area = polygon_area(coords, include_elevation=args.include_elevation)
        print(f"area_m2={area:.3f}")
        print(f"perimeter_m={perimeter(coords):.3f}")
    elif args.command == "profile":
        frame = elevation_profile_frame(coords)
        if args.format == "csv":
            print(frame.to_csv(index=False, float_format="%.3f"), end="")
        else:
            print(frame.to_string(index=False, float_format=lambda v: f"{v:.3f}"))
    elif args.command == "simplify":
        simplified = simplify_path(coords, args.tolerance)
        LOGGER.info("Kept %d of %d vertices", len(simplified), len(coords))
        for coord in simplified:
            print(_format_coordinate(coord))
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
