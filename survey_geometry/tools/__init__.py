"""Command line entry points built on the geometry engine."""

from .measure import main

__all__ = ["main"]
