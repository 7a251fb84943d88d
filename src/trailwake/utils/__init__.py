"""Shared utilities for trailwake."""

from .geo import Coordinates, to_coordinates, validate_coordinates
from .time import (
    fmt_ymd_in_zone,
    format_minutes,
    minutes_since_midnight,
    parse_hhmm,
    to_local,
    tomorrow_in_zone,
)

__all__ = [
    "Coordinates",
    "to_coordinates",
    "validate_coordinates",
    "fmt_ymd_in_zone",
    "format_minutes",
    "minutes_since_midnight",
    "parse_hhmm",
    "to_local",
    "tomorrow_in_zone",
]
