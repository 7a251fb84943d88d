"""Coordinate validation and cache-key bucketing."""

import math

from pydantic import BaseModel, Field, ValidationError

from trailwake.config import COORD_KEY_PRECISION
from trailwake.errors import InvalidCoordinatesError


class Coordinates(BaseModel):
    """Validated geographic point.

    Attributes:
        lat: Latitude in decimal degrees (-90 to 90)
        lon: Longitude in decimal degrees (-180 to 180)
    """

    lat: float = Field(..., ge=-90.0, le=90.0, allow_inf_nan=False)
    lon: float = Field(..., ge=-180.0, le=180.0, allow_inf_nan=False)

    model_config = {"frozen": True}

    def key(self, precision: int = COORD_KEY_PRECISION) -> str:
        """Return a stable "lat_lon" bucket for cache keys."""
        return f"{self.lat:.{precision}f}_{self.lon:.{precision}f}"


def validate_coordinates(lat, lon) -> bool:
    """Check that lat/lon are finite numbers inside the valid ranges."""
    for value in (lat, lon):
        if isinstance(value, bool) or not isinstance(value, (int, float)):
            return False
        if not math.isfinite(value):
            return False
    return -90 <= lat <= 90 and -180 <= lon <= 180


def to_coordinates(lat, lon) -> Coordinates:
    """Build Coordinates, raising InvalidCoordinatesError on bad input.

    Raises:
        InvalidCoordinatesError: If either value is missing, non-numeric,
            non-finite or out of range
    """
    if not validate_coordinates(lat, lon):
        raise InvalidCoordinatesError(f"Invalid coordinates: lat={lat!r}, lon={lon!r}")
    try:
        return Coordinates(lat=lat, lon=lon)
    except ValidationError as e:
        raise InvalidCoordinatesError(f"Invalid coordinates: lat={lat!r}, lon={lon!r}") from e
