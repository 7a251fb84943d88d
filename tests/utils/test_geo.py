"""Tests for coordinate validation."""

import pytest
from pydantic import ValidationError

from trailwake.errors import AwarenessError, InvalidCoordinatesError
from trailwake.utils.geo import Coordinates, to_coordinates, validate_coordinates


class TestCoordinates:
    """Tests for the Coordinates model."""

    def test_create(self):
        coords = Coordinates(lat=40.35, lon=-74.66)
        assert coords.lat == 40.35
        assert coords.lon == -74.66

    def test_key_rounds_to_three_places(self):
        """Nearby points share a cache bucket."""
        assert Coordinates(lat=40.35012, lon=-74.65989).key() == "40.350_-74.660"

    def test_key_precision(self):
        assert Coordinates(lat=40.35, lon=-74.66).key(precision=1) == "40.4_-74.7"

    @pytest.mark.parametrize("lat,lon", [(90.1, 0.0), (-90.1, 0.0), (0.0, 180.5), (float("nan"), 0.0)])
    def test_rejects_out_of_range(self, lat, lon):
        with pytest.raises(ValidationError):
            Coordinates(lat=lat, lon=lon)

    def test_frozen(self):
        coords = Coordinates(lat=1.0, lon=2.0)
        with pytest.raises(ValidationError):
            coords.lat = 3.0


class TestValidateCoordinates:
    """Tests for validate_coordinates and to_coordinates."""

    @pytest.mark.parametrize("lat,lon", [(0, 0), (90, 180), (-90, -180), (40.35, -74.66)])
    def test_valid(self, lat, lon):
        assert validate_coordinates(lat, lon) is True

    @pytest.mark.parametrize(
        "lat,lon",
        [(None, 0), (0, None), ("40", "-74"), (True, 0), (float("inf"), 0), (0, float("nan")), (91, 0), (0, -181)],
    )
    def test_invalid(self, lat, lon):
        assert validate_coordinates(lat, lon) is False

    def test_to_coordinates(self):
        coords = to_coordinates(40.35, -74.66)
        assert isinstance(coords, Coordinates)

    def test_to_coordinates_raises(self):
        """Invalid input raises an error that is both an AwarenessError and a ValueError."""
        with pytest.raises(InvalidCoordinatesError) as exc_info:
            to_coordinates(100.0, 0.0)
        assert isinstance(exc_info.value, AwarenessError)
        assert isinstance(exc_info.value, ValueError)
