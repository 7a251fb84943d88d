"""Tests for wind chill and wet-bulb formulas."""

import numpy as np
import pytest

from trailwake.features.formulas import c_to_f, f_to_c, wet_bulb_f, wet_bulb_stull, wind_chill_f


class TestWindChill:
    """Tests for the NWS wind chill formula."""

    def test_known_value(self):
        """30°F with 10 mph wind feels like about 21°F."""
        assert wind_chill_f(30.0, 10.0) == pytest.approx(21.25, abs=0.01)

    def test_colder_with_more_wind(self):
        assert wind_chill_f(20.0, 30.0) < wind_chill_f(20.0, 5.0)

    @pytest.mark.parametrize("temp,wind", [(50.1, 20.0), (80.0, 3.0), (20.0, 2.9), (-10.0, 0.0)])
    def test_outside_domain(self, temp, wind):
        """Undefined above 50°F or below 3 mph."""
        assert wind_chill_f(temp, wind) is None

    def test_domain_edges_included(self):
        """Exactly 50°F and 3 mph are inside the domain."""
        assert wind_chill_f(50.0, 3.0) is not None

    @pytest.mark.parametrize("temp,wind", [(None, 10.0), (30.0, None), (float("nan"), 10.0)])
    def test_missing_input(self, temp, wind):
        assert wind_chill_f(temp, wind) is None


class TestWetBulb:
    """Tests for the Stull wet-bulb approximation."""

    def test_known_value(self):
        """20°C at 50% RH is about 13.7°C."""
        assert wet_bulb_stull(20.0, 50.0) == pytest.approx(13.7, abs=0.05)

    def test_saturated_air_close_to_dry_bulb(self):
        assert wet_bulb_stull(25.0, 99.0) == pytest.approx(25.0, abs=0.5)

    def test_array_input(self):
        result = wet_bulb_stull(np.array([20.0, 30.0]), np.array([50.0, 50.0]))
        assert result.shape == (2,)
        assert result[1] > result[0]

    def test_fahrenheit_wrapper(self):
        assert wet_bulb_f(68.0, 50.0) == pytest.approx(c_to_f(wet_bulb_stull(20.0, 50.0)))

    def test_fahrenheit_wrapper_missing(self):
        assert wet_bulb_f(None, 50.0) is None
        assert wet_bulb_f(68.0, float("nan")) is None


class TestConversions:
    def test_round_trip_points(self):
        assert f_to_c(32.0) == 0.0
        assert c_to_f(100.0) == 212.0
        assert f_to_c(c_to_f(-40.0)) == -40.0
