"""Tests for the awareness orchestration."""

from datetime import date, datetime
from unittest.mock import Mock
from zoneinfo import ZoneInfo

import pytest

from trailwake.awareness import AwarenessReport, refresh_awareness
from trailwake.clients import DawnClient, ForecastClient
from trailwake.config import Settings
from trailwake.errors import DawnFetchFailure, InvalidCoordinatesError
from trailwake.models import (
    DawnInfo,
    Status,
    WeatherData,
    WetnessInterpretation,
)

NY = "America/New_York"
EVENING = datetime(2024, 1, 15, 20, 0, tzinfo=ZoneInfo(NY))
DAWN = DawnInfo(date=datetime(2024, 1, 16, 6, 47, tzinfo=ZoneInfo(NY)), tz=NY)


@pytest.fixture
def dawn_client():
    client = Mock(spec=DawnClient)
    client.fetch_dawn.return_value = DAWN
    return client


@pytest.fixture
def forecast_client():
    client = Mock(spec=ForecastClient)
    client.fetch_weather_around.return_value = WeatherData(
        time="2024-01-16T07:00:00",
        temp_f=30.0,
        wind_mph=10.0,
        wind_chill_f=21.2,
        pop=35.0,
        wet_bulb_f=27.0,
    )
    client.fetch_wetness.return_value = WetnessInterpretation(
        is_wet=True, wet_days=2, avg_precip=0.2, label="Wet"
    )
    return client


class TestRefreshAwareness:
    """Tests for refresh_awareness."""

    def test_builds_report(self, forecast_client, dawn_client):
        """All statuses are computed and aggregated."""
        report = refresh_awareness(
            40.35, -74.66, NY, 6 * 60 + 30,
            forecast_client=forecast_client,
            dawn_client=dawn_client,
            when=EVENING,
        )

        assert isinstance(report, AwarenessReport)
        assert report.dawn == DAWN
        assert report.wetness.label == "Wet"
        assert report.statuses["wind"].status is Status.WARNING
        assert report.statuses["precip"].status is Status.YIELD
        assert report.statuses["wet_bulb"].status is Status.OK
        assert report.statuses["dawn"].status is Status.WARNING
        assert report.daylight.minutes_before == 17
        assert report.overall.status is Status.WARNING

    def test_dawn_drives_forecast_lookups(self, forecast_client, dawn_client):
        """Weather is fetched at dawn and wetness for the dawn date."""
        refresh_awareness(
            40.35, -74.66, NY,
            forecast_client=forecast_client,
            dawn_client=dawn_client,
            when=EVENING,
        )

        dawn_client.fetch_dawn.assert_called_once_with(40.35, -74.66, NY, date(2024, 1, 16))
        forecast_client.fetch_weather_around.assert_called_once_with(40.35, -74.66, DAWN.date, NY)
        forecast_client.fetch_wetness.assert_called_once_with(40.35, -74.66, date(2024, 1, 16), NY)

    def test_without_run_start(self, forecast_client, dawn_client):
        """No run start means no daylight warning."""
        report = refresh_awareness(
            40.35, -74.66, NY,
            forecast_client=forecast_client,
            dawn_client=dawn_client,
            when=EVENING,
        )

        assert report.daylight.needed is False
        assert report.statuses["dawn"].status is Status.OK

    def test_missing_metrics_are_skipped(self, forecast_client, dawn_client):
        """Metrics without a value produce no status and do not affect the aggregate."""
        forecast_client.fetch_weather_around.return_value = WeatherData(temp_f=70.0, pop=10.0)

        report = refresh_awareness(
            40.35, -74.66, NY,
            forecast_client=forecast_client,
            dawn_client=dawn_client,
            when=EVENING,
        )

        assert report.statuses["wind"] is None
        assert report.statuses["wet_bulb"] is None
        assert report.overall.status is Status.OK

    def test_invalid_coordinates(self, forecast_client, dawn_client):
        """Bad coordinates fail before any client is used."""
        with pytest.raises(InvalidCoordinatesError):
            refresh_awareness(
                95.0, 0.0, NY,
                forecast_client=forecast_client,
                dawn_client=dawn_client,
            )
        dawn_client.fetch_dawn.assert_not_called()

    def test_client_errors_propagate(self, forecast_client, dawn_client):
        """Dawn failures stop the refresh and reach the caller."""
        dawn_client.fetch_dawn.side_effect = DawnFetchFailure("offline")

        with pytest.raises(DawnFetchFailure):
            refresh_awareness(
                40.35, -74.66, NY,
                forecast_client=forecast_client,
                dawn_client=dawn_client,
                when=EVENING,
            )
        forecast_client.fetch_weather_around.assert_not_called()

    def test_to_dict(self, forecast_client, dawn_client):
        """The report serializes to plain values."""
        report = refresh_awareness(
            40.35, -74.66, NY, 6 * 60 + 30,
            forecast_client=forecast_client,
            dawn_client=dawn_client,
            when=EVENING,
        )

        data = report.to_dict()

        assert data["dawn"] == "2024-01-16T06:47:00-05:00"
        assert data["overall"]["status"] == "warning"
        assert data["statuses"]["dawn"]["message"] == "Check daylight (17 min before dawn)"
        assert data["wetness"]["label"] == "Wet"


class TestRefreshAwarenessEndToEnd:
    """Real clients over mocked HTTP sessions and a shared cache."""

    def test_end_to_end(self, cache, response_factory):
        dawn_epoch = DAWN.date.timestamp()
        session = Mock()

        def fake_get(url, params=None, timeout=None):
            if "sunrisesunset" in url:
                return response_factory({"status": "OK", "results": {"dawn": dawn_epoch}})
            if "hourly" in params:
                return response_factory(
                    {
                        "hourly": {
                            "time": ["2024-01-16T06:00", "2024-01-16T07:00"],
                            "temperature_2m": [55.0, 58.0],
                            "relative_humidity_2m": [40.0, 40.0],
                            "wind_speed_10m": [5.0, 5.0],
                            "precipitation_probability": [0, 0],
                        }
                    }
                )
            return response_factory(
                {
                    "daily": {
                        "time": ["2024-01-13", "2024-01-14", "2024-01-15"],
                        "rain_sum": [0.0, 0.0, 0.0],
                    }
                }
            )

        session.get.side_effect = fake_get
        settings = Settings()

        report = refresh_awareness(
            40.35, -74.66, NY, 7 * 60,
            forecast_client=ForecastClient(cache, session=session, settings=settings),
            dawn_client=DawnClient(cache, session=session, settings=settings),
            when=EVENING,
        )

        assert report.weather.temp_f == 58.0
        assert report.weather.wind_chill_f is None
        assert report.wetness.label == "Dry"
        assert report.overall.status is Status.OK
        assert session.get.call_count == 3
