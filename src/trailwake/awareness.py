"""Compose dawn, forecast, wetness and status into one report."""

import logging
from dataclasses import dataclass, field
from datetime import datetime
from typing import Optional

from trailwake.clients.dawn import DawnClient
from trailwake.clients.forecast import ForecastClient
from trailwake.features.daylight import check_daylight_needed
from trailwake.features.status import (
    HazardSummary,
    aggregate_statuses,
    compute_dawn_status,
    compute_precip_status,
    compute_wet_bulb_status,
    compute_wind_status,
)
from trailwake.models import (
    DawnInfo,
    DaylightCheck,
    StatusIconResult,
    WeatherData,
    WetnessInterpretation,
)
from trailwake.utils.geo import Coordinates, to_coordinates
from trailwake.utils.time import get_zone, tomorrow_in_zone

logger = logging.getLogger(__name__)


@dataclass
class AwarenessReport:
    """Everything needed to brief a runner for the next dawn.

    Attributes:
        coordinates: Validated location
        tz: IANA timezone all local times are shown in
        dawn: Next dawn at the location
        weather: Hourly conditions closest to dawn
        wetness: Trail wetness for the dawn date
        daylight: Run start relative to dawn
        statuses: Per-metric results keyed wind / wet_bulb / precip / dawn
        overall: Worst status and the non-OK messages
    """

    coordinates: Coordinates
    tz: str
    dawn: DawnInfo
    weather: WeatherData
    wetness: WetnessInterpretation
    daylight: DaylightCheck
    statuses: dict = field(default_factory=dict)
    overall: HazardSummary = field(default_factory=HazardSummary)

    def to_dict(self) -> dict:
        return {
            "lat": self.coordinates.lat,
            "lon": self.coordinates.lon,
            "tz": self.tz,
            "dawn": self.dawn.local.isoformat(),
            "weather": self.weather.to_dict(),
            "wetness": self.wetness.to_dict(),
            "daylight": {
                "needed": self.daylight.needed,
                "message": self.daylight.message,
                "minutes_before": self.daylight.minutes_before,
            },
            "statuses": {
                name: _status_dict(result) for name, result in self.statuses.items()
            },
            "overall": {
                "status": self.overall.status.value,
                "messages": dict(self.overall.messages),
            },
        }


def _status_dict(result: Optional[StatusIconResult]) -> Optional[dict]:
    if result is None:
        return None
    return {"status": result.status.value, "message": result.message}


def refresh_awareness(
    lat: float,
    lon: float,
    tz: str,
    run_start_minutes: Optional[int] = None,
    *,
    forecast_client: ForecastClient,
    dawn_client: DawnClient,
    when: Optional[datetime] = None,
) -> AwarenessReport:
    """Build the awareness report for the dawn after ``when``.

    Dawn is fetched first because both the forecast hour and the wetness
    reference date are taken from it. Client errors propagate unchanged.

    Args:
        lat: Latitude
        lon: Longitude
        tz: IANA timezone
        run_start_minutes: Planned run start in minutes since local midnight
        forecast_client: Client for hourly and daily forecasts
        dawn_client: Client for dawn lookups
        when: Current time (defaults to now); dawn is looked up for the next day

    Returns:
        AwarenessReport

    Raises:
        InvalidCoordinatesError: Before any network call
        WeatherFetchFailure, DawnFetchFailure, DawnApiStatusFailure,
        DawnInvalidTimestampFailure: From the clients
    """
    coords = to_coordinates(lat, lon)
    get_zone(tz)

    day = tomorrow_in_zone(tz, when)
    logger.info(f"Refreshing awareness for ({coords.lat}, {coords.lon}) on {day}")

    dawn = dawn_client.fetch_dawn(coords.lat, coords.lon, tz, day)
    weather = forecast_client.fetch_weather_around(coords.lat, coords.lon, dawn.date, tz)
    wetness = forecast_client.fetch_wetness(coords.lat, coords.lon, dawn.local.date(), tz)

    daylight = check_daylight_needed(run_start_minutes, dawn)
    statuses = {
        "wind": compute_wind_status(weather.wind_chill_f),
        "wet_bulb": compute_wet_bulb_status(weather.wet_bulb_f),
        "precip": compute_precip_status(weather.pop),
        "dawn": compute_dawn_status(run_start_minutes, dawn),
    }
    overall = aggregate_statuses(statuses)

    logger.info(
        f"Awareness for {day}: overall={overall.status.value}, "
        f"wetness={wetness.label}, daylight_needed={daylight.needed}"
    )

    return AwarenessReport(
        coordinates=coords,
        tz=tz,
        dawn=dawn,
        weather=weather,
        wetness=wetness,
        daylight=daylight,
        statuses=statuses,
        overall=overall,
    )
