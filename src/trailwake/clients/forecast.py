"""Open-Meteo forecast client.

Fetches hourly conditions around a target time and the daily precipitation
history that feeds the wetness model. Every call goes through the injected
TTLCache; network failures are raised as WeatherFetchFailure and never
retried here.

API docs: https://open-meteo.com/en/docs
"""

import logging
from datetime import date, datetime, timedelta
from typing import Optional

import pandas as pd
import requests
from pydantic import ValidationError

from trailwake.cache import TTLCache, fetch_with_cache
from trailwake.clients.schemas import (
    DAILY_FIELDS,
    HOURLY_FIELDS,
    DailyBlock,
    ForecastResponse,
    HourlyBlock,
)
from trailwake.config import SNOW_CODES, Settings
from trailwake.errors import WeatherFetchFailure
from trailwake.features.formulas import wet_bulb_f, wind_chill_f
from trailwake.features.wetness import DEFAULT_PARAMS, compute_wetness
from trailwake.models import (
    DailyRecord,
    WeatherData,
    WetnessInputs,
    WetnessInterpretation,
    number_or_none,
)
from trailwake.utils.geo import Coordinates, to_coordinates
from trailwake.utils.time import to_local

logger = logging.getLogger(__name__)

CM_TO_MM = 10.0


def block_frame(block, fields: list[str]) -> pd.DataFrame:
    """Build a DataFrame from parallel arrays.

    Arrays shorter than ``time`` are padded with NaN and longer ones are
    truncated. Rows whose timestamp cannot be parsed are dropped.

    Args:
        block: HourlyBlock or DailyBlock
        fields: Array names to include as columns

    Returns:
        DataFrame with a datetime ``time`` column and one float column per field
    """
    n = len(block.time)
    times = pd.Series(block.time, dtype="object")
    columns = {"time": pd.to_datetime(times, format="ISO8601", errors="coerce")}
    for name in fields:
        values = list(getattr(block, name) or [])[:n]
        values += [None] * (n - len(values))
        columns[name] = pd.to_numeric(pd.Series(values, dtype="object"), errors="coerce").astype(float)

    frame = pd.DataFrame(columns)
    return frame.dropna(subset=["time"]).reset_index(drop=True)


def normalize_hourly(block: HourlyBlock, when_local: datetime) -> WeatherData:
    """Pick the hour closest to when_local and derive display metrics.

    Args:
        block: Hourly arrays with local (naive) timestamps
        when_local: Target time in the response's timezone

    Returns:
        WeatherData for the closest hour

    Raises:
        WeatherFetchFailure: If no hourly row has a usable timestamp
    """
    frame = block_frame(block, HOURLY_FIELDS)
    if frame.empty:
        raise WeatherFetchFailure("Forecast response has no usable hourly data")

    target = pd.Timestamp(when_local.replace(tzinfo=None))
    row = frame.loc[(frame["time"] - target).abs().idxmin()]

    temp_f = number_or_none(row["temperature_2m"])
    wind_mph = number_or_none(row["wind_speed_10m"])
    humidity = number_or_none(row["relative_humidity_2m"])
    code = number_or_none(row["weathercode"])
    snowfall = number_or_none(row["snowfall"])

    wet_bulb = wet_bulb_f(temp_f, humidity)
    if wet_bulb is None:
        wet_bulb = number_or_none(row["wet_bulb_temperature_2m"])

    weather_code = int(code) if code is not None else None
    is_snow = (weather_code in SNOW_CODES) or (snowfall is not None and snowfall > 0)

    return WeatherData(
        time=row["time"].isoformat(),
        temp_f=temp_f,
        wind_mph=wind_mph,
        wind_chill_f=wind_chill_f(temp_f, wind_mph),
        pop=number_or_none(row["precipitation_probability"]),
        wet_bulb_f=wet_bulb,
        relative_humidity=humidity,
        is_snow=is_snow,
        weather_code=weather_code,
        snowfall_cm=snowfall,
    )


def normalize_daily(
    block: DailyBlock,
    reference_date: date,
    lookback_days: int,
    snow_to_water_ratio: float = DEFAULT_PARAMS.snow_to_water_ratio,
) -> WetnessInputs:
    """Turn daily arrays into the wetness window before reference_date.

    Only days strictly before reference_date are kept (the surface going
    into that morning), at most lookback_days of them. Missing amounts become
    0 and missing temperatures stay None. When rain_sum is missing, rain is
    estimated as total precipitation minus the snow water equivalent so snow
    is not counted twice.

    Args:
        block: Daily arrays (precipitation in mm, snowfall in cm, temperatures in °F)
        reference_date: Day being judged
        lookback_days: Maximum days kept
        snow_to_water_ratio: Snow depth to water equivalent ratio

    Returns:
        WetnessInputs ordered by date
    """
    frame = block_frame(block, DAILY_FIELDS)
    frame = frame[frame["time"] < pd.Timestamp(reference_date)]
    frame = frame.sort_values("time").drop_duplicates("time", keep="last").tail(lookback_days)

    snow_mm = frame["snowfall_sum"].fillna(0.0).clip(lower=0.0) * CM_TO_MM
    estimated_rain = (frame["precipitation_sum"].fillna(0.0) - snow_mm * snow_to_water_ratio).clip(lower=0.0)
    rain_mm = frame["rain_sum"].where(frame["rain_sum"].notna(), estimated_rain)

    records = [
        DailyRecord.from_raw(
            day=ts.date(),
            rain_mm=rain,
            snow_mm=snow,
            et0_mm=et0,
            precip_hours=hours,
            max_temp_f=max_temp,
            min_temp_f=min_temp,
        )
        for ts, rain, snow, et0, hours, max_temp, min_temp in zip(
            frame["time"],
            rain_mm,
            snow_mm,
            frame["et0_fao_evapotranspiration"],
            frame["precipitation_hours"],
            frame["temperature_2m_max"],
            frame["temperature_2m_min"],
        )
    ]
    return WetnessInputs(records=records, lookback_days=lookback_days, reference_date=reference_date)


class ForecastClient:
    """Cache-backed Open-Meteo client.

    Example:
        >>> client = ForecastClient(TTLCache())
        >>> weather = client.fetch_weather_around(40.35, -74.0, dawn, "America/New_York")
        >>> weather.wind_chill_f
        28.4
    """

    def __init__(
        self,
        cache: TTLCache,
        session: Optional[requests.Session] = None,
        settings: Optional[Settings] = None,
    ):
        """Initialize the client.

        Args:
            cache: Cache every response passes through
            session: HTTP session (a new one by default)
            settings: Endpoint, timeout and TTL settings
        """
        self.cache = cache
        self.session = session or requests.Session()
        self.settings = settings or Settings()

    def _get_json(self, params: dict) -> dict:
        """GET the forecast endpoint and decode JSON.

        Raises:
            WeatherFetchFailure: On transport errors, non-OK status or a
                body that is not JSON
        """
        try:
            response = self.session.get(
                self.settings.forecast_url,
                params=params,
                timeout=self.settings.request_timeout,
            )
            response.raise_for_status()
        except requests.HTTPError as e:
            status = e.response.status_code if e.response is not None else None
            raise WeatherFetchFailure(
                f"Forecast request failed with HTTP {status}", status_code=status
            ) from e
        except requests.RequestException as e:
            raise WeatherFetchFailure(f"Forecast request failed: {e}") from e

        try:
            return response.json()
        except ValueError as e:
            raise WeatherFetchFailure("Forecast response is not valid JSON") from e

    def _parse(self, data: dict) -> ForecastResponse:
        try:
            return ForecastResponse.model_validate(data)
        except ValidationError as e:
            raise WeatherFetchFailure(f"Malformed forecast response: {e.error_count()} errors") from e

    def _fetch_hourly(self, coords: Coordinates, when_local: datetime, tz: str) -> dict:
        ymd = when_local.strftime("%Y-%m-%d")
        params = {
            "latitude": coords.lat,
            "longitude": coords.lon,
            "hourly": ",".join(HOURLY_FIELDS),
            "timezone": tz,
            "start_date": ymd,
            "end_date": ymd,
            "temperature_unit": "fahrenheit",
            "wind_speed_unit": "mph",
        }
        logger.info(f"Fetching hourly forecast for ({coords.lat}, {coords.lon}) on {ymd}")
        parsed = self._parse(self._get_json(params))
        if parsed.hourly is None or not parsed.hourly.time:
            raise WeatherFetchFailure("Forecast response has no hourly data")
        return normalize_hourly(parsed.hourly, when_local).to_dict()

    def _fetch_daily(self, coords: Coordinates, day: date, tz: str) -> dict:
        lookback = self.settings.lookback_days
        params = {
            "latitude": coords.lat,
            "longitude": coords.lon,
            "daily": ",".join(DAILY_FIELDS),
            "timezone": tz,
            "start_date": (day - timedelta(days=lookback)).isoformat(),
            "end_date": day.isoformat(),
            "precipitation_unit": "mm",
            "temperature_unit": "fahrenheit",
        }
        logger.info(f"Fetching daily precipitation for ({coords.lat}, {coords.lon}) before {day}")
        parsed = self._parse(self._get_json(params))
        if parsed.daily is None or not parsed.daily.time:
            # No precipitation data is treated as dry, not as an error
            logger.info(f"No daily section for ({coords.lat}, {coords.lon}); assuming dry")
            return WetnessInputs(lookback_days=lookback, reference_date=day).to_dict()
        return normalize_daily(parsed.daily, day, lookback).to_dict()

    def fetch_weather_around(self, lat: float, lon: float, when: datetime, tz: str) -> WeatherData:
        """Hourly conditions closest to ``when``.

        Args:
            lat: Latitude
            lon: Longitude
            when: Target time (naive values are read as local to tz)
            tz: IANA timezone

        Returns:
            WeatherData for the closest forecast hour

        Raises:
            InvalidCoordinatesError: Before any network call
            WeatherFetchFailure: On transport/protocol failure
        """
        coords = to_coordinates(lat, lon)
        when_local = to_local(when, tz)
        key = f"hourly_{coords.key()}_{int(when_local.timestamp() // 3600)}"

        payload = fetch_with_cache(
            self.cache,
            key,
            lambda: self._fetch_hourly(coords, when_local, tz),
            self.settings.forecast_ttl,
        )
        return WeatherData.from_dict(payload)

    def fetch_wetness_inputs(self, lat: float, lon: float, day, tz: str) -> WetnessInputs:
        """Daily records for the lookback window before ``day``.

        Args:
            lat: Latitude
            lon: Longitude
            day: Day being judged (a datetime is converted to its date in tz)
            tz: IANA timezone

        Returns:
            WetnessInputs; empty when the service returns no daily section

        Raises:
            InvalidCoordinatesError: Before any network call
            WeatherFetchFailure: On transport/protocol failure
        """
        coords = to_coordinates(lat, lon)
        if isinstance(day, datetime):
            day = to_local(day, tz).date()
        key = f"wetness_{coords.key()}_{day.isoformat()}"

        payload = fetch_with_cache(
            self.cache,
            key,
            lambda: self._fetch_daily(coords, day, tz),
            self.settings.forecast_ttl,
        )
        return WetnessInputs.from_dict(payload)

    def fetch_wetness(self, lat: float, lon: float, day, tz: str) -> WetnessInterpretation:
        """Fetch the wetness window and score it."""
        return compute_wetness(self.fetch_wetness_inputs(lat, lon, day, tz))
