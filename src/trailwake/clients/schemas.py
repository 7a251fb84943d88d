"""Pydantic schemas for forecast service responses.

Open-Meteo returns each section as parallel arrays keyed by field name plus
a ``time`` array. Unknown fields are ignored; missing arrays default to
empty and are padded with NaN when the frame is built.
"""

from typing import Optional

from pydantic import BaseModel, Field


class HourlyBlock(BaseModel):
    """Hourly section of an Open-Meteo forecast response."""

    time: list[str] = Field(default_factory=list)
    temperature_2m: list[Optional[float]] = Field(default_factory=list)
    relative_humidity_2m: list[Optional[float]] = Field(default_factory=list)
    wind_speed_10m: list[Optional[float]] = Field(default_factory=list)
    precipitation_probability: list[Optional[float]] = Field(default_factory=list)
    wet_bulb_temperature_2m: list[Optional[float]] = Field(default_factory=list)
    weathercode: list[Optional[float]] = Field(default_factory=list)
    snowfall: list[Optional[float]] = Field(default_factory=list)

    model_config = {"extra": "ignore"}


class DailyBlock(BaseModel):
    """Daily section of an Open-Meteo forecast response."""

    time: list[str] = Field(default_factory=list)
    precipitation_sum: list[Optional[float]] = Field(default_factory=list)
    precipitation_hours: list[Optional[float]] = Field(default_factory=list)
    rain_sum: list[Optional[float]] = Field(default_factory=list)
    snowfall_sum: list[Optional[float]] = Field(default_factory=list)
    et0_fao_evapotranspiration: list[Optional[float]] = Field(default_factory=list)
    temperature_2m_max: list[Optional[float]] = Field(default_factory=list)
    temperature_2m_min: list[Optional[float]] = Field(default_factory=list)

    model_config = {"extra": "ignore"}


class ForecastResponse(BaseModel):
    """Top-level Open-Meteo forecast response.

    Attributes:
        timezone: Timezone the service used for local timestamps
        hourly: Hourly arrays, None when not requested or not returned
        daily: Daily arrays, None when not requested or not returned
    """

    timezone: Optional[str] = None
    hourly: Optional[HourlyBlock] = None
    daily: Optional[DailyBlock] = None

    model_config = {"extra": "ignore"}


HOURLY_FIELDS = [name for name in HourlyBlock.model_fields if name != "time"]
DAILY_FIELDS = [name for name in DailyBlock.model_fields if name != "time"]
