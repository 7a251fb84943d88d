"""Configuration constants and runtime settings for trailwake."""

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

# Project root is 3 levels up from this file (src/trailwake/config.py)
_PROJECT_ROOT = Path(__file__).parent.parent.parent
DEFAULT_CACHE_PATH = _PROJECT_ROOT / "data" / "cache" / "trailwake.duckdb"

OPEN_METEO_FORECAST_URL = "https://api.open-meteo.com/v1/forecast"
SUNRISE_SUNSET_URL = "https://api.sunrisesunset.io/json"

# Cache lifetimes in seconds
FORECAST_CACHE_TTL = 15 * 60
DAWN_CACHE_TTL = 6 * 60 * 60

# Decimal places kept when bucketing coordinates into cache keys (~110 m)
COORD_KEY_PRECISION = 3

DEFAULT_LOOKBACK_DAYS = 7
DEFAULT_TZ = "America/New_York"

# WMO weather codes that indicate snow
SNOW_CODES = frozenset({71, 73, 75, 77, 85, 86})

MINUTES_PER_DAY = 1440

# Status thresholds (°F for temperatures, percent for precipitation chance)
WIND_CHILL_CAUTION_F = 40.0
WIND_CHILL_HAZARD_F = 30.0
WET_BULB_CAUTION_F = 65.0
WET_BULB_HAZARD_F = 75.0
PRECIP_CAUTION_PCT = 30.0
PRECIP_HAZARD_PCT = 60.0
DAWN_WARNING_MARGIN_MINUTES = 5


def _env_float(name: str) -> Optional[float]:
    raw = os.environ.get(name)
    if raw is None or raw.strip() == "":
        return None
    try:
        return float(raw)
    except ValueError as e:
        raise ValueError(f"{name} must be a number, got {raw!r}") from e


@dataclass
class Settings:
    """Runtime settings shared by the clients and the CLI.

    Attributes:
        cache_path: DuckDB file backing the persistent cache
        forecast_url: Open-Meteo forecast endpoint
        dawn_url: sunrisesunset.io JSON endpoint
        request_timeout: Seconds per HTTP request, None for no timeout
        default_tz: IANA timezone used when the caller gives none
        forecast_ttl: Forecast cache lifetime in seconds
        dawn_ttl: Dawn cache lifetime in seconds
        lookback_days: Days of history fed to the wetness model
    """

    cache_path: Path = field(default_factory=lambda: DEFAULT_CACHE_PATH)
    forecast_url: str = OPEN_METEO_FORECAST_URL
    dawn_url: str = SUNRISE_SUNSET_URL
    request_timeout: Optional[float] = None
    default_tz: str = DEFAULT_TZ
    forecast_ttl: float = FORECAST_CACHE_TTL
    dawn_ttl: float = DAWN_CACHE_TTL
    lookback_days: int = DEFAULT_LOOKBACK_DAYS

    @classmethod
    def from_env(cls) -> "Settings":
        """Build settings from TRAILWAKE_* environment variables."""
        settings = cls()
        cache_path = os.environ.get("TRAILWAKE_CACHE_PATH")
        if cache_path:
            settings.cache_path = Path(cache_path).expanduser()
        settings.forecast_url = os.environ.get("TRAILWAKE_FORECAST_URL", settings.forecast_url)
        settings.dawn_url = os.environ.get("TRAILWAKE_DAWN_URL", settings.dawn_url)
        settings.request_timeout = _env_float("TRAILWAKE_REQUEST_TIMEOUT")
        settings.default_tz = os.environ.get("TRAILWAKE_DEFAULT_TZ", settings.default_tz)
        return settings
