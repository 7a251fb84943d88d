"""HTTP clients for the forecast and dawn services.

Both clients take an injected TTLCache and a requests session, so tests can
swap in a MemoryStore-backed cache and a mocked session.
"""

from trailwake.clients.dawn import DawnClient, parse_dawn_payload
from trailwake.clients.forecast import ForecastClient, normalize_daily, normalize_hourly
from trailwake.clients.schemas import DailyBlock, ForecastResponse, HourlyBlock

__all__ = [
    "DailyBlock",
    "DawnClient",
    "ForecastClient",
    "ForecastResponse",
    "HourlyBlock",
    "normalize_daily",
    "normalize_hourly",
    "parse_dawn_payload",
]
