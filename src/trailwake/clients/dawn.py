"""Dawn lookup via sunrisesunset.io.

API docs: https://sunrisesunset.io/api/
"""

import logging
from datetime import date, datetime
from typing import Optional

import requests

from trailwake.cache import TTLCache, fetch_with_cache
from trailwake.config import Settings
from trailwake.errors import (
    DawnApiStatusFailure,
    DawnFetchFailure,
    DawnInvalidTimestampFailure,
)
from trailwake.models import DawnInfo, number_or_none
from trailwake.utils.geo import Coordinates, to_coordinates
from trailwake.utils.time import get_zone, to_local, tomorrow_in_zone

logger = logging.getLogger(__name__)


def parse_dawn_payload(data, tz: str) -> dict:
    """Validate a sunrisesunset.io payload and extract the dawn instant.

    Args:
        data: Decoded JSON body
        tz: IANA timezone the dawn is read in

    Returns:
        {"epoch": float, "tz": str}

    Raises:
        DawnApiStatusFailure: If status is not "OK" or the body is not an object
        DawnInvalidTimestampFailure: If results.dawn is missing, not finite
            or outside the representable datetime range
    """
    if not isinstance(data, dict):
        raise DawnApiStatusFailure("Dawn response is not a JSON object")

    status = data.get("status")
    if status != "OK":
        raise DawnApiStatusFailure(f"Dawn service returned status {status!r}", api_status=status)

    results = data.get("results")
    dawn = number_or_none(results.get("dawn")) if isinstance(results, dict) else None
    if dawn is None:
        raise DawnInvalidTimestampFailure("Dawn response has no valid dawn timestamp")

    try:
        DawnInfo.from_epoch(dawn, tz)
    except (OverflowError, OSError, ValueError) as e:
        raise DawnInvalidTimestampFailure(f"Dawn timestamp {dawn} is out of range") from e

    return {"epoch": dawn, "tz": tz}


class DawnClient:
    """Cache-backed dawn lookup for a location and calendar day."""

    def __init__(
        self,
        cache: TTLCache,
        session: Optional[requests.Session] = None,
        settings: Optional[Settings] = None,
    ):
        self.cache = cache
        self.session = session or requests.Session()
        self.settings = settings or Settings()

    def _request(self, coords: Coordinates, tz: str, ymd: str) -> dict:
        params = {
            "lat": coords.lat,
            "lng": coords.lon,
            "date": ymd,
            "timezone": tz,
            "time_format": "unix",
        }
        logger.info(f"Fetching dawn for ({coords.lat}, {coords.lon}) on {ymd} in {tz}")
        try:
            response = self.session.get(
                self.settings.dawn_url,
                params=params,
                timeout=self.settings.request_timeout,
            )
            response.raise_for_status()
        except requests.HTTPError as e:
            status = e.response.status_code if e.response is not None else None
            raise DawnFetchFailure(f"Dawn request failed with HTTP {status}", status_code=status) from e
        except requests.RequestException as e:
            raise DawnFetchFailure(f"Dawn request failed: {e}") from e

        try:
            data = response.json()
        except ValueError as e:
            raise DawnApiStatusFailure("Dawn response is not valid JSON") from e

        return parse_dawn_payload(data, tz)

    def fetch_dawn(
        self,
        lat: float,
        lon: float,
        tz: Optional[str] = None,
        day: Optional[date] = None,
    ) -> DawnInfo:
        """Dawn for a location on a calendar day.

        Args:
            lat: Latitude
            lon: Longitude
            tz: IANA timezone (defaults to settings.default_tz)
            day: Calendar day in tz (defaults to tomorrow in tz)

        Returns:
            DawnInfo with a timezone-aware instant

        Raises:
            InvalidCoordinatesError: Before any network call
            ValueError: If tz is not a known timezone
            DawnFetchFailure: Transport error or non-OK HTTP status
            DawnApiStatusFailure: Payload status other than "OK"
            DawnInvalidTimestampFailure: Missing or non-finite dawn
        """
        coords = to_coordinates(lat, lon)
        tz = tz or self.settings.default_tz
        get_zone(tz)

        if day is None:
            day = tomorrow_in_zone(tz)
        elif isinstance(day, datetime):
            day = to_local(day, tz).date()
        ymd = day.isoformat()
        key = f"dawn_{coords.key()}_{tz}_{ymd}"

        payload = fetch_with_cache(
            self.cache,
            key,
            lambda: self._request(coords, tz, ymd),
            self.settings.dawn_ttl,
        )
        return DawnInfo.from_dict(payload)
