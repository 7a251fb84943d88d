"""Exception types raised by trailwake.

Transport and protocol failures from the forecast and dawn services are
surfaced as distinct types so callers can tell "service down" apart from
"service returned garbage". Nothing here is retried automatically.
"""

from typing import Optional


class AwarenessError(Exception):
    """Base class for all trailwake failures."""


class InvalidCoordinatesError(AwarenessError, ValueError):
    """Latitude/longitude outside [-90, 90] / [-180, 180] or non-finite."""


class StorageUnavailableError(AwarenessError):
    """The key/value store refused an operation (quota exceeded, disabled).

    Raised by stores and absorbed by TTLCache; callers never see it.
    """


class WeatherFetchFailure(AwarenessError):
    """Forecast request failed (transport error, non-OK status, bad payload).

    Attributes:
        status_code: HTTP status when the service answered, else None
    """

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code


class DawnFetchFailure(AwarenessError):
    """Dawn request failed at the transport or HTTP level.

    Attributes:
        status_code: HTTP status when the service answered, else None
    """

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code


class DawnApiStatusFailure(AwarenessError):
    """Dawn service answered but its payload status was not "OK"."""

    def __init__(self, message: str, api_status: Optional[str] = None):
        super().__init__(message)
        self.api_status = api_status


class DawnInvalidTimestampFailure(AwarenessError):
    """Dawn service answered "OK" without a finite numeric dawn timestamp."""
