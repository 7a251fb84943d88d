"""Value objects shared across trailwake.

All of these are created per request and owned by the caller. The cache
stores only their JSON form (see to_dict/from_dict).
"""

import math
from dataclasses import asdict, dataclass, field
from datetime import date, datetime
from enum import Enum
from typing import Any, Optional

from trailwake.utils.time import get_zone


def number_or_none(value: Any) -> Optional[float]:
    """Return value as a finite float, or None for anything else."""
    if value is None or isinstance(value, bool):
        return None
    try:
        num = float(value)
    except (TypeError, ValueError):
        return None
    return num if math.isfinite(num) else None


def coerce_number(value: Any) -> float:
    """Return value as a finite float, falling back to 0.0."""
    num = number_or_none(value)
    return 0.0 if num is None else num


@dataclass(frozen=True)
class DailyRecord:
    """One calendar day of precipitation and reference evapotranspiration.

    Attributes:
        date: Calendar day
        rain_mm: Liquid rain in mm
        snow_mm: Snowfall depth in mm
        et0_mm: FAO reference evapotranspiration in mm
        precip_hours: Hours with precipitation, None when unknown
        max_temp_f: Daily maximum temperature in °F, None when unknown
        min_temp_f: Daily minimum temperature in °F, None when unknown
    """

    date: date
    rain_mm: float = 0.0
    snow_mm: float = 0.0
    et0_mm: float = 0.0
    precip_hours: Optional[float] = None
    max_temp_f: Optional[float] = None
    min_temp_f: Optional[float] = None

    @classmethod
    def from_raw(
        cls,
        day: Any,
        rain_mm: Any = None,
        snow_mm: Any = None,
        et0_mm: Any = None,
        precip_hours: Any = None,
        max_temp_f: Any = None,
        min_temp_f: Any = None,
    ) -> "DailyRecord":
        """Build a record from loosely typed values, defaulting gaps to 0."""
        if isinstance(day, datetime):
            day = day.date()
        elif isinstance(day, str):
            day = date.fromisoformat(day[:10])
        return cls(
            date=day,
            rain_mm=max(0.0, coerce_number(rain_mm)),
            snow_mm=max(0.0, coerce_number(snow_mm)),
            et0_mm=max(0.0, coerce_number(et0_mm)),
            precip_hours=number_or_none(precip_hours),
            max_temp_f=number_or_none(max_temp_f),
            min_temp_f=number_or_none(min_temp_f),
        )

    def to_dict(self) -> dict:
        return {
            "date": self.date.isoformat(),
            "rain_mm": self.rain_mm,
            "snow_mm": self.snow_mm,
            "et0_mm": self.et0_mm,
            "precip_hours": self.precip_hours,
            "max_temp_f": self.max_temp_f,
            "min_temp_f": self.min_temp_f,
        }

    @classmethod
    def from_dict(cls, d: dict) -> "DailyRecord":
        return cls.from_raw(
            d.get("date"),
            d.get("rain_mm"),
            d.get("snow_mm"),
            d.get("et0_mm"),
            d.get("precip_hours"),
            d.get("max_temp_f"),
            d.get("min_temp_f"),
        )


@dataclass(frozen=True)
class WetnessInputs:
    """Lookback window fed to the wetness model.

    Attributes:
        records: Daily records (any order; the model sorts them)
        lookback_days: Maximum number of most recent days considered
        reference_date: Day being judged; record age is measured from it
    """

    records: tuple = ()
    lookback_days: int = 7
    reference_date: Optional[date] = None

    def __post_init__(self):
        # Accept lists but store a tuple so the inputs stay immutable
        object.__setattr__(self, "records", tuple(self.records))

    def to_dict(self) -> dict:
        return {
            "records": [r.to_dict() for r in self.records],
            "lookback_days": self.lookback_days,
            "reference_date": self.reference_date.isoformat() if self.reference_date else None,
        }

    @classmethod
    def from_dict(cls, d: dict) -> "WetnessInputs":
        ref = d.get("reference_date")
        return cls(
            records=tuple(DailyRecord.from_dict(r) for r in d.get("records", [])),
            lookback_days=int(d.get("lookback_days", 7)),
            reference_date=date.fromisoformat(ref) if ref else None,
        )


@dataclass(frozen=True)
class WetnessTotals:
    """Window totals in mm."""

    rainfall: float = 0.0
    melt: float = 0.0
    drying: float = 0.0
    et0: float = 0.0


@dataclass(frozen=True)
class WetnessInterpretation:
    """Wetness model output.

    Attributes:
        is_wet: True when at least one day crossed the wet-day threshold
        wet_days: Count of wet days in the window
        avg_precip: Mean decayed daily moisture in mm (never negative)
        label: One of "Dry", "Slightly Wet", "Wet", "Very Wet"
        score: Sum of decayed daily contributions in mm (never negative)
        analysis_days: Number of days scored
        totals: Raw window totals
        snowpack_remaining: Snow water equivalent still on the ground in mm
        summary: Short human readable description
    """

    is_wet: bool = False
    wet_days: int = 0
    avg_precip: float = 0.0
    label: str = "Dry"
    score: float = 0.0
    analysis_days: int = 0
    totals: WetnessTotals = field(default_factory=WetnessTotals)
    snowpack_remaining: float = 0.0
    summary: str = "No recent precipitation signal"

    def to_dict(self) -> dict:
        return asdict(self)


@dataclass(frozen=True)
class DawnInfo:
    """Dawn instant and the timezone it must be read in.

    Attributes:
        date: Timezone-aware dawn instant
        tz: IANA timezone name
    """

    date: datetime
    tz: str

    @property
    def local(self) -> datetime:
        """Dawn instant converted to its own timezone."""
        return self.date.astimezone(get_zone(self.tz))

    def to_dict(self) -> dict:
        return {"epoch": self.date.timestamp(), "tz": self.tz}

    @classmethod
    def from_epoch(cls, epoch: float, tz: str) -> "DawnInfo":
        return cls(date=datetime.fromtimestamp(epoch, tz=get_zone(tz)), tz=tz)

    @classmethod
    def from_dict(cls, d: dict) -> "DawnInfo":
        return cls.from_epoch(float(d["epoch"]), d["tz"])


@dataclass(frozen=True)
class DaylightCheck:
    """Whether a run starts in the dark.

    Attributes:
        needed: True when the run starts at or before dawn
        message: Display text when needed, else None
        minutes_before: Minutes between run start and dawn when needed
    """

    needed: bool = False
    message: Optional[str] = None
    minutes_before: Optional[int] = None


class Status(Enum):
    """Three-state hazard signal, ordered by severity."""

    OK = "ok"
    YIELD = "yield"
    WARNING = "warning"

    @property
    def severity(self) -> int:
        return _SEVERITY[self]


_SEVERITY = {Status.OK: 0, Status.YIELD: 1, Status.WARNING: 2}


@dataclass(frozen=True)
class StatusIconResult:
    """One hazard signal. message is set only for YIELD and WARNING."""

    status: Status
    message: Optional[str] = None


@dataclass(frozen=True)
class WeatherData:
    """Hourly conditions nearest to the requested time.

    Attributes:
        time: Local ISO timestamp of the selected hour
        temp_f: Air temperature in °F
        wind_mph: 10 m wind speed in mph
        wind_chill_f: NWS wind chill in °F, None outside its domain
        pop: Precipitation probability in percent
        wet_bulb_f: Wet-bulb temperature in °F
        relative_humidity: Relative humidity in percent
        is_snow: Snow weather code or measurable snowfall
        weather_code: WMO weather code
        snowfall_cm: Hourly snowfall in cm
    """

    time: Optional[str] = None
    temp_f: Optional[float] = None
    wind_mph: Optional[float] = None
    wind_chill_f: Optional[float] = None
    pop: Optional[float] = None
    wet_bulb_f: Optional[float] = None
    relative_humidity: Optional[float] = None
    is_snow: bool = False
    weather_code: Optional[int] = None
    snowfall_cm: Optional[float] = None

    def to_dict(self) -> dict:
        return asdict(self)

    @classmethod
    def from_dict(cls, d: dict) -> "WeatherData":
        return cls(**{k: d.get(k) for k in cls.__dataclass_fields__ if k in d})


@dataclass(frozen=True)
class CacheEntry:
    """One cached round trip.

    Attributes:
        key: Cache key
        payload: Deserialized value
        stored_at: Write time in epoch milliseconds
        ttl: Lifetime in seconds the entry was checked against
    """

    key: str
    payload: Any
    stored_at: float
    ttl: float

    def is_valid(self, now_ms: float) -> bool:
        return now_ms - self.stored_at <= self.ttl * 1000
