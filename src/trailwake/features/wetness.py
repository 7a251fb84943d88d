"""Trail wetness model.

Turns a window of daily precipitation / evapotranspiration records into a
moisture score and a trail-condition label.

Snow is carried as a running snowpack (snow water equivalent) and only
reaches the trail as melt on days whose maximum temperature reaches
snow_melt_threshold_f. The melted fraction grows with the thaw:
min(1, (max_temp_f - 32) / 10), never below min_melt_fraction.

Per day:
    liquid   = rain + melt
    boost    = intensity multiplier (fast, heavy events saturate trails more
               than slow drizzle of the same total)
    drying   = drying_coefficient * ET0, halved in the dormant season
    balance  = (liquid - drying) * boost
    weighted = balance * decay_base ** age_days

score is the sum of weighted balances plus peak_balance_weight times the
largest single-day balance, floored at 0. avg_precip is the mean weighted
balance (floored at 0). wet_days counts days whose raw liquid exceeds the
wet-day threshold.

Labels:
    wet_days >= 4                      -> Very Wet
    wet_days >= 2 or avg_precip > 0.5  -> Wet
    is_wet                             -> Slightly Wet
    otherwise                          -> Dry
"""

import logging
from dataclasses import dataclass
from datetime import date
from typing import Any, Mapping, Optional, Sequence

from trailwake.features.formatting import format_mm
from trailwake.models import (
    DailyRecord,
    WetnessInputs,
    WetnessInterpretation,
    WetnessTotals,
    coerce_number,
)

logger = logging.getLogger(__name__)

DRY = "Dry"
SLIGHTLY_WET = "Slightly Wet"
WET = "Wet"
VERY_WET = "Very Wet"

LABELS = (DRY, SLIGHTLY_WET, WET, VERY_WET)

# Months (1-12) in which vegetation is dormant and ET0 dries trails less
DORMANT_MONTHS = frozenset({11, 12, 1, 2, 3})

MM_PER_INCH = 25.4


@dataclass(frozen=True)
class WetnessParams:
    """Tunable coefficients of the wetness model.

    Rates and depths are in mm; the defaults are the inch-based constants
    of the web app converted at 25.4 mm/in.

    Attributes:
        decay_base: Weight kept per day of age (0 < decay_base < 1)
        drying_coefficient: Fraction of ET0 that dries the trail in season
        winter_drying_factor: Multiplier on drying in dormant months
        snow_to_water_ratio: Snow depth to water equivalent ratio
        snow_melt_threshold_f: Daily max temperature at which snowpack melts
        min_melt_fraction: Smallest share of the snowpack melted on a thaw day
        wet_day_threshold_mm: Raw liquid above which a day counts as wet
        intensity_tiers: (mm/h rate, boost) pairs, highest rate first
        unknown_hours_heavy_mm: Liquid above which a day of unknown duration
            gets the top boost
        unknown_hours_boost: Boost for a day of unknown duration otherwise
        peak_balance_weight: Share of the wettest day's balance added to score
        very_wet_days: wet_days at which the label becomes Very Wet
        wet_days_for_wet: wet_days at which the label becomes Wet
        wet_avg_precip_mm: avg_precip strictly above which the label is Wet
    """

    decay_base: float = 0.85
    drying_coefficient: float = 0.6
    winter_drying_factor: float = 0.5
    snow_to_water_ratio: float = 0.1
    snow_melt_threshold_f: float = 34.0
    min_melt_fraction: float = 0.1
    wet_day_threshold_mm: float = 0.2
    intensity_tiers: tuple = (
        (0.35 * MM_PER_INCH, 1.35),
        (0.2 * MM_PER_INCH, 1.2),
        (0.1 * MM_PER_INCH, 1.1),
    )
    unknown_hours_heavy_mm: float = 0.35 * MM_PER_INCH
    unknown_hours_boost: float = 1.15
    peak_balance_weight: float = 0.05
    very_wet_days: int = 4
    wet_days_for_wet: int = 2
    wet_avg_precip_mm: float = 0.5

    def __post_init__(self):
        if not 0 < self.decay_base < 1:
            raise ValueError(f"decay_base must be in (0, 1), got {self.decay_base}")

    @property
    def max_intensity_boost(self) -> float:
        return max(boost for _, boost in self.intensity_tiers)


DEFAULT_PARAMS = WetnessParams()


def prepare_records(records: Sequence[DailyRecord], lookback_days: Optional[int] = None) -> list:
    """Sort records by date and keep one per date.

    When a date appears more than once, the record with the largest values
    wins, so the result never depends on input order.

    Args:
        records: Daily records in any order
        lookback_days: Keep only this many most recent days (None keeps all)

    Returns:
        Chronologically ordered list of unique-date records
    """
    missing = float("-inf")
    by_date: dict = {}
    for record in records:
        key = (
            record.rain_mm,
            record.snow_mm,
            record.et0_mm,
            record.precip_hours or 0.0,
            missing if record.max_temp_f is None else record.max_temp_f,
            missing if record.min_temp_f is None else record.min_temp_f,
        )
        current = by_date.get(record.date)
        if current is None or key > current[0]:
            by_date[record.date] = (key, record)

    ordered = [by_date[d][1] for d in sorted(by_date)]
    if lookback_days is not None and lookback_days > 0:
        ordered = ordered[-lookback_days:]
    return ordered


def intensity_boost(liquid_mm: float, precip_hours: Optional[float], params: WetnessParams = DEFAULT_PARAMS) -> float:
    """Multiplier for how fast the day's liquid fell.

    When the duration is unknown, a heavy day gets the top boost and any
    other day a flat unknown_hours_boost.

    Args:
        liquid_mm: Rain plus snowmelt in mm
        precip_hours: Hours of precipitation, None/0 when unknown
        params: Model parameters

    Returns:
        Boost factor >= 1.0

    Examples:
        >>> intensity_boost(12.0, 1.0)   # 12 mm/h downpour
        1.35
        >>> intensity_boost(12.0, 24.0)  # same total as all-day drizzle
        1.0
    """
    if not precip_hours or precip_hours <= 0:
        if liquid_mm > params.unknown_hours_heavy_mm:
            return params.max_intensity_boost
        return params.unknown_hours_boost

    rate = liquid_mm / precip_hours
    for threshold, boost in params.intensity_tiers:
        if rate >= threshold:
            return boost
    return 1.0


def snowmelt(snowpack_mm: float, max_temp_f: Optional[float], params: WetnessParams = DEFAULT_PARAMS) -> float:
    """Snow water equivalent released from the snowpack on one day.

    Args:
        snowpack_mm: Snow water equivalent on the ground in mm
        max_temp_f: Daily maximum temperature, None when unknown
        params: Model parameters

    Returns:
        Melt in mm, never more than the snowpack

    Examples:
        >>> snowmelt(2.0, 37.0)  # half melts at 5 °F above freezing
        1.0
        >>> snowmelt(2.0, 33.0)
        0.0
    """
    if snowpack_mm <= 0 or max_temp_f is None or max_temp_f < params.snow_melt_threshold_f:
        return 0.0
    thaw = min(1.0, (max_temp_f - 32.0) / 10.0)
    return min(snowpack_mm, snowpack_mm * max(params.min_melt_fraction, thaw))


def seasonal_drying_coefficient(day: date, params: WetnessParams = DEFAULT_PARAMS) -> float:
    """Fraction of ET0 that dries the trail on this day."""
    if day.month in DORMANT_MONTHS:
        return max(0.0, params.drying_coefficient * params.winter_drying_factor)
    return params.drying_coefficient


def _age_days(record: DailyRecord, index: int, count: int, reference_date: Optional[date]) -> int:
    if reference_date is not None:
        return max(0, (reference_date - record.date).days)
    # No reference: the newest record is age 0
    return count - 1 - index


def classify_wetness(data: Any, params: Optional[WetnessParams] = None) -> str:
    """Map a wetness interpretation (or a mapping of its fields) to a label.

    Accepts None, an empty mapping, a mapping with is_wet / wet_days /
    avg_precip (camelCase keys also accepted) or a WetnessInterpretation.
    Absent data and is_wet=False always give "Dry".

    Examples:
        >>> classify_wetness({"wet_days": 1, "avg_precip": 0.5})
        'Slightly Wet'
        >>> classify_wetness({"wet_days": 1, "avg_precip": 0.51})
        'Wet'
    """
    if data is None:
        return DRY
    if isinstance(data, WetnessInterpretation):
        fields = {"is_wet": data.is_wet, "wet_days": data.wet_days, "avg_precip": data.avg_precip}
    elif isinstance(data, Mapping):
        fields = data
    else:
        return DRY

    def pick(snake: str, camel: str):
        return fields.get(snake, fields.get(camel))

    wet_days = int(coerce_number(pick("wet_days", "wetDays")))
    avg_precip = coerce_number(pick("avg_precip", "avgPrecip"))
    is_wet_raw = pick("is_wet", "isWet")
    is_wet = bool(is_wet_raw) if is_wet_raw is not None else wet_days > 0

    params = params or DEFAULT_PARAMS
    if not is_wet:
        return DRY
    if wet_days >= params.very_wet_days:
        return VERY_WET
    if wet_days >= params.wet_days_for_wet or avg_precip > params.wet_avg_precip_mm:
        return WET
    return SLIGHTLY_WET


def _summary(totals: WetnessTotals, wet_days: int, analysis_days: int, snowpack: float, params: WetnessParams) -> str:
    parts = []
    liquid = totals.rainfall + totals.melt
    if liquid > 0.05:
        parts.append(f"{format_mm(liquid)} liquid over {analysis_days}d")
    if totals.melt > 0.05:
        parts.append(f"{format_mm(totals.melt)} from snowmelt")
    if totals.drying > 0.05:
        parts.append(f"-{format_mm(totals.drying)} drying")
    if snowpack > 0.05:
        depth = snowpack / params.snow_to_water_ratio if params.snow_to_water_ratio > 0 else snowpack
        parts.append(f"{format_mm(snowpack)} SWE ({format_mm(depth)} depth) snowpack remains")
    if wet_days > 0:
        parts.append(f"{wet_days} wet day{'' if wet_days == 1 else 's'}")
    if not parts:
        return "No meaningful precipitation in the past week"
    return " · ".join(parts)


def compute_wetness(
    inputs: Optional[WetnessInputs],
    params: Optional[WetnessParams] = None,
) -> WetnessInterpretation:
    """Score trail wetness for a lookback window.

    Pure and deterministic: the same records in any order give the same
    result.

    Args:
        inputs: Records and window. None, an empty window or anything that
            is not a WetnessInputs (an empty mapping, {"isWet": False})
            gives Dry
        params: Model coefficients (defaults to DEFAULT_PARAMS)

    Returns:
        WetnessInterpretation
    """
    params = params or DEFAULT_PARAMS
    if not isinstance(inputs, WetnessInputs) or not inputs.records:
        return WetnessInterpretation()

    records = prepare_records(inputs.records, inputs.lookback_days)
    count = len(records)

    weighted_total = 0.0
    peak_balance = 0.0
    snowpack = 0.0
    wet_days = 0
    rainfall = melt_total = drying_total = et0_total = 0.0

    for index, record in enumerate(records):
        snowpack += record.snow_mm * params.snow_to_water_ratio
        melt = snowmelt(snowpack, record.max_temp_f, params)
        snowpack = max(0.0, snowpack - melt)

        liquid = record.rain_mm + melt
        boost = intensity_boost(liquid, record.precip_hours, params)
        drying = seasonal_drying_coefficient(record.date, params) * record.et0_mm

        balance = (liquid - drying) * boost
        peak_balance = max(peak_balance, balance)
        age = _age_days(record, index, count, inputs.reference_date)
        weighted_total += balance * params.decay_base ** age

        if liquid > params.wet_day_threshold_mm:
            wet_days += 1

        rainfall += record.rain_mm
        melt_total += melt
        drying_total += drying
        et0_total += record.et0_mm

    score = max(0.0, weighted_total + peak_balance * params.peak_balance_weight)
    avg_precip = max(0.0, weighted_total / count)
    totals = WetnessTotals(
        rainfall=round(rainfall, 3),
        melt=round(melt_total, 3),
        drying=round(drying_total, 3),
        et0=round(et0_total, 3),
    )
    snowpack = round(snowpack, 3)
    is_wet = wet_days > 0
    label = classify_wetness(
        {"is_wet": is_wet, "wet_days": wet_days, "avg_precip": avg_precip}, params
    )

    logger.debug(
        f"Wetness over {count} days: wet_days={wet_days}, "
        f"avg_precip={avg_precip:.3f}, snowpack={snowpack:.3f}, label={label}"
    )

    return WetnessInterpretation(
        is_wet=is_wet,
        wet_days=wet_days,
        avg_precip=avg_precip,
        label=label,
        score=score,
        analysis_days=count,
        totals=totals,
        snowpack_remaining=snowpack,
        summary=_summary(totals, wet_days, count, snowpack, params),
    )
