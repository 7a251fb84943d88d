"""Derived trail and weather features: wetness, daylight and hazard status."""

from trailwake.features.daylight import check_daylight_needed, dawn_minutes
from trailwake.features.formatting import format_mm, format_pop, format_temp, format_wind
from trailwake.features.formulas import c_to_f, f_to_c, wet_bulb_f, wet_bulb_stull, wind_chill_f
from trailwake.features.status import (
    HazardSummary,
    MetricThresholds,
    aggregate_statuses,
    classify_metric,
    compute_dawn_status,
    compute_precip_status,
    compute_wet_bulb_status,
    compute_wind_status,
)
from trailwake.features.wetness import (
    WetnessParams,
    classify_wetness,
    compute_wetness,
    intensity_boost,
    prepare_records,
)

__all__ = [
    "HazardSummary",
    "MetricThresholds",
    "WetnessParams",
    "aggregate_statuses",
    "c_to_f",
    "check_daylight_needed",
    "classify_metric",
    "classify_wetness",
    "compute_dawn_status",
    "compute_precip_status",
    "compute_wet_bulb_status",
    "compute_wetness",
    "compute_wind_status",
    "dawn_minutes",
    "f_to_c",
    "format_mm",
    "format_pop",
    "format_temp",
    "format_wind",
    "intensity_boost",
    "prepare_records",
    "wet_bulb_f",
    "wet_bulb_stull",
    "wind_chill_f",
]
