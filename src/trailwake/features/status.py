"""Hazard status classification.

Each physical metric is compared against a (caution, hazard) threshold pair
from a single table and reduced to OK / YIELD / WARNING. The aggregate badge
is the worst status among the metrics that produced one.
"""

import math
from dataclasses import dataclass, field
from typing import Callable, Mapping, Optional

from trailwake import config
from trailwake.features.daylight import check_daylight_needed
from trailwake.features.formatting import format_pop, format_temp
from trailwake.models import DawnInfo, Status, StatusIconResult


@dataclass(frozen=True)
class MetricThresholds:
    """Threshold pair for one metric.

    Attributes:
        name: Metric label used in messages
        caution: Value at which the status becomes YIELD
        hazard: Value at which the status becomes WARNING
        rising: True when higher values are worse, False when lower are
        formatter: Renders the value inside messages
        caution_message: Template for YIELD, receives {name} and {value}
        hazard_message: Template for WARNING, receives {name} and {value}
    """

    name: str
    caution: float
    hazard: float
    rising: bool = True
    formatter: Callable[[float], str] = format_temp
    caution_message: str = "{name} {value}: use caution"
    hazard_message: str = "{name} {value}: hazardous"

    def level(self, value: float) -> Status:
        if self.rising:
            if value >= self.hazard:
                return Status.WARNING
            if value >= self.caution:
                return Status.YIELD
            return Status.OK
        if value <= self.hazard:
            return Status.WARNING
        if value <= self.caution:
            return Status.YIELD
        return Status.OK


WIND_CHILL = MetricThresholds(
    name="Wind chill",
    caution=config.WIND_CHILL_CAUTION_F,
    hazard=config.WIND_CHILL_HAZARD_F,
    rising=False,
    caution_message="{name} {value}: dress in layers",
    hazard_message="{name} {value}: cover exposed skin",
)

WET_BULB = MetricThresholds(
    name="Wet-bulb",
    caution=config.WET_BULB_CAUTION_F,
    hazard=config.WET_BULB_HAZARD_F,
    rising=True,
    caution_message="{name} {value}: ease the pace and hydrate",
    hazard_message="{name} {value}: heat stress risk",
)

PRECIP = MetricThresholds(
    name="Precip chance",
    caution=config.PRECIP_CAUTION_PCT,
    hazard=config.PRECIP_HAZARD_PCT,
    rising=True,
    formatter=format_pop,
    caution_message="{name} {value}: pack a shell",
    hazard_message="{name} {value}: rain likely",
)


@dataclass(frozen=True)
class HazardSummary:
    """Aggregate badge plus the per-metric messages.

    Attributes:
        status: Worst status among present metrics (OK when none)
        messages: Metric name -> message, only for YIELD/WARNING metrics
    """

    status: Status = Status.OK
    messages: dict = field(default_factory=dict)


def _numeric(value) -> Optional[float]:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return None
    return float(value) if math.isfinite(value) else None


def classify_metric(value, thresholds: MetricThresholds) -> Optional[StatusIconResult]:
    """Classify one metric against its thresholds.

    Args:
        value: Metric value (°F or percent depending on the table entry)
        thresholds: Table entry for the metric

    Returns:
        StatusIconResult, or None when the value is missing or not a finite
        number (no icon is shown).
    """
    num = _numeric(value)
    if num is None:
        return None

    status = thresholds.level(num)
    if status is Status.OK:
        return StatusIconResult(Status.OK)

    template = thresholds.hazard_message if status is Status.WARNING else thresholds.caution_message
    message = template.format(name=thresholds.name, value=thresholds.formatter(num))
    return StatusIconResult(status, message)


def compute_wind_status(wind_chill_f) -> Optional[StatusIconResult]:
    """Status for wind chill in °F (None when wind chill is not applicable)."""
    return classify_metric(wind_chill_f, WIND_CHILL)


def compute_wet_bulb_status(wet_bulb_f) -> Optional[StatusIconResult]:
    """Status for wet-bulb temperature in °F."""
    return classify_metric(wet_bulb_f, WET_BULB)


def compute_precip_status(pop) -> Optional[StatusIconResult]:
    """Status for precipitation probability in percent."""
    return classify_metric(pop, PRECIP)


def compute_dawn_status(
    run_start_minutes: Optional[int],
    dawn_info: Optional[DawnInfo],
    warning_margin: int = config.DAWN_WARNING_MARGIN_MINUTES,
) -> StatusIconResult:
    """Status for the run start relative to dawn.

    Starting after dawn is OK. Starting at or just before dawn is YIELD
    (bring a headlamp). Starting more than warning_margin minutes before
    dawn is WARNING.
    """
    check = check_daylight_needed(run_start_minutes, dawn_info)
    if not check.needed:
        return StatusIconResult(Status.OK)
    if check.minutes_before is not None and check.minutes_before > warning_margin:
        return StatusIconResult(Status.WARNING, check.message)
    return StatusIconResult(Status.YIELD, check.message)


def aggregate_statuses(results: Mapping[str, Optional[StatusIconResult]]) -> HazardSummary:
    """Reduce per-metric results to the worst status.

    Args:
        results: Metric name -> result; None entries (no icon) are skipped

    Returns:
        HazardSummary with the worst status and the non-OK messages
    """
    worst = Status.OK
    messages = {}
    for name, result in results.items():
        if result is None:
            continue
        if result.status.severity > worst.severity:
            worst = result.status
        if result.message:
            messages[name] = result.message
    return HazardSummary(status=worst, messages=messages)
