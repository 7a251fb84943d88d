"""Physical formulas used by the hazard classifier.

Formulas:
- NWS wind chill (2001), Fahrenheit and mph
- Stull (2011) wet-bulb temperature from dry-bulb °C and relative humidity
"""

from typing import Optional

import numpy as np

# NWS wind chill is only defined at or below this temperature
WIND_CHILL_MAX_TEMP_F = 50.0
# ... and at or above this wind speed
WIND_CHILL_MIN_WIND_MPH = 3.0


def f_to_c(temp_f: float) -> float:
    """Convert Fahrenheit to Celsius."""
    return (temp_f - 32.0) * 5.0 / 9.0


def c_to_f(temp_c: float) -> float:
    """Convert Celsius to Fahrenheit."""
    return temp_c * 9.0 / 5.0 + 32.0


def wind_chill_f(temp_f: Optional[float], wind_mph: Optional[float]) -> Optional[float]:
    """NWS wind chill temperature.

    Args:
        temp_f: Air temperature in °F
        wind_mph: Wind speed in mph

    Returns:
        Wind chill in °F, or None when either input is missing or the
        conditions are outside the formula's domain (temp_f > 50 or
        wind_mph < 3).

    Examples:
        >>> round(wind_chill_f(30.0, 10.0), 1)
        21.2
        >>> wind_chill_f(55.0, 20.0) is None
        True
    """
    if temp_f is None or wind_mph is None:
        return None
    if not (np.isfinite(temp_f) and np.isfinite(wind_mph)):
        return None
    if temp_f > WIND_CHILL_MAX_TEMP_F or wind_mph < WIND_CHILL_MIN_WIND_MPH:
        return None

    v016 = np.power(wind_mph, 0.16)
    return float(35.74 + 0.6215 * temp_f - 35.75 * v016 + 0.4275 * temp_f * v016)


def wet_bulb_stull(temp_c, rh_pct):
    """Wet-bulb temperature by the Stull (2011) empirical fit.

    Valid for RH 5-99% and -20..50 °C at sea-level pressure; outside that
    range the error grows but the value is still returned.

    Args:
        temp_c: Dry-bulb temperature in °C (scalar or array)
        rh_pct: Relative humidity in percent (scalar or array)

    Returns:
        Wet-bulb temperature in °C, as a float for scalar input

    Examples:
        >>> round(wet_bulb_stull(20.0, 50.0), 1)
        13.7
    """
    t = np.asarray(temp_c, dtype=float)
    rh = np.asarray(rh_pct, dtype=float)

    tw = (
        t * np.arctan(0.151977 * np.sqrt(rh + 8.313659))
        + np.arctan(t + rh)
        - np.arctan(rh - 1.676331)
        + 0.00391838 * np.power(rh, 1.5) * np.arctan(0.023101 * rh)
        - 4.686035
    )
    return float(tw) if tw.ndim == 0 else tw


def wet_bulb_f(temp_f: Optional[float], rh_pct: Optional[float]) -> Optional[float]:
    """Stull wet-bulb temperature in °F from °F and RH, None on missing input."""
    if temp_f is None or rh_pct is None:
        return None
    if not (np.isfinite(temp_f) and np.isfinite(rh_pct)):
        return None
    return c_to_f(wet_bulb_stull(f_to_c(temp_f), rh_pct))
