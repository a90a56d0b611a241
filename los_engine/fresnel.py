"""Fresnel-zone geometry.

n-th Fresnel zone radius at a point splitting the path into d1/d2:

    r_n = 17.3 * sqrt(n * d1_km * d2_km / (f_MHz * D_km))   [m]

The clearance ratio is the signed clearance divided by r_1; 1.0 means the
whole first zone is free, 0.6 is the usual engineering minimum.
"""

import math
from typing import Optional

from .errors import InvalidParameter

FRESNEL_CONSTANT = 17.3


def fresnel_radius_m(d1_m: float, d2_m: float, frequency_mhz: float, zone: int = 1) -> float:
    """Radius of the n-th Fresnel zone in meters.

    Args:
        d1_m: distance from TX to the point (m, >= 0)
        d2_m: distance from the point to RX (m, >= 0)
        frequency_mhz: operating frequency (MHz, > 0)
        zone: zone order n (integer >= 1)
    """
    if not math.isfinite(frequency_mhz) or frequency_mhz <= 0:
        raise InvalidParameter(f"frequency must be positive, got {frequency_mhz}")
    if not isinstance(zone, int) or isinstance(zone, bool) or zone < 1:
        raise InvalidParameter(f"zone order must be an integer >= 1, got {zone!r}")
    if d1_m < 0 or d2_m < 0:
        raise InvalidParameter("distances must be non-negative")
    if d1_m == 0 or d2_m == 0:
        return 0.0
    d1_km = d1_m / 1000.0
    d2_km = d2_m / 1000.0
    total_km = d1_km + d2_km
    return FRESNEL_CONSTANT * math.sqrt(zone * d1_km * d2_km / (frequency_mhz * total_km))


def clearance_ratio(clearance_m: Optional[float], radius_m: float) -> Optional[float]:
    """clearance / radius, or None where the radius vanishes (endpoints)."""
    if clearance_m is None or radius_m <= 0:
        return None
    return clearance_m / radius_m
