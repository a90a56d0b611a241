"""Earth-curvature correction under atmospheric refraction.

The bulge is how far the (effective) earth surface rises above the straight
chord between the two endpoints at a given point along the path:

    h_bulge = d1 * d2 / (2 * k * R)

with R the mean earth radius and k the effective-earth-radius factor
(4/3 for the standard atmosphere). Smaller k means stronger bulge.
"""

import math

from .errors import InvalidParameter
from .geodesy import EARTH_RADIUS_M

STANDARD_K_FACTOR = 4.0 / 3.0


def effective_earth_radius_m(k_factor: float = STANDARD_K_FACTOR) -> float:
    """k * R in meters."""
    if not math.isfinite(k_factor) or k_factor <= 0:
        raise InvalidParameter(f"k-factor must be positive, got {k_factor}")
    return k_factor * EARTH_RADIUS_M


def earth_bulge_m(d1_m: float, d2_m: float, k_factor: float = STANDARD_K_FACTOR) -> float:
    """Earth bulge in meters at distance d1 from TX and d2 from RX.

    Zero at either endpoint, maximal at mid-path.
    """
    r_eff = effective_earth_radius_m(k_factor)
    if d1_m < 0 or d2_m < 0:
        raise InvalidParameter("distances must be non-negative")
    return (d1_m * d2_m) / (2.0 * r_eff)
