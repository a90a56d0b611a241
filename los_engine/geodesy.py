"""Geodesy helpers for LOS paths (great-circle distance, bearing, interpolation).

Spherical earth with mean radius 6,371 km. Good to a few tenths of a percent
for the tens-of-kilometre paths the calculator deals with; no datum
transformations are attempted.
"""

from __future__ import annotations

import math
from dataclasses import dataclass

from .errors import InvalidCoordinate, InvalidParameter

EARTH_RADIUS_M = 6371000.0

_CARDINALS = (
    "N", "NNE", "NE", "ENE", "E", "ESE", "SE", "SSE",
    "S", "SSW", "SW", "WSW", "W", "WNW", "NW", "NNW",
)


def validate_coordinate(lat_deg: float, lon_deg: float) -> None:
    """Raise InvalidCoordinate unless -90<=lat<=90 and -180<=lon<=180."""
    try:
        lat = float(lat_deg)
        lon = float(lon_deg)
    except (TypeError, ValueError):
        raise InvalidCoordinate(f"coordinate is not numeric: ({lat_deg!r}, {lon_deg!r})") from None
    if not (math.isfinite(lat) and math.isfinite(lon)):
        raise InvalidCoordinate(f"coordinate is not finite: ({lat}, {lon})")
    if not -90.0 <= lat <= 90.0:
        raise InvalidCoordinate(f"latitude out of range: {lat}")
    if not -180.0 <= lon <= 180.0:
        raise InvalidCoordinate(f"longitude out of range: {lon}")


@dataclass(frozen=True)
class GeoPoint:
    """A site on the earth's surface.

    Fields:
    - lat, lon: degrees (WGS-84 numbers, treated on a sphere)
    - height_m: antenna height above ground in meters (>= 0). Only meaningful
      for the TX/RX endpoints; sampled profile points carry 0.
    """
    lat: float
    lon: float
    height_m: float = 0.0

    def __post_init__(self):
        validate_coordinate(self.lat, self.lon)
        if not math.isfinite(self.height_m) or self.height_m < 0:
            raise InvalidParameter(f"antenna height must be >= 0 m, got {self.height_m}")


def _central_angle_rad(a: GeoPoint, b: GeoPoint) -> float:
    lat1 = math.radians(a.lat)
    lat2 = math.radians(b.lat)
    dlat = lat2 - lat1
    dlon = math.radians(b.lon - a.lon)
    h = math.sin(dlat / 2.0) ** 2 + math.cos(lat1) * math.cos(lat2) * math.sin(dlon / 2.0) ** 2
    return 2.0 * math.atan2(math.sqrt(h), math.sqrt(max(0.0, 1.0 - h)))


def great_circle_distance_m(a: GeoPoint, b: GeoPoint) -> float:
    """Haversine distance between two points in meters.

    Args:
        a, b: endpoints (height is ignored)
    Returns:
        distance in meters, symmetric in (a, b)
    """
    validate_coordinate(a.lat, a.lon)
    validate_coordinate(b.lat, b.lon)
    return EARTH_RADIUS_M * _central_angle_rad(a, b)


def initial_bearing_deg(a: GeoPoint, b: GeoPoint) -> float:
    """Initial bearing from a to b (degrees 0..360, clockwise from true north)."""
    validate_coordinate(a.lat, a.lon)
    validate_coordinate(b.lat, b.lon)
    lat1 = math.radians(a.lat)
    lat2 = math.radians(b.lat)
    dlon = math.radians(b.lon - a.lon)
    x = math.sin(dlon) * math.cos(lat2)
    y = math.cos(lat1) * math.sin(lat2) - math.sin(lat1) * math.cos(lat2) * math.cos(dlon)
    brng = math.degrees(math.atan2(x, y))
    return (brng + 360.0) % 360.0


def bearing_to_cardinal(bearing_deg: float) -> str:
    """16-point compass label for a bearing (e.g. 225 -> "SW")."""
    idx = int(round((bearing_deg % 360.0) / 22.5)) % 16
    return _CARDINALS[idx]


def intermediate_point(a: GeoPoint, b: GeoPoint, fraction: float) -> GeoPoint:
    """Point at `fraction` of the great-circle arc from a to b.

    Interpolates on the unit sphere (slerp), not linearly in lat/lon. The
    endpoints are returned as-is for fraction 0 and 1 so callers get exact
    TX/RX coordinates back.
    """
    if not 0.0 <= fraction <= 1.0:
        raise InvalidParameter(f"fraction must be within [0, 1], got {fraction}")
    validate_coordinate(a.lat, a.lon)
    validate_coordinate(b.lat, b.lon)
    if fraction == 0.0:
        return a
    if fraction == 1.0:
        return b

    delta = _central_angle_rad(a, b)
    if delta < 1e-12:
        return a

    lat1 = math.radians(a.lat)
    lon1 = math.radians(a.lon)
    lat2 = math.radians(b.lat)
    lon2 = math.radians(b.lon)
    wa = math.sin((1.0 - fraction) * delta) / math.sin(delta)
    wb = math.sin(fraction * delta) / math.sin(delta)
    x = wa * math.cos(lat1) * math.cos(lon1) + wb * math.cos(lat2) * math.cos(lon2)
    y = wa * math.cos(lat1) * math.sin(lon1) + wb * math.cos(lat2) * math.sin(lon2)
    z = wa * math.sin(lat1) + wb * math.sin(lat2)
    lat = math.degrees(math.atan2(z, math.hypot(x, y)))
    lon = math.degrees(math.atan2(y, x))
    return GeoPoint(lat=lat, lon=lon)
