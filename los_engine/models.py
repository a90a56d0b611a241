"""Request/result types exchanged with the caller (UI or CLI).

All types are frozen; a result is created per evaluation and never mutated.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Literal, Optional, Tuple

from .curvature import STANDARD_K_FACTOR
from .geodesy import GeoPoint, bearing_to_cardinal

Classification = Literal["clear", "marginal", "obstructed", "indeterminate"]

CLEAR: Classification = "clear"
MARGINAL: Classification = "marginal"
OBSTRUCTED: Classification = "obstructed"
INDETERMINATE: Classification = "indeterminate"


@dataclass(frozen=True)
class LinkRequest:
    """One TX/RX path to evaluate.

    Fields:
    - tx, rx: endpoints; ``height_m`` is the antenna height above ground
    - frequency_mhz: operating frequency (> 0)
    - k_factor: effective earth radius factor (> 0, 4/3 standard atmosphere)
    - samples: number of profile points N including both endpoints (>= 2)

    Values are checked by ``evaluator.validate_request`` before any work.
    """
    tx: GeoPoint
    rx: GeoPoint
    frequency_mhz: float
    k_factor: float = STANDARD_K_FACTOR
    samples: int = 50


@dataclass(frozen=True)
class ProfilePoint:
    """One evaluated sample along the path (all heights in meters AMSL)."""
    index: int
    lat: float
    lon: float
    distance_m: float
    elevation_m: Optional[float]
    bulge_m: float
    los_height_m: Optional[float]
    fresnel_radius_m: float
    clearance_m: Optional[float]
    clearance_ratio: Optional[float]

    @property
    def has_elevation(self) -> bool:
        return self.elevation_m is not None

    @property
    def fresnel_clearance_pct(self) -> Optional[float]:
        if self.clearance_ratio is None:
            return None
        return 100.0 * self.clearance_ratio


@dataclass(frozen=True)
class LinkResult:
    points: Tuple[ProfilePoint, ...]
    distance_m: float
    bearing_deg: float
    classification: Classification
    critical_index: Optional[int]
    min_clearance_ratio: Optional[float]
    worst_clearance_m: Optional[float]
    missing_count: int

    @property
    def critical_point(self) -> Optional[ProfilePoint]:
        if self.critical_index is None:
            return None
        return self.points[self.critical_index]

    @property
    def distance_km(self) -> float:
        return self.distance_m / 1000.0

    @property
    def cardinal(self) -> str:
        return bearing_to_cardinal(self.bearing_deg)
