"""LOS evaluator: terrain profile + curvature + Fresnel geometry -> verdict.

Steps per request:
1) Validate the request (frequency, k-factor, sample count, TX != RX). Any
   problem raises before a single elevation lookup is made.
2) Build the terrain profile through the injected elevation provider.
3) For every sample compute the LOS height (straight line between the two
   absolute antenna heights, terrain + mast), the earth bulge, the first
   Fresnel radius, the clearance LOS - (terrain + bulge) and the clearance
   ratio clearance / radius.
4) Classify on the worst interior ratio (endpoints have a zero radius and
   no ratio):
   - no usable interior point                -> indeterminate
   - worst < marginal_ratio                  -> obstructed
   - too many interior points without data   -> indeterminate
   - worst >= clear_ratio                    -> clear
   - otherwise                               -> marginal

Missing terrain is never replaced by a guess; if an endpoint has no terrain
the antenna heights cannot be placed and no ratio can be computed at all.
"""

from __future__ import annotations

import logging
import math
from typing import Any, List, Optional, Sequence, Tuple

from .config import ClassificationThresholds, EngineSettings
from .curvature import earth_bulge_m
from .errors import InvalidParameter, InvalidRequest
from .fresnel import clearance_ratio, fresnel_radius_m
from .geodesy import great_circle_distance_m, initial_bearing_deg
from .models import (
    CLEAR,
    INDETERMINATE,
    MARGINAL,
    OBSTRUCTED,
    Classification,
    LinkRequest,
    LinkResult,
    ProfilePoint,
)
from .sampler import ProfileSample, build_profile

logger = logging.getLogger(__name__)


def validate_request(request: LinkRequest, settings: Optional[EngineSettings] = None) -> float:
    """Check a request; return the TX-RX distance in meters.

    Raises:
        InvalidParameter: frequency/k-factor not positive, N not an int >= 2
        InvalidCoordinate: endpoint out of range
        InvalidRequest: TX and RX closer than ``coincident_epsilon_m``
    """
    if settings is None:
        settings = EngineSettings()
    f = request.frequency_mhz
    if not isinstance(f, (int, float)) or not math.isfinite(f) or f <= 0:
        raise InvalidParameter(f"frequency must be positive, got {f!r}")
    k = request.k_factor
    if not isinstance(k, (int, float)) or not math.isfinite(k) or k <= 0:
        raise InvalidParameter(f"k-factor must be positive, got {k!r}")
    n = request.samples
    if not isinstance(n, int) or isinstance(n, bool) or n < 2:
        raise InvalidParameter(f"sample count must be an integer >= 2, got {n!r}")
    distance_m = great_circle_distance_m(request.tx, request.rx)
    if distance_m <= settings.coincident_epsilon_m:
        raise InvalidRequest(f"TX and RX coincide ({distance_m:.3f} m apart)")
    return distance_m


def _evaluate_point(
    sample: ProfileSample,
    total_m: float,
    tx_abs_m: Optional[float],
    rx_abs_m: Optional[float],
    request: LinkRequest,
    is_endpoint: bool,
) -> ProfilePoint:
    d1 = min(max(sample.distance_m, 0.0), total_m)
    d2 = total_m - d1
    if is_endpoint:
        bulge = 0.0
        radius = 0.0
    else:
        bulge = earth_bulge_m(d1, d2, request.k_factor)
        radius = fresnel_radius_m(d1, d2, request.frequency_mhz)

    los: Optional[float] = None
    if tx_abs_m is not None and rx_abs_m is not None:
        los = tx_abs_m + (rx_abs_m - tx_abs_m) * (d1 / total_m)

    clearance: Optional[float] = None
    if los is not None and sample.elevation_m is not None:
        clearance = los - (sample.elevation_m + bulge)

    return ProfilePoint(
        index=sample.index,
        lat=sample.point.lat,
        lon=sample.point.lon,
        distance_m=sample.distance_m,
        elevation_m=sample.elevation_m,
        bulge_m=bulge,
        los_height_m=los,
        fresnel_radius_m=radius,
        clearance_m=clearance,
        clearance_ratio=clearance_ratio(clearance, radius),
    )


def find_critical_point(points: Sequence[ProfilePoint]) -> Optional[int]:
    """Index of the interior point with the smallest clearance ratio.

    Ties go to the point closest to TX (points are distance ordered).
    """
    best: Optional[Tuple[float, float, int]] = None
    for p in points[1:-1]:
        if p.clearance_ratio is None:
            continue
        key = (p.clearance_ratio, p.distance_m, p.index)
        if best is None or key < best:
            best = key
    return None if best is None else best[2]


def classify(
    points: Sequence[ProfilePoint],
    thresholds: Optional[ClassificationThresholds] = None,
) -> Classification:
    """Apply the first-Fresnel-zone clearance policy to an evaluated profile."""
    if thresholds is None:
        thresholds = ClassificationThresholds()
    interior = list(points[1:-1])
    ratios = [p.clearance_ratio for p in interior if p.clearance_ratio is not None]
    if not ratios:
        return INDETERMINATE
    worst = min(ratios)
    if worst < thresholds.marginal_ratio:
        return OBSTRUCTED
    missing_fraction = (len(interior) - len(ratios)) / len(interior)
    if missing_fraction > thresholds.max_missing_fraction:
        return INDETERMINATE
    if worst >= thresholds.clear_ratio:
        return CLEAR
    return MARGINAL


def evaluate(
    request: LinkRequest,
    elevation_lookup: Any,
    settings: Optional[EngineSettings] = None,
    max_workers: Optional[int] = None,
    timeout_s: Optional[float] = None,
) -> LinkResult:
    """Evaluate LOS and first-Fresnel-zone clearance for one path.

    Args:
        request: endpoints, frequency, k-factor and sample count
        elevation_lookup: ElevationProvider or callable GeoPoint -> meters | None
        settings: thresholds and scheduling defaults (EngineSettings())
        max_workers: concurrent lookups (overrides settings.max_workers)
        timeout_s: lookup phase timeout (overrides settings.lookup_timeout_s)
    Returns:
        LinkResult with one ProfilePoint per sample
    """
    if settings is None:
        settings = EngineSettings()
    total_m = validate_request(request, settings)
    bearing = initial_bearing_deg(request.tx, request.rx)

    samples = build_profile(
        request,
        elevation_lookup,
        max_workers=max_workers if max_workers is not None else settings.max_workers,
        timeout_s=timeout_s if timeout_s is not None else settings.lookup_timeout_s,
    )

    tx_ground = samples[0].elevation_m
    rx_ground = samples[-1].elevation_m
    tx_abs = None if tx_ground is None else tx_ground + request.tx.height_m
    rx_abs = None if rx_ground is None else rx_ground + request.rx.height_m
    if tx_abs is None or rx_abs is None:
        logger.warning("Endpoint terrain missing (tx=%s, rx=%s); clearance cannot be computed", tx_ground, rx_ground)

    last = len(samples) - 1
    points: List[ProfilePoint] = [
        _evaluate_point(s, total_m, tx_abs, rx_abs, request, is_endpoint=(i == 0 or i == last))
        for i, s in enumerate(samples)
    ]

    missing = sum(1 for p in points if not p.has_elevation)
    critical = find_critical_point(points)
    classification = classify(points, settings.thresholds)
    interior_clearances = [p.clearance_m for p in points[1:-1] if p.clearance_m is not None]

    logger.debug(
        "LOS %.1f km @ %.3f MHz: %s (critical=%s, missing=%d/%d)",
        total_m / 1000.0, request.frequency_mhz, classification, critical, missing, len(points),
    )
    return LinkResult(
        points=tuple(points),
        distance_m=total_m,
        bearing_deg=bearing,
        classification=classification,
        critical_index=critical,
        min_clearance_ratio=None if critical is None else points[critical].clearance_ratio,
        worst_clearance_m=min(interior_clearances) if interior_clearances else None,
        missing_count=missing,
    )
