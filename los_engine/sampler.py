"""Elevation profile sampler.

Places N points along the great circle TX -> RX at fractions i/(N-1) and asks
the elevation provider for each. Lookup failures never abort the profile:
the point is kept with ``elevation_m = None`` and the evaluator deals with the
gap.

Scheduling (caller-selected):
- batched providers get the whole coordinate list in one call
- otherwise lookups run sequentially, or on a bounded thread pool when
  ``max_workers > 1``
- ``timeout_s`` bounds the whole lookup phase; unresolved points are missing
"""

from __future__ import annotations

import logging
from concurrent.futures import ThreadPoolExecutor, TimeoutError as FutureTimeoutError, wait
from dataclasses import dataclass
from typing import Any, List, Optional, Sequence, Tuple

from .elevation import ElevationProvider, as_provider, coerce_elevation
from .errors import ElevationLookupFailure, InvalidParameter
from .geodesy import GeoPoint, great_circle_distance_m, intermediate_point
from .models import LinkRequest

logger = logging.getLogger(__name__)

# Provider errors that mean "no data for this point" rather than a bug.
_LOOKUP_ERRORS = (ElevationLookupFailure, LookupError, OSError, ValueError)


@dataclass(frozen=True)
class ProfileSample:
    index: int
    point: GeoPoint
    distance_m: float
    elevation_m: Optional[float]


def sample_path(request: LinkRequest) -> List[Tuple[GeoPoint, float]]:
    """(point, distance from TX in meters) for each of the N samples."""
    n = request.samples
    if not isinstance(n, int) or isinstance(n, bool) or n < 2:
        raise InvalidParameter(f"sample count must be an integer >= 2, got {n!r}")
    out: List[Tuple[GeoPoint, float]] = []
    for i in range(n):
        p = intermediate_point(request.tx, request.rx, i / (n - 1))
        out.append((p, great_circle_distance_m(request.tx, p)))
    return out


def _safe_lookup(provider: ElevationProvider, point: GeoPoint) -> Optional[float]:
    try:
        return coerce_elevation(provider.elevation_m(point))
    except _LOOKUP_ERRORS as exc:
        logger.warning("No elevation for (%.6f, %.6f): %s", point.lat, point.lon, exc)
        return None


def _safe_batch(provider: ElevationProvider, points: Sequence[GeoPoint]) -> List[Optional[float]]:
    try:
        values = list(provider.elevations_m(points))
    except _LOOKUP_ERRORS as exc:
        logger.warning("Batched elevation lookup failed for %d points: %s", len(points), exc)
        return [None] * len(points)
    if len(values) != len(points):
        logger.warning("Batched elevation lookup returned %d values for %d points", len(values), len(points))
        return [None] * len(points)
    return [coerce_elevation(v) for v in values]


def _lookup_batch(provider, points, timeout_s):
    if timeout_s is None:
        return _safe_batch(provider, points)
    pool = ThreadPoolExecutor(max_workers=1)
    try:
        fut = pool.submit(_safe_batch, provider, points)
        return fut.result(timeout=timeout_s)
    except FutureTimeoutError:
        logger.warning("Batched elevation lookup timed out after %.1f s", timeout_s)
        return [None] * len(points)
    finally:
        pool.shutdown(wait=False, cancel_futures=True)


def _lookup_pool(provider, points, workers, timeout_s):
    out: List[Optional[float]] = [None] * len(points)
    pool = ThreadPoolExecutor(max_workers=workers)
    try:
        futures = {pool.submit(_safe_lookup, provider, p): i for i, p in enumerate(points)}
        done, not_done = wait(futures, timeout=timeout_s)
        for fut in done:
            out[futures[fut]] = fut.result()
        if not_done:
            logger.warning(
                "Elevation lookup timed out after %.1f s; %d of %d points unresolved",
                timeout_s, len(not_done), len(points),
            )
    finally:
        pool.shutdown(wait=False, cancel_futures=True)
    return out


def lookup_elevations(
    elevation_lookup: Any,
    points: Sequence[GeoPoint],
    max_workers: Optional[int] = None,
    timeout_s: Optional[float] = None,
) -> List[Optional[float]]:
    """Terrain height per point (None where unavailable), in input order."""
    provider = as_provider(elevation_lookup)
    if timeout_s is not None and timeout_s <= 0:
        raise InvalidParameter(f"timeout must be positive, got {timeout_s}")
    if max_workers is not None and max_workers < 1:
        raise InvalidParameter(f"max_workers must be >= 1, got {max_workers}")
    if provider.supports_batch:
        return _lookup_batch(provider, points, timeout_s)
    workers = max_workers or 1
    if workers == 1 and timeout_s is None:
        return [_safe_lookup(provider, p) for p in points]
    return _lookup_pool(provider, points, workers, timeout_s)


def build_profile(
    request: LinkRequest,
    elevation_lookup: Any,
    max_workers: Optional[int] = None,
    timeout_s: Optional[float] = None,
) -> List[ProfileSample]:
    """Distance-ordered terrain profile for the request's path."""
    path = sample_path(request)
    elevations = lookup_elevations(elevation_lookup, [p for p, _ in path], max_workers, timeout_s)
    return [
        ProfileSample(index=i, point=p, distance_m=d, elevation_m=h)
        for i, ((p, d), h) in enumerate(zip(path, elevations))
    ]
