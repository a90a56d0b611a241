"""Elevation providers consumed by the profile sampler.

The evaluator never fetches terrain itself; it is handed a provider. A
provider maps a GeoPoint to terrain height in meters above sea level, or
None when it has no data. Providers that can answer many coordinates in one
round trip set ``supports_batch`` so the sampler sends the whole path at once.

Implementations here:
- CallableElevationProvider: wraps a plain function (tests, DEM arrays, ...)
- OpenTopoDataProvider: HTTP client for an Open Topo Data compatible API
  (``GET /v1/<dataset>?locations=lat,lon|lat,lon``)
- CachedElevationProvider: bounded in-memory memo in front of another provider
"""

from __future__ import annotations

import logging
import math
import threading
from collections import OrderedDict
from typing import Any, Callable, Iterable, List, Optional, Sequence, Tuple

import requests

from .errors import ElevationLookupFailure
from .geodesy import GeoPoint

logger = logging.getLogger(__name__)

DEFAULT_API_URL = "https://api.opentopodata.org"
DEFAULT_DATASET = "srtm90m"


def coerce_elevation(value: Any) -> Optional[float]:
    """Float terrain height, or None for null/non-numeric/non-finite values."""
    if value is None:
        return None
    try:
        h = float(value)
    except (TypeError, ValueError):
        return None
    return h if math.isfinite(h) else None


class ElevationProvider:
    """Base class: override ``elevation_m`` (and ``elevations_m`` for batches)."""

    supports_batch = False

    def elevation_m(self, point: GeoPoint) -> Optional[float]:
        raise NotImplementedError

    def elevations_m(self, points: Sequence[GeoPoint]) -> List[Optional[float]]:
        return [self.elevation_m(p) for p in points]


class CallableElevationProvider(ElevationProvider):
    def __init__(self, func: Callable[[GeoPoint], Optional[float]]):
        self.func = func

    def elevation_m(self, point: GeoPoint) -> Optional[float]:
        return coerce_elevation(self.func(point))


def as_provider(lookup: Any) -> ElevationProvider:
    """Accept an ElevationProvider or a callable ``GeoPoint -> float | None``."""
    if isinstance(lookup, ElevationProvider):
        return lookup
    if callable(lookup):
        return CallableElevationProvider(lookup)
    raise TypeError(f"elevation lookup must be a provider or callable, got {type(lookup).__name__}")


def _chunks(items: Sequence[GeoPoint], size: int) -> Iterable[Sequence[GeoPoint]]:
    for i in range(0, len(items), size):
        yield items[i:i + size]


class OpenTopoDataProvider(ElevationProvider):
    """Batched terrain lookups over HTTP.

    Coordinates are sent with 6 decimals, pipe separated. A chunk that fails
    (transport error, HTTP error, status != "OK") yields None for each of its
    points; single-point lookups raise ElevationLookupFailure instead.
    """

    supports_batch = True

    def __init__(
        self,
        base_url: str = DEFAULT_API_URL,
        dataset: str = DEFAULT_DATASET,
        timeout_s: float = 10.0,
        max_locations: int = 100,
        session: Optional[requests.Session] = None,
    ):
        if max_locations < 1:
            raise ValueError("max_locations must be >= 1")
        self.base_url = base_url.rstrip("/")
        self.dataset = dataset
        self.timeout_s = timeout_s
        self.max_locations = max_locations
        self.session = session if session is not None else requests.Session()

    @property
    def url(self) -> str:
        return f"{self.base_url}/v1/{self.dataset}"

    def _fetch(self, points: Sequence[GeoPoint]) -> List[Optional[float]]:
        locations = "|".join(f"{p.lat:.6f},{p.lon:.6f}" for p in points)
        try:
            resp = self.session.get(self.url, params={"locations": locations}, timeout=self.timeout_s)
        except requests.RequestException as exc:
            raise ElevationLookupFailure(f"elevation request failed: {exc}") from exc
        if resp.status_code == 429:
            raise ElevationLookupFailure("elevation API rate limit exceeded")
        if not resp.ok:
            raise ElevationLookupFailure(f"elevation API error: HTTP {resp.status_code}")
        try:
            data = resp.json()
        except ValueError as exc:
            raise ElevationLookupFailure("elevation API returned invalid JSON") from exc
        if not isinstance(data, dict):
            raise ElevationLookupFailure("elevation API returned an unexpected payload")
        results = data.get("results")
        if data.get("status") != "OK" or not isinstance(results, list):
            raise ElevationLookupFailure(str(data.get("error") or "elevation API returned no results"))
        if len(results) != len(points):
            raise ElevationLookupFailure(
                f"elevation API returned {len(results)} results for {len(points)} locations"
            )
        return [coerce_elevation(r.get("elevation") if isinstance(r, dict) else None) for r in results]

    def elevation_m(self, point: GeoPoint) -> Optional[float]:
        try:
            return self._fetch([point])[0]
        except ElevationLookupFailure as exc:
            exc.point = point
            raise

    def elevations_m(self, points: Sequence[GeoPoint]) -> List[Optional[float]]:
        out: List[Optional[float]] = []
        for chunk in _chunks(list(points), self.max_locations):
            try:
                out.extend(self._fetch(chunk))
            except ElevationLookupFailure as exc:
                logger.warning("Elevation lookup failed for %d locations: %s", len(chunk), exc)
                out.extend([None] * len(chunk))
        return out


class CachedElevationProvider(ElevationProvider):
    """LRU memo keyed by coordinates rounded to `precision` decimals.

    Misses are not cached so a transient outage does not stick. Safe to share
    between threads.
    """

    def __init__(self, inner: Any, maxsize: int = 4096, precision: int = 6):
        self.inner = as_provider(inner)
        self.maxsize = maxsize
        self.precision = precision
        self._cache: "OrderedDict[Tuple[float, float], float]" = OrderedDict()
        self._lock = threading.Lock()

    @property
    def supports_batch(self) -> bool:  # type: ignore[override]
        return self.inner.supports_batch

    def _key(self, point: GeoPoint) -> Tuple[float, float]:
        return (round(point.lat, self.precision), round(point.lon, self.precision))

    def _get(self, key: Tuple[float, float]) -> Optional[float]:
        with self._lock:
            if key not in self._cache:
                return None
            self._cache.move_to_end(key)
            return self._cache[key]

    def _put(self, key: Tuple[float, float], value: Optional[float]) -> None:
        if value is None:
            return
        with self._lock:
            self._cache[key] = value
            self._cache.move_to_end(key)
            while len(self._cache) > self.maxsize:
                self._cache.popitem(last=False)

    def __len__(self) -> int:
        return len(self._cache)

    def elevation_m(self, point: GeoPoint) -> Optional[float]:
        key = self._key(point)
        hit = self._get(key)
        if hit is not None:
            return hit
        value = self.inner.elevation_m(point)
        self._put(key, value)
        return value

    def elevations_m(self, points: Sequence[GeoPoint]) -> List[Optional[float]]:
        keys = [self._key(p) for p in points]
        out: List[Optional[float]] = [self._get(k) for k in keys]
        todo = [i for i, v in enumerate(out) if v is None]
        if todo:
            fetched = self.inner.elevations_m([points[i] for i in todo])
            for i, value in zip(todo, fetched):
                out[i] = value
                self._put(keys[i], value)
        return out
