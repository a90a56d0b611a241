"""Exception types for the LOS engine.

Validation errors subclass ``ValueError`` so callers that already guard
numeric input with ``except ValueError`` keep working. Lookup failures are
not validation errors: the sampler records them as missing terrain.
"""

from __future__ import annotations

from typing import Any


class LOSError(Exception):
    """Base class for every error raised by ``los_engine``."""


class InvalidRequest(LOSError, ValueError):
    """The request cannot be evaluated (e.g. TX and RX coincide)."""


class InvalidCoordinate(InvalidRequest):
    """Latitude/longitude out of range or not finite."""


class InvalidParameter(InvalidRequest):
    """Non-positive frequency or k-factor, bad sample count, bad threshold."""


class ElevationLookupFailure(LOSError):
    """Terrain height unavailable for one coordinate (non-fatal)."""

    def __init__(self, message: str, point: Any = None):
        super().__init__(message)
        self.point = point
