import pytest

from los_engine.geodesy import GeoPoint
from los_engine.models import LinkRequest
from los_engine.sampler import sample_path


def terrain_by_index(request, heights=None, default=0.0, missing=()):
    """Elevation lookup keyed on the request's own sample coordinates."""
    heights = heights or {}
    table = {}
    for i, (p, _) in enumerate(sample_path(request)):
        if i not in missing:
            table[(p.lat, p.lon)] = heights.get(i, default)

    def lookup(point):
        return table[(point.lat, point.lon)]

    return lookup


@pytest.fixture
def lisbon_request():
    return LinkRequest(
        tx=GeoPoint(38.7, -9.1, 10.0),
        rx=GeoPoint(38.8, -9.2, 10.0),
        frequency_mhz=145.0,
        k_factor=4.0 / 3.0,
        samples=50,
    )


@pytest.fixture
def terrain():
    return terrain_by_index
