import pytest

from los_engine.config import ClassificationThresholds, EngineSettings
from los_engine.errors import ElevationLookupFailure, InvalidCoordinate, InvalidParameter, InvalidRequest
from los_engine.evaluator import classify, evaluate, validate_request
from los_engine.geodesy import GeoPoint
from los_engine.models import CLEAR, INDETERMINATE, MARGINAL, OBSTRUCTED, LinkRequest


def _never_called(point):
    raise AssertionError("elevation lookup must not run for an invalid request")


def test_scenario_flat_terrain_is_clear(lisbon_request, terrain):
    res = evaluate(lisbon_request, terrain(lisbon_request))
    assert res.classification == CLEAR
    assert res.missing_count == 0
    assert len(res.points) == 50
    for p in res.points[1:-1]:
        assert p.clearance_ratio is not None and p.clearance_ratio >= 1.0
    first, last = res.points[0], res.points[-1]
    assert first.fresnel_radius_m == 0.0 and last.fresnel_radius_m == 0.0
    assert first.bulge_m == 0.0 and last.bulge_m == 0.0
    assert first.clearance_ratio is None and last.clearance_ratio is None
    assert first.distance_m == 0.0
    assert last.distance_m == pytest.approx(res.distance_m)
    assert 13e3 < res.distance_m < 15e3


def test_profile_geometry(lisbon_request, terrain):
    res = evaluate(lisbon_request, terrain(lisbon_request, default=50.0))
    # Antennas at 50 + 10 m on both ends: flat LOS line
    assert all(p.los_height_m == pytest.approx(60.0) for p in res.points)
    bulges = [p.bulge_m for p in res.points]
    assert max(bulges) == max(bulges[24], bulges[25])
    for p in res.points:
        assert p.clearance_m == pytest.approx(60.0 - (50.0 + p.bulge_m))


def test_los_height_interpolates_between_antennas(terrain):
    req = LinkRequest(GeoPoint(38.7, -9.1, 10.0), GeoPoint(38.8, -9.2, 30.0), 145.0, samples=11)
    res = evaluate(req, terrain(req, heights={10: 100.0}))
    # TX absolute 10 m, RX absolute 130 m
    assert res.points[0].los_height_m == pytest.approx(10.0)
    assert res.points[-1].los_height_m == pytest.approx(130.0)
    mid = res.points[5]
    assert mid.los_height_m == pytest.approx(10.0 + 120.0 * mid.distance_m / res.distance_m)


def test_scenario_midpoint_obstruction(lisbon_request, terrain):
    res = evaluate(lisbon_request, terrain(lisbon_request, heights={25: 500.0}))
    assert res.classification == OBSTRUCTED
    assert res.critical_index == 25
    assert res.critical_point.elevation_m == 500.0
    assert res.min_clearance_ratio < 0
    assert res.worst_clearance_m < -480.0


def test_marginal_band(lisbon_request, terrain):
    flat = evaluate(lisbon_request, terrain(lisbon_request))
    p = flat.points[25]
    # raise the ground at point 25 so that 80 % of F1 stays clear
    h = p.clearance_m - 0.8 * p.fresnel_radius_m
    res = evaluate(lisbon_request, terrain(lisbon_request, heights={25: h}))
    assert res.classification == MARGINAL
    assert res.critical_index == 25
    assert res.min_clearance_ratio == pytest.approx(0.8)


def test_missing_terrain_never_clear(lisbon_request, terrain):
    missing = {i for i in range(1, 49) if i % 5 in (1, 2)}
    assert len(missing) == 20
    res = evaluate(lisbon_request, terrain(lisbon_request, missing=missing))
    assert res.classification != CLEAR
    assert res.classification == INDETERMINATE
    assert res.missing_count == 20
    for i in missing:
        assert res.points[i].elevation_m is None
        assert res.points[i].clearance_ratio is None


def test_missing_tolerance_uses_available_points(lisbon_request, terrain):
    missing = {i for i in range(1, 49) if i % 5 in (1, 2)}
    settings = EngineSettings(thresholds=ClassificationThresholds(max_missing_fraction=0.45))
    res = evaluate(lisbon_request, terrain(lisbon_request, missing=missing), settings)
    assert res.classification == CLEAR
    assert res.missing_count == 20


def test_mostly_missing_profile_is_never_clear(lisbon_request, terrain):
    missing = set(range(1, 45))
    loosest = EngineSettings(thresholds=ClassificationThresholds(max_missing_fraction=0.49))
    res = evaluate(lisbon_request, terrain(lisbon_request, missing=missing), loosest)
    assert res.missing_count == 44
    assert res.classification == INDETERMINATE
    with pytest.raises(InvalidParameter):
        ClassificationThresholds(max_missing_fraction=1.0)


def test_missing_count_matches_points_without_elevation(lisbon_request, terrain):
    res = evaluate(lisbon_request, terrain(lisbon_request, missing={0, 7, 30}))
    assert res.missing_count == 3
    assert [p.index for p in res.points if not p.has_elevation] == [0, 7, 30]


def test_obstruction_reported_despite_gaps(lisbon_request, terrain):
    res = evaluate(lisbon_request, terrain(lisbon_request, heights={25: 500.0}, missing={10, 11, 12}))
    assert res.classification == OBSTRUCTED
    assert res.critical_index == 25
    assert res.missing_count == 3


def test_missing_endpoint_terrain_is_indeterminate(lisbon_request, terrain):
    res = evaluate(lisbon_request, terrain(lisbon_request, missing={0}))
    assert res.classification == INDETERMINATE
    assert res.critical_index is None
    assert all(p.los_height_m is None and p.clearance_ratio is None for p in res.points)
    assert res.missing_count == 1


def test_all_lookups_failing(lisbon_request):
    def lookup(p):
        raise ElevationLookupFailure("service down", p)

    res = evaluate(lisbon_request, lookup)
    assert res.classification == INDETERMINATE
    assert res.missing_count == 50
    assert res.worst_clearance_m is None


def test_two_samples_is_indeterminate(terrain):
    req = LinkRequest(GeoPoint(38.7, -9.1, 10.0), GeoPoint(38.8, -9.2, 10.0), 145.0, samples=2)
    res = evaluate(req, terrain(req))
    assert len(res.points) == 2
    assert res.classification == INDETERMINATE
    assert res.critical_index is None


def test_evaluate_is_repeatable(lisbon_request, terrain):
    lookup = terrain(lisbon_request, heights={7: 3.0, 30: 4.5})
    r1 = evaluate(lisbon_request, lookup)
    r2 = evaluate(lisbon_request, lookup)
    assert r1 == r2
    assert repr(r1) == repr(r2)


def test_tie_break_prefers_point_nearest_tx(lisbon_request, terrain):
    flat = evaluate(lisbon_request, terrain(lisbon_request))
    # symmetric indices 10 and 39 have mirrored geometry; make both block hard
    res = evaluate(lisbon_request, terrain(lisbon_request, heights={10: 1000.0, 39: 1000.0}))
    r10 = res.points[10].clearance_ratio
    r39 = res.points[39].clearance_ratio
    assert res.critical_index in (10, 39)
    if r10 == r39:
        assert res.critical_index == 10
    assert flat.classification == CLEAR


def test_classify_tie_break_exact():
    from los_engine.evaluator import find_critical_point
    from los_engine.models import ProfilePoint

    def pt(i, ratio):
        return ProfilePoint(i, 0.0, 0.0, float(i), 0.0, 0.0, 1.0, 0.0 if ratio is None else 1.0,
                            None if ratio is None else ratio, ratio)

    pts = [pt(0, None), pt(1, 0.7), pt(2, 0.7), pt(3, None)]
    assert find_critical_point(pts) == 1
    assert classify(pts) == MARGINAL


def test_custom_thresholds(lisbon_request, terrain):
    flat = evaluate(lisbon_request, terrain(lisbon_request))
    worst = flat.min_clearance_ratio
    strict = EngineSettings(thresholds=ClassificationThresholds(clear_ratio=worst + 1.0, marginal_ratio=0.6))
    assert evaluate(lisbon_request, terrain(lisbon_request), strict).classification == MARGINAL
    very_strict = EngineSettings(thresholds=ClassificationThresholds(clear_ratio=worst + 2.0, marginal_ratio=worst + 1.0))
    assert evaluate(lisbon_request, terrain(lisbon_request), very_strict).classification == OBSTRUCTED


@pytest.mark.parametrize("kwargs", [
    {"frequency_mhz": 0.0},
    {"frequency_mhz": -145.0},
    {"k_factor": 0.0},
    {"samples": 1},
    {"samples": 10.5},
])
def test_invalid_parameters_raise_before_lookup(lisbon_request, kwargs):
    fields = dict(tx=lisbon_request.tx, rx=lisbon_request.rx, frequency_mhz=145.0, k_factor=4.0 / 3.0, samples=50)
    fields.update(kwargs)
    with pytest.raises(InvalidParameter):
        evaluate(LinkRequest(**fields), _never_called)


def test_coincident_endpoints_rejected():
    a = GeoPoint(38.7, -9.1, 10.0)
    req = LinkRequest(a, GeoPoint(38.7, -9.1, 20.0), 145.0)
    with pytest.raises(InvalidRequest) as excinfo:
        evaluate(req, _never_called)
    assert not isinstance(excinfo.value, InvalidParameter)
    near = LinkRequest(a, GeoPoint(38.700001, -9.1), 145.0)
    with pytest.raises(InvalidRequest):
        validate_request(near)


def test_coincident_endpoints_rejected_with_zero_epsilon():
    a = GeoPoint(38.7, -9.1, 10.0)
    req = LinkRequest(a, GeoPoint(38.7, -9.1, 20.0), 145.0)
    with pytest.raises(InvalidRequest):
        evaluate(req, _never_called, EngineSettings(coincident_epsilon_m=0.0))
    with pytest.raises(InvalidParameter):
        EngineSettings(coincident_epsilon_m=-1.0)


def test_invalid_coordinate_is_an_invalid_request():
    with pytest.raises(InvalidRequest):
        GeoPoint(-95.0, 0.0)
    with pytest.raises(InvalidCoordinate):
        LinkRequest(GeoPoint(0.0, 0.0), GeoPoint(0.0, 181.0), 145.0)


def test_bearing_and_response_fields(lisbon_request, terrain):
    res = evaluate(lisbon_request, terrain(lisbon_request))
    assert 300.0 < res.bearing_deg < 330.0
    assert res.cardinal in ("NW", "WNW", "NNW")
    assert res.distance_km == pytest.approx(res.distance_m / 1000.0)
