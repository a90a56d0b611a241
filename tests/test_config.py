import pytest

from los_engine.config import (
    ClassificationThresholds,
    EngineSettings,
    load_settings_from_text_file,
    parse_settings_text,
)
from los_engine.errors import InvalidParameter


def test_defaults():
    s = EngineSettings()
    assert s.thresholds.clear_ratio == 1.0
    assert s.thresholds.marginal_ratio == 0.6
    assert s.thresholds.max_missing_fraction == 0.0
    assert s.default_k_factor == pytest.approx(4.0 / 3.0)
    assert s.default_samples == 50


def test_parse_settings_text():
    text = """
    Clear ratio: 1.2
    Marginal ratio = 0.5
    Max missing fraction: 0.1
    k-factor: 4/3
    Samples: 120
    Coincident epsilon: 5 m
    Lookup timeout: 2.5 s
    Workers: 8
    """
    s = parse_settings_text(text)
    assert s.thresholds.clear_ratio == 1.2
    assert s.thresholds.marginal_ratio == 0.5
    assert s.thresholds.max_missing_fraction == 0.1
    assert s.default_k_factor == pytest.approx(4.0 / 3.0)
    assert s.default_samples == 120
    assert s.coincident_epsilon_m == 5.0
    assert s.lookup_timeout_s == 2.5
    assert s.max_workers == 8


def test_parse_percent_forms_and_fallbacks():
    s = parse_settings_text("Fresnel clearance: 80 %\nMax missing: 25 %\nk = 1.0")
    assert s.thresholds.marginal_ratio == 0.8
    assert s.thresholds.max_missing_fraction == 0.25
    assert s.default_k_factor == 1.0
    assert s.thresholds.clear_ratio == 1.0
    assert s.default_samples == 50
    assert s.lookup_timeout_s is None


def test_inconsistent_thresholds_rejected():
    with pytest.raises(InvalidParameter):
        ClassificationThresholds(clear_ratio=0.5, marginal_ratio=0.6)
    with pytest.raises(InvalidParameter):
        ClassificationThresholds(max_missing_fraction=1.5)
    with pytest.raises(InvalidParameter):
        parse_settings_text("Marginal ratio: 1.5")


@pytest.mark.parametrize("fraction", [0.5, 0.9, 1.0, -0.1])
def test_missing_fraction_must_stay_below_half(fraction):
    with pytest.raises(InvalidParameter):
        ClassificationThresholds(max_missing_fraction=fraction)


def test_parse_rejects_majority_missing_tolerance():
    with pytest.raises(InvalidParameter):
        parse_settings_text("Max missing: 60 %")


@pytest.mark.parametrize("kwargs", [
    {"coincident_epsilon_m": -1.0},
    {"default_samples": 1},
    {"default_samples": 10.5},
    {"default_k_factor": 0.0},
    {"default_k_factor": float("nan")},
    {"lookup_timeout_s": 0.0},
    {"max_workers": 0},
])
def test_engine_settings_rejects_bad_values(kwargs):
    with pytest.raises(InvalidParameter):
        EngineSettings(**kwargs)


def test_parse_rejects_zero_workers():
    with pytest.raises(InvalidParameter):
        parse_settings_text("Workers: 0")


def test_load_from_file(tmp_path):
    f = tmp_path / "los.txt"
    f.write_text("Samples: 200\n", encoding="utf-8")
    assert load_settings_from_text_file(str(f)).default_samples == 200
