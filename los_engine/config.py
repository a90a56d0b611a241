"""Engine settings and a tolerant text parser for them.

This module provides:
- Data classes for the classification policy (first-Fresnel-zone thresholds)
  and the evaluation defaults (k-factor, sample count, lookup scheduling).
- A regex-based parser that picks those values out of a free-form settings
  file, falling back to defaults for anything it does not find.

Defaults:
- clear when the worst interior point keeps >= 100 % of the first Fresnel zone
- marginal down to 60 % (the usual 0.6 F1 engineering rule), obstructed below
- no missing terrain tolerated before a verdict becomes indeterminate
- k = 4/3 (standard atmosphere), 50 samples, TX/RX closer than 1 m rejected

Recognised lines (case-insensitive, ``:`` or ``=``):

    Clear ratio: 1.0
    Marginal ratio: 0.6          (or "Fresnel clearance: 60 %")
    Max missing fraction: 0.1    (or "Max missing: 10 %")
    k-factor: 4/3                (or a decimal)
    Samples: 100
    Coincident epsilon: 1 m
    Lookup timeout: 5 s
    Workers: 8
"""

import math
import re
from dataclasses import dataclass, field
from typing import Optional

from .curvature import STANDARD_K_FACTOR
from .errors import InvalidParameter

_NUM = r"([0-9]+(?:\.[0-9]+)?)"

# max_missing_fraction must stay below this: a half-unknown path is never clear
MAX_MISSING_FRACTION_LIMIT = 0.5


@dataclass(frozen=True)
class ClassificationThresholds:
    clear_ratio: float = 1.0
    marginal_ratio: float = 0.6
    # share of interior points allowed to lack terrain before the verdict
    # degrades to indeterminate (an obstruction found is still reported)
    max_missing_fraction: float = 0.0

    def __post_init__(self):
        if not 0.0 < self.marginal_ratio <= self.clear_ratio:
            raise InvalidParameter(
                f"thresholds must satisfy 0 < marginal <= clear, got {self.marginal_ratio}/{self.clear_ratio}"
            )
        if not 0.0 <= self.max_missing_fraction < MAX_MISSING_FRACTION_LIMIT:
            raise InvalidParameter(
                f"max_missing_fraction must be within [0, {MAX_MISSING_FRACTION_LIMIT}), got {self.max_missing_fraction}"
            )


@dataclass(frozen=True)
class EngineSettings:
    thresholds: ClassificationThresholds = field(default_factory=ClassificationThresholds)
    default_k_factor: float = STANDARD_K_FACTOR
    default_samples: int = 50
    coincident_epsilon_m: float = 1.0
    lookup_timeout_s: Optional[float] = None
    max_workers: Optional[int] = None

    def __post_init__(self):
        k = self.default_k_factor
        if not isinstance(k, (int, float)) or not math.isfinite(k) or k <= 0:
            raise InvalidParameter(f"default_k_factor must be positive, got {k!r}")
        n = self.default_samples
        if not isinstance(n, int) or isinstance(n, bool) or n < 2:
            raise InvalidParameter(f"default_samples must be an integer >= 2, got {n!r}")
        eps = self.coincident_epsilon_m
        if not isinstance(eps, (int, float)) or not math.isfinite(eps) or eps < 0:
            raise InvalidParameter(f"coincident_epsilon_m must be >= 0, got {eps!r}")
        if self.lookup_timeout_s is not None and not self.lookup_timeout_s > 0:
            raise InvalidParameter(f"lookup_timeout_s must be positive, got {self.lookup_timeout_s!r}")
        w = self.max_workers
        if w is not None and (not isinstance(w, int) or isinstance(w, bool) or w < 1):
            raise InvalidParameter(f"max_workers must be an integer >= 1, got {w!r}")


def parse_settings_text(text: str, defaults: Optional[EngineSettings] = None) -> EngineSettings:
    """Parse free-form settings text; every field is optional.

    Raises InvalidParameter if the resulting thresholds are inconsistent.
    """
    if defaults is None:
        defaults = EngineSettings()

    clear = defaults.thresholds.clear_ratio
    marginal = defaults.thresholds.marginal_ratio
    max_missing = defaults.thresholds.max_missing_fraction
    k_factor = defaults.default_k_factor
    samples = defaults.default_samples
    epsilon = defaults.coincident_epsilon_m
    timeout_s = defaults.lookup_timeout_s
    workers = defaults.max_workers

    m = re.search(r"clear\s*ratio\s*[:=]\s*" + _NUM, text, re.IGNORECASE)
    if m:
        clear = float(m.group(1))

    m = re.search(r"marginal\s*ratio\s*[:=]\s*" + _NUM, text, re.IGNORECASE)
    if m:
        marginal = float(m.group(1))
    else:
        m = re.search(r"fresnel\s*clearance\s*[:=]\s*" + _NUM + r"\s*%", text, re.IGNORECASE)
        if m:
            marginal = float(m.group(1)) / 100.0

    m = re.search(r"max(?:imum)?\s*missing(?:\s*fraction)?\s*[:=]\s*" + _NUM + r"\s*(%)?", text, re.IGNORECASE)
    if m:
        max_missing = float(m.group(1))
        if m.group(2):
            max_missing /= 100.0

    # "k-factor: 4/3" or "k = 1.33"
    m = re.search(r"\bk(?:[\s-]*factor)?\s*[:=]\s*" + _NUM + r"(?:\s*/\s*" + _NUM + r")?", text, re.IGNORECASE)
    if m:
        k_factor = float(m.group(1))
        if m.group(2):
            k_factor /= float(m.group(2))

    m = re.search(r"samples\s*[:=]\s*([0-9]+)", text, re.IGNORECASE)
    if m:
        samples = int(m.group(1))

    m = re.search(r"coincident\s*(?:epsilon)?\s*[:=]\s*" + _NUM + r"\s*m\b", text, re.IGNORECASE)
    if m:
        epsilon = float(m.group(1))

    m = re.search(r"lookup\s*timeout\s*[:=]\s*" + _NUM + r"\s*s", text, re.IGNORECASE)
    if m:
        timeout_s = float(m.group(1))

    m = re.search(r"workers\s*[:=]\s*([0-9]+)", text, re.IGNORECASE)
    if m:
        workers = int(m.group(1))

    return EngineSettings(
        thresholds=ClassificationThresholds(
            clear_ratio=clear,
            marginal_ratio=marginal,
            max_missing_fraction=max_missing,
        ),
        default_k_factor=k_factor,
        default_samples=samples,
        coincident_epsilon_m=epsilon,
        lookup_timeout_s=timeout_s,
        max_workers=workers,
    )


def load_settings_from_text_file(path: str, defaults: Optional[EngineSettings] = None) -> EngineSettings:
    with open(path, "r", encoding="utf-8", errors="ignore") as f:
        txt = f.read()
    return parse_settings_text(txt, defaults)
