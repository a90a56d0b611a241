"""Result export: printable table, CSV file and a JSON-able response dict.

The response mirrors what the calculator page renders: a status, the
per-point profile for the chart, the worst clearance (meters and % of the
first Fresnel zone), the path length and bearing.
"""

from __future__ import annotations

import csv
import json
from pathlib import Path
from typing import Any, Dict, List, Optional

from .models import LinkResult


def _fmt(value: Optional[float], spec: str) -> str:
    return "" if value is None else format(value, spec)


def profile_to_table(result: LinkResult) -> List[List[str]]:
    """Convert a result to a simple table (strings) for printing or CSV export."""
    table = [[
        "index", "distance_m", "lat", "lon", "elevation_m", "bulge_m",
        "los_height_m", "fresnel_radius_m", "clearance_m", "clearance_ratio",
    ]]
    for p in result.points:
        table.append([
            str(p.index),
            f"{p.distance_m:.1f}",
            f"{p.lat:.6f}",
            f"{p.lon:.6f}",
            _fmt(p.elevation_m, ".1f"),
            f"{p.bulge_m:.2f}",
            _fmt(p.los_height_m, ".2f"),
            f"{p.fresnel_radius_m:.2f}",
            _fmt(p.clearance_m, ".2f"),
            _fmt(p.clearance_ratio, ".3f"),
        ])
    return table


def save_profile_csv(result: LinkResult, path: str | Path) -> Path:
    """Save the evaluated profile to a CSV file (empty cell = missing data)."""
    outp = Path(path)
    outp.parent.mkdir(parents=True, exist_ok=True)
    with outp.open("w", newline="", encoding="utf-8") as f:
        writer = csv.writer(f)
        writer.writerows(profile_to_table(result))
    return outp


def result_to_response(result: LinkResult) -> Dict[str, Any]:
    """Return a dict the UI can consume in one object.

    Output format (abridged):
    {
      "status": "clear", "totalDistanceKm": 14.1, "bearingDeg": 320.4,
      "cardinal": "NW", "worstClearanceM": 7.1, "worstFresnelPercent": 263.0,
      "criticalIndex": 25, "missingCount": 0,
      "points": [{"distanceKm": 0.0, "elevationM": 0.0, ...}, ...]
    }
    """
    worst_pct = None if result.min_clearance_ratio is None else 100.0 * result.min_clearance_ratio
    resp: Dict[str, Any] = {
        "status": result.classification,
        "totalDistanceKm": result.distance_km,
        "bearingDeg": result.bearing_deg,
        "cardinal": result.cardinal,
        "worstClearanceM": result.worst_clearance_m,
        "worstFresnelPercent": worst_pct,
        "criticalIndex": result.critical_index,
        "missingCount": result.missing_count,
        "points": [],
    }
    for p in result.points:
        resp["points"].append({
            "distanceKm": p.distance_m / 1000.0,
            "latitude": p.lat,
            "longitude": p.lon,
            "elevationM": p.elevation_m,
            "earthBulgeM": p.bulge_m,
            "losElevationM": p.los_height_m,
            "fresnelRadiusM": p.fresnel_radius_m,
            "clearanceM": p.clearance_m,
            "fresnelClearancePercent": p.fresnel_clearance_pct,
        })
    return resp


def result_to_response_json(result: LinkResult, indent: int = 2) -> str:
    return json.dumps(result_to_response(result), ensure_ascii=False, indent=indent)
