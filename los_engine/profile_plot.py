"""Elevation / Fresnel profile rendering (PNG).

Draws the curvature-corrected terrain, the LOS line between the antennas,
the first Fresnel zone around it and the critical point. Missing terrain
shows as gaps (NaN), not as sea level.
"""

from __future__ import annotations

from pathlib import Path
from typing import Optional

import numpy as np
import matplotlib.pyplot as plt

from .models import CLEAR, MARGINAL, OBSTRUCTED, LinkResult

_STATUS_COLORS = {
    CLEAR: "#2ecc71",
    MARGINAL: "#f1c40f",
    OBSTRUCTED: "#e74c3c",
}


def _series(values) -> np.ndarray:
    return np.array([np.nan if v is None else v for v in values], dtype=float)


def render_profile_png(
    result: LinkResult,
    outfile: str | Path = "los_profile.png",
    title: Optional[str] = None,
) -> Path:
    x_km = np.array([p.distance_m for p in result.points]) / 1000.0
    bulge = np.array([p.bulge_m for p in result.points])
    terrain = _series(p.elevation_m for p in result.points) + bulge
    los = _series(p.los_height_m for p in result.points)
    radius = np.array([p.fresnel_radius_m for p in result.points])
    color = _STATUS_COLORS.get(result.classification, "#7f8c8d")

    fig, ax = plt.subplots(figsize=(8, 4), dpi=150)
    floor = np.nanmin(terrain) if np.isfinite(terrain).any() else 0.0
    ax.fill_between(x_km, floor, terrain, where=np.isfinite(terrain), color="#95a5a6", alpha=0.7, label="Terrain + bulge")
    ax.plot(x_km, los, linestyle="--", color=color, label="LOS")
    ax.fill_between(x_km, los - radius, los + radius, where=np.isfinite(los), color=color, alpha=0.15, label="Fresnel F1")
    crit = result.critical_point
    if crit is not None and crit.elevation_m is not None:
        ax.scatter([crit.distance_m / 1000.0], [crit.elevation_m + crit.bulge_m], c="k", s=25, marker="x", label="Critical")
    ax.set_title(title or f"LOS profile: {result.classification} ({result.distance_km:.1f} km)")
    ax.set_xlabel("Distance (km)")
    ax.set_ylabel("Height AMSL (m)")
    ax.legend(loc="upper right")
    outp = Path(outfile)
    outp.parent.mkdir(parents=True, exist_ok=True)
    fig.tight_layout()
    fig.savefig(outp)
    plt.close(fig)
    return outp
