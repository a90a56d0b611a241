"""CLI to evaluate a radio path and optionally save the profile (CSV/PNG).

Usage:
    python -m los_engine.cli --tx-lat 38.7 --tx-lon -9.1 --tx-height 10 \
        --rx-lat 38.8 --rx-lon -9.2 --rx-height 30 --freq-mhz 145 --png los.png
"""

import argparse
import logging
from pathlib import Path

from .config import EngineSettings, load_settings_from_text_file
from .elevation import DEFAULT_API_URL, DEFAULT_DATASET, CachedElevationProvider, OpenTopoDataProvider
from .errors import InvalidRequest
from .evaluator import evaluate
from .geodesy import GeoPoint
from .models import LinkRequest
from .report import result_to_response_json, save_profile_csv


def main(argv=None):
    parser = argparse.ArgumentParser(description="Line-of-sight and Fresnel clearance for a radio path")
    parser.add_argument("--tx-lat", type=float, required=True)
    parser.add_argument("--tx-lon", type=float, required=True)
    parser.add_argument("--tx-height", type=float, default=10.0, help="TX antenna height above ground (m)")
    parser.add_argument("--rx-lat", type=float, required=True)
    parser.add_argument("--rx-lon", type=float, required=True)
    parser.add_argument("--rx-height", type=float, default=10.0, help="RX antenna height above ground (m)")
    parser.add_argument("--freq-mhz", type=float, required=True)
    parser.add_argument("--k", type=float, default=None, help="k-factor (default from settings, 4/3)")
    parser.add_argument("--samples", type=int, default=None, help="profile points incl. endpoints")
    parser.add_argument("--settings", type=Path, default=None, help="settings text file")
    parser.add_argument("--elevation-url", type=str, default=DEFAULT_API_URL)
    parser.add_argument("--dataset", type=str, default=DEFAULT_DATASET)
    parser.add_argument("--flat-elevation", type=float, default=None, help="skip the API; constant terrain height (m)")
    parser.add_argument("--timeout", type=float, default=None, help="elevation lookup timeout (s)")
    parser.add_argument("--workers", type=int, default=None)
    parser.add_argument("--csv", type=Path, default=None)
    parser.add_argument("--png", type=Path, default=None)
    parser.add_argument("--json", action="store_true", help="print the full JSON response")
    parser.add_argument("--verbose", action="store_true")
    args = parser.parse_args(argv)

    logging.basicConfig(level=logging.DEBUG if args.verbose else logging.INFO)

    try:
        settings = load_settings_from_text_file(str(args.settings)) if args.settings else EngineSettings()
        request = LinkRequest(
            tx=GeoPoint(args.tx_lat, args.tx_lon, args.tx_height),
            rx=GeoPoint(args.rx_lat, args.rx_lon, args.rx_height),
            frequency_mhz=args.freq_mhz,
            k_factor=args.k if args.k is not None else settings.default_k_factor,
            samples=args.samples if args.samples is not None else settings.default_samples,
        )
        if args.flat_elevation is not None:
            flat = args.flat_elevation
            lookup = lambda p: flat  # noqa: E731
        else:
            lookup = CachedElevationProvider(OpenTopoDataProvider(base_url=args.elevation_url, dataset=args.dataset))
        result = evaluate(request, lookup, settings, max_workers=args.workers, timeout_s=args.timeout)
    except InvalidRequest as exc:
        parser.error(str(exc))

    if args.json:
        print(result_to_response_json(result))
    else:
        ratio = result.min_clearance_ratio
        print(f"Status: {result.classification}")
        print(f"Distance: {result.distance_km:.1f} km, bearing {result.bearing_deg:.0f}° {result.cardinal}")
        if ratio is not None:
            print(f"Worst Fresnel clearance: {100.0 * ratio:.0f}% at point {result.critical_index}")
        if result.missing_count:
            print(f"Points without terrain data: {result.missing_count}/{len(result.points)}")
    if args.csv is not None:
        print(f"Saved profile to {save_profile_csv(result, args.csv)}")
    if args.png is not None:
        from .profile_plot import render_profile_png

        print(f"Saved chart to {render_profile_png(result, args.png)}")
    return result


if __name__ == "__main__":
    main()
