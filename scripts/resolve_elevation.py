#!/usr/bin/env python3
"""Resolve the elevation of a coordinate through the full cascade.

The device step is driven by a fixed location provider, so ``--altitude``
simulates a sensor reading; without it the cascade falls through to the
cache and then the network.

Usage
-----
::

    python scripts/resolve_elevation.py 39.7392 -104.9903
    python scripts/resolve_elevation.py 39.7392 -104.9903 --altitude 1609 --altitude-accuracy 8

Options::

    --cache PATH           SQLite cache file (default: $ELEVATION_CACHE_PATH or in-memory)
    --fallback             Chain the USGS provider after Open-Meteo
    --feet                 Print elevation in feet
    --json                 Output as machine-readable JSON
    --clear-cache          Empty the cache before resolving
    --landmarks PATH       JSON landmark list to compare the result against
    -v, --verbose          Debug logging
"""

from __future__ import annotations

import argparse
import asyncio
import json
import logging
import sys
from pathlib import Path
from typing import Any

# Allow running from the repo root without installing the package.
_repo = Path(__file__).resolve().parent.parent
_src = _repo / "src"
if _src.is_dir():
    sys.path.insert(0, str(_src))

from pyelevation import (  # noqa: E402
    ElevationClient,
    ElevationConfig,
    ElevationError,
    FixedLocationProvider,
    Landmark,
    ResolutionFailure,
    find_closest_landmark,
    format_comparison_message,
    load_landmarks,
)
from pyelevation.units import (  # noqa: E402
    format_accuracy,
    format_elevation,
    format_relative_time,
    meters_to_feet,
)


def _parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description=__doc__, formatter_class=argparse.RawDescriptionHelpFormatter)
    parser.add_argument("latitude", type=float)
    parser.add_argument("longitude", type=float)
    parser.add_argument("--altitude", type=float, default=None, help="Simulated device altitude (m)")
    parser.add_argument("--altitude-accuracy", type=float, default=None, help="Simulated vertical accuracy (m)")
    parser.add_argument("--cache", default=None, help="SQLite cache file")
    parser.add_argument("--fallback", action="store_true", help="Chain the USGS provider")
    parser.add_argument("--feet", action="store_true", help="Print elevation in feet")
    parser.add_argument("--json", action="store_true", help="JSON output")
    parser.add_argument("--clear-cache", action="store_true", help="Empty the cache first")
    parser.add_argument("--landmarks", default=None, help="JSON landmark list for comparison")
    parser.add_argument("-v", "--verbose", action="store_true")
    return parser.parse_args(argv)


def _print_human(outcome: Any, *, feet: bool, landmarks: list[Landmark]) -> None:
    if isinstance(outcome, ResolutionFailure):
        print(f"Failed ({outcome.kind}): {outcome.message}")
        return
    value = meters_to_feet(outcome.elevation) if feet else outcome.elevation
    unit = "ft" if feet else "m"
    print(f"Elevation: {format_elevation(value)} {unit}")
    print(f"Accuracy:  {format_accuracy(outcome.accuracy)}")
    print(f"Source:    {outcome.source}{' (cached)' if outcome.served_from_cache else ''}")
    print(f"Observed:  {format_relative_time(outcome.observed_at)}")
    print(f"Position:  {outcome.latitude:.5f}, {outcome.longitude:.5f}")
    closest = find_closest_landmark(outcome.elevation, landmarks)
    if closest is not None:
        print(format_comparison_message(outcome.elevation, closest, "feet" if feet else "meters"))


async def main(argv: list[str] | None = None) -> int:
    args = _parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    overrides: dict[str, Any] = {}
    if args.cache:
        overrides["cache_path"] = args.cache
    if args.fallback:
        overrides["use_fallback_provider"] = True

    try:
        config = ElevationConfig.from_env(**overrides)
    except ElevationError as exc:
        print(f"Configuration error: {exc}", file=sys.stderr)
        return 2

    landmarks = load_landmarks(args.landmarks) if args.landmarks else []

    location = FixedLocationProvider(
        args.latitude,
        args.longitude,
        altitude=args.altitude,
        altitude_accuracy=args.altitude_accuracy,
    )

    async with ElevationClient(config, location) as client:
        if args.clear_cache:
            await client.cache.clear()
        if args.json:
            outcome = await client.resolve()
        else:
            outcome = await client.resolve_with_progress(lambda message: print(f"... {message}"))

    if args.json:
        print(json.dumps(outcome.model_dump(mode="json"), indent=2))
    else:
        _print_human(outcome, feet=args.feet, landmarks=landmarks)
    return 0 if outcome.ok else 1


if __name__ == "__main__":
    sys.exit(asyncio.run(main()))
