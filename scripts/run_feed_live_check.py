#!/usr/bin/env python
"""
Run this to query the live state-vector feed around a point and print nearby tracks.

Usage (from repo root):
    python scripts/run_feed_live_check.py [LAT LON]
"""

import asyncio
from datetime import datetime, timezone
import sys

from overhead.config import settings
from overhead.domain import compass_heading, format_distance
from overhead.ingestors import FeedError
from overhead.models import Position
from overhead.services import DetectionEngine


# Boise, Idaho
LAT = 43.6173
LON = -116.2035


async def main(lat: float, lon: float) -> int:
    now = datetime.now(timezone.utc)
    engine = DetectionEngine()

    print(f"=== Live feed check for {lat}, {lon} (UTC now: {now.isoformat()}) ===\n")
    print(
        f"Requesting tracks within {format_distance(settings.acquisition_radius_m)} "
        f"from {settings.feed_base_url}..."
    )

    try:
        found = await engine.search(Position(latitude=lat, longitude=lon))
    except FeedError as exc:
        print(f"\nFeed query failed ({exc.reason.value}): {exc}")
        return 1

    if not found:
        print("\nNo airborne tracks nearby.")
        return 0

    print(f"\nReceived {len(found)} tracks. Showing a few:")
    for idx, item in enumerate(found[:10], start=1):
        t = item.track
        marker = "*" if item.distance_m <= settings.alert_radius_m else " "
        heading = compass_heading(t.heading) if t.heading is not None else "-"
        print(
            f"{marker}{idx}. {t.display_name!r} id={t.id} "
            f"dist={format_distance(item.distance_m)} alt_m={t.altitude} "
            f"speed_ms={t.speed} hdg={heading}"
        )
    return 0


if __name__ == "__main__":
    args = sys.argv[1:]
    lat, lon = (float(args[0]), float(args[1])) if len(args) == 2 else (LAT, LON)
    sys.exit(asyncio.run(main(lat, lon)))
