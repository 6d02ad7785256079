"""Run one discovery pass from the command line and print the results."""
from __future__ import annotations

import argparse
import asyncio
import json
import logging
import os
import sys

from ingest.generator_client import EventGenerator
from ingest.settings import load_settings
from pipeline.orchestrator import DiscoveryRequest, discover_events
from pipeline.profiles import PROFILES

logger = logging.getLogger(__name__)
if os.getenv("EVENTS_DEBUG"):
    logging.basicConfig(level=logging.INFO, format="%(message)s")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Discover events for every region")
    parser.add_argument("mode", choices=sorted(PROFILES), help="Which kind of events to discover")
    parser.add_argument("--days", type=int, help="Window size in days")
    parser.add_argument("--target", type=int, help="Target number of events per state")
    parser.add_argument(
        "--strict-dates",
        action="store_true",
        help="Drop events whose date cannot be parsed (unless the source looks credible)",
    )
    return parser


async def _discover(profile, request, settings):
    async with EventGenerator(settings) as generator:
        return await discover_events(profile, request, generator, settings=settings)


def run(argv: list[str] | None = None) -> int:
    """Discover events and write the region map to stdout as JSON."""
    args = build_parser().parse_args(argv)
    profile = PROFILES[args.mode]
    request = DiscoveryRequest.defaults_for(profile)
    if args.days:
        request.days = args.days
    if args.target:
        request.target_per_state = args.target
    if args.strict_dates:
        request.allow_unknown_dates = False

    settings = load_settings()
    logger.info("Discovering %s events: %s", profile.name, request)
    try:
        results = asyncio.run(_discover(profile, request, settings))
    except ValueError as exc:
        print("❌", exc, file=sys.stderr)
        return 1
    for region, events in results.items():
        logger.info("  %s: %d event(s)", region, len(events))
    print(json.dumps(results, indent=2))
    return 0


if __name__ == "__main__":
    raise SystemExit(run())
