"""Drive generation and post-processing for every region of a request."""
from __future__ import annotations

import asyncio
import logging
import math
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Any, List, Optional

import httpx

from ingest.generator_client import EventGenerator
from ingest.prompts import build_refill_prompt
from ingest.schemas import REGIONS, RegionResults, empty_result
from ingest.settings import Settings, load_settings

from .dedupe import dedupe_keyed, event_key
from .extractor import extract_events
from .link_verifier import verify_links
from .profiles import ModeProfile
from .ranking import RankOptions, filter_rank_layered
from .topics import coerce_topic

logger = logging.getLogger(__name__)

MIN_PER_CHANNEL = 8
REFILL_NAME_LIMIT = 80


@dataclass
class DiscoveryRequest:
    """Caller-controlled knobs for one discovery run."""

    days: int
    target_per_state: int
    allow_unknown_dates: bool = True

    @classmethod
    def defaults_for(cls, profile: ModeProfile) -> "DiscoveryRequest":
        return cls(
            days=profile.default_days,
            target_per_state=profile.default_target,
            allow_unknown_dates=profile.default_allow_unknown_dates,
        )


def format_us_date(value: datetime) -> str:
    return f"{value.month}/{value.day}/{value.year}"


def per_channel_target(target: int, channel_count: int) -> int:
    return max(MIN_PER_CHANNEL, math.ceil(target / max(1, channel_count)))


class RegionDiscovery:
    """Run the generate -> extract -> rank -> refill -> verify chain for one region."""

    def __init__(
        self,
        region: str,
        profile: ModeProfile,
        request: DiscoveryRequest,
        generator: EventGenerator,
        settings: Settings,
        now: datetime,
        http_client: Optional[httpx.AsyncClient] = None,
    ):
        self.region = region
        self.profile = profile
        self.request = request
        self.generator = generator
        self.settings = settings
        self.now = now
        self.http_client = http_client
        self.today = format_us_date(now)
        self.future_date = format_us_date(now + timedelta(days=request.days))
        self.rank_options = RankOptions(
            days=request.days,
            target=request.target_per_state,
            allow_unknown_dates=request.allow_unknown_dates,
            extended_horizon_days=profile.extended_horizon_days,
            credible_min_score=settings.credible_min_score,
            unmatched_score=settings.unmatched_link_score,
            territory_filter=profile.territory_filter,
        )

    def _prepare(self, text: str) -> List[dict[str, Any]]:
        events = extract_events(text)
        if self.profile.coerce_topics:
            events = [coerce_topic(event) for event in events]
        return events

    async def _collect_channels(self) -> List[dict[str, Any]]:
        want = per_channel_target(self.request.target_per_state, len(self.profile.channels))
        prompts = [
            self.profile.build_prompt(self.region, channel, self.today, self.future_date, self.request.days, want)
            for channel in self.profile.channels
        ]
        settled = await asyncio.gather(
            *(self.generator.complete(prompt) for prompt in prompts),
            return_exceptions=True,
        )
        merged: List[dict[str, Any]] = []
        for channel, outcome in zip(self.profile.channels, settled):
            if isinstance(outcome, BaseException):
                logger.warning(
                    "%s channel %r failed for %s: %s",
                    self.profile.name, channel.name, self.region, outcome,
                )
                continue
            merged.extend(self._prepare(outcome))
        return merged

    def _needs_refill(self, count: int) -> bool:
        threshold = math.floor(self.request.target_per_state * self.settings.refill_ratio)
        return self.profile.refill and count < threshold

    async def _refill(self, filtered: List[dict[str, Any]]) -> List[dict[str, Any]]:
        exclude_names = [
            str(event.get("name"))[:REFILL_NAME_LIMIT] for event in filtered if event.get("name")
        ]
        prompt = build_refill_prompt(
            self.region, self.today, self.future_date, self.request.days,
            exclude_names, self.request.target_per_state,
        )
        try:
            text = await self.generator.complete(prompt)
        except Exception as exc:
            logger.warning("%s refill failed for %s: %s", self.profile.name, self.region, exc)
            return filtered
        return filter_rank_layered(filtered + self._prepare(text), self.rank_options, self.now)

    async def run(self) -> List[dict[str, Any]]:
        merged = await self._collect_channels()
        filtered = filter_rank_layered(merged, self.rank_options, self.now)
        logger.info("%s: %d raw -> %d ranked events", self.region, len(merged), len(filtered))

        if self._needs_refill(len(filtered)):
            filtered = await self._refill(filtered)
            logger.info("%s: %d events after refill", self.region, len(filtered))

        # Final dedupe keys on identity before link repair.
        keys = [event_key(event) for event in filtered]
        if self.profile.verify_links and self.settings.link_verification:
            filtered = await verify_links(
                filtered,
                client=self.http_client,
                timeout=self.settings.link_probe_timeout,
                concurrency=self.settings.link_probe_concurrency,
            )
        return dedupe_keyed(zip(keys, filtered))


async def discover_events(
    profile: ModeProfile,
    request: DiscoveryRequest,
    generator: EventGenerator,
    settings: Optional[Settings] = None,
    now: Optional[datetime] = None,
    http_client: Optional[httpx.AsyncClient] = None,
) -> RegionResults:
    """Return the region map for ``profile``; regions run concurrently.

    Channel and refill failures only shrink a region's list. Anything else
    raised here propagates to the caller.
    """
    settings = settings or load_settings()
    now = now or datetime.now()
    results = empty_result()

    async def _run(region: str) -> None:
        discovery = RegionDiscovery(region, profile, request, generator, settings, now, http_client)
        results[region] = await discovery.run()

    await asyncio.gather(*(_run(region) for region in REGIONS))
    return results
