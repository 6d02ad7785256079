"""Tiered filtering and ranking of model-proposed events."""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, List

from .credibility import SCORE_NONE, SCORE_ORGANIZATION, credibility_score
from .dates import parse_event_date, within_next_days
from .dedupe import dedupe_events, event_key
from .region_filter import filter_service_territory

logger = logging.getLogger(__name__)

TIER_IN_WINDOW = "in_window"
TIER_EXTENDED = "extended"
TIER_UNKNOWN_DATE = "unknown_date"
TIER_CREDIBLE = "credible"

TIER_ORDER = (TIER_IN_WINDOW, TIER_EXTENDED, TIER_UNKNOWN_DATE, TIER_CREDIBLE)


@dataclass
class RankOptions:
    """Knobs for :func:`filter_rank_layered`."""

    days: int
    target: int
    allow_unknown_dates: bool = True
    extended_horizon_days: int = 240
    credible_min_score: int = SCORE_ORGANIZATION
    unmatched_score: int = SCORE_NONE
    territory_filter: bool = False


@dataclass
class Tiers:
    in_window: List[dict] = field(default_factory=list)
    extended: List[dict] = field(default_factory=list)
    unknown_date: List[dict] = field(default_factory=list)
    credible: List[dict] = field(default_factory=list)

    def counts(self) -> Dict[str, int]:
        return {name: len(getattr(self, name)) for name in TIER_ORDER}


def classify_events(events: List[dict[str, Any]], options: RankOptions, now: datetime) -> Tiers:
    """Place each event in at most one tier; events fitting none are dropped."""
    tiers = Tiers()
    for event in events:
        date = parse_event_date(event.get("date"), now)
        if date is not None:
            if within_next_days(date, options.days, now):
                tiers.in_window.append(event)
            elif within_next_days(date, options.extended_horizon_days, now):
                tiers.extended.append(event)
        elif options.allow_unknown_dates:
            tiers.unknown_date.append(event)
        elif credibility_score(event.get("link"), options.unmatched_score) >= options.credible_min_score:
            tiers.credible.append(event)
    return tiers


def sort_by_credibility(events: List[dict[str, Any]], unmatched_score: int = SCORE_NONE) -> List[dict[str, Any]]:
    """Stable sort, most credible link first."""
    return sorted(
        events,
        key=lambda event: credibility_score(event.get("link"), unmatched_score),
        reverse=True,
    )


def filter_rank_layered(events: List[dict[str, Any]], options: RankOptions, now: datetime) -> List[dict[str, Any]]:
    """Return deduplicated events ordered tier by tier.

    Lower tiers are only consulted while the running total is below
    ``options.target``. Dated tiers are appended whole, so the result may
    exceed the target; the unknown-date tiers only fill the remaining gap.
    """
    candidates = [event for event in events if isinstance(event, dict)]
    if options.territory_filter:
        candidates = filter_service_territory(candidates)

    tiers = classify_events(candidates, options, now)
    logger.debug("Tier counts: %s", tiers.counts())

    out = dedupe_events(sort_by_credibility(tiers.in_window, options.unmatched_score))
    if len(out) < options.target:
        out = dedupe_events(out + sort_by_credibility(tiers.extended, options.unmatched_score))
    for tier in (tiers.unknown_date, tiers.credible):
        if len(out) >= options.target:
            break
        out = _fill(out, sort_by_credibility(tier, options.unmatched_score), options.target)
    return out


def _fill(out: List[dict[str, Any]], extra: List[dict[str, Any]], target: int) -> List[dict[str, Any]]:
    seen = {event_key(event) for event in out}
    filled = list(out)
    for event in extra:
        if len(filled) >= target:
            break
        key = event_key(event)
        if not key or key in seen:
            continue
        seen.add(key)
        filled.append(event)
    return filled
