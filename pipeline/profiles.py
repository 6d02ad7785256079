"""Discovery modes: business opportunities and public/community events."""
from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Tuple

from ingest.prompts import build_channel_prompt, build_public_prompt
from ingest.schemas import Channel

PromptBuilder = Callable[[str, Channel, str, str, int, int], str]


@dataclass(frozen=True)
class ModeProfile:
    """Everything that differs between the two discovery endpoints."""

    name: str
    channels: Tuple[Channel, ...]
    build_prompt: PromptBuilder
    default_days: int
    default_target: int
    default_allow_unknown_dates: bool = True
    extended_horizon_days: int = 240
    territory_filter: bool = False
    coerce_topics: bool = False
    refill: bool = True
    verify_links: bool = True
    error_message: str = "Failed to fetch events"


BUSINESS_CHANNELS = (
    Channel(
        name="Chamber & Networking",
        focus="chamber of commerce mixers, networking breakfasts, business after-hours, member expos, young professionals",
    ),
    Channel(
        name="Conferences/Trade Shows/Expos",
        focus=(
            "industry conferences, trade shows, regional business expos, sector-specific showcases "
            "(manufacturing, construction, retail, hospitality, tech)"
        ),
    ),
    Channel(
        name="Workshops/Training/Programs",
        focus=(
            "SBA/SBDC/SCORE workshops, university incubators/accelerators, economic development programs, "
            "procurement/government contracting"
        ),
    ),
)

PUBLIC_CHANNELS = (
    Channel(
        name="Community & Civic",
        focus=(
            "festivals, fairs, town days, parades, library/community programs, university public lectures, "
            "consumer shred days, scam-prevention talks, senior expos, farmers markets"
        ),
    ),
)

BUSINESS = ModeProfile(
    name="business",
    channels=BUSINESS_CHANNELS,
    build_prompt=build_channel_prompt,
    default_days=180,
    default_target=24,
    extended_horizon_days=240,
    territory_filter=True,
    error_message="Failed to fetch opportunities",
)

PUBLIC = ModeProfile(
    name="public",
    channels=PUBLIC_CHANNELS,
    build_prompt=build_public_prompt,
    default_days=120,
    default_target=10,
    extended_horizon_days=180,
    coerce_topics=True,
    error_message="Failed to fetch public events",
)

PROFILES = {profile.name: profile for profile in (BUSINESS, PUBLIC)}
