"""Prompt builders for the event generator.

The pipeline treats the prompt text as opaque; these only need to ask for
``{"events": [...]}`` in the record shape the rest of the code reads.
"""
from __future__ import annotations

from typing import Iterable

from ingest.schemas import CITY_HINTS, Channel
from pipeline.topics import TAXONOMY

STATE_CODES = "MA|ME|RI|VT"

BUSINESS_EVENT_SHAPE = """{
  "events": [
    {
      "date": "Month Day, Year",
      "time": "optional, e.g. 2:00 PM - 5:00 PM",
      "city": "City",
      "county": "County (required for Massachusetts)",
      "state": "%s",
      "location": "Venue or address",
      "cost": "Free or $amount",
      "name": "Event Name",
      "audienceType": "Small business owners, professionals, contractors, retailers, manufacturers, start-ups, etc.",
      "contactInfo": "email@domain.com or null",
      "link": "https://official-source",
      "whyBBBShouldBeThere": "Short reason"
    }
  ]
}""" % STATE_CODES

PUBLIC_EVENT_SHAPE = """{
  "events": [
    {
      "date": "Month Day, Year",
      "time": "optional, e.g. 10:00 AM - 3:00 PM",
      "city": "City",
      "state": "%s",
      "location": "Venue or address",
      "cost": "Free or $amount",
      "name": "Event Name",
      "topic": "One of: %s",
      "contactInfo": "email@domain.com or null",
      "link": "https://official-source",
      "whyBBBShouldBeThere": "Short reason"
    }
  ]
}""" % (STATE_CODES, ", ".join(TAXONOMY))

MASSACHUSETTS_TERRITORY_NOTE = (
    "- Massachusetts: only Barnstable, Bristol, Dukes, Essex, Middlesex, Nantucket, "
    "Norfolk, Plymouth and Suffolk counties. Always include the county.\n"
)


def _cities(region: str, limit: int = 10) -> str:
    return ", ".join(CITY_HINTS.get(region, [])[:limit]) or "n/a"


def build_channel_prompt(
    region: str,
    channel: Channel,
    today: str,
    future_date: str,
    days: int,
    per_channel_target: int,
) -> str:
    """Prompt for one business-events channel in one region."""
    territory = MASSACHUSETTS_TERRITORY_NOTE if region == "Massachusetts" else ""
    return f"""You are assisting the Better Business Bureau.

Return ONLY strict JSON (no prose, no markdown). Shape:
{BUSINESS_EVENT_SHAPE}

STATE: {region}
HORIZON: AFTER {today} and BEFORE {future_date} (next {days} days)
FOCUS: {channel.name} - {channel.focus}
CITY HINTS (for coverage, optional): {_cities(region)}

Rules:
- Prefer official sources (.gov, chambers, associations, SBA/SBDC/SCORE, universities, economic development).
- Events must be real; if unsure, omit it.
- Use proper state code ({STATE_CODES}).
{territory}- Return up to {per_channel_target} events for this channel."""


def build_public_prompt(
    region: str,
    channel: Channel,
    today: str,
    future_date: str,
    days: int,
    per_channel_target: int,
) -> str:
    """Prompt for public/community events in one region."""
    return f"""You are assisting the Better Business Bureau.

Return ONLY strict JSON (no prose, no markdown). Shape:
{PUBLIC_EVENT_SHAPE}

TASK: List up to {per_channel_target} REAL **public/community** events in {region} occurring AFTER {today} and BEFORE {future_date} (next {days} days).
Event types: {channel.focus}
CITY HINTS (for coverage, optional): {_cities(region)}

Rules:
- Prefer official sources (.gov, .edu, libraries, universities, chambers, tourism boards, city sites).
- If unsure an event is real, OMIT it.
- "topic" MUST be chosen from the list above; if uncertain, pick "Other".
- Use "Free" or a $ value for cost if known; otherwise omit the field.
- Use proper state code ({STATE_CODES}) for "state".
- If you cannot find {per_channel_target}, return as many as you can without inventing."""


def build_refill_prompt(
    region: str,
    today: str,
    future_date: str,
    days: int,
    exclude_names: Iterable[str],
    want: int,
) -> str:
    """Ask for more events in ``region`` that are not already collected."""
    excluded = " | ".join(exclude_names) or "(none)"
    return f"""You are assisting the Better Business Bureau.

Return ONLY strict JSON:
{{ "events": [ /* same shape as before */ ] }}

STATE: {region}
HORIZON: AFTER {today} and BEFORE {future_date} (next {days} days)
TASK: Find {want} ADDITIONAL real events NOT in this list (case-insensitive):
{excluded}

Prioritize official sources (.gov, chambers, associations, SBA/SBDC/SCORE, economic development, universities).
Return as many as you can up to {want}."""
