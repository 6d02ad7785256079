"""Shared constants and data models for the discovery service."""
from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, List

REGIONS = ("Massachusetts", "Maine", "Rhode Island", "Vermont")

# Cities named in prompts to spread results across each state.
CITY_HINTS: Dict[str, List[str]] = {
    "Massachusetts": [
        "Boston", "Cambridge", "Lowell", "Framingham", "New Bedford", "Quincy",
        "Fall River", "Brockton", "Lynn", "Plymouth", "Newton", "Somerville",
        "Salem", "Gloucester", "Haverhill", "Hyannis",
    ],
    "Maine": [
        "Portland", "Bangor", "Lewiston", "Augusta", "Auburn", "Biddeford",
        "South Portland", "Brunswick", "Saco", "Sanford",
    ],
    "Rhode Island": [
        "Providence", "Warwick", "Cranston", "Pawtucket", "Newport",
        "East Providence", "North Providence", "Woonsocket",
    ],
    "Vermont": [
        "Burlington", "South Burlington", "Rutland", "Montpelier", "Brattleboro",
        "St. Albans", "Bennington", "Colchester", "Essex",
    ],
}

EventRecord = Dict[str, Any]
RegionResults = Dict[str, List[EventRecord]]


@dataclass(frozen=True)
class Channel:
    """A thematic prompt variant issued once per region."""

    name: str
    focus: str


def empty_result() -> RegionResults:
    """Return a fresh region map with every region present."""
    return {region: [] for region in REGIONS}
