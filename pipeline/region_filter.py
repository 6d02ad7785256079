"""Service-territory filter for Massachusetts business events."""
from __future__ import annotations

from typing import Any

MASSACHUSETTS_STATE_VALUES = frozenset({"ma", "mass", "mass.", "massachusetts"})

# Counties served in Massachusetts.
ALLOWED_COUNTIES = (
    "barnstable",
    "bristol",
    "dukes",
    "essex",
    "middlesex",
    "nantucket",
    "norfolk",
    "plymouth",
    "suffolk",
)

# Central and western Massachusetts cities outside the territory.
EXCLUDED_CITIES = frozenset(
    {
        "worcester",
        "springfield",
        "pittsfield",
        "northampton",
        "amherst",
        "holyoke",
        "chicopee",
        "westfield",
        "west springfield",
        "agawam",
        "fitchburg",
        "leominster",
        "gardner",
        "greenfield",
        "north adams",
        "shrewsbury",
        "southbridge",
        "webster",
        "great barrington",
    }
)


def _norm(value: Any) -> str:
    return str(value or "").strip().lower()


def is_massachusetts(state: Any) -> bool:
    return _norm(state) in MASSACHUSETTS_STATE_VALUES


def in_service_territory(event: dict[str, Any]) -> bool:
    """Decide whether ``event`` belongs to the served territory.

    Only Massachusetts events are checked. A supplied county is
    authoritative; without one, the city is compared against
    :data:`EXCLUDED_CITIES` and anything not listed is kept.
    """
    if not is_massachusetts(event.get("state")):
        return True
    county = _norm(event.get("county"))
    if county:
        return any(allowed in county for allowed in ALLOWED_COUNTIES)
    return _norm(event.get("city")) not in EXCLUDED_CITIES


def filter_service_territory(events: list[dict[str, Any]]) -> list[dict[str, Any]]:
    return [event for event in events if in_service_territory(event)]
