"""Identity keys and de-duplication for event records."""
from __future__ import annotations

from typing import Any, Iterable


def normalize_link(link: Any) -> str:
    if not isinstance(link, str):
        return ""
    return link.strip().lower().rstrip("/")


def event_key(event: dict[str, Any]) -> str:
    """Return the identity key for ``event`` or ``""`` when it has none.

    The normalized link wins whenever present. Otherwise the key is built
    from ``name|city|state|date`` (absent parts skipped), and a record
    without a name cannot be identified.
    """
    link = normalize_link(event.get("link"))
    if link:
        return link
    name = str(event.get("name") or "").strip()
    if not name:
        return ""
    parts = [name] + [str(event.get(field) or "").strip() for field in ("city", "state", "date")]
    return "|".join(part for part in parts if part).lower()


def dedupe_events(events: Iterable[dict[str, Any]]) -> list[dict[str, Any]]:
    """Drop repeats and unidentifiable records, keeping first occurrences."""
    return dedupe_keyed((event_key(event), event) for event in events)


def dedupe_keyed(pairs: Iterable[tuple[str, dict[str, Any]]]) -> list[dict[str, Any]]:
    """Like :func:`dedupe_events` but with identity keys computed by the caller.

    Used when a record's fields changed after its identity was taken.
    """
    seen: set[str] = set()
    out: list[dict[str, Any]] = []
    for key, event in pairs:
        if not key or key in seen:
            continue
        seen.add(key)
        out.append(event)
    return out
