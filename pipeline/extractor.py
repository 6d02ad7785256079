"""Recover an ``events`` list from loosely formatted model output."""
from __future__ import annotations

import json
import re
from typing import Any, Callable, List, Optional

_FENCE_RE = re.compile(r"```(?:json)?", re.IGNORECASE)
_EVENTS_KEY_RE = re.compile(r'"events"\s*:\s*(?=\[)')
_EVENTS_SPAN_RE = re.compile(r'"events"\s*:\s*(\[[\s\S]*?\])')


def strip_code_fences(text: str) -> str:
    """Remove markdown code-fence markers, keeping what they wrap."""
    return _FENCE_RE.sub("", text or "").strip()


def _load(candidate: str) -> Any:
    try:
        return json.loads(candidate)
    except (TypeError, ValueError):
        return None


def _parse_whole(text: str) -> Any:
    return _load(text)


def _parse_brace_span(text: str) -> Any:
    start = text.find("{")
    end = text.rfind("}")
    if start == -1 or end <= start:
        return None
    return _load(text[start:end + 1])


def _parse_events_array(text: str) -> Any:
    match = _EVENTS_KEY_RE.search(text)
    if match:
        try:
            array, _ = json.JSONDecoder().raw_decode(text, match.end())
            return {"events": array}
        except ValueError:
            pass
    # Truncated output: take the shortest bracketed span that still parses.
    span = _EVENTS_SPAN_RE.search(text)
    if span:
        array = _load(span.group(1))
        if array is not None:
            return {"events": array}
    return None


# Tried in order; the first step that yields a value wins.
PARSE_STEPS: List[Callable[[str], Any]] = [
    _parse_whole,
    _parse_brace_span,
    _parse_events_array,
]


def extract_json(text: Optional[str]) -> dict[str, Any]:
    """Return the best-effort JSON object found in ``text``.

    An empty dict is returned when nothing parses; this function never
    raises.
    """
    if not isinstance(text, str):
        return {}
    cleaned = strip_code_fences(text)
    for step in PARSE_STEPS:
        parsed = step(cleaned)
        if isinstance(parsed, dict):
            return parsed
        if isinstance(parsed, list):
            return {"events": parsed}
    return {}


def extract_events(text: Optional[str]) -> List[dict[str, Any]]:
    """Return the list of event dicts contained in ``text``.

    Entries that are not JSON objects are discarded.
    """
    events = extract_json(text).get("events")
    if not isinstance(events, list):
        return []
    return [item for item in events if isinstance(item, dict)]
