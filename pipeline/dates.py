"""Forgiving parsing for the free-text date labels models produce.

Every helper takes the evaluation instant ``now`` explicitly so the whole
pipeline works against one clock reading per request.
"""
from __future__ import annotations

import re
from datetime import datetime, timedelta
from typing import Optional

from dateutil import parser as date_parser

_ORDINAL_RE = re.compile(r"(\d+)(st|nd|rd|th)\b", re.IGNORECASE)
_RANGE_RE = re.compile(r"\s?[-–—]\s?\d{1,2}(?=,|\s|$)")
_ISO_DATE_RE = re.compile(r"^\s*\d{4}-\d{2}-\d{2}")
_YEAR_RE = re.compile(r"\b\d{4}\b")
_MONTH_RE = re.compile(
    r"\b(jan(uary)?|feb(ruary)?|mar(ch)?|apr(il)?|may|june?|july?|aug(ust)?|"
    r"sep(t(ember)?)?|oct(ober)?|nov(ember)?|dec(ember)?)\b\.?",
    re.IGNORECASE,
)
_NUMERIC_MONTH_DAY_RE = re.compile(r"^\s*\d{1,2}[/-]\d{1,2}\s*$")
_DIGIT_RE = re.compile(r"\d")

# (pattern, replacement) pairs applied in order.
ABBREVIATIONS = [
    (re.compile(r"\bSept\b\.?", re.IGNORECASE), "Sep"),
    (re.compile(r"\bTues\b\.?", re.IGNORECASE), "Tue"),
    (re.compile(r"\bThurs\b\.?", re.IGNORECASE), "Thu"),
]


def strip_ordinals(label: str) -> str:
    """``"March 1st"`` -> ``"March 1"``."""
    return _ORDINAL_RE.sub(r"\1", label)


def collapse_range(label: str) -> str:
    """Keep only the start of a day range: ``"Jan 5-7, 2025"`` -> ``"Jan 5, 2025"``."""
    if _ISO_DATE_RE.match(label) or _NUMERIC_MONTH_DAY_RE.match(label):
        return label
    return _RANGE_RE.sub("", label, count=1)


def normalize_abbreviations(label: str) -> str:
    for pattern, replacement in ABBREVIATIONS:
        label = pattern.sub(replacement, label)
    return label


def ensure_year(label: str, now: datetime) -> str:
    """Append ``now``'s year when ``label`` carries a month but no year."""
    if _YEAR_RE.search(label):
        return label
    if _MONTH_RE.search(label):
        return f"{label}, {now.year}"
    if _NUMERIC_MONTH_DAY_RE.match(label):
        return f"{label.strip().replace('-', '/')}/{now.year}"
    return label


def sanitize_date_label(label: str, now: datetime) -> str:
    label = strip_ordinals(label)
    label = collapse_range(label)
    label = normalize_abbreviations(label)
    return ensure_year(label, now)


def parse_event_date(label: Optional[str], now: datetime) -> Optional[datetime]:
    """Parse a model-supplied date label into a naive local ``datetime``.

    Returns ``None`` for anything that is not a real calendar date
    ("TBD", "Ongoing", "Every Tuesday", malformed strings, ...).
    """
    if not isinstance(label, str) or not label.strip():
        return None
    cleaned = sanitize_date_label(label.strip(), now)
    # Weekday-only labels ("Tuesday", "Saturdays") name no calendar date.
    if not _DIGIT_RE.search(cleaned) and not _MONTH_RE.search(cleaned):
        return None
    try:
        parsed = date_parser.parse(cleaned, default=datetime(now.year, 1, 1))
    except (ValueError, OverflowError):
        return None
    if parsed.tzinfo is not None:
        parsed = parsed.astimezone().replace(tzinfo=None)
    return parsed


def within_next_days(date: datetime, days: int, now: datetime) -> bool:
    """True when ``date`` falls in the half-open window ``(now, now + days]``."""
    return now < date <= now + timedelta(days=days)
