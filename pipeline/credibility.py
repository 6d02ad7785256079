"""Heuristic source-credibility scoring for event links."""
from __future__ import annotations

from typing import Optional

SCORE_OFFICIAL = 3
SCORE_ORGANIZATION = 2
SCORE_LISTING = 1
SCORE_NONE = 0

# (score, keywords) checked top to bottom; first match wins.
CREDIBILITY_RULES: list[tuple[int, tuple[str, ...]]] = [
    (SCORE_OFFICIAL, (".gov", ".edu")),
    (SCORE_OFFICIAL, ("sba.gov", "score.org", "sbdc")),
    (
        SCORE_ORGANIZATION,
        (
            "chamber",
            "association",
            "economic",
            "development",
            "manufactur",
            "technology",
            "startup",
            "accelerator",
            "incubator",
        ),
    ),
    (SCORE_LISTING, ("eventbrite", "meetup", "allevents")),
]


def credibility_score(link: Optional[str], unmatched: int = SCORE_NONE) -> int:
    """Return an integer trust weight for ``link``.

    ``unmatched`` is the score given to a non-empty link that matches none
    of :data:`CREDIBILITY_RULES`; a missing link always scores
    :data:`SCORE_NONE`.
    """
    url = str(link or "").strip().lower()
    if not url:
        return SCORE_NONE
    for score, keywords in CREDIBILITY_RULES:
        if any(keyword in url for keyword in keywords):
            return score
    return unmatched
