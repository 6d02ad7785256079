"""Closed topic taxonomy for public/community events."""
from __future__ import annotations

from typing import Any

OTHER_TOPIC = "Other"

TAXONOMY = (
    "Consumer Education",
    "Scam Prevention",
    "Shredding/Identity Theft",
    "Senior Outreach",
    "Military/Veterans",
    "Youth/Students",
    "Community Festival/Fair",
    "Parade/Civic",
    "Job/Career",
    "Housing/Home Improvement",
    "Health/Wellness",
    "Sustainability",
    "Finance/Budgeting",
    "Technology/Cyber",
    OTHER_TOPIC,
)


def coerce_topic(event: dict[str, Any]) -> dict[str, Any]:
    """Force a present ``topic`` into :data:`TAXONOMY`, mutating ``event``."""
    topic = event.get("topic")
    if not topic:
        return event
    topic = str(topic).strip()
    event["topic"] = topic if topic in TAXONOMY else OTHER_TOPIC
    return event
