"""Async client for the text generator that proposes events."""
from __future__ import annotations

import logging
from typing import Optional

from openai import APIStatusError, AsyncOpenAI

from ingest.settings import Settings, get_openai_api_key, load_settings

logger = logging.getLogger(__name__)


class EventGenerator:
    """Send single-prompt chat completions asking for strict JSON."""

    def __init__(self, settings: Optional[Settings] = None, client: Optional[AsyncOpenAI] = None):
        self.settings = settings or load_settings()
        self.client = client or AsyncOpenAI(api_key=get_openai_api_key())

    async def __aenter__(self) -> "EventGenerator":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self.client.close()

    async def complete(self, prompt: str) -> str:
        """Return the raw completion text for ``prompt`` (``"{}"`` when empty)."""
        try:
            resp = await self.client.chat.completions.create(
                model=self.settings.openai_model,
                temperature=self.settings.openai_temperature,
                max_tokens=self.settings.openai_max_tokens,
                response_format={"type": "json_object"},
                messages=[{"role": "user", "content": prompt}],
            )
        except APIStatusError as exc:
            if exc.response.status_code == 429:
                raise RuntimeError(
                    "OpenAI API returned status 429: there's a good chance the account is out of money."
                ) from exc
            raise
        choices = resp.choices or []
        content = choices[0].message.content if choices else None
        logger.debug("Generator returned %d chars", len(content or ""))
        return (content or "").strip() or "{}"
