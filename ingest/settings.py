"""Runtime settings read from the environment (and an optional ``.env``)."""
from __future__ import annotations

import os
from dataclasses import dataclass

from dotenv import load_dotenv

load_dotenv()


def _env_bool(name: str, default: bool) -> bool:
    value = os.getenv(name)
    if value is None or value.strip() == "":
        return default
    return value.strip().lower() not in ("0", "false", "no", "off")


@dataclass(frozen=True)
class Settings:
    """Generator, ranking, link-probe and server configuration."""

    openai_model: str = "gpt-4o-mini"
    openai_temperature: float = 0.2
    openai_max_tokens: int = 4500
    link_verification: bool = True
    link_probe_timeout: float = 5.0
    link_probe_concurrency: int = 20
    credible_min_score: int = 2
    unmatched_link_score: int = 0
    refill_ratio: float = 0.8
    api_host: str = "0.0.0.0"
    api_port: int = 8001


def load_settings() -> Settings:
    """Build :class:`Settings` from environment variables."""
    return Settings(
        openai_model=os.getenv("OPENAI_MODEL", "gpt-4o-mini"),
        openai_temperature=float(os.getenv("OPENAI_TEMPERATURE", "0.2")),
        openai_max_tokens=int(os.getenv("OPENAI_MAX_TOKENS", "4500")),
        link_verification=_env_bool("LINK_VERIFICATION", True),
        link_probe_timeout=float(os.getenv("LINK_PROBE_TIMEOUT", "5.0")),
        link_probe_concurrency=int(os.getenv("LINK_PROBE_CONCURRENCY", "20")),
        credible_min_score=int(os.getenv("CREDIBLE_MIN_SCORE", "2")),
        unmatched_link_score=int(os.getenv("UNMATCHED_LINK_SCORE", "0")),
        refill_ratio=float(os.getenv("REFILL_RATIO", "0.8")),
        api_host=os.getenv("API_HOST", "0.0.0.0"),
        api_port=int(os.getenv("API_PORT", "8001")),
    )


def get_openai_api_key() -> str:
    """Return the OpenAI key from the environment or ``~/.secret_keys``."""
    api_key = os.getenv("OPENAI_API_KEY")

    if not api_key:
        try:
            with open(os.path.expanduser("~/.secret_keys"), "r") as f:
                for line in f:
                    if line.startswith("OPENAI_API_KEY="):
                        api_key = line.split("=", 1)[1].strip()
                        break
        except FileNotFoundError:
            pass

    if not api_key:
        raise ValueError("OpenAI API key not found in environment or ~/.secret_keys")

    return api_key
