"""Verify event links over HTTP and repair the ones that do not resolve.

Each event gets its own sequence of probes; the first reachable candidate
URL replaces the model-supplied link, and ``None`` marks the link as
unavailable.
"""
from __future__ import annotations

import asyncio
import logging
import re
from typing import Any, Iterable, List, Optional
from urllib.parse import urlparse

import httpx

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 5.0
DEFAULT_CONCURRENCY = 20
USER_AGENT = "Mozilla/5.0"

ORIGIN_SUFFIXES = ("/events", "/calendar", "/event", "")
CONTACT_SUFFIXES = ("/events", "/calendar", "")

# (pattern matched against name + link, listing page) checked in order.
ORGANIZER_LISTINGS: list[tuple[re.Pattern, str]] = [
    (re.compile(r"\bsba\b|small business administration", re.IGNORECASE), "https://www.sba.gov/events"),
    (re.compile(r"\bscore\b", re.IGNORECASE), "https://www.score.org/events"),
    (re.compile(r"\bsbdc\b|small business development cent", re.IGNORECASE), "https://americassbdc.org/events/"),
]

FREE_MAIL_DOMAINS = frozenset(
    {"gmail.com", "yahoo.com", "hotmail.com", "outlook.com", "aol.com", "icloud.com", "comcast.net"}
)

_EMAIL_RE = re.compile(r"[\w.+-]+@([A-Za-z0-9-]+(?:\.[A-Za-z0-9-]+)+)")


def normalize_link(raw: Any) -> Optional[str]:
    """Return an absolute http(s) URL for ``raw`` or ``None``.

    Scheme-less values such as ``www.example.org/events`` get ``https://``
    prefixed; other schemes (``mailto:``, ``tel:``, ...) are rejected.
    """
    if not isinstance(raw, str):
        return None
    value = raw.strip()
    if not value:
        return None
    try:
        parsed = urlparse(value)
        if parsed.scheme in ("http", "https"):
            return value if parsed.netloc else None
        if parsed.scheme and "." not in parsed.scheme:
            return None
        parsed = urlparse(f"https://{value.lstrip('/')}")
    except ValueError:
        return None
    if parsed.netloc and "." in parsed.netloc and " " not in parsed.netloc:
        return parsed.geturl()
    return None


def origin_of(url: str) -> str:
    parsed = urlparse(url)
    return f"{parsed.scheme}://{parsed.netloc}"


def _unique(urls: Iterable[str], exclude: Iterable[str] = ()) -> List[str]:
    seen = set(exclude)
    out = []
    for url in urls:
        if url and url not in seen:
            seen.add(url)
            out.append(url)
    return out


def primary_candidates(event: dict[str, Any]) -> List[str]:
    """The model's link followed by listing pages on the same origin."""
    link = normalize_link(event.get("link"))
    if not link:
        return []
    origin = origin_of(link)
    return _unique([link] + [origin + suffix for suffix in ORIGIN_SUFFIXES])


def organizer_candidates(event: dict[str, Any]) -> List[str]:
    """Fallback URLs inferred from the organizer's identity."""
    haystack = f"{event.get('name') or ''} {event.get('link') or ''}"
    urls = [listing for pattern, listing in ORGANIZER_LISTINGS if pattern.search(haystack)]
    for domain in _EMAIL_RE.findall(str(event.get("contactInfo") or "")):
        domain = domain.lower()
        if domain in FREE_MAIL_DOMAINS:
            continue
        origin = f"https://{domain}"
        urls.extend(origin + suffix for suffix in CONTACT_SUFFIXES)
    return _unique(urls)


async def _request_ok(client: httpx.AsyncClient, method: str, url: str, timeout: float) -> bool:
    async def _send() -> bool:
        async with client.stream(method, url) as response:
            return response.status_code < 400

    try:
        return await asyncio.wait_for(_send(), timeout=timeout)
    except (httpx.HTTPError, httpx.InvalidURL, asyncio.TimeoutError, ValueError) as exc:
        logger.debug("%s %s failed: %s", method, url, exc)
        return False


async def probe_url(client: httpx.AsyncClient, url: str, timeout: float = DEFAULT_TIMEOUT) -> bool:
    """HEAD ``url``, falling back to GET for servers that refuse HEAD."""
    if await _request_ok(client, "HEAD", url, timeout):
        return True
    return await _request_ok(client, "GET", url, timeout)


async def first_reachable(client: httpx.AsyncClient, urls: Iterable[str], timeout: float = DEFAULT_TIMEOUT) -> Optional[str]:
    for url in urls:
        if await probe_url(client, url, timeout):
            return url
    return None


async def verify_link(client: httpx.AsyncClient, event: dict[str, Any], timeout: float = DEFAULT_TIMEOUT) -> Optional[str]:
    """Return a reachable URL for ``event`` or ``None``."""
    primary = primary_candidates(event)
    found = await first_reachable(client, primary, timeout)
    if found:
        return found
    fallback = _unique(organizer_candidates(event), exclude=primary)
    found = await first_reachable(client, fallback, timeout)
    if found is None:
        logger.debug("No reachable link for %r", event.get("name"))
    return found


def build_probe_client(timeout: float = DEFAULT_TIMEOUT) -> httpx.AsyncClient:
    return httpx.AsyncClient(
        follow_redirects=True,
        timeout=timeout,
        headers={"User-Agent": USER_AGENT},
    )


async def verify_links(
    events: List[dict[str, Any]],
    client: Optional[httpx.AsyncClient] = None,
    timeout: float = DEFAULT_TIMEOUT,
    concurrency: int = DEFAULT_CONCURRENCY,
) -> List[dict[str, Any]]:
    """Replace each event's ``link`` with its verified URL (or ``None``).

    Events are probed concurrently; a failure for one never affects the
    others. Returns new dicts in the input order.
    """
    if not events:
        return []
    semaphore = asyncio.Semaphore(max(1, concurrency))

    async def _verify(http: httpx.AsyncClient, event: dict[str, Any]) -> dict[str, Any]:
        async with semaphore:
            link = await verify_link(http, event, timeout)
        return {**event, "link": link}

    if client is not None:
        return list(await asyncio.gather(*(_verify(client, event) for event in events)))
    async with build_probe_client(timeout) as own_client:
        return list(await asyncio.gather(*(_verify(own_client, event) for event in events)))
