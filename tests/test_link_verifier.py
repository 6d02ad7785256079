import asyncio
import os
import sys

# Ensure the project root is on the import path
sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), "..")))

import httpx

from pipeline.link_verifier import (
    normalize_link,
    organizer_candidates,
    primary_candidates,
    probe_url,
    verify_link,
    verify_links,
)


def make_handler(routes, calls=None):
    """Build a MockTransport handler from ``{(method, url): status}``.

    Unlisted requests get a 404.
    """

    def handler(request):
        key = (request.method, str(request.url))
        if calls is not None:
            calls.append(key)
        return httpx.Response(routes.get(key, 404))

    return handler


def run_with_client(handler, coro_factory):
    async def _main():
        async with httpx.AsyncClient(transport=httpx.MockTransport(handler)) as client:
            return await coro_factory(client)

    return asyncio.run(_main())


def test_normalize_link():
    assert normalize_link("http://a.gov") == "http://a.gov"
    assert normalize_link(" www.example.org/events ") == "https://www.example.org/events"
    assert normalize_link("mailto:someone@example.org") is None
    assert normalize_link("not a link") is None
    assert normalize_link("") is None
    assert normalize_link(None) is None


def test_primary_candidates():
    event = {"link": "https://chamber.example.org/e/42"}
    assert primary_candidates(event) == [
        "https://chamber.example.org/e/42",
        "https://chamber.example.org/events",
        "https://chamber.example.org/calendar",
        "https://chamber.example.org/event",
        "https://chamber.example.org",
    ]
    assert primary_candidates({"link": None}) == []


def test_organizer_candidates():
    event = {
        "name": "SBA Lender Roundtable",
        "contactInfo": "info@bostonchamber.com or jane@gmail.com",
    }
    assert organizer_candidates(event) == [
        "https://www.sba.gov/events",
        "https://bostonchamber.com/events",
        "https://bostonchamber.com/calendar",
        "https://bostonchamber.com",
    ]
    assert organizer_candidates({"name": "Scoreboard Expo"}) == []


def test_head_success_wins_immediately():
    calls = []
    handler = make_handler({("HEAD", "https://a.gov/expo"): 200}, calls)
    result = run_with_client(handler, lambda c: verify_link(c, {"link": "https://a.gov/expo"}))
    assert result == "https://a.gov/expo"
    assert calls == [("HEAD", "https://a.gov/expo")]


def test_get_retry_when_head_is_rejected():
    handler = make_handler({
        ("HEAD", "https://a.gov/expo"): 405,
        ("GET", "https://a.gov/expo"): 200,
    })
    assert run_with_client(handler, lambda c: probe_url(c, "https://a.gov/expo")) is True


def test_falls_back_to_origin_listing_page():
    handler = make_handler({("GET", "https://a.gov/calendar"): 200})
    result = run_with_client(handler, lambda c: verify_link(c, {"link": "https://a.gov/expo-2026"}))
    assert result == "https://a.gov/calendar"


def test_falls_back_to_organizer_candidates():
    handler = make_handler({("HEAD", "https://www.score.org/events"): 200})
    event = {"name": "SCORE Startup Workshop", "link": "https://dead.example.com/x"}
    assert run_with_client(handler, lambda c: verify_link(c, event)) == "https://www.score.org/events"


def test_contact_email_domain_is_tried_without_link():
    handler = make_handler({("HEAD", "https://rutlandchamber.org/calendar"): 200})
    event = {"name": "Business After Hours", "contactInfo": "events@rutlandchamber.org"}
    assert run_with_client(handler, lambda c: verify_link(c, event)) == "https://rutlandchamber.org/calendar"


def test_head_timeout_and_get_failure_returns_none():
    async def handler(request):
        if request.method == "HEAD":
            await asyncio.sleep(5)
        return httpx.Response(500)

    event = {"name": "Networking Breakfast", "link": "https://slow.example.com/breakfast"}
    result = run_with_client(handler, lambda c: verify_link(c, event, timeout=0.05))
    assert result is None


def test_network_errors_are_not_raised():
    def handler(request):
        raise httpx.ConnectError("boom", request=request)

    assert run_with_client(handler, lambda c: verify_link(c, {"link": "https://a.gov"})) is None


def test_verify_links_replaces_links_in_order():
    handler = make_handler({("HEAD", "https://good.org/e"): 200})
    events = [
        {"name": "good", "link": "https://good.org/e"},
        {"name": "bad", "link": "https://bad.org/e"},
        {"name": "none"},
    ]
    out = run_with_client(handler, lambda c: verify_links(events, client=c, timeout=1))
    assert [(e["name"], e["link"]) for e in out] == [
        ("good", "https://good.org/e"),
        ("bad", None),
        ("none", None),
    ]
    assert events[1]["link"] == "https://bad.org/e"


def test_verify_links_empty():
    assert asyncio.run(verify_links([])) == []
