"""Tests for the discovery API."""

import json
import os
import sys
from unittest.mock import AsyncMock, patch

import pytest
from fastapi.testclient import TestClient

# Add project root to path
sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), "..")))

from api.main import app

client = TestClient(app)

BUSINESS_URL = "/api/find-opportunities"
PUBLIC_URL = "/api/find-public-events"


class StaticGenerator:
    """Returns the same completion text for every prompt."""

    def __init__(self, text):
        self.text = text
        self.closed = False

    async def __aenter__(self):
        return self

    async def __aexit__(self, *exc_info):
        self.closed = True

    async def complete(self, prompt):
        return self.text


@pytest.fixture(autouse=True)
def no_link_probes(monkeypatch):
    monkeypatch.setenv("LINK_VERIFICATION", "0")


@pytest.fixture
def mock_events():
    return [
        {
            "date": "TBD",
            "city": "Burlington",
            "state": "VT",
            "name": "Vermont Business Expo",
            "link": "https://vermontchamber.com/expo",
        }
    ]


def test_health_endpoint():
    """Test the health check endpoint."""
    response = client.get("/health")
    assert response.status_code == 200
    data = response.json()
    assert data["status"] == "healthy"
    assert "timestamp" in data
    assert "version" in data


def test_root_endpoint():
    """Test the root endpoint returns API info."""
    response = client.get("/")
    assert response.status_code == 200
    data = response.json()
    assert "Event Discovery API" in data["name"]
    assert "docs" in data
    assert "health" in data


def test_find_opportunities_returns_every_region(mock_events):
    text = json.dumps({"events": mock_events})
    with patch("api.main.EventGenerator", return_value=StaticGenerator(text)):
        response = client.post(BUSINESS_URL, json={"targetPerState": 1})

    assert response.status_code == 200
    data = response.json()
    assert set(data) == {"Massachusetts", "Maine", "Rhode Island", "Vermont"}
    assert data["Vermont"][0]["name"] == "Vermont Business Expo"
    assert response.headers["access-control-allow-origin"] == "*"


def test_find_public_events_without_body():
    generator = StaticGenerator("not json at all")
    with patch("api.main.EventGenerator", return_value=generator):
        response = client.post(PUBLIC_URL)

    assert response.status_code == 200
    assert generator.closed
    assert response.json() == {"Massachusetts": [], "Maine": [], "Rhode Island": [], "Vermont": []}


def test_body_fields_override_profile_defaults():
    with patch("api.main.EventGenerator"), \
            patch("api.main.discover_events", new=AsyncMock(return_value={})) as mock_discover:
        response = client.post(
            BUSINESS_URL,
            json={"days": 30, "allowUnknownDates": False, "targetPerState": 5},
        )

    assert response.status_code == 200
    profile, request, _generator = mock_discover.call_args[0]
    assert profile.name == "business"
    assert (request.days, request.allow_unknown_dates, request.target_per_state) == (30, False, 5)


def test_profile_defaults_when_body_empty():
    with patch("api.main.EventGenerator"), \
            patch("api.main.discover_events", new=AsyncMock(return_value={})) as mock_discover:
        client.post(PUBLIC_URL, json={})

    profile, request, _generator = mock_discover.call_args[0]
    assert profile.name == "public"
    assert (request.days, request.allow_unknown_dates, request.target_per_state) == (120, True, 10)


def test_missing_api_key_is_a_500(monkeypatch, tmp_path):
    monkeypatch.delenv("OPENAI_API_KEY", raising=False)
    with patch("ingest.settings.os.path.expanduser", return_value=str(tmp_path / "missing")):
        response = client.post(BUSINESS_URL, json={})

    assert response.status_code == 500
    data = response.json()
    assert data["message"] == "Failed to fetch opportunities"
    assert "API key not found" in data["error"]


def test_unexpected_orchestration_error_is_a_500():
    with patch("api.main.EventGenerator"), \
            patch("api.main.discover_events", new=AsyncMock(side_effect=RuntimeError("boom"))):
        response = client.post(PUBLIC_URL, json={})

    assert response.status_code == 500
    assert response.json() == {"message": "Failed to fetch public events", "error": "boom"}


@pytest.mark.parametrize("url", [BUSINESS_URL, PUBLIC_URL])
def test_options_short_circuits_with_cors_headers(url):
    response = client.options(url)
    assert response.status_code == 200
    assert response.headers["access-control-allow-origin"] == "*"
    assert "POST" in response.headers["access-control-allow-methods"]
    assert response.headers["access-control-allow-headers"] == "Content-Type"


@pytest.mark.parametrize("method", ["get", "put", "delete"])
def test_other_methods_are_rejected(method):
    response = getattr(client, method)(BUSINESS_URL)
    assert response.status_code == 405
    assert response.json() == {"message": "Method not allowed"}


def test_invalid_body_is_rejected():
    response = client.post(BUSINESS_URL, json={"days": 0})
    assert response.status_code == 422


@pytest.mark.parametrize("url", [BUSINESS_URL, PUBLIC_URL])
def test_head_is_rejected_with_cors_headers(url):
    response = client.head(url)
    assert response.status_code == 405
    assert response.headers["access-control-allow-origin"] == "*"


def test_generator_is_closed_when_discovery_fails():
    generator = StaticGenerator("{}")
    with patch("api.main.EventGenerator", return_value=generator), \
            patch("api.main.discover_events", new=AsyncMock(side_effect=RuntimeError("boom"))):
        response = client.post(BUSINESS_URL, json={})

    assert response.status_code == 500
    assert generator.closed
