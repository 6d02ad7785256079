"""FastAPI application for the BBB event discovery service."""
import logging
from datetime import datetime, timezone
from typing import Optional

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, Response
from pydantic import BaseModel, ConfigDict, Field

from ingest.generator_client import EventGenerator
from ingest.settings import load_settings
from pipeline.orchestrator import DiscoveryRequest, discover_events
from pipeline.profiles import BUSINESS, PUBLIC, ModeProfile

logger = logging.getLogger(__name__)

VERSION = "1.0.0"

app = FastAPI(
    title="BBB Event Discovery API",
    description="Discover business and community events across Massachusetts, Maine, Rhode Island and Vermont",
    version=VERSION,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_methods=["GET", "POST", "OPTIONS"],
    allow_headers=["Content-Type"],
)

CORS_HEADERS = {
    "Access-Control-Allow-Origin": "*",
    "Access-Control-Allow-Methods": "GET, POST, OPTIONS",
    "Access-Control-Allow-Headers": "Content-Type",
}

REJECTED_METHODS = ["GET", "HEAD", "PUT", "PATCH", "DELETE"]


class HealthResponse(BaseModel):
    """Health check response model."""
    status: str
    timestamp: str
    version: str


class DiscoveryBody(BaseModel):
    """Optional knobs accepted by both discovery endpoints."""
    model_config = ConfigDict(populate_by_name=True)

    days: Optional[int] = Field(default=None, gt=0)
    allow_unknown_dates: Optional[bool] = Field(default=None, alias="allowUnknownDates")
    target_per_state: Optional[int] = Field(default=None, gt=0, alias="targetPerState")


def _build_request(profile: ModeProfile, body: Optional[DiscoveryBody]) -> DiscoveryRequest:
    request = DiscoveryRequest.defaults_for(profile)
    if body is None:
        return request
    if body.days is not None:
        request.days = body.days
    if body.allow_unknown_dates is not None:
        request.allow_unknown_dates = body.allow_unknown_dates
    if body.target_per_state is not None:
        request.target_per_state = body.target_per_state
    return request


async def _run_discovery(profile: ModeProfile, body: Optional[DiscoveryBody]) -> JSONResponse:
    """Run one discovery request; any failure becomes a 500 error envelope."""
    request = _build_request(profile, body)
    try:
        settings = load_settings()
        async with EventGenerator(settings) as generator:
            results = await discover_events(profile, request, generator, settings=settings)
    except Exception as exc:
        logger.exception("%s discovery failed", profile.name)
        return JSONResponse(
            status_code=500,
            content={"message": profile.error_message, "error": str(exc)},
            headers=CORS_HEADERS,
        )
    return JSONResponse(content=results, headers=CORS_HEADERS)


def _options_response() -> Response:
    return Response(status_code=200, headers=CORS_HEADERS)


def _method_not_allowed() -> JSONResponse:
    return JSONResponse(status_code=405, content={"message": "Method not allowed"}, headers=CORS_HEADERS)


@app.get("/health", response_model=HealthResponse)
async def health_check():
    """Health check endpoint."""
    return HealthResponse(
        status="healthy",
        timestamp=datetime.now(timezone.utc).isoformat(),
        version=VERSION,
    )


@app.post("/api/find-opportunities")
async def find_opportunities(body: Optional[DiscoveryBody] = None):
    """
    Discover business-focused events (chamber mixers, expos, workshops).

    Body fields are all optional: ``days`` (window size), ``allowUnknownDates``
    and ``targetPerState``. Returns a map of region name to event list.
    """
    return await _run_discovery(BUSINESS, body)


@app.post("/api/find-public-events")
async def find_public_events(body: Optional[DiscoveryBody] = None):
    """Discover public/community events with a topic from the fixed taxonomy."""
    return await _run_discovery(PUBLIC, body)


@app.options("/api/find-opportunities")
@app.options("/api/find-public-events")
async def discovery_options():
    return _options_response()


@app.api_route("/api/find-opportunities", methods=REJECTED_METHODS)
@app.api_route("/api/find-public-events", methods=REJECTED_METHODS)
async def discovery_wrong_method():
    return _method_not_allowed()


@app.get("/")
async def root():
    """Root endpoint with API information."""
    return {
        "name": "BBB Event Discovery API",
        "version": VERSION,
        "docs": "/docs",
        "health": "/health",
    }


if __name__ == "__main__":
    import uvicorn
    settings = load_settings()
    uvicorn.run(app, host=settings.api_host, port=settings.api_port)
