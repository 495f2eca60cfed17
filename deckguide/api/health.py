"""
Health check endpoints.

Provides liveness and readiness probes. Readiness requires a configured
Gemini API key, since no guide can be generated without one.
"""

from fastapi import APIRouter, Response, status
from pydantic import BaseModel

from deckguide.config import settings

router = APIRouter(tags=["health"])


class HealthResponse(BaseModel):
    """Health check response."""

    status: str
    generator: str | None = None


@router.get("/health", response_model=HealthResponse)
async def health() -> HealthResponse:
    """
    Liveness probe.

    Returns healthy if the service is running.
    Does not check dependencies.
    """
    return HealthResponse(status="healthy")


@router.get(
    "/ready",
    response_model=HealthResponse,
    responses={503: {"model": HealthResponse}},
)
async def ready(response: Response) -> HealthResponse:
    """
    Readiness probe.

    Returns 503 if the Gemini API key is not configured.
    """
    if not settings.gemini_api_key:
        response.status_code = status.HTTP_503_SERVICE_UNAVAILABLE
        return HealthResponse(status="not ready", generator="unconfigured")

    return HealthResponse(status="ready", generator="configured")
