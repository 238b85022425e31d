"""Health check endpoint for monitoring API status.

This module provides a simple health check endpoint that reports:
- API is running
- Which upstream credentials are configured

No upstream calls are made.
"""

from fastapi import APIRouter, Depends

from panorama.api.dependencies import get_settings
from panorama.api.models import HealthResponse
from panorama.core.config import Settings

router = APIRouter()


@router.get("/health", response_model=HealthResponse, tags=["Health"])
def health_check(settings: Settings = Depends(get_settings)) -> HealthResponse:
    """Check API health and configuration.

    Slack credentials are required to serve messages, so the service is
    "degraded" without them. A missing Gemini key only disables analysis.

    Example:
        GET /health
        Response:
        {
            "status": "healthy",
            "slack_configured": true,
            "gemini_configured": true,
            "timestamp": "2025-10-25T10:00:00Z"
        }
    """
    slack_configured = bool(settings.slack_bot_token and settings.slack_channel_id)

    return HealthResponse(
        status="healthy" if slack_configured else "degraded",
        slack_configured=slack_configured,
        gemini_configured=bool(settings.gemini_api_key),
    )
