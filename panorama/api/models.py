"""Pydantic models for API responses.

These models define the schema for API responses and ensure
type safety and validation for client applications.
"""

from datetime import datetime, timezone

from pydantic import BaseModel, Field


class EnrichedMessageResponse(BaseModel):
    """Response model for a single classified message."""

    id: str = Field(..., description="Slack message timestamp, used as the message ID")
    author: str = Field(..., description="Slack user ID of the author")
    text: str = Field(..., description="Message text content")
    timestamp: str = Field(..., description="ISO-8601 UTC time the message was sent")
    category: str = Field(..., description="Message category")
    topic: str = Field(..., description="Short message topic")


class ErrorResponse(BaseModel):
    """Response model for a failed request."""

    error: str = Field(..., description="Error summary")
    details: str = Field(..., description="Error detail")


class HealthResponse(BaseModel):
    """Response model for health check endpoint."""

    status: str = Field(..., description="Health status (healthy/degraded)")
    slack_configured: bool = Field(..., description="Whether Slack credentials are set")
    gemini_configured: bool = Field(..., description="Whether the Gemini API key is set")
    timestamp: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc),
        description="Health check timestamp",
    )
