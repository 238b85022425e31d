"""Configuration management for Support Panorama.

This module provides centralized configuration management using pydantic-settings.
All configuration is loaded from environment variables or .env files with
validation. Credentials are optional at load time so the service can start
and report what is missing per request.
"""

from typing import Optional

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

VALID_LOG_LEVELS = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
DEFAULT_GEMINI_MODEL = "gemini-2.5-flash"


class Settings(BaseSettings):
    """Application settings loaded from environment variables.

    Attributes:
        # Slack API Configuration (2 fields)
        slack_bot_token: Bot token used to read the channel history
        slack_channel_id: ID of the support channel to read

        # Gemini API Configuration (2 fields)
        gemini_api_key: API key for the Gemini generateContent endpoint
        gemini_model: Model name used for classification

        # API Configuration (3 fields)
        api_host: Host to bind FastAPI server
        port: Port for FastAPI server
        api_reload: Enable auto-reload for development

        # Application Configuration (2 fields)
        log_level: Logging level (DEBUG, INFO, WARNING, ERROR)
        request_timeout_seconds: Timeout applied to every upstream request
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Slack API Configuration (2 fields)
    slack_bot_token: Optional[str] = Field(
        default=None,
        description="Slack bot token (xoxb-...)",
    )
    slack_channel_id: Optional[str] = Field(
        default=None,
        description="Slack channel ID to read messages from",
    )

    # Gemini API Configuration (2 fields)
    gemini_api_key: Optional[str] = Field(
        default=None,
        description="API key for Google Gemini",
    )
    gemini_model: str = Field(
        default=DEFAULT_GEMINI_MODEL,
        description="Gemini model used for message classification",
    )

    # API Configuration (3 fields)
    api_host: str = Field(
        default="0.0.0.0",
        description="Host to bind FastAPI server",
    )
    port: int = Field(
        default=3000,
        description="Port for FastAPI server",
        ge=1,
        le=65535,
    )
    api_reload: bool = Field(
        default=False,
        description="Enable auto-reload for development",
    )

    # Application Configuration (2 fields)
    log_level: str = Field(
        default="INFO",
        description="Logging level (DEBUG, INFO, WARNING, ERROR)",
    )
    request_timeout_seconds: float = Field(
        default=30.0,
        description="Timeout for upstream HTTP requests",
        gt=0,
    )

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Validate and normalize the log level name.

        Args:
            v: The log_level value

        Returns:
            The upper-cased level name

        Raises:
            ValueError: If the level is not a standard logging level
        """
        level = v.upper()
        if level not in VALID_LOG_LEVELS:
            raise ValueError(f"log_level must be one of {VALID_LOG_LEVELS}")
        return level

    @field_validator("slack_bot_token", "slack_channel_id", "gemini_api_key")
    @classmethod
    def blank_to_none(cls, v: Optional[str]) -> Optional[str]:
        """Treat empty or whitespace-only secrets as unset."""
        if v is None or not v.strip():
            return None
        return v.strip()
