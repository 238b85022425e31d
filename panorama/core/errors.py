"""Errors raised by the message retrieval side of the pipeline.

Classification failures never surface as exceptions; they are absorbed by the
classifier and replaced with a fallback classification.
"""

from typing import Optional


class PanoramaError(Exception):
    """Base class for errors that abort a panorama request."""

    def __init__(self, details: str) -> None:
        super().__init__(details)
        self.details = details


class ConfigurationError(PanoramaError):
    """A required credential or identifier is missing."""


class UpstreamError(PanoramaError):
    """The chat history API failed or reported an application-level error.

    Attributes:
        details: Error detail reported by (or about) the upstream
        status_code: HTTP status of the upstream response, if one was received
    """

    def __init__(self, details: str, status_code: Optional[int] = None) -> None:
        super().__init__(details)
        self.status_code = status_code
