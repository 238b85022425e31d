"""FastAPI REST API for Support Panorama.

This package provides the HTTP interface that returns classified
support channel messages.
"""

from .main import app

__all__ = ["app"]
