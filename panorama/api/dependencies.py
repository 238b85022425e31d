"""Dependencies shared by the API routes.

Settings are read once and reused; each request gets its own HTTP client
for the upstream calls.
"""

from typing import AsyncGenerator, Optional

import httpx
from fastapi import Depends

from panorama.core.config import Settings

# Global instance (lazy-loaded)
_settings: Optional[Settings] = None


def get_settings() -> Settings:
    """Get or create the application settings.

    Returns:
        Settings: Settings loaded from the environment
    """
    global _settings
    if _settings is None:
        _settings = Settings()
    return _settings


async def get_http_client(
    settings: Settings = Depends(get_settings),
) -> AsyncGenerator[httpx.AsyncClient, None]:
    """Dependency function to get an HTTP client for upstream requests.

    Yields:
        httpx.AsyncClient: Client closed once the request is handled
    """
    async with httpx.AsyncClient(timeout=settings.request_timeout_seconds) as client:
        yield client
