"""FastAPI application for the Support Panorama API.

This is the main entry point for the REST API server. It provides:
- Classified support channel messages
- Liveness and health check endpoints
- API documentation (automatic via FastAPI)

The API has:
- No authentication (public API)
- No rate limiting
- No caching, every request reads Slack again
"""

from contextlib import asynccontextmanager
from typing import AsyncIterator

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import PlainTextResponse

from panorama import __version__
from panorama.api.dependencies import get_settings
from panorama.api.routes import health, messages
from panorama.core.log_config import configure_logging

LIVENESS_MESSAGE = "Support Panorama server is running!"


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Apply the configured log level in every server process."""
    configure_logging(get_settings().log_level)
    yield


# Create FastAPI application
app = FastAPI(
    title="Support Panorama API",
    description="Latest Slack support channel messages classified by category and topic",
    version=__version__,
    docs_url="/docs",
    redoc_url="/redoc",
    lifespan=lifespan,
)

# The dashboard is served from another origin
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_methods=["*"],
    allow_headers=["*"],
)

# Include routers
app.include_router(health.router)
app.include_router(messages.router)


@app.get("/", response_class=PlainTextResponse, tags=["Root"])
def root() -> str:
    """Liveness endpoint returning a static confirmation string."""
    return LIVENESS_MESSAGE


# For running with uvicorn directly
if __name__ == "__main__":
    import uvicorn

    from panorama.core.config import Settings

    settings = Settings()
    uvicorn.run(
        "panorama.api.main:app",
        host=settings.api_host,
        port=settings.port,
        reload=settings.api_reload,
    )
