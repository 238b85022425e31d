"""CLI entry point for Support Panorama.

Usage:
    # Serve the REST API
    python -m panorama serve

    # Run the pipeline once and print the classified messages
    python -m panorama analyze

Examples:
    python -m panorama serve --port 8080 --reload
    python -m panorama analyze > panorama.json
"""

import asyncio
import json
import logging
import sys
from typing import Optional

import click

from panorama import __version__
from panorama.core.config import Settings
from panorama.core.errors import PanoramaError
from panorama.core.log_config import configure_logging
from panorama.core.pipeline import analyze_channel

logger = logging.getLogger(__name__)


@click.group()
def cli() -> None:
    """Support Panorama - Slack support messages classified with Gemini."""
    pass


@cli.command()
@click.option("--host", type=str, default=None, help="Host to bind (default: API_HOST)")
@click.option("--port", "-p", type=int, default=None, help="Port to listen on (default: PORT)")
@click.option("--reload/--no-reload", default=None, help="Enable auto-reload for development")
def serve(host: Optional[str], port: Optional[int], reload: Optional[bool]) -> None:
    """Serve the REST API with uvicorn."""
    import uvicorn

    settings = Settings()
    configure_logging(settings.log_level)

    host = host or settings.api_host
    port = port or settings.port
    logger.info(f"Server running at http://{host}:{port}")

    uvicorn.run(
        "panorama.api.main:app",
        host=host,
        port=port,
        reload=settings.api_reload if reload is None else reload,
    )


@cli.command()
@click.option("--indent", type=int, default=2, help="JSON indentation")
def analyze(indent: int) -> None:
    """Fetch and classify the latest channel messages once.

    The classified messages are printed to stdout as a JSON array.
    """
    settings = Settings()
    configure_logging(settings.log_level)

    try:
        enriched = asyncio.run(analyze_channel(settings))
    except PanoramaError as e:
        logger.error(f"Analysis failed: {e.details}")
        click.echo(f"Error: {e.details}", err=True)
        sys.exit(1)

    click.echo(
        json.dumps([message.to_dict() for message in enriched], indent=indent, ensure_ascii=False)
    )


@cli.command()
def version() -> None:
    """Show version information."""
    click.echo(f"Support Panorama v{__version__}")
    click.echo("Slack support messages classified with Gemini")


if __name__ == "__main__":
    cli()
