"""Logging setup shared by the CLI and the API server.

The Slack client and CLI log through stdlib ``logging``; the classifier,
pipeline and routes log through loguru. Both are set to the same level.
"""

import logging
import sys

from loguru import logger


def configure_logging(level: str) -> None:
    """Apply ``level`` to the stdlib root logger and the loguru stderr sink."""
    logging.basicConfig(
        level=level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )
    logging.getLogger().setLevel(level)

    logger.remove()
    logger.add(sys.stderr, level=level)
