"""Fetch-then-enrich pipeline for the support panorama.

The pipeline reads one batch of messages from Slack, classifies every message
concurrently and returns the enriched messages in retrieval order. Retrieval
errors abort the whole request; classification errors never do.
"""

import asyncio

import httpx
from loguru import logger

from panorama.core.config import Settings
from panorama.core.models import EnrichedMessage
from panorama.core.slack_client import SlackHistoryClient
from panorama.enrichment.gemini_classifier import GeminiClassifier


class PanoramaPipeline:
    """Retrieve, classify and merge channel messages.

    Attributes:
        retriever: Client used to read the channel history
        classifier: Classifier applied to each message
    """

    def __init__(self, retriever: SlackHistoryClient, classifier: GeminiClassifier) -> None:
        self.retriever = retriever
        self.classifier = classifier

    @classmethod
    def from_settings(cls, settings: Settings, http_client: httpx.AsyncClient) -> "PanoramaPipeline":
        """Build a pipeline whose upstream calls share one HTTP client."""
        return cls(
            SlackHistoryClient.from_settings(settings, http_client),
            GeminiClassifier.from_settings(settings, http_client),
        )

    async def run(self) -> list[EnrichedMessage]:
        """Run the pipeline once.

        Returns:
            One EnrichedMessage per retrieved message, in retrieval order

        Raises:
            ConfigurationError: If Slack credentials are missing
            UpstreamError: If the Slack history request fails
        """
        messages = await self.retriever.fetch_messages()

        # gather() schedules every call before awaiting and keeps input order
        classifications = await asyncio.gather(
            *(self.classifier.classify_message(message.text) for message in messages)
        )

        fallbacks = sum(1 for classification in classifications if classification.is_fallback)
        if fallbacks:
            logger.warning(f"{fallbacks} of {len(messages)} messages used a fallback classification")
        logger.info(f"Analysis complete for {len(messages)} messages")

        return [
            EnrichedMessage(message=message, classification=classification)
            for message, classification in zip(messages, classifications)
        ]


async def analyze_channel(settings: Settings) -> list[EnrichedMessage]:
    """Run the pipeline with a short-lived HTTP client built from settings."""
    async with httpx.AsyncClient(timeout=settings.request_timeout_seconds) as http_client:
        return await PanoramaPipeline.from_settings(settings, http_client).run()
