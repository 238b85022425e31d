"""
LLM-based support message classification.

This module classifies support channel messages into a fixed set of
categories with a short topic, using the Gemini generateContent API.
Classification never raises: every failure resolves to a fallback value so
one bad message cannot abort a batch.
"""

import json
import re
from dataclasses import dataclass
from typing import Any, Optional

import httpx
from loguru import logger

from panorama.core.config import DEFAULT_GEMINI_MODEL, Settings

GEMINI_API_URL = "https://generativelanguage.googleapis.com/v1beta/models/{model}:generateContent"

# Valid categories for classification
VALID_CATEGORIES = [
    "Problema na Ferramenta",
    "Dificuldade do Atendente",
    "Dúvida de Uso",
    "Sugestão de Melhoria",
    "Outro",
]

OTHER_CATEGORY = "Outro"
NOT_ANALYZED_CATEGORY = "Não Analisado"
MISSING_KEY_TOPIC = "Chave Gemini em falta"
ANALYSIS_ERROR_TOPIC = "Erro na Análise"

MAX_TOPIC_LENGTH = 200


@dataclass(frozen=True)
class MessageClassification:
    """
    Result of classifying one message.

    Attributes:
        category: One of VALID_CATEGORIES, or a fallback category
        topic: Short free-text topic
        is_fallback: Whether this is a fallback value rather than a model answer
        reason: Why the fallback was used (empty for model answers)
    """

    category: str
    topic: str
    is_fallback: bool = False
    reason: str = ""

    @classmethod
    def not_analyzed(cls) -> "MessageClassification":
        return cls(
            category=NOT_ANALYZED_CATEGORY,
            topic=MISSING_KEY_TOPIC,
            is_fallback=True,
            reason="GEMINI_API_KEY is not set",
        )

    @classmethod
    def analysis_error(cls, reason: str) -> "MessageClassification":
        return cls(
            category=OTHER_CATEGORY,
            topic=ANALYSIS_ERROR_TOPIC,
            is_fallback=True,
            reason=reason,
        )

    def to_dict(self) -> dict[str, Any]:
        """Convert classification to the caller-facing dictionary."""
        return {"category": self.category, "topic": self.topic}


class ClassificationParseError(ValueError):
    """The model answer could not be turned into a classification."""


class GeminiClassifier:
    """
    Support message classifier using the Gemini generateContent API.

    One request is made per message. Missing credentials, HTTP failures and
    malformed model output all produce a fallback MessageClassification.
    """

    def __init__(
        self,
        api_key: Optional[str],
        http_client: httpx.AsyncClient,
        model: str = DEFAULT_GEMINI_MODEL,
    ):
        """
        Initialize Gemini classifier.

        Args:
            api_key: Gemini API key; None disables classification
            http_client: Async HTTP client used for requests
            model: Gemini model to use for classification
        """
        self.api_key = api_key
        self.http_client = http_client
        self.model = model
        if api_key:
            logger.info(f"Initialized GeminiClassifier with model: {model}")
        else:
            logger.warning("GEMINI_API_KEY is not set, messages will not be analyzed")

    @classmethod
    def from_settings(cls, settings: Settings, http_client: httpx.AsyncClient) -> "GeminiClassifier":
        return cls(settings.gemini_api_key, http_client, model=settings.gemini_model)

    def _build_classification_prompt(self, text: str) -> str:
        """
        Build LLM prompt for category and topic classification.

        Args:
            text: Message text to analyze

        Returns:
            Formatted prompt string
        """
        categories = ", ".join(f'"{category}"' for category in VALID_CATEGORIES)
        prompt = f"""Analyze the following message from a customer support channel.

Message: "{text}"

Return a JSON object with exactly two fields:
- "category": one of {categories}
- "topic": a short description of the subject of the message

Return ONLY valid JSON (no markdown, no code blocks):
{{"category": "<category>", "topic": "<topic>"}}"""
        return prompt

    def _build_payload(self, prompt: str) -> dict[str, Any]:
        return {
            "contents": [{"parts": [{"text": prompt}]}],
            "generationConfig": {"responseMimeType": "application/json"},
        }

    @staticmethod
    def _extract_response_text(data: Any) -> Optional[str]:
        """
        Extract the first candidate's text from a generateContent response.

        Returns:
            The text, or None if the response does not have the expected shape
        """
        try:
            text = data["candidates"][0]["content"]["parts"][0]["text"]
        except (KeyError, IndexError, TypeError):
            return None
        return text if isinstance(text, str) and text.strip() else None

    def _parse_llm_response(self, response_text: str) -> MessageClassification:
        """
        Parse LLM JSON response into a classification.

        Args:
            response_text: Raw LLM response text

        Returns:
            Parsed classification

        Raises:
            ClassificationParseError: If the text is not a JSON object with
                string ``category`` and ``topic`` fields
        """
        # Extract JSON from markdown code blocks if present
        json_match = re.search(r"```(?:json)?\s*(\{.*?\})\s*```", response_text, re.DOTALL)
        if json_match:
            response_text = json_match.group(1)

        try:
            data = json.loads(response_text.strip())
        except json.JSONDecodeError as e:
            raise ClassificationParseError(f"Invalid JSON in model response: {e}") from e

        if not isinstance(data, dict):
            raise ClassificationParseError("Model response is not a JSON object")

        category = data.get("category")
        topic = data.get("topic")
        if not isinstance(category, str) or not isinstance(topic, str):
            raise ClassificationParseError("Model response is missing category or topic")

        if category not in VALID_CATEGORIES:
            logger.debug(f"Unknown category {category!r}, using {OTHER_CATEGORY!r}")
            category = OTHER_CATEGORY

        return MessageClassification(category=category, topic=topic.strip()[:MAX_TOPIC_LENGTH])

    async def classify_message(self, text: str) -> MessageClassification:
        """
        Classify one message into a category and topic.

        Args:
            text: Message text to classify

        Returns:
            MessageClassification, a fallback value on any failure
        """
        if not self.api_key:
            return MessageClassification.not_analyzed()

        try:
            return await self._request_classification(text)
        except Exception as e:
            logger.error(f"LLM classification failed: {type(e).__name__}: {str(e)[:100]}")
            return MessageClassification.analysis_error(f"Classification error: {type(e).__name__}")

    async def _request_classification(self, text: str) -> MessageClassification:
        """Send one generateContent request and turn its answer into a classification."""
        prompt = self._build_classification_prompt(text)
        url = GEMINI_API_URL.format(model=self.model)

        try:
            logger.debug(f"Sending classification request to {self.model}")
            response = await self.http_client.post(
                url,
                params={"key": self.api_key},
                json=self._build_payload(prompt),
            )
        except httpx.HTTPError as e:
            logger.error(f"Gemini request failed: {e}")
            return MessageClassification.analysis_error(f"Request failed: {str(e)[:100]}")

        if not response.is_success:
            logger.error(f"Gemini API error: HTTP {response.status_code} {response.reason_phrase}")
            return MessageClassification.analysis_error(f"HTTP {response.status_code}")

        try:
            data = response.json()
        except ValueError:
            logger.error(f"Gemini returned a non-JSON body: {response.text[:200]}")
            return MessageClassification.analysis_error("Non-JSON response body")

        response_text = self._extract_response_text(data)
        if response_text is None:
            logger.error(f"Unexpected Gemini response: {data}")
            return MessageClassification.analysis_error("Missing response text")

        logger.debug(f"LLM response: {response_text}")

        try:
            return self._parse_llm_response(response_text)
        except ClassificationParseError as e:
            logger.warning(f"Failed to parse LLM response: {e}")
            return MessageClassification.analysis_error(str(e))
