"""
Tests for Gemini-based message classification.
"""

import json
from unittest.mock import MagicMock, patch

import httpx
import pytest

from conftest import gemini_body, prompt_of
from panorama.core.config import Settings
from panorama.enrichment.gemini_classifier import (
    ANALYSIS_ERROR_TOPIC,
    MISSING_KEY_TOPIC,
    NOT_ANALYZED_CATEGORY,
    VALID_CATEGORIES,
    ClassificationParseError,
    GeminiClassifier,
    MessageClassification,
)


class TestMessageClassification:
    """Test MessageClassification dataclass."""

    def test_to_dict_only_exposes_category_and_topic(self):
        classification = MessageClassification(
            category="Dúvida de Uso", topic="export", is_fallback=False
        )

        assert classification.to_dict() == {"category": "Dúvida de Uso", "topic": "export"}

    def test_not_analyzed_fallback(self):
        classification = MessageClassification.not_analyzed()

        assert classification.is_fallback is True
        assert classification.to_dict() == {
            "category": NOT_ANALYZED_CATEGORY,
            "topic": MISSING_KEY_TOPIC,
        }

    def test_analysis_error_fallback(self):
        classification = MessageClassification.analysis_error("HTTP 500")

        assert classification.is_fallback is True
        assert classification.reason == "HTTP 500"
        assert classification.to_dict() == {"category": "Outro", "topic": ANALYSIS_ERROR_TOPIC}


class TestPromptAndParsing:
    """Test prompt construction and response parsing."""

    @pytest.fixture
    def classifier(self):
        return GeminiClassifier(api_key="test-key", http_client=MagicMock())

    def test_build_classification_prompt(self, classifier):
        text = "the report screen crashes when I filter by date"
        prompt = classifier._build_classification_prompt(text)

        assert text in prompt
        assert '"category"' in prompt
        assert '"topic"' in prompt
        assert "JSON" in prompt
        for category in VALID_CATEGORIES:
            assert category in prompt

    def test_build_payload_requests_json_output(self, classifier):
        payload = classifier._build_payload("prompt text")

        assert payload["contents"] == [{"parts": [{"text": "prompt text"}]}]
        assert payload["generationConfig"] == {"responseMimeType": "application/json"}

    def test_parse_valid_json(self, classifier):
        result = classifier._parse_llm_response(
            '{"category": "Sugestão de Melhoria", "topic": "dark mode"}'
        )

        assert result == MessageClassification(category="Sugestão de Melhoria", topic="dark mode")
        assert result.is_fallback is False

    def test_parse_json_with_markdown(self, classifier):
        response = """```json
{"category": "Dificuldade do Atendente", "topic": "refund process"}
```"""

        result = classifier._parse_llm_response(response)

        assert result.category == "Dificuldade do Atendente"
        assert result.topic == "refund process"

    def test_parse_unknown_category_becomes_other(self, classifier):
        result = classifier._parse_llm_response('{"category": "Billing", "topic": "invoice"}')

        assert result.category == "Outro"
        assert result.topic == "invoice"

    def test_parse_truncates_long_topic(self, classifier):
        result = classifier._parse_llm_response(
            json.dumps({"category": "Outro", "topic": "x" * 500})
        )

        assert len(result.topic) == 200

    @pytest.mark.parametrize(
        "response_text",
        [
            "This is not JSON at all",
            '{"category": "Outro", "topic": ',
            '["Outro", "topic"]',
            '{"category": "Outro"}',
            '{"category": 3, "topic": "numbers"}',
        ],
    )
    def test_parse_invalid_responses_raise(self, classifier, response_text):
        with pytest.raises(ClassificationParseError):
            classifier._parse_llm_response(response_text)

    def test_extract_response_text(self):
        assert GeminiClassifier._extract_response_text(gemini_body("hello")) == "hello"
        assert GeminiClassifier._extract_response_text({"candidates": []}) is None
        assert GeminiClassifier._extract_response_text({"promptFeedback": {}}) is None
        assert GeminiClassifier._extract_response_text(gemini_body("   ")) is None
        assert GeminiClassifier._extract_response_text(["unexpected"]) is None


class TestClassifyMessage:
    """Test GeminiClassifier.classify_message against a fake upstream."""

    @pytest.mark.asyncio
    async def test_missing_api_key_skips_request(self, http_client, upstreams):
        classifier = GeminiClassifier(api_key=None, http_client=http_client)

        result = await classifier.classify_message("tool is broken")

        assert result == MessageClassification.not_analyzed()
        assert len(upstreams.gemini_requests) == 0

    @pytest.mark.asyncio
    async def test_successful_classification(self, http_client, upstreams):
        upstreams.gemini_handler = lambda request: httpx.Response(
            200, json=gemini_body({"category": "Problema na Ferramenta", "topic": "crash"})
        )
        classifier = GeminiClassifier(api_key="test-key", http_client=http_client, model="test-model")

        result = await classifier.classify_message("tool is broken")

        assert result.to_dict() == {"category": "Problema na Ferramenta", "topic": "crash"}
        assert result.is_fallback is False

        request = upstreams.gemini_requests[0]
        assert request.method == "POST"
        assert request.url.host == "generativelanguage.googleapis.com"
        assert request.url.path == "/v1beta/models/test-model:generateContent"
        assert request.url.params["key"] == "test-key"
        assert "tool is broken" in prompt_of(request)
        assert json.loads(request.content)["generationConfig"]["responseMimeType"] == "application/json"

    @pytest.mark.asyncio
    async def test_http_error_status_returns_fallback(self, http_client, upstreams):
        upstreams.gemini_handler = lambda request: httpx.Response(
            503, json={"error": {"message": "overloaded"}}
        )
        classifier = GeminiClassifier(api_key="test-key", http_client=http_client)

        result = await classifier.classify_message("tool is broken")

        assert result.to_dict() == {"category": "Outro", "topic": ANALYSIS_ERROR_TOPIC}
        assert result.reason == "HTTP 503"

    @pytest.mark.asyncio
    async def test_missing_response_text_returns_fallback(self, http_client, upstreams):
        upstreams.gemini_handler = lambda request: httpx.Response(
            200, json={"promptFeedback": {"blockReason": "SAFETY"}}
        )
        classifier = GeminiClassifier(api_key="test-key", http_client=http_client)

        result = await classifier.classify_message("tool is broken")

        assert result.is_fallback is True
        assert result.topic == ANALYSIS_ERROR_TOPIC

    @pytest.mark.asyncio
    async def test_malformed_json_returns_fallback(self, http_client, upstreams):
        upstreams.gemini_handler = lambda request: httpx.Response(
            200, json=gemini_body('{"category": "Outro", "topic": ')
        )
        classifier = GeminiClassifier(api_key="test-key", http_client=http_client)

        result = await classifier.classify_message("tool is broken")

        assert result.is_fallback is True
        assert result.category == "Outro"
        assert result.topic == ANALYSIS_ERROR_TOPIC

    @pytest.mark.asyncio
    async def test_non_json_body_returns_fallback(self, http_client, upstreams):
        upstreams.gemini_handler = lambda request: httpx.Response(200, text="<html>oops</html>")
        classifier = GeminiClassifier(api_key="test-key", http_client=http_client)

        result = await classifier.classify_message("tool is broken")

        assert result.is_fallback is True

    @pytest.mark.asyncio
    async def test_network_failure_returns_fallback(self):
        def handler(request):
            raise httpx.ReadTimeout("timed out", request=request)

        async with httpx.AsyncClient(transport=httpx.MockTransport(handler)) as http_client:
            classifier = GeminiClassifier(api_key="test-key", http_client=http_client)
            result = await classifier.classify_message("tool is broken")

        assert result.is_fallback is True
        assert "timed out" in result.reason


    @pytest.mark.asyncio
    async def test_deeply_nested_model_text_returns_fallback(self, http_client, upstreams):
        nested = "[" * 100000 + "]" * 100000
        upstreams.gemini_handler = lambda request: httpx.Response(200, json=gemini_body(nested))
        classifier = GeminiClassifier(api_key="test-key", http_client=http_client)

        result = await classifier.classify_message("tool is broken")

        assert result.is_fallback is True
        assert result.to_dict() == {"category": "Outro", "topic": ANALYSIS_ERROR_TOPIC}

    @pytest.mark.asyncio
    async def test_deeply_nested_response_body_returns_fallback(self, http_client, upstreams):
        nested = b"[" * 100000 + b"]" * 100000
        upstreams.gemini_handler = lambda request: httpx.Response(
            200, content=nested, headers={"Content-Type": "application/json"}
        )
        classifier = GeminiClassifier(api_key="test-key", http_client=http_client)

        result = await classifier.classify_message("tool is broken")

        assert result.is_fallback is True
        assert result.topic == ANALYSIS_ERROR_TOPIC

    @pytest.mark.asyncio
    async def test_unexpected_error_returns_fallback(self, http_client):
        classifier = GeminiClassifier(api_key="test-key", http_client=http_client)

        with patch.object(classifier, "_parse_llm_response", side_effect=RuntimeError("boom")):
            result = await classifier.classify_message("tool is broken")

        assert result.is_fallback is True
        assert result.reason == "Classification error: RuntimeError"


class TestConstants:
    """Test module constants."""

    def test_valid_categories_defined(self):
        assert len(VALID_CATEGORIES) == 5
        assert "Outro" in VALID_CATEGORIES
        assert NOT_ANALYZED_CATEGORY not in VALID_CATEGORIES

    def test_default_model_matches_settings_default(self):
        classifier = GeminiClassifier(api_key="test-key", http_client=MagicMock())

        assert classifier.model == Settings(_env_file=None).gemini_model
