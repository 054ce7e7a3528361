"""Tests for the Gemini summarizer wrapper."""

from unittest.mock import AsyncMock, MagicMock, patch

import pytest

from unitreviews.core.errors import ExternalServiceError
from unitreviews.services.summarizer import GeminiSummarizer, get_summarizer, response_text


@pytest.mark.unit
class TestResponseText:
    def test_plain_string(self):
        assert response_text("  Students report... \n") == "Students report..."

    def test_list_of_parts(self):
        content = [{"type": "text", "text": "Students "}, {"type": "text", "text": "report..."}]

        assert response_text(content) == "Students report..."

    def test_empty(self):
        assert response_text(None) == ""
        assert response_text([]) == ""


@pytest.mark.unit
class TestGeminiSummarizer:
    def test_no_client_without_api_key(self):
        with patch("unitreviews.services.summarizer.settings.GEMINI_API_KEY", None):
            assert get_summarizer() is None

    async def test_summarize_returns_text(self):
        llm = MagicMock()
        llm.ainvoke = AsyncMock(return_value=MagicMock(content="Students report a fair unit."))

        with patch("unitreviews.services.summarizer.ChatGoogleGenerativeAI", return_value=llm):
            summarizer = GeminiSummarizer(api_key="key", model_name="gemini-test")
            text = await summarizer.summarize("prompt")

        assert text == "Students report a fair unit."
        assert summarizer.model_name == "gemini-test"

    async def test_model_failure_becomes_external_service_error(self):
        llm = MagicMock()
        llm.ainvoke = AsyncMock(side_effect=RuntimeError("quota exceeded"))

        with patch("unitreviews.services.summarizer.ChatGoogleGenerativeAI", return_value=llm):
            summarizer = GeminiSummarizer(api_key="key")
            with pytest.raises(ExternalServiceError) as exc_info:
                await summarizer.summarize("prompt")

        assert exc_info.value.status_code == 502
