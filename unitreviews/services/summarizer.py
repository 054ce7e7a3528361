"""
Gemini summarizer client.

Thin wrapper around LangChain's ChatGoogleGenerativeAI so the overview
policy can depend on a single async ``summarize(prompt)`` call and tests can
substitute a fake.
"""

from typing import Any, Protocol

from langchain_core.messages import HumanMessage
from langchain_google_genai import ChatGoogleGenerativeAI

from unitreviews.config import settings
from unitreviews.core.errors import ExternalServiceError
from unitreviews.core.logging import get_logger

logger = get_logger(__name__)


class SummarizerClient(Protocol):
    model_name: str

    async def summarize(self, prompt: str) -> str: ...


def response_text(content: Any) -> str:
    """
    Extract plain text from a chat model response's content.

    Gemini may return content as a list of parts; the text parts are joined.
    """
    if isinstance(content, list):
        parts = [part.get("text", "") for part in content if isinstance(part, dict) and "text" in part]
        parts += [part for part in content if isinstance(part, str)]
        return "".join(parts).strip()
    return str(content or "").strip()


class GeminiSummarizer:
    """Summarizer backed by Google Gemini through LangChain."""

    def __init__(
        self,
        api_key: str,
        model_name: str | None = None,
        temperature: float | None = None,
        max_output_tokens: int | None = None,
    ):
        self.model_name = model_name or settings.GEMINI_MODEL
        self._llm = ChatGoogleGenerativeAI(
            model=self.model_name,
            google_api_key=api_key,
            temperature=settings.GEMINI_TEMPERATURE if temperature is None else temperature,
            max_output_tokens=max_output_tokens or settings.GEMINI_MAX_OUTPUT_TOKENS,
        )

    async def summarize(self, prompt: str) -> str:
        """
        Send a prompt and return the generated text.

        Raises:
            ExternalServiceError: If the model call fails
        """
        try:
            response = await self._llm.ainvoke([HumanMessage(content=prompt)])
        except Exception as e:
            logger.error("summarizer_request_failed", model=self.model_name, error=str(e))
            raise ExternalServiceError("AI summarizer request failed") from e
        return response_text(response.content)


def get_summarizer() -> GeminiSummarizer | None:
    """The configured summarizer, or None when GEMINI_API_KEY is not set."""
    if not settings.GEMINI_API_KEY:
        return None
    return GeminiSummarizer(api_key=settings.GEMINI_API_KEY)
