"""Gemini transport - the only place that talks to the provider SDK."""

import logging
from typing import Any

from langchain_core.messages import HumanMessage
from langchain_google_genai import ChatGoogleGenerativeAI

from quiz_master.client.errors import ConfigurationError, ProviderError
from quiz_master.config.settings import ClientConfig

logger = logging.getLogger(__name__)


class GeminiTransport:
    """
    Single-attempt calls against one Gemini model.

    Provider exceptions are normalised into ProviderError so the client can
    classify them without knowing the SDK.
    """

    def __init__(self, config: ClientConfig):
        if not config.api_key:
            raise ConfigurationError(
                "GEMINI_API_KEY environment variable not set. "
                "Set it (or GOOGLE_API_KEY) in the environment or a .env file."
            )
        self._config = config

    def build_llm(self, model: str, response_schema: dict[str, Any] | None = None) -> ChatGoogleGenerativeAI:
        """
        Create a chat model for one call.

        Args:
            model: Gemini model identifier
            response_schema: JSON schema the output must follow, if any

        Returns:
            Configured ChatGoogleGenerativeAI instance
        """
        kwargs: dict[str, Any] = {}
        if response_schema is not None:
            kwargs["response_mime_type"] = "application/json"
            kwargs["response_schema"] = response_schema

        return ChatGoogleGenerativeAI(
            model=model,
            google_api_key=self._config.api_key,
            temperature=self._config.temperature,
            # Retries are owned by ResilientCompletionClient
            max_retries=1,
            **kwargs,
        )

    async def generate(self, model: str, prompt: str, response_schema: dict[str, Any] | None = None) -> str:
        """
        Run a single completion attempt.

        Args:
            model: Gemini model identifier
            prompt: Full prompt text
            response_schema: JSON schema for structured output, if any

        Returns:
            Response text ("" when the model returned nothing)

        Raises:
            ProviderError: On any provider or network failure
        """
        llm = self.build_llm(model, response_schema)
        try:
            response = await llm.ainvoke([HumanMessage(content=prompt)])
        except ProviderError:
            raise
        except Exception as e:
            raise ProviderError.from_exception(e) from e

        return message_text(response.content)


def message_text(content: Any) -> str:
    """Flatten message content (a string or a list of parts) to text."""
    if content is None:
        return ""
    if isinstance(content, str):
        return content

    parts = []
    for part in content:
        if isinstance(part, str):
            parts.append(part)
        elif isinstance(part, dict) and part.get("type", "text") == "text":
            parts.append(str(part.get("text", "")))
    return "".join(parts)
