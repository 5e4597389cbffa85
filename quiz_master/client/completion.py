"""Resilient completion client with retry, backoff and model fallback."""

import asyncio
import logging
import random
from functools import lru_cache
from typing import Any, Awaitable, Callable, Protocol

from pydantic import BaseModel, Field, ValidationError

from quiz_master.client.errors import (
    CompletionFailure,
    ConfigurationError,
    ProviderError,
    is_retryable,
)
from quiz_master.config.settings import ClientConfig, get_settings

logger = logging.getLogger(__name__)


class CompletionRequest(BaseModel):
    """One logical completion request."""

    prompt: str
    response_schema: dict[str, Any] | None = Field(
        None,
        description="JSON schema for structured output; None for plain text",
    )

    model_config = {"frozen": True}

    @property
    def structured(self) -> bool:
        return self.response_schema is not None


class Transport(Protocol):
    """Anything that can run a single completion attempt against a model."""

    async def generate(
        self, model: str, prompt: str, response_schema: dict[str, Any] | None = None
    ) -> str | None: ...


def backoff_delay_ms(
    attempt_index: int,
    base_ms: int = 600,
    jitter_cap_ms: int = 200,
    rng: random.Random | None = None,
) -> float:
    """
    Delay before retrying after a failed attempt.

    Args:
        attempt_index: 0-based index of the attempt that just failed
        base_ms: Base delay in milliseconds
        jitter_cap_ms: Exclusive upper bound of the random jitter
        rng: Random source (module random if None)

    Returns:
        Delay in milliseconds, in [base * 2**i, base * 2**i + jitter_cap)
    """
    source = rng or random
    return base_ms * (2**attempt_index) + source.random() * jitter_cap_ms


class ResilientCompletionClient:
    """
    Execute one logical completion against a prioritised list of models.

    Each model gets up to max_attempts_per_model attempts. Retryable
    failures back off exponentially before the next attempt; fatal failures
    (and the final attempt) move on to the next model.
    """

    def __init__(
        self,
        config: ClientConfig,
        transport: Transport | None = None,
        sleep: Callable[[float], Awaitable[Any]] = asyncio.sleep,
        rng: random.Random | None = None,
    ):
        self.config = config
        self._transport = transport
        self._sleep = sleep
        self._rng = rng or random.Random()

    @property
    def transport(self) -> Transport:
        """Provider transport, created on first use."""
        if self._transport is None:
            # SDK import deferred to the first real call
            from quiz_master.client.transport import GeminiTransport

            self._transport = GeminiTransport(self.config)
        return self._transport

    async def complete(self, prompt: str, response_schema: dict[str, Any] | None = None) -> str:
        """
        Run a completion, retrying and falling back across models.

        Args:
            prompt: Full prompt text
            response_schema: JSON schema for structured output, if any

        Returns:
            Response text; "" is a valid (empty) answer

        Raises:
            ConfigurationError: If the provider credential is missing
            CompletionFailure: If every model and attempt failed
        """
        request = CompletionRequest(prompt=prompt, response_schema=response_schema)
        transport = self.transport

        max_attempts = self.config.max_attempts_per_model
        last_error: BaseException | None = None
        errors: list[tuple[str, BaseException]] = []

        for model in self.config.models:
            for attempt in range(max_attempts):
                try:
                    text = await self._attempt(transport, model, request)
                except ConfigurationError:
                    raise
                except Exception as e:
                    last_error = e
                    errors.append((model, e))
                    retryable = is_retryable(e)

                    if not retryable or attempt == max_attempts - 1:
                        logger.warning(
                            "Model %s failed (attempt %d/%d, %s): %s; moving to next model",
                            model,
                            attempt + 1,
                            max_attempts,
                            "retryable" if retryable else "fatal",
                            e,
                        )
                        break

                    delay_ms = backoff_delay_ms(
                        attempt,
                        self.config.backoff_base_ms,
                        self.config.jitter_cap_ms,
                        self._rng,
                    )
                    logger.warning(
                        "Model %s busy (attempt %d/%d): %s; retrying in %.0f ms",
                        model,
                        attempt + 1,
                        max_attempts,
                        e,
                        delay_ms,
                    )
                    await self._sleep(delay_ms / 1000)
                    continue

                logger.debug("Model %s answered on attempt %d", model, attempt + 1)
                return text or ""

        logger.error("All models failed; last error: %s", last_error)
        if last_error is None:
            raise CompletionFailure("No completion attempt was made.", errors=errors)
        raise CompletionFailure(
            f"All models failed. Last error: {last_error}",
            last_error=last_error,
            errors=errors,
        ) from last_error

    async def _attempt(self, transport: Transport, model: str, request: CompletionRequest) -> str | None:
        call = transport.generate(model, request.prompt, request.response_schema)
        timeout = self.config.attempt_timeout_seconds
        if timeout is None:
            return await call
        try:
            return await asyncio.wait_for(call, timeout)
        except asyncio.TimeoutError as e:
            raise ProviderError(
                message=f"Model {model} did not answer within {timeout:g}s",
                status="DEADLINE_EXCEEDED",
            ) from e


@lru_cache
def get_client() -> ResilientCompletionClient:
    """
    Get a cached client built from the application settings.

    Returns:
        ResilientCompletionClient using the Gemini transport

    Raises:
        ConfigurationError: If the settings do not validate
    """
    try:
        config = ClientConfig.from_settings(get_settings())
    except ValidationError as e:
        raise ConfigurationError(f"Invalid settings: {e}") from e
    return ResilientCompletionClient(config)
