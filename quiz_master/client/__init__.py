"""Resilient Gemini completion client."""

from .completion import (
    CompletionRequest,
    ResilientCompletionClient,
    backoff_delay_ms,
    get_client,
)
from .errors import (
    CompletionFailure,
    ConfigurationError,
    GenerationFailure,
    MalformedResponseError,
    ProviderError,
    QuizMasterError,
    TransientGenerationError,
    is_retryable,
)

__all__ = [
    "CompletionRequest",
    "ResilientCompletionClient",
    "backoff_delay_ms",
    "get_client",
    "is_retryable",
    "QuizMasterError",
    "ConfigurationError",
    "ProviderError",
    "CompletionFailure",
    "GenerationFailure",
    "TransientGenerationError",
    "MalformedResponseError",
]
