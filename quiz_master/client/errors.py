"""Error taxonomy and retry classification for provider failures."""

import json
import re
from typing import Any

RETRYABLE_CODES = frozenset({429, 500, 502, 503, 504})
RETRYABLE_STATUSES = frozenset(
    {"UNAVAILABLE", "RESOURCE_EXHAUSTED", "INTERNAL", "DEADLINE_EXCEEDED"}
)
RETRYABLE_PHRASES = (
    "503",
    "429",
    "unavailable",
    "high demand",
    "try again later",
    "resource exhausted",
)


class QuizMasterError(Exception):
    """Base class for all quiz master errors."""


class ConfigurationError(QuizMasterError):
    """Required configuration (such as the API key) is missing or invalid."""


class ProviderError(QuizMasterError):
    """
    Normalised failure raised at the transport boundary.

    Attributes:
        code: Numeric HTTP/RPC status code, if known
        status: Provider status token such as RESOURCE_EXHAUSTED, if known
        message: Human readable message
    """

    def __init__(
        self,
        message: str | None = None,
        code: int | None = None,
        status: str | None = None,
    ):
        self.message = message
        self.code = code
        self.status = status
        super().__init__(message or status or (str(code) if code is not None else ""))

    def __repr__(self) -> str:
        return f"ProviderError(code={self.code!r}, status={self.status!r}, message={self.message!r})"

    @classmethod
    def from_exception(cls, exc: BaseException) -> "ProviderError":
        """
        Normalise an arbitrary exception into a ProviderError.

        Attributes on the exception (code, status_code, status) win; otherwise
        the message is parsed for a JSON error payload.

        Args:
            exc: Exception raised by the provider SDK or transport

        Returns:
            ProviderError carrying whatever could be derived
        """
        if isinstance(exc, ProviderError):
            return exc

        message = str(exc)
        code = _coerce_code(getattr(exc, "code", None))
        if code is None:
            code = _coerce_code(getattr(exc, "status_code", None))
        status = _coerce_status(getattr(exc, "status", None))

        if code is None and status is None:
            code, status = parse_error_payload(message)

        return cls(message=message, code=code, status=status)


class CompletionFailure(QuizMasterError):
    """
    Every model and attempt failed.

    Attributes:
        last_error: The most recent underlying error
        errors: (model, error) pairs in the order they were observed
    """

    def __init__(
        self,
        message: str,
        last_error: BaseException | None = None,
        errors: list[tuple[str, BaseException]] | None = None,
    ):
        super().__init__(message)
        self.last_error = last_error
        self.errors = errors or []


class GenerationFailure(QuizMasterError):
    """Question generation failed."""


class TransientGenerationError(GenerationFailure):
    """Question generation failed because the service is busy; retrying may help."""


class MalformedResponseError(GenerationFailure):
    """The model answered, but not with a valid list of questions."""


def _coerce_code(value: Any) -> int | None:
    # grpc exposes code() as a method, bool is an int subclass
    if isinstance(value, bool) or callable(value):
        return None
    if isinstance(value, int):
        return int(value)
    if isinstance(value, str) and value.strip().isdigit():
        return int(value.strip())
    return None


def _coerce_status(value: Any) -> str | None:
    if isinstance(value, str) and value.strip():
        return value.strip()
    return None


def parse_error_payload(message: str) -> tuple[int | None, str | None]:
    """
    Extract (code, status) from a JSON error payload embedded in a message.

    Accepts either a message that is entirely JSON or one that contains a
    JSON object, e.g. ``429 Too Many Requests. {"error": {"code": 429}}``.

    Args:
        message: Raw error message

    Returns:
        Tuple of code and status, each None when absent
    """
    if not message:
        return None, None

    payload = _load_json_object(message)
    if payload is None:
        match = re.search(r"\{.*\}", message, re.DOTALL)
        if match:
            payload = _load_json_object(match.group())
    if payload is None:
        return None, None

    error = payload.get("error")
    if not isinstance(error, dict):
        return None, None

    return _coerce_code(error.get("code")), _coerce_status(error.get("status"))


def _load_json_object(text: str) -> dict[str, Any] | None:
    try:
        data = json.loads(text)
    except (json.JSONDecodeError, TypeError):
        return None
    return data if isinstance(data, dict) else None


def is_retryable(error: BaseException | None) -> bool:
    """
    Decide whether a failure is worth retrying on the same model.

    Args:
        error: Exception raised by a completion attempt

    Returns:
        True for rate limiting, overload and timeout-like failures
    """
    if error is None:
        return False

    provider_error = ProviderError.from_exception(error)
    code, status = provider_error.code, provider_error.status
    if code is None and status is None:
        code, status = parse_error_payload(provider_error.message or "")

    if code is not None and code in RETRYABLE_CODES:
        return True
    if status is not None and status.upper() in RETRYABLE_STATUSES:
        return True
    if code is not None or status is not None:
        return False

    text = (provider_error.message or "").lower()
    return any(phrase in text for phrase in RETRYABLE_PHRASES)
