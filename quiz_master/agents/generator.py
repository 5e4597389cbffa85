"""Question Generator Agent - Generates quiz questions from source text."""

import json
import logging
from typing import Any

from pydantic import TypeAdapter, ValidationError

from quiz_master.client.completion import ResilientCompletionClient, get_client
from quiz_master.client.errors import (
    CompletionFailure,
    GenerationFailure,
    MalformedResponseError,
    TransientGenerationError,
    is_retryable,
)
from quiz_master.models.quiz import Question

logger = logging.getLogger(__name__)

# Upstream request size limit; longer text is cut, not rejected
MAX_SOURCE_CHARS = 15_000

QUESTION_LIST_SCHEMA: dict[str, Any] = {
    "type": "array",
    "items": {
        "type": "object",
        "properties": {
            "topic": {
                "type": "string",
                "description": "The specific topic or sub-heading of the question",
            },
            "q": {"type": "string", "description": "The question text"},
            "a": {
                "type": "array",
                "items": {"type": "string"},
                "description": "Array of 4 possible answers",
            },
            "correct": {
                "type": "integer",
                "description": "The 0-based index of the correct answer in the 'a' array",
            },
        },
        "required": ["topic", "q", "a", "correct"],
    },
}

_question_list = TypeAdapter(list[Question])


def truncate_source_text(source_text: str, limit: int = MAX_SOURCE_CHARS) -> str:
    """Keep only the first `limit` characters of the source text."""
    return source_text[:limit]


def build_generation_prompt(source_text: str, count: int) -> str:
    """
    Build the question generation prompt.

    Args:
        source_text: Material to generate questions from (truncated here)
        count: Number of questions to request

    Returns:
        Prompt text
    """
    return f"""Based on the following text, generate {count} multiple-choice questions.
Each question must have exactly 4 options and 1 correct answer.
Return exactly {count} questions. "correct" is the 0-based index of the correct option in "a".

Text:
{truncate_source_text(source_text)}"""


def strip_code_fences(text: str) -> str:
    """Remove a surrounding ```json ... ``` block if the model added one."""
    content = text.strip()
    if content.startswith("```"):
        content = content.split("\n", 1)[1] if "\n" in content else ""
        if content.rstrip().endswith("```"):
            content = content.rstrip()[:-3]
    return content.strip()


def parse_questions(raw: str) -> list[Question]:
    """
    Parse a structured completion into questions.

    Args:
        raw: Response text (an empty response means no questions)

    Returns:
        Parsed questions

    Raises:
        MalformedResponseError: If the text is not JSON or has the wrong shape
    """
    content = strip_code_fences(raw or "") or "[]"

    try:
        data = json.loads(content)
    except json.JSONDecodeError as e:
        logger.error("Model returned non-JSON output: %s", content[:400])
        raise MalformedResponseError(
            f"The AI returned a malformed response (not JSON): {e}"
        ) from e

    try:
        return _question_list.validate_python(data)
    except ValidationError as e:
        logger.error("Model returned JSON with the wrong shape: %s", e)
        raise MalformedResponseError(
            "The AI returned questions in an unexpected format."
        ) from e


async def generate_questions(
    source_text: str,
    count: int,
    client: ResilientCompletionClient | None = None,
) -> list[Question]:
    """
    Question Generator Agent: Generate multiple choice questions from text.

    Args:
        source_text: Material to generate questions from
        count: Number of questions to request
        client: Completion client (the shared default if None)

    Returns:
        Parsed questions

    Raises:
        ValueError: If count is less than 1
        ConfigurationError: If the provider credential is missing
        TransientGenerationError: If the service stayed busy across all models
        MalformedResponseError: If the response could not be parsed
        GenerationFailure: For any other provider failure
    """
    if count < 1:
        raise ValueError("count must be at least 1")

    if len(source_text) > MAX_SOURCE_CHARS:
        logger.info(
            "Source text truncated from %d to %d characters",
            len(source_text),
            MAX_SOURCE_CHARS,
        )

    prompt = build_generation_prompt(source_text, count)
    client = client or get_client()

    try:
        raw = await client.complete(prompt, response_schema=QUESTION_LIST_SCHEMA)
    except CompletionFailure as e:
        logger.error("Error generating questions: %s", e)
        if is_retryable(e.last_error):
            raise TransientGenerationError(
                "The AI service is temporarily unavailable. Please try again in a moment."
            ) from e
        raise GenerationFailure("Failed to generate questions from the source text.") from e

    questions = parse_questions(raw)
    if len(questions) != count:
        logger.warning("Requested %d questions, model returned %d", count, len(questions))
    return questions
