"""Explainer Agent - Explains why the correct answer is right."""

import logging

from quiz_master.client.completion import ResilientCompletionClient, get_client
from quiz_master.models.quiz import ExplanationParams

logger = logging.getLogger(__name__)

EXPLANATION_EMPTY = "I'm sorry, I couldn't generate an explanation right now."
UNAVAILABLE_PREFIX = "The AI is currently unavailable. The correct answer is: "


def build_explanation_prompt(params: ExplanationParams) -> str:
    """
    Build the explanation prompt for one answered (or skipped) question.

    Args:
        params: Question, chosen answer and correct answer

    Returns:
        Prompt text
    """
    return f"""You are a subject matter expert. Provide a 1-2 sentence technical explanation for this quiz question.

Topic: {params.topic}
Question: {params.question}
Student selected: {params.selected_answer or "Skipped"}
Correct answer: {params.correct_answer}
Result: {"Correct" if params.is_correct else "Incorrect"}

Rules:
- DO NOT say "Good job", "Spot on", "Correct", or any praise.
- DO NOT repeat the question or the answer text unnecessarily.
- Provide ONLY the scientific/technical explanation of why the correct answer is right and why the other might be wrong.
- Max 2 sentences."""


def fallback_explanation(correct_answer: str) -> str:
    """Text shown when the explanation could not be generated."""
    return UNAVAILABLE_PREFIX + correct_answer


async def explain(
    params: ExplanationParams,
    client: ResilientCompletionClient | None = None,
) -> str:
    """
    Explainer Agent: Explain a quiz answer in one or two sentences.

    Never raises; any failure degrades to a message naming the correct answer.

    Args:
        params: Explanation inputs
        client: Completion client (the shared default if None)

    Returns:
        Explanation text
    """
    prompt = build_explanation_prompt(params)

    try:
        client = client or get_client()
        text = await client.complete(prompt)
    except Exception as e:
        logger.error("Error generating AI explanation: %s", e)
        return fallback_explanation(params.correct_answer)

    return text or EXPLANATION_EMPTY
