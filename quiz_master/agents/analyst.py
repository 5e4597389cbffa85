"""Analyst Agent - Summarises quiz performance and weak topics."""

import json
import logging
from typing import Any, Sequence

from quiz_master.client.completion import ResilientCompletionClient, get_client
from quiz_master.models.quiz import ResultSummary, UserResult

logger = logging.getLogger(__name__)

ANALYSIS_EMPTY = "Analysis unavailable."
ANALYSIS_FAILED = "Could not analyze results at this time."


def summarize_results(results: Sequence[UserResult]) -> list[dict[str, Any]]:
    """
    Project results to the fields the analysis needs.

    Args:
        results: Recorded quiz results

    Returns:
        List of {"topic", "isCorrect", "skipped"} dictionaries
    """
    return [
        ResultSummary.from_result(result).model_dump(by_alias=True)
        for result in results
    ]


def build_analysis_prompt(results: Sequence[UserResult]) -> str:
    """Build the performance analysis prompt."""
    summary = json.dumps(summarize_results(results))

    return f"""Analyze these quiz results and provide a 2-3 sentence summary of the student's performance.
Identify which topics they are struggling with and why (based on common misconceptions in those areas).

Results:
{summary}

Rules:
- Be direct and technical.
- No praise.
- Focus on identifying patterns in errors."""


async def analyze_results(
    results: Sequence[UserResult],
    client: ResilientCompletionClient | None = None,
) -> str:
    """
    Analyst Agent: Summarise a finished quiz attempt.

    Never raises; failures degrade to a fixed message.

    Args:
        results: One result per question of the attempt
        client: Completion client (the shared default if None)

    Returns:
        Analysis text
    """
    prompt = build_analysis_prompt(results)

    try:
        client = client or get_client()
        text = await client.complete(prompt)
    except Exception as e:
        logger.error("Error analyzing results: %s", e)
        return ANALYSIS_FAILED

    return text or ANALYSIS_EMPTY
