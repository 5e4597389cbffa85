"""Tests for the Analyst Agent."""

import asyncio
import json

from quiz_master.agents.analyst import (
    ANALYSIS_EMPTY,
    ANALYSIS_FAILED,
    analyze_results,
    build_analysis_prompt,
    summarize_results,
)
from quiz_master.client.errors import ProviderError
from quiz_master.models.quiz import UserResult


class TestSummarizeResults:
    """Test the result projection."""

    def test_projects_each_result(self, sample_results: list[UserResult]):
        """Test that each result becomes topic/isCorrect/skipped."""
        summary = summarize_results(sample_results)

        assert len(summary) == 5
        assert summary[0] == {"topic": "Mathematics", "isCorrect": True, "skipped": False}
        assert summary[1] == {"topic": "Physics", "isCorrect": False, "skipped": False}
        assert summary[3] == {"topic": "Chemistry", "isCorrect": False, "skipped": True}

    def test_empty_results(self):
        """Test that no results give an empty projection."""
        assert summarize_results([]) == []


class TestBuildAnalysisPrompt:
    """Test the analysis prompt."""

    def test_embeds_serialized_summary(self, sample_results: list[UserResult]):
        """Test that the projection is embedded as JSON."""
        prompt = build_analysis_prompt(sample_results)

        assert json.dumps(summarize_results(sample_results)) in prompt
        assert "No praise." in prompt

    def test_does_not_leak_question_text(self, sample_results: list[UserResult]):
        """Test that only the projection reaches the prompt."""
        assert "Who wrote '1984'?" not in build_analysis_prompt(sample_results)


class TestAnalyzeResults:
    """Test the analyze_results operation."""

    def test_returns_text(self, make_client, sample_results: list[UserResult]):
        """Test that the model text is returned."""
        client, _, _ = make_client(["Physics is the weak area."])

        assert asyncio.run(analyze_results(sample_results, client=client)) == "Physics is the weak area."

    def test_empty_text_uses_default(self, make_client, sample_results: list[UserResult]):
        """Test that an empty answer gives the default message."""
        client, _, _ = make_client([None])

        assert asyncio.run(analyze_results(sample_results, client=client)) == ANALYSIS_EMPTY

    def test_failure_degrades(self, make_client, sample_results: list[UserResult]):
        """Test that a failing backend degrades to a fixed message."""
        errors = [ProviderError(message="overloaded", code=503) for _ in range(9)]
        client, _, _ = make_client(errors)

        assert asyncio.run(analyze_results(sample_results, client=client)) == ANALYSIS_FAILED
