"""Tests for the Question Generator Agent."""

import asyncio
import json

import pytest

from quiz_master.agents.generator import (
    MAX_SOURCE_CHARS,
    QUESTION_LIST_SCHEMA,
    build_generation_prompt,
    generate_questions,
    parse_questions,
    strip_code_fences,
    truncate_source_text,
)
from quiz_master.client.errors import (
    GenerationFailure,
    MalformedResponseError,
    ProviderError,
    TransientGenerationError,
)


class TestTruncation:
    """Test source text truncation."""

    def test_long_text_is_cut_to_limit(self):
        """Test that text is cut to exactly the first 15,000 characters."""
        text = "x" * MAX_SOURCE_CHARS + "TAIL"
        assert truncate_source_text(text) == "x" * MAX_SOURCE_CHARS

    def test_short_text_is_unchanged(self):
        """Test that short text is kept as is."""
        assert truncate_source_text("short") == "short"

    def test_prompt_embeds_truncated_text(self):
        """Test that the prompt only contains the truncated prefix."""
        text = "a" * (MAX_SOURCE_CHARS - 1) + "bTAIL"
        prompt = build_generation_prompt(text, 5)

        assert prompt.endswith("a" * (MAX_SOURCE_CHARS - 1) + "b")
        assert "TAIL" not in prompt

    def test_prompt_requests_count(self):
        """Test that the prompt asks for the requested number of questions."""
        prompt = build_generation_prompt("text", 7)

        assert "generate 7 multiple-choice questions" in prompt
        assert "exactly 4 options" in prompt


class TestParseQuestions:
    """Test response parsing."""

    def test_parses_valid_array(self, sample_questions_json: str):
        """Test that a valid array is parsed."""
        questions = parse_questions(sample_questions_json)
        assert len(questions) == 5

    def test_strips_code_fences(self, sample_questions_json: str):
        """Test that markdown fences are removed."""
        fenced = f"```json\n{sample_questions_json}\n```"
        assert len(parse_questions(fenced)) == 5

    def test_empty_response_is_no_questions(self):
        """Test that an empty response parses to an empty list."""
        assert parse_questions("") == []

    def test_not_json(self):
        """Test that non-JSON text is a malformed response."""
        with pytest.raises(MalformedResponseError):
            parse_questions("not json")

    def test_wrong_shape(self):
        """Test that an object instead of an array is a malformed response."""
        with pytest.raises(MalformedResponseError):
            parse_questions('{"questions": []}')

    def test_missing_fields(self):
        """Test that items without required fields are rejected."""
        with pytest.raises(MalformedResponseError):
            parse_questions('[{"topic": "x", "q": "y"}]')

    def test_index_out_of_range(self):
        """Test that an out-of-range correct index is rejected."""
        data = [{"topic": "t", "q": "q?", "a": ["1", "2"], "correct": 2}]
        with pytest.raises(MalformedResponseError):
            parse_questions(json.dumps(data))

    def test_strip_code_fences_without_fence(self):
        """Test that unfenced text is only trimmed."""
        assert strip_code_fences("  [1]  ") == "[1]"


class TestGenerateQuestions:
    """Test the generate_questions operation."""

    def test_returns_requested_questions(self, make_client, sample_questions_json: str):
        """Test that a valid response yields the questions."""
        client, transport, _ = make_client([sample_questions_json])

        questions = asyncio.run(generate_questions("source text", 5, client=client))

        assert len(questions) == 5
        for question in questions:
            assert 0 <= question.correct < len(question.a)

    def test_requests_structured_output(self, make_client):
        """Test that the question schema is sent with the request."""
        client, transport, _ = make_client(["[]"])

        asyncio.run(generate_questions("source text", 3, client=client))

        _, prompt, schema = transport.calls[0]
        assert schema == QUESTION_LIST_SCHEMA
        assert "source text" in prompt

    def test_not_json_is_malformed_not_transient(self, make_client):
        """Test that a non-JSON answer raises a malformed response error."""
        client, _, _ = make_client(["not json"])

        with pytest.raises(MalformedResponseError) as exc_info:
            asyncio.run(generate_questions("source text", 5, client=client))

        assert not isinstance(exc_info.value, TransientGenerationError)

    def test_busy_service_is_transient(self, make_client):
        """Test that exhaustion on retryable errors is reported as transient."""
        errors = [ProviderError(message="overloaded", code=503) for _ in range(9)]
        client, _, _ = make_client(errors)

        with pytest.raises(TransientGenerationError):
            asyncio.run(generate_questions("source text", 5, client=client))

    def test_fatal_failure_is_generation_failure(self, make_client):
        """Test that exhaustion on fatal errors is a plain generation failure."""
        errors = [ProviderError(message="bad request", code=400) for _ in range(3)]
        client, _, _ = make_client(errors)

        with pytest.raises(GenerationFailure) as exc_info:
            asyncio.run(generate_questions("source text", 5, client=client))

        assert not isinstance(exc_info.value, (TransientGenerationError, MalformedResponseError))

    def test_rejects_non_positive_count(self, make_client):
        """Test that count must be at least 1."""
        client, transport, _ = make_client([])

        with pytest.raises(ValueError):
            asyncio.run(generate_questions("source text", 0, client=client))

        assert transport.calls == []
