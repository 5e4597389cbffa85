"""Shared test fixtures and configuration for pytest."""

import json
from typing import Any, Callable

import pytest

from quiz_master.client.completion import ResilientCompletionClient
from quiz_master.config.settings import ClientConfig
from quiz_master.models.quiz import Question, UserResult


class FakeTransport:
    """
    Scripted stand-in for GeminiTransport.

    Outcomes are consumed in call order; an exception instance is raised,
    anything else is returned. A dict maps model name to its own outcomes.
    """

    def __init__(self, outcomes: list[Any] | dict[str, list[Any]]):
        self.outcomes = outcomes
        self.calls: list[tuple[str, str, dict[str, Any] | None]] = []

    @property
    def models_called(self) -> list[str]:
        return [model for model, _, _ in self.calls]

    async def generate(self, model: str, prompt: str, response_schema: dict[str, Any] | None = None) -> Any:
        self.calls.append((model, prompt, response_schema))
        queue = self.outcomes[model] if isinstance(self.outcomes, dict) else self.outcomes
        outcome = queue.pop(0)
        if isinstance(outcome, BaseException):
            raise outcome
        return outcome


class RecordingSleep:
    """Async sleep replacement that records delays instead of waiting."""

    def __init__(self):
        self.delays: list[float] = []

    async def __call__(self, seconds: float) -> None:
        self.delays.append(seconds)


@pytest.fixture
def client_config() -> ClientConfig:
    """Client configuration with test model names and no timeout."""
    return ClientConfig(
        api_key="test-key",
        primary_model="primary-model",
        fallback_models=("fallback-1", "fallback-2"),
        attempt_timeout_seconds=None,
    )


@pytest.fixture
def make_client(
    client_config: ClientConfig,
) -> Callable[..., tuple[ResilientCompletionClient, FakeTransport, RecordingSleep]]:
    """Build a client around a FakeTransport with the given outcomes."""

    def _make(outcomes, config: ClientConfig | None = None):
        transport = FakeTransport(outcomes)
        sleep = RecordingSleep()
        client = ResilientCompletionClient(
            config or client_config,
            transport=transport,
            sleep=sleep,
        )
        return client, transport, sleep

    return _make


@pytest.fixture
def sample_question() -> Question:
    """Create a sample Question for testing."""
    return Question(
        topic="Geography",
        q="What is the capital of France?",
        a=["London", "Paris", "Berlin", "Madrid"],
        correct=1,
    )


@pytest.fixture
def sample_questions() -> list[Question]:
    """Create a list of five sample questions for testing."""
    return [
        Question(topic="Mathematics", q="What is 2 + 2?", a=["3", "4", "5", "6"], correct=1),
        Question(
            topic="Physics",
            q="What is the speed of light in vacuum?",
            a=["299,792,458 m/s", "300,000 m/s", "150,000,000 m/s", "3,000 m/s"],
            correct=0,
        ),
        Question(
            topic="Literature",
            q="Who wrote '1984'?",
            a=["Aldous Huxley", "Ray Bradbury", "George Orwell", "Philip K. Dick"],
            correct=2,
        ),
        Question(
            topic="Chemistry",
            q="What is the chemical symbol for sodium?",
            a=["S", "So", "Sd", "Na"],
            correct=3,
        ),
        Question(
            topic="Physics",
            q="Which unit measures electrical resistance?",
            a=["Ohm", "Volt", "Ampere", "Watt"],
            correct=0,
        ),
    ]


@pytest.fixture
def sample_questions_json(sample_questions: list[Question]) -> str:
    """The sample questions in question-set JSON format."""
    return json.dumps([question.model_dump() for question in sample_questions])


@pytest.fixture
def sample_results(sample_questions: list[Question]) -> list[UserResult]:
    """A finished attempt: two correct, two wrong, one skipped."""
    return [
        UserResult.from_selection(sample_questions[0], 1),
        UserResult.from_selection(sample_questions[1], 2),
        UserResult.from_selection(sample_questions[2], 2),
        UserResult.from_selection(sample_questions[3], None),
        UserResult.from_selection(sample_questions[4], 1),
    ]
