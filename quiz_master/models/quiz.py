"""Pydantic models for quiz data structures."""

from pydantic import BaseModel, Field, field_validator, model_validator


class Question(BaseModel):
    """A single multiple choice quiz item.

    Field names match the question-set JSON format exactly.
    """

    topic: str = Field(..., description="Short topic or sub-heading label")
    q: str = Field(..., description="The question text")
    a: list[str] = Field(..., min_length=1, description="Ordered answer options")
    correct: int = Field(..., description="0-based index of the correct option in a")

    model_config = {
        "frozen": True,
        "json_schema_extra": {
            "example": {
                "topic": "Thermodynamics",
                "q": "Which quantity is conserved in an isolated system?",
                "a": ["Entropy", "Total energy", "Temperature", "Pressure"],
                "correct": 1,
            }
        },
    }

    @model_validator(mode="after")
    def validate_correct_index(self) -> "Question":
        """Ensure correct points at one of the options."""
        if not 0 <= self.correct < len(self.a):
            raise ValueError(
                f"correct index {self.correct} is out of range for {len(self.a)} options"
            )
        return self

    @property
    def correct_answer(self) -> str:
        """Text of the correct option."""
        return self.a[self.correct]


class UserResult(BaseModel):
    """Outcome of one question in a quiz attempt."""

    question: Question
    selected_idx: int | None = Field(
        None,
        alias="selectedIdx",
        description="Index of the chosen option, None if skipped",
    )
    is_correct: bool = Field(..., alias="isCorrect")

    model_config = {"frozen": True, "populate_by_name": True}

    @field_validator("selected_idx")
    @classmethod
    def validate_selected_idx(cls, v: int | None) -> int | None:
        """Reject negative selections."""
        if v is not None and v < 0:
            raise ValueError("selectedIdx cannot be negative")
        return v

    @model_validator(mode="after")
    def validate_selection(self) -> "UserResult":
        """Ensure the selection indexes into a and is_correct matches it."""
        if self.selected_idx is not None and self.selected_idx >= len(self.question.a):
            raise ValueError(
                f"selectedIdx {self.selected_idx} is out of range for {len(self.question.a)} options"
            )
        expected = self.selected_idx is not None and self.selected_idx == self.question.correct
        if self.is_correct != expected:
            raise ValueError("isCorrect does not match selectedIdx and the correct answer")
        return self

    @classmethod
    def from_selection(cls, question: Question, selected_idx: int | None) -> "UserResult":
        """Record a selection (or a skip) against a question."""
        return cls(
            question=question,
            selected_idx=selected_idx,
            is_correct=selected_idx is not None and selected_idx == question.correct,
        )

    @property
    def skipped(self) -> bool:
        """Whether the question was skipped."""
        return self.selected_idx is None

    @property
    def selected_answer(self) -> str | None:
        """Text of the chosen option, if any."""
        if self.selected_idx is None:
            return None
        return self.question.a[self.selected_idx]


class ResultSummary(BaseModel):
    """Per-question projection sent to the analysis prompt."""

    topic: str
    is_correct: bool = Field(..., serialization_alias="isCorrect")
    skipped: bool

    @classmethod
    def from_result(cls, result: UserResult) -> "ResultSummary":
        return cls(
            topic=result.question.topic,
            is_correct=result.is_correct,
            skipped=result.skipped,
        )


class ExplanationParams(BaseModel):
    """Inputs for a single answer explanation."""

    question: str = Field(..., description="The question text")
    selected_answer: str | None = Field(
        None,
        description="Text of the chosen option, None if skipped",
    )
    correct_answer: str = Field(..., description="Text of the correct option")
    is_correct: bool
    topic: str

    @classmethod
    def from_result(cls, result: UserResult) -> "ExplanationParams":
        """Build explanation inputs from a recorded result."""
        question = result.question
        return cls(
            question=question.q,
            selected_answer=result.selected_answer,
            correct_answer=question.correct_answer,
            is_correct=result.is_correct,
            topic=question.topic,
        )
