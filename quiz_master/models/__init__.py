"""Data models for quiz generation and review."""

from .quiz import (
    ExplanationParams,
    Question,
    ResultSummary,
    UserResult,
)

__all__ = [
    "Question",
    "UserResult",
    "ResultSummary",
    "ExplanationParams",
]
