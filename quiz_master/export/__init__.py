"""Question-set JSON import and export."""

from .json_io import (
    QuestionSetError,
    export_questions,
    load_question_set,
    load_results,
    parse_question_set,
    read_source_text,
    validate_question_set,
)

__all__ = [
    "QuestionSetError",
    "export_questions",
    "load_question_set",
    "load_results",
    "parse_question_set",
    "read_source_text",
    "validate_question_set",
]
