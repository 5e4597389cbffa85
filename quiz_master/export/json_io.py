"""Question-set JSON format: loading, validation and export."""

import json
import logging
from datetime import datetime
from pathlib import Path
from typing import Any, Sequence

from pydantic import ValidationError

from quiz_master.client.errors import QuizMasterError
from quiz_master.models.quiz import Question, UserResult

logger = logging.getLogger(__name__)

NOT_AN_ARRAY = "JSON must be an array of questions"
EMPTY_SET = "JSON must contain at least one question"
INVALID_FORMAT = (
    "Invalid question format. Each question must have topic, q, "
    "a (non-empty array), and correct (valid index)."
)


class QuestionSetError(QuizMasterError):
    """An uploaded or pasted question set is not valid."""


def ensure_output_directory(output_dir: str = "output") -> Path:
    """
    Ensure the output directory exists.

    Args:
        output_dir: Directory path to create

    Returns:
        Path object for the output directory
    """
    output_path = Path(output_dir)
    output_path.mkdir(parents=True, exist_ok=True)
    return output_path


def generate_timestamped_filename(base_name: str, extension: str = "json") -> str:
    """
    Generate a filename with timestamp.

    Args:
        base_name: Base name for the file
        extension: File extension (without dot)

    Returns:
        Filename with timestamp
    """
    timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
    # Clean the base name to remove any path components
    base_name = Path(base_name).name
    return f"{base_name}_{timestamp}.{extension}"


def _is_non_empty_string(value: Any) -> bool:
    return isinstance(value, str) and bool(value.strip())


def _is_valid_item(item: Any) -> bool:
    if not isinstance(item, dict):
        return False
    answers = item.get("a")
    correct = item.get("correct")
    return (
        _is_non_empty_string(item.get("topic"))
        and _is_non_empty_string(item.get("q"))
        and isinstance(answers, list)
        and len(answers) > 0
        and all(isinstance(answer, str) for answer in answers)
        and isinstance(correct, (int, float))
        and not isinstance(correct, bool)
        and float(correct).is_integer()
        and 0 <= correct < len(answers)
    )


def validate_question_set(data: Any) -> list[Question]:
    """
    Validate decoded JSON against the question-set format.

    Args:
        data: Decoded JSON value

    Returns:
        Questions in file order

    Raises:
        QuestionSetError: If data is not an array of valid questions
    """
    if not isinstance(data, list):
        raise QuestionSetError(NOT_AN_ARRAY)
    if not data:
        raise QuestionSetError(EMPTY_SET)
    if not all(_is_valid_item(item) for item in data):
        raise QuestionSetError(INVALID_FORMAT)

    try:
        return [
            Question(
                topic=item["topic"],
                q=item["q"],
                a=item["a"],
                correct=int(item["correct"]),
            )
            for item in data
        ]
    except ValidationError as e:
        raise QuestionSetError(INVALID_FORMAT) from e


def parse_question_set(text: str) -> list[Question]:
    """
    Parse pasted JSON text into questions.

    Raises:
        QuestionSetError: On invalid JSON or an invalid question set
    """
    try:
        data = json.loads(text)
    except json.JSONDecodeError as e:
        raise QuestionSetError("Failed to parse pasted JSON text") from e
    return validate_question_set(data)


def load_question_set(path: str | Path) -> list[Question]:
    """
    Load and validate a question-set JSON file.

    Raises:
        QuestionSetError: On invalid JSON or an invalid question set
        OSError: If the file cannot be read
    """
    text = Path(path).read_text(encoding="utf-8")
    try:
        data = json.loads(text)
    except json.JSONDecodeError as e:
        raise QuestionSetError("Failed to parse JSON file") from e
    return validate_question_set(data)


def load_results(path: str | Path) -> list[UserResult]:
    """
    Load a results file: an array of {"question": {...}, "selectedIdx": int | null}.

    Correctness is recomputed from the selection.

    Raises:
        QuestionSetError: If the file is not a valid results array
    """
    try:
        data = json.loads(Path(path).read_text(encoding="utf-8"))
    except json.JSONDecodeError as e:
        raise QuestionSetError("Failed to parse results file") from e

    if not isinstance(data, list) or not all(isinstance(item, dict) for item in data):
        raise QuestionSetError("Results must be an array of {question, selectedIdx} objects")
    if not data:
        raise QuestionSetError("Results must contain at least one answered question")

    questions = validate_question_set([item.get("question") for item in data])
    results = []
    for item, question in zip(data, questions):
        selected_idx = item.get("selectedIdx")
        if selected_idx is not None and (
            not isinstance(selected_idx, int)
            or isinstance(selected_idx, bool)
            or not 0 <= selected_idx < len(question.a)
        ):
            raise QuestionSetError(f"Invalid selectedIdx {selected_idx!r} for question {question.q!r}")
        results.append(UserResult.from_selection(question, selected_idx))
    return results


def read_source_text(path: str | Path) -> str:
    """Read plain text source material for question generation."""
    return Path(path).read_text(encoding="utf-8", errors="replace")


def export_questions(
    questions: Sequence[Question],
    output_path: str,
    use_output_dir: bool = True,
    output_dir: str = "output",
) -> str:
    """
    Export questions as a question-set JSON file.

    Args:
        questions: Questions to write
        output_path: Target path (can be relative or absolute)
        use_output_dir: If True, saves to output directory with timestamp (default: True)
        output_dir: Directory to save files in (default: "output")

    Returns:
        Path to the created JSON file
    """
    if use_output_dir:
        output_dir_path = ensure_output_directory(output_dir)
        filename = generate_timestamped_filename(Path(output_path).stem, "json")
        output_path = str(output_dir_path / filename)
    else:
        Path(output_path).parent.mkdir(parents=True, exist_ok=True)

    payload = [question.model_dump() for question in questions]
    Path(output_path).write_text(
        json.dumps(payload, indent=2, ensure_ascii=False) + "\n",
        encoding="utf-8",
    )
    logger.info("Exported %d questions to %s", len(questions), output_path)
    return output_path
