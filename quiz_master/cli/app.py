"""Typer CLI application for quiz generation and review."""

import asyncio
import logging
from pathlib import Path
from typing import Optional

import typer
from rich.console import Console
from rich.logging import RichHandler
from rich.panel import Panel
from rich.progress import Progress, SpinnerColumn, TextColumn
from rich.table import Table

from quiz_master.agents import analyze_results, explain, generate_questions
from quiz_master.agents.generator import MAX_SOURCE_CHARS
from quiz_master.client.errors import (
    ConfigurationError,
    GenerationFailure,
    TransientGenerationError,
)
from quiz_master.config.settings import FALLBACK_MODELS, PRIMARY_MODEL, get_settings
from quiz_master.export.json_io import (
    QuestionSetError,
    export_questions,
    load_question_set,
    load_results,
    read_source_text,
)
from quiz_master.models.quiz import ExplanationParams, Question, UserResult

app = typer.Typer(
    name="quiz-master",
    help="AI-assisted quiz generation, explanations and performance analysis",
    add_completion=False,
)

console = Console()


def setup_logging(verbose: bool) -> None:
    """Route log records through Rich."""
    level = logging.DEBUG if verbose else get_settings().log_level.upper()
    logging.basicConfig(
        level=level,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=console, rich_tracebacks=True)],
        force=True,
    )


@app.command()
def generate(
    source: Path = typer.Argument(
        ...,
        exists=True,
        dir_okay=False,
        readable=True,
        help="Plain text file to generate questions from",
    ),
    count: int = typer.Option(
        10,
        "--count",
        "-n",
        help="Number of questions to generate",
        min=1,
        max=500,
    ),
    output: str = typer.Option(
        "questions",
        "--output",
        "-o",
        help="Output file path (without extension)",
    ),
    timestamp: bool = typer.Option(
        True,
        "--timestamp/--no-timestamp",
        help="Save into output/ with a timestamped filename",
    ),
) -> None:
    """
    Generate multiple choice questions from a text file.

    Example:
        quiz-master generate notes.txt -n 15 -o chapter_3
    """
    text = read_source_text(source)
    if not text.strip():
        console.print("[red]Error:[/red] Source file is empty.", style="bold")
        raise typer.Exit(code=1)

    if len(text) > MAX_SOURCE_CHARS:
        console.print(
            f"[yellow]Note:[/yellow] only the first {MAX_SOURCE_CHARS:,} of "
            f"{len(text):,} characters will be used."
        )

    try:
        with Progress(
            SpinnerColumn(),
            TextColumn("[progress.description]{task.description}"),
            console=console,
        ) as progress:
            task = progress.add_task("[cyan]Generating questions...", total=None)
            questions = asyncio.run(generate_questions(text, count))
            progress.update(task, description="[green]Questions generated!")

    except ConfigurationError as e:
        console.print(f"[red]Error:[/red] {e}", style="bold")
        raise typer.Exit(code=1)
    except TransientGenerationError as e:
        console.print(f"\n[yellow]Service busy:[/yellow] {e}", style="bold")
        raise typer.Exit(code=75)
    except GenerationFailure as e:
        console.print(f"\n[red]Error during question generation:[/red] {e}", style="bold")
        raise typer.Exit(code=1)

    if not questions:
        console.print("[red]Error:[/red] The AI returned no questions.", style="bold")
        raise typer.Exit(code=1)

    display_questions(questions)

    output_file = export_questions(questions, output, use_output_dir=timestamp)
    console.print(f"\n[green]✓[/green] Questions exported to: {output_file}")


@app.command()
def validate(
    questions_file: Path = typer.Argument(..., exists=True, dir_okay=False),
) -> None:
    """Check that a question-set JSON file is valid."""
    try:
        questions = load_question_set(questions_file)
    except QuestionSetError as e:
        console.print(f"[red]Invalid question set:[/red] {e}", style="bold")
        raise typer.Exit(code=1)

    display_questions(questions)
    console.print(f"\n[green]✓[/green] {len(questions)} valid questions.")


@app.command(name="explain")
def explain_answer(
    questions_file: Path = typer.Argument(..., exists=True, dir_okay=False),
    index: int = typer.Option(
        ...,
        "--index",
        "-i",
        help="1-based question number",
        min=1,
    ),
    selected: Optional[int] = typer.Option(
        None,
        "--selected",
        "-s",
        help="1-based option number that was chosen (omit for skipped)",
        min=1,
    ),
) -> None:
    """Explain the answer to one question of a question set."""
    try:
        questions = load_question_set(questions_file)
    except QuestionSetError as e:
        console.print(f"[red]Invalid question set:[/red] {e}", style="bold")
        raise typer.Exit(code=1)

    if index > len(questions):
        console.print(f"[red]Error:[/red] question set has {len(questions)} questions.")
        raise typer.Exit(code=1)

    question = questions[index - 1]
    selected_idx = selected - 1 if selected is not None else None
    if selected_idx is not None and selected_idx >= len(question.a):
        console.print(f"[red]Error:[/red] question has {len(question.a)} options.")
        raise typer.Exit(code=1)

    result = UserResult.from_selection(question, selected_idx)
    with console.status("[cyan]Asking the AI..."):
        explanation = asyncio.run(explain(ExplanationParams.from_result(result)))

    verdict = "[green]Correct[/green]" if result.is_correct else "[red]Incorrect[/red]"
    if result.skipped:
        verdict = "[yellow]Skipped[/yellow]"
    console.print(
        Panel(
            f"{question.q}\n\n{verdict} - correct answer: {question.correct_answer}\n\n{explanation}",
            title=question.topic,
            border_style="cyan",
        )
    )


@app.command()
def analyze(
    results_file: Path = typer.Argument(
        ...,
        exists=True,
        dir_okay=False,
        help="JSON array of {question, selectedIdx} objects",
    ),
) -> None:
    """Analyze a finished quiz attempt and point out weak topics."""
    try:
        results = load_results(results_file)
    except QuestionSetError as e:
        console.print(f"[red]Invalid results file:[/red] {e}", style="bold")
        raise typer.Exit(code=1)

    display_results(results)

    with console.status("[cyan]Analyzing results..."):
        analysis = asyncio.run(analyze_results(results))

    console.print(Panel(analysis, title="AI Analysis", border_style="green"))


@app.command()
def info() -> None:
    """Display information about the quiz master."""
    fallbacks = ", ".join(FALLBACK_MODELS)
    info_text = f"""
[bold cyan]Quiz Master[/bold cyan]
Version: 0.1.0

[bold]Operations:[/bold]
  • generate - Multiple choice questions from text
  • explain  - Short technical explanation of an answer
  • analyze  - Summary of weak topics after a quiz

[bold]Resilience:[/bold]
  • 3 attempts per model with exponential backoff
  • Automatic fallback to the next model

[bold]Models:[/bold] {PRIMARY_MODEL} (fallbacks: {fallbacks})
    """
    console.print(Panel(info_text, title="Quiz Master Info", border_style="cyan"))


def display_questions(questions: list[Question]) -> None:
    """Display a table of questions."""
    table = Table(title="Questions", border_style="green")
    table.add_column("#", style="cyan")
    table.add_column("Topic", style="cyan")
    table.add_column("Question", style="white")
    table.add_column("Answer", style="green")

    for i, question in enumerate(questions, start=1):
        table.add_row(str(i), question.topic, question.q, question.correct_answer)

    console.print()
    console.print(table)


def display_results(results: list[UserResult]) -> None:
    """Display the score and a per-topic breakdown."""
    score = sum(1 for result in results if result.is_correct)
    skipped = sum(1 for result in results if result.skipped)

    table = Table(title="Quiz Summary", border_style="green")
    table.add_column("Metric", style="cyan")
    table.add_column("Value", style="white")
    table.add_row("Score", f"{score}/{len(results)}")
    table.add_row("Skipped", str(skipped))

    console.print()
    console.print(table)

    by_topic: dict[str, list[UserResult]] = {}
    for result in results:
        by_topic.setdefault(result.question.topic, []).append(result)

    topics_table = Table(title="Topics Breakdown", border_style="cyan")
    topics_table.add_column("Topic", style="cyan")
    topics_table.add_column("Correct", style="white")

    for topic, topic_results in by_topic.items():
        correct = sum(1 for result in topic_results if result.is_correct)
        ratio = correct / len(topic_results)
        correct_str = f"{correct}/{len(topic_results)}"
        if ratio >= 0.8:
            correct_str = f"[green]{correct_str}[/green]"
        elif ratio >= 0.5:
            correct_str = f"[yellow]{correct_str}[/yellow]"
        else:
            correct_str = f"[red]{correct_str}[/red]"
        topics_table.add_row(topic, correct_str)

    console.print()
    console.print(topics_table)


@app.callback()
def callback(
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Show debug logs"),
) -> None:
    """
    Quiz Master - Generate quizzes and review answers with Gemini.
    """
    setup_logging(verbose)


if __name__ == "__main__":
    app()
