"""
Typer CLI for the practice engine.

Commands:
    practice-engine mastery 7 --problem-type "Quadratic Equation"
    practice-engine classify "Solve 2x + 5 < 13" --explain
    practice-engine schedule progress.json linear-equations mastered --turns 4
    practice-engine plan progress.json --count 6 --seed 42
    practice-engine review progress.json --days-ahead 7

Progress and attempt files are JSON arrays of record objects, the same
shape produced by ``TopicProgress.to_dict`` / ``Attempt.to_dict``.
"""

from __future__ import annotations

import asyncio
import json
import random
from pathlib import Path
from typing import Optional

import typer
from rich import print as rprint
from rich.console import Console
from rich.table import Table

from practice_engine.classification import (
    classify_topic_async,
    classify_topic_with_confidence,
    explain_topic_classification,
)
from practice_engine.core.errors import InvalidInputError
from practice_engine.core.mastery import MasteryLevel
from practice_engine.core.models import Attempt, StruggleSignals, TopicProgress
from practice_engine.core.topics import Topic
from practice_engine.logging_setup import configure_logging
from practice_engine.study.attempts import apply_attempt
from practice_engine.study.interference import analyze_topic_sequence
from practice_engine.study.interleaver import plan_mixed_session, select_practice_set
from practice_engine.study.mastery_classifier import classify_mastery
from practice_engine.study.scheduler import (
    get_topics_due_for_review,
    get_upcoming_reviews,
    is_topic_lapsed,
)

console = Console()

app = typer.Typer(
    help="practice-engine: mastery, topic classification, review scheduling and mixed practice",
    no_args_is_help=True,
)


def _load_records(path: Path) -> list[dict]:
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except (OSError, json.JSONDecodeError) as e:
        rprint(f"[red]Error:[/red] cannot read {path}: {e}")
        raise typer.Exit(code=1) from e
    if not isinstance(data, list):
        rprint(f"[red]Error:[/red] {path} must contain a JSON array")
        raise typer.Exit(code=1)
    return data


def _parse_records(path: Path, parse) -> list:
    try:
        return [parse(record) for record in _load_records(path)]
    except KeyError as e:
        rprint(f"[red]Error:[/red] {path}: record is missing field {e}")
        raise typer.Exit(code=1) from e
    except (ValueError, TypeError, AttributeError) as e:
        rprint(f"[red]Error:[/red] {path}: invalid record: {e}")
        raise typer.Exit(code=1) from e


def _load_progress(path: Path) -> list[TopicProgress]:
    return _parse_records(path, TopicProgress.from_dict)


def _load_attempts(path: Path | None) -> list[Attempt]:
    if path is None:
        return []
    return _parse_records(path, Attempt.from_dict)


def _fail(message: str) -> None:
    rprint(f"[red]Error:[/red] {message}")
    raise typer.Exit(code=2)


@app.callback()
def main_callback(
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Show debug logging"),
) -> None:
    configure_logging(level="DEBUG" if verbose else "WARNING")


@app.command("mastery")
def mastery_command(
    turns: int = typer.Argument(..., help="Learner turns taken to solve the problem"),
    problem_type: Optional[str] = typer.Option(None, "--problem-type", "-t", help="Problem type label"),
    steps: Optional[int] = typer.Option(None, "--steps", "-s", help="Steps in the reference solution"),
    hints: int = typer.Option(0, "--hints", help="Hints requested"),
    mistakes: int = typer.Option(0, "--mistakes", help="Incorrect attempts"),
    clarifications: int = typer.Option(0, "--clarifications", help="Clarification requests"),
) -> None:
    """Classify one attempt's mastery level."""
    try:
        signals = None
        if hints or mistakes or clarifications:
            signals = StruggleSignals(
                hints_requested=hints,
                incorrect_attempts=mistakes,
                clarification_requests=clarifications,
            )
        level = classify_mastery(turns, problem_type, steps, signals)
    except InvalidInputError as e:
        _fail(str(e))
        return

    rprint(f"[{level.color}]{level.value}[/{level.color}]")


@app.command("classify")
def classify_command(
    text: str = typer.Argument(..., help="Problem text"),
    explain: bool = typer.Option(False, "--explain", "-e", help="Show scoring breakdown"),
    semantic: bool = typer.Option(False, "--semantic", help="Use the semantic classifier if configured"),
) -> None:
    """Classify problem text into a topic."""
    if semantic:
        topic = asyncio.run(classify_topic_async(text))
        rprint(topic.value)
        return

    result = classify_topic_with_confidence(text)
    rprint(f"{result.topic.value} [dim](confidence {result.confidence:.2f})[/dim]")
    if result.alternatives:
        rprint(f"[dim]alternatives: {', '.join(t.value for t in result.alternatives)}[/dim]")
    if explain:
        console.print(explain_topic_classification(text), markup=False)


@app.command("schedule")
def schedule_command(
    progress_file: Path = typer.Argument(..., help="JSON array of topic progress records"),
    topic: str = typer.Argument(..., help="Topic tag, e.g. linear-equations"),
    mastery: str = typer.Argument(..., help="mastered, competent or struggling"),
    attempts_file: Optional[Path] = typer.Option(None, "--attempts", "-a", help="JSON array of past attempts"),
    turns: int = typer.Option(1, "--turns", "-t", min=1, help="Learner turns taken on the attempt"),
) -> None:
    """Apply one attempt and print the updated progress record as JSON."""
    try:
        parsed_topic = Topic.parse(topic)
        level = MasteryLevel(mastery.strip().lower())
    except (InvalidInputError, ValueError) as e:
        _fail(str(e))
        return

    outcome = apply_attempt(
        problem_text="",
        topic=parsed_topic,
        mastery=level,
        turns_taken=turns,
        all_progress=_load_progress(progress_file),
        history=_load_attempts(attempts_file),
    )
    typer.echo(json.dumps(outcome.progress.to_dict(), indent=2))


@app.command("plan")
def plan_command(
    progress_file: Path = typer.Argument(..., help="JSON array of topic progress records"),
    count: Optional[int] = typer.Option(None, "--count", "-n", help="Topics in the session (default: adaptive 5-8)"),
    seed: Optional[int] = typer.Option(None, "--seed", help="Random seed for a reproducible plan"),
) -> None:
    """Plan a mixed practice session."""
    progress = _load_progress(progress_file)
    rng = random.Random(seed)

    if count is None:
        topics = plan_mixed_session(progress, rng=rng).topics
    else:
        try:
            topics = select_practice_set(progress, count, rng=rng)
        except InvalidInputError as e:
            _fail(str(e))
            return

    table = Table(title="Mixed Practice Session")
    table.add_column("#", justify="right")
    table.add_column("Topic")
    for index, topic in enumerate(topics, start=1):
        table.add_row(str(index), topic.value)
    console.print(table)

    analysis = analyze_topic_sequence(topics)
    rprint(f"[dim]interference violations: {analysis.violations}[/dim]")


@app.command("review")
def review_command(
    progress_file: Path = typer.Argument(..., help="JSON array of topic progress records"),
    days_ahead: int = typer.Option(7, "--days-ahead", "-d", help="Horizon for upcoming reviews"),
) -> None:
    """Show due, upcoming and lapsed topics."""
    progress = _load_progress(progress_file)
    due = get_topics_due_for_review(progress)
    upcoming = get_upcoming_reviews(progress, days_ahead=days_ahead)

    table = Table(title="Reviews")
    table.add_column("Topic")
    table.add_column("Status")
    table.add_column("Next review")
    table.add_column("Strength", justify="right")

    for record in due:
        status = "[red]lapsed[/red]" if is_topic_lapsed(record) else "[yellow]due[/yellow]"
        table.add_row(record.topic.value, status, record.next_review.date().isoformat(), f"{record.strength:.2f}")
    for record in upcoming:
        table.add_row(record.topic.value, "[green]upcoming[/green]", record.next_review.date().isoformat(), f"{record.strength:.2f}")

    if not due and not upcoming:
        rprint("[green]Nothing due.[/green]")
        return
    console.print(table)


def run() -> None:
    """CLI entry point."""
    app()


if __name__ == "__main__":
    run()
