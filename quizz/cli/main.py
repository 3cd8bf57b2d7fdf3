"""
Typer CLI for the quizz practice service.

Commands:
    quizz init-db                          - Initialize database tables
    quizz import FILE                      - Bulk import questions from JSON
    quizz answer -u 1 -q 42 "Paris"        - Record an answer
    quizz next -u 1 --count 5              - Show the next practice questions
    quizz stats -u 1                       - Show answer statistics
    quizz serve                            - Run the HTTP API

Usage:
    quizz --help
    quizz import questions.json --user 1 --role admin
    quizz answer --user 1 --question 7 '["liberté", "égalité"]'
"""

from __future__ import annotations

import json
import sys
from pathlib import Path
from typing import Any, NoReturn, Optional

import typer
from loguru import logger
from rich import print as rprint
from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from config import get_settings
from quizz.db.database import SessionLocal, init_db
from quizz.db.repositories import SqlProgressRepository, SqlQuestionRepository
from quizz.practice.errors import QuizzError
from quizz.practice.models import Role
from quizz.practice.service import Caller, PracticeService, QuestionService

app = typer.Typer(
    help="quizz CLI: quiz practice engine (answers, next questions, stats, import)",
    no_args_is_help=True,
)
console = Console()


def _practice_service() -> PracticeService:
    return PracticeService(
        questions=SqlQuestionRepository(SessionLocal),
        progress=SqlProgressRepository(SessionLocal),
        settings=get_settings(),
    )


def _question_service() -> QuestionService:
    return QuestionService(questions=SqlQuestionRepository(SessionLocal), settings=get_settings())


def _fail(error: Exception) -> NoReturn:
    rprint(f"[red]✗[/red] {error}")
    raise typer.Exit(code=1)


def _load_items(path: Path) -> list[dict[str, Any]]:
    """Read `{"questions": [...]}` or a bare list from a JSON file."""
    data = json.loads(path.read_text(encoding="utf-8"))
    if isinstance(data, dict):
        data = data.get("questions", [])
    if not isinstance(data, list):
        raise ValueError("expected a list of questions or an object with a 'questions' list")
    return data


# ========================================
# Database
# ========================================


@app.command("init-db")
def init_db_command() -> None:
    """
    Initialize database tables from SQLAlchemy models.

    Safe to run multiple times (idempotent).
    """
    logger.info("Initializing database tables...")
    init_db()
    rprint("[green]✓[/green] Database initialized!")


# ========================================
# Questions
# ========================================


@app.command("import")
def import_command(
    file: Path = typer.Argument(..., exists=True, dir_okay=False, help="JSON file of questions"),
    user: int = typer.Option(1, "--user", "-u", help="Importing user ID"),
    role: Role = typer.Option(Role.ADMIN, "--role", "-r", help="Importing user role"),
) -> None:
    """Bulk import questions, skipping invalid items and duplicates."""
    try:
        items = _load_items(file)
    except (ValueError, OSError) as e:
        _fail(e)

    rprint(f"[yellow]Importing {len(items)} questions from {file}...[/yellow]\n")
    try:
        result = _question_service().import_questions(items, Caller(user_id=user, role=role))
    except QuizzError as e:
        _fail(e)

    table = Table(title="Import Summary", show_header=True)
    table.add_column("Metric", style="cyan")
    table.add_column("Count", justify="right", style="green")
    table.add_row("Questions in file", str(result.total_questions))
    table.add_row("Imported", str(result.imported_questions))
    table.add_row(
        "Skipped",
        str(result.skipped_questions),
        style="yellow" if result.skipped_questions > 0 else None,
    )
    table.add_row("Time taken", result.time_taken)
    console.print(table)

    if result.errors:
        rprint(f"\n[yellow]Warnings ({len(result.errors)}):[/yellow]")
        for error in result.errors[:5]:
            rprint(f"  - {error}")
        if len(result.errors) > 5:
            rprint(f"  ... and {len(result.errors) - 5} more")


# ========================================
# Practice
# ========================================


@app.command()
def answer(
    user_answer: str = typer.Argument(..., help="Answer text; JSON array or comma list for multiple select"),
    user: int = typer.Option(..., "--user", "-u", help="Answering user ID"),
    question: int = typer.Option(..., "--question", "-q", help="Question ID"),
    time_taken: Optional[int] = typer.Option(None, "--time", "-t", help="Seconds spent answering"),
) -> None:
    """Judge an answer and record it in the user's history."""
    try:
        entry = _practice_service().record_progress(user, question, user_answer, time_taken_seconds=time_taken)
    except QuizzError as e:
        _fail(e)

    if entry.is_correct:
        rprint(f"[green]✓ Correct![/green] (progress #{entry.id})")
    else:
        rprint(f"[red]✗ Incorrect[/red] (progress #{entry.id})")


@app.command("next")
def next_command(
    user: int = typer.Option(..., "--user", "-u", help="User ID"),
    count: Optional[int] = typer.Option(None, "--count", "-n", help="Batch size (1-50, default 10)"),
) -> None:
    """Show the next practice questions for a user."""
    service = _practice_service()
    questions = service.next_questions(user, count)
    if not questions:
        rprint("[yellow]No approved questions available.[/yellow]")
        return

    table = Table(title=f"Next {len(questions)} questions for user {user}")
    table.add_column("ID", justify="right")
    table.add_column("Category", style="cyan")
    table.add_column("Type")
    table.add_column("Question")
    table.add_column("Choices", style="dim")

    for item in questions:
        table.add_row(
            str(item.id),
            item.category,
            item.question_type,
            item.question,
            ", ".join(item.choices),
        )
    console.print(table)


@app.command()
def stats(
    user: int = typer.Option(..., "--user", "-u", help="User ID"),
) -> None:
    """Show answer statistics for a user."""
    result = _practice_service().user_stats(user)

    summary = (
        f"Answered: [bold]{result.answered}[/bold] of {result.total_questions} questions\n"
        f"Correct: [green]{result.correct}[/green]  Accuracy: [bold]{result.accuracy * 100:.1f}%[/bold]\n"
        f"Current streak: [bold]{result.streak}[/bold]"
    )
    console.print(Panel(summary, title=f"User {user}", border_style="cyan"))

    if result.categories:
        table = Table(title="By Category")
        table.add_column("Category", style="cyan")
        table.add_column("Answered", justify="right")
        table.add_column("Correct", justify="right", style="green")
        for name, stat in sorted(result.categories.items()):
            table.add_row(name, str(stat.answered), str(stat.correct))
        console.print(table)


@app.command()
def serve() -> None:
    """Run the HTTP API with uvicorn."""
    from quizz.api.main import run

    run()


# =============================================================================
# Entry Point
# =============================================================================


def main() -> None:
    """CLI entry point."""
    logger.remove()
    logger.add(
        sys.stderr,
        level=get_settings().log_level,
        format="<level>{message}</level>",
    )

    app()


if __name__ == "__main__":
    main()
