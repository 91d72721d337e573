"""
Student CLI.

Commands:
- quizbank study subjects                        : Available subjects and difficulties
- quizbank study take --subject S --difficulty D : Take a shuffled exam
"""

from __future__ import annotations

import random
from typing import Optional

import typer
from rich import box
from rich.console import Console, Group
from rich.panel import Panel
from rich.prompt import Confirm, Prompt
from rich.table import Table

from quizbank.bank.sync import QuestionBankSync
from quizbank.cli.context import CLIContext
from quizbank.errors import AuthError, SubscriptionError
from quizbank.exam.engine import ExamSessionEngine, ExamStatus
from quizbank.models import Question
from quizbank.store.base import Unsubscribe

study_app = typer.Typer(
    help="Student commands: browse subjects and take exams",
    no_args_is_help=True,
)

console = Console()

OPTION_LETTERS = ("A", "B", "C", "D")


def render_question(question: Question, position: int, total: int) -> Panel:
    """Question panel with lettered options."""
    table = Table(box=box.MINIMAL, show_header=False)
    table.add_column("Letter", style="cyan", justify="right", width=4)
    table.add_column("Option", style="white")
    for letter, option in zip(OPTION_LETTERS, question.options):
        table.add_row(f"{letter}.", option)

    return Panel(
        Group(f"[bold]{question.question}[/bold]\n", table),
        title=f"Question {position} of {total}",
        subtitle=f"[dim]{question.subject} / {question.difficulty}[/dim]",
        border_style="cyan",
    )


def run_exam(engine: ExamSessionEngine) -> None:
    """Ask every question of an active session until it completes."""
    while engine.status is ExamStatus.ACTIVE:
        question = engine.current_question
        position, total = engine.progress
        console.print(render_question(question, position, total))

        letters = list(OPTION_LETTERS[: len(question.options)])
        choice = Prompt.ask("Your answer", choices=letters, case_sensitive=False)
        engine.answer(letters.index(choice.upper()))


def _open_view(cli: CLIContext) -> tuple[QuestionBankSync, Unsubscribe]:
    """Sign in and subscribe; the first view is ready on return."""
    try:
        cli.sign_in()
        sync = cli.question_sync()
        unsubscribe = sync.subscribe(lambda view: None)
    except (AuthError, SubscriptionError) as exc:
        console.print(f"[red]{exc}[/red]")
        cli.close()
        raise typer.Exit(1)
    return sync, unsubscribe


@study_app.command("subjects")
def list_subjects(ctx: typer.Context):
    """Show the subjects and difficulties available in the bank."""
    cli = ctx.obj
    sync, unsubscribe = _open_view(cli)
    try:
        subjects = sync.subjects()
        difficulties = sync.difficulties()
    finally:
        unsubscribe()
        cli.close()

    if not subjects:
        console.print("[yellow]No questions available yet.[/yellow]")
        return

    console.print("[bold cyan]Subjects[/bold cyan]")
    for subject in subjects:
        console.print(f"  {subject}")
    console.print("[bold cyan]Difficulties[/bold cyan]")
    for difficulty in difficulties:
        console.print(f"  {difficulty}")


@study_app.command("take")
def take_exam(
    ctx: typer.Context,
    subject: Optional[str] = typer.Option(None, "--subject", "-s", help="Subject to study"),
    difficulty: Optional[str] = typer.Option(None, "--difficulty", "-d", help="Difficulty level"),
    seed: Optional[int] = typer.Option(None, "--seed", help="Shuffle seed for a reproducible order"),
):
    """
    Take an exam on one subject and difficulty.

    Questions are shuffled; answer each with its letter. The score is shown
    at the end and the exam can be retaken with a fresh order.

    Examples:
        quizbank study take --subject Math --difficulty Easy
    """
    cli = ctx.obj
    sync, unsubscribe = _open_view(cli)
    engine = ExamSessionEngine(rng=random.Random(seed) if seed is not None else None)

    try:
        view = sync.view
        if not view:
            console.print("[yellow]No questions available yet.[/yellow]")
            raise typer.Exit(1)
        if subject is None:
            subject = Prompt.ask("Subject", choices=view.subjects())
        if difficulty is None:
            difficulty = Prompt.ask("Difficulty", choices=view.difficulties())

        while True:
            if not engine.start_exam(sync.view, subject, difficulty):
                console.print("[yellow]No questions found for this selection.[/yellow]")
                raise typer.Exit(1)

            run_exam(engine)
            score = engine.score()
            console.print(Panel(
                f"[bold]You scored {score.correct} out of {score.total}.[/bold]",
                border_style="green" if score.correct == score.total else "yellow",
            ))

            engine.reset()
            if not Confirm.ask("Retake exam?", default=False):
                break
    finally:
        unsubscribe()
        cli.close()
