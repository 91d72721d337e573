"""
Question bank CLI.

Commands:
- quizbank bank list  : Question counts per subject and difficulty
- quizbank bank watch : Live view, refreshed on every change
"""

from __future__ import annotations

import threading
from collections import Counter

import typer
from rich.console import Console
from rich.live import Live
from rich.table import Table

from quizbank.bank.sync import QuestionBankView
from quizbank.errors import AuthError, SubscriptionError

bank_app = typer.Typer(
    help="Question bank commands",
    no_args_is_help=True,
)

console = Console()


def build_bank_table(view: QuestionBankView, title: str = "Question Bank") -> Table:
    """Table of question counts per (subject, difficulty)."""
    counts = Counter((q.subject, q.difficulty) for q in view.values())

    table = Table(title=f"{title} ({len(view)} questions)")
    table.add_column("Subject", style="cyan")
    table.add_column("Difficulty", style="magenta")
    table.add_column("Questions", justify="right")

    for subject in view.subjects():
        for difficulty in view.difficulties():
            count = counts.get((subject, difficulty))
            if count:
                table.add_row(subject, difficulty, str(count))

    return table


@bank_app.command("list")
def list_bank(ctx: typer.Context):
    """Show the current question bank."""
    cli = ctx.obj
    try:
        cli.sign_in()
        sync = cli.question_sync()
        unsubscribe = sync.subscribe(lambda view: None)
    except (AuthError, SubscriptionError) as exc:
        console.print(f"[red]{exc}[/red]")
        cli.close()
        raise typer.Exit(1)

    try:
        view = sync.view
    finally:
        unsubscribe()
        cli.close()

    if not view:
        console.print("[yellow]Question bank is empty.[/yellow]")
        return

    console.print(build_bank_table(view))


@bank_app.command("watch")
def watch_bank(ctx: typer.Context):
    """
    Watch the question bank live until interrupted (Ctrl+C).

    The table is rebuilt from scratch on every change.
    """
    cli = ctx.obj
    failed = threading.Event()

    def on_error(error: SubscriptionError) -> None:
        failed.set()

    try:
        cli.sign_in()
    except AuthError as exc:
        console.print(f"[red]{exc}[/red]")
        cli.close()
        raise typer.Exit(1)

    sync = cli.question_sync()
    sync.on_error = on_error

    with Live(build_bank_table(QuestionBankView()), console=console, refresh_per_second=4) as live:
        try:
            unsubscribe = sync.subscribe(lambda view: live.update(build_bank_table(view)))
        except SubscriptionError as exc:
            live.stop()
            console.print(f"[red]{exc}[/red]")
            cli.close()
            raise typer.Exit(1)

        try:
            while not failed.wait(timeout=0.5):
                pass
        except KeyboardInterrupt:
            pass
        finally:
            unsubscribe()
            cli.close()

    if failed.is_set():
        console.print(f"[red]Live updates stopped: {sync.last_error}[/red]")
        raise typer.Exit(1)

    console.print("[dim]Stopped watching.[/dim]")
