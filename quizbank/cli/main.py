"""
Typer CLI for quizbank.

Commands:
    quizbank conduct check FILE              - Validate a question CSV
    quizbank conduct upload FILE --secret S  - Upload a question CSV (conductor)
    quizbank bank list                       - Question counts per subject/difficulty
    quizbank bank watch                      - Live question bank view
    quizbank study subjects                  - Available subjects and difficulties
    quizbank study take -s S -d D            - Take a shuffled exam
    quizbank config                          - Show current configuration
    quizbank version                         - Show version information

Usage:
    quizbank --help
    quizbank conduct check data/sample_questions.csv
    quizbank study take --subject Math --difficulty Easy --seed 7
"""

from __future__ import annotations

import sys

import typer
from loguru import logger
from rich import print as rprint
from rich.console import Console
from rich.table import Table

from config import get_settings
from quizbank import __version__
from quizbank.cli.bank import bank_app
from quizbank.cli.conductor import conduct_app
from quizbank.cli.context import CLIContext
from quizbank.cli.student import study_app

app = typer.Typer(
    help="quizbank CLI: CSV question-bank upload and shuffled exams",
    no_args_is_help=True,
)

app.add_typer(conduct_app, name="conduct")
app.add_typer(bank_app, name="bank")
app.add_typer(study_app, name="study")

console = Console()


def configure_logging(level: str, log_file: str | None = None) -> None:
    """Route loguru to stderr at ``level`` and optionally to a rotating file."""
    logger.remove()
    logger.add(
        sys.stderr,
        level=level,
        format="<level>{message}</level>",
    )
    if log_file:
        logger.add(
            log_file,
            level="DEBUG",
            rotation="10 MB",
            format="{time:YYYY-MM-DD HH:mm:ss} | {level: <8} | {name}:{function} - {message}",
        )


@app.callback()
def main_callback(
    ctx: typer.Context,
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Show debug logging"),
):
    """
    Quiz platform for exam conductors and students.

    Conductors upload question banks from CSV; students take shuffled
    exams filtered by subject and difficulty.
    """
    settings = get_settings()
    configure_logging("DEBUG" if verbose else settings.log_level, settings.log_file)
    ctx.obj = CLIContext(settings)


@app.command("config")
def show_config() -> None:
    """Show current configuration (secrets masked)."""
    settings = get_settings()

    table = Table(title="quizbank Configuration")
    table.add_column("Setting", style="cyan")
    table.add_column("Value", style="green")

    table.add_row("Tenant", settings.tenant_id)
    table.add_row("Collection", settings.questions_collection_path)
    table.add_row("Database", settings.database_url.split("@")[-1])
    table.add_row("Identity backend", settings.identity_backend)
    table.add_row("Upload chunk size", str(settings.upload_chunk_size))
    table.add_row("Sync poll interval", f"{settings.sync_poll_interval_seconds}s")
    table.add_row("Conductor role", "enabled" if settings.conductor_secret else "[yellow]disabled[/yellow]")
    table.add_row("Log level", settings.log_level)

    console.print(table)


@app.command("version")
def show_version() -> None:
    """Show version information."""
    rprint(f"[bold]quizbank[/bold] v{__version__}")
    rprint("  CSV question banks -> live sync -> shuffled exams")


def main() -> None:
    """Entry point for the CLI."""
    app()


if __name__ == "__main__":
    main()
