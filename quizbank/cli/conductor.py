"""
Exam Conductor CLI.

Commands for validating and uploading question-bank CSV files.

Commands:
- quizbank conduct check FILE             : Parse only and report every issue
- quizbank conduct upload FILE --secret S : Validate and upload all rows
"""

from __future__ import annotations

from pathlib import Path

import typer
from rich.console import Console
from rich.prompt import Prompt
from rich.table import Table

from quizbank.errors import AuthError, CsvValidationError, RoleDeniedError, UploadError
from quizbank.ingest.csv_ingestor import EXPECTED_HEADER_LINE, CsvIngestor

conduct_app = typer.Typer(
    help="Exam Conductor commands: CSV validation and question upload",
    no_args_is_help=True,
)

console = Console()


def _read_csv_file(path: Path) -> str:
    if not path.exists():
        console.print(f"[red]Error: File not found: {path}[/red]")
        raise typer.Exit(1)
    return path.read_text(encoding="utf-8-sig")


@conduct_app.command("check")
def check_csv(
    csv_file: Path = typer.Argument(..., help="Question CSV file"),
):
    """
    Parse a CSV file without uploading it.

    Shows the header status, the number of valid rows and every row error.

    Examples:
        quizbank conduct check data/sample_questions.csv
    """
    result = CsvIngestor().parse(_read_csv_file(csv_file))

    if not result.header_valid:
        if result.errors:
            console.print(f"[red]{result.errors[0]}[/red]")
        else:
            console.print(f"[red]CSV header is invalid. Expected: {EXPECTED_HEADER_LINE}[/red]")
        raise typer.Exit(1)

    console.print("[green]+[/green] Header OK")
    console.print(f"  Valid rows: [bold]{len(result.rows)}[/bold]")

    if result.errors:
        table = Table(title=f"Row Errors ({len(result.errors)})")
        table.add_column("#", style="dim", justify="right")
        table.add_column("Error", style="red")
        for i, error in enumerate(result.errors, 1):
            table.add_row(str(i), error)
        console.print(table)
        raise typer.Exit(1)

    if not result.rows:
        console.print("[yellow]No valid rows to upload.[/yellow]")
        raise typer.Exit(1)

    console.print("[green]Ready to upload.[/green]")


@conduct_app.command("upload")
def upload_csv(
    ctx: typer.Context,
    csv_file: Path = typer.Argument(..., help="Question CSV file"),
    secret: str = typer.Option(None, "--secret", "-s", help="Conductor secret phrase"),
):
    """
    Validate a CSV file and upload every question.

    Rows are committed in chunks; a failed chunk leaves earlier chunks in
    place and reports how many questions made it.

    Examples:
        quizbank conduct upload questions.csv --secret "my phrase"
    """
    cli = ctx.obj
    text = _read_csv_file(csv_file)

    if secret is None:
        secret = Prompt.ask("Conductor secret phrase", password=True)

    try:
        cli.role_policy.select_role(want_conductor=True, secret=secret)
        principal = cli.sign_in()
        service = cli.conductor_service()

        preview = service.preview(text)
        if preview.header_valid:
            console.print(f"Preview: [bold]{len(preview.rows)}[/bold] valid row(s)")

        with console.status(f"Uploading to {cli.collection_path}..."):
            result = service.upload_csv(text, principal.uid)
    except (RoleDeniedError, AuthError) as exc:
        console.print(f"[red]{exc}[/red]")
        raise typer.Exit(1)
    except CsvValidationError as exc:
        console.print(f"[red]{exc.message}[/red]")
        for error in exc.errors[1:]:
            console.print(f"  [dim]{error}[/dim]")
        raise typer.Exit(1)
    except UploadError as exc:
        console.print(f"[red]{exc}[/red]")
        console.print(f"  Committed: {exc.partial_count}  Not committed: {len(exc.remaining)}")
        raise typer.Exit(1)
    finally:
        cli.close()

    console.print(
        f"[green]Uploaded {result.uploaded_count} questions.[/green] "
        f"[dim]({result.chunk_count} commit(s))[/dim]"
    )
