"""
Smoke Tests for CLI Commands.

These tests verify that CLI commands run without errors and produce output.
They don't validate correctness deeply - just that commands work end to end
against a throwaway SQLite database.

Usage:
    pytest tests/smoke/test_cli_commands.py -v
    pytest tests/smoke/test_cli_commands.py -v -m smoke
"""

import os
import subprocess
import sys
from pathlib import Path

import pytest

# Mark all tests in this module as smoke tests
pytestmark = pytest.mark.smoke

# Project root
PROJECT_ROOT = Path(__file__).parent.parent.parent
SAMPLE_CSV = PROJECT_ROOT / "data" / "sample_questions.csv"
SECRET = "open sesame"


@pytest.fixture
def cli_env(tmp_path):
    """Environment pointing the CLI at a temp database with a conductor secret."""
    env = dict(os.environ)
    env.update({
        "DATABASE_URL": f"sqlite:///{tmp_path / 'quizbank.db'}",
        "TENANT_ID": "smoke_test",
        "CONDUCTOR_SECRET": SECRET,
        "IDENTITY_BACKEND": "local",
        "SYNC_POLL_INTERVAL_SECONDS": "0.1",
        "LOG_LEVEL": "WARNING",
    })
    env.pop("INITIAL_AUTH_TOKEN", None)
    return env


def run_cli_command(
    args: list[str],
    env: dict | None = None,
    stdin: str | None = None,
    timeout: int = 60,
) -> tuple[int, str, str]:
    """
    Run a CLI command and return exit code, stdout, stderr.

    Args:
        args: Arguments after 'python -m quizbank.cli.main'
        env: Process environment
        stdin: Text piped to the command
        timeout: Maximum time to wait

    Returns:
        Tuple of (exit_code, stdout, stderr)
    """
    result = subprocess.run(
        [sys.executable, "-m", "quizbank.cli.main", *args],
        cwd=PROJECT_ROOT,
        env=env,
        input=stdin,
        capture_output=True,
        text=True,
        timeout=timeout,
    )

    return result.returncode, result.stdout, result.stderr


class TestCLIHelp:
    """Test that help commands work."""

    def test_main_help(self):
        code, stdout, stderr = run_cli_command(["--help"])

        assert code == 0, f"Help failed: {stderr}"
        assert "conduct" in stdout
        assert "study" in stdout

    @pytest.mark.parametrize("group", ["conduct", "bank", "study"])
    def test_group_help(self, group):
        code, stdout, stderr = run_cli_command([group, "--help"])

        assert code == 0, f"{group} help failed: {stderr}"

    def test_version(self, cli_env):
        code, stdout, stderr = run_cli_command(["version"], env=cli_env)

        assert code == 0, stderr
        assert "quizbank" in stdout


class TestConductCheck:
    """Test CSV validation without upload."""

    def test_sample_csv_is_valid(self, cli_env):
        code, stdout, stderr = run_cli_command(["conduct", "check", str(SAMPLE_CSV)], env=cli_env)

        assert code == 0, f"Check failed: {stdout} {stderr}"
        assert "Valid rows" in stdout
        assert "Ready to upload" in stdout

    def test_bad_rows_reported(self, cli_env, tmp_path):
        bad = tmp_path / "bad.csv"
        bad.write_text(
            "subject,difficulty,question,option1,option2,option3,option4,correctAnswerIndex\n"
            "Math,Easy,Q?,a,b,c,d,9\n",
            encoding="utf-8",
        )

        code, stdout, stderr = run_cli_command(["conduct", "check", str(bad)], env=cli_env)

        assert code == 1
        assert "correctAnswerIndex must be an integer between 0 and 3" in stdout

    def test_missing_file(self, cli_env, tmp_path):
        code, stdout, stderr = run_cli_command(
            ["conduct", "check", str(tmp_path / "nope.csv")], env=cli_env
        )

        assert code == 1


@pytest.mark.slow
class TestUploadAndStudy:
    """Upload the sample bank, then browse and take an exam."""

    def test_wrong_secret_rejected(self, cli_env):
        code, stdout, stderr = run_cli_command(
            ["conduct", "upload", str(SAMPLE_CSV), "--secret", "nope"], env=cli_env
        )

        assert code == 1
        assert "Invalid secret phrase for Exam Conductor." in stdout

    def test_upload_then_study(self, cli_env):
        code, stdout, stderr = run_cli_command(
            ["conduct", "upload", str(SAMPLE_CSV), "--secret", SECRET], env=cli_env
        )
        assert code == 0, f"Upload failed: {stdout} {stderr}"
        assert "Uploaded 10 questions" in stdout

        code, stdout, stderr = run_cli_command(["bank", "list"], env=cli_env)
        assert code == 0, stderr
        assert "History" in stdout
        assert "10 questions" in stdout

        code, stdout, stderr = run_cli_command(["study", "subjects"], env=cli_env)
        assert code == 0, stderr
        assert "Science" in stdout
        assert "Medium" in stdout

        code, stdout, stderr = run_cli_command(
            ["study", "take", "--subject", "Science", "--difficulty", "Hard", "--seed", "1"],
            env=cli_env,
            stdin="A\nn\n",
        )
        assert code == 0, f"Exam failed: {stdout} {stderr}"
        assert "You scored 1 out of 1." in stdout

    def test_take_with_no_match(self, cli_env):
        run_cli_command(["conduct", "upload", str(SAMPLE_CSV), "--secret", SECRET], env=cli_env)

        code, stdout, stderr = run_cli_command(
            ["study", "take", "--subject", "Art", "--difficulty", "Easy"], env=cli_env
        )

        assert code == 1
        assert "No questions found for this selection." in stdout
