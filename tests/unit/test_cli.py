"""Tests for the command-line interface."""

from unittest.mock import patch

from typer.testing import CliRunner

from ebook_analyzer import __version__
from ebook_analyzer.cli.main import app
from ebook_analyzer.config.models import JobConfig
from ebook_analyzer.jobs import JobOrchestrator

runner = CliRunner()


class TestCLI:
    """Smoke tests for the Typer app."""

    def test_version(self):
        result = runner.invoke(app, ["--version"])
        assert result.exit_code == 0
        assert __version__ in result.output

    def test_help_lists_commands(self):
        result = runner.invoke(app, ["--help"])
        assert result.exit_code == 0
        for command in ("serve", "analyze", "resume", "status", "recent"):
            assert command in result.output

    def test_serve_runs_uvicorn(self):
        with patch("uvicorn.run") as run:
            result = runner.invoke(app, ["serve", "--port", "8123", "--provider", "ollama"])

        assert result.exit_code == 0
        assert run.call_args.kwargs["port"] == 8123

    def test_analyze_requires_existing_file(self, tmp_path):
        result = runner.invoke(app, ["analyze", str(tmp_path / "missing.pdf")])
        assert result.exit_code != 0

    def test_analyze_local(self, tmp_path, fake_oracle):
        """--local runs the whole analysis in-process and prints the report."""
        document = tmp_path / "tale.txt"
        document.write_text("A short tale about a lighthouse keeper.", encoding="utf-8")
        orchestrator = JobOrchestrator(oracle=fake_oracle, jobs=JobConfig(retry_wait_seconds=0))

        with patch("ebook_analyzer.api.app.build_orchestrator", return_value=orchestrator):
            result = runner.invoke(app, ["analyze", str(document), "--local"])

        assert result.exit_code == 0, result.output
        assert "Analysis complete" in result.output
        assert "Summary 0" in result.output
        assert fake_oracle.calls == [0]

    def test_analyze_local_rejected(self, tmp_path, fake_oracle):
        document = tmp_path / "data.bin"
        document.write_bytes(b"\x00\x01\x02")
        orchestrator = JobOrchestrator(oracle=fake_oracle, jobs=JobConfig(retry_wait_seconds=0))

        with patch("ebook_analyzer.api.app.build_orchestrator", return_value=orchestrator):
            result = runner.invoke(app, ["analyze", str(document), "--local"])

        assert result.exit_code == 2
        assert fake_oracle.calls == []
