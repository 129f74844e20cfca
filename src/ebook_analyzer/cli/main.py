"""Main CLI entry point for ebook-analyzer."""

import asyncio
import os
import sys
from pathlib import Path
from typing import Annotated, Optional

import typer
from rich.console import Console
from rich.table import Table

from ebook_analyzer import __version__
from ebook_analyzer.config import AnalyzerConfig, load_config
from ebook_analyzer.llm.factory import get_available_providers
from ebook_analyzer.utils.logging import setup_logging


def _load_dotenv() -> None:
    """Load .env file if it exists."""
    current = Path.cwd()
    for path in [current, *current.parents]:
        env_file = path / ".env"
        if env_file.exists():
            with open(env_file) as f:
                for line in f:
                    line = line.strip()
                    if line and not line.startswith("#") and "=" in line:
                        key, _, value = line.partition("=")
                        key = key.strip()
                        value = value.strip().strip("\"'")
                        if key and key not in os.environ:
                            os.environ[key] = value
            break


_load_dotenv()

app = typer.Typer(
    name="ebook-analyzer",
    help="""Analyze eBooks against ten quality parameters with an LLM.

Long documents are split into segments, a representative sample of
segments is scored, and the results are merged into one report.

[bold]Examples:[/bold]

  [dim]# Start the API server[/dim]
  ebook-analyzer serve --port 8000

  [dim]# Analyze a PDF and wait for the report[/dim]
  ebook-analyzer analyze ./book.pdf

  [dim]# Pick up a job left running by an interrupted client[/dim]
  ebook-analyzer resume

[bold]Configuration:[/bold]

  Create [cyan]ebook-analyzer.config.json[/cyan] in your project root, or use CLI flags.
  Set [cyan]ANTHROPIC_API_KEY[/cyan] for Claude, or use --provider ollama for a local LLM.
""",
    no_args_is_help=True,
    rich_markup_mode="rich",
)

console = Console()


def version_callback(value: bool) -> None:
    """Print version and exit."""
    if value:
        console.print(f"ebook-analyzer version {__version__}")
        raise typer.Exit()


@app.callback()
def main(
    version: Annotated[
        Optional[bool],
        typer.Option(
            "--version",
            "-V",
            help="Show version and exit.",
            callback=version_callback,
            is_eager=True,
        ),
    ] = None,
) -> None:
    """Analyze eBooks with an LLM."""
    pass


ConfigOption = Annotated[
    Optional[Path],
    typer.Option(
        "--config",
        "-c",
        help="Path to configuration file.",
        exists=True,
        file_okay=True,
        dir_okay=False,
        readable=True,
    ),
]

ServerOption = Annotated[
    Optional[str],
    typer.Option(
        "--server",
        "-s",
        help="Analyzer API base URL.",
    ),
]

VerboseOption = Annotated[
    int,
    typer.Option(
        "--verbose",
        "-v",
        help="Verbosity level (0=quiet, 1=normal, 2=verbose, 3=debug).",
        min=0,
        max=3,
        count=True,
    ),
]


def _make_poller(cfg: AnalyzerConfig, tracker):
    """Wire the API client, durable state and poller for client commands."""
    from ebook_analyzer.client import AnalyzerApiClient, ClientPoller, ClientStateStore

    api = AnalyzerApiClient(cfg.poller.server_url, timeout=cfg.poller.request_timeout)
    state = ClientStateStore(cfg.poller.state_db_path)
    poller = ClientPoller(api, state, config=cfg.poller, on_progress=tracker.update)
    return api, poller


def _print_outcome(outcome, tracker) -> None:
    """Print a poll outcome and its report."""
    from ebook_analyzer.client import PollState

    if outcome.state == PollState.FAILED:
        tracker.print_error(f"Analysis failed: {outcome.error or 'unknown error'}")
        return

    if outcome.state == PollState.COMPLETED:
        tracker.print_success(f"Analysis complete (job {outcome.job_id})")
    elif outcome.state == PollState.OPTIMISTIC:
        tracker.print_success(f"Analysis presumed complete (job {outcome.job_id})")
    else:
        tracker.print_warning(
            f"Gave up waiting after {outcome.elapsed_seconds:.0f}s; "
            f"run 'ebook-analyzer status {outcome.job_id}' later"
        )

    if outcome.report is not None:
        console.print()
        tracker.display_report(outcome.report)
    elif outcome.state != PollState.COMPLETED:
        console.print("[dim]The server has not confirmed a report yet.[/dim]")


def _run_local_analysis(document: Path, cfg: AnalyzerConfig, verbose: int) -> None:
    """Analyze a document in this process, without an API server."""
    import aiofiles

    from ebook_analyzer.api.app import build_orchestrator, resolve_mime_type
    from ebook_analyzer.client.progress import ProgressTracker
    from ebook_analyzer.errors import ValidationError
    from ebook_analyzer.models.enums import JobStatus

    tracker = ProgressTracker(console=console)

    async def run_local():
        async with aiofiles.open(document, "rb") as f:
            payload = await f.read()
        orchestrator = build_orchestrator(cfg)
        mime_type = resolve_mime_type(document.name, None)
        return await orchestrator.process(payload, mime_type, filename=document.name)

    try:
        with console.status("Analyzing locally..."):
            job = asyncio.run(run_local())
    except ValidationError as e:
        tracker.print_error(f"Rejected: {e}")
        sys.exit(2)
    except KeyboardInterrupt:
        console.print("\n[yellow]Interrupted[/yellow]")
        sys.exit(1)
    except Exception as e:
        console.print(f"\n[bold red]Error:[/bold red] {e}")
        if verbose >= 2:
            console.print_exception()
        sys.exit(1)

    if job.status == JobStatus.FAILED:
        tracker.print_error(f"Analysis failed: {job.error_detail or job.error}")
        sys.exit(1)

    tracker.print_success(f"Analysis complete (job {job.job_id})")
    console.print()
    tracker.display_report(job.result)


@app.command()
def serve(
    host: Annotated[
        str,
        typer.Option("--host", help="Interface to bind."),
    ] = "127.0.0.1",
    port: Annotated[
        int,
        typer.Option("--port", help="Port to listen on.", min=1, max=65535),
    ] = 8000,
    config: ConfigOption = None,
    verbose: VerboseOption = 1,
    provider: Annotated[
        Optional[str],
        typer.Option(
            "--provider",
            "-p",
            help=f"LLM provider to use ({', '.join(get_available_providers())}).",
        ),
    ] = None,
    model: Annotated[
        Optional[str],
        typer.Option(
            "--model",
            "-m",
            help="LLM model to use for analysis.",
        ),
    ] = None,
    max_segment_chars: Annotated[
        Optional[int],
        typer.Option(
            "--max-segment-chars",
            help="Maximum characters per segment.",
            min=1,
        ),
    ] = None,
    sampling_ceiling: Annotated[
        Optional[int],
        typer.Option(
            "--sampling-ceiling",
            help="Segment count above which only first, middle and last are analyzed.",
            min=1,
        ),
    ] = None,
) -> None:
    """Run the analyzer API server.

    [bold]Examples:[/bold]

      [dim]# Default (Claude, localhost:8000)[/dim]
      ebook-analyzer serve

      [dim]# Local Ollama model on all interfaces[/dim]
      ebook-analyzer serve --host 0.0.0.0 --provider ollama --model llama3.2
    """
    import uvicorn

    from ebook_analyzer.api import create_app

    cfg = load_config(
        config_path=config,
        provider=provider,
        model=model,
        max_segment_chars=max_segment_chars,
        sampling_ceiling=sampling_ceiling,
    )

    setup_logging(verbosity=verbose)

    console.print("[bold green]Starting eBook Analyzer API[/bold green]")
    console.print(f"  Listening: http://{host}:{port}")
    console.print(f"  Provider: {cfg.llm.provider.value}")
    console.print(f"  Model: {cfg.llm.model}")
    console.print()

    try:
        uvicorn.run(
            create_app(cfg),
            host=host,
            port=port,
            log_level="debug" if verbose >= 2 else "info",
        )
    except Exception as e:
        console.print(f"\n[bold red]Error:[/bold red] {e}")
        if verbose >= 2:
            console.print_exception()
        sys.exit(1)


@app.command()
def analyze(
    document: Annotated[
        Path,
        typer.Argument(
            help="Document to analyze (PDF, plain text or Markdown).",
            exists=True,
            file_okay=True,
            dir_okay=False,
            readable=True,
        ),
    ],
    server: ServerOption = None,
    config: ConfigOption = None,
    verbose: VerboseOption = 1,
    grace_period: Annotated[
        Optional[float],
        typer.Option(
            "--grace-period",
            help="Seconds at the estimate cap before assuming completion.",
            min=0.0,
        ),
    ] = None,
    max_duration: Annotated[
        Optional[float],
        typer.Option(
            "--max-duration",
            help="Give up waiting after this many seconds.",
            min=1.0,
        ),
    ] = None,
    local: Annotated[
        bool,
        typer.Option(
            "--local",
            help="Analyze in this process instead of through an API server.",
        ),
    ] = False,
) -> None:
    """Submit a document and wait for its report.

    [bold]Examples:[/bold]

      [dim]# Analyze against a local server[/dim]
      ebook-analyzer analyze ./book.pdf

      [dim]# Remote server, wait longer before assuming success[/dim]
      ebook-analyzer analyze ./book.pdf --server http://analyzer:8000 --grace-period 60

      [dim]# No server: run the analysis in this process[/dim]
      ebook-analyzer analyze ./book.pdf --local
    """
    from ebook_analyzer.client.progress import ProgressTracker
    from ebook_analyzer.errors import ValidationError

    cfg = load_config(
        config_path=config,
        server_url=server,
        grace_period=grace_period,
        max_duration=max_duration,
    )

    setup_logging(verbosity=verbose)

    console.print(f"[bold green]Analyzing {document.name}[/bold green]")
    if local:
        console.print(f"  Provider: {cfg.llm.provider.value}")
        console.print()
        _run_local_analysis(document, cfg, verbose)
        return

    console.print(f"  Server: {cfg.poller.server_url}")
    console.print()

    tracker = ProgressTracker(console=console)

    async def run_analysis():
        api, poller = _make_poller(cfg, tracker)
        async with api:
            tracker.start()
            try:
                return await poller.submit_and_wait(document)
            finally:
                tracker.finish()

    try:
        outcome = asyncio.run(run_analysis())
        _print_outcome(outcome, tracker)
        if not outcome.is_success:
            sys.exit(1)

    except ValidationError as e:
        tracker.print_error(f"Rejected by server: {e}")
        sys.exit(2)
    except KeyboardInterrupt:
        console.print("\n[yellow]Interrupted; run 'ebook-analyzer resume' to keep waiting[/yellow]")
        sys.exit(1)
    except Exception as e:
        console.print(f"\n[bold red]Error:[/bold red] {e}")
        if verbose >= 2:
            console.print_exception()
        sys.exit(1)


@app.command()
def resume(
    job_id: Annotated[
        Optional[str],
        typer.Argument(help="Job to resume (defaults to the last active job)."),
    ] = None,
    server: ServerOption = None,
    config: ConfigOption = None,
    verbose: VerboseOption = 1,
) -> None:
    """Resume waiting on a job after the client was interrupted."""
    from ebook_analyzer.client.progress import ProgressTracker

    cfg = load_config(config_path=config, server_url=server)
    setup_logging(verbosity=verbose)

    tracker = ProgressTracker(console=console)

    async def run_resume():
        api, poller = _make_poller(cfg, tracker)
        async with api:
            tracker.start("Resuming")
            try:
                return await poller.resume(job_id)
            finally:
                tracker.finish()

    try:
        outcome = asyncio.run(run_resume())
        if outcome is None:
            console.print("[yellow]No active job to resume[/yellow]")
            return
        _print_outcome(outcome, tracker)
        if not outcome.is_success:
            sys.exit(1)

    except KeyboardInterrupt:
        console.print("\n[yellow]Interrupted[/yellow]")
        sys.exit(1)
    except Exception as e:
        console.print(f"\n[bold red]Error:[/bold red] {e}")
        if verbose >= 2:
            console.print_exception()
        sys.exit(1)


@app.command()
def status(
    job_id: Annotated[str, typer.Argument(help="Job identifier.")],
    server: ServerOption = None,
    config: ConfigOption = None,
    verbose: VerboseOption = 1,
) -> None:
    """Show the server's current record for a job."""
    from ebook_analyzer.client import AnalyzerApiClient

    cfg = load_config(config_path=config, server_url=server)
    setup_logging(verbosity=verbose)

    async def fetch():
        async with AnalyzerApiClient(cfg.poller.server_url, timeout=cfg.poller.request_timeout) as api:
            return await api.status(job_id)

    try:
        record = asyncio.run(fetch())
    except Exception as e:
        console.print(f"[bold red]Error:[/bold red] {e}")
        sys.exit(1)

    if record is None:
        console.print(f"[yellow]Job {job_id} not found on this server[/yellow]")
        sys.exit(1)

    table = Table(title=f"Job {job_id}")
    table.add_column("Field", style="cyan")
    table.add_column("Value")

    table.add_row("Status", record.status.value)
    table.add_row("Progress", f"{record.progress_percent}%")
    table.add_row("Stage", record.stage_label)
    table.add_row("Segments", f"{record.segments_planned} of {record.segments_total}")
    if record.segments_failed:
        table.add_row("Failed segments", f"[yellow]{record.segments_failed}[/]")
    if record.error:
        table.add_row("Error", f"[red]{record.error}[/]")

    console.print(table)


@app.command()
def recent(
    server: ServerOption = None,
    config: ConfigOption = None,
    verbose: VerboseOption = 1,
) -> None:
    """List finished jobs the server still holds, oldest first."""
    from ebook_analyzer.client import AnalyzerApiClient

    cfg = load_config(config_path=config, server_url=server)
    setup_logging(verbosity=verbose)

    async def fetch():
        async with AnalyzerApiClient(cfg.poller.server_url, timeout=cfg.poller.request_timeout) as api:
            return await api.recent_jobs()

    try:
        jobs = asyncio.run(fetch())
    except Exception as e:
        console.print(f"[bold red]Error:[/bold red] {e}")
        sys.exit(1)

    if not jobs:
        console.print("[yellow]No finished jobs[/yellow]")
        return

    table = Table(title="Recent Jobs")
    table.add_column("Job", style="cyan")
    table.add_column("Status")
    table.add_column("Finished")
    table.add_column("Items", justify="right")

    for job in jobs:
        status_str = "[green]completed[/]" if job.status == "completed" else f"[red]{job.status}[/]"
        items = str(job.report.item_count) if job.report else "-"
        table.add_row(job.job_id, status_str, job.completed_at or "", items)

    console.print(table)


if __name__ == "__main__":
    app()
