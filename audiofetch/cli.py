"""
audiofetch.cli - Typer CLI entry point.

Provides subcommands for probing, converting, serving the HTTP API, and
managing the external tool binaries.
"""

from __future__ import annotations

import json
from pathlib import Path

import typer
from rich.console import Console
from rich.table import Table

from audiofetch import __version__
from audiofetch.config import (
    CONFIG_FILENAME,
    AudioFetchConfig,
    create_default_config,
    load_config,
    write_config,
)
from audiofetch.exceptions import AudioFetchError, BinaryUnavailableError
from audiofetch.logging import configure_logging

app = typer.Typer(
    name="audiofetch",
    help="Convert online media to audio and publish it to object storage.\n\n"
    "Probes a URL or search query with yt-dlp, converts the audio with FFmpeg, "
    "and uploads the result under a stable key.",
    add_completion=False,
)
console = Console()


def version_callback(value: bool) -> None:
    if value:
        console.print(f"audiofetch {__version__}")
        raise typer.Exit()


def get_config(ctx: typer.Context) -> AudioFetchConfig:
    """Load configuration once per invocation, exiting on errors."""
    state = ctx.ensure_object(dict)
    if "config" not in state:
        try:
            state["config"] = load_config(state.get("config_path"))
        except AudioFetchError as e:
            console.print(f"[red]Error: {e.message}[/red]")
            if e.details:
                console.print(f"[dim]{e.details}[/dim]")
            raise typer.Exit(1)
    return state["config"]


def fail(error: AudioFetchError) -> None:
    """Print a pipeline error and exit with status 1."""
    console.print(f"[red]Error: {error.message}[/red]")
    if error.details:
        console.print(f"[dim]{error.details}[/dim]", highlight=False)
    raise typer.Exit(1)


@app.callback()
def main(
    ctx: typer.Context,
    version: bool = typer.Option(
        False,
        "--version",
        "-V",
        help="Show version and exit",
        callback=version_callback,
        is_eager=True,
    ),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable debug logging"),
    config_path: Path | None = typer.Option(
        None, "--config", "-c", help=f"Config file (default: ./{CONFIG_FILENAME})"
    ),
) -> None:
    """audiofetch - media to audio conversion service."""
    configure_logging(verbose)
    ctx.ensure_object(dict)["config_path"] = config_path


@app.command("init-config")
def init_config(
    path: str = typer.Option(CONFIG_FILENAME, "--path", "-p", help="Where to write the config"),
) -> None:
    """Write a default configuration file."""
    config_file = Path(path)
    if config_file.exists():
        console.print(f"[red]Error: '{config_file}' already exists[/red]")
        raise typer.Exit(1)

    write_config(create_default_config(), config_file)
    console.print(f"[green]✓[/green] Wrote {config_file}")


@app.command("info")
def info_cmd(
    ctx: typer.Context,
    locator: str = typer.Argument(..., help="URL or search query (e.g. ytsearch:song name)"),
    raw: bool = typer.Option(False, "--json", help="Print the full metadata document"),
) -> None:
    """Show metadata for a URL or search query."""
    from audiofetch.extract.probe import parse_metadata
    from audiofetch.pipeline import build_pipeline
    from audiofetch.storage import MemoryStorage
    from audiofetch.utils import format_duration

    config = get_config(ctx)
    pipeline = build_pipeline(config, storage=MemoryStorage())

    try:
        document = pipeline.info(locator)
    except AudioFetchError as e:
        fail(e)

    if raw:
        console.print_json(json.dumps(document))
        return

    metadata = parse_metadata(document)
    table = Table(title="Media Info")
    table.add_column("Field", style="cyan")
    table.add_column("Value")
    table.add_row("ID", metadata.id)
    table.add_row("Title", metadata.title)
    table.add_row(
        "Duration",
        format_duration(metadata.duration_seconds) if metadata.duration_seconds else "unknown",
    )
    entries = document.get("entries")
    if isinstance(entries, list):
        table.add_row("Entries", str(len(entries)))
    console.print(table)


@app.command("download")
def download_cmd(
    ctx: typer.Context,
    locator: str = typer.Argument(..., help="URL or search query"),
    fmt: str | None = typer.Option(
        None, "--format", "-f", help="Output format: flac, mp3, opus, or wav"
    ),
) -> None:
    """Convert a source to audio and upload it to object storage."""
    from audiofetch.pipeline import build_pipeline

    config = get_config(ctx)
    pipeline = build_pipeline(config)

    try:
        request = pipeline.build_request(locator, fmt)
        console.print(
            f"[cyan]Converting to {request.target_format.value}...[/cyan]", highlight=False
        )
        artifact = pipeline.download(request)
    except AudioFetchError as e:
        fail(e)

    console.print(f"[green]✓[/green] Published {artifact.key}")
    console.print(artifact.public_url, highlight=False, soft_wrap=True)


@app.command("serve")
def serve(
    ctx: typer.Context,
    host: str = typer.Option("127.0.0.1", "--host", help="Bind address"),
    port: int = typer.Option(8000, "--port", "-p", help="Bind port"),
) -> None:
    """Run the HTTP API."""
    import uvicorn

    from audiofetch.api import create_app

    config = get_config(ctx)
    uvicorn.run(create_app(config), host=host, port=port)


@app.command("fetch-binaries")
def fetch_binaries(
    ctx: typer.Context,
    dest: Path | None = typer.Option(
        None, "--dest", "-d", help="Install directory (default: ./bin)"
    ),
) -> None:
    """Download yt-dlp and a static FFmpeg build."""
    from audiofetch.binaries import EXTRACTOR, TRANSCODER, BinaryProvider

    config = get_config(ctx)
    target = dest or config.bin_dir
    provider = BinaryProvider(config.ytdlp_url, config.ffmpeg_url)

    failed = False
    for tool in (EXTRACTOR, TRANSCODER):
        console.print(f"[dim]Fetching {tool}...[/dim]")
        try:
            provider.fetch_and_install(tool, target)
            console.print(f"[green]✓[/green] {tool} installed in {target}")
        except BinaryUnavailableError as e:
            console.print(f"[red]✗ {e.message}[/red]")
            if e.install_hint:
                console.print(f"[dim]{e.install_hint}[/dim]")
            failed = True

    if failed:
        raise typer.Exit(1)


@app.command("doctor")
def run_doctor(ctx: typer.Context) -> None:
    """Check that yt-dlp and FFmpeg can be resolved."""
    from audiofetch.binaries import BinaryResolver
    from audiofetch.validation import check_binaries

    config = get_config(ctx)
    console.print("[cyan]Running preflight checks...[/cyan]\n")

    table = Table(title="Dependency Status")
    table.add_column("Component", style="cyan")
    table.add_column("Status", style="green")
    table.add_column("Version/Details")

    try:
        results = check_binaries(BinaryResolver.from_config(config))
    except BinaryUnavailableError as e:
        table.add_row(e.tool, "✗ Missing", e.install_hint or "")
        console.print(table)
        console.print("\n[yellow]⚠ Some checks failed[/yellow]")
        raise typer.Exit(1)

    for tool, details in results.items():
        table.add_row(tool, "✓ Installed", f"{details['version']} ({details['path']})")
    console.print(table)
    console.print("\n[green]✓ All checks passed[/green]")


if __name__ == "__main__":
    app()
