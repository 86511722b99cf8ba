"""Command line interface for the image fetcher module."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional

import typer
from rich.console import Console
from rich.table import Table

from grayscout.errors import ConfigError, DiscoveryExhausted
from grayscout.logging_utils import configure_logging

from ..core.config import load_config, read_api_key
from ..core.models import PipelineReport
from ..core.pipeline import run_pipeline

logger = logging.getLogger(__name__)

app = typer.Typer(
    help="Discover public-domain images with Gemini, download them and save grayscale copies."
)


def _parse_count(raw: Optional[str]) -> int:
    if raw is None:
        raise ConfigError("the number of images to process is missing.")
    try:
        count = int(raw)
    except ValueError as exc:
        raise ConfigError(f"the number of images must be an integer, got {raw!r}.") from exc
    if count < 0:
        raise ConfigError(f"the number of images must not be negative, got {count}.")
    return count


def _fail(message: str) -> None:
    typer.echo(f"Error: {message}", err=True)
    raise typer.Exit(1)


@app.command(context_settings={"ignore_unknown_options": True, "allow_extra_args": True})
def fetch(
    ctx: typer.Context,
    count: Optional[str] = typer.Argument(
        None, metavar="COUNT", help="Number of images to discover and convert."
    ),
    key_file: Optional[Path] = typer.Option(
        None, "--key-file", "-k", help="File whose first line is the Gemini API key."
    ),
    images_dir: Optional[Path] = typer.Option(
        None, "--images-dir", help="Directory for downloaded originals."
    ),
    grayscale_dir: Optional[Path] = typer.Option(
        None, "--grayscale-dir", help="Directory for grayscale copies."
    ),
    model: Optional[str] = typer.Option(
        None, "--model", help="Generation model identifier."
    ),
    base_url: Optional[str] = typer.Option(
        None, "--base-url", help="Base URL of the generation API."
    ),
    probe_timeout: Optional[float] = typer.Option(
        None, "--probe-timeout", help="Timeout in seconds for the HEAD reachability probe."
    ),
    max_rounds: Optional[int] = typer.Option(
        None, "--max-rounds", help="Give up after this many discovery rounds (0 = never)."
    ),
    dedupe: Optional[bool] = typer.Option(
        None, "--dedupe/--no-dedupe", help="Skip URLs that were already accepted."
    ),
    preserve_extension: Optional[bool] = typer.Option(
        None,
        "--preserve-extension/--no-preserve-extension",
        help="Name outputs with the source URL extension instead of .jpg.",
    ),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable debug logging."),
) -> None:
    overrides: dict[str, object] = {
        "api_key_file": key_file,
        "images_dir": images_dir,
        "grayscale_dir": grayscale_dir,
        "model": model,
        "base_url": base_url,
        "probe_timeout": probe_timeout,
        "max_rounds": max_rounds,
        "deduplicate": dedupe,
        "preserve_extension": preserve_extension,
    }

    if ctx.args:
        _fail(f"unexpected extra arguments: {' '.join(ctx.args)}")

    try:
        requested = _parse_count(count)
        config = load_config(**{k: v for k, v in overrides.items() if v is not None})
        api_key = read_api_key(config.api_key_file)
    except ConfigError as exc:
        _fail(str(exc))

    log_path = configure_logging(
        "image_fetcher", level=logging.DEBUG if verbose else logging.INFO
    )
    logger.info("Image fetcher logging initialised → %s", log_path)

    try:
        report = run_pipeline(config, requested, api_key=api_key)
    except DiscoveryExhausted as exc:
        _fail(str(exc))

    _print_terminal_summary(report)


def _print_terminal_summary(report: PipelineReport) -> None:
    table = Table(title=f"Processed {len(report.outcomes)}/{report.requested} images")
    table.add_column("#", justify="right")
    table.add_column("URL", overflow="fold")
    table.add_column("Original")
    table.add_column("Grayscale")
    for outcome in report.outcomes:
        table.add_row(
            str(outcome.index),
            outcome.url,
            str(outcome.original_path) if outcome.downloaded else "[red]failed[/red]",
            str(outcome.grayscale_path) if outcome.converted else "[red]failed[/red]",
        )
    console = Console()
    console.print(table)
    console.print(
        f"{report.succeeded} succeeded, {report.failed} failed "
        f"after {report.discovery_rounds} discovery round(s)"
    )


if __name__ == "__main__":
    app()
