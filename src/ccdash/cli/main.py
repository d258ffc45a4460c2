"""ccdash CLI application."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import StrEnum
from pathlib import Path
from typing import Annotated

import typer
from rich import print as rprint

import ccdash as ccdash_pkg
from ccdash.diagnostics import LoggingSink, LogLevel, LogManager, create_log_manager
from ccdash.summary.config import SummaryConfig
from ccdash.summary.service import SummaryService, create_summary_service


class OutputFormat(StrEnum):
    """Output format for CLI commands."""

    human = "human"
    json = "json"


@dataclass
class Runtime:
    """Objects built once per invocation and shared by every command."""

    config: SummaryConfig
    log: LogManager
    service: SummaryService


app = typer.Typer(
    name="ccdash",
    help="Summaries for your AI assistant's skills, agents, commands and hooks.",
    no_args_is_help=True,
)


def version_callback(value: bool) -> None:
    if value:
        rprint(f"ccdash {ccdash_pkg.__version__}")
        raise typer.Exit()


def _enable_console_logging(log: LogManager) -> None:
    from rich.logging import RichHandler

    logging.basicConfig(
        level=logging.DEBUG,
        format="%(name)s: %(message)s",
        handlers=[RichHandler(show_path=False)],
    )
    log.add_sink(LoggingSink())


def _build_runtime(verbose: bool) -> Runtime:
    from dotenv import load_dotenv

    load_dotenv()
    config = SummaryConfig.from_env()
    log = create_log_manager(
        config.logs_dir,
        min_level=LogLevel.DEBUG if verbose else LogLevel.INFO,
    )
    if verbose:
        _enable_console_logging(log)
    return Runtime(config=config, log=log, service=create_summary_service(config, log))


def _runtime(ctx: typer.Context) -> Runtime:
    runtime = ctx.find_root().obj
    if not isinstance(runtime, Runtime):
        msg = "ccdash runtime was not initialized"
        raise RuntimeError(msg)
    return runtime


def _exit(ctx: typer.Context, code: int) -> None:
    _runtime(ctx).log.flush()
    raise typer.Exit(code)


@app.callback()
def main(
    ctx: typer.Context,
    version: Annotated[
        bool | None,
        typer.Option("--version", "-v", callback=version_callback, is_eager=True),
    ] = None,
    verbose: Annotated[
        bool,
        typer.Option("--verbose", help="Echo diagnostics to the terminal."),
    ] = False,
) -> None:
    """ccdash — AI summaries and previews for assistant configuration files."""
    if ctx.obj is None:
        ctx.obj = _build_runtime(verbose)


@app.command("summary")
def summary(
    ctx: typer.Context,
    path: Annotated[Path, typer.Argument(help="Configuration file to summarize")],
    item_type: Annotated[
        str,
        typer.Option("--type", "-t", help="Item kind: skill, agent, command, hook, ..."),
    ] = "file",
    regenerate: Annotated[
        bool,
        typer.Option("--regenerate", "-r", help="Ignore the cached summary and generate anew"),
    ] = False,
    format: Annotated[
        OutputFormat,
        typer.Option("--format", "-f", help="Output format"),
    ] = OutputFormat.human,
) -> None:
    """Show the AI summary (cached when possible) and preview for a file."""
    from ccdash.summary.cli import summary_command

    code = summary_command(
        _runtime(ctx).service,
        path,
        item_type,
        regenerate=regenerate,
        format=format.value,
    )
    _exit(ctx, code)


@app.command("status")
def status(
    ctx: typer.Context,
    format: Annotated[
        OutputFormat,
        typer.Option("--format", "-f", help="Output format"),
    ] = OutputFormat.human,
) -> None:
    """Show which AI backend is active and how big the cache is."""
    from ccdash.summary.cli import status_command

    _exit(ctx, status_command(_runtime(ctx).service, format=format.value))


cache_app = typer.Typer(help="Inspect and maintain the summary cache.", no_args_is_help=True)
app.add_typer(cache_app, name="cache")


@cache_app.command("stats")
def cache_stats(
    ctx: typer.Context,
    format: Annotated[
        OutputFormat,
        typer.Option("--format", "-f", help="Output format"),
    ] = OutputFormat.human,
) -> None:
    """Show the number of cached summaries and the cache file size."""
    from ccdash.summary.cli import cache_stats_command

    _exit(ctx, cache_stats_command(_runtime(ctx).service, format=format.value))


@cache_app.command("clear")
def cache_clear(
    ctx: typer.Context,
    format: Annotated[
        OutputFormat,
        typer.Option("--format", "-f", help="Output format"),
    ] = OutputFormat.human,
) -> None:
    """Remove every cached summary."""
    from ccdash.summary.cli import cache_clear_command

    _exit(ctx, cache_clear_command(_runtime(ctx).service, format=format.value))


@cache_app.command("invalidate")
def cache_invalidate(
    ctx: typer.Context,
    path: Annotated[Path, typer.Argument(help="File whose cached summary should be dropped")],
    format: Annotated[
        OutputFormat,
        typer.Option("--format", "-f", help="Output format"),
    ] = OutputFormat.human,
) -> None:
    """Drop the cached summary for one file."""
    from ccdash.summary.cli import cache_invalidate_command

    _exit(ctx, cache_invalidate_command(_runtime(ctx).service, path, format=format.value))


@app.command("logs")
def logs(
    ctx: typer.Context,
    count: Annotated[int, typer.Option("--count", "-n", help="Number of entries")] = 20,
    format: Annotated[
        OutputFormat,
        typer.Option("--format", "-f", help="Output format"),
    ] = OutputFormat.human,
) -> None:
    """Show today's most recent diagnostic log entries."""
    from ccdash.summary.cli import logs_command

    runtime = _runtime(ctx)
    _exit(ctx, logs_command(runtime.log, count=count, format=format.value))
