"""CLI commands for summaries, cache maintenance and diagnostics."""

from __future__ import annotations

import asyncio
import json
from pathlib import Path

from rich import print as rprint
from rich.markup import escape
from rich.panel import Panel
from rich.table import Table

from ccdash.diagnostics import FileSink, LogLevel, LogManager
from ccdash.summary.models import Backend, CacheStats, ProviderStatus, SummaryResult
from ccdash.summary.service import FAILED_TO_READ, FILE_NOT_FOUND, SummaryService

_LEVEL_STYLES: dict[LogLevel, str] = {
    LogLevel.DEBUG: "dim",
    LogLevel.INFO: "cyan",
    LogLevel.WARN: "yellow",
    LogLevel.ERROR: "red",
}


def _format_bytes(size: int) -> str:
    """Format a byte count as B / KB / MB."""
    if size < 1024:
        return f"{size} B"
    if size < 1024 * 1024:
        return f"{size / 1024:.1f} KB"
    return f"{size / (1024 * 1024):.1f} MB"


def _render_result(path: Path, item_type: str, result: SummaryResult) -> None:
    title = f"{escape(item_type)}: [cyan]{escape(str(path))}[/cyan]"
    if result.ai_summary is not None:
        rprint(Panel(escape(result.ai_summary), title=f"AI summary — {title}", expand=False))
    elif result.ai_error is not None:
        rprint(f"[red]AI summary failed:[/red] {escape(result.ai_error)}")
    rprint(Panel(escape(result.preview), title=f"Preview — {title}", expand=False))


def summary_command(
    service: SummaryService,
    path: Path,
    item_type: str,
    regenerate: bool = False,
    format: str = "human",
) -> int:
    """Show the summary and preview for one configuration file.

    Args:
        service: Wired summary service
        path: File to summarize
        item_type: Label such as "skill", "agent", "hook"
        regenerate: Invalidate the cached summary first
        format: Output format (human, json)

    Returns:
        Exit code (0 = success, 1 = file missing/unreadable or AI failure)
    """
    if regenerate:
        result = asyncio.run(service.regenerate(path, item_type))
    else:
        result = asyncio.run(service.get_summary(path, item_type))

    if format == "json":
        output = {"path": str(path), "item_type": item_type, **result.model_dump()}
        print(json.dumps(output, indent=2))
    else:
        _render_result(path, item_type, result)

    placeholder = result.preview in (FILE_NOT_FOUND, FAILED_TO_READ)
    return 1 if result.ai_error is not None or placeholder else 0


def status_command(service: SummaryService, format: str = "human") -> int:
    """Show the active backend and cache statistics."""
    status: ProviderStatus = service.status()
    stats: CacheStats = asyncio.run(service.cache.stats())

    if format == "json":
        output = {
            "provider": status.provider.value,
            "description": status.description,
            "cache_file": str(service.cache.cache_file),
            "cache": stats.model_dump(),
        }
        print(json.dumps(output, indent=2))
        return 0

    colour = "yellow" if status.provider == Backend.NONE else "green"
    rprint(f"Provider: [{colour}]{status.provider.value}[/{colour}] — {status.description}")
    rprint(f"Cache: {stats.entry_count} entries, {_format_bytes(stats.byte_size)}")
    rprint(f"Cache file: [cyan]{service.cache.cache_file}[/cyan]")
    return 0


def cache_stats_command(service: SummaryService, format: str = "human") -> int:
    stats = asyncio.run(service.cache.stats())
    if format == "json":
        print(json.dumps(stats.model_dump(), indent=2))
    else:
        rprint(f"{stats.entry_count} entries, {_format_bytes(stats.byte_size)}")
    return 0


def cache_clear_command(service: SummaryService, format: str = "human") -> int:
    asyncio.run(service.cache.clear())
    if format == "json":
        print(json.dumps({"cleared": True}))
    else:
        rprint("[green]✓[/green] Summary cache cleared")
    return 0


def cache_invalidate_command(service: SummaryService, path: Path, format: str = "human") -> int:
    """Drop the cached summary for one file. Exit code 1 if nothing was cached."""
    existed = asyncio.run(service.cache.invalidate(path))
    if format == "json":
        print(json.dumps({"path": str(path), "invalidated": existed}))
    elif existed:
        rprint(f"[green]✓[/green] Invalidated cached summary for [cyan]{path}[/cyan]")
    else:
        rprint(f"[yellow]No cached summary for[/yellow] [cyan]{path}[/cyan]")
    return 0 if existed else 1


def logs_command(log: LogManager, count: int = 20, format: str = "human") -> int:
    """Show the most recent entries from today's diagnostic log file."""
    sink = log.get_sink("file")
    if not isinstance(sink, FileSink):
        rprint("[red]Error:[/red] File logging is not enabled.")
        return 1

    sink.flush()
    entries = sink.read_entries()[-count:] if count > 0 else []

    if format == "json":
        for entry in entries:
            print(entry.model_dump_json(by_alias=True, exclude_none=True))
        return 0

    if not entries:
        rprint("No log entries today.")
        return 0

    table = Table(title=f"Diagnostics ({sink.log_file.name})")
    table.add_column("Time", style="dim")
    table.add_column("Level")
    table.add_column("Source", style="cyan")
    table.add_column("Message")
    for entry in entries:
        style = _LEVEL_STYLES[entry.level]
        table.add_row(
            entry.timestamp.strftime("%H:%M:%S"),
            f"[{style}]{entry.level.value}[/{style}]",
            entry.source,
            escape(entry.message),
        )
    rprint(table)
    return 0
