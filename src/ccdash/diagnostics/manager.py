"""LogManager — the (level, source, message) diagnostic channel.

Every component reports non-fatal failures here. The manager filters by
minimum level and fans entries out to its sinks; a sink that raises is
skipped so diagnostics can never break the caller.
"""

from __future__ import annotations

from datetime import UTC, datetime
from pathlib import Path
from typing import Any

from ccdash.diagnostics.models import LogEntry, LogLevel
from ccdash.diagnostics.sinks import FileSink, LogSink, MemorySink


class LogManager:
    """Fan-out logger with pluggable sinks."""

    def __init__(
        self,
        sinks: list[LogSink] | None = None,
        min_level: LogLevel = LogLevel.INFO,
    ) -> None:
        self._sinks: list[LogSink] = list(sinks or [])
        self.min_level = min_level

    def add_sink(self, sink: LogSink) -> None:
        self._sinks.append(sink)

    def remove_sink(self, name: str) -> None:
        self._sinks = [s for s in self._sinks if s.name != name]

    def get_sink(self, name: str) -> LogSink | None:
        """Return the first sink registered under *name*, or None."""
        for sink in self._sinks:
            if sink.name == name:
                return sink
        return None

    def log(
        self,
        level: LogLevel,
        source: str,
        message: str,
        meta: dict[str, Any] | None = None,
    ) -> None:
        """Record a diagnostic entry if it meets the minimum level."""
        if level.rank < self.min_level.rank:
            return

        entry = LogEntry(
            level=level,
            source=source,
            message=message,
            timestamp=datetime.now(UTC),
            meta=meta,
        )
        for sink in self._sinks:
            try:
                sink.write(entry)
            except Exception:  # noqa: BLE001
                # A broken sink cannot report its own failure without recursing
                continue

    def debug(self, source: str, message: str, meta: dict[str, Any] | None = None) -> None:
        self.log(LogLevel.DEBUG, source, message, meta)

    def info(self, source: str, message: str, meta: dict[str, Any] | None = None) -> None:
        self.log(LogLevel.INFO, source, message, meta)

    def warn(self, source: str, message: str, meta: dict[str, Any] | None = None) -> None:
        self.log(LogLevel.WARN, source, message, meta)

    def error(self, source: str, message: str, meta: dict[str, Any] | None = None) -> None:
        self.log(LogLevel.ERROR, source, message, meta)

    def flush(self) -> None:
        for sink in self._sinks:
            try:
                sink.flush()
            except OSError:
                continue


def create_log_manager(
    log_dir: Path | None,
    max_memory_entries: int = 100,
    min_level: LogLevel = LogLevel.INFO,
) -> LogManager:
    """Build the default manager: a MemorySink plus a FileSink when log_dir is set."""
    sinks: list[LogSink] = [MemorySink(max_memory_entries)]
    if log_dir is not None:
        sinks.append(FileSink(log_dir))
    return LogManager(sinks=sinks, min_level=min_level)
