"""Log sinks — destinations a LogManager fans entries out to.

- MemorySink: bounded in-memory buffer with change subscriptions (log panels)
- FileSink: buffered JSONL file, one file per day
- LoggingSink: bridge into the standard logging module
"""

from __future__ import annotations

import json
import logging
from collections.abc import Callable
from datetime import UTC, datetime
from pathlib import Path
from typing import Protocol

from ccdash.diagnostics.models import LogEntry, LogLevel

Listener = Callable[[list[LogEntry]], None]


class LogSink(Protocol):
    """Anything that can receive log entries."""

    name: str

    def write(self, entry: LogEntry) -> None: ...

    def flush(self) -> None: ...


class MemorySink:
    """Keeps the most recent entries in memory and notifies subscribers."""

    name = "memory"

    def __init__(self, max_entries: int = 100) -> None:
        self.max_entries = max_entries
        self._entries: list[LogEntry] = []
        self._listeners: list[Listener] = []

    def write(self, entry: LogEntry) -> None:
        self._entries.append(entry)
        if len(self._entries) > self.max_entries:
            self._entries = self._entries[-self.max_entries :]
        self._notify()

    def flush(self) -> None:
        pass

    def entries(self) -> list[LogEntry]:
        """Return a copy of all retained entries, oldest first."""
        return list(self._entries)

    def recent(self, count: int = 10) -> list[LogEntry]:
        """Return the last *count* entries."""
        if count <= 0:
            return []
        return self._entries[-count:]

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """Register *listener*; returns a callable that unsubscribes it."""
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def clear(self) -> None:
        self._entries = []
        self._notify()

    def _notify(self) -> None:
        snapshot = self.entries()
        for listener in list(self._listeners):
            listener(snapshot)


class FileSink:
    """JSONL storage for log entries.

    Entries are buffered and appended to logs/<YYYY-MM-DD>.jsonl. The buffer is
    flushed immediately on error-level entries or once it holds flush_threshold
    lines.
    """

    name = "file"

    def __init__(self, log_dir: Path, flush_threshold: int = 10) -> None:
        """Initialize sink with the directory to write daily log files into.

        Args:
            log_dir: Directory for JSONL files (created on first flush)
            flush_threshold: Buffered line count that triggers a flush
        """
        self.log_dir = log_dir
        self.flush_threshold = flush_threshold
        self.log_file = log_dir / f"{datetime.now(UTC).strftime('%Y-%m-%d')}.jsonl"
        self._buffer: list[str] = []

    def write(self, entry: LogEntry) -> None:
        self._buffer.append(entry.model_dump_json(by_alias=True, exclude_none=True))
        if entry.level == LogLevel.ERROR or len(self._buffer) >= self.flush_threshold:
            self.flush()

    def flush(self) -> None:
        if not self._buffer:
            return
        self.log_dir.mkdir(parents=True, exist_ok=True)
        content = "\n".join(self._buffer) + "\n"
        self._buffer = []
        with open(self.log_file, "a", encoding="utf-8") as f:
            f.write(content)

    def read_entries(self, log_file: Path | None = None) -> list[LogEntry]:
        """Read entries back from a JSONL log file (default: today's).

        Corrupted lines are skipped.
        """
        path = log_file or self.log_file
        if not path.exists():
            return []

        entries: list[LogEntry] = []
        with open(path, encoding="utf-8") as f:
            for line in f:
                line = line.strip()
                if not line:
                    continue
                try:
                    entries.append(LogEntry.model_validate(json.loads(line)))
                except (json.JSONDecodeError, ValueError):
                    continue
        return entries


_STDLIB_LEVELS: dict[LogLevel, int] = {
    LogLevel.DEBUG: logging.DEBUG,
    LogLevel.INFO: logging.INFO,
    LogLevel.WARN: logging.WARNING,
    LogLevel.ERROR: logging.ERROR,
}


class LoggingSink:
    """Forwards entries to stdlib loggers named ``<prefix>.<source>``."""

    name = "logging"

    def __init__(self, prefix: str = "ccdash") -> None:
        self.prefix = prefix

    def write(self, entry: LogEntry) -> None:
        logger = logging.getLogger(f"{self.prefix}.{entry.source}")
        logger.log(_STDLIB_LEVELS[entry.level], entry.message, extra={"meta": entry.meta})

    def flush(self) -> None:
        pass
