"""ccdash diagnostics — structured (level, source, message) logging."""

from ccdash.diagnostics.manager import LogManager, create_log_manager
from ccdash.diagnostics.models import LogEntry, LogLevel
from ccdash.diagnostics.sinks import FileSink, LoggingSink, LogSink, MemorySink

__all__ = [
    "FileSink",
    "LogEntry",
    "LogLevel",
    "LogManager",
    "LogSink",
    "LoggingSink",
    "MemorySink",
    "create_log_manager",
]
