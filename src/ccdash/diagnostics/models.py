"""Diagnostic log data models."""

from datetime import datetime
from enum import StrEnum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class LogLevel(StrEnum):
    """Severity of a diagnostic entry, lowest first."""

    DEBUG = "debug"
    INFO = "info"
    WARN = "warn"
    ERROR = "error"

    @property
    def rank(self) -> int:
        """Ordering used for minimum-level filtering."""
        return _LEVEL_ORDER[self]


_LEVEL_ORDER: dict[LogLevel, int] = {
    LogLevel.DEBUG: 0,
    LogLevel.INFO: 1,
    LogLevel.WARN: 2,
    LogLevel.ERROR: 3,
}


class LogEntry(BaseModel):
    """A single diagnostic event.

    Serialized to JSONL with short keys (ts, lvl, src, msg, meta) so log files
    stay compact and greppable.
    """

    level: LogLevel = Field(alias="lvl")
    source: str = Field(alias="src")
    message: str = Field(alias="msg")
    timestamp: datetime = Field(alias="ts")
    meta: dict[str, Any] | None = None

    model_config = ConfigDict(frozen=True, populate_by_name=True)
