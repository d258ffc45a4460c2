"""Summary data models — cache document, results, provider status."""

from enum import StrEnum
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field


class Backend(StrEnum):
    """Text-generation backends, in selection priority order."""

    ANTHROPIC = "anthropic"
    OPENAI = "openai"
    NONE = "none"


class CacheEntry(BaseModel):
    """Cached AI summary for one source file.

    Valid only while the source file's mtime still equals source_mtime.
    Timestamps are epoch milliseconds.
    """

    summary: str
    source_mtime: float = Field(alias="mtime")
    generated_at: float = Field(alias="generatedAt")

    model_config = ConfigDict(frozen=True, populate_by_name=True)


class CacheDocument(BaseModel):
    """The persisted cache: absolute source path -> CacheEntry."""

    version: Literal[1] = 1
    entries: dict[str, CacheEntry] = Field(default_factory=dict)


class CacheLoadStatus(StrEnum):
    """How the persisted cache document was obtained."""

    LOADED = "loaded"
    MISSING = "missing"
    CORRUPT = "corrupt"


class CacheLoad(BaseModel):
    """Outcome of reading the cache document from disk.

    MISSING and CORRUPT both carry an empty document; CORRUPT also carries the
    reason so callers can tell the two apart.
    """

    status: CacheLoadStatus
    document: CacheDocument
    error: str | None = None

    model_config = ConfigDict(frozen=True)


class CacheStats(BaseModel):
    """Entry count (in memory) and size of the persisted document in bytes."""

    entry_count: int
    byte_size: int

    model_config = ConfigDict(frozen=True)


class Preview(BaseModel):
    """Deterministic, bounded rendering of a file's text."""

    text: str
    is_complete: bool

    model_config = ConfigDict(frozen=True)


class SummaryResult(BaseModel):
    """What a caller gets back for one (file, item type) request.

    preview is always populated. ai_summary is set on success; ai_error is set
    when a configured backend failed. Both None means no backend is configured.
    """

    ai_summary: str | None
    preview: str
    ai_error: str | None = None

    model_config = ConfigDict(frozen=True)


class ProviderStatus(BaseModel):
    """Which backend is active and a human-readable description of it."""

    provider: Backend
    description: str

    model_config = ConfigDict(frozen=True)
