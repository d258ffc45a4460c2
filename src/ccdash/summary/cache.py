"""Summary cache — persist AI-generated summaries keyed by source file path.

Stores CacheEntry objects in a single JSON document (by default
~/.claude/cc-dashboard/cache.json). An entry stays valid only while the source
file's modification time matches the one recorded when the summary was
generated; any mismatch evicts it.

The document is loaded lazily, once, into memory. From then on the in-memory
copy is authoritative for the process: a failed write is logged and the cache
keeps serving from memory.
"""

from __future__ import annotations

import asyncio
import json
import os
import time
from pathlib import Path

import anyio
from pydantic import ValidationError

from ccdash.diagnostics import LogManager
from ccdash.summary.models import (
    CacheDocument,
    CacheEntry,
    CacheLoad,
    CacheLoadStatus,
    CacheStats,
)

SOURCE = "cache"


def normalize_key(file_path: str | os.PathLike[str]) -> str:
    """Return the absolute path string used as a cache key."""
    return os.path.abspath(os.fspath(file_path))


async def file_mtime_ms(file_path: str | os.PathLike[str]) -> float:
    """Return the file's modification time in epoch millis, or 0.0 if it can't be read."""
    try:
        stat = await anyio.Path(file_path).stat()
    except OSError:
        return 0.0
    return stat.st_mtime_ns / 1_000_000


class SummaryCache:
    """Process-wide, mtime-validated summary cache.

    Construct one per process and share it between the summary service and
    anything that needs stats() or clear().
    """

    def __init__(self, cache_file: Path, log: LogManager) -> None:
        self.cache_file = cache_file
        self._log = log
        self._document: CacheDocument | None = None
        self._last_load: CacheLoad | None = None
        self._load_lock = asyncio.Lock()

    @property
    def last_load(self) -> CacheLoad | None:
        """Outcome of the initial load, or None if the cache hasn't been touched yet."""
        return self._last_load

    async def load(self) -> CacheLoad:
        """Load the document from disk on first call; later calls return the same outcome."""
        async with self._load_lock:
            if self._last_load is None:
                self._last_load = await self._read_document()
                self._document = self._last_load.document
            return self._last_load

    async def _read_document(self) -> CacheLoad:
        path = anyio.Path(self.cache_file)
        try:
            if not await path.exists():
                return CacheLoad(status=CacheLoadStatus.MISSING, document=CacheDocument())
            raw = await path.read_text(encoding="utf-8")
            document = CacheDocument.model_validate(json.loads(raw))
        except (OSError, UnicodeDecodeError, json.JSONDecodeError, ValidationError) as e:
            reason = f"{type(e).__name__}: {e}"
            self._log.warn(SOURCE, f"Ignoring unreadable cache file {self.cache_file}: {reason}")
            return CacheLoad(
                status=CacheLoadStatus.CORRUPT, document=CacheDocument(), error=reason
            )

        return CacheLoad(status=CacheLoadStatus.LOADED, document=document)

    async def _current_document(self) -> CacheDocument:
        if self._document is None:
            await self.load()
        if self._document is None:
            msg = f"Cache document for {self.cache_file} was not initialized by load()"
            raise RuntimeError(msg)
        return self._document

    async def _entries(self) -> dict[str, CacheEntry]:
        return (await self._current_document()).entries

    async def _persist(self) -> bool:
        """Write the whole document to disk. Returns False (and logs) on failure."""
        if self._document is None:
            return True

        path = anyio.Path(self.cache_file)
        tmp_path = anyio.Path(f"{self.cache_file}.tmp")
        payload = self._document.model_dump_json(by_alias=True, indent=2)
        try:
            await path.parent.mkdir(parents=True, exist_ok=True)
            await tmp_path.write_text(payload, encoding="utf-8")
            await tmp_path.replace(path)
        except OSError as e:
            self._log.error(SOURCE, f"Failed to write cache file {self.cache_file}: {e}")
            return False
        return True

    async def get(self, file_path: str | os.PathLike[str]) -> str | None:
        """Return the cached summary if the source file is unchanged since it was generated.

        A stale entry is evicted and the cache persisted before returning None.
        """
        key = normalize_key(file_path)
        entries = await self._entries()
        entry = entries.get(key)
        if entry is None:
            return None

        current_mtime = await file_mtime_ms(key)
        if current_mtime != entry.source_mtime:
            # Re-check: another task may have replaced the entry while we awaited stat()
            if entries.get(key) is entry:
                del entries[key]
                self._log.debug(SOURCE, f"Evicted stale summary for {key}")
                await self._persist()
            return None

        return entry.summary

    async def set(
        self,
        file_path: str | os.PathLike[str],
        summary: str,
        source_mtime: float | None = None,
    ) -> bool:
        """Store *summary* for the file.

        Args:
            file_path: Source file the summary describes
            summary: Generated summary text
            source_mtime: mtime (epoch millis) of the content that was summarized.
                When given and the file has changed since, nothing is stored.
                When omitted, the file's current mtime is used.

        Returns:
            True if the entry was stored, False if it was skipped as stale.
        """
        key = normalize_key(file_path)
        current_mtime = await file_mtime_ms(key)
        if source_mtime is not None and source_mtime != current_mtime:
            self._log.debug(SOURCE, f"Skipped storing summary of outdated content for {key}")
            return False
        entries = await self._entries()
        entries[key] = CacheEntry(
            summary=summary,
            source_mtime=current_mtime,
            generated_at=time.time() * 1000,
        )
        await self._persist()
        return True

    async def invalidate(self, file_path: str | os.PathLike[str]) -> bool:
        """Drop the entry for the file. Returns True if one existed."""
        key = normalize_key(file_path)
        entries = await self._entries()
        existed = entries.pop(key, None) is not None
        await self._persist()
        return existed

    async def clear(self) -> None:
        """Remove every entry."""
        await self._entries()
        self._document = CacheDocument()
        await self._persist()

    async def stats(self) -> CacheStats:
        """Entry count from memory and on-disk size of the document (0 if not written yet)."""
        entries = await self._entries()
        try:
            byte_size = (await anyio.Path(self.cache_file).stat()).st_size
        except OSError:
            byte_size = 0
        return CacheStats(entry_count=len(entries), byte_size=byte_size)
