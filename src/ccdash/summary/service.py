"""Summary service — cached AI summary with a deterministic preview fallback.

Per request:
1. Missing file      -> "[File not found]" placeholder
2. Unreadable file   -> "[Failed to read file]" placeholder
3. Preview           -> always computed from the file text
4. Cache hit         -> cached summary, no backend call
5. No backend        -> preview only, no error
6. Backend           -> generate, write through the cache; failures become ai_error

Concurrent generations for the same path and file version share one in-flight
backend call. A summary is stored against the mtime observed before the file
was read, so it never outlives the content it describes.
"""

from __future__ import annotations

import asyncio
import os

import anyio

from ccdash.diagnostics import LogManager
from ccdash.summary.cache import SummaryCache, file_mtime_ms, normalize_key
from ccdash.summary.config import SummaryConfig
from ccdash.summary.models import ProviderStatus, SummaryResult
from ccdash.summary.preview import DEFAULT_PREVIEW_LINES, generate_preview
from ccdash.summary.provider import ProviderError, SummaryProvider

SOURCE = "summary"

FILE_NOT_FOUND = "[File not found]"
FAILED_TO_READ = "[Failed to read file]"

InflightKey = tuple[str, float]


class SummaryService:
    """Public entry point: get_summary() and regenerate() for one file at a time."""

    def __init__(
        self,
        cache: SummaryCache,
        provider: SummaryProvider,
        log: LogManager,
        preview_lines: int = DEFAULT_PREVIEW_LINES,
    ) -> None:
        self.cache = cache
        self.provider = provider
        self._log = log
        self.preview_lines = preview_lines
        self._inflight: dict[InflightKey, asyncio.Task[str]] = {}

    def status(self) -> ProviderStatus:
        return self.provider.status()

    async def get_summary(
        self, file_path: str | os.PathLike[str], item_type: str
    ) -> SummaryResult:
        """Return the preview plus a cached or freshly generated AI summary.

        Never raises for missing/unreadable files or backend failures; those
        become placeholder previews or ai_error respectively.
        """
        key = normalize_key(file_path)
        path = anyio.Path(key)

        try:
            is_file = await path.is_file()
        except OSError as e:
            self._log.warn(SOURCE, f"Cannot access {key}: {e}")
            return SummaryResult(ai_summary=None, preview=FILE_NOT_FOUND)
        if not is_file:
            self._log.warn(SOURCE, f"File not found: {key}")
            return SummaryResult(ai_summary=None, preview=FILE_NOT_FOUND)

        # stat before reading: an edit in between leaves an older mtime, never a newer one
        mtime = await file_mtime_ms(key)
        try:
            content = await path.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as e:
            self._log.error(SOURCE, f"Failed to read {key}: {e}")
            return SummaryResult(ai_summary=None, preview=FAILED_TO_READ)

        preview = generate_preview(content, self.preview_lines).text

        cached = await self.cache.get(key)
        if cached is not None:
            return SummaryResult(ai_summary=cached, preview=preview)

        if not self.provider.is_configured:
            return SummaryResult(ai_summary=None, preview=preview)

        try:
            summary = await self._generate(key, mtime, content, item_type)
        except ProviderError as e:
            return SummaryResult(ai_summary=None, preview=preview, ai_error=e.message)

        return SummaryResult(ai_summary=summary, preview=preview)

    async def regenerate(
        self, file_path: str | os.PathLike[str], item_type: str
    ) -> SummaryResult:
        """Invalidate the cached summary, then run get_summary() as a forced miss."""
        key = normalize_key(file_path)
        if await self.cache.invalidate(key):
            self._log.info(SOURCE, f"Regenerating summary for {key}")
        return await self.get_summary(key, item_type)

    async def _generate(self, key: str, mtime: float, content: str, item_type: str) -> str:
        inflight_key = (key, mtime)
        task = self._inflight.get(inflight_key)
        if task is None or task.done():
            task = asyncio.ensure_future(
                self._summarize_and_store(key, mtime, content, item_type)
            )
            self._inflight[inflight_key] = task
            task.add_done_callback(lambda t: self._forget(inflight_key, t))
        # shield: a caller that stops waiting must not cancel the shared generation
        return await asyncio.shield(task)

    def _forget(self, inflight_key: InflightKey, task: asyncio.Task[str]) -> None:
        if self._inflight.get(inflight_key) is task:
            del self._inflight[inflight_key]
        if not task.cancelled():
            # mark the outcome retrieved even when every waiter has gone away
            task.exception()

    async def _summarize_and_store(
        self, key: str, mtime: float, content: str, item_type: str
    ) -> str:
        summary = await self.provider.summarize(content, item_type)
        await self.cache.set(key, summary, source_mtime=mtime)
        return summary


def create_summary_service(config: SummaryConfig, log: LogManager) -> SummaryService:
    """Wire a cache, provider and service from one config object."""
    cache = SummaryCache(config.cache_file, log)
    provider = SummaryProvider(config, log)
    return SummaryService(cache, provider, log, preview_lines=config.preview_lines)
