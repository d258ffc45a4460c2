"""Tests for the mtime-validated summary cache."""

import json
import os
from pathlib import Path

import pytest

from ccdash.diagnostics import LogLevel, LogManager, MemorySink
from ccdash.summary.cache import SummaryCache, file_mtime_ms, normalize_key
from ccdash.summary.models import CacheLoadStatus

# ===== Helpers =====


def _source(tmp_path: Path, name: str = "SKILL.md", text: str = "# Skill\n") -> Path:
    path = tmp_path / "config" / name
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(text)
    return path


def _bump_mtime(path: Path, seconds: int = 5) -> None:
    stat = path.stat()
    os.utime(path, ns=(stat.st_atime_ns, stat.st_mtime_ns + seconds * 1_000_000_000))


def _levels(sink: MemorySink, level: LogLevel) -> list[str]:
    return [e.message for e in sink.entries() if e.level == level]


# ===== Loading =====


async def test_missing_document_loads_empty(tmp_path: Path, log: LogManager) -> None:
    """Test a missing cache file loads as an empty MISSING document."""
    cache = SummaryCache(tmp_path / "cache.json", log)
    result = await cache.load()
    assert result.status == CacheLoadStatus.MISSING
    assert result.document.entries == {}
    assert result.error is None


async def test_corrupt_document_loads_empty_and_warns(
    tmp_path: Path, log: LogManager, memory_sink: MemorySink
) -> None:
    """Test invalid JSON loads as an empty CORRUPT document with one warning."""
    cache_file = tmp_path / "cache.json"
    cache_file.write_text("{not json")
    cache = SummaryCache(cache_file, log)

    result = await cache.load()

    assert result.status == CacheLoadStatus.CORRUPT
    assert result.error is not None
    assert result.document.entries == {}
    assert len(_levels(memory_sink, LogLevel.WARN)) == 1


async def test_wrong_version_is_corrupt(tmp_path: Path, log: LogManager) -> None:
    """Test an unknown document version is treated as corrupt."""
    cache_file = tmp_path / "cache.json"
    cache_file.write_text(json.dumps({"version": 2, "entries": {}}))
    cache = SummaryCache(cache_file, log)
    assert (await cache.load()).status == CacheLoadStatus.CORRUPT


async def test_corrupt_document_superseded_on_write(tmp_path: Path, log: LogManager) -> None:
    """Test the next write replaces a corrupt document with a valid one."""
    cache_file = tmp_path / "cache.json"
    cache_file.write_text("garbage")
    source = _source(tmp_path)
    cache = SummaryCache(cache_file, log)

    await cache.set(source, "A skill.")

    data = json.loads(cache_file.read_text())
    assert data["version"] == 1
    assert data["entries"][normalize_key(source)]["summary"] == "A skill."


async def test_loads_existing_document(tmp_path: Path, log: LogManager) -> None:
    """Test a second cache instance reads what the first one wrote."""
    source = _source(tmp_path)
    cache_file = tmp_path / "cache.json"
    writer = SummaryCache(cache_file, log)
    await writer.set(source, "Persisted.")

    reader = SummaryCache(cache_file, log)
    assert await reader.get(source) == "Persisted."
    assert reader.last_load is not None
    assert reader.last_load.status == CacheLoadStatus.LOADED


async def test_load_happens_once(tmp_path: Path, log: LogManager) -> None:
    """Test later load() calls return the first outcome without rereading."""
    cache_file = tmp_path / "cache.json"
    cache = SummaryCache(cache_file, log)
    first = await cache.load()
    cache_file.write_text("{not json")
    second = await cache.load()
    assert first is second


async def test_unreachable_document_is_not_fatal(
    tmp_path: Path, log: LogManager, memory_sink: MemorySink
) -> None:
    """Test a cache path the OS refuses to stat loads empty and keeps working in memory."""
    source = _source(tmp_path)
    cache = SummaryCache(Path("/" + "x" * 300) / "cache.json", log)

    result = await cache.load()

    assert result.status in (CacheLoadStatus.CORRUPT, CacheLoadStatus.MISSING)
    assert result.document.entries == {}

    await cache.set(source, "In memory only.")
    assert await cache.get(source) == "In memory only."
    assert len(_levels(memory_sink, LogLevel.ERROR)) == 1


# ===== get / set =====


async def test_set_then_get(tmp_path: Path, log: LogManager) -> None:
    """Test a stored summary is returned for an unchanged file."""
    source = _source(tmp_path)
    cache = SummaryCache(tmp_path / "cache.json", log)
    await cache.set(source, "Summary text.")
    assert await cache.get(source) == "Summary text."


async def test_get_unknown_path_returns_none(tmp_path: Path, log: LogManager) -> None:
    """Test a path with no entry is a miss."""
    cache = SummaryCache(tmp_path / "cache.json", log)
    assert await cache.get(tmp_path / "nothing.md") is None


async def test_set_with_current_source_mtime_stores(tmp_path: Path, log: LogManager) -> None:
    """Test set() stores when the given source mtime matches the file."""
    source = _source(tmp_path)
    cache = SummaryCache(tmp_path / "cache.json", log)

    stored = await cache.set(source, "Fresh.", source_mtime=await file_mtime_ms(source))

    assert stored is True
    assert await cache.get(source) == "Fresh."


async def test_set_with_outdated_source_mtime_is_skipped(
    tmp_path: Path, log: LogManager, memory_sink: MemorySink
) -> None:
    """Test set() refuses a summary of content the file no longer has."""
    source = _source(tmp_path)
    cache = SummaryCache(tmp_path / "cache.json", log)
    read_mtime = await file_mtime_ms(source)
    _bump_mtime(source)

    stored = await cache.set(source, "Describes old content.", source_mtime=read_mtime)

    assert stored is False
    assert await cache.get(source) is None
    assert (await cache.stats()).entry_count == 0
    assert len(_levels(memory_sink, LogLevel.DEBUG)) == 1


async def test_relative_and_absolute_paths_share_entry(
    tmp_path: Path, log: LogManager, monkeypatch: pytest.MonkeyPatch
) -> None:
    """Test relative and absolute spellings of one file share an entry."""
    source = _source(tmp_path)
    monkeypatch.chdir(source.parent)
    cache = SummaryCache(tmp_path / "cache.json", log)
    await cache.set("SKILL.md", "Relative.")
    assert await cache.get(source) == "Relative."


async def test_document_format(tmp_path: Path, log: LogManager) -> None:
    """Test the on-disk document uses the summary/mtime/generatedAt keys."""
    source = _source(tmp_path)
    cache_file = tmp_path / "nested" / "dir" / "cache.json"
    cache = SummaryCache(cache_file, log)

    await cache.set(source, "Summary.")

    data = json.loads(cache_file.read_text())
    entry = data["entries"][normalize_key(source)]
    assert set(entry) == {"summary", "mtime", "generatedAt"}
    assert entry["mtime"] == await file_mtime_ms(source)
    assert entry["generatedAt"] > 0


async def test_modified_file_evicts_entry(tmp_path: Path, log: LogManager) -> None:
    """Test a changed mtime evicts the entry and persists the eviction."""
    source = _source(tmp_path)
    cache_file = tmp_path / "cache.json"
    cache = SummaryCache(cache_file, log)
    await cache.set(source, "Old summary.")

    _bump_mtime(source)

    assert await cache.get(source) is None
    assert (await cache.stats()).entry_count == 0
    assert json.loads(cache_file.read_text())["entries"] == {}


async def test_deleted_file_evicts_entry(tmp_path: Path, log: LogManager) -> None:
    """Test an entry for a deleted file is evicted on lookup."""
    source = _source(tmp_path)
    cache = SummaryCache(tmp_path / "cache.json", log)
    await cache.set(source, "Summary.")
    source.unlink()
    assert await cache.get(source) is None
    assert (await cache.stats()).entry_count == 0


async def test_mtime_of_missing_file_is_zero(tmp_path: Path) -> None:
    """Test file_mtime_ms returns 0.0 for a missing file."""
    assert await file_mtime_ms(tmp_path / "missing.md") == 0.0


# ===== invalidate / clear / stats =====


async def test_invalidate_existing(tmp_path: Path, log: LogManager) -> None:
    """Test invalidate reports whether an entry existed."""
    source = _source(tmp_path)
    cache = SummaryCache(tmp_path / "cache.json", log)
    await cache.set(source, "Summary.")

    assert await cache.invalidate(source) is True
    assert await cache.get(source) is None
    assert await cache.invalidate(source) is False


async def test_clear(tmp_path: Path, log: LogManager) -> None:
    """Test clear empties memory and writes an empty document."""
    cache_file = tmp_path / "cache.json"
    cache = SummaryCache(cache_file, log)
    await cache.set(_source(tmp_path, "a.md"), "A.")
    await cache.set(_source(tmp_path, "b.md"), "B.")

    await cache.clear()

    assert (await cache.stats()).entry_count == 0
    assert json.loads(cache_file.read_text()) == {"version": 1, "entries": {}}


async def test_stats_before_first_write(tmp_path: Path, log: LogManager) -> None:
    """Test stats report zero bytes before anything is written."""
    cache = SummaryCache(tmp_path / "cache.json", log)
    stats = await cache.stats()
    assert stats.entry_count == 0
    assert stats.byte_size == 0


async def test_stats_counts_entries_and_bytes(tmp_path: Path, log: LogManager) -> None:
    """Test stats count entries and report the document size."""
    cache_file = tmp_path / "cache.json"
    cache = SummaryCache(cache_file, log)
    await cache.set(_source(tmp_path, "a.md"), "A.")
    await cache.set(_source(tmp_path, "b.md"), "B.")

    stats = await cache.stats()
    assert stats.entry_count == 2
    assert stats.byte_size == cache_file.stat().st_size


# ===== Persistence failures =====


async def test_write_failure_keeps_memory_authoritative(
    tmp_path: Path, log: LogManager, memory_sink: MemorySink
) -> None:
    """Test a failed write is logged and the entry is still served from memory."""
    blocker = tmp_path / "blocker"
    blocker.write_text("a file where the cache directory should be")
    source = _source(tmp_path)
    cache = SummaryCache(blocker / "cache.json", log)

    await cache.set(source, "In memory only.")

    assert await cache.get(source) == "In memory only."
    assert (await cache.stats()).byte_size == 0
    assert len(_levels(memory_sink, LogLevel.ERROR)) == 1


async def test_persist_reports_failure(tmp_path: Path, log: LogManager) -> None:
    """Test _persist returns False on a failed write and True otherwise."""
    blocker = tmp_path / "blocker"
    blocker.write_text("")
    cache = SummaryCache(blocker / "cache.json", log)
    await cache.load()
    assert await cache._persist() is False

    ok_cache = SummaryCache(tmp_path / "cache.json", log)
    await ok_cache.load()
    assert await ok_cache._persist() is True
