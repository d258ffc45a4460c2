"""Canonical locations for ccdash's per-user data.

Layout:
  ~/.claude/cc-dashboard/          home_dir()
    cache.json                     cache_file()  — AI summary cache
    logs/<YYYY-MM-DD>.jsonl        logs_dir()    — diagnostic log
"""

from __future__ import annotations

from pathlib import Path

DOT_DIR = Path(".claude") / "cc-dashboard"
CACHE_FILE_NAME = "cache.json"
LOGS_DIR_NAME = "logs"


def home_dir() -> Path:
    """Return ~/.claude/cc-dashboard/."""
    return Path.home() / DOT_DIR


def cache_file(data_dir: Path | None = None) -> Path:
    """Return the summary cache document path under *data_dir* (default: home_dir())."""
    return (data_dir or home_dir()) / CACHE_FILE_NAME


def logs_dir(data_dir: Path | None = None) -> Path:
    """Return the diagnostic log directory under *data_dir* (default: home_dir())."""
    return (data_dir or home_dir()) / LOGS_DIR_NAME
